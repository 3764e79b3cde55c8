"""Abstract metadata provider interface (port) for application type descriptions."""

from abc import ABC, abstractmethod
from typing import Any

from convention_model.domain.entities import EnumDescriptor, TypeDescriptor
from convention_model.domain.exceptions import UnknownTypeError


class TypeMetadataProvider(ABC):
    """Port for type metadata, implemented in the infrastructure layer.

    The builder never inspects the host runtime itself; everything it knows
    about application types comes through this interface.
    """

    @abstractmethod
    def identity_of(self, type_or_name: Any) -> str:
        """Return the full-name identity for a type handle or name."""
        ...

    @abstractmethod
    def get_type(self, full_name: str) -> TypeDescriptor | None:
        """Retrieve the descriptor of a structured type."""
        ...

    @abstractmethod
    def get_enum(self, full_name: str) -> EnumDescriptor | None:
        """Retrieve the descriptor of an enumeration type."""
        ...

    @abstractmethod
    def registered_types(self) -> list[TypeDescriptor]:
        """All structured types in the registered metadata namespace."""
        ...

    # ── Derived helpers ──────────────────────────────────────────────

    def require_type(self, full_name: str) -> TypeDescriptor:
        descriptor = self.get_type(full_name)
        if descriptor is None:
            raise UnknownTypeError(full_name)
        return descriptor

    def ancestors(self, full_name: str) -> list[TypeDescriptor]:
        """Ancestors of a type, nearest first, as far as the provider knows them."""
        chain: list[TypeDescriptor] = []
        seen = {full_name}
        current = self.get_type(full_name)
        while current is not None and current.base and current.base not in seen:
            seen.add(current.base)
            current = self.get_type(current.base)
            if current is not None:
                chain.append(current)
        return chain

    def derived_types(self, full_name: str) -> list[TypeDescriptor]:
        """Every registered type deriving from ``full_name``, directly or transitively."""
        children: dict[str, list[TypeDescriptor]] = {}
        for descriptor in self.registered_types():
            if descriptor.base:
                children.setdefault(descriptor.base, []).append(descriptor)

        result: list[TypeDescriptor] = []
        pending = list(children.get(full_name, []))
        seen: set[str] = set()
        while pending:
            descriptor = pending.pop(0)
            if descriptor.full_name in seen:
                continue
            seen.add(descriptor.full_name)
            result.append(descriptor)
            pending.extend(children.get(descriptor.full_name, []))
        return result

"""In-memory metadata provider: descriptors registered by hand."""

import logging
from typing import Any

from convention_model.application.interfaces import TypeMetadataProvider
from convention_model.domain.entities import EnumDescriptor, TypeDescriptor

logger = logging.getLogger(__name__)


class InMemoryTypeMetadataProvider(TypeMetadataProvider):
    """Dictionary-backed provider, keyed by full name.

    Registration order is kept; derived types are discovered in that order.
    """

    def __init__(
        self,
        types: list[TypeDescriptor] | None = None,
        enums: list[EnumDescriptor] | None = None,
    ):
        self._types: dict[str, TypeDescriptor] = {}
        self._enums: dict[str, EnumDescriptor] = {}
        for descriptor in types or []:
            self.add(descriptor)
        for descriptor in enums or []:
            self.add_enum(descriptor)

    def add(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        if descriptor.full_name in self._types:
            logger.warning("Replacing type descriptor %s", descriptor.full_name)
        self._types[descriptor.full_name] = descriptor
        return descriptor

    def add_enum(self, descriptor: EnumDescriptor) -> EnumDescriptor:
        self._enums[descriptor.full_name] = descriptor
        return descriptor

    def identity_of(self, type_or_name: Any) -> str:
        if isinstance(type_or_name, str):
            return type_or_name
        if isinstance(type_or_name, (TypeDescriptor, EnumDescriptor)):
            return type_or_name.full_name
        raise TypeError(f"Cannot derive a type identity from {type_or_name!r}")

    def get_type(self, full_name: str) -> TypeDescriptor | None:
        return self._types.get(full_name)

    def get_enum(self, full_name: str) -> EnumDescriptor | None:
        return self._enums.get(full_name)

    def registered_types(self) -> list[TypeDescriptor]:
        return list(self._types.values())

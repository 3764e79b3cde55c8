"""The finalized, read-only schema graph produced by a build."""

from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .configuration import (
    NavigationBinding,
    NavigationSourceConfiguration,
    PropertyConfiguration,
    StructuralKind,
    StructuralTypeConfiguration,
)


@dataclass(frozen=True)
class EnumTypeConfiguration:
    """An enumeration type that made it into the schema."""

    full_name: str
    name: str
    namespace: str
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class EntityContainer:
    """The single container element that exposes entity sets and singletons."""

    name: str
    namespace: str
    entity_sets: tuple[str, ...] = ()
    singletons: tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}"


class SchemaGraph:
    """Immutable result of ``ConventionModelBuilder.build()``.

    Types are addressed by identity (the descriptor full name). When the
    builder was created over a provider that understands richer identities,
    such as Python classes, those are accepted too.
    """

    def __init__(
        self,
        structural_types: list[StructuralTypeConfiguration],
        enum_types: list[EnumTypeConfiguration],
        navigation_sources: list[NavigationSourceConfiguration],
        bindings: list[NavigationBinding],
        container: EntityContainer,
        identity_resolver: Callable[[Any], str] | None = None,
    ):
        for config in structural_types:
            config._freeze()
        for source in navigation_sources:
            source._freeze()

        self._types = MappingProxyType({t.full_name: t for t in structural_types})
        self._enums = MappingProxyType({e.full_name: e for e in enum_types})
        self._sources = MappingProxyType({s.name: s for s in navigation_sources})
        self._bindings: dict[str, tuple[NavigationBinding, ...]] = {}
        for binding in bindings:
            self._bindings[binding.source] = self._bindings.get(binding.source, ()) + (binding,)
        self._container = container
        self._identity_resolver = identity_resolver

    def _identity(self, type_or_name: Any) -> str:
        if isinstance(type_or_name, str):
            return type_or_name
        if self._identity_resolver is None:
            raise TypeError(f"Cannot resolve a type identity from {type_or_name!r}")
        return self._identity_resolver(type_or_name)

    # ── Types ───────────────────────────────────────────────────────

    @property
    def structural_types(self) -> tuple[StructuralTypeConfiguration, ...]:
        return tuple(self._types.values())

    @property
    def entity_types(self) -> tuple[StructuralTypeConfiguration, ...]:
        return tuple(t for t in self._types.values() if t.kind == StructuralKind.ENTITY)

    @property
    def complex_types(self) -> tuple[StructuralTypeConfiguration, ...]:
        return tuple(t for t in self._types.values() if t.kind == StructuralKind.COMPLEX)

    @property
    def enum_types(self) -> tuple[EnumTypeConfiguration, ...]:
        return tuple(self._enums.values())

    @property
    def container(self) -> EntityContainer:
        return self._container

    @property
    def schema_types(self) -> tuple:
        """Structural and enum types."""
        return self.structural_types + self.enum_types

    @property
    def schema_elements(self) -> tuple:
        """Every schema element: structural types, enum types and the container."""
        return self.schema_types + (self._container,)

    def get_type(self, type_or_name: Any) -> StructuralTypeConfiguration | None:
        return self._types.get(self._identity(type_or_name))

    def get_enum(self, type_or_name: Any) -> EnumTypeConfiguration | None:
        return self._enums.get(self._identity(type_or_name))

    def __contains__(self, type_or_name: Any) -> bool:
        identity = self._identity(type_or_name)
        return identity in self._types or identity in self._enums

    # ── Inheritance ─────────────────────────────────────────────────

    def base_chain(self, type_or_name: Any) -> list[StructuralTypeConfiguration]:
        """The type followed by its ancestors, nearest first."""
        chain = []
        current = self.get_type(type_or_name)
        while current is not None:
            chain.append(current)
            current = self._types.get(current.base_type) if current.base_type else None
        return chain

    def derived_types(self, type_or_name: Any) -> list[StructuralTypeConfiguration]:
        """All types that have the given type somewhere in their base chain."""
        identity = self._identity(type_or_name)
        return [
            t for t in self._types.values()
            if t.full_name != identity
            and any(a.full_name == identity for a in self.base_chain(t.full_name))
        ]

    def all_properties(self, type_or_name: Any) -> list[PropertyConfiguration]:
        """Properties of the type including inherited ones, root level first."""
        result: list[PropertyConfiguration] = []
        for level in reversed(self.base_chain(type_or_name)):
            result.extend(level.properties.values())
        return result

    def find_property(self, type_or_name: Any, name: str) -> PropertyConfiguration | None:
        """Find a property by schema or member name anywhere on the base chain."""
        for level in self.base_chain(type_or_name):
            prop = level.property(name)
            if prop is not None:
                return prop
        return None

    def keys_of(self, type_or_name: Any) -> list[PropertyConfiguration]:
        """The key properties of an entity type, declared here or on an ancestor."""
        for level in self.base_chain(type_or_name):
            if level.keys:
                return [level.properties[k] for k in level.keys]
        return []

    def dynamic_property_container(self, type_or_name: Any) -> PropertyConfiguration | None:
        for level in self.base_chain(type_or_name):
            if level.dynamic_property_container is not None:
                return level.dynamic_property_container
        return None

    def is_open(self, type_or_name: Any) -> bool:
        return self.dynamic_property_container(type_or_name) is not None

    # ── Container ───────────────────────────────────────────────────

    @property
    def navigation_sources(self) -> tuple[NavigationSourceConfiguration, ...]:
        return tuple(self._sources.values())

    @property
    def entity_sets(self) -> tuple[NavigationSourceConfiguration, ...]:
        return tuple(s for s in self._sources.values() if not s.is_singleton)

    @property
    def singletons(self) -> tuple[NavigationSourceConfiguration, ...]:
        return tuple(s for s in self._sources.values() if s.is_singleton)

    def navigation_source(self, name: str) -> NavigationSourceConfiguration | None:
        return self._sources.get(name)

    def bindings_for(self, source_name: str) -> tuple[NavigationBinding, ...]:
        return self._bindings.get(source_name, ())

    def find_binding(
        self,
        source_name: str,
        navigation_property: str,
        declaring_type: Any = None,
    ) -> NavigationBinding | None:
        declaring = self._identity(declaring_type) if declaring_type is not None else None
        for binding in self.bindings_for(source_name):
            if binding.navigation_property != navigation_property:
                continue
            if declaring is None or binding.declaring_type == declaring:
                return binding
            # A derived type sees the bindings of navigations it inherits
            if any(a.full_name == binding.declaring_type for a in self.base_chain(declaring)):
                return binding
        return None

"""Configuration nodes of the structural type registry.

A ``StructuralTypeConfiguration`` is a single tagged variant over the entity
and complex kinds: ``kind`` is an ordinary field, fixed at creation, and
every kind shares the same property-list representation.

Nodes are mutable while a build is in progress and frozen once the schema
graph is finalized.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .type_descriptor import TypeRef


class StructuralKind(str, Enum):
    ENTITY = "entity"
    COMPLEX = "complex"

    @property
    def opposite(self) -> "StructuralKind":
        return StructuralKind.COMPLEX if self == StructuralKind.ENTITY else StructuralKind.ENTITY


class PropertyKind(str, Enum):
    """Classification of a property."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    COMPLEX = "complex"
    NAVIGATION = "navigation"
    PRIMITIVE_COLLECTION = "primitive_collection"
    ENUM_COLLECTION = "enum_collection"
    COMPLEX_COLLECTION = "complex_collection"
    NAVIGATION_COLLECTION = "navigation_collection"
    DYNAMIC_PROPERTY_CONTAINER = "dynamic_property_container"

    @property
    def is_navigation(self) -> bool:
        return self in (PropertyKind.NAVIGATION, PropertyKind.NAVIGATION_COLLECTION)

    @property
    def is_collection(self) -> bool:
        return self in (
            PropertyKind.PRIMITIVE_COLLECTION,
            PropertyKind.ENUM_COLLECTION,
            PropertyKind.COMPLEX_COLLECTION,
            PropertyKind.NAVIGATION_COLLECTION,
        )

    @property
    def is_complex(self) -> bool:
        return self in (PropertyKind.COMPLEX, PropertyKind.COMPLEX_COLLECTION)

    @property
    def is_enum(self) -> bool:
        return self in (PropertyKind.ENUM, PropertyKind.ENUM_COLLECTION)


class Multiplicity(str, Enum):
    ZERO_OR_ONE = "0..1"
    ONE = "1"
    MANY = "*"


class ConcurrencyMode(str, Enum):
    NONE = "none"
    FIXED = "fixed"


class NavigationSourceKind(str, Enum):
    ENTITY_SET = "entity_set"
    SINGLETON = "singleton"


class _Freezable:
    """Mixin that turns attribute assignment off once the node is finalized."""

    _frozen = False

    def __setattr__(self, name, value):
        if self._frozen:
            raise AttributeError(
                f"{type(self).__name__} is read-only once the schema graph is built"
            )
        super().__setattr__(name, value)

    def _mark_frozen(self) -> None:
        object.__setattr__(self, "_frozen", True)


@dataclass(eq=False)
class PropertyConfiguration(_Freezable):
    """One property of a structural type.

    ``kind`` is None until the property is classified; explicitly added
    properties carry the kind the caller asked for.
    """

    member_name: str
    declaring_type: str = ""
    kind: PropertyKind | None = None
    name: str | None = None
    type_ref: TypeRef | None = None
    target_type: str | None = None
    nullable: bool | None = None
    added_explicitly: bool = False
    collection_requested: bool = False
    concurrency_mode: ConcurrencyMode = ConcurrencyMode.NONE
    not_filterable: bool = False
    not_sortable: bool = False
    not_navigable: bool = False
    not_expandable: bool = False
    not_countable: bool = False
    multiplicity: Multiplicity | None = None
    contains_target: bool = False
    dependent_properties: list[str] = field(default_factory=list)
    principal_properties: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.name is None:
            self.name = self.member_name

    # ── Caller overrides ────────────────────────────────────────────

    def is_optional(self) -> "PropertyConfiguration":
        self.nullable = True
        return self

    def is_required(self) -> "PropertyConfiguration":
        self.nullable = False
        return self

    def rename(self, name: str) -> "PropertyConfiguration":
        self.name = name
        return self

    def is_not_filterable(self) -> "PropertyConfiguration":
        self.not_filterable = True
        return self

    def is_not_sortable(self) -> "PropertyConfiguration":
        self.not_sortable = True
        return self

    def is_not_navigable(self) -> "PropertyConfiguration":
        self.not_navigable = True
        return self

    def is_not_expandable(self) -> "PropertyConfiguration":
        self.not_expandable = True
        return self

    def is_not_countable(self) -> "PropertyConfiguration":
        self.not_countable = True
        return self

    def is_concurrency_token(self) -> "PropertyConfiguration":
        self.concurrency_mode = ConcurrencyMode.FIXED
        return self

    def contains_target_entities(self) -> "PropertyConfiguration":
        self.contains_target = True
        return self

    # ── Queries ─────────────────────────────────────────────────────

    @property
    def is_navigation(self) -> bool:
        return self.kind is not None and self.kind.is_navigation

    @property
    def is_collection(self) -> bool:
        return self.kind is not None and self.kind.is_collection

    def copy(self) -> "PropertyConfiguration":
        return PropertyConfiguration(
            member_name=self.member_name,
            declaring_type=self.declaring_type,
            kind=self.kind,
            name=self.name,
            type_ref=self.type_ref,
            target_type=self.target_type,
            nullable=self.nullable,
            added_explicitly=self.added_explicitly,
            collection_requested=self.collection_requested,
            concurrency_mode=self.concurrency_mode,
            not_filterable=self.not_filterable,
            not_sortable=self.not_sortable,
            not_navigable=self.not_navigable,
            not_expandable=self.not_expandable,
            not_countable=self.not_countable,
            multiplicity=self.multiplicity,
            contains_target=self.contains_target,
            dependent_properties=list(self.dependent_properties),
            principal_properties=list(self.principal_properties),
        )

    def _freeze(self) -> None:
        object.__setattr__(self, "dependent_properties", tuple(self.dependent_properties))
        object.__setattr__(self, "principal_properties", tuple(self.principal_properties))
        self._mark_frozen()


@dataclass(eq=False)
class StructuralTypeConfiguration(_Freezable):
    """Registry node for one entity or complex type.

    ``properties`` holds only what this level declares (plus members carried
    down from ancestors that are not part of the model); inherited
    properties are resolved through the base chain by the schema graph.
    """

    full_name: str
    kind: StructuralKind
    name: str = ""
    namespace: str = ""
    added_explicitly: bool = False
    base_type: str | None = None
    base_type_configured: bool = False
    is_abstract: bool | None = None
    has_stream: bool = False
    properties: dict[str, PropertyConfiguration] = field(default_factory=dict)
    removed_properties: set[str] = field(default_factory=set)
    keys: list[str] = field(default_factory=list)
    keys_configured: bool = False
    dynamic_property_container: PropertyConfiguration | None = None

    def __post_init__(self):
        if not self.name:
            namespace, _, name = self.full_name.rpartition(".")
            self.name = name
            self.namespace = self.namespace or namespace

    @property
    def is_entity(self) -> bool:
        return self.kind == StructuralKind.ENTITY

    @property
    def is_complex(self) -> bool:
        return self.kind == StructuralKind.COMPLEX

    @property
    def is_open(self) -> bool:
        """True if this level declares its own dynamic property container."""
        return self.dynamic_property_container is not None

    # ── Explicit property registration ──────────────────────────────

    def _add(self, member_name: str, **attrs) -> PropertyConfiguration:
        self.removed_properties.discard(member_name)
        prop = PropertyConfiguration(
            member_name=member_name,
            declaring_type=self.full_name,
            added_explicitly=True,
            **attrs,
        )
        self.properties[member_name] = prop
        return prop

    def add_property(self, member_name: str) -> PropertyConfiguration:
        """Declare a primitive property explicitly."""
        return self._add(member_name, kind=PropertyKind.PRIMITIVE)

    def add_enum_property(self, member_name: str) -> PropertyConfiguration:
        return self._add(member_name, kind=PropertyKind.ENUM)

    def add_complex_property(self, member_name: str) -> PropertyConfiguration:
        return self._add(member_name, kind=PropertyKind.COMPLEX)

    def add_collection_property(self, member_name: str) -> PropertyConfiguration:
        """Declare a collection property; its element kind is resolved at build time."""
        return self._add(member_name, collection_requested=True)

    def add_navigation_property(
        self,
        member_name: str,
        multiplicity: Multiplicity = Multiplicity.ZERO_OR_ONE,
    ) -> PropertyConfiguration:
        kind = (
            PropertyKind.NAVIGATION_COLLECTION
            if multiplicity == Multiplicity.MANY
            else PropertyKind.NAVIGATION
        )
        return self._add(member_name, kind=kind, multiplicity=multiplicity)

    def add_dynamic_property_container(self, member_name: str) -> PropertyConfiguration:
        self.removed_properties.discard(member_name)
        prop = PropertyConfiguration(
            member_name=member_name,
            declaring_type=self.full_name,
            kind=PropertyKind.DYNAMIC_PROPERTY_CONTAINER,
            added_explicitly=True,
        )
        self.dynamic_property_container = prop
        return prop

    def property(self, member_name: str) -> PropertyConfiguration | None:
        """Look up a property by member name (or, failing that, schema name)."""
        prop = self.properties.get(member_name)
        if prop is not None:
            return prop
        for candidate in self.properties.values():
            if candidate.name == member_name:
                return candidate
        return None

    def ignore(self, member_name: str) -> None:
        """Remove a property; it will not be rediscovered by convention."""
        self.properties.pop(member_name, None)
        self.removed_properties.add(member_name)
        if self.keys and member_name in self.keys:
            self.keys = [k for k in self.keys if k != member_name]

    # ── Keys, inheritance, flags ────────────────────────────────────

    def has_key(self, *member_names: str) -> "StructuralTypeConfiguration":
        for member_name in member_names:
            if member_name not in self.keys:
                self.keys.append(member_name)
        self.keys_configured = True
        return self

    def derives_from(self, base_type) -> "StructuralTypeConfiguration":
        """Set the base explicitly; ``base_type`` is a full name or a provider type handle."""
        self.base_type = base_type
        self.base_type_configured = True
        return self

    def derives_from_nothing(self) -> "StructuralTypeConfiguration":
        self.base_type = None
        self.base_type_configured = True
        return self

    def abstract(self) -> "StructuralTypeConfiguration":
        self.is_abstract = True
        return self

    def media_type(self) -> "StructuralTypeConfiguration":
        self.has_stream = True
        return self

    # ── Queries ─────────────────────────────────────────────────────

    def structural_properties(self) -> list[PropertyConfiguration]:
        return [p for p in self.properties.values() if not p.is_navigation]

    def navigation_properties(self) -> list[PropertyConfiguration]:
        return [p for p in self.properties.values() if p.is_navigation]

    def copy(self) -> "StructuralTypeConfiguration":
        clone = StructuralTypeConfiguration(
            full_name=self.full_name,
            kind=self.kind,
            name=self.name,
            namespace=self.namespace,
            added_explicitly=self.added_explicitly,
            base_type=self.base_type,
            base_type_configured=self.base_type_configured,
            is_abstract=self.is_abstract,
            has_stream=self.has_stream,
            properties={k: p.copy() for k, p in self.properties.items()},
            removed_properties=set(self.removed_properties),
            keys=list(self.keys),
            keys_configured=self.keys_configured,
        )
        if self.dynamic_property_container is not None:
            clone.dynamic_property_container = self.dynamic_property_container.copy()
        return clone

    def _freeze(self) -> None:
        for prop in self.properties.values():
            prop._freeze()
        if self.dynamic_property_container is not None:
            self.dynamic_property_container._freeze()
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "removed_properties", frozenset(self.removed_properties))
        object.__setattr__(self, "keys", tuple(self.keys))
        self._mark_frozen()


@dataclass(eq=False)
class NavigationSourceConfiguration(_Freezable):
    """An entity set or singleton exposed by the container."""

    name: str
    entity_type: str
    kind: NavigationSourceKind = NavigationSourceKind.ENTITY_SET

    @property
    def is_singleton(self) -> bool:
        return self.kind == NavigationSourceKind.SINGLETON

    def copy(self) -> "NavigationSourceConfiguration":
        return NavigationSourceConfiguration(self.name, self.entity_type, self.kind)

    def _freeze(self) -> None:
        self._mark_frozen()


@dataclass(frozen=True)
class NavigationBinding:
    """Binds a navigation property reached from a source to a target source."""

    source: str
    declaring_type: str
    navigation_property: str
    target: str
    target_kind: NavigationSourceKind
    path: str

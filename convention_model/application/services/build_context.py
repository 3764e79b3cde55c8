"""Per-build state shared by every phase of the schema build pipeline.

A fresh ``BuildContext`` is created for each ``build()`` call from copies of
the caller's registrations, so repeated builds (or several builders in one
process) never see each other's in-progress state.
"""

from dataclasses import dataclass, field
from typing import Any

from convention_model.application.interfaces import TypeMetadataProvider
from convention_model.domain.entities import (
    DataContract,
    DataMember,
    EnumTypeConfiguration,
    MemberDescriptor,
    NavigationBinding,
    NavigationSourceConfiguration,
    NotMapped,
    PropertyConfiguration,
    StructuralKind,
    StructuralTypeConfiguration,
    TypeDescriptor,
)

# Identity of the generic complex type used for explicitly added opaque collections
OPAQUE_TYPE_NAME = "builtins.object"


@dataclass
class KindConflict:
    """A type registered with both kinds before the build started."""

    type_name: str
    requested: StructuralKind
    prior: StructuralKind


@dataclass
class TypeReference:
    """One member edge found while walking the reachable type graph."""

    referrer: str
    member_name: str
    target: str
    through_collection: bool = False


@dataclass
class BuildContext:
    """In-progress registry and bookkeeping for a single build."""

    provider: TypeMetadataProvider
    namespace: str
    container_name: str
    query_composition_mode: bool = False
    model_aliasing_enabled: bool = False

    # Caller input (copies)
    explicit_types: dict[str, StructuralTypeConfiguration] = field(default_factory=dict)
    kind_conflicts: list[KindConflict] = field(default_factory=list)
    ignored_types: set[str] = field(default_factory=set)
    navigation_sources: list[NavigationSourceConfiguration] = field(default_factory=list)

    # Classification
    universe: dict[str, TypeDescriptor] = field(default_factory=dict)
    references: list[TypeReference] = field(default_factory=list)
    kinds: dict[str, StructuralKind] = field(default_factory=dict)

    # Inheritance
    effective_members: dict[str, list[MemberDescriptor]] = field(default_factory=dict)

    # Output registry
    structural_types: dict[str, StructuralTypeConfiguration] = field(default_factory=dict)
    enum_types: dict[str, EnumTypeConfiguration] = field(default_factory=dict)
    bindings: list[NavigationBinding] = field(default_factory=list)

    # ── Lookups ──────────────────────────────────────────────────────

    def descriptor(self, full_name: str) -> TypeDescriptor | None:
        if full_name in self.universe:
            return self.universe[full_name]
        return self.provider.get_type(full_name)

    def identity(self, type_or_name: Any) -> str:
        return self.provider.identity_of(type_or_name)

    def get(self, type_or_name: Any) -> StructuralTypeConfiguration | None:
        """The in-progress configuration of a type (used by post-processing hooks)."""
        return self.structural_types.get(self.identity(type_or_name))

    def is_explicit(self, full_name: str) -> bool:
        return full_name in self.explicit_types

    def is_ignored(self, full_name: str) -> bool:
        return full_name in self.ignored_types and full_name not in self.explicit_types

    def base_chain(self, full_name: str) -> list[StructuralTypeConfiguration]:
        """The configuration of a type followed by its in-model ancestors."""
        chain: list[StructuralTypeConfiguration] = []
        seen: set[str] = set()
        current = self.structural_types.get(full_name)
        while current is not None and current.full_name not in seen:
            seen.add(current.full_name)
            chain.append(current)
            current = self.structural_types.get(current.base_type) if current.base_type else None
        return chain

    def is_ancestor(self, ancestor: str, full_name: str) -> bool:
        """True if ``ancestor`` is a proper ancestor of ``full_name`` in the model."""
        return any(c.full_name == ancestor for c in self.base_chain(full_name)[1:])

    def depth(self, full_name: str) -> int:
        return len(self.base_chain(full_name)) - 1

    def declared_keys(self, full_name: str) -> tuple[str, list[str]] | None:
        """The nearest level of the chain declaring keys, with its key names."""
        for level in self.base_chain(full_name):
            if level.keys:
                return level.full_name, list(level.keys)
        return None

    def find_property(self, full_name: str, member_name: str) -> PropertyConfiguration | None:
        for level in self.base_chain(full_name):
            prop = level.property(member_name)
            if prop is not None:
                return prop
        return None

    # ── Member filtering ─────────────────────────────────────────────

    def is_member_mapped(self, level: TypeDescriptor, member: MemberDescriptor) -> bool:
        """Whether a declared member takes part in the schema at all."""
        if member.has_annotation(NotMapped):
            return False
        if self.model_aliasing_enabled and level.find_annotation(DataContract) is not None:
            return member.has_annotation(DataMember)
        return True

    def flattened_levels(self, full_name: str) -> list[TypeDescriptor]:
        """The type's descriptor plus every ancestor whose members it carries itself.

        Those are the ancestors below the nearest in-model ancestor or, when
        the caller set the base explicitly, below that base (all of them for
        an explicit "no base").
        """
        descriptor = self.descriptor(full_name)
        if descriptor is None:
            return []
        levels = [descriptor]
        explicit = self.explicit_types.get(full_name)
        configured = explicit is not None and explicit.base_type_configured
        for ancestor in self.provider.ancestors(full_name):
            if configured and ancestor.full_name == explicit.base_type:
                break
            if not configured and ancestor.full_name in self.universe:
                break
            levels.append(ancestor)
        return levels

    def mapped_members(self, full_name: str) -> list[MemberDescriptor]:
        """Members a type contributes at its own level, root-most declarations first.

        A redeclared member keeps its position but takes the most derived
        declaration.
        """
        explicit = self.explicit_types.get(full_name)
        members: dict[str, MemberDescriptor] = {}
        for level in reversed(self.flattened_levels(full_name)):
            level_config = self.explicit_types.get(level.full_name)
            for member in level.members:
                if explicit is not None and member.name in explicit.properties:
                    members[member.name] = member
                    continue
                if explicit is not None and member.name in explicit.removed_properties:
                    continue
                if level_config is not None and member.name in level_config.removed_properties:
                    continue
                if not self.is_member_mapped(level, member):
                    continue
                members[member.name] = member
        return list(members.values())

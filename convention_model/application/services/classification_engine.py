"""Classification engine: discovers reachable types and assigns each one a kind.

Types are grouped into inheritance families (trees of in-model types joined
by base links). A family has exactly one kind, decided in this order:

  1. explicit registrations, the complex-type marker and explicitly added
     complex/navigation properties pointing at a family member;
  2. no discoverable key on any member makes the family complex;
  3. being referenced from a complex type, propagated to a fixpoint;
  4. whatever is still undecided has a key and becomes an entity.

The result does not depend on discovery order.
"""

import logging
from collections import deque

from convention_model.application.services.build_context import (
    BuildContext,
    TypeReference,
)
from convention_model.domain.entities import (
    ComplexTypeMarker,
    Key,
    MemberDescriptor,
    StructuralKind,
    StructuralTypeConfiguration,
    TypeDescriptor,
    TypeRef,
    ValueShape,
)
from convention_model.domain.exceptions import (
    AmbiguousTypeKindError,
    ComplexTypeReferencesEntityError,
    TypeKindConflictError,
)
from convention_model.infrastructure.logging.build_logger import BuildLogger

logger = logging.getLogger(__name__)
blog = BuildLogger("ClassificationEngine")

_KEY_SHAPES = (ValueShape.PRIMITIVE, ValueShape.ENUM)


def structured_target(type_ref: TypeRef | None) -> tuple[str | None, bool]:
    """Return the structured type a member points at, and whether it is a collection element."""
    if type_ref is None:
        return None, False
    if type_ref.shape == ValueShape.STRUCTURED:
        return type_ref.name, False
    if (
        type_ref.shape == ValueShape.COLLECTION
        and type_ref.element is not None
        and type_ref.element.shape == ValueShape.STRUCTURED
    ):
        return type_ref.element.name, True
    return None, False


def is_key_candidate(member: MemberDescriptor, type_name: str) -> bool:
    """Naming convention for keys: ``Id`` or ``<TypeName>Id``, case-insensitive."""
    if member.type_ref.shape not in _KEY_SHAPES:
        return False
    name = member.name.casefold()
    return name == "id" or name == f"{type_name}id".casefold()


class ClassificationEngine:
    """Walks the reachable type graph from the registered roots."""

    def run(self, ctx: BuildContext) -> None:
        self._raise_registration_conflicts(ctx)
        self._discover(ctx)
        self._collect_references(ctx)
        kinds = self._assign_kinds(ctx)
        self._create_configurations(ctx, kinds)

        entities = sum(1 for k in ctx.kinds.values() if k == StructuralKind.ENTITY)
        logger.info(
            "Classified %d types (%d entity, %d complex)",
            len(ctx.kinds), entities, len(ctx.kinds) - entities,
        )

    # ── Registration conflicts ───────────────────────────────────────

    def _raise_registration_conflicts(self, ctx: BuildContext) -> None:
        for conflict in ctx.kind_conflicts:
            raise TypeKindConflictError(
                conflict.type_name, conflict.requested.value, conflict.prior.value,
            )

    # ── Discovery ────────────────────────────────────────────────────

    def _discover(self, ctx: BuildContext) -> None:
        """Breadth-first walk over member references and derived types."""
        roots: list[str] = list(ctx.explicit_types)
        roots.extend(source.entity_type for source in ctx.navigation_sources)
        for config in ctx.explicit_types.values():
            if config.base_type_configured and config.base_type:
                roots.append(config.base_type)

        queue = deque(roots)
        while queue:
            full_name = queue.popleft()
            if full_name in ctx.universe or ctx.is_ignored(full_name):
                continue
            descriptor = ctx.provider.require_type(full_name)
            ctx.universe[full_name] = descriptor

            for member in self._reachable_members(ctx, descriptor):
                target, _ = structured_target(member.type_ref)
                if target is not None and not ctx.is_ignored(target):
                    queue.append(target)

            for derived in ctx.provider.derived_types(full_name):
                if not self._derives_through_ignored(ctx, derived, full_name):
                    queue.append(derived.full_name)

    def _reachable_members(self, ctx: BuildContext, descriptor: TypeDescriptor):
        """Members of the type and of all its ancestors.

        Every ancestor member is either carried by this type or declared on
        an in-model ancestor, so walking them all reaches the same types.
        """
        explicit = ctx.explicit_types.get(descriptor.full_name)
        levels = [descriptor] + ctx.provider.ancestors(descriptor.full_name)
        for level in levels:
            level_config = ctx.explicit_types.get(level.full_name)
            for member in level.members:
                if explicit is not None and member.name in explicit.properties:
                    yield member
                    continue
                if level_config is not None and member.name in level_config.removed_properties:
                    continue
                if explicit is not None and member.name in explicit.removed_properties:
                    continue
                if ctx.is_member_mapped(level, member):
                    yield member

    def _derives_through_ignored(self, ctx: BuildContext, derived: TypeDescriptor, base: str) -> bool:
        if ctx.is_ignored(derived.full_name):
            return True
        for ancestor in ctx.provider.ancestors(derived.full_name):
            if ancestor.full_name == base:
                return False
            if ctx.is_ignored(ancestor.full_name):
                return True
        return False

    def _collect_references(self, ctx: BuildContext) -> None:
        """Record member edges between in-model types, attributed to the level carrying them."""
        for full_name in ctx.universe:
            for member in ctx.mapped_members(full_name):
                target, through_collection = structured_target(member.type_ref)
                if target is not None and target in ctx.universe:
                    ctx.references.append(
                        TypeReference(full_name, member.name, target, through_collection)
                    )

    # ── Kind assignment ──────────────────────────────────────────────

    def _model_parent(self, ctx: BuildContext, full_name: str) -> str | None:
        explicit = ctx.explicit_types.get(full_name)
        if explicit is not None and explicit.base_type_configured:
            base = explicit.base_type
            return base if base in ctx.universe else None
        for ancestor in ctx.provider.ancestors(full_name):
            if ancestor.full_name in ctx.universe:
                return ancestor.full_name
        return None

    def _assign_kinds(self, ctx: BuildContext) -> dict[str, StructuralKind]:
        parent = {name: self._model_parent(ctx, name) for name in ctx.universe}
        root_of: dict[str, str] = {}
        families: dict[str, list[str]] = {}
        for name in ctx.universe:
            root, seen = name, {name}
            while parent[root] is not None and parent[root] not in seen:
                root = parent[root]
                seen.add(root)
            root_of[name] = root
            families.setdefault(root, []).append(name)

        required = self._required_kinds(ctx)

        # 1. Families pinned by explicit requirements
        family_kind: dict[str, StructuralKind | None] = {}
        for root, members in families.items():
            entities = [m for m in members if required.get(m) == StructuralKind.ENTITY]
            complexes = [m for m in members if required.get(m) == StructuralKind.COMPLEX]
            if entities and complexes:
                self._raise_family_conflict(entities, complexes, parent)
            if entities:
                family_kind[root] = StructuralKind.ENTITY
            elif complexes:
                family_kind[root] = StructuralKind.COMPLEX
            else:
                family_kind[root] = None

        # 2. Keyless families default to complex, complex referrers propagate,
        #    3. whatever is left has a key and becomes an entity
        for root, kind in family_kind.items():
            if kind is None and not any(self._has_key_candidate(ctx, m) for m in families[root]):
                family_kind[root] = StructuralKind.COMPLEX
                blog.detail(f"{root} family -> complex (no key)")

        changed = True
        while changed:
            changed = False
            for ref in ctx.references:
                if family_kind[root_of[ref.referrer]] != StructuralKind.COMPLEX:
                    continue
                target_root = root_of[ref.target]
                target_kind = family_kind[target_root]
                if target_kind is None:
                    family_kind[target_root] = StructuralKind.COMPLEX
                    blog.detail(f"{ref.target} -> complex (referenced from {ref.referrer})")
                    changed = True
                elif target_kind == StructuralKind.ENTITY:
                    self._check_complex_reference(ref, families[target_root], required, parent)

        for root, kind in family_kind.items():
            if kind is None:
                family_kind[root] = StructuralKind.ENTITY
                blog.detail(f"{root} family -> entity (by key convention)")

        return {name: family_kind[root_of[name]] for name in ctx.universe}

    def _required_kinds(self, ctx: BuildContext) -> dict[str, StructuralKind]:
        required: dict[str, StructuralKind] = {
            name: config.kind for name, config in ctx.explicit_types.items()
        }
        for name, descriptor in ctx.universe.items():
            if name not in required and descriptor.find_annotation(ComplexTypeMarker) is not None:
                required[name] = StructuralKind.COMPLEX

        for name, config in ctx.explicit_types.items():
            descriptor = ctx.universe.get(name)
            if descriptor is None:
                continue
            for prop in config.properties.values():
                if prop.kind is None or not (prop.kind.is_complex or prop.kind.is_navigation):
                    continue
                member = self._find_member(ctx, descriptor, prop.member_name)
                target, _ = structured_target(member.type_ref if member else None)
                if target is None or target not in ctx.universe:
                    continue
                kind = StructuralKind.COMPLEX if prop.kind.is_complex else StructuralKind.ENTITY
                prior = required.setdefault(target, kind)
                if prior != kind:
                    raise TypeKindConflictError(target, kind.value, prior.value)
        return required

    @staticmethod
    def _find_member(ctx: BuildContext, descriptor: TypeDescriptor, name: str) -> MemberDescriptor | None:
        for level in [descriptor] + ctx.provider.ancestors(descriptor.full_name):
            member = level.member(name)
            if member is not None:
                return member
        return None

    @staticmethod
    def _ancestors_of(name: str, parent: dict[str, str | None]) -> list[str]:
        chain, current = [], parent.get(name)
        while current is not None and current not in chain:
            chain.append(current)
            current = parent.get(current)
        return chain

    def _raise_family_conflict(
        self,
        entities: list[str],
        complexes: list[str],
        parent: dict[str, str | None],
    ) -> None:
        for entity in entities:
            for complex_ in complexes:
                if complex_ in self._ancestors_of(entity, parent):
                    raise TypeKindConflictError(
                        entity, StructuralKind.COMPLEX.value, StructuralKind.ENTITY.value
                    )
                if entity in self._ancestors_of(complex_, parent):
                    raise TypeKindConflictError(
                        complex_, StructuralKind.ENTITY.value, StructuralKind.COMPLEX.value
                    )

        entity, complex_ = entities[0], complexes[0]
        complex_line = [complex_] + self._ancestors_of(complex_, parent)
        common = next(a for a in self._ancestors_of(entity, parent) if a in complex_line)
        raise AmbiguousTypeKindError(common, entity, complex_)

    def _check_complex_reference(
        self,
        ref: TypeReference,
        family: list[str],
        required: dict[str, StructuralKind],
        parent: dict[str, str | None],
    ) -> None:
        """A complex type points into a family pinned as entity."""
        pinned = [m for m in family if required.get(m) == StructuralKind.ENTITY]
        if ref.target in pinned:
            raise ComplexTypeReferencesEntityError(ref.referrer, ref.target, ref.member_name)
        entity = pinned[0]
        if entity in self._ancestors_of(ref.target, parent):
            raise TypeKindConflictError(
                ref.target, StructuralKind.ENTITY.value, StructuralKind.COMPLEX.value
            )
        raise TypeKindConflictError(entity, StructuralKind.COMPLEX.value, StructuralKind.ENTITY.value)

    def _has_key_candidate(self, ctx: BuildContext, full_name: str) -> bool:
        """Whether a type has a key of its own or inherited from any ancestor."""
        explicit = ctx.explicit_types.get(full_name)
        if explicit is not None and explicit.keys:
            return True
        descriptor = ctx.universe[full_name]
        for level in [descriptor] + ctx.provider.ancestors(full_name):
            for member in level.members:
                if not ctx.is_member_mapped(level, member):
                    continue
                if explicit is not None and member.name in explicit.removed_properties:
                    continue
                if member.has_annotation(Key) or is_key_candidate(member, level.name):
                    return True
        return False

    # ── Registry nodes ───────────────────────────────────────────────

    def _create_configurations(self, ctx: BuildContext, kinds: dict[str, StructuralKind]) -> None:
        for full_name, descriptor in ctx.universe.items():
            kind = kinds[full_name]
            config = ctx.explicit_types.get(full_name)
            if config is None:
                config = StructuralTypeConfiguration(full_name=full_name, kind=kind)
            config.name = descriptor.name
            config.namespace = descriptor.namespace
            ctx.kinds[full_name] = kind
            ctx.structural_types[full_name] = config
            blog.detail(f"{full_name} -> {kind.value}", explicit=config.added_explicitly)

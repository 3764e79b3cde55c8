"""Convention engine: properties, keys, dynamic containers and foreign keys.

Conventions only fill in what the caller left open. A property added
explicitly keeps the classification, nullability and capability flags the
caller gave it.
"""

import logging

from convention_model.application.services.build_context import (
    OPAQUE_TYPE_NAME,
    BuildContext,
)
from convention_model.application.services.classification_engine import (
    is_key_candidate,
    structured_target,
)
from convention_model.domain.entities import (
    ConcurrencyCheck,
    ConcurrencyMode,
    Contained,
    DataMember,
    EnumTypeConfiguration,
    ForeignKey,
    Key,
    MemberDescriptor,
    Multiplicity,
    NotCountable,
    NotExpandable,
    NotFilterable,
    NotNavigable,
    NotSortable,
    Primitive,
    PropertyConfiguration,
    PropertyKind,
    Required,
    StructuralKind,
    StructuralTypeConfiguration,
    Timestamp,
    TypeRef,
    ValueShape,
)
from convention_model.domain.exceptions import (
    DerivedTypeKeyError,
    DuplicateDynamicPropertyContainerError,
    RecursiveComplexTypeError,
    UnknownMemberError,
    UnknownTypeError,
)
from convention_model.infrastructure.logging.build_logger import BuildLogger

logger = logging.getLogger(__name__)
blog = BuildLogger("ConventionEngine")

_KEY_KINDS = (PropertyKind.PRIMITIVE, PropertyKind.ENUM)


class ConventionEngine:
    """Applies naming and annotation conventions to every registry node."""

    def run(self, ctx: BuildContext) -> None:
        configs = [c for c in ctx.structural_types.values() if ctx.descriptor(c.full_name)]

        for config in configs:
            self._build_properties(ctx, config)

        for config in configs:
            self._check_inherited_container(ctx, config)

        # Ancestors first, so a derived level sees every key above it
        for config in sorted(configs, key=lambda c: ctx.depth(c.full_name)):
            self._resolve_keys(ctx, config)

        foreign_keys = 0
        for config in configs:
            if config.is_entity:
                foreign_keys += self._resolve_foreign_keys(ctx, config)

        self._check_recursive_complex_types(ctx)

        logger.info(
            "Applied conventions: %d properties, %d keyed types, %d foreign keys, %d enum types",
            sum(len(c.properties) for c in ctx.structural_types.values()),
            sum(1 for c in ctx.structural_types.values() if c.keys),
            foreign_keys,
            len(ctx.enum_types),
        )

    # ── Properties ───────────────────────────────────────────────────

    def _build_properties(self, ctx: BuildContext, config: StructuralTypeConfiguration) -> None:
        explicit = dict(config.properties)
        members = ctx.effective_members.get(config.full_name, [])
        known = {m.name for m in members}
        for member_name in explicit:
            if member_name not in known:
                raise UnknownMemberError(config.full_name, member_name)

        containers: list[PropertyConfiguration] = []
        if config.dynamic_property_container is not None:
            containers.append(config.dynamic_property_container)

        properties: dict[str, PropertyConfiguration] = {}
        for member in members:
            if member.name in explicit:
                prop = explicit[member.name]
                self._resolve_explicit(ctx, config, prop, member)
                properties[member.name] = prop
                continue
            if config.dynamic_property_container is not None \
                    and config.dynamic_property_container.member_name == member.name:
                config.dynamic_property_container.type_ref = member.type_ref
                continue

            prop = self._infer_property(ctx, config, member)
            if prop is None:
                continue
            if prop.kind == PropertyKind.DYNAMIC_PROPERTY_CONTAINER:
                containers.append(prop)
            else:
                properties[member.name] = prop

        if len(containers) > 1:
            raise DuplicateDynamicPropertyContainerError(
                config.full_name, [c.member_name for c in containers]
            )
        config.dynamic_property_container = containers[0] if containers else None
        config.properties = properties

    def _resolve_explicit(
        self,
        ctx: BuildContext,
        config: StructuralTypeConfiguration,
        prop: PropertyConfiguration,
        member: MemberDescriptor,
    ) -> None:
        type_ref = self._effective_type_ref(member)
        prop.declaring_type = config.full_name
        prop.type_ref = type_ref
        if prop.nullable is None:
            prop.nullable = type_ref.nullable

        if prop.collection_requested:
            element = type_ref.element if type_ref.shape == ValueShape.COLLECTION else type_ref
            if element is None or element.shape == ValueShape.OPAQUE:
                self._ensure_opaque_type(ctx)
                prop.kind, prop.target_type = PropertyKind.COMPLEX_COLLECTION, OPAQUE_TYPE_NAME
            else:
                kind, target = self._classify_element(ctx, element)
                prop.kind = kind or PropertyKind.PRIMITIVE_COLLECTION
                prop.target_type = target
            if prop.kind == PropertyKind.NAVIGATION_COLLECTION and prop.multiplicity is None:
                prop.multiplicity = Multiplicity.MANY
        elif prop.kind in (PropertyKind.ENUM, PropertyKind.ENUM_COLLECTION):
            enum_ref = type_ref.element if type_ref.shape == ValueShape.COLLECTION else type_ref
            prop.target_type = self._register_enum(ctx, enum_ref.name)
        elif prop.kind is not None and (prop.kind.is_complex or prop.kind.is_navigation):
            prop.target_type, _ = structured_target(type_ref)
        blog.detail(f"{config.full_name}.{prop.name} explicit {prop.kind.value if prop.kind else '?'}")

    def _infer_property(
        self,
        ctx: BuildContext,
        config: StructuralTypeConfiguration,
        member: MemberDescriptor,
    ) -> PropertyConfiguration | None:
        type_ref = self._effective_type_ref(member)
        kind, target = self._classify(ctx, type_ref)
        if kind is None:
            logger.debug("Skipping %s.%s (%s)", config.full_name, member.name, type_ref.describe())
            return None

        prop = PropertyConfiguration(
            member_name=member.name,
            declaring_type=config.full_name,
            kind=kind,
            type_ref=type_ref,
            target_type=target,
            nullable=type_ref.nullable,
        )
        if member.has_annotation(Required):
            prop.nullable = False
        if member.has_annotation(ConcurrencyCheck, Timestamp):
            prop.concurrency_mode = ConcurrencyMode.FIXED
        prop.not_filterable = member.has_annotation(NotFilterable)
        prop.not_sortable = member.has_annotation(NotSortable)
        prop.not_navigable = member.has_annotation(NotNavigable)
        prop.not_expandable = member.has_annotation(NotExpandable)
        prop.not_countable = member.has_annotation(NotCountable)

        if kind == PropertyKind.NAVIGATION:
            prop.multiplicity = Multiplicity.ZERO_OR_ONE if prop.nullable else Multiplicity.ONE
        elif kind == PropertyKind.NAVIGATION_COLLECTION:
            prop.multiplicity = Multiplicity.MANY
        if kind.is_navigation and member.has_annotation(Contained):
            prop.contains_target = True

        if ctx.model_aliasing_enabled:
            data_member = member.find_annotation(DataMember)
            if data_member is not None and data_member.name:
                prop.name = data_member.name
        return prop

    @staticmethod
    def _effective_type_ref(member: MemberDescriptor) -> TypeRef:
        override = member.find_annotation(Primitive)
        if override is not None and member.type_ref.shape == ValueShape.PRIMITIVE:
            return TypeRef.primitive(override.kind, nullable=member.type_ref.nullable)
        return member.type_ref

    def _classify(self, ctx: BuildContext, type_ref: TypeRef) -> tuple[PropertyKind | None, str | None]:
        if type_ref.shape == ValueShape.PRIMITIVE:
            return PropertyKind.PRIMITIVE, None
        if type_ref.shape == ValueShape.ENUM:
            return PropertyKind.ENUM, self._register_enum(ctx, type_ref.name)
        if type_ref.shape == ValueShape.STRUCTURED:
            kind = ctx.kinds.get(type_ref.name)
            if kind is None:
                return None, None
            if kind == StructuralKind.ENTITY:
                return PropertyKind.NAVIGATION, type_ref.name
            return PropertyKind.COMPLEX, type_ref.name
        if type_ref.shape == ValueShape.COLLECTION and type_ref.element is not None:
            return self._classify_element(ctx, type_ref.element)
        if type_ref.is_dynamic_container:
            return PropertyKind.DYNAMIC_PROPERTY_CONTAINER, None
        return None, None

    def _classify_element(self, ctx: BuildContext, element: TypeRef) -> tuple[PropertyKind | None, str | None]:
        if element.shape == ValueShape.PRIMITIVE:
            return PropertyKind.PRIMITIVE_COLLECTION, None
        if element.shape == ValueShape.ENUM:
            return PropertyKind.ENUM_COLLECTION, self._register_enum(ctx, element.name)
        if element.shape == ValueShape.STRUCTURED:
            kind = ctx.kinds.get(element.name)
            if kind is None:
                return None, None
            if kind == StructuralKind.ENTITY:
                return PropertyKind.NAVIGATION_COLLECTION, element.name
            return PropertyKind.COMPLEX_COLLECTION, element.name
        # Collections of opaque values, nested collections and maps have no schema form
        return None, None

    @staticmethod
    def _register_enum(ctx: BuildContext, full_name: str) -> str:
        if full_name not in ctx.enum_types:
            descriptor = ctx.provider.get_enum(full_name)
            if descriptor is None:
                raise UnknownTypeError(full_name)
            ctx.enum_types[full_name] = EnumTypeConfiguration(
                full_name=descriptor.full_name,
                name=descriptor.name,
                namespace=descriptor.namespace,
                members=tuple(descriptor.members),
            )
        return full_name

    @staticmethod
    def _ensure_opaque_type(ctx: BuildContext) -> None:
        if OPAQUE_TYPE_NAME not in ctx.structural_types:
            ctx.structural_types[OPAQUE_TYPE_NAME] = StructuralTypeConfiguration(
                full_name=OPAQUE_TYPE_NAME,
                kind=StructuralKind.COMPLEX,
                is_abstract=False,
            )
            ctx.kinds[OPAQUE_TYPE_NAME] = StructuralKind.COMPLEX

    # ── Dynamic property containers ──────────────────────────────────

    def _check_inherited_container(self, ctx: BuildContext, config: StructuralTypeConfiguration) -> None:
        own = config.dynamic_property_container
        if own is None:
            return
        for ancestor in ctx.base_chain(config.full_name)[1:]:
            inherited = ancestor.dynamic_property_container
            if inherited is not None:
                raise DuplicateDynamicPropertyContainerError(
                    config.full_name, [inherited.member_name, own.member_name]
                )

    # ── Keys ─────────────────────────────────────────────────────────

    def _resolve_keys(self, ctx: BuildContext, config: StructuralTypeConfiguration) -> None:
        if not config.is_entity:
            config.keys = []
            return

        if config.keys_configured:
            own = list(config.keys)
            for key in own:
                if key not in config.properties:
                    raise UnknownMemberError(config.full_name, key)
        else:
            own = self._discover_keys(ctx, config)

        if not own:
            config.keys = []
            return

        keyed_ancestor = next(
            (a for a in ctx.base_chain(config.full_name)[1:] if a.keys), None
        )
        if keyed_ancestor is not None:
            if ctx.query_composition_mode and not config.keys_configured:
                logger.debug("Ignoring key-like members of derived type %s", config.full_name)
                config.keys = []
                return
            raise DerivedTypeKeyError(config.full_name, keyed_ancestor.full_name)

        config.keys = own
        for key in own:
            config.properties[key].nullable = False
        blog.detail(f"{config.full_name} keys: {', '.join(own)}")

    def _discover_keys(self, ctx: BuildContext, config: StructuralTypeConfiguration) -> list[str]:
        members = {m.name: m for m in ctx.effective_members.get(config.full_name, [])}
        candidates = [
            p for p in config.properties.values()
            if p.kind in _KEY_KINDS and p.member_name in members
        ]
        annotated = [p.member_name for p in candidates if members[p.member_name].has_annotation(Key)]
        if annotated:
            return annotated

        type_name = ctx.descriptor(config.full_name).name
        for wanted in ("id", f"{type_name}id".casefold()):
            for prop in candidates:
                member = members[prop.member_name]
                if member.name.casefold() == wanted and is_key_candidate(member, type_name):
                    return [prop.member_name]
        return []

    # ── Foreign keys ─────────────────────────────────────────────────

    def _resolve_foreign_keys(self, ctx: BuildContext, config: StructuralTypeConfiguration) -> int:
        members = {m.name: m for m in ctx.effective_members.get(config.full_name, [])}
        found = 0
        for prop in config.properties.values():
            if prop.kind != PropertyKind.NAVIGATION or prop.added_explicitly:
                continue
            principal_keys = ctx.declared_keys(prop.target_type)
            if principal_keys is None:
                continue
            _, key_names = principal_keys

            annotation = members[prop.member_name].find_annotation(ForeignKey)
            if annotation is not None:
                dependent = [n.strip() for n in annotation.name.split(",") if n.strip()]
                if len(dependent) != len(key_names) or any(
                    self._dependent_property(ctx, config.full_name, [d]) is None for d in dependent
                ):
                    logger.warning(
                        "Foreign key %s on %s.%s does not match the keys of %s",
                        annotation.name, config.full_name, prop.member_name, prop.target_type,
                    )
                    continue
            else:
                principal = ctx.descriptor(prop.target_type)
                dependent = []
                for key in key_names:
                    match = self._dependent_property(
                        ctx, config.full_name, [f"{prop.member_name}{key}", f"{principal.name}{key}"]
                    )
                    if match is None:
                        break
                    dependent.append(match)
                if len(dependent) != len(key_names):
                    continue

            prop.dependent_properties = dependent
            prop.principal_properties = list(key_names)
            found += 1
            blog.detail(f"{config.full_name}.{prop.name} foreign key {dependent} -> {key_names}")
        return found

    @staticmethod
    def _dependent_property(ctx: BuildContext, full_name: str, names: list[str]) -> str | None:
        """First primitive property on the type or its ancestors matching one of ``names``."""
        wanted = [n.casefold() for n in names]
        for name in wanted:
            for level in ctx.base_chain(full_name):
                for prop in level.properties.values():
                    if prop.kind in _KEY_KINDS and prop.member_name.casefold() == name:
                        return prop.member_name
        return None

    # ── Recursive complex types ──────────────────────────────────────

    def _check_recursive_complex_types(self, ctx: BuildContext) -> None:
        for config in ctx.structural_types.values():
            if config.kind == StructuralKind.COMPLEX:
                self._walk_complex(ctx, config.full_name, config.full_name, set())

    def _walk_complex(self, ctx: BuildContext, origin: str, current: str, visited: set[str]) -> None:
        for level in reversed(ctx.base_chain(current)):
            for prop in level.properties.values():
                if prop.kind != PropertyKind.COMPLEX:
                    continue
                if prop.target_type == origin:
                    raise RecursiveComplexTypeError(origin, prop.name)
                if prop.target_type in visited:
                    continue
                visited.add(prop.target_type)
                self._walk_complex(ctx, origin, prop.target_type, visited)

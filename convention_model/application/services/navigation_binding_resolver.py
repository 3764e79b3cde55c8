"""Navigation binding resolver: routes navigations of each source to a target source."""

import logging

from convention_model.application.services.build_context import BuildContext
from convention_model.domain.entities import (
    NavigationBinding,
    NavigationSourceConfiguration,
    PropertyConfiguration,
    StructuralTypeConfiguration,
)
from convention_model.domain.exceptions import MissingKeyError, UnknownTypeError
from convention_model.infrastructure.logging.build_logger import BuildLogger

logger = logging.getLogger(__name__)
blog = BuildLogger("NavigationBindingResolver")


class NavigationBindingResolver:
    """Binds every navigation visible from an entity set or singleton.

    Targets are looked up among entity sets first and singletons second.
    Within each group an exact element-type match wins, then the closest
    base type, then the closest derived type; ties go to the source
    registered first. A navigation with no candidate stays unbound.
    """

    def run(self, ctx: BuildContext) -> None:
        self._validate_sources(ctx)
        unbound = 0
        for source in ctx.navigation_sources:
            for level, prop, in_chain in self._visible_navigations(ctx, source):
                target = self._resolve_target(ctx, prop.target_type)
                if target is None:
                    unbound += 1
                    logger.debug("No target for %s.%s from %s", level.full_name, prop.name, source.name)
                    continue
                path = prop.name if in_chain else f"{level.namespace}.{level.name}/{prop.name}"
                ctx.bindings.append(
                    NavigationBinding(
                        source=source.name,
                        declaring_type=level.full_name,
                        navigation_property=prop.name,
                        target=target.name,
                        target_kind=target.kind,
                        path=path,
                    )
                )
                blog.detail(f"{source.name}: {path} -> {target.name}")

        logger.info("Created %d navigation bindings (%d navigations unbound)", len(ctx.bindings), unbound)

    @staticmethod
    def _validate_sources(ctx: BuildContext) -> None:
        for source in ctx.navigation_sources:
            if source.entity_type not in ctx.structural_types:
                raise UnknownTypeError(source.entity_type)
            if ctx.declared_keys(source.entity_type) is None:
                raise MissingKeyError(source.name, source.entity_type)

    @staticmethod
    def _visible_navigations(ctx: BuildContext, source: NavigationSourceConfiguration):
        """Navigations declared on the source type, its ancestors and its derived types."""
        chain = ctx.base_chain(source.entity_type)
        derived = [
            c for c in ctx.structural_types.values()
            if ctx.is_ancestor(source.entity_type, c.full_name)
        ]
        levels: list[tuple[StructuralTypeConfiguration, bool]] = (
            [(c, True) for c in reversed(chain)] + [(c, False) for c in derived]
        )
        for level, in_chain in levels:
            for prop in navigation_targets(level):
                yield level, prop, in_chain

    def _resolve_target(self, ctx: BuildContext, target_type: str) -> NavigationSourceConfiguration | None:
        entity_sets = [s for s in ctx.navigation_sources if not s.is_singleton]
        singletons = [s for s in ctx.navigation_sources if s.is_singleton]
        for candidates in (entity_sets, singletons):
            best, best_rank = None, None
            for source in candidates:
                rank = self._match_rank(ctx, target_type, source.entity_type)
                if rank is not None and (best_rank is None or rank < best_rank):
                    best, best_rank = source, rank
            if best is not None:
                return best
        return None

    @staticmethod
    def _match_rank(ctx: BuildContext, target_type: str, source_type: str) -> tuple[int, int] | None:
        if target_type == source_type:
            return (0, 0)
        target_chain = [c.full_name for c in ctx.base_chain(target_type)]
        if source_type in target_chain:
            return (1, target_chain.index(source_type))
        source_chain = [c.full_name for c in ctx.base_chain(source_type)]
        if target_type in source_chain:
            return (2, source_chain.index(target_type))
        return None


def navigation_targets(config: StructuralTypeConfiguration) -> list[PropertyConfiguration]:
    """Navigation properties of one level that can take part in bindings."""
    return [p for p in config.properties.values() if p.is_navigation and not p.contains_target]

"""Inheritance resolver: patches base links and decides what each level declares."""

import logging

from convention_model.application.services.build_context import BuildContext
from convention_model.domain.entities import DataContract, MediaType
from convention_model.domain.exceptions import InheritanceCycleError, TypeKindConflictError
from convention_model.infrastructure.logging.build_logger import BuildLogger

logger = logging.getLogger(__name__)
blog = BuildLogger("InheritanceResolver")


class InheritanceResolver:
    """Links every type to its nearest in-model ancestor.

    Ancestors that are not part of the model are skipped over and their
    members are carried by the derived type. A base link the caller set
    explicitly, including an explicit "no base", is never replaced.
    """

    def run(self, ctx: BuildContext) -> None:
        patched = 0
        for full_name, config in ctx.structural_types.items():
            descriptor = ctx.descriptor(full_name)
            if descriptor is None:
                continue

            if not config.base_type_configured:
                nearest = self._nearest_model_ancestor(ctx, full_name)
                if nearest != descriptor.base:
                    patched += 1
                    blog.detail(f"{full_name} base patched to {nearest}", declared=descriptor.base)
                config.base_type = nearest
            elif config.base_type is not None and config.base_type not in ctx.structural_types:
                logger.warning(
                    "Configured base '%s' of '%s' is not part of the model; using nearest ancestor",
                    config.base_type, full_name,
                )
                config.base_type = self._nearest_model_ancestor(ctx, full_name)

            base = ctx.structural_types.get(config.base_type) if config.base_type else None
            if base is not None and base.kind != config.kind:
                raise TypeKindConflictError(full_name, base.kind.value, config.kind.value)

            if config.is_abstract is None:
                config.is_abstract = descriptor.is_abstract
            if descriptor.find_annotation(MediaType) is not None:
                config.has_stream = True
            if ctx.model_aliasing_enabled:
                contract = descriptor.find_annotation(DataContract)
                if contract is not None:
                    config.name = contract.name or config.name
                    config.namespace = contract.namespace or config.namespace

        self._raise_base_cycles(ctx)

        for full_name, config in ctx.structural_types.items():
            if ctx.descriptor(full_name) is None:
                continue
            inherited = self._inherited_member_names(ctx, full_name)
            ctx.effective_members[full_name] = [
                m for m in ctx.mapped_members(full_name) if m.name not in inherited
            ]

        logger.info("Resolved inheritance for %d types (%d base links patched)",
                    len(ctx.structural_types), patched)

    @staticmethod
    def _raise_base_cycles(ctx: BuildContext) -> None:
        for full_name in ctx.structural_types:
            path: list[str] = []
            current = full_name
            while current is not None and current in ctx.structural_types:
                if current in path:
                    cycle = path[path.index(current):]
                    raise InheritanceCycleError(cycle)
                path.append(current)
                current = ctx.structural_types[current].base_type

    @staticmethod
    def _nearest_model_ancestor(ctx: BuildContext, full_name: str) -> str | None:
        for ancestor in ctx.provider.ancestors(full_name):
            if ancestor.full_name in ctx.structural_types:
                return ancestor.full_name
        return None

    @staticmethod
    def _inherited_member_names(ctx: BuildContext, full_name: str) -> set[str]:
        """Names already declared by an in-model ancestor."""
        names: set[str] = set()
        for ancestor in ctx.base_chain(full_name)[1:]:
            names.update(m.name for m in ctx.mapped_members(ancestor.full_name))
            names.update(ancestor.properties)
        return names

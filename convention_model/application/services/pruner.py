"""Pruner: drops structural and enum types nothing reachable refers to."""

import logging
from collections import deque

from convention_model.application.services.build_context import BuildContext
from convention_model.infrastructure.logging.build_logger import BuildLogger

logger = logging.getLogger(__name__)
blog = BuildLogger("Pruner")


class Pruner:
    """Keeps what is reachable from the roots of the model.

    Roots are the entity types behind entity sets and singletons plus every
    type the caller registered directly. Edges are property targets and base
    links in both directions, so the derived types of a reachable base stay.
    """

    def run(self, ctx: BuildContext) -> None:
        roots = [name for name, config in ctx.structural_types.items() if config.added_explicitly]
        roots.extend(source.entity_type for source in ctx.navigation_sources)

        children: dict[str, list[str]] = {}
        for name, config in ctx.structural_types.items():
            if config.base_type:
                children.setdefault(config.base_type, []).append(name)

        reached: set[str] = set()
        queue = deque(roots)
        while queue:
            name = queue.popleft()
            if name in reached or name not in ctx.structural_types:
                continue
            reached.add(name)
            config = ctx.structural_types[name]
            if config.base_type:
                queue.append(config.base_type)
            queue.extend(children.get(name, []))
            for prop in config.properties.values():
                if prop.target_type and not (prop.kind and prop.kind.is_enum):
                    queue.append(prop.target_type)

        removed = [name for name in ctx.structural_types if name not in reached]
        for name in removed:
            del ctx.structural_types[name]
            ctx.kinds.pop(name, None)
            blog.detail(f"pruned {name}")

        used_enums = {
            prop.target_type
            for config in ctx.structural_types.values()
            for prop in config.properties.values()
            if prop.kind is not None and prop.kind.is_enum
        }
        unused = [name for name in ctx.enum_types if name not in used_enums]
        for name in unused:
            del ctx.enum_types[name]

        logger.info("Pruned %d structural types and %d enum types", len(removed), len(unused))

"""Convention model builder: the caller configuration surface and the build pipeline.

Pipeline per ``build()`` call:
  CLASSIFY → INHERITANCE → CONVENTIONS → HOOK → BINDING → PRUNE → FINALIZE

Registration only records what the caller asked for. Every validation
happens inside ``build()``, which either returns a complete, frozen
``SchemaGraph`` or raises.
"""

import logging
from collections.abc import Callable
from typing import Any

from convention_model.application.interfaces import TypeMetadataProvider
from convention_model.application.services.build_context import BuildContext, KindConflict
from convention_model.application.services.classification_engine import ClassificationEngine
from convention_model.application.services.convention_engine import ConventionEngine
from convention_model.application.services.inheritance_resolver import InheritanceResolver
from convention_model.application.services.navigation_binding_resolver import (
    NavigationBindingResolver,
)
from convention_model.application.services.pruner import Pruner
from convention_model.config import Settings, get_settings
from convention_model.domain.entities import (
    EntityContainer,
    NavigationSourceConfiguration,
    NavigationSourceKind,
    SchemaGraph,
    StructuralKind,
    StructuralTypeConfiguration,
)
from convention_model.infrastructure.logging.build_logger import BuildLogger, BuildStage

logger = logging.getLogger(__name__)
blog = BuildLogger("ConventionModelBuilder")


class ConventionModelBuilder:
    """Infers a schema graph from registered types and explicit overrides.

    Usage:
        provider = ClassTypeMetadataProvider(modules=[models])
        builder = ConventionModelBuilder(provider)
        builder.entity_set("Products", models.Product)
        graph = builder.build()
    """

    def __init__(
        self,
        provider: TypeMetadataProvider,
        settings: Settings | None = None,
        *,
        namespace: str | None = None,
        container_name: str | None = None,
        query_composition_mode: bool | None = None,
        model_aliasing_enabled: bool | None = None,
    ):
        settings = settings or get_settings()
        self._provider = provider
        self.namespace = namespace or settings.default_namespace
        self.container_name = container_name or settings.container_name
        self.query_composition_mode = (
            settings.query_composition_mode
            if query_composition_mode is None
            else query_composition_mode
        )
        self.model_aliasing_enabled = (
            settings.model_aliasing_enabled
            if model_aliasing_enabled is None
            else model_aliasing_enabled
        )
        self.on_model_creating: Callable[[BuildContext], None] | None = None

        self._types: dict[str, StructuralTypeConfiguration] = {}
        self._kind_conflicts: list[KindConflict] = []
        self._ignored: set[str] = set()
        self._sources: dict[str, NavigationSourceConfiguration] = {}

        self._classifier = ClassificationEngine()
        self._inheritance = InheritanceResolver()
        self._conventions = ConventionEngine()
        self._binder = NavigationBindingResolver()
        self._pruner = Pruner()

    @property
    def provider(self) -> TypeMetadataProvider:
        return self._provider

    # ── Registration ─────────────────────────────────────────────────

    def _register(self, type_or_name: Any, kind: StructuralKind) -> StructuralTypeConfiguration:
        full_name = self._provider.identity_of(type_or_name)
        config = self._types.get(full_name)
        if config is None:
            config = StructuralTypeConfiguration(
                full_name=full_name, kind=kind, added_explicitly=True,
            )
            self._types[full_name] = config
        elif config.kind != kind:
            self._kind_conflicts.append(KindConflict(full_name, kind, config.kind))
        return config

    def entity_type(self, type_or_name: Any) -> StructuralTypeConfiguration:
        """Register a type as an entity type."""
        return self._register(type_or_name, StructuralKind.ENTITY)

    def complex_type(self, type_or_name: Any) -> StructuralTypeConfiguration:
        """Register a type as a complex type."""
        return self._register(type_or_name, StructuralKind.COMPLEX)

    def _add_source(self, name: str, type_or_name: Any, kind: NavigationSourceKind) -> NavigationSourceConfiguration:
        config = self.entity_type(type_or_name)
        source = NavigationSourceConfiguration(name=name, entity_type=config.full_name, kind=kind)
        self._sources[name] = source
        return source

    def entity_set(self, name: str, type_or_name: Any) -> NavigationSourceConfiguration:
        """Expose an entity set; its element type is registered as an entity type."""
        return self._add_source(name, type_or_name, NavigationSourceKind.ENTITY_SET)

    def singleton(self, name: str, type_or_name: Any) -> NavigationSourceConfiguration:
        """Expose a singleton; its type is registered as an entity type."""
        return self._add_source(name, type_or_name, NavigationSourceKind.SINGLETON)

    def ignore(self, *types: Any) -> None:
        """Keep types (and derived types reached only through them) out of the model."""
        for type_or_name in types:
            self._ignored.add(self._provider.identity_of(type_or_name))

    def is_ignored_type(self, type_or_name: Any) -> bool:
        return self._provider.identity_of(type_or_name) in self._ignored

    def get(self, type_or_name: Any) -> StructuralTypeConfiguration | None:
        return self._types.get(self._provider.identity_of(type_or_name))

    @property
    def structural_types(self) -> tuple[StructuralTypeConfiguration, ...]:
        return tuple(self._types.values())

    @property
    def navigation_sources(self) -> tuple[NavigationSourceConfiguration, ...]:
        return tuple(self._sources.values())

    # ── Build ────────────────────────────────────────────────────────

    def _create_context(self) -> BuildContext:
        explicit_types = {name: config.copy() for name, config in self._types.items()}
        for config in explicit_types.values():
            # derives_from() accepts whatever handle the provider understands
            if config.base_type is not None:
                config.base_type = self._provider.identity_of(config.base_type)
        return BuildContext(
            provider=self._provider,
            namespace=self.namespace,
            container_name=self.container_name,
            query_composition_mode=self.query_composition_mode,
            model_aliasing_enabled=self.model_aliasing_enabled,
            explicit_types=explicit_types,
            kind_conflicts=list(self._kind_conflicts),
            ignored_types=set(self._ignored),
            navigation_sources=[source.copy() for source in self._sources.values()],
        )

    def build(self) -> SchemaGraph:
        """Run the full pipeline and return the finalized schema graph."""
        ctx = self._create_context()
        blog.step_start(
            BuildStage.BUILD, "Building schema graph",
            registered=len(ctx.explicit_types), sources=len(ctx.navigation_sources),
        )

        with blog.timed_step(BuildStage.CLASSIFY, "Classifying reachable types"):
            self._classifier.run(ctx)
        with blog.timed_step(BuildStage.INHERITANCE, "Resolving inheritance"):
            self._inheritance.run(ctx)
        with blog.timed_step(BuildStage.CONVENTIONS, "Applying conventions"):
            self._conventions.run(ctx)
        if self.on_model_creating is not None:
            with blog.timed_step(BuildStage.HOOK, "Running on_model_creating"):
                self.on_model_creating(ctx)
        with blog.timed_step(BuildStage.BINDING, "Binding navigation sources"):
            self._binder.run(ctx)
        with blog.timed_step(BuildStage.PRUNE, "Pruning unreachable types"):
            self._pruner.run(ctx)

        with blog.timed_step(BuildStage.FINALIZE, "Finalizing schema graph"):
            container = EntityContainer(
                name=ctx.container_name,
                namespace=ctx.namespace,
                entity_sets=tuple(s.name for s in ctx.navigation_sources if not s.is_singleton),
                singletons=tuple(s.name for s in ctx.navigation_sources if s.is_singleton),
            )
            graph = SchemaGraph(
                structural_types=list(ctx.structural_types.values()),
                enum_types=list(ctx.enum_types.values()),
                navigation_sources=ctx.navigation_sources,
                bindings=ctx.bindings,
                container=container,
                identity_resolver=self._provider.identity_of,
            )

        blog.stats(
            entity_types=len(graph.entity_types),
            complex_types=len(graph.complex_types),
            enum_types=len(graph.enum_types),
            sources=len(graph.navigation_sources),
            bindings=len(ctx.bindings),
        )
        return graph

"""Schema export service: maps a built ``SchemaGraph`` onto pydantic read models."""

from convention_model.application.schemas import (
    EnumTypeSchema,
    NavigationBindingSchema,
    NavigationSourceSchema,
    PropertySchema,
    SchemaGraphSchema,
    StructuralTypeSchema,
)
from convention_model.domain.entities import (
    ConcurrencyMode,
    EnumTypeConfiguration,
    PropertyConfiguration,
    SchemaGraph,
    StructuralTypeConfiguration,
)


class SchemaExportService:
    """Renders a schema graph for consumers that want plain data.

    The graph itself stays the source of truth; the export is a snapshot
    suitable for ``model_dump()`` / ``model_dump_json()``.
    """

    def export(self, graph: SchemaGraph) -> SchemaGraphSchema:
        container = graph.container
        return SchemaGraphSchema(
            namespace=container.namespace,
            container=container.name,
            structural_types=[self._structural_type(graph, t) for t in graph.structural_types],
            enum_types=[self._enum_type(e) for e in graph.enum_types],
            navigation_sources=[
                NavigationSourceSchema(name=s.name, kind=s.kind.value, entity_type=s.entity_type)
                for s in graph.navigation_sources
            ],
            bindings=[
                NavigationBindingSchema(
                    source=b.source,
                    path=b.path,
                    declaring_type=b.declaring_type,
                    navigation_property=b.navigation_property,
                    target=b.target,
                    target_kind=b.target_kind.value,
                )
                for s in graph.navigation_sources
                for b in graph.bindings_for(s.name)
            ],
        )

    def _structural_type(self, graph: SchemaGraph, config: StructuralTypeConfiguration) -> StructuralTypeSchema:
        container = config.dynamic_property_container
        return StructuralTypeSchema(
            full_name=config.full_name,
            name=config.name,
            namespace=config.namespace,
            kind=config.kind.value,
            base_type=config.base_type,
            abstract=bool(config.is_abstract),
            open=graph.is_open(config.full_name),
            has_stream=config.has_stream,
            keys=list(config.keys),
            properties=[self._property(p) for p in config.properties.values()],
            dynamic_property_container=container.name if container is not None else None,
        )

    @staticmethod
    def _property(prop: PropertyConfiguration) -> PropertySchema:
        return PropertySchema(
            name=prop.name,
            member_name=prop.member_name,
            kind=prop.kind.value if prop.kind else "unknown",
            type=prop.type_ref.describe() if prop.type_ref else "",
            target_type=prop.target_type,
            nullable=bool(prop.nullable),
            added_explicitly=prop.added_explicitly,
            concurrency_token=prop.concurrency_mode == ConcurrencyMode.FIXED,
            not_filterable=prop.not_filterable,
            not_sortable=prop.not_sortable,
            not_navigable=prop.not_navigable,
            not_expandable=prop.not_expandable,
            not_countable=prop.not_countable,
            multiplicity=prop.multiplicity.value if prop.multiplicity else None,
            contains_target=prop.contains_target,
            dependent_properties=list(prop.dependent_properties),
            principal_properties=list(prop.principal_properties),
        )

    @staticmethod
    def _enum_type(enum: EnumTypeConfiguration) -> EnumTypeSchema:
        return EnumTypeSchema(
            full_name=enum.full_name,
            name=enum.name,
            namespace=enum.namespace,
            members=list(enum.members),
        )

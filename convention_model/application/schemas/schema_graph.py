"""Pydantic read models of a built schema graph."""

from pydantic import BaseModel


class PropertySchema(BaseModel):
    name: str
    member_name: str
    kind: str
    type: str
    target_type: str | None = None
    nullable: bool
    added_explicitly: bool = False
    concurrency_token: bool = False
    not_filterable: bool = False
    not_sortable: bool = False
    not_navigable: bool = False
    not_expandable: bool = False
    not_countable: bool = False
    multiplicity: str | None = None
    contains_target: bool = False
    dependent_properties: list[str] = []
    principal_properties: list[str] = []


class StructuralTypeSchema(BaseModel):
    """An entity or complex type with only the properties its own level declares."""

    full_name: str
    name: str
    namespace: str
    kind: str
    base_type: str | None = None
    abstract: bool
    open: bool = False
    has_stream: bool = False
    keys: list[str] = []
    properties: list[PropertySchema]
    dynamic_property_container: str | None = None


class EnumTypeSchema(BaseModel):
    full_name: str
    name: str
    namespace: str
    members: list[str]


class NavigationSourceSchema(BaseModel):
    name: str
    kind: str
    entity_type: str


class NavigationBindingSchema(BaseModel):
    source: str
    path: str
    declaring_type: str
    navigation_property: str
    target: str
    target_kind: str


class SchemaGraphSchema(BaseModel):
    """Whole-graph export, grouped the way a metadata document lists it."""

    namespace: str
    container: str
    structural_types: list[StructuralTypeSchema]
    enum_types: list[EnumTypeSchema]
    navigation_sources: list[NavigationSourceSchema]
    bindings: list[NavigationBindingSchema]

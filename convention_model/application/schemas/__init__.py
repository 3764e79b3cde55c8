from .schema_graph import (
    EnumTypeSchema,
    NavigationBindingSchema,
    NavigationSourceSchema,
    PropertySchema,
    SchemaGraphSchema,
    StructuralTypeSchema,
)

__all__ = [
    "EnumTypeSchema",
    "NavigationBindingSchema",
    "NavigationSourceSchema",
    "PropertySchema",
    "SchemaGraphSchema",
    "StructuralTypeSchema",
]

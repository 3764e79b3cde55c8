from .type_descriptor import (
    EnumDescriptor,
    MemberDescriptor,
    PrimitiveKind,
    TypeDescriptor,
    TypeRef,
    ValueShape,
)
from .annotations import (
    Annotation,
    ComplexTypeMarker,
    ConcurrencyCheck,
    Contained,
    DataContract,
    DataMember,
    ForeignKey,
    Key,
    MediaType,
    NonFilterable,
    NotCountable,
    NotExpandable,
    NotFilterable,
    NotMapped,
    NotNavigable,
    NotSortable,
    Primitive,
    Required,
    Timestamp,
    Unsortable,
)
from .configuration import (
    ConcurrencyMode,
    Multiplicity,
    NavigationBinding,
    NavigationSourceConfiguration,
    NavigationSourceKind,
    PropertyConfiguration,
    PropertyKind,
    StructuralKind,
    StructuralTypeConfiguration,
)
from .schema_graph import EntityContainer, EnumTypeConfiguration, SchemaGraph

__all__ = [
    "EnumDescriptor",
    "MemberDescriptor",
    "PrimitiveKind",
    "TypeDescriptor",
    "TypeRef",
    "ValueShape",
    "Annotation",
    "ComplexTypeMarker",
    "ConcurrencyCheck",
    "Contained",
    "DataContract",
    "DataMember",
    "ForeignKey",
    "Key",
    "MediaType",
    "NonFilterable",
    "NotCountable",
    "NotExpandable",
    "NotFilterable",
    "NotMapped",
    "NotNavigable",
    "NotSortable",
    "Primitive",
    "Required",
    "Timestamp",
    "Unsortable",
    "ConcurrencyMode",
    "Multiplicity",
    "NavigationBinding",
    "NavigationSourceConfiguration",
    "NavigationSourceKind",
    "PropertyConfiguration",
    "PropertyKind",
    "StructuralKind",
    "StructuralTypeConfiguration",
    "EntityContainer",
    "EnumTypeConfiguration",
    "SchemaGraph",
]

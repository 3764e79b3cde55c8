"""Type metadata vocabulary: what a metadata provider reports about application types.

Descriptors are read-only snapshots owned by the provider. The builder never
mutates them; it refers to them by ``full_name``.
"""

from dataclasses import dataclass, field
from enum import Enum


class PrimitiveKind(str, Enum):
    """Primitive value types the schema can express."""

    BOOLEAN = "boolean"
    BYTE = "byte"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    SINGLE = "single"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    BINARY = "binary"
    GUID = "guid"
    DATE = "date"
    TIME_OF_DAY = "time_of_day"
    DATE_TIME_OFFSET = "date_time_offset"
    DURATION = "duration"


class ValueShape(str, Enum):
    """Broad shape of a member's value type."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    STRUCTURED = "structured"
    COLLECTION = "collection"
    DICTIONARY = "dictionary"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class TypeRef:
    """Reference to the value type of a member.

    ``name`` holds the primitive kind value for primitives and the full
    name of the target type for enums and structured types. ``element``
    is the collection element (or dictionary value) and ``key`` the
    dictionary key.
    """

    shape: ValueShape
    name: str = ""
    element: "TypeRef | None" = None
    key: "TypeRef | None" = None
    nullable: bool = False

    @classmethod
    def primitive(cls, kind: PrimitiveKind | str, nullable: bool = False) -> "TypeRef":
        return cls(ValueShape.PRIMITIVE, PrimitiveKind(kind).value, nullable=nullable)

    @classmethod
    def enum(cls, full_name: str, nullable: bool = False) -> "TypeRef":
        return cls(ValueShape.ENUM, full_name, nullable=nullable)

    @classmethod
    def structured(cls, full_name: str, nullable: bool = False) -> "TypeRef":
        return cls(ValueShape.STRUCTURED, full_name, nullable=nullable)

    @classmethod
    def collection(cls, element: "TypeRef", nullable: bool = False) -> "TypeRef":
        return cls(ValueShape.COLLECTION, element=element, nullable=nullable)

    @classmethod
    def dictionary(cls, key: "TypeRef", value: "TypeRef", nullable: bool = False) -> "TypeRef":
        return cls(ValueShape.DICTIONARY, key=key, element=value, nullable=nullable)

    @classmethod
    def opaque(cls, nullable: bool = True) -> "TypeRef":
        return cls(ValueShape.OPAQUE, "object", nullable=nullable)

    def with_nullable(self, nullable: bool) -> "TypeRef":
        return TypeRef(self.shape, self.name, self.element, self.key, nullable)

    @property
    def is_dynamic_container(self) -> bool:
        """True for a string-keyed map of opaque values."""
        return (
            self.shape == ValueShape.DICTIONARY
            and self.key is not None
            and self.key.shape == ValueShape.PRIMITIVE
            and self.key.name == PrimitiveKind.STRING.value
            and self.element is not None
            and self.element.shape == ValueShape.OPAQUE
        )

    def describe(self) -> str:
        """Render the reference as a short type expression."""
        if self.shape == ValueShape.COLLECTION and self.element is not None:
            text = f"Collection({self.element.describe()})"
        elif self.shape == ValueShape.DICTIONARY and self.key and self.element:
            text = f"Dictionary({self.key.describe()}, {self.element.describe()})"
        else:
            text = self.name
        return f"{text}?" if self.nullable and self.shape != ValueShape.OPAQUE else text


@dataclass(frozen=True)
class MemberDescriptor:
    """A member declared directly on a type."""

    name: str
    type_ref: TypeRef
    annotations: tuple = ()

    def find_annotation(self, annotation_type: type):
        """Return the first annotation of the given type, or None."""
        for annotation in self.annotations:
            if isinstance(annotation, annotation_type):
                return annotation
        return None

    def has_annotation(self, *annotation_types: type) -> bool:
        return any(isinstance(a, annotation_types) for a in self.annotations)


@dataclass(frozen=True)
class TypeDescriptor:
    """A structured application type as reported by the metadata provider.

    ``members`` lists only the members the type declares itself; inherited
    members live on the descriptors of its ancestors.
    """

    name: str
    namespace: str
    base: str | None = None
    members: tuple[MemberDescriptor, ...] = ()
    annotations: tuple = ()
    is_abstract: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    def member(self, name: str) -> MemberDescriptor | None:
        for member in self.members:
            if member.name == name:
                return member
        return None

    def find_annotation(self, annotation_type: type):
        for annotation in self.annotations:
            if isinstance(annotation, annotation_type):
                return annotation
        return None


@dataclass(frozen=True)
class EnumDescriptor:
    """An enumerated value type."""

    name: str
    namespace: str
    members: tuple[str, ...] = field(default_factory=tuple)

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

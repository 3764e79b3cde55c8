"""Annotations a metadata provider can attach to types and members.

Member annotations are usually written with ``typing.Annotated``::

    ID: Annotated[int, Key()]
    Name: Annotated[str | None, NotFilterable(), DataMember(name="title")]

Type annotations travel on the type descriptor (see ``annotate_type`` in the
class metadata provider).
"""

from dataclasses import dataclass

from .type_descriptor import PrimitiveKind


class Annotation:
    """Base class for every schema annotation."""

    label: str = ""


# ── Member annotations ──────────────────────────────────────────────

@dataclass(frozen=True)
class Key(Annotation):
    """Marks a member as part of the entity key."""

    label = "key"


@dataclass(frozen=True)
class NotMapped(Annotation):
    """Excludes a member from the schema."""

    label = "not_mapped"


@dataclass(frozen=True)
class Required(Annotation):
    """Makes a member non-nullable."""

    label = "required"


@dataclass(frozen=True)
class ConcurrencyCheck(Annotation):
    label = "concurrency_check"


@dataclass(frozen=True)
class Timestamp(Annotation):
    label = "timestamp"


@dataclass(frozen=True)
class NotFilterable(Annotation):
    label = "not_filterable"


@dataclass(frozen=True)
class NonFilterable(NotFilterable):
    label = "non_filterable"


@dataclass(frozen=True)
class NotSortable(Annotation):
    label = "not_sortable"


@dataclass(frozen=True)
class Unsortable(NotSortable):
    label = "unsortable"


@dataclass(frozen=True)
class NotNavigable(Annotation):
    label = "not_navigable"


@dataclass(frozen=True)
class NotExpandable(Annotation):
    label = "not_expandable"


@dataclass(frozen=True)
class NotCountable(Annotation):
    label = "not_countable"


@dataclass(frozen=True)
class ForeignKey(Annotation):
    """Names the dependent property holding a navigation's foreign key."""

    name: str = ""
    label = "foreign_key"


@dataclass(frozen=True)
class Contained(Annotation):
    """Marks a navigation as containment."""

    label = "contained"


@dataclass(frozen=True)
class DataMember(Annotation):
    """Opts a member into an aliased type, optionally renaming it."""

    name: str | None = None
    label = "data_member"


@dataclass(frozen=True)
class Primitive(Annotation):
    """Overrides the primitive kind inferred for a member (e.g. int64 for ``int``)."""

    kind: PrimitiveKind = PrimitiveKind.INT32
    label = "primitive"


# ── Type annotations ────────────────────────────────────────────────

@dataclass(frozen=True)
class ComplexTypeMarker(Annotation):
    """Forces a type to be classified as complex."""

    label = "complex_type"


@dataclass(frozen=True)
class MediaType(Annotation):
    """Marks an entity type as carrying a media stream."""

    label = "media_type"


@dataclass(frozen=True)
class DataContract(Annotation):
    """Renames a type (and optionally its namespace) when aliasing is enabled."""

    name: str | None = None
    namespace: str | None = None
    label = "data_contract"


MEMBER_ANNOTATIONS: dict[str, type[Annotation]] = {
    cls.label: cls
    for cls in (
        Key, NotMapped, Required, ConcurrencyCheck, Timestamp,
        NotFilterable, NonFilterable, NotSortable, Unsortable,
        NotNavigable, NotExpandable, NotCountable,
        ForeignKey, Contained, DataMember, Primitive,
    )
}

TYPE_ANNOTATIONS: dict[str, type[Annotation]] = {
    cls.label: cls for cls in (ComplexTypeMarker, MediaType, DataContract)
}

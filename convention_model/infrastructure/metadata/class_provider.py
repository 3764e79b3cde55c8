"""Class metadata provider: describes plain Python classes from their type hints.

Members come from a class's own annotations, resolved with
``typing.get_type_hints(include_extras=True)`` so ``Annotated`` metadata
survives::

    @annotate_type(MediaType())
    class Photo:
        ID: Annotated[int, Key()]
        Title: str | None
        Tags: list[str]

Classes the provider is created with (or finds in the given modules) form
the registered metadata namespace; classes only reached through a member
or a base class are described on demand but never offered as derived types.
"""

import enum
import inspect
import logging
import types
import typing
import uuid
from abc import ABC
from collections import abc as collections_abc
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from convention_model.application.interfaces import TypeMetadataProvider
from convention_model.domain.entities import (
    Annotation,
    EnumDescriptor,
    MemberDescriptor,
    PrimitiveKind,
    TypeDescriptor,
    TypeRef,
)

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[type, PrimitiveKind] = {
    bool: PrimitiveKind.BOOLEAN,
    int: PrimitiveKind.INT32,
    float: PrimitiveKind.DOUBLE,
    Decimal: PrimitiveKind.DECIMAL,
    str: PrimitiveKind.STRING,
    bytes: PrimitiveKind.BINARY,
    bytearray: PrimitiveKind.BINARY,
    uuid.UUID: PrimitiveKind.GUID,
    datetime: PrimitiveKind.DATE_TIME_OFFSET,
    date: PrimitiveKind.DATE,
    time: PrimitiveKind.TIME_OF_DAY,
    timedelta: PrimitiveKind.DURATION,
}

_COLLECTION_ORIGINS = (
    list, set, frozenset, tuple,
    collections_abc.Sequence, collections_abc.MutableSequence,
    collections_abc.Set, collections_abc.MutableSet,
    collections_abc.Collection, collections_abc.Iterable,
)

_MAPPING_ORIGINS = (dict, collections_abc.Mapping, collections_abc.MutableMapping)

# Bases that carry no schema meaning
_IGNORED_BASES = (object, ABC, typing.Generic)


def annotate_type(*annotations: Annotation):
    """Class decorator attaching type-level annotations (e.g. ``ComplexTypeMarker()``)."""

    def decorator(cls: type) -> type:
        existing = tuple(cls.__dict__.get("__schema_annotations__", ()))
        cls.__schema_annotations__ = existing + annotations
        return cls

    return decorator


class ClassTypeMetadataProvider(TypeMetadataProvider):
    """Provider over Python classes, optionally collected from whole modules.

    Args:
        classes: Classes to register explicitly.
        modules: Modules whose own classes are registered.
        namespace: Namespace for every class; defaults to the class's module.
    """

    def __init__(
        self,
        classes: list[type] | None = None,
        modules: list[types.ModuleType] | None = None,
        namespace: str | None = None,
    ):
        self._namespace = namespace
        self._classes: dict[str, type] = {}
        self._registered: list[str] = []
        self._enums: dict[str, type[enum.Enum]] = {}
        self._descriptors: dict[str, TypeDescriptor] = {}

        candidates = list(classes or [])
        for module in modules or []:
            candidates.extend(
                obj for _, obj in inspect.getmembers(module, inspect.isclass)
                if obj.__module__ == module.__name__
            )
        for cls in candidates:
            if issubclass(cls, enum.Enum):
                self._remember_enum(cls)
            elif not issubclass(cls, BaseException):
                full_name = self._remember(cls)
                if full_name not in self._registered:
                    self._registered.append(full_name)

        logger.debug("Registered %d classes and %d enums", len(self._registered), len(self._enums))

    # ── Identity ─────────────────────────────────────────────────────

    def _full_name(self, cls: type) -> str:
        return f"{self._namespace or cls.__module__}.{cls.__name__}"

    def _remember(self, cls: type) -> str:
        full_name = self._full_name(cls)
        known = self._classes.setdefault(full_name, cls)
        if known is not cls:
            logger.warning("Two classes share the identity %s; keeping %r", full_name, known)
        return full_name

    def _remember_enum(self, cls: type[enum.Enum]) -> str:
        full_name = self._full_name(cls)
        self._enums.setdefault(full_name, cls)
        return full_name

    def identity_of(self, type_or_name: Any) -> str:
        if isinstance(type_or_name, str):
            return type_or_name
        if inspect.isclass(type_or_name):
            if issubclass(type_or_name, enum.Enum):
                return self._remember_enum(type_or_name)
            return self._remember(type_or_name)
        raise TypeError(f"Cannot derive a type identity from {type_or_name!r}")

    # ── Lookups ──────────────────────────────────────────────────────

    def get_type(self, full_name: str) -> TypeDescriptor | None:
        if full_name in self._descriptors:
            return self._descriptors[full_name]
        cls = self._classes.get(full_name)
        if cls is None:
            return None
        descriptor = self._describe(cls)
        self._descriptors[full_name] = descriptor
        return descriptor

    def get_enum(self, full_name: str) -> EnumDescriptor | None:
        cls = self._enums.get(full_name)
        if cls is None:
            return None
        namespace, _, name = full_name.rpartition(".")
        return EnumDescriptor(name=name, namespace=namespace, members=tuple(m.name for m in cls))

    def registered_types(self) -> list[TypeDescriptor]:
        return [self.get_type(name) for name in self._registered]

    # ── Class introspection ──────────────────────────────────────────

    def _describe(self, cls: type) -> TypeDescriptor:
        base = self._schema_base(cls)
        return TypeDescriptor(
            name=cls.__name__,
            namespace=self._namespace or cls.__module__,
            base=self._remember(base) if base is not None else None,
            members=self._members(cls),
            annotations=tuple(cls.__dict__.get("__schema_annotations__", ())),
            is_abstract=ABC in cls.__bases__ or inspect.isabstract(cls),
        )

    @staticmethod
    def _schema_base(cls: type) -> type | None:
        for base in cls.__bases__:
            if base in _IGNORED_BASES or base.__module__ in ("builtins", "typing", "abc"):
                continue
            return base
        return None

    def _members(self, cls: type) -> tuple[MemberDescriptor, ...]:
        own = inspect.get_annotations(cls)
        try:
            hints = typing.get_type_hints(cls, localns=self._local_names(), include_extras=True)
        except NameError:
            logger.warning("Could not resolve every type hint of %s", cls.__qualname__, exc_info=True)
            hints = {}

        members = []
        for name in own:
            if name.startswith("_"):
                continue
            hint = hints.get(name, Any)
            if typing.get_origin(hint) is typing.ClassVar or hint is typing.ClassVar:
                continue
            annotations: tuple = ()
            if typing.get_origin(hint) is typing.Annotated:
                hint, *extras = typing.get_args(hint)
                annotations = tuple(a for a in extras if isinstance(a, Annotation))
            members.append(MemberDescriptor(name, self._type_ref(hint), annotations))
        return tuple(members)

    def _local_names(self) -> dict[str, type]:
        names = {cls.__name__: cls for cls in self._classes.values()}
        names.update({cls.__name__: cls for cls in self._enums.values()})
        return names

    def _type_ref(self, hint: Any) -> TypeRef:
        """Map a resolved type hint onto a ``TypeRef``."""
        origin = typing.get_origin(hint)
        args = typing.get_args(hint)

        if origin is typing.Annotated:
            return self._type_ref(args[0])
        if origin in (typing.Union, types.UnionType):
            present = [a for a in args if a is not type(None)]
            if len(present) == 1:
                return self._type_ref(present[0]).with_nullable(True)
            return TypeRef.opaque()

        if hint is Any or hint is object:
            return TypeRef.opaque()
        if hint in _PRIMITIVES:
            return TypeRef.primitive(_PRIMITIVES[hint])

        if origin in _COLLECTION_ORIGINS:
            if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
                return TypeRef.collection(TypeRef.opaque())
            element = self._type_ref(args[0]) if args else TypeRef.opaque()
            return TypeRef.collection(element)
        if origin in _MAPPING_ORIGINS:
            key = self._type_ref(args[0]) if args else TypeRef.primitive(PrimitiveKind.STRING)
            value = self._type_ref(args[1]) if len(args) > 1 else TypeRef.opaque()
            return TypeRef.dictionary(key, value)

        if not inspect.isclass(hint):
            return TypeRef.opaque()
        if issubclass(hint, enum.Enum):
            return TypeRef.enum(self._remember_enum(hint))
        if issubclass(hint, dict):
            return TypeRef.dictionary(TypeRef.primitive(PrimitiveKind.STRING), TypeRef.opaque())
        if hint in (list, set, frozenset, tuple):
            return TypeRef.collection(TypeRef.opaque())
        return TypeRef.structured(self._remember(hint))

"""Plain classes described through ClassTypeMetadataProvider in the provider tests."""

import enum
from abc import ABC
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar
from uuid import UUID

from convention_model.domain.entities import (
    ComplexTypeMarker,
    Key,
    MediaType,
    NotMapped,
    Primitive,
    PrimitiveKind,
)
from convention_model.infrastructure.metadata import annotate_type


class CategoryKind(enum.Enum):
    FOOD = 1
    HARDWARE = 2


class Category:
    ID: int
    Name: str | None
    Kind: CategoryKind


@annotate_type(ComplexTypeMarker())
class ProductVersion:
    Major: int
    Minor: int


class Product:
    ID: Annotated[int, Key()]
    Name: str | None
    Price: Decimal
    Sku: UUID
    Created: datetime
    Views: Annotated[int, Primitive(PrimitiveKind.INT64)]
    Version: ProductVersion
    Category: Category | None
    Tags: list[str]
    Ratings: tuple[int, ...]
    Extras: dict[str, Any]
    Legacy: Annotated[str, NotMapped()]

    registry: ClassVar[dict] = {}
    _cache: dict


class Vehicle(ABC):
    Model: Annotated[int, Key()]
    Name: Annotated[str, Key()]


class Car(Vehicle):
    SeatingCapacity: int


@annotate_type(MediaType())
class Photo:
    Id: int
    Data: bytes

"""Descriptor catalogs shared by the builder unit tests.

Every type lives in the ``Sample`` namespace. Each ``make_*`` function
returns a fresh in-memory provider.
"""

from convention_model.config import Settings
from convention_model.application.services import ConventionModelBuilder
from convention_model.domain.entities import (
    EnumDescriptor,
    Key,
    MemberDescriptor,
    PrimitiveKind,
    TypeDescriptor,
    TypeRef,
)
from convention_model.infrastructure.metadata import InMemoryTypeMetadataProvider

NS = "Sample"

INT = TypeRef.primitive(PrimitiveKind.INT32)
BOOL = TypeRef.primitive(PrimitiveKind.BOOLEAN)
TEXT = TypeRef.primitive(PrimitiveKind.STRING, nullable=True)
REQUIRED_TEXT = TypeRef.primitive(PrimitiveKind.STRING)
OPEN_PROPERTIES = TypeRef.dictionary(REQUIRED_TEXT, TypeRef.opaque())


def q(name: str) -> str:
    """Qualify a type name with the sample namespace."""
    return f"{NS}.{name}"


def ref(name: str, nullable: bool = True) -> TypeRef:
    return TypeRef.structured(q(name), nullable=nullable)


def many(name: str) -> TypeRef:
    return TypeRef.collection(TypeRef.structured(q(name)))


def enum_ref(name: str) -> TypeRef:
    return TypeRef.enum(q(name))


def member(name: str, type_ref: TypeRef, *annotations) -> MemberDescriptor:
    return MemberDescriptor(name, type_ref, tuple(annotations))


def make_type(
    name: str,
    *members: MemberDescriptor,
    base: str | None = None,
    abstract: bool = False,
    annotations: tuple = (),
) -> TypeDescriptor:
    return TypeDescriptor(
        name=name,
        namespace=NS,
        base=q(base) if base else None,
        members=members,
        annotations=annotations,
        is_abstract=abstract,
    )


def make_enum(name: str, *members: str) -> EnumDescriptor:
    return EnumDescriptor(name=name, namespace=NS, members=members)


def make_provider(*types: TypeDescriptor, enums: tuple = ()) -> InMemoryTypeMetadataProvider:
    return InMemoryTypeMetadataProvider(list(types), list(enums))


def make_builder(provider, **options) -> ConventionModelBuilder:
    return ConventionModelBuilder(provider, Settings(), namespace=NS, **options)


# ── Products ─────────────────────────────────────────────────────────

def make_products_provider() -> InMemoryTypeMetadataProvider:
    return make_provider(
        make_type(
            "Product",
            member("ID", INT),
            member("Name", TEXT),
            member("Version", ref("ProductVersion", nullable=False)),
            member("Category", ref("Category")),
        ),
        make_type("ProductVersion", member("Major", INT), member("Minor", INT)),
        make_type(
            "Category",
            member("ID", INT),
            member("Name", TEXT),
            member("Kind", enum_ref("CategoryKind")),
        ),
        enums=(make_enum("CategoryKind", "Food", "Hardware"),),
    )


# ── Vehicles ─────────────────────────────────────────────────────────

def make_vehicles_provider() -> InMemoryTypeMetadataProvider:
    """Vehicle hierarchy; ``Manufacturer`` is only reachable as a base type."""
    return make_provider(
        make_type(
            "Vehicle",
            member("Model", INT, Key()),
            member("Name", REQUIRED_TEXT, Key()),
            member("WheelCount", INT),
            abstract=True,
        ),
        make_type(
            "Motorcycle",
            member("CanDoAWheelie", BOOL),
            member("Manufacturer", ref("MotorcycleManufacturer")),
            base="Vehicle",
        ),
        make_type("SportBike", member("TopSpeed", INT), base="Motorcycle"),
        make_type(
            "Car",
            member("SeatingCapacity", INT),
            member("Manufacturer", ref("CarManufacturer")),
            base="Vehicle",
        ),
        make_type(
            "Manufacturer",
            member("Id", INT),
            member("Name", TEXT),
            member("Address", ref("ManufacturerAddress")),
        ),
        make_type("CarManufacturer", base="Manufacturer"),
        make_type("MotorcycleManufacturer", base="Manufacturer"),
        make_type("ManufacturerAddress", member("Street", TEXT), member("City", TEXT)),
        make_type("CarManufacturerAddress", member("Plant", TEXT), base="ManufacturerAddress"),
        make_type("MotorcycleManufacturerAddress", member("Garage", TEXT), base="ManufacturerAddress"),
    )


# ── Zoo ──────────────────────────────────────────────────────────────

def make_zoo_provider() -> InMemoryTypeMetadataProvider:
    """Creature → Animal → {Human, Horse}; Zoo and ZooHorse refer into the hierarchy."""
    return make_provider(
        make_type("Creature", member("Id", INT)),
        make_type("Animal", member("Age", INT), base="Creature"),
        make_type("Human", member("Name", TEXT), base="Animal"),
        make_type("Horse", member("Breed", TEXT), base="Animal"),
        make_type("Zoo", member("Id", INT), member("SpecialAnimal", ref("Animal"))),
        make_type(
            "ZooHorse",
            member("Id", INT),
            member("Horse", ref("Horse")),
            member("Animal", ref("Animal")),
        ),
    )


# ── Plants ───────────────────────────────────────────────────────────

def make_plants_provider() -> InMemoryTypeMetadataProvider:
    """Plant → {OceanPlant → {Phycophyta, Mangrove}, LandPlant → {Flower → Jasmine, Tree}}."""
    return make_provider(
        make_type("Plant", member("Name", TEXT)),
        make_type("OceanPlant", member("Depth", INT), base="Plant"),
        make_type("Phycophyta", base="OceanPlant"),
        make_type("Mangrove", base="OceanPlant"),
        make_type("LandPlant", member("Height", INT), base="Plant"),
        make_type("Flower", member("Color", TEXT), base="LandPlant"),
        make_type("Jasmine", base="Flower"),
        make_type("Tree", base="LandPlant"),
        make_type("PlantPark", member("Id", INT), member("Plant", ref("Plant"))),
        make_type(
            "PlantParkWithOceanPlantAndJasmine",
            member("Id", INT),
            member("OceanPant", ref("OceanPlant")),
            member("Jaemine", ref("Jasmine")),
        ),
    )

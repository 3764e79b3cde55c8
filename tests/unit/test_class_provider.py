"""Unit tests for ClassTypeMetadataProvider."""

import pytest

import shop_models
from shop_models import Car, Category, CategoryKind, Photo, Product, ProductVersion, Vehicle

from convention_model.application.services import ConventionModelBuilder
from convention_model.config import Settings
from convention_model.domain.entities import (
    ComplexTypeMarker,
    Key,
    NotMapped,
    Primitive,
    PrimitiveKind,
    PropertyKind,
    StructuralKind,
    ValueShape,
)
from convention_model.infrastructure.metadata import ClassTypeMetadataProvider


@pytest.fixture
def provider():
    return ClassTypeMetadataProvider(modules=[shop_models], namespace="Shop")


def _builder(provider) -> ConventionModelBuilder:
    return ConventionModelBuilder(provider, Settings(_env_file=None), namespace="Shop")


class TestRegistration:
    def test_module_classes_are_registered(self, provider):
        names = [d.full_name for d in provider.registered_types()]

        assert names == sorted(names)
        assert set(names) == {
            "Shop.Car", "Shop.Category", "Shop.Photo",
            "Shop.Product", "Shop.ProductVersion", "Shop.Vehicle",
        }
        assert provider.get_enum("Shop.CategoryKind").members == ("FOOD", "HARDWARE")

    def test_identity_defaults_to_module_name(self):
        provider = ClassTypeMetadataProvider(classes=[Product])

        assert provider.identity_of(Product) == "shop_models.Product"
        assert provider.identity_of("shop_models.Product") == "shop_models.Product"

    def test_identity_of_non_type_fails(self, provider):
        with pytest.raises(TypeError):
            provider.identity_of(42)

    def test_unregistered_class_is_described_on_demand(self):
        class Standalone:
            Id: int

        provider = ClassTypeMetadataProvider(namespace="Shop")

        assert provider.identity_of(Standalone) == "Shop.Standalone"
        assert provider.get_type("Shop.Standalone").member("Id") is not None
        assert provider.registered_types() == []


class TestDescriptors:
    def test_member_type_mapping(self, provider):
        product = provider.get_type(provider.identity_of(Product))

        def type_of(name):
            return product.member(name).type_ref

        assert type_of("ID").name == PrimitiveKind.INT32.value
        assert type_of("Name").nullable is True
        assert type_of("Price").name == PrimitiveKind.DECIMAL.value
        assert type_of("Sku").name == PrimitiveKind.GUID.value
        assert type_of("Created").name == PrimitiveKind.DATE_TIME_OFFSET.value
        assert type_of("Version").shape == ValueShape.STRUCTURED
        assert type_of("Version").name == "Shop.ProductVersion"
        assert type_of("Version").nullable is False
        assert type_of("Category").nullable is True
        assert type_of("Tags").shape == ValueShape.COLLECTION
        assert type_of("Tags").element.name == PrimitiveKind.STRING.value
        assert type_of("Ratings").element.name == PrimitiveKind.INT32.value
        assert type_of("Extras").is_dynamic_container

    def test_annotated_metadata_becomes_annotations(self, provider):
        product = provider.get_type("Shop.Product")

        assert product.member("ID").has_annotation(Key)
        assert product.member("Legacy").has_annotation(NotMapped)
        assert product.member("Views").find_annotation(Primitive).kind == PrimitiveKind.INT64

    def test_class_variables_and_private_names_are_skipped(self, provider):
        product = provider.get_type("Shop.Product")

        assert product.member("registry") is None
        assert product.member("_cache") is None

    def test_enum_members(self, provider):
        category = provider.get_type("Shop.Category")

        assert category.member("Kind").type_ref.shape == ValueShape.ENUM
        assert category.member("Kind").type_ref.name == "Shop.CategoryKind"

    def test_bases_and_abstract_flag(self, provider):
        vehicle = provider.get_type("Shop.Vehicle")
        car = provider.get_type("Shop.Car")

        assert vehicle.base is None
        assert vehicle.is_abstract is True
        assert car.base == "Shop.Vehicle"
        assert car.is_abstract is False
        assert [d.full_name for d in provider.derived_types("Shop.Vehicle")] == ["Shop.Car"]

    def test_type_annotations_from_decorator(self, provider):
        version = provider.get_type("Shop.ProductVersion")

        assert version.find_annotation(ComplexTypeMarker) is not None


class TestBuildFromClasses:
    def test_products_from_classes(self, provider):
        builder = _builder(provider)
        builder.entity_set("Products", Product)

        graph = builder.build()

        product = graph.get_type(Product)
        assert product.kind == StructuralKind.ENTITY
        assert product.keys == ("ID",)
        assert product.property("Views").type_ref.name == PrimitiveKind.INT64.value
        assert product.property("Version").kind == PropertyKind.COMPLEX
        assert product.property("Category").kind == PropertyKind.NAVIGATION
        assert product.property("Legacy") is None
        assert graph.is_open(Product)
        assert graph.get_type(ProductVersion).kind == StructuralKind.COMPLEX
        assert graph.get_type(Category).keys == ("ID",)
        assert graph.get_enum(CategoryKind).members == ("FOOD", "HARDWARE")
        assert Vehicle not in graph

    def test_hierarchy_from_classes(self, provider):
        builder = _builder(provider)
        builder.entity_set("Vehicles", Vehicle)

        graph = builder.build()

        assert graph.get_type(Car).base_type == "Shop.Vehicle"
        assert [k.name for k in graph.keys_of(Car)] == ["Model", "Name"]
        assert graph.get_type(Vehicle).is_abstract

    def test_media_type_from_decorator(self, provider):
        builder = _builder(provider)
        builder.entity_set("Photos", Photo)

        assert builder.build().get_type(Photo).has_stream

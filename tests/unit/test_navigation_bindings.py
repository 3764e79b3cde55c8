"""Unit tests for navigation bindings between entity sets and singletons."""

import pytest

from convention_model.domain.entities import Contained, NavigationSourceKind
from convention_model.domain.exceptions import MissingKeyError, UnknownTypeError

from sample_models import (
    INT,
    TEXT,
    make_builder,
    make_provider,
    make_type,
    make_vehicles_provider,
    many,
    member,
    q,
    ref,
)


class TestClosestSourceBinding:
    """Targets prefer an exact element type, then the closest base, then the closest derived type."""

    @pytest.fixture
    def graph(self):
        builder = make_builder(make_vehicles_provider())
        builder.entity_set("Vehicles", q("Vehicle"))
        builder.entity_set("Manufacturers", q("Manufacturer"))
        builder.entity_set("MotorcycleManufacturers", q("MotorcycleManufacturer"))
        return builder.build()

    def test_exact_match_wins(self, graph):
        binding = graph.find_binding("Vehicles", "Manufacturer", declaring_type=q("Motorcycle"))

        assert binding.target == "MotorcycleManufacturers"
        assert binding.target_kind == NavigationSourceKind.ENTITY_SET
        assert binding.path == "Sample.Motorcycle/Manufacturer"

    def test_closest_base_type_set_is_used(self, graph):
        binding = graph.find_binding("Vehicles", "Manufacturer", declaring_type=q("Car"))

        assert binding.declaring_type == q("Car")
        assert binding.target == "Manufacturers"

    def test_derived_type_sees_inherited_binding(self, graph):
        binding = graph.find_binding("Vehicles", "Manufacturer", declaring_type=q("SportBike"))

        assert binding.declaring_type == q("Motorcycle")
        assert binding.target == "MotorcycleManufacturers"

    def test_source_without_navigations_has_no_bindings(self, graph):
        assert len(graph.bindings_for("Vehicles")) == 2
        assert graph.bindings_for("Manufacturers") == ()

    def test_closest_derived_type_set_is_used(self):
        provider = make_vehicles_provider()
        provider.add(make_type("Dealer", member("Id", INT), member("Supplier", ref("Manufacturer"))))
        builder = make_builder(provider)
        builder.entity_set("Dealers", q("Dealer"))
        builder.entity_set("CarManufacturers", q("CarManufacturer"))

        binding = builder.build().find_binding("Dealers", "Supplier")

        assert binding.target == "CarManufacturers"
        assert binding.path == "Supplier"


class TestSingletonBinding:
    def test_singleton_used_when_no_entity_set_matches(self):
        builder = make_builder(make_vehicles_provider())
        builder.entity_set("Vehicles", q("Vehicle"))
        builder.singleton("TopCarMaker", q("CarManufacturer"))

        graph = builder.build()

        binding = graph.find_binding("Vehicles", "Manufacturer", declaring_type=q("Car"))
        assert binding.target == "TopCarMaker"
        assert binding.target_kind == NavigationSourceKind.SINGLETON
        assert graph.find_binding("Vehicles", "Manufacturer", declaring_type=q("Motorcycle")) is None
        assert [s.name for s in graph.singletons] == ["TopCarMaker"]

    def test_entity_sets_are_preferred_over_singletons(self):
        builder = make_builder(make_vehicles_provider())
        builder.entity_set("Vehicles", q("Vehicle"))
        builder.singleton("TopCarMaker", q("CarManufacturer"))
        builder.entity_set("Manufacturers", q("Manufacturer"))

        binding = builder.build().find_binding("Vehicles", "Manufacturer", declaring_type=q("Car"))

        assert binding.target == "Manufacturers"


class TestUnboundNavigations:
    def test_navigation_without_target_source_stays_unbound(self):
        builder = make_builder(make_vehicles_provider())
        builder.entity_set("Vehicles", q("Vehicle"))

        graph = builder.build()

        assert graph.bindings_for("Vehicles") == ()
        assert q("CarManufacturer") in graph

    def test_contained_navigation_is_not_bound(self):
        builder = make_builder(make_provider(
            make_type("Order", member("Id", INT), member("Lines", many("OrderLine"), Contained())),
            make_type("OrderLine", member("Id", INT), member("Text", TEXT)),
        ))
        builder.entity_set("Orders", q("Order"))
        builder.entity_set("OrderLines", q("OrderLine"))

        graph = builder.build()

        assert graph.get_type(q("Order")).property("Lines").contains_target
        assert graph.bindings_for("Orders") == ()


class TestSourceValidation:
    def test_source_over_keyless_type_fails(self):
        builder = make_builder(make_provider(make_type("Note", member("Text", TEXT))))
        builder.entity_set("Notes", q("Note"))

        with pytest.raises(MissingKeyError) as exc_info:
            builder.build()

        assert exc_info.value.source_name == "Notes"
        assert exc_info.value.type_name == q("Note")

    def test_source_over_unknown_type_fails(self):
        builder = make_builder(make_provider(make_type("Note", member("Id", INT))))
        builder.entity_set("Ghosts", q("Ghost"))

        with pytest.raises(UnknownTypeError) as exc_info:
            builder.build()

        assert exc_info.value.type_name == q("Ghost")

"""Unit tests for entity/complex classification and kind conflicts."""

import pytest

from convention_model.domain.entities import ComplexTypeMarker, PropertyKind, StructuralKind
from convention_model.domain.exceptions import (
    AmbiguousTypeKindError,
    ComplexTypeReferencesEntityError,
    InvalidConfigurationError,
    InvalidModelError,
    TypeKindConflictError,
)

from sample_models import (
    INT,
    TEXT,
    make_builder,
    make_plants_provider,
    make_provider,
    make_type,
    make_zoo_provider,
    member,
    q,
    ref,
)


def _kind(graph, name: str) -> StructuralKind:
    return graph.get_type(q(name)).kind


def _snapshot(graph) -> dict:
    """Order-insensitive view of a graph, for comparing two builds."""
    return {
        t.full_name: (
            t.kind,
            t.base_type,
            tuple(t.keys),
            tuple(sorted((p.name, p.kind) for p in t.properties.values())),
        )
        for t in graph.structural_types
    }


class TestInferredKinds:
    """Types reached through inference are classified by their keys and referrers."""

    def test_keyed_type_becomes_entity_and_keyless_type_complex(self):
        provider = make_provider(
            make_type("Order", member("Id", INT), member("Customer", ref("Customer")),
                      member("Shipping", ref("Address"))),
            make_type("Customer", member("CustomerId", INT)),
            make_type("Address", member("Street", TEXT)),
        )
        builder = make_builder(provider)
        builder.entity_set("Orders", q("Order"))

        graph = builder.build()

        assert _kind(graph, "Customer") == StructuralKind.ENTITY
        assert _kind(graph, "Address") == StructuralKind.COMPLEX
        order = graph.get_type(q("Order"))
        assert order.property("Customer").kind == PropertyKind.NAVIGATION
        assert order.property("Shipping").kind == PropertyKind.COMPLEX

    def test_type_referenced_from_complex_type_is_complex_even_with_key(self):
        provider = make_provider(
            make_type("Order", member("Id", INT), member("Shipping", ref("Address"))),
            make_type("Address", member("Street", TEXT), member("Region", ref("Region"))),
            make_type("Region", member("Id", INT)),
        )
        builder = make_builder(provider)
        builder.entity_set("Orders", q("Order"))

        graph = builder.build()

        assert _kind(graph, "Region") == StructuralKind.COMPLEX
        assert graph.get_type(q("Region")).keys == ()

    def test_complex_type_marker_forces_complex(self):
        provider = make_provider(
            make_type("Order", member("Id", INT), member("Money", ref("Money"))),
            make_type("Money", member("Id", INT), annotations=(ComplexTypeMarker(),)),
        )
        builder = make_builder(provider)
        builder.entity_set("Orders", q("Order"))

        graph = builder.build()

        assert _kind(graph, "Money") == StructuralKind.COMPLEX

    def test_inferred_type_takes_kind_of_explicit_relative(self):
        builder = make_builder(make_zoo_provider())
        builder.entity_type(q("ZooHorse"))
        builder.complex_type(q("Human"))

        graph = builder.build()

        assert len(graph.schema_elements) == 5
        assert _kind(graph, "ZooHorse") == StructuralKind.ENTITY
        for name in ("Animal", "Human", "Horse"):
            assert _kind(graph, name) == StructuralKind.COMPLEX
        assert graph.get_type(q("Human")).base_type == q("Animal")
        zoo_horse = graph.get_type(q("ZooHorse"))
        assert zoo_horse.property("Horse").kind == PropertyKind.COMPLEX
        assert zoo_horse.property("Animal").kind == PropertyKind.COMPLEX
        assert zoo_horse.navigation_properties() == []


class TestExplicitKinds:
    """Explicit registrations pin the kind of the whole inheritance family."""

    def test_complex_type_with_complex_derived_type(self):
        builder = make_builder(make_zoo_provider())
        builder.complex_type(q("Zoo"))
        builder.complex_type(q("Human"))

        graph = builder.build()

        assert len(graph.schema_elements) == 5
        for name in ("Zoo", "Animal", "Human", "Horse"):
            assert _kind(graph, name) == StructuralKind.COMPLEX
        assert graph.get_type(q("Horse")).base_type == q("Animal")

    def test_complex_type_with_complex_base_type(self):
        builder = make_builder(make_zoo_provider())
        builder.complex_type(q("Zoo"))
        builder.complex_type(q("Creature"))

        graph = builder.build()

        assert len(graph.schema_elements) == 6
        assert graph.get_type(q("Animal")).base_type == q("Creature")
        assert graph.get_type(q("Human")).base_type == q("Animal")
        assert all(t.kind == StructuralKind.COMPLEX for t in graph.structural_types)

    @pytest.mark.parametrize("reverse", [False, True])
    def test_complex_type_referencing_explicit_entity_descendant_fails(self, reverse):
        builder = make_builder(make_zoo_provider())
        registrations = [
            lambda: builder.complex_type(q("Zoo")),
            lambda: builder.entity_type(q("Human")),
        ]
        for register in reversed(registrations) if reverse else registrations:
            register()

        with pytest.raises(TypeKindConflictError) as exc_info:
            builder.build()

        assert exc_info.value.type_name == q("Human")
        assert str(exc_info.value) == (
            "The type 'Sample.Human' cannot be configured as a complex type. "
            "It was previously configured as an entity type."
        )

    def test_complex_type_referencing_type_below_explicit_entity_fails(self):
        builder = make_builder(make_zoo_provider())
        builder.complex_type(q("Zoo"))
        builder.entity_type(q("Creature"))

        with pytest.raises(TypeKindConflictError) as exc_info:
            builder.build()

        assert exc_info.value.type_name == q("Animal")
        assert "cannot be configured as an entity type" in str(exc_info.value)
        assert "previously configured as a complex type" in str(exc_info.value)

    def test_complex_type_referencing_explicit_entity_directly_fails(self):
        provider = make_provider(
            make_type("Order", member("Id", INT), member("Shipping", ref("Address"))),
            make_type("Address", member("Street", TEXT), member("Owner", ref("Person"))),
            make_type("Person", member("Id", INT)),
        )
        builder = make_builder(provider)
        builder.entity_set("Orders", q("Order"))
        builder.complex_type(q("Address"))
        builder.entity_type(q("Person"))

        with pytest.raises(ComplexTypeReferencesEntityError) as exc_info:
            builder.build()

        assert isinstance(exc_info.value, InvalidModelError)
        assert exc_info.value.complex_type == q("Address")
        assert exc_info.value.entity_type == q("Person")
        assert exc_info.value.property_name == "Owner"

    def test_registering_both_kinds_fails_at_build_not_registration(self):
        builder = make_builder(make_zoo_provider())
        builder.entity_type(q("Zoo"))
        builder.complex_type(q("Zoo"))

        with pytest.raises(TypeKindConflictError) as exc_info:
            builder.build()

        assert isinstance(exc_info.value, InvalidConfigurationError)
        assert exc_info.value.requested_kind == "complex"
        assert exc_info.value.prior_kind == "entity"

    def test_base_and_derived_explicit_kinds_conflict(self):
        builder = make_builder(make_zoo_provider())
        builder.entity_type(q("Animal"))
        builder.complex_type(q("Horse"))

        with pytest.raises(TypeKindConflictError) as exc_info:
            builder.build()

        assert exc_info.value.type_name == q("Horse")


class TestSiblingAmbiguity:
    """Derived types of one base that disagree on their kind make the base ambiguous."""

    def test_siblings_with_different_kinds_fail(self):
        builder = make_builder(make_zoo_provider())
        builder.entity_type(q("Zoo"))
        builder.complex_type(q("Human"))
        builder.entity_type(q("Horse"))

        with pytest.raises(AmbiguousTypeKindError) as exc_info:
            builder.build()

        error = exc_info.value
        assert error.type_name == q("Animal")
        assert error.entity_type == q("Horse")
        assert error.complex_type == q("Human")
        assert str(error) == (
            "Cannot determine the schema kind of the type 'Sample.Animal' because the derived "
            "type 'Sample.Horse' is configured as entity type and another derived type "
            "'Sample.Human' is configured as complex type."
        )

    def test_sub_derived_types_with_different_kinds_fail_on_common_base(self):
        builder = make_builder(make_plants_provider())
        builder.entity_type(q("PlantPark"))
        builder.complex_type(q("Phycophyta"))
        builder.entity_type(q("Jasmine"))

        with pytest.raises(AmbiguousTypeKindError) as exc_info:
            builder.build()

        assert exc_info.value.type_name == q("Plant")
        assert exc_info.value.entity_type == q("Jasmine")
        assert exc_info.value.complex_type == q("Phycophyta")

    def test_separate_subtrees_may_have_different_kinds(self):
        builder = make_builder(make_plants_provider())
        builder.entity_type(q("PlantParkWithOceanPlantAndJasmine"))
        builder.complex_type(q("Mangrove"))
        builder.entity_type(q("Flower"))

        graph = builder.build()

        assert len(graph.schema_elements) == 7
        assert _kind(graph, "OceanPlant") == StructuralKind.COMPLEX
        assert graph.get_type(q("Phycophyta")).base_type == q("OceanPlant")
        assert graph.get_type(q("Mangrove")).base_type == q("OceanPlant")
        assert _kind(graph, "Flower") == StructuralKind.ENTITY
        assert graph.get_type(q("Jasmine")).base_type == q("Flower")
        for name in ("Plant", "LandPlant", "Tree"):
            assert q(name) not in graph

        park = graph.get_type(q("PlantParkWithOceanPlantAndJasmine"))
        assert park.property("OceanPant").kind == PropertyKind.COMPLEX
        assert park.property("Jaemine").kind == PropertyKind.NAVIGATION


class TestRegistrationOrder:
    """Classification does not depend on the order types are registered in."""

    def test_reversed_registration_yields_same_graph(self):
        first = make_builder(make_zoo_provider())
        first.entity_type(q("Human"))
        first.entity_type(q("Zoo"))

        second = make_builder(make_zoo_provider())
        second.entity_type(q("Zoo"))
        second.entity_type(q("Human"))

        assert _snapshot(first.build()) == _snapshot(second.build())

    def test_explicit_entity_base_chain_is_consistent(self):
        builder = make_builder(make_zoo_provider())
        builder.entity_type(q("Human"))
        builder.entity_type(q("Zoo"))

        graph = builder.build()

        for name in ("Animal", "Human", "Horse", "Zoo"):
            assert _kind(graph, name) == StructuralKind.ENTITY
        assert [k.name for k in graph.keys_of(q("Human"))] == ["Id"]
        assert graph.get_type(q("Animal")).keys == ("Id",)

    @staticmethod
    def _shared_target_graph(*root_members):
        provider = make_provider(
            make_type("Root", member("Id", INT), *root_members),
            make_type("Holder", member("Note", TEXT), member("Inner", ref("Target"))),
            make_type("Target", member("Id", INT), member("Name", TEXT)),
        )
        builder = make_builder(provider)
        builder.entity_set("Roots", q("Root"))
        return builder.build()

    def test_member_order_does_not_change_kinds(self):
        direct, holder = member("Direct", ref("Target")), member("Holder", ref("Holder"))

        direct_first = self._shared_target_graph(direct, holder)
        holder_first = self._shared_target_graph(holder, direct)

        assert _snapshot(direct_first) == _snapshot(holder_first)
        assert _kind(direct_first, "Target") == StructuralKind.COMPLEX
        assert direct_first.get_type(q("Holder")).property("Inner").kind == PropertyKind.COMPLEX
        assert direct_first.get_type(q("Root")).property("Direct").kind == PropertyKind.COMPLEX

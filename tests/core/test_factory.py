"""Tests for category instance factories."""

from __future__ import annotations

import enum

import pytest

from metaschema import create_and_process
from metaschema.core.decorators import Enum
from metaschema.core.registry import Metaschema
from metaschema.core.values import Int64


@pytest.fixture
def shapes() -> Metaschema:
    """Categories exercising defaults, transforms and every domain kind."""
    error, ms = create_and_process(
        [
            (
                "domains",
                {
                    "definition": {
                        "Nomen": {"type": "string"},
                        "Number": {"type": "number"},
                        "Count": {"type": "bigint"},
                        "Color": {"decorator": "Enum", "values": ["Red", "Green"]},
                    }
                },
            ),
            (
                "category",
                {
                    "name": "Point",
                    "definition": {
                        "Label": {"domain": "Nomen", "required": True},
                        "X": {"domain": "Number", "required": True},
                        "Y": {"domain": "Number", "required": True},
                    },
                },
            ),
            (
                "category",
                {
                    "name": "Pen",
                    "definition": {
                        "Color": {"domain": "Color", "default": "Red"},
                        "Ink": {"domain": "Count"},
                        "Slug": lambda raw: str(raw).lower().replace(" ", "-"),
                    },
                },
            ),
            (
                "category",
                {"name": "BadPen", "definition": {"Color": {"domain": "Color", "default": "Blue"}}},
            ),
        ]
    )
    assert error is None, str(error)
    return ms


class TestKeyedInput:
    def test_builds_declared_properties(self, registry: Metaschema) -> None:
        person = registry.create_instance("Person", {"Name": "Ann", "Age": 30, "Nick": "A"})
        assert person == {"Name": "Ann", "Age": 30}

    def test_enum_value_is_canonical_member(self, registry: Metaschema) -> None:
        person = registry.create_instance("Person", {"Name": "Ann", "Color": "Green"})
        assert isinstance(person["Color"], enum.Enum)
        assert person["Color"] == "Green"

    def test_failed_coercion_aborts(self, registry: Metaschema) -> None:
        assert registry.create_instance("Person", {"Name": "Ann", "Age": "old"}) is None
        result = registry.build_instance("Person", {"Name": "Ann", "Age": "old"})
        assert result.error is not None
        assert (result.error.kind, result.error.path) == ("invalidType", "Person.Age")

    def test_missing_required_aborts(self, registry: Metaschema) -> None:
        assert registry.create_instance("Person", {"Age": 30}) is None
        assert registry.build_instance("Person", {"Age": 30}).error.kind == "missingProperty"


class TestLinks:
    def test_scalar_links_become_int64(self, registry: Metaschema) -> None:
        person = registry.create_instance("Person", {"Name": "Ann", "Company": "7", "Friends": [1, 2]})
        assert person["Company"] == Int64(7)
        assert isinstance(person["Company"], Int64)
        assert person["Friends"] == [1, 2]
        assert all(isinstance(f, Int64) for f in person["Friends"])

    def test_structured_links_build_nested_instances(self, registry: Metaschema) -> None:
        person = registry.create_instance(
            "Person",
            {"Name": "Ann", "Company": {"Name": "Acme"}, "Address": {"City": "Oslo", "Zip": "0150"}},
        )
        assert person["Company"] == {"Name": "Acme"}
        assert person["Address"] == {"City": "Oslo", "Zip": "0150"}

    def test_nested_failure_aborts_outer(self, registry: Metaschema) -> None:
        result = registry.build_instance("Person", {"Name": "Ann", "Address": {"Zip": "0150"}})
        assert result.value_or_none() is None
        assert (result.error.kind, result.error.path) == ("missingProperty", "Person.Address.City")

    def test_bad_link_identifier(self, registry: Metaschema) -> None:
        assert registry.create_instance("Person", {"Name": "Ann", "Company": "acme"}) is None


class TestPositionalInput:
    def test_single_list(self, registry: Metaschema) -> None:
        assert registry.create_instance("Address", ["Oslo", "0150"]) == {"City": "Oslo", "Zip": "0150"}

    def test_multiple_arguments(self, registry: Metaschema) -> None:
        assert registry.create_instance("Address", "Oslo", "0150") == {"City": "Oslo", "Zip": "0150"}

    def test_shorter_input_leaves_optional_fields_out(self, registry: Metaschema) -> None:
        assert registry.create_instance("Address", ["Oslo"]) == {"City": "Oslo"}

    def test_shorter_input_missing_required(self, shapes: Metaschema) -> None:
        assert shapes.create_instance("Point", ["p", 1]) is None

    def test_too_many_values_is_an_arity_error(self, registry: Metaschema) -> None:
        result = registry.build_instance("Address", ["Oslo", "0150", "extra"])
        assert result.value_or_none() is None
        assert result.error.kind == "arity"
        assert result.error.detail == {"expected": 2, "actual": 3}


class TestDefaultsAndTransforms:
    def test_default_is_coerced(self, shapes: Metaschema) -> None:
        pen = shapes.create_instance("Pen", {})
        assert pen == {"Color": "Red"}
        assert isinstance(pen["Color"], enum.Enum)

    def test_explicit_value_wins_over_default(self, shapes: Metaschema) -> None:
        assert shapes.create_instance("Pen", {"Color": "Green"})["Color"] == "Green"

    def test_bad_default_aborts(self, shapes: Metaschema) -> None:
        assert shapes.create_instance("BadPen", {}) is None

    def test_transform_applied_unconditionally(self, shapes: Metaschema) -> None:
        pen = shapes.create_instance("Pen", {"Slug": "Blue Pen", "Ink": "3"})
        assert pen["Slug"] == "blue-pen"
        assert pen["Ink"] == Int64(3)

    def test_transform_field_is_not_validated(self, shapes: Metaschema) -> None:
        assert shapes.validate_category("Pen", {"Slug": object()}) is None


class TestRoundTrip:
    def test_built_instance_validates(self, shapes: Metaschema) -> None:
        point = shapes.create_instance("Point", {"Label": "origin", "X": 0, "Y": 0.5})
        assert point is not None
        assert shapes.validate_category("Point", point) is None

    def test_person_round_trip(self, registry: Metaschema) -> None:
        person = registry.create_instance("Person", {"Name": "Ann", "Age": 41, "Color": "Red"})
        assert registry.validate_category("Person", person) is None

    def test_non_string_enum_members_round_trip(self) -> None:
        error, ms = create_and_process(
            [
                ("domains", {"definition": {"Size": Enum(0.5, 1.5), "Mix": Enum("S", 2)}}),
                (
                    "category",
                    {"name": "Box", "definition": {"Size": {"domain": "Size"}, "Mix": {"domain": "Mix"}}},
                ),
            ]
        )
        assert error is None
        box = ms.create_instance("Box", {"Size": 0.5, "Mix": 2})
        assert isinstance(box["Size"], enum.Enum)
        assert box["Size"].value == 0.5
        assert ms.validate_category("Box", box) is None
        assert ms.create_instance("Box", box) == box


class TestFactoryBinding:
    def test_each_category_has_a_factory(self, registry: Metaschema) -> None:
        factory = registry.get_category("Address").factory
        assert factory.properties == ["City", "Zip"]
        assert factory("Oslo") == {"City": "Oslo"}

    def test_unknown_category(self, registry: Metaschema) -> None:
        assert registry.create_instance("Ghost", {}) is None
        assert registry.build_instance("Ghost", {}).error.kind == "undefinedEntity"

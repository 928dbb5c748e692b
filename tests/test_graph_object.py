from __future__ import annotations

import logging
from types import MappingProxyType

import pytest

from graphobject.config.settings import GraphObjectConfig
from graphobject.graph.facade import GraphFacade
from graphobject.graph.graph_object import GraphObject, GraphObjectArray, to_raw


class Tag(GraphFacade):
    id: str
    name: str


def test_set_then_get_returns_value():
    obj = GraphObject.create()

    for key, value in [("s", "x"), ("n", 3), ("f", 1.5), ("b", False), ("z", None)]:
        obj.set(key, value)
        assert obj.get(key) == value

    assert len(obj) == 5


def test_create_populates_fields():
    obj = GraphObject.create(name="Cafe", checkins=2)

    assert dict(obj) == {"name": "Cafe", "checkins": 2}


def test_missing_key_reads_as_none():
    obj = GraphObject.create()

    assert obj.get("missing") is None
    assert obj.get("missing", "fallback") == "fallback"
    assert "missing" not in obj
    with pytest.raises(KeyError):
        obj["missing"]


def test_remove_absent_key_is_noop():
    obj = GraphObject.create(a=1)

    obj.remove("never-set")

    assert len(obj) == 1
    obj.remove("a")
    assert len(obj) == 0


def test_keys_survive_mutation_during_iteration():
    obj = GraphObject.create(a=1, b=2, c=3)

    for key in obj.keys():
        obj.remove(key)
        obj.set(key.upper(), 0)

    assert sorted(obj.keys()) == ["A", "B", "C"]
    assert sorted(obj.keys()) == ["A", "B", "C"]


def test_wrap_shares_storage_with_raw_document(place_document):
    obj = GraphObject.wrap(place_document)

    obj.set("foo", "bar")

    assert place_document["foo"] == "bar"
    assert obj.get("name") == "Cafe"


def test_wrap_is_idempotent(place_document):
    first = GraphObject.wrap(place_document)
    second = GraphObject.wrap(first)
    other = GraphObject.wrap(place_document)

    assert second is first

    other.set("name", "Bistro")
    assert first.get("name") == "Bistro"


def test_wrap_copies_non_dict_mappings():
    obj = GraphObject.wrap(MappingProxyType({"id": "1"}))

    obj.set("name", "x")
    assert obj.get("id") == "1"
    assert obj.get("name") == "x"


def test_wrap_rejects_non_mappings():
    with pytest.raises(TypeError):
        GraphObject.wrap(["not", "a", "node"])

    with pytest.raises(TypeError):
        GraphObject.wrap("id=1")


def test_nested_document_is_wrapped_lazily_and_memoized(place_document):
    raw_location = place_document["location"]
    obj = GraphObject.wrap(place_document)

    assert place_document["location"] is raw_location

    location = obj.get("location")
    assert isinstance(location, GraphObject)
    assert location.get("city") == "Paris"
    assert obj.get("location") is location
    assert obj["location"] is location
    assert place_document["location"] is location


def test_nested_wrapper_shares_nested_storage(place_document):
    raw_location = place_document["location"]
    obj = GraphObject.wrap(place_document)

    obj.get("location").set("city", "Lyon")

    assert raw_location["city"] == "Lyon"


def test_nested_objects_inherit_config():
    config = GraphObjectConfig(id_key="uid")
    obj = GraphObject.wrap({"child": {"uid": "1"}}, config=config)

    assert obj.get("child").config is config


def test_arrays_are_wrapped_lazily(checkin_document):
    obj = GraphObject.wrap(checkin_document)

    tags = obj.get("tags")
    assert isinstance(tags, GraphObjectArray)
    assert len(tags) == 2

    first = tags[0]
    assert isinstance(first, GraphObject)
    assert tags[0] is first
    assert obj.get("tags") is tags
    assert [t.get("name") for t in tags] == ["Ben", "Cleo"]


def test_array_mutation_is_visible_through_storage(checkin_document):
    raw_tags = checkin_document["tags"]
    obj = GraphObject.wrap(checkin_document)

    obj.get("tags").append({"id": "10"})

    assert len(raw_tags) == 3
    assert obj.get("tags")[-1].get("id") == "10"


def test_array_slices_return_wrapped_items():
    arr = GraphObjectArray.wrap([{"id": "1"}, {"id": "2"}, 3])

    items = arr[0:2]

    assert all(isinstance(i, GraphObject) for i in items)
    assert arr[2] == 3


def test_array_equality_against_plain_sequences():
    arr = GraphObjectArray.wrap([1, {"a": 1}])

    assert arr == [1, {"a": 1}]
    assert arr != [1]
    assert arr != "1"


def test_tuples_are_stored_as_lists():
    obj = GraphObject.create()

    obj.set("coords", (1, 2))

    assert obj.get("coords") == [1, 2]
    assert isinstance(obj.get("coords"), GraphObjectArray)


def test_unsupported_values_are_rejected():
    obj = GraphObject.create()

    with pytest.raises(TypeError):
        obj.set("when", object())

    with pytest.raises(TypeError):
        obj.set(1, "x")


def test_value_checks_can_be_disabled():
    marker = object()
    obj = GraphObject.create(config=GraphObjectConfig(validate_values=False))

    obj.set("marker", marker)

    assert obj.get("marker") is marker


def test_equality_is_structural(place_document):
    a = GraphObject.wrap(place_document)
    b = GraphObject.wrap(
        {
            "id": "123",
            "name": "Cafe",
            "location": {"city": "Paris", "latitude": 48, "longitude": 2.35},
            "checkins": 42,
        }
    )

    assert a == b
    b.set("name", "Other")
    assert a != b


def test_to_raw_returns_plain_copy(checkin_document):
    obj = GraphObject.wrap(checkin_document)
    obj.get("place").get("location").set("zip", "75001")

    raw = obj.to_raw()

    assert type(raw) is dict
    assert type(raw["place"]["location"]) is dict
    assert type(raw["tags"]) is list
    assert raw["place"]["location"]["zip"] == "75001"
    assert raw["tags"][1]["name"] == "Cleo"

    raw["message"] = "changed"
    assert obj.get("message") == "coffee"


def test_to_raw_detects_cycles():
    raw = {"id": "1"}
    raw["self"] = raw
    obj = GraphObject.wrap(raw)

    assert obj.get("self").get("id") == "1"
    with pytest.raises(ValueError):
        obj.to_raw()


def test_to_raw_allows_shared_non_cyclic_children():
    shared = {"id": "2"}
    obj = GraphObject.wrap({"a": shared, "b": shared})

    assert to_raw(obj) == {"a": {"id": "2"}, "b": {"id": "2"}}


def test_to_raw_enforces_max_depth(strict_config):
    obj = GraphObject.wrap({"a": {"b": {"c": {"d": {}}}}}, config=strict_config)

    with pytest.raises(ValueError):
        obj.to_raw()

    assert to_raw(obj, max_depth=10)["a"]["b"]["c"] == {"d": {}}


def test_repr_handles_cycles():
    raw = {"id": "1"}
    raw["self"] = raw
    obj = GraphObject.wrap(raw)
    obj.get("self")

    assert repr(obj).startswith("GraphObject(")


def test_lazy_wrap_is_logged(place_document, caplog):
    obj = GraphObject.wrap(place_document)

    with caplog.at_level(logging.DEBUG, logger="graphobject.wrap"):
        obj.get("location")
        obj.get("location")

    messages = [r.getMessage() for r in caplog.records if r.name == "graphobject.wrap"]
    assert messages == ["lazily wrapped key=location as GraphObject"]


def test_facades_nested_in_set_values_are_stored_as_graph_objects():
    obj = GraphObject.create()
    tag = Tag.create(id="1", name="A")
    other = Tag.create(id="2")

    obj.set("tags", [tag, (other,)])
    obj.set("place", {"location": {"primary": tag}})

    tags = obj.get("tags")
    assert tags[0] is tag.graph_object
    assert isinstance(tags[1], GraphObjectArray)
    assert tags[1][0] is other.graph_object
    assert obj.get("place").get("location").get("primary") is tag.graph_object
    assert obj.to_raw()["place"] == {"location": {"primary": {"id": "1", "name": "A"}}}


def test_nested_values_are_validated_on_set():
    obj = GraphObject.create()

    with pytest.raises(TypeError):
        obj.set("tags", [{"when": object()}])

    with pytest.raises(TypeError):
        obj.set("place", {"location": {1: "x"}})


def test_nested_coercion_handles_cyclic_values():
    raw = {"tag": Tag.create(id="1")}
    raw["self"] = raw
    obj = GraphObject.create()

    obj.set("doc", raw)

    assert obj.get("doc").get("tag").get("id") == "1"
    assert obj.get("doc").get("self").shares_storage(obj.get("doc"))


def test_wrappers_over_one_dict_share_storage(place_document):
    a = GraphObject.wrap(place_document)
    b = GraphObject.wrap(place_document)

    assert a is not b
    assert a.shares_storage(b)
    assert a.storage_id == b.storage_id
    assert not a.shares_storage(GraphObject.wrap(dict(place_document)))

import copy
from unittest import TestCase

from typed_store.errors import CodecError, UnsupportedTypeError
from typed_store.type_map.tagged import TaggedTypeMap
from typed_store.type_map.untagged import TypeMapOpt, UntaggedTypeMap
from typed_store.types.data_box import DataBox, DisplayDataBox
from typed_store.types.tags import type_tag
from test.utils import A, Opaque, Point, Unserializable


class TestTypeMap(TestCase):
    """Behavior shared by every kind of type map."""

    def setUp(self):
        self.map_classes = [TaggedTypeMap, UntaggedTypeMap, TypeMapOpt]

    def test_insert_and_get(self):
        for map_class in self.map_classes:
            type_map = map_class()
            self.assertIsNone(type_map.insert("one", 1))
            type_map.insert("two", 2)
            type_map.insert("three", A(3))
            self.assertEqual(type_map.get("one", int), 1)
            self.assertEqual(type_map.get("two", int), 2)
            self.assertEqual(type_map.get("three", A), A(3))
            self.assertEqual(len(type_map), 3)

    def test_type_mismatch_and_missing_key_look_the_same(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("one", 1)
            self.assertIsNone(type_map.get("one", str))
            self.assertIsNone(type_map.get("missing", int))
            # `contains_key` is how the two are told apart.
            self.assertTrue(type_map.contains_key("one"))
            self.assertIn("one", type_map)
            self.assertFalse(type_map.contains_key("missing"))

    def test_insert_returns_previous_box(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("one", 1)
            previous = type_map.insert("one", "uno")
            self.assertIsInstance(previous, DataBox)
            self.assertEqual(previous.downcast_ref(int), 1)
            self.assertEqual(type_map.get("one", str), "uno")
            self.assertIsNone(type_map.get("one", int))

    def test_first_insertion_order_survives_overwrites(self):
        for map_class in self.map_classes:
            type_map = map_class()
            for key in ["c", "a", "b"]:
                type_map.insert(key, 0)
            type_map.insert("a", "overwritten")
            type_map.insert("d", 1)
            type_map.insert("c", 2.0)
            self.assertEqual(list(type_map.keys()), ["c", "a", "b", "d"])
            self.assertEqual([key for key, _ in type_map.items()], ["c", "a", "b", "d"])
            self.assertEqual(list(type_map.to_data()), ["c", "a", "b", "d"])

    def test_get_mut(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("point", Point(x=1, y=2))
            type_map.get_mut("point", Point).x = 10
            self.assertEqual(type_map.get("point", Point), Point(x=10, y=2))
            self.assertIsNone(type_map.get_mut("point", A))

    def test_remove(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("one", 1)
            self.assertEqual(type_map.remove("one", int), 1)
            self.assertFalse(type_map.contains_key("one"))
            self.assertIsNone(type_map.remove("one", int))

    def test_remove_with_wrong_type_still_removes(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("one", 1)
            self.assertIsNone(type_map.remove("one", str))
            self.assertFalse(type_map.contains_key("one"))
            self.assertEqual(len(type_map), 0)

    def test_remove_raw(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("one", 1)
            boxed = type_map.remove_raw("one")
            self.assertEqual(boxed.downcast_ref(int), 1)
            self.assertIsNone(type_map.remove_raw("one"))

    def test_into_inner(self):
        for map_class in self.map_classes:
            type_map = map_class({"one": 1, "two": "two"})
            inner = type_map.into_inner()
            self.assertEqual(list(inner), ["one", "two"])
            self.assertEqual(inner["two"].downcast_ref(str), "two")

    def test_clone_is_independent(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("list", [1, 2])
            clone = type_map.clone()
            self.assertEqual(type_map, clone)
            clone.get_mut("list", list).append(3)
            clone.insert("new", 1)
            self.assertEqual(type_map.get("list", list), [1, 2])
            self.assertFalse(type_map.contains_key("new"))
            self.assertNotEqual(type_map, clone)
            self.assertEqual(copy.deepcopy(type_map), type_map)

    def test_inserted_boxes_are_owned_by_the_map(self):
        for map_class in self.map_classes:
            shared = DataBox([1])
            first, second = map_class(), map_class()
            first.insert("list", shared)
            second.insert("list", shared)
            first.get_mut("list", list).append(2)
            self.assertEqual(second.get("list", list), [1])
            self.assertEqual(shared.downcast_ref(list), [1])
            self.assertIsNot(first.get_raw("list"), shared)

    def test_insert_raw_checks_box_class(self):
        for map_class in self.map_classes:
            type_map = map_class(box_class=DisplayDataBox)
            with self.assertRaises(TypeError):
                type_map.insert_raw("one", DataBox(1))
            type_map.insert_raw("one", DisplayDataBox(1))
            # Plain values are boxed into the map's box class.
            type_map.insert("two", 2)
            self.assertIsInstance(type_map.get_raw("two"), DisplayDataBox)
            with self.assertRaises(UnsupportedTypeError):
                type_map.insert("three", Opaque(3))

    def test_unserializable_values_are_rejected(self):
        for map_class in self.map_classes:
            with self.assertRaises(UnsupportedTypeError):
                map_class().insert("one", Unserializable())

    def test_serialization_error_names_the_key(self):
        for map_class in self.map_classes:
            type_map = map_class()
            type_map.insert("bad", {"nested": 1})
            type_map.get_mut("bad", dict)["nested"] = Unserializable()
            with self.assertRaises(CodecError) as ctx:
                type_map.to_data()
            self.assertEqual(ctx.exception.key, "bad")
            self.assertEqual(ctx.exception.tag, "dict")

    def test_repr(self):
        type_map = UntaggedTypeMap({"one": 1})
        self.assertEqual(repr(type_map), "UntaggedTypeMap({'one': DataBox(type='int', value=1)})")


class TestTaggedTypeMap(TestCase):
    def test_serializes_with_tags(self):
        type_map = TaggedTypeMap()
        type_map.insert("one", 1)
        type_map.insert("two", 2)
        type_map.insert("three", A(3))
        self.assertEqual(
            type_map.to_data(),
            {"one": {"int": 1}, "two": {"int": 2}, "three": {type_tag(A): 3}},
        )
        self.assertEqual(type_map.dumps(), '{"one": {"int": 1}, "two": {"int": 2}, "three": {"test.utils.A": 3}}')


class TestUntaggedTypeMap(TestCase):
    def test_serializes_bare_values(self):
        type_map = UntaggedTypeMap()
        type_map.insert("one", 1)
        type_map.insert("two", 2)
        type_map.insert("three", A(3))
        self.assertEqual(type_map.to_data(), {"one": 1, "two": 2, "three": 3})
        self.assertEqual(type_map.dumps(), '{"one": 1, "two": 2, "three": 3}')

    def test_unknown_entries_are_kept_apart(self):
        type_map = UntaggedTypeMap({"one": 1})
        type_map.insert_unknown_entry("extra", {"raw": True})
        self.assertEqual(type_map.get_unknown_entry("extra"), {"raw": True})
        self.assertIsNone(type_map.get_unknown_entry("one"))
        self.assertFalse(type_map.contains_key("extra"))
        self.assertIsNone(type_map.get("extra", dict))
        self.assertEqual(type_map.to_data(), {"one": 1})
        entries, unknown = type_map.into_parts()
        self.assertEqual(list(entries), ["one"])
        self.assertEqual(unknown, {"extra": {"raw": True}})

    def test_unknown_entries_view_is_read_only(self):
        type_map = UntaggedTypeMap()
        type_map.insert_unknown_entry("extra", 1)
        with self.assertRaises(TypeError):
            type_map.unknown_entries["other"] = 2

    def test_unknown_entries_are_cloned(self):
        type_map = UntaggedTypeMap()
        type_map.insert_unknown_entry("extra", [1])
        clone = type_map.clone()
        clone.get_unknown_entry("extra").append(2)
        self.assertEqual(type_map.get_unknown_entry("extra"), [1])

    def test_cannot_store_absent_values(self):
        with self.assertRaises(TypeError):
            UntaggedTypeMap().insert_raw("one", None)


class TestTypeMapOpt(TestCase):
    def test_absent_values(self):
        type_map = TypeMapOpt()
        type_map.insert("one", 1)
        type_map.insert("two", None)
        type_map.insert("three", A(3))
        self.assertEqual(type_map.get("one", int), 1)
        self.assertIsNone(type_map.get("two", int))
        self.assertIsNone(type_map.get_raw("two"))
        self.assertTrue(type_map.contains_key("two"))
        self.assertTrue(type_map.is_null("two"))
        self.assertFalse(type_map.is_null("one"))
        self.assertFalse(type_map.is_null("missing"))
        self.assertEqual(type_map.to_data(), {"one": 1, "two": None, "three": 3})

    def test_insert_over_absent_value(self):
        type_map = TypeMapOpt({"one": None})
        # `None` comes back for a stored absent value as for a missing key; `contains_key` tells them apart.
        self.assertTrue(type_map.contains_key("one"))
        self.assertIsNone(type_map.insert("one", 1))
        self.assertFalse(type_map.contains_key("two"))
        self.assertIsNone(type_map.insert("two", 2))
        self.assertEqual(type_map.to_data(), {"one": 1, "two": 2})

    def test_overwrite_with_absent(self):
        type_map = TypeMapOpt({"one": 1})
        previous = type_map.insert("one", None)
        self.assertEqual(previous.downcast_ref(int), 1)
        self.assertTrue(type_map.is_null("one"))
        self.assertIsNone(type_map.remove("one", int))
        self.assertFalse(type_map.contains_key("one"))

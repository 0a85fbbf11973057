import unittest

from capforge.scripts.typecast import Symbol, is_opaque_colon_string, to_literal, type_cast


class TypeCastTests(unittest.TestCase):
    def test_none_and_nil(self) -> None:
        self.assertIsNone(type_cast(None))
        self.assertIsNone(type_cast("nil"))
        self.assertIsNone(type_cast("  nil "))

    def test_booleans(self) -> None:
        self.assertIs(type_cast("true"), True)
        self.assertIs(type_cast(" false\n"), False)
        self.assertEqual(type_cast("True"), "True")

    def test_symbol(self) -> None:
        self.assertEqual(type_cast(":foo"), Symbol("foo"))
        self.assertNotEqual(type_cast(":foo"), "foo")

    def test_opaque_colon_string(self) -> None:
        value = ":pserver:anonymous@cvs.example.com:/cvsroot"
        self.assertTrue(is_opaque_colon_string(value))
        self.assertEqual(type_cast(value), value)
        self.assertIsInstance(type_cast(value), str)

    def test_quoted_strings(self) -> None:
        self.assertEqual(type_cast("'hello world'"), "hello world")
        self.assertEqual(type_cast('"hello"'), "hello")
        self.assertEqual(type_cast("'mixed\""), "'mixed\"")
        self.assertEqual(type_cast("plain"), "plain")
        self.assertEqual(type_cast(""), "")

    def test_list_elements_default_to_strings(self) -> None:
        self.assertEqual(type_cast("[1,2,3]"), ["1", "2", "3"])
        self.assertEqual(type_cast("[ :a, 'b', nil, true ]"), [Symbol("a"), "b", None, True])
        self.assertEqual(type_cast("[]"), [])
        self.assertEqual(type_cast("[a,]"), ["a"])

    def test_partial_brackets_are_atoms(self) -> None:
        self.assertEqual(type_cast("[a]b"), "[a]b")

    def test_mapping_keeps_insertion_order(self) -> None:
        result = type_cast("{a=>1,b=>2}")
        self.assertEqual(result, {"a": "1", "b": "2"})
        self.assertEqual(list(result), ["a", "b"])

    def test_mapping_later_duplicates_overwrite(self) -> None:
        result = type_cast("{:a => 1, :b => 2, :a => 3}")
        self.assertEqual(result, {Symbol("a"): "3", Symbol("b"): "2"})
        self.assertEqual(list(result), [Symbol("a"), Symbol("b")])

    def test_mapping_entry_without_value(self) -> None:
        self.assertEqual(type_cast("{a}"), {"a": None})

    def test_nested_list_is_split_on_raw_commas(self) -> None:
        # no depth tracking: the inner list is torn apart
        self.assertEqual(type_cast("[a, [b, c]]"), ["a", "[b", "c]"])
        self.assertEqual(type_cast("[[a, b]]"), ["[a", "b]"])

    def test_nested_list_without_commas_survives_one_level(self) -> None:
        self.assertEqual(type_cast("[a, [b]]"), ["a", ["b"]])


class ToLiteralTests(unittest.TestCase):
    def test_scalars(self) -> None:
        self.assertEqual(to_literal(None), "nil")
        self.assertEqual(to_literal(True), "true")
        self.assertEqual(to_literal(False), "false")
        self.assertEqual(to_literal(Symbol("web")), ":web")
        self.assertEqual(to_literal("example.com"), "'example.com'")

    def test_collections(self) -> None:
        self.assertEqual(to_literal(["1", Symbol("a")]), "['1', :a]")
        self.assertEqual(to_literal({"a": "1", Symbol("b"): None}), "{'a' => '1', :b => nil}")

    def test_rejects_foreign_types(self) -> None:
        with self.assertRaises(TypeError):
            to_literal(3.5)  # type: ignore[arg-type]

    def test_cast_literal_cast_is_stable(self) -> None:
        samples = [
            "true",
            "nil",
            ":foo",
            "plain",
            "'quoted text'",
            "[1,2,3]",
            "[:a, b, nil]",
            "{a=>1,b=>2}",
            "{:x => [y]}",
            ":pserver:anon@cvs.example.com:/root",
            "",
        ]
        for raw in samples:
            with self.subTest(raw=raw):
                once = type_cast(raw)
                self.assertEqual(type_cast(to_literal(once)), once)


if __name__ == "__main__":
    unittest.main()

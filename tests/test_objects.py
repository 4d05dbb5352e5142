import unittest

import dictobj_lang
from dictobj_lang import objects


def _tree_table() -> dictobj_lang.OperationTable:
    tree = dictobj_lang.OperationTable("Tree")

    @tree.define(name="__init__")
    def init(self, label, branches=()):
        dictobj_lang.set(self, "label", label)
        dictobj_lang.set(self, "branches", list(branches))

    @tree.define
    def is_leaf(self):
        return not dictobj_lang.get(self, "branches")

    return tree


class ObjectModelTests(unittest.TestCase):
    def test_last_write_wins(self) -> None:
        o = dictobj_lang.create()
        dictobj_lang.set(o, "k", 1)
        dictobj_lang.set(o, "other", "x")
        dictobj_lang.set(o, "k", 2)
        self.assertEqual(dictobj_lang.get(o, "k"), 2)
        self.assertEqual(dictobj_lang.fields_of(o), {"k": 2, "other": "x"})

    def test_binding_matches_direct_table_call(self) -> None:
        table = dictobj_lang.OperationTable("Adder")
        table.define(lambda self, a, b: (self, a + b), name="add")
        o = dictobj_lang.create(table)

        bound = dictobj_lang.get(o, "add")
        self.assertIsInstance(bound, dictobj_lang.BoundOperation)
        self.assertIs(bound.target, o)
        self.assertEqual(dictobj_lang.call(bound, 2, 3), table.add(o, 2, 3))
        self.assertEqual(o.add(2, 3), (o, 5))

    def test_table_access_is_never_bound(self) -> None:
        tree = _tree_table()
        self.assertNotIsInstance(tree.is_leaf, dictobj_lang.BoundOperation)
        self.assertIs(tree.is_leaf, tree.lookup("is_leaf"))

    def test_own_field_shadows_table_operation(self) -> None:
        tree = _tree_table()
        t = tree(1)
        dictobj_lang.set(t, "is_leaf", "overridden")
        self.assertEqual(dictobj_lang.get(t, "is_leaf"), "overridden")

    def test_own_callable_is_not_bound(self) -> None:
        tree = _tree_table()
        t = tree(1)
        hook = lambda *args: args
        t.is_leaf = hook
        self.assertIs(t.is_leaf, hook)
        self.assertEqual(t.is_leaf(), ())

    def test_non_callable_table_entry_returned_unchanged(self) -> None:
        table = dictobj_lang.OperationTable("Config", {"limit": 10})
        o = dictobj_lang.create(table)
        self.assertEqual(dictobj_lang.get(o, "limit"), 10)

    def test_initializer_sugar_matches_manual_call(self) -> None:
        tree = _tree_table()
        t1, t2 = tree(2), tree(3)

        sugared = dictobj_lang.create(tree, 1, [t1, t2])
        manual = dictobj_lang.allocate(tree)
        tree.lookup(dictobj_lang.INITIALIZER)(manual, 1, [t1, t2])

        for o in (sugared, manual):
            self.assertEqual(o.label, 1)
            self.assertEqual(o.branches, [t1, t2])
        self.assertEqual(dictobj_lang.fields_of(sugared), dictobj_lang.fields_of(manual))
        self.assertIs(dictobj_lang.table_of(manual), tree)

    def test_allocate_skips_initializer(self) -> None:
        calls = []
        table = dictobj_lang.OperationTable("Counted")
        table.define(lambda self, *args: calls.append(args), name=dictobj_lang.INITIALIZER)
        o = dictobj_lang.allocate(table)
        self.assertEqual(calls, [])
        self.assertEqual(dictobj_lang.fields_of(o), {})
        self.assertIs(dictobj_lang.table_of(o), table)

    def test_create_with_required_initializer_args_missing_raises(self) -> None:
        with self.assertRaises(TypeError):
            dictobj_lang.create(_tree_table())

    def test_table_without_initializer_creates_empty_object(self) -> None:
        table = dictobj_lang.OperationTable("Bare")
        o = dictobj_lang.create(table)
        self.assertEqual(dictobj_lang.fields_of(o), {})
        self.assertIs(dictobj_lang.table_of(o), table)

    def test_init_args_without_initializer_raise(self) -> None:
        with self.assertRaises(TypeError):
            dictobj_lang.create(dictobj_lang.OperationTable("Bare"), 1)
        with self.assertRaises(TypeError):
            dictobj_lang.create(None, 1)

    def test_missing_attribute_raises(self) -> None:
        o = dictobj_lang.create(_tree_table(), 1)
        with self.assertRaises(dictobj_lang.AttributeNotFound) as ctx:
            dictobj_lang.get(o, "nonexistent")
        self.assertEqual(ctx.exception.name, "nonexistent")
        self.assertIs(ctx.exception.target, o)
        self.assertIn("'Tree'", str(ctx.exception))
        self.assertNotIn("DispatchObject", str(ctx.exception))
        with self.assertRaises(dictobj_lang.AttributeNotFound):
            o.nonexistent
        with self.assertRaises(dictobj_lang.AttributeNotFound):
            dictobj_lang.create().anything

    def test_missing_attribute_is_an_attribute_error(self) -> None:
        o = dictobj_lang.create()
        self.assertIsInstance(dictobj_lang.AttributeNotFound("x", o), AttributeError)
        self.assertIsInstance(dictobj_lang.AttributeNotFound("x", o), dictobj_lang.DictObjError)
        self.assertIsNone(getattr(o, "missing", None))
        self.assertFalse(hasattr(o, "missing"))

    def test_missing_table_operation_raises(self) -> None:
        with self.assertRaises(dictobj_lang.AttributeNotFound) as ctx:
            _tree_table().nope
        self.assertIn("'table Tree'", str(ctx.exception))

    def test_missing_attribute_message_names_the_object_kind(self) -> None:
        with self.assertRaises(dictobj_lang.AttributeNotFound) as ctx:
            dictobj_lang.get(dictobj_lang.create(), "nope")
        self.assertEqual(str(ctx.exception), "'object' has no field or operation 'nope'")
        self.assertEqual(dictobj_lang.type_name(_tree_table()(1)), "Tree")
        self.assertEqual(dictobj_lang.type_name(5), "int")

    def test_aliasing_shares_state(self) -> None:
        o1 = dictobj_lang.create()
        o2 = o1
        dictobj_lang.set(o1, "balance", 100)
        self.assertEqual(dictobj_lang.get(o2, "balance"), 100)

    def test_set_ignores_operation_names(self) -> None:
        tree = _tree_table()
        t = tree(1)
        dictobj_lang.set(t, "is_leaf", False)
        self.assertIs(t.is_leaf, False)
        # Other instances still see the table's operation.
        self.assertTrue(tree(2).is_leaf())

    def test_tree_end_to_end(self) -> None:
        tree = _tree_table()
        t = dictobj_lang.create(tree, 1)
        self.assertEqual(t.branches, [])
        self.assertTrue(dictobj_lang.call(dictobj_lang.get(t, "is_leaf")))
        child = dictobj_lang.create(tree, 2)
        dictobj_lang.set(t, "branches", [child])
        self.assertFalse(dictobj_lang.call(dictobj_lang.get(t, "is_leaf")))

    def test_operations_are_stored_once(self) -> None:
        tree = _tree_table()
        a, b = tree(1), tree(2)
        self.assertIs(a.is_leaf.func, b.is_leaf.func)
        self.assertNotIn("is_leaf", dictobj_lang.fields_of(a))

    def test_table_mutation_is_visible_to_existing_instances(self) -> None:
        tree = _tree_table()
        t = tree(7)
        tree.define(lambda self: self.label * 2, name="double")
        self.assertEqual(t.double(), 14)

    def test_has_and_dir(self) -> None:
        t = _tree_table()(1)
        self.assertTrue(dictobj_lang.has(t, "label"))
        self.assertTrue(dictobj_lang.has(t, "is_leaf"))
        self.assertFalse(dictobj_lang.has(t, "missing"))
        self.assertIn("is_leaf", dir(t))
        self.assertIn("label", dir(t))

    def test_repr_handles_self_reference(self) -> None:
        t = _tree_table()(1)
        t.branches.append(t)
        self.assertIn("...", repr(t))
        self.assertTrue(repr(t).startswith("Tree{"))

    def test_table_container_protocol(self) -> None:
        tree = _tree_table()
        self.assertIn("is_leaf", tree)
        self.assertEqual(len(tree), 2)
        self.assertEqual(sorted(tree), ["__init__", "is_leaf"])
        self.assertIn("Tree", repr(tree))

    def test_module_helpers_are_reexported(self) -> None:
        self.assertIs(dictobj_lang.get, objects.get)
        self.assertIs(dictobj_lang.set, objects.set)


if __name__ == "__main__":
    unittest.main(verbosity=2)

"""
Utility tests (Unset sentinel, coalesce, rename, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from types import MappingProxyType
from unittest import TestCase

from argus.utils import Unset, UnsetType, coalesce, mirror, rename


class TestUnset(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsey(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)


class TestCoalesce(TestCase):
    def testReplacesUnsetOnly(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertIs(coalesce(False, True), False)
        self.assertIsNone(coalesce(Unset))


class TestRename(TestCase):
    def testFunctionForm(self):
        def f():
            pass
        self.assertIs(rename(f, "work"), f)
        self.assertEqual((f.__name__, f.__qualname__), ("work", "work"))

    def testDecoratorForm(self):
        @rename("work")
        def f():
            pass
        self.assertEqual(f.__name__, "work")

    def testWrongArity(self):
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):
    def testContainersAreFrozen(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")
            scalar = mirror("scalar")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._scalar = "x"

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.scalar, "x")
        self.assertEqual(holder._items, [1, 2])

    def testReadOnly(self):
        class Holder:
            value = mirror("value")
            _value = 1

        with self.assertRaises(AttributeError):
            Holder().value = 2


if __name__ == "__main__":
    unittest.main()

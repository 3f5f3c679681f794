"""
Tests for the internal helpers.

This module verifies:
- The Unset sentinel: singleton identity, falsy semantics, representation,
  copying and pickling, finality and PEP 604 unions.
- coalesce() replacing only Unset.
- mirror() and the Introspective metaclass producing read-only views and
  stable representations.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from argtree.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported instance on every call.
        """
        self.assertIs(UnsetType(), Unset)

    def testFalsyButDistinct(self) -> None:
        """
        The sentinel is falsy without being equal to other falsy values.
        """
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, False)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesPreserveIdentity(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testUnions(self) -> None:
        """
        Unset can stand in for its type in isinstance() unions.
        """
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("text", Unset | str))
        self.assertFalse(isinstance(3, str | Unset))


class CoalesceTest(TestCase):
    """
    Test suite for coalesce().
    """

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalsyValues(self) -> None:
        for value in (None, False, 0, "", []):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class IntrospectiveTest(TestCase):
    """
    Test suite for mirror() and the Introspective metaclass.
    """

    def setUp(self) -> None:
        class SampleRecord(metaclass=Introspective):
            __introspectable__ = ("items", "table", "label")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._label = "sample"

        self.record = SampleRecord()

    def testTypename(self) -> None:
        self.assertEqual(type(self.record).__typename__, "sample-record")

    def testMirroredViewsAreReadOnly(self) -> None:
        self.assertEqual(self.record.items, (1, 2))
        with self.assertRaises(TypeError):
            self.record.table["b"] = 2
        with self.assertRaises(AttributeError):
            self.record.label = "other"

    def testRepr(self) -> None:
        self.assertEqual(repr(self.record), "sample-record(items=(1, 2), table=mappingproxy({'a': 1}), label='sample')")

    def testRichRepr(self) -> None:
        self.assertEqual(dict(self.record.__rich_repr__())["label"], "sample")

    def testRename(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")


if __name__ == "__main__":
    unittest.main()

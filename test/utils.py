"""
Tests for the shared helpers.

This module verifies:
- The Unset sentinel: singleton identity, falsy semantics, repr, finality.
- coalesce() and rename().
- pluralize() on the regular rules and the supported irregulars.
- IntrospectableType: typename derivation, read-only mirrored attributes and reprs.
"""
import unittest
from unittest import TestCase

from argtree.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertNotEqual(Unset, None)

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)


class HelpersTest(TestCase):
    """
    Test suite for coalesce(), rename() and pluralize().
    """

    def testCoalesce(self):
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(Unset, 3), 3)
        self.assertEqual(coalesce(0, 3), 0)
        self.assertIsNone(coalesce(None, 3))

    def testRenameInPlace(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename()

    def testPluralizeRegular(self):
        self.assertEqual(pluralize("option"), "options")
        self.assertEqual(pluralize("switch"), "switches")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("key"), "keys")

    def testPluralizeLastWordOnly(self):
        self.assertEqual(pluralize("command entry"), "command entries")

    def testPluralizeIrregularsAndCasing(self):
        self.assertEqual(pluralize("child"), "children")
        self.assertEqual(pluralize("Alias"), "Aliases")
        self.assertEqual(pluralize("FLAG"), "FLAGS")


class IntrospectableTest(TestCase):
    """
    Test suite for the `IntrospectableType` metaclass.
    """

    def setUp(self):
        class SampleNode(metaclass=IntrospectableType):
            __introspectable__ = ("name", "items")
            __displayable__ = ("name",)

            def __init__(self):
                self._name = "sample"
                self._items = [1, 2]

        self.type = SampleNode

    def testTypename(self):
        self.assertEqual(self.type.__typename__, "sample-node")

    def testMirroredAttributesAreReadOnlyCopies(self):
        sample = self.type()
        sample.items.append(3)
        self.assertEqual(sample.items, [1, 2])
        with self.assertRaises(AttributeError):
            sample.name = "other"

    def testDisplayableDefaultsToUnset(self):
        self.assertIs(IntrospectableType.__displayable__, Unset)

    def testReprFallsBackToIntrospectable(self):
        class Plain(metaclass=IntrospectableType):
            __introspectable__ = ("name",)

            def __init__(self):
                self._name = "plain"

        self.assertEqual(repr(Plain()), "plain(name='plain')")

    def testReprUsesDisplayable(self):
        self.assertEqual(repr(self.type()), "sample-node(name='sample')")


if __name__ == "__main__":
    unittest.main()

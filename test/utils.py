"""
Tests for the shared helpers.

This module verifies:
- The Unset sentinel (singleton identity, falsiness, copy/pickle identity, finality).
- coalesce() and its treatment of falsy values.
- rename(), freeze() and mirror().
- palette() defaults, __main__.__styles__ overrides and colorless mode.
- kebab() spelling of option names.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase, mock

from mysh.utils import *


class UnsetTest(TestCase):
    """
    The Unset sentinel behaves as a process-wide singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyAndRepr(self) -> None:
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        # Falsy but distinct from the other falsy values.
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)

    def testCopyAndPickleKeepIdentity(self) -> None:
        """
        copy, deepcopy and a pickle round-trip all resolve to the module-level instance.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy({"key": Unset})["key"], Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):
                pass


class CoalesceTest(TestCase):

    def testUnsetIsReplaced(self) -> None:
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(Unset, "default"), "default")

    def testOtherValuesAreKept(self) -> None:
        for value in (None, 0, "", [], False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "default"), value)


class RenameTest(TestCase):

    def testRename(self) -> None:
        @rename("styler")
        def function():
            pass

        self.assertEqual(function.__name__, "styler")
        self.assertEqual(function.__qualname__, "styler")

    def testNonString(self) -> None:
        with self.assertRaises(TypeError):
            rename(42)


class FreezeTest(TestCase):

    def testContainers(self) -> None:
        self.assertEqual(freeze([1, 2]), (1, 2))
        self.assertEqual(freeze({1, 2}), frozenset({1, 2}))
        frozen = freeze({"a": 1})
        self.assertIsInstance(frozen, MappingProxyType)
        with self.assertRaises(TypeError):
            frozen["a"] = 2

    def testSnapshot(self) -> None:
        """
        later changes to the source container do not show through the snapshot.
        """
        source = {"a": 1}
        frozen = freeze(source)
        source["b"] = 2
        self.assertNotIn("b", frozen)

    def testScalarsAreReturnedAsIs(self) -> None:
        self.assertEqual(freeze("text"), "text")
        self.assertIsNone(freeze(None))


class MirrorTest(TestCase):

    def setUp(self) -> None:
        class Entry:
            help = mirror("help")
            name = mirror("name")

            def __init__(self):
                self._help = ["--a", "--b"]
                self._name = "entry"

        self.entry = Entry()

    def testReadsBackingAttribute(self) -> None:
        self.assertEqual(self.entry.name, "entry")
        self.assertEqual(self.entry.help, ("--a", "--b"))

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.entry.name = "other"

    def testNonString(self) -> None:
        with self.assertRaises(TypeError):
            mirror(None)


class PaletteTest(TestCase):

    def testDefaults(self) -> None:
        styler = palette({"title": "bold"})
        self.assertEqual(styler("title"), "bold")
        self.assertEqual(styler("unknown"), "")

    def testColorless(self) -> None:
        styler = palette({"title": "bold"}, colorful=False)
        self.assertEqual(styler("title"), "")

    def testHostOverrides(self) -> None:
        """
        a __styles__ mapping in __main__ takes precedence over the defaults.
        """
        main = __import__("__main__")
        with mock.patch.object(main, "__styles__", {"title": "italic"}, create=True):
            styler = palette({"title": "bold", "body": "dim"})
        self.assertEqual(styler("title"), "italic")
        self.assertEqual(styler("body"), "dim")


class KebabTest(TestCase):

    def testKebab(self) -> None:
        self.assertEqual(kebab("dry_run"), "dry-run")
        self.assertEqual(kebab("name"), "name")
        self.assertEqual(kebab("_private_"), "private")


if __name__ == "__main__":
    unittest.main()

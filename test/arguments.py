"""
Arguments module behavioral tests (document building, targets, resolution).

Scope
- Validate parse(): the three document shapes and the option scanning rules.
- Validate render() against parse().
- Validate describe() and the targets it accepts (shapes, scalars, dict, None, optional).
- Validate resolve(): positional retry, raw-text conversion, failures listing what was expected.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (parse, render, resolve, describe, Arguments, Optional).
"""
import unittest
from unittest import TestCase

from mysh import ArgParseError, Arguments, Document, Optional, describe, literal, parse, render, resolve
from mysh.utils import Unset


class Greet(Arguments):
    name: str
    times: int = 1
    loud: bool = False


class Copy(Arguments):
    source: str
    dry_run: bool = False
    depth: int | None


class Target(Arguments):
    path: str


class Settings(Arguments):
    tags: dict = {}
    level: float = 0.5


class Upper:
    """hand-written descriptor: one word, upper-cased."""

    def __describe__(self):
        return ("[word]",)

    def __convert__(self, value, /):
        if not isinstance(value, str):
            raise ArgParseError("expected a word")
        return value.upper()


class LiteralTest(TestCase):
    """Scalar reading of option values."""

    def testBooleans(self):
        self.assertIs(literal("true"), True)
        self.assertIs(literal("1"), True)
        self.assertIs(literal("false"), False)
        self.assertIs(literal("0"), False)

    def testIntegers(self):
        self.assertEqual(literal("42"), 42)
        self.assertEqual(literal("-7"), -7)
        self.assertEqual(literal("007"), 7)

    def testEverythingElseIsText(self):
        self.assertEqual(literal("bob"), "bob")
        self.assertEqual(literal("2.5"), "2.5")
        self.assertEqual(literal("True"), "True")
        self.assertEqual(literal(""), "")

    def testOversizedIntegersStayText(self):
        digits = "1" * 5000
        self.assertEqual(literal(digits), digits)
        self.assertEqual(parse(["cmd", "--n", digits]), {"n": digits})


class ParseTest(TestCase):
    """Document building from token sequences."""

    def testNothingAfterName(self):
        self.assertIs(parse(["cmd"]), Unset)

    def testBareFlag(self):
        self.assertEqual(parse(["cmd", "--verbose"]), {"verbose": True})

    def testSpacedValue(self):
        self.assertEqual(parse(["cmd", "--count", "3"]), {"count": 3})

    def testInlineValue(self):
        self.assertEqual(parse(["cmd", "--name=bob"]), {"name": "bob"})
        self.assertEqual(parse(["cmd", "--expr=a=b"]), {"expr": "a=b"})

    def testPendingFlagFollowedByFlag(self):
        document = parse(["cmd", "--all", "--name", "x", "--force"])
        self.assertEqual(document, {"all": True, "name": "x", "force": True})
        self.assertEqual(list(document), ["all", "name", "force"])

    def testFalseValues(self):
        self.assertEqual(parse(["cmd", "--flag", "false"]), {"flag": False})
        self.assertEqual(parse(["cmd", "--flag=0"]), {"flag": False})

    def testDocumentType(self):
        document = parse(["cmd", "--count", "007", "--on"])
        self.assertIsInstance(document, Document)
        self.assertEqual(document.tokens, {"count": "007", "on": None})

    def testSinglePositional(self):
        self.assertEqual(parse(["cmd", "5"]), 5)
        self.assertEqual(parse(["cmd", "2.5"]), 2.5)
        self.assertIs(parse(["cmd", "true"]), True)
        self.assertEqual(parse(["cmd", "bob"]), "bob")

    def testParamWithoutOption(self):
        with self.assertRaises(ArgParseError) as context:
            parse(["cmd", "x", "--a"])
        self.assertEqual(context.exception.detail, "param without option")

        with self.assertRaises(ArgParseError):
            parse(["cmd", "--a", "1", "2"])

    def testRepeatedOption(self):
        with self.assertRaises(ArgParseError):
            parse(["cmd", "--a", "1", "--a", "2"])

    def testEmptyOptionName(self):
        with self.assertRaises(ArgParseError):
            parse(["cmd", "--", "x"])
        with self.assertRaises(ArgParseError):
            parse(["cmd", "--=x", "--y"])


class RenderTest(TestCase):
    """Documents back to option words."""

    def testRender(self):
        self.assertEqual(
            render({"verbose": True, "count": 3, "name": "bob", "off": False}),
            ["--verbose", "--count=3", "--name=bob", "--off=false"],
        )

    def testRenderThenParse(self):
        for document in (
            {"verbose": True},
            {"count": 3, "name": "bob smith"},
            {"a": False, "b": True, "c": -12, "d": ""},
        ):
            with self.subTest(document=document):
                self.assertEqual(parse(["cmd", *render(document)]), document)


class DescribeTest(TestCase):
    """Targets and their help descriptors."""

    def testShapeDescriptors(self):
        self.assertIs(describe(Greet), Greet)
        self.assertEqual(Greet.__describe__(), ("--name: str", "--times: int = 1", "--loud: bool = False"))

    def testKebabOptionsAndOptionalFields(self):
        self.assertEqual(Copy.__describe__(), ("--source: str", "--dry-run: bool = False", "--depth: int | None"))

    def testScalarDescriptors(self):
        self.assertEqual(describe(str).__describe__(), ("[str]",))
        self.assertEqual(describe(int).__describe__(), ("[int]",))
        self.assertEqual(describe(float).__describe__(), ("[float]",))
        self.assertEqual(describe(bool).__describe__(), ("[bool]",))

    def testNothing(self):
        self.assertEqual(describe(None).__describe__(), ())

    def testOptionalPrefix(self):
        self.assertEqual(describe(int | None).__describe__(), ("optional [int]",))
        self.assertEqual(Optional(Target).__describe__(), ("optional --path: str",))

    def testCustomDescriptor(self):
        upper = Upper()
        self.assertIs(describe(upper), upper)

    def testUnsupportedTarget(self):
        with self.assertRaises(TypeError):
            describe(list)
        with self.assertRaises(TypeError):
            describe(int | str)


class ResolveTest(TestCase):
    """From token sequences to typed values."""

    def testNoArguments(self):
        self.assertIsNone(resolve(["cmd"], None))
        with self.assertRaises(ArgParseError):
            resolve(["cmd", "x"], None)

    def testRequiredFieldsListedWhenMissing(self):
        with self.assertRaises(ArgParseError) as context:
            resolve(["cmd"], Greet)
        error = context.exception
        self.assertIn("--name", error.detail)
        self.assertIn("--name: str", error.message)
        self.assertEqual(error.options["expected"], Greet.__describe__())
        self.assertEqual(error.options["command"], "cmd")

    def testDefaultsFill(self):
        self.assertEqual(resolve(["greet", "--name", "bob"], Greet), Greet(name="bob", times=1, loud=False))

    def testRawTextReachesTypedFields(self):
        greet = resolve(["greet", "--name", "007", "--times", "1"], Greet)
        self.assertEqual(greet.name, "007")
        self.assertEqual(greet.times, 1)
        self.assertIs(type(greet.times), int)

    def testFlags(self):
        self.assertIs(resolve(["greet", "--name", "bob", "--loud"], Greet).loud, True)
        self.assertIs(resolve(["greet", "--name", "bob", "--loud", "false"], Greet).loud, False)

    def testKebabAndSnakeSpellings(self):
        self.assertIs(resolve(["cp", "--source", "a", "--dry-run"], Copy).dry_run, True)
        self.assertIs(resolve(["cp", "--source", "a", "--dry_run"], Copy).dry_run, True)

    def testOptionalFieldDefaultsToNone(self):
        copy = resolve(["cp", "--source", "a"], Copy)
        self.assertIsNone(copy.depth)
        self.assertEqual(resolve(["cp", "--source", "a", "--depth", "3"], Copy).depth, 3)

    def testMutableDefaultsAreCopied(self):
        first = resolve(["set"], Settings)
        first.tags["x"] = 1
        self.assertEqual(resolve(["set"], Settings).tags, {})

    def testUnknownOption(self):
        with self.assertRaises(ArgParseError) as context:
            resolve(["greet", "--name", "bob", "--colour", "red"], Greet)
        self.assertIn("--colour", context.exception.detail)
        self.assertEqual(context.exception.options["supplied"], ("--name", "bob", "--colour", "red"))

    def testInvalidFieldValue(self):
        with self.assertRaises(ArgParseError) as context:
            resolve(["greet", "--name", "bob", "--times", "many"], Greet)
        self.assertIn("--times", context.exception.detail)

    def testSingleFieldShapeTakesPositional(self):
        self.assertEqual(resolve(["cd", "/tmp"], Target), Target(path="/tmp"))
        self.assertEqual(resolve(["cd", "42"], Target), Target(path="42"))

    def testPositionalNeedsOptionForWiderShapes(self):
        with self.assertRaises(ArgParseError):
            resolve(["greet", "bob"], Greet)

    def testScalarTargets(self):
        self.assertEqual(resolve(["c", "3"], int), 3)
        self.assertEqual(resolve(["c", "3"], float), 3.0)
        self.assertEqual(resolve(["c", "2.5"], float), 2.5)
        self.assertIs(resolve(["c", "1"], bool), True)
        self.assertIs(resolve(["c", "false"], bool), False)

    def testPositionalFallsBackToRawText(self):
        self.assertEqual(resolve(["c", "true"], str), "true")
        self.assertEqual(resolve(["c", "12"], str), "12")

    def testScalarTargetRejectsGarbage(self):
        with self.assertRaises(ArgParseError) as context:
            resolve(["c", "abc"], int)
        self.assertEqual(context.exception.options["expected"], ("[int]",))
        with self.assertRaises(ArgParseError):
            resolve(["c"], int)
        with self.assertRaises(ArgParseError):
            resolve(["c", "--x", "1"], int)

    def testOptionalTargets(self):
        self.assertIsNone(resolve(["c"], Optional(int)))
        self.assertIsNone(resolve(["c"], int | None))
        self.assertEqual(resolve(["c", "4"], int | None), 4)
        self.assertIsNone(resolve(["c"], Optional(Greet)))

    def testRawDocument(self):
        self.assertEqual(resolve(["c", "--a", "1", "--b=x"], dict), {"a": True, "b": "x"})
        self.assertEqual(resolve(["c"], dict), {})

    def testOversizedIntegers(self):
        digits = "9" * 5000
        with self.assertRaises(ArgParseError) as context:
            resolve(["greet", "--name", "bob", "--times", digits], Greet)
        self.assertIn("--times", context.exception.detail)
        self.assertEqual(resolve(["cp", "--source", digits], Copy).source, digits)
        self.assertEqual(resolve(["c", "--n", digits], dict), {"n": digits})
        self.assertEqual(resolve(["c", digits], str), digits)

    def testRawPositionalIsPassedAsScalar(self):
        self.assertEqual(resolve(["c", "foo"], dict), "foo")
        self.assertEqual(resolve(["c", "3"], dict), 3)

    def testCustomDescriptor(self):
        self.assertEqual(resolve(["c", "word"], Upper()), "WORD")
        with self.assertRaises(ArgParseError) as context:
            resolve(["c", "--x"], Upper())
        self.assertEqual(context.exception.options["expected"], ("[word]",))


class ArgumentsTest(TestCase):
    """Declarative shapes as plain value objects."""

    def testKeywordConstruction(self):
        greet = Greet(name="bob")
        self.assertEqual(greet.to_dict(), {"name": "bob", "times": 1, "loud": False})

    def testMissingAndUnexpectedFields(self):
        with self.assertRaises(TypeError):
            Greet()
        with self.assertRaises(TypeError):
            Greet(name="bob", colour="red")

    def testEqualityAndRepr(self):
        self.assertEqual(Greet(name="a"), Greet(name="a"))
        self.assertNotEqual(Greet(name="a"), Greet(name="b"))
        self.assertEqual(repr(Greet(name="a")), "Greet(name='a', times=1, loud=False)")

    def testInheritedFieldsComeFirst(self):
        class LoudGreet(Greet):
            volume: int = 11

        self.assertEqual(list(LoudGreet.__fields__), ["name", "times", "loud", "volume"])


if __name__ == "__main__":
    unittest.main()

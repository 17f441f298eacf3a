"""
Grammar tests (command patterns and option flags).

Scope
- Validate pattern parsing, default-command detection and ordering rules.
- Validate option flag forms, defaults, negation and malformed flags.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (parse_pattern, parse_option_flag).
"""

import unittest
from unittest import TestCase

from bosun import parse_pattern, parse_option_flag, ArgumentSpec, OptionSpec, GrammarError


class TestPatterns(TestCase):

    def testNameAndArguments(self):
        name, arguments = parse_pattern("deploy <target> [region] [...services]")
        self.assertEqual(name, "deploy")
        self.assertEqual([argument.name for argument in arguments], ["target", "region", "services"])
        self.assertEqual([argument.required for argument in arguments], [True, False, False])
        self.assertEqual([argument.variadic for argument in arguments], [False, False, True])

    def testNamespacedName(self):
        name, arguments = parse_pattern("db:migrate [step]")
        self.assertEqual(name, "db:migrate")
        self.assertEqual(len(arguments), 1)

    def testBracketFirstDeclaresDefaultCommand(self):
        name, arguments = parse_pattern("[file]")
        self.assertEqual(name, "")
        self.assertEqual(arguments[0].name, "file")

    def testRequiredVariadic(self):
        _, arguments = parse_pattern("rm <...files>")
        self.assertTrue(arguments[0].required)
        self.assertTrue(arguments[0].variadic)
        self.assertEqual(arguments[0].metavar, "<files...>")

    def testRequiredAfterOptionalRaises(self):
        with self.assertRaises(GrammarError):
            parse_pattern("x [a] <b>")

    def testTwoVariadicsRaise(self):
        with self.assertRaises(GrammarError):
            parse_pattern("x [...a] [...b]")

    def testVariadicNotLastRaises(self):
        with self.assertRaises(GrammarError):
            parse_pattern("x <...a> <b>")

    def testDuplicateArgumentRaises(self):
        with self.assertRaises(GrammarError):
            parse_pattern("x <a> [a]")

    def testWordAfterArgumentRaises(self):
        with self.assertRaises(GrammarError):
            parse_pattern("x <a> y")

    def testUnbalancedBracketRaises(self):
        with self.assertRaises(GrammarError):
            parse_pattern("x <a")

    def testDefaultsOnlyForOptionalArguments(self):
        _, arguments = parse_pattern("x [level]", {"level": "3"})
        self.assertEqual(arguments[0].default, "3")
        with self.assertRaises(GrammarError):
            parse_pattern("x <level>", {"level": "3"})
        with self.assertRaises(GrammarError):
            parse_pattern("x [level]", {"other": "3"})

    def testArgumentSpecEquality(self):
        self.assertEqual(ArgumentSpec("a", required=True), ArgumentSpec("a", required=True))
        self.assertNotEqual(ArgumentSpec("a", required=True), ArgumentSpec("a"))


class TestFlags(TestCase):

    def testBooleanWithShortAlias(self):
        spec = parse_option_flag("-n, --loud", "shout")
        self.assertIsInstance(spec, OptionSpec)
        self.assertEqual(spec.long, "loud")
        self.assertEqual(spec.short, "-n")
        self.assertFalse(spec.takes_value)
        self.assertIs(spec.default, False)
        self.assertEqual(spec.description, "shout")

    def testValueTaking(self):
        spec = parse_option_flag("--port <port>", type=int)
        self.assertTrue(spec.takes_value)
        self.assertFalse(spec.optional_value)
        self.assertIsNone(spec.default)
        self.assertEqual(spec.coerce("8080"), 8080)

    def testOptionalValue(self):
        spec = parse_option_flag("--color [when]")
        self.assertTrue(spec.takes_value)
        self.assertTrue(spec.optional_value)

    def testNegatableDefaultsToTrue(self):
        spec = parse_option_flag("--no-color")
        self.assertEqual(spec.long, "color")
        self.assertTrue(spec.negatable)
        self.assertIs(spec.default, True)
        self.assertIn("--no-color", spec.names)

    def testKeyIsIdentifier(self):
        self.assertEqual(parse_option_flag("--dry-run").key, "dry_run")

    def testExplicitDefault(self):
        self.assertEqual(parse_option_flag("--env <name>", default="dev").default, "dev")

    def testMalformedFlagsRaise(self):
        for flag in ("-x", "--a, --b", "-xy, --long", "--bad_name!", "-a, -b, --long", "", "--no-x <value>", "--env.port <port>"):
            with self.subTest(flag=flag), self.assertRaises(GrammarError):
                parse_option_flag(flag)

    def testTypeOnBooleanRaises(self):
        with self.assertRaises(GrammarError):
            parse_option_flag("--loud", type=int)


if __name__ == '__main__':
    unittest.main()

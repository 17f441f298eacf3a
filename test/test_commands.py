"""
Command registry tests (registration, aliases, freezing, namespaces).

Scope
- Validate duplicate detection for names and aliases.
- Validate builder freezing and action/middleware contracts.
- Validate option collisions within a command and with global options.
- Validate namespace helpers (children, grouping nodes).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from bosun import (
    Registry,
    GlobalFlags,
    namespace,
    DuplicateCommandError,
    GrammarError,
)


class TestRegistry(TestCase):

    def setUp(self):
        self.switches = GlobalFlags()
        self.registry = Registry(switches=self.switches)

    def testRegisterAndResolveExact(self):
        self.registry.register("deploy <target>", "ship it").alias("d")
        self.assertEqual(self.registry.resolve_exact("deploy").name, "deploy")
        self.assertEqual(self.registry.resolve_exact("d").name, "deploy")
        self.assertIsNone(self.registry.resolve_exact("nope"))

    def testDuplicateNameRaises(self):
        self.registry.register("build")
        with self.assertRaises(DuplicateCommandError) as context:
            self.registry.register("build [target]")
        self.assertEqual(context.exception.name, "build")

    def testAliasCollisionRaises(self):
        self.registry.register("build")
        deploy = self.registry.register("deploy").alias("d")
        with self.assertRaises(DuplicateCommandError):
            deploy.alias("build")
        with self.assertRaises(DuplicateCommandError):
            self.registry.register("d")

    def testAllCommandsKeepRegistrationOrder(self):
        for name in ("zeta", "alpha", "db:seed", "beta"):
            self.registry.register(name)
        self.assertEqual([command.name for command in self.registry.all_commands()], ["zeta", "alpha", "db:seed", "beta"])

    def testNamesIncludeAliases(self):
        self.registry.register("deploy").alias("ship")
        self.assertEqual(set(self.registry.names()), {("deploy", "deploy"), ("ship", "deploy")})

    def testDefaultCommand(self):
        self.assertIsNone(self.registry.default_command())
        self.registry.register("[file]")
        self.assertTrue(self.registry.default_command().is_default)
        with self.assertRaises(DuplicateCommandError):
            self.registry.register("<other>")

    def testRootCommand(self):
        root = self.registry.root
        self.assertTrue(root.is_root)
        self.assertEqual(root.arguments, ())

    def testFrozenBuilderRejectsMutation(self):
        builder = self.registry.register("build")
        descriptor = self.registry.resolve_exact("build")
        self.assertTrue(builder.frozen)
        with self.assertRaises(TypeError):
            builder.option("--fast")
        with self.assertRaises(AttributeError):
            descriptor.name = "other"

    def testSecondActionRaises(self):
        builder = self.registry.register("build").action(lambda options: None)
        with self.assertRaises(TypeError):
            builder.action(lambda options: None)

    def testMiddlewareMustBeCoroutineFunction(self):
        builder = self.registry.register("build")
        with self.assertRaises(TypeError):
            builder.use(lambda context: None)

        async def middleware(context):
            return await context.next()

        builder.use(middleware)
        self.assertEqual(self.registry.resolve_exact("build").middlewares, (middleware,))

    def testOptionCollisionWithinCommandRaises(self):
        builder = self.registry.register("build").option("-f, --fast")
        with self.assertRaises(GrammarError):
            builder.option("--fast <level>")
        with self.assertRaises(GrammarError):
            builder.option("-f, --force")

    def testOptionCollisionWithEnabledGlobalRaises(self):
        self.switches.enable("verbose")
        with self.assertRaises(GrammarError):
            self.registry.register("build").option("-v, --version")

    def testGlobalCollisionWithCommandOptionRaises(self):
        self.registry.register("build").option("-q, --quick")
        with self.assertRaises(GrammarError):
            self.registry.check_global(self.switches.spec("quiet"))

    def testRootOptionsAreGlobal(self):
        self.registry.root_builder.option("-h, --help")
        self.switches.enable("debug")
        self.assertEqual([spec.key for spec in self.registry.global_options()], ["help", "debug"])

    def testChildrenAndGroups(self):
        self.registry.register("db", "database")
        self.registry.register("db:migrate").action(lambda options: None)
        self.registry.register("db:seed").action(lambda options: None)
        group = self.registry.resolve_exact("db")
        self.assertEqual([child.name for child in self.registry.children("db")], ["db:migrate", "db:seed"])
        self.assertTrue(self.registry.is_group(group))
        self.assertFalse(self.registry.is_group(self.registry.resolve_exact("db:seed")))

    def testGroupCheckLeavesChildrenOpen(self):
        self.registry.register("db", "database")
        builder = self.registry.register("db:migrate")
        self.assertTrue(self.registry.is_group(self.registry.resolve_exact("db")))
        self.assertFalse(builder.frozen)
        builder.option("--step <n>", "migrations to apply")

    def testNamespace(self):
        self.assertEqual(namespace("make:model"), "make")
        self.assertIsNone(namespace("deploy"))
        self.assertEqual(self.registry.register("make:model").freeze().namespace, "make")


if __name__ == '__main__':
    unittest.main()

"""
Application facade tests (cli(), parse(), run(), help/version, switches).

Scope
- Validate end-to-end parsing and execution through the facade.
- Validate exit codes and fault rendering through the renderer.
- Validate global switch toggles and their reported state.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured by passing a list's append as the renderer.
"""

import unittest
from unittest import TestCase, IsolatedAsyncioTestCase

from bosun import cli, CLI, GrammarError, UnknownCommandError, HandlerError


def application(**config):
    rendered = []
    app = cli("shipyard", interval=None, renderer=rendered.append, **config)
    return app, rendered


class TestRun(TestCase):

    def testGreetRunsHandlerOnce(self):
        app, _ = application()
        calls = []
        app.command("greet <name>").option("-n, --loud").action(lambda name, options: calls.append((name, options["loud"])))
        self.assertEqual(app.run(["greet", "Ada", "-n"]), 0)
        self.assertEqual(calls, [("Ada", True)])

    def testUnknownCommandExitCodeAndMessage(self):
        app, rendered = application()
        for name in ("build", "deploy", "debug"):
            app.command(name)
        self.assertEqual(app.run(["buidl"]), 2)
        self.assertEqual(len(rendered), 1)
        self.assertIn("shipyard: error: unknown command 'buidl', did you mean 'build'?", rendered[0])

    def testDidYouMeanToggle(self):
        app, rendered = application()
        app.command("build")
        app.did_you_mean(False)
        app.run(["buidl"])
        self.assertNotIn("did you mean", rendered[0])

    def testHandlerFailureExitCode(self):
        app, rendered = application()

        def action(options):
            raise RuntimeError("disk full")

        app.command("build").action(action)
        self.assertEqual(app.run(["build"]), 1)
        self.assertIn("disk full", rendered[0])

    def testDebugRendersTraceback(self):
        app, rendered = application()
        app.debug()

        def action(options):
            raise RuntimeError("disk full")

        app.command("build").action(action)
        app.run(["build", "--debug"])
        self.assertEqual(len(rendered), 2)
        self.assertIn("Traceback", rendered[1])

    def testVerboseAndQuietTogether(self):
        app, _ = application()
        app.verbose().quiet()
        app.command("build")
        self.assertEqual(app.run(["build", "-v", "-q"]), 0)
        self.assertTrue(app.is_verbose)
        self.assertTrue(app.is_quiet)
        self.assertFalse(app.is_debug)

    def testDryRunReachesHandlers(self):
        app, _ = application()
        app.dry_run()
        seen = []
        app.command("deploy").action(lambda options: seen.append(options["dry_run"]))
        app.run(["deploy", "--dry-run"])
        self.assertEqual(seen, [True])
        self.assertTrue(app.is_dry_run)

    def testSwitchCollidingWithCommandOptionRaises(self):
        app, _ = application()
        app.command("build").option("-q, --quick")
        with self.assertRaises(GrammarError):
            app.quiet()

    def testHelpFlagRendersCommandHelp(self):
        app, rendered = application()
        app.help()
        app.command("copy <source> <destination>", "copy files")
        self.assertEqual(app.run(["copy", "--help"]), 0)
        self.assertIn("copy files", rendered[0])

    def testNoCommandWithHelpRendersListing(self):
        app, rendered = application(version="2.0.0")
        app.help()
        app.command("build", "build things")
        self.assertEqual(app.run([]), 0)
        self.assertIn("shipyard/2.0.0", rendered[0])
        self.assertIn("build things", rendered[0])

    def testVersionFlag(self):
        app, rendered = application(version="2.0.0")
        self.assertEqual(app.run(["-V"]), 0)
        self.assertEqual(rendered, ["shipyard/2.0.0"])

    def testLateVersionLeavesNoDanglingText(self):
        app, _ = application()
        app.command("a").action(lambda options: None)
        app.resolve([])
        with self.assertRaises(TypeError):
            app.version("1.0")
        self.assertIsNone(app.formatter.version)
        self.assertEqual(app.run(["a"]), 0)

    def testGroupingCommandRendersItsHelp(self):
        app, rendered = application()
        app.command("db", "database tasks")
        app.command("db:migrate", "apply migrations").action(lambda options: None)
        self.assertEqual(app.run(["db"]), 0)
        self.assertIn("db:migrate", rendered[0])

    def testStringPromptIsSplitLikeAShell(self):
        app, _ = application()
        seen = []
        app.command("say <message>").action(lambda message, options: seen.append(message))
        self.assertEqual(app.run("say 'hello world'"), 0)
        self.assertEqual(seen, ["hello world"])

    def testInvalidApplicationName(self):
        with self.assertRaises(TypeError):
            CLI("")


class TestParse(IsolatedAsyncioTestCase):

    async def testParseWithoutRunOnlyResolves(self):
        app, _ = application()
        calls = []
        app.command("build [target]").action(lambda target, options: calls.append(target))
        report = await app.parse(["build", "web"], run=False)
        self.assertEqual(report.arguments, ("web",))
        self.assertIsNone(report.outcome)
        self.assertEqual(calls, [])

    async def testParseReportsResolutionError(self):
        app, _ = application()
        report = await app.parse(["nope"])
        self.assertIsInstance(report.error, UnknownCommandError)
        self.assertEqual(report.exit_code, 2)

    async def testParseReportsHandlerError(self):
        app, _ = application()

        async def action(options):
            raise ValueError("bad")

        app.command("build").action(action)
        report = await app.parse(["build"])
        self.assertIsInstance(report.error, HandlerError)
        self.assertEqual(report.exit_code, 1)

    async def testExecuteResolvedInvocation(self):
        app, _ = application()
        app.command("answer").action(lambda options: 42)
        outcome = await app.execute(app.resolve(["answer"]))
        self.assertEqual(outcome.result, 42)


if __name__ == '__main__':
    unittest.main()

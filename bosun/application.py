"""
Bosun application facade.

Overview
- cli(name, **config) / CLI(name, **config): one object owning a Registry, a
  Resolver, the GlobalFlags controller, a Pipeline, a MetadataCache and a
  HelpFormatter.

- Registration
  • command(pattern, description="", *, passthrough=False, defaults=None)
    -> CommandBuilder
  • option(flag, description="", *, default, type): application-wide option
    stored on the root command.
  • verbose(), quiet(), debug(), dry_run(): enable the global switches.
  • help(), version(text, flags="-V, --version"), usage(text), example(text),
    did_you_mean(enabled=True).

- Running
  • resolve(tokens) -> ParsedInvocation | ResolutionError
  • await execute(invocation) -> Outcome
  • await parse(argv=None, *, run=True) -> Report
  • run(argv=None) -> int (exit code; renders help, versions and faults)

Configuration (constructor keywords)
- version, did_you_mean (True), threshold (2), help_ttl (5.0 s),
  interval (30.0 s, None disables the cache sweep), renderer (callable
  receiving a string; prints through a rich console by default), width (80).

Exit codes
- 0 success (including --help/--version), 1 handler failure, 2 usage error.
"""
import asyncio
import logging
import shlex
import sys
import traceback

from rich.console import Console
from rich.logging import RichHandler

from .cache import MetadataCache
from .commands import Registry
from .faults import CommandException, ResolutionError
from .helper import HelpFormatter
from .pipeline import Pipeline
from .resolver import Resolver
from .switches import GlobalFlags
from .utils import *

logger = logging.getLogger(__name__)


def configure_logging(level=logging.INFO, /, *, console=None):
    """
    Attach a RichHandler to the "bosun" logger (once) and set its level.

    Returns the package logger.
    """
    package = logging.getLogger(__package__)
    package.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in package.handlers):
        package.addHandler(RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            show_time=False,
            rich_tracebacks=True,
        ))
    return package


def _tokens(argv):
    if argv is None:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    return list(argv)


class Report:
    """
    What parse() did with one argv.

    - invocation: ParsedInvocation, or None when resolution failed.
    - error: the ResolutionError or HandlerError, else None.
    - outcome: pipeline Outcome when the command ran, else None.
    - displayed: "help" or "version" when that was rendered instead of running.
    """

    __slots__ = ("invocation", "error", "outcome", "displayed")

    def __init__(self, invocation=None, *, error=None, outcome=None, displayed=None):
        self.invocation = invocation
        self.error = error
        self.outcome = outcome
        self.displayed = displayed

    def __repr__(self):
        return "report(invocation=%r, error=%r, outcome=%r, displayed=%r)" % (
            self.invocation, self.error, self.outcome, self.displayed
        )

    @property
    def arguments(self):
        return self.invocation.arguments if self.invocation is not None else ()

    @property
    def options(self):
        return self.invocation.options if self.invocation is not None else {}

    @property
    def exit_code(self):
        if self.error is not None:
            return self.error.exit_code
        return self.outcome.exit_code if self.outcome is not None else 0


class CLI:
    """
    Command-line application.

    >>> app = cli("shipyard", version="1.0.0").verbose().help()
    >>> _ = app.command("deploy <target>", "ship it").action(lambda target, options: target)
    >>> app.run(["deploy", "prod"])
    0
    """

    def __init__(
            self,
            name,
            /,
            *,
            version=None,
            did_you_mean=True,
            threshold=2,
            help_ttl=5.0,
            interval=30.0,
            renderer=Unset,
            width=80,
    ):
        if not isinstance(name, str) or not name:
            raise TypeError("application name must be a non-empty string")
        self.name = name
        self.switches = GlobalFlags()
        self.registry = Registry(switches=self.switches)
        self.resolver = Resolver(self.registry, did_you_mean=did_you_mean, threshold=threshold)
        self.cache = MetadataCache(ttl=help_ttl, interval=interval)
        self.formatter = HelpFormatter(self.registry, self.cache, name=name, ttl=help_ttl, width=width)
        self.renderer = coalesce(renderer, self._print)
        self.pipeline = Pipeline(self.registry, helper=self.render_help, renderer=self._render)
        self._version = None
        self._console = None
        if version is not None:
            self.version(version)

    def __repr__(self):
        return "cli(name=%r, commands=%r)" % (self.name, len(self.registry))

    def _print(self, text):
        if self._console is None:
            self._console = Console(highlight=False, soft_wrap=True)
        self._console.print(text, markup=False, end="" if text.endswith("\n") else "\n")

    def _render(self, text):
        self.renderer(text)

    # --- registration ---

    def command(self, pattern, description="", /, *, passthrough=False, defaults=None):
        return self.registry.register(pattern, description, passthrough=passthrough, defaults=defaults)

    def option(self, flag, description="", /, *, default=Unset, type=Unset):
        self.registry.root_builder.option(flag, description, default=default, type=type)
        return self

    def _switch(self, name):
        if not self.switches.enabled(name):
            self.registry.check_global(self.switches.spec(name))
            self.switches.enable(name)
        return self

    def verbose(self):
        return self._switch("verbose")

    def quiet(self):
        return self._switch("quiet")

    def debug(self):
        return self._switch("debug")

    def dry_run(self):
        return self._switch("dry_run")

    def did_you_mean(self, enabled=True, /):
        self.resolver.did_you_mean = bool(enabled)
        return self

    def help(self, flags="-h, --help", /):
        self.option(flags, "display this message")
        return self

    def version(self, text, flags="-V, --version", /):
        if not isinstance(text, str):
            raise TypeError("version must be a string")
        self.option(flags, "display version number")
        self._version = text
        self.formatter.version = text
        return self

    def usage(self, text, /):
        if not isinstance(text, str):
            raise TypeError("usage text must be a string")
        self.formatter.usage = text
        return self

    def example(self, text, /):
        if not isinstance(text, str):
            raise TypeError("example text must be a string")
        self.formatter.examples.append(text)
        return self

    # --- state ---

    @property
    def is_verbose(self):
        return self.switches.verbose

    @property
    def is_quiet(self):
        return self.switches.quiet

    @property
    def is_debug(self):
        return self.switches.debug

    @property
    def is_dry_run(self):
        return self.switches.dry_run

    # --- running ---

    def render_help(self, name=None, /):
        return self.formatter.render(name)

    def resolve(self, tokens, /):
        result = self.resolver.resolve(tokens)
        if isinstance(result, ResolutionError):
            self.switches.reset()
        else:
            self.switches.update(result.options)
        return result

    async def execute(self, invocation, /):
        return await self.pipeline.execute(invocation)

    async def parse(self, argv=None, /, *, run=True, configure=False):
        """
        Resolve `argv` (sys.argv[1:] by default, a string is split like a
        shell would) and, when `run` is true,
        execute it. --help and --version render instead of executing.

        With `configure`, logging is set up from the global switches (see
        configure_logging) once resolution succeeded.
        """
        argv = _tokens(argv)
        result = self.resolve(argv)
        if isinstance(result, ResolutionError):
            return Report(error=result)
        if configure and self.switches.options():
            configure_logging(self.switches.level())

        options = result.options
        if options.get("help") is True and self.registry.root.option("help") is not None:
            if run:
                self._render(self.render_help(None if result.command.is_root else result.command.name))
            return Report(result, displayed="help")
        if self._version is not None and options.get("version") is True and self.registry.root.option("version"):
            if run:
                self._render("%s/%s" % (self.name, self._version))
            return Report(result, displayed="version")

        if not run:
            return Report(result)

        if result.command.is_root and self.registry.root.option("help") is not None:
            self._render(self.render_help())
            return Report(result, displayed="help")

        outcome = await self.execute(result)
        return Report(result, error=outcome.error, outcome=outcome)

    def run(self, argv=None, /):
        """
        Synchronous entry point: parse and run `argv`, render failures through
        the renderer and return the process exit code.
        """
        argv = _tokens(argv)
        report = asyncio.run(self.parse(argv, configure=True))
        if isinstance(report.error, CommandException):
            self._render(report.error.render(prog=self.name))
            if self.is_debug and report.error.__cause__ is not None:
                self._render("".join(traceback.format_exception(report.error.__cause__)))
        return report.exit_code

    def close(self):
        self.cache.destroy()


def cli(name, /, **config):
    """
    Create a CLI application (see CLI for the configuration keywords).
    """
    return CLI(name, **config)


__all__ = (
    "configure_logging",
    "Report",
    "CLI",
    "cli",
)

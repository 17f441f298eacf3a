"""
Bosun faults (registration, resolution and execution errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing
  failure. Codes are grouped by domain to keep copy consistent and make logs
  and searches predictable.
- CommandException: base type carrying a message, a hint and arbitrary
  context options; knows how to render itself (plain text or Rich) in a
  friendly, lowercased and actionable way.
- The taxonomy below mirrors the life of a command:
  • registration: GrammarError, DuplicateCommandError (raised immediately).
  • resolution:   ResolutionError and its subclasses (returned as values).
  • execution:    HandlerError (returned inside a pipeline outcome).

Exit codes
- Every fault carries an `exit_code`: 2 for usage/parsing problems (grammar,
  duplicate, resolution) and 1 for execution failures. 0 is reserved for
  success and never carried by a fault.

Integration
- The resolver returns resolution faults instead of raising them so a host
  CLI can print usage and exit uniformly.
- The application renders faults through its renderer with render(), which
  produces a plain string (header, message and hint on separate lines).
"""
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes used across the framework (stable identifiers).

    grouping (by high-level domain)
    - registration (2110x)
      • MALFORMED_GRAMMAR, DUPLICATE_COMMAND
    - routing (2120x)
      • UNKNOWN_COMMAND
    - binding (2121x)
      • UNKNOWN_OPTION, MISSING_ARGUMENT, INVALID_OPTION_VALUE, UNEXPECTED_ARGUMENT
    - execution (2130x)
      • HANDLER_FAILURE
    """
    # --- registration errors ---
    MALFORMED_GRAMMAR           = 21101
    DUPLICATE_COMMAND           = 21102

    # --- routing errors ---
    UNKNOWN_COMMAND             = 21201

    # --- binding errors ---
    UNKNOWN_OPTION              = 21211
    MISSING_ARGUMENT            = 21212
    INVALID_OPTION_VALUE        = 21213
    UNEXPECTED_ARGUMENT         = 21214

    # --- execution errors ---
    HANDLER_FAILURE             = 21301


class CommandException(Exception):
    """
    base class of every fault raised or returned by bosun.

    contract
    - message: one lowercased sentence describing what went wrong.
    - hint: optional single next step for the user.
    - options: read-only mapping of context (command, input, suggestion, ...).
    - code/title/exit_code: class-level identity used for rendering and for
      mapping to process exit codes.
    """
    code = Unset
    title = "command failure"
    exit_code = 2

    def __init__(self, message, /, *, hint=Unset, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.hint = coalesce(hint)
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        styles = {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }

        def styler(style):
            return styles[style] if self.options.get("colorful", True) else ""

        header = Text.assemble(
            "[ ",
            (self.options.get("prog", "bosun"), styler("prog-name")),
            " — ",
            (str(coalesce(self.code, "?")), styler("code")),
            " | ",
            (self.title.title(), styler("error-title")),
            " ]"
        )
        message = Text(self.message, styler("error-message"))
        renders = [message]
        if self.hint:
            renders.append(Text.assemble((" → ", styler("hint-arrow")), (self.hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        hint = overrides.pop("hint", self.hint)
        return type(self)(self.message, hint=coalesce(hint, Unset), **{**self.options, **overrides})

    def render(self, *, prog="bosun"):
        """
        plain-text rendering: "<prog>: error: <message>" plus an optional hint line.
        """
        lines = ["%s: error: %s" % (prog, self.message)]
        if self.hint:
            lines.append(" → %s" % self.hint)
        return "\n".join(lines)


class GrammarError(CommandException):
    """
    malformed command pattern or option flag, detected at registration time.
    """
    code = FaultCode.MALFORMED_GRAMMAR
    title = "malformed grammar"

    @property
    def source(self):
        return self.options.get("source")


class DuplicateCommandError(CommandException):
    """
    a command name or alias was registered twice.
    """
    code = FaultCode.DUPLICATE_COMMAND
    title = "duplicate command"

    @property
    def name(self):
        return self.options.get("name")


class ResolutionError(CommandException):
    """
    base class for failures turning raw tokens into a bound invocation.

    resolution errors are returned by the resolver, never raised, so callers
    can print usage and exit with code 2 without crashing the process.
    """
    title = "resolution failure"

    @property
    def command(self):
        return self.options.get("command")


class UnknownCommandError(ResolutionError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"

    @property
    def input(self):
        return self.options.get("input")

    @property
    def suggestion(self):
        return self.options.get("suggestion")


class UnknownOptionError(ResolutionError):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"

    @property
    def input(self):
        return self.options.get("input")

    @property
    def suggestion(self):
        return self.options.get("suggestion")


class MissingArgumentError(ResolutionError):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"

    @property
    def argument(self):
        return self.options.get("argument")


class InvalidOptionValueError(ResolutionError):
    code = FaultCode.INVALID_OPTION_VALUE
    title = "invalid option value"

    @property
    def option(self):
        return self.options.get("option")

    @property
    def value(self):
        return self.options.get("value")


class UnexpectedArgumentError(ResolutionError):
    code = FaultCode.UNEXPECTED_ARGUMENT
    title = "unexpected argument"

    @property
    def tokens(self):
        return tuple(self.options.get("tokens", ()))


class HandlerError(CommandException):
    """
    a before hook, middleware, action or after hook raised during execution.

    the original exception is kept as `original` (and as __cause__ when the
    fault is raised); `phase` is one of "before", "middleware", "action" or
    "after"; `command` is the name of the command being executed.
    """
    code = FaultCode.HANDLER_FAILURE
    title = "handler failure"
    exit_code = 1

    def __init__(self, message, /, *, hint=Unset, **options):
        super().__init__(message, hint=hint, **options)
        self.__cause__ = options.get("original")

    @property
    def phase(self):
        return self.options.get("phase")

    @property
    def command(self):
        return self.options.get("command")

    @property
    def original(self):
        return self.options.get("original")


__all__ = (
    "FaultCode",
    "CommandException",
    "GrammarError",
    "DuplicateCommandError",
    "ResolutionError",
    "UnknownCommandError",
    "UnknownOptionError",
    "MissingArgumentError",
    "InvalidOptionValueError",
    "UnexpectedArgumentError",
    "HandlerError",
)

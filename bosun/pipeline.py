"""
Bosun execution pipeline: before hooks, onion middleware, action, after hooks.

Overview
- Pipeline.execute(invocation) runs one ParsedInvocation and returns an
  Outcome; it never raises for handler failures.
- States: pending → running-before → running-middleware → running-action →
  running-after → completed, with failed reachable from any running state.
  Outcome.trace records every state visited (running-middleware appears
  again after the action while middleware post-logic runs).

Ordering
- before hooks run one after another in registration order.
- middleware wrap the action like an onion: pre-logic in registration order,
  post-logic in reverse. Each middleware receives its own ExecutionContext
  whose next() continues the chain; calling next() twice raises RuntimeError.
- A middleware that returns without calling next() short-circuits the chain.
  That is not a failure: the outcome is completed, short_circuited is set and
  after hooks are skipped.
- after hooks run in registration order once the chain completed.

Failures
- Any exception from a handler becomes a HandlerError tagged with the phase
  it came from ("before", "middleware", "action" or "after"). An action
  failure keeps its "action" tag while it unwinds through middleware, and a
  middleware may catch it (HandlerError) and recover.

Handlers may be plain or coroutine functions: hooks and actions are called
and their result awaited when awaitable.
"""
import asyncio
import copy
import inspect
import logging
from enum import StrEnum

from .faults import HandlerError
from .utils import *

logger = logging.getLogger(__name__)


class PipelineState(StrEnum):
    PENDING = "pending"
    RUNNING_BEFORE = "running-before"
    RUNNING_MIDDLEWARE = "running-middleware"
    RUNNING_ACTION = "running-action"
    RUNNING_AFTER = "running-after"
    COMPLETED = "completed"
    FAILED = "failed"


class ExecutionContext:
    """
    Per-invocation view handed to hooks and middleware.

    - command: the CommandDescriptor being executed.
    - arguments: bound positional values (tuple).
    - options: read-only option map, globals included.
    - invocation: the ParsedInvocation itself.
    - state: mapping shared by every handler of this invocation, for passing
      data between hooks, middleware and the action's surroundings.
    - next(): continue the middleware chain (middleware only).
    """

    __slots__ = ("command", "arguments", "options", "invocation", "state", "_continuation", "_called")

    def __init__(self, invocation, /, *, state=None, continuation=None):
        self.invocation = invocation
        self.command = invocation.command
        self.arguments = invocation.arguments
        self.options = invocation.options
        self.state = state if state is not None else {}
        self._continuation = continuation
        self._called = False

    def __repr__(self):
        return "execution-context(command=%r, arguments=%r)" % (self.command.name, self.arguments)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(
            overrides.pop("invocation", self.invocation),
            state=overrides.pop("state", self.state),
            continuation=overrides.pop("continuation", self._continuation),
        )

    @property
    def dry_run(self):
        return bool(self.options.get("dry_run", False))

    async def next(self):
        if self._continuation is None:
            raise RuntimeError("next() is only available to middleware")
        if self._called:
            raise RuntimeError("next() called multiple times by one middleware")
        self._called = True
        return await self._continuation()


class Outcome:
    """
    Result of one pipeline run.
    """

    __slots__ = ("command", "state", "error", "result", "short_circuited", "trace")

    def __init__(self, command):
        self.command = command
        self.state = PipelineState.PENDING
        self.error = None
        self.result = None
        self.short_circuited = False
        self.trace = [PipelineState.PENDING]

    def __repr__(self):
        return "outcome(command=%r, state=%r, error=%r, short_circuited=%r)" % (
            self.command, str(self.state), self.error, self.short_circuited
        )

    @property
    def ok(self):
        return self.state is PipelineState.COMPLETED

    @property
    def exit_code(self):
        return 0 if self.error is None else self.error.exit_code


async def _call(handler, *arguments):
    result = handler(*arguments)
    if inspect.isawaitable(result):
        result = await result
    return result


def _failure(command, phase, error):
    return HandlerError(
        "%s of command %r failed: %s" % (
            "action" if phase == "action" else "%s handler" % phase,
            command.name or "(default)",
            str(error) or type(error).__name__,
        ),
        command=command.name,
        phase=phase,
        original=error,
    )


class Pipeline:
    """
    Executor of ParsedInvocations.

    Parameters
    - registry: used to detect grouping commands (subcommands, no action).
    - helper: callable(name) -> str rendering help for a grouping command.
    - renderer: callable(str) receiving that help text.
    """

    def __init__(self, registry=None, *, helper=None, renderer=None):
        self.registry = registry
        self.helper = helper
        self.renderer = renderer

    def _grouping(self, invocation):
        if self.registry is None or self.helper is None:
            return False
        if not self.registry.is_group(invocation.command):
            return False
        rest = list(invocation.tokens)
        if invocation.name in rest:
            rest.remove(invocation.name)
        return not rest

    async def execute(self, invocation, /):
        command = invocation.command
        outcome = Outcome(command.name)

        def transition(state):
            logger.debug("%s: %s -> %s", command.name or "(default)", outcome.state, state)
            outcome.state = state
            outcome.trace.append(state)

        if self._grouping(invocation):
            outcome.result = self.helper(command.name)
            if self.renderer is not None:
                self.renderer(outcome.result)
            transition(PipelineState.COMPLETED)
            return outcome

        context = ExecutionContext(invocation)
        reached = False

        async def action():
            nonlocal reached
            reached = True
            transition(PipelineState.RUNNING_ACTION)
            if command.action is not None:
                try:
                    outcome.result = await _call(command.action, *invocation.arguments, invocation.options)
                except Exception as error:
                    raise _failure(command, "action", error) from error
            transition(PipelineState.RUNNING_MIDDLEWARE)
            return outcome.result

        def wrap(middleware, inner):
            @rename("next")
            async def step():
                try:
                    return await middleware(copy.replace(context, continuation=inner))
                except HandlerError:
                    raise
                except Exception as error:
                    raise _failure(command, "middleware", error) from error
            return step

        chain = action
        for middleware in reversed(command.middlewares):
            chain = wrap(middleware, chain)

        try:
            transition(PipelineState.RUNNING_BEFORE)
            for hook in command.before_hooks:
                try:
                    await _call(hook, context)
                except Exception as error:
                    raise _failure(command, "before", error) from error

            transition(PipelineState.RUNNING_MIDDLEWARE)
            await chain()

            if not reached:
                outcome.short_circuited = True
                logger.debug("%s: middleware short-circuited the chain", command.name or "(default)")
                transition(PipelineState.COMPLETED)
                return outcome

            transition(PipelineState.RUNNING_AFTER)
            for hook in command.after_hooks:
                try:
                    await _call(hook, context)
                except Exception as error:
                    raise _failure(command, "after", error) from error
        except HandlerError as fault:
            outcome.error = fault
            logger.warning("%s", fault)
            transition(PipelineState.FAILED)
            return outcome

        transition(PipelineState.COMPLETED)
        return outcome

    def run(self, invocation, /):
        """
        Synchronous wrapper around execute() for callers without a loop.
        """
        return asyncio.run(self.execute(invocation))


__all__ = (
    "PipelineState",
    "ExecutionContext",
    "Outcome",
    "Pipeline",
)

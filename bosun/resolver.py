"""
Bosun resolver: turn raw tokens into a bound invocation.

Scope
- Command lookup: the first non-option token names the command (exact name or
  alias). Values of value-taking global options are skipped while looking.
  When nothing matches, the default command ("") takes every token; otherwise
  an UnknownCommandError is returned, with a "did you mean" suggestion when
  one candidate is clearly the closest.
- Token splitting: "--long", "--long=value", "--no-long", "-x", clustered
  shorts "-abc", attached short values "-p8080" and "--" (end of options).
- Binding: positionals left to right, the variadic argument absorbing the rest,
  defaults for everything absent.

Contract
- resolve() never raises for bad user input: every ResolutionError is
  returned as a value so the caller can print usage and exit with code 2.
  Passing something that is not a list of strings is a programming error and
  raises TypeError.

Suggestions
- Levenshtein distance between the typed name and every registered name and
  alias. Aliases of one command count as that command. A suggestion is made
  only when the best distance is within the threshold (2 by default) and
  strictly better than the best distance of any other command.
"""
import logging
import re
from types import MappingProxyType

from .faults import (
    InvalidOptionValueError,
    MissingArgumentError,
    ResolutionError,
    UnexpectedArgumentError,
    UnknownCommandError,
    UnknownOptionError,
)
from .utils import *

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"-\d+(\.\d*)?([eE][-+]?\d+)?")


def levenshtein(source, target, /):
    """
    Edit distance (insertions, deletions, substitutions) between two strings.

    >>> levenshtein("buidl", "build")
    2
    """
    if len(source) < len(target):
        source, target = target, source
    previous = list(range(len(target) + 1))
    for i, left in enumerate(source, 1):
        current = [i]
        for j, right in enumerate(target, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (left != right),
            ))
        previous = current
    return previous[-1]


def suggest(word, candidates, /, threshold=2):
    """
    Closest candidate to `word`, or None.

    Parameters
    - candidates: iterable of (spelling, owner) pairs; spellings sharing an
      owner (a command and its aliases) compete as one entry.
    - threshold: largest accepted distance.

    The winner must be within the threshold and strictly closer than every
    other owner; ties yield no suggestion.
    """
    best = {}
    for spelling, owner in candidates:
        distance = levenshtein(word, spelling)
        if owner not in best or distance < best[owner][0]:
            best[owner] = (distance, spelling)

    ranking = sorted(best.values(), key=lambda pair: pair[0])
    if not ranking or ranking[0][0] > threshold:
        return None
    if len(ranking) > 1 and ranking[1][0] == ranking[0][0]:
        return None
    return ranking[0][1]


class ParsedInvocation:
    """
    Result of a successful resolution.

    - command: the CommandDescriptor that matched (the root command when no
      command token was given).
    - name: the token that selected it (name or alias; "" for the default and
      root commands).
    - arguments: bound positional values in declaration order (a variadic
      argument binds a list).
    - options: read-only mapping of option key to value, globals included.
    - leftover: positionals nothing consumed (only with passthrough).
    - tokens: the raw input.
    - trailing: tokens after "--" (also bound as positionals).
    """

    __slots__ = ("command", "name", "arguments", "options", "leftover", "tokens", "trailing")

    def __init__(self, command, name, arguments, options, leftover=(), tokens=(), trailing=()):
        self.command = command
        self.name = name
        self.arguments = tuple(arguments)
        self.options = MappingProxyType(dict(options))
        self.leftover = tuple(leftover)
        self.tokens = tuple(tokens)
        self.trailing = tuple(trailing)

    def __repr__(self):
        return "parsed-invocation(command=%r, arguments=%r, options=%r, leftover=%r)" % (
            self.command.name, self.arguments, dict(self.options), self.leftover
        )

    @property
    def bindings(self):
        """
        Argument name → bound value.
        """
        return MappingProxyType({
            spec.key: value for spec, value in zip(self.command.arguments, self.arguments)
        })


def _is_option(token):
    return len(token) > 1 and token.startswith("-") and not _NUMBER.fullmatch(token)


class Resolver:
    """
    Resolve token lists against a Registry.

    Parameters
    - registry: the Registry to resolve against.
    - did_you_mean: suggest close command/option names in faults.
    - threshold: largest edit distance accepted for a suggestion.
    """

    def __init__(self, registry, *, did_you_mean=True, threshold=2):
        if not isinstance(threshold, int) or threshold < 0:
            raise ValueError("suggestion 'threshold' must be a non-negative integer")
        self.registry = registry
        self.did_you_mean = did_you_mean
        self.threshold = threshold

    def __repr__(self):
        return "resolver(did_you_mean=%r, threshold=%r)" % (self.did_you_mean, self.threshold)

    def resolve(self, tokens, /):
        """
        Resolve `tokens` into a ParsedInvocation or return a ResolutionError.
        """
        if isinstance(tokens, str) or not all(isinstance(token, str) for token in tokens):
            raise TypeError("resolve() expects a sequence of strings")
        tokens = list(tokens)
        try:
            invocation = self._resolve(tokens)
        except ResolutionError as fault:
            logger.debug("resolution of %r failed: %s", tokens, fault)
            return fault
        logger.debug("resolved %r to %r", tokens, invocation)
        return invocation

    def _candidate(self, tokens):
        globals = {name: spec for spec in self.registry.global_options() for name in spec.names}
        skip = False
        for index, token in enumerate(tokens):
            if skip:
                skip = False
                continue
            if token == "--":
                return None
            if _is_option(token):
                spec = globals.get(token)
                skip = spec is not None and spec.takes_value and not spec.optional_value
                continue
            return index
        return None

    def _resolve(self, tokens):
        index = self._candidate(tokens)
        default = self.registry.default_command()

        if index is None:
            command = default if default is not None else self.registry.root
            return self._bind(command, "", [], tokens, tokens)

        name = tokens[index]
        command = self.registry.resolve_exact(name)
        if command is not None:
            return self._bind(command, name, tokens[:index], tokens[index + 1:], tokens)
        if default is not None:
            return self._bind(default, "", [], tokens, tokens)

        suggestion = suggest(name, self.registry.names(), self.threshold) if self.did_you_mean else None
        raise UnknownCommandError(
            "unknown command %r" % name + (", did you mean %r?" % suggestion if suggestion else ""),
            hint="run with --help to list the available commands",
            input=name,
            suggestion=suggestion,
        )

    def _unknown(self, command, name, lookup):
        suggestion = None
        if self.did_you_mean and name.startswith("--"):
            suggestion = suggest(
                name,
                [(spelling, spec.key) for spelling, (spec, _) in lookup.items() if spelling.startswith("--")],
                self.threshold,
            )
        return UnknownOptionError(
            "unknown option %r" % name + (", did you mean %r?" % suggestion if suggestion else ""),
            hint="run with --help to list the available options",
            command=command.name,
            input=name,
            suggestion=suggestion,
        )

    def _bind(self, command, name, before, after, source):
        options = list(self.registry.global_options())
        if not command.is_root:
            options = list(command.options) + options

        lookup = {}
        for spec in options:
            for spelling in spec.names:
                lookup[spelling] = (spec, spelling.startswith("--no-") and spec.negatable)

        values = {spec.key: spec.default for spec in options}
        collected = {}
        positionals = []

        def store(spec, raw, spelling):
            try:
                value = spec.coerce(raw)
            except (ValueError, TypeError) as error:
                raise InvalidOptionValueError(
                    "invalid value %r for option %r: %s" % (raw, spelling, error),
                    command=command.name,
                    option=spelling,
                    value=raw,
                ) from error
            if spec.takes_value:
                collected.setdefault(spec.key, []).append(value)
            else:
                values[spec.key] = value

        def missing(spelling):
            return InvalidOptionValueError(
                "option %r requires a value" % spelling,
                hint="pass it as %s <value> or %s=<value>" % (spelling, spelling),
                command=command.name,
                option=spelling,
            )

        def unexpected(spelling, value):
            return InvalidOptionValueError(
                "option %r does not take a value (got %r)" % (spelling, value),
                command=command.name,
                option=spelling,
                value=value,
            )

        # the command token ends the options placed before it
        trailing = []
        for segment in (before, after):
            queue = list(segment)
            while queue:
                token = queue.pop(0)

                if token == "--":
                    trailing = queue
                    positionals.extend(queue)
                    break

                if not _is_option(token):
                    positionals.append(token)
                    continue

                if token.startswith("--"):
                    spelling, equals, inline = token.partition("=")
                    if spelling not in lookup:
                        if not command.passthrough:
                            raise self._unknown(command, spelling, lookup)
                        values[spelling[2:].replace("-", "_")] = inline if equals else True
                        continue
                    spec, negated = lookup[spelling]
                    if negated or not spec.takes_value:
                        if equals:
                            raise unexpected(spelling, inline)
                        store(spec, not negated, spelling)
                    elif equals:
                        store(spec, inline, spelling)
                    elif queue and not _is_option(queue[0]) and queue[0] != "--":
                        store(spec, queue.pop(0), spelling)
                    elif spec.optional_value:
                        store(spec, True, spelling)
                    else:
                        raise missing(spelling)
                    continue

                # short cluster: -abc, -p8080, -p=8080
                body, equals, inline = token[1:].partition("=")
                for position, letter in enumerate(body):
                    spelling = "-" + letter
                    last = position == len(body) - 1
                    if spelling not in lookup:
                        if not command.passthrough:
                            raise self._unknown(command, spelling, lookup)
                        values[letter] = inline if equals and last else True
                        continue
                    spec, _ = lookup[spelling]
                    if not spec.takes_value:
                        if equals and last:
                            raise unexpected(spelling, inline)
                        store(spec, not spec.negatable, spelling)
                        continue
                    attached = body[position + 1:]
                    if attached:
                        store(spec, attached + ("=" + inline if equals else ""), spelling)
                    elif equals:
                        store(spec, inline, spelling)
                    elif queue and not _is_option(queue[0]) and queue[0] != "--":
                        store(spec, queue.pop(0), spelling)
                    elif spec.optional_value:
                        store(spec, True, spelling)
                    else:
                        raise missing(spelling)
                    break

        for key, collection in collected.items():
            values[key] = collection[0] if len(collection) == 1 else collection

        # --help short-circuits argument validation so help is reachable
        lenient = values.get("help") is True and any(spec.key == "help" for spec in self.registry.global_options())

        arguments = []
        cursor = 0
        for spec in command.arguments:
            if spec.variadic:
                rest = positionals[cursor:]
                cursor = len(positionals)
                if spec.required and not rest and not lenient:
                    raise self._missing(command, spec)
                arguments.append(list(rest))
            elif cursor < len(positionals):
                arguments.append(positionals[cursor])
                cursor += 1
            elif spec.required and not lenient:
                raise self._missing(command, spec)
            else:
                arguments.append(spec.default)

        leftover = positionals[cursor:]
        if leftover and not command.passthrough and not lenient:
            raise UnexpectedArgumentError(
                "unexpected %s %s" % (pluralize("argument", len(leftover)), ", ".join(map(repr, leftover))),
                hint="check the command usage with --help",
                command=command.name,
                tokens=leftover,
            )

        return ParsedInvocation(command, name, arguments, values, leftover, source, trailing)

    def _missing(self, command, spec):
        position = ordinal(command.arguments.index(spec) + 1)
        return MissingArgumentError(
            "missing required argument %s (%s position)" % (spec.metavar, position),
            hint="usage: %s" % (command.usage or command.pattern),
            command=command.name,
            argument=spec.name,
        )


__all__ = (
    "levenshtein",
    "suggest",
    "ParsedInvocation",
    "Resolver",
)

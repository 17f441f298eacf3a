r"""
Bosun grammar: command patterns and option flags.

Overview
- Specs
  • ArgumentSpec: positional argument declared in a command pattern
    (required "<name>", optional "[name]", variadic "<...name>"/"[...name]").
  • OptionSpec: named option declared by a flag string
    ("-x, --long", "--long <value>", "--long [value]", "--no-long").

- Parsers
  • parse_pattern(pattern, defaults=None) -> (literal_name, tuple[ArgumentSpec, ...])
  • parse_option_flag(flag, description="", *, default, type) -> OptionSpec

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties.

Validation highlights (all raise GrammarError, at registration time)
- Pattern: the command name comes first; required arguments precede optional
  ones; at most one variadic argument and it must be the last one; argument
  names are unique within a pattern; defaults only for optional arguments.
- Flag: exactly one long name ("--name"), at most one single-letter short
  alias ("-n"); names follow r"--?[^\W\d_](-?[^\W_]+)*"; a negated flag
  ("--no-name") cannot take a value; 'type' only applies to value-taking flags.

Coercion
- Option values stay strings unless the flag declares a 'type' callable.
  Missing values are not a grammar concern: the resolver reports them as
  InvalidOptionValueError when binding tokens.

Quick example:
    >>> name, arguments = parse_pattern("deploy <target> [...services]")
    >>> name, [argument.name for argument in arguments]
    ('deploy', ['target', 'services'])
    >>> spec = parse_option_flag("-p, --port <port>", "listen port", type=int)
    >>> spec.key, spec.short, spec.takes_value
    ('port', '-p', True)
"""
import functools
import operator
import re

from .faults import GrammarError
from .utils import *


class SpecType(type):
    """
    Metaclass that gives specs a uniform, introspectable shape.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for use in messages.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_<name>" field.
    - Provide compact __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


_ARGUMENT_NAME = re.compile(r"[^\W\d][\w-]*")
_COMMAND_NAME = re.compile(r"[^\W\d][\w-]*(:[\w-]+)*")
_LONG_NAME = re.compile(r"--[^\W\d_](-?[^\W_]+)*")
_SHORT_NAME = re.compile(r"-[^\W_]")
_PATTERN_TOKEN = re.compile(r"<[^>]*>|\[[^\]]*\]|[^\s<\[]+")
_FLAG = re.compile(r"(?P<names>[^<\[]*?)\s*(?P<value><[^>]*>|\[[^\]]*\])?")


class ArgumentSpec(metaclass=SpecType):
    """
    Positional argument declared by a command pattern.

    Fields
    - name: identifier shown in usage ("target" for "<target>").
    - required: "<...>" (True) vs "[...]" (False).
    - variadic: declared with a leading "..." ; absorbs every remaining positional.
    - default: value bound when an optional argument is not provided
      (None when not declared; variadic arguments bind an empty list instead).
    """

    __introspectable__ = (
        "name",
        "required",
        "variadic",
        "default",
    )

    def __init__(self, name, /, *, required=False, variadic=False, default=Unset):
        if not isinstance(name, str) or not _ARGUMENT_NAME.fullmatch(name):
            raise GrammarError("argument name %r is not a valid identifier" % (name,), source=name)
        if required and default is not Unset:
            raise GrammarError("required argument %r cannot declare a default" % name, source=name)
        self._name = name
        self._required = bool(required)
        self._variadic = bool(variadic)
        self._default = coalesce(default)

    def __eq__(self, other):
        if not isinstance(other, ArgumentSpec):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash((self._name, self._required, self._variadic))

    @property
    def key(self):
        """
        python identifier for this argument ("dry-run" → "dry_run").
        """
        return self._name.replace("-", "_")

    @property
    def metavar(self):
        """
        usage rendering: "<name>", "[name]", "<name...>" or "[name...]".
        """
        body = self._name + ("..." if self._variadic else "")
        return ("<%s>" if self._required else "[%s]") % body


class OptionSpec(metaclass=SpecType):
    """
    Named option declared by a flag string.

    Fields
    - long: canonical long name without dashes ("dry-run"); the option map key
      is its python identifier form (see key).
    - short: optional single-letter alias including its dash ("-n") or None.
    - takes_value: declared with "<value>" or "[value]".
    - optional_value: declared with "[value]" (the value may be omitted; the
      option then binds True).
    - default: value bound when the option is absent.
    - negatable: declared as "--no-<long>"; a boolean defaulting to True that
      "--no-<long>" turns off.
    - metavar: placeholder shown in help ("<value>").
    - type: coercion callable applied to each value, or None.
    - description: short help text.
    """

    __introspectable__ = (
        "flag",
        "long",
        "short",
        "takes_value",
        "optional_value",
        "default",
        "negatable",
        "metavar",
        "type",
        "description",
    )

    def __init__(
            self,
            long,
            /,
            short=None,
            *,
            takes_value=False,
            optional_value=False,
            default=Unset,
            negatable=False,
            metavar=None,
            type=Unset,
            description="",
            flag=Unset,
    ):
        if type is not Unset and not callable(type):
            raise GrammarError("option '--%s' 'type' must be callable" % long, source=long)
        if type is not Unset and not takes_value:
            raise GrammarError("option '--%s' cannot declare a 'type' without a value" % long, source=long)
        if negatable and takes_value:
            raise GrammarError("negated option '--no-%s' cannot take a value" % long, source=long)
        if not isinstance(description, str):
            raise TypeError("%s 'description' must be a string" % self.__class__.__typename__)

        if default is Unset:
            default = True if negatable else (None if takes_value else False)

        self._long = long
        self._short = short
        self._takes_value = bool(takes_value)
        self._optional_value = bool(optional_value)
        self._default = default
        self._negatable = bool(negatable)
        self._metavar = metavar
        self._type = coalesce(type)
        self._description = description.strip()
        self._flag = coalesce(flag, ", ".join(filter(None, (short, "--" + long))))

    def __eq__(self, other):
        if not isinstance(other, OptionSpec):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash((self._long, self._short, self._takes_value))

    @property
    def key(self):
        """
        python identifier used in the option map ("dry-run" → "dry_run").
        """
        return self._long.replace("-", "_")

    @property
    def names(self):
        """
        every spelling that selects this option, short alias first.
        """
        names = [self._short] if self._short else []
        names.append("--" + self._long)
        if self._negatable:
            names.append("--no-" + self._long)
        return tuple(names)

    def coerce(self, value):
        """
        apply the declared type to a raw string value (identity without a type).

        raises whatever the type raises (typically ValueError/TypeError); the
        resolver turns that into InvalidOptionValueError.
        """
        if self._type is None or not isinstance(value, str):
            return value
        return self._type(value)


def parse_pattern(pattern, /, defaults=None):
    """
    Parse a command pattern into its literal name and argument specs.

    Syntax
    - "<name>"      required argument
    - "[name]"      optional argument
    - "<...name>"   required variadic argument (one or more)
    - "[...name]"   optional variadic argument (zero or more)
    A pattern whose first token is a bracket declares the default command and
    yields the empty literal name "".

    Parameters
    - pattern: str, e.g. "deploy <target> [...services]" or "db:migrate [step]".
    - defaults: optional mapping of argument name -> default value; only
      optional, non-variadic arguments may declare one.

    Returns
    - (literal_name, tuple[ArgumentSpec, ...])

    Raises
    - GrammarError on any malformed token or ordering violation.
    """
    if not isinstance(pattern, str):
        raise TypeError("parse_pattern() argument must be a string")
    defaults = dict(defaults or {})

    tokens = _PATTERN_TOKEN.findall(pattern.strip())
    if "".join(tokens) != re.sub(r"\s+", "", pattern):
        raise GrammarError("pattern %r contains unbalanced brackets" % pattern, source=pattern)

    name = ""
    if tokens and tokens[0][0] not in "<[":
        name = tokens.pop(0)
        if not _COMMAND_NAME.fullmatch(name):
            raise GrammarError("command name %r is not valid in pattern %r" % (name, pattern), source=pattern)

    arguments = []
    seen = set()
    optional = None
    variadic = None

    for index, token in enumerate(tokens):
        if token[0] not in "<[":
            raise GrammarError(
                "unexpected word %r in pattern %r; the command name must come first" % (token, pattern),
                source=pattern,
            )
        required = token[0] == "<"
        body = token[1:-1].strip()
        is_variadic = body.startswith("...")
        body = body.removeprefix("...")

        if variadic is not None:
            raise GrammarError(
                "variadic argument %r must be the last argument in pattern %r" % (variadic, pattern),
                source=pattern,
            )
        if required and optional is not None:
            raise GrammarError(
                "required argument %r cannot follow optional argument %r in pattern %r" % (body, optional, pattern),
                source=pattern,
            )
        if body in seen:
            raise GrammarError("argument %r is declared twice in pattern %r" % (body, pattern), source=pattern)

        if body in defaults and is_variadic:
            raise GrammarError("variadic argument %r cannot declare a default" % body, source=pattern)

        arguments.append(ArgumentSpec(
            body,
            required=required,
            variadic=is_variadic,
            default=defaults.pop(body, Unset),
        ))
        seen.add(body)

        if not required:
            optional = body
        if is_variadic:
            variadic = body

    if defaults:
        raise GrammarError(
            "defaults given for undeclared %s %s in pattern %r" % (
                pluralize("argument", len(defaults)), ", ".join(map(repr, defaults)), pattern
            ),
            source=pattern,
        )

    return name, tuple(arguments)


def parse_option_flag(flag, description="", /, *, default=Unset, type=Unset):
    """
    Parse a flag string into an OptionSpec.

    Accepted forms
    - "--long"                      boolean, defaults to False
    - "-x, --long"                  boolean with a short alias
    - "--long <value>"              takes a value (required when given)
    - "--long [value]"              takes an optional value
    - "--no-long"                   negatable boolean, defaults to True

    Parameters
    - flag: the flag string.
    - description: help text.
    - default: overrides the implicit default (False/True/None).
    - type: coercion callable for value-taking options.

    Raises
    - GrammarError for malformed names, missing/duplicated long names, more
      than one short alias, or invalid combinations.
    """
    if not isinstance(flag, str):
        raise TypeError("parse_option_flag() argument must be a string")

    match = _FLAG.fullmatch(flag.strip())
    if not match or not match["names"].strip():
        raise GrammarError("option flag %r is malformed" % flag, source=flag)

    longs = []
    shorts = []
    for name in filter(None, re.split(r"[,\s]+", match["names"].strip())):
        if _LONG_NAME.fullmatch(name):
            longs.append(name[2:])
        elif _SHORT_NAME.fullmatch(name):
            shorts.append(name)
        else:
            raise GrammarError(
                "option name %r in flag %r must look like '-x' or '--name'" % (name, flag),
                source=flag,
            )

    if len(longs) != 1:
        raise GrammarError("option flag %r must declare exactly one long name" % flag, source=flag)
    if len(shorts) > 1:
        raise GrammarError("option flag %r can declare at most one short alias" % flag, source=flag)

    long, = longs
    value = match["value"]
    if long.startswith("no-") and value is not None:
        raise GrammarError("negated option flag %r cannot take a value" % flag, source=flag)
    negatable = long.startswith("no-") and value is None
    if negatable:
        long = long.removeprefix("no-")

    return OptionSpec(
        long,
        shorts[0] if shorts else None,
        takes_value=value is not None,
        optional_value=value is not None and value.startswith("["),
        default=default,
        negatable=negatable,
        metavar=value,
        type=type,
        description=description,
        flag=flag.strip(),
    )


__all__ = (
    "ArgumentSpec",
    "OptionSpec",
    "parse_pattern",
    "parse_option_flag",
)

# The metaclass is an implementation detail of the specs.
del SpecType

"""
Bosun command layer: register, build and look up commands.

What this module provides
- CommandBuilder: fluent, mutable accumulator returned by Registry.register().
  • option(), action(), before(), after(), use(), alias(), usage(), example(),
    allow_unknown_options().
  • Frozen into an immutable CommandDescriptor the first time the registry
    hands the command out (resolution, listing or help). Mutating a frozen
    builder raises TypeError.

- CommandDescriptor: read-only view of a command (name, aliases, arguments,
  options, hooks, middleware, action, help metadata).

- Registry: ordered store of named commands plus the implicit root command
  ("@root") that owns application-level options (--help, --version, ...).
  • register(pattern, description="", *, passthrough=False, defaults=None)
  • resolve_exact(name), all_commands(), default_command(), names(),
    children(name), is_group(descriptor), global_options(), root

Core ideas
- Registration errors are raised at the offending call (GrammarError for
  malformed grammar or option collisions, DuplicateCommandError for name or
  alias collisions). Nothing is deferred to execution.
- Namespaces ("db" in "db:migrate") are derived from the name and only used
  to group commands in help; lookups are always by full literal name.
- The effective option set of a command (its own options, the root options
  and the enabled global switches) is computed by the resolver on each
  resolution; descriptors never store it.

Quick start
    registry = Registry()
    (registry.register("deploy <target>", "ship it")
        .option("-f, --force", "skip confirmation")
        .alias("d")
        .action(lambda target, options: print(target, options["force"])))
    registry.resolve_exact("d").name  # -> "deploy"
"""
import inspect
import logging
import re

from .faults import DuplicateCommandError, GrammarError
from .grammar import parse_option_flag, parse_pattern
from .utils import *

logger = logging.getLogger(__name__)

ROOT = "@root"

_ALIAS = re.compile(r"[^\W\d][\w-]*(:[\w-]+)*")


def namespace(name, /):
    """
    Namespace of a command name: the part before the first ':' (or None).

    >>> namespace("db:migrate"), namespace("deploy")
    ('db', None)
    """
    if not isinstance(name, str):
        raise TypeError("namespace() argument must be a string")
    head, colon, _ = name.partition(":")
    return head if colon else None


def _conflicts(spec, other):
    return spec.key == other.key or bool(set(spec.names) & set(other.names))


class CommandDescriptor:
    """
    Immutable description of a registered command.

    Every container attribute is exposed as a read-only view (tuple or
    mapping proxy); assigning any attribute raises AttributeError.
    """

    name = mirror("name")
    pattern = mirror("pattern")
    aliases = mirror("aliases")
    description = mirror("description")
    arguments = mirror("arguments")
    options = mirror("options")
    before_hooks = mirror("before_hooks")
    middlewares = mirror("middlewares")
    after_hooks = mirror("after_hooks")
    action = mirror("action")
    usage = mirror("usage")
    examples = mirror("examples")
    passthrough = mirror("passthrough")

    __introspectable__ = (
        "name",
        "aliases",
        "arguments",
        "options",
        "passthrough",
    )

    def __init__(self, **fields):
        for name, value in fields.items():
            object.__setattr__(self, "_" + name, list(value) if isinstance(value, list | tuple) else value)

    def __setattr__(self, name, value):
        raise AttributeError("command-descriptor %r is read-only" % self._name)

    def __repr__(self):
        return "command-descriptor(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in self.__introspectable__:
            yield name, getattr(self, name)

    @property
    def namespace(self):
        return namespace(self._name)

    @property
    def is_root(self):
        return self._name == ROOT

    @property
    def is_default(self):
        return self._name == ""

    def option(self, key, /):
        """
        Declared option by key ("dry_run") or long name ("dry-run"), else None.
        """
        key = key.removeprefix("--").replace("-", "_")
        for spec in self._options:
            if spec.key == key:
                return spec
        return None


class CommandBuilder:
    """
    Fluent builder for one command; every mutator returns the builder.

    A builder is owned by its registry and becomes read-only once frozen.
    """

    def __init__(self, registry, pattern, description="", /, *, passthrough=False, defaults=None):
        if not isinstance(description, str):
            raise TypeError("command 'description' must be a string")
        if pattern == ROOT:
            name, arguments = ROOT, ()
        else:
            name, arguments = parse_pattern(pattern, defaults)

        self._registry = registry
        self._pattern = pattern
        self._name = name
        self._description = description.strip()
        self._passthrough = bool(passthrough)
        self._arguments = list(arguments)
        self._options = []
        self._aliases = []
        self._before = []
        self._after = []
        self._middlewares = []
        self._action = None
        self._usage = None
        self._examples = []
        self._descriptor = None

    def __repr__(self):
        return "command-builder(name=%r, frozen=%r)" % (self._name, self.frozen)

    name = mirror("name")
    options = mirror("options")

    @property
    def frozen(self):
        return self._descriptor is not None

    def _mutable(self, method):
        if self._descriptor is not None:
            raise TypeError("command %r is frozen; %s() must be called before it is used" % (self._name, method))

    def option(self, flag, description="", /, *, default=Unset, type=Unset):
        """
        Declare an option ("-x, --long", "--long <value>", "--no-long", ...).

        Raises GrammarError when the flag is malformed or collides with an
        option of this command or with an application-wide option.
        """
        self._mutable("option")
        spec = parse_option_flag(flag, description, default=default, type=type)
        for other in self._options:
            if _conflicts(spec, other):
                raise GrammarError(
                    "option %r collides with %r in command %r" % (spec.flag, other.flag, self._name),
                    source=flag,
                )
        if self._name == ROOT:
            self._registry.check_global(spec)
        else:
            for other in self._registry.global_options():
                if _conflicts(spec, other):
                    raise GrammarError(
                        "option %r of command %r collides with global option %r" % (spec.flag, self._name, other.flag),
                        source=flag,
                    )
        self._options.append(spec)
        return self

    def action(self, handler, /):
        self._mutable("action")
        if not callable(handler):
            raise TypeError("command action must be callable")
        if self._action is not None:
            raise TypeError("command %r already has an action" % self._name)
        self._action = handler
        return self

    def before(self, hook, /):
        self._mutable("before")
        if not callable(hook):
            raise TypeError("before hook must be callable")
        self._before.append(hook)
        return self

    def after(self, hook, /):
        self._mutable("after")
        if not callable(hook):
            raise TypeError("after hook must be callable")
        self._after.append(hook)
        return self

    def use(self, middleware, /):
        """
        Append a middleware: an async callable receiving the execution context,
        expected to `await context.next()` to continue the chain.
        """
        self._mutable("use")
        if not (inspect.iscoroutinefunction(middleware)
                or inspect.iscoroutinefunction(getattr(middleware, "__call__", None))):
            raise TypeError("middleware must be a coroutine function (async def)")
        self._middlewares.append(middleware)
        return self

    def alias(self, name, /):
        self._mutable("alias")
        if self._name in (ROOT, ""):
            raise TypeError("the %s command cannot have aliases" % ("root" if self._name == ROOT else "default"))
        if not isinstance(name, str) or not _ALIAS.fullmatch(name):
            raise GrammarError("alias %r is not a valid command name" % (name,), source=name)
        self._registry._claim(name, self._name)
        self._aliases.append(name)
        return self

    def usage(self, text, /):
        self._mutable("usage")
        if not isinstance(text, str):
            raise TypeError("usage text must be a string")
        self._usage = text
        return self

    def example(self, text, /):
        self._mutable("example")
        if not isinstance(text, str):
            raise TypeError("example text must be a string")
        self._examples.append(text)
        return self

    def allow_unknown_options(self, enabled=True, /):
        self._mutable("allow_unknown_options")
        self._passthrough = bool(enabled)
        return self

    def freeze(self):
        """
        Return the immutable descriptor, creating it on first call.
        """
        if self._descriptor is None:
            self._descriptor = CommandDescriptor(
                name=self._name,
                pattern=self._pattern,
                aliases=self._aliases,
                description=self._description,
                arguments=self._arguments,
                options=self._options,
                before_hooks=self._before,
                middlewares=self._middlewares,
                after_hooks=self._after,
                action=self._action,
                usage=self._usage,
                examples=self._examples,
                passthrough=self._passthrough,
            )
            logger.debug("froze command %r", self._name)
        return self._descriptor


class Registry:
    """
    Ordered registry of commands and aliases.

    Parameters
    - switches: optional GlobalFlags whose enabled options are treated as
      application-wide (collision checks, global_options()).
    """

    def __init__(self, *, switches=None):
        self._builders = {}
        self._aliases = {}
        self._switches = switches
        self._root = CommandBuilder(self, ROOT, "", passthrough=False)

    def __repr__(self):
        return "registry(commands=%r)" % list(self._builders)

    def __len__(self):
        return len(self._builders)

    def __contains__(self, name):
        return name in self._builders or name in self._aliases

    def _claim(self, name, owner):
        if name in self._builders or name in self._aliases:
            raise DuplicateCommandError(
                "command name %r is already registered" % name,
                hint="pick another name or alias",
                name=name,
                command=owner,
            )
        self._aliases[name] = owner

    def register(self, pattern, description="", /, *, passthrough=False, defaults=None):
        """
        Create, store and return a builder for `pattern`.

        Raises GrammarError for a malformed pattern and DuplicateCommandError
        when its name is already taken by a command or an alias.
        """
        if not isinstance(pattern, str):
            raise TypeError("command pattern must be a string")
        if pattern.strip() == ROOT:
            raise GrammarError("%r is reserved for the root command" % ROOT, source=pattern)
        builder = CommandBuilder(self, pattern, description, passthrough=passthrough, defaults=defaults)
        name = builder.name
        if name in self._builders or name in self._aliases:
            raise DuplicateCommandError(
                ("command %r is already registered" % name) if name else "a default command is already registered",
                hint="pick another name or add an alias to the existing command",
                name=name,
            )
        self._builders[name] = builder
        logger.debug("registered command %r (pattern %r)", name, pattern)
        return builder

    @property
    def root(self):
        """
        Frozen root command owning application-level options.
        """
        return self._root.freeze()

    @property
    def root_builder(self):
        return self._root

    def global_options(self):
        """
        Options applying to every command: root options, then enabled switches.
        """
        options = list(self._root.options)
        if self._switches is not None:
            options.extend(self._switches.options())
        return tuple(options)

    def check_global(self, spec):
        """
        Raise GrammarError if an application-wide option would collide with
        any declared option (root, switches or a registered command).
        """
        for other in self.global_options():
            if _conflicts(spec, other):
                raise GrammarError(
                    "global option %r collides with global option %r" % (spec.flag, other.flag),
                    source=spec.flag,
                )
        for name, builder in self._builders.items():
            for other in builder.options:
                if _conflicts(spec, other):
                    raise GrammarError(
                        "global option %r collides with option %r of command %r" % (spec.flag, other.flag, name),
                        source=spec.flag,
                    )

    def resolve_exact(self, name, /):
        if name in self._aliases:
            name = self._aliases[name]
        builder = self._builders.get(name)
        return builder.freeze() if builder is not None else None

    def default_command(self):
        return self.resolve_exact("")

    def all_commands(self):
        return tuple(builder.freeze() for builder in self._builders.values())

    def names(self):
        """
        Every name and alias (except the default command) as (name, owner) pairs.
        """
        pairs = [(name, name) for name in self._builders if name]
        pairs.extend(self._aliases.items())
        return tuple(pairs)

    def children(self, name, /):
        return tuple(
            builder.freeze() for key, builder in self._builders.items() if namespace(key) == name
        )

    def is_group(self, descriptor, /):
        return descriptor.action is None and any(namespace(key) == descriptor.name for key in self._builders)


__all__ = (
    "ROOT",
    "namespace",
    "CommandBuilder",
    "CommandDescriptor",
    "Registry",
)

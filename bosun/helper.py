"""
Bosun help formatter.

Renders the application listing ("help:*") and per-command help
("help:<name>") with rich renderables, records them on an off-screen console
and returns the exported text. Results are memoized in the application's
MetadataCache for a short TTL; registry changes do not invalidate them.

Sections
- listing: header (name/version), usage, commands (ungrouped first, then one
  "<namespace>:" block per namespace, both in registration order), global
  options, examples and a footer.
- command: header, usage, description, aliases, arguments, options (the
  command's own followed by the global ones, with defaults), examples.
"""
import io
import logging
from collections import defaultdict

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .commands import namespace
from .utils import *

logger = logging.getLogger(__name__)


class HelpFormatter:
    """
    Render help text for a Registry.

    Parameters
    - registry: the Registry to describe.
    - cache: MetadataCache used to memoize renders (None disables memoization).
    - name/version: application header.
    - ttl: lifetime of memoized renders in seconds.
    - width: console width used for wrapping.
    - colorful: keep ANSI styles in the exported text.
    """

    def __init__(self, registry, cache=None, *, name="", version=None, ttl=5.0, width=80, colorful=False):
        self.registry = registry
        self.cache = cache
        self.name = name
        self.version = version
        self.ttl = ttl
        self.width = width
        self.colorful = colorful
        self.usage = None
        self.examples = []

    def __repr__(self):
        return "help-formatter(name=%r, version=%r)" % (self.name, self.version)

    def render(self, name=None, /):
        """
        Help text for command `name` (name or alias), or the full listing.

        Raises LookupError for an unknown command name.
        """
        key = "help:*" if name is None else "help:%s" % name
        if self.cache is not None and (cached := self.cache.get(key)) is not None:
            return cached

        if name is None:
            text = self._export(self._listing())
        else:
            command = self.registry.resolve_exact(name)
            if command is None:
                raise LookupError("unknown command %r" % name)
            text = self._export(self._command(command))

        if self.cache is not None:
            self.cache.set(key, text, self.ttl)
        logger.debug("rendered help for %s", "the application" if name is None else repr(name))
        return text

    def _export(self, renders):
        console = Console(
            file=io.StringIO(),
            record=True,
            width=self.width,
            color_system="standard" if self.colorful else None,
            force_terminal=self.colorful,
            highlight=False,
        )
        console.print(Group(*renders))
        text = console.export_text(styles=self.colorful)
        return "\n".join(line.rstrip() for line in text.splitlines()).strip("\n") + "\n"

    def _styler(self, style):
        styles = {
            "header": "bold #FF4D94",
            "label": "bold #FFFFFF",
            "name": "bold #00E6FF",
            "metavar": "bold #FFD600",
            "description": "#9CA3AF",
            "example": "#E5E7EB",
        }
        return styles.get(style, "") if self.colorful else ""

    def _header(self):
        header = Text(self.name or "", self._styler("header"))
        if self.version:
            header.append("/%s" % self.version)
        return header

    def _section(self, label):
        return Text.assemble("\n", (label, self._styler("label")), ":")

    def _grid(self, rows):
        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=True)
        table.add_column()
        for name, description in rows:
            table.add_row(
                Text.assemble("  ", (name, self._styler("name"))),
                Text(description, self._styler("description")),
            )
        return table

    def _option_rows(self, options):
        rows = []
        for spec in options:
            label = ", ".join(spec.names[:2] if not spec.negatable else spec.names)
            if spec.takes_value:
                label += " %s" % spec.metavar
            description = spec.description
            if spec.default is not None and spec.default is not False and not (spec.negatable and spec.default is True):
                description = ("%s (default: %s)" % (description, spec.default)).strip()
            rows.append((label, description))
        return rows

    def _command_label(self, command):
        label = command.pattern
        if command.aliases:
            label += " (%s)" % ", ".join(command.aliases)
        return label

    def _listing(self):
        renders = [self._header()] if self.name else []

        usage = self.usage or "%s <command> [options]" % self.name
        renders.append(self._section("Usage"))
        renders.append(Text("  $ " + usage))

        commands = self.registry.all_commands()
        ungrouped = [command for command in commands if namespace(command.name) is None]
        groups = defaultdict(list)
        for command in commands:
            if (group := namespace(command.name)) is not None:
                groups[group].append(command)

        if commands:
            renders.append(self._section("Commands"))
            if ungrouped:
                renders.append(self._grid((self._command_label(command), command.description) for command in ungrouped))
            for group, members in groups.items():
                renders.append(Text.assemble("\n", (group, self._styler("label")), ":"))
                renders.append(self._grid((self._command_label(command), command.description) for command in members))

        if options := self.registry.global_options():
            renders.append(self._section("Options"))
            renders.append(self._grid(self._option_rows(options)))

        if self.examples:
            renders.append(self._section("Examples"))
            renders.extend(Text("  " + example, self._styler("example")) for example in self.examples)

        if commands and any(spec.key == "help" for spec in self.registry.global_options()):
            renders.append(Text(
                "\nRun '%s <command> --help' for more information on a command." % self.name
            ))
        return renders

    def _command(self, command):
        renders = [self._header()] if self.name else []

        usage = command.usage or " ".join(filter(None, (self.name, command.pattern)))
        if command.options or self.registry.global_options():
            usage += " [options]"
        renders.append(self._section("Usage"))
        renders.append(Text("  $ " + usage))

        if command.description:
            renders.append(Text("\n" + command.description))

        if command.aliases:
            renders.append(self._section(pluralize("Alias", len(command.aliases))))
            renders.append(Text("  " + ", ".join(command.aliases)))

        if self.registry.is_group(command):
            renders.append(self._section("Commands"))
            renders.append(self._grid(
                (self._command_label(child), child.description) for child in self.registry.children(command.name)
            ))

        if command.arguments:
            renders.append(self._section("Arguments"))
            rows = []
            for spec in command.arguments:
                description = "" if spec.required else "optional"
                if spec.default is not None:
                    description = "optional (default: %s)" % spec.default
                rows.append((spec.metavar, description))
            renders.append(self._grid(rows))

        options = list(command.options) + list(self.registry.global_options())
        if options:
            renders.append(self._section("Options"))
            renders.append(self._grid(self._option_rows(options)))

        if command.examples:
            renders.append(self._section("Examples"))
            renders.extend(Text("  " + example, self._styler("example")) for example in command.examples)
        return renders


__all__ = (
    "HelpFormatter",
)

"""
Global switches: verbose, quiet, debug and dry-run.

Each switch is an ordinary boolean OptionSpec that, once enabled, is merged
into the effective option set of every command at resolution time. The
controller remembers the values seen by the most recent resolution and never
reconciles them: "-v -q" leaves both verbose and quiet set, and level() is only
one possible display convention on top of that.
"""
import logging

from .grammar import parse_option_flag

logger = logging.getLogger(__name__)

SWITCHES = {
    "verbose": ("-v, --verbose", "show detailed output"),
    "quiet": ("-q, --quiet", "only show warnings and errors"),
    "debug": ("--debug", "show debugging information"),
    "dry_run": ("--dry-run", "show what would happen without changing anything"),
}


class GlobalFlags:
    """
    Controller of the four global switches.

    - enable(name) turns a switch on (idempotent) and returns its OptionSpec.
    - options() lists the enabled switches in declaration order.
    - update(options) records the values found in a resolved option map.
    """

    def __init__(self):
        self._specs = {}
        self._state = dict.fromkeys(SWITCHES, False)

    def __repr__(self):
        return "global-flags(%s)" % ", ".join(
            "%s=%r" % (name, self._state[name]) for name in self._specs
        )

    def spec(self, name, /):
        """
        OptionSpec for a switch, whether enabled or not.
        """
        try:
            flag, description = SWITCHES[name]
        except KeyError:
            raise ValueError("unknown global switch %r (expected one of %s)" % (
                name, ", ".join(SWITCHES)
            )) from None
        return self._specs.get(name) or parse_option_flag(flag, description)

    def enable(self, name, /):
        spec = self.spec(name)
        if name not in self._specs:
            self._specs[name] = spec
            logger.debug("enabled global switch %r", spec.flag)
        return spec

    def enabled(self, name, /):
        return name in self._specs

    def options(self):
        return tuple(self._specs[name] for name in SWITCHES if name in self._specs)

    def update(self, options, /):
        """
        Record switch values from a resolved option map (absent → False).
        """
        for name in SWITCHES:
            self._state[name] = bool(options.get(name, False)) if name in self._specs else False

    def reset(self):
        self._state = dict.fromkeys(SWITCHES, False)

    @property
    def verbose(self):
        return self._state["verbose"]

    @property
    def quiet(self):
        return self._state["quiet"]

    @property
    def debug(self):
        return self._state["debug"]

    @property
    def dry_run(self):
        return self._state["dry_run"]

    def level(self):
        """
        Logging level for the current state: quiet wins, then debug/verbose.
        """
        if self._state["quiet"]:
            return logging.WARNING
        if self._state["debug"] or self._state["verbose"]:
            return logging.DEBUG
        return logging.INFO


__all__ = (
    "SWITCHES",
    "GlobalFlags",
)

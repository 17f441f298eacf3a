"""
Small helpers shared across bosun.

- Unset / UnsetType: marker for "argument not given" where None is a real value
  (an option may legitimately default to None).
- coalesce(value, default): swap Unset for a default, keep every other value.
- rename(...): give generated functions readable names in tracebacks.
- mirror(name): read-only property over "_<name>" returning frozen views.
- pluralize(text, count) / ordinal(number): wording for fault messages.

    >>> coalesce(Unset, 8080), coalesce(None, 8080)
    (8080, None)
    >>> pluralize("alias"), ordinal(2), ordinal(23)
    ('aliases', 'second', '23rd')
"""
import builtins
import functools
import re
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker. There is exactly one instance; it is falsy,
    prints as "Unset", can take part in `X | Unset` unions and refuses to be
    subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __ror__ = __or__


def coalesce(object, default=None, /):
    """
    `default` when `object` is Unset, `object` otherwise (None, 0 and "" included).
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(function, name) renames in place and returns the function;
    rename(name) returns a decorator doing the same.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() expects a string")
        return lambda function: rename(function, name)

    if len(parameters) != 2:
        raise TypeError("rename() takes 1 or 2 arguments (%d given)" % len(parameters))

    function, name = parameters
    if not builtins.callable(function) or not isinstance(name, str):
        raise TypeError("rename() expects a callable and a string")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError("rename() cannot rename %r" % (function,)) from None
    return function


def _view(value):
    if isinstance(value, Mapping):
        return MappingProxyType(value)
    if isinstance(value, Set):
        return frozenset(value)
    if isinstance(value, Sequence) and not isinstance(value, str):
        return tuple(value)
    return value


def mirror(name, /):
    """
    Property reading self._<name>; lists become tuples, dicts mapping
    proxies and sets frozensets, so callers cannot mutate internal state.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() expects an attribute name")
    attribute = "_" + name
    return property(rename(lambda self: _view(getattr(self, attribute)), name))


@functools.cache
def pluralize(text, count=2, /):
    """
    English plural of the last word of `text` unless count == 1
    ("argument" -> "arguments", "alias" -> "aliases", "entry" -> "entries").
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() expects a string")
    match = re.search(r"(\w+)(\W*)$", text)
    if count == 1 or match is None:
        return text

    word = match[1]
    if re.search(r"(s|sh|ch|x|z)$", word, re.IGNORECASE):
        plural = word + "es"
    elif re.search(r"[^aeiou]y$", word, re.IGNORECASE):
        plural = word[:-1] + "ies"
    else:
        plural = word + "s"
    if word.isupper():
        plural = plural.upper()
    return text[:match.start(1)] + plural + match[2]


_ORDINALS = (
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
)


@functools.cache
def ordinal(number, /):
    """
    "first".."tenth" in words, then "11th", "21st", "112th", ...
    """
    if 1 <= number <= len(_ORDINALS):
        return _ORDINALS[number - 1]
    if number % 100 in (11, 12, 13):
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "ordinal",
    "UnsetType",
    "Unset",
)

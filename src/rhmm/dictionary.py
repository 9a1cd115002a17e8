"""Fluent dictionary helpers.

Mutating helpers return the dictionary they were given so calls can be
chained into nested literal-like constructions::

    trans = create("Rainy", create("Rainy", 0.7))
    add_unconditionally(trans["Rainy"], "Sunny", 0.3)
"""

from typing import Any, Hashable

from rhmm.maybe import Maybe


def create(key: Hashable, value: Any) -> dict:
    """Start a new dictionary holding a single entry."""
    return add_unconditionally({}, key, value)


def add_unconditionally(d: dict, key: Hashable, value: Any) -> dict:
    """Set ``d[key] = value``, overwriting any existing entry."""
    d[key] = value
    return d


def add_conditionally(d: dict, key: Hashable, value: Any) -> dict:
    """Set ``d[key] = value`` only when ``key`` is absent."""
    if not try_get_value(d, key).has_value:
        d[key] = value
    return d


def try_get_value(d: dict, key: Hashable) -> Maybe:
    """Look up ``key``; a missing key gives no value.

    A present key mapped to ``None`` is reported as a value of ``None``.
    """
    if key in d:
        return Maybe(d[key], has_value=True)
    return Maybe.no_value()


def get_value_or_default(d: dict, key: Hashable, default: Any = None) -> Any:
    return try_get_value(d, key).value_or_default(lambda: default)


def accumulate_tally(d: dict, key: Hashable) -> dict:
    """Increment the integer count stored under ``key`` (missing counts as 0)."""
    return add_unconditionally(d, key, get_value_or_default(d, key, 0) + 1)

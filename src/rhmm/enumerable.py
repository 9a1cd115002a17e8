"""Iteration helpers: arg-max/arg-min, outer products and pairwise maps.

The arg-extreme helpers walk the input once and only replace the incumbent on
a strict improvement, so among equal scores the earliest element wins.
"""

import itertools
import operator
from typing import Any, Callable, Iterable, Iterator

from rhmm.types import ArgumentValuePair


def _arg_and_comp(
    iterable: Iterable,
    fn: Callable[[Any], Any],
    accept: Callable[[Any, Any], bool],
) -> ArgumentValuePair:
    is_set = False
    best_arg = None
    extreme = None

    for item in iterable:
        value = fn(item)
        if not is_set or accept(value, extreme):
            best_arg = item
            extreme = value
            is_set = True

    if not is_set:
        raise ValueError("arg-extreme of an empty sequence")

    return ArgumentValuePair(argument=best_arg, value=extreme)


def arg_and_max(iterable: Iterable, fn: Callable[[Any], Any]) -> ArgumentValuePair:
    """Find the element maximising ``fn`` together with the maximum.

    Args:
        iterable: Candidate arguments, consumed once.
        fn: Scoring function.

    Returns:
        ArgumentValuePair(argument, value). Ties go to the earliest element.

    Raises:
        ValueError: If ``iterable`` is empty.
    """
    return _arg_and_comp(iterable, fn, operator.gt)


def arg_and_min(iterable: Iterable, fn: Callable[[Any], Any]) -> ArgumentValuePair:
    """Find the element minimising ``fn`` together with the minimum."""
    return _arg_and_comp(iterable, fn, operator.lt)


def arg_max(iterable: Iterable, fn: Callable[[Any], Any]) -> Any:
    return arg_and_max(iterable, fn).argument


def arg_min(iterable: Iterable, fn: Callable[[Any], Any]) -> Any:
    return arg_and_min(iterable, fn).argument


def outer(these: Iterable, those: Iterable) -> list[tuple]:
    """All (a, b) pairs, ``these`` varying slowest."""
    return list(itertools.product(these, those))


def zip_do(first: Iterable, second: Iterable, action: Callable[[Any, Any], None]) -> None:
    """Call ``action`` on paired elements until either input runs out."""
    for a, b in zip(first, second):
        action(a, b)


def pairwise(iterable: Iterable, fn: Callable[[Any, Any], Any]) -> list:
    """Map a binary function over adjacent pairs."""
    return [fn(a, b) for a, b in itertools.pairwise(iterable)]


def pairwise_do(iterable: Iterable, action: Callable[[Any, Any], None]) -> list:
    """Call ``action`` on adjacent pairs and return the input as a list."""
    items = list(iterable)
    zip_do(items, items[1:], action)
    return items


def repeat(value: Any) -> Iterator:
    """Yield ``value`` forever (e.g. a fixed candidate-state set per step)."""
    return itertools.repeat(value)

"""Type aliases and named tuples for RHMM."""

from typing import Any, Callable, Hashable, NamedTuple

import numpy as np

# Model function signatures. States are any hashable value.
StartingFn = Callable[[Hashable], float]
TransitionFn = Callable[[Hashable, Hashable], float]
EmissionFn = Callable[[Hashable, Any], float]


class ArgumentValuePair(NamedTuple):
    """Result of an arg-and-extreme search.

    argument: the input element that produced the extreme value
    value: the extreme value itself
    """
    argument: Any
    value: Any


class DoubleComponents(NamedTuple):
    """IEEE-754 decomposition of a double.

    datum: the original value
    negative: sign bit set
    raw_exponent: 11-bit biased exponent field
    raw_mantissa: 52-bit stored fraction field
    exponent: base-2 exponent of the mathematical value
    mantissa: odd integer mantissa (datum == mantissa * 2**exponent), 0 for zero
    is_nan: True for any NaN payload
    """
    datum: float
    negative: bool
    raw_exponent: int
    raw_mantissa: int
    exponent: int = 0
    mantissa: int = 0
    is_nan: bool = False


class TabularParams(NamedTuple):
    """Labelled HMM parameter tables.

    states: (K,) state labels
    observations: (M,) observation labels
    init: (K,) starting probabilities
    trans: (K, K) transition probabilities, rows are source states
    emission: (K, M) emission probabilities
    """
    states: tuple
    observations: tuple
    init: np.ndarray
    trans: np.ndarray
    emission: np.ndarray

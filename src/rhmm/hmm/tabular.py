"""Tabular HMM models.

Builds the three model functions of a ReactiveViterbi from lookup tables,
given either as nested mappings or as labelled numpy arrays. Lookups never
default missing entries to zero: a missing state or observation raises
KeyError, which the decoder reports as a ModelFunctionFailure.
"""

import logging
from typing import Any, Hashable, Mapping, Sequence

import numpy as np

from rhmm.config import (
    DEFAULT_WEATHER_EMISSION,
    DEFAULT_WEATHER_START,
    DEFAULT_WEATHER_TRANS,
    DecoderConfig,
    TabularConfig,
)
from rhmm.dictionary import add_conditionally, try_get_value
from rhmm.errors import InvalidArgument
from rhmm.hmm.viterbi import ReactiveViterbi
from rhmm.types import TabularParams

log = logging.getLogger(__name__)


class TabularModel:
    """HMM parameters held as nested dictionaries.

    starting: state -> probability
    transition: source -> target -> probability
    emission: state -> observation -> probability
    """

    def __init__(
        self,
        starting: Mapping[Hashable, float],
        transition: Mapping[Hashable, Mapping[Hashable, float]],
        emission: Mapping[Hashable, Mapping[Any, float]],
    ):
        self._starting = dict(starting)
        self._transition = {s: dict(row) for s, row in transition.items()}
        self._emission = {s: dict(row) for s, row in emission.items()}

    @classmethod
    def from_mappings(cls, starting, transition, emission) -> "TabularModel":
        return cls(starting, transition, emission)

    @classmethod
    def from_arrays(
        cls,
        states: Sequence[Hashable],
        observations: Sequence[Any],
        init: np.ndarray,
        trans: np.ndarray,
        emission: np.ndarray,
    ) -> "TabularModel":
        """Build a model from probability arrays indexed by label position.

        Args:
            states: (K,) state labels.
            observations: (M,) observation labels.
            init: (K,) starting probabilities.
            trans: (K, K) transitions, trans[i, j] = P(states[j] | states[i]).
            emission: (K, M) emissions, emission[i, m] = P(observations[m] | states[i]).

        Raises:
            InvalidArgument: On shape mismatches or duplicate labels.
        """
        states = tuple(states)
        observations = tuple(observations)
        K, M = len(states), len(observations)

        if len(set(states)) != K:
            raise InvalidArgument(f"Duplicate state labels: {states}")
        if len(set(observations)) != M:
            raise InvalidArgument(f"Duplicate observation labels: {observations}")

        init = np.asarray(init, dtype=np.float64)
        trans = np.asarray(trans, dtype=np.float64)
        emission = np.asarray(emission, dtype=np.float64)

        for label, arr, shape in [
            ("init", init, (K,)),
            ("trans", trans, (K, K)),
            ("emission", emission, (K, M)),
        ]:
            if arr.shape != shape:
                raise InvalidArgument(f"{label} has shape {arr.shape}, expected {shape}")

        return cls(
            starting={s: float(init[i]) for i, s in enumerate(states)},
            transition={
                s: {t: float(trans[i, j]) for j, t in enumerate(states)}
                for i, s in enumerate(states)
            },
            emission={
                s: {o: float(emission[i, m]) for m, o in enumerate(observations)}
                for i, s in enumerate(states)
            },
        )

    @property
    def states(self) -> tuple:
        """State labels, in the order of the starting table."""
        return tuple(self._starting)

    @property
    def observations(self) -> tuple:
        """Observation labels, in first-seen order across emission rows."""
        seen: dict = {}
        for row in self._emission.values():
            for o in row:
                add_conditionally(seen, o, None)
        return tuple(seen)

    # --- model functions ---

    def starting_probability(self, state: Hashable) -> float:
        return (
            try_get_value(self._starting, state)
            .throw_on_no_value(lambda: KeyError(f"No starting probability for state {state!r}"))
            .value
        )

    def transition_probability(self, source: Hashable, target: Hashable) -> float:
        return (
            try_get_value(self._transition, source)
            .bind(lambda row: try_get_value(row, target))
            .throw_on_no_value(lambda: KeyError(f"No transition probability {source!r} -> {target!r}"))
            .value
        )

    def emission_probability(self, state: Hashable, observation: Any) -> float:
        return (
            try_get_value(self._emission, state)
            .bind(lambda row: try_get_value(row, observation))
            .throw_on_no_value(
                lambda: KeyError(f"No emission probability for {observation!r} in state {state!r}")
            )
            .value
        )

    # --- conversion and checks ---

    def to_params(self) -> TabularParams:
        """Dense arrays over ``states`` x ``states`` / ``observations``.

        Raises:
            InvalidArgument: If any table entry is missing.
        """
        states = self.states
        observations = self.observations
        try:
            init = np.array([self.starting_probability(s) for s in states], dtype=np.float64)
            trans = np.array(
                [[self.transition_probability(s, t) for t in states] for s in states],
                dtype=np.float64,
            )
            emission = np.array(
                [[self.emission_probability(s, o) for o in observations] for s in states],
                dtype=np.float64,
            ).reshape(len(states), len(observations))
        except KeyError as exc:
            raise InvalidArgument(f"Incomplete model table: {exc.args[0]}") from exc

        return TabularParams(
            states=states,
            observations=observations,
            init=init,
            trans=trans,
            emission=emission,
        )

    def validate(self, config: TabularConfig | None = None) -> TabularParams:
        """Check that every distribution is non-negative and sums to one.

        Returns:
            The dense TabularParams that were checked.

        Raises:
            InvalidArgument: Describing every offending table.
        """
        config = config if config is not None else TabularConfig()
        params = self.to_params()
        problems = []

        for label, arr in [("init", params.init), ("trans", params.trans), ("emission", params.emission)]:
            if np.any(arr < 0) or not np.all(np.isfinite(arr)):
                problems.append(f"{label} has negative or non-finite entries")

        if abs(params.init.sum() - 1.0) > config.atol:
            problems.append(f"init sums to {params.init.sum():.6g}")

        for label, arr in [("trans", params.trans), ("emission", params.emission)]:
            row_sums = arr.sum(axis=1)
            bad = np.flatnonzero(np.abs(row_sums - 1.0) > config.atol)
            for i in bad:
                problems.append(f"{label} row {params.states[i]!r} sums to {row_sums[i]:.6g}")

        if problems:
            raise InvalidArgument("Invalid model: " + "; ".join(problems))

        log.info(
            f"Validated model with {len(params.states)} states "
            f"and {len(params.observations)} observations"
        )
        return params

    def decoder(self, config: DecoderConfig | None = None) -> ReactiveViterbi:
        """A fresh ReactiveViterbi bound to this model's lookup functions."""
        return ReactiveViterbi(
            self.starting_probability,
            self.transition_probability,
            self.emission_probability,
            config=config,
        )


def weather_model() -> TabularModel:
    """The two-state Rainy/Sunny example model."""
    return TabularModel.from_mappings(
        DEFAULT_WEATHER_START,
        DEFAULT_WEATHER_TRANS,
        DEFAULT_WEATHER_EMISSION,
    )

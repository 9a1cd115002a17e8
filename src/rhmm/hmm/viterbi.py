"""Reactive Viterbi decoder.

Consumes one (observation, candidate states) pair at a time and keeps, for
every state reachable at the latest step, the probability of the most
probable path ending there and the path itself.

Probabilities are plain products (no log-space), so long streams underflow
toward zero. Each step is computed into fresh maps and committed only once
every target state has been scored; a failing model function leaves the
decoder exactly as it was before the call.

Not thread-safe: serialise calls to ``consume`` externally.
"""

import logging
import math
import numbers
from collections import deque
from types import MappingProxyType
from typing import Any, Hashable, Iterable, Mapping, Sequence

from rhmm.config import DecoderConfig
from rhmm.enumerable import arg_and_max
from rhmm.errors import InvalidArgument, ModelFunctionFailure, NoSourceStates
from rhmm.types import ArgumentValuePair, EmissionFn, StartingFn, TransitionFn

log = logging.getLogger(__name__)


class ReactiveViterbi:
    """Incremental Viterbi decoding over user-supplied model functions.

    Args:
        starting_probability: state -> prior probability.
        transition_probability: (source, target) -> transition probability.
        emission_probability: (state, observation) -> emission probability.
        config: Optional DecoderConfig.

    Raises:
        InvalidArgument: If any model function is missing or not callable.
    """

    def __init__(
        self,
        starting_probability: StartingFn,
        transition_probability: TransitionFn,
        emission_probability: EmissionFn,
        config: DecoderConfig | None = None,
    ):
        for name, fn in [
            ("starting_probability", starting_probability),
            ("transition_probability", transition_probability),
            ("emission_probability", emission_probability),
        ]:
            if fn is None or not callable(fn):
                raise InvalidArgument(f"{name} must be a callable, got {fn!r}")

        self.starting_probability = starting_probability
        self.transition_probability = transition_probability
        self.emission_probability = emission_probability
        self.config = config if config is not None else DecoderConfig()

        # None until the first observation has been consumed
        self._target_states: tuple | None = None
        self._last: dict = {}
        self._history: deque[dict] = deque(maxlen=self.config.max_history)
        self._best_path_to: dict[Hashable, list] = {}
        self._step_count = 0
        self._underflow_warned = False

    # --- read surface ---

    @property
    def history(self) -> Sequence[Mapping[Hashable, float]]:
        """Per-step maps of state -> best path probability, oldest first."""
        return tuple(MappingProxyType(step) for step in self._history)

    @property
    def best_path_to(self) -> dict[Hashable, list]:
        """Most probable path ending in each state tracked at the latest step.

        Returns fresh lists; editing them does not affect the decoder.
        """
        return {state: list(path) for state, path in self._best_path_to.items()}

    @property
    def last_step_probabilities(self) -> Mapping[Hashable, float]:
        return MappingProxyType(self._last)

    @property
    def target_states(self) -> tuple | None:
        return self._target_states

    @property
    def step_count(self) -> int:
        """Number of observations consumed so far."""
        return self._step_count

    def most_probable_state(self) -> ArgumentValuePair:
        """Best state at the latest step and its path probability.

        Ties go to the state listed first in the latest candidate states.

        Raises:
            NoSourceStates: If nothing has been consumed or the latest step
                had no candidate states.
        """
        if not self._target_states:
            raise NoSourceStates("No states decoded yet")
        return arg_and_max(self._target_states, lambda s: self._last[s])

    def most_probable_path(self) -> list:
        return list(self._best_path_to[self.most_probable_state().argument])

    # --- feeding ---

    def consume(self, observation: Any, candidate_states: Iterable[Hashable]) -> None:
        """Advance the decoder by one time step.

        Args:
            observation: The observation emitted at this step.
            candidate_states: States considered reachable at this step. Any
                iterable; it is read exactly once.

        Raises:
            InvalidArgument: ``candidate_states`` is None, or empty while
                ``config.allow_empty_candidates`` is False.
            NoSourceStates: The previous step left no states to extend from.
            ModelFunctionFailure: A model function raised or returned an
                invalid probability. Decoder state is unchanged.
        """
        if candidate_states is None:
            raise InvalidArgument("candidate_states must not be None")

        targets = tuple(candidate_states)
        if not targets and not self.config.allow_empty_candidates:
            raise InvalidArgument(
                f"candidate_states is empty at step {self._step_count}"
            )

        if self._target_states is None:
            probabilities, paths = self._bootstrap(observation, targets)
        else:
            probabilities, paths = self._advance(observation, self._target_states, targets)

        self._check_underflow(probabilities)
        self._commit(targets, probabilities, paths)

    def consume_all(self, pairs: Iterable[tuple[Any, Iterable[Hashable]]]) -> "ReactiveViterbi":
        """Consume (observation, candidate_states) pairs in order."""
        for observation, candidate_states in pairs:
            self.consume(observation, candidate_states)
        return self

    # Observer protocol, for use as a subscriber to a push-based stream.

    def on_next(self, value: tuple[Any, Iterable[Hashable]]) -> None:
        observation, candidate_states = value
        self.consume(observation, candidate_states)

    def on_error(self, error: BaseException) -> None:
        raise error

    def on_completed(self) -> None:
        log.debug(f"Stream completed after {self._step_count} steps")

    # --- internals ---

    def _bootstrap(self, observation: Any, targets: tuple) -> tuple[dict, dict]:
        probabilities = {}
        paths = {}
        for state in targets:
            probabilities[state] = (
                self._call("starting_probability", self.starting_probability, state)
                * self._call("emission_probability", self.emission_probability, state, observation)
            )
            paths[state] = [state]
        log.debug(f"Bootstrapped with {len(targets)} states")
        return probabilities, paths

    def _advance(self, observation: Any, sources: tuple, targets: tuple) -> tuple[dict, dict]:
        if targets and not sources:
            raise NoSourceStates(
                f"Step {self._step_count} has {len(targets)} target states but no source states"
            )

        last = self._last
        probabilities = {}
        paths = {}

        for target in targets:
            emission = self._call(
                "emission_probability", self.emission_probability, target, observation
            )
            best = arg_and_max(
                sources,
                lambda source: (
                    last[source]
                    * self._call(
                        "transition_probability", self.transition_probability, source, target
                    )
                    * emission
                ),
            )
            probabilities[target] = best.value
            # Copy: several targets may extend the same source path
            paths[target] = self._best_path_to[best.argument] + [target]

        return probabilities, paths

    def _call(self, name: str, fn, *args) -> float:
        try:
            value = fn(*args)
        except Exception as exc:
            raise ModelFunctionFailure(name, args, f"{type(exc).__name__}: {exc}") from exc

        if not self.config.check_probabilities:
            return value

        # Strings and Decimals would parse but fail later in float products
        if not isinstance(value, numbers.Real):
            raise ModelFunctionFailure(name, args, f"returned non-numeric {value!r}")
        probability = float(value)
        if not math.isfinite(probability) or probability < 0.0:
            raise ModelFunctionFailure(name, args, f"returned invalid probability {value!r}")
        return probability

    def _check_underflow(self, probabilities: dict) -> None:
        """Warn once when a step with entries is all zeros.

        Fires on the bootstrap step too, or after a step that still had a
        positive entry; a run of zero steps warns only for the first.
        """
        if not self.config.warn_on_underflow or self._underflow_warned:
            return
        if not probabilities or any(p != 0.0 for p in probabilities.values()):
            return
        if not self._last or any(p > 0.0 for p in self._last.values()):
            log.warning(
                f"All path probabilities underflowed to 0.0 at step {self._step_count}; "
                "later steps can no longer discriminate between paths"
            )
            self._underflow_warned = True

    def _commit(self, targets: tuple, probabilities: dict, paths: dict) -> None:
        self._target_states = targets
        self._last = probabilities
        self._history.append(probabilities)
        self._best_path_to = paths
        self._step_count += 1
        log.debug(f"Step {self._step_count - 1}: {len(targets)} states")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(steps={self._step_count}, "
            f"states={len(self._last)}, history={len(self._history)})"
        )

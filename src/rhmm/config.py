"""Configuration dataclasses and default models for RHMM."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DecoderConfig:
    """Reactive Viterbi decoder configuration."""
    allow_empty_candidates: bool = False  # Empty steps raise InvalidArgument unless set
    max_history: int | None = None  # None keeps every step forever
    check_probabilities: bool = True  # Reject NaN/inf/negative model outputs
    warn_on_underflow: bool = True

    def __post_init__(self):
        if self.max_history is not None and self.max_history < 1:
            raise ValueError(f"max_history must be >= 1 or None, got {self.max_history}")


@dataclass(frozen=True)
class TabularConfig:
    """Tolerances for tabular model validation."""
    atol: float = 1e-6  # Allowed deviation of a row sum from 1


# Classic two-state weather example.
# States: Rainy, Sunny. Observations: Walk, Shop, Clean.
WEATHER_STATES = ("Rainy", "Sunny")
WEATHER_OBSERVATIONS = ("Walk", "Shop", "Clean")

DEFAULT_WEATHER_START = {"Rainy": 0.6, "Sunny": 0.4}

DEFAULT_WEATHER_TRANS = {
    "Rainy": {"Rainy": 0.7, "Sunny": 0.3},
    "Sunny": {"Rainy": 0.4, "Sunny": 0.6},
}

DEFAULT_WEATHER_EMISSION = {
    "Rainy": {"Walk": 0.1, "Shop": 0.4, "Clean": 0.5},
    "Sunny": {"Walk": 0.6, "Shop": 0.3, "Clean": 0.1},
}

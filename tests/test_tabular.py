"""Tests for tabular model construction, lookup and validation."""

import numpy as np
import pytest

from rhmm.config import DEFAULT_WEATHER_TRANS, TabularConfig
from rhmm.errors import InvalidArgument, ModelFunctionFailure
from rhmm.hmm.tabular import TabularModel, weather_model


class TestLookups:
    def test_weather_lookups(self):
        model = weather_model()
        assert model.states == ("Rainy", "Sunny")
        assert model.observations == ("Walk", "Shop", "Clean")
        assert model.starting_probability("Rainy") == 0.6
        assert model.transition_probability("Sunny", "Rainy") == 0.4
        assert model.emission_probability("Rainy", "Clean") == 0.5

    def test_missing_entries_raise_key_error(self):
        model = weather_model()
        with pytest.raises(KeyError):
            model.starting_probability("Foggy")
        with pytest.raises(KeyError):
            model.transition_probability("Rainy", "Foggy")
        with pytest.raises(KeyError):
            model.transition_probability("Foggy", "Rainy")
        with pytest.raises(KeyError):
            model.emission_probability("Sunny", "Swim")

    def test_missing_entry_surfaces_through_decoder(self):
        decoder = weather_model().decoder()
        decoder.consume("Walk", ["Rainy", "Sunny"])
        with pytest.raises(ModelFunctionFailure) as excinfo:
            decoder.consume("Swim", ["Rainy", "Sunny"])
        assert isinstance(excinfo.value.__cause__, KeyError)
        assert decoder.step_count == 1

    def test_tables_are_copied(self):
        trans = {s: dict(row) for s, row in DEFAULT_WEATHER_TRANS.items()}
        model = TabularModel.from_mappings({"Rainy": 1.0}, trans, {"Rainy": {"Walk": 1.0}})
        trans["Rainy"]["Rainy"] = 0.0
        assert model.transition_probability("Rainy", "Rainy") == 0.7


class TestFromArrays:
    def test_round_trip_to_params(self):
        init = np.array([0.6, 0.4])
        trans = np.array([[0.7, 0.3], [0.4, 0.6]])
        emission = np.array([[0.1, 0.4, 0.5], [0.6, 0.3, 0.1]])
        model = TabularModel.from_arrays(
            ["Rainy", "Sunny"], ["Walk", "Shop", "Clean"], init, trans, emission
        )

        params = model.to_params()
        np.testing.assert_allclose(params.init, init)
        np.testing.assert_allclose(params.trans, trans)
        np.testing.assert_allclose(params.emission, emission)
        assert model.emission_probability("Sunny", "Shop") == 0.3

    def test_shape_mismatch(self):
        with pytest.raises(InvalidArgument, match="trans"):
            TabularModel.from_arrays("ab", "xy", [0.5, 0.5], np.eye(3), np.full((2, 2), 0.5))

    def test_duplicate_labels(self):
        with pytest.raises(InvalidArgument, match="Duplicate state"):
            TabularModel.from_arrays("aa", "xy", [0.5, 0.5], np.eye(2), np.full((2, 2), 0.5))


class TestValidate:
    def test_weather_model_valid(self):
        params = weather_model().validate()
        assert params.trans.shape == (2, 2)
        assert params.emission.shape == (2, 3)

    def test_bad_row_sum_reported(self):
        model = TabularModel.from_arrays(
            "ab", "xy", [0.5, 0.5], [[0.9, 0.2], [0.5, 0.5]], [[0.5, 0.5], [0.5, 0.5]]
        )
        with pytest.raises(InvalidArgument, match="trans row 'a'"):
            model.validate()

    def test_tolerance(self):
        model = TabularModel.from_arrays(
            "ab", "xy", [0.5, 0.5001], np.full((2, 2), 0.5), np.full((2, 2), 0.5)
        )
        with pytest.raises(InvalidArgument, match="init sums"):
            model.validate()
        model.validate(TabularConfig(atol=1e-3))

    def test_negative_entries(self):
        model = TabularModel.from_arrays(
            "ab", "xy", [1.5, -0.5], np.full((2, 2), 0.5), np.full((2, 2), 0.5)
        )
        with pytest.raises(InvalidArgument, match="negative"):
            model.validate()

    def test_incomplete_table(self):
        model = TabularModel.from_mappings(
            {"a": 0.5, "b": 0.5},
            {"a": {"a": 1.0, "b": 0.0}, "b": {"b": 1.0}},
            {"a": {"x": 1.0}, "b": {"x": 1.0}},
        )
        with pytest.raises(InvalidArgument, match="Incomplete"):
            model.to_params()

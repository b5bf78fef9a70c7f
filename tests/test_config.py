"""Tests for model configuration and performance presets."""

import pytest

from wind_forecast.config import PERFORMANCE_PRESETS, ModelConfig


@pytest.mark.parametrize("preset", sorted(PERFORMANCE_PRESETS))
def test_preset_fills_unset_fields(preset):
    config = ModelConfig(performance_preset=preset)
    for name, value in PERFORMANCE_PRESETS[preset].items():
        assert getattr(config, name) == value


def test_fast_preset_directly():
    config = ModelConfig(performance_preset="fast")
    assert config.epochs == 5
    assert config.batch_size == 32
    assert config.time_steps == 12
    assert config.decay_rate == pytest.approx(0.04)


def test_default_is_balanced():
    config = ModelConfig()
    assert config.performance_preset == "balanced"
    assert (config.epochs, config.batch_size, config.time_steps) == (10, 16, 16)
    assert config.prediction_steps == 4
    assert config.learning_rate == pytest.approx(1e-3)


def test_explicit_fields_win_over_preset():
    config = ModelConfig(performance_preset="accurate", epochs=3)
    assert config.epochs == 3
    assert config.time_steps == 24
    assert config.batch_size == 8


def test_from_preset_ignores_none_overrides():
    config = ModelConfig.from_preset("fast", epochs=None, batch_size=4)
    assert config.epochs == 5
    assert config.batch_size == 4


def test_unknown_preset_raises():
    with pytest.raises(ValueError, match="turbo"):
        ModelConfig(performance_preset="turbo")
    with pytest.raises(ValueError):
        ModelConfig.from_preset("turbo")


def test_switching_preset_rederives_fields():
    config = ModelConfig(epochs=2).with_overrides(performance_preset="accurate")
    assert config.epochs == 25
    assert config.time_steps == 24

    config = ModelConfig().with_overrides(performance_preset="fast", epochs=7)
    assert config.epochs == 7
    assert config.time_steps == 12


def test_with_overrides_keeps_preset_values():
    config = ModelConfig(performance_preset="fast").with_overrides(include_marine=True)
    assert config.epochs == 5
    assert config.include_marine is True


@pytest.mark.parametrize(
    "overrides",
    [{"epochs": 0}, {"learning_rate": 0.0}, {"validation_split": 1.0}, {"decay_rate": 1.5}],
)
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        ModelConfig(**overrides).validate()

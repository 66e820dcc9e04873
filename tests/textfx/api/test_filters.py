import logging

import pytest

from textfx.api.filters import (
    NEUTRAL,
    PRESETS,
    FilterSettings,
    FilterState,
    effective_settings,
    get_preset,
    preview_descriptor,
    settings_descriptor,
    warmth_overlay,
)

logger = logging.getLogger(__name__)


@pytest.mark.parametrize("preset", PRESETS, ids=lambda p: p.name)
def test_intensity_bounds(preset):
    assert effective_settings(preset, 0) == NEUTRAL
    assert effective_settings(preset, 100) == preset.settings
    assert effective_settings(preset.name, 100) is preset.settings


def test_mono_half():
    settings = effective_settings("mono", 50)
    assert settings.saturate == 0.5
    assert settings.brightness == 1.0
    assert settings.contrast == 1.0


def test_interpolation():
    settings = effective_settings("vivid-warm", 25)
    assert settings.contrast == pytest.approx(1.0625)
    assert settings.saturate == pytest.approx(1.075)
    assert settings.hue == pytest.approx(0.0075)
    assert settings.warmth == pytest.approx(0.05)


def test_intensity_is_clamped():
    assert effective_settings("noir", -10) == NEUTRAL
    assert effective_settings("noir", 250) == get_preset("noir").settings


def test_preset_names():
    names = [preset.name for preset in PRESETS]
    assert names[0] == "original"
    assert len(names) == len(set(names)) == 10
    assert get_preset("original").settings.is_neutral()


def test_unknown_preset():
    with pytest.raises(KeyError):
        get_preset("sepia")
    with pytest.raises(KeyError):
        effective_settings("sepia", 50)


def test_settings_descriptor():
    assert settings_descriptor(NEUTRAL) == (
        "brightness(1) contrast(1) saturate(1) hue-rotate(0rad)"
    )


@pytest.mark.parametrize(
    "name, intensity, expected",
    [
        ("original", 100, "none"),
        ("vivid", 0, "none"),
        (
            "vivid",
            100,
            "brightness(1.05) contrast(1.25) saturate(1.3) hue-rotate(0rad)",
        ),
        (
            "mono",
            50,
            "brightness(1) contrast(1) saturate(0.5) hue-rotate(0rad)",
        ),
    ],
)
def test_preview_descriptor(name, intensity, expected):
    assert preview_descriptor(name, intensity) == expected


def test_warmth_overlay():
    assert warmth_overlay(NEUTRAL) is None
    assert warmth_overlay(get_preset("vivid-warm").settings) == (
        "rgba(255, 165, 0, 0.2)",
        "overlay",
    )
    assert warmth_overlay(get_preset("vivid-cool").settings) == (
        "rgba(0, 0, 255, 0.2)",
        "overlay",
    )
    assert warmth_overlay(FilterSettings(warmth=0.125)) == (
        "rgba(255, 165, 0, 0.125)",
        "overlay",
    )


def test_filter_state_defaults():
    state = FilterState()
    assert state.name == "original"
    assert state.intensity == 100
    assert state.apply_to_full_image
    assert not state.is_active()


def test_filter_state_settings():
    state = FilterState(name="mono", intensity=50)
    assert state.settings.saturate == 0.5
    assert state.is_active()
    state.intensity = 0
    assert not state.is_active()


def test_filter_state_validation():
    with pytest.raises(ValueError):
        FilterState(name="sepia")
    state = FilterState()
    with pytest.raises(ValueError):
        state.intensity = 101
    with pytest.raises(ValueError):
        state.name = "sepia"
    assert state.name == "original"

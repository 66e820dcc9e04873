"""
Filter presets and intensity interpolation.

A preset is five scalar parameters: brightness, contrast, saturation,
hue rotation in radians, and warmth. Warmth is not a channel multiplier; it
drives a translucent orange (warm) or blue (cool) overlay composited in
overlay blend mode.

Example::

    from textfx.api.filters import effective_settings, preview_descriptor

    settings = effective_settings('mono', 50)
    settings.saturate  # 0.5
    preview_descriptor('vivid', 100)
    # 'brightness(1.05) contrast(1.25) saturate(1.3) hue-rotate(0rad)'

The same :py:class:`FilterSettings` drive both the live preview string and
the raster implementation in :py:mod:`textfx.composite.filters`.
"""

import logging
from typing import Optional, Tuple, Union

from attrs import define, field

from textfx.constants import (
    COOL_OVERLAY,
    DEFAULT_FILTER,
    DEFAULT_INTENSITY,
    WARM_OVERLAY,
    BlendMode,
)

logger = logging.getLogger(__name__)


@define(frozen=True)
class FilterSettings:
    """Concrete channel adjustments."""

    brightness: float = 1.0
    contrast: float = 1.0
    saturate: float = 1.0
    hue: float = 0.0
    warmth: float = 0.0

    def is_neutral(self) -> bool:
        return self == NEUTRAL


NEUTRAL = FilterSettings()


@define(frozen=True)
class FilterPreset:
    name: str
    label: str
    settings: FilterSettings


# Approximate ratios of popular phone camera filters.
PRESETS: Tuple[FilterPreset, ...] = (
    FilterPreset('original', 'Original', NEUTRAL),
    FilterPreset(
        'vivid', 'Vivid',
        FilterSettings(brightness=1.05, contrast=1.25, saturate=1.3),
    ),
    FilterPreset(
        'vivid-warm', 'Vivid Warm',
        FilterSettings(contrast=1.25, saturate=1.3, hue=0.03, warmth=0.2),
    ),
    FilterPreset(
        'vivid-cool', 'Vivid Cool',
        FilterSettings(contrast=1.25, saturate=1.3, hue=-0.03, warmth=-0.2),
    ),
    FilterPreset(
        'dramatic', 'Dramatic',
        FilterSettings(brightness=0.9, contrast=1.35, saturate=0.8),
    ),
    FilterPreset(
        'dramatic-warm', 'Dramatic Warm',
        FilterSettings(
            brightness=0.93, contrast=1.4, saturate=0.85, hue=5, warmth=0.25
        ),
    ),
    FilterPreset(
        'dramatic-cool', 'Dramatic Cool',
        FilterSettings(brightness=0.9, contrast=1.35, saturate=0.8, warmth=-0.2),
    ),
    FilterPreset('mono', 'Mono', FilterSettings(saturate=0)),
    FilterPreset(
        'silvertone', 'Silvertone',
        FilterSettings(brightness=1.05, contrast=1.1, saturate=0.1),
    ),
    FilterPreset(
        'noir', 'Noir',
        FilterSettings(brightness=0.95, contrast=1.25, saturate=0),
    ),
)

PRESET_MAP = {preset.name: preset for preset in PRESETS}


def get_preset(name: str) -> FilterPreset:
    """
    Look up a preset by name.

    :raise KeyError: for unknown names.
    """
    try:
        return PRESET_MAP[name]
    except KeyError:
        raise KeyError('Unknown filter preset: %r' % name)


def _resolve(preset: Union[str, FilterPreset]) -> FilterPreset:
    if isinstance(preset, str):
        return get_preset(preset)
    return preset


def _lerp(neutral: float, target: float, t: float) -> float:
    return neutral + (target - neutral) * t


def effective_settings(
    preset: Union[str, FilterPreset], intensity: float
) -> FilterSettings:
    """
    Interpolate ``preset`` from neutral by ``intensity`` percent.

    ``intensity == 0`` gives :py:data:`NEUTRAL` and ``intensity == 100``
    gives the raw preset settings. Values are clamped to ``[0, 100]``.
    """
    settings = _resolve(preset).settings
    intensity = max(0.0, min(100.0, float(intensity)))
    if intensity == 0:
        return NEUTRAL
    if intensity == 100:
        return settings
    t = intensity / 100.0
    return FilterSettings(
        brightness=_lerp(1.0, settings.brightness, t),
        contrast=_lerp(1.0, settings.contrast, t),
        saturate=_lerp(1.0, settings.saturate, t),
        hue=_lerp(0.0, settings.hue, t),
        warmth=_lerp(0.0, settings.warmth, t),
    )


def _format(value: float) -> str:
    return '%g' % round(value, 6)


def settings_descriptor(settings: FilterSettings) -> str:
    """CSS filter string for the four channel adjustments."""
    return (
        'brightness(%s) contrast(%s) saturate(%s) hue-rotate(%srad)' % (
            _format(settings.brightness),
            _format(settings.contrast),
            _format(settings.saturate),
            _format(settings.hue),
        )
    )


def preview_descriptor(
    preset: Union[str, FilterPreset], intensity: float = DEFAULT_INTENSITY
) -> str:
    """
    CSS filter string for the live preview.

    Returns ``'none'`` for the original preset or zero intensity.
    """
    preset = _resolve(preset)
    if preset.name == DEFAULT_FILTER or intensity <= 0:
        return 'none'
    return settings_descriptor(effective_settings(preset, intensity))


def warmth_overlay(settings: FilterSettings) -> Optional[Tuple[str, str]]:
    """
    Translucent overlay emulating a temperature shift.

    :return: ``(css_color, blend_mode)`` or `None` when warmth is zero.
    """
    if settings.warmth == 0:
        return None
    rgb = WARM_OVERLAY if settings.warmth > 0 else COOL_OVERLAY
    color = 'rgba(%d, %d, %d, %s)' % (rgb + (_format(abs(settings.warmth)),))
    return color, BlendMode.OVERLAY.value


@define
class FilterState:
    """
    Filter selection of a session.

    .. py:attribute:: name

        Selected preset name.

    .. py:attribute:: intensity

        Percentage in ``[0, 100]``.

    .. py:attribute:: apply_to_full_image

        When `True`, the filter applies to the assembled composite;
        otherwise only the background is filtered.
    """

    name: str = field(default=DEFAULT_FILTER)
    intensity: float = field(default=DEFAULT_INTENSITY, converter=float)
    apply_to_full_image: bool = True

    @name.validator
    def _check_name(self, attribute, value):
        if value not in PRESET_MAP:
            raise ValueError('Unknown filter preset: %r' % value)

    @intensity.validator
    def _check_intensity(self, attribute, value):
        if not 0 <= value <= 100:
            raise ValueError('Intensity out of range: %r' % value)

    @property
    def preset(self) -> FilterPreset:
        return get_preset(self.name)

    @property
    def settings(self) -> FilterSettings:
        return effective_settings(self.preset, self.intensity)

    def is_active(self) -> bool:
        return not self.settings.is_neutral()

"""Animated ocean surface driven by a Gerstner-style wave bank."""

from .surface import Ocean
from .waves import Wave, WaveBank, gerstner_wave_height, gerstner_wave_normal, initialize_waves

__all__ = [
    "Ocean",
    "Wave",
    "WaveBank",
    "gerstner_wave_height",
    "gerstner_wave_normal",
    "initialize_waves",
]

"""Gerstner-style wave bank: superposed traveling sine waves.

Heights and normals are analytic, so the surface can be sampled at any
point and time without finite differences.
"""

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

DEFAULT_WAVE_SEED = 42
DETAIL_WAVE_COUNT = 4


@dataclass(frozen=True)
class Wave:
    """One traveling wave; ``direction`` is normalized on construction."""

    wavelength: float
    amplitude: float
    phase_speed: float
    direction: tuple[float, float]

    def __post_init__(self) -> None:
        if not self.wavelength > 0:
            raise ValueError(f"wavelength must be positive, got {self.wavelength!r}")
        dx, dz = self.direction
        length = math.hypot(dx, dz)
        if length == 0:
            raise ValueError("Wave direction must be non-zero")
        object.__setattr__(self, "direction", (dx / length, dz / length))

    @property
    def wavenumber(self) -> float:
        """k = 2*pi / wavelength."""
        return 2.0 * math.pi / self.wavelength


class WaveBank:
    """Immutable set of waves, packed into arrays for vectorized evaluation."""

    def __init__(self, waves: "list[Wave] | tuple[Wave, ...]"):
        self.waves: tuple[Wave, ...] = tuple(waves)
        self._k = np.array([w.wavenumber for w in self.waves], dtype=np.float64)
        self._amplitude = np.array([w.amplitude for w in self.waves], dtype=np.float64)
        self._speed = np.array([w.phase_speed for w in self.waves], dtype=np.float64)
        self._dir = np.array(
            [w.direction for w in self.waves], dtype=np.float64
        ).reshape(-1, 2)

    def __len__(self) -> int:
        return len(self.waves)

    def __iter__(self):
        return iter(self.waves)

    def _phase(
        self, x: NDArray, z: NDArray, t: float, wave_speed: float
    ) -> NDArray[np.float64]:
        # Wave axis last so the result broadcasts over any input shape
        omega = self._speed * wave_speed
        along = x[..., None] * self._dir[:, 0] + z[..., None] * self._dir[:, 1]
        return self._k * (along - omega * t)

    def height(
        self,
        x: ArrayLike,
        z: ArrayLike,
        t: float,
        wave_height: float = 1.0,
        wave_speed: float = 1.0,
    ) -> NDArray[np.float64]:
        """Sum of ``A * H * sin(k * (dir . [x, z] - omega * t))`` over waves.

        Args:
            x: World X coordinates.
            z: World Z coordinates.
            t: Animation time.
            wave_height: Global amplitude multiplier H.
            wave_speed: Global multiplier on each wave's phase speed.

        Returns:
            Surface height at each point.
        """
        x, z = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64), np.asarray(z, dtype=np.float64)
        )
        phase = self._phase(x, z, t, wave_speed)
        return np.sum(self._amplitude * wave_height * np.sin(phase), axis=-1)

    def normal(
        self,
        x: ArrayLike,
        z: ArrayLike,
        t: float,
        wave_height: float = 1.0,
        wave_speed: float = 1.0,
    ) -> NDArray[np.float64]:
        """Unit surface normal ``(-dh/dx, 1, -dh/dz)`` from analytic slopes.

        Returns:
            Array of shape ``(*broadcast(x, z).shape, 3)``.
        """
        x, z = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64), np.asarray(z, dtype=np.float64)
        )
        phase = self._phase(x, z, t, wave_speed)
        slope = self._amplitude * wave_height * self._k * np.cos(phase)

        dh_dx = np.sum(slope * self._dir[:, 0], axis=-1)
        dh_dz = np.sum(slope * self._dir[:, 1], axis=-1)

        normal = np.stack([-dh_dx, np.ones_like(dh_dx), -dh_dz], axis=-1)
        return normal / np.linalg.norm(normal, axis=-1, keepdims=True)


def initialize_waves(seed: int = DEFAULT_WAVE_SEED) -> WaveBank:
    """Build the standard bank: 2 large, 2 medium and 4 seeded detail waves.

    Detail wave directions come from ``seed`` so every ocean built with the
    same seed animates identically.
    """
    waves = [
        # Large swell
        Wave(30.0, 1.5, 1.0, (1.0, 0.3)),
        Wave(25.0, 1.2, 0.9, (0.5, 1.0)),
        # Medium chop
        Wave(15.0, 0.8, 1.2, (-0.7, 0.6)),
        Wave(12.0, 0.6, 1.1, (0.8, -0.4)),
    ]

    rng = np.random.default_rng(seed)
    for i in range(DETAIL_WAVE_COUNT):
        angle = rng.uniform(0.0, 2.0 * math.pi)
        waves.append(
            Wave(
                5.0 + i * 2.0,
                0.3 - i * 0.05,
                1.3 + i * 0.1,
                (math.cos(angle), math.sin(angle)),
            )
        )

    return WaveBank(waves)


def gerstner_wave_height(
    x: ArrayLike,
    z: ArrayLike,
    t: float,
    bank: WaveBank,
    wave_height: float = 1.0,
    wave_speed: float = 1.0,
) -> NDArray[np.float64]:
    """Functional form of ``WaveBank.height``."""
    return bank.height(x, z, t, wave_height, wave_speed)


def gerstner_wave_normal(
    x: ArrayLike,
    z: ArrayLike,
    t: float,
    bank: WaveBank,
    wave_height: float = 1.0,
    wave_speed: float = 1.0,
) -> NDArray[np.float64]:
    """Functional form of ``WaveBank.normal``."""
    return bank.normal(x, z, t, wave_height, wave_speed)

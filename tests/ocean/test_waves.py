"""Tests for the Gerstner wave bank."""

import math

import numpy as np
import pytest

from seascape.ocean.waves import (
    DETAIL_WAVE_COUNT,
    Wave,
    WaveBank,
    gerstner_wave_height,
    gerstner_wave_normal,
    initialize_waves,
)


class TestWave:
    """Tests for a single wave description."""

    def test_direction_normalized(self) -> None:
        wave = Wave(10.0, 1.0, 1.0, (3.0, 4.0))
        assert wave.direction == pytest.approx((0.6, 0.8))

    def test_wavenumber(self) -> None:
        assert Wave(4.0, 1.0, 1.0, (1.0, 0.0)).wavenumber == pytest.approx(math.pi / 2)

    def test_zero_direction_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-zero"):
            Wave(10.0, 1.0, 1.0, (0.0, 0.0))

    @pytest.mark.parametrize("wavelength", [0.0, -2.0, float("nan")])
    def test_bad_wavelength_rejected(self, wavelength: float) -> None:
        with pytest.raises(ValueError, match="wavelength"):
            Wave(wavelength, 1.0, 1.0, (1.0, 0.0))


class TestWaveBankHeight:
    """Tests for summed wave heights."""

    def test_single_wave_crest(self, single_wave: WaveBank) -> None:
        """sin(2*pi/10 * 2.5) is a crest."""
        assert float(single_wave.height(2.5, 0.0, 0.0)) == pytest.approx(1.0)

    def test_single_wave_node(self, single_wave: WaveBank) -> None:
        assert float(single_wave.height(5.0, 3.0, 0.0)) == pytest.approx(0.0, abs=1e-12)

    def test_travels_with_phase_speed(self, single_wave: WaveBank) -> None:
        """The profile at time t is the t=0 profile shifted by speed * t."""
        x = np.linspace(-20, 20, 41)
        np.testing.assert_allclose(
            single_wave.height(x + 1.5, 0.0, 1.5), single_wave.height(x, 0.0, 0.0), atol=1e-12
        )

    def test_wave_speed_multiplier(self, single_wave: WaveBank) -> None:
        np.testing.assert_allclose(
            single_wave.height(1.0, 0.0, 2.0, wave_speed=3.0),
            single_wave.height(1.0, 0.0, 6.0),
        )

    def test_wave_height_scales_amplitude(self, single_wave: WaveBank) -> None:
        assert float(single_wave.height(2.5, 0.0, 0.0, wave_height=2.5)) == pytest.approx(2.5)

    def test_zero_amplitude_is_flat(self) -> None:
        bank = initialize_waves()
        x, z = np.meshgrid(np.linspace(-50, 50, 11), np.linspace(-50, 50, 11))
        np.testing.assert_array_equal(bank.height(x, z, 0.0, wave_height=0.0), 0.0)

    def test_zero_amplitude_waves_are_flat(self) -> None:
        bank = WaveBank([Wave(10.0, 0.0, 1.0, (1.0, 0.0)), Wave(7.0, 0.0, 2.0, (0.0, 1.0))])
        np.testing.assert_array_equal(bank.height(np.arange(5.0), 1.0, 0.0), 0.0)

    def test_superposition(self) -> None:
        a = Wave(10.0, 1.0, 1.0, (1.0, 0.0))
        b = Wave(6.0, 0.5, 2.0, (0.0, 1.0))
        x, z, t = 1.3, -2.2, 0.7
        combined = WaveBank([a, b]).height(x, z, t)
        separate = WaveBank([a]).height(x, z, t) + WaveBank([b]).height(x, z, t)
        assert float(combined) == pytest.approx(float(separate))

    def test_empty_bank(self) -> None:
        bank = WaveBank([])
        assert len(bank) == 0
        np.testing.assert_array_equal(bank.height(np.arange(3.0), 0.0, 1.0), 0.0)

    def test_broadcast_shape(self) -> None:
        bank = initialize_waves()
        x = np.zeros((3, 4))
        assert bank.height(x, 1.0, 0.5).shape == (3, 4)

    def test_deterministic(self) -> None:
        bank = initialize_waves()
        x = np.linspace(-30, 30, 25)
        np.testing.assert_array_equal(bank.height(x, x, 4.2), bank.height(x, x, 4.2))


class TestWaveBankNormal:
    """Tests for analytic wave normals."""

    def test_unit_length(self) -> None:
        bank = initialize_waves()
        x, z = np.meshgrid(np.linspace(-40, 40, 21), np.linspace(-40, 40, 21))
        normals = bank.normal(x, z, 3.0, wave_height=2.0)
        assert normals.shape == (21, 21, 3)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=-1), 1.0, atol=1e-6)

    def test_flat_surface_faces_up(self) -> None:
        normal = initialize_waves().normal(12.0, -7.0, 1.0, wave_height=0.0)
        np.testing.assert_allclose(normal, [0.0, 1.0, 0.0])

    def test_slope_at_zero_crossing(self, single_wave: WaveBank) -> None:
        """At x=0 the slope is k, so the normal leans back against +X."""
        k = 2 * math.pi / 10.0
        expected = np.array([-k, 1.0, 0.0]) / math.hypot(k, 1.0)
        np.testing.assert_allclose(single_wave.normal(0.0, 0.0, 0.0), expected)

    def test_crest_faces_up(self, single_wave: WaveBank) -> None:
        np.testing.assert_allclose(
            single_wave.normal(2.5, 0.0, 0.0), [0.0, 1.0, 0.0], atol=1e-12
        )

    def test_matches_finite_difference(self) -> None:
        bank = initialize_waves()
        x, z, t, eps = 3.7, -11.2, 2.0, 1e-5
        dh_dx = (bank.height(x + eps, z, t) - bank.height(x - eps, z, t)) / (2 * eps)
        dh_dz = (bank.height(x, z + eps, t) - bank.height(x, z - eps, t)) / (2 * eps)
        expected = np.array([-dh_dx, 1.0, -dh_dz])
        expected /= np.linalg.norm(expected)
        np.testing.assert_allclose(bank.normal(x, z, t), expected, atol=1e-6)


class TestInitializeWaves:
    """Tests for the standard wave bank."""

    def test_wave_count(self) -> None:
        assert len(initialize_waves()) == 4 + DETAIL_WAVE_COUNT

    def test_same_seed_same_bank(self) -> None:
        a = [w.direction for w in initialize_waves(7)]
        b = [w.direction for w in initialize_waves(7)]
        assert a == b

    def test_seed_changes_only_detail_waves(self) -> None:
        a = list(initialize_waves(1))
        b = list(initialize_waves(2))
        assert a[:4] == b[:4]
        assert [w.direction for w in a[4:]] != [w.direction for w in b[4:]]

    def test_large_waves_dominate(self) -> None:
        waves = list(initialize_waves())
        assert waves[0].wavelength == 30.0
        assert waves[0].amplitude == 1.5
        assert all(w.amplitude < waves[0].amplitude for w in waves[1:])
        assert all(w.wavelength < 12.0 for w in waves[4:])


class TestFunctionalForm:
    """Tests for the module-level helpers."""

    def test_height_delegates(self) -> None:
        bank = initialize_waves()
        assert float(gerstner_wave_height(1.0, 2.0, 3.0, bank, 2.0, 0.5)) == pytest.approx(
            float(bank.height(1.0, 2.0, 3.0, 2.0, 0.5))
        )

    def test_normal_delegates(self) -> None:
        bank = initialize_waves()
        np.testing.assert_array_equal(
            gerstner_wave_normal(1.0, 2.0, 3.0, bank), bank.normal(1.0, 2.0, 3.0)
        )

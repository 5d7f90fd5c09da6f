import math

import numpy as np
import pytest

from bandfilter.config import DiffusionConfig
from bandfilter.diffusion import conductance, diffusion_round
from bandfilter.errors import ConfigError
from bandfilter.filters import PROCESSES, apply_diffusion_filter


def reference_diffusion(img_array, iterations, lam):
    height, width, channels = img_array.shape
    current = img_array.astype(np.float64)

    for _ in range(iterations):
        updated = np.zeros_like(current)
        for y in range(height):
            for x in range(width):
                for c in range(channels):
                    value = current[y, x, c]
                    delta_n = current[y - 1, x, c] - value if y > 0 else 0.0
                    delta_s = current[y + 1, x, c] - value if y < height - 1 else 0.0
                    delta_e = current[y, x + 1, c] - value if x < width - 1 else 0.0
                    delta_w = current[y, x - 1, c] - value if x > 0 else 0.0
                    flux = sum(
                        math.exp(-((delta / lam) ** 2)) * delta
                        for delta in (delta_n, delta_s, delta_e, delta_w)
                    )
                    updated[y, x, c] = math.floor(min(max(value + 0.25 * flux, 0), 255))
        current = updated

    return current.astype(np.uint8)


@pytest.fixture
def noisy_image():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(12, 9, 3), dtype=np.uint8)


def test_zero_iterations_returns_input(noisy_image):
    result = apply_diffusion_filter(noisy_image, DiffusionConfig(0, 10.0, 3))

    assert result.tobytes() == noisy_image.tobytes()
    assert result is not noisy_image


@pytest.mark.parametrize("lam", [0.5, 10.0, 1e6, -3.0])
def test_constant_image_is_unchanged(lam):
    img_array = np.full((6, 5, 1), 117, dtype=np.uint8)

    result = apply_diffusion_filter(img_array, DiffusionConfig(4, lam, 2))

    np.testing.assert_array_equal(result, img_array)


def test_zero_lambda_is_rejected(noisy_image):
    with pytest.raises(ConfigError):
        apply_diffusion_filter(noisy_image, DiffusionConfig(3, 0.0, 2))


def test_negative_iterations_is_rejected(noisy_image):
    with pytest.raises(ConfigError):
        apply_diffusion_filter(noisy_image, DiffusionConfig(-1, 5.0, 2))


def test_conductance_is_one_on_flat_ground():
    assert conductance(np.float64(0.0), 5.0) == 1.0
    assert conductance(np.float64(5.0), 5.0) == pytest.approx(math.exp(-1))


def test_small_lambda_preserves_edges():
    img_array = np.array([[0, 0, 255, 255]] * 3, dtype=np.uint8)[:, :, np.newaxis]

    result = apply_diffusion_filter(img_array, DiffusionConfig(5, 1.0, 1))

    np.testing.assert_array_equal(result, img_array)


def test_large_lambda_smooths():
    img_array = np.array([[[0], [202]]], dtype=np.uint8)

    result = diffusion_round(img_array, 0, 1, 1e9)

    assert result[0, :, 0].tolist() == [50, 151]


def test_single_worker_matches_reference(noisy_image):
    result = apply_diffusion_filter(noisy_image, DiffusionConfig(3, 20.0, 1))
    expected = reference_diffusion(noisy_image, 3, 20.0)

    np.testing.assert_array_equal(result, expected)


@pytest.mark.parametrize("num_workers", [2, 3, 5, 12])
def test_worker_count_does_not_change_result(noisy_image, num_workers):
    config = DiffusionConfig(6, 15.0, num_workers)
    single = apply_diffusion_filter(noisy_image, DiffusionConfig(6, 15.0, 1))

    result = apply_diffusion_filter(noisy_image, config)

    np.testing.assert_array_equal(result, single)


def test_processes_backend_has_no_seams(noisy_image):
    single = apply_diffusion_filter(noisy_image, DiffusionConfig(6, 15.0, 1))

    result = apply_diffusion_filter(noisy_image, DiffusionConfig(6, 15.0, 4), backend=PROCESSES)

    np.testing.assert_array_equal(result, single)


def test_processes_backend_zero_iterations(noisy_image):
    result = apply_diffusion_filter(noisy_image, DiffusionConfig(0, 15.0, 3), backend=PROCESSES)

    assert result.tobytes() == noisy_image.tobytes()


def test_round_reads_halo_rows():
    rng = np.random.default_rng(5)
    img_array = rng.integers(0, 256, size=(8, 4, 1), dtype=np.uint8)

    whole = diffusion_round(img_array, 0, 8, 12.0)
    # rows 2..5 computed from a window holding one extra row on each side
    band = diffusion_round(img_array[1:7], 1, 5, 12.0)

    np.testing.assert_array_equal(band, whole[2:6])

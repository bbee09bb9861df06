"""Shared test fixtures."""

import numpy as np
import pytest
from PIL import Image


def gray_row(levels):
    """
    One row of gray pixels; the alpha channel holds each pixel's original
    column so moved pixels can be traced.

    For gray pixels the luminance key equals the gray level.
    """
    return np.array(
        [[level, level, level, index] for index, level in enumerate(levels)],
        dtype=np.uint8,
    )


@pytest.fixture
def random_grid():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(12, 40, 4), dtype=np.uint8)


@pytest.fixture
def image_file(tmp_path):
    """A small RGBA PNG on disk."""
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(6, 9, 4), dtype=np.uint8)
    path = tmp_path / "input.png"
    Image.fromarray(pixels).save(path)
    return path

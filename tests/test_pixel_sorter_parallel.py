"""Tests for the thread pool driver."""

import numpy as np
import pytest

from metrics import Metric
from pixel_sorter import sort_image
from pixel_sorter_parallel import process_row, sort_image_parallel
from tests.conftest import gray_row


class TestProcessRow:
    def test_sorts_row_in_place(self):
        row = gray_row([10, 200, 50, 220, 5])

        row_index, runs = process_row((7, row, Metric.LUMINANCE, 0, 255))

        assert row_index == 7
        assert runs == [(0, 5)]
        assert list(row[:, 0]) == [5, 10, 50, 200, 220]


class TestSortImageParallel:
    @pytest.mark.parametrize("metric", list(Metric))
    @pytest.mark.parametrize("num_threads", [None, 1, 4])
    def test_matches_sequential(self, metric, num_threads, random_grid):
        expected = sort_image(random_grid.copy(), metric, 35, 210)

        result = sort_image_parallel(
            random_grid, metric, 35, 210, num_threads=num_threads
        )

        assert result is random_grid
        assert np.array_equal(random_grid, expected)

    def test_more_threads_than_rows(self):
        pixels = np.stack([gray_row([3, 2, 1]), gray_row([9, 8, 7])])

        sort_image_parallel(pixels, Metric.LUMINANCE, 0, 255, num_threads=16)

        assert list(pixels[0, :, 0]) == [1, 2, 3]
        assert list(pixels[1, :, 0]) == [7, 8, 9]

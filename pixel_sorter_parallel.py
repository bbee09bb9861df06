import multiprocessing
from concurrent.futures import ThreadPoolExecutor

from pixel_sorter import sort_row


def process_row(args):
    """Process a single row - designed for parallel execution."""
    row_index, row, metric, low, high = args

    intervals = sort_row(row, metric, low, high)

    return row_index, intervals


def sort_image_parallel(pixels, metric, low, high, num_threads=None):
    """
    Parallel pixel sorting using multiple CPU cores.

    Each worker owns one row at a time and writes only into that row's view
    of the grid, so the result matches sort_image exactly.

    Args:
        pixels: (height, width, 4) uint8 array, sorted in place
        metric: Metric to select and order pixels by
        low: Lower threshold, inclusive
        high: Higher threshold, inclusive
        num_threads: Number of threads (None = auto-detect CPU cores)

    Returns:
        The same pixel array
    """
    height = pixels.shape[0]

    # Auto-detect CPU cores
    if num_threads is None:
        num_threads = max(1, multiprocessing.cpu_count() - 1)  # Leave one core free

    work_items = [(i, pixels[i], metric, low, high) for i in range(height)]

    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        list(executor.map(process_row, work_items))

    return pixels

import os

import numpy as np
from PIL import Image

from metrics import clamp_thresholds, key_function

OUTPUT_PREFIX = "sorted-"

# Pillow formats that cannot store an alpha channel
RGB_ONLY_FORMATS = ("JPEG", "BMP", "PCX", "PPM")

# What decoding or encoding an image file can raise
IMAGE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


def inclusion_bitmap(row, metric, low, high):
    """Mark every pixel of the row whose key lies in [low, high]."""
    key_func = key_function(metric)
    return [low <= key_func(pixel) <= high for pixel in row]


def get_sort_intervals(bitmap):
    """
    Find the runs of consecutive True values in a bitmap.

    Returns half-open (start, end) intervals in ascending order.
    """
    intervals = []
    start = None

    for i, selected in enumerate(bitmap):
        if not selected:
            if start is not None:
                intervals.append((start, i))
                start = None
        else:
            if start is None:
                start = i

    if start is not None:
        intervals.append((start, len(bitmap)))

    return intervals


find_runs = get_sort_intervals


def sort_section(section, metric):
    """Return a copy of the section stably sorted by ascending metric key."""
    key_func = key_function(metric)

    # Convert to list for sorting
    section_list = [tuple(pixel) for pixel in section]
    sorted_section = sorted(section_list, key=key_func)

    return np.array(sorted_section, dtype=np.uint8).reshape(np.shape(section))


def sort_row(row, metric, low, high):
    """
    Sort every in-range run of a single row in place.

    Args:
        row: Mutable sequence of RGBA pixels (a numpy view into the image)
        metric: Metric used both for selecting and for ordering pixels
        low: Lower threshold, inclusive
        high: Higher threshold, inclusive

    Returns:
        List of (start, end) runs that were sorted
    """
    intervals = get_sort_intervals(inclusion_bitmap(row, metric, low, high))

    for start, end in intervals:
        row[start:end] = sort_section(row[start:end], metric)

    return intervals


def sort_image(pixels, metric, low, high):
    """
    Sort an RGBA pixel grid row by row, in place.

    Thresholds must already be clamped to the metric's domain with
    low <= high; nothing is validated here.
    """
    height = pixels.shape[0]

    for i in range(height):
        sort_row(pixels[i], metric, low, high)

    return pixels


def load_pixels(image_path):
    """Decode an image file into a (height, width, 4) uint8 array."""
    with Image.open(image_path) as img:
        return np.array(img.convert("RGBA"), dtype=np.uint8)


def save_pixels(pixels, output_path):
    """Encode an RGBA pixel grid, dropping alpha for formats without it."""
    result_img = Image.fromarray(pixels.astype("uint8"))

    extension = os.path.splitext(output_path)[1].lower()
    output_format = Image.registered_extensions().get(extension)

    if output_format in RGB_ONLY_FORMATS:
        result_img = result_img.convert("RGB")
        result_img.save(output_path, quality=100)
    else:
        result_img.save(output_path)

    return output_path


def sorted_output_path(image_path, output_dir=None):
    """Output file name: the input's file name with a 'sorted-' prefix."""
    file_name = os.path.basename(image_path)
    if output_dir is None:
        output_dir = os.getcwd()
    return os.path.join(output_dir, OUTPUT_PREFIX + file_name)


def sort_file(
    image_path, metric, low, high, output_dir=None, parallel=False, num_threads=None
):
    """
    Sort pixels in an image file to create glitch art effects.

    Args:
        image_path: Path to input image
        metric: Metric to select and order pixels by
        low: Lower threshold (clamped to the metric's domain)
        high: Higher threshold (clamped to the metric's domain)
        output_dir: Directory for the result (default: current directory)
        parallel: Sort rows on a thread pool
        num_threads: Worker threads for the parallel driver (None = auto)

    Returns:
        Path of the saved image
    """
    pixels = load_pixels(image_path)
    low, high = clamp_thresholds(metric, low, high)

    if parallel:
        from pixel_sorter_parallel import sort_image_parallel

        sort_image_parallel(pixels, metric, low, high, num_threads=num_threads)
    else:
        sort_image(pixels, metric, low, high)

    output_path = sorted_output_path(image_path, output_dir)
    save_pixels(pixels, output_path)
    print(f"✓ Sorted image saved to {output_path}")

    return output_path

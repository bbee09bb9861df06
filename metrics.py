"""Sort keys for pixel sorting: luminance, hue and saturation."""

from enum import Enum


class Metric(Enum):
    LUMINANCE = "luminance"
    HUE = "hue"
    SATURATION = "saturation"


# Short names used on the command line
METRIC_ALIASES = {
    "l": Metric.LUMINANCE,
    "h": Metric.HUE,
    "s": Metric.SATURATION,
}


def parse_metric(name):
    """Turn 'l'/'h'/'s' or a full metric name into a Metric."""
    key = str(name).strip().lower()
    if key in METRIC_ALIASES:
        return METRIC_ALIASES[key]
    for metric in Metric:
        if metric.value == key:
            return metric
    raise ValueError(
        f"sorting method must be one of: l (luminance), h (hue) or s (saturation), got {name!r}"
    )


def threshold_upper_boundary(metric):
    """Largest key the metric can produce."""
    if metric in (Metric.LUMINANCE, Metric.SATURATION):
        return 255
    if metric is Metric.HUE:
        return 359
    raise ValueError(f"Unknown metric: {metric!r}")


def luminance(pixel):
    """Perceptual luma of an RGB(A) pixel, 0-255 (sRGB / Rec. 709 weights)."""
    r, g, b = int(pixel[0]), int(pixel[1]), int(pixel[2])
    return (2126 * r + 7152 * g + 722 * b) // 10000


def hue(pixel):
    """
    HSL hue of a pixel in whole degrees, 0-359.

    Gray pixels (no chroma) have no defined hue; they get 0.
    """
    r, g, b = float(pixel[0]), float(pixel[1]), float(pixel[2])
    max_val = max(r, g, b)
    min_val = min(r, g, b)
    diff = max_val - min_val

    if diff == 0:
        return 0

    if max_val == r:
        h = (g - b) / diff
    elif max_val == g:
        h = 2.0 + (b - r) / diff
    else:
        h = 4.0 + (r - g) / diff
    h *= 60.0

    if h < 0:
        h += 360.0

    return int(h)


def saturation(pixel):
    """
    HSL saturation of a pixel scaled to 0-255.

    Gray pixels get 0. Uses integer math so the result is exact:
    S = C / (1 - |2L - 1|), which in 0-255 units is C / (255 - |max + min - 255|).
    """
    r, g, b = int(pixel[0]), int(pixel[1]), int(pixel[2])
    max_val = max(r, g, b)
    min_val = min(r, g, b)
    chroma = max_val - min_val

    if chroma == 0:
        return 0

    denominator = 255 - abs(max_val + min_val - 255)
    return chroma * 255 // denominator


def key_function(metric):
    """Return the key function for a metric."""
    if metric is Metric.LUMINANCE:
        return luminance
    if metric is Metric.HUE:
        return hue
    if metric is Metric.SATURATION:
        return saturation
    raise ValueError(f"Unknown metric: {metric!r}")


def sort_key(metric, pixel):
    return key_function(metric)(pixel)


def clamp_thresholds(metric, low, high):
    """
    Clamp a threshold pair into the metric's domain with low <= high.

    Mirrors the GUI sliders: the lower value is clamped to [0, high] first,
    then the higher value to [low, upper boundary].

    Args:
        metric: Active Metric
        low: Requested lower threshold
        high: Requested higher threshold

    Returns:
        (low, high) tuple of ints
    """
    upper = threshold_upper_boundary(metric)
    high = min(max(int(high), 0), upper)
    low = min(max(int(low), 0), high)
    high = min(max(high, low), upper)
    return low, high

"""
Color policies mapping iteration counts to RGB colors.

Every policy is a function ``policy(n, threshold) -> (r, g, b)`` for an
escaping point (n < threshold). Points that never escaped are always
drawn with INSIDE_COLOR, whichever policy is active; colorize() takes
care of that so the policies never see n == threshold.

To add a new policy:
1. Define a color_xxx(n, threshold) function
2. Add it to the POLICIES dictionary at the bottom of this file
"""

import numpy as np


INSIDE_COLOR = (0, 0, 0)


def _level(n, threshold):
    return int(n / threshold * 256)


def _hex_to_rgb(digits):
    """Pad ``digits`` on the left to six hex digits, keep the first six."""
    digits = ('0' * max(6 - len(digits), 0) + digits)[:6]
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def _to_byte(c):
    # Halves round up, not to even
    return int(c * 255 + 0.5)


def hsv_to_rgb(h, s, v):
    """Convert HSV (0-1 range, hue wraps) to RGB (0-255 range)."""
    i = int(h * 6)
    f = h * 6 - i
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    sector = i % 6
    if sector == 0:
        r, g, b = v, t, p
    elif sector == 1:
        r, g, b = q, v, p
    elif sector == 2:
        r, g, b = p, v, t
    elif sector == 3:
        r, g, b = p, q, v
    elif sector == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q

    return _to_byte(r), _to_byte(g), _to_byte(b)


def color_linear(n, threshold):
    """
    Linear ramp: the level is written as a zero-padded 24-bit hex color.

    Since the level never exceeds 255 this only ever lights the blue
    channel, giving a dark-to-blue ramp.
    """
    return _hex_to_rgb(format(_level(n, threshold), 'x'))


def color_quartic(n, threshold):
    """
    Quartic banding: level ** 4 written as hex and cut to six digits.

    The truncation keeps the most significant digits, so neighboring
    counts can land on very different colors.
    """
    return _hex_to_rgb(format(_level(n, threshold) ** 4, 'x'))


def color_grayscale(n, threshold):
    """Grayscale: one 8-bit gray value repeated on all three channels."""
    gray = min(_level(n, threshold), 255)
    return gray, gray, gray


def color_hsv(n, threshold):
    """
    HSV: the count ratio drives hue, saturation and value together.

    The hue runs over roughly two full turns of the color wheel, while
    saturation and brightness rise with the count, so the slow-escaping
    points near the boundary are the most vivid.
    """
    ratio = n / threshold
    return hsv_to_rgb(_level(n, threshold) / 125, ratio, ratio)


# Registry of all available policies.
# Keys are the names used in settings.json and the readout.
POLICIES = {
    'linear': color_linear,
    'quartic': color_quartic,
    'grayscale': color_grayscale,
    'hsv': color_hsv,
}

DEFAULT_POLICY = 'hsv'


def get_policy(name):
    """
    Get a policy function by name.

    Raises:
        KeyError if name not found
    """
    return POLICIES[name]


def list_policy_names():
    """Get list of available policy names."""
    return list(POLICIES.keys())


def colorize(n, threshold, policy=DEFAULT_POLICY):
    """Color for an iteration count under the named policy."""
    if n == threshold:
        return INSIDE_COLOR
    return get_policy(policy)(n, threshold)


def build_palette(policy, threshold):
    """
    Precompute the color of every possible count for one render.

    Returns:
        uint8 array of shape (threshold + 1, 3), row n is the color of count n
    """
    palette = np.zeros((threshold + 1, 3), dtype=np.uint8)
    for n in range(threshold + 1):
        palette[n] = colorize(n, threshold, policy)
    return palette

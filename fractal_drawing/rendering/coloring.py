"""
Hue-based coloring for escape-time renders.

Each pixel is reduced to a single cyclic hue value which is converted to RGB
at full saturation and full brightness. The conversion is vectorized with
matplotlib's HSV routines so that a whole tile is colored at once; single
pixels go through the same routine so every path yields identical bytes.
"""

import numpy as np
from typing import Tuple, Union
import logging

import matplotlib.colors as mcolors

logger = logging.getLogger(__name__)

# Reference hues on the unit color wheel
RED = 0.0
YELLOW = 1.0 / 6.0
GREEN = 1.0 / 3.0
CYAN = 0.5
BLUE = 2.0 / 3.0
MAGENTA = 5.0 / 6.0


def wrap_hue(hue: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Wrap hue values into the unit interval.

    Hue is cyclic, so only the fractional part matters: 1.25 and -0.75 both
    map to 0.25.
    """
    return hue - np.floor(hue)


def hues_to_rgb(hues: np.ndarray) -> np.ndarray:
    """
    Convert an array of hues to 8-bit RGB.

    Args:
        hues: Array of arbitrary shape holding unwrapped hue values

    Returns:
        uint8 array of shape ``hues.shape + (3,)``
    """
    hues = np.asarray(hues, dtype=np.float64)
    hsv = np.empty(hues.shape + (3,), dtype=np.float64)
    hsv[..., 0] = np.clip(wrap_hue(hues), 0.0, 1.0)
    hsv[..., 1] = 1.0
    hsv[..., 2] = 1.0

    rgb = mcolors.hsv_to_rgb(hsv)
    return (rgb * 255.0 + 0.5).astype(np.uint8)


def hue_to_rgb(hue: float) -> Tuple[int, int, int]:
    """Convert a single hue to an (r, g, b) tuple of 0-255 integers."""
    r, g, b = hues_to_rgb(np.array([hue]))[0]
    return int(r), int(g), int(b)

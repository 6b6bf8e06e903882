"""
Frame buffer helpers: validation of raw RGBA buffers, analysis-size
downsampling, and aspect-ratio crops of the analysed region.
"""

import numpy as np
import cv2
from typing import Dict, Optional, Tuple, Union


ASPECT_RATIOS: Dict[str, Optional[float]] = {
    'native': None,
    '16:9': 16 / 9,
    '9:16': 9 / 16,
    '4:3': 4 / 3,
    '1:1': 1.0,
    '4:5': 4 / 5,
    '2.35:1': 2.35,
    '3:2': 3 / 2,
}


def as_rgba(buffer: Union[np.ndarray, bytes, bytearray, memoryview],
            width: int = None, height: int = None) -> np.ndarray:
    """Return the buffer as a (H, W, 4) uint8 array.

    Accepts an already shaped array or a flat RGBA byte buffer together with
    its frame dimensions.
    """
    if isinstance(buffer, np.ndarray) and buffer.ndim == 3:
        if buffer.shape[2] != 4:
            raise ValueError("Frame must be RGBA with shape (H, W, 4)")
        if width is not None and height is not None and buffer.shape[:2] != (height, width):
            raise ValueError(
                f"Frame shape {buffer.shape[:2]} does not match {height}x{width}"
            )
        if buffer.dtype != np.uint8:
            raise ValueError("Frame must be uint8")
        return buffer

    if width is None or height is None:
        raise ValueError("Flat frame buffers need width and height")

    flat = np.frombuffer(buffer, dtype=np.uint8) if not isinstance(buffer, np.ndarray) \
        else buffer.astype(np.uint8, copy=False).ravel()
    if flat.size != width * height * 4:
        raise ValueError(
            f"Buffer holds {flat.size} bytes, expected {width * height * 4} for {width}x{height} RGBA"
        )
    return flat.reshape(height, width, 4)


def prepare_frame(frame: np.ndarray, target_width: int = 320, denoise: bool = True) -> np.ndarray:
    """Downsample an RGB or RGBA frame to the analysis buffer.

    The output keeps the source aspect ratio, gets a light blur to suppress
    sensor noise, and is returned as RGBA.
    """
    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise ValueError("Frame must be RGB or RGBA with shape (H, W, C)")

    height, width = frame.shape[:2]
    target_height = max(1, int(round(height * target_width / width)))

    interpolation = cv2.INTER_AREA if target_width < width else cv2.INTER_LINEAR
    small = cv2.resize(frame, (target_width, target_height), interpolation=interpolation)

    if denoise:
        small = cv2.GaussianBlur(small, (3, 3), 0)

    if small.shape[2] == 3:
        small = cv2.cvtColor(small, cv2.COLOR_RGB2RGBA)

    return np.ascontiguousarray(small, dtype=np.uint8)


def crop_bounds(width: int, height: int, aspect: str = 'native') -> Tuple[int, int, int, int]:
    """Centered crop (x, y, w, h) of a width x height frame for an aspect preset."""
    if aspect not in ASPECT_RATIOS:
        raise ValueError(f"Unknown aspect ratio: {aspect}")

    target = ASPECT_RATIOS[aspect]
    if target is None:
        return 0, 0, width, height

    if target > width / height:
        # Crop top/bottom
        crop_w, crop_h = width, width / target
        x, y = 0.0, (height - crop_h) / 2
    else:
        # Crop left/right
        crop_w, crop_h = height * target, height
        x, y = (width - crop_w) / 2, 0.0

    return (int(round(x)), int(round(y)),
            max(1, int(round(crop_w))), max(1, int(round(crop_h))))


def crop_frame(rgba: np.ndarray, aspect: str = 'native') -> np.ndarray:
    """Slice the analysed region out of an RGBA frame."""
    height, width = rgba.shape[:2]
    x, y, w, h = crop_bounds(width, height, aspect)
    return rgba[y:y + h, x:x + w]

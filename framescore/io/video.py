"""
Video and image input using ffmpeg-python, PyAV and Pillow.
Decodes source frames into downsampled RGBA analysis buffers with
millisecond timestamps.
"""

import logging
import numpy as np
from typing import Dict, Iterator, Tuple
import ffmpeg
import av
from PIL import Image

from .frames import prepare_frame
from ..config import get_config

logger = logging.getLogger(__name__)


class FrameReader:
    """Decode a video into analysis-sized RGBA frames."""

    def __init__(self, config=None):
        """Initialize frame reader with configuration."""
        self.config = config or get_config()
        self.target_width = self.config.downscale_width

    def get_video_info(self, video_path: str) -> Dict:
        """Get video metadata."""
        try:
            probe = ffmpeg.probe(video_path)
            video_stream = next(s for s in probe['streams'] if s['codec_type'] == 'video')
            num, den = video_stream.get('avg_frame_rate', '30/1').split('/')

            return {
                'duration': float(probe['format'].get('duration', 0.0)),
                'frame_count': int(video_stream.get('nb_frames', 0)),
                'fps': float(num) / float(den) if float(den) else 0.0,
                'width': int(video_stream['width']),
                'height': int(video_stream['height']),
                'codec': video_stream['codec_name'],
            }
        except (ffmpeg.Error, StopIteration, KeyError, ValueError) as e:
            logger.warning("Could not probe video %s: %s", video_path, e)
            return {}

    def iter_frames(self, video_path: str, every: int = 1) -> Iterator[Tuple[float, np.ndarray]]:
        """Yield (timestamp_ms, rgba) for every ``every``-th decoded frame."""
        with av.open(video_path) as container:
            for index, frame in enumerate(container.decode(video=0)):
                if index % every:
                    continue

                rgb = frame.to_ndarray(format='rgb24')
                timestamp = (frame.time if frame.time is not None else 0.0) * 1000.0
                yield timestamp, prepare_frame(rgb, self.target_width)


def load_image(image_path: str, size: Tuple[int, int] = None) -> np.ndarray:
    """Load an image as a (H, W, 4) uint8 RGBA array, optionally resized to (width, height)."""
    with Image.open(image_path) as img:
        img = img.convert('RGBA')
        if size is not None:
            img = img.resize(size, Image.BILINEAR)
        return np.array(img, dtype=np.uint8)


def image_size(image_path: str) -> Tuple[int, int]:
    """(width, height) of an image file."""
    with Image.open(image_path) as img:
        return img.size

"""Frame buffer handling and video/image input."""

from .frames import as_rgba, prepare_frame, crop_bounds, crop_frame, ASPECT_RATIOS

__all__ = ['as_rgba', 'prepare_frame', 'crop_bounds', 'crop_frame', 'ASPECT_RATIOS']

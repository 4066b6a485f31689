"""
Face region geometry and overlay coordinate mapping
"""
from typing import List, Optional, Sequence

import numpy as np

from .models import BoundingRegion, Landmark, MappedGeometry

DEFAULT_PADDING = 0.1
PLACEHOLDER_HALF_SIZE = 0.3  # Fraction of the shorter image side


def compute_bounding_region(
    landmarks: Sequence[Landmark],
    image_width: int,
    image_height: int,
    padding: float = DEFAULT_PADDING,
) -> Optional[BoundingRegion]:
    """Pixel-space landmark extent, padded per axis and clamped to the image"""
    if not landmarks or image_width <= 0 or image_height <= 0:
        return None

    points = np.array([(lm.x, lm.y) for lm in landmarks], dtype=float)
    xs = points[:, 0] * image_width
    ys = points[:, 1] * image_height

    min_x, max_x = float(xs.min()), float(xs.max())
    min_y, max_y = float(ys.min()), float(ys.max())
    pad_x = (max_x - min_x) * padding
    pad_y = (max_y - min_y) * padding

    return BoundingRegion(
        left=max(0.0, min_x - pad_x),
        top=max(0.0, min_y - pad_y),
        right=min(float(image_width), max_x + pad_x),
        bottom=min(float(image_height), max_y + pad_y),
    )


def placeholder_region(image_width: int, image_height: int) -> BoundingRegion:
    """Square region centered in the frame, used when no model is loaded"""
    cx = image_width / 2.0
    cy = image_height / 2.0
    half = min(image_width, image_height) * PLACEHOLDER_HALF_SIZE
    return BoundingRegion(cx - half, cy - half, cx + half, cy + half)


class CoordinateMapper:
    """Maps source-image geometry onto a rendering surface.

    With ``mirror`` on (front camera) the x axis is flipped: the region's
    right edge becomes the mapped left edge and landmark x becomes
    ``target_width - x * target_width``.
    """

    def __init__(self, mirror: bool = True):
        self.mirror = mirror

    def map(
        self,
        region: Optional[BoundingRegion],
        landmarks: Sequence[Landmark],
        source_width: int,
        source_height: int,
        target_width: int,
        target_height: int,
    ) -> Optional[MappedGeometry]:
        """Return mapped geometry, or None when nothing should be drawn"""
        if region is None:
            return None
        if source_width <= 0 or source_height <= 0 or target_width <= 0 or target_height <= 0:
            return None

        sx = target_width / source_width
        sy = target_height / source_height

        if self.mirror:
            left = target_width - region.right * sx
            right = target_width - region.left * sx
        else:
            left = region.left * sx
            right = region.right * sx

        mapped_region = BoundingRegion(
            left=left,
            top=region.top * sy,
            right=right,
            bottom=region.bottom * sy,
        )

        return MappedGeometry(
            region=mapped_region,
            points=self.map_points(landmarks, target_width, target_height),
            target_width=target_width,
            target_height=target_height,
        )

    def map_points(self, landmarks: Sequence[Landmark], target_width: int,
                   target_height: int) -> List[tuple]:
        points = []
        for lm in landmarks:
            x = lm.x * target_width
            if self.mirror:
                x = target_width - x
            points.append((x, lm.y * target_height))
        return points

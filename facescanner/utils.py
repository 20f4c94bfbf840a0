"""Helper functions for face selection.

This module provides the rule used at enrollment to pick one face out of
everything the engine detected in a photo.
"""

from __future__ import annotations

from typing import Optional, Sequence

from facescanner.interfaces import BBox


def select_best_face(boxes: Sequence[BBox], count: Optional[int] = None) -> BBox:
    """Pick the largest face among the detected boxes.

    Areas are compared as absolute values (see BBox.area). Only a strictly
    larger area replaces the current best, so the first of several equally
    large faces wins.

    Args:
        boxes: Boxes reported by the engine, in engine order
        count: Number of valid boxes reported by the engine (all if None)

    Returns:
        Copy of the largest box, or an all-zero box if there is none.

    Example:
        >>> boxes = [BBox(0, 2, 0, 5), BBox(0, 5, 0, 5), BBox(5, 0, 5, 0), BBox(0, 1, 0, 5)]
        >>> select_best_face(boxes) == boxes[1]
        True
    """
    if count is None:
        count = len(boxes)

    best = BBox()
    max_area = -1

    for bbox in boxes[:max(count, 0)]:
        if bbox.area > max_area:
            max_area = bbox.area
            best = BBox(top=bbox.top, bottom=bbox.bottom, left=bbox.left, right=bbox.right)

    return best

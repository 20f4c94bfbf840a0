"""Drawing utilities for visualizing recognition results.

Face boxes returned by the orchestrator are expressed in normalized-image
coordinates, so results are drawn on a normalized copy of the input.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import cv2
import numpy as np

from facescanner.image import normalized_size
from facescanner.interfaces import BBox, DetectedFace

# Color palette (BGR format for OpenCV)
COLOR_GREEN = (0, 255, 0)
COLOR_RED = (0, 0, 255)
COLOR_WHITE = (255, 255, 255)


def draw_bbox(
    frame: np.ndarray,
    bbox: BBox,
    color: Tuple[int, int, int] = COLOR_GREEN,
    thickness: int = 2,
) -> None:
    """Draw bounding box on frame (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        bbox: Bounding box to draw
        color: BGR color tuple (default: green)
        thickness: Line thickness in pixels
    """
    cv2.rectangle(
        frame,
        (bbox.left, bbox.top),
        (bbox.right, bbox.bottom),
        color,
        thickness,
    )


def draw_label(
    frame: np.ndarray,
    bbox: BBox,
    text: str,
    bg_color: Tuple[int, int, int] = COLOR_GREEN,
    text_color: Tuple[int, int, int] = COLOR_WHITE,
    font_scale: float = 0.5,
    thickness: int = 1,
) -> None:
    """Draw label text with a filled background above a bounding box (in-place).

    Example:
        >>> draw_label(frame, face.bbox, str(face.identity), bg_color=(0, 255, 0))
    """
    font = cv2.FONT_HERSHEY_SIMPLEX
    x = min(bbox.left, bbox.right)
    y = min(bbox.top, bbox.bottom) - 10

    # Ensure label is within frame bounds
    if y < 20:
        y = max(bbox.top, bbox.bottom) + 20

    (text_width, text_height), baseline = cv2.getTextSize(text, font, font_scale, thickness)
    cv2.rectangle(
        frame,
        (x, y - text_height - baseline),
        (x + text_width, y + baseline),
        bg_color,
        -1,  # Filled rectangle
    )
    cv2.putText(frame, text, (x, y), font, font_scale, text_color, thickness, cv2.LINE_AA)


def draw_faces(
    frame: np.ndarray,
    faces: List[DetectedFace],
    unknown_label: Optional[str] = "unknown",
) -> None:
    """Draw recognized faces (green) and unknown faces (red) in-place.

    Args:
        frame: Normalized image to draw on
        faces: Faces returned by FaceOrchestrator.find_all_in_image
        unknown_label: Label for unrecognized faces (None to omit)
    """
    for face in faces:
        color = COLOR_GREEN if face.is_known else COLOR_RED
        draw_bbox(frame, face.bbox, color=color)

        label = str(face.identity) if face.is_known else unknown_label
        if label:
            draw_label(frame, face.bbox, label, bg_color=color)


def render_faces(image_bgr: np.ndarray, faces: List[DetectedFace]) -> np.ndarray:
    """Normalize a copy of an image and draw faces on it.

    Args:
        image_bgr: Original decoded image [H, W, 3]
        faces: Faces found in that image

    Returns:
        New image at the normalized size with the faces drawn.
    """
    h, w = image_bgr.shape[:2]
    width, height = normalized_size(w, h)
    canvas = cv2.resize(image_bgr, (width, height), interpolation=cv2.INTER_LINEAR)
    draw_faces(canvas, faces)
    return canvas

"""Unit tests for best-face selection."""

from __future__ import annotations

from facescanner.interfaces import BBox
from facescanner.utils import select_best_face


def box_with_area(area: int, left: int = 0) -> BBox:
    """Create a 1-pixel-high box of the given area."""
    return BBox(top=0, bottom=1, left=left, right=left + area)


def test_first_of_equal_areas_wins():
    """Areas [10, 25, 25, 5] select the first 25."""
    boxes = [box_with_area(10), box_with_area(25, left=100), box_with_area(25, left=200), box_with_area(5)]

    best = select_best_face(boxes)

    assert best == boxes[1]


def test_returns_copy():
    boxes = [box_with_area(10)]

    best = select_best_face(boxes)

    assert best == boxes[0]
    assert best is not boxes[0]


def test_inverted_coordinates_use_absolute_area():
    small = BBox(top=0, bottom=10, left=0, right=10)  # area 100
    inverted = BBox(top=30, bottom=10, left=50, right=30)  # area 400

    assert inverted.area == 400
    assert select_best_face([small, inverted]) == inverted


def test_count_limits_scan():
    boxes = [box_with_area(10), box_with_area(99)]

    assert select_best_face(boxes, count=1) == boxes[0]


def test_no_boxes_gives_empty_box():
    assert select_best_face([]) == BBox(0, 0, 0, 0)
    assert select_best_face([box_with_area(10)], count=0) == BBox(0, 0, 0, 0)
    assert select_best_face([box_with_area(10)], count=-1) == BBox(0, 0, 0, 0)


def test_zero_area_box_is_selected():
    """A degenerate box still beats the initial -1 maximum."""
    degenerate = BBox(top=5, bottom=5, left=1, right=9)

    assert select_best_face([degenerate]) == degenerate


def test_bbox_dimensions():
    bbox = BBox(top=10, bottom=60, left=20, right=50)

    assert bbox.width == 30
    assert bbox.height == 50
    assert bbox.area == 1500

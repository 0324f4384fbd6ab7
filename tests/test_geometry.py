import math

import pytest

from icon_locate.geometry import box_area, iou_xywh, is_finite_box, is_valid_box


def test_identical_boxes_iou_is_one():
    assert iou_xywh((5, 5, 20, 10), (5, 5, 20, 10)) == pytest.approx(1.0)


def test_disjoint_boxes_iou_is_zero():
    assert iou_xywh((0, 0, 10, 10), (20, 20, 10, 10)) == 0.0


def test_touching_edges_do_not_overlap():
    assert iou_xywh((0, 0, 10, 10), (10, 0, 10, 10)) == 0.0


def test_partial_overlap():
    # 90*90 / (2*100*100 - 90*90)
    assert iou_xywh((0, 0, 100, 100), (10, 10, 100, 100)) == pytest.approx(8100 / 11900)


@pytest.mark.parametrize("a,b", [
    ((0, 0, 100, 100), (10, 10, 100, 100)),
    ((3.5, 1.0, 7.0, 2.0), (4.0, 0.0, 1.0, 9.0)),
    ((0, 0, 10, 10), (50, 50, 5, 5)),
])
def test_iou_is_symmetric(a, b):
    assert iou_xywh(a, b) == pytest.approx(iou_xywh(b, a))


def test_zero_union_returns_zero():
    assert iou_xywh((0, 0, 0, 0), (0, 0, 0, 0)) == 0.0
    assert iou_xywh((4, 4, 0, 10), (4, 4, 0, 10)) == 0.0


def test_contained_box():
    assert iou_xywh((0, 0, 10, 10), (0, 0, 5, 5)) == pytest.approx(0.25)


def test_box_helpers():
    assert box_area((1, 1, 4, 5)) == 20.0
    assert is_finite_box((0, 0, 1, 1))
    assert not is_finite_box((math.nan, 0, 1, 1))
    assert not is_finite_box((0, 0, math.inf, 1))
    assert is_valid_box((0, 0, 1, 1))
    assert not is_valid_box((0, 0, 0, 1))
    assert not is_valid_box((0, 0, 1, -2))

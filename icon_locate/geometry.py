import math
from typing import Tuple

Box = Tuple[float, float, float, float]     # x, y, w, h


def box_area(b: Box) -> float:
    _, _, w, h = b
    return float(w) * float(h)


def is_finite_box(b: Box) -> bool:
    return all(math.isfinite(float(v)) for v in b)


def is_valid_box(b: Box) -> bool:
    """Finite coordinates and a positive extent on both axes."""
    if not is_finite_box(b):
        return False
    _, _, w, h = b
    return w > 0 and h > 0


def iou_xywh(a: Box, b: Box) -> float:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    ax2, ay2 = ax + aw, ay + ah
    bx2, by2 = bx + bw, by + bh

    iw = max(0.0, min(ax2, bx2) - max(ax, bx))
    ih = max(0.0, min(ay2, by2) - max(ay, by))
    inter = float(iw * ih)

    union = box_area(a) + box_area(b) - inter
    if union <= 0:
        return 0.0
    return inter / union

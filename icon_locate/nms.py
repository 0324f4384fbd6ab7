import math
from typing import Iterable, List, Tuple
from .geometry import iou_xywh, is_valid_box
from .types import Candidate


def confidence_ratio(best: Candidate, other: Candidate) -> float:
    """best / other, with a zero denominator treated as infinitely dominant
    unless best is zero as well (then neither dominates)."""
    if other.confidence == 0:
        return 0.0 if best.confidence == 0 else float("inf")
    return best.confidence / other.confidence


def is_redundant(
    best: Candidate,
    other: Candidate,
    same_template_iou: float,
    cross_template_iou: float = 0.5,
    ratio_thresh: float = 1.5,
) -> bool:
    iou = iou_xywh(best.bbox, other.bbox)
    if best.template == other.template:
        return iou >= same_template_iou

    # a much weaker box sitting inside a different template's hit is noise
    if iou > cross_template_iou and confidence_ratio(best, other) > ratio_thresh:
        return True
    # NOTE: this fires whenever the ratio rule could, so the ratio never keeps a box alive
    return iou >= cross_template_iou


def drop_invalid(cands: Iterable[Candidate]) -> List[Candidate]:
    out: List[Candidate] = []
    for c in cands:
        if not is_valid_box(c.bbox) or not math.isfinite(c.confidence):
            print(f"[WARN] Dropping malformed candidate from {c.template}: bbox={c.bbox} confidence={c.confidence}")
            continue
        out.append(c)
    return out


def suppress(
    cands: Iterable[Candidate],
    same_template_iou: float,
    cross_template_iou: float = 0.5,
    ratio_thresh: float = 1.5,
) -> List[Candidate]:
    """Greedy asymmetric NMS.

    Same-template overlaps are judged by IoU alone; cross-template overlaps use
    the looser `cross_template_iou` bar plus the confidence-ratio rule.
    Equal confidences keep their input order (sorted() is stable).
    The result is in selection order.
    """
    remaining: Tuple[Candidate, ...] = tuple(
        sorted(drop_invalid(cands), key=lambda c: c.confidence, reverse=True)
    )
    keep: List[Candidate] = []
    while remaining:
        best, rest = remaining[0], remaining[1:]
        keep.append(best)
        remaining = tuple(
            c for c in rest
            if not is_redundant(best, c, same_template_iou, cross_template_iou, ratio_thresh)
        )
    return keep

import math
from typing import List, Optional, Sequence, Tuple
from .config import CONFIDENCE_BANDS, STROKE_STYLES, LABEL_SUFFIX, LABEL_MAX_LEN
from .geometry import is_finite_box
from .types import AnnotationDescriptor, Candidate, ConfidenceTally


def _in_band(v: float, band: Tuple[float, float, bool, bool]) -> bool:
    lo, hi, lo_inc, hi_inc = band
    above = v >= lo if lo_inc else v > lo
    below = v <= hi if hi_inc else v < hi
    return above and below


def confidence_band(confidence: float) -> Optional[str]:
    """Tally bucket for a confidence, or None for values in the (0.6, 0.7) gap."""
    for name, band in CONFIDENCE_BANDS.items():
        if _in_band(confidence, band):
            return name
    return None


def stroke_style(confidence: float) -> Tuple[str, int]:
    for above, color, width in STROKE_STYLES:
        if confidence > above:
            return color, width
    _, color, width = STROKE_STYLES[-1]
    return color, width


def make_label(template: str, suffix: str = LABEL_SUFFIX, max_len: int = LABEL_MAX_LEN) -> str:
    return template.replace(suffix, "", 1)[:max_len]


def build_annotations(
    selected: Sequence[Candidate],
) -> Tuple[List[AnnotationDescriptor], ConfidenceTally]:
    descriptors: List[AnnotationDescriptor] = []
    tally = ConfidenceTally()

    for c in selected:
        if not is_finite_box(c.bbox):
            print(f"[WARN] Invalid rectangle coordinates: x={c.x} y={c.y} width={c.width} height={c.height}")
            continue

        color, width = stroke_style(c.confidence)
        descriptors.append(AnnotationDescriptor(
            top=int(math.floor(c.y)),
            left=int(math.floor(c.x)),
            width=int(math.floor(c.width)),
            height=int(math.floor(c.height)),
            color=color,
            stroke_width=width,
            label=make_label(c.template),
        ))

        band = confidence_band(c.confidence)
        if band is not None:
            setattr(tally, band, getattr(tally, band) + 1)

    return descriptors, tally

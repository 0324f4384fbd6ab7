from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import cv2

# raw TM_SQDIFF has no upper bound, so it cannot be turned into a higher-is-better confidence
MATCH_METHODS = (
    cv2.TM_SQDIFF_NORMED,
    cv2.TM_CCORR, cv2.TM_CCORR_NORMED,
    cv2.TM_CCOEFF, cv2.TM_CCOEFF_NORMED,
)
# lower score = better match; confidence is reported as 1 - score
INVERTED_METHODS = (cv2.TM_SQDIFF_NORMED,)

MATCH_PARAMS = {
    "method": cv2.TM_CCOEFF_NORMED,
    "threshold": 0.833,
    "low_confidence_report": 0.88,
}

FEATURE_PARAMS = {
    "ratio": 0.75,          # Lowe ratio test
    "min_good": 10,         # fewer good matches than this: no localisation
    "n_features": 0,        # SIFT keypoint cap, 0 = unlimited
    "ransac_reproj": 5.0,
}

NMS_PARAMS = {
    "same_template_iou": 0.2,
    "cross_template_iou": 0.5,
    "confidence_ratio": 1.5,
}

# width, height of the icons in the reference grid
TEMPLATE_SIZE: Tuple[int, int] = (50, 35)

# (left, top, width, height) taken from each template before stretching; None = whole image
TEMPLATE_CROP: Optional[Tuple[int, int, int, int]] = None

TEMPLATE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".webp")

# tally bands: name -> (low, high, low_inclusive, high_inclusive)
# (0.6, 0.7) falls in no band
CONFIDENCE_BANDS: Dict[str, Tuple[float, float, bool, bool]] = {
    "p90": (0.9, float("inf"), True, False),
    "p80": (0.8, 0.9, True, False),
    "p70": (0.7, 0.8, True, False),
    "p60": (float("-inf"), 0.6, False, True),
}

# stroke tiers: (confidence strictly above, colour, width); last entry is the fallback
STROKE_STYLES = [
    (0.9, "#38E6FF", 3),
    (0.8, "#8F0CB6", 2),
    (0.7, "#C03D0C", 2),
    (float("-inf"), "#E1625B", 3),
]
LABEL_COLOR = "#FF0000"

LABEL_SUFFIX = "_png"
LABEL_MAX_LEN = 5

OUTPUT_IMAGE = "output_with_rectangles.png"
RESULTS_JSON = "results.json"
FEATURES_JSON = "features.json"
TEMP_RESIZED_DIR = "temp_resized_templates"
TEMP_CROPPED_DIR = "temp_cropped_resized_templates"


@dataclass
class LocateOptions:
    method: int = MATCH_PARAMS["method"]
    threshold: float = MATCH_PARAMS["threshold"]
    low_confidence_report: float = MATCH_PARAMS["low_confidence_report"]
    same_template_iou: float = NMS_PARAMS["same_template_iou"]
    cross_template_iou: float = NMS_PARAMS["cross_template_iou"]
    confidence_ratio: float = NMS_PARAMS["confidence_ratio"]
    template_size: Tuple[int, int] = TEMPLATE_SIZE
    template_crop: Optional[Tuple[int, int, int, int]] = TEMPLATE_CROP
    workers: int = 1
    out_dir: str = "."
    work_dir: str = "."
    debug: bool = False

    def validate(self) -> None:
        if self.method not in MATCH_METHODS:
            raise ValueError(f"Unknown match method: {self.method}")
        w, h = self.template_size
        if w <= 0 or h <= 0:
            raise ValueError(f"Template size must be positive, got {self.template_size}")
        if self.template_crop is not None:
            _, _, cw, ch = self.template_crop
            if cw <= 0 or ch <= 0:
                raise ValueError(f"Crop size must be positive, got {self.template_crop}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        for name in ("same_template_iou", "cross_template_iou"):
            v = getattr(self, name)
            if not (0.0 <= v <= 1.0):
                raise ValueError(f"{name} must be within [0, 1], got {v}")

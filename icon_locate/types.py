from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class RawMatch:
    x: float
    y: float
    width: float
    height: float
    confidence: float


@dataclass(frozen=True)
class Candidate:
    x: float
    y: float
    width: float
    height: float
    confidence: float
    template: str                            # source template file name

    @property
    def bbox(self):
        return (self.x, self.y, self.width, self.height)

    def to_dict(self) -> Dict[str, object]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "confidence": self.confidence,
            "template": self.template,
        }


@dataclass
class TemplateResult:
    template: str
    max_confidence: float = 0.0
    matches: List[RawMatch] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class AnnotationDescriptor:
    top: int
    left: int
    width: int
    height: int
    color: str                               # "#RRGGBB"
    stroke_width: int
    label: str


@dataclass
class ConfidenceTally:
    p90: int = 0                             # >= 0.9
    p80: int = 0                             # [0.8, 0.9)
    p70: int = 0                             # [0.7, 0.8)
    p60: int = 0                             # <= 0.6

    def as_dict(self) -> Dict[str, int]:
        return {"p90": self.p90, "p80": self.p80, "p70": self.p70, "p60": self.p60}


@dataclass
class FeatureResult:
    template: str
    corners: List[Tuple[float, float]] = field(default_factory=list)   # projected template corners, clockwise from top-left
    confidence: float = 0.0
    matches_count: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {"template": self.template, "matchesCount": self.matches_count}
        if self.corners:
            out["corners"] = [{"x": x, "y": y} for x, y in self.corners]
            out["confidence"] = self.confidence
        if self.error:
            out["error"] = self.error
        return out

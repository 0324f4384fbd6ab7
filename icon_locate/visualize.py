from typing import List, Sequence, Tuple
import matplotlib.pyplot as plt
from matplotlib.patches import Patch, Rectangle
import numpy as np
import cv2
from .config import LABEL_COLOR
from .preprocess import write_image
from .types import AnnotationDescriptor, Candidate


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    c = color.lstrip("#")
    if len(c) != 6:
        raise ValueError(f"Expected #RRGGBB colour, got {color!r}")
    r, g, b = int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)
    return (b, g, r)


def draw_annotations(image_bgr: np.ndarray, descriptors: Sequence[AnnotationDescriptor]) -> np.ndarray:
    vis = image_bgr.copy()
    label_bgr = hex_to_bgr(LABEL_COLOR)

    for d in descriptors:
        x, y = d.left, d.top
        x2, y2 = x + d.width - 1, y + d.height - 1
        cv2.rectangle(vis, (x, y), (x2, y2), hex_to_bgr(d.color), d.stroke_width)

        if d.label:
            (_, th), _ = cv2.getTextSize(d.label, cv2.FONT_HERSHEY_PLAIN, 1.0, 1)
            # label sits in the top-left corner of the box, vertically centred at 17%
            tx = x + max(1, int(d.width * 0.01))
            ty = y + int(d.height * 0.17) + th // 2
            cv2.putText(vis, d.label, (tx, ty), cv2.FONT_HERSHEY_PLAIN, 1.0, label_bgr, 1, cv2.LINE_AA)

    return vis


def composite_and_write(scene_path: str, descriptors: Sequence[AnnotationDescriptor], out_path: str) -> None:
    img = cv2.imread(scene_path, cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Cannot read image: {scene_path}")
    write_image(out_path, draw_annotations(img, descriptors))


def show_candidates(img_bgr: np.ndarray, candidates: List[Candidate], title: str):
    """Debug view: one outline colour per template, with a legend listing per-template hit counts."""
    templates = sorted({c.template for c in candidates})
    cmap = plt.get_cmap("tab10")
    colors = {t: cmap(i % 10) for i, t in enumerate(templates)}
    counts = {t: 0 for t in templates}

    fig, ax = plt.subplots(figsize=(14, 10))
    ax.imshow(cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB))
    for c in candidates:
        counts[c.template] += 1
        ax.add_patch(Rectangle((c.x, c.y), c.width, c.height, fill=False, lw=1, edgecolor=colors[c.template]))

    handles = [Patch(edgecolor=colors[t], fill=False, label=f"{t} ({counts[t]})") for t in templates]
    if handles:
        ax.legend(handles=handles, loc="upper right", fontsize="small")
    ax.set_title(f"{title} (count={len(candidates)})")
    ax.axis("off")
    plt.show()
    return fig

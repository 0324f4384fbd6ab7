"""Shared fixtures: synthetic scenes and icon templates written to tmp_path."""
from typing import Dict, Tuple

import matplotlib
matplotlib.use("Agg")

import cv2
import numpy as np
import pytest

ICON_W, ICON_H = 50, 35


def noise_icon(seed: int, w: int = ICON_W, h: int = ICON_H) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


@pytest.fixture
def icons() -> Dict[str, np.ndarray]:
    return {
        "alpha.png": noise_icon(1),
        "beta.png": noise_icon(2),
        "gamma.png": noise_icon(3),
    }


@pytest.fixture
def scene_setup(tmp_path, icons) -> Tuple[str, str, Dict[str, list]]:
    """Gray scene with alpha at two spots, beta at one, gamma absent."""
    scene = np.full((300, 400, 3), 128, dtype=np.uint8)
    placements = {
        "alpha.png": [(20, 30), (250, 200)],
        "beta.png": [(150, 60)],
        "gamma.png": [],
    }
    for name, spots in placements.items():
        for x, y in spots:
            scene[y : y + ICON_H, x : x + ICON_W] = icons[name]

    scene_path = str(tmp_path / "target.png")
    cv2.imwrite(scene_path, scene)

    tdir = tmp_path / "templates"
    tdir.mkdir()
    for name, img in icons.items():
        cv2.imwrite(str(tdir / name), img)
    # not an image extension, must be ignored
    (tdir / "notes.txt").write_text("ignore me")

    return scene_path, str(tdir), placements

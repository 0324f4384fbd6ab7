import os
from typing import List, Optional, Sequence
import cv2
import numpy as np
from .config import FEATURE_PARAMS, INVERTED_METHODS, MATCH_METHODS
from .types import FeatureResult, RawMatch, TemplateResult


def read_gray(path: str) -> np.ndarray:
    img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise FileNotFoundError(f"Cannot read image: {path}")
    return img


def check_method(method: int) -> None:
    if method == cv2.TM_SQDIFF:
        raise ValueError("TM_SQDIFF is unbounded; use TM_SQDIFF_NORMED instead")
    if method not in MATCH_METHODS:
        raise ValueError(f"Unknown match method: {method}")


def match_one(scene: np.ndarray, templ: np.ndarray, name: str, method: int, threshold: float) -> TemplateResult:
    """Template-match one template.

    For TM_SQDIFF_NORMED the threshold applies to the raw score
    (score <= threshold) while the reported confidence is 1 - score, so every
    method hands out higher-is-better confidences.
    """
    th, tw = templ.shape[:2]
    sh, sw = scene.shape[:2]
    if sw < tw or sh < th:
        return TemplateResult(template=name, error="Scene image is smaller than template image")

    score_map = cv2.matchTemplate(scene, templ, method)

    if method in INVERTED_METHODS:
        rows, cols = np.where(score_map <= threshold)
        conf_map = 1.0 - score_map
    else:
        rows, cols = np.where(score_map >= threshold)
        conf_map = score_map
    _, peak, _, _ = cv2.minMaxLoc(conf_map)

    # row-major, same order the score map is scanned in
    matches = [
        RawMatch(
            x=float(j),
            y=float(i),
            width=float(tw),
            height=float(th),
            confidence=float(conf_map[i, j]),
        )
        for i, j in zip(rows.tolist(), cols.tolist())
    ]
    return TemplateResult(template=name, max_confidence=float(peak), matches=matches)


def find_templates(
    scene_path: str,
    template_paths: Sequence[str],
    method: int = cv2.TM_CCOEFF_NORMED,
    threshold: float = 0.8,
) -> List[TemplateResult]:
    """Run template matching of every template against one scene.

    One result per template, in the order given.
    """
    check_method(method)

    scene = read_gray(scene_path)
    out: List[TemplateResult] = []
    for p in template_paths:
        name = os.path.basename(p)
        templ = read_gray(p)
        out.append(match_one(scene, templ, name, method, threshold))
    return out


def ratio_filter(knn_matches, ratio: float) -> List[cv2.DMatch]:
    """Lowe's ratio test over k=2 neighbour pairs; pairs with fewer than two neighbours are skipped."""
    good = []
    for pair in knn_matches:
        if len(pair) != 2:
            continue
        m, n = pair
        if m.distance < ratio * n.distance:
            good.append(m)
    return good


def feature_confidence(good: int, kp_templ: int, kp_scene: int) -> float:
    total = kp_templ + kp_scene
    if total <= 0:
        return 0.0
    return min(1.0, good / float(total) * 2.0)


def build_flann() -> cv2.FlannBasedMatcher:
    # KD-tree index for float (SIFT) descriptors
    index_params = dict(algorithm=1, trees=5)
    search_params = dict(checks=50)
    return cv2.FlannBasedMatcher(index_params, search_params)


def match_features_one(
    scene_kp, scene_des: Optional[np.ndarray],
    templ: np.ndarray,
    name: str,
    detector,
    ratio: float = FEATURE_PARAMS["ratio"],
    min_good: int = FEATURE_PARAMS["min_good"],
    ransac_reproj: float = FEATURE_PARAMS["ransac_reproj"],
) -> FeatureResult:
    kp, des = detector.detectAndCompute(templ, None)
    if not kp or not scene_kp or des is None or scene_des is None or len(scene_kp) < 2:
        return FeatureResult(template=name, matches_count=0)

    knn = build_flann().knnMatch(des, scene_des, k=2)
    good = ratio_filter(knn, ratio)
    if len(good) < min_good:
        return FeatureResult(template=name, matches_count=len(good))

    src = np.float32([kp[m.queryIdx].pt for m in good]).reshape(-1, 1, 2)
    dst = np.float32([scene_kp[m.trainIdx].pt for m in good]).reshape(-1, 1, 2)
    H, _ = cv2.findHomography(src, dst, cv2.RANSAC, ransac_reproj)
    if H is None:
        return FeatureResult(template=name, matches_count=len(good), error="Homography could not be estimated")

    h, w = templ.shape[:2]
    corners = np.float32([[0, 0], [w, 0], [w, h], [0, h]]).reshape(-1, 1, 2)
    projected = cv2.perspectiveTransform(corners, H).reshape(4, 2)

    return FeatureResult(
        template=name,
        corners=[(float(x), float(y)) for x, y in projected],
        confidence=feature_confidence(len(good), len(kp), len(scene_kp)),
        matches_count=len(good),
    )


def find_features(
    scene_path: str,
    template_paths: Sequence[str],
    ratio: float = FEATURE_PARAMS["ratio"],
    min_good: int = FEATURE_PARAMS["min_good"],
    n_features: int = FEATURE_PARAMS["n_features"],
) -> List[FeatureResult]:
    """Localise each template in the scene with SIFT keypoints + homography.

    Unlike find_templates this tolerates scale and rotation but yields at
    most one placement per template. Per-template failures are recorded on
    the result instead of aborting the run.
    """
    scene = read_gray(scene_path)
    sift = cv2.SIFT_create(nfeatures=n_features)
    scene_kp, scene_des = sift.detectAndCompute(scene, None)

    out: List[FeatureResult] = []
    for p in template_paths:
        name = os.path.basename(p)
        templ = cv2.imread(p, cv2.IMREAD_GRAYSCALE)
        if templ is None:
            out.append(FeatureResult(template=name, error="Failed to load object image"))
            continue
        try:
            out.append(match_features_one(scene_kp, scene_des, templ, name, sift, ratio, min_good))
        except cv2.error as e:
            out.append(FeatureResult(template=name, error=str(e)))
    return out

import math
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple
import cv2
import numpy as np
from .config import TEMPLATE_EXTENSIONS


def read_image(path: str) -> np.ndarray:
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Cannot read image: {path}")
    return img


def write_image(path: str, img: np.ndarray) -> None:
    try:
        ok = cv2.imwrite(path, img)
    except cv2.error as e:
        raise RuntimeError(f"Failed to write image: {path}") from e
    if not ok:
        raise RuntimeError(f"Failed to write image: {path}")


def image_size(path: str) -> Tuple[int, int]:
    h, w = read_image(path).shape[:2]
    return w, h


def resize_cover(img: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale to cover width x height keeping aspect ratio, then centre-crop."""
    h, w = img.shape[:2]
    scale = max(width / float(w), height / float(h))
    rw = max(width, int(math.ceil(w * scale)))
    rh = max(height, int(math.ceil(h * scale)))
    interp = cv2.INTER_AREA if scale < 1.0 else cv2.INTER_CUBIC
    resized = cv2.resize(img, (rw, rh), interpolation=interp)
    x0 = (rw - width) // 2
    y0 = (rh - height) // 2
    return resized[y0 : y0 + height, x0 : x0 + width].copy()


def resize_and_save(src: str, width: int, height: int, dst: str) -> None:
    write_image(dst, resize_cover(read_image(src), width, height))


def crop_resize_and_save(
    src: str,
    left: int, top: int, crop_w: int, crop_h: int,
    width: int, height: int,
    dst: str,
) -> None:
    img = read_image(src)
    H, W = img.shape[:2]
    if left < 0 or top < 0 or left + crop_w > W or top + crop_h > H:
        raise ValueError(
            f"Crop ({left},{top},{crop_w},{crop_h}) is outside {src} ({W}x{H})"
        )
    roi = img[top : top + crop_h, left : left + crop_w]
    # stretch, aspect ratio not kept
    write_image(dst, cv2.resize(roi, (width, height), interpolation=cv2.INTER_AREA))


def list_templates(template_dir: str) -> List[str]:
    if not os.path.isdir(template_dir):
        raise FileNotFoundError(f"Template directory not found: {template_dir}")
    names = [
        n for n in os.listdir(template_dir)
        if os.path.splitext(n)[1].lower() in TEMPLATE_EXTENSIONS
    ]
    return sorted(names)


def prepare_templates(
    names: Sequence[str],
    src_dir: str,
    dst_dir: str,
    size: Tuple[int, int],
    crop: Optional[Tuple[int, int, int, int]] = None,
    workers: int = 1,
) -> List[str]:
    """Write one resized copy per template into dst_dir, same order as names."""
    width, height = size

    def _one(name: str) -> str:
        src = os.path.join(src_dir, name)
        dst = os.path.join(dst_dir, name)
        if crop is None:
            resize_and_save(src, width, height, dst)
        else:
            left, top, cw, ch = crop
            crop_resize_and_save(src, left, top, cw, ch, width, height, dst)
        return dst

    if workers <= 1:
        return [_one(n) for n in names]

    # map() keeps input order and re-raises the first failure
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(_one, names))


@contextmanager
def temp_workdirs(*dirs: str) -> Iterator[Tuple[str, ...]]:
    """Create each directory empty and remove all of them on exit, error or not."""
    try:
        for d in dirs:
            if os.path.exists(d):
                shutil.rmtree(d)
            os.makedirs(d)
        yield dirs
    finally:
        for d in dirs:
            if os.path.exists(d):
                shutil.rmtree(d)
                print(f"[INFO] Cleaned up {d}")

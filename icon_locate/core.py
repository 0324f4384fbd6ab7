from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import os
import time
import cv2

from .aggregate import aggregate_results, low_confidence_templates
from .config import FEATURE_PARAMS, FEATURES_JSON, LocateOptions, OUTPUT_IMAGE, RESULTS_JSON, TEMP_CROPPED_DIR, TEMP_RESIZED_DIR
from .match import find_features, find_templates
from .nms import drop_invalid, suppress
from .postprocess import build_annotations
from .preprocess import image_size, list_templates, prepare_templates, temp_workdirs
from .types import AnnotationDescriptor, Candidate, ConfidenceTally, FeatureResult
from .visualize import composite_and_write, show_candidates


@dataclass
class LocateReport:
    selected: List[Candidate]
    not_found: List[str]
    annotations: List[AnnotationDescriptor]
    tally: ConfidenceTally
    templates: List[str] = field(default_factory=list)
    low_confidence: List[Tuple[str, float]] = field(default_factory=list)
    total_before_nms: int = 0
    output_image: Optional[str] = None
    results_json: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "results": results_payload(self.selected),
            "not_found": list(self.not_found),
            "tally": self.tally.as_dict(),
            "total_before_nms": self.total_before_nms,
        }


def results_payload(selected: Sequence[Candidate]) -> List[Dict[str, Any]]:
    return [c.to_dict() for c in selected]


def write_results(selected: Sequence[Candidate], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(results_payload(selected), f, ensure_ascii=False, indent=2)


def detect_icons(
    template_names: Sequence[str],
    template_results,
    options: LocateOptions,
) -> Tuple[List[Candidate], List[str], List[Candidate]]:
    """Aggregate raw matches and suppress duplicates. Returns (selected, not_found, pool)."""
    pool, not_found = aggregate_results(template_names, template_results)
    selected = suppress(
        pool,
        options.same_template_iou,
        options.cross_template_iou,
        options.confidence_ratio,
    )
    return selected, not_found, pool


def print_summary(report: LocateReport) -> None:
    if report.low_confidence:
        print("Template max confidences (below report level):")
        for name, conf in report.low_confidence:
            print(f"  {name}: {conf}")
    found = len(report.templates) - len(report.not_found)
    print(f"Templates found: {found}/{len(report.templates)}")
    print(f"Not found: {len(report.not_found)}")
    for name in report.not_found:
        print(f"  {name}")
    print(f"Total results before NMS: {report.total_before_nms}")
    print(f"Total found rectangles after NMS: {len(report.selected)}")
    t = report.tally
    print(f"Confidence level 90>=:{t.p90}  <80>=:{t.p80}  <70>=:{t.p70}  60<=:{t.p60}")


def locate_icons(
    scene_path: str,
    template_dir: str,
    options: Optional[LocateOptions] = None,
) -> LocateReport:
    options = options or LocateOptions()
    options.validate()

    W, H = image_size(scene_path)
    print(f"[INFO] Main image dimensions: {W}x{H}")

    names = list_templates(template_dir)
    print(f"[INFO] {len(names)} templates in {template_dir}")

    resized_dir = os.path.join(options.work_dir, TEMP_RESIZED_DIR)
    cropped_dir = os.path.join(options.work_dir, TEMP_CROPPED_DIR)

    with temp_workdirs(resized_dir, cropped_dir):
        dst_dir = resized_dir if options.template_crop is None else cropped_dir
        print("[INFO] Resizing templates...")
        paths = prepare_templates(
            names, template_dir, dst_dir,
            size=options.template_size,
            crop=options.template_crop,
            workers=options.workers,
        )

        t0 = time.perf_counter()
        results = find_templates(scene_path, paths, options.method, options.threshold)
        print(f"[INFO] Template matching took {time.perf_counter() - t0:.3f}s")

        selected, not_found, pool = detect_icons(names, results, options)

        if options.debug:
            scene = cv2.imread(scene_path, cv2.IMREAD_COLOR)
            show_candidates(scene, drop_invalid(pool), title="Before NMS")
            show_candidates(scene, selected, title="After NMS")

        annotations, tally = build_annotations(selected)
        print(f"[INFO] Drawing {len(annotations)} valid rectangles")

        os.makedirs(options.out_dir, exist_ok=True)
        out_image = os.path.join(options.out_dir, OUTPUT_IMAGE)
        out_json = os.path.join(options.out_dir, RESULTS_JSON)
        composite_and_write(scene_path, annotations, out_image)
        print(f"[OK] Wrote image to: {out_image}")
        write_results(selected, out_json)
        print(f"[OK] Wrote JSON to: {out_json}")

    report = LocateReport(
        selected=selected,
        not_found=not_found,
        annotations=annotations,
        tally=tally,
        templates=names,
        low_confidence=low_confidence_templates(names, results, options.low_confidence_report),
        total_before_nms=len(pool),
        output_image=out_image,
        results_json=out_json,
    )
    print_summary(report)
    return report


def locate_features(
    scene_path: str,
    template_dir: str,
    out_dir: str = ".",
    ratio: float = FEATURE_PARAMS["ratio"],
    min_good: int = FEATURE_PARAMS["min_good"],
) -> List[FeatureResult]:
    """Keypoint localisation of the original (unresized) templates; writes features.json."""
    names = list_templates(template_dir)
    paths = [os.path.join(template_dir, n) for n in names]
    results = find_features(scene_path, paths, ratio=ratio, min_good=min_good)

    for r in results:
        if r.error:
            print(f"[WARN] {r.template}: {r.error}")
        elif r.corners:
            print(f"  {r.template}: {r.matches_count} good matches, confidence {r.confidence:.3f}")
        else:
            print(f"  {r.template}: not localised ({r.matches_count} good matches)")

    os.makedirs(out_dir, exist_ok=True)
    out_json = os.path.join(out_dir, FEATURES_JSON)
    with open(out_json, "w", encoding="utf-8") as f:
        json.dump({"matches": [r.to_dict() for r in results]}, f, ensure_ascii=False, indent=2)
    print(f"[OK] Wrote JSON to: {out_json}")
    return results

import argparse
import sys
from .config import FEATURE_PARAMS, LocateOptions, MATCH_PARAMS, NMS_PARAMS, TEMPLATE_SIZE
from .core import locate_features, locate_icons


def parse_size(s: str):
    w, h = (int(v) for v in s.lower().split("x"))
    return (w, h)


def parse_crop(s: str):
    vals = [int(v.strip()) for v in s.split(",")]
    if len(vals) != 4:
        raise argparse.ArgumentTypeError("crop must be left,top,width,height")
    return tuple(vals)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Locate icon templates inside a reference image.")
    p.add_argument("--image", required=True, help="Reference image to search in.")
    p.add_argument("--templates", required=True, help="Directory of icon templates.")
    p.add_argument("--out-dir", default="outputs", help="Where the annotated image and results.json go.")
    p.add_argument("--threshold", type=float, default=MATCH_PARAMS["threshold"],
                   help="Minimum match score kept from the matcher.")
    p.add_argument("--method", type=int, default=MATCH_PARAMS["method"],
                   help="cv2.TM_* matching method ids: 1=SQDIFF_NORMED, 2=CCORR, 3=CCORR_NORMED, 4=CCOEFF, 5=CCOEFF_NORMED (default).")
    p.add_argument("--iou", type=float, default=NMS_PARAMS["same_template_iou"],
                   help="IoU at which two hits of the same template are merged.")
    p.add_argument("--cross-iou", type=float, default=NMS_PARAMS["cross_template_iou"])
    p.add_argument("--ratio", type=float, default=NMS_PARAMS["confidence_ratio"])
    p.add_argument("--size", type=parse_size, default=TEMPLATE_SIZE, help="Template size, e.g. 50x35.")
    p.add_argument("--crop", type=parse_crop, default=None, help="left,top,width,height crop per template.")
    p.add_argument("--workers", type=int, default=1)
    p.add_argument("--debug", action="store_true", help="Show candidates before/after NMS.")
    p.add_argument("--features", action="store_true",
                   help="Localise each template with SIFT keypoints instead of template matching.")
    p.add_argument("--feature-ratio", type=float, default=FEATURE_PARAMS["ratio"], help="Lowe ratio test threshold.")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)

    options = LocateOptions(
        method=args.method,
        threshold=args.threshold,
        same_template_iou=args.iou,
        cross_template_iou=args.cross_iou,
        confidence_ratio=args.ratio,
        template_size=args.size,
        template_crop=args.crop,
        workers=args.workers,
        out_dir=args.out_dir,
        work_dir=args.out_dir,
        debug=args.debug,
    )
    try:
        if args.features:
            locate_features(args.image, args.templates, out_dir=args.out_dir, ratio=args.feature_ratio)
        else:
            locate_icons(args.image, args.templates, options)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

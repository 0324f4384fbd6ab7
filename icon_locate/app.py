import os
import tempfile
from typing import Optional
from fastapi import FastAPI, File, UploadFile, Query, HTTPException
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .config import LocateOptions, MATCH_PARAMS, NMS_PARAMS
from .core import locate_icons

TEMPLATE_DIR_ENV = "ICON_LOCATE_TEMPLATES"

app = FastAPI(title="Icon Locate API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def template_dir(subdir: Optional[str] = None) -> str:
    base = os.environ.get(TEMPLATE_DIR_ENV)
    if not base or not os.path.isdir(base):
        raise HTTPException(status_code=500, detail=f"{TEMPLATE_DIR_ENV} is not set to a directory.")
    if not subdir:
        return base

    # only template sets below the configured root are served
    root = os.path.realpath(base)
    d = os.path.realpath(os.path.join(root, subdir))
    if os.path.commonpath([root, d]) != root:
        raise HTTPException(status_code=400, detail=f"Template set must be a subdirectory of {TEMPLATE_DIR_ENV}.")
    if not os.path.isdir(d):
        raise HTTPException(status_code=400, detail=f"Unknown template set: {subdir}")
    return d


@app.post("/locate")
def locate(
    file: UploadFile = File(...),
    threshold: float = Query(MATCH_PARAMS["threshold"], description="Minimum match score"),
    iou: float = Query(NMS_PARAMS["same_template_iou"], description="Same-template IoU"),
    templates: Optional[str] = Query(None, description="Template set: a subdirectory of $ICON_LOCATE_TEMPLATES"),
):
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file.")
    tdir = template_dir(templates)
    print(f"[INFO] Locating icons from {tdir} with threshold={threshold} iou={iou}")

    suffix = os.path.splitext(file.filename or "")[1] or ".png"
    with tempfile.TemporaryDirectory() as work:
        scene_path = os.path.join(work, f"scene{suffix}")
        with open(scene_path, "wb") as f:
            f.write(data)

        options = LocateOptions(
            threshold=threshold,
            same_template_iou=iou,
            out_dir=work,
            work_dir=work,
        )
        try:
            report = locate_icons(scene_path, tdir, options)
        except FileNotFoundError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

    return JSONResponse(report.to_json())

import numpy as np
import pytest

from icon_locate.types import AnnotationDescriptor, Candidate
from icon_locate.visualize import composite_and_write, draw_annotations, hex_to_bgr, show_candidates


def test_hex_to_bgr():
    assert hex_to_bgr("#38E6FF") == (0xFF, 0xE6, 0x38)
    with pytest.raises(ValueError):
        hex_to_bgr("#fff")


def test_draw_annotations_strokes_box_edge():
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    d = AnnotationDescriptor(top=10, left=20, width=50, height=35, color="#38E6FF", stroke_width=1, label="")
    vis = draw_annotations(img, [d])
    assert tuple(vis[10, 40]) == (0xFF, 0xE6, 0x38)
    assert tuple(vis[30, 20]) == (0xFF, 0xE6, 0x38)
    assert tuple(vis[30, 40]) == (0, 0, 0)
    # source image untouched
    assert img.max() == 0


def test_draw_annotations_writes_label():
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    d = AnnotationDescriptor(top=10, left=10, width=60, height=40, color="#38E6FF", stroke_width=1, label="gear")
    vis = draw_annotations(img, [d])
    inner = vis[12:30, 12:68]
    assert (inner[..., 2] > 0).any()


def test_composite_and_write(tmp_path, scene_setup):
    scene_path, _, _ = scene_setup
    out = tmp_path / "out.png"
    d = AnnotationDescriptor(top=0, left=0, width=10, height=10, color="#E1625B", stroke_width=3, label="x")
    composite_and_write(scene_path, [d], str(out))
    assert out.exists()


def test_composite_missing_scene(tmp_path):
    with pytest.raises(FileNotFoundError):
        composite_and_write(str(tmp_path / "none.png"), [], str(tmp_path / "out.png"))


def test_composite_unwritable_output(tmp_path, scene_setup):
    scene_path, _, _ = scene_setup
    with pytest.raises(RuntimeError):
        composite_and_write(scene_path, [], str(tmp_path / "out.unknownext"))


def test_show_candidates_colours_by_template():
    img = np.zeros((50, 50, 3), dtype=np.uint8)
    cands = [
        Candidate(1, 1, 10, 10, 0.9, "alpha.png"),
        Candidate(20, 1, 10, 10, 0.8, "alpha.png"),
        Candidate(1, 20, 10, 10, 0.85, "beta.png"),
    ]
    fig = show_candidates(img, cands, title="debug")
    ax = fig.axes[0]
    assert len(ax.patches) == 3
    assert ax.patches[0].get_edgecolor() == ax.patches[1].get_edgecolor()
    assert ax.patches[0].get_edgecolor() != ax.patches[2].get_edgecolor()
    assert [t.get_text() for t in ax.get_legend().get_texts()] == ["alpha.png (2)", "beta.png (1)"]
    assert ax.get_title() == "debug (count=3)"

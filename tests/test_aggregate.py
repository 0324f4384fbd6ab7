import pytest

from icon_locate.aggregate import aggregate_results, low_confidence_templates
from icon_locate.types import RawMatch, TemplateResult


def raw(x, y, conf, w=50, h=35):
    return RawMatch(x=x, y=y, width=w, height=h, confidence=conf)


def test_matches_tagged_with_template_name():
    names = ["a.png", "b.png"]
    results = [
        TemplateResult("a.png", 0.95, [raw(0, 0, 0.95), raw(1, 0, 0.9)]),
        TemplateResult("b.png", 0.85, [raw(100, 0, 0.85)]),
    ]
    pool, not_found = aggregate_results(names, results)
    assert [c.template for c in pool] == ["a.png", "a.png", "b.png"]
    assert [c.confidence for c in pool] == [0.95, 0.9, 0.85]
    assert (pool[2].x, pool[2].y, pool[2].width, pool[2].height) == (100, 0, 50, 35)
    assert not_found == []


def test_empty_template_only_in_not_found():
    names = ["a.png", "b.png", "c.png"]
    results = [
        TemplateResult("a.png", 0.9, [raw(0, 0, 0.9)]),
        TemplateResult("b.png", 0.4, []),
        TemplateResult("c.png", 0.88, [raw(5, 5, 0.88), raw(90, 5, 0.86), raw(5, 90, 0.84)]),
    ]
    pool, not_found = aggregate_results(names, results)
    assert not_found == ["b.png"]
    assert all(c.template != "b.png" for c in pool)
    assert len(pool) == sum(len(r.matches) for r in results)


def test_errored_template_is_not_found(capsys):
    names = ["big.png"]
    results = [TemplateResult("big.png", error="Scene image is smaller than template image")]
    pool, not_found = aggregate_results(names, results)
    assert pool == []
    assert not_found == ["big.png"]
    assert "[WARN]" in capsys.readouterr().out


def test_names_come_from_template_list_not_result():
    # the matcher sees temp copies; candidates are named from the template list
    pool, _ = aggregate_results(["orig.png"], [TemplateResult("resized.png", 0.9, [raw(0, 0, 0.9)])])
    assert pool[0].template == "orig.png"


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        aggregate_results(["a.png", "b.png"], [TemplateResult("a.png")])


def test_low_confidence_templates():
    names = ["a.png", "b.png"]
    results = [TemplateResult("a.png", 0.95), TemplateResult("b.png", 0.5)]
    assert low_confidence_templates(names, results, 0.88) == [("b.png", 0.5)]


def test_errored_templates_not_reported_as_low_confidence():
    names = ["big.png", "dim.png"]
    results = [
        TemplateResult("big.png", error="Scene image is smaller than template image"),
        TemplateResult("dim.png", 0.4),
    ]
    assert low_confidence_templates(names, results, 0.88) == [("dim.png", 0.4)]

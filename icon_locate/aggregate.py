from typing import List, Sequence, Tuple
from .types import Candidate, TemplateResult


def aggregate_results(
    template_names: Sequence[str],
    results: Sequence[TemplateResult],
) -> Tuple[List[Candidate], List[str]]:
    """Flatten per-template matches into one pool tagged with the template name.

    `results` must be in the same order as `template_names`. Templates without
    a single match only go to the not-found list.
    """
    if len(template_names) != len(results):
        raise ValueError(
            f"Got {len(results)} match results for {len(template_names)} templates"
        )

    pool: List[Candidate] = []
    not_found: List[str] = []
    for name, res in zip(template_names, results):
        if res.error:
            print(f"[WARN] Template {name}: {res.error}")
        if not res.matches:
            not_found.append(name)
            continue
        for m in res.matches:
            pool.append(Candidate(
                x=m.x,
                y=m.y,
                width=m.width,
                height=m.height,
                confidence=m.confidence,
                template=name,
            ))
    return pool, not_found


def low_confidence_templates(
    template_names: Sequence[str],
    results: Sequence[TemplateResult],
    below: float,
) -> List[Tuple[str, float]]:
    return [
        (name, res.max_confidence)
        for name, res in zip(template_names, results)
        if not res.error and res.max_confidence < below
    ]

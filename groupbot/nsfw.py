"""Verdicts on image classification scores."""

from __future__ import annotations

from dataclasses import dataclass

THRESHOLD = 0.3


@dataclass(frozen=True)
class Scores:
    """Classifier probabilities for one picture."""

    drawings: float = 0.0
    hentai: float = 0.0
    neutral: float = 0.0
    porn: float = 0.0
    sexy: float = 0.0


def _flags(scores: Scores) -> list[str]:
    flags = []
    if scores.hentai > THRESHOLD:
        flags.append(" hentai")
    if scores.porn > THRESHOLD:
        flags.append(" porn")
    if scores.sexy > THRESHOLD:
        flags.append(" hso")
    return flags


def judge(scores: Scores) -> str:
    """A verdict for an explicitly requested rating."""
    if scores.neutral > THRESHOLD:
        return "普通哦"
    if scores.drawings > THRESHOLD or scores.neutral < THRESHOLD:
        kind = "二次元"
    else:
        kind = "三次元"
    return kind + "".join(_flags(scores))


def auto_judge(scores: Scores) -> str | None:
    """A verdict for automatic checking, or None when nothing needs saying."""
    if scores.neutral > THRESHOLD:
        return None
    kind = "二次元" if scores.drawings > THRESHOLD else "三次元"
    flags = _flags(scores)
    if not flags:
        return None
    return kind + "".join(flags)
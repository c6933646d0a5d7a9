"""Keyword-pattern MBTI inference.

Each of the four dimensions is scored by counting regex hits for its two
poles. Evidence from successive messages is folded into a running state
whose weight shrinks as samples accumulate, and the four states are turned
into a best-guess type once every dimension leans clearly one way.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Pattern

CONFIDENCE_CAP = 0.95
AMBIGUITY_MARGIN = 0.2
DEFAULT_CONFIDENCE_THRESHOLD = 0.6
HIT_CONFIDENCE_STEP = 0.1
SAMPLE_CONFIDENCE_STEP = 0.1


def _compile(*patterns: str) -> tuple[Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


@dataclass(frozen=True, slots=True)
class Dimension:
    name: str
    positive: str
    negative: str
    positive_patterns: tuple[Pattern[str], ...]
    negative_patterns: tuple[Pattern[str], ...]


DIMENSIONS: tuple[Dimension, ...] = (
    Dimension(
        name="EI",
        positive="E",
        negative="I",
        positive_patterns=_compile(
            r"\b(we|us|our|team|together|everyone)\b",
            r"\b(meeting|discuss\w*|brainstorm\w*|collaborat\w*|share|sharing|call)\b",
        ),
        negative_patterns=_compile(
            r"\b(alone|quiet|myself|solo|independent\w*|privately)\b",
            r"\b(reflect\w*|focus\w*|think it through|deep work)\b",
        ),
    ),
    Dimension(
        name="SN",
        positive="S",
        negative="N",
        positive_patterns=_compile(
            r"\b(concrete|specific\w*|detail\w*|practical|exact\w*|precise\w*)\b",
            r"\b(step[- ]by[- ]step|fact\w*|proven|example\w*|current)\b",
        ),
        negative_patterns=_compile(
            r"\b(idea\w*|concept\w*|vision\w*|future|possibilit\w*|imagin\w*)\b",
            r"\b(pattern\w*|abstract\w*|innovat\w*|big picture|theor\w*)\b",
        ),
    ),
    Dimension(
        name="TF",
        positive="T",
        negative="F",
        positive_patterns=_compile(
            r"\b(logic\w*|analy\w*|efficien\w*|objective\w*|rational\w*)\b",
            r"\b(metric\w*|benchmark\w*|performance|optimi[sz]\w*|trade-?offs?)\b",
        ),
        negative_patterns=_compile(
            r"\b(feel\w*|people|empath\w*|care|caring|harmony)\b",
            r"\b(values?|comfortable|happy|frustrat\w*|user experience)\b",
        ),
    ),
    Dimension(
        name="JP",
        positive="J",
        negative="P",
        positive_patterns=_compile(
            r"\b(plan\w*|schedul\w*|deadline\w*|organi[sz]\w*|structur\w*)\b",
            r"\b(decid\w*|checklist\w*|finish\w*|complete|roadmap)\b",
        ),
        negative_patterns=_compile(
            r"\b(flexib\w*|explor\w*|adapt\w*|spontaneous\w*|maybe|open-ended)\b",
            r"\b(try|experiment\w*|iterat\w*|improvis\w*|see what happens)\b",
        ),
    ),
)

DIMENSIONS_BY_NAME: dict[str, Dimension] = {dimension.name: dimension for dimension in DIMENSIONS}


@dataclass(frozen=True, slots=True)
class DimensionScore:
    score: float
    tendency: str
    confidence: float
    hits: int = 0


@dataclass(frozen=True, slots=True)
class DimensionState:
    """Accumulated score for one dimension across messages."""

    score: float = 0.0
    confidence: float = 0.0
    sample_count: int = 0

    def to_dict(self) -> dict[str, float | int]:
        return {"score": self.score, "confidence": self.confidence, "sample_count": self.sample_count}


@dataclass(frozen=True, slots=True)
class Classification:
    label: str | None
    confidence: float
    needs_more_data: bool
    ambiguous: tuple[str, ...] = ()


def count_hits(text: str, patterns: Iterable[Pattern[str]]) -> int:
    return sum(len(pattern.findall(text)) for pattern in patterns)


def score_dimension(text: str, dimension: Dimension | str) -> DimensionScore:
    """Score ``text`` on one dimension in ``[-1, 1]``; positive favours the first pole."""
    if isinstance(dimension, str):
        dimension = DIMENSIONS_BY_NAME[dimension]
    if not isinstance(text, str) or not text:
        return DimensionScore(score=0.0, tendency="neutral", confidence=0.0)
    hits_a = count_hits(text, dimension.positive_patterns)
    hits_b = count_hits(text, dimension.negative_patterns)
    total = hits_a + hits_b
    if total == 0:
        return DimensionScore(score=0.0, tendency="neutral", confidence=0.0)
    score = (hits_a - hits_b) / total
    if score > 0:
        tendency = dimension.positive
    elif score < 0:
        tendency = dimension.negative
    else:
        tendency = "neutral"
    confidence = min(CONFIDENCE_CAP, total * HIT_CONFIDENCE_STEP)
    return DimensionScore(score=score, tendency=tendency, confidence=confidence, hits=total)


def update_running_score(previous: DimensionState, new_score: DimensionScore | float) -> DimensionState:
    """Fold one new observation into the running state.

    New evidence is weighted by ``1/sqrt(sample_count + 1)``, so later
    messages move the score less. Confidence only ever grows, up to the cap.
    """
    value = new_score.score if isinstance(new_score, DimensionScore) else float(new_score)
    weight = 1.0 / math.sqrt(previous.sample_count + 1)
    score = previous.score * (1.0 - weight) + value * weight
    confidence = min(CONFIDENCE_CAP, previous.confidence + SAMPLE_CONFIDENCE_STEP * weight)
    return DimensionState(
        score=max(-1.0, min(1.0, score)),
        confidence=max(previous.confidence, confidence),
        sample_count=previous.sample_count + 1,
    )


def classify(
    states: Mapping[str, DimensionState],
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> Classification:
    """Turn four dimension states into a 4-letter type, or ``None`` if any is ambiguous."""
    letters: list[str] = []
    ambiguous: list[str] = []
    confidences: list[float] = []
    for dimension in DIMENSIONS:
        state = states.get(dimension.name, DimensionState())
        confidences.append(state.confidence)
        if abs(state.score) < AMBIGUITY_MARGIN:
            ambiguous.append(dimension.name)
            continue
        letters.append(dimension.positive if state.score > 0 else dimension.negative)
    confidence = sum(confidences) / len(confidences)
    label = "".join(letters) if not ambiguous else None
    return Classification(
        label=label,
        confidence=confidence,
        needs_more_data=bool(ambiguous) or confidence < confidence_threshold,
        ambiguous=tuple(ambiguous),
    )


@dataclass
class PersonalityProfile:
    """Running MBTI evidence for one user."""

    states: dict[str, DimensionState] = field(
        default_factory=lambda: {dimension.name: DimensionState() for dimension in DIMENSIONS}
    )
    messages_analyzed: int = 0

    def observe(self, text: str) -> dict[str, DimensionScore]:
        """Score one message and fold any dimension with evidence into the running state."""
        scores: dict[str, DimensionScore] = {}
        for dimension in DIMENSIONS:
            scored = score_dimension(text, dimension)
            scores[dimension.name] = scored
            if scored.hits:
                current = self.states.get(dimension.name, DimensionState())
                self.states[dimension.name] = update_running_score(current, scored)
        self.messages_analyzed += 1
        return scores

    def observe_all(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.observe(message)

    def classify(self, confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> Classification:
        return classify(self.states, confidence_threshold)

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages_analyzed": self.messages_analyzed,
            "dimensions": {name: state.to_dict() for name, state in self.states.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersonalityProfile":
        profile = cls()
        dimensions = data.get("dimensions") or {}
        for name in DIMENSIONS_BY_NAME:
            raw = dimensions.get(name)
            if isinstance(raw, Mapping):
                profile.states[name] = DimensionState(
                    score=float(raw.get("score", 0.0)),
                    confidence=float(raw.get("confidence", 0.0)),
                    sample_count=int(raw.get("sample_count", 0)),
                )
        profile.messages_analyzed = int(data.get("messages_analyzed", 0))
        return profile


__all__ = [
    "DIMENSIONS",
    "Dimension",
    "DimensionScore",
    "DimensionState",
    "Classification",
    "PersonalityProfile",
    "score_dimension",
    "update_running_score",
    "classify",
]

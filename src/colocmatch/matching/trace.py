"""Trace de diagnostic : observe un appel du scorer sans en modifier le résultat."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from colocmatch.config import AttributeDefinition
from colocmatch.matching.schema import CompatibilityResult, FieldScore, SurveyProfile
from colocmatch.matching.weights import ResolvedWeights

if TYPE_CHECKING:
    from colocmatch.matching.scorer import CompatibilityScorer


@dataclass(frozen=True)
class FieldTrace:
    """Valeurs intermédiaires d'un attribut."""

    key: str
    domain: str
    value_a: Any
    value_b: Any
    similarity: float
    confidence: float
    weight: float
    contribution: float  # poids × similarité × confiance
    hard_filter: bool
    hard_filter_failed: bool
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "domain": self.domain,
            "valueA": self.value_a,
            "valueB": self.value_b,
            "similarity": self.similarity,
            "confidence": self.confidence,
            "weight": self.weight,
            "contribution": self.contribution,
            "hardFilter": self.hard_filter,
            "hardFilterFailed": self.hard_filter_failed,
            "explanation": self.explanation,
        }


@dataclass
class ScoreTrace:
    """Collecteur passé à CompatibilityScorer.score(trace=...)."""

    requester_id: str = ""
    candidate_id: str = ""
    weights: dict[str, float] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    fields: list[FieldTrace] = field(default_factory=list)
    result: CompatibilityResult | None = None

    def begin(self, requester_id: str, candidate_id: str, resolved: ResolvedWeights) -> None:
        self.requester_id = requester_id
        self.candidate_id = candidate_id
        self.weights = dict(resolved.weights)
        self.warnings = list(resolved.warnings)
        self.fields = []
        self.result = None

    def record_field(
        self,
        definition: AttributeDefinition,
        field_score: FieldScore,
        value_a: Any,
        value_b: Any,
        contribution: float,
    ) -> None:
        self.fields.append(
            FieldTrace(
                key=definition.key,
                domain=definition.domain,
                value_a=_plain(value_a),
                value_b=_plain(value_b),
                similarity=field_score.similarity,
                confidence=field_score.confidence,
                weight=field_score.weight,
                contribution=contribution,
                hard_filter=definition.hard_filter,
                hard_filter_failed=field_score.hard_filter_failed,
                explanation=field_score.explanation,
            )
        )

    def record_result(self, result: CompatibilityResult) -> None:
        self.result = result

    @property
    def weighted_sum(self) -> float:
        return self.result.weighted_sum if self.result else 0.0

    @property
    def total_weight(self) -> float:
        return self.result.total_weight if self.result else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Même forme que CompatibilityResult.to_dict(), plus les sommes brutes."""
        out: dict[str, Any] = self.result.to_dict() if self.result else {}
        out["weightedSum"] = self.weighted_sum
        out["totalWeight"] = self.total_weight
        out["weights"] = dict(self.weights)
        out["warnings"] = list(self.warnings)
        out["trace"] = [f.to_dict() for f in self.fields]
        return out


def _plain(value: Any) -> Any:
    """Copie affichable d'une réponse brute."""
    if isinstance(value, (set, frozenset, tuple)):
        return sorted(str(v) for v in value)
    if isinstance(value, list):
        return list(value)
    return value


def explain(
    scorer: CompatibilityScorer,
    profile_a: SurveyProfile,
    profile_b: SurveyProfile,
    weight_overrides: Mapping[str, Any] | None = None,
) -> tuple[CompatibilityResult, ScoreTrace]:
    """Exécute scorer.score() avec un collecteur et retourne (résultat, trace)."""
    trace = ScoreTrace()
    result = scorer.score(profile_a, profile_b, weight_overrides, trace=trace)
    return result, trace


def format_trace(trace: ScoreTrace) -> str:
    """Rendu texte de la trace, destiné aux opérateurs."""
    lines = [
        "===== DEBUG COMPATIBILITY =====",
        f"Comparing users: {trace.requester_id} and {trace.candidate_id}",
        "",
        "--- FIELDS ---",
    ]
    for f in trace.fields:
        flag = ""
        if f.hard_filter:
            flag = " [hard filter FAILED]" if f.hard_filter_failed else " [hard filter]"
        lines.append(
            f"  {f.key:<20} sim={f.similarity:.3f} conf={f.confidence:.1f} "
            f"w={f.weight:g} contrib={f.contribution:.3f}{flag}"
        )
        lines.append(f"      a={f.value_a!r} b={f.value_b!r} -> {f.explanation}")

    lines.extend(["", "--- AGGREGATE ---"])
    lines.append(f"  weighted_sum = {trace.weighted_sum:.4f}")
    lines.append(f"  total_weight = {trace.total_weight:.4f}")
    if trace.result is not None:
        r = trace.result
        lines.append(f"  score        = {r.score:.2f}")
        lines.append(f"  excluded     = {r.excluded}")
        lines.append(f"  insufficient = {r.insufficient_data}")
        for note in r.notes:
            lines.append(f"  note: {note}")
    for warning in trace.warnings:
        lines.append(f"  warning: {warning}")
    lines.append("===== END DEBUG COMPATIBILITY =====")
    return "\n".join(lines)

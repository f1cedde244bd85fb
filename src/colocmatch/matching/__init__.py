"""Module de compatibilité : comparaison, pondération, score et classement."""

from colocmatch.matching.ranker import Ranker, RankOptions
from colocmatch.matching.schema import (
    CompatibilityResult,
    FieldScore,
    InvalidProfile,
    RankedCandidate,
    Ranking,
    SkippedCandidate,
    SurveyProfile,
)
from colocmatch.matching.scorer import CompatibilityScorer
from colocmatch.matching.trace import ScoreTrace, explain, format_trace
from colocmatch.matching.weights import ResolvedWeights, WeightingPolicy

__all__ = [
    "CompatibilityResult",
    "CompatibilityScorer",
    "FieldScore",
    "InvalidProfile",
    "RankOptions",
    "RankedCandidate",
    "Ranker",
    "Ranking",
    "ResolvedWeights",
    "ScoreTrace",
    "SkippedCandidate",
    "SurveyProfile",
    "WeightingPolicy",
    "explain",
    "format_trace",
]

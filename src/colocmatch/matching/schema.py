"""Schémas et types pour le calcul de compatibilité."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterator

from colocmatch.config import ColocMatchError
from colocmatch.matching.comparators import coerce_for_domain
from colocmatch.normalize import is_missing

if TYPE_CHECKING:
    from colocmatch.config import AttributeModel


class InvalidProfile(ColocMatchError, ValueError):
    """Profil sans identifiant utilisateur."""


@dataclass(frozen=True)
class SurveyProfile:
    """Réponses au questionnaire d'un utilisateur, figées pour la durée d'une comparaison."""

    user_id: str | None
    answers: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Copie en lecture seule : l'appelant garde la propriété de ses données.
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers)))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any], id_key: str = "user_id") -> SurveyProfile:
        """Construit un profil depuis un enregistrement brut ; la clé d'identité est retirée des réponses."""
        raw_id = d.get(id_key)
        user_id = None if is_missing(raw_id) else str(raw_id).strip()
        answers = {k: v for k, v in d.items() if k != id_key}
        return cls(user_id=user_id or None, answers=answers)

    @property
    def has_identity(self) -> bool:
        return isinstance(self.user_id, str) and bool(self.user_id.strip())

    def require_identity(self) -> str:
        """
        Retourne l'identifiant.

        Raises:
            InvalidProfile: Si l'identifiant est absent ou vide.
        """
        if not self.has_identity:
            raise InvalidProfile("Profil invalide: identifiant utilisateur manquant")
        return self.user_id  # type: ignore[return-value]

    def get(self, key: str) -> Any:
        return self.answers.get(key)

    def completeness(self, model: AttributeModel) -> float:
        """Part des attributs enregistrés pour lesquels le profil a une réponse exploitable."""
        if len(model) == 0:
            return 0.0
        usable = sum(1 for d in model if coerce_for_domain(d.domain, self.get(d.key)) is not None)
        return usable / len(model)


@dataclass(frozen=True)
class FieldScore:
    """Comparaison d'un attribut entre deux profils."""

    key: str
    similarity: float
    confidence: float
    explanation: str
    weight: float = 0.0
    hard_filter_failed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "similarity": self.similarity,
            "confidence": self.confidence,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class CompatibilityResult:
    """Résultat d'une comparaison entre deux profils."""

    requester_id: str
    candidate_id: str
    score: float
    excluded: bool
    insufficient_data: bool
    fields: tuple[FieldScore, ...]
    weighted_sum: float = 0.0
    total_weight: float = 0.0  # Σ poids × confiance
    failed_filters: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()

    @property
    def is_matchable(self) -> bool:
        return not self.excluded and not self.insufficient_data

    @property
    def contributing_fields(self) -> int:
        return sum(1 for f in self.fields if f.confidence > 0 and f.weight > 0)

    def field_score(self, key: str) -> FieldScore:
        for f in self.fields:
            if f.key == key:
                return f
        raise KeyError(key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "requesterId": self.requester_id,
            "candidateId": self.candidate_id,
            "score": self.score,
            "excluded": self.excluded,
            "insufficientData": self.insufficient_data,
            "fields": [f.to_dict() for f in self.fields],
            "failedFilters": list(self.failed_filters),
            "notes": list(self.notes),
        }

    def __repr__(self) -> str:
        flag = " excluded" if self.excluded else ""
        return f"CompatibilityResult({self.requester_id}->{self.candidate_id}, score={self.score:.1f}{flag})"


@dataclass(frozen=True)
class RankedCandidate:
    """Candidat classé pour un demandeur."""

    candidate_id: str
    result: CompatibilityResult
    rank: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"candidateId": self.candidate_id, "rank": self.rank, "result": self.result.to_dict()}


@dataclass(frozen=True)
class SkippedCandidate:
    """Candidat écarté du classement pour une erreur de données."""

    index: int
    candidate_id: str | None
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "candidateId": self.candidate_id, "reason": self.reason}


@dataclass
class Ranking:
    """Classement des candidats, avec les entrées écartées et les avertissements."""

    requester_id: str
    candidates: list[RankedCandidate] = field(default_factory=list)
    skipped: list[SkippedCandidate] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    n_evaluated: int = 0
    n_excluded: int = 0
    n_below_min_score: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def candidate_ids(self) -> list[str]:
        return [c.candidate_id for c in self.candidates]

    def __iter__(self) -> Iterator[RankedCandidate]:
        return iter(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)

    def __getitem__(self, index: int) -> RankedCandidate:
        return self.candidates[index]

    def to_dict(self) -> dict[str, Any]:
        return {
            "requesterId": self.requester_id,
            "candidates": [c.to_dict() for c in self.candidates],
            "skipped": [s.to_dict() for s in self.skipped],
            "skippedCount": self.skipped_count,
            "warnings": list(self.warnings),
        }

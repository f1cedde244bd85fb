"""Moteur de classement : score demandeur × candidats, filtrage et tri."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from colocmatch.config import ConfigurationError, EngineConfig
from colocmatch.matching.schema import (
    CompatibilityResult,
    InvalidProfile,
    RankedCandidate,
    Ranking,
    SkippedCandidate,
    SurveyProfile,
)
from colocmatch.matching.scorer import CompatibilityScorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankOptions:
    """Paramètres d'un classement."""

    include_excluded: bool = False
    top_k: int | None = None
    min_score: float = 0.0
    weight_overrides: Mapping[str, Any] | None = None
    id_key: str = "user_id"

    def validate(self) -> None:
        if self.top_k is not None and (isinstance(self.top_k, bool) or int(self.top_k) < 1):
            raise ConfigurationError(f"top_k doit être >= 1 (got {self.top_k})")
        if not 0 <= self.min_score <= 100:
            raise ConfigurationError(f"min_score doit être entre 0 et 100 (got {self.min_score})")
        if not isinstance(self.id_key, str) or not self.id_key.strip():
            raise ConfigurationError("id_key requis: nom du champ identifiant des candidats")

    @classmethod
    def from_config(cls, config: EngineConfig, **kwargs: Any) -> RankOptions:
        options = cls(
            include_excluded=config.include_excluded,
            top_k=config.top_k,
            min_score=config.min_score,
            id_key=config.id_column,
        )
        return replace(options, **kwargs) if kwargs else options


def sort_key(result: CompatibilityResult) -> tuple[float, float, str]:
    """Score décroissant, puis données plus complètes, puis identifiant."""
    return (-result.score, -result.total_weight, result.candidate_id)


def _as_profile(candidate: Any, id_key: str) -> SurveyProfile:
    if isinstance(candidate, SurveyProfile):
        return candidate
    if isinstance(candidate, Mapping):
        return SurveyProfile.from_dict(candidate, id_key=id_key)
    raise InvalidProfile(f"Profil invalide: type inattendu {type(candidate).__name__}")


class Ranker:
    """Classe les candidats d'un demandeur avec un CompatibilityScorer."""

    def __init__(self, scorer: CompatibilityScorer, options: RankOptions | None = None) -> None:
        self.scorer = scorer
        self.options = options or RankOptions()
        self.options.validate()

    def rank(
        self,
        requester: SurveyProfile,
        candidates: Iterable[SurveyProfile | Mapping[str, Any]],
        options: RankOptions | None = None,
    ) -> Ranking:
        """
        Calcule et ordonne la compatibilité du demandeur avec chaque candidat.

        - le demandeur lui-même est ignoré (même identifiant) ;
        - un candidat invalide est écarté avec un marqueur SkippedCandidate ;
        - les paires exclues par un filtre dur sont retirées, sauf include_excluded ;
        - tri : score décroissant, Σ(poids × confiance) décroissant, identifiant ;
        - top_k garde un préfixe stable du classement complet.

        Raises:
            InvalidProfile: Si le demandeur n'a pas d'identifiant.
        """
        opts = options or self.options
        opts.validate()
        if not isinstance(requester, SurveyProfile):
            raise InvalidProfile(f"Profil invalide: SurveyProfile attendu (got {type(requester).__name__})")
        requester_id = requester.require_identity()

        resolved = self.scorer.policy.resolve_weights(opts.weight_overrides)
        ranking = Ranking(requester_id=requester_id, warnings=list(resolved.warnings))

        results: list[CompatibilityResult] = []
        for idx, candidate in enumerate(candidates):
            try:
                profile = _as_profile(candidate, opts.id_key)
                candidate_id = profile.require_identity()
            except InvalidProfile as e:
                if isinstance(candidate, Mapping):
                    raw_id = candidate.get(opts.id_key)
                else:
                    raw_id = getattr(candidate, "user_id", None)
                ranking.skipped.append(SkippedCandidate(index=idx, candidate_id=raw_id, reason=str(e)))
                continue

            if candidate_id == requester_id:
                continue

            result = self.scorer.score(requester, profile, resolved)
            ranking.n_evaluated += 1

            if result.excluded and not opts.include_excluded:
                ranking.n_excluded += 1
                continue
            if result.score < opts.min_score:
                ranking.n_below_min_score += 1
                continue
            results.append(result)

        results.sort(key=sort_key)
        if opts.top_k is not None:
            results = results[: int(opts.top_k)]

        ranking.candidates = [
            RankedCandidate(candidate_id=r.candidate_id, result=r, rank=i + 1) for i, r in enumerate(results)
        ]

        if ranking.skipped:
            logger.warning(
                "%d candidat(s) ignoré(s) pour %s: profil invalide", ranking.skipped_count, requester_id
            )
        logger.debug(
            "Classement %s: %d évalués, %d exclus, %d sous min_score, %d retenus",
            requester_id,
            ranking.n_evaluated,
            ranking.n_excluded,
            ranking.n_below_min_score,
            len(ranking),
        )
        return ranking

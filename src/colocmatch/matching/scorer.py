"""Calcul du score de compatibilité entre deux profils."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from colocmatch.config import AttributeModel
from colocmatch.matching.comparators import get_comparator
from colocmatch.matching.filters import hard_filter_failed
from colocmatch.matching.schema import CompatibilityResult, FieldScore, InvalidProfile, SurveyProfile
from colocmatch.matching.weights import ResolvedWeights, WeightingPolicy

if TYPE_CHECKING:
    from colocmatch.matching.trace import ScoreTrace


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


def _check_profile(profile: Any) -> str:
    if not isinstance(profile, SurveyProfile):
        raise InvalidProfile(f"Profil invalide: SurveyProfile attendu (got {type(profile).__name__})")
    return profile.require_identity()


class CompatibilityScorer:
    """
    Agrège les similarités par champ en un score 0-100 explicable.

    Le comparateur de chaque attribut est résolu une fois, à la construction,
    à partir de son domaine. Le scorer ne garde aucun état entre deux appels.
    """

    def __init__(self, model: AttributeModel, policy: WeightingPolicy | None = None) -> None:
        self.model = model
        self.policy = policy or WeightingPolicy(model)
        self._plan = tuple((d, get_comparator(d.domain)) for d in model.list_attributes())

    def score(
        self,
        profile_a: SurveyProfile,
        profile_b: SurveyProfile,
        weight_overrides: Mapping[str, Any] | ResolvedWeights | None = None,
        *,
        trace: ScoreTrace | None = None,
    ) -> CompatibilityResult:
        """
        Compare deux profils.

        score = 100 × Σ(poids × similarité × confiance) / Σ(poids × confiance),
        sur les attributs dont la confiance est > 0. Un filtre dur non satisfait
        marque le résultat `excluded` sans interrompre le calcul.

        Args:
            profile_a: Profil du demandeur.
            profile_b: Profil du candidat.
            weight_overrides: Surcharges {attribut: poids} ou poids déjà résolus.
            trace: Collecteur optionnel des valeurs intermédiaires.

        Returns:
            CompatibilityResult avec un FieldScore par attribut, dans l'ordre d'enregistrement.

        Raises:
            InvalidProfile: Si un des profils n'a pas d'identifiant.
        """
        requester_id = _check_profile(profile_a)
        candidate_id = _check_profile(profile_b)

        notes: list[str] = []
        if isinstance(weight_overrides, ResolvedWeights):
            resolved = weight_overrides
        else:
            resolved = self.policy.resolve_weights(weight_overrides)
            notes.extend(resolved.warnings)

        if trace is not None:
            trace.begin(requester_id, candidate_id, resolved)

        fields: list[FieldScore] = []
        failed: list[str] = []
        unanswered: list[str] = []
        weighted_sum = 0.0
        total_weight = 0.0

        for definition, comparator in self._plan:
            raw_a = profile_a.get(definition.key)
            raw_b = profile_b.get(definition.key)
            comparison = comparator(raw_a, raw_b, definition)
            similarity = _clamp01(comparison.similarity)
            confidence = _clamp01(comparison.confidence)
            weight = resolved.weights.get(definition.key, definition.weight)

            failed_filter = hard_filter_failed(definition, comparison)
            if failed_filter:
                failed.append(definition.key)
                if confidence <= 0:
                    unanswered.append(definition.key)

            contribution = 0.0
            if confidence > 0:
                contribution = weight * similarity * confidence
                weighted_sum += contribution
                total_weight += weight * confidence

            field_score = FieldScore(
                key=definition.key,
                similarity=similarity,
                confidence=confidence,
                explanation=f"{definition.display_name}: {comparison.detail}",
                weight=weight,
                hard_filter_failed=failed_filter,
            )
            fields.append(field_score)
            if trace is not None:
                trace.record_field(definition, field_score, raw_a, raw_b, contribution)

        insufficient_data = total_weight <= 0
        if insufficient_data:
            score = 0.0
            notes.append("insufficient data: no attribute usable on both profiles")
        else:
            score = max(0.0, min(100.0, 100.0 * weighted_sum / total_weight))
            contributing = [f.key for f in fields if f.confidence > 0 and f.weight > 0]
            if len(contributing) == 1:
                notes.append(f"only one attribute contributed ({contributing[0]})")

        if failed:
            notes.append(f"excluded by hard filter: {', '.join(failed)}")
        for key in unanswered:
            notes.append(f"hard filter {key} failed: missing value")

        result = CompatibilityResult(
            requester_id=requester_id,
            candidate_id=candidate_id,
            score=score,
            excluded=bool(failed),
            insufficient_data=insufficient_data,
            fields=tuple(fields),
            weighted_sum=weighted_sum,
            total_weight=total_weight,
            failed_filters=tuple(failed),
            notes=tuple(notes),
        )
        if trace is not None:
            trace.record_result(result)
        return result

"""Politique de pondération : poids par défaut et surcharges par requête."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from rapidfuzz import process

from colocmatch.config import AttributeModel

logger = logging.getLogger(__name__)

# Score rapidfuzz minimal pour proposer une clé proche dans l'avertissement
SUGGESTION_CUTOFF = 75.0


@dataclass(frozen=True)
class ResolvedWeights:
    """Poids effectifs d'une requête et surcharges ignorées."""

    weights: dict[str, float]
    unknown_keys: tuple[str, ...] = ()
    rejected_keys: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def total(self) -> float:
        return sum(self.weights.values())


def _parse_weight(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        w = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(w) or w < 0:
        return None
    return w


class WeightingPolicy:
    """Associe à chaque attribut un poids d'importance non négatif."""

    def __init__(self, model: AttributeModel) -> None:
        self.model = model

    def suggest_key(self, key: str) -> str | None:
        """Clé enregistrée la plus proche (rapidfuzz), ou None."""
        keys = self.model.keys()
        if not keys:
            return None
        match = process.extractOne(str(key), keys, score_cutoff=SUGGESTION_CUTOFF)
        return match[0] if match else None

    def resolve_weight(self, attribute_key: str, overrides: Mapping[str, Any] | None = None) -> float:
        """
        Poids d'un attribut pour une requête.

        Une surcharge valide remplace le poids par défaut ; sinon le poids de la
        définition s'applique.

        Raises:
            AttributeNotFound: Si l'attribut n'est pas enregistré.
        """
        definition = self.model.get_attribute(attribute_key)
        if overrides and attribute_key in overrides:
            w = _parse_weight(overrides[attribute_key])
            if w is not None:
                return w
        return definition.weight

    def resolve_weights(self, overrides: Mapping[str, Any] | None = None) -> ResolvedWeights:
        """
        Résout les poids de tous les attributs.

        Les clés inconnues et les valeurs invalides sont ignorées avec un
        avertissement, pour qu'une surcharge périmée ne casse pas le classement.
        """
        overrides = overrides or {}
        unknown: list[str] = []
        rejected: list[str] = []
        warnings: list[str] = []

        for key in overrides:
            if key not in self.model:
                unknown.append(str(key))
                suggestion = self.suggest_key(str(key))
                msg = f"Surcharge de poids ignorée: attribut inconnu {key!r}"
                if suggestion:
                    msg += f" (vouliez-vous dire {suggestion!r} ?)"
                warnings.append(msg)
                logger.warning(msg)
            elif _parse_weight(overrides[key]) is None:
                rejected.append(str(key))
                msg = f"Surcharge de poids ignorée pour {key!r}: valeur invalide {overrides[key]!r}"
                warnings.append(msg)
                logger.warning(msg)

        weights = {d.key: self.resolve_weight(d.key, overrides) for d in self.model}
        return ResolvedWeights(
            weights=weights,
            unknown_keys=tuple(unknown),
            rejected_keys=tuple(rejected),
            warnings=tuple(warnings),
        )

    def total_weight(self, overrides: Mapping[str, Any] | None = None) -> float:
        return self.resolve_weights(overrides).total

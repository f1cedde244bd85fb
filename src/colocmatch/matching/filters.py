"""Filtres durs : un désaccord exclut la paire, quel que soit le score."""

from __future__ import annotations

from colocmatch.config import AttributeDefinition
from colocmatch.matching.comparators import FieldComparison


def hard_filter_failed(definition: AttributeDefinition, comparison: FieldComparison) -> bool:
    """
    True si l'attribut est un filtre dur et que la comparaison ne l'atteint pas.

    - categorical / boolean : similarité < 1 ;
    - numeric_range / multi_select : similarité < seuil de l'attribut (1.0 par défaut).

    Une valeur manquante (similarité 0) fait échouer le filtre : un filtre dur
    est une réponse obligatoire.
    """
    if not definition.hard_filter:
        return False
    return comparison.similarity < definition.filter_threshold

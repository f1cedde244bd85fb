"""Comparateurs par domaine de valeurs : similarité [0, 1] et confiance [0, 1]."""

from __future__ import annotations

import math
from typing import Any, Callable, NamedTuple

from colocmatch.config import (
    BOOLEAN,
    CATEGORICAL,
    MULTI_SELECT,
    NUMERIC_RANGE,
    AttributeDefinition,
    ConfigurationError,
)
from colocmatch.normalize import coerce_bool, coerce_category, coerce_number, coerce_tags

MISSING_DETAIL = "missing value"


class FieldComparison(NamedTuple):
    """Résultat partiel d'un comparateur (sans clé ni poids)."""

    similarity: float
    confidence: float
    detail: str


NO_DATA = FieldComparison(0.0, 0.0, MISSING_DETAIL)

Coercer = Callable[[Any], Any]
Comparator = Callable[[Any, Any, AttributeDefinition], FieldComparison]

COERCERS: dict[str, Coercer] = {
    CATEGORICAL: coerce_category,
    NUMERIC_RANGE: coerce_number,
    MULTI_SELECT: coerce_tags,
    BOOLEAN: coerce_bool,
}


def coerce_for_domain(domain: str, value: Any) -> Any:
    """Valeur exploitable pour le domaine, ou None (absente ou mal formée)."""
    coercer = COERCERS.get(domain)
    if coercer is None:
        return None
    return coercer(value)


def _missing_guard(domain: str, a: Any, b: Any) -> tuple[Any, Any] | None:
    """
    Politique commune des valeurs manquantes.

    Retourne les deux valeurs converties, ou None si l'une manque :
    une valeur absente ne contribue jamais positivement.
    """
    va = coerce_for_domain(domain, a)
    vb = coerce_for_domain(domain, b)
    if va is None or vb is None:
        return None
    return va, vb


def _fmt_number(x: float) -> str:
    # Entier lisible seulement s'il est représentable exactement
    if math.isfinite(x) and x.is_integer() and abs(x) < 1e15:
        return str(int(x))
    return f"{x:g}"


def compare_categorical(a: Any, b: Any, definition: AttributeDefinition) -> FieldComparison:
    values = _missing_guard(CATEGORICAL, a, b)
    if values is None:
        return NO_DATA
    va, vb = values
    if va == vb:
        return FieldComparison(1.0, 1.0, "exact match")
    return FieldComparison(0.0, 1.0, f"mismatch ({va} vs {vb})")


def compare_numeric_range(a: Any, b: Any, definition: AttributeDefinition) -> FieldComparison:
    values = _missing_guard(NUMERIC_RANGE, a, b)
    if values is None:
        return NO_DATA
    va, vb = values
    clamped = False
    lo, hi = definition.min_value, definition.max_value
    bounded: list[float] = []
    for v in (va, vb):
        c = v
        if lo is not None and c < lo:
            c = lo
        if hi is not None and c > hi:
            c = hi
        clamped = clamped or c != v
        bounded.append(c)

    span = definition.range_span or 1.0
    distance = abs(bounded[0] - bounded[1])
    # Deux valeurs finies peuvent donner une distance infinie (1e308 et -1e308)
    similarity = 1.0 - min(1.0, distance / span) if math.isfinite(distance) else 0.0

    if distance == 0:
        detail = "same value"
    else:
        detail = f"{definition.unit}{_fmt_number(distance)} apart"
    if clamped:
        detail += ", clamp applied"
    return FieldComparison(similarity, 1.0, detail)


def compare_multi_select(a: Any, b: Any, definition: AttributeDefinition) -> FieldComparison:
    values = _missing_guard(MULTI_SELECT, a, b)
    if values is None:
        return NO_DATA
    va, vb = values
    union = va | vb
    if not union:
        # Deux ensembles vides : aucune information, pas une correspondance
        return FieldComparison(0.0, 0.0, "no selections on either side")
    shared = va & vb
    similarity = len(shared) / len(union)
    return FieldComparison(similarity, 1.0, f"{len(shared)} of {len(union)} selections shared")


def compare_boolean(a: Any, b: Any, definition: AttributeDefinition) -> FieldComparison:
    values = _missing_guard(BOOLEAN, a, b)
    if values is None:
        return NO_DATA
    va, vb = values
    if va == vb:
        return FieldComparison(1.0, 1.0, "same answer")
    return FieldComparison(0.0, 1.0, "different answers")


COMPARATORS: dict[str, Comparator] = {
    CATEGORICAL: compare_categorical,
    NUMERIC_RANGE: compare_numeric_range,
    MULTI_SELECT: compare_multi_select,
    BOOLEAN: compare_boolean,
}


def get_comparator(domain: str) -> Comparator:
    """
    Retourne le comparateur associé à un domaine.

    Raises:
        ConfigurationError: Si aucun comparateur n'est enregistré pour ce domaine.
    """
    try:
        return COMPARATORS[domain]
    except KeyError:
        raise ConfigurationError(f"Aucun comparateur pour le domaine {domain!r}") from None


def compare(a: Any, b: Any, definition: AttributeDefinition) -> FieldComparison:
    """Compare deux réponses brutes selon le domaine de la définition."""
    return get_comparator(definition.domain)(a, b, definition)

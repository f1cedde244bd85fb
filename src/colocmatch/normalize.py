"""Normalisation et coercition des réponses du questionnaire."""

from __future__ import annotations

import math
import numbers
import re
import unicodedata
from decimal import Decimal
from typing import Any

TRUE_VALUES = frozenset({"true", "yes", "y", "oui", "o", "1", "vrai"})
FALSE_VALUES = frozenset({"false", "no", "n", "non", "0", "faux"})
TAG_SEPARATORS = re.compile(r"[;,|]")


def _scalar(value: Any) -> Any:
    """Ramène un scalaire numpy (cellule pandas) à son équivalent Python."""
    if getattr(value, "ndim", None) == 0 and hasattr(value, "item"):
        return value.item()
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (numbers.Real, Decimal)) and not isinstance(value, bool)


def is_missing(value: Any) -> bool:
    """True si la valeur est absente : None, NaN ou chaîne vide."""
    value = _scalar(value)
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, Decimal) and value.is_nan():
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def norm_text(
    s: str | float | int | None,
    *,
    lower: bool = True,
    strip: bool = True,
) -> str:
    """
    Normalise un texte : NFKC, espaces multiples → espace simple, casefold, strip.

    Args:
        s: Valeur à normaliser (convertie en str si numérique).
        lower: Mettre en minuscules.
        strip: Supprimer espaces en début/fin.

    Returns:
        Chaîne normalisée ("" si absente).
    """
    s = _scalar(s)
    if is_missing(s) or (isinstance(s, float) and math.isinf(s)):
        return ""
    text = str(s).strip() if strip else str(s)
    text = unicodedata.normalize("NFKC", text)
    text = re.sub(r"\s+", " ", text)
    if strip:
        text = text.strip()
    if lower:
        text = text.casefold()
    return text


def coerce_category(value: Any) -> str | None:
    """Valeur catégorielle normalisée, ou None si absente ou non scalaire."""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return None
    text = norm_text(value)
    return text or None


def coerce_number(value: Any) -> float | None:
    """
    Convertit une réponse en nombre.

    Accepte int/float, Decimal, les scalaires numpy et les chaînes numériques
    ("1 500", "1500.0", "$1,800"). Les booléens et valeurs non finies sont rejetés.
    """
    value = _scalar(value)
    if isinstance(value, bool) or is_missing(value):
        return None
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str):
        cleaned = re.sub(r"[\s$€£]", "", value).replace(",", "")
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_bool(value: Any) -> bool | None:
    """Convertit une réponse oui/non ; None si illisible."""
    value = _scalar(value)
    if isinstance(value, bool):
        return value
    if _is_number(value) and not is_missing(value):
        if value in (0, 1):
            return bool(value)
        return None
    if isinstance(value, str):
        text = norm_text(value)
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
    return None


def coerce_tags(value: Any) -> frozenset[str] | None:
    """
    Convertit une réponse à choix multiples en ensemble de libellés normalisés.

    Une chaîne est découpée sur ';', ',' ou '|' (cellules de tableur).
    Retourne None si la valeur est absente (None, NaN, chaîne vide) ou d'un
    type inattendu ; une liste vide donne un ensemble vide.
    """
    if is_missing(value):
        return None
    if isinstance(value, str):
        items: list[Any] = TAG_SEPARATORS.split(value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
    else:
        return None
    tags: set[str] = set()
    for item in items:
        if isinstance(item, (list, tuple, set, frozenset, dict)):
            return None
        tag = norm_text(item)
        if tag:
            tags.add(tag)
    return frozenset(tags)

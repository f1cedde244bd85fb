"""Configuration : définitions d'attributs, modèle d'attributs et chargement du fichier JSON."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

CATEGORICAL = "categorical"
NUMERIC_RANGE = "numeric_range"
MULTI_SELECT = "multi_select"
BOOLEAN = "boolean"

VALID_DOMAINS = frozenset({CATEGORICAL, NUMERIC_RANGE, MULTI_SELECT, BOOLEAN})


class ColocMatchError(Exception):
    """Exception de base pour colocmatch."""


class ConfigurationError(ColocMatchError, ValueError):
    """Erreur de validation du modèle d'attributs ou de la configuration."""


class ConfigFileError(ColocMatchError):
    """Erreur de chargement du fichier de configuration (fichier absent, JSON invalide)."""


class AttributeNotFound(ColocMatchError, KeyError):
    """Attribut absent du modèle."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


def _as_float(d: dict[str, Any], name: str, default: float | None = None) -> float | None:
    raw = d.get(name, default)
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ConfigurationError(f"{name} doit être un nombre (got {raw!r})")
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} doit être un nombre (got {raw!r})") from e
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} doit être fini (got {raw!r})")
    return value


@dataclass(frozen=True)
class AttributeDefinition:
    """Un champ du questionnaire éligible à la comparaison."""

    key: str
    domain: str
    weight: float = 1.0
    hard_filter: bool = False
    min_value: float | None = None  # bornes du domaine numérique (clamp)
    max_value: float | None = None
    range_span: float | None = None  # écart maximal pour numeric_range
    threshold: float | None = None  # seuil du filtre dur (numeric_range, multi_select)
    label: str = ""
    unit: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.key

    @property
    def filter_threshold(self) -> float:
        """Similarité minimale pour qu'un filtre dur soit satisfait."""
        if self.domain in (CATEGORICAL, BOOLEAN) or self.threshold is None:
            return 1.0
        return self.threshold

    def validate(self) -> None:
        """
        Vérifie la cohérence de la définition.

        Raises:
            ConfigurationError: Si un paramètre est invalide.
        """
        if not isinstance(self.key, str) or not self.key.strip():
            raise ConfigurationError("key requis pour chaque attribut")
        if self.domain not in VALID_DOMAINS:
            raise ConfigurationError(
                f"domain invalide pour {self.key!r}: {self.domain!r}. Valides: {sorted(VALID_DOMAINS)}"
            )
        if not math.isfinite(self.weight) or self.weight < 0:
            raise ConfigurationError(f"weight doit être >= 0 pour {self.key!r} (got {self.weight})")
        if self.domain == NUMERIC_RANGE:
            if self.range_span is None or self.range_span <= 0:
                raise ConfigurationError(f"range_span doit être > 0 pour {self.key!r} (got {self.range_span})")
            if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
                raise ConfigurationError(
                    f"min_value > max_value pour {self.key!r} ({self.min_value} > {self.max_value})"
                )
        if self.threshold is not None and not 0 <= self.threshold <= 1:
            raise ConfigurationError(f"threshold doit être entre 0 et 1 pour {self.key!r} (got {self.threshold})")

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AttributeDefinition:
        if not isinstance(d, dict):
            raise ConfigurationError(f"Attribut invalide: objet attendu (got {type(d).__name__})")
        weight = _as_float(d, "weight", 1.0)
        if weight is None:
            raise ConfigurationError(f"weight requis pour {d.get('key')!r}")
        definition = cls(
            key=str(d.get("key", "")).strip(),
            domain=str(d.get("domain", "")).strip().lower(),
            weight=weight,
            hard_filter=bool(d.get("hard_filter", False)),
            min_value=_as_float(d, "min_value"),
            max_value=_as_float(d, "max_value"),
            range_span=_as_float(d, "range_span"),
            threshold=_as_float(d, "threshold"),
            label=str(d.get("label", "") or ""),
            unit=str(d.get("unit", "") or ""),
        )
        definition.validate()
        return definition


class AttributeModel:
    """
    Registre ordonné et en lecture seule des attributs comparables.

    L'ordre d'enregistrement fixe l'ordre des champs dans chaque résultat.
    """

    def __init__(self, definitions: list[AttributeDefinition] | tuple[AttributeDefinition, ...]) -> None:
        seen: set[str] = set()
        for definition in definitions:
            definition.validate()
            if definition.key in seen:
                raise ConfigurationError(f"Attribut en double: {definition.key!r}")
            seen.add(definition.key)
        self._definitions = tuple(definitions)
        self._by_key = {d.key: d for d in self._definitions}

    @classmethod
    def from_list(cls, items: list[dict[str, Any]]) -> AttributeModel:
        if not isinstance(items, list):
            raise ConfigurationError("attributes doit être une liste")
        return cls([AttributeDefinition.from_dict(item) for item in items])

    def list_attributes(self) -> tuple[AttributeDefinition, ...]:
        return self._definitions

    def get_attribute(self, key: str) -> AttributeDefinition:
        """
        Retourne la définition d'un attribut.

        Raises:
            AttributeNotFound: Si la clé n'est pas enregistrée.
        """
        try:
            return self._by_key[key]
        except KeyError:
            raise AttributeNotFound(f"Attribut inconnu: {key!r}") from None

    def keys(self) -> list[str]:
        return [d.key for d in self._definitions]

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[AttributeDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"AttributeModel({', '.join(self.keys())})"


@dataclass
class EngineConfig:
    """Configuration principale : modèle d'attributs et paramètres de classement par défaut."""

    model: AttributeModel = field(default_factory=lambda: AttributeModel([]))
    min_score: float = 0.0
    top_k: int | None = None
    include_excluded: bool = False
    id_column: str = "user_id"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> EngineConfig:
        model = AttributeModel.from_list(d.get("attributes", []))
        min_score = _as_float(d, "min_score", 0.0)
        raw_top_k = d.get("top_k")
        id_column = str(d.get("id_column", "user_id") or "").strip()

        if len(model) == 0:
            raise ConfigurationError("attributes requis: au moins un attribut")
        if min_score is None or not 0 <= min_score <= 100:
            raise ConfigurationError(f"min_score doit être entre 0 et 100 (got {min_score})")
        top_k: int | None = None
        if raw_top_k is not None:
            try:
                top_k = int(raw_top_k)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"top_k doit être un entier (got {raw_top_k!r})") from e
            if top_k < 1:
                raise ConfigurationError(f"top_k doit être >= 1 (got {top_k})")
        if not id_column:
            raise ConfigurationError("id_column ne peut pas être vide")

        return cls(
            model=model,
            min_score=min_score,
            top_k=top_k,
            include_excluded=bool(d.get("include_excluded", False)),
            id_column=id_column,
        )

    @classmethod
    def load(cls, path: str | Path) -> EngineConfig:
        """
        Charge la configuration depuis un fichier JSON.

        Raises:
            ConfigFileError: Si le fichier est absent ou le JSON invalide.
            ConfigurationError: Si la configuration est invalide.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Fichier de configuration introuvable: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"JSON invalide dans {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Impossible de lire {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Fichier de configuration invalide: {path} doit contenir un objet JSON")

        return cls.from_dict(d)

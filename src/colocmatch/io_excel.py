"""I/O tableurs : chargement des profils (Excel, CSV) et sauvegarde des rapports."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from colocmatch.config import AttributeModel, ColocMatchError
from colocmatch.matching.schema import SurveyProfile
from colocmatch.normalize import is_missing

logger = logging.getLogger(__name__)


class ProfileFileError(ColocMatchError):
    """Erreur de chargement d'un fichier de profils (fichier absent, feuille inexistante)."""


def _is_csv(path: Path) -> bool:
    return path.suffix.lower() == ".csv"


def _detect_csv_delimiter(path: Path, encoding: str) -> str | None:
    try:
        with path.open("r", encoding=encoding, errors="replace") as f:
            sample_lines: list[str] = []
            for line in f:
                if line.strip() == "":
                    continue
                sample_lines.append(line)
                if len(sample_lines) >= 5:
                    break
    except OSError:
        return None
    if not sample_lines:
        return None
    sample = "".join(sample_lines)
    try:
        return csv.Sniffer().sniff(sample, delimiters=[",", ";", "\t"]).delimiter
    except csv.Error:
        first = sample_lines[0]
        counts = {d: first.count(d) for d in [",", ";", "\t"]}
        best = max(counts, key=lambda d: counts[d])
        return best if counts[best] > 0 else None


def load_sheet(filepath: str | Path, sheet_name: str | None = None) -> pd.DataFrame:
    """
    Charge une feuille dans un DataFrame en préservant le texte.

    Args:
        filepath: Chemin vers le fichier (.xlsx ou .csv).
        sheet_name: Nom de la feuille (None = première). Ignoré pour CSV.

    Raises:
        ProfileFileError: Si le fichier est absent, illisible ou si la feuille n'existe pas.
    """
    path = Path(filepath)
    if not path.exists():
        raise ProfileFileError(f"Fichier introuvable: {path}")

    if _is_csv(path):
        for encoding in ("utf-8", "latin-1"):
            try:
                delimiter = _detect_csv_delimiter(path, encoding) or ","
                return pd.read_csv(path, dtype=str, encoding=encoding, sep=delimiter)
            except UnicodeDecodeError:
                continue
            except Exception as e:
                raise ProfileFileError(f"Erreur CSV {path}: {e}") from e
        raise ProfileFileError(f"Erreur CSV {path}: encodage non reconnu")

    try:
        xl = pd.ExcelFile(path, engine="openpyxl")
    except Exception as e:
        raise ProfileFileError(f"Impossible de lire le fichier {path}: {e}") from e

    if sheet_name is None:
        sheet_name = str(xl.sheet_names[0])
    elif sheet_name not in xl.sheet_names:
        sheets = [str(s) for s in xl.sheet_names]
        raise ProfileFileError(
            f"Feuille '{sheet_name}' introuvable dans {path}. Feuilles: {', '.join(sheets)}"
        )

    try:
        return pd.read_excel(xl, sheet_name=sheet_name, dtype=str, engine="openpyxl")
    except Exception as e:
        raise ProfileFileError(f"Erreur feuille '{sheet_name}' dans {path}: {e}") from e


def _cell(value: Any) -> Any:
    if is_missing(value):
        return None
    return value.strip() if isinstance(value, str) else value


def dataframe_to_profiles(
    df: pd.DataFrame,
    model: AttributeModel,
    id_column: str = "user_id",
) -> list[SurveyProfile]:
    """
    Convertit les lignes d'un DataFrame en profils.

    Seules les colonnes des attributs enregistrés sont gardées ; une cellule
    vide est une réponse absente. Les colonnes multi_select gardent le texte
    brut (découpé plus tard sur ';' ou ',').
    """
    if id_column not in df.columns:
        raise ProfileFileError(f"Colonne identifiant '{id_column}' absente. Colonnes: {', '.join(map(str, df.columns))}")

    missing = [key for key in model.keys() if key not in df.columns]
    if missing:
        logger.warning("Colonnes absentes (réponses considérées manquantes): %s", ", ".join(missing))

    columns = [d.key for d in model if d.key in df.columns]
    profiles: list[SurveyProfile] = []
    for _, row in df.iterrows():
        answers = {key: _cell(row[key]) for key in columns}
        raw_id = _cell(row[id_column])
        profiles.append(SurveyProfile(user_id=None if raw_id is None else str(raw_id), answers=answers))

    logger.debug("%d profils chargés (%d colonnes)", len(profiles), len(columns))
    return profiles


def load_profiles(
    filepath: str | Path,
    model: AttributeModel,
    *,
    id_column: str = "user_id",
    sheet_name: str | None = None,
) -> list[SurveyProfile]:
    """
    Charge les profils d'un fichier tableur.

    Raises:
        ProfileFileError: Si le fichier, la feuille ou la colonne identifiant est introuvable.
    """
    df = load_sheet(filepath, sheet_name)
    return dataframe_to_profiles(df, model, id_column=id_column)


def find_profile(profiles: list[SurveyProfile], user_id: str) -> SurveyProfile:
    """
    Retourne le profil d'un utilisateur.

    Raises:
        ProfileFileError: Si l'identifiant est absent du fichier.
    """
    for profile in profiles:
        if profile.user_id == user_id:
            return profile
    raise ProfileFileError(f"Utilisateur introuvable: {user_id!r}")


def save_xlsx(
    filepath: str | Path,
    dataframes: dict[str, pd.DataFrame],
    *,
    index: bool = False,
) -> None:
    """
    Sauvegarde plusieurs DataFrames dans un fichier xlsx (une feuille par DataFrame).

    Args:
        filepath: Chemin de sortie.
        dataframes: Dict {nom_feuille: DataFrame}.
    """
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        for sheet_name, df in dataframes.items():
            # Nettoyer le nom de feuille (Excel limite à 31 caractères)
            safe_name = str(sheet_name)[:31]
            df.to_excel(writer, sheet_name=safe_name, index=index)

"""Tests des cas d'erreur."""

from pathlib import Path

import pandas as pd
import pytest

from colocmatch import ColocMatchError, ConfigurationError, InvalidProfile, ProfileFileError
from colocmatch.config import ConfigFileError, EngineConfig
from colocmatch.io_excel import load_sheet


def test_config_load_file_not_found(tmp_path: Path) -> None:
    """EngineConfig.load() lève ConfigFileError si le fichier n'existe pas."""
    missing = tmp_path / "inexistant.json"
    with pytest.raises(ConfigFileError, match="introuvable"):
        EngineConfig.load(missing)


def test_config_load_invalid_json(tmp_path: Path) -> None:
    """EngineConfig.load() lève ConfigFileError si le JSON est invalide."""
    bad_json = tmp_path / "config.json"
    bad_json.write_text("{ invalid json }", encoding="utf-8")
    with pytest.raises(ConfigFileError, match="JSON invalide"):
        EngineConfig.load(bad_json)


def test_config_load_not_dict(tmp_path: Path) -> None:
    """EngineConfig.load() lève ConfigFileError si le JSON n'est pas un objet."""
    bad_config = tmp_path / "config.json"
    bad_config.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ConfigFileError, match="objet JSON"):
        EngineConfig.load(bad_config)


def test_config_load_invalid_attribute(tmp_path: Path) -> None:
    """Un modèle d'attributs invalide est fatal au chargement."""
    config_path = tmp_path / "config.json"
    config_path.write_text(
        '{"attributes": [{"key": "a", "domain": "boolean", "weight": -2}]}',
        encoding="utf-8",
    )
    with pytest.raises(ConfigurationError):
        EngineConfig.load(config_path)


def test_error_hierarchy() -> None:
    assert issubclass(ConfigurationError, ColocMatchError)
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(ConfigFileError, ColocMatchError)
    assert issubclass(InvalidProfile, ColocMatchError)
    assert issubclass(ProfileFileError, ColocMatchError)


def test_load_sheet_file_not_found(tmp_path: Path) -> None:
    """load_sheet() lève ProfileFileError si le fichier n'existe pas."""
    missing = tmp_path / "inexistant.xlsx"
    with pytest.raises(ProfileFileError, match="introuvable"):
        load_sheet(missing)


def test_load_sheet_missing_sheet(tmp_path: Path) -> None:
    """load_sheet() lève ProfileFileError si la feuille n'existe pas."""
    xlsx = tmp_path / "test.xlsx"
    pd.DataFrame({"a": [1]}).to_excel(xlsx, sheet_name="Feuille1", index=False, engine="openpyxl")
    with pytest.raises(ProfileFileError, match="Feuille 'Inexistante' introuvable"):
        load_sheet(xlsx, sheet_name="Inexistante")


def test_cli_config_error_exit_code() -> None:
    """La CLI retourne 1 et affiche un message en cas d'erreur."""
    from colocmatch.cli import main

    exit_code = main(["list-attributes", "--config", "/chemin/inexistant.json"])
    assert exit_code == 1

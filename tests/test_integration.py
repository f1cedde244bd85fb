"""Test d'intégration de la ligne de commande colocmatch."""

import json
from pathlib import Path

import pandas as pd
import pytest

from colocmatch.cli import main, parse_weight_overrides
from colocmatch.config import ConfigurationError


@pytest.fixture
def project(tmp_path: Path) -> tuple[Path, Path]:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "attributes": [
                    {"key": "region", "domain": "categorical", "weight": 50, "hard_filter": True},
                    {
                        "key": "budget",
                        "domain": "numeric_range",
                        "weight": 50,
                        "min_value": 500,
                        "max_value": 3000,
                        "range_span": 500,
                        "unit": "$",
                    },
                ]
            }
        ),
        encoding="utf-8",
    )
    profiles_path = tmp_path / "profiles.xlsx"
    pd.DataFrame(
        {
            "user_id": ["a", "b", "c", "d", None],
            "region": ["NYC", "NYC", "Boston", "NYC", "NYC"],
            "budget": ["1500", "1800", "1500", None, "1500"],
        }
    ).to_excel(profiles_path, index=False, engine="openpyxl")
    return config_path, profiles_path


def test_list_attributes(project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    config_path, _ = project
    assert main(["list-attributes", "--config", str(config_path)]) == 0
    out = capsys.readouterr().out
    assert "region" in out
    assert "[filtre dur]" in out


def test_score_json(project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    config_path, profiles_path = project
    code = main(
        ["score", "-c", str(config_path), "-p", str(profiles_path), "-u", "a", "--candidate", "b", "--json"]
    )
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["score"] == pytest.approx(70.0)
    assert payload["excluded"] is False
    assert [f["key"] for f in payload["fields"]] == ["region", "budget"]


def test_score_trace(project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    config_path, profiles_path = project
    code = main(
        ["score", "-c", str(config_path), "-p", str(profiles_path), "-u", "a", "--candidate", "c", "--trace"]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "hard filter FAILED" in out
    assert "excluded     = True" in out


def test_score_trace_output(project: tuple[Path, Path], tmp_path: Path) -> None:
    """--output écrit la trace par attribut dans une feuille Trace."""
    config_path, profiles_path = project
    out = tmp_path / "trace.xlsx"
    code = main(
        ["score", "-c", str(config_path), "-p", str(profiles_path), "-u", "a", "--candidate", "b", "-o", str(out)]
    )
    assert code == 0
    trace_df = pd.read_excel(out, sheet_name="Trace", engine="openpyxl")
    assert list(trace_df["key"]) == ["region", "budget"]


def test_rank_with_output(project: tuple[Path, Path], tmp_path: Path) -> None:
    config_path, profiles_path = project
    out = tmp_path / "ranking.xlsx"
    code = main(["rank", "-c", str(config_path), "-p", str(profiles_path), "-u", "a", "-o", str(out)])
    assert code == 0
    assert out.exists()
    ranking_df = pd.read_excel(out, sheet_name="Ranking", engine="openpyxl")
    assert list(ranking_df["candidate_id"]) == ["d", "b"]
    skipped_df = pd.read_excel(out, sheet_name="Skipped", engine="openpyxl")
    assert len(skipped_df) == 1
    report_df = pd.read_excel(out, sheet_name="REPORT", engine="openpyxl")
    assert "nb_excluded" in report_df["Key"].tolist()


def test_rank_options(project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    config_path, profiles_path = project
    code = main(
        [
            "rank",
            "-c",
            str(config_path),
            "-p",
            str(profiles_path),
            "-u",
            "a",
            "--include-excluded",
            "--top-k",
            "2",
            "-w",
            "budget=0",
        ]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Retenus:           2" in out


def test_unknown_user_exit_code(project: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    config_path, profiles_path = project
    code = main(["rank", "-c", str(config_path), "-p", str(profiles_path), "-u", "zz"])
    assert code == 1
    assert "Utilisateur introuvable" in capsys.readouterr().err


def test_parse_weight_overrides() -> None:
    assert parse_weight_overrides(["budget=10", " region = 2.5"]) == {"budget": 10.0, "region": 2.5}
    assert parse_weight_overrides(None) == {}
    with pytest.raises(ConfigurationError, match="format attendu"):
        parse_weight_overrides(["budget"])
    with pytest.raises(ConfigurationError, match="Poids invalide"):
        parse_weight_overrides(["budget=beaucoup"])

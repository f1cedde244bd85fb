"""Génération des tableaux de classement et de l'onglet REPORT."""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from colocmatch import __version__
from colocmatch.config import EngineConfig
from colocmatch.matching.ranker import RankOptions
from colocmatch.matching.schema import Ranking
from colocmatch.matching.trace import ScoreTrace


def build_ranking_df(ranking: Ranking) -> pd.DataFrame:
    """
    Construit le DataFrame du classement : une ligne par candidat retenu.

    Colonnes : rank, candidate_id, score, excluded, insufficient_data,
    total_weight, puis une colonne de similarité par attribut (sim_<clé>)
    et les explications concaténées.
    """
    rows: list[dict[str, object]] = []
    for ranked in ranking:
        r = ranked.result
        row: dict[str, object] = {
            "rank": ranked.rank,
            "candidate_id": ranked.candidate_id,
            "score": round(r.score, 2),
            "excluded": r.excluded,
            "insufficient_data": r.insufficient_data,
            "total_weight": r.total_weight,
        }
        for f in r.fields:
            row[f"sim_{f.key}"] = round(f.similarity, 4) if f.confidence > 0 else None
        row["explanation"] = "; ".join(f.explanation for f in r.fields)
        row["notes"] = "; ".join(r.notes)
        rows.append(row)
    return pd.DataFrame(rows, columns=list(rows[0].keys()) if rows else ["rank", "candidate_id", "score"])


def build_skipped_df(ranking: Ranking) -> pd.DataFrame:
    """Candidats écartés pour profil invalide."""
    return pd.DataFrame(
        [(s.index, s.candidate_id, s.reason) for s in ranking.skipped],
        columns=["index", "candidate_id", "reason"],
    )


def build_trace_df(trace: ScoreTrace) -> pd.DataFrame:
    """Une ligne par attribut avec les valeurs intermédiaires du calcul."""
    return pd.DataFrame([f.to_dict() for f in trace.fields])


def build_report_df(
    ranking: Ranking,
    config: EngineConfig,
    options: RankOptions | None = None,
) -> pd.DataFrame:
    """
    Construit le DataFrame pour l'onglet REPORT.

    Contient : nb candidats évalués, retenus, exclus, sous le score minimal,
    ignorés, paramètres, attributs, horodatage, version.
    """
    options = options or RankOptions.from_config(config)
    rows: list[tuple[str, object]] = [
        ("Metric", "Value"),
        ("requester_id", ranking.requester_id),
        ("nb_evaluated", ranking.n_evaluated),
        ("nb_ranked", len(ranking)),
        ("nb_excluded", ranking.n_excluded),
        ("nb_below_min_score", ranking.n_below_min_score),
        ("nb_skipped_invalid", ranking.skipped_count),
        ("", ""),
        ("Parameters", ""),
        ("min_score", options.min_score),
        ("top_k", options.top_k if options.top_k is not None else ""),
        ("include_excluded", options.include_excluded),
        ("", ""),
        ("Attributes", ""),
    ]
    for d in config.model:
        flag = " hard_filter" if d.hard_filter else ""
        rows.append((f"attr_{d.key}", f"{d.domain} w={d.weight:g}{flag}"))
    if options.weight_overrides:
        overrides = ", ".join(f"{k}={v}" for k, v in options.weight_overrides.items())
        rows.append(("weight_overrides", overrides))

    rows.append(("", ""))
    for i, warning in enumerate(ranking.warnings):
        rows.append((f"warning_{i}", warning))
    rows.extend(
        [
            ("timestamp", datetime.now().isoformat()),
            ("version", __version__),
        ]
    )

    return pd.DataFrame(rows, columns=["Key", "Value"])


def print_report_console(ranking: Ranking, *, limit: int = 10) -> None:
    """Affiche un résumé du classement en console."""
    print("\n=== colocmatch Report ===")
    print(f"  Demandeur:         {ranking.requester_id}")
    print(f"  Évalués:           {ranking.n_evaluated}")
    print(f"  Retenus:           {len(ranking)}")
    print(f"  Exclus (filtres):  {ranking.n_excluded}")
    print(f"  Sous min_score:    {ranking.n_below_min_score}")
    print(f"  Ignorés (invalid): {ranking.skipped_count}")
    for ranked in ranking.candidates[:limit]:
        r = ranked.result
        flag = " (exclu)" if r.excluded else ""
        print(f"  #{ranked.rank:<3} {ranked.candidate_id:<20} score={r.score:.1f}{flag}")
    for warning in ranking.warnings:
        print(f"  Avertissement: {warning}")
    print(f"  Version:           {__version__}")
    print("=========================\n")

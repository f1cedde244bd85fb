"""Interface en ligne de commande colocmatch."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from colocmatch import __version__
from colocmatch.config import ColocMatchError, ConfigurationError, EngineConfig
from colocmatch.io_excel import find_profile, load_profiles, save_xlsx
from colocmatch.matching.ranker import Ranker, RankOptions
from colocmatch.matching.scorer import CompatibilityScorer
from colocmatch.matching.trace import explain, format_trace
from colocmatch.report import (
    build_ranking_df,
    build_report_df,
    build_skipped_df,
    build_trace_df,
    print_report_console,
)

logger = logging.getLogger(__name__)


def parse_weight_overrides(items: list[str] | None) -> dict[str, float]:
    """
    Convertit des arguments "clé=poids" en dictionnaire.

    Raises:
        ConfigurationError: Si un argument est mal formé.
    """
    overrides: dict[str, float] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"Surcharge invalide: {item!r} (format attendu: clé=poids)")
        try:
            overrides[key.strip()] = float(value)
        except ValueError as e:
            raise ConfigurationError(f"Poids invalide pour {key.strip()!r}: {value!r}") from e
    return overrides


def cmd_list_attributes(config_path: str) -> int:
    """Liste les attributs enregistrés."""
    config = EngineConfig.load(config_path)
    print(f"Attributs ({len(config.model)}):")
    for d in config.model:
        flag = " [filtre dur]" if d.hard_filter else ""
        print(f"  - {d.key:<20} {d.domain:<14} w={d.weight:g}{flag}")
    return 0


def cmd_score(
    config_path: str,
    profiles_path: str,
    user_id: str,
    candidate_id: str,
    *,
    weights: dict[str, float] | None = None,
    show_trace: bool = False,
    as_json: bool = False,
    sheet: str | None = None,
    output_path: str | None = None,
) -> int:
    """Compare deux utilisateurs."""
    config = EngineConfig.load(config_path)
    profiles = load_profiles(profiles_path, config.model, id_column=config.id_column, sheet_name=sheet)
    scorer = CompatibilityScorer(config.model)

    a = find_profile(profiles, user_id)
    b = find_profile(profiles, candidate_id)
    result, trace = explain(scorer, a, b, weights)

    if output_path:
        save_xlsx(output_path, {"Trace": build_trace_df(trace)})
        logger.info("Trace écrite dans %s", output_path)

    if as_json:
        payload = trace.to_dict() if show_trace else result.to_dict()
        print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
        return 0

    if show_trace:
        print(format_trace(trace))
        return 0

    status = "EXCLU" if result.excluded else ("DONNÉES INSUFFISANTES" if result.insufficient_data else "OK")
    print(f"{result.requester_id} -> {result.candidate_id}: score={result.score:.1f} [{status}]")
    for f in result.fields:
        print(f"  {f.explanation} (sim={f.similarity:.2f}, conf={f.confidence:.0f})")
    for note in result.notes:
        print(f"  note: {note}")
    return 0


def cmd_rank(
    config_path: str,
    profiles_path: str,
    user_id: str,
    output_path: str | None,
    *,
    top_k: int | None = None,
    min_score: float | None = None,
    include_excluded: bool = False,
    weights: dict[str, float] | None = None,
    sheet: str | None = None,
) -> int:
    """Classe les candidats d'un utilisateur."""
    config = EngineConfig.load(config_path)
    profiles = load_profiles(profiles_path, config.model, id_column=config.id_column, sheet_name=sheet)

    overrides: dict[str, object] = {"weight_overrides": weights or None}
    if top_k is not None:
        overrides["top_k"] = top_k
    if min_score is not None:
        overrides["min_score"] = min_score
    if include_excluded:
        overrides["include_excluded"] = True
    options = RankOptions.from_config(config, **overrides)

    requester = find_profile(profiles, user_id)
    ranker = Ranker(CompatibilityScorer(config.model), options)
    ranking = ranker.rank(requester, profiles)

    print_report_console(ranking)

    if output_path:
        sheets = {
            "Ranking": build_ranking_df(ranking),
            "Skipped": build_skipped_df(ranking),
            "REPORT": build_report_df(ranking, config, options),
        }
        save_xlsx(output_path, sheets)
        print(f"Fichier de sortie: {output_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="colocmatch",
        description="Compatibilité et classement de colocataires à partir des questionnaires",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Journalisation détaillée")

    subparsers = parser.add_subparsers(dest="command", help="Commandes")

    # list-attributes
    p_list = subparsers.add_parser("list-attributes", help="Lister les attributs configurés")
    p_list.add_argument("--config", "-c", required=True, help="Fichier config JSON")

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", "-c", required=True, help="Fichier config JSON")
        p.add_argument("--profiles", "-p", required=True, help="Fichier des profils (.xlsx ou .csv)")
        p.add_argument("--sheet", help="Feuille du fichier de profils")
        p.add_argument("--user", "-u", required=True, help="Identifiant du demandeur")
        p.add_argument(
            "--weight", "-w", action="append", metavar="CLE=POIDS", help="Surcharge de poids (répétable)"
        )

    # score
    p_score = subparsers.add_parser("score", help="Comparer deux utilisateurs")
    add_common(p_score)
    p_score.add_argument("--candidate", required=True, help="Identifiant du candidat")
    p_score.add_argument("--trace", action="store_true", help="Afficher la trace de diagnostic")
    p_score.add_argument("--json", action="store_true", help="Sortie JSON")
    p_score.add_argument("--output", "-o", help="Fichier xlsx de la trace")

    # rank
    p_rank = subparsers.add_parser("rank", help="Classer les candidats d'un utilisateur")
    add_common(p_rank)
    p_rank.add_argument("--top-k", "-k", type=int, help="Nombre maximal de candidats")
    p_rank.add_argument("--min-score", type=float, help="Score minimal (0-100)")
    p_rank.add_argument("--include-excluded", action="store_true", help="Garder les paires exclues (debug)")
    p_rank.add_argument("--output", "-o", help="Fichier xlsx de sortie")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "list-attributes":
            return cmd_list_attributes(args.config)

        if args.command in ("score", "rank"):
            if args.output and Path(args.output).suffix.lower() != ".xlsx":
                parser.error("--output doit être un fichier .xlsx")

        if args.command == "score":
            return cmd_score(
                args.config,
                args.profiles,
                args.user,
                args.candidate,
                weights=parse_weight_overrides(args.weight),
                show_trace=args.trace,
                as_json=args.json,
                sheet=args.sheet,
                output_path=args.output,
            )

        if args.command == "rank":
            return cmd_rank(
                args.config,
                args.profiles,
                args.user,
                args.output,
                top_k=args.top_k,
                min_score=args.min_score,
                include_excluded=args.include_excluded,
                weights=parse_weight_overrides(args.weight),
                sheet=args.sheet,
            )
    except ColocMatchError as e:
        logger.debug("Erreur colocmatch", exc_info=True)
        print(f"Erreur: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

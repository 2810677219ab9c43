"""Point d'entrée en ligne de commande.

    quota-elections CPL_1.csv CPL_2.csv --audit audit.txt --seed 42 --chart hemicycle.png

Les fichiers absents ou invalides sont signalés puis ignorés ; le code de
retour vaut 1 si aucun fichier n'a pu être chargé.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import numpy as np

from quota_elections.config import DEFAULT_AUDIT_FILENAME, ElectionKind
from quota_elections.engine.errors import BallotFileError
from quota_elections.engine.manager import ElectionManager

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quota-elections",
        description="Répartition proportionnelle des sièges (quota et plus fort reste).",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="Fichiers de bulletins (CPL, OPL, MPO ou MV), tous du même type")
    parser.add_argument(
        "--audit",
        default=DEFAULT_AUDIT_FILENAME,
        help="Chemin du rapport d'audit")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Graine des tirages au sort")
    parser.add_argument(
        "--chart",
        default=None,
        help="Enregistre un hémicycle des sièges (png, svg, pdf)")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Journalisation détaillée")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s : %(message)s",
    )

    manager = ElectionManager(rng=np.random.default_rng(args.seed))
    loaded = 0
    for path in args.files:
        try:
            manager.load_ballot_file(path)
        except FileNotFoundError as e:
            logger.warning("%s", e)
            continue
        except BallotFileError as e:
            logger.warning("Fichier ignoré : %s", e)
            continue
        loaded += 1

    if loaded == 0:
        logger.error("Aucun fichier de bulletins chargé.")
        return 1

    manager.conduct_election()
    winner = manager.finalize_results()
    audit_path = manager.export_audit(args.audit)

    for candidate in manager.election.seated_candidates:
        print(f"{candidate.name} ({candidate.affiliation})" if candidate.affiliation else candidate.name)
    if winner.winner:
        print(f"Vainqueur : {winner.winner}")
    logger.info("Rapport d'audit : %s", audit_path)

    if args.chart:
        from quota_elections.viz.hemicycle import save_hemicycle

        if manager.election.kind is ElectionKind.DIRECT_CANDIDATE:
            seats = {c.name: c.seats for c in manager.election.candidates}
        else:
            seats = manager.election.party_seats()
        save_hemicycle(seats, args.chart)
        logger.info("Hémicycle : %s", args.chart)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

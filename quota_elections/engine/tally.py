"""Comptage des bulletins selon la règle de scrutin.

Un bulletin est une ligne de cases séparées par des virgules, dans l'ordre
des emplacements déclarés par le fichier ; seule la valeur "1" vaut marque.

Règles :
  - Liste fermée : la première case cochée désigne le parti, les suivantes sont ignorées
  - Liste ouverte : chaque case cochée compte pour le candidat ET pour son parti
  - Vote direct : chaque case cochée compte pour le candidat

Les cases au-delà du nombre d'emplacements sont ignorées, les cases
manquantes en fin de ligne valent « non coché », les lignes vides sont
sautées. Le comptage ne lève jamais d'exception.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from quota_elections.config import BALLOT_MARK, BALLOT_SEPARATOR
from quota_elections.engine.entities import Candidate, Party

logger = logging.getLogger(__name__)


def parse_marks(line: str, n_slots: int) -> List[int]:
    """Indices des emplacements cochés sur une ligne de bulletin.

    Args:
        line: ligne brute (ex. "1,,0,1").
        n_slots: nombre d'emplacements déclarés.

    Returns:
        Indices cochés, par ordre croissant, tous < n_slots.
    """
    if line is None or not line.strip():
        return []
    tokens = line.split(BALLOT_SEPARATOR)[:n_slots]
    return [i for i, token in enumerate(tokens) if token.strip() == BALLOT_MARK]


def tally_closed_list(ballots: Iterable[str], parties: Sequence[Party]) -> int:
    """Liste fermée : une voix au premier parti coché de chaque bulletin.

    Returns:
        Nombre de voix comptées.
    """
    counted = 0
    for line in ballots:
        marks = parse_marks(line, len(parties))
        if not marks:
            continue
        parties[marks[0]].add_vote()
        counted += 1
    logger.debug("Liste fermée : %d voix comptées", counted)
    return counted


def tally_open_list(ballots: Iterable[str], candidates: Sequence[Candidate]) -> int:
    """Liste ouverte : chaque marque compte pour le candidat et son parti.

    Deux marques sur des candidats du même parti comptent deux fois pour ce
    parti.

    Returns:
        Nombre de marques comptées.
    """
    counted = 0
    for line in ballots:
        for i in parse_marks(line, len(candidates)):
            candidate = candidates[i]
            candidate.add_vote()
            if candidate.party is not None:
                candidate.party.add_vote()
            counted += 1
    logger.debug("Liste ouverte : %d marques comptées", counted)
    return counted


def tally_direct(ballots: Iterable[str], candidates: Sequence[Candidate]) -> int:
    """Vote direct : chaque marque compte pour le candidat uniquement.

    Returns:
        Nombre de marques comptées.
    """
    counted = 0
    for line in ballots:
        for i in parse_marks(line, len(candidates)):
            candidates[i].add_vote()
            counted += 1
    logger.debug("Vote direct : %d marques comptées", counted)
    return counted

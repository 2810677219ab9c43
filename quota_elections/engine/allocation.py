"""Répartition proportionnelle au quota puis au plus fort reste.

Deux passes strictement ordonnées :
  1. Quota (Hare) : quota = voix totales / sièges ; chaque entité reçoit
     floor(voix / quota) sièges et garde un reste de voix entier.
  2. Plus fort reste en tourniquet : les sièges restants vont un par un au
     plus fort reste parmi les entités qui n'ont pas encore gagné de siège
     dans le tour courant ; un tirage au sort départage les ex-aequo.

Les fonctions travaillent sur des dict nom → voix : le nom sert d'identifiant
d'entité (unique par élection).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from quota_elections.engine.errors import AllocationError

logger = logging.getLogger(__name__)


@dataclass
class QuotaAllocation:
    """Résultat de la passe au quota."""
    quota: float
    total_seats: int
    initial_seats: Dict[str, int]
    remainder_votes: Dict[str, int]

    @property
    def remaining_seats(self) -> int:
        """Sièges laissés à la répartition au plus fort reste."""
        return self.total_seats - sum(self.initial_seats.values())


@dataclass
class RemainderDistribution:
    """Résultat de la répartition au plus fort reste."""
    seats: Dict[str, int]
    awards: List[str] = field(default_factory=list)        # Ordre d'attribution
    draws: int = 0                                          # Tirages au sort effectués
    won_this_round: Dict[str, bool] = field(default_factory=dict)


def compute_quota(total_votes: int, total_seats: int) -> float:
    """Nombre de voix par siège.

    Raises:
        AllocationError: si le nombre de sièges est nul.
    """
    if total_seats == 0:
        raise AllocationError("Le nombre total de sièges ne peut pas être nul.")
    return total_votes / total_seats


def allocate_quota_seats(
    votes: Dict[str, int],
    total_votes: int,
    total_seats: int,
) -> QuotaAllocation:
    """Première répartition : sièges entiers au quota.

    Args:
        votes: dict entité → nombre de voix.
        total_votes: voix totales déclarées pour l'élection.
        total_seats: sièges à répartir.

    Returns:
        QuotaAllocation (sièges initiaux et restes par entité).
    """
    quota = compute_quota(total_votes, total_seats)

    initial_seats: Dict[str, int] = {}
    remainder_votes: Dict[str, int] = {}
    for name, v in votes.items():
        # Sous le quota : aucun siège, même si l'arrondi flottant dirait 1
        if quota > 0 and v >= quota:
            seats = math.floor(v / quota)
        else:
            seats = 0
        initial_seats[name] = seats
        remainder_votes[name] = max(0, int(v - seats * quota))
        logger.debug(
            "%s : %d voix, %d sièges au quota, reste %d",
            name, v, seats, remainder_votes[name],
        )

    return QuotaAllocation(
        quota=quota,
        total_seats=total_seats,
        initial_seats=initial_seats,
        remainder_votes=remainder_votes,
    )


def distribute_remainders(
    remainder_votes: Dict[str, int],
    remaining_seats: int,
    rng: Optional[np.random.Generator] = None,
    won_this_round: Optional[Dict[str, bool]] = None,
) -> RemainderDistribution:
    """Seconde répartition : plus fort reste, en tourniquet.

    Aucune entité ne reçoit un deuxième siège de reste avant que toutes les
    autres en aient reçu un dans le tour courant. Quand toutes ont gagné,
    un nouveau tour commence.

    Args:
        remainder_votes: dict entité → reste de voix.
        remaining_seats: sièges à attribuer.
        rng: générateur aléatoire pour les départages.
        won_this_round: état initial des drapeaux « a gagné dans ce tour »
            (tous à False si None).

    Returns:
        RemainderDistribution ; `won_this_round` y contient l'état final.

    Raises:
        AllocationError: s'il reste des sièges mais aucune entité.
    """
    if rng is None:
        rng = np.random.default_rng()

    seats = {k: 0 for k in remainder_votes}
    flags = {k: False for k in remainder_votes}
    if won_this_round:
        flags.update({k: v for k, v in won_this_round.items() if k in flags})

    result = RemainderDistribution(seats=seats, won_this_round=flags)

    if remaining_seats <= 0:
        if remaining_seats < 0:
            logger.warning(
                "Sièges au quota supérieurs au total (%d en trop) : voix comptées "
                "au-delà des voix déclarées ?", -remaining_seats,
            )
        return result

    if not remainder_votes:
        raise AllocationError(
            f"{remaining_seats} sièges restants mais aucune entité à qui les attribuer."
        )

    awarded = 0
    while awarded < remaining_seats:
        contenders = [k for k in remainder_votes if not flags[k]]
        if not contenders:
            # Toutes ont déjà gagné : nouveau tour, sans consommer de siège
            for k in flags:
                flags[k] = False
            continue

        highest = max(remainder_votes[k] for k in contenders)
        eligible = [k for k in contenders if remainder_votes[k] == highest]

        if len(eligible) > 1:
            winner = eligible[int(rng.integers(len(eligible)))]
            result.draws += 1
            logger.debug("Égalité de reste (%d) entre %s : tirage → %s", highest, eligible, winner)
        else:
            winner = eligible[0]

        seats[winner] += 1
        flags[winner] = True
        result.awards.append(winner)
        awarded += 1

        if all(flags.values()):
            for k in flags:
                flags[k] = False

    return result


def largest_remainder(
    votes: Dict[str, int],
    total_seats: int,
    total_votes: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, int]:
    """Répartition complète quota + plus fort reste.

    Args:
        votes: dict entité → nombre de voix.
        total_seats: sièges à répartir.
        total_votes: voix totales (somme des voix si None).
        rng: générateur aléatoire pour les départages.

    Returns:
        dict entité → nombre total de sièges.
    """
    if total_votes is None:
        total_votes = sum(votes.values())

    quota_alloc = allocate_quota_seats(votes, total_votes, total_seats)
    remainders = distribute_remainders(
        quota_alloc.remainder_votes, quota_alloc.remaining_seats, rng,
    )
    return {
        k: quota_alloc.initial_seats[k] + remainders.seats[k]
        for k in votes
    }

"""Désignation du vainqueur de l'élection.

Règles :
  - L'entité qui totalise le plus de sièges l'emporte
  - En cas d'égalité en tête : 1001 tirages au sort indépendants entre les
    ex-aequo, l'entité la plus souvent tirée l'emporte
  - Aucune entité : pas de vainqueur
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from quota_elections.config import COIN_TOSS_TRIALS


@dataclass
class WinnerResult:
    """Résultat de la désignation du vainqueur."""
    winner: Optional[str] = None
    tied: List[str] = field(default_factory=list)
    toss_counts: Dict[str, int] = field(default_factory=dict)  # Vide sans tirage

    @property
    def by_coin_toss(self) -> bool:
        return len(self.tied) > 1


def find_tied_leaders(seats: Dict[str, int]) -> List[str]:
    """Entités à égalité au nombre maximal de sièges (ordre d'entrée conservé)."""
    if not seats:
        return []
    top = max(seats.values())
    return [name for name, n in seats.items() if n == top]


def coin_toss(
    tied: List[str],
    rng: Optional[np.random.Generator] = None,
    trials: int = COIN_TOSS_TRIALS,
) -> Dict[str, int]:
    """Tirages uniformes répétés entre les ex-aequo.

    Returns:
        dict entité → nombre de tirages gagnés.
    """
    if rng is None:
        rng = np.random.default_rng()
    draws = rng.integers(0, len(tied), size=trials)
    counts = np.bincount(draws, minlength=len(tied))
    return {name: int(n) for name, n in zip(tied, counts)}


def resolve_winner(
    seats: Dict[str, int],
    rng: Optional[np.random.Generator] = None,
    trials: int = COIN_TOSS_TRIALS,
) -> WinnerResult:
    """Désigne le vainqueur à partir des sièges totaux.

    Args:
        seats: dict entité → sièges totaux.
        rng: générateur aléatoire (départage).
        trials: nombre de tirages en cas d'égalité.

    Returns:
        WinnerResult.
    """
    tied = find_tied_leaders(seats)
    if not tied:
        return WinnerResult()
    if len(tied) == 1:
        return WinnerResult(winner=tied[0], tied=tied)

    counts = coin_toss(tied, rng, trials)
    # max() garde le premier en cas d'égalité des tirages
    winner = max(tied, key=lambda name: counts[name])
    return WinnerResult(winner=winner, tied=tied, toss_counts=counts)

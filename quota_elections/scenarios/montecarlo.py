"""Simulation Monte Carlo des départages au sort.

Les voix sont fixes : seule varie l'issue des tirages (égalités de reste
au plus fort reste, égalité en tête des sièges). Rejouer l'allocation N fois
mesure la part de hasard dans le résultat.

Sorties :
  - Distribution des sièges par parti (ou par candidat en vote direct)
  - Fréquence de victoire de chaque parti
  - Intervalles de confiance
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from quota_elections.config import MC_CONFIDENCE, MC_DEFAULT_ITERATIONS, ElectionKind
from quota_elections.engine.election import Election
from quota_elections.engine.winner import resolve_winner

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloResult:
    """Résultat d'une simulation Monte Carlo."""
    n_iterations: int
    # Distribution des sièges : dict entité → array de taille N
    seats_distributions: Dict[str, np.ndarray] = field(default_factory=dict)
    # Nombre de victoires par parti
    winner_counts: Dict[str, int] = field(default_factory=dict)
    # Itérations où au moins un tirage a eu lieu
    draw_iterations: int = 0

    @property
    def winner_frequencies(self) -> Dict[str, float]:
        if self.n_iterations == 0:
            return {}
        return {k: v / self.n_iterations for k, v in self.winner_counts.items()}

    def seats_ci(self, name: str, confidence: float = MC_CONFIDENCE) -> Tuple[float, float, float]:
        """Intervalle de confiance des sièges pour une entité.

        Returns:
            (low, median, high).
        """
        arr = self.seats_distributions.get(name)
        if arr is None or len(arr) == 0:
            return (0, 0, 0)
        alpha = (1 - confidence) / 2
        return (
            float(np.percentile(arr, alpha * 100)),
            float(np.median(arr)),
            float(np.percentile(arr, (1 - alpha) * 100)),
        )

    def seats_mean_std(self, name: str) -> Tuple[float, float]:
        arr = self.seats_distributions.get(name)
        if arr is None or len(arr) == 0:
            return (0.0, 0.0)
        return (float(np.mean(arr)), float(np.std(arr)))

    def summary_table(self) -> pd.DataFrame:
        """Tableau résumé pour toutes les entités (une ligne par entité)."""
        freqs = self.winner_frequencies
        rows = []
        for name in self.seats_distributions:
            low, med, high = self.seats_ci(name)
            mean, std = self.seats_mean_std(name)
            rows.append({
                "name": name,
                "mean": round(mean, 2),
                "std": round(std, 2),
                "median": med,
                "ci_low": low,
                "ci_high": high,
                "p_win": freqs.get(name, 0.0),
            })
        return pd.DataFrame(rows).set_index("name") if rows else pd.DataFrame()


def _fresh_copy(election: Election, rng: np.random.Generator) -> Election:
    """Copie indépendante de l'élection, sans aucun siège attribué."""
    trial = copy.deepcopy(election)
    trial.rng = rng
    for party in trial.parties:
        party.reset_allocation()
        for candidate in party.candidates:
            candidate.has_seat = False
    for candidate in trial.candidates:
        candidate.has_seat = False
        candidate.seats = 0
    return trial


def run_monte_carlo(
    election: Election,
    n_iterations: int = MC_DEFAULT_ITERATIONS,
    seed: Optional[int] = None,
) -> MonteCarloResult:
    """Rejoue N fois l'allocation d'une élection déjà comptée.

    L'élection passée en argument n'est pas modifiée.

    Args:
        election: élection dont les voix sont comptées.
        n_iterations: nombre d'itérations.
        seed: graine aléatoire (reproductibilité).

    Returns:
        MonteCarloResult.
    """
    rng = np.random.default_rng(seed)
    direct = election.kind is ElectionKind.DIRECT_CANDIDATE

    all_seats: Dict[str, List[int]] = {}
    winner_counts: Dict[str, int] = {}
    draw_iterations = 0

    for _ in range(n_iterations):
        trial = _fresh_copy(election, rng)
        trial.calculate_seats()

        if direct:
            seats = {c.name: c.seats for c in trial.candidates}
        else:
            seats = trial.party_seats()
        for name, n in seats.items():
            all_seats.setdefault(name, []).append(n)

        winner = resolve_winner(trial.party_seats(), rng)
        if winner.winner is not None:
            winner_counts[winner.winner] = winner_counts.get(winner.winner, 0) + 1

        dist = trial.remainder_distribution
        if winner.by_coin_toss or (dist is not None and dist.draws > 0):
            draw_iterations += 1

    logger.info(
        "Monte Carlo : %d itérations, %d avec tirage au sort",
        n_iterations, draw_iterations,
    )

    return MonteCarloResult(
        n_iterations=n_iterations,
        seats_distributions={k: np.array(v) for k, v in all_seats.items()},
        winner_counts=winner_counts,
        draw_iterations=draw_iterations,
    )

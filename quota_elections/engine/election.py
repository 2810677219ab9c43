"""Élection : variantes de scrutin et stratégie d'allocation associée.

Chaque `ElectionKind` est associé à une `AllocationStrategy` :
  - comptage des bulletins (liste fermée, liste ouverte, vote direct)
  - allocation des sièges :
      * listes : quota → plus fort reste → sièges des candidats
      * vote direct : les N premiers candidats

`conduct_election` enchaîne comptage et allocation ; `calculate_seats`
relance l'allocation seule, après une fusion de fichiers par exemple.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np

from quota_elections.config import ElectionKind, ElectionType
from quota_elections.engine.allocation import (
    QuotaAllocation,
    RemainderDistribution,
    allocate_quota_seats,
    distribute_remainders,
)
from quota_elections.engine.entities import Candidate, Party
from quota_elections.engine.errors import ElectionError
from quota_elections.engine.seating import seat_direct_candidates, seat_party_candidates
from quota_elections.engine.tally import tally_closed_list, tally_direct, tally_open_list

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationStrategy:
    """Comptage et allocation propres à une famille de scrutin."""
    tally: Callable[[Iterable[str], Sequence], int]
    slots: Callable[[Election], Sequence]
    allocate: Callable[[Election], None]


@dataclass
class Election:
    """Élection à sièges multiples.

    `parties` reste vide pour le vote direct ; `candidates` n'est utilisé que
    par le vote direct (les candidats de liste sont portés par leur parti).
    """
    election_type: ElectionType
    total_seats: int
    total_votes: int
    parties: List[Party] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    rng: np.random.Generator = field(default_factory=np.random.default_rng, repr=False)

    # Renseignés par la dernière allocation
    quota_allocation: Optional[QuotaAllocation] = field(default=None, repr=False)
    remainder_distribution: Optional[RemainderDistribution] = field(default=None, repr=False)

    def __post_init__(self):
        if self.total_seats <= 0:
            raise ElectionError("Le nombre total de sièges doit être strictement positif.")
        if self.total_votes < 0:
            raise ElectionError("Le nombre total de voix ne peut pas être négatif.")
        names = [p.name for p in self.parties]
        if len(names) != len(set(names)):
            raise ElectionError(f"Noms de partis en double : {names}")

    # --- Variante ---

    @property
    def kind(self) -> ElectionKind:
        return self.election_type.kind

    @property
    def strategy(self) -> AllocationStrategy:
        return STRATEGIES[self.kind]

    # --- Entités ---

    def add_party(self, party: Party):
        if any(p.name == party.name for p in self.parties):
            raise ElectionError(f"Parti déjà inscrit : {party.name!r}")
        self.parties.append(party)

    def add_candidate(self, candidate: Candidate):
        self.candidates.append(candidate)

    @property
    def seated_candidates(self) -> List[Candidate]:
        if self.kind is ElectionKind.DIRECT_CANDIDATE:
            return [c for c in self.candidates if c.has_seat]
        return [c for p in self.parties for c in p.seated_candidates]

    def party_seats(self) -> Dict[str, int]:
        """dict parti → sièges totaux."""
        return {p.name: p.total_seats for p in self.parties}

    # --- Totaux ---

    def update_totals(self, additional_seats: int, additional_votes: int):
        """Ajoute les sièges et voix déclarés par un fichier supplémentaire."""
        self.total_seats += additional_seats
        self.total_votes += additional_votes

    # --- Déroulement ---

    def tally(self, ballots: Iterable[str], slots: Optional[Sequence] = None) -> int:
        """Compte les bulletins.

        Args:
            ballots: lignes de bulletins.
            slots: entités dans l'ordre des cases (ordre par défaut si None).

        Returns:
            Nombre de voix ou marques comptées.
        """
        if slots is None:
            slots = self.strategy.slots(self)
        return self.strategy.tally(ballots, slots)

    def conduct_election(self, ballots: Iterable[str]):
        """Compte les bulletins puis répartit les sièges."""
        counted = self.tally(ballots)
        logger.info("%s : %d voix comptées", self.election_type.value, counted)
        self.calculate_seats()

    def calculate_seats(self):
        """Répartit les sièges à partir des voix déjà comptées."""
        if self.total_votes == 0:
            logger.info("Aucune voix déclarée : aucun siège attribué.")
            for party in self.parties:
                party.reset_allocation()
            return
        self.strategy.allocate(self)


# ---------------------------------------------------------------------------
# Stratégies
# ---------------------------------------------------------------------------

def _list_candidate_slots(election: Election) -> List[Candidate]:
    return [c for party in election.parties for c in party.candidates]


def _allocate_list_seats(election: Election):
    """Quota, plus fort reste, puis sièges des candidats de chaque parti."""
    for party in election.parties:
        party.reset_allocation()

    votes = {p.name: p.votes for p in election.parties}
    quota_alloc = allocate_quota_seats(votes, election.total_votes, election.total_seats)
    logger.info(
        "Quota : %.3f voix par siège (%d voix, %d sièges), %d sièges au plus fort reste",
        quota_alloc.quota, election.total_votes, election.total_seats,
        quota_alloc.remaining_seats,
    )
    for party in election.parties:
        party.initial_seats = quota_alloc.initial_seats[party.name]
        party.remainder_votes = quota_alloc.remainder_votes[party.name]

    distribution = distribute_remainders(
        quota_alloc.remainder_votes, quota_alloc.remaining_seats, election.rng,
    )
    for party in election.parties:
        party.remainder_seats = distribution.seats[party.name]

    for party in election.parties:
        seat_party_candidates(party)

    election.quota_allocation = quota_alloc
    election.remainder_distribution = distribution
    logger.info("Sièges par parti : %s", election.party_seats())


def _allocate_direct_seats(election: Election):
    elected = seat_direct_candidates(election.candidates, election.total_seats)
    logger.info("Nouveaux élus : %s", [c.name for c in elected])


STRATEGIES: Dict[ElectionKind, AllocationStrategy] = {
    ElectionKind.CLOSED_LIST: AllocationStrategy(
        tally=tally_closed_list,
        slots=lambda election: election.parties,
        allocate=_allocate_list_seats,
    ),
    ElectionKind.OPEN_LIST: AllocationStrategy(
        tally=tally_open_list,
        slots=_list_candidate_slots,
        allocate=_allocate_list_seats,
    ),
    ElectionKind.DIRECT_CANDIDATE: AllocationStrategy(
        tally=tally_direct,
        slots=lambda election: election.candidates,
        allocate=_allocate_direct_seats,
    ),
}

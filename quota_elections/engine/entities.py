"""Registre des entités électorales : candidats, partis et index par nom.

Les entités sont créées au chargement des bulletins puis ne font
qu'accumuler : les voix ne diminuent jamais, les sièges sont fixés une fois
par passe d'allocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from quota_elections.engine.errors import BallotFileError


@dataclass(eq=False)
class Candidate:
    """Candidat à un siège.

    `seats` ne sert qu'aux élections à vote direct ; pour les scrutins de
    liste c'est `has_seat` qui fait foi.
    """
    name: str
    party: Optional[Party] = field(default=None, repr=False)
    votes: int = 0
    has_seat: bool = False
    seats: int = 0
    label: Optional[str] = None  # Étiquette déclarée dans les fichiers MPO/MV

    def add_vote(self):
        self.votes += 1

    def allocate_seat(self):
        """Attribue un siège ; le drapeau n'est jamais retiré."""
        self.has_seat = True

    @property
    def affiliation(self) -> str:
        if self.party is not None:
            return self.party.name
        return self.label or ""


@dataclass(eq=False)
class Party:
    """Parti : voix agrégées et décompte des sièges des deux répartitions."""
    name: str
    candidates: List[Candidate] = field(default_factory=list)
    votes: int = 0
    initial_seats: int = 0
    remainder_seats: int = 0
    remainder_votes: int = 0

    @property
    def total_seats(self) -> int:
        return self.initial_seats + self.remainder_seats

    def add_vote(self):
        self.votes += 1

    def add_candidate(self, candidate: Candidate):
        candidate.party = self
        self.candidates.append(candidate)

    def reset_allocation(self):
        """Remet à zéro la comptabilité d'une passe d'allocation."""
        self.initial_seats = 0
        self.remainder_seats = 0
        self.remainder_votes = 0

    @property
    def seated_candidates(self) -> List[Candidate]:
        return [c for c in self.candidates if c.has_seat]


class EntityRegistry:
    """Index nom → entité, construit une fois pour toute la fusion de fichiers.

    Garantit qu'un nom ne correspond qu'à une seule instance, même quand
    plusieurs fichiers de bulletins déclarent les mêmes partis et candidats.
    """

    def __init__(self):
        self._parties: Dict[str, Party] = {}
        self._candidates: Dict[str, Candidate] = {}

    def party(self, name: str) -> Party:
        """Retourne le parti `name`, créé au premier appel."""
        party = self._parties.get(name)
        if party is None:
            party = Party(name)
            self._parties[name] = party
        return party

    def candidate(
        self,
        name: str,
        party: Optional[Party] = None,
        label: Optional[str] = None,
    ) -> Candidate:
        """Retourne le candidat `name`, créé (et rattaché à `party`) au premier appel.

        Raises:
            BallotFileError: si le nom est déjà inscrit sous un autre parti.
        """
        candidate = self._candidates.get(name)
        if candidate is None:
            candidate = Candidate(name, label=label)
            if party is not None:
                party.add_candidate(candidate)
            self._candidates[name] = candidate
            return candidate

        if party is not None:
            self.check_candidate(name, party.name)
        return candidate

    def check_candidate(self, name: str, party_name: str):
        """Vérifie que `name` n'est pas déjà inscrit sous un autre parti.

        Ne modifie pas le registre.

        Raises:
            BallotFileError: si le nom est déjà inscrit sous un autre parti.
        """
        candidate = self._candidates.get(name)
        if candidate is None:
            return
        current = candidate.party.name if candidate.party is not None else None
        if current != party_name:
            raise BallotFileError(
                f"Candidat {name!r} déjà inscrit sous {current or 'aucun parti'!r}, "
                f"pas sous {party_name!r}."
            )

    def index_party(self, party: Party):
        """Indexe un parti existant et ses candidats."""
        self._parties.setdefault(party.name, party)
        for candidate in party.candidates:
            self._candidates.setdefault(candidate.name, candidate)

    def index_candidate(self, candidate: Candidate):
        self._candidates.setdefault(candidate.name, candidate)

    def find_party(self, name: str) -> Optional[Party]:
        return self._parties.get(name)

    def find_candidate(self, name: str) -> Optional[Candidate]:
        return self._candidates.get(name)

    @property
    def parties(self) -> List[Party]:
        """Partis dans l'ordre de première déclaration."""
        return list(self._parties.values())

    @property
    def candidates(self) -> List[Candidate]:
        """Candidats dans l'ordre de première déclaration."""
        return list(self._candidates.values())

    def __iter__(self) -> Iterator[Party]:
        return iter(self._parties.values())

    def __len__(self) -> int:
        return len(self._parties)

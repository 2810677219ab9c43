"""Orchestrateur : fusion de fichiers de bulletins, allocation, vainqueur, audit.

Enchaîne :
  1. Chargement d'un ou plusieurs fichiers du même type
     (sièges et voix s'additionnent, partis et candidats sont fusionnés par nom)
  2. Comptage de chaque fichier selon son propre ordre de cases
  3. Une seule passe d'allocation sur les totaux fusionnés
  4. Désignation du vainqueur
  5. Export du rapport d'audit
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from quota_elections.config import DEFAULT_AUDIT_FILENAME, ElectionKind
from quota_elections.data.loader import load_ballot_file
from quota_elections.data.schemas import BallotFile
from quota_elections.engine.election import Election
from quota_elections.engine.entities import EntityRegistry
from quota_elections.engine.errors import BallotFileError, ElectionError
from quota_elections.engine.winner import WinnerResult, resolve_winner
from quota_elections.report.audit import write_audit

logger = logging.getLogger(__name__)


class ElectionManager:
    """Gère une élection alimentée par un ou plusieurs fichiers de bulletins."""

    def __init__(
        self,
        election: Optional[Election] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.registry = EntityRegistry()
        self.election = election
        self.winner: Optional[WinnerResult] = None
        self.sources: List[str] = []

        if election is not None:
            election.rng = self.rng
            for party in election.parties:
                self.registry.index_party(party)
            for candidate in election.candidates:
                self.registry.index_candidate(candidate)

    # --- Chargement ---

    def load_ballot_file(self, path: Union[str, Path]) -> BallotFile:
        """Lit un fichier et l'ajoute à l'élection.

        Raises:
            FileNotFoundError: fichier absent (l'élection n'est pas modifiée).
            BallotFileError: fichier invalide ou d'un autre type que les précédents.
        """
        ballot_file = load_ballot_file(path)
        self.load(ballot_file)
        return ballot_file

    def load(self, ballot_file: BallotFile) -> int:
        """Fusionne un fichier déjà analysé et compte ses bulletins.

        Un fichier rejeté ne laisse aucune trace dans l'élection.

        Returns:
            Nombre de voix ou marques comptées pour ce fichier.

        Raises:
            BallotFileError: type différent des fichiers précédents, ou
                candidat rattaché à deux partis.
        """
        if self.election is not None and ballot_file.election_type is not self.election.election_type:
            raise BallotFileError(
                f"{ballot_file.source} : fichier {ballot_file.election_type.value} "
                f"dans une élection {self.election.election_type.value}."
            )
        self._check_entities(ballot_file)

        if self.election is None:
            self.election = Election(
                election_type=ballot_file.election_type,
                total_seats=ballot_file.seats,
                total_votes=ballot_file.ballot_count,
                rng=self.rng,
            )
        else:
            self.election.update_totals(ballot_file.seats, ballot_file.ballot_count)

        slots = self._register_entities(ballot_file)
        counted = self.election.tally(ballot_file.ballots, slots)
        self.sources.append(ballot_file.source or "<texte>")
        logger.info(
            "%s : %d bulletins, %d voix comptées (total %d sièges, %d voix)",
            ballot_file.source, len(ballot_file.ballots), counted,
            self.election.total_seats, self.election.total_votes,
        )
        return counted

    def _check_entities(self, ballot_file: BallotFile):
        """Vérifie les rattachements candidat → parti sans rien modifier."""
        if ballot_file.kind is ElectionKind.DIRECT_CANDIDATE:
            return
        if ballot_file.kind is ElectionKind.CLOSED_LIST:
            pairs = [
                (name, listing.name)
                for listing in ballot_file.parties
                for name in listing.candidates
            ]
        else:
            pairs = [(listing.name, listing.party) for listing in ballot_file.candidates]

        declared: Dict[str, str] = {}
        for name, party_name in pairs:
            self.registry.check_candidate(name, party_name)
            previous = declared.setdefault(name, party_name)
            if previous != party_name:
                raise BallotFileError(
                    f"{ballot_file.source} : candidat {name!r} déclaré sous "
                    f"{previous!r} et sous {party_name!r}."
                )

    def _register_entities(self, ballot_file: BallotFile) -> Sequence:
        """Crée ou retrouve les entités du fichier ; retourne l'ordre des cases."""
        election = self.election
        registry = self.registry
        slots = []

        if ballot_file.kind is ElectionKind.CLOSED_LIST:
            for listing in ballot_file.parties:
                is_new = registry.find_party(listing.name) is None
                party = registry.party(listing.name)
                if is_new:
                    election.add_party(party)
                for name in listing.candidates:
                    registry.candidate(name, party)
                slots.append(party)

        elif ballot_file.kind is ElectionKind.OPEN_LIST:
            for listing in ballot_file.candidates:
                is_new = registry.find_party(listing.party) is None
                party = registry.party(listing.party)
                if is_new:
                    election.add_party(party)
                slots.append(registry.candidate(listing.name, party))

        else:
            for listing in ballot_file.candidates:
                is_new = registry.find_candidate(listing.name) is None
                candidate = registry.candidate(listing.name, label=listing.party)
                if is_new:
                    election.add_candidate(candidate)
                slots.append(candidate)

        return slots

    # --- Résultats ---

    def conduct_election(self):
        """Répartit les sièges sur les voix cumulées de tous les fichiers."""
        if self.election is None:
            logger.warning("Aucun fichier chargé : rien à répartir.")
            return
        self.election.calculate_seats()

    def finalize_results(self) -> WinnerResult:
        """Désigne le parti vainqueur (aucun en vote direct)."""
        if self.election is None:
            raise ElectionError("Aucune élection chargée.")
        self.winner = resolve_winner(self.election.party_seats(), self.rng)
        if self.winner.by_coin_toss:
            logger.info(
                "Égalité en tête entre %s : tirage au sort → %s %s",
                self.winner.tied, self.winner.winner, self.winner.toss_counts,
            )
        elif self.winner.winner:
            logger.info("Vainqueur : %s", self.winner.winner)
        return self.winner

    def export_audit(self, path: Union[str, Path] = DEFAULT_AUDIT_FILENAME) -> Path:
        """Écrit le rapport d'audit."""
        if self.election is None:
            raise ElectionError("Aucune élection chargée.")
        return write_audit(path, self.election, self.winner, sources=self.sources)

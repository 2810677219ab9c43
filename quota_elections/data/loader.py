"""Lecture des fichiers de bulletins (CPL, OPL, MPO, MV).

Formats (une valeur par ligne, puis les bulletins) :

  CPL : type / sièges / bulletins / nb partis / "Parti, Cand1, Cand2, ..." × nb
  OPL : type / sièges / bulletins / nb candidats / "Parti, Candidat" × nb
  MPO, MV : type / sièges / nb candidats / "[Nom, P], [Nom, P], ..." / bulletins

Les bulletins sont des lignes de cases séparées par des virgules, "1" = coché.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from pydantic import ValidationError

from quota_elections.config import ElectionType
from quota_elections.data.schemas import BallotFile, CandidateListing, PartyListing
from quota_elections.engine.errors import BallotFileError

logger = logging.getLogger(__name__)

_BRACKETED = re.compile(r"\[([^\]]*)\]")


class _Lines:
    """Curseur sur les lignes d'un fichier, avec messages d'erreur localisés."""

    def __init__(self, text: str, source: str):
        self._lines = text.splitlines()
        self._pos = 0
        self.source = source

    def next(self, what: str) -> str:
        if self._pos >= len(self._lines):
            raise BallotFileError(f"{self.source} : fin de fichier, {what} attendu.")
        line = self._lines[self._pos].strip()
        self._pos += 1
        return line

    def next_non_empty(self, what: str) -> str:
        line = self.next(what)
        while not line:
            line = self.next(what)
        return line

    def next_int(self, what: str) -> int:
        line = self.next_non_empty(what)
        try:
            return int(line)
        except ValueError:
            raise BallotFileError(
                f"{self.source} ligne {self._pos} : {what} attendu, lu {line!r}."
            ) from None

    def rest(self) -> Iterator[str]:
        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            self._pos += 1
            yield line


def _split_names(line: str) -> List[str]:
    return [part.strip() for part in line.split(",")]


def _parse_bracketed_candidates(line: str) -> List[CandidateListing]:
    """Analyse "[Pike, D], [Foster, D]" → candidats avec étiquette."""
    listings = []
    for block in _BRACKETED.findall(line):
        parts = _split_names(block)
        label = parts[1] if len(parts) > 1 and parts[1] else None
        listings.append(CandidateListing(name=parts[0], party=label))
    return listings


def parse_ballot_text(text: str, source: Optional[str] = None) -> BallotFile:
    """Analyse le contenu d'un fichier de bulletins.

    Args:
        text: contenu complet du fichier.
        source: nom du fichier (pour les messages d'erreur).

    Returns:
        BallotFile validé.

    Raises:
        BallotFileError: en-tête absent, illisible ou incohérent.
    """
    source = source or "<texte>"
    lines = _Lines(text, source)

    header = lines.next_non_empty("type d'élection")
    try:
        election_type = ElectionType(header)
    except ValueError:
        raise BallotFileError(f"{source} : type d'élection inconnu {header!r}.") from None

    data = {"election_type": election_type, "source": source}

    try:
        if election_type in (ElectionType.CPL, ElectionType.OPL):
            data["seats"] = lines.next_int("nombre de sièges")
            data["ballot_count"] = lines.next_int("nombre de bulletins")
            n_entries = lines.next_int("nombre de partis ou de candidats")

            if election_type is ElectionType.CPL:
                parties = []
                for _ in range(n_entries):
                    names = _split_names(lines.next_non_empty("ligne de parti"))
                    parties.append(PartyListing(
                        name=names[0],
                        candidates=[n for n in names[1:] if n],
                    ))
                data["parties"] = parties
            else:
                candidates = []
                for _ in range(n_entries):
                    names = _split_names(lines.next_non_empty("ligne de candidat"))
                    if len(names) < 2:
                        raise BallotFileError(
                            f"{source} : ligne de candidat OPL incomplète {names!r}."
                        )
                    candidates.append(CandidateListing(name=names[1], party=names[0]))
                data["candidates"] = candidates
        else:
            data["seats"] = lines.next_int("nombre de sièges")
            n_candidates = lines.next_int("nombre de candidats")
            candidates = _parse_bracketed_candidates(lines.next_non_empty("liste des candidats"))
            if len(candidates) != n_candidates:
                raise BallotFileError(
                    f"{source} : {n_candidates} candidats annoncés, {len(candidates)} lus."
                )
            data["candidates"] = candidates
            data["ballot_count"] = lines.next_int("nombre de bulletins")

        data["ballots"] = list(lines.rest())
        ballot_file = BallotFile(**data)
    except ValidationError as e:
        raise BallotFileError(f"{source} : fichier invalide.\n{e}") from e

    if len(ballot_file.ballots) != ballot_file.ballot_count:
        logger.warning(
            "%s : %d bulletins annoncés, %d lignes lues",
            source, ballot_file.ballot_count, len(ballot_file.ballots),
        )
    return ballot_file


def load_ballot_file(path: Union[str, Path]) -> BallotFile:
    """Charge et valide un fichier de bulletins.

    Raises:
        FileNotFoundError: fichier absent.
        BallotFileError: contenu invalide.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Fichier introuvable : {path}")
    logger.info("Lecture de %s", path)
    return parse_ballot_text(path.read_text(encoding="utf-8"), source=str(path))

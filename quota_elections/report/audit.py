"""Rapport d'audit d'une élection.

Contenu :
  - Type d'élection, sièges, bulletins, nombre de partis
  - Candidats par parti avec leurs voix
  - Tableau de répartition (voix, quota, reste, plus fort reste, total, %)
  - Élus et affiliation
  - Tableau des candidats (vote direct)
  - Vainqueur
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from quota_elections.config import AUDIT_RULE_WIDTH, ElectionKind
from quota_elections.engine.election import Election
from quota_elections.engine.winner import WinnerResult

RULE = "-" * AUDIT_RULE_WIDTH

PARTY_COLUMNS = [
    "Parti", "Voix", "1re répartition", "Reste", "2e répartition", "Sièges", "% des voix",
]
CANDIDATE_COLUMNS = ["Candidat", "Voix", "Sièges", "% des voix"]


def party_table(election: Election) -> pd.DataFrame:
    """Tableau de répartition par parti."""
    total = election.total_votes
    rows = [
        {
            "Parti": p.name,
            "Voix": p.votes,
            "1re répartition": p.initial_seats,
            "Reste": p.remainder_votes,
            "2e répartition": p.remainder_seats,
            "Sièges": p.total_seats,
            "% des voix": round(p.votes / total * 100, 1) if total > 0 else 0.0,
        }
        for p in election.parties
    ]
    return pd.DataFrame(rows, columns=PARTY_COLUMNS)


def candidate_table(election: Election) -> pd.DataFrame:
    """Tableau des candidats d'une élection à vote direct.

    Le pourcentage est calculé sur la somme des marques, pas sur le nombre
    de bulletins (un bulletin MV peut porter plusieurs marques).
    """
    total = sum(c.votes for c in election.candidates)
    rows = [
        {
            "Candidat": c.name,
            "Voix": c.votes,
            "Sièges": c.seats,
            "% des voix": round(c.votes / total * 100, 2) if total > 0 else 0.0,
        }
        for c in election.candidates
    ]
    return pd.DataFrame(rows, columns=CANDIDATE_COLUMNS)


def _winner_line(winner: Optional[WinnerResult]) -> Optional[str]:
    if winner is None:
        return None
    if winner.winner is None:
        return "Vainqueur : aucun"
    if winner.by_coin_toss:
        counts = ", ".join(f"{k} {v}" for k, v in winner.toss_counts.items())
        return f"Vainqueur : {winner.winner} (tirage au sort entre ex-aequo : {counts})"
    return f"Vainqueur : {winner.winner}"


def render_audit(
    election: Election,
    winner: Optional[WinnerResult] = None,
    sources: Sequence[str] = (),
) -> str:
    """Rapport d'audit au format texte."""
    etype = election.election_type
    direct = election.kind is ElectionKind.DIRECT_CANDIDATE
    lines: List[str] = [
        f"Type d'élection : {etype.value} ({etype.label})",
        f"Nombre de sièges : {election.total_seats}",
        f"Nombre de bulletins : {election.total_votes}",
    ]
    if sources:
        lines.append(f"Fichiers : {', '.join(sources)}")

    if not direct:
        lines.append(f"Nombre de partis : {len(election.parties)}")
        if election.quota_allocation is not None:
            lines.append(f"Quota : {election.quota_allocation.quota:.3f} voix par siège")

        lines.append("Candidats et partis :")
        for party in election.parties:
            lines.append(f"Parti : {party.name}")
            for candidate in party.candidates:
                lines.append(f"  Candidat : {candidate.name}, Voix : {candidate.votes}")

        lines.append(RULE)
        lines.append(party_table(election).to_string(index=False))
        lines.append(RULE)

    lines.append("Élus et leur affiliation :")
    for candidate in election.seated_candidates:
        if direct:
            suffix = f" ({candidate.affiliation})" if candidate.affiliation else ""
            lines.append(f"Candidat : {candidate.name}{suffix}")
        else:
            lines.append(f"Candidat : {candidate.name}, Parti : {candidate.affiliation}")

    if direct:
        lines.append(RULE)
        lines.append(candidate_table(election).to_string(index=False))
        lines.append(RULE)

    winner_line = _winner_line(winner)
    if winner_line:
        lines.append(winner_line)

    return "\n".join(lines) + "\n"


def write_audit(
    path: Union[str, Path],
    election: Election,
    winner: Optional[WinnerResult] = None,
    sources: Sequence[str] = (),
) -> Path:
    """Écrit le rapport d'audit dans `path`.

    Returns:
        Chemin du fichier écrit.
    """
    path = Path(path)
    path.write_text(render_audit(election, winner, sources), encoding="utf-8")
    return path

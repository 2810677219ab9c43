"""Attribution des sièges aux candidats.

Scrutins de liste : chaque parti place ses candidats par voix décroissantes
(à égalité, l'ordre de présentation de la liste) jusqu'à épuisement de ses
sièges ou de ses candidats.

NOTE : en liste fermée les candidats ne reçoivent normalement aucune voix
individuelle et l'ordre de la liste devrait primer ; le classement par voix
est conservé tel quel pour les deux types de liste.

Vote direct : les premiers candidats de l'ensemble reçoivent exactement un
siège chacun, jusqu'à `total_seats` élus, élus précédents compris.
"""

from __future__ import annotations

from typing import Iterable, List

from quota_elections.engine.entities import Candidate, Party


def rank_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Candidats par voix décroissantes ; tri stable sur l'ordre de présentation."""
    return sorted(candidates, key=lambda c: c.votes, reverse=True)


def seat_party_candidates(party: Party) -> List[Candidate]:
    """Attribue les sièges du parti à ses candidats les mieux placés.

    Les candidats déjà élus le restent et comptent dans le budget du parti.

    Returns:
        Candidats nouvellement élus, dans l'ordre du classement.
    """
    budget = party.total_seats - len(party.seated_candidates)
    newly_seated = []
    for candidate in rank_candidates(party.candidates):
        if budget <= 0:
            break
        if candidate.has_seat:
            continue
        candidate.allocate_seat()
        newly_seated.append(candidate)
        budget -= 1
    return newly_seated


def seat_direct_candidates(candidates: Iterable[Candidate], total_seats: int) -> List[Candidate]:
    """Vote direct : un siège à chacun des premiers, jusqu'à `total_seats` élus.

    Les candidats déjà élus le restent et comptent dans `total_seats`.

    Returns:
        Candidats nouvellement élus, dans l'ordre du classement.
    """
    candidates = list(candidates)
    budget = total_seats - sum(1 for c in candidates if c.has_seat)
    newly_seated = []
    for candidate in rank_candidates(candidates):
        if budget <= 0:
            break
        if candidate.has_seat:
            continue
        candidate.allocate_seat()
        candidate.seats = 1
        newly_seated.append(candidate)
        budget -= 1
    return newly_seated

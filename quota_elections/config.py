"""Constantes électorales, types de scrutin et paramètres par défaut.

Quatre formats de fichiers de bulletins :
  - CPL : liste fermée (le bulletin désigne un parti)
  - OPL : liste ouverte (le bulletin désigne un candidat, la voix compte aussi pour son parti)
  - MPO : vote direct, une seule marque par bulletin
  - MV  : vote direct, plusieurs marques par bulletin
"""

from __future__ import annotations

from enum import Enum
from typing import Dict


# ---------------------------------------------------------------------------
# Modes de scrutin
# ---------------------------------------------------------------------------

class ElectionKind(Enum):
    """Famille de règles : détermine le comptage et l'allocation."""
    CLOSED_LIST = "closed_list"
    OPEN_LIST = "open_list"
    DIRECT_CANDIDATE = "direct_candidate"


class ElectionType(Enum):
    """Étiquette de scrutin telle qu'elle apparaît en tête des fichiers."""
    CPL = "CPL"
    OPL = "OPL"
    MPO = "MPO"
    MV = "MV"

    @property
    def kind(self) -> ElectionKind:
        return ELECTION_TYPE_KINDS[self]

    @property
    def label(self) -> str:
        return ELECTION_TYPE_LABELS[self]


ELECTION_TYPE_KINDS: Dict[ElectionType, ElectionKind] = {
    ElectionType.CPL: ElectionKind.CLOSED_LIST,
    ElectionType.OPL: ElectionKind.OPEN_LIST,
    ElectionType.MPO: ElectionKind.DIRECT_CANDIDATE,
    ElectionType.MV: ElectionKind.DIRECT_CANDIDATE,
}

ELECTION_TYPE_LABELS: Dict[ElectionType, str] = {
    ElectionType.CPL: "Liste fermée",
    ElectionType.OPL: "Liste ouverte",
    ElectionType.MPO: "Vote direct (marque unique)",
    ElectionType.MV: "Vote direct (marques multiples)",
}


# ---------------------------------------------------------------------------
# Bulletins
# ---------------------------------------------------------------------------

BALLOT_MARK = "1"        # Toute autre valeur = case non cochée
BALLOT_SEPARATOR = ","


# ---------------------------------------------------------------------------
# Départage
# ---------------------------------------------------------------------------

# Tirages indépendants pour départager les ex-aequo en tête des sièges
COIN_TOSS_TRIALS = 1001


# ---------------------------------------------------------------------------
# Monte Carlo par défaut
# ---------------------------------------------------------------------------

MC_DEFAULT_ITERATIONS = 1_000
MC_CONFIDENCE = 0.95


# ---------------------------------------------------------------------------
# Sorties
# ---------------------------------------------------------------------------

DEFAULT_AUDIT_FILENAME = "audit.txt"
AUDIT_RULE_WIDTH = 95

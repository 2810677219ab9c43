"""Modèles Pydantic pour la validation des fichiers de bulletins."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from quota_elections.config import ElectionKind, ElectionType


class PartyListing(BaseModel):
    """Parti déclaré dans un fichier CPL, avec sa liste ordonnée."""
    name: str = Field(min_length=1)
    candidates: List[str] = Field(default_factory=list)


class CandidateListing(BaseModel):
    """Candidat déclaré dans un fichier OPL, MPO ou MV."""
    name: str = Field(min_length=1)
    party: Optional[str] = None
    # party : nom du parti (OPL) ou étiquette courte (MPO/MV, ex. "D")


class BallotFile(BaseModel):
    """Contenu validé d'un fichier de bulletins."""
    election_type: ElectionType
    seats: int = Field(gt=0)
    ballot_count: int = Field(ge=0)
    parties: List[PartyListing] = Field(default_factory=list)
    candidates: List[CandidateListing] = Field(default_factory=list)
    ballots: List[str] = Field(default_factory=list)
    source: Optional[str] = None

    @field_validator("ballots")
    @classmethod
    def drop_blank_lines(cls, v):
        return [line.strip() for line in v if line and line.strip()]

    @model_validator(mode="after")
    def check_slots(self):
        if self.election_type is ElectionType.CPL:
            if not self.parties:
                raise ValueError("un fichier CPL doit déclarer au moins un parti")
        elif not self.candidates:
            raise ValueError(f"un fichier {self.election_type.value} doit déclarer au moins un candidat")

        if self.election_type is ElectionType.OPL:
            orphans = [c.name for c in self.candidates if not c.party]
            if orphans:
                raise ValueError(f"candidats OPL sans parti : {orphans}")
        return self

    @property
    def kind(self) -> ElectionKind:
        return self.election_type.kind

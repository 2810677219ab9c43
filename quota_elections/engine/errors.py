"""Exceptions du moteur d'allocation et du chargement des bulletins."""

from __future__ import annotations


class ElectionError(ValueError):
    """Paramètres d'élection invalides (sièges ≤ 0, voix négatives)."""


class AllocationError(ElectionError):
    """Allocation impossible (quota sur 0 siège, aucune entité à servir)."""


class BallotFileError(ValueError):
    """Fichier de bulletins mal formé ou incompatible avec l'élection en cours."""

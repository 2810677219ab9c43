"""Diagramme hémicycle de l'assemblée élue.

Affiche la composition en sièges sous forme de demi-cercle, avec le seuil
de majorité absolue.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import to_hex

DEFAULT_SEAT_COLOR = "#999999"


def majority_threshold(total_seats: int) -> int:
    """Sièges nécessaires pour la majorité absolue."""
    return total_seats // 2 + 1


def _seat_positions(n_seats: int, n_rows: Optional[int] = None) -> List[Tuple[float, float]]:
    """Calcule les positions (x, y) de chaque siège en demi-cercle.

    Les sièges sont disposés en arcs concentriques de rayon croissant.
    """
    if n_seats <= 0:
        return []
    if n_rows is None:
        n_rows = max(1, min(8, int(np.ceil(np.sqrt(n_seats / 4)))))
    n_rows = min(n_rows, n_seats)

    seats_per_row = []
    remaining = n_seats
    for i in range(n_rows):
        row_seats = max(1, round(remaining / (n_rows - i)))
        seats_per_row.append(row_seats)
        remaining -= row_seats
    seats_per_row[-1] += remaining

    r_min, r_max = 1.5, 4.0
    positions = []
    for row_idx, n_in_row in enumerate(seats_per_row):
        r = r_min + (r_max - r_min) * row_idx / max(1, n_rows - 1)
        for j in range(n_in_row):
            if n_in_row > 1:
                angle = np.pi * (j / (n_in_row - 1))
            else:
                angle = np.pi / 2
            positions.append((r * np.cos(angle), r * np.sin(angle)))

    # Ordre angulaire : chaque parti occupe un secteur contigu
    positions.sort(key=lambda p: -np.arctan2(p[1], p[0]))
    return positions[:n_seats]


def _default_colors(names: List[str]) -> Dict[str, str]:
    cmap = plt.get_cmap("tab10" if len(names) <= 10 else "tab20")
    return {name: to_hex(cmap(i % cmap.N)) for i, name in enumerate(names)}


def plot_hemicycle(
    seats: Dict[str, int],
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (10, 6),
    show_majority_line: bool = True,
    colors: Optional[Dict[str, str]] = None,
    ax: Optional[plt.Axes] = None,
) -> plt.Figure:
    """Dessine un diagramme hémicycle.

    Args:
        seats: dict parti (ou candidat) → nombre de sièges, dans l'ordre
            de placement de gauche à droite.
        title: titre du graphique (par défaut le nombre de sièges).
        figsize: taille de la figure.
        show_majority_line: afficher le seuil de majorité.
        colors: couleurs personnalisées (dict nom → couleur).
        ax: axes matplotlib (crée une figure si None).

    Returns:
        Figure matplotlib.
    """
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)
    else:
        fig = ax.get_figure()

    total = sum(seats.values())
    positions = _seat_positions(total)
    names = list(seats.keys())

    palette = _default_colors(names)
    if colors:
        palette.update({k: v for k, v in colors.items() if k in palette})

    idx = 0
    for name in names:
        color = palette.get(name, DEFAULT_SEAT_COLOR)
        for _ in range(seats.get(name, 0)):
            x, y = positions[idx]
            ax.scatter(x, y, color=color, s=120, edgecolors="white", linewidth=0.5, zorder=3)
            idx += 1

    if show_majority_line and total > 0:
        ax.axhline(y=0, color="black", linewidth=1.5, zorder=1)
        ax.text(0, -0.3, f"Majorité : {majority_threshold(total)} sièges",
                ha="center", va="top", fontsize=10, style="italic")

    legend_patches = [
        mpatches.Patch(color=palette[name], label=f"{name} ({n})")
        for name, n in seats.items()
        if n > 0
    ]
    if legend_patches:
        ax.legend(
            handles=legend_patches,
            loc="lower center",
            bbox_to_anchor=(0.5, -0.15),
            ncol=min(4, len(legend_patches)),
            fontsize=8,
        )

    ax.set_title(title or f"Assemblée élue : {total} sièges", fontsize=14, fontweight="bold")
    ax.set_xlim(-5, 5)
    ax.set_ylim(-0.8, 5)
    ax.set_aspect("equal")
    ax.axis("off")

    fig.tight_layout()
    return fig


def save_hemicycle(seats: Dict[str, int], path: Union[str, Path], **kwargs) -> Path:
    """Dessine l'hémicycle et l'enregistre (format déduit de l'extension)."""
    path = Path(path)
    fig = plot_hemicycle(seats, **kwargs)
    fig.savefig(path)
    plt.close(fig)
    return path

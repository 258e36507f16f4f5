from __future__ import annotations

from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from .core4d import COORD_COLS

# ─── STYLING ────────────────────────────────────────────────────────────────
sns.set_style("whitegrid")


def plot_constellations(frame: pd.DataFrame, pdf_path: str, *, title: Optional[str] = None) -> str:
    """
    Pair plot of the four coordinates, one colour per constellation.

    `frame` needs columns x, y, z, t and constellation (see Constellations.to_frame).
    """
    missing = {*COORD_COLS, "constellation"}.difference(frame.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")
    if frame.empty:
        raise ValueError("nothing to plot: no points")

    d = frame.copy()
    d["constellation"] = d["constellation"].astype(str)
    n_groups = d["constellation"].nunique()

    grid = sns.pairplot(
        d,
        vars=list(COORD_COLS),
        hue="constellation",
        palette=sns.color_palette("hls", n_groups),
        diag_kind="hist",
        plot_kws={"s": 40, "alpha": 0.7, "edgecolor": "k"},
    )
    if n_groups > 20:
        # legend gets unreadable past this
        grid.legend.remove()
    grid.figure.suptitle(title or f"Number of constellations: {n_groups}", y=1.02)
    grid.savefig(pdf_path, dpi=300, bbox_inches="tight")
    plt.close(grid.figure)
    return pdf_path

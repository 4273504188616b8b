# graph_based/layout/fit.py
from __future__ import annotations
from typing import Iterable

from graph_based.utils.types import Position, Transform

FILL = 0.95


def identity() -> Transform:
    return {"scale": 1.0, "translate_x": 0.0, "translate_y": 0.0}


def fit_transform(
    positions: Iterable[Position],
    width: float,
    height: float,
    *,
    padding: float = 60.0,
    min_zoom: float = 0.4,
    max_zoom: float = 2.0,
) -> Transform:
    """
    Zoom/translation qui fait tenir la boîte englobante (élargie de `padding`)
    dans le viewport, remplie à 95 %, puis centrée.

    L'échelle est bornée à [min_zoom, max_zoom] : un nœud isolé n'est pas
    grossi indéfiniment. Aucun point : transform identité.
    """
    pts = list(positions)
    if not pts or width <= 0 or height <= 0:
        return identity()

    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    box_w = (max_x - min_x) + 2 * padding
    box_h = (max_y - min_y) + 2 * padding
    if box_w <= 0 or box_h <= 0:
        return identity()

    scale = FILL / max(box_w / width, box_h / height)
    scale = min(max(scale, min_zoom), max_zoom)
    mid_x = (min_x + max_x) / 2.0
    mid_y = (min_y + max_y) / 2.0
    return {
        "scale": float(scale),
        "translate_x": float(width / 2.0 - scale * mid_x),
        "translate_y": float(height / 2.0 - scale * mid_y),
    }

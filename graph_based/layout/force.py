# graph_based/layout/force.py
"""
Layout par simulation de forces, contraint par niveau.

Forces appliquées à chaque tick (modèle "vitesse + refroidissement") :
  - répulsion n-corps entre toutes les paires ;
  - attraction le long des arêtes vers une distance cible ;
  - rappel vertical vers `top_margin + level * row_height` (layout en couches) ;
  - centrage horizontal faible + recentrage global ;
  - anti-collision (cercles de rayon `collide_radius`).

Le moteur ne dessine rien : il produit des positions, toujours valides après
n'importe quel tick (une simulation non convergée reste rendable).
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from app.core.config import LayoutCfg
from app.core.logging import get_logger
from graph_based.layout.errors import LayoutError
import graph_based.layout.fit as fitting
from graph_based.layout.levels import assign_levels
from graph_based.utils.types import EdgeLike, LevelMap, NodeLike, Position, Transform, edge_ends, node_key

logger = get_logger(__name__)

_GOLDEN_ANGLE = np.pi * (3.0 - np.sqrt(5.0))
_MIN_DIST2 = 1.0


@dataclass
class LayoutResult:
    positions: Dict[str, Position]
    levels: LevelMap
    transform: Transform
    ticks: int
    settled: bool
    alpha: float = 0.0


class ForceLayout:
    """
    Simulation pas à pas. Un objet = une passe de rendu ; pour un nouveau
    graphe, on jette l'objet et on en recrée un.

    Usage :
        sim = ForceLayout(nodes, edges, 800, 600)
        res = sim.run()               # ou sim.tick() depuis un timer hôte
        sim.drag_start("a"); sim.drag_to("a", 10, 20); sim.drag_end("a")
    """

    def __init__(
        self,
        nodes: Sequence[NodeLike],
        edges: Sequence[EdgeLike],
        width: float,
        height: float,
        *,
        cfg: Optional[LayoutCfg] = None,
        layered: bool = True,
        link_distance: Optional[float] = None,
        charge_strength: Optional[float] = None,
        collide_radius: Optional[float] = None,
        seed: Optional[int] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise LayoutError(f"invalid viewport {width}x{height}")
        self.cfg = cfg or LayoutCfg()
        self.width = float(width)
        self.height = float(height)
        self.layered = layered
        self.link_distance = self.cfg.link_distance if link_distance is None else float(link_distance)
        self.charge_strength = self.cfg.charge_strength if charge_strength is None else float(charge_strength)
        self.collide_radius = self.cfg.collide_radius if collide_radius is None else float(collide_radius)
        self._rng = np.random.default_rng(self.cfg.seed if seed is None else seed)

        # -- nœuds (ordre d'entrée, doublons : dernier gagne) --
        self.ids: List[str] = []
        index: Dict[str, int] = {}
        given: Dict[str, Tuple[Optional[float], Optional[float]]] = {}
        for n in nodes:
            k = node_key(n)
            if k is None:
                continue
            if k not in index:
                index[k] = len(self.ids)
                self.ids.append(k)
            given[k] = _given_xy(n)
        self._index = index
        count = len(self.ids)

        # -- arêtes valides seulement (les pendantes sont ignorées ici) --
        links: List[Tuple[int, int]] = []
        for e in edges:
            ends = edge_ends(e)
            if ends is None or ends[0] not in index or ends[1] not in index or ends[0] == ends[1]:
                continue
            links.append((index[ends[0]], index[ends[1]]))
        self._src = np.array([s for s, _ in links], dtype=int)
        self._dst = np.array([t for _, t in links], dtype=int)
        degree = np.zeros(count)
        for s, t in links:
            degree[s] += 1
            degree[t] += 1
        if links:
            ds, dt = degree[self._src], degree[self._dst]
            self._link_strength = 1.0 / np.minimum(ds, dt)
            self._link_bias = ds / (ds + dt)
        else:
            self._link_strength = np.zeros(0)
            self._link_bias = np.zeros(0)

        # -- niveaux et cibles verticales --
        self.levels: LevelMap = assign_levels(nodes, edges)
        max_level = max(list(self.levels.values()) + [1])
        self.row_height = self.height / (max_level + 2)
        self._level = np.array([self.levels.get(i, 0) for i in self.ids], dtype=float)
        self._target_y = self.cfg.top_margin + self._level * self.row_height * self.cfg.row_spread

        # -- positions initiales --
        self.pos = np.zeros((count, 2))
        self.vel = np.zeros((count, 2))
        cx, cy = self.width / 2.0, self.height / 2.0
        for i, k in enumerate(self.ids):
            gx, gy = given[k]
            if layered:
                x = cx + (self._rng.random() - 0.5) * self.cfg.jitter
                y = self._target_y[i]
            else:
                # phyllotaxis autour du centre
                r = 10.0 * np.sqrt(0.5 + i)
                a = i * _GOLDEN_ANGLE
                x, y = cx + r * np.cos(a), cy + r * np.sin(a)
            self.pos[i] = (gx if gx is not None else x, gy if gy is not None else y)

        self._fixed = np.full((count, 2), np.nan)
        self._dragging: Optional[str] = None

        self.alpha = 1.0
        self.alpha_target = 0.0
        self.ticks = 0

    # ------------------------------------------------------------------ état

    @property
    def settled(self) -> bool:
        return self.alpha < self.cfg.alpha_min

    @property
    def dragging(self) -> Optional[str]:
        return self._dragging

    def positions(self) -> Dict[str, Position]:
        return {k: (float(self.pos[i, 0]), float(self.pos[i, 1])) for i, k in enumerate(self.ids)}

    def fit_transform(self, padding: Optional[float] = None) -> Transform:
        return fitting.fit_transform(
            list(self.positions().values()),
            self.width,
            self.height,
            padding=self.cfg.padding if padding is None else padding,
            min_zoom=self.cfg.min_zoom,
            max_zoom=self.cfg.max_zoom,
        )

    # ----------------------------------------------------------- simulation

    def tick(self) -> None:
        """Avance la simulation d'un pas."""
        self.alpha += (self.alpha_target - self.alpha) * self.cfg.alpha_decay
        if len(self.ids) == 0:
            self.ticks += 1
            return

        self._apply_link()
        self._apply_charge()
        if self.layered:
            self._apply_axis(axis=1, target=self._target_y, strength=self.cfg.y_strength)
            self._apply_axis(axis=0, target=np.full(len(self.ids), self.width / 2.0), strength=self.cfg.x_strength)
        self._apply_collide()

        pinned = ~np.isnan(self._fixed)
        self.vel *= 1.0 - self.cfg.velocity_decay
        self.vel[pinned] = 0.0
        self.pos += self.vel
        self.pos[pinned] = self._fixed[pinned]
        self._apply_center(free=~pinned.any(axis=1))
        self.ticks += 1

    def run(self, max_ticks: Optional[int] = None) -> LayoutResult:
        """Tick jusqu'au refroidissement (alpha < alpha_min) ou épuisement du budget."""
        budget = self.cfg.max_ticks if max_ticks is None else max_ticks
        done = 0
        while done < budget and not self.settled:
            self.tick()
            done += 1
        if not self.settled:
            logger.debug("layout not settled after %d ticks (alpha=%.4f)", self.ticks, self.alpha)
        return self.result()

    def result(self) -> LayoutResult:
        return LayoutResult(
            positions=self.positions(),
            levels=dict(self.levels),
            transform=self.fit_transform(),
            ticks=self.ticks,
            settled=self.settled,
            alpha=self.alpha,
        )

    # ----------------------------------------------------------------- drag

    def drag_start(self, node_id: str) -> None:
        if self._dragging is not None and self._dragging != node_id:
            raise LayoutError(f"node {self._dragging!r} is already being dragged")
        i = self._node_index(node_id)
        self._dragging = node_id
        self.alpha_target = 0.3
        self._fixed[i] = self.pos[i]

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        self._check_drag(node_id)
        i = self._index[node_id]
        self._fixed[i] = (float(x), float(y))
        self.pos[i] = self._fixed[i]
        self.vel[i] = 0.0

    def drag_end(self, node_id: str) -> None:
        self._check_drag(node_id)
        i = self._index[node_id]
        self._fixed[i] = np.nan
        self._dragging = None
        self.alpha_target = 0.0

    def _node_index(self, node_id: str) -> int:
        if node_id not in self._index:
            raise LayoutError(f"unknown node {node_id!r}")
        return self._index[node_id]

    def _check_drag(self, node_id: str) -> None:
        if self._dragging != node_id:
            raise LayoutError(f"node {node_id!r} is not being dragged")

    # --------------------------------------------------------------- forces

    def _apply_link(self) -> None:
        if self._src.size == 0:
            return
        nxt = self.pos + self.vel
        d = nxt[self._dst] - nxt[self._src]
        zero = ~d.any(axis=1)
        if zero.any():
            d[zero] = self._jiggle((int(zero.sum()), 2))
        length = np.linalg.norm(d, axis=1)
        k = (length - self.link_distance) / length * self.alpha * self._link_strength
        d *= k[:, None]
        # accumulation séquentielle (np.add.at gère les indices répétés)
        np.add.at(self.vel, self._dst, -d * self._link_bias[:, None])
        np.add.at(self.vel, self._src, d * (1.0 - self._link_bias)[:, None])

    def _apply_charge(self) -> None:
        n = len(self.ids)
        if n < 2:
            return
        delta = self.pos[None, :, :] - self.pos[:, None, :]   # delta[i, j] = pos[j] - pos[i]
        dist2 = (delta ** 2).sum(axis=2)
        same = (dist2 == 0) & ~np.eye(n, dtype=bool)
        if same.any():
            delta[same] = self._jiggle((int(same.sum()), 2))
            dist2 = (delta ** 2).sum(axis=2)
        dist2 = np.where(dist2 < _MIN_DIST2, np.sqrt(_MIN_DIST2 * dist2), dist2)
        np.fill_diagonal(dist2, np.inf)
        w = self.charge_strength * self.alpha / dist2
        self.vel += (delta * w[:, :, None]).sum(axis=1)

    def _apply_axis(self, *, axis: int, target: np.ndarray, strength: float) -> None:
        self.vel[:, axis] += (target - self.pos[:, axis]) * strength * self.alpha

    def _apply_collide(self) -> None:
        n = len(self.ids)
        if n < 2 or self.collide_radius <= 0:
            return
        r = 2.0 * self.collide_radius
        nxt = self.pos + self.vel
        delta = nxt[:, None, :] - nxt[None, :, :]           # delta[i, j] = nxt[i] - nxt[j]
        dist2 = (delta ** 2).sum(axis=2)
        overlap = np.triu(dist2 < r * r, k=1)
        if not overlap.any():
            return
        ii, jj = np.nonzero(overlap)
        d = delta[ii, jj]
        zero = ~d.any(axis=1)
        if zero.any():
            d[zero] = self._jiggle((int(zero.sum()), 2))
        length = np.linalg.norm(d, axis=1)
        push = d * ((r - length) / length)[:, None] * 0.5    # rayons égaux : partage 50/50
        np.add.at(self.vel, ii, push)
        np.add.at(self.vel, jj, -push)

    def _apply_center(self, free: np.ndarray) -> None:
        if not free.any():
            return
        shift = self.pos[free].mean(axis=0) - (self.width / 2.0, self.height / 2.0)
        self.pos[free] -= shift

    def _jiggle(self, shape: Tuple[int, int]) -> np.ndarray:
        return (self._rng.random(shape) - 0.5) * 1e-6


def _given_xy(n: NodeLike) -> Tuple[Optional[float], Optional[float]]:
    """Coordonnées déjà connues (relayout incrémental), sinon (None, None)."""
    if isinstance(n, dict):
        x, y = n.get("x"), n.get("y")
    else:
        x, y = getattr(n, "x", None), getattr(n, "y", None)
    ok = all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (x, y))
    return (float(x), float(y)) if ok else (None, None)


def layout_graph(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    width: float,
    height: float,
    **kwargs,
) -> LayoutResult:
    """Raccourci : construit la simulation et la fait tourner jusqu'au bout."""
    max_ticks = kwargs.pop("max_ticks", None)
    return ForceLayout(nodes, edges, width, height, **kwargs).run(max_ticks=max_ticks)

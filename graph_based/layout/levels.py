# graph_based/layout/levels.py
from __future__ import annotations
from collections import deque
from typing import Any, Dict, List, Sequence, Tuple

from graph_based.utils.types import EdgeLike, LevelMap, NodeLike, edge_ends, node_key


def assign_levels(nodes: Sequence[NodeLike], edges: Sequence[EdgeLike]) -> LevelMap:
    """
    Profondeur "topologique" de chaque nœud (indice de layout vertical).

    - degré entrant calculé sur les arêtes dont les deux extrémités existent
      (les arêtes pendantes ne propagent rien) ;
    - file initialisée avec tous les nœuds de degré entrant 0 (niveau 0),
      dans l'ordre d'entrée ; à défaut (cycle pur), le premier nœud ;
    - parcours en largeur : un nœud défilé non visité prend le niveau de la
      file, puis empile ses cibles non visitées à niveau+1 ;
    - nœuds jamais atteints : niveau 0.

    Ni plus court ni plus long chemin : seulement déterministe pour un ordre
    donné de nœuds/arêtes, et termine sur les cycles.
    """
    ids: List[str] = []
    seen = set()
    for n in nodes:
        k = node_key(n)
        if k is not None and k not in seen:
            seen.add(k)
            ids.append(k)

    indegree: Dict[str, int] = {i: 0 for i in ids}
    adj: Dict[str, List[str]] = {i: [] for i in ids}
    for e in edges:
        ends = edge_ends(e)
        if ends is None:
            continue
        src, dst = ends
        if src not in adj or dst not in indegree:
            continue
        indegree[dst] += 1
        adj[src].append(dst)

    queue: deque[Tuple[str, int]] = deque((i, 0) for i in ids if indegree[i] == 0)
    if not queue and ids:
        queue.append((ids[0], 0))

    levels: LevelMap = {}
    while queue:
        nid, depth = queue.popleft()
        if nid in levels:
            continue
        levels[nid] = depth
        for child in adj[nid]:
            if child not in levels:
                queue.append((child, depth + 1))

    for i in ids:
        levels.setdefault(i, 0)
    return levels


def apply_levels(graph: Any) -> Any:
    """Copie du graphe (modèle pydantic) avec `level` renseigné sur chaque nœud."""
    levels = assign_levels(graph.nodes, graph.edges)
    nodes = [n.model_copy(update={"level": levels.get(n.id, 0)}) for n in graph.nodes]
    return graph.model_copy(update={"nodes": nodes})

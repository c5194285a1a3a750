"""Layered (Sugiyama-style) layout of a job dependency graph.

Phases:
  1. Rank assignment   (longest path from a source, via ``topo_levels``)
  2. In-rank ordering  (barycenter sweeps, keep the ordering with fewest crossings)
  3. Coordinates       (left-to-right: rank -> x, in-rank order -> y)
  4. Edge endpoints    (source right-middle -> target left-middle)

Everything is a pure function of the graph and the size hints; iteration only
ever follows document order, so equal inputs give equal results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from . import settings
from .dag import DependencyGraph, edge_id, topo_levels


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class NodeLayout:
    """A positioned job node. ``position`` is the top-left corner."""

    id: str
    label: str
    rank: int
    order: int
    position: Point
    size: Size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "rank": self.rank,
            "order": self.order,
            "size": self.size.to_dict(),
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class EdgeLayout:
    id: str
    source: str
    target: str
    start: Point
    end: Point

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "points": [self.start.to_dict(), self.end.to_dict()],
        }


@dataclass(frozen=True)
class LayoutResult:
    """Render-ready nodes (document order) and edges (declaration order)."""

    nodes: Tuple[NodeLayout, ...]
    edges: Tuple[EdgeLayout, ...]

    def node(self, node_id: str) -> NodeLayout:
        for n in self.nodes:
            if n.id == node_id:
                return n
        raise KeyError(node_id)

    def rank_of(self, node_id: str) -> int:
        return self.node(node_id).rank

    def ranks(self) -> List[List[str]]:
        """Node ids grouped per rank, each group in final in-rank order."""
        out: List[List[NodeLayout]] = []
        for n in self.nodes:
            while len(out) <= n.rank:
                out.append([])
            out[n.rank].append(n)
        return [[n.id for n in sorted(group, key=lambda n: n.order)] for group in out]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


# ─── Size hints ───────────────────────────────────────────────────────────────


def size_hints(
    graph: DependencyGraph,
    node_width: float = settings.NODE_WIDTH,
    base_height: float = settings.BASE_HEIGHT,
) -> Dict[str, Size]:
    """Width is fixed; height grows with the job's step count (at least one row)."""
    return {
        n: Size(width=node_width, height=base_height * max(1, len(graph.job(n).steps)))
        for n in graph.nodes
    }


# ─── Crossing Minimization (Barycenter) ───────────────────────────────────────


def count_crossings(ordering: List[List[str]], graph: DependencyGraph) -> int:
    """
    Count pairwise edge crossings for an ordering.

    An edge that skips ranks is split into one segment per adjacent rank
    pair it passes through; its position at an intermediate rank is
    interpolated linearly between its endpoints' positions. Segments are
    compared only against segments between the same two ranks. Segments
    sharing an endpoint never count as crossing.
    """
    rank: Dict[str, int] = {}
    pos: Dict[str, int] = {}
    for r, level in enumerate(ordering):
        for i, n in enumerate(level):
            rank[n] = r
            pos[n] = i

    gaps: Dict[int, List[Tuple[float, float]]] = {}
    for src, tgt in graph.edges:
        r0, r1 = rank[src], rank[tgt]
        p0, p1 = pos[src], pos[tgt]
        span = r1 - r0
        for k in range(span):
            at = p0 + (p1 - p0) * k / span
            nxt = p0 + (p1 - p0) * (k + 1) / span
            gaps.setdefault(r0 + k, []).append((at, nxt))

    total = 0
    for edges in gaps.values():
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                (a0, a1), (b0, b1) = edges[i], edges[j]
                if (a0 - b0) * (a1 - b1) < 0:
                    total += 1
    return total


def _sort_by_barycenter(
    level: List[str],
    neighbours: Callable[[str], List[str]],
    pos: Mapping[str, int],
    graph: DependencyGraph,
) -> List[str]:
    """Mean position of already-placed neighbours; a node with none keeps its own slot."""

    def key(n: str) -> Tuple[float, int]:
        placed = [pos[m] for m in neighbours(n) if m in pos]
        weight = sum(placed) / len(placed) if placed else float(pos[n])
        return (weight, graph.index_of(n))

    return sorted(level, key=key)


def order_ranks(
    graph: DependencyGraph,
    levels: List[List[str]],
    passes: int = settings.ORDERING_PASSES,
) -> List[List[str]]:
    """Reorder nodes inside each rank to reduce crossings.

    Even passes sweep forward (weights from predecessors), odd passes sweep
    backward (weights from successors). The first ordering with the fewest
    crossings wins, starting from plain document order.
    """
    ordering = [list(level) for level in levels]
    best = [list(level) for level in ordering]
    best_crossings = count_crossings(best, graph)

    for p in range(passes):
        if best_crossings == 0:
            break

        pos: Dict[str, int] = {n: i for level in ordering for i, n in enumerate(level)}
        if p % 2 == 0:
            sweep = range(1, len(ordering))
            neighbours = graph.predecessors
        else:
            sweep = range(len(ordering) - 2, -1, -1)
            neighbours = graph.successors

        for r in sweep:
            ordering[r] = _sort_by_barycenter(ordering[r], neighbours, pos, graph)
            pos.update((n, i) for i, n in enumerate(ordering[r]))

        crossings = count_crossings(ordering, graph)
        if crossings < best_crossings:
            best = [list(level) for level in ordering]
            best_crossings = crossings

    return best


# ─── Coordinate Assignment ────────────────────────────────────────────────────


def layout_graph(
    graph: DependencyGraph,
    sizes: Optional[Mapping[str, Size]] = None,
    *,
    rank_sep: float = settings.RANK_SEP,
    node_sep: float = settings.NODE_SEP,
    passes: int = settings.ORDERING_PASSES,
) -> LayoutResult:
    """Lay out an acyclic dependency graph left-to-right.

    Columns advance by the widest node of the previous column plus
    ``rank_sep``. Nodes in a column stack by height plus ``node_sep`` and each
    column is centred vertically against the tallest one.
    """
    if sizes is None:
        sizes = size_hints(graph)
    default = Size(width=settings.NODE_WIDTH, height=settings.BASE_HEIGHT)

    def size_of(n: str) -> Size:
        return sizes.get(n, default)

    ordering = order_ranks(graph, topo_levels(graph), passes=passes)

    col_widths = [max((size_of(n).width for n in level), default=0.0) for level in ordering]
    col_heights = [
        sum(size_of(n).height for n in level) + node_sep * max(0, len(level) - 1)
        for level in ordering
    ]
    tallest = max(col_heights, default=0.0)

    placed: Dict[str, NodeLayout] = {}
    x = 0.0
    for r, level in enumerate(ordering):
        y = (tallest - col_heights[r]) / 2
        for order, n in enumerate(level):
            size = size_of(n)
            placed[n] = NodeLayout(
                id=n,
                label=graph.job(n).label,
                rank=r,
                order=order,
                position=Point(x=x + (col_widths[r] - size.width) / 2, y=y),
                size=size,
            )
            y += size.height + node_sep
        x += col_widths[r] + rank_sep

    edges: List[EdgeLayout] = []
    for src, tgt in graph.edges:
        a, b = placed[src], placed[tgt]
        edges.append(
            EdgeLayout(
                id=edge_id(src, tgt),
                source=src,
                target=tgt,
                start=Point(x=a.position.x + a.size.width, y=a.position.y + a.size.height / 2),
                end=Point(x=b.position.x, y=b.position.y + b.size.height / 2),
            )
        )

    return LayoutResult(nodes=tuple(placed[n] for n in graph.nodes), edges=tuple(edges))

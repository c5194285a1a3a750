# dag.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set, Tuple

import networkx as nx

from .errors import CycleDetectedError, DanglingReference, DanglingReferenceError
from .model import Job, Workflow


Edge = Tuple[str, str]  # (needed job, dependent job)


def edge_id(source: str, target: str) -> str:
    # job ids cannot contain ">" (see schema.JOB_ID_PATTERN), so ids are unique
    return f"{source}->{target}"


@dataclass(frozen=True)
class DependencyGraph:
    """
    Jobs as nodes, `needs` as edges pointing from the needed job to the job
    that needs it. Only ever built by `build_graph`, so it is acyclic and
    every edge endpoint is a node.

    `digraph` is frozen; node attributes carry `index` (document order) and
    `job`. `edge_list` keeps the order edges were declared in.
    """
    digraph: nx.DiGraph
    edge_list: Tuple[Edge, ...]

    @property
    def nodes(self) -> Tuple[str, ...]:
        return tuple(self.digraph.nodes)

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self.edge_list

    def __len__(self) -> int:
        return self.digraph.number_of_nodes()

    def __contains__(self, node: object) -> bool:
        return node in self.digraph

    def job(self, node: str) -> Job:
        return self.digraph.nodes[node]["job"]

    def index_of(self, node: str) -> int:
        return self.digraph.nodes[node]["index"]

    def predecessors(self, node: str) -> List[str]:
        return list(self.digraph.predecessors(node))

    def successors(self, node: str) -> List[str]:
        return list(self.digraph.successors(node))


def build_graph(workflow: Workflow) -> DependencyGraph:
    """
    Build the dependency graph of a validated workflow.

    Raises:
      DanglingReferenceError: listing every `needs` entry naming an unknown job
      CycleDetectedError: for the first cycle found
    """
    g = nx.DiGraph()
    for idx, (job_id, job) in enumerate(workflow.jobs.items()):
        g.add_node(job_id, index=idx, job=job)

    edges: List[Edge] = []
    dangling: List[DanglingReference] = []
    for job in workflow.jobs.values():
        for need in job.needs:
            if need not in g:
                dangling.append(DanglingReference(job_id=job.id, missing_need=need))
                continue
            # Edge need -> job (need must run before job)
            edges.append((need, job.id))

    if dangling:
        raise DanglingReferenceError(dangling)

    g.add_edges_from(edges)

    cycle = find_cycle(g)
    if cycle is not None:
        raise CycleDetectedError(cycle)

    return DependencyGraph(digraph=nx.freeze(g), edge_list=tuple(edges))


def find_cycle(g: nx.DiGraph) -> Optional[List[str]]:
    """
    Depth-first search tracking the current path.

    Returns the first cycle found as [n0, n1, ..., n0], or None. Roots are
    tried in node order and successors in insertion order, so the answer is
    stable for a given document.

    Uses an explicit stack of (node, successor iterator) frames so long
    `needs` chains do not hit the interpreter recursion limit.
    """
    done: Set[str] = set()
    path: List[str] = []
    on_path: Set[str] = set()

    for root in g.nodes:
        if root in done:
            continue

        path.append(root)
        on_path.add(root)
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(g.successors(root)))]

        while stack:
            node, successors = stack[-1]
            nxt = next(successors, None)
            if nxt is None:
                stack.pop()
                path.pop()
                on_path.discard(node)
                done.add(node)
                continue
            if nxt in on_path:
                return path[path.index(nxt):] + [nxt]
            if nxt not in done:
                path.append(nxt)
                on_path.add(nxt)
                stack.append((nxt, iter(g.successors(nxt))))

    return None


def topo_levels(graph: DependencyGraph) -> List[List[str]]:
    """
    Convert the DAG into topological "levels" (ranks).

    A node is released once all of its predecessors are placed, so its level
    is the length of the longest path reaching it from a source. Within a
    level nodes keep document order.
    """
    indeg: Dict[str, int] = {n: graph.digraph.in_degree(n) for n in graph.nodes}
    q = deque(n for n in graph.nodes if indeg[n] == 0)

    levels: List[List[str]] = []
    processed = 0

    while q:
        level_size = len(q)
        level: List[str] = []

        for _ in range(level_size):
            node = q.popleft()
            level.append(node)
            processed += 1

            for child in graph.successors(node):
                indeg[child] -= 1
                if indeg[child] == 0:
                    q.append(child)

        level.sort(key=graph.index_of)
        levels.append(level)

    if processed != len(indeg):
        remaining = [n for n, d in indeg.items() if d > 0]
        raise ValueError(f"DAG has a cycle. Stuck nodes: {remaining}")

    return levels

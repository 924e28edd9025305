"""
Circular import detection over the file relation graph.

Only files that export something another file really uses, and that still
import a surviving file, can anchor a reported cycle. The graph is pruned to
that fixed point first, then a depth-first walk enumerates cycles. Each node
is expanded once, so every edge contributes to at most one cycle.
"""

import logging

import networkx as nx

from ..models.analysis_models import AnalysisResult, FileRelation

logger = logging.getLogger(__name__)

WHITE, GREY, BLACK = 0, 1, 2


def build_import_graph(relations: list[FileRelation]) -> nx.DiGraph:
    """Directed graph of file imports; nodes carry whether the file has used exports."""
    graph = nx.DiGraph()
    for relation in relations:
        graph.add_node(relation.file, live=relation.has_used_exports())
    for relation in relations:
        for target in relation.imports:
            graph.add_edge(relation.file, target)
    return graph


def prune_graph(graph: nx.DiGraph) -> nx.DiGraph:
    """Remove files without used exports or without imports until nothing changes."""
    pruned = graph.copy()
    passes = 0
    while True:
        dead = [
            node
            for node in pruned.nodes
            if not pruned.nodes[node].get("live", False) or pruned.out_degree(node) == 0
        ]
        if not dead:
            break
        pruned.remove_nodes_from(dead)
        passes += 1

    logger.debug("Pruned import graph to %d files in %d passes", pruned.number_of_nodes(), passes)
    return pruned


def find_cycles(graph: nx.DiGraph) -> list[list[str]]:
    """Enumerate import cycles with a white/grey/black depth-first walk.

    Reaching a grey node (one on the current path) records the path from that
    node onwards. Self-imports produce a one-file path and are not cycles.
    """
    indexed = nx.convert_node_labels_to_integers(graph, label_attribute="path")
    paths = [indexed.nodes[i]["path"] for i in range(indexed.number_of_nodes())]
    adjacency = [list(indexed.successors(i)) for i in range(len(paths))]
    color = [WHITE] * len(paths)

    cycles = []
    for root in range(len(paths)):
        if color[root] != WHITE:
            continue

        color[root] = GREY
        path = [root]
        stack = [iter(adjacency[root])]
        while stack:
            target = next(stack[-1], None)
            if target is None:
                stack.pop()
                color[path.pop()] = BLACK
                continue

            if color[target] == GREY:
                cycle = path[path.index(target) :]
                if len(cycle) > 1:
                    cycles.append([paths[node] for node in cycle])
            elif color[target] == WHITE:
                color[target] = GREY
                path.append(target)
                stack.append(iter(adjacency[target]))

    return cycles


def attach_cycles(cycles: list[list[str]], results: list[AnalysisResult]) -> None:
    """Store each cycle's remainder on its anchor (first) file's result."""
    by_file = {result.file: result for result in results}
    for cycle in cycles:
        anchor, chain = cycle[0], cycle[1:]
        if not chain:
            continue
        result = by_file.get(anchor)
        if result is None:
            result = AnalysisResult(file=anchor)
            results.append(result)
            by_file[anchor] = result
        result.circular_import_chain = list(chain)


def detect_circular_imports(
    relations: list[FileRelation],
    results: list[AnalysisResult],
    enabled: bool,
) -> tuple[list[AnalysisResult], int]:
    """Add circular import chains to the results.

    Args:
        relations: File relations of the run
        results: Unused-export results; cycle anchors are added or updated in place
        enabled: When False the results pass through untouched

    Returns:
        Tuple of (results, number of cycles found)
    """
    if not enabled:
        return results, 0

    pruned = prune_graph(build_import_graph(relations))
    if pruned.number_of_nodes() == 0:
        logger.debug("Found circular imports: 0")
        return results, 0

    cycles = find_cycles(pruned)
    attach_cycles(cycles, results)
    logger.debug("Found circular imports: %d", len(cycles))
    return results, len(cycles)

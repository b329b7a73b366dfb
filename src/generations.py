"""Generation (row) assignment for people in a kinship graph."""

import logging

import networkx as nx

from graph import parent_child_edges, partnership_edges

logger = logging.getLogger(__name__)


def normalize_generations(generations: dict[str, int]) -> dict[str, int]:
    """Shift generations so that the smallest one is 0."""
    if not generations:
        return {}
    lowest = min(generations.values())
    if lowest == 0:
        return dict(generations)
    return {person_id: generation - lowest for person_id, generation in generations.items()}


def assign_generations(G: nx.MultiDiGraph) -> dict[str, int]:
    """
    Assign every person an integer generation by capped fixed-point relaxation.

    Every person starts at 0. Each pass pushes children at least one row below
    their parents and lifts both partners to the deeper of their two rows. Passes
    repeat until nothing changes, or until max(8, 8 * people) passes have run.
    A parent/child cycle never converges and simply stops at the cap.

    Returns:
        Mapping of person id to generation, normalized so the minimum is 0
    """
    generations = {person_id: 0 for person_id in G.nodes}
    parent_child = parent_child_edges(G)
    partners = partnership_edges(G)

    max_iterations = max(8, G.number_of_nodes() * 8)
    for iteration in range(max_iterations):
        changed = False

        for parent, child in parent_child:
            next_generation = generations[parent] + 1
            if next_generation > generations[child]:
                generations[child] = next_generation
                changed = True

        for a, b in partners:
            synced = max(generations[a], generations[b])
            if generations[a] != synced:
                generations[a] = synced
                changed = True
            if generations[b] != synced:
                generations[b] = synced
                changed = True

        if not changed:
            logger.debug("Generations converged after %d passes", iteration + 1)
            break
    else:
        logger.debug("Generation assignment hit the %d pass cap", max_iterations)

    return normalize_generations(generations)

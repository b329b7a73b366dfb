"""Integrity checks for family tree layout input."""

from collections import Counter

import networkx as nx

from models import PARENT_CHILD, PARTNERSHIP, PersonInput, RelationshipInput


def validate_layout_input(
    people: list[PersonInput], relationships: list[RelationshipInput]
) -> list[str]:
    """
    Validate people and relationships before layout for:
    - Relationships pointing at unknown people
    - Duplicate relationship ids and self-relationships
    - Cycles in parent-child relationships
    - People with more than two parents
    - Impossible ages (child born before parent)

    The layout itself tolerates all of these; this only reports them.

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    person_by_id = {person.id: person for person in people}

    # Check duplicate ids
    for rel_id, count in Counter(rel.id for rel in relationships).items():
        if count > 1:
            warnings.append(f"Duplicate relationship id {rel_id!r} used {count} times")

    valid: list[RelationshipInput] = []
    for rel in relationships:
        if rel.type not in (PARENT_CHILD, PARTNERSHIP):
            warnings.append(f"Relationship {rel.id!r} has unknown type {rel.type!r}")
            continue
        missing = [pid for pid in (rel.source, rel.target) if pid not in person_by_id]
        if missing:
            warnings.append(f"Relationship {rel.id!r} references unknown people: {missing}")
            continue
        if rel.source == rel.target:
            warnings.append(f"Relationship {rel.id!r} links {rel.source!r} to themselves")
            continue
        valid.append(rel)

    # Create a graph with only parent_child edges for cycle detection
    parent_edges = [(rel.source, rel.target) for rel in valid if rel.type == PARENT_CHILD]
    parent_graph = nx.DiGraph(parent_edges)

    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    # Only two parents per child are drawn
    for child_id in sorted(parent_graph.nodes):
        parent_ids = sorted(parent_graph.predecessors(child_id))
        if len(parent_ids) > 2:
            warnings.append(
                f"{person_by_id[child_id].display_name} has {len(parent_ids)} parents; "
                f"only {parent_ids[:2]} are connected"
            )

    # Check for impossible ages (child born before parent)
    for parent_id, child_id in parent_edges:
        parent = person_by_id[parent_id]
        child = person_by_id[child_id]
        if isinstance(parent.birth_year, int) and isinstance(child.birth_year, int):
            if child.birth_year < parent.birth_year:
                warnings.append(
                    f"Impossible: {child.display_name} born before parent {parent.display_name}"
                )

    return warnings

"""NetworkX kinship graph building and lookups."""

import networkx as nx

from models import PARENT_CHILD, PARTNERSHIP, PersonInput, RelationshipInput


def build_kinship_graph(
    people: list[PersonInput], relationships: list[RelationshipInput]
) -> nx.MultiDiGraph:
    """
    Build a NetworkX multigraph from people and relationships.

    Each relationship becomes an edge keyed by its id, carrying its type and its
    position in the input list. Relationships that reference an unknown person
    are dropped; the graph is allowed to be incomplete while it is being edited.

    Args:
        people: Person records, one node each
        relationships: parent_child (source = parent) and partnership edges

    Returns:
        A MultiDiGraph whose nodes carry the original PersonInput under "person"
    """
    G = nx.MultiDiGraph()

    # Add nodes (persons)
    for index, person in enumerate(people):
        G.add_node(person.id, person=person, index=index)

    # Add edges (relationships)
    for order, rel in enumerate(relationships):
        if rel.type not in (PARENT_CHILD, PARTNERSHIP):
            continue
        if rel.source not in G or rel.target not in G:
            continue
        G.add_edge(rel.source, rel.target, key=rel.id, relationship_type=rel.type, order=order)

    return G


def _edges_of_type(G: nx.MultiDiGraph, relationship_type: str) -> list[tuple[str, str]]:
    edges = [
        (data["order"], u, v)
        for u, v, data in G.edges(data=True)
        if data.get("relationship_type") == relationship_type
    ]
    # Input order, not adjacency order
    return [(u, v) for _, u, v in sorted(edges, key=lambda item: item[0])]


def parent_child_edges(G: nx.MultiDiGraph) -> list[tuple[str, str]]:
    """Return (parent, child) pairs in input order."""
    return _edges_of_type(G, PARENT_CHILD)


def partnership_edges(G: nx.MultiDiGraph) -> list[tuple[str, str]]:
    """Return (source, target) partner pairs in input order."""
    return _edges_of_type(G, PARTNERSHIP)


def parents_by_child(G: nx.MultiDiGraph) -> dict[str, list[str]]:
    """Map each child to its distinct parents, in the order they were first seen."""
    parents: dict[str, list[str]] = {}
    for parent, child in parent_child_edges(G):
        known = parents.setdefault(child, [])
        if parent not in known:
            known.append(parent)
    return parents


def partners_by_person(G: nx.MultiDiGraph) -> dict[str, list[str]]:
    """Map each person to their distinct partners (both directions)."""
    partners: dict[str, list[str]] = {}
    for a, b in partnership_edges(G):
        for person_id, partner_id in ((a, b), (b, a)):
            known = partners.setdefault(person_id, [])
            if partner_id not in known:
                known.append(partner_id)
    return partners

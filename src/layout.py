"""Family tree layout: generations, packed rows, and routed connectors."""

import logging

from config import DEFAULT_CONFIG, LayoutConfig
from generations import assign_generations
from graph import build_kinship_graph, parents_by_child, partners_by_person, partnership_edges
from grouping import group_families
from models import Bounds, LayoutResult, PersonInput, PositionedPerson, RelationshipInput
from packing import center_rows, pack_rows
from routing import route_edges

logger = logging.getLogger(__name__)


def compute_bounds(nodes: list[PositionedPerson], config: LayoutConfig = DEFAULT_CONFIG) -> Bounds:
    """Smallest canvas that holds every card plus padding, never below the configured floor."""
    if not nodes:
        return Bounds(width=config.min_width, height=config.min_height)

    min_x = min(node.x for node in nodes)
    max_x = max(node.x + config.node_width for node in nodes)
    min_y = min(node.y for node in nodes)
    max_y = max(node.y + config.node_height for node in nodes)

    return Bounds(
        width=max(config.min_width, max_x - min_x + config.side_padding * 2),
        height=max(config.min_height, max_y - min_y + config.top_padding * 2),
    )


def _position_people(
    people: list[PersonInput],
    generations: dict[str, int],
    left_x: dict[str, float],
    parents: dict[str, list[str]],
    partners: dict[str, list[str]],
    config: LayoutConfig,
) -> list[PositionedPerson]:
    # Global shift so that the leftmost card sits at side_padding and the top row at top_padding
    shift_x = config.side_padding - min(left_x.get(person.id, 0) for person in people)
    shift_y = config.top_padding - min(
        generations.get(person.id, 0) * config.row_height for person in people
    )

    nodes = []
    for person in people:
        generation = generations.get(person.id, 0)
        parent_count = len(parents.get(person.id, []))
        spouse_count = len(partners.get(person.id, []))
        x = left_x.get(person.id, 0) + shift_x
        y = generation * config.row_height + shift_y

        nodes.append(
            PositionedPerson(
                id=person.id,
                first_name=person.first_name,
                last_name=person.last_name,
                avatar_url=person.avatar_url,
                avatar_zoom=person.avatar_zoom,
                avatar_focus_x=person.avatar_focus_x,
                avatar_focus_y=person.avatar_focus_y,
                birth_year=person.birth_year,
                is_alive=person.is_alive,
                is_claimed=person.is_claimed,
                generation=generation,
                x=x,
                y=y,
                center_x=x + config.node_width / 2,
                center_y=y + config.node_height / 2,
                parent_count=parent_count,
                spouse_count=spouse_count,
                can_add_parent=parent_count < 2,
                can_add_spouse=spouse_count < 1,
                can_add_child=True,
            )
        )

    return sorted(nodes, key=lambda node: (node.y, node.x, node.id))


def layout(
    people: list[PersonInput],
    relationships: list[RelationshipInput],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> LayoutResult:
    """
    Lay out a family tree.

    Every call starts from scratch: people are assigned generation rows, packed
    horizontally so that units sit under their parents without overlapping, and
    connected by orthogonal partnership and family connectors. Relationships to
    unknown people are ignored rather than rejected.

    Args:
        people: Person records (order-independent, ids unique)
        relationships: parent_child and partnership relationships
        config: Geometry settings

    Returns:
        Positioned nodes sorted top to bottom then left to right, render edges,
        and the canvas bounds
    """
    if not people:
        return LayoutResult(nodes=[], edges=[], bounds=compute_bounds([], config))

    G = build_kinship_graph(people, relationships)
    logger.debug("Kinship graph has %d people and %d relationships", G.number_of_nodes(), G.number_of_edges())

    parents = parents_by_child(G)
    partners = partners_by_person(G)

    generations = assign_generations(G)
    left_x = pack_rows(people, generations, parents, partners, config)
    if config.center_rows:
        left_x = center_rows(left_x, generations, config)

    nodes = _position_people(people, generations, left_x, parents, partners, config)
    nodes_by_id = {node.id: node for node in nodes}

    groups = group_families(nodes, parents)
    edges = route_edges(nodes_by_id, partnership_edges(G), groups, config)

    return LayoutResult(nodes=nodes, edges=edges, bounds=compute_bounds(nodes, config))

"""Grouping of children by the parents they share."""

from models import FamilyGroup, PositionedPerson


def group_families(
    nodes: list[PositionedPerson], parents: dict[str, list[str]]
) -> list[FamilyGroup]:
    """
    Collect children into one group per distinct set of (at most two) parents.

    Siblings that share the same parents then get a single merged connector
    instead of one line per parent per child. Parents that were not positioned
    are ignored; a child with more than two parents is grouped under the first
    two by id.

    Args:
        nodes: Positioned people, in output order
        parents: Mapping of child id to parent ids

    Returns:
        Groups in order of first appearance, each with children sorted by center x
    """
    node_by_id = {node.id: node for node in nodes}
    groups: dict[str, FamilyGroup] = {}

    for child in nodes:
        parent_ids = sorted(
            parent_id for parent_id in parents.get(child.id, []) if parent_id in node_by_id
        )[:2]
        if not parent_ids:
            continue

        key = "|".join(parent_ids)
        group = groups.setdefault(key, FamilyGroup(key=key, parent_ids=parent_ids))
        group.child_ids.append(child.id)

    for group in groups.values():
        group.child_ids.sort(key=lambda child_id: node_by_id[child_id].center_x)

    return list(groups.values())

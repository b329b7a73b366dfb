"""Orthogonal connector routing between positioned people."""

import logging
import math
from dataclasses import dataclass, field

from config import LayoutConfig
from models import PARENT_CHILD, PARTNERSHIP, FamilyGroup, Point, PositionedPerson, RenderEdge

logger = logging.getLogger(__name__)


def polyline(points: list[tuple[float, float]]) -> list[Point]:
    """Round points to two decimals and drop consecutive duplicates."""
    cleaned: list[Point] = []
    for x, y in points:
        point = Point(round(x, 2), round(y, 2))
        if not cleaned or cleaned[-1] != point:
            cleaned.append(point)
    return cleaned


def ranges_overlap(
    left_min_x: float, left_max_x: float, right_min_x: float, right_max_x: float, padding: float
) -> bool:
    return not (left_max_x < right_min_x + padding or right_max_x < left_min_x + padding)


# ============================================================================
# Lane allocation
# ============================================================================


@dataclass
class Lane:
    y: float
    min_x: float
    max_x: float


@dataclass
class LaneRegistry:
    """
    Horizontal lanes already handed out, per lane key (one key per generation row).

    A registry belongs to a single routing call; nothing is shared between calls.
    """

    config: LayoutConfig
    lanes: dict[str, list[Lane]] = field(default_factory=dict)

    def pick(
        self,
        lane_key: str,
        min_y: float,
        max_y: float,
        preferred_y: float,
        min_x: float,
        max_x: float,
    ) -> float:
        """
        Reserve a y for a horizontal segment spanning [min_x, max_x].

        The preferred y is tried first, then candidates stepping alternately up and
        down by lane_step, all clamped to [min_y, max_y]. The first candidate that
        keeps lane_gap away from every lane with an overlapping x range wins. When
        every candidate conflicts the preferred y is used anyway.
        """
        lanes = self.lanes.setdefault(lane_key, [])
        range_min_x = min(min_x, max_x)
        range_max_x = max(min_x, max_x)
        low = round(min_y, 2)
        high = round(max(min_y, max_y), 2)
        base_y = round(max(low, min(high, preferred_y)), 2)

        candidates: list[float] = []

        def push(value: float) -> None:
            normalized = round(max(low, min(high, value)), 2)
            if normalized not in candidates:
                candidates.append(normalized)

        push(base_y)
        max_steps = max(2, math.ceil((high - low) / self.config.lane_step) + 2)
        for step in range(1, max_steps + 1):
            offset = step * self.config.lane_step
            push(base_y - offset)
            push(base_y + offset)

        selected = None
        for candidate in candidates:
            conflict = any(
                abs(lane.y - candidate) < self.config.lane_gap
                and ranges_overlap(
                    lane.min_x, lane.max_x, range_min_x, range_max_x, self.config.lane_range_padding
                )
                for lane in lanes
            )
            if not conflict:
                selected = candidate
                break

        if selected is None:
            logger.debug("No free lane in %s between %s and %s, using %s", lane_key, low, high, base_y)
            selected = base_y

        lanes.append(Lane(y=selected, min_x=range_min_x, max_x=range_max_x))
        return selected


# ============================================================================
# Partnerships
# ============================================================================


def route_partnerships(
    nodes_by_id: dict[str, PositionedPerson],
    partnerships: list[tuple[str, str]],
    config: LayoutConfig,
) -> list[RenderEdge]:
    """Draw one straight line between the facing sides of each partnered pair."""
    edges: list[RenderEdge] = []
    rendered: set[str] = set()

    for source_id, target_id in partnerships:
        pair_key = "|".join(sorted([source_id, target_id]))
        if pair_key in rendered or source_id == target_id:
            continue

        source = nodes_by_id.get(source_id)
        target = nodes_by_id.get(target_id)
        if source is None or target is None:
            continue

        left, right = (source, target) if source.center_x <= target.center_x else (target, source)
        line_y = (left.center_y + right.center_y) / 2

        edges.append(
            RenderEdge(
                id=f"partner__{pair_key}",
                kind=PARTNERSHIP,
                path=polyline([(left.x + config.node_width, line_y), (right.x, line_y)]),
            )
        )
        rendered.add(pair_key)

    return edges


# ============================================================================
# Families
# ============================================================================


@dataclass
class _RoutedGroup:
    group: FamilyGroup
    parents: list[PositionedPerson]
    children: list[PositionedPerson]
    parent_generation: int
    child_generation: int
    parent_bottom_y: float
    parent_span_min_x: float
    parent_span_max_x: float
    child_top_y: float
    anchor_x: float
    horizontal_min_x: float
    horizontal_max_x: float

    @property
    def is_pair(self) -> bool:
        return len(self.parents) == 2


def _prepare_group(
    group: FamilyGroup, nodes_by_id: dict[str, PositionedPerson], config: LayoutConfig
) -> _RoutedGroup | None:
    parents = sorted(
        (nodes_by_id[parent_id] for parent_id in group.parent_ids if parent_id in nodes_by_id),
        key=lambda node: node.center_x,
    )
    children = [nodes_by_id[child_id] for child_id in group.child_ids if child_id in nodes_by_id]
    if not parents or not children:
        logger.debug("Dropping family group %s with no placed parents or children", group.key)
        return None

    parent_centers = [parent.center_x for parent in parents]
    anchor_x = sum(parent_centers) / len(parent_centers)
    child_centers = [child.center_x for child in children]

    return _RoutedGroup(
        group=group,
        parents=parents,
        children=children,
        parent_generation=max(parent.generation for parent in parents),
        child_generation=min(child.generation for child in children),
        parent_bottom_y=max(parent.y + config.node_height for parent in parents),
        parent_span_min_x=min(parent_centers),
        parent_span_max_x=max(parent_centers),
        child_top_y=min(child.y for child in children),
        anchor_x=anchor_x,
        horizontal_min_x=min(anchor_x, *child_centers),
        horizontal_max_x=max(anchor_x, *child_centers),
    )


def _children_edges(
    routed: _RoutedGroup, prefix: str, branch_y: float
) -> list[RenderEdge]:
    """Sibling line across the branch row plus one drop into each child."""
    edges = [
        RenderEdge(
            id=f"{prefix}sibling-line",
            kind=PARENT_CHILD,
            path=polyline([(routed.horizontal_min_x, branch_y), (routed.horizontal_max_x, branch_y)]),
        )
    ]
    for child in routed.children:
        edges.append(
            RenderEdge(
                id=f"{prefix}child__{child.id}",
                kind=PARENT_CHILD,
                path=polyline([(child.center_x, branch_y), (child.center_x, child.y)]),
            )
        )
    return edges


def _route_group(
    routed: _RoutedGroup, lanes: LaneRegistry, config: LayoutConfig
) -> list[RenderEdge]:
    key = routed.group.key
    bottom = routed.parent_bottom_y

    if routed.is_pair:
        merge_y = lanes.pick(
            f"h:{routed.parent_generation}",
            bottom + 18,
            max(bottom + 18, routed.child_top_y - 80),
            bottom + 28,
            routed.parent_span_min_x,
            routed.parent_span_max_x,
        )
    else:
        merge_y = bottom + 18

    min_branch_y = max(bottom + 46, merge_y + 32)
    max_branch_y = max(min_branch_y, routed.child_top_y - 24)
    preferred_branch_y = max(min_branch_y, min(max_branch_y, routed.child_top_y - 36))
    branch_y = lanes.pick(
        f"h:{routed.child_generation}",
        min_branch_y,
        max_branch_y,
        preferred_branch_y,
        routed.horizontal_min_x,
        routed.horizontal_max_x,
    )

    edges: list[RenderEdge] = []
    mid_x = routed.anchor_x

    if routed.is_pair:
        for side, parent in zip(("left", "right"), routed.parents):
            edges.append(
                RenderEdge(
                    id=f"family__{key}__{side}-parent",
                    kind=PARENT_CHILD,
                    path=polyline(
                        [
                            (parent.center_x, parent.y + config.node_height),
                            (parent.center_x, merge_y),
                            (mid_x, merge_y),
                        ]
                    ),
                )
            )

        if len(routed.children) == 1:
            child = routed.children[0]
            edges.append(
                RenderEdge(
                    id=f"family__{key}__single-child",
                    kind=PARENT_CHILD,
                    path=polyline(
                        [
                            (mid_x, merge_y),
                            (mid_x, branch_y),
                            (child.center_x, branch_y),
                            (child.center_x, child.y),
                        ]
                    ),
                )
            )
            return edges

        edges.append(
            RenderEdge(
                id=f"family__{key}__trunk",
                kind=PARENT_CHILD,
                path=polyline([(mid_x, merge_y), (mid_x, branch_y)]),
            )
        )
        edges.extend(_children_edges(routed, f"family__{key}__", branch_y))
        return edges

    parent = routed.parents[0]
    parent_bottom = (parent.center_x, parent.y + config.node_height)

    if len(routed.children) == 1:
        child = routed.children[0]
        edges.append(
            RenderEdge(
                id=f"family__{key}__single-parent-child",
                kind=PARENT_CHILD,
                path=polyline(
                    [
                        parent_bottom,
                        (parent.center_x, branch_y),
                        (child.center_x, branch_y),
                        (child.center_x, child.y),
                    ]
                ),
            )
        )
        return edges

    edges.append(
        RenderEdge(
            id=f"family__{key}__single-parent-trunk",
            kind=PARENT_CHILD,
            path=polyline([parent_bottom, (parent.center_x, branch_y)]),
        )
    )
    edges.extend(_children_edges(routed, f"family__{key}__single-parent-", branch_y))
    return edges


def route_families(
    nodes_by_id: dict[str, PositionedPerson],
    groups: list[FamilyGroup],
    config: LayoutConfig,
    lanes: LaneRegistry | None = None,
) -> list[RenderEdge]:
    """
    Route every family group as a merged orthogonal connector.

    Groups are routed from the top of the canvas down and left to right within a
    row, so that earlier groups keep their preferred lanes.
    """
    lanes = lanes if lanes is not None else LaneRegistry(config)

    prepared = [_prepare_group(group, nodes_by_id, config) for group in groups]
    routed_groups = sorted(
        (routed for routed in prepared if routed is not None),
        key=lambda routed: (routed.parent_bottom_y, routed.anchor_x),
    )

    edges: list[RenderEdge] = []
    for routed in routed_groups:
        edges.extend(_route_group(routed, lanes, config))
    return edges


def route_edges(
    nodes_by_id: dict[str, PositionedPerson],
    partnerships: list[tuple[str, str]],
    groups: list[FamilyGroup],
    config: LayoutConfig,
) -> list[RenderEdge]:
    """Partnership lines first, then family connectors, sharing one lane registry."""
    lanes = LaneRegistry(config)
    return route_partnerships(nodes_by_id, partnerships, config) + route_families(
        nodes_by_id, groups, config, lanes
    )

"""Horizontal placement of people within generation rows."""

import logging
from dataclasses import dataclass

from config import LayoutConfig
from models import PersonInput, Unit

logger = logging.getLogger(__name__)


@dataclass
class _Block:
    start: int
    end: int
    total: float
    count: int

    @property
    def mean(self) -> float:
        return self.total / self.count


def solve_anchored_left_positions(
    target_lefts: list[float], widths: list[float], min_gap: float
) -> list[float]:
    """
    Place ordered units as close as possible to their target left edges without overlap.

    This is isotonic regression with a fixed offset per unit, solved by pooling
    adjacent violators. Subtracting each unit's cumulative offset (widths of the
    units before it plus one gap each) turns "no overlap" into "non-decreasing",
    and the least-squares non-decreasing fit is found by merging neighbouring
    blocks whose means are out of order into their average.

    Args:
        target_lefts: Desired left edge of each unit, in final left-to-right order
        widths: Width of each unit
        min_gap: Minimum space between consecutive units

    Returns:
        The resolved left edge of each unit
    """
    count = len(target_lefts)
    if count == 0:
        return []

    offsets = [0.0] * count
    for index in range(1, count):
        offsets[index] = offsets[index - 1] + widths[index - 1] + min_gap

    blocks: list[_Block] = []
    for index in range(count):
        value = target_lefts[index] - offsets[index]
        blocks.append(_Block(start=index, end=index, total=value, count=1))

        while len(blocks) >= 2 and blocks[-2].mean > blocks[-1].mean:
            right = blocks.pop()
            left = blocks.pop()
            blocks.append(
                _Block(
                    start=left.start,
                    end=right.end,
                    total=left.total + right.total,
                    count=left.count + right.count,
                )
            )

    resolved = [0.0] * count
    for block in blocks:
        for index in range(block.start, block.end + 1):
            resolved[index] = block.mean + offsets[index]
    return resolved


def seed_centers(people: list[PersonInput], config: LayoutConfig) -> dict[str, float]:
    """Seed center x per person: the prior x if given, else spaced by input order."""
    seeds = {}
    for index, person in enumerate(people):
        if isinstance(person.x, (int, float)) and not isinstance(person.x, bool):
            seeds[person.id] = person.x + config.node_width / 2
        else:
            seeds[person.id] = index * config.seed_spacing
    return seeds


def build_units(
    row_ids: list[str], partners: dict[str, list[str]], seed_center_x: dict[str, float]
) -> list[Unit]:
    """
    Partition a generation row into pairs and singles.

    Rows are walked in id order; a person whose partner is also in the row and
    not yet placed forms a pair with the first such partner (by id). Pair members
    are ordered by seed x so that left and right stay stable between calls.
    """
    row_set = set(row_ids)
    visited: set[str] = set()
    units: list[Unit] = []

    for person_id in row_ids:
        if person_id in visited:
            continue

        available = sorted(
            partner_id
            for partner_id in partners.get(person_id, [])
            if partner_id in row_set and partner_id not in visited and partner_id != person_id
        )

        if available:
            partner_id = available[0]
            members = sorted([person_id, partner_id], key=lambda member: seed_center_x.get(member, 0))
            units.append(Unit(kind="pair", members=members))
            visited.update(members)
            continue

        units.append(Unit(kind="single", members=[person_id]))
        visited.add(person_id)

    return units


def unit_width(unit: Unit, config: LayoutConfig) -> float:
    return config.pair_width if unit.kind == "pair" else config.node_width


def unit_anchor(
    unit: Unit,
    parents: dict[str, list[str]],
    center_x: dict[str, float],
    seed_center_x: dict[str, float],
) -> float:
    """Average center x of the unit's already placed parents, or of its members' seeds."""
    parent_centers = [
        center_x[parent_id]
        for member_id in unit.members
        for parent_id in parents.get(member_id, [])
        if parent_id in center_x
    ]
    if parent_centers:
        return sum(parent_centers) / len(parent_centers)

    seeds = [seed_center_x.get(member_id, 0) for member_id in unit.members]
    return sum(seeds) / len(seeds)


def pack_rows(
    people: list[PersonInput],
    generations: dict[str, int],
    parents: dict[str, list[str]],
    partners: dict[str, list[str]],
    config: LayoutConfig,
) -> dict[str, float]:
    """
    Compute the left x of every person, one generation row at a time.

    Rows are packed top to bottom so that each row can anchor its units on the
    already placed centers of their parents.

    Returns:
        Mapping of person id to left x (before padding and global shifts)
    """
    seed_center_x = seed_centers(people, config)
    left_x: dict[str, float] = {}
    center_x: dict[str, float] = {}
    max_generation = max(generations.values(), default=0)

    for generation in range(max_generation + 1):
        row_ids = sorted(person.id for person in people if generations.get(person.id, 0) == generation)
        if not row_ids:
            continue

        units = build_units(row_ids, partners, seed_center_x)
        entries = []
        for unit in units:
            width = unit_width(unit, config)
            anchor = unit_anchor(unit, parents, center_x, seed_center_x)
            entries.append((anchor, "__".join(unit.members), width, unit))
        entries.sort(key=lambda entry: (entry[0], entry[1]))

        resolved = solve_anchored_left_positions(
            [anchor - width / 2 for anchor, _, width, _ in entries],
            [width for _, _, width, _ in entries],
            config.unit_gap,
        )
        logger.debug("Packed generation %d: %d units", generation, len(entries))

        for (_, _, _, unit), left in zip(entries, resolved):
            for offset_index, member_id in enumerate(unit.members):
                member_left = left + offset_index * (config.node_width + config.spouse_gap)
                left_x[member_id] = member_left
                center_x[member_id] = member_left + config.node_width / 2

    return left_x


def center_rows(
    left_x: dict[str, float], generations: dict[str, int], config: LayoutConfig
) -> dict[str, float]:
    """Shift each generation row so that its center lines up with the widest row's center."""
    spans: dict[int, tuple[float, float]] = {}
    for person_id, left in left_x.items():
        generation = generations.get(person_id, 0)
        right = left + config.node_width
        low, high = spans.get(generation, (left, right))
        spans[generation] = (min(low, left), max(high, right))

    if not spans:
        return dict(left_x)

    # Widest row wins; ties go to the topmost row
    widest = min(spans, key=lambda generation: (-(spans[generation][1] - spans[generation][0]), generation))
    target_center = sum(spans[widest]) / 2

    return {
        person_id: left + target_center - sum(spans[generations.get(person_id, 0)]) / 2
        for person_id, left in left_x.items()
    }

"""Data classes for family tree layout inputs and outputs."""

from dataclasses import dataclass, field
from typing import Any, Literal

RelationshipType = Literal["parent_child", "partnership"]
UnitKind = Literal["single", "pair"]

PARENT_CHILD = "parent_child"
PARTNERSHIP = "partnership"


# ============================================================================
# Inputs
# ============================================================================


@dataclass(frozen=True)
class PersonInput:
    id: str
    first_name: str = ""
    last_name: str = ""
    avatar_url: str | None = None
    avatar_zoom: float | None = None
    avatar_focus_x: float | None = None
    avatar_focus_y: float | None = None
    birth_year: int | None = None
    is_alive: bool = True
    is_claimed: bool = False
    x: float | None = None  # prior position, only used as a seed

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part) or self.id


@dataclass(frozen=True)
class RelationshipInput:
    id: str
    source: str  # parent for parent_child
    target: str  # child for parent_child
    type: RelationshipType


# ============================================================================
# Intermediate
# ============================================================================


@dataclass
class Unit:
    kind: UnitKind
    members: list[str]


@dataclass
class FamilyGroup:
    key: str
    parent_ids: list[str]
    child_ids: list[str] = field(default_factory=list)


# ============================================================================
# Outputs
# ============================================================================


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass
class PositionedPerson:
    id: str
    first_name: str
    last_name: str
    avatar_url: str | None
    avatar_zoom: float | None
    avatar_focus_x: float | None
    avatar_focus_y: float | None
    birth_year: int | None
    is_alive: bool
    is_claimed: bool
    generation: int
    x: float
    y: float
    center_x: float
    center_y: float
    parent_count: int
    spouse_count: int
    can_add_parent: bool
    can_add_spouse: bool
    can_add_child: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "avatarUrl": self.avatar_url,
            "avatarZoom": self.avatar_zoom,
            "avatarFocusX": self.avatar_focus_x,
            "avatarFocusY": self.avatar_focus_y,
            "birthYear": self.birth_year,
            "isAlive": self.is_alive,
            "isClaimed": self.is_claimed,
            "generation": self.generation,
            "x": self.x,
            "y": self.y,
            "centerX": self.center_x,
            "centerY": self.center_y,
            "parentCount": self.parent_count,
            "spouseCount": self.spouse_count,
            "canAddParent": self.can_add_parent,
            "canAddSpouse": self.can_add_spouse,
            "canAddChild": self.can_add_child,
        }


@dataclass
class RenderEdge:
    id: str
    kind: RelationshipType
    path: list[Point]

    def svg_path(self) -> str:
        """Serialize the polyline as an SVG path string ("M x y L x y ...")."""
        if len(self.path) < 2:
            first = self.path[0] if self.path else Point(0, 0)
            return f"M {_fmt(first.x)} {_fmt(first.y)}"
        return " ".join(
            f"{'M' if index == 0 else 'L'} {_fmt(point.x)} {_fmt(point.y)}"
            for index, point in enumerate(self.path)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "path": [{"x": point.x, "y": point.y} for point in self.path],
        }


@dataclass(frozen=True)
class Bounds:
    width: float
    height: float


@dataclass
class LayoutResult:
    nodes: list[PositionedPerson]
    edges: list[RenderEdge]
    bounds: Bounds

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "bounds": {"width": self.bounds.width, "height": self.bounds.height},
        }


def _fmt(value: float) -> str:
    # 120.0 -> "120", 12.5 -> "12.5"
    return str(int(value)) if float(value).is_integer() else repr(float(value))

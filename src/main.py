"""
1) Read people and relationships from a JSON file.
2) Validate them for dangling references, cycles, and impossible ages.
3) Lay out the family tree (generations, packed rows, routed connectors).
4) Write the layout as JSON.
5) Optionally plot the layout.
"""

import argparse
import json
from pathlib import Path
from typing import Any

from config import LayoutConfig
from layout import layout
from models import PersonInput, RelationshipInput
from validation import validate_layout_input


# ============================================================================
# 1) Read input
# ============================================================================


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (to accept camelCase and snake_case)."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _as_year(value: Any) -> int | None:
    """Birth years arrive as ints or numeric strings; anything else is unknown."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def person_from_dict(data: dict[str, Any]) -> PersonInput:
    return PersonInput(
        id=str(data["id"]),
        first_name=_pick(data, "firstName", "first_name", default="") or "",
        last_name=_pick(data, "lastName", "last_name", default="") or "",
        avatar_url=_pick(data, "avatarUrl", "avatar_url"),
        avatar_zoom=_pick(data, "avatarZoom", "avatar_zoom"),
        avatar_focus_x=_pick(data, "avatarFocusX", "avatar_focus_x"),
        avatar_focus_y=_pick(data, "avatarFocusY", "avatar_focus_y"),
        birth_year=_as_year(_pick(data, "birthYear", "birth_year")),
        is_alive=bool(_pick(data, "isAlive", "is_alive", default=True)),
        is_claimed=bool(_pick(data, "isClaimed", "is_claimed", default=False)),
        x=data.get("x"),
    )


def relationship_from_dict(data: dict[str, Any]) -> RelationshipInput:
    return RelationshipInput(
        id=str(data["id"]),
        source=str(_pick(data, "source", "person1_id")),
        target=str(_pick(data, "target", "person2_id")),
        type=_pick(data, "type", "relationship_type"),
    )


def load_input(
    input_path: Path,
) -> tuple[list[PersonInput], list[RelationshipInput], LayoutConfig]:
    """Parse a {"people": [...], "relationships": [...], "config": {...}} JSON file."""
    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SystemExit(f"Cannot read layout input {input_path}: {exc}") from exc

    people = [person_from_dict(item) for item in data.get("people", [])]
    relationships = [relationship_from_dict(item) for item in data.get("relationships", [])]
    try:
        config = LayoutConfig.from_mapping(data.get("config"))
    except ValueError as exc:
        raise SystemExit(f"Invalid layout config in {input_path}: {exc}") from exc
    return people, relationships, config


# ============================================================================
# Main
# ============================================================================


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lay out a family tree from a JSON graph.")
    parser.add_argument("input", type=Path, help="JSON file with people and relationships")
    parser.add_argument("-o", "--output", type=Path, help="Where to write the layout JSON (default: <input>.layout.json)")
    parser.add_argument("--plot", type=Path, help="Also plot the layout to this image file")
    parser.add_argument("--dot", type=Path, help="Also export the layout as a Graphviz DOT file (render with neato -n)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None):
    args = parse_args(argv)

    print(f"Reading layout input: {args.input}")
    people, relationships, config = load_input(args.input)
    print(f"  Found {len(people)} people and {len(relationships)} relationships")

    print("Validating input...")
    warnings = validate_layout_input(people, relationships)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:  # Show first 10 warnings
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    print("Computing layout...")
    result = layout(people, relationships, config)
    print(f"  {len(result.nodes)} nodes, {len(result.edges)} edges, canvas {result.bounds.width}x{result.bounds.height}")

    output_path = args.output or args.input.with_suffix(".layout.json")
    output_path.write_text(json.dumps(result.to_dict(), indent=2) + "\n", encoding="utf-8")
    print(f"Layout written to: {output_path}")

    if args.plot:
        from plotting import plot_layout

        print(f"Plotting layout to: {args.plot}")
        plot_layout(result, args.plot, config)

    if args.dot:
        from plotting import layout_to_dot

        print(f"Exporting DOT graph to: {args.dot}")
        layout_to_dot(result, config).write(str(args.dot), format="raw")

    print("Done!")


if __name__ == "__main__":
    main()

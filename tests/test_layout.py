"""End-to-end tests for the family tree layout."""

import json
from itertools import groupby

import pytest

from config import DEFAULT_CONFIG, LayoutConfig
from factories import parent_of, partners, person
from layout import compute_bounds, layout
from models import Point


def by_id(result):
    return {node.id: node for node in result.nodes}


def edge_ids(result):
    return [edge.id for edge in result.edges]


@pytest.fixture
def family():
    """Three generations with in-laws, half-siblings and an unrelated person."""
    people = [person(pid) for pid in "ABCDEFGHIJK"]
    relationships = [
        partners("A", "B"),
        parent_of("A", "C"),
        parent_of("B", "C"),
        parent_of("A", "D"),
        parent_of("B", "D"),
        partners("D", "E"),
        parent_of("F", "E"),
        parent_of("D", "G"),
        parent_of("E", "G"),
        parent_of("D", "H"),
        partners("G", "I"),
        parent_of("J", "I"),
        parent_of("A", "J"),
    ]
    return people, relationships


class TestScenarios:
    """Test small trees with known shapes."""

    def test_empty_graph(self):
        """Should return the minimum canvas for no people."""
        result = layout([], [])
        assert result.nodes == []
        assert result.edges == []
        assert (result.bounds.width, result.bounds.height) == (1200, 760)
        assert result.to_dict() == {"nodes": [], "edges": [], "bounds": {"width": 1200, "height": 760}}

    def test_single_person(self):
        result = layout([person("A")], [])
        node = result.nodes[0]
        assert (node.x, node.y, node.generation) == (180, 120, 0)
        assert (node.center_x, node.center_y) == (274, 238)
        assert result.edges == []
        assert (result.bounds.width, result.bounds.height) == (1200, 760)

    def test_couple_with_one_child(self):
        """Should draw one partnership line and one merged connector to the child."""
        result = layout(
            [person("A"), person("B"), person("C")],
            [partners("A", "B"), parent_of("A", "C"), parent_of("B", "C")],
        )
        nodes = by_id(result)

        assert [node.id for node in result.nodes] == ["A", "B", "C"]
        assert (nodes["A"].generation, nodes["B"].generation, nodes["C"].generation) == (0, 0, 1)
        assert (nodes["A"].x, nodes["B"].x, nodes["C"].x) == (180, 412, 296)
        assert (nodes["A"].y, nodes["C"].y) == (120, 536)
        assert nodes["C"].center_x == (nodes["A"].center_x + nodes["B"].center_x) / 2

        assert edge_ids(result) == [
            "partner__A|B",
            "family__A|B__left-parent",
            "family__A|B__right-parent",
            "family__A|B__single-child",
        ]
        assert [edge.kind for edge in result.edges].count("partnership") == 1
        assert result.edges[0].path == [Point(368, 238), Point(412, 238)]
        assert result.edges[3].path[-1] == Point(390, 536)
        assert (result.bounds.width, result.bounds.height) == (1200, 892)

    def test_couple_with_two_children(self):
        """Should group both children under one sibling line."""
        result = layout(
            [person("A"), person("B"), person("C"), person("D")],
            [
                partners("A", "B"),
                parent_of("A", "C"),
                parent_of("B", "C"),
                parent_of("A", "D"),
                parent_of("B", "D"),
            ],
        )
        nodes = by_id(result)
        edges = {edge.id: edge for edge in result.edges}

        assert nodes["C"].center_x < nodes["D"].center_x
        assert edges["family__A|B__sibling-line"].path == [
            Point(nodes["C"].center_x, 500),
            Point(nodes["D"].center_x, 500),
        ]
        assert "family__A|B__trunk" in edges
        assert "family__A|B__child__C" in edges
        assert "family__A|B__child__D" in edges
        assert len(result.edges) == 7

    def test_single_parent_with_three_children(self):
        """Should route without any merge or partnership segment."""
        result = layout(
            [person("A"), person("K1"), person("K2"), person("K3")],
            [parent_of("A", "K1"), parent_of("A", "K2"), parent_of("A", "K3")],
        )
        nodes = by_id(result)
        edges = {edge.id: edge for edge in result.edges}

        assert all(edge.kind == "parent_child" for edge in result.edges)
        assert not any("parent__" in edge_id or edge_id.endswith("-parent") for edge_id in edges)
        assert edges["family__A__single-parent-sibling-line"].path == [Point(274, 500), Point(1026, 500)]
        assert nodes["K2"].center_x == nodes["A"].center_x == 650

    def test_capability_flags(self):
        """Should derive add-parent and add-spouse hints from existing relationships."""
        result = layout(
            [person("A"), person("B"), person("C")],
            [partners("A", "B"), parent_of("A", "C"), parent_of("B", "C")],
        )
        nodes = by_id(result)
        assert nodes["C"].parent_count == 2 and not nodes["C"].can_add_parent
        assert nodes["C"].can_add_spouse
        assert nodes["A"].spouse_count == 1 and not nodes["A"].can_add_spouse
        assert nodes["A"].can_add_parent
        assert all(node.can_add_child for node in result.nodes)

    def test_prior_x_orders_partners(self):
        """Should place partners left to right by their prior x."""
        result = layout([person("A", x=500), person("B", x=0)], [partners("A", "B")])
        nodes = by_id(result)
        assert nodes["B"].x < nodes["A"].x

    def test_dangling_relationships_are_ignored(self):
        """Should lay out the same picture with or without edges to unknown people."""
        people = [person("A"), person("C")]
        clean = layout(people, [parent_of("A", "C")])
        dangling = layout(people, [parent_of("A", "C"), parent_of("GHOST", "C"), partners("C", "NOBODY")])
        assert dangling.to_dict() == clean.to_dict()

    def test_input_is_not_mutated(self):
        people = [person("A"), person("B")]
        relationships = [partners("A", "B")]
        snapshot = (list(people), list(relationships))
        layout(people, relationships)
        assert (people, relationships) == snapshot


class TestProperties:
    """Test invariants over a larger tree."""

    def test_generation_invariants(self, family):
        people, relationships = family
        nodes = by_id(layout(people, relationships))
        for rel in relationships:
            if rel.type == "parent_child":
                assert nodes[rel.target].generation >= nodes[rel.source].generation + 1
            else:
                assert nodes[rel.source].generation == nodes[rel.target].generation
        assert min(node.generation for node in nodes.values()) == 0

    def test_same_ids_out(self, family):
        people, relationships = family
        result = layout(people, relationships)
        assert sorted(node.id for node in result.nodes) == sorted(p.id for p in people)

    def test_no_horizontal_overlap(self, family):
        people, relationships = family
        result = layout(people, relationships)
        rows = sorted(result.nodes, key=lambda node: (node.generation, node.x))
        for _, row in groupby(rows, key=lambda node: node.generation):
            row = list(row)
            for left, right in zip(row, row[1:]):
                assert right.x >= left.x + DEFAULT_CONFIG.node_width - 1e-6

    def test_coordinates_start_at_padding(self, family):
        people, relationships = family
        result = layout(people, relationships)
        assert all(node.x >= 0 and node.y >= 0 for node in result.nodes)
        assert min(node.x for node in result.nodes) == pytest.approx(DEFAULT_CONFIG.side_padding)
        assert min(node.y for node in result.nodes) == pytest.approx(DEFAULT_CONFIG.top_padding)

    def test_rows_follow_generations(self, family):
        people, relationships = family
        for node in layout(people, relationships).nodes:
            assert node.y == DEFAULT_CONFIG.top_padding + node.generation * DEFAULT_CONFIG.row_height
            assert node.center_y == node.y + DEFAULT_CONFIG.node_height / 2

    def test_paths_are_orthogonal_without_repeats(self, family):
        people, relationships = family
        for edge in layout(people, relationships).edges:
            assert len(edge.path) >= 2
            for start, end in zip(edge.path, edge.path[1:]):
                assert start != end
                assert start.x == end.x or start.y == end.y

    def test_deterministic(self, family):
        people, relationships = family
        first = json.dumps(layout(people, relationships).to_dict())
        second = json.dumps(layout(people, relationships).to_dict())
        assert first == second

    def test_bounds_contain_nodes(self, family):
        people, relationships = family
        result = layout(people, relationships)
        assert result.bounds == compute_bounds(result.nodes)
        assert result.bounds.width >= max(node.x + DEFAULT_CONFIG.node_width for node in result.nodes)


class TestConfig:
    def test_custom_geometry(self):
        """Should use the given card size and padding."""
        config = LayoutConfig(node_width=100, node_height=50, side_padding=10, top_padding=20)
        result = layout([person("A"), person("B")], [parent_of("A", "B")], config)
        nodes = by_id(result)
        assert (nodes["A"].x, nodes["A"].y) == (10, 20)
        assert nodes["B"].y == 20 + 50 + config.row_gap
        assert nodes["A"].center_x == 60


class TestLaneSeparation:
    def test_unrelated_families_overlapping_in_x_use_different_lanes(self):
        """Should keep overlapping branch lines of unrelated families apart vertically."""
        kids = ["K1", "K2", "K3", "K4"]
        result = layout(
            [person("P"), person("Q")] + [person(kid) for kid in kids] + [person("Q1")],
            [parent_of("P", kid) for kid in kids] + [parent_of("Q", "Q1")],
        )
        edges = {edge.id: edge for edge in result.edges}

        p_line = edges["family__P__single-parent-sibling-line"].path
        q_path = edges["family__Q__single-parent-child"].path
        # Q's horizontal run sits between its two elbows
        q_start, q_end = q_path[1], q_path[2]
        assert q_start.y == q_end.y

        p_min, p_max = sorted((p_line[0].x, p_line[-1].x))
        q_min, q_max = sorted((q_start.x, q_end.x))
        assert min(p_max, q_max) - max(p_min, q_min) > DEFAULT_CONFIG.lane_range_padding

        assert p_line[0].y == 500
        assert q_start.y == 460
        assert abs(p_line[0].y - q_start.y) >= DEFAULT_CONFIG.lane_gap

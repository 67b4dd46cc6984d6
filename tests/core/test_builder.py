"""Tests for ReqGraph - ingestion, linking and phase ordering."""

import pytest

from reqtraq.graph import (
    ErrorKind,
    GraphPhase,
    GraphPhaseError,
    ReqGraph,
    RequirementLevel,
    build_filter,
)
from reqtraq.graph.node import position_key
from tests.core.graph_test_helpers import (
    FAKE_HASH,
    HIGH_1,
    HIGH_2,
    HIGH_3,
    LOW_1,
    LOW_2,
    SYS_1,
    SYS_2,
    build_graph,
    children_string,
    detect_cycles,
    ids_string,
    kinds,
    make_record,
    parents_string,
    resolve_graph,
)


class TestIngestion:
    """Tests for add_requirement and add_code_refs."""

    def test_add_requirement_creates_node(self, builder):
        error = builder.add_requirement(
            make_record(
                HIGH_1,
                title="Store deadlines",
                body="Deadlines survive restarts.",
                parents=[SYS_1],
                attributes={"RATIONALE": "Persistence"},
                position=3,
                path="certdocs/high.md",
                line=7,
            )
        )

        assert error is None
        node = builder.find_by_id(HIGH_1)
        assert node.level == RequirementLevel.HIGH
        assert node.position == 3
        assert node.parent_ids == [SYS_1]
        assert str(node.source) == "certdocs/high.md:7"

    def test_text_attribute_becomes_body(self, builder):
        builder.add_requirement(make_record(SYS_1, title="Title", body="Body line"))

        node = builder.find_by_id(SYS_1)
        assert node.body == "Title\nBody line"
        assert node.title == "Title"
        assert "TEXT" not in node.attributes

    def test_record_attributes_not_mutated(self, builder):
        record = make_record(SYS_1, title="Title")

        builder.add_requirement(record)

        assert record.attributes["TEXT"] == "Title"

    def test_duplicate_names_both_files(self, builder):
        builder.add_requirement(make_record(HIGH_1, path="certdocs/a.md"))

        error = builder.add_requirement(make_record(HIGH_1, path="certdocs/b.md"))

        assert error.kind == ErrorKind.DUPLICATE_IDENTIFIER
        assert error.node_id == HIGH_1
        assert "certdocs/a.md" in str(error)
        assert "certdocs/b.md" in str(error)

    def test_duplicate_keeps_first_definition(self, builder):
        builder.add_requirement(make_record(HIGH_1, title="First", path="certdocs/a.md"))
        builder.add_requirement(make_record(HIGH_1, title="Second", path="certdocs/b.md"))

        node = builder.find_by_id(HIGH_1)
        assert node.title == "First"
        assert len(builder) == 1

    def test_unknown_requirement_type_raises(self, builder):
        with pytest.raises(ValueError):
            builder.add_requirement(make_record("REQ-0-DDLN-XYZ-001"))

    def test_add_code_refs(self, builder):
        builder.add_code_refs("src/a.c", FAKE_HASH, [LOW_1, LOW_2])

        node = builder.find_by_id("src/a.c")
        assert node.is_code
        assert node.file_hash == FAKE_HASH
        assert node.parent_ids == [LOW_1, LOW_2]

    def test_code_file_without_refs_is_not_added(self, builder):
        builder.add_code_refs("src/a.c", FAKE_HASH, [])

        assert "src/a.c" not in builder
        assert builder.node_count() == 0


class TestLinking:
    """Tests for resolve()."""

    def test_links_are_bidirectional(self, partial_graph):
        for node in partial_graph.all_nodes():
            for parent in node.iter_parents():
                assert parent.has_child(node)
            for child in node.iter_children():
                assert child.has_parent(node)

    def test_links_sorted_by_position(self):
        graph = build_graph(
            make_record(SYS_1, path="certdocs/sys.md"),
            make_record(HIGH_3, parents=[SYS_1], position=0, path="certdocs/high.md"),
            make_record(HIGH_1, parents=[SYS_1], position=2, path="certdocs/high.md"),
            make_record(HIGH_2, parents=[SYS_1], position=1, path="certdocs/high.md"),
        )

        assert children_string(graph.find_by_id(SYS_1)) == f"{HIGH_3}, {HIGH_2}, {HIGH_1}"
        for node in graph.all_nodes():
            assert node.parents == sorted(node.parents, key=position_key)
            assert node.children == sorted(node.children, key=position_key)

    def test_unresolved_parent(self):
        graph, errors = resolve_graph(
            make_record(SYS_1),
            make_record(HIGH_1, parents=["REQ-X"]),
        )

        assert len(errors) == 1
        assert errors[0].kind == ErrorKind.UNRESOLVED_PARENT
        assert errors[0].related_id == "REQ-X"
        assert errors[0].node_id == HIGH_1
        assert str(errors[0]) == f"Invalid parent of requirement {HIGH_1}: REQ-X does not exist."

    def test_unresolved_reference_from_code(self):
        _, errors = resolve_graph(
            make_record(SYS_1),
            code_refs={"src/a.c": [LOW_1]},
        )

        assert kinds(errors) == [ErrorKind.UNRESOLVED_PARENT]
        assert errors[0].is_code
        assert str(errors[0]) == f"Invalid reference in file src/a.c: {LOW_1} does not exist."

    def test_missing_parent_reported_once_per_node(self):
        _, errors = resolve_graph(
            make_record(SYS_1),
            make_record(HIGH_1),
            make_record(LOW_1, path="certdocs/low.md"),
        )

        assert kinds(errors) == [ErrorKind.MISSING_PARENT, ErrorKind.MISSING_PARENT]
        assert sorted(e.node_id for e in errors) == [HIGH_1, LOW_1]
        assert str(errors[0]).endswith("has no parents.")

    def test_system_nodes_need_no_parents(self):
        graph, errors = resolve_graph(make_record(SYS_1), make_record(SYS_2))

        assert errors == []
        assert graph.is_linked

    def test_superseded_parent_from_requirement(self):
        _, errors = resolve_graph(
            make_record(SYS_1),
            make_record(HIGH_1, title="DELETED Store deadlines", parents=[SYS_1]),
            make_record(LOW_1, parents=[HIGH_1], path="certdocs/low.md"),
        )

        assert kinds(errors) == [ErrorKind.SUPERSEDED_PARENT_REFERENCE]
        assert not errors[0].is_code
        assert str(errors[0]) == f"Invalid parent of requirement {LOW_1}: {HIGH_1} is deleted."

    def test_superseded_parent_from_code(self):
        _, errors = resolve_graph(
            make_record(SYS_1),
            make_record(HIGH_1, parents=[SYS_1]),
            make_record(LOW_1, title="DELETED Store writes", parents=[HIGH_1]),
            code_refs={"src/a.c": [LOW_1]},
        )

        assert kinds(errors) == [ErrorKind.SUPERSEDED_PARENT_REFERENCE]
        assert errors[0].is_code
        assert str(errors[0]) == f"Invalid reference in file src/a.c: {LOW_1} is deleted."

    def test_deleted_child_may_reference_deleted_parent(self):
        graph, errors = resolve_graph(
            make_record(SYS_1),
            make_record(HIGH_1, title="DELETED old", parents=[SYS_1]),
            make_record(LOW_1, title="DELETED older", parents=[HIGH_1]),
        )

        assert errors == []
        assert graph.find_by_id(LOW_1).has_parent(graph.find_by_id(HIGH_1))

    def test_parent_at_same_level_is_rejected(self):
        graph, errors = resolve_graph(
            make_record(SYS_1),
            make_record(HIGH_1, parents=[SYS_1]),
            make_record(HIGH_2, parents=[HIGH_1]),
        )

        assert kinds(errors) == [ErrorKind.PARENT_LEVEL_VIOLATION]
        assert errors[0].node_id == HIGH_2
        assert "is not above HIGH level" in str(errors[0])
        assert graph.phase == GraphPhase.FAILED

    def test_parent_below_child_is_rejected(self):
        _, errors = resolve_graph(
            make_record(SYS_1, parents=[LOW_1]),
            make_record(HIGH_1, parents=[SYS_1]),
            make_record(LOW_1, parents=[HIGH_1]),
        )

        assert kinds(errors) == [ErrorKind.PARENT_LEVEL_VIOLATION]
        assert errors[0].node_id == SYS_1

    def test_level_may_be_skipped(self):
        graph = build_graph(
            make_record(SYS_1),
            make_record(LOW_1, parents=[SYS_1]),
        )

        assert parents_string(graph.find_by_id(LOW_1)) == SYS_1

    def test_all_errors_are_accumulated(self):
        graph, errors = resolve_graph(
            make_record(SYS_1),
            make_record(HIGH_1),
            make_record(HIGH_2, parents=["REQ-0-DDLN-SYS-999", SYS_1]),
            code_refs={"src/a.c": [LOW_2]},
        )

        assert sorted(e.kind.value for e in errors) == [
            "missing_parent",
            "unresolved_parent",
            "unresolved_parent",
        ]
        assert not graph.is_linked

    def test_linked_graph_has_no_cycles(self, partial_graph):
        assert detect_cycles(partial_graph) == []

    def test_code_inherits_first_parent_position(self):
        graph = build_graph(
            make_record(SYS_1),
            make_record(HIGH_1, parents=[SYS_1]),
            make_record(LOW_1, parents=[HIGH_1], position=3, path="certdocs/low.md"),
            make_record(LOW_2, parents=[HIGH_1], position=1, path="certdocs/low.md"),
            code_refs={"src/a.c": [LOW_1, LOW_2]},
        )

        code = graph.find_by_id("src/a.c")
        assert parents_string(code) == f"{LOW_2}, {LOW_1}"
        assert code.position == 1


class TestPhases:
    """Tests for phase ordering enforced by the graph."""

    def test_initial_phase(self, builder):
        assert builder.phase == GraphPhase.INGESTING
        assert not builder.is_linked

    def test_successful_resolve_propagates(self, simple_graph):
        assert simple_graph.phase == GraphPhase.PROPAGATED
        assert simple_graph.is_linked

    def test_resolve_twice_raises(self, simple_graph):
        with pytest.raises(GraphPhaseError):
            simple_graph.resolve()

    def test_add_after_resolve_raises(self, simple_graph):
        with pytest.raises(GraphPhaseError):
            simple_graph.add_requirement(make_record(SYS_2))
        with pytest.raises(GraphPhaseError):
            simple_graph.add_code_refs("src/b.c", FAKE_HASH, [LOW_1])

    def test_dangling_before_resolve_raises(self, builder):
        builder.add_requirement(make_record(SYS_1))

        with pytest.raises(GraphPhaseError):
            builder.dangling_nodes()

    def test_propagate_before_resolve_raises(self, builder):
        with pytest.raises(GraphPhaseError):
            builder.propagate()

    def test_failed_graph_refuses_propagation(self):
        graph, errors = resolve_graph(make_record(SYS_1), make_record(HIGH_1))

        assert errors
        assert graph.phase == GraphPhase.FAILED
        with pytest.raises(GraphPhaseError):
            graph.propagate()
        with pytest.raises(GraphPhaseError):
            graph.dangling_nodes()

    def test_empty_graph_resolves(self):
        graph = ReqGraph()

        assert graph.resolve() == []
        assert graph.dangling_nodes() == []


class TestAccessors:
    """Tests for ordered views of the graph."""

    def test_nodes_by_level(self, partial_graph):
        assert ids_string(partial_graph.nodes_by_level(RequirementLevel.HIGH)) == (
            f"{HIGH_1}, {HIGH_2}"
        )
        assert ids_string(partial_graph.system_nodes()) == SYS_1
        assert ids_string(partial_graph.code_nodes()) == "src/a.c"

    def test_all_nodes_sorted_by_position_then_id(self, partial_graph):
        nodes = list(partial_graph.all_nodes())
        assert nodes == sorted(nodes, key=position_key)
        assert len(nodes) == partial_graph.node_count() == 5

    def test_filter_nodes_by_title(self):
        graph = build_graph(
            make_record(SYS_1, title="Deadline tracking"),
            make_record(HIGH_1, title="Deadline storage", parents=[SYS_1], position=1),
            make_record(HIGH_2, title="Reminder mails", parents=[SYS_1], position=2),
        )

        found = graph.filter_nodes(build_filter(title_pattern="^Deadline"))

        assert ids_string(found) == f"{SYS_1}, {HIGH_1}"

    def test_filter_nodes_by_level_and_changeset(self, partial_graph):
        found = partial_graph.filter_nodes(
            {}, changeset={HIGH_2: "D12", LOW_1: "D13"}, level=RequirementLevel.HIGH
        )

        assert ids_string(found) == HIGH_2

    def test_iter_breadth_first_parents_before_children(self):
        graph = build_graph(
            make_record(SYS_1, position=0, path="certdocs/sys.md"),
            make_record(SYS_2, position=1, path="certdocs/sys.md"),
            make_record(HIGH_1, parents=[SYS_1], position=0, path="certdocs/high.md"),
            make_record(HIGH_2, parents=[SYS_2], position=1, path="certdocs/high.md"),
            make_record(LOW_1, parents=[HIGH_1, HIGH_2], position=0, path="certdocs/low.md"),
            code_refs={"src/a.c": [LOW_1]},
        )

        order = [n.id for n in graph.iter_breadth_first()]

        assert order == [SYS_1, SYS_2, HIGH_1, HIGH_2, LOW_1]

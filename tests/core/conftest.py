"""Pytest fixtures for core tests."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    """Reset structlog after each test.

    The CLI configures logging against the current sys.stderr, which pytest
    closes once the test's capture ends.
    """
    yield
    structlog.reset_defaults()


@pytest.fixture
def builder():
    """Fresh ReqGraph instance."""
    from reqtraq.graph import ReqGraph

    return ReqGraph()


@pytest.fixture
def simple_graph():
    """SYSTEM -> HIGH -> LOW -> code file, fully covered."""
    from tests.core.graph_test_helpers import HIGH_1, LOW_1, SYS_1, build_graph, make_record

    return build_graph(
        make_record(SYS_1, title="Deadline tracking", path="certdocs/0-DDLN-100-ORD.md"),
        make_record(
            HIGH_1,
            title="Deadlines are stored",
            parents=[SYS_1],
            path="certdocs/0-DDLN-211-SDD.md",
        ),
        make_record(
            LOW_1,
            title="Deadline store writes",
            parents=[HIGH_1],
            path="certdocs/0-DDLN-212-SDD.md",
        ),
        code_refs={"src/store.c": [LOW_1]},
    )


@pytest.fixture
def partial_graph():
    """SYSTEM with one covered and one uncovered HIGH requirement.

    SYS_1
    ├── HIGH_1 (position 0) ── LOW_1 ── src/a.c
    └── HIGH_2 (position 1)
    """
    from tests.core.graph_test_helpers import (
        HIGH_1,
        HIGH_2,
        LOW_1,
        SYS_1,
        build_graph,
        make_record,
    )

    return build_graph(
        make_record(SYS_1, path="certdocs/sys.md"),
        make_record(HIGH_1, parents=[SYS_1], position=0, path="certdocs/high.md"),
        make_record(HIGH_2, parents=[SYS_1], position=1, path="certdocs/high.md"),
        make_record(LOW_1, parents=[HIGH_1], path="certdocs/low.md"),
        code_refs={"src/a.c": [LOW_1]},
    )


@pytest.fixture
def certdoc_repo(tmp_path):
    """Repository with a certdocs directory and one annotated source file."""
    certdocs = tmp_path / "certdocs"
    certdocs.mkdir()
    (certdocs / "0-DDLN-100-ORD.md").write_text(
        """# Deadline system

## REQ-0-DDLN-SYS-001: Deadline tracking
**Rationale**: Users miss deadlines.

The system shall track deadlines.

*End* *REQ-0-DDLN-SYS-001*
"""
    )
    (certdocs / "0-DDLN-211-SDD.md").write_text(
        """# High level

## REQ-0-DDLN-SWH-001: Deadlines are stored
**Parents**: REQ-0-DDLN-SYS-001
**Rationale**: Persistence.

Deadlines survive restarts.

*End* *REQ-0-DDLN-SWH-001*

## REQ-0-DDLN-SWL-001: Store writes deadlines
**Parents**: REQ-0-DDLN-SWH-001
**Rationale**: Needed by REQ-0-DDLN-SWH-001.

*End* *REQ-0-DDLN-SWL-001*
"""
    )
    src = tmp_path / "src"
    src.mkdir()
    (src / "store.c").write_text("// @llr REQ-0-DDLN-SWL-001\nint store(void) { return 0; }\n")
    return tmp_path

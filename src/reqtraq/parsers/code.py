"""CodeParser - Requirement references in source code comments.

Recognizes one-line directives naming the low-level requirement a file
implements:

    // @llr REQ-0-DDLN-SWL-001
    # @llr REQ-0-DDLN-SWL-002 short note

Each scanned file with at least one directive becomes a CodeRecord,
together with the git blob hash of its content.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog

from reqtraq.parsers import CodeRecord
from reqtraq.utilities.hasher import git_blob_hash

logger = structlog.get_logger(__name__)

DEFAULT_CODE_EXTENSIONS = (".c", ".cc", ".h", ".hh", ".go", ".py")

# File extensions and the comment markers the directive may follow
_COMMENT_STYLES: dict[str, tuple[str, ...]] = {
    ".py": ("#",),
    ".sh": ("#",),
}


class CodeParser:
    """Parser for @llr directives in source files.

    Only low-level (SWL) requirements may be referenced from code.
    """

    LLR_PATTERN = re.compile(
        r"(?P<marker>//|#)\s*@llr\s*(?P<id>REQ-\d+-[A-Za-z0-9_]+-SWL-\d+)"
    )

    def __init__(self, extensions: Iterable[str] = DEFAULT_CODE_EXTENSIONS) -> None:
        """Initialize CodeParser.

        Args:
            extensions: File suffixes to scan (case-insensitive).
        """
        self.extensions = {ext.lower() for ext in extensions}

    def accepts(self, path: Path) -> bool:
        """Check if a file has one of the scanned extensions."""
        return path.suffix.lower() in self.extensions

    def parse_text(self, text: str, suffix: str = "") -> list[str]:
        """Extract referenced requirement IDs from source text, in order.

        Args:
            text: Source file content.
            suffix: File extension, used to select comment markers.

        Returns:
            Requirement IDs, one per directive line.
        """
        markers = _COMMENT_STYLES.get(suffix.lower(), ("//",))
        refs: list[str] = []
        for line in text.splitlines():
            match = self.LLR_PATTERN.search(line)
            if match and match.group("marker") in markers:
                refs.append(match.group("id"))
        return refs

    def parse_file(self, file_path: Path, relative_path: str) -> CodeRecord | None:
        """Scan one source file.

        Args:
            file_path: Absolute path of the file to read.
            relative_path: Repository-relative path used as the node key.

        Returns:
            A CodeRecord, or None if the file references no requirement.

        Raises:
            OSError: If the file cannot be read.
        """
        content = file_path.read_bytes()
        refs = self.parse_text(content.decode("utf-8", errors="replace"), file_path.suffix)
        if not refs:
            return None
        logger.debug("code_file_scanned", path=relative_path, references=len(refs))
        return CodeRecord(path=relative_path, file_hash=git_blob_hash(content), req_ids=refs)

    def iter_files(self, code_root: Path) -> Iterator[Path]:
        """Yield scannable files below code_root, sorted by path.

        Hidden directories (such as .git) are skipped.
        """
        for path in sorted(code_root.rglob("*")):
            relative = path.relative_to(code_root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if path.is_file() and self.accepts(path):
                yield path

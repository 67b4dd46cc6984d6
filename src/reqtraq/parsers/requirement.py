"""RequirementParser - Requirement blocks in markdown specification documents.

Parses requirement blocks in the format:

    ## REQ-0-DDLN-SWH-001: Title
    **Parents**: REQ-0-DDLN-SYS-001, REQ-0-DDLN-SYS-002
    **Rationale**: Why this requirement exists.

    Body text, any number of paragraphs.

    *End* *REQ-0-DDLN-SWH-001*

Metadata lines (**Key**: value) become upper-case attributes. The title
and body are joined into the TEXT attribute, which the graph turns into
the node body.
"""

from __future__ import annotations

import re
from pathlib import Path

from reqtraq.graph.errors import ErrorKind, TraceError
from reqtraq.graph.node import REQ_TYPE_TO_LEVEL
from reqtraq.parsers import REQ_ID_PATTERN, RequirementRecord


class RequirementParser:
    """Parser for requirement blocks in markdown documents."""

    HEADER_PATTERN = re.compile(r"^#+\s*(?P<id>REQ-[A-Za-z0-9_-]+):\s*(?P<title>.+)$")
    ATTRIBUTE_PATTERN = re.compile(r"^\*\*(?P<key>[A-Za-z][A-Za-z0-9 _-]*)\*\*:\s*(?P<value>.*)$")
    END_MARKER_PATTERN = re.compile(r"^\*End\*\s+\*(?P<id>[^*]+)\*")

    # Values that mean "no parents"
    NO_REFERENCE_VALUES = ["-", "null", "none", "None", "N/A", "n/a"]

    def parse_file(
        self, file_path: Path, relative_path: str
    ) -> tuple[list[RequirementRecord], list[TraceError]]:
        """Parse one document file.

        Raises:
            OSError: If the file cannot be read.
        """
        return self.parse_text(file_path.read_text(encoding="utf-8"), relative_path)

    def parse_text(
        self, text: str, path: str = ""
    ) -> tuple[list[RequirementRecord], list[TraceError]]:
        """Parse every requirement block in a document.

        Args:
            text: Document content.
            path: Document path relative to the repository root.

        Returns:
            (records, errors). Malformed blocks produce an error and no record.
            Positions count every block in the file, well-formed or not.
        """
        records: list[RequirementRecord] = []
        errors: list[TraceError] = []

        block: list[str] = []
        header: re.Match[str] | None = None
        header_line = 0
        position = 0

        for line_no, line in enumerate(text.splitlines(), start=1):
            match = self.HEADER_PATTERN.match(line)
            if match and REQ_ID_PATTERN.fullmatch(match.group("id")):
                if header is not None:
                    errors.append(
                        self._error(header.group("id"), path, header_line, "missing end marker")
                    )
                    position += 1
                header, header_line, block = match, line_no, []
                continue

            if header is None:
                continue

            end = self.END_MARKER_PATTERN.match(line)
            if end:
                req_id = header.group("id")
                if end.group("id").strip() != req_id:
                    errors.append(
                        self._error(
                            req_id,
                            path,
                            line_no,
                            f"end marker names {end.group('id').strip()}",
                        )
                    )
                else:
                    record, error = self._build_record(
                        header, block, path, header_line, position
                    )
                    if error is not None:
                        errors.append(error)
                    else:
                        records.append(record)
                position += 1
                header, block = None, []
                continue

            block.append(line)

        if header is not None:
            errors.append(self._error(header.group("id"), path, header_line, "missing end marker"))

        return records, errors

    def _build_record(
        self,
        header: re.Match[str],
        lines: list[str],
        path: str,
        line: int,
        position: int,
    ) -> tuple[RequirementRecord | None, TraceError | None]:
        """Turn the lines of one block into a record."""
        req_id = header.group("id")
        title = header.group("title").strip()
        req_type = REQ_ID_PATTERN.fullmatch(req_id).group("type")
        if req_type not in REQ_TYPE_TO_LEVEL:
            return None, self._error(req_id, path, line, f"unknown requirement type '{req_type}'")

        attributes: dict[str, str] = {}
        body_lines: list[str] = []

        for text in lines:
            match = self.ATTRIBUTE_PATTERN.match(text)
            if match:
                attributes[match.group("key").strip().upper()] = match.group("value").strip()
            else:
                body_lines.append(text)

        parents: list[str] = []
        for ref in self._parse_refs(attributes.get("PARENTS", "")):
            if not REQ_ID_PATTERN.fullmatch(ref):
                return None, self._error(req_id, path, line, f"invalid parent reference '{ref}'")
            parents.append(ref)

        body = "\n".join(body_lines).strip("\n")
        attributes["TEXT"] = f"{title}\n{body}" if body.strip() else title

        record = RequirementRecord(
            id=req_id,
            parents=parents,
            attributes=attributes,
            position=position,
            path=path,
            line=line,
        )
        return record, None

    def _parse_refs(self, refs_str: str) -> list[str]:
        """Parse a comma-separated reference list."""
        stripped = refs_str.strip()
        if not stripped or stripped in self.NO_REFERENCE_VALUES:
            return []
        return [p.strip() for p in stripped.split(",") if p.strip()]

    @staticmethod
    def _error(req_id: str, path: str, line: int, detail: str) -> TraceError:
        return TraceError(
            kind=ErrorKind.MALFORMED_RECORD,
            node_id=req_id,
            path=path,
            line=line,
            detail=detail,
        )

"""Source files, global byte positions and line/column lookup."""

from __future__ import annotations

import os
from bisect import bisect_right
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class FileId:
    """Identifier of a file registered in a :class:`SourceMap`."""

    id: int = 0


@dataclass(frozen=True)
class Location:
    """A position in a file: 1-based line, 0-based column."""

    file: FileId
    line: int
    column: int


@dataclass(frozen=True)
class Span:
    """A half-open range ``[start, end)`` of global positions."""

    start: int = 0
    end: int = 0

    def is_valid(self) -> bool:
        return self.start <= self.end

    def length(self) -> int:
        return self.end - self.start

    def contains(self, pos: int) -> bool:
        return self.start <= pos < self.end

    def with_offset(self, offset: int) -> Span:
        return Span(self.start + offset, self.end + offset)


@dataclass
class SourceFile:
    """One source file and the positions where its lines start."""

    name: str
    content: str
    start_pos: int = 0
    line_starts: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.line_starts = [0]
        self.line_starts.extend(
            i + 1 for i, ch in enumerate(self.content) if ch == "\n"
        )

    def byte_pos_to_location(self, byte_pos: int, file_id: FileId) -> Location:
        """Convert a local position to a location; positions past the end map to EOF."""
        if byte_pos >= len(self.content):
            last_start = self.line_starts[-1]
            return Location(
                file_id, len(self.line_starts), len(self.content) - last_start
            )
        index = bisect_right(self.line_starts, byte_pos) - 1
        return Location(file_id, index + 1, byte_pos - self.line_starts[index])

    def location_to_byte_pos(self, line: int, column: int) -> int | None:
        """Convert a line and column to a local position, or None if out of range."""
        if line == 0 or line > len(self.line_starts):
            return None
        byte_pos = self.line_starts[line - 1] + column
        if line < len(self.line_starts):
            if byte_pos > self.line_starts[line]:
                return None
        elif byte_pos > len(self.content):
            return None
        return byte_pos

    def get_line(self, line_number: int) -> str | None:
        """Return the text of a 1-based line without its newline."""
        if line_number == 0 or line_number > len(self.line_starts):
            return None
        start = self.line_starts[line_number - 1]
        if line_number < len(self.line_starts):
            end = self.line_starts[line_number] - 1
        else:
            end = len(self.content)
        if start < end <= len(self.content) and self.content[end - 1] == "\n":
            end -= 1
        return self.content[start:end]

    def get_span_text(self, span: Span) -> str | None:
        """Return the text covered by a local span."""
        if not span.is_valid() or span.end > len(self.content):
            return None
        return self.content[span.start : span.end]


class SourceMap:
    """Registry of source files laid out one after another in a global position space."""

    def __init__(self) -> None:
        self._files: list[SourceFile] = []
        self._file_ids: dict[str, FileId] = {}
        self._next_start_pos = 0

    @property
    def files(self) -> list[SourceFile]:
        return list(self._files)

    def add_file(self, name: str, content: str) -> FileId:
        """Register a file; a name already known returns its existing id."""
        existing = self._file_ids.get(name)
        if existing is not None:
            return existing
        file_id = FileId(len(self._files))
        self._files.append(SourceFile(name, content, self._next_start_pos))
        self._file_ids[name] = file_id
        self._next_start_pos += len(content)
        return file_id

    def load_file(self, path: str | os.PathLike[str]) -> FileId | None:
        """Read a file from disk and register it; None if it cannot be read."""
        name = os.fspath(path)
        existing = self._file_ids.get(name)
        if existing is not None:
            return existing
        try:
            with open(name, encoding="utf-8", errors="surrogateescape", newline="") as fh:
                content = fh.read()
        except OSError:
            return None
        return self.add_file(name, content)

    def get_file(self, file_id: FileId) -> SourceFile | None:
        if 0 <= file_id.id < len(self._files):
            return self._files[file_id.id]
        return None

    def get_file_id(self, name: str) -> FileId | None:
        return self._file_ids.get(name)

    def lookup_location(self, global_pos: int) -> Location | None:
        """Find the file and line/column of a global position."""
        for index, file in enumerate(self._files):
            if file.start_pos <= global_pos < file.start_pos + len(file.content):
                return file.byte_pos_to_location(
                    global_pos - file.start_pos, FileId(index)
                )
        return None

    def lookup_byte_pos(self, loc: Location) -> int | None:
        """Convert a location to a global position."""
        file = self.get_file(loc.file)
        if file is None:
            return None
        local = file.location_to_byte_pos(loc.line, loc.column)
        if local is None:
            return None
        return file.start_pos + local

    def get_span_text(self, span: Span) -> str | None:
        """Return the text of a global span, which may cross file boundaries."""
        if not span.is_valid():
            return None
        pieces: list[str] = []
        covered_end = span.start
        for file in self._files:
            file_end = file.start_pos + len(file.content)
            if file.start_pos <= covered_end < file_end and span.end > file.start_pos:
                local_start = covered_end - file.start_pos
                local_end = min(span.end, file_end) - file.start_pos
                text = file.get_span_text(Span(local_start, local_end))
                if text is None:
                    return None
                pieces.append(text)
                covered_end = file.start_pos + local_end
        if covered_end >= span.end:
            return "".join(pieces)
        return None

    def get_line_at_location(self, loc: Location) -> str | None:
        file = self.get_file(loc.file)
        if file is None:
            return None
        return file.get_line(loc.line)

    def make_span(
        self,
        file_id: FileId,
        start_line: int,
        start_col: int,
        end_line: int,
        end_col: int,
    ) -> Span:
        """Build a global span from line/column pairs; an empty span if invalid."""
        file = self.get_file(file_id)
        if file is None:
            return Span()
        start = file.location_to_byte_pos(start_line, start_col)
        end = file.location_to_byte_pos(end_line, end_col)
        if start is None or end is None:
            return Span()
        return Span(file.start_pos + start, file.start_pos + end)

    def format_location(self, loc: Location) -> str:
        """Render ``name:line:column`` with a 1-based column."""
        file = self.get_file(loc.file)
        if file is None:
            return "<unknown>"
        return f"{file.name}:{loc.line}:{loc.column + 1}"

    def format_span(self, span: Span) -> str | None:
        """Render a span as a location range, or None if it lies outside every file."""
        start_loc = self.lookup_location(span.start)
        end_loc = self.lookup_location(span.end - 1)
        if start_loc is None or end_loc is None:
            return None
        if start_loc.file == end_loc.file and start_loc.line == end_loc.line:
            file = self.get_file(start_loc.file)
            if file is None:
                return None
            return (
                f"{file.name}:{start_loc.line}:{start_loc.column + 1}"
                f"-{end_loc.column + 1}"
            )
        return f"{self.format_location(start_loc)}-{self.format_location(end_loc)}"
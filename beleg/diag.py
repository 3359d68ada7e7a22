"""Diagnostics: levels, builders, the reporting context and a terminal renderer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TextIO

from beleg.source_map import Location, SourceMap, Span


class DiagLevel(Enum):
    """Severity of a diagnostic."""

    NOTE = "Note"
    WARNING = "Warning"
    ERROR = "Error"
    FATAL = "Fatal"


class Issue(ABC):
    """A problem found by a compiler pass that can report itself as a diagnostic."""

    def __init__(
        self, span: Span, message: str, level: DiagLevel = DiagLevel.ERROR
    ) -> None:
        self.span = span
        self.message = message
        self.level = level

    @abstractmethod
    def emit(self, diag_ctx: DiagCtxt) -> None:
        """Report this issue through a diagnostic context."""


@dataclass
class DiagCtxtOptions:
    """Limits and presentation settings of a :class:`DiagCtxt`."""

    max_errors: int = 100
    max_warnings: int = 1000
    use_colors: bool = True
    abort_on_first_error: bool = False
    default_context_lines: int = 0


@dataclass
class Label:
    """A span of source with a short explanation attached."""

    span: Span
    text: str
    level: DiagLevel = DiagLevel.ERROR
    surrounding_lines: int = 1


@dataclass
class Diag:
    """A complete diagnostic ready to be rendered."""

    level: DiagLevel
    primary_message: str
    primary_span: Span = field(default_factory=Span)
    error_code: int | None = None
    labels: list[Label] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagEmitter(ABC):
    """Consumer of diagnostics."""

    @abstractmethod
    def emit(self, diag: Diag) -> None:
        """Handle one diagnostic."""


_RESET = "\x1b[0m"
_LEVEL_STYLES = {
    DiagLevel.FATAL: "\x1b[91m",
    DiagLevel.ERROR: "\x1b[91m",
    DiagLevel.WARNING: "\x1b[93m",
    DiagLevel.NOTE: "\x1b[94m",
}


class TerminalEmitter(DiagEmitter):
    """Renders diagnostics as text, with optional colours and box-drawing characters."""

    def __init__(
        self,
        output: TextIO,
        use_colors: bool = True,
        use_unicode: bool = True,
        source_map: SourceMap | None = None,
    ) -> None:
        self.output = output
        self.use_colors = use_colors
        self.use_unicode = use_unicode
        self.source_map = source_map

    def _style(self, level: DiagLevel) -> str:
        return _LEVEL_STYLES[level] if self.use_colors else ""

    @property
    def _reset(self) -> str:
        return _RESET if self.use_colors else ""

    @property
    def _bar(self) -> str:
        return "│" if self.use_unicode else "|"

    @property
    def _underline(self) -> str:
        return "─" if self.use_unicode else "-"

    def emit(self, diag: Diag) -> None:
        self._render_header(diag)
        for index, label in enumerate(sorted(diag.labels, key=lambda lb: lb.span.start)):
            self._render_label(label, is_primary=index == 0)
        self._render_notes(diag)

    def _render_header(self, diag: Diag) -> None:
        code = f"[{diag.error_code}] " if diag.error_code is not None else ""
        self.output.write(
            f"{self._style(diag.level)}{code}{diag.level.value}: "
            f"{diag.primary_message}{self._reset}\n"
        )

    def _render_label(self, label: Label, is_primary: bool) -> None:
        if self.source_map is None:
            return
        location = self.source_map.lookup_location(label.span.start)
        if location is None:
            return
        source_file = self.source_map.get_file(location.file)
        if source_file is None:
            return

        surrounding = label.surrounding_lines
        start_line = location.line - surrounding if location.line > surrounding else 1
        end_location = self.source_map.lookup_location(label.span.end)
        end_line = (end_location.line if end_location else location.line) + surrounding
        width = len(str(end_line))
        pad = " " * width

        if is_primary:
            opener = " ╭─[ " if self.use_unicode else " +--[ "
            self.output.write(
                f" {pad}{opener}{source_file.name}:{location.line}:"
                f"{location.column + 1} ]\n"
            )
            self.output.write(f" {pad} {self._bar}\n")

        for line_num in range(start_line, end_line + 1):
            text = source_file.get_line(line_num)
            if text is None:
                continue
            self.output.write(f" {line_num:>{width}} {self._bar} {text}\n")
            if line_num == location.line:
                self._render_underline(label, location, end_location, pad)

        if is_primary:
            closer = " ╰───" if self.use_unicode else " ---+"
            self.output.write(f" {pad}{closer}\n")

    def _render_underline(
        self,
        label: Label,
        start: Location,
        end: Location | None,
        pad: str,
    ) -> None:
        span_len = 1
        if end is not None and end.line == start.line and end.column > start.column:
            span_len = end.column - start.column
        message = f" {label.text}" if label.text else ""
        self.output.write(
            f" {pad} {self._bar} {' ' * start.column}{self._style(label.level)}"
            f"{self._underline * span_len}{self._reset}{message}\n"
        )

    def _render_notes(self, diag: Diag) -> None:
        style = self._style(DiagLevel.NOTE)
        for note in diag.notes:
            self.output.write(f"{style}note{self._reset}: {note}\n")


def create_terminal_emitter(
    output: TextIO,
    use_colors: bool = True,
    use_unicode: bool = True,
    source_map: SourceMap | None = None,
) -> TerminalEmitter:
    """Create an emitter that writes rendered diagnostics to ``output``."""
    return TerminalEmitter(output, use_colors, use_unicode, source_map)


class DiagBuilder:
    """Fluent construction of a diagnostic that is sent to a context on :meth:`emit`."""

    def __init__(
        self,
        ctxt: DiagCtxt | None,
        level: DiagLevel,
        message: str,
        span: Span,
    ) -> None:
        self._ctxt = ctxt
        self.diag = Diag(level=level, primary_message=message, primary_span=span)

    def code(self, error_code: int) -> DiagBuilder:
        self.diag.error_code = error_code
        return self

    def label(
        self, span: Span, text: str, level: DiagLevel = DiagLevel.ERROR
    ) -> DiagBuilder:
        self.diag.labels.append(Label(span, text, level))
        return self

    def note(self, note: str) -> DiagBuilder:
        self.diag.notes.append(note)
        return self

    def span_label(self, span: Span, text: str) -> DiagBuilder:
        """Add a label at the diagnostic's own level."""
        return self.label(span, text, self.diag.level)

    def emit(self) -> None:
        if self._ctxt is not None:
            self._ctxt.emit(self.diag)


class DiagCtxt:
    """Counts diagnostics, applies limits and forwards them to emitters."""

    def __init__(
        self,
        options: DiagCtxtOptions | None = None,
        source_map: SourceMap | None = None,
    ) -> None:
        self.options = options if options is not None else DiagCtxtOptions()
        self.source_map = source_map
        self._emitters: list[DiagEmitter] = []
        self._error_count = 0
        self._warning_count = 0

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def warning_count(self) -> int:
        return self._warning_count

    def add_emitter(self, emitter: DiagEmitter) -> None:
        self._emitters.append(emitter)

    def can_emit(self, level: DiagLevel) -> bool:
        """Whether a diagnostic of this level is still under its limit."""
        if level in (DiagLevel.ERROR, DiagLevel.FATAL):
            return self._error_count < self.options.max_errors
        if level is DiagLevel.WARNING:
            return self._warning_count < self.options.max_warnings
        return True

    def emit(self, diag: Diag) -> None:
        """Count the diagnostic and pass it to every emitter, unless over its limit."""
        if not self.can_emit(diag.level):
            return
        if diag.level in (DiagLevel.ERROR, DiagLevel.FATAL):
            self._error_count += 1
        elif diag.level is DiagLevel.WARNING:
            self._warning_count += 1
        for emitter in self._emitters:
            emitter.emit(diag)

    def diag_builder(
        self, level: DiagLevel, primary_message: str, primary_span: Span
    ) -> DiagBuilder:
        return DiagBuilder(self, level, primary_message, primary_span)
"""Token-stream parser with a cursor stack for backtracking and span tracking."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from enum import IntEnum, auto

from beleg.ast import Ast, NodeBuilder, NodeIndex, NodeKind
from beleg.diag import DiagCtxt, DiagLevel, Issue
from beleg.lex import Token, TokenKind
from beleg.source_map import SourceMap, Span


class _ZeroBased(IntEnum):
    @staticmethod
    def _generate_next_value_(name, start, count, last_values):
        return count


class ParseErrorKind(_ZeroBased):
    """Categories of parse errors."""

    UNEXPECTED_TOKEN = auto()
    EXPECTED_TOKEN = auto()
    INVALID_TOKEN = auto()

    MISSING_SEMICOLON = auto()
    MISSING_PARENTHESIS = auto()
    MISSING_BRACE = auto()
    UNEXPECTED_EOF = auto()

    INTERNAL_ERROR = auto()


class ParseError(Issue, Exception):
    """A parse failure; raised by parsing routines and reportable as a diagnostic."""

    def __init__(
        self,
        span: Span,
        message: str,
        kind: ParseErrorKind = ParseErrorKind.INTERNAL_ERROR,
        level: DiagLevel = DiagLevel.ERROR,
    ) -> None:
        Issue.__init__(self, span, message, level)
        Exception.__init__(self, message)
        self.kind = kind

    def emit(self, diag_ctx: DiagCtxt) -> None:
        """Report this error with a label over its span."""
        diag_ctx.diag_builder(self.level, self.message, self.span).label(
            self.span, self.message
        ).emit()


_EOF = Token(TokenKind.EOF, 0, 0)
_SOF = Token(TokenKind.SOF, 0, 0)


class Parser:
    """Hand-written PEG parser over a list of tokens."""

    def __init__(
        self,
        source_map: SourceMap | None,
        tokens: Iterable[Token],
        start_pos: int = 0,
    ) -> None:
        self.source_map = source_map
        self._tokens: list[Token] = list(tokens)
        self._ast = Ast()
        self._cursor = 0
        self._cursor_stack: list[int] = []
        self._start_pos = start_pos
        self._errors: list[ParseError] = []
        self.enter()

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def errors(self) -> tuple[ParseError, ...]:
        """Errors passed to :meth:`parse_error`."""
        return tuple(self._errors)

    def parse(self, diag_ctx: DiagCtxt) -> None:
        """Parse the file scope; on failure report the error to ``diag_ctx``."""
        try:
            root = self._try_file_scope()
        except ParseError as error:
            error.emit(diag_ctx)
        else:
            self._ast.set_root(root)

    def parse_error(self, error: ParseError) -> None:
        """Record an error and emit it into a private diagnostic context."""
        self._errors.append(error)
        error.emit(DiagCtxt())

    def enter(self) -> None:
        """Push the current cursor onto the cursor stack."""
        self._cursor_stack.append(self._cursor)

    def exit(self) -> None:
        """Pop the cursor stack; does nothing if it is empty."""
        if self._cursor_stack:
            self._cursor_stack.pop()

    @contextmanager
    def scoped_guard(self) -> Iterator[Parser]:
        """Enter a nested scope for the duration of a ``with`` block."""
        self.enter()
        try:
            yield self
        finally:
            self.exit()

    def finalize(self) -> Ast:
        """Return the syntax tree built so far."""
        return self._ast

    def peek(self, expected: Sequence[TokenKind]) -> bool:
        """Whether the upcoming tokens have exactly these kinds.

        The token run must also leave at least one token after it.
        """
        if self._cursor + len(expected) >= len(self._tokens):
            return False
        upcoming = self._tokens[self._cursor : self._cursor + len(expected)]
        return all(token.kind == kind for token, kind in zip(upcoming, expected))

    def eat_token(self, expected: TokenKind) -> bool:
        """Consume the next token if it has the expected kind."""
        if self._cursor >= len(self._tokens):
            return False
        if self._tokens[self._cursor].kind == expected:
            self._cursor += 1
            return True
        return False

    def eat_tokens(self, amount: int) -> None:
        """Skip ``amount`` tokens, stopping at the end of the stream."""
        self._cursor = min(self._cursor + amount, len(self._tokens))

    def next_token(self) -> Token:
        """Consume and return the next token; EOF past the end."""
        if self._cursor >= len(self._tokens):
            return _EOF
        token = self._tokens[self._cursor]
        self._cursor += 1
        return token

    def peek_next_token(self) -> Token:
        """Return the next token without consuming it; EOF past the end."""
        if self._cursor >= len(self._tokens):
            return _EOF
        return self._tokens[self._cursor]

    def current_token(self) -> Token:
        """Return the most recently consumed token; SOF before any."""
        if self._cursor == 0 or self._cursor > len(self._tokens):
            return _SOF
        return self._tokens[self._cursor - 1]

    def get_token(self, index: int) -> Token:
        """Return the token at ``index``; EOF if out of range."""
        if index >= len(self._tokens):
            return _EOF
        return self._tokens[index]

    def previous_token(self) -> Token:
        """Return the token before the cursor; SOF at the start."""
        if self._cursor == 0:
            return _SOF
        return self._tokens[self._cursor - 1]

    def current_span(self) -> Span:
        """Span from the start of the innermost scope to the last consumed token."""
        if not self._cursor_stack:
            return Span(0, 0)
        start = self._cursor_stack[-1]
        end = self._cursor
        start_pos = self._tokens[start].start if start < len(self._tokens) else 0
        if 0 < end < len(self._tokens):
            end_pos = self._tokens[end - 1].end
        else:
            end_pos = start_pos
        return Span(start_pos, end_pos).with_offset(self._start_pos)

    def next_token_span(self) -> Span:
        """Span of the next token, or an empty span past the end."""
        if self._cursor >= len(self._tokens):
            return Span(0, 0)
        token = self._tokens[self._cursor]
        return Span(token.start, token.end).with_offset(self._start_pos)

    def current_degree(self) -> int:
        """Depth of the cursor stack."""
        return len(self._cursor_stack)

    def _try_file_scope(self) -> NodeIndex:
        with self.scoped_guard():
            return self._ast.add_node(
                NodeBuilder(NodeKind.FILE_SCOPE, self.current_span())
            )
"""Tokens and the lexer that produces them from source text."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum, auto


class _ZeroBased(IntEnum):
    @staticmethod
    def _generate_next_value_(name, start, count, last_values):
        return count


class TokenKind(_ZeroBased):
    """Kinds of lexical tokens."""

    # Operators and punctuation
    PLUS = auto()
    PLUS_EQ = auto()
    PLUS_PLUS = auto()
    LT = auto()
    LT_EQ = auto()
    GT = auto()
    GT_EQ = auto()
    BANG = auto()
    BANG_EQ = auto()
    MINUS = auto()
    ARROW = auto()
    MINUS_EQ = auto()
    DOT = auto()
    COLON = auto()
    STAR = auto()
    STAR_EQ = auto()
    SLASH = auto()
    SLASH_EQ = auto()
    PERCENT = auto()
    PERCENT_EQ = auto()
    EQ = auto()
    FAT_ARROW = auto()
    EQ_EQ = auto()
    TILDE = auto()
    PIPE = auto()
    HASH = auto()
    QUESTION = auto()
    BACKSLASH = auto()
    AMPERSAND = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    QUOTE = auto()
    SEMI = auto()
    CARET = auto()
    DOLLAR = auto()
    AT = auto()
    UNDERSCORE = auto()

    # Primitive literals
    STR = auto()
    INT = auto()
    INT_BIN = auto()
    INT_OCT = auto()
    INT_HEX = auto()
    REAL = auto()
    REAL_SCI = auto()
    CHAR = auto()

    # Keywords
    AND = auto()
    AS = auto()
    BOOL = auto()
    BREAK = auto()
    CATCH = auto()
    CONST = auto()
    CONTINUE = auto()
    ELSE = auto()
    ENUM = auto()
    ERROR = auto()
    EXTERN = auto()
    FALSE = auto()
    FN = auto()
    FOR = auto()
    IF = auto()
    IN = auto()
    INLINE = auto()
    IS = auto()
    LET = auto()
    MATCH = auto()
    MOD = auto()
    NEWTYPE = auto()
    NOT = auto()
    NULL = auto()
    OR = auto()
    PRIVATE = auto()
    REF = auto()
    RETURN = auto()
    SELF_LOWER = auto()
    SELF_CAP = auto()
    STATIC = auto()
    STRUCT = auto()
    TEST = auto()
    TRUE = auto()
    TYPEALIAS = auto()
    UNION = auto()
    USE = auto()
    WHEN = auto()
    WHILE = auto()

    # Others
    ID = auto()
    COMMENT = auto()
    INVALID = auto()
    SOF = auto()
    EOF = auto()

    def __str__(self) -> str:
        return lexeme(self)

    def __format__(self, format_spec: str) -> str:
        return format(lexeme(self), format_spec)


_K = TokenKind

_KEYWORDS: dict[str, TokenKind] = {
    "and": _K.AND,
    "as": _K.AS,
    "bool": _K.BOOL,
    "break": _K.BREAK,
    "catch": _K.CATCH,
    "const": _K.CONST,
    "continue": _K.CONTINUE,
    "else": _K.ELSE,
    "enum": _K.ENUM,
    "error": _K.ERROR,
    "extern": _K.EXTERN,
    "false": _K.FALSE,
    "fn": _K.FN,
    "for": _K.FOR,
    "if": _K.IF,
    "in": _K.IN,
    "inline": _K.INLINE,
    "is": _K.IS,
    "let": _K.LET,
    "match": _K.MATCH,
    "mod": _K.MOD,
    "newtype": _K.NEWTYPE,
    "not": _K.NOT,
    "null": _K.NULL,
    "or": _K.OR,
    "private": _K.PRIVATE,
    "ref": _K.REF,
    "return": _K.RETURN,
    "self": _K.SELF_LOWER,
    "Self": _K.SELF_CAP,
    "static": _K.STATIC,
    "struct": _K.STRUCT,
    "test": _K.TEST,
    "true": _K.TRUE,
    "typealias": _K.TYPEALIAS,
    "union": _K.UNION,
    "use": _K.USE,
    "when": _K.WHEN,
    "while": _K.WHILE,
}

_LEXEMES: dict[TokenKind, str] = {
    _K.PLUS: "+",
    _K.PLUS_EQ: "+=",
    _K.PLUS_PLUS: "++",
    _K.LT: "<",
    _K.LT_EQ: "<=",
    _K.GT: ">",
    _K.GT_EQ: ">=",
    _K.BANG: "!",
    _K.BANG_EQ: "!=",
    _K.MINUS: "-",
    _K.ARROW: "->",
    _K.MINUS_EQ: "-=",
    _K.DOT: ".",
    _K.COLON: ":",
    _K.STAR: "*",
    _K.STAR_EQ: "*=",
    _K.SLASH: "/",
    _K.SLASH_EQ: "/=",
    _K.PERCENT: "%",
    _K.PERCENT_EQ: "%=",
    _K.EQ: "=",
    _K.FAT_ARROW: "=>",
    _K.EQ_EQ: "==",
    _K.TILDE: "~",
    _K.PIPE: "|",
    _K.HASH: "#",
    _K.QUESTION: "?",
    _K.BACKSLASH: "\\",
    _K.AMPERSAND: "&",
    _K.LBRACKET: "[",
    _K.RBRACKET: "]",
    _K.LPAREN: "(",
    _K.RPAREN: ")",
    _K.LBRACE: "{",
    _K.RBRACE: "}",
    _K.COMMA: ",",
    _K.QUOTE: "'",
    _K.SEMI: ";",
    _K.CARET: "^",
    _K.DOLLAR: "$",
    _K.AT: "@",
    _K.UNDERSCORE: "_",
    _K.STR: "<string_literal>",
    _K.INT: "<integer_literal>",
    _K.INT_BIN: "<binary_integer_literal>",
    _K.INT_OCT: "<octal_integer_literal>",
    _K.INT_HEX: "<hexadecimal_integer_literal>",
    _K.REAL: "<real_literal>",
    _K.REAL_SCI: "<scientific_real_literal>",
    _K.CHAR: "<character_literal>",
    _K.ID: "<identifier>",
    _K.COMMENT: "<comment>",
    _K.INVALID: "<invalid_token>",
    _K.SOF: "<start_of_file>",
    _K.EOF: "<end_of_file>",
}
_LEXEMES.update((kind, text) for text, kind in _KEYWORDS.items())

_SINGLE_CHAR: dict[str, TokenKind] = {
    ".": _K.DOT,
    ":": _K.COLON,
    ";": _K.SEMI,
    ",": _K.COMMA,
    "(": _K.LPAREN,
    ")": _K.RPAREN,
    "{": _K.LBRACE,
    "}": _K.RBRACE,
    "[": _K.LBRACKET,
    "]": _K.RBRACKET,
    "~": _K.TILDE,
    "|": _K.PIPE,
    "#": _K.HASH,
    "?": _K.QUESTION,
    "\\": _K.BACKSLASH,
    "&": _K.AMPERSAND,
    "^": _K.CARET,
    "$": _K.DOLLAR,
    "@": _K.AT,
}

# Candidates are tried in order; the first whose text matches wins.
_OPERATORS: dict[str, tuple[tuple[str, TokenKind], ...]] = {
    "+": (("+=", _K.PLUS_EQ), ("++", _K.PLUS_PLUS), ("+", _K.PLUS)),
    "-": (("->", _K.ARROW), ("-=", _K.MINUS_EQ), ("-", _K.MINUS)),
    "*": (("*=", _K.STAR_EQ), ("*", _K.STAR)),
    "/": (("/=", _K.SLASH_EQ), ("/", _K.SLASH)),
    "%": (("%=", _K.PERCENT_EQ), ("%", _K.PERCENT)),
    "<": (("<=", _K.LT_EQ), ("<", _K.LT)),
    ">": ((">=", _K.GT_EQ), (">", _K.GT)),
    "=": (("=>", _K.FAT_ARROW), ("==", _K.EQ_EQ), ("=", _K.EQ)),
    "!": (("!=", _K.BANG_EQ), ("!", _K.BANG)),
}
del _K

_WHITESPACE = frozenset(" \t\n\v\f\r")
_DIGITS = frozenset("0123456789")
_OCT_DIGITS = frozenset("01234567")
_BIN_DIGITS = frozenset("01")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_IDENT_START = _LETTERS | {"_"}
_IDENT_CHARS = _IDENT_START | _DIGITS


def lexeme(kind: TokenKind) -> str:
    """The text of a token kind, or a bracketed description for literal classes."""
    return _LEXEMES.get(kind, "<unknown>")


def keyword_kind(ident: str) -> TokenKind | None:
    """The keyword token kind for an identifier, or None if it is not a keyword."""
    return _KEYWORDS.get(ident)


@dataclass(frozen=True)
class Token:
    """A token kind with the half-open range of source positions it covers."""

    kind: TokenKind
    start: int
    end: int

    def __str__(self) -> str:
        return f"Token({lexeme(self.kind)}, {self.start}, {self.end})"


class Lexer:
    """Produces tokens one at a time from source text."""

    def __init__(self, src: str) -> None:
        self.src = src
        self.cursor = 0

    def _current_char(self) -> str | None:
        if self.cursor >= len(self.src):
            return None
        return self.src[self.cursor]

    def _at(self, chars: frozenset[str], offset: int = 0) -> bool:
        pos = self.cursor + offset
        return pos < len(self.src) and self.src[pos] in chars

    def _skip(self, chars: frozenset[str]) -> None:
        while self._at(chars):
            self.cursor += 1

    def peek(self, text: str) -> bool:
        """Whether the source at the cursor starts with ``text``."""
        if self.cursor + len(text) > len(self.src):
            return False
        return self.src.startswith(text, self.cursor)

    def next(self) -> Token:
        """Return the next token; EOF once the source is exhausted.

        An unrecognised character yields an empty INVALID token and the
        cursor stays where it is.
        """
        self._skip(_WHITESPACE)
        ch = self._current_char()
        if ch is None:
            return Token(TokenKind.EOF, self.cursor, self.cursor)

        start = self.cursor
        if ch in _SINGLE_CHAR:
            token = Token(_SINGLE_CHAR[ch], start, start + 1)
        elif ch in _OPERATORS:
            text, kind = next(
                (text, kind) for text, kind in _OPERATORS[ch] if self.peek(text)
            )
            token = Token(kind, start, start + len(text))
        elif ch == '"':
            return self._string_literal()
        elif ch == "'":
            return self._char_literal()
        elif ch in _IDENT_START:
            return self._identifier()
        elif ch in _DIGITS:
            return self._number()
        else:
            token = Token(TokenKind.INVALID, start, start)

        self.cursor = token.end
        return token

    def _identifier(self) -> Token:
        start = self.cursor
        self._skip(_IDENT_CHARS)
        ident = self.src[start : self.cursor]
        kind = keyword_kind(ident) or TokenKind.ID
        return Token(kind, start, self.cursor)

    def _string_literal(self) -> Token:
        start = self.cursor
        self.cursor += 1
        while self.cursor < len(self.src) and self.src[self.cursor] != '"':
            if self.src[self.cursor] == "\\" and self.cursor + 1 < len(self.src):
                self.cursor += 2
            else:
                self.cursor += 1
        if self.cursor < len(self.src):
            self.cursor += 1
        return Token(TokenKind.STR, start, self.cursor)

    def _radix_literal(
        self, start: int, kind: TokenKind, digits: frozenset[str]
    ) -> Token:
        self.cursor += 2
        self._skip(digits)
        return Token(kind, start, self.cursor)

    def _number(self) -> Token:
        start = self.cursor
        if self.src[start] == "0":
            if self._at(frozenset("bB"), 1):
                return self._radix_literal(start, TokenKind.INT_BIN, _BIN_DIGITS)
            if self._at(frozenset("oO"), 1):
                return self._radix_literal(start, TokenKind.INT_OCT, _OCT_DIGITS)
            if self._at(frozenset("xX"), 1):
                return self._radix_literal(start, TokenKind.INT_HEX, _HEX_DIGITS)

        self._skip(_DIGITS)
        if not self._at(frozenset(".")):
            return Token(TokenKind.INT, start, self.cursor)

        self.cursor += 1
        self._skip(_DIGITS)
        if not self._at(frozenset("eE")):
            return Token(TokenKind.REAL, start, self.cursor)

        self.cursor += 1
        if self._at(frozenset("+-")):
            self.cursor += 1
        self._skip(_DIGITS)
        return Token(TokenKind.REAL_SCI, start, self.cursor)

    def _char_literal(self) -> Token:
        start = self.cursor
        self.cursor += 1
        if self._at(frozenset("\\")):
            self.cursor += 2
        else:
            self.cursor += 1
        if self._at(frozenset("'")):
            self.cursor += 1
        return Token(TokenKind.CHAR, start, self.cursor)


_STOP_KINDS: frozenset[TokenKind] = frozenset({TokenKind.EOF, TokenKind.INVALID})
_is_stop: Callable[[Token], bool] = lambda token: token.kind in _STOP_KINDS


def tokenize(src: str) -> list[Token]:
    """Lex the whole source.

    The list ends with the EOF token, or with an INVALID token when an
    unrecognised character stops the lexer from making progress.
    """
    lexer = Lexer(src)
    tokens: list[Token] = []
    while True:
        token = lexer.next()
        tokens.append(token)
        if _is_stop(token):
            return tokens
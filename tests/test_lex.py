import pytest

from beleg.lex import Lexer, Token, TokenKind, keyword_kind, lexeme, tokenize


def _kinds(src):
    return [token.kind for token in tokenize(src)]


@pytest.mark.parametrize(
    "kind, text",
    [
        (TokenKind.PLUS, "+"),
        (TokenKind.MINUS, "-"),
        (TokenKind.STAR, "*"),
        (TokenKind.SLASH, "/"),
        (TokenKind.EQ, "="),
        (TokenKind.EQ_EQ, "=="),
        (TokenKind.LPAREN, "("),
        (TokenKind.RPAREN, ")"),
    ],
)
def test_token_kind_lexeme(kind, text):
    assert lexeme(kind) == text


def test_lexeme_of_keywords_and_classes():
    assert lexeme(TokenKind.SELF_LOWER) == "self"
    assert lexeme(TokenKind.SELF_CAP) == "Self"
    assert lexeme(TokenKind.EOF) == "<end_of_file>"
    assert lexeme(TokenKind.BACKSLASH) == "\\"


def test_every_kind_has_a_distinct_lexeme():
    texts = {lexeme(kind) for kind in TokenKind}
    assert "<unknown>" not in texts
    assert len(texts) == len(TokenKind)


def test_token_construction():
    token = Token(TokenKind.PLUS, 0, 1)
    assert token.kind == TokenKind.PLUS
    assert token.start == 0
    assert token.end == 1


def test_token_str_uses_lexeme():
    assert str(Token(TokenKind.AND, 0, 3)) == "Token(and, 0, 3)"
    assert f"{TokenKind.PLUS}" == "+"


def test_lexer_basic_tokens():
    token = Lexer("+").next()
    assert token == Token(TokenKind.PLUS, 0, 1)


def test_lexer_multiple_tokens():
    lexer = Lexer("+ - * /")
    assert lexer.next().kind == TokenKind.PLUS
    assert lexer.next().kind == TokenKind.MINUS
    assert lexer.next().kind == TokenKind.STAR
    assert lexer.next().kind == TokenKind.SLASH


def test_lexer_identifiers():
    token = Lexer("variable_name").next()
    assert token == Token(TokenKind.ID, 0, 13)


def test_lexer_keywords():
    lexer = Lexer("fn if else")
    assert lexer.next().kind == TokenKind.FN
    assert lexer.next().kind == TokenKind.IF
    assert lexer.next().kind == TokenKind.ELSE


def test_lexer_numbers():
    token = Lexer("123").next()
    assert token == Token(TokenKind.INT, 0, 3)


def test_lexer_string_literals():
    token = Lexer('"hello world"').next()
    assert token == Token(TokenKind.STR, 0, 13)


def test_lexer_eof():
    assert Lexer("").next().kind == TokenKind.EOF


def test_basic_tokenization_demo():
    src = "fn main() { let x = 42 + 13; }"
    tokens = tokenize(src)
    assert [t.kind for t in tokens] == [
        TokenKind.FN,
        TokenKind.ID,
        TokenKind.LPAREN,
        TokenKind.RPAREN,
        TokenKind.LBRACE,
        TokenKind.LET,
        TokenKind.ID,
        TokenKind.EQ,
        TokenKind.INT,
        TokenKind.PLUS,
        TokenKind.INT,
        TokenKind.SEMI,
        TokenKind.RBRACE,
        TokenKind.EOF,
    ]
    texts = [src[t.start : t.end] for t in tokens[:-1]]
    assert texts == ["fn", "main", "(", ")", "{", "let", "x", "=", "42", "+", "13", ";", "}"]


def test_keyword_vs_identifier_demo():
    src = "fn function if identifier"
    tokens = tokenize(src)[:-1]
    assert [(t.kind, src[t.start : t.end]) for t in tokens] == [
        (TokenKind.FN, "fn"),
        (TokenKind.ID, "function"),
        (TokenKind.IF, "if"),
        (TokenKind.ID, "identifier"),
    ]


def test_number_literals_demo():
    src = "123 0xFF 0b1010 123.45 1.23e-4"
    tokens = tokenize(src)[:-1]
    assert [(t.kind, src[t.start : t.end]) for t in tokens] == [
        (TokenKind.INT, "123"),
        (TokenKind.INT_HEX, "0xFF"),
        (TokenKind.INT_BIN, "0b1010"),
        (TokenKind.REAL, "123.45"),
        (TokenKind.REAL_SCI, "1.23e-4"),
    ]


def test_operators_demo():
    src = "+ += ++ == != -> =>"
    tokens = tokenize(src)[:-1]
    assert [src[t.start : t.end] for t in tokens] == src.split()
    assert [lexeme(t.kind) for t in tokens] == src.split()


def test_octal_literal():
    assert tokenize("0o777")[0] == Token(TokenKind.INT_OCT, 0, 5)


def test_exponent_without_fraction_is_not_scientific():
    assert _kinds("12e3") == [TokenKind.INT, TokenKind.ID, TokenKind.EOF]


def test_char_literals():
    assert tokenize("'a'")[0] == Token(TokenKind.CHAR, 0, 3)
    assert tokenize("'\\n'")[0] == Token(TokenKind.CHAR, 0, 4)


def test_string_with_escape_and_unterminated():
    assert tokenize('"a\\"b"')[0] == Token(TokenKind.STR, 0, 6)
    assert tokenize('"abc')[0] == Token(TokenKind.STR, 0, 4)


def test_underscore_starts_identifier():
    assert tokenize("_")[0] == Token(TokenKind.ID, 0, 1)
    assert tokenize("_foo1")[0] == Token(TokenKind.ID, 0, 5)


def test_invalid_character_does_not_advance():
    lexer = Lexer("`x")
    first = lexer.next()
    assert first == Token(TokenKind.INVALID, 0, 0)
    assert lexer.next() == first


def test_tokenize_stops_at_invalid():
    tokens = tokenize("a `b")
    assert [t.kind for t in tokens] == [TokenKind.ID, TokenKind.INVALID]
    assert tokens[-1].start == 2


def test_keyword_kind():
    assert keyword_kind("while") == TokenKind.WHILE
    assert keyword_kind("Self") == TokenKind.SELF_CAP
    assert keyword_kind("whilst") is None


def test_peek():
    lexer = Lexer("=>")
    assert lexer.peek("=>")
    assert not lexer.peek("==")
    assert not lexer.peek("=>>")


def test_tokens_are_ordered_and_nonoverlapping():
    tokens = tokenize("let y = (a + b) * 3.0; -- ok")
    pairs = list(zip(tokens, tokens[1:]))
    assert all(a.end <= b.start for a, b in pairs)
    assert tokens[-1].kind == TokenKind.EOF
"""
Tests for the KCQL Lexer.

Covers keyword recognition, path capture through the lexer state
machine, literals and illegal input.
"""

import pytest

from kcql.parser.lexer import Lexer, LexerState, TokenType, tokenize


def types(text):
    return [token.type for token in tokenize(text)]


class TestKeywords:
    """Tests for keyword and identifier recognition."""

    def test_keywords_any_case(self):
        words = ["match", "Where", "RETURN", "create", "set", "DeLeTe"]
        assert [tokenize(word)[0].type for word in words] == [
            TokenType.MATCH,
            TokenType.WHERE,
            TokenType.RETURN,
            TokenType.CREATE,
            TokenType.SET,
            TokenType.DELETE,
        ]

    def test_keyword_after_paren_is_ident(self):
        """Words in binding and kind position are identifiers."""
        tokens = tokenize("(match:Set)")
        assert [t.type for t in tokens] == [
            TokenType.LPAR,
            TokenType.IDENT,
            TokenType.COLON,
            TokenType.IDENT,
            TokenType.RPAR,
            TokenType.EOF,
        ]
        assert tokens[1].text == "match"
        assert tokens[3].text == "Set"

    def test_edge_pattern(self):
        assert types("(d:Deployment)-[:OWNS]->(rs:ReplicaSet)") == [
            TokenType.LPAR, TokenType.IDENT, TokenType.COLON, TokenType.IDENT, TokenType.RPAR,
            TokenType.DASH, TokenType.LSQB, TokenType.COLON, TokenType.IDENT, TokenType.RSQB,
            TokenType.ARROW,
            TokenType.LPAR, TokenType.IDENT, TokenType.COLON, TokenType.IDENT, TokenType.RPAR,
            TokenType.EOF,
        ]


class TestPathCapture:
    """Tests for the state machine that captures field paths."""

    def test_return_list(self):
        tokens = tokenize("RETURN d.metadata.name, d.spec.containers[0].image")
        assert [t.type for t in tokens] == [
            TokenType.RETURN,
            TokenType.PATH,
            TokenType.COMMA,
            TokenType.PATH,
            TokenType.EOF,
        ]
        assert tokens[1].text == "d.metadata.name"
        assert tokens[3].text == "d.spec.containers[0].image"

    def test_wildcards_and_quoted_segments(self):
        tokens = tokenize('RETURN p.spec.containers[*].image, d.metadata.labels."app.io"')
        assert tokens[1].text == "p.spec.containers[*].image"
        assert tokens[3].text == 'd.metadata.labels."app.io"'

    def test_quoted_segment_with_punctuation(self):
        tokens = tokenize('{metadata.labels."app.kubernetes.io/part-of": "shop"}')
        assert tokens[1].type == TokenType.PATH
        assert tokens[1].text == 'metadata.labels."app.kubernetes.io/part-of"'
        assert tokens[2].type == TokenType.COLON

    def test_property_block(self):
        tokens = tokenize('{name: "web", metadata.labels.tier: "front"}')
        assert [t.type for t in tokens] == [
            TokenType.LBRACE,
            TokenType.PATH,
            TokenType.COLON,
            TokenType.STRING,
            TokenType.COMMA,
            TokenType.PATH,
            TokenType.COLON,
            TokenType.STRING,
            TokenType.RBRACE,
            TokenType.EOF,
        ]
        assert tokens[5].text == "metadata.labels.tier"

    def test_where_conditions(self):
        tokens = tokenize('WHERE d.spec.replicas >= 2, d.metadata.name != "api"')
        assert [t.type for t in tokens] == [
            TokenType.WHERE,
            TokenType.PATH,
            TokenType.GE,
            TokenType.INT,
            TokenType.COMMA,
            TokenType.PATH,
            TokenType.NE,
            TokenType.STRING,
            TokenType.EOF,
        ]

    def test_states(self):
        lexer = Lexer("RETURN a, b")
        assert lexer.state == LexerState.NORMAL
        lexer.next_token()
        assert lexer.state == LexerState.AFTER_RETURN
        lexer.next_token()
        assert lexer.state == LexerState.NORMAL
        lexer.next_token()
        assert lexer.state == LexerState.AFTER_LIST_SEPARATOR

    def test_comma_between_patterns_is_not_a_path(self):
        """After MATCH the comma separates patterns; no path capture."""
        assert types("MATCH (a:Pod), (b:Service)") == [
            TokenType.MATCH,
            TokenType.LPAR, TokenType.IDENT, TokenType.COLON, TokenType.IDENT, TokenType.RPAR,
            TokenType.COMMA,
            TokenType.LPAR, TokenType.IDENT, TokenType.COLON, TokenType.IDENT, TokenType.RPAR,
            TokenType.EOF,
        ]

    def test_empty_capture_falls_through(self):
        """An empty property block yields no PATH token."""
        assert types("{}") == [TokenType.LBRACE, TokenType.RBRACE, TokenType.EOF]


class TestLiterals:
    """Tests for strings, numbers and booleans."""

    def test_strings_single_and_double(self):
        tokens = tokenize("{a: 'one', b: \"two\"}")
        strings = [t.text for t in tokens if t.type == TokenType.STRING]
        assert strings == ["one", "two"]

    def test_string_escapes(self):
        tokens = tokenize(r'{a: "say \"hi\"\n"}')
        assert tokens[3].type == TokenType.STRING
        assert tokens[3].text == 'say "hi"\n'

    def test_numbers(self):
        tokens = tokenize("{a: 3, b: 2.5, c: -4}")
        literals = [(t.type, t.text) for t in tokens if t.type in (TokenType.INT, TokenType.FLOAT)]
        assert literals == [
            (TokenType.INT, "3"),
            (TokenType.FLOAT, "2.5"),
            (TokenType.INT, "-4"),
        ]

    def test_booleans_in_value_position(self):
        tokens = tokenize("{a: TRUE, b: false}")
        booleans = [t.text for t in tokens if t.type == TokenType.BOOLEAN]
        assert booleans == ["TRUE", "false"]

    def test_boolean_after_comparator(self):
        assert types("WHERE p.spec.hostNetwork = true")[3] == TokenType.BOOLEAN


class TestErrorsAndPositions:
    """Tests for ILLEGAL tokens, EOF and positions."""

    def test_illegal_character(self):
        tokens = tokenize("MATCH @")
        assert tokens[1].type == TokenType.ILLEGAL
        assert tokens[1].text == "@"
        assert tokens[1].column == 7

    def test_unterminated_string(self):
        tokens = tokenize('{a: "open')
        assert tokens[3].type == TokenType.ILLEGAL
        assert tokens[3].text == '"open'
        assert tokens[-1].type == TokenType.EOF

    @pytest.mark.parametrize("text", ["{a: ²}", "{a: ٣}", "{a: é}"])
    def test_non_ascii_value_is_illegal(self, text):
        tokens = tokenize(text)
        assert tokens[3].type == TokenType.ILLEGAL
        assert tokens[3].text == text[4]

    def test_non_ascii_identifier_is_illegal(self):
        assert types("MATCH (é")[2] == TokenType.ILLEGAL

    def test_eof_is_sticky(self):
        lexer = Lexer("")
        assert lexer.next_token().type == TokenType.EOF
        assert lexer.next_token().type == TokenType.EOF

    def test_line_and_column(self):
        tokens = tokenize("MATCH\n  (p:Pod)")
        lpar = tokens[1]
        assert (lpar.line, lpar.column, lpar.pos) == (2, 3, 8)

    def test_never_raises(self):
        tokens = tokenize("%%% ~ ^")
        assert [t.type for t in tokens[:-1]] == [TokenType.ILLEGAL] * 5

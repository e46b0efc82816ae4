# -*- encoding: utf-8 -*-
"""
KCQL Lexer - Pull-based tokenizer for Kubernetes Cypher Query Language.

Most of the language is tokenized conventionally, but field paths
(``d.metadata.name``, ``spec.containers[0].image``) are captured whole
as a single PATH token so the grammar never needs a path sub-grammar.
Capture is driven by a small state machine:

    RETURN            -> AFTER_RETURN             (path list on)
    WHERE             -> AFTER_WHERE              (path list on)
    {                 -> AFTER_PROPERTY_OPEN      (defining properties on)
    }                 -> NORMAL                   (defining properties off)
    , (properties)    -> AFTER_PROPERTY_SEPARATOR
    , (path list)     -> AFTER_LIST_SEPARATOR
    anything else     -> NORMAL

In every state but NORMAL the next call skips whitespace and consumes
the longest run of path characters as one PATH token.

The lexer never raises: characters it cannot tokenize come back as
ILLEGAL tokens and the parser reports them with their position.
"""

import logging
import string
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class TokenType(str, Enum):
    """Semantic token kinds produced by the lexer."""
    # Keywords
    MATCH = "MATCH"
    WHERE = "WHERE"
    RETURN = "RETURN"
    CREATE = "CREATE"
    SET = "SET"
    DELETE = "DELETE"

    # Identifiers and literals
    IDENT = "IDENT"
    STRING = "STRING"
    INT = "INT"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    PATH = "PATH"

    # Punctuation
    LPAR = "LPAR"
    RPAR = "RPAR"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    LSQB = "LSQB"
    RSQB = "RSQB"
    COLON = "COLON"
    COMMA = "COMMA"
    DASH = "DASH"
    ARROW = "ARROW"
    SEMICOLON = "SEMICOLON"

    # Comparators
    EQ = "EQ"
    NE = "NE"
    LT = "LT"
    GT = "GT"
    LE = "LE"
    GE = "GE"

    EOF = "EOF"
    ILLEGAL = "ILLEGAL"


KEYWORDS = {
    "MATCH": TokenType.MATCH,
    "WHERE": TokenType.WHERE,
    "RETURN": TokenType.RETURN,
    "CREATE": TokenType.CREATE,
    "SET": TokenType.SET,
    "DELETE": TokenType.DELETE,
}

BOOLEANS = frozenset({"TRUE", "FALSE"})

COMPARATORS = frozenset({
    TokenType.EQ,
    TokenType.NE,
    TokenType.LT,
    TokenType.GT,
    TokenType.LE,
    TokenType.GE,
})

# Quoted segments additionally accept any character up to the closing quote.
PATH_CHARS = frozenset(string.ascii_letters + string.digits + '.[]_"*$#')

DIGITS = frozenset(string.digits)
WORD_START = frozenset(string.ascii_letters + "_")
WORD_CHARS = WORD_START | DIGITS

WHITESPACE = frozenset(" \t\r\n")

SINGLE_CHAR_TOKENS = {
    "(": TokenType.LPAR,
    ")": TokenType.RPAR,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LSQB,
    "]": TokenType.RSQB,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    "-": TokenType.DASH,
    ";": TokenType.SEMICOLON,
    "=": TokenType.EQ,
    "<": TokenType.LT,
    ">": TokenType.GT,
}

DOUBLE_CHAR_TOKENS = {
    "->": TokenType.ARROW,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
}

# Tokens after which a word is always an identifier (binding, kind, edge type)
IDENT_POSITIONS = frozenset({TokenType.LPAR, TokenType.COLON, TokenType.LSQB})

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


class LexerState(str, Enum):
    """Lexer modes; every state but NORMAL captures a PATH next."""
    NORMAL = "normal"
    AFTER_RETURN = "after_return"
    AFTER_WHERE = "after_where"
    AFTER_PROPERTY_OPEN = "after_property_open"
    AFTER_PROPERTY_SEPARATOR = "after_property_separator"
    AFTER_LIST_SEPARATOR = "after_list_separator"


TRANSITIONS = {
    TokenType.RETURN: LexerState.AFTER_RETURN,
    TokenType.WHERE: LexerState.AFTER_WHERE,
    TokenType.LBRACE: LexerState.AFTER_PROPERTY_OPEN,
}

CAPTURE_STATES = frozenset(set(LexerState) - {LexerState.NORMAL})

# Clause keywords that end a RETURN/WHERE path list
_CLAUSE_STARTS = frozenset({
    TokenType.MATCH,
    TokenType.CREATE,
    TokenType.SET,
    TokenType.DELETE,
})


@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Attributes:
        type: Semantic token kind
        text: Captured text (string literals are unquoted and unescaped)
        pos: 0-based offset of the first character
        line: 1-based line number
        column: 1-based column number
    """
    type: TokenType
    text: str
    pos: int = 0
    line: int = 1
    column: int = 1


class Lexer:
    """
    Pull-based KCQL tokenizer.

    Example:
        lexer = Lexer("MATCH (d:Deployment) RETURN d.metadata.name")
        token = lexer.next_token()   # Token(MATCH, 'MATCH', ...)

        for token in Lexer(query):   # ends with the EOF token
            ...
    """

    def __init__(self, text: str):
        self._text = text
        self._pos = 0
        self._line = 1
        self._column = 1

        self.state = LexerState.NORMAL
        self.defining_properties = False
        self.in_path_list = False

        self._last: Optional[TokenType] = None
        self._eof: Optional[Token] = None

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return

    def next_token(self) -> Token:
        """Return the next token; EOF repeats once reached."""
        if self._eof is not None:
            return self._eof

        if self.state in CAPTURE_STATES:
            token = self._capture_path()
            if token is not None:
                return self._emit(token)

        self._skip_whitespace()
        if self._at_end():
            self._eof = Token(TokenType.EOF, "", self._pos, self._line, self._column)
            logger.debug("Lexed EOF at offset %d", self._pos)
            return self._eof

        return self._emit(self._scan())

    # --- State machine ---

    def _emit(self, token: Token) -> Token:
        self._last = token.type
        self.state = self._transition(token.type)
        logger.debug("Lexed %s %r -> %s", token.type.value, token.text, self.state.value)
        return token

    def _transition(self, token_type: TokenType) -> LexerState:
        if token_type is TokenType.LBRACE:
            self.defining_properties = True
        elif token_type is TokenType.RBRACE:
            self.defining_properties = False
        elif token_type in (TokenType.RETURN, TokenType.WHERE):
            self.in_path_list = True
        elif token_type in _CLAUSE_STARTS:
            self.in_path_list = False

        if token_type in TRANSITIONS:
            return TRANSITIONS[token_type]
        if token_type is TokenType.COMMA:
            if self.defining_properties:
                return LexerState.AFTER_PROPERTY_SEPARATOR
            if self.in_path_list:
                return LexerState.AFTER_LIST_SEPARATOR
        return LexerState.NORMAL

    def _in_value_position(self) -> bool:
        if self._last in COMPARATORS:
            return True
        return self._last is TokenType.COLON and self.defining_properties

    # --- Character helpers ---

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _peek(self, offset: int = 0) -> str:
        index = self._pos + offset
        return self._text[index] if index < len(self._text) else ""

    def _advance(self) -> str:
        ch = self._text[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in WHITESPACE:
            self._advance()

    # --- Scanners ---

    def _capture_path(self) -> Optional[Token]:
        self._skip_whitespace()
        start = (self._pos, self._line, self._column)
        chars = []
        quoted = False
        while not self._at_end() and (quoted or self._peek() in PATH_CHARS):
            ch = self._advance()
            if ch == '"':
                quoted = not quoted
            chars.append(ch)
        if not chars:
            return None
        return Token(TokenType.PATH, "".join(chars), *start)

    def _scan(self) -> Token:
        start = (self._pos, self._line, self._column)
        ch = self._peek()

        if ch in WORD_START:
            return self._scan_word(start)

        if ch in DIGITS or (ch == "-" and self._peek(1) in DIGITS and self._in_value_position()):
            return self._scan_number(start)

        if ch in ("\"", "'"):
            return self._scan_string(start)

        pair = ch + self._peek(1)
        if pair in DOUBLE_CHAR_TOKENS:
            self._advance()
            self._advance()
            return Token(DOUBLE_CHAR_TOKENS[pair], pair, *start)

        if ch in SINGLE_CHAR_TOKENS:
            self._advance()
            return Token(SINGLE_CHAR_TOKENS[ch], ch, *start)

        self._advance()
        return Token(TokenType.ILLEGAL, ch, *start)

    def _scan_word(self, start: tuple) -> Token:
        chars = []
        while not self._at_end() and self._peek() in WORD_CHARS:
            chars.append(self._advance())
        word = "".join(chars)
        upper = word.upper()

        if self._in_value_position():
            if upper in BOOLEANS:
                return Token(TokenType.BOOLEAN, word, *start)
            return Token(TokenType.IDENT, word, *start)

        if self._last in IDENT_POSITIONS:
            return Token(TokenType.IDENT, word, *start)

        return Token(KEYWORDS.get(upper, TokenType.IDENT), word, *start)

    def _scan_number(self, start: tuple) -> Token:
        chars = [self._advance()]
        while not self._at_end() and self._peek() in DIGITS:
            chars.append(self._advance())

        if self._peek() == "." and self._peek(1) in DIGITS:
            chars.append(self._advance())
            while not self._at_end() and self._peek() in DIGITS:
                chars.append(self._advance())
            return Token(TokenType.FLOAT, "".join(chars), *start)

        return Token(TokenType.INT, "".join(chars), *start)

    def _scan_string(self, start: tuple) -> Token:
        quote = self._advance()
        chars = []
        while not self._at_end():
            ch = self._advance()
            if ch == "\\":
                if self._at_end():
                    break
                escaped = self._advance()
                chars.append(_ESCAPES.get(escaped, escaped))
            elif ch == quote:
                return Token(TokenType.STRING, "".join(chars), *start)
            else:
                chars.append(ch)

        # Unterminated: hand back everything from the opening quote
        return Token(TokenType.ILLEGAL, self._text[start[0]:], *start)


def tokenize(text: str) -> list[Token]:
    """Lex a whole query, including the trailing EOF token."""
    return list(Lexer(text))

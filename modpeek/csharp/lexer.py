# modpeek/csharp/lexer.py
from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

__all__ = [
    "SourceSyntaxError",
    "TokenKind",
    "Token",
    "decodeSource",
    "tokenize",
]



class SourceSyntaxError(ValueError):
    """The text can't be tokenized as C#."""

    def __init__(self, message: str, line: int):
        super().__init__(f"{message} (line {line})")
        self.line = line



class TokenKind(Enum):
    IDENTIFIER = "identifier"
    STRING = "string"                    # regular, verbatim or raw; `value` holds the decoded text
    INTERPOLATED_STRING = "interpolated"
    CHAR = "char"
    NUMBER = "number"
    PUNCT = "punct"



@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str           # exactly as written
    start: int          # offsets into the decoded source
    end: int
    line: int
    value: str | None = None



_BOMS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)



def decodeSource(data: bytes) -> str:
    """Decode source bytes, honoring a byte order mark and falling back to UTF-8."""
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data[len(bom):].decode(encoding, errors="replace")
    return data.decode("utf-8", errors="replace")



_SIMPLE_ESCAPES = {
    "'": "'", '"': '"', "\\": "\\", "0": "\0", "a": "\a", "b": "\b",
    "e": "\x1b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v",
}
_HEX = frozenset("0123456789abcdefABCDEF")
_NEWLINES = frozenset("\r\n\u0085\u2028\u2029")



def _isIdentStart(ch: str) -> bool:
    return ch == "_" or ch.isalpha()



def _isIdentPart(ch: str) -> bool:
    return ch == "_" or ch.isalnum()



class _Lexer:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []
        self._atLineStart = True

    # ----- cursor -----

    def peek(self, ahead: int = 0) -> str:
        idx = self.pos + ahead
        return self.text[idx] if idx < len(self.text) else ""

    def advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.pos >= len(self.text):
                return
            if self.text[self.pos] == "\n":
                self.line += 1
            self.pos += 1

    def fail(self, message: str) -> SourceSyntaxError:
        return SourceSyntaxError(message, self.line)

    def emit(self, kind: TokenKind, start: int, line: int, value: str | None = None) -> None:
        self.tokens.append(Token(kind, self.text[start:self.pos], start, self.pos, line, value))
        self._atLineStart = False

    # ----- trivia -----

    def skipLine(self) -> None:
        while self.peek() and self.peek() not in _NEWLINES:
            self.advance()

    def skipBlockComment(self) -> None:
        startLine = self.line
        self.advance(2)
        while True:
            if not self.peek():
                raise SourceSyntaxError("Unterminated block comment", startLine)
            if self.peek() == "*" and self.peek(1) == "/":
                self.advance(2)
                return
            self.advance()

    # ----- literals -----

    def readEscape(self) -> str:
        # Positioned on the backslash.
        self.advance()
        ch = self.peek()
        if ch in _SIMPLE_ESCAPES:
            self.advance()
            return _SIMPLE_ESCAPES[ch]
        if ch in ("u", "U"):
            width = 4 if ch == "u" else 8
            digits = self.text[self.pos + 1:self.pos + 1 + width]
            if len(digits) != width or not set(digits) <= _HEX:
                raise self.fail(f"Malformed \\{ch} escape")
            self.advance(1 + width)
            codepoint = int(digits, 16)
            if codepoint > 0x10FFFF:
                raise self.fail("Escape outside of the unicode range")
            return chr(codepoint)
        if ch == "x":
            self.advance()
            digits = ""
            while len(digits) < 4 and self.peek() in _HEX:
                digits += self.peek()
                self.advance()
            if not digits:
                raise self.fail("Malformed \\x escape")
            return chr(int(digits, 16))
        raise self.fail(f"Unrecognized escape sequence \\{ch}")

    def readRegularString(self) -> str:
        # Positioned on the opening quote.
        self.advance()
        out: list[str] = []
        while True:
            ch = self.peek()
            if not ch or ch in _NEWLINES:
                raise self.fail("Newline in string literal")
            if ch == '"':
                self.advance()
                return "".join(out)
            if ch == "\\":
                out.append(self.readEscape())
                continue
            out.append(ch)
            self.advance()

    def readVerbatimString(self) -> str:
        # Positioned on the opening quote, after '@'.
        startLine = self.line
        self.advance()
        out: list[str] = []
        while True:
            ch = self.peek()
            if not ch:
                raise SourceSyntaxError("Unterminated verbatim string literal", startLine)
            if ch == '"':
                if self.peek(1) == '"':
                    out.append('"')
                    self.advance(2)
                    continue
                self.advance()
                return "".join(out)
            out.append(ch)
            self.advance()

    def countQuotes(self) -> int:
        count = 0
        while self.peek(count) == '"':
            count += 1
        return count

    def readRawString(self) -> str:
        # Positioned on the first of three or more quotes.
        startLine = self.line
        quotes = self.countQuotes()
        self.advance(quotes)
        fence = '"' * quotes

        end = self.text.find(fence, self.pos)
        if end < 0:
            raise SourceSyntaxError("Unterminated raw string literal", startLine)
        body = self.text[self.pos:end]
        self.advance(len(body) + quotes)
        if self.peek() == '"':
            raise self.fail("Raw string literal closed with too many quotes")

        if "\n" not in body and "\r" not in body:
            return body
        return self.trimRawBody(body, startLine)

    @staticmethod
    def trimRawBody(body: str, startLine: int) -> str:
        lines = body.replace("\r\n", "\n").split("\n")
        if lines[0].strip():
            raise SourceSyntaxError("Multi-line raw string must start on a new line", startLine)
        indent = lines[-1]
        if indent.strip():
            raise SourceSyntaxError("Closing quotes of a raw string must be on their own line", startLine)
        out: list[str] = []
        for line in lines[1:-1]:
            if not line.strip():
                out.append("")
                continue
            if not line.startswith(indent):
                raise SourceSyntaxError("Raw string line is not indented like its closing quotes", startLine)
            out.append(line[len(indent):])
        return "\n".join(out)

    def skipInterpolatedString(self, verbatim: bool, rawQuotes: int) -> None:
        # Holes are skipped by brace depth; strings nested in holes are lexed normally.
        startLine = self.line
        if rawQuotes:
            fence = '"' * rawQuotes
            end = self.text.find(fence, self.pos + rawQuotes)
            if end < 0:
                raise SourceSyntaxError("Unterminated interpolated raw string literal", startLine)
            self.advance(end + rawQuotes - self.pos)
            return

        self.advance()
        depth = 0
        while True:
            ch = self.peek()
            if not ch:
                raise SourceSyntaxError("Unterminated interpolated string literal", startLine)
            if depth == 0:
                if ch == '"':
                    if verbatim and self.peek(1) == '"':
                        self.advance(2)
                        continue
                    self.advance()
                    return
                if ch == "\\" and not verbatim:
                    self.advance(2)
                    continue
                if ch in _NEWLINES and not verbatim:
                    raise self.fail("Newline in interpolated string literal")
                if ch == "{":
                    if self.peek(1) == "{":
                        self.advance(2)
                        continue
                    depth = 1
                self.advance()
                continue

            if ch == '"':
                self.readRegularString()
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
            self.advance()

    def readChar(self) -> None:
        self.advance()
        if self.peek() == "\\":
            self.readEscape()
        elif self.peek() and self.peek() not in _NEWLINES:
            self.advance()
        if self.peek() != "'":
            raise self.fail("Malformed character literal")
        self.advance()

    # ----- main loop -----

    def run(self) -> list[Token]:
        while self.pos < len(self.text):
            ch = self.peek()
            start, line = self.pos, self.line

            if ch in _NEWLINES:
                self.advance()
                self._atLineStart = True
                continue
            if ch.isspace():
                self.advance()
                continue
            if ch == "#" and self._atLineStart:
                # Preprocessor directive, whole line.
                self.skipLine()
                continue
            if ch == "/" and self.peek(1) == "/":
                self.skipLine()
                continue
            if ch == "/" and self.peek(1) == "*":
                self.skipBlockComment()
                continue

            if ch == '"':
                if self.countQuotes() >= 3:
                    value = self.readRawString()
                else:
                    value = self.readRegularString()
                self.emit(TokenKind.STRING, start, line, value)
                continue

            if ch in ("@", "$"):
                prefix = ""
                while self.peek(len(prefix)) in ("@", "$"):
                    prefix += self.peek(len(prefix))
                if self.peek(len(prefix)) == '"':
                    self.readPrefixedString(prefix, start, line)
                    continue
                if ch == "@" and _isIdentStart(self.peek(1)):
                    # Verbatim identifier.
                    self.advance()
                    self.readIdentifier(start, line)
                    continue
                self.advance()
                self.emit(TokenKind.PUNCT, start, line)
                continue

            if ch == "'":
                self.readChar()
                self.emit(TokenKind.CHAR, start, line)
                continue
            if ch.isdigit() or (ch == "." and self.peek(1).isdigit()):
                self.advance()
                while self.peek() and (_isIdentPart(self.peek()) or (self.peek() == "." and self.peek(1).isdigit())):
                    self.advance()
                self.emit(TokenKind.NUMBER, start, line)
                continue
            if _isIdentStart(ch):
                self.readIdentifier(start, line)
                continue

            self.advance()
            self.emit(TokenKind.PUNCT, start, line)
        return self.tokens

    def readIdentifier(self, start: int, line: int) -> None:
        while self.peek() and _isIdentPart(self.peek()):
            self.advance()
        name = self.text[start:self.pos].lstrip("@")
        self.emit(TokenKind.IDENTIFIER, start, line, name)

    def readPrefixedString(self, prefix: str, start: int, line: int) -> None:
        self.advance(len(prefix))
        dollars = prefix.count("$")
        verbatim = "@" in prefix
        rawQuotes = self.countQuotes() if self.countQuotes() >= 3 else 0
        if dollars:
            self.skipInterpolatedString(verbatim, rawQuotes)
            self.emit(TokenKind.INTERPOLATED_STRING, start, line)
        elif len(prefix) > 1:
            raise self.fail(f"Unexpected string prefix {prefix!r}")
        else:
            value = self.readVerbatimString()
            self.emit(TokenKind.STRING, start, line, value)



def tokenize(text: str) -> list[Token]:
    """Split C# source into tokens, dropping comments, whitespace and preprocessor lines."""
    tokens = _Lexer(text).run()
    logger.debug("Tokenized %d characters into %d tokens", len(text), len(tokens))
    return tokens

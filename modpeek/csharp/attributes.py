# modpeek/csharp/attributes.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from modpeek.csharp.lexer import SourceSyntaxError, Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

__all__ = [
    "NotALiteral",
    "Expression",
    "AttributeArgument",
    "AttributeSyntax",
    "parseGlobalAttributes",
    "literalString",
    "literalBoolean",
    "literalArray",
]



class NotALiteral(ValueError):
    """The expression is not a compile-time literal of the requested shape."""



@dataclass(frozen=True, slots=True)
class Expression:
    tokens: tuple[Token, ...]
    text: str

    def __str__(self) -> str:
        return self.text



@dataclass(frozen=True, slots=True)
class AttributeArgument:
    """
    One argument of an attribute.

    `name` is set for `Name = value` (a property assignment, `isAssignment` True) and
    for `name: value` (a named constructor parameter, `isAssignment` False).
    """
    expression: Expression
    name: str | None = None
    isAssignment: bool = False



@dataclass(frozen=True, slots=True)
class AttributeSyntax:
    name: str
    target: str
    arguments: tuple[AttributeArgument, ...] | None
    line: int

    @property
    def simpleName(self) -> str:
        """Name without namespace or alias qualification."""
        return self.name.replace("::", ".").rsplit(".", 1)[-1]



_GLOBAL_TARGETS = frozenset({"assembly", "module"})
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())



def _isPunct(token: Token | None, text: str) -> bool:
    return token is not None and token.kind is TokenKind.PUNCT and token.text == text



def _isIdent(token: Token | None, name: str | None = None) -> bool:
    if token is None or token.kind is not TokenKind.IDENTIFIER:
        return False
    return name is None or token.value == name



class _Parser:
    def __init__(self, source: str, tokens: list[Token]):
        self.source = source
        self.tokens = tokens
        self.pos = 0

    def peek(self, ahead: int = 0) -> Token | None:
        idx = self.pos + ahead
        return self.tokens[idx] if idx < len(self.tokens) else None

    def take(self) -> Token:
        token = self.peek()
        if token is None:
            last = self.tokens[-1].line if self.tokens else 1
            raise SourceSyntaxError("Unexpected end of file inside an attribute list", last)
        self.pos += 1
        return token

    def expect(self, text: str) -> Token:
        token = self.take()
        if not _isPunct(token, text):
            raise SourceSyntaxError(f"Expected '{text}' but found '{token.text}'", token.line)
        return token

    def span(self, tokens: list[Token]) -> Expression:
        if not tokens:
            return Expression((), "")
        return Expression(tuple(tokens), self.source[tokens[0].start:tokens[-1].end])

    # ----- global attribute lists -----

    def parseAll(self) -> list[AttributeSyntax]:
        found: list[AttributeSyntax] = []
        depth = 0
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if _isPunct(token, "{"):
                depth += 1
            elif _isPunct(token, "}"):
                depth = max(0, depth - 1)
            elif depth == 0 and _isPunct(token, "[") and self.atGlobalTarget():
                found.extend(self.parseAttributeList())
                continue
            self.pos += 1
        return found

    def atGlobalTarget(self) -> bool:
        target, colon = self.peek(1), self.peek(2)
        return (
            target is not None
            and _isIdent(target)
            and target.value in _GLOBAL_TARGETS
            and _isPunct(colon, ":")
            and not _isPunct(self.peek(3), ":")
        )

    def parseAttributeList(self) -> list[AttributeSyntax]:
        self.expect("[")
        target = self.take().value or ""
        self.expect(":")

        out: list[AttributeSyntax] = []
        while True:
            if _isPunct(self.peek(), "]"):
                self.take()
                return out
            out.append(self.parseAttribute(target))
            if _isPunct(self.peek(), ","):
                self.take()
                continue
            self.expect("]")
            return out

    def parseQualifiedName(self) -> str:
        first = self.take()
        if not _isIdent(first):
            raise SourceSyntaxError(f"Expected an attribute name but found '{first.text}'", first.line)
        parts = [first.value or ""]
        while True:
            if _isPunct(self.peek(), ".") and _isIdent(self.peek(1)):
                self.take()
                parts.append(".")
                parts.append(self.take().value or "")
            elif _isPunct(self.peek(), ":") and _isPunct(self.peek(1), ":") and _isIdent(self.peek(2)):
                self.take()
                self.take()
                parts.append("::")
                parts.append(self.take().value or "")
            else:
                return "".join(parts)

    def parseAttribute(self, target: str) -> AttributeSyntax:
        line = self.peek().line if self.peek() else 1
        name = self.parseQualifiedName()
        arguments = None
        if _isPunct(self.peek(), "("):
            arguments = tuple(self.parseArgument(group) for group in self.splitGroup("(", ")"))
        return AttributeSyntax(name, target, arguments, line)

    def splitGroup(self, opener: str, closer: str) -> list[list[Token]]:
        """Consume a bracketed group and split its content at top-level commas."""
        self.expect(opener)
        groups: list[list[Token]] = []
        current: list[Token] = []
        stack: list[str] = []
        while True:
            token = self.take()
            if token.kind is TokenKind.PUNCT:
                if not stack and token.text == closer:
                    if current:
                        groups.append(current)
                    return groups
                if not stack and token.text == ",":
                    groups.append(current)
                    current = []
                    continue
                if token.text in _OPENERS:
                    stack.append(_OPENERS[token.text])
                elif token.text in _CLOSERS:
                    if not stack or stack.pop() != token.text:
                        raise SourceSyntaxError(f"Unbalanced '{token.text}'", token.line)
            current.append(token)

    def parseArgument(self, tokens: list[Token]) -> AttributeArgument:
        if not tokens:
            raise SourceSyntaxError("Empty attribute argument", self.tokens[self.pos - 1].line)
        first = tokens[0]
        second = tokens[1] if len(tokens) > 1 else None
        third = tokens[2] if len(tokens) > 2 else None
        if _isIdent(first) and _isPunct(second, "=") and not _isPunct(third, "="):
            return AttributeArgument(self.span(tokens[2:]), first.value, True)
        if _isIdent(first) and _isPunct(second, ":") and not _isPunct(third, ":"):
            return AttributeArgument(self.span(tokens[2:]), first.value, False)
        return AttributeArgument(self.span(tokens))



def parseGlobalAttributes(source: str) -> list[AttributeSyntax]:
    """
    Find every `[assembly: ...]` and `[module: ...]` attribute outside of any braces.

    Raises SourceSyntaxError when the text can't be tokenized or an attribute list is cut off.
    """
    tokens = tokenize(source)
    attributes = _Parser(source, tokens).parseAll()
    logger.debug("Found %d global attributes", len(attributes))
    return attributes



# ------------------------------------------------------------------ #
# Literal evaluation
# ------------------------------------------------------------------ #

def literalString(expression: Expression) -> str | None:
    """Value of a string literal or `null`. Raises NotALiteral for anything else."""
    tokens = expression.tokens
    if len(tokens) == 1:
        token = tokens[0]
        if token.kind is TokenKind.STRING:
            return token.value
        if _isIdent(token, "null") and token.text == "null":
            return None
    raise NotALiteral(f"Not a string literal: {expression.text}")



def literalBoolean(expression: Expression) -> bool:
    tokens = expression.tokens
    if len(tokens) == 1 and tokens[0].kind is TokenKind.IDENTIFIER and tokens[0].text in ("true", "false"):
        return tokens[0].text == "true"
    raise NotALiteral(f"Not a boolean literal: {expression.text}")



_STRING_TYPES = frozenset({"string", "String", "System.String", "global::System.String"})



def _initializerStart(tokens: tuple[Token, ...]) -> int | None:
    """Index of the '{' opening the initializer of an array creation, if that's what this is."""
    if not tokens or not _isIdent(tokens[0], "new"):
        return None
    idx = 1
    if _isPunct(tokens[idx] if idx < len(tokens) else None, "["):
        # new[] { ... }
        idx += 1
    else:
        nameEnd = idx
        while nameEnd < len(tokens) and (
            tokens[nameEnd].kind is TokenKind.IDENTIFIER or tokens[nameEnd].text in (".", ":")
        ):
            nameEnd += 1
        typeName = "".join(tok.text for tok in tokens[idx:nameEnd])
        if typeName not in _STRING_TYPES:
            return None
        idx = nameEnd
        if not _isPunct(tokens[idx] if idx < len(tokens) else None, "["):
            return None
        idx += 1
        # Optional explicit length.
        if idx < len(tokens) and tokens[idx].kind is TokenKind.NUMBER:
            idx += 1
    if not _isPunct(tokens[idx] if idx < len(tokens) else None, "]"):
        return None
    idx += 1
    if not _isPunct(tokens[idx] if idx < len(tokens) else None, "{"):
        return None
    return idx



def _splitElements(tokens: tuple[Token, ...], source: Expression) -> list[Expression]:
    out: list[Expression] = []
    current: list[Token] = []
    depth = 0
    for token in tokens:
        if token.kind is TokenKind.PUNCT:
            if token.text in _OPENERS:
                depth += 1
            elif token.text in _CLOSERS:
                depth -= 1
            elif token.text == "," and depth == 0:
                out.append(_subExpression(current, source))
                current = []
                continue
        current.append(token)
    if current:
        out.append(_subExpression(current, source))
    return out



def _subExpression(tokens: list[Token], parent: Expression) -> Expression:
    if not tokens:
        return Expression((), "")
    base = parent.tokens[0].start
    return Expression(tuple(tokens), parent.text[tokens[0].start - base:tokens[-1].end - base])



def literalArray(expression: Expression) -> list[Expression]:
    """
    Element expressions of `new[] {..}`, `new string[] {..}`, `new string[N] {..}` or `[..]`.

    Raises NotALiteral for any other shape.
    """
    tokens = expression.tokens
    if len(tokens) >= 2 and _isPunct(tokens[0], "[") and _isPunct(tokens[-1], "]"):
        return _splitElements(tokens[1:-1], expression)

    start = _initializerStart(tokens)
    if start is None or not _isPunct(tokens[-1], "}") or start != _matchingClose(tokens, start):
        raise NotALiteral(f"Not an array initializer: {expression.text}")
    return _splitElements(tokens[start + 1:-1], expression)



def _matchingClose(tokens: tuple[Token, ...], openIdx: int) -> int:
    # Returns openIdx when the brace at openIdx closes at the last token.
    depth = 0
    for idx in range(openIdx, len(tokens)):
        token = tokens[idx]
        if token.kind is not TokenKind.PUNCT:
            continue
        if token.text in _OPENERS:
            depth += 1
        elif token.text in _CLOSERS:
            depth -= 1
            if depth == 0:
                return openIdx if idx == len(tokens) - 1 else -1
    return -1

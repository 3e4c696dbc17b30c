# modpeek/csharp/__init__.py
from __future__ import annotations

from .attributes import (
    AttributeArgument,
    AttributeSyntax,
    Expression,
    NotALiteral,
    literalArray,
    literalBoolean,
    literalString,
    parseGlobalAttributes,
)
from .lexer import SourceSyntaxError, Token, TokenKind, decodeSource, tokenize

__all__ = [
    "AttributeArgument",
    "AttributeSyntax",
    "Expression",
    "NotALiteral",
    "SourceSyntaxError",
    "Token",
    "TokenKind",
    "decodeSource",
    "literalArray",
    "literalBoolean",
    "literalString",
    "parseGlobalAttributes",
    "tokenize",
]

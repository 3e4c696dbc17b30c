import codecs

import pytest

from modpeek.csharp import (
    NotALiteral,
    SourceSyntaxError,
    TokenKind,
    decodeSource,
    literalArray,
    literalBoolean,
    literalString,
    parseGlobalAttributes,
    tokenize,
)


def strings(source: str) -> list[str]:
    return [token.value for token in tokenize(source) if token.kind is TokenKind.STRING]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "data",
    [
        codecs.BOM_UTF8 + "Metalwörk".encode("utf-8"),
        codecs.BOM_UTF16_LE + "Metalwörk".encode("utf-16-le"),
        codecs.BOM_UTF16_BE + "Metalwörk".encode("utf-16-be"),
        "Metalwörk".encode("utf-8"),
    ],
)
def test_decodeSource(data):
    assert decodeSource(data) == "Metalwörk"


def test_decodeSource_replacesInvalidBytes():
    assert decodeSource(b"ab\xffcd") == "ab\ufffdcd"


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def test_tokenize_skipsTrivia():
    source = (
        "#if DEBUG\n"
        "// [assembly: Line]\n"
        "/* [assembly: Block] */\n"
        "#endif\n"
        "x = 1;\n"
    )
    assert [token.text for token in tokenize(source)] == ["x", "=", "1", ";"]


def test_tokenize_hashInsideALineIsPunctuation():
    assert [token.text for token in tokenize("a # b")] == ["a", "#", "b"]


def test_tokenize_tracksLines():
    tokens = tokenize('a\n\n"b"\r\nc')
    assert [(token.text, token.line) for token in tokens] == [("a", 1), ('"b"', 3), ("c", 4)]


@pytest.mark.parametrize(
    "literal, expected",
    [
        (r'"plain"',                "plain"),
        (r'"copy\"girl"',           'copy"girl'),
        (r'"a\tb\\c"',              "a\tb\\c"),
        (r'"\u0041\x41\U0001F600"', "AA\U0001F600"),
        (r'"\x4g"',                 "\x04g"),
        (r'"\0\e"',                 "\0\x1b"),
        (r'@"C:\path ""q"""',       'C:\\path "q"'),
        ('@"two\nlines"',           "two\nlines"),
        ('"""raw "quoted" text"""', 'raw "quoted" text'),
        ('""""with """ inside""""', 'with """ inside'),
    ],
)
def test_tokenize_stringLiterals(literal, expected):
    assert strings(literal) == [expected]


def test_tokenize_multiLineRawString():
    source = 'x = """\n    hello\n      world\n\n    """;'
    assert strings(source) == ["hello\n  world\n"]


def test_tokenize_emptyString():
    assert strings('""') == [""]


@pytest.mark.parametrize("literal", ['$"x {y} z"', '$@"x {y} ""z"""', '$"a {f("}")} b"', '$"{{literal}}"', '$$"""{{x}}"""'])
def test_tokenize_interpolatedStrings(literal):
    tokens = tokenize(literal + ";")
    assert [token.kind for token in tokens] == [TokenKind.INTERPOLATED_STRING, TokenKind.PUNCT]


def test_tokenize_charAndNumberLiterals():
    tokens = tokenize("'a' '\\'' 1.2F 0x1F .5 1_000")
    assert [token.kind for token in tokens] == [TokenKind.CHAR, TokenKind.CHAR] + [TokenKind.NUMBER] * 4


def test_tokenize_verbatimIdentifier():
    (token,) = tokenize("@class")
    assert token.kind is TokenKind.IDENTIFIER
    assert token.text == "@class"
    assert token.value == "class"


@pytest.mark.parametrize(
    "source",
    [
        '"unterminated',
        '"line\nbreak"',
        '@"unterminated',
        '"""unterminated',
        '"""\n  x\n y"""',
        "/* open",
        r'"\q"',
        r'"\u12"',
        "'ab'",
    ],
)
def test_tokenize_malformed(source):
    with pytest.raises(SourceSyntaxError):
        tokenize(source)


def test_sourceSyntaxError_carriesLine():
    with pytest.raises(SourceSyntaxError) as info:
        tokenize('a\nb\n"c')
    assert info.value.line == 3
    assert isinstance(info.value, ValueError)


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

def test_parseGlobalAttributes_onlyTopLevelTargets():
    source = """
    using System;
    [assembly: ModInfo("A")]
    [module: Something, Other(1)]
    namespace Foo {
        [assembly: Nested("ignored")]
        [Serializable] class Bar { [field: NonSerialized] int x; }
    }
    [assembly: ModDependency("game")]
    """
    attributes = parseGlobalAttributes(source)
    assert [(attribute.target, attribute.name) for attribute in attributes] == [
        ("assembly", "ModInfo"),
        ("module", "Something"),
        ("module", "Other"),
        ("assembly", "ModDependency"),
    ]
    assert attributes[1].arguments is None
    assert attributes[3].line == 9


def test_parseGlobalAttributes_qualifiedNames():
    attributes = parseGlobalAttributes(
        "[assembly: Vintagestory.API.Common.ModInfo(\"Q\")]\n"
        "[assembly: global::Vintagestory.API.Common.ModDependencyAttribute(\"game\")]\n"
    )
    assert [attribute.simpleName for attribute in attributes] == ["ModInfo", "ModDependencyAttribute"]
    assert attributes[1].name == "global::Vintagestory.API.Common.ModDependencyAttribute"


def test_parseGlobalAttributes_argumentKinds():
    (attribute,) = parseGlobalAttributes(
        '[assembly: ModInfo("Name", modID: "id", Version = "1.0.0", Authors = new[] { "a", "b" })]'
    )
    positional, named, assigned, array = attribute.arguments
    assert (positional.name, positional.isAssignment, positional.expression.text) == (None, False, '"Name"')
    assert (named.name, named.isAssignment, named.expression.text) == ("modID", False, '"id"')
    assert (assigned.name, assigned.isAssignment) == ("Version", True)
    assert array.expression.text == 'new[] { "a", "b" }'


def test_parseGlobalAttributes_emptyArgumentList():
    (attribute,) = parseGlobalAttributes("[assembly: ModInfo()]")
    assert attribute.arguments == ()


@pytest.mark.parametrize(
    "source",
    [
        '[assembly: ModInfo("x"',
        '[assembly: ModInfo(, "x")]',
        '[assembly: ModInfo("x"]',
        '[assembly: 5]',
    ],
)
def test_parseGlobalAttributes_malformed(source):
    with pytest.raises(SourceSyntaxError):
        parseGlobalAttributes(source)


def argument(expression: str):
    (attribute,) = parseGlobalAttributes(f"[assembly: A({expression})]")
    return attribute.arguments[0].expression


@pytest.mark.parametrize(
    "expression, expected",
    [
        ('"text"', "text"),
        ('@"verbatim"', "verbatim"),
        ("null", None),
    ],
)
def test_literalString(expression, expected):
    assert literalString(argument(expression)) == expected


@pytest.mark.parametrize("expression", ['"a" + "b"', "nameof(Foo)", "Constants.Name", '$"x"', "@null", "1"])
def test_literalString_rejectsNonLiterals(expression):
    with pytest.raises(NotALiteral):
        literalString(argument(expression))


def test_literalBoolean():
    assert literalBoolean(argument("true")) is True
    assert literalBoolean(argument("false")) is False
    with pytest.raises(NotALiteral):
        literalBoolean(argument('"true"'))


@pytest.mark.parametrize(
    "expression",
    [
        'new[] { "a", "b" }',
        'new []{ "a", "b", }',
        'new string[] { "a", "b" }',
        'new string[2] { "a", "b" }',
        'new String[] { "a", "b" }',
        'new System.String[] { "a", "b" }',
        '["a", "b"]',
    ],
)
def test_literalArray_shapes(expression):
    assert [literalString(element) for element in literalArray(argument(expression))] == ["a", "b"]


def test_literalArray_empty():
    assert literalArray(argument("new string[0] { }")) == []
    assert literalArray(argument("[]")) == []


@pytest.mark.parametrize(
    "expression",
    ['"a"', "new List<string> { \"a\" }", "new int[] { 1 }", "new[] { \"a\" }.ToArray()", "Array.Empty<string>()"],
)
def test_literalArray_rejectsOtherShapes(expression):
    with pytest.raises(NotALiteral):
        literalArray(argument(expression))

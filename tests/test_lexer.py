"""Lexer tests: classification, line tracking and comment skipping."""

import pytest

from cxxfront import (IDENTIFIER, KEYWORD, LITERAL, OPERATOR, PREPROCESSOR,
                      PUNCTUATION, Token, tokenize)


def test_declaration_tokens():
    assert tokenize("int x = 5;") == [
        Token("int", KEYWORD, 1),
        Token("x", IDENTIFIER, 1),
        Token("=", OPERATOR, 1),
        Token("5", LITERAL, 1),
        Token(";", PUNCTUATION, 1),
    ]


def test_preprocessor_line_is_one_token():
    tokens = tokenize("  #include <iostream>  \nint y;")
    assert tokens[0] == Token("#include <iostream>", PREPROCESSOR, 1)
    assert [t.line for t in tokens[1:]] == [2, 2, 2]


@pytest.mark.parametrize("source", [
    "",
    "\n\n   \n",
    "// just a comment\n   // another",
    "/* block\n   still inside\n*/",
    "/** doc */",
])
def test_blank_and_comment_only_input_has_no_tokens(source: str):
    assert tokenize(source) == []


def test_line_comment_still_counts_a_line():
    tokens = tokenize("// header\nreturn 0;")
    assert {t.line for t in tokens} == {2}


def test_block_comment_interior_is_skipped():
    tokens = tokenize("/* start\nint hidden;\n*/\nint shown;")
    assert [t.value for t in tokens] == ["int", "shown", ";"]
    assert all(t.line == 4 for t in tokens)


def test_code_sharing_a_line_with_block_comment_marker_is_skipped():
    assert tokenize("int a; /* note */\n/* x */ int b;\nint c;") == [
        Token("int", KEYWORD, 3),
        Token("c", IDENTIFIER, 3),
        Token(";", PUNCTUATION, 3),
    ]


def test_string_quotes_are_literals_and_words_are_identifiers():
    tokens = tokenize('s = "hi";')
    assert [(t.value, t.kind) for t in tokens] == [
        ("s", IDENTIFIER), ("=", OPERATOR), ('"', LITERAL),
        ("hi", IDENTIFIER), ('"', LITERAL), (";", PUNCTUATION),
    ]


def test_multi_character_operators_are_split():
    values = [t.value for t in tokenize("a == b")]
    assert values == ["a", "=", "=", "b"]


@pytest.mark.parametrize("word,kind", [
    ("while", KEYWORD),
    ("&", OPERATOR),
    ("42", LITERAL),
    ("0x1F", LITERAL),
    ("10u", LITERAL),
    ("[", PUNCTUATION),
    (",", PUNCTUATION),
    ("counter", IDENTIFIER),
])
def test_classification(word: str, kind: str):
    assert tokenize(word)[0].kind == kind


def test_line_numbers_never_decrease(sample_program: str):
    lines = [t.line for t in tokenize(sample_program)]
    assert lines == sorted(lines)
    assert lines[0] == 1


def test_block_marker_after_line_comment_opens_nothing():
    tokens = tokenize("// globs like src/*.cpp\nint main() {\n  return 0;\n}")
    assert tokens[0] == Token("int", KEYWORD, 2)
    assert tokens[-1] == Token("}", PUNCTUATION, 4)


def test_block_marker_inside_string_opens_nothing():
    tokens = tokenize('s = "a/*b";\nint y;')
    assert [t.value for t in tokens if t.line == 2] == ["int", "y", ";"]
    assert Token("a", IDENTIFIER, 1) in tokens

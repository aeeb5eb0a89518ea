"""Structural check tests: termination, brace balance, prototypes."""

import pytest

from cxxfront import (Diagnostic, check_brackets, check_function_declarations,
                      check_semicolons, validate)


@pytest.mark.parametrize("source", [
    "{}",
    "int main() {\n  if (x) { y(); }\n}",
    "namespace a { struct b { }; }",
])
def test_balanced_braces(source: str):
    assert check_brackets(source) == []


def test_lone_opening_brace():
    assert check_brackets("int x;\nint main() {") == [Diagnostic(2, "Unmatched opening bracket")]


def test_lone_closing_brace():
    assert check_brackets("}\nint x;") == [Diagnostic(1, "Unmatched closing bracket")]


def test_first_unmatched_opening_is_reported():
    assert check_brackets("{\n{\n}") == [Diagnostic(1, "Unmatched opening bracket")]


def test_closing_before_opening_reports_both():
    assert check_brackets("}\n{") == [
        Diagnostic(1, "Unmatched closing bracket"),
        Diagnostic(2, "Unmatched opening bracket"),
    ]


@pytest.mark.parametrize("source", [
    "int x = 5;",
    "void f()",
    "virtual int area() const = 0",
    "#define N 10",
    "// int x = 5",
    "if (x)\n  y = 1;",
    "return x",
    "default:",
    "/* x = 1\n y = 2 */",
    "int main() {\n  return 0;\n}",
])
def test_terminated_or_exempt_lines(source: str):
    assert check_semicolons(source) == []


def test_missing_semicolon_reported_on_its_line():
    source = "int main() {\n  int x = 1;\n  x = 2\n  return x;\n}"
    assert check_semicolons(source) == [Diagnostic(3, "Missing semicolon")]


def test_missing_semicolon_before_inline_closing_brace():
    assert check_semicolons("int main() { int x = 5 }") == [Diagnostic(1, "Missing semicolon")]


def test_prototype_without_definition():
    assert check_function_declarations("int foo();") == [
        Diagnostic(1, "Function 'foo' declared but not defined"),
    ]


def test_prototype_with_definition():
    source = "int foo();\nint main() { return foo(); }\nint foo() { return 1; }"
    assert check_function_declarations(source) == []


def test_prototype_line_is_where_it_appears():
    source = "int main() {\n  return 0;\n}\nvoid log_it(int level);"
    assert check_function_declarations(source) == [
        Diagnostic(4, "Function 'log_it' declared but not defined"),
    ]


def test_return_of_call_is_not_a_prototype():
    assert check_function_declarations("int main() {\n  return helper();\n}") == []


def test_validate_keeps_check_order():
    source = "int foo();\nint x = 1\n{"
    assert validate(source) == [
        Diagnostic(2, "Missing semicolon"),
        Diagnostic(3, "Unmatched opening bracket"),
        Diagnostic(1, "Function 'foo' declared but not defined"),
    ]


@pytest.mark.parametrize("source", [
    "int main() { int a[2] = {1, 2}; }",
    "void f() { g(); }",
    "int x = 5; // trailing note",
    "// see src/*.cpp\nint y = 1;",
])
def test_valid_one_liners(source: str):
    assert check_semicolons(source) == []


def test_unterminated_brace_initializer():
    assert check_semicolons("int a[2] = {1, 2}") == [Diagnostic(1, "Missing semicolon")]


def test_block_marker_in_line_comment_keeps_checking():
    source = "// globs like src/*.cpp\nint x = 5\nint y = 6;"
    assert check_semicolons(source) == [Diagnostic(2, "Missing semicolon")]


def test_block_marker_in_string_keeps_checking():
    source = 'const char *p = "/*";\nint x = 5'
    assert check_semicolons(source) == [Diagnostic(2, "Missing semicolon")]

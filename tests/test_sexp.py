import pytest

from pdf_noter.core.errors import SexpSyntaxError
from pdf_noter.core.sexp import Symbol, dumps, loads


def test_reads_nested_lists_and_atoms():
    value = loads("(tag 1 (2 (0.1 0.2 0.3 0.4)))")
    assert value == ["tag", 1, [2, [0.1, 0.2, 0.3, 0.4]]]
    assert isinstance(value[0], Symbol)
    assert isinstance(value[1], int)
    assert isinstance(value[2][1][0], float)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("42", 42),
        ("-7", -7),
        ("3.", 3),
        ("1.5", 1.5),
        (".5", 0.5),
        ("-0.25", -0.25),
        ("1e-3", 0.001),
        ("2.5E2", 250.0),
    ],
)
def test_numbers(text, expected):
    value = loads(text)
    assert value == expected
    assert type(value) is type(expected)


def test_symbols_and_strings():
    assert loads("nil") == Symbol("nil")
    assert loads("org-noter-highlight") == "org-noter-highlight"
    assert loads('"a \\"quoted\\" word\\n"') == 'a "quoted" word\n'
    assert not isinstance(loads('"text"'), Symbol)


def test_record_literal_reads_as_list():
    assert loads("#s(pdf-highlight 1 (3 (0 0 1 1)))") == ["pdf-highlight", 1, [3, [0, 0, 1, 1]]]


def test_whitespace_newlines_and_comments_are_ignored():
    text = """
    ( tag   ; the record tag
      1
      (2
        (0.1    0.2
         0.3 0.4)) )
    """
    assert loads(text) == ["tag", 1, [2, [0.1, 0.2, 0.3, 0.4]]]


def test_empty_list():
    assert loads("()") == []


@pytest.mark.parametrize(
    "text",
    ["", "   ", "(1 2", "(1 2))", ")", '"unterminated', "(a) (b)", "; only a comment"],
)
def test_syntax_errors(text):
    with pytest.raises(SexpSyntaxError):
        loads(text)


def test_non_text_input_is_rejected():
    with pytest.raises(SexpSyntaxError):
        loads(None)


def test_dumps_prints_readable_text():
    value = [Symbol("tag"), 1, [2, [0.1, 0.25]], 'say "hi"']
    text = dumps(value)
    assert text == '(tag 1 (2 (0.1 0.25)) "say \\"hi\\"")'
    assert loads(text) == value


def test_dumps_rejects_unknown_objects():
    with pytest.raises(TypeError):
        dumps(object())


def test_deep_nesting_is_a_syntax_error():
    with pytest.raises(SexpSyntaxError, match="Nesting too deep"):
        loads("(" * 5000 + ")" * 5000)


def test_non_ascii_digits_are_symbols():
    value = loads("٣")
    assert isinstance(value, Symbol)
    assert value == "٣"

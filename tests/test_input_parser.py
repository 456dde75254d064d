import pytest

from pwncheck.errors import InputError
from pwncheck.input_parser import first_csv_field, parse_input_file, parse_lines
from pwncheck.models import PasswordEntry


def test_plain_lines_keep_original_line_numbers():
    text = "hunter2\n\n  spaced out  \r\n\t\nlast"
    entries = parse_lines(text)
    assert entries == [
        PasswordEntry("hunter2", 1),
        PasswordEntry("spaced out", 3),
        PasswordEntry("last", 5),
    ]


def test_plain_mode_keeps_commas():
    assert parse_lines("a,b,c")[0].password == "a,b,c"


@pytest.mark.parametrize("line,expected", [
    ("hunter2,alice,example.com", "hunter2"),
    ("abc , def", "abc "),
    ('"a,b",user', "a,b"),
    ('"say ""hi""",x', 'say "hi"'),
    ('"quoted"trailing', "quoted"),
    ('"closed at end"', "closed at end"),
    ('plain"quote', 'plain"quote'),
    (",second", ""),
])
def test_first_csv_field(line, expected):
    assert first_csv_field(line) == expected


def test_empty_quoted_field_is_empty():
    # deliberately yields "" (so the row is skipped), not the lone '"' earlier checkers returned
    assert first_csv_field('""') == ""
    assert first_csv_field('"",site') == ""


@pytest.mark.parametrize("line,expected", [
    ('"no closing quote', "no closing quote"),
    ('"doubled ""stays raw', 'doubled ""stays raw'),
    ('"ends on escaped quote""', 'ends on escaped quote""'),
])
def test_unterminated_quote_falls_back_to_rest_of_line(line, expected):
    # malformed rows are kept verbatim rather than rejected
    assert first_csv_field(line) == expected


def test_csv_mode_skips_empty_first_fields():
    entries = parse_lines(',skipped\n""\nkept,x', csv_mode=True)
    assert entries == [PasswordEntry("kept", 3)]


def test_parse_input_file_detects_csv_by_extension(tmp_path):
    path = tmp_path / "Passwords.CSV"
    path.write_text('"p,w",site\nsecond,site\n', encoding="utf-8")
    assert [e.password for e in parse_input_file(path)] == ["p,w", "second"]


def test_parse_input_file_plain_text(tmp_path):
    path = tmp_path / "passwords.txt"
    path.write_text("p,w\n\nsecond\n", encoding="utf-8")
    assert parse_input_file(path) == [PasswordEntry("p,w", 1), PasswordEntry("second", 3)]


def test_parse_input_file_forced_csv(tmp_path):
    path = tmp_path / "passwords.txt"
    path.write_text("p,w\n", encoding="utf-8")
    assert parse_input_file(path, csv_mode=True) == [PasswordEntry("p", 1)]


def test_parse_input_file_strips_bom(tmp_path):
    path = tmp_path / "bom.txt"
    path.write_bytes("\ufeffhunter2\n".encode("utf-8"))
    assert parse_input_file(path)[0].password == "hunter2"


def test_missing_file_raises_input_error(tmp_path):
    with pytest.raises(InputError):
        parse_input_file(tmp_path / "nope.txt")


def test_undecodable_file_raises_input_error(tmp_path):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"caf\xe9\n")
    with pytest.raises(InputError):
        parse_input_file(path)


def test_password_entry_validation():
    with pytest.raises(ValueError):
        PasswordEntry("", 1)
    with pytest.raises(ValueError):
        PasswordEntry("x", 0)

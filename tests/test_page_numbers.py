import asyncio

from datasheet_to_pdf.models import HeadingEntry
from datasheet_to_pdf.page_numbers import (
    extract_page_texts,
    match_page_numbers,
    normalize_text,
    reverse_engineer_page_numbers,
)

from conftest import write_pdf


def _entries(*texts):
    return [HeadingEntry(text=text, level=2, anchor=text.lower()) for text in texts]


def test_normalize_text_collapses_tabs_and_newlines():
    assert normalize_text("2.1\tSensors") == "2.1 Sensors"
    assert normalize_text("2.1\n\n\tSensors\n") == "2.1 Sensors"
    assert normalize_text("1 Features") == "1 Features"


def test_table_of_contents_echo_does_not_win():
    entries = _entries("1 Features", "2 Hardware", "3 Mechanical")
    pages = [
        (0, ["Test Board", "1 Features", "2 Hardware", "3 Mechanical"]),
        (1, ["1 Features", "some text"]),
        (2, ["2 Hardware", "3 Mechanical"]),
    ]

    match_page_numbers(entries, pages)

    assert [e.page_number for e in entries] == [2, 3, 3]


def test_pages_are_scanned_regardless_of_input_order():
    entries = _entries("1 Features", "2 Hardware")
    pages = [(2, ["2 Hardware"]), (0, ["1 Features", "2 Hardware"]), (1, ["1 Features"])]

    match_page_numbers(entries, pages)

    assert [e.page_number for e in entries] == [2, 3]


def test_resolved_entries_are_never_reassigned():
    entries = _entries("1 Features", "2 Hardware")
    entries[0].resolve(1)
    pages = [(0, ["1 Features"]), (1, ["2 Hardware"]), (2, ["1 Features"])]

    match_page_numbers(entries, pages)

    assert entries[0].page_number == 1
    assert entries[1].page_number == 2


def test_missing_heading_stays_unresolved_and_warns(capsys):
    entries = _entries("1 Features", "2 Missing")
    pages = [(0, ["1 Features"])]

    match_page_numbers(entries, pages)

    assert [e.page_number for e in entries] == [1, 0]
    assert "Heading '2 Missing' was not found" in capsys.readouterr().out


def test_resolved_page_numbers_are_valid_page_indices():
    entries = _entries("1 A", "2 B", "2.1 C", "3 D")
    pages = [(i, ["1 A", "2 B", "2.1 C", "3 D"][i:i + 2]) for i in range(4)]

    match_page_numbers(entries, pages)

    for entry in entries:
        assert 1 <= entry.page_number <= len(pages)


def test_extract_page_texts_reads_lines_per_page(tmp_path):
    pdf = write_pdf(tmp_path / "doc.pdf", [["Contents", "1 Features"], ["1 Features", "Body text"]])

    pages = extract_page_texts(pdf)

    assert [index for index, _ in pages] == [0, 1]
    assert "1 Features" in [normalize_text(run) for run in pages[1][1]]
    assert "Contents" in [normalize_text(run) for run in pages[0][1]]


def test_reverse_engineer_page_numbers_from_pdf(tmp_path):
    pdf = write_pdf(tmp_path / "doc.pdf", [
        ["1 Features", "2 Hardware", "2.1 Sensors"],
        ["1 Features", "Wireless connectivity"],
        ["2 Hardware", "2.1 Sensors"],
    ])
    entries = _entries("1 Features", "2 Hardware", "2.1 Sensors")

    result = asyncio.run(reverse_engineer_page_numbers(entries, pdf))

    assert result is entries
    assert [e.page_number for e in entries] == [2, 3, 3]


def test_reverse_engineer_page_numbers_without_entries(tmp_path, capsys):
    result = asyncio.run(reverse_engineer_page_numbers([], tmp_path / "unused.pdf"))

    assert result == []
    assert "doesn't contain any entries" in capsys.readouterr().out

import os
from datetime import datetime

import pytest

import datasheet_to_pdf.datasheet as datasheet_module
from datasheet_to_pdf.config import Config
from datasheet_to_pdf.datasheet import (
    Datasheet,
    find_datasheet_files,
    load_datasheets,
    split_front_matter,
)
from datasheet_to_pdf.exceptions import ConfigurationError, SourceDocumentError


def test_front_matter_and_html_are_read_on_creation(make_datasheet, config):
    datasheet = Datasheet(make_datasheet(), config)

    assert datasheet.identifier == "ABX00001"
    assert datasheet.title == "Test Board"
    assert datasheet.type == "board"
    assert datasheet.variant == "WiFi"
    assert datasheet.hardware_revision == "Rev 1.2"
    assert not datasheet.is_draft
    assert not datasheet.is_previous_revision
    assert "<h2>Features</h2>" in datasheet.html
    assert "identifier" not in datasheet.markdown


def test_file_without_front_matter(make_datasheet, config):
    datasheet = Datasheet(make_datasheet(content="## Only content\n"), config)

    assert datasheet.metadata == {}
    assert datasheet.identifier is None
    assert datasheet.title == "datasheet"


def test_split_front_matter_rejects_non_mapping():
    with pytest.raises(ValueError):
        split_front_matter("---\n- a\n- b\n---\nbody\n")


@pytest.mark.parametrize("content", [
    "---\ntitle: [unclosed\n---\nbody\n",
    "---\n- just\n- a list\n---\nbody\n",
])
def test_unparseable_front_matter_fails_fast(make_datasheet, config, content):
    with pytest.raises(SourceDocumentError):
        Datasheet(make_datasheet(content=content), config)


def test_missing_file_fails_fast(tmp_path, config):
    with pytest.raises(SourceDocumentError):
        Datasheet(tmp_path / "missing.md", config)


def test_modified_date_falls_back_to_mtime(make_datasheet, config, monkeypatch):
    path = make_datasheet()
    timestamp = datetime(2023, 3, 7, 12, 0).timestamp()
    os.utime(path, (timestamp, timestamp))
    monkeypatch.setattr(datasheet_module, "git_commit_date", lambda p: None)

    assert Datasheet(path, config).modified_date == "07/03/2023"


def test_modified_date_prefers_commit_date(make_datasheet, config, monkeypatch):
    monkeypatch.setattr(datasheet_module, "git_commit_date", lambda p: datetime(2021, 11, 30))

    assert Datasheet(make_datasheet(), config).modified_date == "30/11/2021"


def test_normalized_revision_and_pdf_filename(make_datasheet, config):
    datasheet = Datasheet(make_datasheet(), config)

    assert datasheet.normalized_hardware_revision == "Rev-12"
    assert datasheet.pdf_filename("-datasheet.pdf") == "ABX00001-rev-12-datasheet.pdf"


def test_pdf_filename_without_revision(make_datasheet, config):
    content = "---\nidentifier: ABX00002\n---\n## A\n"
    datasheet = Datasheet(make_datasheet(content=content), config)

    assert datasheet.normalized_hardware_revision is None
    assert datasheet.pdf_filename(".pdf") == "ABX00002.pdf"


def test_build_path_is_relative_to_datasheets_folder(make_datasheet, config, datasheets_root):
    datasheet = Datasheet(make_datasheet(name="x", filename="doc.md"), config)

    assert datasheet.construct_target_build_path("out") == datasheets_root.resolve() / "out"


def test_build_path_of_previous_revision(make_datasheet, config, datasheets_root):
    content = "---\nidentifier: ABX00001\nisPreviousRevision: true\n---\n## A\n"
    datasheet = Datasheet(make_datasheet(name="x", content=content), config)

    assert datasheet.construct_target_build_path("out") == datasheets_root.resolve() / "out" / "archive"


def test_previous_revision_without_configured_folder(make_datasheet, tmp_path, stylesheets):
    config = Config({"stylesheets_path": str(stylesheets)}, config_file=str(_empty_config(tmp_path)))
    content = "---\nisPreviousRevision: true\n---\n## A\n"
    datasheet = Datasheet(make_datasheet(content=content), config)

    with pytest.raises(ConfigurationError, match="previousDocumentationFolder"):
        datasheet.construct_target_build_path("out")


def test_build_path_with_legacy_folder_name(tmp_path, config):
    source = tmp_path / "legacy" / "datasheet" / "board" / "doc.md"
    source.parent.mkdir(parents=True)
    source.write_text("## A\n", encoding="utf-8")

    datasheet = Datasheet(source, config)

    assert datasheet.construct_target_build_path("out") == (tmp_path / "legacy" / "datasheet" / "out").resolve()


def test_build_path_without_datasheets_folder(tmp_path, config):
    source = tmp_path / "elsewhere" / "doc.md"
    source.parent.mkdir(parents=True)
    source.write_text("## A\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="datasheets"):
        Datasheet(source, config).construct_target_build_path("out")


def test_find_datasheet_files_applies_pattern_and_excludes(datasheets_root):
    (datasheets_root / "a").mkdir()
    (datasheets_root / "a" / "datasheet.md").write_text("", encoding="utf-8")
    (datasheets_root / "a" / "README.md").write_text("", encoding="utf-8")
    (datasheets_root / "a" / "notes.txt").write_text("", encoding="utf-8")
    (datasheets_root / "node_modules" / "pkg").mkdir(parents=True)
    (datasheets_root / "node_modules" / "pkg" / "datasheet.md").write_text("", encoding="utf-8")
    (datasheets_root / "b").mkdir()
    (datasheets_root / "b" / "datasheet.md").write_text("", encoding="utf-8")

    found = find_datasheet_files(datasheets_root, "*.md", ["node_modules", "README.md"])

    assert found == [datasheets_root / "a" / "datasheet.md", datasheets_root / "b" / "datasheet.md"]


def test_find_datasheet_files_with_single_file(make_datasheet):
    path = make_datasheet()
    assert find_datasheet_files(path, "*.md") == [path]


def test_load_datasheets_skips_drafts_and_counts_broken_files(make_datasheet, config, capsys):
    good = make_datasheet(name="good")
    draft = make_datasheet(name="draft", content="---\nidentifier: D1\nisDraft: true\n---\n## A\n")
    broken = make_datasheet(name="broken", content="---\ntitle: [unclosed\n---\n")

    datasheets, failed = load_datasheets([good, draft, broken], config)

    assert [d.content_file_path for d in datasheets] == [good]
    assert failed == 1
    assert f"Skipping datasheet draft {draft}" in capsys.readouterr().out


def _empty_config(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("{}", encoding="utf-8")
    return path

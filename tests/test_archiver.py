import zipfile

import pytest

from auditor.core.archiver import ArchiveError, Archiver


@pytest.fixture
def archiver(logger):
    return Archiver(logger)


def test_copy_files_skips_unreadable_sources(archiver, tmp_path):
    source = tmp_path / "a.ppd"
    source.write_text("*PPD-Adobe")
    destination = tmp_path / "dest"

    copied = archiver.copy_files([source, tmp_path / "missing.ppd"], destination)

    assert copied == [destination / "a.ppd"]
    assert (destination / "a.ppd").read_text() == "*PPD-Adobe"


def test_copy_directory_contents_is_not_recursive(archiver, tmp_path):
    source = tmp_path / "ppd"
    (source / "sub").mkdir(parents=True)
    (source / "one.ppd").write_text("1")
    (source / "sub" / "two.ppd").write_text("2")

    copied = archiver.copy_directory_contents(source, tmp_path / "dest")

    assert [path.name for path in copied] == ["one.ppd"]


def test_copy_directory_contents_missing_source(archiver, tmp_path):
    destination = tmp_path / "dest"
    assert archiver.copy_directory_contents(tmp_path / "nowhere", destination) == []
    assert destination.is_dir()


def test_archive_keeps_relative_paths_and_empty_dirs(archiver, tmp_path):
    staging = tmp_path / "staging"
    (staging / "Printer_Drivers").mkdir(parents=True)
    (staging / "Captured_Fonts").mkdir()
    (staging / "Captured_Fonts" / "Font.otf").write_bytes(b"OTTO")
    (staging / "Audit_Report_Jane.csv").write_text("TYPE,DEVELOPER,NAME,DETAILS\n")

    path = archiver.archive(staging, tmp_path / "out" / "Migration.zip")

    with zipfile.ZipFile(path) as zf:
        names = set(zf.namelist())
        assert zf.read("Captured_Fonts/Font.otf") == b"OTTO"
    assert names == {"Audit_Report_Jane.csv", "Captured_Fonts/", "Captured_Fonts/Font.otf", "Printer_Drivers/"}


def test_archive_missing_staging_raises(archiver, tmp_path):
    with pytest.raises(ArchiveError):
        archiver.archive(tmp_path / "nowhere", tmp_path / "out.zip")


def test_archive_unwritable_destination_raises(archiver, tmp_path):
    staging = tmp_path / "staging"
    staging.mkdir()
    (staging / "file.txt").write_text("x")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(ArchiveError):
        archiver.archive(staging, blocker / "out.zip")
    assert blocker.is_file()

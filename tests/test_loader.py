"""Test class ExpressionLoader."""
import tarfile
import zipfile

import py7zr
import pytest

from prodcalc.batch.loader import ExpressionLoader


def test_load_txt_skips_blank_lines(tmp_path) -> None:
    """Plain text files yield stripped, non-empty lines."""
    txt = tmp_path / "ops.txt"
    txt.write_text("1+1\n\n  2*2  \n\n")
    assert ExpressionLoader().load(txt) == ["1+1", "2*2"]


def test_load_zip(tmp_path) -> None:
    """Check that a .zip archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("3+3\n")

    zip_path = tmp_path / "ops.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.write(txt, arcname="ops.txt")

    assert ExpressionLoader().load(zip_path) == ["3+3"]


def test_load_tar_xz(tmp_path) -> None:
    """Check that a .tar.xz archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("4*4\n")

    tar_path = tmp_path / "ops.tar.xz"
    with tarfile.open(tar_path, "w:xz") as tf:
        tf.add(txt, arcname="ops.txt")

    assert ExpressionLoader().load(tar_path) == ["4*4"]


def test_load_7z(tmp_path) -> None:
    """Check that a .7z archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("5-2\nsqrt(9)\n")

    archive_path = tmp_path / "ops.7z"
    with py7zr.SevenZipFile(archive_path, "w") as archive:
        archive.write(txt, arcname="ops.txt")

    assert ExpressionLoader().load(archive_path) == ["5-2", "sqrt(9)"]


def test_load_archive_without_txt(tmp_path) -> None:
    """Verify that extraction fails if no .txt file exists in the archive."""
    zip_path = tmp_path / "empty.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("data.bin", b"\x00\x01")

    with pytest.raises(ValueError):
        ExpressionLoader().load(zip_path)


def test_load_unsupported_format(tmp_path) -> None:
    """Ensure unsupported formats raise a ValueError."""
    file_path = tmp_path / "ops.rar"
    file_path.write_text("1+1")

    with pytest.raises(ValueError):
        ExpressionLoader().load(file_path)


def test_load_skips_members_that_are_not_text(tmp_path) -> None:
    """The first .txt member is read even when other members come first."""
    zip_path = tmp_path / "mixed.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("readme.md", "# not expressions\n")
        zf.writestr("batch/ops.txt", "-5+2\n50%\n")
        zf.writestr("later.txt", "9\n")

    assert ExpressionLoader().load(zip_path) == ["-5+2", "50%"]


def test_load_tar_xz_in_subdirectory(tmp_path) -> None:
    """Directory entries are skipped and nested members are found."""
    nested = tmp_path / "batch"
    nested.mkdir()
    (nested / "ops.txt").write_text("2^3^2\n")

    tar_path = tmp_path / "ops.tar.xz"
    with tarfile.open(tar_path, "w:xz") as tf:
        tf.add(nested, arcname="batch")

    assert ExpressionLoader().load(tar_path) == ["2^3^2"]

"""Read expressions from a text file or an archive containing one."""
from pathlib import Path
import tarfile
import tempfile
from typing import List
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict


def _first_text_member(names: List[str], archive_path: Path) -> str:
    """Return the first archive member name ending in .txt."""
    for name in names:
        if name.endswith(".txt"):
            return name
    raise ValueError(f"No .txt file found in {archive_path.name}")


class ExpressionLoader(BaseModel):
    """
    Loads one expression per line from an input file.

    Supported inputs:
    - plain .txt files
    - .zip, .tar.xz and .7z archives, from which the first .txt member is read
    """

    model_config = ConfigDict(frozen=True)

    encoding: str = "utf-8"

    def load(self, input_file: Path) -> List[str]:
        """
        Return the stripped, non-empty lines of the input.

        :param Path input_file: Path to a .txt file or a supported archive

        :return: Expressions in file order
        :rtype: List[str]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        if input_file.suffix == ".txt":
            content = input_file.read_text(encoding=self.encoding)
        else:
            content = self._extract_archive(input_file)
        return [line.strip() for line in content.splitlines() if line.strip()]

    def _extract_archive(self, archive_path: Path) -> str:
        """
        Extract the first .txt member of a supported archive and return its content.

        :param Path archive_path: Path to the archive file

        :return: Content of the extracted .txt member
        :rtype: str
        :raises ValueError: If no .txt member is found or format is unsupported
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir)
            if archive_path.suffix == ".zip":
                with zipfile.ZipFile(archive_path, "r") as zf:
                    name = _first_text_member(zf.namelist(), archive_path)
                    zf.extract(name, path=target)
            elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
                with tarfile.open(archive_path, "r:xz") as tf:
                    name = _first_text_member([m.name for m in tf.getmembers() if m.isfile()], archive_path)
                    tf.extract(name, path=target, filter="data")
            elif archive_path.suffix == ".7z":
                with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                    name = _first_text_member(archive.getnames(), archive_path)
                    archive.extract(path=target, targets=[name])
            else:
                raise ValueError(f"Unsupported input format: {''.join(archive_path.suffixes) or archive_path.name}")
            return (target / name).read_text(encoding=self.encoding)

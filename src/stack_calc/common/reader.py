"""Load expression lines from a text file or an archive."""
from pathlib import Path
import tarfile
import tempfile
from typing import Callable, Dict, Iterable, List, Optional
import zipfile

import py7zr


def _first_txt(names: Iterable[str]) -> Optional[str]:
    return next((name for name in names if name.endswith(".txt")), None)


def _read_zip(archive_path: Path) -> Optional[str]:
    with zipfile.ZipFile(archive_path, "r") as zf:
        name = _first_txt(zf.namelist())
        return None if name is None else zf.read(name).decode("utf-8")


def _read_tar_xz(archive_path: Path) -> Optional[str]:
    with tarfile.open(archive_path, "r:xz") as tf:
        name = _first_txt(m.name for m in tf.getmembers() if m.isfile())
        return None if name is None else tf.extractfile(name).read().decode("utf-8")


def _read_7z(archive_path: Path) -> Optional[str]:
    # py7zr only extracts to disk
    with tempfile.TemporaryDirectory() as tmpdir, py7zr.SevenZipFile(archive_path, mode="r") as archive:
        name = _first_txt(archive.getnames())
        if name is None:
            return None
        archive.extract(path=tmpdir, targets=[name])
        return (Path(tmpdir) / name).read_text(encoding="utf-8")


# Archive suffix -> reader returning the first .txt member, or None
ARCHIVE_READERS: Dict[str, Callable[[Path], Optional[str]]] = {
    ".zip": _read_zip,
    ".tar.xz": _read_tar_xz,
    ".7z": _read_7z,
}


def archive_format(archive_path: Path) -> str:
    """
    Return the archive suffix used to pick a reader, e.g. ``.tar.xz`` or ``.7z``.

    :param Path archive_path: Path to the archive file

    :return: Suffix key of ARCHIVE_READERS, or the plain suffix if none applies
    :rtype: str
    """
    if archive_path.suffixes[-2:] == [".tar", ".xz"]:
        return ".tar.xz"
    return archive_path.suffix


def extract_archive(archive_path: Path) -> str:
    """
    Return the content of the first .txt member of a ``.zip``, ``.tar.xz`` or ``.7z`` archive.

    :param Path archive_path: Path to the archive file

    :return: Content of the .txt member
    :rtype: str
    :raises ValueError: If no .txt member is found or the format is unsupported
    """
    fmt = archive_format(archive_path)
    if fmt not in ARCHIVE_READERS:
        raise ValueError(f"Unsupported archive format: {fmt or archive_path.name}")

    content = ARCHIVE_READERS[fmt](archive_path)
    if content is None:
        raise ValueError(f"No .txt file found in {fmt} archive: {archive_path}")
    return content


def read_expressions(input_file: Path) -> List[str]:
    """
    Read non-empty, stripped expression lines from a file.

    Plain ``.txt`` files are read directly; archives are searched for their first ``.txt`` member.

    :param Path input_file: Path to the input file or archive

    :return: Expression lines in input order
    :rtype: List[str]
    :raises ValueError: If the archive format is unsupported or contains no .txt file
    """
    if input_file.suffix == ".txt":
        content = input_file.read_text(encoding="utf-8")
    else:
        content = extract_archive(input_file)

    # Remove empty lines
    return [line.strip() for line in content.splitlines() if line.strip()]

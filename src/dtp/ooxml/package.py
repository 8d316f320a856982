"""Office archive handling: locate, parse and re-serialize text-bearing parts.

Only the parts that carry translatable text are parsed. Every other entry
(styles, relationships, media, presenter notes) is copied into the output
archive byte-for-byte.
"""

from __future__ import annotations

import io
import os
import re
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable

from lxml import etree

from dtp.core.errors import PackageError
from dtp.ooxml.markup import DIALECTS, MarkupDialect, parse_xml, serialize_xml

DOCX_BODY = "word/document.xml"
_HEADER_FOOTER_RE = re.compile(r"^word/(header|footer)\d*\.xml$", re.IGNORECASE)
_NOTE_PARTS = ("word/footnotes.xml", "word/endnotes.xml")
_SLIDE_RE = re.compile(r"^ppt/slides/slide(\d+)\.xml$", re.IGNORECASE)
_NOTES_SLIDE_RE = re.compile(r"^ppt/notesSlides/notesSlide(\d+)\.xml$", re.IGNORECASE)

_EXTENSIONS = {".docx": "docx", ".docm": "docx", ".pptx": "pptx", ".pptm": "pptx"}


def detect_kind(names: list[str], suffix: str = "") -> str:
    """Decide whether an archive is a word-processing or presentation document."""
    kind = _EXTENSIONS.get(suffix.lower())
    if kind:
        return kind
    if DOCX_BODY in names:
        return "docx"
    if any(_SLIDE_RE.match(name) for name in names):
        return "pptx"
    raise PackageError(f"Unsupported document type: {suffix or 'unknown'}")


def text_part_names(names: list[str], kind: str) -> list[str]:
    """Text-bearing part names in extraction order.

    docx: body, then headers/footers in archive order, then footnotes and endnotes.
    pptx: slides sorted by slide number. Notes slides are never included.
    """
    if kind == "docx":
        if DOCX_BODY not in names:
            raise PackageError(f"Missing required part: {DOCX_BODY}")
        ordered = [DOCX_BODY]
        ordered += [name for name in names if _HEADER_FOOTER_RE.match(name)]
        ordered += [name for name in _NOTE_PARTS if name in names]
        return ordered

    slides = [(int(m.group(1)), name) for name in names if (m := _SLIDE_RE.match(name))]
    if not slides:
        raise PackageError("Presentation has no slides (ppt/slides/slideN.xml)")
    return [name for _, name in sorted(slides)]


class OfficePackage:
    """An opened .docx/.pptx with its text-bearing parts parsed.

    The original archive bytes are held in memory, so saving never depends on
    the source file still being present or unchanged.
    """

    def __init__(self, data: bytes, kind: str, source: Path | None = None) -> None:
        self.kind = kind
        self.source = source
        self._data = data
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                self.names = zf.namelist()
                self.parts: dict[str, etree._Element] = {
                    name: parse_xml(zf.read(name), source=name)
                    for name in text_part_names(self.names, kind)
                }
        except zipfile.BadZipFile as e:
            raise PackageError(f"Not a valid zip archive: {e}") from e

    @classmethod
    def open(cls, path: Path) -> OfficePackage:
        """Read and parse an archive from disk."""
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        data = path.read_bytes()
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                names = zf.namelist()
        except zipfile.BadZipFile as e:
            raise PackageError(f"Not a valid zip archive: {path}") from e
        return cls(data, detect_kind(names, path.suffix), source=path)

    @property
    def dialect(self) -> MarkupDialect:
        return DIALECTS[self.kind]

    @property
    def notes_parts(self) -> list[str]:
        """Presenter notes parts, passed through untouched."""
        return [name for name in self.names if _NOTES_SLIDE_RE.match(name)]

    def read(self, name: str) -> bytes:
        """Raw bytes of any archive entry, as found in the source."""
        with zipfile.ZipFile(io.BytesIO(self._data)) as zf:
            return zf.read(name)

    def save(self, path: Path, changed: Iterable[str] | None = None) -> Path:
        """Write the archive with re-serialized text parts.

        Only the parts named in ``changed`` (every parsed part by default) are
        re-serialized; all other entries are copied byte for byte. Entries keep
        their original names, order and compression. The file is written to a
        temporary sibling and moved into place only on success.
        """
        path = Path(path)
        dirty = set(self.parts) if changed is None else set(changed) & set(self.parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with (
                os.fdopen(fd, "wb") as out,
                zipfile.ZipFile(io.BytesIO(self._data)) as zin,
                zipfile.ZipFile(out, "w") as zout,
            ):
                for info in zin.infolist():
                    if info.filename in dirty:
                        zout.writestr(info, serialize_xml(self.parts[info.filename]))
                    else:
                        zout.writestr(info, zin.read(info.filename))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return path

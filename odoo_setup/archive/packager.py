"""Archive packagers.

The assembler never talks to an archive library directly; it hands a mapping
of ``archive path -> bytes`` to a :class:`Packager`.  :class:`ZipPackager` is
the default implementation.  Tests substitute their own.
"""

from __future__ import annotations

import io
import zipfile
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

# Fixed timestamp so identical bundles produce identical archives
_EPOCH = (1980, 1, 1, 0, 0, 0)

_FILE_MODE = 0o644
_EXEC_MODE = 0o755
_DIR_MODE = 0o40755


@runtime_checkable
class Packager(Protocol):
    """Compresses named byte buffers into a single archive payload."""

    def compress(self, files: Mapping[str, bytes]) -> bytes:
        ...


class ZipPackager:
    """Builds a deflated zip archive in memory.

    Directory entries are written for every parent folder so that the layout
    survives extraction tools that do not create intermediate folders.
    Shell scripts keep their executable bit.
    """

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED, compresslevel: int = 6) -> None:
        self.compression = compression
        self.compresslevel = compresslevel

    def compress(self, files: Mapping[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(
            buffer, "w", compression=self.compression, compresslevel=self.compresslevel
        ) as archive:
            for directory in _directories(files):
                info = zipfile.ZipInfo(directory, date_time=_EPOCH)
                info.external_attr = (_DIR_MODE << 16) | 0x10
                archive.writestr(info, b"")
            for name, payload in files.items():
                info = zipfile.ZipInfo(name, date_time=_EPOCH)
                info.compress_type = self.compression
                mode = _EXEC_MODE if name.endswith(".sh") else _FILE_MODE
                info.external_attr = mode << 16
                archive.writestr(info, payload)
        return buffer.getvalue()


def _directories(files: Mapping[str, bytes]) -> list[str]:
    """Every parent directory of *files*, parents first, as ``dir/`` names."""
    seen: list[str] = []
    for name in files:
        parts = name.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            directory = "/".join(parts[:depth]) + "/"
            if directory not in seen:
                seen.append(directory)
    return seen

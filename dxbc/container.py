"""DXBC container scanning, parsing and building."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterable

DXBC_MAGIC = b"DXBC"
_HEADER_SIZE = 0x20
_U32 = struct.Struct("<I")


@dataclass
class WritableChunk:
    """A chunk ready to be serialised into a DXBC container."""

    fourcc: bytes
    data: bytes


@dataclass
class DxbcChunk:
    """A single chunk within a DXBC container."""

    fourcc: bytes
    size: int
    data: bytes

    def fourcc_str(self) -> str:
        """Return the FourCC as text, or ``"????"`` if it is not valid UTF-8."""
        try:
            return self.fourcc.decode("utf-8")
        except UnicodeDecodeError:
            return "????"


@dataclass
class DxbcContainer:
    """A parsed DXBC container with its chunk table."""

    offset_in_file: int
    total_size: int
    chunks: list[DxbcChunk] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"DXBC at 0x{self.offset_in_file:X}, size={self.total_size}, "
            f"chunks={len(self.chunks)}"
        )


def _read_u32(data: bytes, pos: int) -> int | None:
    if pos < 0 or pos + 4 > len(data):
        return None
    return _U32.unpack_from(data, pos)[0]


def _parse_dxbc(data: bytes, offset: int) -> DxbcContainer | None:
    if offset + _HEADER_SIZE > len(data):
        return None

    total_size = _read_u32(data, offset + 0x18)
    chunk_count = _read_u32(data, offset + 0x1C)
    if total_size is None or chunk_count is None:
        return None
    if offset + total_size > len(data):
        return None

    chunks: list[DxbcChunk] = []
    for i in range(chunk_count):
        rel = _read_u32(data, offset + _HEADER_SIZE + i * 4)
        if rel is None:
            return None
        chunk_abs = offset + rel
        if chunk_abs + 8 > len(data):
            break
        fourcc = bytes(data[chunk_abs:chunk_abs + 4])
        chunk_size = _U32.unpack_from(data, chunk_abs + 4)[0]
        start = chunk_abs + 8
        end = min(start + chunk_size, len(data))
        chunks.append(DxbcChunk(fourcc=fourcc, size=chunk_size, data=bytes(data[start:end])))

    return DxbcContainer(offset_in_file=offset, total_size=total_size, chunks=chunks)


def scan_dxbc(data: bytes) -> list[DxbcContainer]:
    """Scan a byte string for back-to-back DXBC containers and parse them."""
    data = bytes(data)
    results: list[DxbcContainer] = []
    pos = 0
    while pos + 4 <= len(data):
        offset = data.find(DXBC_MAGIC, pos)
        if offset < 0:
            break
        container = _parse_dxbc(data, offset)
        if container is None:
            break
        results.append(container)
        # Always move forward, even if a header claims a size too small to cover it.
        pos = max(offset + container.total_size, offset + len(DXBC_MAGIC))
    return results


def build_dxbc(chunks: Iterable[WritableChunk]) -> bytes:
    """Build a DXBC container from chunks.

    The 16-byte hash field is left zeroed.
    """
    chunks = list(chunks)
    header_size = _HEADER_SIZE + len(chunks) * 4
    total_size = header_size + sum(8 + len(c.data) for c in chunks)

    out = bytearray(DXBC_MAGIC)
    out += bytes(16)
    out += _U32.pack(1)
    out += _U32.pack(total_size)
    out += _U32.pack(len(chunks))

    offset = header_size
    for chunk in chunks:
        out += _U32.pack(offset)
        offset += 8 + len(chunk.data)

    for chunk in chunks:
        out += bytes(chunk.fourcc)
        out += _U32.pack(len(chunk.data))
        out += bytes(chunk.data)

    return bytes(out)
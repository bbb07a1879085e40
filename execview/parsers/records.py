"""
ELF Header Record Decoders
===========================

Raw, unclassified views of the three fixed-size ELF records and one
generic decoder per record kind.  The decoders are parameterised by a
:class:`~execview.parsers.schemas.WordWidth` instead of being written
once per class: the width supplies the natural word size and the
program-header field order, and the shared layout tables supply
everything else.

A decoder consumes exactly the record's declared byte count at the
given offset.  If the buffer is too short it raises
:class:`~execview.core.errors.IncompleteError` with the shortfall for the
*whole* record, before any field is read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from execview.parsers.primitives import ByteReader
from execview.parsers.schemas import (
    FILE_HEADER_LAYOUT,
    SECTION_HEADER_LAYOUT,
    Layout,
    WordWidth,
)


# ---------------------------------------------------------------------------
# Record types
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FileHeader:
    """Decoded ``ElfN_Ehdr``."""
    e_ident: bytes
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int


@dataclass(frozen=True, slots=True)
class ProgramHeader:
    """Decoded ``ElfN_Phdr``."""
    p_type: int
    p_flags: int
    p_offset: int
    p_vaddr: int
    p_paddr: int
    p_filesz: int
    p_memsz: int
    p_align: int


@dataclass(frozen=True, slots=True)
class SectionHeader:
    """Decoded ``ElfN_Shdr``."""
    sh_name: int
    sh_type: int
    sh_flags: int
    sh_addr: int
    sh_offset: int
    sh_size: int
    sh_link: int
    sh_info: int
    sh_addralign: int
    sh_entsize: int


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def _read_fields(
    data: bytes | bytearray | memoryview,
    offset: int,
    layout: Layout,
    width: WordWidth,
) -> dict[str, Any]:
    reader = ByteReader(data, offset)
    reader.require(width.record_size(layout))

    fields: dict[str, Any] = {}
    for name, kind in layout:
        if kind == "ident":
            fields[name] = reader.take(width.field_size(kind))
        else:
            fields[name] = reader.uint(width.field_size(kind))
    return fields


def decode_file_header(
    data: bytes | bytearray | memoryview, width: WordWidth
) -> FileHeader:
    """Decode the ELF file header at offset 0."""
    return FileHeader(**_read_fields(data, 0, FILE_HEADER_LAYOUT, width))


def decode_program_header(
    data: bytes | bytearray | memoryview, offset: int, width: WordWidth
) -> ProgramHeader:
    """Decode one program header entry at *offset*."""
    return ProgramHeader(
        **_read_fields(data, offset, width.program_header_layout, width)
    )


def decode_section_header(
    data: bytes | bytearray | memoryview, offset: int, width: WordWidth
) -> SectionHeader:
    """Decode one section header entry at *offset*."""
    return SectionHeader(
        **_read_fields(data, offset, SECTION_HEADER_LAYOUT, width)
    )

"""
Execview Report Models
=======================

Pydantic models describing a decoded executable in a serialisable,
payload-free form.  They back the CLI's ``--json`` output and are the
recommended way to persist or transmit decode results, since the live
:class:`~execview.core.executable.ElfFile` holds views into the
caller's buffer.

Enumerated fields are stored by their ``<elf.h>`` member name
(``"PT_LOAD"``, ``"SHF_ALLOC"``) rather than by raw code.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class HeaderSummary(BaseModel):
    """File header fields.

    Attributes:
        elf_type: Object type name (``ET_EXEC``, ``ET_DYN`` ...).
        machine: Architecture name (``EM_X86_64`` ...).
    """
    elf_type: str = ""
    machine: str = ""
    version: int = 0
    entry_point: int = 0
    flags: int = 0
    program_header_offset: int = 0
    program_header_entry_size: int = 0
    program_header_count: int = 0
    section_header_offset: int = 0
    section_header_entry_size: int = 0
    section_header_count: int = 0
    section_name_string_table_index: int = 0


class SegmentSummary(BaseModel):
    """One program header entry."""
    type: str = ""
    flags: list[str] = Field(default_factory=list)
    offset: int = 0
    virtual_address: int = 0
    physical_address: int = 0
    file_size: int = 0
    memory_size: int = 0
    alignment: int = 0


class SectionSummary(BaseModel):
    """One section header entry with its resolved name."""
    index: int = 0
    name: str = ""
    type: str = ""
    flags: list[str] = Field(default_factory=list)
    address: int = 0
    offset: int = 0
    size: int = 0
    link: int = 0
    info: int = 0
    alignment: int = 0
    entry_size: int = 0


class ExecutableSummary(BaseModel):
    """Complete payload-free description of a decoded executable."""
    format: str = "elf"
    bits: int = Field(default=64)
    header: HeaderSummary = Field(default_factory=HeaderSummary)
    interpreter: Optional[str] = None
    segments: list[SegmentSummary] = Field(default_factory=list)
    sections: list[SectionSummary] = Field(default_factory=list)

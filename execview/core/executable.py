"""
Width-Erased Executable Representation
=======================================

The decoded artefact handed back to callers.  :class:`ElfFile` carries
every accessor; :class:`Elf32` and :class:`Elf64` only pin the word
width, so callers can work against ``ElfFile`` and never branch on the
class.  ``Executable`` is the tagged union of the two.

Segment and section payloads are read-only :class:`memoryview` slices of
the caller's buffer, so the buffer must stay alive as long as the
executable is in use.

Usage::

    exe = execview.decode(raw_bytes)
    if isinstance(exe, Elf64):
        ...
    text = exe.section_by_name(".text")
    for seg in exe.segments_of_type(SegmentType.PT_LOAD):
        print(hex(seg.virtual_address), seg.flags)
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from execview.core.enums import (
    ElfType,
    Machine,
    SectionFlag,
    SectionType,
    SegmentFlag,
    SegmentType,
    classify_elf_type,
    classify_machine,
    flag_names,
)
from execview.core.errors import MalformedInputError
from execview.core.models import (
    ExecutableSummary,
    HeaderSummary,
    SectionSummary,
    SegmentSummary,
)
from execview.parsers.records import FileHeader, ProgramHeader, SectionHeader
from execview.parsers.schemas import ELF32, ELF64, WordWidth


# ---------------------------------------------------------------------------
# Segment / Section views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Segment:
    """A classified program header with its file-resident bytes."""
    header: ProgramHeader
    segment_type: SegmentType
    flags: SegmentFlag
    data: memoryview = field(repr=False, hash=False)

    @property
    def offset(self) -> int:
        return self.header.p_offset

    @property
    def size(self) -> int:
        """Bytes occupied in the file (``p_filesz``)."""
        return self.header.p_filesz

    @property
    def file_size(self) -> int:
        return self.header.p_filesz

    @property
    def memory_size(self) -> int:
        return self.header.p_memsz

    @property
    def virtual_address(self) -> int:
        return self.header.p_vaddr

    @property
    def physical_address(self) -> int:
        return self.header.p_paddr

    @property
    def address(self) -> int:
        return self.header.p_vaddr

    @property
    def alignment(self) -> int:
        return self.header.p_align


@dataclass(frozen=True)
class Section:
    """A classified section header with its bytes and resolved name."""
    header: SectionHeader
    section_type: SectionType
    flags: SectionFlag
    data: memoryview = field(repr=False, hash=False)
    name: str = ""

    @property
    def name_offset(self) -> int:
        return self.header.sh_name

    @property
    def offset(self) -> int:
        return self.header.sh_offset

    @property
    def size(self) -> int:
        """Declared ``sh_size``; ``SHT_NOBITS`` sections hold no file bytes."""
        return self.header.sh_size

    @property
    def address(self) -> int:
        return self.header.sh_addr

    @property
    def alignment(self) -> int:
        return self.header.sh_addralign

    @property
    def link(self) -> int:
        return self.header.sh_link

    @property
    def info(self) -> int:
        return self.header.sh_info

    @property
    def entry_size(self) -> int:
        return self.header.sh_entsize


# ---------------------------------------------------------------------------
# ElfFile -- the uniform capability surface
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ElfFile(abc.ABC):
    """Accessors shared by every ELF class.

    Attributes:
        header: The decoded file header.
        segments: Program headers in table order.
        sections: Section headers in table order, names resolved.
    """
    header: FileHeader
    segments: tuple[Segment, ...] = ()
    sections: tuple[Section, ...] = ()

    @property
    @abc.abstractmethod
    def width(self) -> WordWidth:
        """Field widths of this class."""

    @property
    def bits(self) -> int:
        return self.width.bits

    # -- header fields ------------------------------------------------- #

    @property
    def entry_point(self) -> int:
        return self.header.e_entry

    @property
    def flags(self) -> int:
        return self.header.e_flags

    @property
    def program_header_offset(self) -> int:
        return self.header.e_phoff

    @property
    def program_header_entry_size(self) -> int:
        return self.header.e_phentsize

    @property
    def program_header_count(self) -> int:
        return self.header.e_phnum

    @property
    def section_header_offset(self) -> int:
        return self.header.e_shoff

    @property
    def section_header_entry_size(self) -> int:
        return self.header.e_shentsize

    @property
    def section_header_count(self) -> int:
        """Declared ``e_shnum`` (0 when extended numbering is in use)."""
        return self.header.e_shnum

    @property
    def section_name_string_table_index(self) -> int:
        return self.header.e_shstrndx

    def elf_type(self) -> ElfType:
        """Classify ``e_type``.

        Raises:
            UnknownElfTypeError: The code is not a known object type.
        """
        return classify_elf_type(self.header.e_type)

    def machine(self) -> Machine:
        """Classify ``e_machine``.

        Raises:
            UnknownMachineError: The code is not a known architecture.
        """
        return classify_machine(self.header.e_machine)

    # -- lookups ------------------------------------------------------- #

    def section_by_name(self, name: str) -> Optional[Section]:
        """Return the first section in table order called *name*."""
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def sections_of_type(self, kind: SectionType) -> list[Section]:
        return [s for s in self.sections if s.section_type == kind]

    def segments_of_type(self, kind: SegmentType) -> list[Segment]:
        return [s for s in self.segments if s.segment_type == kind]

    def interpreter(self) -> Optional[str]:
        """Return the ``PT_INTERP`` path, or ``None`` for static binaries.

        The path ends at the first NUL byte and is decoded as strict UTF-8,
        the same rule section names follow.

        Raises:
            MalformedInputError: The path is not valid UTF-8.
        """
        for seg in self.segments_of_type(SegmentType.PT_INTERP):
            raw = bytes(seg.data).split(b"\x00", 1)[0]
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedInputError(
                    f"interpreter path at offset 0x{seg.offset:x} is not valid UTF-8"
                ) from exc
        return None

    # -- reporting ----------------------------------------------------- #

    def summary(self) -> ExecutableSummary:
        """Build a serialisable :class:`ExecutableSummary`."""
        h = self.header
        return ExecutableSummary(
            bits=self.bits,
            header=HeaderSummary(
                elf_type=self.elf_type().name,
                machine=self.machine().name,
                version=h.e_version,
                entry_point=h.e_entry,
                flags=h.e_flags,
                program_header_offset=h.e_phoff,
                program_header_entry_size=h.e_phentsize,
                program_header_count=h.e_phnum,
                section_header_offset=h.e_shoff,
                section_header_entry_size=h.e_shentsize,
                section_header_count=h.e_shnum,
                section_name_string_table_index=h.e_shstrndx,
            ),
            interpreter=self.interpreter(),
            segments=[
                SegmentSummary(
                    type=seg.segment_type.name,
                    flags=flag_names(seg.flags),
                    offset=seg.offset,
                    virtual_address=seg.virtual_address,
                    physical_address=seg.physical_address,
                    file_size=seg.file_size,
                    memory_size=seg.memory_size,
                    alignment=seg.alignment,
                )
                for seg in self.segments
            ],
            sections=[
                SectionSummary(
                    index=idx,
                    name=sec.name,
                    type=sec.section_type.name,
                    flags=flag_names(sec.flags),
                    address=sec.address,
                    offset=sec.offset,
                    size=sec.size,
                    link=sec.link,
                    info=sec.info,
                    alignment=sec.alignment,
                    entry_size=sec.entry_size,
                )
                for idx, sec in enumerate(self.sections)
            ],
        )


@dataclass(frozen=True)
class Elf32(ElfFile):
    """A decoded ``ELFCLASS32`` file."""

    width: ClassVar[WordWidth] = ELF32


@dataclass(frozen=True)
class Elf64(ElfFile):
    """A decoded ``ELFCLASS64`` file."""

    width: ClassVar[WordWidth] = ELF64


Executable = Union[Elf32, Elf64]

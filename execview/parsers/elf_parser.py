"""
ELF Format Assembler
=====================

Builds an immutable :data:`~execview.core.executable.Executable` from a
complete in-memory ELF image.

Pipeline:
    1. Detect the class (ELF32 / ELF64) from ``e_ident``.
    2. Decode the file header and classify ``e_type`` / ``e_machine``.
    3. Validate the program header table extent, then decode and
       classify every entry and slice its file-resident bytes.
    4. Same for the section header table (honouring extended section
       numbering).
    5. Resolve section names through the ``e_shstrndx`` string table.

Every table extent and payload range is checked against the buffer
length before it is used, so corrupt counts or offsets end in a typed
:class:`~execview.core.errors.ExecviewError` instead of a partial result.
Payloads are zero-copy read-only :class:`memoryview` slices.

Only little-endian field encoding is decoded; ``e_ident[EI_DATA]`` is
kept in the header but not interpreted.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V gABI, "Sections" -- extended section numbering.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from shared.config import DecoderConfig, ENTRY_SIZE_STRICT
from shared.logger import ExecviewLogger

from execview.core.enums import (
    SHN_UNDEF,
    SHN_XINDEX,
    ElfClass,
    SectionType,
    classify_elf_type,
    classify_machine,
    classify_section_flags,
    classify_section_type,
    classify_segment_flags,
    classify_segment_type,
)
from execview.core.errors import (
    IncompleteError,
    MalformedInputError,
    OutOfBoundsError,
)
from execview.core.executable import (
    Elf32,
    Elf64,
    ElfFile,
    Executable,
    Section,
    Segment,
)
from execview.parsers.elf_class import detect_elf_class
from execview.parsers.records import (
    FileHeader,
    SectionHeader,
    decode_file_header,
    decode_program_header,
    decode_section_header,
)
from execview.parsers.schemas import WIDTHS, WordWidth


_EXECUTABLE_TYPES: dict[ElfClass, type[ElfFile]] = {
    ElfClass.ELF32: Elf32,
    ElfClass.ELF64: Elf64,
}


class ELFParser:
    """Decode an ELF image into an :data:`Executable`.

    Usage::

        exe = ELFParser(raw_bytes).parse()
        print(exe.bits, exe.machine().name)
        for section in exe.sections:
            print(section.name, section.section_type.name, len(section.data))

    Args:
        data: Complete file contents.  Payload views returned by the
            parser reference this buffer.
        config: Decoder settings; defaults to :class:`DecoderConfig`.
        logger: Diagnostics sink; defaults to a silent logger.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        config: Optional[DecoderConfig] = None,
        logger: Optional[ExecviewLogger] = None,
    ) -> None:
        self._view: memoryview = memoryview(data).cast("B").toreadonly()
        self._length: int = len(self._view)
        self._config: DecoderConfig = config or DecoderConfig()
        self._log: ExecviewLogger = logger or ExecviewLogger("parser")

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> Executable:
        """Run the full decode.

        Raises:
            ExecviewError: Any structural or classification failure; the
                decode is abandoned as a whole.
        """
        elf_class = detect_elf_class(self._view)
        width = WIDTHS[elf_class]

        with self._log.timed(f"decode ELF{width.bits}"):
            header = self._parse_elf_header(width)
            segments = self._parse_program_headers(header, width)
            sections, strndx = self._parse_section_headers(header, width)
            if self._config.resolve_names:
                sections = self._resolve_section_names(sections, strndx)

        return _EXECUTABLE_TYPES[elf_class](
            header=header,
            segments=tuple(segments),
            sections=tuple(sections),
        )

    # ------------------------------------------------------------------ #
    #  File header
    # ------------------------------------------------------------------ #

    def _parse_elf_header(self, width: WordWidth) -> FileHeader:
        header = decode_file_header(self._view, width)
        elf_type = classify_elf_type(header.e_type)
        machine = classify_machine(header.e_machine)
        self._log.debug(
            "ELF%d header: type=%s machine=%s entry=0x%x",
            width.bits, elf_type.name, machine.name, header.e_entry,
            phoff=header.e_phoff, phnum=header.e_phnum,
            shoff=header.e_shoff, shnum=header.e_shnum,
        )
        return header

    # ------------------------------------------------------------------ #
    #  Program headers
    # ------------------------------------------------------------------ #

    def _parse_program_headers(
        self, header: FileHeader, width: WordWidth
    ) -> list[Segment]:
        offsets = self._table_offsets(
            "program header",
            header.e_phoff,
            header.e_phnum,
            header.e_phentsize,
            width.program_header_size,
        )

        segments: list[Segment] = []
        with self._log.operation("program_headers"):
            for entry_offset in offsets:
                ph = decode_program_header(self._view, entry_offset, width)
                segments.append(Segment(
                    header=ph,
                    segment_type=classify_segment_type(ph.p_type),
                    flags=classify_segment_flags(ph.p_flags),
                    data=self._slice(ph.p_offset, ph.p_filesz),
                ))
            self._log.debug("Decoded %d segments", len(segments))
        return segments

    # ------------------------------------------------------------------ #
    #  Section headers
    # ------------------------------------------------------------------ #

    def _parse_section_headers(
        self, header: FileHeader, width: WordWidth
    ) -> tuple[list[Section], int]:
        """Decode the section table.

        Returns:
            The sections (names still empty) and the effective index of
            the section name string table.
        """
        count = header.e_shnum
        strndx = header.e_shstrndx

        # Extended numbering: the real values live in section 0.
        if count == 0 and header.e_shoff != 0:
            self._table_offsets(
                "section header",
                header.e_shoff,
                1,
                header.e_shentsize,
                width.section_header_size,
            )
            first = decode_section_header(self._view, header.e_shoff, width)
            count = first.sh_size
            if strndx == SHN_XINDEX:
                strndx = first.sh_link
            self._log.debug(
                "Extended section numbering: count=%d strndx=%d", count, strndx
            )

        offsets = self._table_offsets(
            "section header",
            header.e_shoff,
            count,
            header.e_shentsize,
            width.section_header_size,
        )

        sections: list[Section] = []
        with self._log.operation("section_headers"):
            for entry_offset in offsets:
                sh = decode_section_header(self._view, entry_offset, width)
                section_type = classify_section_type(sh.sh_type)
                sections.append(Section(
                    header=sh,
                    section_type=section_type,
                    flags=classify_section_flags(sh.sh_flags),
                    data=self._section_slice(sh, section_type),
                ))
            self._log.debug("Decoded %d sections", len(sections))
        return sections, strndx

    def _section_slice(self, sh: SectionHeader, section_type: SectionType) -> memoryview:
        # SHT_NOBITS occupies no space in the file.
        if section_type == SectionType.SHT_NOBITS:
            return self._view[0:0]
        return self._slice(sh.sh_offset, sh.sh_size)

    # ------------------------------------------------------------------ #
    #  Section names
    # ------------------------------------------------------------------ #

    def _resolve_section_names(
        self, sections: list[Section], strndx: int
    ) -> list[Section]:
        if strndx == SHN_UNDEF or strndx >= len(sections):
            self._log.debug(
                "No section name string table (index %d of %d)",
                strndx, len(sections),
            )
            return sections

        table = bytes(sections[strndx].data)
        with self._log.operation("section_names"):
            named = [
                replace(sec, name=self._read_cstring(table, sec.header.sh_name))
                for sec in sections
            ]
            self._log.debug(
                "Resolved %d section names from section %d", len(named), strndx
            )
        return named

    @staticmethod
    def _read_cstring(table: bytes, offset: int) -> str:
        """Read the NUL-terminated UTF-8 string at *offset* in *table*.

        Raises:
            MalformedInputError: No terminator inside the table, or the
                bytes are not valid UTF-8.
        """
        end = table.find(b"\x00", offset) if offset < len(table) else -1
        if end == -1:
            raise MalformedInputError(
                f"unterminated section name at string table offset 0x{offset:x}"
            )
        try:
            return table[offset:end].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedInputError(
                f"section name at string table offset 0x{offset:x} is not "
                f"valid UTF-8"
            ) from exc

    # ------------------------------------------------------------------ #
    #  Bounds helpers
    # ------------------------------------------------------------------ #

    def _table_offsets(
        self,
        label: str,
        table_offset: int,
        count: int,
        entry_size: int,
        record_size: int,
    ) -> range:
        """Validate a header table and return the offset of each entry.

        The whole table extent is checked against the buffer before any
        entry is decoded.

        Raises:
            MalformedInputError: The declared entry size is unusable under
                the configured policy.
            IncompleteError: The table runs past the end of the buffer.
        """
        if count == 0:
            return range(0)

        if entry_size < record_size:
            raise MalformedInputError(
                f"{label} entry size {entry_size} is smaller than the "
                f"{record_size}-byte record"
            )
        if entry_size != record_size and self._config.entry_size_policy == ENTRY_SIZE_STRICT:
            raise MalformedInputError(
                f"{label} entry size {entry_size} does not match the "
                f"{record_size}-byte record"
            )

        table_end = table_offset + (count - 1) * entry_size + record_size
        shortfall = table_end - self._length
        if shortfall > 0:
            raise IncompleteError(shortfall)

        self._log.debug(
            "%s table: %d entries at 0x%x, stride %d",
            label.capitalize(), count, table_offset, entry_size,
        )
        return range(table_offset, table_offset + count * entry_size, entry_size)

    def _slice(self, offset: int, size: int) -> memoryview:
        """Return ``data[offset:offset + size]`` after checking the bound."""
        if offset + size > self._length:
            raise OutOfBoundsError(offset, size, self._length)
        return self._view[offset:offset + size]

"""
Execview Console Output
========================

Renders a decoded executable as a header panel followed by segment and
section tables, readelf-style.  Works from the payload-free
:class:`~execview.core.models.ExecutableSummary` so the same data backs
both terminal and JSON output.
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel

from shared.console import ExecviewConsole

from execview.core.models import (
    ExecutableSummary,
    HeaderSummary,
    SectionSummary,
    SegmentSummary,
)

_SEGMENT_FLAG_LETTERS: dict[str, str] = {"PF_R": "R", "PF_W": "W", "PF_X": "X"}
_SECTION_FLAG_LETTERS: dict[str, str] = {
    "SHF_WRITE": "W",
    "SHF_ALLOC": "A",
    "SHF_EXECINSTR": "X",
    "SHF_MERGE": "M",
    "SHF_STRINGS": "S",
    "SHF_INFO_LINK": "I",
    "SHF_LINK_ORDER": "L",
    "SHF_OS_NONCONFORMING": "O",
    "SHF_GROUP": "G",
    "SHF_TLS": "T",
    "SHF_COMPRESSED": "C",
}


def _letters(names: list[str], table: dict[str, str], order: str) -> str:
    present = {table[n] for n in names if n in table}
    return "".join(ch for ch in order if ch in present) or "-"


def _strip_prefix(name: str) -> str:
    return name.split("_", 1)[1] if "_" in name else name


class ExecviewConsoleOutput:
    """Terminal renderer for decoded executables.

    Usage::

        output = ExecviewConsoleOutput()
        output.display(exe.summary())
    """

    def __init__(self, console: ExecviewConsole | None = None) -> None:
        self._console: ExecviewConsole = console or ExecviewConsole()

    def display(
        self,
        summary: ExecutableSummary,
        *,
        show_segments: bool = True,
        show_sections: bool = True,
    ) -> None:
        self.display_header(summary.bits, summary.header, summary.interpreter)
        if show_segments:
            self.display_segments(summary.segments)
        if show_sections:
            self.display_sections(summary.sections)

    def display_header(
        self, bits: int, header: HeaderSummary, interpreter: str | None
    ) -> None:
        lines: list[str] = [
            f"[bold]Class:[/bold]        ELF{bits}",
            f"[bold]Type:[/bold]         {header.elf_type}",
            f"[bold]Machine:[/bold]      {header.machine}",
            f"[bold]Version:[/bold]      {header.version}",
            f"[bold]Entry point:[/bold]  0x{header.entry_point:x}",
            f"[bold]Flags:[/bold]        0x{header.flags:x}",
            f"[bold]Segments:[/bold]     {header.program_header_count} x "
            f"{header.program_header_entry_size} bytes at 0x{header.program_header_offset:x}",
            f"[bold]Sections:[/bold]     {header.section_header_count} x "
            f"{header.section_header_entry_size} bytes at 0x{header.section_header_offset:x}",
            f"[bold]Names index:[/bold]  {header.section_name_string_table_index}",
        ]
        if interpreter:
            lines.append(f"[bold]Interpreter:[/bold]  {escape(interpreter)}")

        self._console.rich.print(Panel(
            "\n".join(lines),
            title="[bold bright_cyan]ELF Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(0, 2),
        ))
        self._console.blank()

    def display_segments(self, segments: list[SegmentSummary]) -> None:
        self._console.section("Segments")
        if not segments:
            self._console.info("No program headers.")
            return
        self._console.table(
            ["Type", "Offset", "VirtAddr", "PhysAddr", "FileSiz", "MemSiz", "Flg", "Align"],
            [
                (
                    _strip_prefix(seg.type),
                    f"0x{seg.offset:x}",
                    f"0x{seg.virtual_address:x}",
                    f"0x{seg.physical_address:x}",
                    f"0x{seg.file_size:x}",
                    f"0x{seg.memory_size:x}",
                    _letters(seg.flags, _SEGMENT_FLAG_LETTERS, "RWX"),
                    f"0x{seg.alignment:x}",
                )
                for seg in segments
            ],
            justify_right=("Offset", "VirtAddr", "PhysAddr", "FileSiz", "MemSiz", "Align"),
        )
        self._console.blank()

    def display_sections(self, sections: list[SectionSummary]) -> None:
        self._console.section("Sections")
        if not sections:
            self._console.info("No section headers.")
            return
        self._console.table(
            ["Nr", "Name", "Type", "Address", "Offset", "Size", "ES", "Flg", "Lk", "Inf", "Al"],
            [
                (
                    sec.index,
                    sec.name or "<unnamed>",
                    _strip_prefix(sec.type),
                    f"0x{sec.address:x}",
                    f"0x{sec.offset:x}",
                    f"0x{sec.size:x}",
                    f"0x{sec.entry_size:x}",
                    _letters(sec.flags, _SECTION_FLAG_LETTERS, "WAXMSILOGTC"),
                    sec.link,
                    sec.info,
                    sec.alignment,
                )
                for sec in sections
            ],
            justify_right=("Nr", "Address", "Offset", "Size", "ES", "Lk", "Inf", "Al"),
        )
        self._console.blank()

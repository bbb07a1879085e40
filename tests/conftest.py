"""Synthetic ELF images for the decoder tests.

``build_elf`` lays an image out the way a linker would: file header,
program header table, section payloads, the section name string table,
then the section header table.  Segments can point at a section's bytes
or at the program header table itself, so offsets never have to be
computed by hand in the tests.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Optional

import pytest

EHDR32 = struct.Struct("<16sHHIIIIIHHHHHH")
EHDR64 = struct.Struct("<16sHHIQQQIHHHHHH")
PHDR32 = struct.Struct("<IIIIIIII")   # type offset vaddr paddr filesz memsz flags align
PHDR64 = struct.Struct("<IIQQQQQQ")   # type flags offset vaddr paddr filesz memsz align
SHDR32 = struct.Struct("<IIIIIIIIII")
SHDR64 = struct.Struct("<IIQQQQIIQQ")

SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_DYNAMIC = 6
SHT_NOTE = 7
SHT_NOBITS = 8
SHT_DYNSYM = 11

SHF_WRITE = 0x1
SHF_ALLOC = 0x2
SHF_EXECINSTR = 0x4

PT_LOAD = 1
PT_DYNAMIC = 2
PT_INTERP = 3
PT_NOTE = 4
PT_PHDR = 6
PT_GNU_EH_FRAME = 0x6474E550
PT_GNU_STACK = 0x6474E551
PT_GNU_RELRO = 0x6474E552

PF_X = 0x1
PF_W = 0x2
PF_R = 0x4


@dataclass
class SectionSpec:
    name: str
    sh_type: int = SHT_PROGBITS
    sh_flags: int = 0
    data: bytes = b""
    sh_addr: Optional[int] = None      # defaults to the file offset
    sh_link: int = 0
    sh_info: int = 0
    sh_addralign: int = 1
    sh_entsize: int = 0
    nobits_size: int = 0               # sh_size of an SHT_NOBITS section


@dataclass
class SegmentSpec:
    p_type: int
    p_flags: int = PF_R
    section: Optional[str] = None      # cover this section's bytes
    program_headers: bool = False      # cover the program header table
    p_offset: int = 0
    p_filesz: int = 0
    p_vaddr: Optional[int] = None      # defaults to p_offset
    p_memsz: Optional[int] = None      # defaults to p_filesz
    p_align: int = 1


@dataclass
class BuiltElf:
    data: bytes
    phoff: int
    shoff: int
    section_offsets: dict[str, int] = field(default_factory=dict)
    name_offsets: dict[str, int] = field(default_factory=dict)


def build_elf(
    bits: int = 64,
    *,
    sections: list[SectionSpec] | None = None,
    segments: list[SegmentSpec] | None = None,
    e_type: int = 3,
    e_machine: Optional[int] = None,
    e_entry: int = 0x1000,
    e_flags: int = 0,
    class_byte: Optional[int] = None,
    phentsize: Optional[int] = None,
    shentsize: Optional[int] = None,
    shoff: Optional[int] = None,
    shnum: Optional[int] = None,
    shstrndx: Optional[int] = None,
    name_order: tuple[str, ...] = (),
    with_shstrtab: bool = True,
) -> BuiltElf:
    sections = list(sections or [])
    segments = list(segments or [])
    is64 = bits == 64
    ehdr = EHDR64 if is64 else EHDR32
    phdr = PHDR64 if is64 else PHDR32
    shdr = SHDR64 if is64 else SHDR32
    if e_machine is None:
        e_machine = 62 if is64 else 3

    # -- string table ------------------------------------------------------
    all_sections = list(sections)
    if with_shstrtab:
        all_sections.append(SectionSpec(".shstrtab", SHT_STRTAB))
    ordered = list(name_order) + [
        s.name for s in all_sections if s.name not in name_order
    ]
    strtab = bytearray(b"\x00")
    name_offsets: dict[str, int] = {"": 0}
    for name in ordered:
        if name and name not in name_offsets:
            name_offsets[name] = len(strtab)
            strtab += name.encode("utf-8") + b"\x00"
    if with_shstrtab:
        all_sections[-1].data = bytes(strtab)

    # -- layout ------------------------------------------------------------
    ph_stride = max(phentsize or phdr.size, phdr.size)
    sh_stride = max(shentsize or shdr.size, shdr.size)
    phoff = ehdr.size if segments else 0
    cursor = ehdr.size + ph_stride * len(segments)

    # Offsets per table position; the by-name map keeps the first match.
    offsets_by_index: list[int] = []
    section_offsets: dict[str, int] = {}
    payload = bytearray()
    for entry in all_sections:
        offsets_by_index.append(cursor + len(payload))
        section_offsets.setdefault(entry.name, offsets_by_index[-1])
        if entry.sh_type != SHT_NOBITS:
            payload += entry.data
    cursor += len(payload)

    if shoff is None:
        shoff = (cursor + 7) & ~7
    assert shoff >= cursor, "section header table would overlap payloads"

    # -- program headers ---------------------------------------------------
    ph_table = bytearray()
    for seg in segments:
        offset, filesz = seg.p_offset, seg.p_filesz
        if seg.program_headers:
            offset, filesz = phoff, phdr.size * len(segments)
        elif seg.section is not None:
            entry = next(s for s in all_sections if s.name == seg.section)
            offset, filesz = section_offsets[seg.section], len(entry.data)
        vaddr = offset if seg.p_vaddr is None else seg.p_vaddr
        memsz = filesz if seg.p_memsz is None else seg.p_memsz
        if is64:
            rec = phdr.pack(seg.p_type, seg.p_flags, offset, vaddr, vaddr,
                            filesz, memsz, seg.p_align)
        else:
            rec = phdr.pack(seg.p_type, offset, vaddr, vaddr, filesz, memsz,
                            seg.p_flags, seg.p_align)
        ph_table += rec.ljust(ph_stride, b"\x00")

    # -- section headers ---------------------------------------------------
    sh_table = bytearray(b"\x00" * sh_stride)   # SHN_UNDEF entry
    for entry, offset in zip(all_sections, offsets_by_index):
        size = entry.nobits_size if entry.sh_type == SHT_NOBITS else len(entry.data)
        addr = offset if entry.sh_addr is None else entry.sh_addr
        rec = shdr.pack(
            name_offsets[entry.name], entry.sh_type, entry.sh_flags, addr, offset,
            size, entry.sh_link, entry.sh_info, entry.sh_addralign, entry.sh_entsize,
        )
        sh_table += rec.ljust(sh_stride, b"\x00")
    section_count = len(all_sections) + 1

    ident = b"\x7fELF" + bytes([
        class_byte if class_byte is not None else (2 if is64 else 1),
        1,  # ELFDATA2LSB
        1,  # EV_CURRENT
    ])
    header = ehdr.pack(
        ident.ljust(16, b"\x00"),
        e_type,
        e_machine,
        1,
        e_entry,
        phoff,
        shoff,
        e_flags,
        ehdr.size,
        phentsize if phentsize is not None else (phdr.size if segments else 0),
        len(segments),
        shentsize if shentsize is not None else shdr.size,
        section_count if shnum is None else shnum,
        (section_count - 1 if with_shstrtab else 0) if shstrndx is None else shstrndx,
    )

    image = bytearray(header)
    image += ph_table
    image += payload
    image += b"\x00" * (shoff - len(image))
    image += sh_table
    return BuiltElf(
        data=bytes(image),
        phoff=phoff,
        shoff=shoff,
        section_offsets=section_offsets,
        name_offsets=name_offsets,
    )


# ---------------------------------------------------------------------------
# Canonical fixtures
# ---------------------------------------------------------------------------

_INTERP32 = b"/lib/ld-linux.so.2\x00"
_INTERP64 = b"/lib64/ld-linux-x86-64.so.2\x00"


def _i386_pie() -> BuiltElf:
    """A 32-bit i386 PIE shaped like a small gcc output: 9 segments, 31 sections."""
    sections = [
        SectionSpec(".interp", SHT_PROGBITS, SHF_ALLOC, _INTERP32),
        SectionSpec(".note.ABI-tag", SHT_NOTE, SHF_ALLOC, b"\x04" + b"\x00" * 31, sh_addralign=4),
        SectionSpec(".note.gnu.build-id", SHT_NOTE, SHF_ALLOC, b"\x04" + b"\x00" * 35, sh_addralign=4),
        SectionSpec(".gnu.hash", 0x6FFFFFF6, SHF_ALLOC, b"\x00" * 24, sh_addralign=4),
        SectionSpec(".dynsym", SHT_DYNSYM, SHF_ALLOC, b"\x00" * 128, sh_link=6, sh_info=1,
                    sh_addralign=4, sh_entsize=16),
        SectionSpec(".dynstr", SHT_STRTAB, SHF_ALLOC, b"\x00libc.so.6\x00puts\x00"),
        SectionSpec(".gnu.version", 0x6FFFFFFF, SHF_ALLOC, b"\x00" * 16, sh_link=4,
                    sh_addralign=2, sh_entsize=2),
        SectionSpec(".gnu.version_r", 0x6FFFFFFE, SHF_ALLOC, b"\x00" * 32, sh_link=5,
                    sh_info=1, sh_addralign=4),
        SectionSpec(".rel.dyn", 9, SHF_ALLOC, b"\x00" * 64, sh_link=4, sh_addralign=4,
                    sh_entsize=8),
        SectionSpec(".rel.plt", 9, SHF_ALLOC | 0x40, b"\x00" * 16, sh_link=4, sh_info=22,
                    sh_addralign=4, sh_entsize=8),
        SectionSpec(".init", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, b"\x90" * 35, sh_addralign=4),
        SectionSpec(".plt", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, b"\x90" * 48,
                    sh_addralign=16, sh_entsize=4),
        SectionSpec(".plt.got", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, b"\x90" * 8,
                    sh_addralign=8, sh_entsize=8),
        SectionSpec(".text", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, b"\x90" * 400, sh_addralign=16),
        SectionSpec(".fini", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, b"\x90" * 20, sh_addralign=4),
        SectionSpec(".rodata", SHT_PROGBITS, SHF_ALLOC, b"hello\x00\x00\x00", sh_addralign=4),
        SectionSpec(".eh_frame_hdr", SHT_PROGBITS, SHF_ALLOC, b"\x00" * 52, sh_addralign=4),
        SectionSpec(".eh_frame", SHT_PROGBITS, SHF_ALLOC, b"\x00" * 236, sh_addralign=4),
        SectionSpec(".init_array", 14, SHF_WRITE | SHF_ALLOC, b"\x00" * 4, sh_addralign=4,
                    sh_entsize=4),
        SectionSpec(".fini_array", 15, SHF_WRITE | SHF_ALLOC, b"\x00" * 4, sh_addralign=4,
                    sh_entsize=4),
        SectionSpec(".dynamic", SHT_DYNAMIC, SHF_WRITE | SHF_ALLOC, b"\x00" * 232, sh_link=6,
                    sh_addralign=4, sh_entsize=8),
        SectionSpec(".got", SHT_PROGBITS, SHF_WRITE | SHF_ALLOC, b"\x00" * 20, sh_addralign=4,
                    sh_entsize=4),
        SectionSpec(".got.plt", SHT_PROGBITS, SHF_WRITE | SHF_ALLOC, b"\x00" * 16,
                    sh_addralign=4, sh_entsize=4),
        SectionSpec(".data", SHT_PROGBITS, SHF_WRITE | SHF_ALLOC, b"\x00" * 8, sh_addralign=4),
        SectionSpec(".bss", SHT_NOBITS, SHF_WRITE | SHF_ALLOC, nobits_size=4096, sh_addralign=1),
        SectionSpec(".comment", SHT_PROGBITS, 0x30, b"GCC: (GNU) 13.2.0\x00", sh_entsize=1),
        SectionSpec(".symtab", SHT_SYMTAB, 0, b"\x00" * 1040, sh_link=28, sh_info=48,
                    sh_addralign=4, sh_entsize=16),
        SectionSpec(".strtab", SHT_STRTAB, 0, b"\x00crtstuff.c\x00main\x00"),
        SectionSpec(".debug_dummy", SHT_PROGBITS, 0, b"\x00" * 4),
    ]
    segments = [
        SegmentSpec(PT_PHDR, PF_R | PF_X, program_headers=True, p_align=4),
        SegmentSpec(PT_INTERP, PF_R, section=".interp"),
        SegmentSpec(PT_LOAD, PF_R | PF_X, p_offset=0, p_filesz=0x400, p_align=0x1000),
        SegmentSpec(PT_LOAD, PF_R | PF_W, section=".dynamic", p_align=0x1000),
        SegmentSpec(PT_DYNAMIC, PF_R | PF_W, section=".dynamic", p_align=4),
        SegmentSpec(PT_NOTE, PF_R, section=".note.ABI-tag", p_align=4),
        SegmentSpec(PT_GNU_EH_FRAME, PF_R, section=".eh_frame_hdr", p_align=4),
        SegmentSpec(PT_GNU_STACK, PF_R | PF_W, p_align=16),
        SegmentSpec(PT_GNU_RELRO, PF_R, section=".got"),
    ]
    return build_elf(
        32,
        sections=sections,
        segments=segments,
        e_type=3,
        e_machine=3,
        e_entry=0x3E0,
        shoff=7372,
        name_order=(".symtab", ".strtab", ".shstrtab"),
    )


def _x86_64_pie() -> BuiltElf:
    sections = [
        SectionSpec(".interp", SHT_PROGBITS, SHF_ALLOC, _INTERP64),
        SectionSpec(".text", SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, b"\xc3" * 64,
                    sh_addralign=16),
        SectionSpec(".rodata", SHT_PROGBITS, SHF_ALLOC, b"hi\x00\x00", sh_addralign=4),
        SectionSpec(".data", SHT_PROGBITS, SHF_WRITE | SHF_ALLOC, b"\x01" * 16, sh_addralign=8),
        SectionSpec(".bss", SHT_NOBITS, SHF_WRITE | SHF_ALLOC, nobits_size=0x10000,
                    sh_addralign=32),
    ]
    segments = [
        SegmentSpec(PT_PHDR, PF_R, program_headers=True, p_align=8),
        SegmentSpec(PT_INTERP, PF_R, section=".interp"),
        SegmentSpec(PT_LOAD, PF_R | PF_X, section=".text", p_align=0x1000),
        SegmentSpec(PT_LOAD, PF_R | PF_W, section=".data", p_memsz=0x10010, p_align=0x1000),
        SegmentSpec(PT_GNU_STACK, PF_R | PF_W, p_align=16),
    ]
    return build_elf(64, sections=sections, segments=segments, e_type=3, e_entry=0x1040)


@pytest.fixture
def i386_pie() -> BuiltElf:
    return _i386_pie()


@pytest.fixture
def x86_64_pie() -> BuiltElf:
    return _x86_64_pie()


@pytest.fixture
def elf32_bytes(i386_pie: BuiltElf) -> bytes:
    return i386_pie.data


@pytest.fixture
def elf64_bytes(x86_64_pie: BuiltElf) -> bytes:
    return x86_64_pie.data

"""
ELF Record Schemas
===================

Fixed-size little-endian layouts for the three ELF header records, in
both word widths.  A layout is an ordered tuple of ``(field, kind)``
pairs where *kind* is one of:

    ``ident``  16-byte identification array
    ``half``   u16
    ``word``   u32
    ``xword``  natural word of the class (u32 for ELF32, u64 for ELF64);
               used for addresses, offsets and sizes

The only layout that differs in field *order* between classes is the
program header: ELF64 moves ``p_flags`` up to sit directly after
``p_type`` so that the 64-bit fields stay naturally aligned.
"""

from __future__ import annotations

from dataclasses import dataclass

from execview.core.enums import EI_NIDENT, ElfClass

Layout = tuple[tuple[str, str], ...]

_SCALAR_SIZES: dict[str, int] = {"ident": EI_NIDENT, "half": 2, "word": 4}


FILE_HEADER_LAYOUT: Layout = (
    ("e_ident", "ident"),
    ("e_type", "half"),
    ("e_machine", "half"),
    ("e_version", "word"),
    ("e_entry", "xword"),
    ("e_phoff", "xword"),
    ("e_shoff", "xword"),
    ("e_flags", "word"),
    ("e_ehsize", "half"),
    ("e_phentsize", "half"),
    ("e_phnum", "half"),
    ("e_shentsize", "half"),
    ("e_shnum", "half"),
    ("e_shstrndx", "half"),
)

# Elf32_Phdr: every field is 32 bits wide, flags sit before p_align.
PROGRAM_HEADER32_LAYOUT: Layout = (
    ("p_type", "word"),
    ("p_offset", "xword"),
    ("p_vaddr", "xword"),
    ("p_paddr", "xword"),
    ("p_filesz", "xword"),
    ("p_memsz", "xword"),
    ("p_flags", "word"),
    ("p_align", "xword"),
)

# Elf64_Phdr: flags relocated directly after p_type.
PROGRAM_HEADER64_LAYOUT: Layout = (
    ("p_type", "word"),
    ("p_flags", "word"),
    ("p_offset", "xword"),
    ("p_vaddr", "xword"),
    ("p_paddr", "xword"),
    ("p_filesz", "xword"),
    ("p_memsz", "xword"),
    ("p_align", "xword"),
)

SECTION_HEADER_LAYOUT: Layout = (
    ("sh_name", "word"),
    ("sh_type", "word"),
    ("sh_flags", "xword"),
    ("sh_addr", "xword"),
    ("sh_offset", "xword"),
    ("sh_size", "xword"),
    ("sh_link", "word"),
    ("sh_info", "word"),
    ("sh_addralign", "xword"),
    ("sh_entsize", "xword"),
)


@dataclass(frozen=True, slots=True)
class WordWidth:
    """Field widths and record layouts for one ELF class.

    Attributes:
        elf_class: The class byte this width decodes.
        xword_size: Byte width of addresses, offsets and sizes.
        program_header_layout: Field order of a program header entry.
    """
    elf_class: ElfClass
    xword_size: int
    program_header_layout: Layout

    @property
    def bits(self) -> int:
        return self.xword_size * 8

    def field_size(self, kind: str) -> int:
        if kind == "xword":
            return self.xword_size
        return _SCALAR_SIZES[kind]

    def record_size(self, layout: Layout) -> int:
        return sum(self.field_size(kind) for _, kind in layout)

    @property
    def file_header_size(self) -> int:
        return self.record_size(FILE_HEADER_LAYOUT)

    @property
    def program_header_size(self) -> int:
        return self.record_size(self.program_header_layout)

    @property
    def section_header_size(self) -> int:
        return self.record_size(SECTION_HEADER_LAYOUT)


ELF32 = WordWidth(
    elf_class=ElfClass.ELF32,
    xword_size=4,
    program_header_layout=PROGRAM_HEADER32_LAYOUT,
)

ELF64 = WordWidth(
    elf_class=ElfClass.ELF64,
    xword_size=8,
    program_header_layout=PROGRAM_HEADER64_LAYOUT,
)

WIDTHS: dict[ElfClass, WordWidth] = {
    ElfClass.ELF32: ELF32,
    ElfClass.ELF64: ELF64,
}

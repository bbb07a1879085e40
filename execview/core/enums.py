"""
ELF Enumerations
=================

Closed enumerations and bitmasks for the classified fields of the ELF
file header, program headers and section headers, together with the
``classify_*`` helpers that turn raw integer codes into members or raise
the matching :mod:`execview.core.errors` exception.

Member names keep their ``<elf.h>`` spelling so they can be searched for
directly against the System V ABI documents.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
    - glibc ``elf/elf.h``.
"""

from __future__ import annotations

import enum
from typing import TypeVar

from execview.core.errors import (
    ClassificationError,
    SectionFlagError,
    SectionTypeError,
    SegmentFlagError,
    SegmentTypeError,
    UnknownElfTypeError,
    UnknownMachineError,
)


# ---------------------------------------------------------------------------
# Identification
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"

EI_CLASS: int = 4
EI_DATA: int = 5
EI_NIDENT: int = 16

# Special section indices
SHN_UNDEF: int = 0
SHN_XINDEX: int = 0xFFFF


class ElfClass(enum.IntEnum):
    """Word width declared by ``e_ident[EI_CLASS]``."""
    ELF32 = 1
    ELF64 = 2

    @property
    def bits(self) -> int:
        return 32 if self is ElfClass.ELF32 else 64


# ---------------------------------------------------------------------------
# File header
# ---------------------------------------------------------------------------

class ElfType(enum.IntEnum):
    """Object file type (``e_type``)."""
    ET_NONE = 0
    ET_REL = 1     # Relocatable
    ET_EXEC = 2    # Executable
    ET_DYN = 3     # Shared object / PIE
    ET_CORE = 4    # Core dump
    ET_LOOS = 0xFE00
    ET_HIOS = 0xFEFF
    ET_LOPROC = 0xFF00
    ET_HIPROC = 0xFFFF


class Machine(enum.IntEnum):
    """Target instruction set architecture (``e_machine``)."""
    EM_NONE = 0
    EM_M32 = 1
    EM_SPARC = 2
    EM_386 = 3
    EM_68K = 4
    EM_88K = 5
    EM_IAMCU = 6
    EM_860 = 7
    EM_MIPS = 8
    EM_S370 = 9
    EM_MIPS_RS3_LE = 10
    EM_PARISC = 15
    EM_VPP500 = 17
    EM_SPARC32PLUS = 18
    EM_960 = 19
    EM_PPC = 20
    EM_PPC64 = 21
    EM_S390 = 22
    EM_SPU = 23
    EM_V800 = 36
    EM_FR20 = 37
    EM_RH32 = 38
    EM_RCE = 39
    EM_ARM = 40
    EM_FAKE_ALPHA = 41
    EM_SH = 42
    EM_SPARCV9 = 43
    EM_TRICORE = 44
    EM_ARC = 45
    EM_H8_300 = 46
    EM_H8_300H = 47
    EM_H8S = 48
    EM_H8_500 = 49
    EM_IA_64 = 50
    EM_MIPS_X = 51
    EM_COLDFIRE = 52
    EM_68HC12 = 53
    EM_MMA = 54
    EM_PCP = 55
    EM_NCPU = 56
    EM_NDR1 = 57
    EM_STARCORE = 58
    EM_ME16 = 59
    EM_ST100 = 60
    EM_TINYJ = 61
    EM_X86_64 = 62
    EM_PDSP = 63
    EM_PDP10 = 64
    EM_PDP11 = 65
    EM_FX66 = 66
    EM_ST9PLUS = 67
    EM_ST7 = 68
    EM_68HC16 = 69
    EM_68HC11 = 70
    EM_68HC08 = 71
    EM_68HC05 = 72
    EM_SVX = 73
    EM_ST19 = 74
    EM_VAX = 75
    EM_CRIS = 76
    EM_JAVELIN = 77
    EM_FIREPATH = 78
    EM_ZSP = 79
    EM_MMIX = 80
    EM_HUANY = 81
    EM_PRISM = 82
    EM_AVR = 83
    EM_FR30 = 84
    EM_D10V = 85
    EM_D30V = 86
    EM_V850 = 87
    EM_M32R = 88
    EM_MN10300 = 89
    EM_MN10200 = 90
    EM_PJ = 91
    EM_OPENRISC = 92
    EM_ARC_COMPACT = 93
    EM_XTENSA = 94
    EM_VIDEOCORE = 95
    EM_TMM_GPP = 96
    EM_NS32K = 97
    EM_TPC = 98
    EM_SNP1K = 99
    EM_ST200 = 100
    EM_IP2K = 101
    EM_MAX = 102
    EM_CR = 103
    EM_F2MC16 = 104
    EM_MSP430 = 105
    EM_BLACKFIN = 106
    EM_SE_C33 = 107
    EM_SEP = 108
    EM_ARCA = 109
    EM_UNICORE = 110
    EM_ALTERA_NIOS2 = 113
    EM_CRX = 114
    EM_C166 = 116
    EM_M16C = 117
    EM_DSPIC30F = 118
    EM_CE = 119
    EM_M32C = 120
    EM_SH64 = 128
    EM_TI_C6000 = 140
    EM_8051 = 165
    EM_AARCH64 = 183
    EM_AVR32 = 185
    EM_STM8 = 186
    EM_TILE64 = 187
    EM_TILEPRO = 188
    EM_MICROBLAZE = 189
    EM_CUDA = 190
    EM_TILEGX = 191
    EM_ARCV2 = 195
    EM_RL78 = 197
    EM_78KOR = 199
    EM_AMDGPU = 224
    EM_RISCV = 243
    EM_BPF = 247
    EM_CSKY = 252
    EM_LOONGARCH = 258
    EM_ALPHA = 0x9026


# ---------------------------------------------------------------------------
# Program headers
# ---------------------------------------------------------------------------

class SegmentType(enum.IntEnum):
    """Program header type (``p_type``)."""
    PT_NULL = 0
    PT_LOAD = 1
    PT_DYNAMIC = 2
    PT_INTERP = 3
    PT_NOTE = 4
    PT_SHLIB = 5
    PT_PHDR = 6
    PT_TLS = 7
    PT_NUM = 8
    PT_LOOS = 0x60000000
    PT_GNU_EH_FRAME = 0x6474E550
    PT_GNU_STACK = 0x6474E551
    PT_GNU_RELRO = 0x6474E552
    PT_GNU_PROPERTY = 0x6474E553
    PT_GNU_SFRAME = 0x6474E554
    PT_LOSUNW = 0x6FFFFFFA
    PT_SUNWBSS = 0x6FFFFFFA
    PT_SUNWSTACK = 0x6FFFFFFB
    PT_HISUNW = 0x6FFFFFFF
    PT_HIOS = 0x6FFFFFFF
    PT_LOPROC = 0x70000000
    PT_ARM_EXIDX = 0x70000001
    PT_RISCV_ATTRIBUTES = 0x70000003
    PT_HIPROC = 0x7FFFFFFF


class SegmentFlag(enum.IntFlag):
    """Program header permission bits (``p_flags``)."""
    PF_X = 0x1
    PF_W = 0x2
    PF_R = 0x4
    PF_MASKOS = 0x0FF00000
    PF_MASKPROC = 0xF0000000


# ---------------------------------------------------------------------------
# Section headers
# ---------------------------------------------------------------------------

class SectionType(enum.IntEnum):
    """Section header type (``sh_type``)."""
    SHT_NULL = 0
    SHT_PROGBITS = 1
    SHT_SYMTAB = 2
    SHT_STRTAB = 3
    SHT_RELA = 4
    SHT_HASH = 5
    SHT_DYNAMIC = 6
    SHT_NOTE = 7
    SHT_NOBITS = 8
    SHT_REL = 9
    SHT_SHLIB = 10
    SHT_DYNSYM = 11
    SHT_INIT_ARRAY = 14
    SHT_FINI_ARRAY = 15
    SHT_PREINIT_ARRAY = 16
    SHT_GROUP = 17
    SHT_SYMTAB_SHNDX = 18
    SHT_RELR = 19
    SHT_LOOS = 0x60000000
    SHT_LLVM_ADDRSIG = 0x6FFF4C03
    SHT_GNU_ATTRIBUTES = 0x6FFFFFF5
    SHT_GNU_HASH = 0x6FFFFFF6
    SHT_GNU_LIBLIST = 0x6FFFFFF7
    SHT_CHECKSUM = 0x6FFFFFF8
    SHT_LOSUNW = 0x6FFFFFFA
    SHT_SUNW_move = 0x6FFFFFFA
    SHT_SUNW_COMDAT = 0x6FFFFFFB
    SHT_SUNW_syminfo = 0x6FFFFFFC
    SHT_GNU_verdef = 0x6FFFFFFD
    SHT_GNU_verneed = 0x6FFFFFFE
    SHT_GNU_versym = 0x6FFFFFFF
    SHT_HISUNW = 0x6FFFFFFF
    SHT_HIOS = 0x6FFFFFFF
    # Processor-specific codes overlap across machines and only e_machine
    # tells them apart.  Aliases resolve to the first name declared.
    SHT_LOPROC = 0x70000000
    SHT_X86_64_UNWIND = 0x70000001
    SHT_ARM_EXIDX = 0x70000001
    SHT_ARM_PREEMPTMAP = 0x70000002
    SHT_ARM_ATTRIBUTES = 0x70000003
    SHT_HIPROC = 0x7FFFFFFF
    SHT_LOUSER = 0x80000000
    SHT_HIUSER = 0x8FFFFFFF


class SectionFlag(enum.IntFlag):
    """Section attribute bits (``sh_flags``)."""
    SHF_WRITE = 0x1
    SHF_ALLOC = 0x2
    SHF_EXECINSTR = 0x4
    SHF_MERGE = 0x10
    SHF_STRINGS = 0x20
    SHF_INFO_LINK = 0x40
    SHF_LINK_ORDER = 0x80
    SHF_OS_NONCONFORMING = 0x100
    SHF_GROUP = 0x200
    SHF_TLS = 0x400
    SHF_COMPRESSED = 0x800
    SHF_MASKOS = 0x0FF00000
    SHF_MASKPROC = 0xF0000000


# ---------------------------------------------------------------------------
# Classification helpers
# ---------------------------------------------------------------------------

_E = TypeVar("_E", bound=enum.IntEnum)
_F = TypeVar("_F", bound=enum.IntFlag)


def _classify_code(
    enum_cls: type[_E], raw: int, error_cls: type[ClassificationError]
) -> _E:
    try:
        return enum_cls(raw)
    except ValueError:
        raise error_cls(raw) from None


def _classify_mask(
    flag_cls: type[_F], raw: int, error_cls: type[ClassificationError]
) -> _F:
    known = 0
    for member in flag_cls.__members__.values():
        known |= int(member)
    if raw & ~known:
        raise error_cls(raw)
    return flag_cls(raw)


def classify_elf_type(raw: int) -> ElfType:
    return _classify_code(ElfType, raw, UnknownElfTypeError)


def classify_machine(raw: int) -> Machine:
    return _classify_code(Machine, raw, UnknownMachineError)


def classify_segment_type(raw: int) -> SegmentType:
    return _classify_code(SegmentType, raw, SegmentTypeError)


def classify_segment_flags(raw: int) -> SegmentFlag:
    return _classify_mask(SegmentFlag, raw, SegmentFlagError)


def classify_section_type(raw: int) -> SectionType:
    return _classify_code(SectionType, raw, SectionTypeError)


def classify_section_flags(raw: int) -> SectionFlag:
    return _classify_mask(SectionFlag, raw, SectionFlagError)


def flag_names(flags: enum.IntFlag) -> list[str]:
    """Return the names of the single-bit members set in *flags*."""
    names: list[str] = []
    for member in type(flags).__members__.values():
        value = int(member)
        if value and value & (value - 1) == 0 and int(flags) & value:
            names.append(member.name)
    return names

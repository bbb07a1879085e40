"""
Execview -- ELF Structure Decoder
==================================

Decodes raw ELF (Executable and Linkable Format) images into an
immutable, validated, queryable representation: the file header, the
classified program headers (segments) and section headers (sections),
their zero-copy payload bytes, and the resolved section names.

Capabilities:
    - ELF32 and ELF64 decoding through one width-parameterised pipeline
    - Type and flag classification against the System V enumerations
    - Bounds-checked payload slicing and table validation
    - Section name resolution through the section name string table
    - Explicit rejection of PE and Mach-O containers

Usage::

    import execview

    exe = execview.decode(open("/bin/ls", "rb").read())
    print(exe.bits, exe.elf_type().name, exe.machine().name)
    text = exe.section_by_name(".text")

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

from execview.core.enums import (
    ElfClass,
    ElfType,
    Machine,
    SectionFlag,
    SectionType,
    SegmentFlag,
    SegmentType,
)
from execview.core.errors import (
    ClassificationError,
    ExecviewError,
    IncompleteError,
    MalformedInputError,
    OutOfBoundsError,
    SectionFlagError,
    SectionTypeError,
    SegmentFlagError,
    SegmentTypeError,
    UnknownElfTypeError,
    UnknownMachineError,
    UnsupportedClassError,
    UnsupportedFormatError,
)
from execview.core.executable import (
    Elf32,
    Elf64,
    ElfFile,
    Executable,
    Section,
    Segment,
)
from execview.parsers.magic import (
    ExecutableFormat,
    decode,
    decode_file,
    identify_format,
)

__version__ = "0.3.0"
__all__ = [
    "ClassificationError",
    "Elf32",
    "Elf64",
    "ElfClass",
    "ElfFile",
    "ElfType",
    "Executable",
    "ExecutableFormat",
    "ExecviewError",
    "IncompleteError",
    "Machine",
    "MalformedInputError",
    "OutOfBoundsError",
    "Section",
    "SectionFlag",
    "SectionFlagError",
    "SectionType",
    "SectionTypeError",
    "Segment",
    "SegmentFlag",
    "SegmentFlagError",
    "SegmentType",
    "SegmentTypeError",
    "UnknownElfTypeError",
    "UnknownMachineError",
    "UnsupportedClassError",
    "UnsupportedFormatError",
    "decode",
    "decode_file",
    "identify_format",
]

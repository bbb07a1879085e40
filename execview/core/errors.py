"""
Execview Error Taxonomy
========================

Every rejection path of the decoder surfaces as a subclass of
:class:`ExecviewError`.  Each exception carries the offending raw value
as an attribute and a short machine-friendly ``kind`` tag so that callers
can branch on the failure without parsing messages.

Hierarchy::

    ExecviewError
    ├── UnsupportedClassError
    ├── UnsupportedFormatError
    ├── MalformedInputError
    │   └── OutOfBoundsError
    ├── IncompleteError
    └── ClassificationError
        ├── SegmentTypeError
        ├── SegmentFlagError
        ├── SectionTypeError
        ├── SectionFlagError
        ├── UnknownElfTypeError
        └── UnknownMachineError
"""

from __future__ import annotations

from typing import Optional


class ExecviewError(Exception):
    """Base class for all decoding failures."""

    kind: str = "error"


class UnsupportedClassError(ExecviewError):
    """The ELF class byte is neither ``ELFCLASS32`` nor ``ELFCLASS64``."""

    kind = "unsupported_class"

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"Unsupported ELF class value {value}")


class UnsupportedFormatError(ExecviewError):
    """The buffer holds a recognised, non-ELF container (PE, Mach-O)."""

    kind = "unsupported_format"

    def __init__(self, format_name: str) -> None:
        self.format_name = format_name
        super().__init__(f"Unsupported executable format: {format_name}")


class MalformedInputError(ExecviewError):
    """The bytes are structurally invalid."""

    kind = "malformed_input"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed input: {reason}")


class OutOfBoundsError(MalformedInputError):
    """A declared ``[offset, offset + size)`` range exceeds the buffer."""

    kind = "out_of_bounds"

    def __init__(self, offset: int, size: int, length: int) -> None:
        self.offset = offset
        self.size = size
        self.length = length
        super().__init__(
            f"range [0x{offset:x}, 0x{offset + size:x}) exceeds "
            f"buffer of {length} bytes"
        )


class IncompleteError(ExecviewError):
    """The buffer is shorter than a fixed-size record requires.

    Attributes:
        needed: Exact number of missing bytes, or ``None`` when the
            shortfall cannot be determined.
    """

    kind = "incomplete"

    def __init__(self, needed: Optional[int] = None) -> None:
        self.needed = needed
        if needed is None:
            msg = "Not enough bytes, unknown number of bytes needed"
        else:
            msg = f"Not enough bytes, {needed} more bytes needed"
        super().__init__(msg)


class ClassificationError(ExecviewError):
    """A raw code is not representable in a known enumeration or bitmask."""

    kind = "classification"
    label: str = "Value"

    def __init__(self, raw: int) -> None:
        self.raw = raw
        super().__init__(f"{self.label} 0x{raw:x} not recognised")


class SegmentTypeError(ClassificationError):
    kind = "segment_type"
    label = "Segment type"


class SegmentFlagError(ClassificationError):
    kind = "segment_flag"
    label = "Segment flags"


class SectionTypeError(ClassificationError):
    kind = "section_type"
    label = "Section type"


class SectionFlagError(ClassificationError):
    kind = "section_flag"
    label = "Section flags"


class UnknownElfTypeError(ClassificationError):
    kind = "unknown_elf_type"
    label = "ELF object type"


class UnknownMachineError(ClassificationError):
    kind = "unknown_machine"
    label = "ELF machine"

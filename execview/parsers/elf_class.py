"""ELF class detection from the identification bytes."""

from __future__ import annotations

from execview.core.enums import EI_CLASS, ELF_MAGIC, ElfClass
from execview.core.errors import (
    IncompleteError,
    MalformedInputError,
    UnsupportedClassError,
)


def detect_elf_class(data: bytes | bytearray | memoryview) -> ElfClass:
    """Return the word width declared by the ELF class byte.

    Args:
        data: Buffer starting with the ELF identification bytes.

    Raises:
        MalformedInputError: The leading bytes are not the ELF magic.
        IncompleteError: Fewer than five bytes are available.
        UnsupportedClassError: The class byte is neither 1 nor 2.
    """
    head = bytes(data[:len(ELF_MAGIC)])
    if head != ELF_MAGIC[:len(head)]:
        raise MalformedInputError("missing ELF magic")

    shortfall = EI_CLASS + 1 - len(data)
    if shortfall > 0:
        raise IncompleteError(shortfall)

    value = data[EI_CLASS]
    try:
        return ElfClass(value)
    except ValueError:
        raise UnsupportedClassError(value) from None

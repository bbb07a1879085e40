"""
Executable Format Dispatch
===========================

Identifies the container format of a buffer from its leading signature
and routes ELF images to :class:`~execview.parsers.elf_parser.ELFParser`.
Other executable containers are recognised only so that they can be
rejected with :class:`~execview.core.errors.UnsupportedFormatError`
instead of being mistaken for garbage.

References:
    - Gary Kessler's File Signatures Table.
      https://www.garykessler.net/library/file_sigs.html
    - Microsoft. (2024). PE Format. Microsoft Learn.
    - Apple. ``<mach-o/loader.h>`` and ``<mach-o/fat.h>``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from shared.config import DecoderConfig
from shared.logger import ExecviewLogger

from execview.core.enums import ELF_MAGIC
from execview.core.errors import (
    IncompleteError,
    MalformedInputError,
    UnsupportedFormatError,
)
from execview.core.executable import Executable
from execview.parsers.elf_parser import ELFParser


class ExecutableFormat(str, enum.Enum):
    """Executable container formats known to the dispatcher."""
    ELF = "elf"
    PE = "pe"
    MACHO = "macho"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class _Signature:
    """A single container magic signature.

    Attributes:
        magic: Byte pattern to match at offset 0.
        format: Container the pattern identifies.
        description: Human-readable name used in error messages.
    """
    magic: bytes
    format: ExecutableFormat
    description: str


_SIGNATURES: tuple[_Signature, ...] = (
    _Signature(ELF_MAGIC, ExecutableFormat.ELF, "ELF"),
    _Signature(b"PE\x00\x00", ExecutableFormat.PE, "PE/COFF image"),
    _Signature(b"MZ", ExecutableFormat.PE, "PE/MS-DOS executable"),
    _Signature(b"\xfe\xed\xfa\xce", ExecutableFormat.MACHO, "Mach-O 32-bit"),
    _Signature(b"\xfe\xed\xfa\xcf", ExecutableFormat.MACHO, "Mach-O 64-bit"),
    _Signature(b"\xce\xfa\xed\xfe", ExecutableFormat.MACHO, "Mach-O 32-bit (reversed)"),
    _Signature(b"\xcf\xfa\xed\xfe", ExecutableFormat.MACHO, "Mach-O 64-bit (reversed)"),
    _Signature(b"\xca\xfe\xba\xbe", ExecutableFormat.MACHO, "Mach-O universal binary"),
    _Signature(b"\xbe\xba\xfe\xca", ExecutableFormat.MACHO, "Mach-O universal binary (reversed)"),
)


def _match(data: bytes | bytearray | memoryview) -> Optional[_Signature]:
    for sig in _SIGNATURES:
        if len(data) >= len(sig.magic) and bytes(data[:len(sig.magic)]) == sig.magic:
            return sig
    return None


def identify_format(data: bytes | bytearray | memoryview) -> ExecutableFormat:
    """Return the container format of *data* without decoding it."""
    sig = _match(data)
    return sig.format if sig is not None else ExecutableFormat.UNKNOWN


def decode(
    data: bytes | bytearray | memoryview,
    config: Optional[DecoderConfig] = None,
    logger: Optional[ExecviewLogger] = None,
) -> Executable:
    """Decode an executable image held in memory.

    Args:
        data: Entire file contents.
        config: Decoder settings.
        logger: Diagnostics sink shared with the parser.

    Returns:
        An :class:`~execview.core.executable.Elf32` or
        :class:`~execview.core.executable.Elf64`.

    Raises:
        UnsupportedFormatError: *data* is a PE or Mach-O image.
        IncompleteError: *data* is a truncated ELF magic.
        MalformedInputError: No known signature matches.
        ExecviewError: Any failure raised while decoding the ELF image.
    """
    log = logger or ExecviewLogger("dispatch")
    sig = _match(data)

    if sig is None:
        head = bytes(data[:len(ELF_MAGIC)])
        if len(head) < len(ELF_MAGIC) and ELF_MAGIC.startswith(head):
            raise IncompleteError(len(ELF_MAGIC) - len(head))
        raise MalformedInputError("unrecognised file signature")

    if sig.format is not ExecutableFormat.ELF:
        log.info("Rejecting %s input", sig.description, format=sig.format.value)
        raise UnsupportedFormatError(sig.description)

    return ELFParser(data, config=config, logger=logger).parse()


def decode_file(
    path: str | Path,
    config: Optional[DecoderConfig] = None,
    logger: Optional[ExecviewLogger] = None,
) -> Executable:
    """Read *path* and :func:`decode` it.

    The returned executable owns the file contents through its payload
    views, so no further reference to the buffer is needed.

    Raises:
        ValueError: The file exceeds ``config.max_file_size``.
        OSError: The file cannot be read.
    """
    config = config or DecoderConfig()
    file_path = Path(path)
    size = file_path.stat().st_size
    if size > config.max_file_size:
        raise ValueError(
            f"{file_path} is {size} bytes, above the {config.max_file_size}-byte limit"
        )
    return decode(file_path.read_bytes(), config=config, logger=logger)

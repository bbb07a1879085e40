"""
Execview Configuration Management
==================================

Dataclass-based configuration for the decoder and its command-line
front end, persisted as TOML.

Example ``execview.toml``::

    [global]
    log_level = "DEBUG"
    log_file = "logs/execview.log"
    log_json = true

    [decoder]
    entry_size_policy = "stride"
    max_file_size = 104857600

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


_DEFAULT_CONFIG_PATH: Path = Path.cwd() / "execview.toml"

# Table entry size handling, see DecoderConfig.entry_size_policy
ENTRY_SIZE_STRICT: str = "strict"
ENTRY_SIZE_STRIDE: str = "stride"
_ENTRY_SIZE_POLICIES: frozenset[str] = frozenset({ENTRY_SIZE_STRICT, ENTRY_SIZE_STRIDE})

_LOG_LEVELS: frozenset[str] = frozenset(
    {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
)


@dataclass(frozen=True, slots=True)
class DecoderConfig:
    """Knobs of the ELF decoding pipeline.

    Attributes:
        entry_size_policy: How a declared ``e_phentsize`` / ``e_shentsize``
            that differs from the fixed record size is treated.
            ``"strict"`` rejects any mismatch; ``"stride"`` accepts a
            larger entry size and advances by it, skipping the padding.
            A smaller entry size is rejected under both policies.
        max_file_size: Largest file :func:`execview.decode_file` will read.
        resolve_names: Resolve section names through ``e_shstrndx``.
    """

    entry_size_policy: str = ENTRY_SIZE_STRICT
    max_file_size: int = 268_435_456  # 256 MiB
    resolve_names: bool = True

    def __post_init__(self) -> None:
        if self.entry_size_policy not in _ENTRY_SIZE_POLICIES:
            raise ValueError(
                f"entry_size_policy must be one of {sorted(_ENTRY_SIZE_POLICIES)}, "
                f"got {self.entry_size_policy!r}"
            )
        if self.max_file_size <= 0:
            raise ValueError("max_file_size must be positive")


@dataclass(frozen=True, slots=True)
class GlobalConfig:
    """Logging and presentation settings."""

    log_level: str = "WARNING"
    log_file: Optional[str] = None
    log_json: bool = False
    color: bool = True

    def __post_init__(self) -> None:
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"unknown log_level {self.log_level!r}")


@dataclass(frozen=True, slots=True)
class ExecviewConfig:
    """Master configuration.

    Usage:
        >>> config = ExecviewConfig.load()               # ./execview.toml if present
        >>> config = ExecviewConfig.load("custom.toml")
        >>> config.decoder.entry_size_policy
        'strict'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> ExecviewConfig:
        """Load configuration from a TOML file.

        Missing keys fall back to dataclass defaults and unknown keys are
        ignored.

        Raises:
            FileNotFoundError: *path* was given explicitly and does not exist.
            ValueError: A value fails validation.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            decoder=cls._build_section(DecoderConfig, raw.get("decoder", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate dataclass *cls* from the keys it declares."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)

"""
Configuration loader for linesplit.

Provides typed configuration access with validation.
"""

from __future__ import annotations

import codecs
import hashlib
import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

MB = 1024 * 1024

DEFAULT_CHUNK_SIZE_MB = 100
DEFAULT_BUFFER_SIZE_MB = 8
DEFAULT_LINE_ENDING = "LF"
DEFAULT_ENCODING = "UTF-8"

LINE_ENDINGS: dict[str, str] = {
    "LF": "\n",
    "CRLF": "\r\n",
    "CR": "\r",
}

# Accepted encoding names mapped to Python codec names.
ENCODINGS: dict[str, str] = {
    "UTF-8": "utf-8",
    "GBK": "gbk",
    "GB18030": "gb18030",
    "BIG5": "big5",
    "SHIFT_JIS": "shift_jis",
    "LATIN-1": "latin-1",
}

CUSTOM_PREFIX = "CUSTOM:"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigError(ValueError):
    """Raised when a configuration value is missing or invalid."""


def _require_type(name: str, value: Any, expected: type) -> None:
    # bool is a subclass of int, but true/false is never a valid number here
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigError(
            f"{name} must be {expected.__name__}, got {type(value).__name__} {value!r}"
        )


def parse_line_ending(value: str) -> str:
    """Resolve a line-ending option to the literal line-ending string.

    Accepts ``LF``, ``CRLF``, ``CR`` (case-insensitive) or ``custom:<literal>``
    where ``<literal>`` may contain ``\\n`` and ``\\r`` escapes.

    Args:
        value: Option value as given on the command line or in TOML.

    Returns:
        The line-ending character sequence.

    Raises:
        ConfigError: If the option is unknown or the custom literal is empty.
    """
    key = value.upper()
    if key in LINE_ENDINGS:
        return LINE_ENDINGS[key]

    if key.startswith(CUSTOM_PREFIX):
        literal = value[len(CUSTOM_PREFIX):].replace("\\n", "\n").replace("\\r", "\r")
        if not literal:
            raise ConfigError("custom line ending must not be empty")
        return literal

    raise ConfigError(
        f"invalid line ending {value!r}; use LF, CRLF, CR or custom:<literal>"
    )


def resolve_encoding(value: str) -> str:
    """Resolve an encoding option to a Python codec name.

    Raises:
        ConfigError: If the encoding is not supported.
    """
    names = {name.replace("_", "-"): codec for name, codec in ENCODINGS.items()}
    key = value.upper().replace("_", "-")
    if key not in names:
        supported = ", ".join(ENCODINGS)
        raise ConfigError(f"unsupported encoding {value!r}; supported: {supported}")
    return names[key]


def parse_chunk_size_mb(value: str | int) -> int:
    """Parse a chunk size given in megabytes and return it in bytes.

    Raises:
        ConfigError: If the value is not a positive integer.
    """
    try:
        size_mb = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"invalid chunk size {value!r}; expected a positive integer") from None
    if size_mb <= 0:
        raise ConfigError(f"invalid chunk size {value!r}; expected a positive integer")
    return size_mb * MB


@dataclass
class ChunkingConfig:
    """Chunk boundary parameters."""

    chunk_size_mb: int = DEFAULT_CHUNK_SIZE_MB
    line_ending: str = DEFAULT_LINE_ENDING
    encoding: str = DEFAULT_ENCODING


@dataclass
class ReaderConfig:
    """Input reading parameters."""

    buffer_size_mb: int = DEFAULT_BUFFER_SIZE_MB

    @property
    def buffer_size(self) -> int:
        return self.buffer_size_mb * MB


@dataclass
class CompressionConfig:
    """Compression and output naming parameters."""

    level: int = 3
    extension: str = "zst"
    index_width: int = 3


@dataclass
class GeneralConfig:
    """General run parameters."""

    log_level: str = "INFO"
    write_manifest: bool = False


@dataclass
class Config:
    """Complete tool configuration."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    reader: ReaderConfig = field(default_factory=ReaderConfig)
    compression: CompressionConfig = field(default_factory=CompressionConfig)

    @classmethod
    def from_toml(cls, path: str | Path) -> Config:
        """Load configuration from TOML file."""
        path = Path(path)
        with path.open("rb") as f:
            data = tomllib.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create configuration from dictionary."""
        try:
            return cls(
                general=GeneralConfig(**data.get("general", {})),
                chunking=ChunkingConfig(**data.get("chunking", {})),
                reader=ReaderConfig(**data.get("reader", {})),
                compression=CompressionConfig(**data.get("compression", {})),
            )
        except TypeError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "general": self.general.__dict__,
            "chunking": self.chunking.__dict__,
            "reader": self.reader.__dict__,
            "compression": self.compression.__dict__,
        }

    def config_hash(self) -> str:
        """Compute deterministic hash of configuration."""
        config_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    def validate(self) -> None:
        """Check the values that do not depend on the input file.

        Raises:
            ConfigError: If any value has the wrong type or is out of range.
        """
        log_level = self.general.log_level
        if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"invalid log level {log_level!r}; use one of {', '.join(LOG_LEVELS)}"
            )
        _require_type("general.write_manifest", self.general.write_manifest, bool)
        _require_type("chunking.chunk_size_mb", self.chunking.chunk_size_mb, int)
        _require_type("chunking.line_ending", self.chunking.line_ending, str)
        _require_type("chunking.encoding", self.chunking.encoding, str)
        _require_type("reader.buffer_size_mb", self.reader.buffer_size_mb, int)
        _require_type("compression.level", self.compression.level, int)
        _require_type("compression.extension", self.compression.extension, str)
        _require_type("compression.index_width", self.compression.index_width, int)

        parse_chunk_size_mb(self.chunking.chunk_size_mb)
        parse_line_ending(self.chunking.line_ending)
        resolve_encoding(self.chunking.encoding)
        if self.reader.buffer_size_mb <= 0:
            raise ConfigError(
                f"buffer size must be positive, got {self.reader.buffer_size_mb}"
            )
        if not 1 <= self.compression.level <= 22:
            raise ConfigError(
                f"compression level must be in 1..22, got {self.compression.level}"
            )
        if not self.compression.extension:
            raise ConfigError("extension must not be empty")
        if self.compression.index_width <= 0:
            raise ConfigError(
                f"index width must be positive, got {self.compression.index_width}"
            )


@dataclass(frozen=True)
class SplitConfig:
    """Resolved parameters for one split run.

    Attributes:
        input_path: File to split.
        output_prefix: Prefix of the numbered output files.
        chunk_size: Threshold in bytes a chunk must reach before it is cut.
        line_ending: Line-ending character sequence used for cut points.
        encoding: Python codec name used to decode the input.
    """

    input_path: Path
    output_prefix: str
    chunk_size: int = DEFAULT_CHUNK_SIZE_MB * MB
    line_ending: str = "\n"
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk size must be positive, got {self.chunk_size}")
        if not self.line_ending:
            raise ConfigError("line ending must not be empty")
        if not self.output_prefix:
            raise ConfigError("output prefix must not be empty")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ConfigError(f"unknown encoding {self.encoding!r}") from None
        try:
            self.line_ending.encode(self.encoding)
        except UnicodeEncodeError:
            raise ConfigError(
                f"line ending {self.line_ending!r} cannot be encoded as {self.encoding}"
            ) from None

    @classmethod
    def from_options(
        cls,
        input_path: str | Path,
        output_prefix: str,
        chunk_size_mb: str | int | None = None,
        line_ending: str | None = None,
        encoding: str | None = None,
        defaults: ChunkingConfig | None = None,
    ) -> SplitConfig:
        """Build a SplitConfig from user-facing option strings.

        Options left as None fall back to ``defaults`` (usually the TOML
        ``[chunking]`` section).
        """
        defaults = defaults or ChunkingConfig()
        return cls(
            input_path=Path(input_path),
            output_prefix=str(output_prefix),
            chunk_size=parse_chunk_size_mb(
                chunk_size_mb if chunk_size_mb is not None else defaults.chunk_size_mb
            ),
            line_ending=parse_line_ending(
                line_ending if line_ending is not None else defaults.line_ending
            ),
            encoding=resolve_encoding(
                encoding if encoding is not None else defaults.encoding
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "input_path": str(self.input_path),
            "output_prefix": self.output_prefix,
            "chunk_size": self.chunk_size,
            "line_ending": self.line_ending,
            "encoding": self.encoding,
        }


def load_config(path: str | Path | None = None) -> Config:
    """Load configuration from file or return defaults."""
    if path is None:
        return Config()
    return Config.from_toml(path)

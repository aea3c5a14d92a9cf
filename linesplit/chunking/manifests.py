"""
Chunk manifest generation.

Provides metadata for a split run including content hashes, byte offsets
and compressed sizes, so a set of chunk files can be checked and reassembled
later.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from linesplit.storage.codec import decompress

if TYPE_CHECKING:
    from linesplit.config import SplitConfig
    from linesplit.pipeline import SplitResult


@dataclass
class ChunkMetadata:
    """Metadata for a single chunk file.

    Attributes:
        index: One-based index of the chunk.
        file_name: Name of the compressed chunk file.
        byte_start: Starting byte offset in the input (inclusive).
        byte_end: Ending byte offset in the input (exclusive).
        byte_length: Uncompressed length in bytes.
        compressed_bytes: Size of the compressed file.
        content_sha256: SHA256 hash of the uncompressed content.
        is_final: Whether the chunk was flushed at end of stream.
    """

    index: int
    file_name: str
    byte_start: int
    byte_end: int
    byte_length: int
    compressed_bytes: int
    content_sha256: str
    is_final: bool


@dataclass
class ChunkManifest:
    """Complete manifest for a split input.

    Attributes:
        input_path: Path of the split input file.
        input_sha256: SHA256 hash of the entire input.
        total_bytes: Total input size in bytes.
        chunk_count: Number of chunks.
        chunks: List of chunk metadata.
        config_hash: Hash of the split configuration.
        config: The split configuration parameters.
        created_at: ISO 8601 timestamp of manifest creation.
        version: Manifest format version.
    """

    input_path: str
    input_sha256: str
    total_bytes: int
    chunk_count: int
    chunks: list[ChunkMetadata]
    config_hash: str
    config: dict[str, Any]
    created_at: str
    version: str = "1.0.0"


def _compute_sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _split_config_to_dict(config: SplitConfig) -> dict[str, Any]:
    """Return the parameters that determine chunk boundaries."""
    return {
        "chunk_size": config.chunk_size,
        "line_ending": config.line_ending,
        "encoding": config.encoding,
    }


def _compute_config_hash(config_dict: dict[str, Any]) -> str:
    """Compute deterministic hash of configuration.

    Args:
        config_dict: Configuration as dictionary.

    Returns:
        Truncated SHA256 hash (16 chars).
    """
    config_str = json.dumps(config_dict, sort_keys=True)
    return hashlib.sha256(config_str.encode()).hexdigest()[:16]


def generate_manifest(result: SplitResult, config: SplitConfig) -> dict[str, Any]:
    """Generate a manifest dictionary for a finished split run.

    Args:
        result: Result returned by the split pipeline.
        config: Configuration the run used.

    Returns:
        Manifest as a dictionary suitable for JSON serialization.
    """
    config_dict = _split_config_to_dict(config)

    chunks = [
        ChunkMetadata(
            index=c.index,
            file_name=c.path.name,
            byte_start=c.byte_start,
            byte_end=c.byte_end,
            byte_length=c.uncompressed_bytes,
            compressed_bytes=c.compressed_bytes,
            content_sha256=c.content_sha256,
            is_final=c.is_final,
        )
        for c in result.chunks
    ]

    manifest = ChunkManifest(
        input_path=str(config.input_path),
        input_sha256=result.input_sha256,
        total_bytes=result.total_bytes,
        chunk_count=len(chunks),
        chunks=chunks,
        config_hash=_compute_config_hash(config_dict),
        config=config_dict,
        created_at=datetime.now(timezone.utc).isoformat(),
    )

    return asdict(manifest)


def manifest_to_json(manifest: dict[str, Any], indent: int = 2) -> str:
    """Convert manifest dictionary to JSON string."""
    return json.dumps(manifest, indent=indent, sort_keys=False)


def manifest_path(output_prefix: str | Path) -> Path:
    """Return the manifest path written next to the chunks of a prefix."""
    return Path(f"{output_prefix}.manifest.json")


def write_manifest(manifest: dict[str, Any], path: str | Path) -> Path:
    """Write a manifest as JSON and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(manifest_to_json(manifest) + "\n", encoding="utf-8")
    return path


def load_manifest(path: str | Path) -> dict[str, Any]:
    """Load a manifest written by write_manifest."""
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def validate_manifest(manifest: dict[str, Any]) -> tuple[bool, list[str]]:
    """Validate a manifest dictionary for required fields and consistency.

    Checks that indices run 1..N, that chunk byte ranges are contiguous and
    cover the whole input, and that the config hash matches.

    Args:
        manifest: Manifest dictionary to validate.

    Returns:
        Tuple of (is_valid, list of error messages).
    """
    errors: list[str] = []

    required_fields = [
        "input_path",
        "input_sha256",
        "total_bytes",
        "chunk_count",
        "chunks",
        "config_hash",
        "config",
        "created_at",
        "version",
    ]

    for field_name in required_fields:
        if field_name not in manifest:
            errors.append(f"Missing required field: {field_name}")

    if errors:
        return False, errors

    if len(manifest["chunks"]) != manifest["chunk_count"]:
        errors.append(
            f"Chunk count mismatch: declared {manifest['chunk_count']}, "
            f"found {len(manifest['chunks'])}"
        )

    required_chunk_fields = [
        "index",
        "file_name",
        "byte_start",
        "byte_end",
        "byte_length",
        "compressed_bytes",
        "content_sha256",
        "is_final",
    ]

    expected_start = 0
    for i, chunk in enumerate(manifest["chunks"]):
        missing = [name for name in required_chunk_fields if name not in chunk]
        for field_name in missing:
            errors.append(f"Chunk {i + 1}: missing required field: {field_name}")
        if missing:
            continue

        if chunk["index"] != i + 1:
            errors.append(f"Chunk {i + 1}: index mismatch, found {chunk['index']}")

        expected_length = chunk["byte_end"] - chunk["byte_start"]
        if chunk["byte_length"] != expected_length:
            errors.append(
                f"Chunk {i + 1}: byte_length {chunk['byte_length']} != "
                f"byte_end - byte_start ({expected_length})"
            )

        if chunk["byte_start"] != expected_start:
            errors.append(
                f"Chunk {i + 1}: byte_start {chunk['byte_start']} does not follow "
                f"previous chunk end {expected_start}"
            )
        expected_start = chunk["byte_end"]

    if manifest["chunks"] and expected_start != manifest["total_bytes"]:
        errors.append(
            f"Chunks cover {expected_start} bytes, input has {manifest['total_bytes']}"
        )

    expected_hash = _compute_config_hash(manifest["config"])
    if manifest["config_hash"] != expected_hash:
        errors.append(
            f"Config hash mismatch: declared {manifest['config_hash']}, "
            f"computed {expected_hash}"
        )

    return len(errors) == 0, errors


def verify_chunk_integrity(
    manifest: dict[str, Any],
    paths: list[Path],
) -> tuple[bool, list[str]]:
    """Verify that chunk files match their manifest metadata.

    Args:
        manifest: Manifest dictionary.
        paths: Chunk files in index order.

    Returns:
        Tuple of (all_valid, list of error messages).
    """
    errors: list[str] = []

    if len(paths) != manifest["chunk_count"]:
        errors.append(
            f"Chunk count mismatch: manifest has {manifest['chunk_count']}, "
            f"found {len(paths)} files"
        )
        return False, errors

    for path, meta in zip(paths, manifest["chunks"]):
        if path.name != meta["file_name"]:
            errors.append(
                f"Chunk {meta['index']}: file name mismatch - "
                f"expected {meta['file_name']}, got {path.name}"
            )

        compressed = path.read_bytes()
        if len(compressed) != meta["compressed_bytes"]:
            errors.append(
                f"Chunk {meta['index']}: compressed size mismatch - "
                f"expected {meta['compressed_bytes']}, got {len(compressed)}"
            )

        content = decompress(compressed)
        actual_hash = _compute_sha256(content)
        if actual_hash != meta["content_sha256"]:
            errors.append(
                f"Chunk {meta['index']}: content hash mismatch - "
                f"expected {meta['content_sha256']}, got {actual_hash}"
            )

        if len(content) != meta["byte_length"]:
            errors.append(
                f"Chunk {meta['index']}: byte_length mismatch - "
                f"expected {meta['byte_length']}, got {len(content)}"
            )

    return len(errors) == 0, errors

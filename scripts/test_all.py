#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "zstandard>=0.22",
#     "numpy>=1.26",
# ]
# ///
"""
Test runner for linesplit.

Runs all unit tests and validates module functionality.

Usage:
    uv run scripts/test_all.py
    uv run scripts/test_all.py --verbose
"""

from __future__ import annotations

import argparse
import io
import random
import sys
import tempfile
import traceback
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))


def _blocks(data: bytes, size: int) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


def _sample_lines(seed: int, count: int) -> bytes:
    """Build deterministic UTF-8 text with mixed-width characters."""
    rng = random.Random(seed)
    alphabet = "abcdefghij klmnop 中文字符 éàü"
    lines = []
    for _ in range(count):
        length = rng.randint(0, 120)
        lines.append("".join(rng.choice(alphabet) for _ in range(length)))
    return ("\n".join(lines) + "\n").encode("utf-8")


def test_config() -> tuple[bool, str]:
    """Test configuration module."""
    from linesplit.config import (
        MB,
        Config,
        ConfigError,
        SplitConfig,
        parse_chunk_size_mb,
        parse_line_ending,
        resolve_encoding,
    )

    config = Config()
    assert config.chunking.chunk_size_mb == 100
    assert config.reader.buffer_size == 8 * MB
    assert config.compression.level == 3

    d = config.to_dict()
    assert "chunking" in d
    assert "compression" in d

    h = config.config_hash()
    assert len(h) == 16
    assert Config.from_dict(d).config_hash() == h

    assert parse_line_ending("LF") == "\n"
    assert parse_line_ending("crlf") == "\r\n"
    assert parse_line_ending("CR") == "\r"
    assert parse_line_ending("custom:\\r\\n\\r\\n") == "\r\n\r\n"
    assert parse_line_ending("custom:;;") == ";;"
    for bad in ["custom:", "TAB", ""]:
        try:
            parse_line_ending(bad)
        except ConfigError:
            pass
        else:
            raise AssertionError(f"line ending {bad!r} accepted")

    assert resolve_encoding("UTF-8") == "utf-8"
    assert resolve_encoding("gbk") == "gbk"
    assert resolve_encoding("Shift_JIS") == "shift_jis"
    try:
        resolve_encoding("EBCDIC")
    except ConfigError:
        pass
    else:
        raise AssertionError("unsupported encoding accepted")

    assert parse_chunk_size_mb("5") == 5 * MB
    for bad in ["0", "-1", "abc"]:
        try:
            parse_chunk_size_mb(bad)
        except ConfigError:
            pass
        else:
            raise AssertionError(f"chunk size {bad!r} accepted")

    split = SplitConfig.from_options("in.log", "out/part", "2", "CRLF", "GBK")
    assert split.chunk_size == 2 * MB
    assert split.line_ending == "\r\n"
    assert split.encoding == "gbk"

    defaults = SplitConfig.from_options("in.log", "out/part")
    assert defaults.chunk_size == 100 * MB
    assert defaults.line_ending == "\n"
    assert defaults.encoding == "utf-8"

    try:
        SplitConfig(input_path=Path("in.log"), output_prefix="p", chunk_size=0)
    except ConfigError:
        pass
    else:
        raise AssertionError("zero chunk size accepted")

    config.compression.level = 30
    try:
        config.validate()
    except ConfigError:
        pass
    else:
        raise AssertionError("compression level 30 accepted")

    return True, "config module OK"


def test_toml_config() -> tuple[bool, str]:
    """Test loading configuration from TOML."""
    from linesplit.config import Config, ConfigError, load_config

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "config.toml"
        path.write_text(
            "[chunking]\nchunk_size_mb = 5\nline_ending = \"CRLF\"\n"
            "[compression]\nlevel = 9\n"
        )
        config = load_config(path)
        assert config.chunking.chunk_size_mb == 5
        assert config.chunking.line_ending == "CRLF"
        assert config.chunking.encoding == "UTF-8"
        assert config.compression.level == 9
        config.validate()

        try:
            Config.from_dict({"chunking": {"chunk_size": 5}})
        except ConfigError:
            pass
        else:
            raise AssertionError("unknown key accepted")

    assert load_config(None).config_hash() == Config().config_hash()

    return True, "TOML config OK"


def _load_script(name: str):
    """Import a script under scripts/ as a module."""
    import importlib.util

    path = Path(__file__).parent / f"{name}.py"
    module_spec = importlib.util.spec_from_file_location(f"_script_{name}", path)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_config_file_errors() -> tuple[bool, str]:
    """Test that bad values in the config file become ConfigError."""
    from linesplit.config import ConfigError

    split_cli = _load_script("split_file")
    parser = split_cli.build_parser()

    bad_files = {
        "log_level": "[general]\nlog_level = \"VERBOSE\"\n",
        "log_level_type": "[general]\nlog_level = 10\n",
        "write_manifest": "[general]\nwrite_manifest = \"yes\"\n",
        "buffer_size": "[reader]\nbuffer_size_mb = \"8\"\n",
        "chunk_size": "[chunking]\nchunk_size_mb = \"5\"\n",
        "encoding_type": "[chunking]\nencoding = 8\n",
        "level_bool": "[compression]\nlevel = true\n",
        "level_range": "[compression]\nlevel = 23\n",
        "extension": "[compression]\nextension = \"\"\n",
        "section_type": "general = 5\n",
        "syntax": "[general\n",
    }

    with tempfile.TemporaryDirectory() as tmp:
        for name, text in bad_files.items():
            path = Path(tmp) / f"{name}.toml"
            path.write_text(text)
            args = parser.parse_args(["in.txt", "out/x", "--config", str(path)])
            try:
                split_cli.resolve_config(args)
            except ConfigError:
                pass
            else:
                raise AssertionError(f"{name}: bad config accepted")

        path = Path(tmp) / "ok.toml"
        path.write_text("[general]\nlog_level = \"debug\"\n[reader]\nbuffer_size_mb = 2\n")
        args = parser.parse_args(["in.txt", "out/x", "5", "--config", str(path)])
        config, split_config = split_cli.resolve_config(args)
        assert config.general.log_level == "debug"
        assert config.reader.buffer_size_mb == 2
        assert split_config.chunk_size == 5 * 1024 * 1024

    return True, "config file errors rejected"


def test_boundary_locator() -> tuple[bool, str]:
    """Test encoding-aware boundary search."""
    from linesplit.chunking.boundary import (
        find_first_boundary,
        find_last_boundary,
        resume_offset,
        scan_for_boundary,
    )

    assert find_last_boundary(b"a\nb\nc", "\n", "utf-8") == 4
    assert find_first_boundary(b"a\nb\nc", "\n", "utf-8") == 2
    assert find_last_boundary(b"abc", "\n", "utf-8") is None
    assert find_last_boundary(b"", "\n", "utf-8") is None
    assert find_last_boundary(b"a\r\nb", "\r\n", "utf-8") == 3
    assert find_last_boundary(b"a\r\n\r\nb", "\r\n\r\n", "utf-8") == 5

    # Multi-byte characters before and after the boundary
    assert find_last_boundary("中\n文".encode("utf-8"), "\n", "utf-8") == 4
    gbk = "中文\n尾巴".encode("gbk")
    assert find_last_boundary(gbk, "\n", "gbk") == len("中文\n".encode("gbk"))

    # An incomplete trailing character is not an error
    data = "行\n".encode("utf-8") + "行".encode("utf-8")[:2]
    scan = scan_for_boundary(data, "\n", "utf-8")
    assert scan.boundary == 4
    assert not scan.had_errors

    # A straddling multi-character line ending must be searched again
    scan = scan_for_boundary(b"abc\r", "\r\n", "utf-8")
    assert scan.boundary is None
    assert scan.resume == 3

    assert resume_offset(b"abc\r", "\r\n", "utf-8") == 3
    assert resume_offset(b"abc", "\n", "utf-8") == 3
    assert resume_offset(b"", "\n", "utf-8") == 0
    # Backs off one whole character, never into the middle of one
    assert resume_offset("ab中".encode("utf-8"), "\r\n", "utf-8") == 2
    # A trailing incomplete character is left for the next search
    assert resume_offset(b"ab" + "行".encode("utf-8")[:2], "\n", "utf-8") == 2

    return True, "boundary locator OK"


def test_boundary_multibyte_false_match() -> tuple[bool, str]:
    """Test that bytes inside a multi-byte character never match."""
    from linesplit.chunking.boundary import find_first_boundary, find_last_boundary

    # In Shift_JIS the second byte of this character is 0x5C, a backslash
    assert "表".encode("shift_jis") == b"\x95\\"

    data = "ab\\表cd".encode("shift_jis")
    assert data.rfind(b"\\") + 1 == 5
    assert find_last_boundary(data, "\\", "shift_jis") == 3

    data = "表x\\y".encode("shift_jis")
    assert data.find(b"\\") + 1 == 2
    assert find_first_boundary(data, "\\", "shift_jis") == 4

    return True, "multi-byte false matches rejected"


def test_boundary_invalid_bytes() -> tuple[bool, str]:
    """Test that invalid bytes are reported but do not stop the search."""
    from linesplit.chunking.boundary import scan_for_boundary

    data = b"ok\n\xff\xfebad\nend"
    scan = scan_for_boundary(data, "\n", "utf-8")
    assert scan.had_errors
    assert scan.errors == [(3, 5)]
    assert scan.boundary == 9

    data = b"ok\n\xff\xfebad\nend"
    scan = scan_for_boundary(data, "\n", "utf-8", last=False)
    assert scan.boundary == 3

    return True, "invalid bytes tolerated"


def test_decode_warning_count() -> tuple[bool, str]:
    """Test that each invalid sequence is logged and counted once."""
    import logging

    from linesplit.chunking.streaming import StreamingChunker

    class _Collect(logging.Handler):
        def __init__(self) -> None:
            super().__init__(level=logging.WARNING)
            self.messages: list[str] = []

        def emit(self, record: logging.LogRecord) -> None:
            self.messages.append(record.getMessage())

    # Invalid bytes at offsets 4 and 12, truncated character at 22..24
    data = b"one\n\xffx\ntwo\ny\xfe\ntail\nend\xe4\xb8"
    assert data[4] == 0xFF and data[12] == 0xFE and len(data) == 24

    boundary_logger = logging.getLogger("linesplit.chunking.boundary")
    for block_size in [1, 3, 5, 11, len(data)]:
        handler = _Collect()
        boundary_logger.addHandler(handler)
        previous_level = boundary_logger.level
        boundary_logger.setLevel(logging.WARNING)
        try:
            chunker = StreamingChunker(chunk_size=8)
            chunks = []
            for block in _blocks(data, block_size):
                chunks.extend(chunker.feed(block))
            chunks.extend(chunker.finalize())
        finally:
            boundary_logger.removeHandler(handler)
            boundary_logger.setLevel(previous_level)

        assert b"".join(c.content for c in chunks) == data, block_size
        assert chunker.decode_warnings == 3, (block_size, chunker.decode_warnings)
        assert len(handler.messages) == 3, (block_size, handler.messages)
        assert "at offset 4 (1 bytes)" in handler.messages[0], handler.messages
        assert "at offset 12 (1 bytes)" in handler.messages[1], handler.messages
        assert "at offset 22 (2 bytes)" in handler.messages[2], handler.messages

    return True, "decode warnings counted once per sequence"


def test_example_chunking() -> tuple[bool, str]:
    """Test the oversized middle line example."""
    from linesplit.chunking.streaming import chunk_stream

    data = b"a\n" + b"b" * 200 + b"\n" + b"c\n"

    for block_size in [1, 7, 100, len(data)]:
        chunks = list(chunk_stream(iter(_blocks(data, block_size)), chunk_size=100))
        assert [c.content for c in chunks] == [b"a\n" + b"b" * 200 + b"\n", b"c\n"], block_size
        assert [c.index for c in chunks] == [1, 2]
        assert chunks[0].byte_start == 0
        assert chunks[0].byte_end == 203
        assert chunks[1].byte_start == 203
        assert not chunks[0].is_final
        assert chunks[1].is_final

    return True, "example chunking OK"


def test_edge_inputs() -> tuple[bool, str]:
    """Test empty input, unterminated tail and exact threshold."""
    from linesplit.chunking.streaming import chunk_stream

    assert list(chunk_stream(iter([]), chunk_size=100)) == []
    assert list(chunk_stream(iter([b""]), chunk_size=100)) == []

    chunks = list(chunk_stream(iter([b"x\ny"]), chunk_size=1 << 20))
    assert len(chunks) == 1
    assert chunks[0].content == b"x\ny"
    assert chunks[0].index == 1

    # Boundary exactly at the threshold cuts there
    chunks = list(chunk_stream(iter([b"abc\ndef\ngh"]), chunk_size=4))
    assert [c.content for c in chunks] == [b"abc\n", b"def\n", b"gh"]
    assert [c.is_final for c in chunks] == [False, False, True]

    # No line ending at all: one final chunk past the threshold
    chunks = list(chunk_stream(iter(_blocks(b"z" * 300, 64)), chunk_size=100))
    assert len(chunks) == 1
    assert chunks[0].content == b"z" * 300

    return True, "edge inputs OK"


def test_oversized_line() -> tuple[bool, str]:
    """Test that a line longer than the threshold is never split."""
    from linesplit.chunking.streaming import chunk_stream

    long_line = b"x" * 500 + b"\n"
    data = b"short\n" + long_line + b"tail\n" + long_line

    chunks = list(chunk_stream(iter(_blocks(data, 16)), chunk_size=50))
    assert [c.content for c in chunks] == [
        b"short\n" + long_line,
        b"tail\n" + long_line,
    ]
    assert all(len(c.content) > 50 for c in chunks)

    return True, "oversized line OK"


def test_crlf_straddling_reads() -> tuple[bool, str]:
    """Test a CRLF split across two reads."""
    from linesplit.chunking.streaming import chunk_stream

    data = b"123456789\r\nabc\r\n"
    chunks = list(
        chunk_stream(iter([data[:10], data[10:]]), chunk_size=10, line_ending="\r\n")
    )
    assert [c.content for c in chunks] == [b"123456789\r\n", b"abc\r\n"]

    # A lone CR is not a boundary for CRLF
    chunks = list(chunk_stream(iter([b"ab\rcd\r\nef"]), chunk_size=3, line_ending="\r\n"))
    assert [c.content for c in chunks] == [b"ab\rcd\r\n", b"ef"]

    return True, "CRLF straddling OK"


def test_streaming_properties() -> tuple[bool, str]:
    """Test round trip, line integrity, minimal cuts and index order."""
    from linesplit.chunking.streaming import chunk_stream

    data = _sample_lines(seed=42, count=400)

    for chunk_size in [10, 100, 1000]:
        reference = None
        for block_size in [3, 64, 4096, len(data)]:
            chunks = list(
                chunk_stream(iter(_blocks(data, block_size)), chunk_size=chunk_size)
            )

            assert b"".join(c.content for c in chunks) == data
            assert [c.index for c in chunks] == list(range(1, len(chunks) + 1))

            for c in chunks[:-1]:
                assert c.content.endswith(b"\n")
                assert len(c.content) >= chunk_size
                # Dropping the last line must fall below the threshold
                previous_boundary = c.content[:-1].rfind(b"\n") + 1
                assert previous_boundary < chunk_size
                c.content.decode("utf-8")

            offsets = [(c.byte_start, c.byte_end) for c in chunks]
            if reference is None:
                reference = offsets
            assert offsets == reference, (chunk_size, block_size)

    return True, "streaming properties OK"


def test_gbk_chunking() -> tuple[bool, str]:
    """Test chunking GBK text without breaking characters."""
    from linesplit.chunking.streaming import chunk_stream

    text = "".join(f"第{i}行：日志内容测试\n" for i in range(200))
    data = text.encode("gbk")

    chunks = list(
        chunk_stream(iter(_blocks(data, 5)), chunk_size=64, encoding="gbk")
    )
    assert b"".join(c.content for c in chunks) == data
    for c in chunks:
        decoded = c.content.decode("gbk")
        assert decoded.endswith("\n")

    return True, "GBK chunking OK"


def test_chunker_lifecycle() -> tuple[bool, str]:
    """Test the class interface and its misuse errors."""
    from linesplit.chunking.streaming import StreamingChunker

    chunker = StreamingChunker(chunk_size=4)
    first = list(chunker.feed(b"ab\ncd"))
    assert first == []
    assert chunker.buffer_size == 5
    assert chunker.total_bytes_processed == 5

    second = list(chunker.feed(b"\nef"))
    assert [c.content for c in second] == [b"ab\ncd\n"]
    assert chunker.total_bytes_processed == 8

    final = list(chunker.finalize())
    assert [c.content for c in final] == [b"ef"]
    assert final[0].index == 2

    try:
        list(chunker.feed(b"more"))
    except RuntimeError:
        pass
    else:
        raise AssertionError("feed after finalize accepted")

    try:
        list(chunker.finalize())
    except RuntimeError:
        pass
    else:
        raise AssertionError("second finalize accepted")

    chunker.reset()
    chunks = list(chunker.feed(b"x\n")) + list(chunker.finalize())
    assert [(c.index, c.content) for c in chunks] == [(1, b"x\n")]

    try:
        StreamingChunker(chunk_size=0)
    except ValueError:
        pass
    else:
        raise AssertionError("zero chunk size accepted")

    return True, "chunker lifecycle OK"


def test_codec() -> tuple[bool, str]:
    """Test zstd compression helpers."""
    from linesplit.storage.codec import CodecError, compress, compress_file, decompress

    data = b"line\n" * 1000
    frame = compress(data, level=3)
    assert len(frame) < len(data)
    assert decompress(frame) == data
    assert decompress(compress(b"")) == b""

    try:
        decompress(b"not a zstd frame")
    except CodecError:
        pass
    else:
        raise AssertionError("garbage decompressed")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "input.log"
        path.write_bytes(data)
        output = compress_file(path)
        assert output == Path(tmp) / "input.log.zst"
        assert decompress(output.read_bytes()) == data

    return True, "codec OK"


def test_pipeline() -> tuple[bool, str]:
    """Test splitting a file into numbered zstd chunks and joining them."""
    from linesplit.config import SplitConfig
    from linesplit.pipeline import split_file
    from linesplit.storage.codec import decompress
    from linesplit.storage.reader import find_chunk_files, join_chunks

    data = b"a\n" + b"b" * 200 + b"\n" + b"c\n"

    with tempfile.TemporaryDirectory() as tmp:
        input_path = Path(tmp) / "input.log"
        input_path.write_bytes(data)
        prefix = Path(tmp) / "out" / "input"

        config = SplitConfig(input_path=input_path, output_prefix=str(prefix), chunk_size=100)
        result = split_file(config, buffer_size=16)

        assert result.chunk_count == 2
        assert result.total_bytes == len(data)
        assert [c.path.name for c in result.chunks] == ["input.001.zst", "input.002.zst"]
        assert decompress(result.chunks[0].path.read_bytes()) == b"a\n" + b"b" * 200 + b"\n"
        assert decompress(result.chunks[1].path.read_bytes()) == b"c\n"

        paths = find_chunk_files(prefix)
        assert paths == [c.path for c in result.chunks]

        restored = io.BytesIO()
        assert join_chunks(prefix, restored) == len(data)
        assert restored.getvalue() == data

    return True, "pipeline OK"


def test_pipeline_compression_config() -> tuple[bool, str]:
    """Test that the default emitter follows the compression settings."""
    from linesplit.config import CompressionConfig, SplitConfig
    from linesplit.pipeline import split_file
    from linesplit.storage.codec import decompress
    from linesplit.storage.reader import find_chunk_files

    data = b"x" * 50 + b"\n" + b"y\n"

    with tempfile.TemporaryDirectory() as tmp:
        input_path = Path(tmp) / "input.log"
        input_path.write_bytes(data)
        prefix = Path(tmp) / "input"

        config = SplitConfig(input_path=input_path, output_prefix=str(prefix), chunk_size=10)
        compression = CompressionConfig(level=19, extension="zstd", index_width=4)
        result = split_file(config, compression=compression)

        assert [c.path.name for c in result.chunks] == ["input.0001.zstd", "input.0002.zstd"]
        assert find_chunk_files(prefix, extension="zstd") == [c.path for c in result.chunks]
        assert decompress(result.chunks[0].path.read_bytes()) == b"x" * 50 + b"\n"

    return True, "compression settings applied"


def test_pipeline_empty_input() -> tuple[bool, str]:
    """Test that an empty input writes no files."""
    from linesplit.config import SplitConfig
    from linesplit.pipeline import split_file

    with tempfile.TemporaryDirectory() as tmp:
        input_path = Path(tmp) / "empty.log"
        input_path.write_bytes(b"")
        out_dir = Path(tmp) / "out"

        config = SplitConfig(input_path=input_path, output_prefix=str(out_dir / "empty"), chunk_size=100)
        result = split_file(config)

        assert result.chunk_count == 0
        assert result.total_bytes == 0
        assert not out_dir.exists()

    return True, "empty input OK"


def test_pipeline_missing_input() -> tuple[bool, str]:
    """Test that a missing input propagates an OSError."""
    from linesplit.config import SplitConfig
    from linesplit.pipeline import split_file

    with tempfile.TemporaryDirectory() as tmp:
        config = SplitConfig(
            input_path=Path(tmp) / "missing.log",
            output_prefix=str(Path(tmp) / "out"),
            chunk_size=100,
        )
        try:
            split_file(config)
        except FileNotFoundError:
            pass
        else:
            raise AssertionError("missing input accepted")

    return True, "missing input OK"


def test_idempotent_rerun() -> tuple[bool, str]:
    """Test that two runs produce byte-identical chunk files."""
    from linesplit.config import SplitConfig
    from linesplit.pipeline import split_file

    data = _sample_lines(seed=7, count=300)

    with tempfile.TemporaryDirectory() as tmp:
        input_path = Path(tmp) / "input.log"
        input_path.write_bytes(data)

        runs = []
        for name in ["first", "second"]:
            config = SplitConfig(
                input_path=input_path,
                output_prefix=str(Path(tmp) / name / "part"),
                chunk_size=1000,
            )
            result = split_file(config, buffer_size=333)
            runs.append([c.path.read_bytes() for c in result.chunks])

        assert len(runs[0]) > 1
        assert runs[0] == runs[1]

    return True, "idempotent rerun OK"


def test_manifests() -> tuple[bool, str]:
    """Test manifest generation, validation and integrity checks."""
    from linesplit.chunking.manifests import (
        generate_manifest,
        load_manifest,
        manifest_path,
        validate_manifest,
        verify_chunk_integrity,
        write_manifest,
    )
    from linesplit.config import SplitConfig
    from linesplit.pipeline import split_file
    from linesplit.storage.reader import find_chunk_files

    data = _sample_lines(seed=3, count=100)

    with tempfile.TemporaryDirectory() as tmp:
        input_path = Path(tmp) / "input.log"
        input_path.write_bytes(data)
        prefix = Path(tmp) / "part"

        config = SplitConfig(input_path=input_path, output_prefix=str(prefix), chunk_size=500)
        result = split_file(config, buffer_size=100)

        manifest = generate_manifest(result, config)
        assert manifest["chunk_count"] == result.chunk_count
        assert manifest["total_bytes"] == len(data)

        is_valid, issues = validate_manifest(manifest)
        assert is_valid, f"Manifest validation failed: {issues}"

        path = write_manifest(manifest, manifest_path(prefix))
        assert path.name == "part.manifest.json"
        loaded = load_manifest(path)

        paths = find_chunk_files(prefix)
        is_valid, issues = verify_chunk_integrity(loaded, paths)
        assert is_valid, f"Integrity check failed: {issues}"

        loaded["chunks"][0]["byte_end"] += 1
        is_valid, issues = validate_manifest(loaded)
        assert not is_valid

        paths[-1].write_bytes(paths[0].read_bytes())
        is_valid, issues = verify_chunk_integrity(manifest, paths)
        assert not is_valid

    return True, "manifests OK"


def test_find_chunk_files_gap() -> tuple[bool, str]:
    """Test that a missing chunk file is detected."""
    from linesplit.storage.codec import compress
    from linesplit.storage.reader import find_chunk_files

    with tempfile.TemporaryDirectory() as tmp:
        prefix = Path(tmp) / "part"
        for index in [1, 3]:
            Path(f"{prefix}.{index:03d}.zst").write_bytes(compress(b"x\n"))
        (Path(tmp) / "other.001.zst").write_bytes(compress(b"y\n"))

        try:
            find_chunk_files(prefix)
        except ValueError:
            pass
        else:
            raise AssertionError("gap in chunk numbering accepted")

        Path(f"{prefix}.002.zst").write_bytes(compress(b"z\n"))
        names = [p.name for p in find_chunk_files(prefix)]
        assert names == ["part.001.zst", "part.002.zst", "part.003.zst"]

    return True, "chunk file discovery OK"


def test_stats() -> tuple[bool, str]:
    """Test split statistics."""
    from linesplit.config import SplitConfig
    from linesplit.eval.stats import compute_split_stats, format_report
    from linesplit.pipeline import SplitResult, split_file

    empty = compute_split_stats(SplitResult())
    assert empty.chunk_count == 0
    assert empty.compression_ratio == 0.0
    assert empty.size_max == 0

    data = b"log line with some repeated content\n" * 200

    with tempfile.TemporaryDirectory() as tmp:
        input_path = Path(tmp) / "input.log"
        input_path.write_bytes(data)
        config = SplitConfig(
            input_path=input_path,
            output_prefix=str(Path(tmp) / "part"),
            chunk_size=1000,
        )
        result = split_file(config)

    stats = compute_split_stats(result)
    assert stats.chunk_count == result.chunk_count
    assert stats.total_bytes == len(data)
    assert stats.compression_ratio > 1.0
    assert stats.size_min <= stats.size_p50 <= stats.size_max
    assert stats.size_max >= 1000
    assert len(format_report(stats)) > 0
    assert "chunk_count" in stats.to_dict()

    return True, "stats OK"


def run_tests(verbose: bool = False) -> int:
    """Run all tests."""
    tests = [
        ("Config", test_config),
        ("TOML Config", test_toml_config),
        ("Config File Errors", test_config_file_errors),
        ("Boundary Locator", test_boundary_locator),
        ("Multi-byte False Match", test_boundary_multibyte_false_match),
        ("Invalid Bytes", test_boundary_invalid_bytes),
        ("Decode Warning Count", test_decode_warning_count),
        ("Example Chunking", test_example_chunking),
        ("Edge Inputs", test_edge_inputs),
        ("Oversized Line", test_oversized_line),
        ("CRLF Straddling", test_crlf_straddling_reads),
        ("Streaming Properties", test_streaming_properties),
        ("GBK Chunking", test_gbk_chunking),
        ("Chunker Lifecycle", test_chunker_lifecycle),
        ("Codec", test_codec),
        ("Pipeline", test_pipeline),
        ("Pipeline Compression Config", test_pipeline_compression_config),
        ("Pipeline Empty Input", test_pipeline_empty_input),
        ("Pipeline Missing Input", test_pipeline_missing_input),
        ("Idempotent Rerun", test_idempotent_rerun),
        ("Manifests", test_manifests),
        ("Chunk File Discovery", test_find_chunk_files_gap),
        ("Stats", test_stats),
    ]

    passed = 0
    failed = 0

    print("Running tests...\n")

    for name, test_fn in tests:
        try:
            success, msg = test_fn()
            if success:
                passed += 1
                status = "\033[32mPASS\033[0m"
            else:
                failed += 1
                status = "\033[31mFAIL\033[0m"
            print(f"  [{status}] {name}: {msg}")
        except Exception as e:
            failed += 1
            status = "\033[31mFAIL\033[0m"
            print(f"  [{status}] {name}: {e}")
            if verbose:
                traceback.print_exc()

    print(f"\n{passed} passed, {failed} failed")

    return 0 if failed == 0 else 1


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run all tests")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show verbose output",
    )

    args = parser.parse_args()
    return run_tests(verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())

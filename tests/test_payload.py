"""Tests for core.payload.PrintPayloadBuilder and the T:/P: wire format."""

import base64
import logging

import pytest

from core.errors import ContentError
from core.models import ImageSegment, TextSegment
from core.payload import PrintPayloadBuilder


def _decode(wire: str) -> list[tuple[str, bytes]]:
    """Split a built payload back into (tag, raw bytes) pairs."""
    pairs = []
    for token in wire.split("|"):
        tag, data = token.split(":", 1)
        pairs.append((tag, base64.b64decode(data)))
    return pairs


class TestBuild:
    def test_empty_builder_builds_empty_string(self):
        assert PrintPayloadBuilder().build() == ""

    def test_single_text_has_no_newline_appended(self):
        wire = PrintPayloadBuilder().add_text("hello").build()
        assert _decode(wire) == [("T", b"hello")]

    def test_mixed_segments_recover_original_bytes_in_order(self):
        image = bytes([0x42, 0x4D, 0x00, 0xFF, 0x10])
        wire = (
            PrintPayloadBuilder()
            .add_text("Header")
            .add_image_bytes(image)
            .add_text("咕咕机 footer")
            .build()
        )
        assert _decode(wire) == [
            ("T", b"Header\n"),
            ("P", image),
            ("T", "咕咕机 footer".encode("utf-8")),
        ]

    def test_non_final_text_gets_exactly_one_newline(self):
        wire = (
            PrintPayloadBuilder()
            .add_text("already\n")
            .add_text("needs one")
            .add_text("last")
            .build()
        )
        assert _decode(wire) == [
            ("T", b"already\n"),
            ("T", b"needs one\n"),
            ("T", b"last"),
        ]

    def test_text_before_image_gets_newline(self):
        wire = PrintPayloadBuilder().add_text("caption").add_image_bytes(b"\x01").build()
        assert _decode(wire)[0] == ("T", b"caption\n")

    def test_tokens_are_pipe_separated(self):
        wire = PrintPayloadBuilder().add_text("a").add_text("b").build()
        assert wire == "T:" + base64.b64encode(b"a\n").decode() + "|T:" + base64.b64encode(b"b").decode()


class TestSegments:
    def test_builder_is_chainable_and_counts_segments(self):
        builder = PrintPayloadBuilder()
        assert builder.add_text("x") is builder
        assert builder.add_image_bytes(b"\x00") is builder
        assert len(builder) == 2
        assert builder.segments == (TextSegment("x"), ImageSegment(b"\x00"))

    def test_add_text_rejects_non_strings(self):
        with pytest.raises(TypeError):
            PrintPayloadBuilder().add_text(b"bytes")

    def test_add_base64_image_decodes(self):
        raw = b"\x00\x01\x02bitmap"
        builder = PrintPayloadBuilder().add_base64_image(base64.b64encode(raw).decode())
        assert builder.segments == (ImageSegment(raw),)
        assert _decode(builder.build()) == [("P", raw)]

    @pytest.mark.parametrize("bad", ["@@@", "abc", "not base64!", "ü"])
    def test_add_base64_image_rejects_malformed_input(self, bad):
        builder = PrintPayloadBuilder()
        with pytest.raises(ContentError):
            builder.add_base64_image(bad)
        assert len(builder) == 0

    def test_add_base64_image_rejects_empty_data(self):
        builder = PrintPayloadBuilder()
        with pytest.raises(ContentError):
            builder.add_base64_image("")
        assert len(builder) == 0


class TestEncodingFailures:
    def test_unencodable_segment_is_skipped_and_logged(self, caplog):
        caplog.set_level(logging.ERROR, logger="core.payload")
        wire = (
            PrintPayloadBuilder()
            .add_text("before")
            .add_text("bad \ud800 surrogate")
            .add_text("after")
            .build()
        )
        assert _decode(wire) == [("T", b"before\n"), ("T", b"after")]
        assert "Skipping segment" in caplog.text

    def test_only_unencodable_segment_builds_empty(self):
        assert PrintPayloadBuilder().add_text("\udfff").build() == ""

    def test_strict_builder_raises_instead_of_skipping(self):
        builder = PrintPayloadBuilder(strict=True).add_text("ok").add_text("\ud800")
        with pytest.raises(ContentError):
            builder.build()

"""Tests for the .cube LUT decoder and the LUT registry."""

import logging

import numpy as np
import pytest

from photograde import DEFAULT_SETTINGS
from photograde.lut import Lut, LutRegistry, identity_lut, load_cube, new_lut_id, parse_cube

SIZE2_TRIPLES = [
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (1.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (1.0, 0.0, 1.0),
    (0.0, 1.0, 1.0),
    (0.25, 0.5, 0.75),
]


def _cube_text(triples, size=None, title=None, header=""):
    lines = [header] if header else []
    if title is not None:
        lines.append(f'TITLE "{title}"')
    if size is not None:
        lines.append(f"LUT_3D_SIZE {size}")
    lines.extend(" ".join(f"{v:.6f}" for v in t) for t in triples)
    return "\n".join(lines) + "\n"


class TestParseCube:
    """Test parse_cube decoding rules."""

    def test_round_trip_size2(self):
        lut = parse_cube("basic", _cube_text(SIZE2_TRIPLES, size=2))

        assert lut.size == 2
        assert lut.data.size == 24
        assert lut.is_complete
        expected = np.array(SIZE2_TRIPLES, dtype=np.float32).reshape(-1)
        np.testing.assert_array_equal(lut.data, expected)

    def test_data_is_float32_readonly(self):
        lut = parse_cube("basic", _cube_text(SIZE2_TRIPLES, size=2))
        assert lut.data.dtype == np.float32
        with pytest.raises(ValueError):
            lut.data[0] = 0.5

    def test_title_overrides_name(self):
        lut = parse_cube("file_name", _cube_text(SIZE2_TRIPLES, size=2, title="Kodak 2383"))
        assert lut.name == "Kodak 2383"

    def test_default_name_without_title(self):
        lut = parse_cube("file_name", _cube_text(SIZE2_TRIPLES, size=2))
        assert lut.name == "file_name"

    def test_title_without_quotes_keeps_name(self):
        text = "TITLE Unquoted\n" + _cube_text(SIZE2_TRIPLES, size=2)
        lut = parse_cube("file_name", text)
        assert lut.name == "file_name"
        assert lut.data.size == 24

    def test_comments_and_blank_lines_ignored(self):
        text = "# Created by a tool\n\n   \n" + _cube_text(SIZE2_TRIPLES, size=2)
        text = text.replace("LUT_3D_SIZE 2\n", "LUT_3D_SIZE 2\n# grid follows\n\n")
        lut = parse_cube("c", text)
        assert lut.size == 2
        assert lut.data.size == 24

    def test_unknown_directives_skipped(self):
        header = "DOMAIN_MIN 0.0 0.0 0.0\nDOMAIN_MAX 1.0 1.0 1.0\nLUT_1D_SIZE 1024"
        lut = parse_cube("d", _cube_text(SIZE2_TRIPLES, size=2, header=header))
        assert lut.size == 2
        assert lut.data.size == 24

    def test_malformed_lines_skipped(self):
        text = _cube_text(SIZE2_TRIPLES, size=2)
        text += "0.1 0.2\n0.1 0.2 0.3 0.4\nabc 0.1 0.2\n0.5 nan 0.5\n"
        lut = parse_cube("m", text)
        assert lut.data.size == 24

    def test_tabs_and_crlf(self):
        text = "LUT_3D_SIZE 2\r\n" + "".join(
            "\t".join(str(v) for v in t) + "\r\n" for t in SIZE2_TRIPLES
        )
        lut = parse_cube("w", text)
        assert lut.size == 2
        assert lut.data.size == 24

    def test_size_inferred_when_missing(self):
        triples = [(i / 26, 0.0, 0.0) for i in range(27)]
        lut = parse_cube("inferred", _cube_text(triples))
        assert lut.size == 3
        assert lut.is_complete

    def test_size_with_trailing_garbage(self):
        text = "LUT_3D_SIZE 2abc\n" + _cube_text(SIZE2_TRIPLES)
        lut = parse_cube("g", text)
        assert lut.size == 2
        assert lut.is_complete

    def test_oversized_size_falls_back_to_inference(self):
        text = "LUT_3D_SIZE 99999999999999999999\n" + _cube_text(SIZE2_TRIPLES)
        lut = parse_cube("g", text)
        assert lut.size == 2
        assert lut.is_complete

    def test_malformed_size_falls_back_to_inference(self):
        text = "LUT_3D_SIZE big\n" + _cube_text(SIZE2_TRIPLES)
        lut = parse_cube("g", text)
        assert lut.size == 2


class TestDegradedCube:
    """Test best-effort handling of inconsistent files."""

    def test_mismatch_still_returns_lut(self):
        lut = parse_cube("short", _cube_text(SIZE2_TRIPLES[:3], size=4))
        assert lut.size == 4
        assert lut.data.size == 9
        assert not lut.is_complete
        assert lut.expected_length == 192

    def test_mismatch_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="photograde.lut.cube"):
            parse_cube("short", _cube_text(SIZE2_TRIPLES[:3], size=4))
        assert any("mismatch" in r.message for r in caplog.records)
        assert all(r.levelno == logging.WARNING for r in caplog.records)

    def test_complete_lut_no_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="photograde.lut.cube"):
            parse_cube("ok", _cube_text(SIZE2_TRIPLES, size=2))
        assert not caplog.records

    @pytest.mark.parametrize("text", ["", "\n\n", "# only comments\n", "garbage line\nmore"])
    def test_no_data_gives_empty_lut(self, text):
        lut = parse_cube("empty", text)
        assert lut.size == 0
        assert lut.data.size == 0
        assert lut.name == "empty"

    def test_sample_outside_data_is_none(self):
        lut = parse_cube("short", _cube_text(SIZE2_TRIPLES[:3], size=4))
        assert lut.sample(0, 0, 0) == (0.0, 0.0, 0.0)
        assert lut.sample(0, 1, 0) is None


class TestLutIdentity:
    """Test ids and helper constructors."""

    def test_fresh_ids(self):
        text = _cube_text(SIZE2_TRIPLES, size=2)
        ids = {parse_cube("same", text).id for _ in range(50)}
        assert len(ids) == 50

    def test_id_format(self):
        lut_id = new_lut_id()
        assert len(lut_id) == 9
        assert lut_id.isalnum()
        assert lut_id == lut_id.lower()

    def test_identity_lut_layout(self):
        lut = identity_lut(3)
        assert lut.size == 3
        assert lut.is_complete
        # Red varies fastest
        assert lut.sample(1, 0, 0) == (0.5, 0.0, 0.0)
        assert lut.sample(0, 2, 0) == (0.0, 1.0, 0.0)
        assert lut.sample(2, 1, 2) == (1.0, 0.5, 1.0)

    def test_identity_lut_rejects_small(self):
        with pytest.raises(ValueError):
            identity_lut(1)

    def test_load_cube_uses_stem(self, tmp_path):
        path = tmp_path / "Teal Orange.cube"
        path.write_text(_cube_text(SIZE2_TRIPLES, size=2), encoding="utf-8")
        lut = load_cube(path)
        assert lut.name == "Teal Orange"
        assert lut.size == 2


class TestLutRegistry:
    """Test session LUT storage."""

    @pytest.fixture
    def registry(self):
        return LutRegistry()

    def test_add_and_get(self, registry):
        lut = identity_lut(2)
        lut_id = registry.add(lut)
        assert lut_id == lut.id
        assert registry.get(lut_id) is lut
        assert lut_id in registry
        assert len(registry) == 1

    def test_add_text(self, registry):
        lut = registry.add_text("film", _cube_text(SIZE2_TRIPLES, size=2, title="Film"))
        assert registry.names() == {lut.id: "Film"}

    def test_resolve(self, registry):
        lut = identity_lut(2)
        registry.add(lut)
        assert registry.resolve(DEFAULT_SETTINGS) is None
        assert registry.resolve(DEFAULT_SETTINGS.with_lut(lut.id)) is lut

    def test_resolve_unknown_warns(self, registry, caplog):
        with caplog.at_level(logging.WARNING, logger="photograde.lut.registry"):
            assert registry.resolve(DEFAULT_SETTINGS.with_lut("nope")) is None
        assert any("Unknown LUT id" in r.message for r in caplog.records)

    def test_remove(self, registry):
        lut = identity_lut(2)
        registry.add(lut)
        assert registry.remove(lut.id) is lut
        assert registry.remove(lut.id) is None
        assert len(registry) == 0

    def test_iteration_order(self):
        luts = [identity_lut(2, name=f"L{i}") for i in range(3)]
        registry = LutRegistry(luts)
        assert [lut.name for lut in registry] == ["L0", "L1", "L2"]

    def test_get_none(self, registry):
        assert registry.get(None) is None

    def test_lut_repr(self):
        lut = Lut(size=2, data=np.zeros(3, dtype=np.float32), name="x", id="abc")
        assert "complete=False" in repr(lut)

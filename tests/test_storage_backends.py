"""
Tests for storage backends.

Tests both FileBackend and MemoryBackend implementations.
"""

import json

import pytest

from mindmap.errors import FormatError
from mindmap.paths import SNAPSHOT_FILENAME, THEME_FILENAME
from mindmap.serialization import serialize
from mindmap.storage import (
    FileBackend,
    MemoryBackend,
    StorageBackend,
    create_backend,
    get_backend_type,
)


class TestFileBackend:
    """Tests for FileBackend JSON storage."""

    @pytest.fixture
    def backend(self, tmp_path):
        return FileBackend(tmp_path / "db")

    def test_creates_data_dir(self, tmp_path):
        FileBackend(tmp_path / "nested" / "db")
        assert (tmp_path / "nested" / "db").is_dir()

    def test_load_missing_snapshot(self, backend):
        assert backend.load_snapshot() is None

    def test_save_and_load_snapshot(self, backend, abc_store):
        snapshot = serialize(abc_store)
        backend.save_snapshot(snapshot)

        assert backend.load_snapshot() == snapshot
        assert (backend.data_dir / SNAPSHOT_FILENAME).exists()
        assert not (backend.data_dir / "mindmap.json.tmp").exists()

    def test_invalid_json_raises_format_error(self, backend):
        (backend.data_dir / SNAPSHOT_FILENAME).write_text("{broken", encoding="utf-8")
        with pytest.raises(FormatError):
            backend.load_snapshot()

    def test_invalid_utf8_raises_format_error(self, backend):
        (backend.data_dir / SNAPSHOT_FILENAME).write_bytes(b'{"nodes": [], "edges": [], "collapsed": ["\xff\xfe"]}')
        with pytest.raises(FormatError):
            backend.load_snapshot()

    def test_non_object_raises_format_error(self, backend):
        (backend.data_dir / SNAPSHOT_FILENAME).write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(FormatError):
            backend.load_snapshot()

    def test_theme_round_trip(self, backend):
        assert backend.load_theme() == "light"
        backend.save_theme("dark")
        assert backend.load_theme() == "dark"
        assert json.loads((backend.data_dir / THEME_FILENAME).read_text()) == {"theme": "dark"}

    def test_unknown_theme_rejected(self, backend):
        with pytest.raises(ValueError):
            backend.save_theme("sepia")

    def test_corrupt_theme_falls_back_to_light(self, backend):
        (backend.data_dir / THEME_FILENAME).write_text("not json", encoding="utf-8")
        assert backend.load_theme() == "light"

    def test_backend_type(self, backend):
        assert backend.backend_type == "file"


class TestMemoryBackend:
    def test_snapshot_is_copied(self):
        backend = MemoryBackend()
        snapshot = {"nodes": [], "edges": [], "collapsed": []}
        backend.save_snapshot(snapshot)
        snapshot["nodes"].append("mutated")

        assert backend.load_snapshot() == {"nodes": [], "edges": [], "collapsed": []}
        assert backend.save_count == 1

    def test_theme(self):
        backend = MemoryBackend(theme="dark")
        assert backend.load_theme() == "dark"
        backend.save_theme("light")
        assert backend.load_theme() == "light"


class TestProtocolCompliance:
    """Verify both backends implement the protocol correctly."""

    def test_file_backend_implements_protocol(self, tmp_path):
        assert isinstance(FileBackend(tmp_path), StorageBackend)

    def test_memory_backend_implements_protocol(self):
        assert isinstance(MemoryBackend(), StorageBackend)


class TestBackendFactory:
    def test_default_backend_type(self):
        assert get_backend_type() == "file"
        assert get_backend_type({"storage_backend": "memory"}) == "memory"

    def test_create_file_backend(self, tmp_path):
        backend = create_backend({}, data_dir=tmp_path)
        assert isinstance(backend, FileBackend)
        assert backend.data_dir == tmp_path

    def test_create_memory_backend(self):
        backend = create_backend({"storage_backend": "memory"})
        assert isinstance(backend, MemoryBackend)

    def test_force_backend(self, tmp_path):
        backend = create_backend({"storage_backend": "file", "data_dir": str(tmp_path)}, force_backend="memory")
        assert backend.backend_type == "memory"

    def test_unknown_backend_falls_back_to_file(self, tmp_path):
        backend = create_backend({"storage_backend": "cloud", "data_dir": str(tmp_path)})
        assert backend.backend_type == "file"

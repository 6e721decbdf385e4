"""
Tests for the JSON key-set store.
"""

import json

from shaperelay.filtering import KnownBotRegistry
from shaperelay.storage import JsonKeySetStore


class TestJsonKeySetStore:
    """Tests for JsonKeySetStore."""

    def test_missing_file_is_empty(self, data_dir):
        assert JsonKeySetStore(data_dir).load("known_bots") == set()

    def test_round_trip(self, data_dir):
        store = JsonKeySetStore(data_dir)
        store.save("known_bots", {"b2", "b1"})

        assert json.loads((data_dir / "known_bots.json").read_text()) == ["b1", "b2"]
        assert store.load("known_bots") == {"b1", "b2"}

    def test_creates_directory(self, tmp_path):
        store = JsonKeySetStore(tmp_path / "nested" / "data")
        store.save("known_bots", {"b1"})
        assert (tmp_path / "nested" / "data" / "known_bots.json").exists()

    def test_corrupt_file_is_empty(self, data_dir):
        (data_dir / "known_bots.json").write_text("{not json")
        assert JsonKeySetStore(data_dir).load("known_bots") == set()

    def test_wrong_shape_is_empty(self, data_dir):
        (data_dir / "known_bots.json").write_text('{"b1": true}')
        assert JsonKeySetStore(data_dir).load("known_bots") == set()

    def test_registry_survives_restart(self, data_dir):
        KnownBotRegistry(JsonKeySetStore(data_dir)).add("b1")
        assert "b1" in KnownBotRegistry(JsonKeySetStore(data_dir))

    def test_stamp_tracks_rewrites(self, data_dir):
        store = JsonKeySetStore(data_dir)
        assert store.stamp("known_bots") is None

        store.save("known_bots", {"b1"})
        first = store.stamp("known_bots")
        store.save("known_bots", {"b1"})
        assert first is not None
        assert store.stamp("known_bots") != first

    def test_clear_from_another_process_reaches_running_registry(self, data_dir):
        running = KnownBotRegistry(JsonKeySetStore(data_dir))
        running.add("b1")

        # What `shaperelay bots clear` does
        KnownBotRegistry(JsonKeySetStore(data_dir)).clear()

        assert running.refresh() is True
        assert "b1" not in running

        running.add("b2")
        assert json.loads((data_dir / "known_bots.json").read_text()) == ["b2"]

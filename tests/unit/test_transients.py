"""Tests for avatarforge.core.transients: the shared expiring key/value store."""

from __future__ import annotations

import json

from avatarforge.core.transients import FileTransientStore


class TestTransientGetSet:
    """Verify storage and expiry."""

    def test_missing_key_returns_default(self, transients: FileTransientStore):
        assert transients.get("missing") is None
        assert transients.get("missing", "fallback") == "fallback"

    def test_set_then_get(self, transients: FileTransientStore):
        transients.set("parts", {"eyes": ["eyes1.png"]}, 60)
        assert transients.get("parts") == {"eyes": ["eyes1.png"]}

    def test_entry_expires(self, transients: FileTransientStore, clock):
        transients.set("parts", [1, 2], 60)
        clock.advance(61)
        assert transients.get("parts") is None

    def test_expired_entry_removed_on_read(self, transients: FileTransientStore, clock):
        transients.set("parts", [1, 2], 60)
        clock.advance(61)
        transients.get("parts")
        assert list(transients.directory.glob("*.json")) == []

    def test_set_replaces_value(self, transients: FileTransientStore):
        transients.set("key", 1, 60)
        transients.set("key", 2, 60)
        assert transients.get("key") == 2

    def test_delete(self, transients: FileTransientStore):
        transients.set("key", 1, 60)
        transients.delete("key")
        transients.delete("key")
        assert transients.get("key") is None

    def test_unusual_keys_do_not_collide(self, transients: FileTransientStore):
        transients.set("check/a", 1, 60)
        transients.set("check_a", 2, 60)
        assert transients.get("check/a") == 1
        assert transients.get("check_a") == 2

    def test_corrupt_entry_treated_as_missing(self, transients: FileTransientStore):
        (transients.directory / "broken.json").write_text("{not json", encoding="utf-8")
        assert transients.get("broken", "default") == "default"

    def test_store_shared_between_instances(self, transients: FileTransientStore, clock):
        transients.set("shared", "value", 60)
        other = FileTransientStore(transients.directory, clock=clock)
        assert other.get("shared") == "value"


class TestTransientAdd:
    """Verify the add-if-absent lock primitive."""

    def test_first_add_wins(self, transients: FileTransientStore):
        assert transients.add("lock", True, 60) is True
        assert transients.add("lock", True, 60) is False

    def test_add_succeeds_after_expiry(self, transients: FileTransientStore, clock):
        transients.add("lock", True, 60)
        clock.advance(60)
        assert transients.add("lock", True, 60) is True

    def test_add_writes_readable_entry(self, transients: FileTransientStore, clock):
        transients.add("lock", "owner", 30)
        entry = json.loads((transients.directory / "lock.json").read_text(encoding="utf-8"))
        assert entry == {"expires": clock.now + 30, "value": "owner"}
        assert transients.get("lock") == "owner"


class TestTransientAddRace:
    """Verify an expired lock is won by exactly one of two racing workers."""

    @staticmethod
    def _interleave(monkeypatch, worker: FileTransientStore, action):
        """Run ``action`` once, right after ``worker`` has read an entry file."""
        read = FileTransientStore._read
        results = []

        def read_then_act(path):
            entry = read(path)
            if not results:
                results.append(action())
            return entry

        monkeypatch.setattr(worker, "_read", read_then_act)
        return results

    def test_expired_lock_has_single_winner(self, transients: FileTransientStore, clock, monkeypatch):
        transients.add("lock", "stale", 60)
        clock.advance(61)

        worker_a = FileTransientStore(transients.directory, clock=clock)
        worker_b = FileTransientStore(transients.directory, clock=clock)
        a_results = self._interleave(monkeypatch, worker_b, lambda: worker_a.add("lock", "a", 60))

        b_won = worker_b.add("lock", "b", 60)

        assert a_results == [False]
        assert b_won is True
        assert transients.get("lock") == "b"

    def test_expired_read_keeps_fresh_lock(self, transients: FileTransientStore, clock, monkeypatch):
        transients.add("lock", "stale", 60)
        clock.advance(61)

        worker_a = FileTransientStore(transients.directory, clock=clock)
        reader = FileTransientStore(transients.directory, clock=clock)
        a_results = self._interleave(monkeypatch, reader, lambda: worker_a.add("lock", "a", 60))

        assert reader.get("lock") is None
        assert a_results == [True]
        assert transients.get("lock") == "a"
        assert transients.add("lock", "late", 60) is False

    def test_lock_files_are_hidden(self, transients: FileTransientStore):
        transients.add("lock", True, 60)
        assert [path.name for path in transients.directory.iterdir() if not path.name.startswith(".")] == [
            "lock.json"
        ]

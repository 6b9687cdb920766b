import json
import tempfile
import unittest
from pathlib import Path

from board import Board
from errors import PersistenceFailure
from storage import STORAGE_KEY, Storage, load_board


class TestStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.storage = Storage(self.dir)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, text: str) -> None:
        self.storage.path.write_text(text, encoding="utf-8")

    def test_path_uses_key(self) -> None:
        self.assertEqual(self.storage.path, self.dir / f"{STORAGE_KEY}.json")

    def test_missing_is_absent(self) -> None:
        self.assertIsNone(self.storage.load())

    def test_malformed_and_empty_are_absent(self) -> None:
        for text in ("{not json", "{}", "[]", "\"text\"", "null"):
            self._write(text)
            self.assertIsNone(self.storage.load(), text)

    def test_save_then_load(self) -> None:
        board = Board()
        board.add_task("todo", "Buy milk")
        self.storage.save(board.to_data())
        self.assertEqual(self.storage.load(), board.to_data())
        self.assertFalse(self.storage.path.with_suffix(".json.tmp").exists())
        restored = load_board(self.storage)
        self.assertEqual(restored.to_data(), board.to_data())

    def test_stored_camel_case_keys(self) -> None:
        self.storage.save(Board().to_data())
        raw = json.loads(self.storage.path.read_text(encoding="utf-8"))
        self.assertEqual(set(raw[0]), {"id", "name", "status", "isExpanded", "tasks"})
        self.assertIn("createdAt", raw[0]["tasks"][0])

    def test_fallback_to_default_lanes(self) -> None:
        self._write("[1, 2, 3]")
        board = load_board(self.storage)
        self.assertEqual([g.id for g in board.groups], ["blocked", "todo", "in_progress", "done"])
        self._write(json.dumps([{"id": "g", "name": "G", "status": "todo",
                                 "tasks": [{"id": "x", "title": "x"}, {"id": "x", "title": "y"}]}]))
        self.assertEqual(len(load_board(self.storage).groups), 4)

    def test_save_failure_is_wrapped(self) -> None:
        blocker = self.dir / "file"
        blocker.write_text("", encoding="utf-8")
        storage = Storage(blocker / "nested")
        with self.assertRaises(PersistenceFailure):
            storage.save([])

    def test_unserializable_save_leaves_no_temp_file(self) -> None:
        with self.assertRaises(PersistenceFailure):
            self.storage.save([object()])
        self.assertFalse(self.storage.path.with_suffix(".json.tmp").exists())
        self.assertFalse(self.storage.path.exists())


if __name__ == "__main__":
    unittest.main()

"""Test the undo log and undo/redo replay over random edit sequences."""

import random
import unittest

from pledit.model import CursorPosition, TextBuffer
from pledit.undo import RecordKind, UndoLog, UndoRecord


def rec(text="x"):
    return UndoRecord(RecordKind.INSERT, [text], (1, 1))


class TestUndoLog(unittest.TestCase):
    def test_push_advances_top(self):
        log = UndoLog()
        log.push(rec("a"))
        log.push(rec("b"))
        self.assertEqual(log.top, 2)
        self.assertTrue(log.can_undo())
        self.assertFalse(log.can_redo())
        self.assertEqual(log.peek_undo().lines, ["b"])

    def test_push_truncates_redo_tail(self):
        log = UndoLog()
        log.push(rec("a"))
        log.push(rec("b"))
        log.top = 1
        log.push(rec("c"))
        self.assertEqual([r.lines[0] for r in log.records], ["a", "c"])
        self.assertEqual(log.top, 2)

    def test_cap_moves_pointer(self):
        log = UndoLog(max_entries=2)
        for text in "abc":
            log.push(rec(text))
        self.assertEqual([r.lines[0] for r in log.records], ["b", "c"])
        self.assertEqual(log.top, 2)

    def test_clear(self):
        log = UndoLog()
        log.push(rec())
        log.clear()
        self.assertEqual(len(log), 0)
        self.assertIsNone(log.peek_undo())

    def test_end_point_single_line(self):
        record = UndoRecord(RecordKind.INSERT, ["abc"], (2, 3))
        self.assertEqual(record.end_point(), (2, 6))

    def test_end_point_multi_line(self):
        record = UndoRecord(RecordKind.DELETE, ["bc", "def", "g"], (1, 2))
        self.assertEqual(record.end_point(), (3, 2))


class TestUndoRedoReplay(unittest.TestCase):
    """Undo restores every intermediate state and redo replays them all."""

    WORDS = ["a", "bc", "", "déf", "\tx"]

    def random_edit(self, rng, buf):
        """Make one random edit; return where undoing it leaves the cursor."""
        buf.set_cursor(rng.randint(1, buf.line_count), rng.randint(1, 12))
        if rng.random() < 0.6:
            anchor = buf.cursor
            n = rng.randint(1, 3)
            buf.insert([rng.choice(self.WORDS) for _ in range(n)])
            return anchor
        i = rng.randint(buf.ci, buf.line_count)
        low = buf.cj if i == buf.ci else 1
        j = rng.randint(low, len(buf.get_line(i)) + 1)
        buf.delete(i, j)
        # Undo reinserts the deleted text and ends after it
        return CursorPosition(i, j)

    def test_round_trip(self):
        rng = random.Random(1234)
        buf = TextBuffer(["first line", "second", "third line here"])
        states = [(list(buf.lines), buf.cursor)]
        undo_cursors = [None]
        for _ in range(200):
            undo_cursors.append(self.random_edit(rng, buf))
            states.append((list(buf.lines), buf.cursor))

        for k in range(len(states) - 1, 0, -1):
            buf.undo()
            self.assertEqual((buf.lines, buf.cursor), (states[k - 1][0], undo_cursors[k]))
        self.assertFalse(buf.undo_log.can_undo())

        for expected in states[1:]:
            buf.redo()
            self.assertEqual((buf.lines, buf.cursor), expected)
        self.assertFalse(buf.undo_log.can_redo())

    def test_pointer_equals_length_after_edit(self):
        rng = random.Random(99)
        buf = TextBuffer(["abc", "def"])
        for _ in range(20):
            self.random_edit(rng, buf)
        for _ in range(5):
            buf.undo()
        self.random_edit(rng, buf)
        self.assertEqual(buf.undo_log.top, len(buf.undo_log))


if __name__ == '__main__':
    unittest.main()

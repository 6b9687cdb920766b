import unittest

from board import Board
from drop import DropPosition, HorizontalOffsetPolicy, HoverTarget, Mutation
from errors import CycleError, DragStateError
from gesture import DragSession, DragState, HoverCandidate, Rect, hit_test, row_candidates
from models import Task, TaskGroup
from render import visible_rows

ROW_HEIGHT = 20.0


def _t(tid, *subtasks, expanded=True):
    return Task(id=tid, title=tid, subtasks=list(subtasks), is_expanded=expanded)


def _board() -> Board:
    return Board([
        TaskGroup("blocked", "B", "blocked", tasks=[_t("A", _t("a1"), _t("a2")), _t("B")]),
        TaskGroup("todo", "T", "todo", tasks=[_t("C")]),
    ])


def _candidates(board: Board):
    """One 20px row per visible task, stacked from y=0."""
    return [
        HoverCandidate(row.task_id, Rect(0, (row.number - 1) * ROW_HEIGHT, 400, ROW_HEIGHT),
                       row.group_id, row.depth)
        for row in visible_rows(board.groups)
    ]


class TestRect(unittest.TestCase):
    def test_contains_is_half_open(self) -> None:
        r = Rect(10, 20, 100, 20)
        self.assertTrue(r.contains(10, 20))
        self.assertTrue(r.contains(109.9, 39.9))
        self.assertFalse(r.contains(110, 30))
        self.assertFalse(r.contains(50, 40))

    def test_fraction_clamped(self) -> None:
        r = Rect(0, 100, 10, 20)
        self.assertAlmostEqual(r.fraction_y(105), 0.25)
        self.assertEqual(r.fraction_y(50), 0.0)
        self.assertEqual(r.fraction_y(500), 1.0)
        self.assertEqual(Rect(0, 0, 10, 0).fraction_y(3), 0.0)

    def test_hit_test(self) -> None:
        candidates = _candidates(_board())
        candidate, fraction = hit_test(candidates, 5, 25)
        self.assertEqual(candidate.task_id, "a1")
        self.assertAlmostEqual(fraction, 0.25)
        self.assertIsNone(hit_test(candidates, 5, 1000))

    def test_row_candidates(self) -> None:
        rows = visible_rows(_board().groups)
        candidates = row_candidates(rows)
        self.assertEqual([c.task_id for c in candidates], ["A", "a1", "a2", "B", "C"])
        self.assertEqual(candidates[3].rect.y, 4.0)
        self.assertEqual(candidates[1].depth, 1)


class TestDragSession(unittest.TestCase):
    def setUp(self) -> None:
        self.board = _board()
        self.session = DragSession()

    def test_full_gesture_reorders(self) -> None:
        self.session.start("B", 50, 70)
        self.assertIs(self.session.state, DragState.DRAGGING)
        hover = self.session.move(self.board.groups, 50, 2, _candidates(self.board))
        self.assertEqual(hover, HoverTarget("A", DropPosition.BEFORE))
        mutation = self.session.drop(self.board)
        self.assertEqual(mutation, Mutation("move_task_to_group", ("B", "blocked", 0)))
        self.assertEqual([t.id for t in self.board.groups[0].tasks], ["B", "A"])
        self.assertIs(self.session.state, DragState.IDLE)
        self.assertIsNone(self.session.hover)
        self.assertIsNone(self.session.dragged_id)

    def test_hover_cleared_when_pointer_leaves_rows(self) -> None:
        self.session.start("B", 50, 70)
        self.session.move(self.board.groups, 50, 30, _candidates(self.board))
        self.assertIsNotNone(self.session.hover)
        self.assertIsNone(self.session.move(self.board.groups, 50, 900, _candidates(self.board)))
        before = self.board.to_data()
        self.assertIsNone(self.session.drop(self.board))
        self.assertEqual(self.board.to_data(), before)

    def test_invalid_target_clears_hover(self) -> None:
        self.session.start("A", 50, 10)
        self.assertIsNone(self.session.move(self.board.groups, 50, 30, _candidates(self.board)))
        self.assertIsNone(self.session.move(self.board.groups, 50, 10, _candidates(self.board)))

    def test_cancel_returns_to_idle(self) -> None:
        self.session.start("B", 50, 70)
        self.session.move(self.board.groups, 50, 90, _candidates(self.board))
        self.session.cancel()
        self.assertFalse(self.session.active)
        self.assertIsNone(self.session.hover)

    def test_rejected_mutation_still_resets(self) -> None:
        self.session.start("B", 50, 70)
        hover = self.session.move(self.board.groups, 50, 30, _candidates(self.board))
        self.assertEqual(hover, HoverTarget("a1", DropPosition.INSIDE))
        # a1 ends up inside B's subtree before the drop lands
        self.board.move_task_to_subtask("A", "B", 0)
        with self.assertRaises(CycleError):
            self.session.drop(self.board)
        self.assertIs(self.session.state, DragState.IDLE)

    def test_state_errors(self) -> None:
        with self.assertRaises(DragStateError):
            self.session.move(self.board.groups, 0, 0, [])
        with self.assertRaises(DragStateError):
            self.session.drop(self.board)
        self.session.start("B", 0, 0)
        with self.assertRaises(DragStateError):
            self.session.start("C", 0, 0)

    def test_horizontal_displacement_tracked(self) -> None:
        session = DragSession(HorizontalOffsetPolicy())
        session.start("B", 100, 70)
        hover = session.move(self.board.groups, 140, 70, _candidates(self.board))
        self.assertEqual(session.dx, 40)
        self.assertEqual(hover, HoverTarget("A", DropPosition.INSIDE))
        session.drop(self.board)
        self.assertEqual([t.id for t in self.board.find_task_by_id("A").subtasks], ["a1", "a2", "B"])


if __name__ == "__main__":
    unittest.main()

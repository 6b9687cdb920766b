import unittest

from models import Task, TaskGroup
from traversal import (TaskLocation, count_descendants, find_task_by_id, find_task_location,
                       is_descendant_of, iter_tasks, max_subtree_depth, owner_list,
                       root_ancestor_index)


def _t(tid, *subtasks):
    return Task(id=tid, title=tid, subtasks=list(subtasks))


def _forest():
    return [
        TaskGroup("blocked", "B", "blocked", tasks=[_t("A", _t("a1", _t("a11")), _t("a2")), _t("B")]),
        TaskGroup("todo", "T", "todo", tasks=[_t("C", _t("c1"))]),
    ]


class TestTraversal(unittest.TestCase):
    def test_find_task_by_id_across_groups(self) -> None:
        forest = _forest()
        self.assertEqual(find_task_by_id(forest, "a11").id, "a11")
        self.assertEqual(find_task_by_id(forest, "c1").id, "c1")
        self.assertIsNone(find_task_by_id(forest, "zzz"))

    def test_find_task_location(self) -> None:
        forest = _forest()
        self.assertEqual(find_task_location(forest, "B"), TaskLocation("blocked", None, 1, 0))
        self.assertEqual(find_task_location(forest, "a2"), TaskLocation("blocked", "A", 1, 1))
        self.assertEqual(find_task_location(forest, "a11"), TaskLocation("blocked", "a1", 0, 2))
        self.assertEqual(find_task_location(forest, "c1"), TaskLocation("todo", "C", 0, 1))
        self.assertIsNone(find_task_location(forest, "zzz"))

    def test_owner_list(self) -> None:
        forest = _forest()
        self.assertIs(owner_list(forest, find_task_location(forest, "B")), forest[0].tasks)
        self.assertIs(owner_list(forest, find_task_location(forest, "a11")),
                      find_task_by_id(forest, "a1").subtasks)

    def test_is_descendant_of(self) -> None:
        forest = _forest()
        self.assertTrue(is_descendant_of(forest, "a11", "A"))
        self.assertTrue(is_descendant_of(forest, "a2", "A"))
        self.assertFalse(is_descendant_of(forest, "A", "A"))
        self.assertFalse(is_descendant_of(forest, "A", "a11"))
        self.assertFalse(is_descendant_of(forest, "c1", "A"))
        self.assertFalse(is_descendant_of(forest, "a1", "zzz"))

    def test_depth_and_counts(self) -> None:
        forest = _forest()
        a = find_task_by_id(forest, "A")
        self.assertEqual(max_subtree_depth(a), 2)
        self.assertEqual(max_subtree_depth(find_task_by_id(forest, "B")), 0)
        self.assertEqual(count_descendants(a), 3)

    def test_iter_tasks_order(self) -> None:
        forest = _forest()
        walked = [(t.id, d) for t, d in iter_tasks(forest[0].tasks)]
        self.assertEqual(walked, [("A", 0), ("a1", 1), ("a11", 2), ("a2", 1), ("B", 0)])

    def test_root_ancestor_index(self) -> None:
        forest = _forest()
        self.assertEqual(root_ancestor_index(forest, "a11"), 0)
        self.assertEqual(root_ancestor_index(forest, "B"), 1)
        self.assertEqual(root_ancestor_index(forest, "c1"), 0)
        self.assertIsNone(root_ancestor_index(forest, "zzz"))


if __name__ == "__main__":
    unittest.main()

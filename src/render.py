"""Terminal rendering of the forest as indented lanes.

Every visible task gets a 1-based row number; the CLI addresses tasks by
that number and the drag simulation uses it as the row's y coordinate.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional
from drop import DropPosition
from gesture import DragSession
from models import Forest, Task
from theme import (color, BOLD, DIM, STRIKE, EMPTY_COLOR, HEADER_COLOR, ID_COLOR,
                   INDICATOR_COLOR, STATUS_COLOR, STATUS_ICON)
from traversal import count_descendants

INDENT = '    '
EXPANDED, COLLAPSED = '▾', '▸'


@dataclass(frozen=True)
class Row:
    number: int
    task_id: str
    group_id: str
    depth: int
    task: Task


def visible_rows(forest: Forest) -> List[Row]:
    """Rows for tasks inside expanded lanes whose ancestors are all expanded."""
    rows: List[Row] = []

    def walk(tasks: List[Task], group_id: str, depth: int) -> None:
        for task in tasks:
            rows.append(Row(len(rows) + 1, task.id, group_id, depth, task))
            if task.is_expanded:
                walk(task.subtasks, group_id, depth + 1)

    for group in forest:
        if group.is_expanded:
            walk(group.tasks, group.id, 0)
    return rows


def _task_line(row: Row, width: int) -> str:
    task = row.task
    number = color(f"{row.number}.".rjust(width), ID_COLOR)
    if task.subtasks:
        chevron = EXPANDED if task.is_expanded else COLLAPSED
    else:
        chevron = ' '
    status_col = STATUS_COLOR.get(task.status, '')
    icon = color(STATUS_ICON.get(task.status, '?'), status_col)
    title = task.title or '<untitled>'
    title = color(title, DIM, STRIKE) if task.status == 'done' else color(title, status_col)
    badge = ''
    count = count_descendants(task)
    if count:
        badge = ' ' + color(f"↳{count}", DIM)
    return f"{number} {INDENT * row.depth}{chevron} {icon} {title}{badge}"


def _indicator_line(depth: int, width: int) -> str:
    return ' ' * (width + 1) + INDENT * depth + color('──▶' + '─' * 12, INDICATOR_COLOR)


def _subtree_end(rows: List[Row], pos: int) -> int:
    """Position of the last visible row inside rows[pos]'s subtree."""
    end = pos
    while end + 1 < len(rows) and rows[end + 1].group_id == rows[pos].group_id \
            and rows[end + 1].depth > rows[pos].depth:
        end += 1
    return end


def render_lines(forest: Forest, session: Optional[DragSession] = None) -> List[str]:
    rows = visible_rows(forest)
    width = len(str(len(rows))) + 1
    by_group: Dict[str, List[int]] = {}
    for pos, row in enumerate(rows):
        by_group.setdefault(row.group_id, []).append(pos)

    before: Dict[int, int] = {}
    after: Dict[int, int] = {}
    hover = session.hover if session is not None and session.active else None
    if hover is not None:
        for pos, row in enumerate(rows):
            if row.task_id != hover.task_id:
                continue
            if hover.position is DropPosition.BEFORE:
                before[pos] = row.depth
            elif hover.position is DropPosition.INSIDE:
                after[pos] = row.depth + 1
            else:
                after[_subtree_end(rows, pos)] = row.depth

    lines: List[str] = []
    for group in forest:
        chevron = EXPANDED if group.is_expanded else COLLAPSED
        lines.append(color(f"{chevron} {group.name}", HEADER_COLOR, BOLD) + color(f"  {len(group.tasks)}", DIM))
        if not group.is_expanded:
            continue
        positions = by_group.get(group.id, [])
        if not positions:
            lines.append(' ' * (width + 1) + color('(empty)', EMPTY_COLOR))
        for pos in positions:
            if pos in before:
                lines.append(_indicator_line(before[pos], width))
            lines.append(_task_line(rows[pos], width))
            if pos in after:
                lines.append(_indicator_line(after[pos], width))
        lines.append('')
    return lines


def display(forest: Forest, session: Optional[DragSession] = None) -> None:
    for line in render_lines(forest, session):
        print(line)

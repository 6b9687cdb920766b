"""Command-line interface loop for the task tree board.

Tasks are addressed by the row numbers shown on screen. Drag gestures are
simulated on the same grid: row n spans y in [n, n+1), so `drag 3 5.5`
drags row 3 to the middle of row 5 (inside it, with the vertical policy).
"""
import logging
from typing import Callable, List, Optional
from board import Board
from drop import (DropPolicy, ListSlot, VerticalFractionPolicy, resolve_list_drop, slot_of,
                  subtasks_container)
from errors import NotFound, OutOfRange, PersistenceFailure, TaskTreeError
from gesture import DragSession, row_candidates
from models import STATUSES, TaskGroup
from render import Row, display, visible_rows
from storage import Storage

logger = logging.getLogger(__name__)

DRAG_ORIGIN_X = 100.0

# --- terminal control helpers ---
# ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home); 3J first
# improves reliability in some terminals.
def _clear_screen() -> None:
    print("\033[3J\033[H\033[2J\033[H", end="", flush=True)


def _enter_alt_screen() -> None:
    print("\033[?1049h", end="", flush=True)


def _leave_alt_screen() -> None:
    print("\033[?1049l", end="", flush=True)


LANE_ALIASES = {
    'b': 'blocked',
    'blocked': 'blocked',
    't': 'todo',
    'todo': 'todo',
    'ip': 'in_progress',
    'in_progress': 'in_progress',
    'in-progress': 'in_progress',
    'd': 'done',
    'done': 'done',
}

HELP_LINES = (
    "Commands (rows are the numbers shown on the board, positions start at 1):",
    "  add <lane> <title...>          Add a task to a lane (b, t, ip, d)",
    "  sub <row> <title...>           Add a subtask under a row",
    "  rename <row> <title...>        Change a task title",
    "  status <row> <status>          Set status: b, t, ip, d",
    "  rm <row>                       Delete a task and its subtasks",
    "  fold <row|lane>                Expand/collapse a task or a lane",
    "  order <lane|row> <from> <to>   Reorder a lane's tasks or a row's subtasks",
    "  mv <row> <lane> [pos]          Move a task to a lane's top level",
    "  nest <row> <parent> [pos]      Make a task a subtask of another row",
    "  place <row> <lane|row> <pos>   Drop a task at a slot in a lane or a row's subtasks",
    "  drag <row> [y [dx]]            Start a drag; with y, drop right away",
    "  hover <y> [dx]                 Move the dragged pointer (shows the drop line)",
    "  drop | cancel                  Finish or abandon the current drag",
    "  help                           Show this help (press Enter to return)",
    "  exit                           Save and exit",
)


def _number(token: str, label: str) -> int:
    if not token.rstrip('.').isdigit():
        raise OutOfRange(f'Invalid {label}: {token}')
    return int(token.rstrip('.'))


def _coordinate(token: str, label: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise OutOfRange(f'Invalid {label}: {token}') from None


class CLI:
    def __init__(self, board: Board, storage: Optional[Storage] = None,
                 policy: Optional[DropPolicy] = None, alt_screen: bool = True):
        self.board: Board = board
        self.storage: Optional[Storage] = storage
        self.session: DragSession = DragSession(policy or VerticalFractionPolicy())
        self.alt_screen: bool = alt_screen
        self.message: Optional[str] = None

    def run(self) -> None:
        """Main REPL loop; the board is cleared and redrawn each cycle and
        the forest is saved after every command."""
        exit_message: Optional[str] = None
        if self.alt_screen:
            _enter_alt_screen()
        try:
            while True:
                self._redraw()
                line = input("\n: ").strip()
                if not line:
                    continue
                lower = line.lower()
                if lower == 'help':
                    _clear_screen()
                    print('\n'.join(HELP_LINES))
                    input("\nPress Enter to return to the board...")
                    continue
                if lower == 'exit':
                    self._persist()
                    exit_message = self.message or "Goodbye."
                    break
                self.handle_command(line)
                self._persist()
        except (KeyboardInterrupt, EOFError):
            self._persist()
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                _leave_alt_screen()
            if exit_message:
                print(exit_message)

    def _redraw(self) -> None:
        _clear_screen()
        print("Task Board:\n")
        display(self.board.snapshot(), self.session)
        if self.session.active:
            print(f"Dragging row {self._dragged_row_label()} ({self.session.policy.name} policy)")
        if self.message:
            print(self.message)
            self.message = None

    def _dragged_row_label(self) -> str:
        for row in visible_rows(self.board.groups):
            if row.task_id == self.session.dragged_id:
                return str(row.number)
        return '?'

    def _persist(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(self.board.to_data())
        except PersistenceFailure as exc:
            logger.error('%s', exc)
            self.message = f'Save failed (changes kept in memory): {exc}'

    # -------------------- command dispatch --------------------
    def handle_command(self, line: str) -> None:
        tokens = line.split()
        if not tokens:
            return
        cmd = tokens[0].lower()
        handler: Optional[Callable[[List[str]], None]] = getattr(self, f'_cmd_{cmd}', None)
        if handler is None:
            self.message = "Unknown command. Type 'help' for instructions."
            return
        if cmd not in ('hover', 'drop', 'cancel', 'drag') and self.session.active:
            self.session.cancel()
        try:
            handler(tokens)
        except TaskTreeError as exc:
            logger.info('command %r failed: %s', line, exc)
            self.message = str(exc)

    # ---- lookups ----
    def _row(self, token: str) -> Row:
        n = _number(token, 'row')
        rows = visible_rows(self.board.groups)
        if n < 1 or n > len(rows):
            raise OutOfRange(f'No row #{n}.')
        return rows[n - 1]

    def _lane(self, token: str) -> TaskGroup:
        status = LANE_ALIASES.get(token.lower())
        group = self.board.group_for_status(status) if status else self.board.get_group(token)
        if group is None:
            raise NotFound(f'Unknown lane: {token}')
        return group

    def _usage(self, text: str) -> None:
        self.message = f'Usage: {text}'

    # ---- individual command helpers ----
    def _cmd_add(self, tokens: List[str]) -> None:
        if len(tokens) < 3:
            return self._usage('add <lane> <title...>')
        self.board.add_task(self._lane(tokens[1]).id, ' '.join(tokens[2:]))

    def _cmd_sub(self, tokens: List[str]) -> None:
        if len(tokens) < 3:
            return self._usage('sub <row> <title...>')
        row = self._row(tokens[1])
        self.board.add_subtask(row.group_id, row.task_id, ' '.join(tokens[2:]))

    def _cmd_rename(self, tokens: List[str]) -> None:
        if len(tokens) < 3:
            return self._usage('rename <row> <title...>')
        row = self._row(tokens[1])
        self.board.update_task(row.group_id, row.task_id, title=' '.join(tokens[2:]))

    def _cmd_status(self, tokens: List[str]) -> None:
        if len(tokens) != 3:
            return self._usage('status <row> <b|t|ip|d>')
        status = LANE_ALIASES.get(tokens[2].lower())
        if status not in STATUSES:
            self.message = 'Invalid status.'
            return
        row = self._row(tokens[1])
        self.board.update_task(row.group_id, row.task_id, status=status)

    def _cmd_rm(self, tokens: List[str]) -> None:
        if len(tokens) != 2:
            return self._usage('rm <row>')
        row = self._row(tokens[1])
        self.board.delete_task(row.group_id, row.task_id)
        self.message = f'Removed "{row.task.title}".'

    def _cmd_fold(self, tokens: List[str]) -> None:
        if len(tokens) != 2:
            return self._usage('fold <row|lane>')
        if tokens[1].rstrip('.').isdigit():
            row = self._row(tokens[1])
            self.board.toggle_task_expand(row.group_id, row.task_id)
        else:
            self.board.toggle_group_expand(self._lane(tokens[1]).id)

    def _cmd_order(self, tokens: List[str]) -> None:
        if len(tokens) != 4:
            return self._usage('order <lane|row> <from> <to>')
        src = _number(tokens[2], 'position') - 1
        dst = _number(tokens[3], 'position') - 1
        if tokens[1].rstrip('.').isdigit():
            row = self._row(tokens[1])
            self.board.reorder_subtasks(row.group_id, row.task_id, src, dst)
        else:
            self.board.reorder_tasks(self._lane(tokens[1]).id, src, dst)

    def _cmd_mv(self, tokens: List[str]) -> None:
        if len(tokens) not in (3, 4):
            return self._usage('mv <row> <lane> [pos]')
        row = self._row(tokens[1])
        lane = self._lane(tokens[2])
        index = _number(tokens[3], 'position') - 1 if len(tokens) == 4 else len(lane.tasks)
        self.board.move_task_to_group(row.task_id, lane.id, index)

    def _cmd_nest(self, tokens: List[str]) -> None:
        if len(tokens) not in (3, 4):
            return self._usage('nest <row> <parent-row> [pos]')
        row = self._row(tokens[1])
        parent = self._row(tokens[2])
        index = _number(tokens[3], 'position') - 1 if len(tokens) == 4 else len(parent.task.subtasks)
        self.board.move_task_to_subtask(row.task_id, parent.task_id, index)

    def _cmd_place(self, tokens: List[str]) -> None:
        if len(tokens) != 4:
            return self._usage('place <row> <lane|row> <pos>')
        row = self._row(tokens[1])
        index = _number(tokens[3], 'position') - 1
        if tokens[2].rstrip('.').isdigit():
            container = subtasks_container(self._row(tokens[2]).task_id)
        else:
            container = self._lane(tokens[2]).id
        forest = self.board.groups
        mutation = resolve_list_drop(forest, row.task_id, slot_of(forest, row.task_id),
                                     ListSlot(container, index))
        if mutation is None:
            self.message = 'Cannot place the task there.'
            return
        mutation.apply(self.board)

    # ---- drag simulation ----
    def _cmd_drag(self, tokens: List[str]) -> None:
        if len(tokens) not in (2, 3, 4):
            return self._usage('drag <row> [y [dx]]')
        row = self._row(tokens[1])
        for token in tokens[2:]:
            _coordinate(token, 'coordinate')
        if self.session.active:
            self.session.cancel()
        self.session.start(row.task_id, DRAG_ORIGIN_X, row.number + 0.5)
        if len(tokens) > 2:
            self._cmd_hover(['hover'] + tokens[2:])
            self._cmd_drop(['drop'])

    def _cmd_hover(self, tokens: List[str]) -> None:
        if len(tokens) not in (2, 3):
            return self._usage('hover <y> [dx]')
        y = _coordinate(tokens[1], 'y')
        dx = _coordinate(tokens[2], 'dx') if len(tokens) == 3 else 0.0
        rows = visible_rows(self.board.groups)
        hover = self.session.move(self.board.groups, DRAG_ORIGIN_X + dx, y, row_candidates(rows))
        if hover is None:
            self.message = 'No valid drop target here.'

    def _cmd_drop(self, tokens: List[str]) -> None:
        mutation = self.session.drop(self.board)
        if mutation is None:
            self.message = 'Nothing to drop on; drag cancelled.'

    def _cmd_cancel(self, tokens: List[str]) -> None:
        self.session.cancel()
        self.message = 'Drag cancelled.'

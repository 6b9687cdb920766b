"""Color & style helpers.

Decisions:
- Truecolor preferred; falls back to 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
- Palette overrides come from TASKTREE_* variables (environment or .env).
"""
from __future__ import annotations
import os, sys
from config import read_env_file

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_COLORTERM = os.environ.get("COLORTERM", "").lower()
_USE_TRUECOLOR = _ENABLE and any(tok in _COLORTERM for tok in ("truecolor", "24bit"))

def _code(part: str) -> str:
    """Generate ANSI escape code for a given style part."""
    return f"\033[{part}m" if _ENABLE else ''

def _hex_to_rgb(hex_code: str) -> tuple[int,int,int]:
    h = hex_code.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    idx = 16 + 36 * to_6(r) + 6 * to_6(g) + to_6(b)
    return f"\033[38;5;{idx}m"

def _from_hex(hex_code: str) -> str:
    if not _ENABLE:
        return ''
    r, g, b = _hex_to_rgb(hex_code)
    if _USE_TRUECOLOR:
        return f"\033[38;2;{r};{g};{b}m"
    return _fg_256(r, g, b)

def _valid_hex(value: str) -> bool:
    h = value.lstrip('#')
    return len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h)

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')
STRIKE = _code('9')

PALETTE_DEFAULTS = {
    'TASKTREE_PRIMARY': '#476EAE',
    'TASKTREE_TODO': '#48B3AF',
    'TASKTREE_INPROGRESS': '#F6FF99',
    'TASKTREE_BLOCKED': '#E36A6A',
    'TASKTREE_DONE': '#A7E399',
}

def _resolve_hex(key: str, file_values: dict[str, str]) -> str:
    for candidate in (os.environ.get(key), file_values.get(key)):
        if candidate and _valid_hex(candidate):
            return '#' + candidate.lstrip('#')
    return PALETTE_DEFAULTS[key]

_FILE_VALUES = read_env_file()
HEX = {key: _resolve_hex(key, _FILE_VALUES) for key in PALETTE_DEFAULTS}

PRIMARY = _from_hex(HEX['TASKTREE_PRIMARY'])

STATUS_COLOR = {
    'todo': _from_hex(HEX['TASKTREE_TODO']),
    'in_progress': _from_hex(HEX['TASKTREE_INPROGRESS']),
    'blocked': _from_hex(HEX['TASKTREE_BLOCKED']),
    'done': _from_hex(HEX['TASKTREE_DONE']),
}

STATUS_ICON = {
    'todo': '○',
    'in_progress': '◐',
    'blocked': '⊘',
    'done': '●',
}

HEADER_COLOR = PRIMARY
ID_COLOR = PRIMARY + BOLD
EMPTY_COLOR = DIM + PRIMARY
INDICATOR_COLOR = PRIMARY + BOLD

def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET

__all__ = [
    'color','RESET','BOLD','DIM','STRIKE','STATUS_COLOR','STATUS_ICON','HEADER_COLOR','ID_COLOR',
    'EMPTY_COLOR','INDICATOR_COLOR','HEX',
]

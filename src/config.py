"""Runtime settings.

Resolution order for every key: real environment variable > project .env
file > built-in default. The .env file uses plain KEY=VALUE lines; blank
lines and lines starting with '#' are skipped.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

ENV_FILE = Path(__file__).resolve().parent.parent / '.env'
PREFIX = 'TASKTREE_'


def read_env_file(path: Path = ENV_FILE) -> Dict[str, str]:
    """Parse TASKTREE_* entries from a .env file; missing file -> {}."""
    values: Dict[str, str] = {}
    if not path.exists():
        return values
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        if k.startswith(PREFIX):
            values[k] = v.strip().strip('"').strip("'")
    return values


def truthy(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass
class Settings:
    data_dir: Path
    log_dir: Path
    log_level: str = 'INFO'
    alt_screen: bool = True
    drop_policy: str = 'vertical'

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None,
             env_file: Path = ENV_FILE) -> "Settings":
        environ = os.environ if environ is None else environ
        file_values = read_env_file(env_file)

        def get(name: str) -> Optional[str]:
            key = PREFIX + name
            return environ.get(key) or file_values.get(key)

        return cls(
            data_dir=Path(get('DATA_DIR') or Path(__file__).resolve().parent.parent / 'data'),
            log_dir=Path(get('LOG_DIR') or Path.home() / '.tasktree' / 'logs'),
            log_level=(get('LOG_LEVEL') or 'INFO').upper(),
            alt_screen=truthy(get('ALT_SCREEN'), True),
            drop_policy=(get('DROP_POLICY') or 'vertical').lower(),
        )

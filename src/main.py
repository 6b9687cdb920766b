"""Main entry point for the terminal task tree board."""
import logging
from pathlib import Path
from typing import Optional

import click

from cli import CLI
from config import Settings
from drop import POLICIES, policy_for_name
from logger import CrashHandler
from storage import Storage, load_board


@click.command()
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Directory holding the stored forest (TASKTREE_DATA_DIR).')
@click.option('--policy', type=click.Choice(sorted(POLICIES)),
              help='Drag policy (TASKTREE_DROP_POLICY).')
@click.option('--alt-screen/--no-alt-screen', default=None,
              help='Use the terminal alternate screen (TASKTREE_ALT_SCREEN).')
@click.option('--log-level', help='Logging level (TASKTREE_LOG_LEVEL).')
def main(data_dir: Optional[Path], policy: Optional[str], alt_screen: Optional[bool],
         log_level: Optional[str]) -> None:
    settings = Settings.load()
    if data_dir is not None:
        settings.data_dir = data_dir
    if policy is not None:
        settings.drop_policy = policy
    if alt_screen is not None:
        settings.alt_screen = alt_screen
    if log_level is not None:
        settings.log_level = log_level.upper()

    CrashHandler(settings.log_dir, settings.log_level)
    try:
        drop_policy = policy_for_name(settings.drop_policy)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint='TASKTREE_DROP_POLICY') from exc
    storage = Storage(settings.data_dir)
    board = load_board(storage)
    logging.info('Loaded %s from %s', board, storage.path)
    CLI(board, storage, drop_policy, settings.alt_screen).run()


if __name__ == "__main__":
    main()

import logging
import os
import platform
import sys
import traceback
from datetime import datetime

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
LOG_PREFIX = 'app_'
LOG_SUFFIX = '.log'
KEEP_DAYS = 7


class CrashHandler:
    """Route logging to a dated file under log_dir and record uncaught
    exceptions in bugs.txt.

    Nothing is logged to the terminal while the board owns the screen.
    The file handler is only attached when the root logger has none yet.
    """

    def __init__(self, log_dir, level='INFO', bug_log_path=None):
        self.log_dir = str(log_dir)
        self.bug_log_path = bug_log_path or os.path.join(self.log_dir, 'bugs.txt')
        self.log_file = os.path.join(self.log_dir, f"{LOG_PREFIX}{datetime.now():%Y%m%d}{LOG_SUFFIX}")
        os.makedirs(self.log_dir, exist_ok=True)

        root = logging.getLogger()
        root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
        if not root.handlers:
            # delay: the file is opened on the first record
            handler = logging.FileHandler(self.log_file, encoding='utf-8', delay=True)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)
        sys.excepthook = self.handle_exception
        self._rotate_logs()

    def handle_exception(self, exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.error('Uncaught exception', exc_info=(exc_type, exc_value, exc_traceback))
        text = ''.join(traceback.format_exception(exc_type, exc_value, exc_traceback))
        print(text, file=sys.stderr)
        self._write_bug_report(exc_type, exc_value, text)

    def _write_bug_report(self, exc_type, exc_value, text):
        stamp = f'{datetime.now():%Y-%m-%d %H:%M:%S}'
        lines = [
            f'[{stamp}]',
            f'System: {platform.system()} {platform.release()}',
            f'Python: {sys.version}',
            '',
            f'{exc_type.__name__}: {exc_value}',
            '',
            'Traceback:',
            text,
            '-' * 50,
        ]
        try:
            with open(self.bug_log_path, 'a', encoding='utf-8') as f:
                f.write('\n'.join(lines) + '\n')
        except OSError as exc:
            logging.error('Could not write bug report %s: %s', self.bug_log_path, exc)

    def _rotate_logs(self, days_to_keep=KEEP_DAYS):
        """Delete app_*.log files last modified more than days_to_keep days ago."""
        now = datetime.now()
        try:
            names = os.listdir(self.log_dir)
        except OSError as exc:
            logging.error('Could not list %s: %s', self.log_dir, exc)
            return
        for name in names:
            if not (name.startswith(LOG_PREFIX) and name.endswith(LOG_SUFFIX)):
                continue
            path = os.path.join(self.log_dir, name)
            try:
                age = now - datetime.fromtimestamp(os.path.getmtime(path))
                if age.days > days_to_keep:
                    os.remove(path)
                    logging.info('Removed expired log %s', name)
            except OSError as exc:
                logging.error('Could not remove expired log %s: %s', name, exc)

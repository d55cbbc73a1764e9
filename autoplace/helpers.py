"""
helpers.py
----------
Description: Helper functions shared by the AutoPlace search, writers and command line tools.
"""
import os
import datetime
from typing import List

TIMESTAMP_FORMAT = '%d-%b-%Y_%H.%M.%S'


def run_timestamp(now: datetime.datetime = None) -> str:
    if now is None:
        now = datetime.datetime.now()
    return now.strftime(TIMESTAMP_FORMAT)


def log_file_name(label: str, timestamp: str) -> str:
    return f'autoplace_log_{label}_{timestamp}.txt'


def output_model_name(subject: str, prosthesis_type: str, label: str, timestamp: str) -> str:
    return f'{subject}_{prosthesis_type}_{label}_auto_marker_place_{timestamp}.osim'


def get_absolute_path(user_input: str) -> str:
    # Check if the user input is already an absolute path
    if os.path.isabs(user_input):
        return user_input
    return os.path.abspath(os.path.join(os.getcwd(), user_input))


def require_files(paths: List[str]) -> List[str]:
    """The subset of paths that do not exist on disk."""
    return [path for path in paths if path == '' or not os.path.exists(path)]


def format_table(rows: List[List[str]]) -> str:
    if len(rows) == 0:
        return ''
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    return '\n'.join('  '.join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip() for row in rows)

import logging

import pandas as pd

from core_logic import date_span
from models import Task, TaskStatus, TaskType, to_date

logger = logging.getLogger(__name__)

HOLIDAY_MEMBER = "HOLIDAY"

DEFAULT_TASK_MAPPING = {
    "Task Name": "Task Name",
    "ID": "ID",
    "Parent": "Parent",
    "Assignee": "Assignee",
    "Start Date": "Start Date",
    "End Date": "End Date",
    "Type": "Type",
    "Status": "Status",
    "Progress": "Progress",
    "Dependencies": "Dependencies",
    "Projected Hours": "Projected Hours",
    "Actual Hours": "Actual Hours",
    "Description": "Description",
}


def read_table(filepath):
    """Reads a CSV or Excel sheet into a DataFrame."""
    lowered = filepath.lower()
    if lowered.endswith('.csv'):
        return pd.read_csv(filepath)
    if lowered.endswith('.xlsx'):
        return pd.read_excel(filepath)
    raise ValueError("Unsupported file type. Please select a CSV or .xlsx file.")


def _cell(row, mapping, field):
    column = mapping.get(field)
    if not column or column not in row.index:
        return None
    value = row[column]
    if pd.isna(value):
        return None
    return value


def _text(value):
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _int(value, default=0):
    if value is None:
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _day(value):
    if value is None:
        raise ValueError("missing date")
    return to_date(pd.Timestamp(value).to_pydatetime())


def import_tasks(filepath, mapping=None):
    """
    Imports tasks from a CSV or .xlsx file.

    Rows without a task name are skipped. Rows without an ID get a positional
    one. Dependencies are a comma separated list of task IDs.
    """
    mapping = dict(DEFAULT_TASK_MAPPING, **(mapping or {}))
    df = read_table(filepath)

    for required in ("Task Name", "Start Date", "End Date"):
        if mapping.get(required) not in df.columns:
            raise ValueError(f"You must map a column to '{required}'.")

    tasks = []
    for index, row in df.iterrows():
        name = _text(_cell(row, mapping, "Task Name"))
        if name is None:
            continue

        try:
            start = _day(_cell(row, mapping, "Start Date"))
            end = _day(_cell(row, mapping, "End Date"))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid date in row {index + 2} ('{name}').")

        task_type = _text(_cell(row, mapping, "Type")) or TaskType.TASK
        if task_type not in TaskType.ALL:
            task_type = TaskType.TASK
        status = _text(_cell(row, mapping, "Status")) or TaskStatus.TODO
        if status not in TaskStatus.ALL:
            status = TaskStatus.TODO

        dependencies_str = _text(_cell(row, mapping, "Dependencies"))
        dependencies = [d.strip() for d in dependencies_str.split(",") if d.strip()] if dependencies_str else []

        tasks.append(Task(
            id=_text(_cell(row, mapping, "ID")) or f"task_{index}",
            name=name,
            start_date=start,
            end_date=end,
            parent_id=_text(_cell(row, mapping, "Parent")),
            assignee_id=_text(_cell(row, mapping, "Assignee")),
            type=task_type,
            status=status,
            progress=max(0, min(100, _int(_cell(row, mapping, "Progress")))),
            dependencies=dependencies,
            projected_hours=max(0, _int(_cell(row, mapping, "Projected Hours"))),
            actual_hours=max(0, _int(_cell(row, mapping, "Actual Hours"))),
            duration=(end - start).days + 1,
            description=_text(_cell(row, mapping, "Description")),
        ))

    logger.info("Imported %d tasks from %s", len(tasks), filepath)
    return tasks


def import_time_off(filepath):
    """
    Reads Member / Start Date / End Date rows.

    Returns (time_off, holidays): a dict of member id to the set of days off,
    and the set of project-wide holidays from rows whose member is HOLIDAY.
    """
    df = read_table(filepath)
    for required in ("Member", "Start Date", "End Date"):
        if required not in df.columns:
            raise ValueError(f"The column '{required}' does not exist in the file.")

    columns = {c: c for c in ("Member", "Start Date", "End Date")}
    time_off = {}
    holidays = set()
    for index, row in df.iterrows():
        member = _text(_cell(row, columns, "Member"))
        if member is None:
            continue

        try:
            start = _day(_cell(row, columns, "Start Date"))
            end = _day(_cell(row, columns, "End Date"))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid date in row {index + 2}.")
        if start > end:
            raise ValueError(f"Start date must be before end date (row {index + 2}).")

        days = set(date_span(start, end))
        if member.upper() == HOLIDAY_MEMBER:
            holidays |= days
        else:
            time_off.setdefault(member, set()).update(days)

    logger.info("Imported time off for %d members and %d holidays from %s", len(time_off), len(holidays), filepath)
    return time_off, holidays

"""
Unit tests for the importers module.

Tests cover:
- import_tasks: Column mapping, defaults, skipped rows and errors
- import_time_off: Member ranges and project-wide holidays
"""

import pytest
from datetime import date
import sys
import os

import pandas as pd

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from importers import import_tasks, import_time_off
from models import TaskStatus, TaskType


def write_csv(tmp_path, rows, name="data.csv"):
    path = tmp_path / name
    pd.DataFrame(rows).to_csv(path, index=False)
    return str(path)


class TestImportTasks:
    """Tests for reading tasks from a sheet."""

    def test_basic_rows(self, tmp_path):
        path = write_csv(tmp_path, [
            {"ID": "a", "Task Name": "Design", "Parent": None, "Assignee": "u1",
             "Start Date": "2024-01-10", "End Date": "2024-01-12", "Type": "Task",
             "Status": "In Progress", "Progress": 40, "Dependencies": None},
            {"ID": "b", "Task Name": "Build", "Parent": "a", "Assignee": None,
             "Start Date": "2024-01-13", "End Date": "2024-01-13", "Type": "Milestone",
             "Status": "Done", "Progress": None, "Dependencies": "a, x"},
        ])
        tasks = import_tasks(path)

        assert [t.id for t in tasks] == ["a", "b"]
        first, second = tasks
        assert first.start_date == date(2024, 1, 10)
        assert first.end_date == date(2024, 1, 12)
        assert first.parent_id is None
        assert first.assignee_id == "u1"
        assert first.progress == 40
        assert first.duration == 3
        assert second.parent_id == "a"
        assert second.type == TaskType.MILESTONE
        assert second.status == TaskStatus.TODO
        assert second.dependencies == ["a", "x"]

    def test_blank_names_skipped_and_ids_generated(self, tmp_path):
        path = write_csv(tmp_path, [
            {"Task Name": None, "Start Date": "2024-01-10", "End Date": "2024-01-12"},
            {"Task Name": "Only", "Start Date": "2024-01-10", "End Date": "2024-01-12"},
        ])
        tasks = import_tasks(path)
        assert [t.name for t in tasks] == ["Only"]
        assert tasks[0].id == "task_1"

    def test_custom_mapping(self, tmp_path):
        path = write_csv(tmp_path, [{"Name": "X", "From": "2024-03-01", "To": "2024-03-02"}])
        tasks = import_tasks(path, mapping={"Task Name": "Name", "Start Date": "From", "End Date": "To"})
        assert tasks[0].name == "X"
        assert tasks[0].end_date == date(2024, 3, 2)

    def test_missing_required_column(self, tmp_path):
        path = write_csv(tmp_path, [{"Task Name": "X", "Start Date": "2024-01-10"}])
        with pytest.raises(ValueError) as exc_info:
            import_tasks(path)
        assert "End Date" in str(exc_info.value)

    def test_invalid_date(self, tmp_path):
        path = write_csv(tmp_path, [{"Task Name": "X", "Start Date": "soon", "End Date": "2024-01-10"}])
        with pytest.raises(ValueError) as exc_info:
            import_tasks(path)
        assert "Invalid date" in str(exc_info.value)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "tasks.txt"
        path.write_text("Task Name\nX\n")
        with pytest.raises(ValueError) as exc_info:
            import_tasks(str(path))
        assert "Unsupported file type" in str(exc_info.value)

    def test_legacy_xls_rejected(self, tmp_path):
        path = tmp_path / "tasks.xls"
        path.write_bytes(b"")
        with pytest.raises(ValueError) as exc_info:
            import_tasks(str(path))
        assert "Unsupported file type" in str(exc_info.value)


class TestImportTimeOff:
    """Tests for reading time off and holidays."""

    def test_ranges_expand_per_member(self, tmp_path):
        path = write_csv(tmp_path, [
            {"Member": "u1", "Start Date": "2024-01-10", "End Date": "2024-01-12"},
            {"Member": "u1", "Start Date": "2024-01-20", "End Date": "2024-01-20"},
            {"Member": "holiday", "Start Date": "2024-01-15", "End Date": "2024-01-15"},
            {"Member": None, "Start Date": "2024-01-01", "End Date": "2024-01-02"},
        ])
        time_off, holidays = import_time_off(path)
        assert time_off == {"u1": {date(2024, 1, 10), date(2024, 1, 11), date(2024, 1, 12), date(2024, 1, 20)}}
        assert holidays == {date(2024, 1, 15)}

    def test_reversed_range_raises(self, tmp_path):
        path = write_csv(tmp_path, [{"Member": "u1", "Start Date": "2024-01-12", "End Date": "2024-01-10"}])
        with pytest.raises(ValueError) as exc_info:
            import_time_off(path)
        assert "Start date must be before end date" in str(exc_info.value)

    def test_missing_column(self, tmp_path):
        path = write_csv(tmp_path, [{"Member": "u1", "Start Date": "2024-01-12"}])
        with pytest.raises(ValueError):
            import_time_off(path)

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import List, Optional, Set
import logging

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class TaskType:
    TASK = 'Task'
    SUBTASK = 'Subtask'
    MILESTONE = 'Milestone'

    ALL = (TASK, SUBTASK, MILESTONE)


class TaskStatus:
    TODO = 'To Do'
    IN_PROGRESS = 'In Progress'
    COMPLETED = 'Completed'
    BLOCKED = 'Blocked'

    ALL = (TODO, IN_PROGRESS, COMPLETED, BLOCKED)


# --- Date Normalization ---

def to_date(value):
    """
    Normalizes a date, datetime or ISO-like string to a date-only value.

    Any time-of-day component is discarded so that coordinate math never
    sees a timezone or clock offset.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.strptime(text[:10], DATE_FORMAT).date()
        except ValueError:
            raise ValueError(f"Invalid date '{value}'. Please use YYYY-MM-DD.")
    raise ValueError(f"Invalid date '{value}'. Please use YYYY-MM-DD.")


def iso(value):
    return to_date(value).strftime(DATE_FORMAT)


def find_by_id(records, record_id):
    """Returns the first record with the given id, or None when the reference dangles."""
    if not record_id:
        return None
    return next((r for r in records if r.id == record_id), None)


# --- Records ---

@dataclass
class Task:
    """A schedulable row on the timeline."""

    id: str
    name: str
    start_date: date
    end_date: date
    parent_id: Optional[str] = None
    assignee_id: Optional[str] = None
    type: str = TaskType.TASK
    status: str = TaskStatus.TODO
    progress: int = 0
    dependencies: List[str] = field(default_factory=list)
    projected_hours: int = 0
    actual_hours: int = 0
    duration: int = 1
    description: Optional[str] = None

    @property
    def is_milestone(self):
        return self.type == TaskType.MILESTONE

    @property
    def is_root(self):
        return not self.parent_id

    @classmethod
    def from_dict(cls, data):
        start = to_date(data["startDate"])
        end = to_date(data["endDate"])
        progress = int(data.get("progress") or 0)
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            start_date=start,
            end_date=end,
            parent_id=data.get("parentId") or None,
            assignee_id=data.get("assigneeId") or None,
            type=data.get("type") or TaskType.TASK,
            status=data.get("status") or TaskStatus.TODO,
            progress=max(0, min(100, progress)),
            dependencies=list(data.get("dependencies") or []),
            projected_hours=max(0, int(data.get("projectedHours") or 0)),
            actual_hours=max(0, int(data.get("actualHours") or 0)),
            duration=int(data.get("duration") or (end - start).days + 1),
            description=data.get("description"),
        )

    def to_dict(self):
        record = {
            "id": self.id,
            "name": self.name,
            "parentId": self.parent_id,
            "assigneeId": self.assignee_id,
            "startDate": iso(self.start_date),
            "endDate": iso(self.end_date),
            "duration": self.duration,
            "status": self.status,
            "type": self.type,
            "dependencies": list(self.dependencies),
            "progress": self.progress,
            "projectedHours": self.projected_hours,
            "actualHours": self.actual_hours,
        }
        if self.description:
            record["description"] = self.description
        return record


@dataclass
class TeamMember:
    id: str
    name: str
    role: str = ""
    avatar: str = ""
    time_off: Set[date] = field(default_factory=set)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            role=data.get("role", ""),
            avatar=data.get("avatar", ""),
            time_off={to_date(d) for d in data.get("timeOff") or []},
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "avatar": self.avatar,
            "timeOff": sorted(iso(d) for d in self.time_off),
        }


@dataclass
class ProjectData:
    """Snapshot of the task list, team list and holiday set."""

    tasks: List[Task] = field(default_factory=list)
    team: List[TeamMember] = field(default_factory=list)
    holidays: Set[date] = field(default_factory=set)

    @classmethod
    def from_dict(cls, data):
        return cls(
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
            team=[TeamMember.from_dict(m) for m in data.get("team", [])],
            holidays={to_date(d) for d in data.get("holidays", [])},
        )

    def to_dict(self):
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "team": [m.to_dict() for m in self.team],
            "holidays": sorted(iso(d) for d in self.holidays),
        }

    def find_task(self, task_id):
        return find_by_id(self.tasks, task_id)

    def find_member(self, member_id):
        return find_by_id(self.team, member_id)

    def update_task_dates(self, task_id, start, end):
        """Swaps in a copy of the task carrying the new dates. Returns False for an unknown id."""
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                start, end = to_date(start), to_date(end)
                self.tasks[i] = replace(
                    task,
                    start_date=start,
                    end_date=end,
                    duration=(end - start).days + 1,
                )
                return True
        logger.debug("Date change for unknown task %s ignored", task_id)
        return False

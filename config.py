import os
from datetime import date, timedelta

# --- Timeline Geometry ---

DAY_WIDTH = 50
HEADER_HEIGHT = 60
ROW_HEIGHT = 48
SIDEBAR_WIDTH = 280
BAR_HEIGHT = 24
PROGRESS_HEIGHT = 4
RESIZE_HANDLE_WIDTH = 10
MILESTONE_RADIUS = 12
CONNECTOR_LEAD_OUT = 10

# Visible range padding around the earliest start and the latest end.
LEAD_BUFFER_DAYS = 5
TRAIL_BUFFER_DAYS = 15

# date.weekday(): Monday is 0, Sunday is 6
WEEKEND_DAYS = frozenset([5, 6])

# --- Colors ---

GROUP_COLORS = [
    '#0021A5',
    '#FA4616',
    '#22884C',
    '#53565A',
    '#6C5EF5',
    '#005796',
    '#F37021',
    '#A4D65E',
]
ORPHAN_COLOR = '#94a3b8'

chart_colors = {
    'sidebar': '#f8fafc',
    'header': '#f1f5f9',
    'grid': '#e2e8f0',
    'blackout': '#f8fafc',
    'workday': 'white',
    'holiday_label': '#fca5a5',
    'time_off_hatch': '#FA4616',
    'connector': '#94a3b8',
    'progress': 'white',
    'label': '#334155',
    'group_label': '#1e293b',
}

# --- Host Settings ---

READ_ONLY = os.getenv("GANTT_READ_ONLY", "0").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("GANTT_LOG_LEVEL", "INFO").upper()

# --- Default Data ---

default_team_data = [
    {"id": "u1", "name": "Alice Chen", "role": "Project Manager", "avatar": "", "time_off_offsets": [5]},
    {"id": "u2", "name": "Bob Smith", "role": "Frontend Dev", "avatar": "", "time_off_offsets": []},
    {"id": "u3", "name": "Charlie Kim", "role": "Backend Dev", "avatar": "", "time_off_offsets": [10, 11]},
    {"id": "u4", "name": "Diana Prince", "role": "Designer", "avatar": "", "time_off_offsets": []},
]

# Dates are stored as offsets from the day the template is loaded.
default_tasks_data = [
    {"id": "t_planning", "name": "Phase 1: Planning", "parentId": None, "assigneeId": "u1",
     "start": 0, "end": 3, "type": "Task", "status": "Completed", "progress": 100,
     "dependencies": [], "projectedHours": 10, "actualHours": 10},
    {"id": "t1", "name": "Project Kickoff", "parentId": "t_planning", "assigneeId": "u1",
     "start": 0, "end": 0, "type": "Milestone", "status": "Completed", "progress": 100,
     "dependencies": [], "projectedHours": 2, "actualHours": 2},
    {"id": "t2", "name": "Requirements Gathering", "parentId": "t_planning", "assigneeId": "u1",
     "start": 1, "end": 3, "type": "Subtask", "status": "Completed", "progress": 100,
     "dependencies": ["t1"], "projectedHours": 20, "actualHours": 24},
    {"id": "t_dev_phase", "name": "Phase 2: Core Development", "parentId": None, "assigneeId": None,
     "start": 4, "end": 12, "type": "Task", "status": "In Progress", "progress": 40,
     "dependencies": [], "projectedHours": 0, "actualHours": 0},
    {"id": "t3", "name": "Design System Mockups", "parentId": "t_dev_phase", "assigneeId": "u4",
     "start": 4, "end": 8, "type": "Subtask", "status": "In Progress", "progress": 60,
     "dependencies": ["t2"], "projectedHours": 40, "actualHours": 20},
    {"id": "t4", "name": "Database Schema", "parentId": "t_dev_phase", "assigneeId": "u3",
     "start": 4, "end": 6, "type": "Subtask", "status": "In Progress", "progress": 80,
     "dependencies": ["t2"], "projectedHours": 16, "actualHours": 12},
    {"id": "t5", "name": "API Development", "parentId": "t_dev_phase", "assigneeId": "u3",
     "start": 7, "end": 12, "type": "Subtask", "status": "To Do", "progress": 0,
     "dependencies": ["t4"], "projectedHours": 48, "actualHours": 0},
    {"id": "t_fe_phase", "name": "Phase 3: Frontend & Launch", "parentId": None, "assigneeId": None,
     "start": 9, "end": 16, "type": "Task", "status": "To Do", "progress": 0,
     "dependencies": [], "projectedHours": 0, "actualHours": 0},
    {"id": "t6", "name": "Frontend Implementation", "parentId": "t_fe_phase", "assigneeId": "u2",
     "start": 9, "end": 15, "type": "Subtask", "status": "To Do", "progress": 0,
     "dependencies": ["t3", "t5"], "projectedHours": 56, "actualHours": 0},
    {"id": "t7", "name": "Beta Launch", "parentId": "t_fe_phase", "assigneeId": "u1",
     "start": 16, "end": 16, "type": "Milestone", "status": "To Do", "progress": 0,
     "dependencies": ["t6"], "projectedHours": 0, "actualHours": 0},
]

default_holiday_offsets = [14]


def build_default_project(today=None):
    """Materializes the template into the record shape ProjectData.from_dict reads."""
    today = today or date.today()

    def on(offset):
        return (today + timedelta(days=offset)).isoformat()

    tasks = []
    for t in default_tasks_data:
        record = {k: v for k, v in t.items() if k not in ("start", "end")}
        record["startDate"] = on(t["start"])
        record["endDate"] = on(t["end"])
        record["duration"] = t["end"] - t["start"] + 1
        tasks.append(record)

    team = []
    for m in default_team_data:
        record = {k: v for k, v in m.items() if k != "time_off_offsets"}
        record["timeOff"] = [on(o) for o in m["time_off_offsets"]]
        team.append(record)

    return {
        "tasks": tasks,
        "team": team,
        "holidays": [on(o) for o in default_holiday_offsets],
    }

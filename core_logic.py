from datetime import date, timedelta
import collections
import logging
import math

from config import (
    DAY_WIDTH, ROW_HEIGHT, BAR_HEIGHT, RESIZE_HANDLE_WIDTH, MILESTONE_RADIUS,
    CONNECTOR_LEAD_OUT, LEAD_BUFFER_DAYS, TRAIL_BUFFER_DAYS, WEEKEND_DAYS,
    GROUP_COLORS, ORPHAN_COLOR,
)
from models import find_by_id, to_date

logger = logging.getLogger(__name__)

MOVE = 'move'
RESIZE = 'resize'

Timeline = collections.namedtuple('Timeline', ['start', 'end', 'days'])
Hierarchy = collections.namedtuple('Hierarchy', ['order', 'colors', 'headers'])
Bar = collections.namedtuple(
    'Bar', ['task_id', 'row', 'x', 'y', 'width', 'color', 'milestone', 'progress_width', 'start', 'end'])
Route = collections.namedtuple('Route', ['task_id', 'dependency_id', 'points'])
DayShade = collections.namedtuple('DayShade', ['index', 'day', 'x', 'weekend', 'holiday'])
TimeOffCell = collections.namedtuple('TimeOffCell', ['task_id', 'member_id', 'row', 'day', 'x', 'y'])


# --- Timeline Range ---

def date_span(start_date, end_date):
    """Every calendar day from start_date to end_date, inclusive. Empty when end precedes start."""
    start_date, end_date = to_date(start_date), to_date(end_date)
    days = []
    current = start_date
    while current <= end_date:
        days.append(current)
        current += timedelta(days=1)
    return days


def calculate_timeline(tasks, today=None):
    if not tasks:
        anchor = to_date(today or date.today())
        return Timeline(anchor, anchor, [anchor])

    min_start = min(to_date(t.start_date) for t in tasks)
    max_end = max(to_date(t.end_date) for t in tasks)

    start = min_start - timedelta(days=LEAD_BUFFER_DAYS)
    end = max_end + timedelta(days=TRAIL_BUFFER_DAYS)
    return Timeline(start, end, date_span(start, end))


# --- Date / Coordinate Mapping ---

def days_between(first, second):
    return (to_date(second) - to_date(first)).days


def x_for_date(day, range_start, day_width=DAY_WIDTH):
    return days_between(range_start, day) * day_width


def pixels_to_days(pixel_delta, day_width=DAY_WIDTH):
    # Half-up rounding: crossing the middle of a day snaps to the next one.
    return int(math.floor(pixel_delta / day_width + 0.5))


def date_for_x(x, range_start, day_width=DAY_WIDTH):
    return to_date(range_start) + timedelta(days=pixels_to_days(x, day_width))


# --- Hierarchy & Colors ---

def group_header_ids(tasks):
    """Ids named as a parent by at least one task. These rows get a label but no bar."""
    return {t.parent_id for t in tasks if t.parent_id}


def resolve_hierarchy(tasks):
    """
    Orders tasks as root, its direct children, next root, ... and then orphans.

    The grouping is exactly two tiers. A task whose parent is not a root
    (missing, or itself a child) is treated as an orphan rather than nested
    deeper, so no cycle detection is needed.
    """
    roots = [t for t in tasks if t.is_root]
    order = []
    colors = {}

    for index, root in enumerate(roots):
        color = GROUP_COLORS[index % len(GROUP_COLORS)]
        colors[root.id] = color
        order.append(root)

        for child in tasks:
            if child.parent_id == root.id:
                colors[child.id] = color
                order.append(child)

    placed = {t.id for t in order}
    for task in tasks:
        if task.id not in placed:
            logger.debug("Task %s has no root parent (%s), placing it last", task.id, task.parent_id)
            colors[task.id] = ORPHAN_COLOR
            order.append(task)

    return Hierarchy(order, colors, group_header_ids(tasks))


# --- Blackout Overlays ---

def is_weekend(day):
    return to_date(day).weekday() in WEEKEND_DAYS


def is_holiday(day, holidays):
    return to_date(day) in {to_date(h) for h in holidays}


def calendar_blackouts(timeline, holidays, day_width=DAY_WIDTH):
    """Days of the visible range that are a weekend or a holiday. Each day is listed once."""
    holiday_dates = {to_date(h) for h in holidays}
    shades = []
    for index, day in enumerate(timeline.days):
        weekend = is_weekend(day)
        holiday = day in holiday_dates
        if weekend or holiday:
            shades.append(DayShade(index, day, index * day_width, weekend, holiday))
    return shades


def row_time_off(order, team, timeline, day_width=DAY_WIDTH, row_height=ROW_HEIGHT):
    """Per-row cells for days the row's assignee is off, limited to the visible range."""
    cells = []
    for row, task in enumerate(order):
        member = find_by_id(team, task.assignee_id)
        if member is None:
            continue

        for off_day in sorted(to_date(d) for d in member.time_off):
            if off_day < timeline.start or off_day > timeline.end:
                continue
            x = x_for_date(off_day, timeline.start, day_width)
            cells.append(TimeOffCell(task.id, member.id, row, off_day, x, row * row_height))
    return cells


# --- Bars ---

def _display_dates(task, preview):
    if preview is not None and preview[0] == task.id:
        return to_date(preview[1]), to_date(preview[2])
    return to_date(task.start_date), to_date(task.end_date)


def layout_bars(order, colors, timeline, headers=None, preview=None,
                day_width=DAY_WIDTH, row_height=ROW_HEIGHT):
    """
    Geometry for every schedulable row.

    preview is an optional (task_id, start, end) triple that overrides the
    dates of the task currently being dragged.
    """
    if headers is None:
        headers = group_header_ids(order)

    bars = []
    for row, task in enumerate(order):
        if task.id in headers:
            continue

        start, end = _display_dates(task, preview)
        x = x_for_date(min(start, end), timeline.start, day_width)
        span_days = abs((end - start).days) + 1
        width = max(span_days * day_width, day_width)
        y = row * row_height + (row_height - BAR_HEIGHT) / 2
        progress = max(0, min(100, task.progress))

        bars.append(Bar(
            task_id=task.id,
            row=row,
            x=x,
            y=y,
            width=width,
            color=colors.get(task.id, ORPHAN_COLOR),
            milestone=task.is_milestone,
            progress_width=width * progress / 100,
            start=start,
            end=end,
        ))
    return bars


def hit_test(bars, x, y, read_only=False):
    """
    Resolves a grid-body point to (task_id, mode), or None.

    The trailing edge handle takes priority over the body. Milestones and
    read-only charts have no handle.
    """
    for bar in reversed(bars):
        if bar.milestone:
            cy = bar.y + BAR_HEIGHT / 2
            if abs(x - bar.x) + abs(y - cy) <= MILESTONE_RADIUS:
                return bar.task_id, MOVE
            continue

        if not (bar.y <= y <= bar.y + BAR_HEIGHT):
            continue

        right_edge = bar.x + bar.width
        if not read_only and abs(x - right_edge) <= RESIZE_HANDLE_WIDTH / 2:
            return bar.task_id, RESIZE
        if bar.x <= x <= right_edge:
            return bar.task_id, MOVE
    return None


# --- Dependency Routing ---

def connector_x(task, range_start, day_width=DAY_WIDTH, preview=None):
    """Right edge of a bar, or the point of a milestone."""
    start, end = _display_dates(task, preview)
    x = x_for_date(max(start, end), range_start, day_width)
    return x if task.is_milestone else x + day_width


def route_dependencies(order, timeline, headers=None, preview=None,
                       day_width=DAY_WIDTH, row_height=ROW_HEIGHT):
    """
    Orthogonal connector paths from each prerequisite's end to its dependent's start.

    Group headers never act as dependents, but they stay valid prerequisites.
    Dependency ids that are not in the rendering order, or that name the task
    itself, are skipped.
    """
    if headers is None:
        headers = group_header_ids(order)

    rows = {}
    for row, task in enumerate(order):
        rows.setdefault(task.id, row)

    routes = []
    for row, task in enumerate(order):
        if task.id in headers or not task.dependencies:
            continue

        start, end = _display_dates(task, preview)
        start_x = x_for_date(min(start, end), timeline.start, day_width)
        y = row * row_height + row_height / 2

        for dependency_id in task.dependencies:
            if dependency_id == task.id:
                logger.debug("Skipping self dependency on %s", task.id)
                continue
            dep_row = rows.get(dependency_id)
            if dep_row is None:
                logger.debug("Skipping dangling dependency %s -> %s", task.id, dependency_id)
                continue

            dep_end_x = connector_x(order[dep_row], timeline.start, day_width, preview)
            dep_y = dep_row * row_height + row_height / 2
            turn_x = dep_end_x + CONNECTOR_LEAD_OUT

            points = [(dep_end_x, dep_y), (turn_x, dep_y), (turn_x, y), (start_x, y)]
            routes.append(Route(task.id, dependency_id, points))
    return routes

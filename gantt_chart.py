import logging

from matplotlib.patches import Rectangle, Polygon, FancyArrowPatch
from matplotlib.path import Path
from matplotlib.transforms import Affine2D

from config import (
    DAY_WIDTH, HEADER_HEIGHT, ROW_HEIGHT, SIDEBAR_WIDTH, BAR_HEIGHT, PROGRESS_HEIGHT,
    MILESTONE_RADIUS, chart_colors,
)
from core_logic import (
    calculate_timeline, resolve_hierarchy, layout_bars, hit_test,
    route_dependencies, calendar_blackouts, row_time_off,
)
from interaction import DragController
from models import TaskStatus

logger = logging.getLogger(__name__)


class GanttChart:
    """
    Renders a ProjectData snapshot onto a matplotlib Figure and drives the
    drag/resize gestures on its canvas.

    Data coordinates are pixels: x = 0 is the first visible day, the sidebar
    sits at negative x, and y grows downwards from the top of the header.
    """

    def __init__(self, figure, project, on_task_date_change=None, read_only=False, today=None):
        self.figure = figure
        self.project = project
        self.today = today
        self.ax = figure.add_axes([0, 0, 1, 1])

        self.timeline = None
        self.hierarchy = None
        self.bars = []
        self.routes = []

        self.controller = DragController(
            on_task_date_change=on_task_date_change,
            read_only=read_only,
            canvas=figure.canvas,
            pointer_x=self._pointer_x,
            on_change=self.redraw,
        )
        self._press_cid = figure.canvas.mpl_connect('button_press_event', self.on_press)

    @property
    def read_only(self):
        return self.controller.read_only

    @read_only.setter
    def read_only(self, value):
        self.controller.read_only = value
        self.redraw()

    def set_project(self, project):
        self.project = project
        self.redraw()

    # --- Pointer Handling ---

    def _to_data(self, event):
        return self.ax.transData.inverted().transform((event.x, event.y))

    def _pointer_x(self, event):
        # Display coordinates keep working once the pointer leaves the axes.
        if event.x is None:
            return None
        return self._to_data(event)[0]

    def on_press(self, event):
        if self.read_only or event.x is None:
            return
        if event.button is not None and event.button != 1:
            return

        x, y = self._to_data(event)
        hit = hit_test(self.bars, x, y - HEADER_HEIGHT, self.read_only)
        if hit is None:
            return

        task_id, mode = hit
        task = self.project.find_task(task_id)
        if self.controller.press(task, mode, x):
            self.redraw()

    def close(self):
        """Releases the gesture listeners. Call before the hosting view goes away."""
        self.controller.teardown()
        if self._press_cid is not None:
            self.figure.canvas.mpl_disconnect(self._press_cid)
            self._press_cid = None

    # --- Export ---

    def export(self, filepath, dpi=300):
        self.draw()
        self.figure.savefig(filepath, bbox_inches='tight', dpi=dpi)
        logger.info("Chart exported to %s", filepath)

    # --- Drawing ---

    def redraw(self):
        self.draw()
        self.figure.canvas.draw_idle()

    def draw(self):
        self.ax.clear()
        tasks = self.project.tasks

        self.timeline = calculate_timeline(tasks, self.today)
        self.hierarchy = resolve_hierarchy(tasks)
        preview = self.controller.preview()
        order = self.hierarchy.order

        self.bars = layout_bars(order, self.hierarchy.colors, self.timeline, self.hierarchy.headers, preview)
        self.routes = route_dependencies(order, self.timeline, self.hierarchy.headers, preview)

        chart_width = len(self.timeline.days) * DAY_WIDTH
        chart_height = len(order) * ROW_HEIGHT + HEADER_HEIGHT
        self._setup_axes(chart_width, chart_height)

        # Grid body artists are offset below the header.
        body = Affine2D().translate(0, HEADER_HEIGHT) + self.ax.transData

        self._draw_header()
        self._draw_calendar(body, chart_height - HEADER_HEIGHT)
        self._draw_time_off(body)
        self._draw_dependencies(body)
        self._draw_bars(body, preview)
        self._draw_sidebar(chart_height)

        if not tasks:
            self.ax.text(0.5, 0.5, "No tasks to display.", transform=self.ax.transAxes,
                         horizontalalignment='center', verticalalignment='center', color=chart_colors['label'])

    def _setup_axes(self, chart_width, chart_height):
        # Keep at least one empty row so a blank project still has a body.
        height = max(chart_height, HEADER_HEIGHT + ROW_HEIGHT)
        dpi = self.figure.get_dpi()
        self.figure.set_size_inches((SIDEBAR_WIDTH + chart_width) / dpi, height / dpi)
        self.ax.set_xlim(-SIDEBAR_WIDTH, chart_width)
        self.ax.set_ylim(height, 0)
        self.ax.set_axis_off()

    def _draw_header(self):
        for i, day in enumerate(self.timeline.days):
            x = i * DAY_WIDTH
            self.ax.add_patch(Rectangle((x, 0), DAY_WIDTH, HEADER_HEIGHT, facecolor=chart_colors['header'],
                                        edgecolor=chart_colors['grid'], linewidth=1))
            self.ax.text(x + DAY_WIDTH / 2, 25, day.strftime('%b'), ha='center', va='center',
                         fontsize=7, fontweight='bold', color='#64748b')
            self.ax.text(x + DAY_WIDTH / 2, 45, str(day.day), ha='center', va='center',
                         fontsize=8, color=chart_colors['label'])

    def _draw_calendar(self, body, body_height):
        for i in range(len(self.timeline.days)):
            self.ax.add_patch(Rectangle((i * DAY_WIDTH, 0), DAY_WIDTH, body_height, transform=body,
                                        facecolor=chart_colors['workday'], edgecolor=chart_colors['header'],
                                        zorder=0))

        for shade in calendar_blackouts(self.timeline, self.project.holidays):
            self.ax.add_patch(Rectangle((shade.x, 0), DAY_WIDTH, body_height, transform=body,
                                        facecolor=chart_colors['blackout'], edgecolor=chart_colors['header'],
                                        zorder=0.5))
            if shade.holiday:
                self.ax.text(shade.x + DAY_WIDTH / 2, 20, "HOLIDAY", transform=body, rotation=270,
                             ha='center', va='top', fontsize=7, alpha=0.5,
                             color=chart_colors['holiday_label'], zorder=0.6)

    def _draw_time_off(self, body):
        for cell in row_time_off(self.hierarchy.order, self.project.team, self.timeline):
            self.ax.add_patch(Rectangle((cell.x, cell.y), DAY_WIDTH, ROW_HEIGHT, transform=body,
                                        fill=False, hatch='//', edgecolor=chart_colors['time_off_hatch'],
                                        linewidth=0, alpha=0.3, zorder=1))

    def _draw_dependencies(self, body):
        for route in self.routes:
            codes = [Path.MOVETO] + [Path.LINETO] * (len(route.points) - 1)
            arrow = FancyArrowPatch(path=Path(route.points, codes), arrowstyle='-|>', mutation_scale=10,
                                    color=chart_colors['connector'], linewidth=1.5, transform=body, zorder=2)
            self.ax.add_patch(arrow)

    def _draw_bars(self, body, preview):
        dragged_id = preview[0] if preview else None
        statuses = {t.id: t.status for t in self.hierarchy.order}

        for bar in self.bars:
            if bar.milestone:
                cx, cy = bar.x, bar.y + BAR_HEIGHT / 2
                r = MILESTONE_RADIUS
                self.ax.add_patch(Polygon([(cx, cy - r), (cx + r, cy), (cx, cy + r), (cx - r, cy)], closed=True,
                                          transform=body, facecolor=bar.color, edgecolor=(0, 0, 0, 0.2),
                                          linewidth=1, zorder=3))
                continue

            if bar.task_id == dragged_id:
                alpha = 0.7
            elif statuses.get(bar.task_id) == TaskStatus.COMPLETED:
                alpha = 0.6
            else:
                alpha = 0.9

            self.ax.add_patch(Rectangle((bar.x, bar.y), bar.width, BAR_HEIGHT, transform=body,
                                        facecolor=bar.color, alpha=alpha, linewidth=0, zorder=3))
            if bar.progress_width > 0:
                self.ax.add_patch(Rectangle((bar.x, bar.y + BAR_HEIGHT - PROGRESS_HEIGHT), bar.progress_width,
                                            PROGRESS_HEIGHT, transform=body, facecolor=chart_colors['progress'],
                                            alpha=0.7, linewidth=0, zorder=3.5))

    def _draw_sidebar(self, chart_height):
        self.ax.add_patch(Rectangle((-SIDEBAR_WIDTH, 0), SIDEBAR_WIDTH, chart_height,
                                    facecolor=chart_colors['sidebar'], edgecolor=chart_colors['grid'], zorder=5))
        self.ax.text(-SIDEBAR_WIDTH + 20, 40, "Task Hierarchy", fontweight='bold', va='center',
                     color=chart_colors['label'], zorder=6)

        headers = self.hierarchy.headers
        for index, task in enumerate(self.hierarchy.order):
            top = HEADER_HEIGHT + index * ROW_HEIGHT
            is_header = task.id in headers
            is_child = not task.is_root
            completed = task.status == TaskStatus.COMPLETED

            self.ax.add_patch(Rectangle((-SIDEBAR_WIDTH, top), SIDEBAR_WIDTH, ROW_HEIGHT, facecolor='white',
                                        edgecolor=chart_colors['header'], alpha=0.95, zorder=5))
            self.ax.add_patch(Rectangle((-SIDEBAR_WIDTH, top), 4, ROW_HEIGHT,
                                        facecolor=self.hierarchy.colors[task.id], linewidth=0, zorder=6))

            if is_header:
                weight, color = 'heavy', chart_colors['group_label']
            else:
                weight, color = ('normal' if is_child else 'bold'), chart_colors['label']
            self.ax.text(-SIDEBAR_WIDTH + (40 if is_child else 15), top + ROW_HEIGHT / 2, task.name,
                         fontsize=9 if is_header else 8, fontweight=weight, color=color,
                         alpha=0.6 if completed else 1.0, va='center', zorder=6, clip_on=True)

            member = self.project.find_member(task.assignee_id)
            if member is not None:
                initials = "".join(part[0] for part in member.name.split()[:2]).upper()
                self.ax.text(-24, top + ROW_HEIGHT / 2, initials, ha='center', va='center', fontsize=7,
                             color='white', zorder=7,
                             bbox=dict(boxstyle='circle', facecolor=self.hierarchy.colors[task.id], linewidth=0))

from datetime import timedelta
import logging

from config import DAY_WIDTH
from core_logic import MOVE, RESIZE, pixels_to_days
from models import iso, to_date

logger = logging.getLogger(__name__)

IDLE = 'idle'
DRAGGING = 'dragging'


def apply_drag(mode, initial_start, initial_end, days_delta):
    """
    New (start, end) for a gesture. A move shifts both ends; a resize only
    shifts the end and never lets it precede the start.
    """
    start, end = to_date(initial_start), to_date(initial_end)
    shift = timedelta(days=days_delta)

    if mode == MOVE:
        return start + shift, end + shift

    end = end + shift
    if end < start:
        end = start
    return start, end


class DragSession:
    """One armed gesture. The initial dates are never modified while dragging."""

    def __init__(self, task_id, mode, start_x, initial_start, initial_end, day_width=DAY_WIDTH):
        self.task_id = task_id
        self.mode = mode
        self.start_x = start_x
        self.initial_start = to_date(initial_start)
        self.initial_end = to_date(initial_end)
        self.current_x_diff = 0
        self.day_width = day_width

    @property
    def days_delta(self):
        return pixels_to_days(self.current_x_diff, self.day_width)

    def preview_dates(self):
        return apply_drag(self.mode, self.initial_start, self.initial_end, self.days_delta)

    def preview(self):
        """(task_id, start, end) triple understood by the layout functions."""
        start, end = self.preview_dates()
        return self.task_id, start, end


class PointerSubscription:
    """
    Motion and release callbacks connected on a canvas for the length of one gesture.

    The canvas only needs mpl_connect / mpl_disconnect.
    """

    def __init__(self, canvas, on_motion, on_release):
        self.canvas = canvas
        self._cids = [
            canvas.mpl_connect('motion_notify_event', on_motion),
            canvas.mpl_connect('button_release_event', on_release),
        ]

    @property
    def active(self):
        return bool(self._cids)

    def release(self):
        cids, self._cids = self._cids, []
        for cid in cids:
            self.canvas.mpl_disconnect(cid)


class DragController:
    """
    Idle/Dragging state machine behind the move and resize gestures.

    press() arms a session from Idle, move() updates its pixel delta and
    release() commits the new dates through on_task_date_change, once, and
    returns to Idle. When a canvas is given, pointer motion and release are
    subscribed only while a session is armed; pointer_x converts a canvas
    event to a timeline x coordinate (or None to ignore the event).
    on_change fires after every delta update and after each commit so the
    host can redraw the preview.
    """

    def __init__(self, on_task_date_change=None, read_only=False, canvas=None,
                 pointer_x=None, on_change=None, day_width=DAY_WIDTH):
        self.on_task_date_change = on_task_date_change
        self.canvas = canvas
        self.pointer_x = pointer_x or (lambda event: event.xdata)
        self.on_change = on_change
        self.day_width = day_width
        self._session = None
        self._subscription = None
        self.read_only = read_only

    @property
    def read_only(self):
        return self._read_only

    @read_only.setter
    def read_only(self, value):
        self._read_only = bool(value)
        if self._read_only:
            self.teardown()

    @property
    def state(self):
        return DRAGGING if self._session is not None else IDLE

    @property
    def session(self):
        return self._session

    def preview(self):
        return self._session.preview() if self._session is not None else None

    def press(self, task, mode, x):
        """Arms a gesture on task. Returns True when the machine moved to Dragging."""
        if self.read_only or task is None:
            return False
        if self._session is not None:
            logger.debug("Ignoring press on %s, a drag of %s is active", task.id, self._session.task_id)
            return False
        if mode not in (MOVE, RESIZE):
            return False
        if mode == RESIZE and task.is_milestone:
            return False

        self._session = DragSession(task.id, mode, x, task.start_date, task.end_date, self.day_width)
        if self.canvas is not None:
            self._subscription = PointerSubscription(self.canvas, self._on_motion, self._on_release)
        logger.debug("Started %s of task %s at x=%s", mode, task.id, x)
        return True

    def move(self, x):
        if self._session is None:
            return
        self._session.current_x_diff = x - self._session.start_x
        self._changed()

    def release(self):
        """
        Ends the gesture. Returns the committed (start, end) ISO strings, or
        None when no gesture was active.
        """
        session = self._session
        if session is None:
            return None

        self._end_session()
        start, end = session.preview_dates()
        new_start, new_end = iso(start), iso(end)

        if self.on_task_date_change is None:
            logger.debug("No date change callback, discarding drag of %s", session.task_id)
        else:
            logger.info("Committing %s of task %s: %s -> %s", session.mode, session.task_id, new_start, new_end)
            self.on_task_date_change(session.task_id, new_start, new_end)
        self._changed()
        return new_start, new_end

    def teardown(self):
        """Drops any active gesture without committing it."""
        if self._session is not None:
            logger.debug("Discarding drag of %s on teardown", self._session.task_id)
        self._end_session()

    def _end_session(self):
        self._session = None
        if self._subscription is not None:
            self._subscription.release()
            self._subscription = None

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    def _on_motion(self, event):
        x = self.pointer_x(event)
        if x is None:
            return
        self.move(x)

    def _on_release(self, event):
        self.release()

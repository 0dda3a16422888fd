import tkinter as tk
from tkinter import ttk, filedialog, messagebox
import logging

from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

# Local imports
import config
from config import build_default_project
from gantt_chart import GanttChart
from importers import import_tasks, import_time_off
from models import ProjectData

logger = logging.getLogger(__name__)


class GanttChartApp(tk.Tk):
    def __init__(self, read_only=config.READ_ONLY):
        super().__init__()
        self.title("Project Timeline")
        self.geometry("1600x800")

        # --- App State ---
        self.project = ProjectData.from_dict(build_default_project())
        self.read_only_var = tk.BooleanVar(value=read_only)
        self.status_var = tk.StringVar(value="")

        # --- Menu Bar ---
        self.create_menu()

        # --- Main Layout ---
        self.chart_frame = ttk.Frame(self)
        self.chart_frame.pack(side=tk.TOP, fill=tk.BOTH, expand=True)
        ttk.Label(self, textvariable=self.status_var, anchor="w", padding=(10, 2)).pack(side=tk.BOTTOM, fill=tk.X)

        # --- Initialization ---
        self.setup_chart_canvas()
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self.refresh()

    def setup_chart_canvas(self):
        self.figure = Figure(dpi=100)
        self.canvas = FigureCanvasTkAgg(self.figure, self.chart_frame)
        self.canvas.get_tk_widget().pack(side=tk.TOP, fill=tk.BOTH, expand=True)
        self.chart = GanttChart(self.figure, self.project,
                                on_task_date_change=self.on_task_date_change,
                                read_only=self.read_only_var.get())

    def create_menu(self):
        menubar = tk.Menu(self)
        self.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Load Template", command=self.load_template)
        file_menu.add_separator()
        file_menu.add_command(label="Import Tasks...", command=self.import_tasks)
        file_menu.add_command(label="Import Time Off...", command=self.import_time_off)
        file_menu.add_separator()
        file_menu.add_command(label="Export Chart...", command=self.export_chart)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.on_close)

        view_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="View", menu=view_menu)
        view_menu.add_checkbutton(label="Read Only", variable=self.read_only_var, command=self.on_read_only_change)

    # --- Task Store ---

    def on_task_date_change(self, task_id, new_start, new_end):
        if self.project.update_task_dates(task_id, new_start, new_end):
            task = self.project.find_task(task_id)
            self.status_var.set(f"{task.name}: {new_start} to {new_end}")
        self.refresh()

    def on_read_only_change(self):
        self.chart.read_only = self.read_only_var.get()
        self.status_var.set("Read only" if self.read_only_var.get() else "")

    def refresh(self):
        try:
            self.chart.set_project(self.project)
        except Exception as e:
            logger.exception("Could not update chart")
            messagebox.showerror("Error", f"Could not update chart: {e}")

    def load_template(self):
        self.project = ProjectData.from_dict(build_default_project())
        self.refresh()

    def import_tasks(self):
        filepath = filedialog.askopenfilename(
            title="Import Tasks",
            filetypes=[("Spreadsheets", "*.csv *.xlsx"), ("All Files", "*.*")]
        )
        if not filepath:
            return

        try:
            tasks = import_tasks(filepath)
        except Exception as e:
            messagebox.showerror("Import Error", f"An error occurred while importing tasks: {e}")
            return

        self.project = ProjectData(tasks=tasks, team=self.project.team, holidays=self.project.holidays)
        self.refresh()

    def import_time_off(self):
        filepath = filedialog.askopenfilename(
            title="Import Time Off",
            filetypes=[("Spreadsheets", "*.csv *.xlsx"), ("All Files", "*.*")]
        )
        if not filepath:
            return

        try:
            time_off, holidays = import_time_off(filepath)
        except Exception as e:
            messagebox.showerror("Import Error", f"An error occurred while importing time off: {e}")
            return

        for member in self.project.team:
            member.time_off |= time_off.get(member.id, set())
        unknown = set(time_off) - {m.id for m in self.project.team}
        if unknown:
            logger.warning("Time off for unknown members ignored: %s", ", ".join(sorted(unknown)))
        self.project.holidays |= holidays
        self.refresh()

    def export_chart(self):
        if not self.project.tasks:
            messagebox.showinfo("Export Chart", "There is nothing to export.")
            return

        filepath = filedialog.asksaveasfilename(
            title="Export Gantt Chart",
            defaultextension=".png",
            filetypes=[
                ("PNG Image", "*.png"),
                ("PDF Document", "*.pdf"),
                ("SVG Vector Image", "*.svg"),
                ("All Files", "*.*")
            ]
        )
        if not filepath:
            return

        try:
            self.chart.export(filepath)
            messagebox.showinfo("Export Successful", f"Chart successfully saved to\n{filepath}")
        except Exception as e:
            messagebox.showerror("Export Error", f"An error occurred while exporting the chart: {e}")

    def on_close(self):
        self.chart.close()
        self.destroy()


def main():
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = GanttChartApp()
    app.mainloop()


if __name__ == "__main__":
    main()

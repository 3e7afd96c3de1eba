"""Excel timetable workbooks: one sheet per group, teacher or room."""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .constants import DAYS, PERIODS
from .models import SchoolData
from .scheduler.models import ScheduleAssignment
from .views import ScheduleView, ViewCell, ViewType, build_view, display_names

TITLES = {
    ViewType.GROUP: "Class Timetable",
    ViewType.TEACHER: "Teacher Timetable",
    ViewType.ROOM: "Room Timetable",
}

DAY_NAMES = {
    "Mon": "Monday",
    "Tue": "Tuesday",
    "Wed": "Wednesday",
    "Thu": "Thursday",
    "Fri": "Friday",
}

# Fonts
FONT_TITLE = Font(name="Times New Roman", size=16, bold=True)
FONT_NAME = Font(name="Times New Roman", size=14, bold=True)
FONT_SUBTITLE = Font(name="Times New Roman", size=11, italic=True)
FONT_HEADER = Font(name="Times New Roman", size=11, bold=True)
FONT_DAY = Font(name="Times New Roman", size=11, bold=True)
FONT_CELL = Font(name="Times New Roman", size=9, bold=False)

# Alignments
ALIGN_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)

# Borders
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

# Lunch column shading
FILL_LUNCH = PatternFill(start_color="E0E0E0", end_color="E0E0E0", fill_type="solid")

HEADER_ROW = 4
FIRST_DAY_ROW = 5


class TimetableExcelGenerator:
    """Renders per-viewer timetables into an Excel workbook."""

    def __init__(self, data: SchoolData, view: ViewType, lunch_period: int = 5):
        """Initialize generator.

        Args:
            data: School data for name and period-time lookups
            view: Whose timetables to render
            lunch_period: Period column shaded as lunch
        """
        self.data = data
        self.view = view
        self.lunch_period = lunch_period
        self.names = display_names(data)
        self.period_times = data.period_times()
        self.groups = data.groups_by_id

    @staticmethod
    def sanitize_sheet_name(name: str) -> str:
        """Remove characters Excel forbids in sheet names (max 31 chars)."""
        cleaned = name
        for char in r"/\*?:[]":
            cleaned = cleaned.replace(char, "")
        return cleaned[:31] or "Sheet"

    def format_cell_content(self, cell: ViewCell) -> str:
        """Multi-line cell text; the line shown depends on the view."""
        lines = [cell.subject_id, cell.subject_name]
        if self.view != ViewType.TEACHER and cell.teacher_name:
            lines.append(cell.teacher_name)
        if self.view != ViewType.GROUP:
            lines.append(", ".join(cell.group_names))
        if self.view != ViewType.ROOM:
            lines.append(cell.room_id)
        return "\n".join(line for line in lines if line)

    def advisor_label(self, group_id: str) -> str:
        group = self.groups.get(group_id)
        advisors = " / ".join(group.advisor_names) if group else ""
        return f"Advisor: {advisors or '-'}"

    def create_workbook(
        self, assignments: list[ScheduleAssignment], selected_id: str | None = None
    ) -> Workbook:
        """Create a workbook with one sheet per viewer, sorted by id."""
        wb = Workbook()
        wb.remove(wb.active)

        schedule = build_view(self.data, assignments, self.view, selected_id)
        used_titles: set[str] = set()
        for resource_id in sorted(schedule):
            title = self.sanitize_sheet_name(resource_id)
            suffix = 2
            while title in used_titles:
                title = self.sanitize_sheet_name(f"{resource_id[:27]}_{suffix}")
                suffix += 1
            used_titles.add(title)

            ws = wb.create_sheet(title=title)
            subtitle = self.advisor_label(resource_id) if self.view == ViewType.GROUP else None
            self.setup_sheet(ws, self.names.get(resource_id, resource_id), subtitle)
            self.fill_schedule(ws, schedule, resource_id)

        if not wb.worksheets:
            wb.create_sheet(title="Empty")
        return wb

    def setup_sheet(self, ws, display_name: str, subtitle: str | None = None) -> None:
        """Title rows, header row and empty bordered grid.

        The optional subtitle (the advisor line on group sheets) goes in row 3.
        """
        last_col = get_column_letter(len(PERIODS) + 1)
        ws.column_dimensions["A"].width = 14.0
        for i in range(len(PERIODS)):
            ws.column_dimensions[get_column_letter(i + 2)].width = 18.0

        ws.merge_cells(f"A1:{last_col}1")
        ws["A1"] = TITLES[self.view]
        ws["A1"].font = FONT_TITLE
        ws["A1"].alignment = ALIGN_CENTER

        ws.merge_cells(f"A2:{last_col}2")
        ws["A2"] = display_name
        ws["A2"].font = FONT_NAME
        ws["A2"].alignment = ALIGN_CENTER

        if subtitle:
            ws.merge_cells(f"A3:{last_col}3")
            ws["A3"] = subtitle
            ws["A3"].font = FONT_SUBTITLE
            ws["A3"].alignment = ALIGN_CENTER

        ws.row_dimensions[HEADER_ROW].height = 30.0
        ws.cell(row=HEADER_ROW, column=1, value="Day")
        for i, period in enumerate(PERIODS):
            label = str(period)
            if period in self.period_times:
                label += f"\n{self.period_times[period]}"
            ws.cell(row=HEADER_ROW, column=i + 2, value=label)
        for col in range(1, len(PERIODS) + 2):
            header = ws.cell(row=HEADER_ROW, column=col)
            header.font = FONT_HEADER
            header.alignment = ALIGN_CENTER
            header.border = THIN_BORDER

        for offset, day in enumerate(DAYS):
            row = FIRST_DAY_ROW + offset
            ws.row_dimensions[row].height = 70.0
            day_cell = ws.cell(row=row, column=1, value=DAY_NAMES.get(day, day))
            day_cell.font = FONT_DAY
            day_cell.alignment = ALIGN_CENTER
            day_cell.border = THIN_BORDER
            for i, period in enumerate(PERIODS):
                cell = ws.cell(row=row, column=i + 2)
                cell.border = THIN_BORDER
                cell.alignment = ALIGN_CENTER
                cell.font = FONT_CELL
                if period == self.lunch_period:
                    cell.fill = FILL_LUNCH

    def fill_schedule(self, ws, schedule: ScheduleView, resource_id: str) -> None:
        """Write each occupied period into the grid."""
        for offset, day in enumerate(DAYS):
            row = FIRST_DAY_ROW + offset
            for period, cells in schedule[resource_id].get(day, {}).items():
                if period not in PERIODS:
                    continue
                column = PERIODS.index(period) + 2
                text = "\n\n".join(self.format_cell_content(cell) for cell in cells)
                ws.cell(row=row, column=column, value=text)

    def save(self, wb: Workbook, output_path: Path) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)


def generate_timetable_excel(
    data: SchoolData,
    assignments: list[ScheduleAssignment],
    output_path: Path,
    view: ViewType = ViewType.GROUP,
    selected_id: str | None = None,
    lunch_period: int = 5,
) -> Path:
    """Write a per-viewer timetable workbook.

    Args:
        data: School data for name lookups
        assignments: Output rows
        output_path: Destination .xlsx path
        view: Whose timetables to render
        selected_id: Restrict to one viewer; None for all
        lunch_period: Period column shaded as lunch

    Returns:
        Path of the written workbook
    """
    generator = TimetableExcelGenerator(data, view, lunch_period)
    wb = generator.create_workbook(assignments, selected_id)
    generator.save(wb, Path(output_path))
    return Path(output_path)

# Output generation for schedule results.
# Version: 1.0.0
# Text Gantt chart, text summary, JSON export and Excel workbook.

import json
from pathlib import Path

from .models import Assignment
from .solution import ScheduleResult, SuccessResult, FailureResult


def generate_text_gantt(
    result: SuccessResult,
    horizon_length: int,
    resource_ids: list[str] | None = None,
    width: int = 80
) -> str:
    """Generate a simple text-based Gantt chart.

    Each resource gets one row; an operation is drawn with the first
    letter of its capability.

    Args:
        result: Successful schedule (uses its minute-offset assignments).
        horizon_length: Minutes in the horizon.
        resource_ids: Rows to draw, in order; defaults to resources in use.
        width: Character width for the time axis.

    Returns:
        Multi-line string with ASCII Gantt chart.
    """
    assignments = result.internal
    if resource_ids is None:
        resource_ids = list(dict.fromkeys(a.resource_id for a in assignments))

    label_width = max([len(r) for r in resource_ids] + [6])
    chars_per_minute = width / max(horizon_length, 1)

    lines = []
    lines.append("=== Production Schedule ===")
    lines.append(f"Horizon: {horizon_length} minutes")
    lines.append("")

    # Hour marks along the top
    axis = [" "] * (width + 4)
    for mark in range(0, horizon_length + 1, 60):
        pos = int(mark * chars_per_minute)
        for offset, ch in enumerate(str(mark // 60)):
            if pos + offset < len(axis):
                axis[pos + offset] = ch
    lines.append(" " * (label_width + 1) + "".join(axis).rstrip())
    lines.append(" " * (label_width + 1) + "-" * width)

    for resource_id in resource_ids:
        row = [" "] * width
        for a in assignments:
            if a.resource_id != resource_id:
                continue
            start_pos = int(a.start * chars_per_minute)
            end_pos = max(start_pos + 1, int(a.end * chars_per_minute))
            char = a.operation_name[:1].upper() or "#"
            for i in range(start_pos, min(end_pos, width)):
                row[i] = char
        lines.append(f"{resource_id.ljust(label_width)}|{''.join(row)}|")

    lines.append(" " * (label_width + 1) + "-" * width)
    legend = sorted({a.operation_name for a in assignments})
    if legend:
        lines.append("")
        lines.append("Legend: " + " ".join(f"{n[:1].upper()}={n}" for n in legend))

    return "\n".join(lines)


def generate_schedule_summary(result: ScheduleResult) -> str:
    """Generate a text summary of the schedule.

    Args:
        result: Success or failure result.

    Returns:
        Multi-line string with schedule summary.
    """
    lines = []
    lines.append("=== Schedule Summary ===")

    if isinstance(result, FailureResult):
        lines.append(f"Status: FAILED ({result.error})")
        lines.extend(f"  {line}" for line in result.why)
        return "\n".join(lines)

    kpis = result.kpis
    lines.append("Status: OK")
    lines.append(f"Jobs on time: {kpis.on_time_jobs}/{kpis.total_jobs}")
    lines.append(f"Total tardiness: {kpis.tardiness_minutes} minutes")
    lines.append(f"Makespan: {kpis.makespan_minutes} minutes")
    lines.append(f"Changeovers: {kpis.changeovers}")
    lines.append("Utilization:")
    for resource_id, percent in kpis.utilization.items():
        lines.append(f"  {resource_id}: {percent}%")
    lines.append("")

    lines.append("--- Assignments ---")
    for a in result.assignments:
        lines.append(f"  {a.start} -> {a.end}  {a.resource:<12} {a.product} {a.operation}")

    return "\n".join(lines)


def export_to_json(result: ScheduleResult, pretty: bool = True) -> str:
    """Export a result to its JSON wire format.

    Args:
        result: Result to export.
        pretty: Whether to format with indentation.

    Returns:
        JSON string.
    """
    indent = 2 if pretty else None
    return json.dumps(result.to_dict(), indent=indent)


def generate_schedule_excel(result: SuccessResult, output_path: str | Path) -> Path:
    """Write the schedule to an Excel workbook.

    Sheets:
    - Assignments: one row per operation with timestamps and offsets
    - KPIs: schedule-level figures
    - Utilization: percent per resource

    Args:
        result: Successful schedule.
        output_path: Path to save Excel file.

    Returns:
        Path to generated Excel file.
    """
    import openpyxl
    from openpyxl.styles import Font, PatternFill, Alignment
    from openpyxl.utils import get_column_letter

    output_path = Path(output_path)
    wb = openpyxl.Workbook()

    header_fill = PatternFill(start_color="3498db", end_color="3498db", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")

    def write_header(ws, headers: list[str]) -> None:
        for col_idx, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal='center')
        for col_idx, header in enumerate(headers, 1):
            ws.column_dimensions[get_column_letter(col_idx)].width = max(12, len(header) + 4)

    ws = wb.active
    ws.title = "Assignments"
    write_header(ws, [
        "PRODUCT", "STEP", "OPERATION", "RESOURCE", "START", "END",
        "START_MIN", "END_MIN", "DURATION_MIN",
    ])
    internal: list[Assignment] = result.internal
    for row_idx, (out, a) in enumerate(zip(result.assignments, internal), 2):
        ws.cell(row=row_idx, column=1, value=out.product)
        ws.cell(row=row_idx, column=2, value=a.step_index)
        ws.cell(row=row_idx, column=3, value=out.operation)
        ws.cell(row=row_idx, column=4, value=out.resource)
        ws.cell(row=row_idx, column=5, value=out.start)
        ws.cell(row=row_idx, column=6, value=out.end)
        ws.cell(row=row_idx, column=7, value=a.start)
        ws.cell(row=row_idx, column=8, value=a.end)
        ws.cell(row=row_idx, column=9, value=a.duration)
    ws.freeze_panes = "A2"

    ws = wb.create_sheet("KPIs")
    write_header(ws, ["KPI", "VALUE"])
    kpis = result.kpis.to_dict()
    kpis.pop("utilization")
    for row_idx, (name, value) in enumerate(kpis.items(), 2):
        ws.cell(row=row_idx, column=1, value=name)
        ws.cell(row=row_idx, column=2, value=value)

    ws = wb.create_sheet("Utilization")
    write_header(ws, ["RESOURCE", "UTILIZATION_PCT"])
    for row_idx, (resource_id, percent) in enumerate(result.kpis.utilization.items(), 2):
        ws.cell(row=row_idx, column=1, value=resource_id)
        ws.cell(row=row_idx, column=2, value=percent)

    wb.save(output_path)
    return output_path

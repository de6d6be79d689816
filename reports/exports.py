from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from attendance.models import ClassAttendance, WorshipAttendance
from discipleship.models import MeditationDelivery, VerseMemorization

from .services import resolve_range, week_references_between

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _write_sheet(ws, headers, rows):
    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    widths = [len(h) for h in headers]
    for row in rows:
        ws.append(row)
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(str(value)) if value is not None else 0)
    for i, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = min(width + 2, 60)
    ws.freeze_panes = "A2"


def build_attendance_workbook(start=None, end=None) -> Workbook:
    start, end = resolve_range(start, end)
    refs = week_references_between(start, end)
    wb = Workbook()

    ws = wb.active
    ws.title = "Aulas"
    class_rows = (
        ClassAttendance.objects.filter(class_meeting__date__range=(start, end))
        .select_related("class_meeting__classroom", "child")
        .order_by("class_meeting__date", "class_meeting__classroom__name", "child__full_name")
    )
    _write_sheet(ws, ["Data", "Turma", "Criança", "Status", "Observação"], [
        (r.class_meeting.date, r.class_meeting.classroom.name, r.child.full_name, r.get_status_display(), r.observation or "")
        for r in class_rows
    ])

    ws = wb.create_sheet("Cultos")
    worship_rows = (
        WorshipAttendance.objects.filter(worship_service__date__range=(start, end))
        .select_related("worship_service", "child")
        .order_by("worship_service__date", "child__full_name")
    )
    _write_sheet(ws, ["Data", "Culto", "Criança", "Status", "Observação"], [
        (r.worship_service.date, r.worship_service.description or "", r.child.full_name, r.get_status_display(), r.observation or "")
        for r in worship_rows
    ])

    ws = wb.create_sheet("Meditações")
    deliveries = (
        MeditationDelivery.objects.filter(meditation_week__week_reference__in=refs)
        .select_related("meditation_week", "child")
        .order_by("meditation_week__week_reference", "child__full_name")
    )
    _write_sheet(ws, ["Semana", "Tema", "Criança", "Status", "Data de entrega"], [
        (d.meditation_week.week_reference, d.meditation_week.theme, d.child.full_name, d.get_status_display(), d.delivery_date)
        for d in deliveries
    ])

    ws = wb.create_sheet("Versículos")
    memorizations = (
        VerseMemorization.objects.filter(bible_verse__week_reference__in=refs)
        .select_related("bible_verse", "child")
        .order_by("bible_verse__reference", "child__full_name")
    )
    _write_sheet(ws, ["Referência", "Criança", "Status", "Data"], [
        (m.bible_verse.reference, m.child.full_name, m.get_status_display(), m.memorized_date)
        for m in memorizations
    ])
    return wb


def workbook_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()

from datetime import date, timedelta
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Count, Q
from django.utils import timezone

from attendance.models import AttendanceStatus, ClassAttendance, WorshipAttendance
from attendance.services import absence_streaks
from discipleship.models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization
from discipleship.services import current_week_reference
from ministry.models import Child, Classroom, Note

DEFAULT_RANGE_DAYS = 30
REMINDER_WINDOW_DAYS = 7


def _percentage(part, total) -> int:
    if not total:
        return 0
    return round(part * 100 / total)


def resolve_range(start: Optional[date] = None, end: Optional[date] = None):
    end = end or timezone.localdate()
    start = start or end - timedelta(days=DEFAULT_RANGE_DAYS)
    if start > end:
        raise ValidationError({"from": "Start date must not be after end date."})
    return start, end


def week_references_between(start: date, end: date) -> list:
    """ISO week labels touched by the inclusive range, oldest first."""
    refs = []
    day = start - timedelta(days=start.weekday())
    while day <= end:
        ref = current_week_reference(day)
        if ref not in refs:
            refs.append(ref)
        day += timedelta(days=7)
    return refs


def _attendance_split(qs):
    counts = qs.aggregate(
        total=Count("id"),
        present=Count("id", filter=Q(status=AttendanceStatus.PRESENT)),
    )
    return counts["present"], counts["total"]


def children_at_risk(threshold: Optional[int] = None) -> list:
    threshold = threshold or settings.MINISTRY_AT_RISK_ABSENCES
    streaks = absence_streaks(limit=settings.MINISTRY_ABSENCE_STREAK_LIMIT)
    at_risk = [child_id for child_id, streak in streaks.items() if streak >= threshold]
    return [
        {"child_id": child.pk, "full_name": child.full_name, "consecutive_absences": streaks[child.pk]}
        for child in Child.objects.filter(pk__in=at_risk).order_by("full_name").only("id", "full_name")
    ]


def dashboard_stats(start: Optional[date] = None, end: Optional[date] = None) -> dict:
    """Live summary over ``[start, end]``; defaults to the last 30 days."""
    start, end = resolve_range(start, end)

    class_present, class_total = _attendance_split(
        ClassAttendance.objects.filter(class_meeting__date__range=(start, end))
    )
    worship_present, worship_total = _attendance_split(
        WorshipAttendance.objects.filter(worship_service__date__range=(start, end))
    )

    total_children = Child.objects.count()
    refs = week_references_between(start, end)

    # Expected work is one delivery per child per published week
    weeks = MeditationWeek.objects.filter(week_reference__in=refs)
    meditations_delivered = MeditationDelivery.objects.filter(
        meditation_week__in=weeks, status=MeditationDelivery.Status.DELIVERED
    ).count()
    total_meditations = weeks.count() * total_children

    verses = BibleVerse.objects.filter(week_reference__in=refs)
    verses_memorized = VerseMemorization.objects.filter(
        bible_verse__in=verses, status=VerseMemorization.Status.MEMORIZED
    ).count()
    total_verses = verses.count() * total_children

    today = timezone.localdate()
    upcoming_reminders = Note.objects.filter(
        reminder_date__range=(today, today + timedelta(days=REMINDER_WINDOW_DAYS))
    ).count()

    return {
        "from": start.isoformat(),
        "to": end.isoformat(),
        "class_attendance_percentage": _percentage(class_present, class_total),
        "worship_attendance_percentage": _percentage(worship_present, worship_total),
        "meditations_delivered": meditations_delivered,
        "total_meditations": total_meditations,
        "verses_memorized": verses_memorized,
        "total_verses": total_verses,
        "total_children": total_children,
        "total_classes": Classroom.objects.count(),
        "children_at_risk": children_at_risk(),
        "upcoming_reminders": upcoming_reminders,
    }

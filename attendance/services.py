from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Window
from django.db.models.functions import RowNumber
from django.utils import timezone

from .models import (
    AttendanceStatus,
    ClassAttendance,
    ClassMeeting,
    WorshipAttendance,
    WorshipService,
)


def _check_status(status):
    if status not in AttendanceStatus.values:
        raise ValidationError({"status": f"Invalid attendance status: {status!r}."})


@transaction.atomic
def mark_class_attendance(class_meeting_id, child_id, status: str, observation: Optional[str] = None) -> ClassAttendance:
    """Insert or overwrite the attendance row for (meeting, child).

    Re-marking refreshes ``created_at`` so the row counts as the newest record
    for the absence streak.
    """
    _check_status(status)
    row, _ = ClassAttendance.objects.update_or_create(
        class_meeting_id=class_meeting_id,
        child_id=child_id,
        defaults={
            "status": status,
            "observation": observation,
            "created_at": timezone.now(),
        },
    )
    return row


@transaction.atomic
def mark_worship_attendance(worship_service_id, child_id, status: str, observation: Optional[str] = None) -> WorshipAttendance:
    _check_status(status)
    row, _ = WorshipAttendance.objects.update_or_create(
        worship_service_id=worship_service_id,
        child_id=child_id,
        defaults={
            "status": status,
            "observation": observation,
            "created_at": timezone.now(),
        },
    )
    return row


def consecutive_absences(child_id, limit: int = 5) -> int:
    """Length of the unbroken run of absences, newest first, capped at ``limit``."""
    if limit <= 0:
        return 0
    recent = (
        ClassAttendance.objects.filter(child_id=child_id)
        .order_by("-created_at", "-id")
        .values_list("status", flat=True)[:limit]
    )
    streak = 0
    for status in recent:
        if status != AttendanceStatus.ABSENT:
            break
        streak += 1
    return streak


def absence_streaks(limit: int = 5) -> dict:
    """``consecutive_absences`` for every child with class attendance, in one query.

    Children without any attendance rows are left out of the result.
    """
    if limit <= 0:
        return {}
    newest_first = [F("created_at").desc(), F("id").desc()]
    rows = (
        ClassAttendance.objects.annotate(
            position=Window(RowNumber(), partition_by=[F("child_id")], order_by=newest_first)
        )
        .filter(position__lte=limit)
        .order_by("child_id", "position")
        .values_list("child_id", "status")
    )
    streaks = {}
    broken = set()
    for child_id, status in rows:
        streaks.setdefault(child_id, 0)
        if child_id in broken:
            continue
        if status == AttendanceStatus.ABSENT:
            streaks[child_id] += 1
        else:
            broken.add(child_id)
    return streaks


def class_attendance_on(day):
    return (
        ClassAttendance.objects.filter(class_meeting__date=day)
        .select_related("class_meeting", "child")
        .order_by("child__full_name")
    )


def worship_attendance_on(day):
    return (
        WorshipAttendance.objects.filter(worship_service__date=day)
        .select_related("worship_service", "child")
        .order_by("child__full_name")
    )


def list_class_meetings(day=None, class_id=None):
    qs = ClassMeeting.objects.select_related("classroom").order_by("-date", "classroom__name")
    if day:
        qs = qs.filter(date=day)
    if class_id:
        qs = qs.filter(classroom_id=class_id)
    return qs


def list_worship_services(day=None):
    qs = WorshipService.objects.order_by("-date", "created_at")
    if day:
        qs = qs.filter(date=day)
    return qs


def get_or_create_class_meeting(classroom, date, observations=None) -> ClassMeeting:
    meeting, created = ClassMeeting.objects.get_or_create(
        classroom=classroom,
        date=date,
        defaults={"observations": observations},
    )
    if not created and observations and meeting.observations != observations:
        meeting.observations = observations
        meeting.save(update_fields=["observations"])
    return meeting


def get_or_create_worship_service(date, description=None, observations=None) -> WorshipService:
    """One service per (date, description); several services may share a date."""
    service, _ = WorshipService.objects.get_or_create(
        date=date,
        description=description,
        defaults={"observations": observations},
    )
    return service

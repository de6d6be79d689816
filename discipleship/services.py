from datetime import date
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization


def current_week_reference(today: Optional[date] = None) -> str:
    """ISO week label for ``today``, e.g. ``2024-W01``."""
    today = today or timezone.localdate()
    year, week, _ = today.isocalendar()
    return f"{year}-W{week:02d}"


# Meditations

def list_meditation_weeks():
    return MeditationWeek.objects.order_by("-week_reference")


def create_meditation_week(**fields) -> MeditationWeek:
    return MeditationWeek.objects.create(**fields)


def current_week_deliveries(today: Optional[date] = None):
    """Deliveries for the current ISO week, or every delivery when that week is not set up."""
    qs = MeditationDelivery.objects.select_related("child", "meditation_week").order_by("-created_at")
    week = MeditationWeek.objects.filter(week_reference=current_week_reference(today)).first()
    if week is not None:
        qs = qs.filter(meditation_week=week)
    return qs


@transaction.atomic
def update_meditation_status(child_id, meditation_week_id, status: str, observation=None, evidence_url=None) -> MeditationDelivery:
    """Upsert the delivery row for (child, week).

    "entregou" stamps today's date; any other status clears it.
    """
    if status not in MeditationDelivery.Status.values:
        raise ValidationError({"status": f"Invalid meditation status: {status!r}."})
    defaults = {
        "status": status,
        "observation": observation,
        "delivery_date": timezone.localdate() if status == MeditationDelivery.Status.DELIVERED else None,
    }
    if evidence_url is not None:
        defaults["evidence_url"] = evidence_url or None
    delivery, _ = MeditationDelivery.objects.update_or_create(
        child_id=child_id,
        meditation_week_id=meditation_week_id,
        defaults=defaults,
    )
    return delivery


# Verses

def list_verses():
    return BibleVerse.objects.order_by("reference")


def create_verse(**fields) -> BibleVerse:
    return BibleVerse.objects.create(**fields)


def list_memorizations():
    return VerseMemorization.objects.select_related("child", "bible_verse").order_by("-created_at")


@transaction.atomic
def update_verse_memorization(child_id, bible_verse_id, status: str, observation=None) -> VerseMemorization:
    if status not in VerseMemorization.Status.values:
        raise ValidationError({"status": f"Invalid memorization status: {status!r}."})
    memorization, _ = VerseMemorization.objects.update_or_create(
        child_id=child_id,
        bible_verse_id=bible_verse_id,
        defaults={
            "status": status,
            "observation": observation,
            "memorized_date": timezone.localdate() if status == VerseMemorization.Status.MEMORIZED else None,
        },
    )
    return memorization

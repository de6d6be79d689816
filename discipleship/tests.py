from datetime import date

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from ministry.models import Child
from .models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization
from .services import (
    current_week_deliveries,
    current_week_reference,
    update_meditation_status,
    update_verse_memorization,
)


class WeekReferenceTests(TestCase):
    def test_iso_week_labels(self):
        self.assertEqual(current_week_reference(date(2024, 1, 1)), "2024-W01")
        self.assertEqual(current_week_reference(date(2024, 12, 30)), "2025-W01")
        self.assertEqual(current_week_reference(date(2021, 1, 1)), "2020-W53")

    def test_week_reference_format_validated(self):
        week = MeditationWeek(week_reference="2024-01", theme="Fé")
        with self.assertRaises(ValidationError):
            week.full_clean()
        MeditationWeek(week_reference="2024-W09", theme="Fé").full_clean()


class MeditationStatusTests(TestCase):
    def setUp(self):
        self.child = Child.objects.create(full_name="Ana")
        self.week = MeditationWeek.objects.create(week_reference="2024-W10", theme="Gratidão")

    def test_delivered_stamps_today_and_other_status_clears(self):
        delivery = update_meditation_status(self.child.pk, self.week.pk, MeditationDelivery.Status.DELIVERED)
        self.assertEqual(delivery.delivery_date, timezone.localdate())

        delivery = update_meditation_status(self.child.pk, self.week.pk, MeditationDelivery.Status.IN_PROGRESS)
        self.assertIsNone(delivery.delivery_date)
        self.assertEqual(MeditationDelivery.objects.count(), 1)

    def test_evidence_kept_unless_given(self):
        update_meditation_status(
            self.child.pk, self.week.pk, MeditationDelivery.Status.DELIVERED,
            evidence_url="https://example.com/foto.jpg",
        )
        delivery = update_meditation_status(self.child.pk, self.week.pk, MeditationDelivery.Status.DELIVERED)
        self.assertEqual(delivery.evidence_url, "https://example.com/foto.jpg")

        delivery = update_meditation_status(self.child.pk, self.week.pk, MeditationDelivery.Status.DELIVERED, evidence_url="")
        self.assertIsNone(delivery.evidence_url)

    def test_invalid_status(self):
        with self.assertRaises(ValidationError):
            update_meditation_status(self.child.pk, self.week.pk, "entregue")
        self.assertFalse(MeditationDelivery.objects.exists())

    def test_current_week_deliveries(self):
        update_meditation_status(self.child.pk, self.week.pk, MeditationDelivery.Status.DELIVERED)
        # No week set up for today's ISO week: everything is returned
        self.assertEqual(current_week_deliveries(date(2030, 5, 6)).count(), 1)

        MeditationWeek.objects.create(week_reference=current_week_reference(date(2030, 5, 6)), theme="Paz")
        self.assertEqual(current_week_deliveries(date(2030, 5, 6)).count(), 0)
        self.assertEqual(current_week_deliveries(date(2024, 3, 5)).count(), 1)


class VerseMemorizationTests(TestCase):
    def setUp(self):
        self.child = Child.objects.create(full_name="Ana")
        self.verse = BibleVerse.objects.create(reference="Sl 119:105", text="Lâmpada para os meus pés...")

    def test_memorized_stamps_date_and_upserts(self):
        row = update_verse_memorization(self.child.pk, self.verse.pk, VerseMemorization.Status.MEMORIZED, "Recitou")
        self.assertEqual(row.memorized_date, timezone.localdate())
        self.assertEqual(row.observation, "Recitou")

        row = update_verse_memorization(self.child.pk, self.verse.pk, VerseMemorization.Status.NOT_MEMORIZED)
        self.assertIsNone(row.memorized_date)
        self.assertEqual(VerseMemorization.objects.count(), 1)

    def test_invalid_status(self):
        with self.assertRaises(ValidationError):
            update_verse_memorization(self.child.pk, self.verse.pk, "sabe")

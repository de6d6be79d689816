from datetime import date, timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from attendance.models import AttendanceStatus, ClassMeeting, WorshipService
from attendance.services import mark_class_attendance, mark_worship_attendance
from discipleship.models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization
from discipleship.services import current_week_reference, update_meditation_status, update_verse_memorization
from ministry.models import Child, Classroom, Note
from .exports import build_attendance_workbook, workbook_bytes
from .services import children_at_risk, dashboard_stats, week_references_between


class DashboardStatsTests(TestCase):
    def test_empty_database(self):
        stats = dashboard_stats()
        self.assertEqual(stats["class_attendance_percentage"], 0)
        self.assertEqual(stats["worship_attendance_percentage"], 0)
        self.assertEqual(stats["total_children"], 0)
        self.assertEqual(stats["total_classes"], 0)
        self.assertEqual(stats["total_meditations"], 0)
        self.assertEqual(stats["children_at_risk"], [])
        self.assertEqual(stats["upcoming_reminders"], 0)

    def test_live_aggregates(self):
        today = timezone.localdate()
        classroom = Classroom.objects.create(name="Primários")
        ana = Child.objects.create(full_name="Ana", classroom=classroom)
        bia = Child.objects.create(full_name="Bia", classroom=classroom)

        for weeks_ago in (2, 1, 0):
            meeting = ClassMeeting.objects.create(classroom=classroom, date=today - timedelta(weeks=weeks_ago))
            mark_class_attendance(meeting.pk, ana.pk, AttendanceStatus.PRESENT)
            mark_class_attendance(meeting.pk, bia.pk, AttendanceStatus.ABSENT)
        # Outside the default 30-day window
        old = ClassMeeting.objects.create(classroom=classroom, date=today - timedelta(days=90))
        mark_class_attendance(old.pk, ana.pk, AttendanceStatus.ABSENT)

        service = WorshipService.objects.create(date=today)
        mark_worship_attendance(service.pk, ana.pk, AttendanceStatus.PRESENT)
        mark_worship_attendance(service.pk, bia.pk, AttendanceStatus.PRESENT)

        week = MeditationWeek.objects.create(week_reference=current_week_reference(today), theme="Fé")
        update_meditation_status(ana.pk, week.pk, MeditationDelivery.Status.DELIVERED)
        update_meditation_status(bia.pk, week.pk, MeditationDelivery.Status.IN_PROGRESS)

        verse = BibleVerse.objects.create(reference="Jo 3:16", text="...", week_reference=week.week_reference)
        update_verse_memorization(bia.pk, verse.pk, VerseMemorization.Status.MEMORIZED)

        Note.objects.create(child=bia, title="Ligar", content="...", attention_level="alta",
                            reminder_date=today + timedelta(days=2))
        Note.objects.create(child=bia, title="Depois", content="...", attention_level="baixa",
                            reminder_date=today + timedelta(days=20))

        stats = dashboard_stats()
        self.assertEqual(stats["class_attendance_percentage"], 50)
        self.assertEqual(stats["worship_attendance_percentage"], 100)
        self.assertEqual(stats["meditations_delivered"], 1)
        self.assertEqual(stats["total_meditations"], 2)
        self.assertEqual(stats["verses_memorized"], 1)
        self.assertEqual(stats["total_verses"], 2)
        self.assertEqual(stats["total_children"], 2)
        self.assertEqual(stats["total_classes"], 1)
        self.assertEqual(stats["upcoming_reminders"], 1)
        self.assertEqual(len(stats["children_at_risk"]), 1)
        self.assertEqual(stats["children_at_risk"][0]["full_name"], "Bia")
        self.assertEqual(stats["children_at_risk"][0]["consecutive_absences"], 3)

    def test_percentages_are_rounded_integers(self):
        today = timezone.localdate()
        classroom = Classroom.objects.create(name="Maternal")
        children = [Child.objects.create(full_name=f"C{i}", classroom=classroom) for i in range(3)]
        meeting = ClassMeeting.objects.create(classroom=classroom, date=today)
        mark_class_attendance(meeting.pk, children[0].pk, AttendanceStatus.PRESENT)
        mark_class_attendance(meeting.pk, children[1].pk, AttendanceStatus.PRESENT)
        mark_class_attendance(meeting.pk, children[2].pk, AttendanceStatus.ABSENT)
        self.assertEqual(dashboard_stats()["class_attendance_percentage"], 67)

    def test_explicit_range(self):
        stats = dashboard_stats(date(2024, 1, 1), date(2024, 1, 31))
        self.assertEqual(stats["from"], "2024-01-01")
        self.assertEqual(stats["to"], "2024-01-31")
        with self.assertRaises(ValidationError):
            dashboard_stats(date(2024, 2, 1), date(2024, 1, 1))

    def test_children_at_risk_does_not_query_per_child(self):
        today = timezone.localdate()
        classroom = Classroom.objects.create(name="Juniores")
        children = [Child.objects.create(full_name=f"C{i}", classroom=classroom) for i in range(4)]
        for weeks_ago in (2, 1, 0):
            meeting = ClassMeeting.objects.create(classroom=classroom, date=today - timedelta(weeks=weeks_ago))
            for child in children[:3]:
                mark_class_attendance(meeting.pk, child.pk, AttendanceStatus.ABSENT)
            mark_class_attendance(meeting.pk, children[3].pk, AttendanceStatus.PRESENT)

        with self.assertNumQueries(2):
            flagged = children_at_risk()
        self.assertEqual([c["full_name"] for c in flagged], ["C0", "C1", "C2"])
        self.assertTrue(all(c["consecutive_absences"] == 3 for c in flagged))

    def test_week_references_between(self):
        self.assertEqual(
            week_references_between(date(2024, 1, 1), date(2024, 1, 15)),
            ["2024-W01", "2024-W02", "2024-W03"],
        )
        self.assertEqual(week_references_between(date(2024, 1, 3), date(2024, 1, 3)), ["2024-W01"])


class AttendanceWorkbookTests(TestCase):
    def test_workbook_sheets_and_rows(self):
        classroom = Classroom.objects.create(name="Primários")
        ana = Child.objects.create(full_name="Ana", classroom=classroom)
        meeting = ClassMeeting.objects.create(classroom=classroom, date=date(2024, 3, 3))
        mark_class_attendance(meeting.pk, ana.pk, AttendanceStatus.PRESENT)
        service = WorshipService.objects.create(date=date(2024, 3, 3), description="Culto")
        mark_worship_attendance(service.pk, ana.pk, AttendanceStatus.ABSENT, "Viajou")

        wb = build_attendance_workbook(date(2024, 3, 1), date(2024, 3, 31))
        self.assertEqual(wb.sheetnames, ["Aulas", "Cultos", "Meditações", "Versículos"])

        aulas = wb["Aulas"]
        self.assertEqual(aulas.max_row, 2)
        self.assertEqual(aulas["B2"].value, "Primários")
        self.assertEqual(aulas["D2"].value, "Presente")
        cultos = wb["Cultos"]
        self.assertEqual(cultos["E2"].value, "Viajou")
        self.assertEqual(wb["Meditações"].max_row, 1)

        data = workbook_bytes(wb)
        # xlsx files are zip archives
        self.assertTrue(data.startswith(b"PK"))

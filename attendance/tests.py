from datetime import date, timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from ministry.models import Child, Classroom
from .models import AttendanceStatus, ClassAttendance, ClassMeeting, WorshipAttendance, WorshipService
from .services import (
    absence_streaks,
    class_attendance_on,
    consecutive_absences,
    get_or_create_class_meeting,
    get_or_create_worship_service,
    list_class_meetings,
    mark_class_attendance,
    mark_worship_attendance,
)

PRESENT = AttendanceStatus.PRESENT
ABSENT = AttendanceStatus.ABSENT


class MarkAttendanceTests(TestCase):
    def setUp(self):
        self.classroom = Classroom.objects.create(name="Primários")
        self.child = Child.objects.create(full_name="Ana", classroom=self.classroom)
        self.meeting = ClassMeeting.objects.create(classroom=self.classroom, date=date(2024, 3, 3))
        self.service = WorshipService.objects.create(date=date(2024, 3, 3), description="Culto")

    def test_double_mark_keeps_one_row_with_latest_status(self):
        mark_class_attendance(self.meeting.pk, self.child.pk, ABSENT, "Sem aviso")
        row = mark_class_attendance(self.meeting.pk, self.child.pk, PRESENT)
        self.assertEqual(ClassAttendance.objects.count(), 1)
        self.assertEqual(row.status, PRESENT)
        self.assertIsNone(row.observation)

    def test_worship_double_mark(self):
        mark_worship_attendance(self.service.pk, self.child.pk, PRESENT)
        mark_worship_attendance(self.service.pk, self.child.pk, ABSENT, "Viajou")
        row = WorshipAttendance.objects.get()
        self.assertEqual(row.status, ABSENT)
        self.assertEqual(row.observation, "Viajou")

    def test_invalid_status_rejected(self):
        with self.assertRaises(ValidationError):
            mark_class_attendance(self.meeting.pk, self.child.pk, "atrasado")
        self.assertFalse(ClassAttendance.objects.exists())

    def test_remark_refreshes_created_at(self):
        old = timezone.now() - timedelta(days=10)
        ClassAttendance.objects.create(class_meeting=self.meeting, child=self.child, status=ABSENT, created_at=old)
        row = mark_class_attendance(self.meeting.pk, self.child.pk, ABSENT)
        self.assertGreater(row.created_at, old)

    def test_attendance_listed_by_occasion_date(self):
        other = ClassMeeting.objects.create(classroom=self.classroom, date=date(2024, 3, 10))
        mark_class_attendance(self.meeting.pk, self.child.pk, PRESENT)
        mark_class_attendance(other.pk, self.child.pk, ABSENT)
        rows = list(class_attendance_on(date(2024, 3, 10)))
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].status, ABSENT)


class ConsecutiveAbsenceTests(TestCase):
    def setUp(self):
        self.classroom = Classroom.objects.create(name="Primários")
        self.child = Child.objects.create(full_name="Ana", classroom=self.classroom)

    def _history(self, statuses):
        """Record ``statuses`` newest first, one meeting per week."""
        now = timezone.now()
        for i, status in enumerate(statuses):
            meeting = ClassMeeting.objects.create(
                classroom=self.classroom, date=date(2024, 6, 30) - timedelta(weeks=i)
            )
            ClassAttendance.objects.create(
                class_meeting=meeting, child=self.child, status=status, created_at=now - timedelta(days=i)
            )

    def test_stops_at_first_presence(self):
        self._history([ABSENT, ABSENT, PRESENT, ABSENT])
        self.assertEqual(consecutive_absences(self.child.pk, limit=5), 2)

    def test_latest_presence_gives_zero(self):
        self._history([PRESENT, ABSENT, ABSENT])
        self.assertEqual(consecutive_absences(self.child.pk), 0)

    def test_capped_at_limit(self):
        self._history([ABSENT] * 7)
        self.assertEqual(consecutive_absences(self.child.pk, limit=5), 5)
        self.assertEqual(consecutive_absences(self.child.pk, limit=3), 3)

    def test_no_history(self):
        self.assertEqual(consecutive_absences(self.child.pk), 0)
        self.assertEqual(consecutive_absences(self.child.pk, limit=0), 0)

    def test_order_is_by_record_time_not_meeting_date(self):
        older = ClassMeeting.objects.create(classroom=self.classroom, date=date(2024, 6, 2))
        newer = ClassMeeting.objects.create(classroom=self.classroom, date=date(2024, 6, 9))
        now = timezone.now()
        ClassAttendance.objects.create(
            class_meeting=older, child=self.child, status=ABSENT, created_at=now - timedelta(days=2)
        )
        ClassAttendance.objects.create(
            class_meeting=newer, child=self.child, status=PRESENT, created_at=now - timedelta(days=1)
        )
        self.assertEqual(consecutive_absences(self.child.pk), 0)

        # Re-marking the older meeting makes it the newest record
        mark_class_attendance(older.pk, self.child.pk, ABSENT)
        self.assertEqual(consecutive_absences(self.child.pk), 1)

    def test_other_children_do_not_count(self):
        other = Child.objects.create(full_name="Bia", classroom=self.classroom)
        meeting = ClassMeeting.objects.create(classroom=self.classroom, date=date(2024, 6, 30))
        ClassAttendance.objects.create(class_meeting=meeting, child=other, status=ABSENT)
        self.assertEqual(consecutive_absences(self.child.pk), 0)

    def test_streaks_for_all_children_match_single_child_count(self):
        histories = {
            self.child: [ABSENT, ABSENT, PRESENT, ABSENT],
            Child.objects.create(full_name="Bia", classroom=self.classroom): [ABSENT] * 7,
            Child.objects.create(full_name="Caio", classroom=self.classroom): [PRESENT, ABSENT],
        }
        now = timezone.now()
        for week in range(7):
            meeting = ClassMeeting.objects.create(
                classroom=self.classroom, date=date(2024, 6, 30) - timedelta(weeks=week)
            )
            for child, statuses in histories.items():
                if week < len(statuses):
                    ClassAttendance.objects.create(
                        class_meeting=meeting, child=child, status=statuses[week],
                        created_at=now - timedelta(days=week),
                    )
        Child.objects.create(full_name="Davi", classroom=self.classroom)

        with self.assertNumQueries(1):
            streaks = absence_streaks(limit=5)
        self.assertEqual(len(streaks), 3)
        for child in histories:
            self.assertEqual(streaks[child.pk], consecutive_absences(child.pk, limit=5))
        self.assertEqual(sorted(streaks.values()), [0, 2, 5])
        self.assertEqual(absence_streaks(limit=0), {})


class OccasionTests(TestCase):
    def setUp(self):
        self.classroom = Classroom.objects.create(name="Maternal")

    def test_class_meeting_is_unique_per_day(self):
        first = get_or_create_class_meeting(self.classroom, date(2024, 3, 3))
        second = get_or_create_class_meeting(self.classroom, date(2024, 3, 3), "Aula especial")
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(ClassMeeting.objects.count(), 1)
        self.assertEqual(ClassMeeting.objects.get().observations, "Aula especial")

    def test_meetings_filtered_by_day_and_class(self):
        other = Classroom.objects.create(name="Berçário")
        get_or_create_class_meeting(self.classroom, date(2024, 3, 3))
        get_or_create_class_meeting(other, date(2024, 3, 3))
        get_or_create_class_meeting(self.classroom, date(2024, 3, 10))
        self.assertEqual(list_class_meetings(day=date(2024, 3, 3)).count(), 2)
        self.assertEqual(list_class_meetings(class_id=self.classroom.pk).count(), 2)

    def test_worship_services_share_a_date(self):
        morning = get_or_create_worship_service(date(2024, 3, 3), "Manhã")
        evening = get_or_create_worship_service(date(2024, 3, 3), "Noite")
        again = get_or_create_worship_service(date(2024, 3, 3), "Manhã")
        self.assertNotEqual(morning.pk, evening.pk)
        self.assertEqual(morning.pk, again.pk)

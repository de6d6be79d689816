from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounts.models import User
from attendance.models import ClassAttendance, ClassMeeting, WorshipAttendance, WorshipService
from attendance.services import consecutive_absences
from discipleship.models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization
from messaging.models import MessageTemplate
from ministry.models import Child, ChildGuardian, Classroom, Guardian, Note


class SeedDbCommandTest(TestCase):
    def assert_seeded(self):
        self.assertEqual(Classroom.objects.count(), 3)
        self.assertEqual(Child.objects.count(), 5)
        self.assertEqual(Guardian.objects.count(), 4)
        self.assertEqual(ChildGuardian.objects.count(), 5)
        # 3 Sundays for Primários + 1 each for Maternal and Berçário
        self.assertEqual(ClassMeeting.objects.count(), 5)
        self.assertEqual(ClassAttendance.objects.count(), 11)
        self.assertEqual(WorshipService.objects.count(), 1)
        self.assertEqual(WorshipAttendance.objects.count(), 5)
        self.assertEqual(MeditationWeek.objects.count(), 1)
        self.assertEqual(MeditationDelivery.objects.count(), 2)
        self.assertEqual(BibleVerse.objects.count(), 2)
        self.assertEqual(VerseMemorization.objects.count(), 1)
        self.assertEqual(MessageTemplate.objects.count(), 3)
        self.assertEqual(Note.objects.count(), 1)

    def test_seed_db_command(self):
        """Test that the seed_db command creates the expected objects."""
        out = StringIO()
        call_command("seed_db", stdout=out)
        self.assertIn("Successfully seeded database", out.getvalue())
        self.assert_seeded()

        leader = User.objects.get(username="lider")
        self.assertEqual(leader.role, User.Role.LEADER)
        self.assertTrue(leader.check_password("lider123"))
        self.assertEqual([c.name for c in leader.classes.all()], ["Primários"])

        joao = Child.objects.get(full_name="João Pereira")
        self.assertEqual(consecutive_absences(joao.pk), 3)
        ana = Child.objects.get(full_name="Ana Souza")
        self.assertEqual(consecutive_absences(ana.pk), 0)

    def test_seed_db_is_idempotent(self):
        call_command("seed_db", stdout=StringIO())
        call_command("seed_db", stdout=StringIO())
        self.assert_seeded()
        self.assertEqual(User.objects.filter(username="lider").count(), 1)

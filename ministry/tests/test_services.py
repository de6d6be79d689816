from datetime import date

from django.test import TestCase

from accounts.models import User
from attendance.models import ClassMeeting
from ministry.models import Child, ChildGuardian, Classroom, Guardian, Note
from ministry.services import (
    ClassInUse,
    create_guardian,
    delete_class,
    get_note,
    guardians_for_child,
    link_guardian,
    list_children,
    list_classes,
    notes_for_child,
    update_child,
    visible_notes,
)


class ClassDeletionTests(TestCase):
    def setUp(self):
        self.classroom = Classroom.objects.create(name="Primários")

    def test_refused_while_children_assigned(self):
        child = Child.objects.create(full_name="Ana", classroom=self.classroom)
        with self.assertRaises(ClassInUse) as ctx:
            delete_class(self.classroom.pk)
        self.assertIn("children", str(ctx.exception))
        self.assertTrue(Classroom.objects.filter(pk=self.classroom.pk).exists())

        update_child(child.pk, classroom=None)
        delete_class(self.classroom.pk)
        self.assertFalse(Classroom.objects.filter(pk=self.classroom.pk).exists())

    def test_refused_while_meetings_recorded(self):
        ClassMeeting.objects.create(classroom=self.classroom, date=date(2024, 3, 3))
        with self.assertRaises(ClassInUse):
            delete_class(self.classroom.pk)
        self.assertTrue(Classroom.objects.filter(pk=self.classroom.pk).exists())

    def test_missing_class(self):
        self.classroom.delete()
        with self.assertRaises(Classroom.DoesNotExist):
            delete_class(self.classroom.pk)


class ListingTests(TestCase):
    def test_classes_sorted_with_child_count(self):
        b = Classroom.objects.create(name="Berçário")
        a = Classroom.objects.create(name="Adolescentes")
        Child.objects.create(full_name="Lia", classroom=b)
        Child.objects.create(full_name="Téo", classroom=b)
        rows = list(list_classes())
        self.assertEqual([c.name for c in rows], ["Adolescentes", "Berçário"])
        self.assertEqual(rows[0].child_count, 0)
        self.assertEqual(rows[1].child_count, 2)
        self.assertEqual(a.pk, rows[0].pk)

    def test_children_sorted_and_filtered_by_class(self):
        classroom = Classroom.objects.create(name="Maternal")
        Child.objects.create(full_name="Zeca", classroom=classroom)
        Child.objects.create(full_name="Bia", classroom=classroom)
        Child.objects.create(full_name="Caio")
        self.assertEqual([c.full_name for c in list_children()], ["Bia", "Caio", "Zeca"])
        self.assertEqual([c.full_name for c in list_children(classroom.pk)], ["Bia", "Zeca"])


class GuardianLinkTests(TestCase):
    def setUp(self):
        self.child = Child.objects.create(full_name="Ana")
        self.mother = Guardian.objects.create(full_name="Carla", relationship="mãe", phone_whatsapp="11988881111")
        self.father = Guardian.objects.create(full_name="Bruno", relationship="pai", phone_whatsapp="11988882222")

    def test_single_primary_guardian(self):
        link_guardian(self.mother.pk, self.child.pk, is_primary=True)
        link_guardian(self.father.pk, self.child.pk, is_primary=True)
        primary = ChildGuardian.objects.filter(child=self.child, is_primary=True)
        self.assertEqual(primary.count(), 1)
        self.assertEqual(primary.get().guardian, self.father)

    def test_relinking_updates_existing_row(self):
        link_guardian(self.mother.pk, self.child.pk)
        link_guardian(self.mother.pk, self.child.pk, is_primary=True)
        self.assertEqual(ChildGuardian.objects.filter(child=self.child).count(), 1)

    def test_guardians_for_child_primary_first(self):
        link_guardian(self.father.pk, self.child.pk)
        link_guardian(self.mother.pk, self.child.pk, is_primary=True)
        guardians = guardians_for_child(self.child.pk)
        self.assertEqual([g.full_name for g in guardians], ["Carla", "Bruno"])
        self.assertTrue(guardians[0].is_primary)
        self.assertFalse(guardians[1].is_primary)

    def test_create_guardian_with_unknown_child_rolls_back(self):
        missing = self.child.pk
        self.child.delete()
        with self.assertRaises(Child.DoesNotExist):
            create_guardian(
                child_id=missing,
                full_name="Avó",
                relationship="avó",
                phone_whatsapp="11988883333",
            )
        self.assertFalse(Guardian.objects.filter(full_name="Avó").exists())


class SensitiveNoteTests(TestCase):
    def setUp(self):
        self.child = Child.objects.create(full_name="Ana")
        self.leader = User.objects.create_user(username="lider", role=User.Role.LEADER)
        self.assistant = User.objects.create_user(username="aux", role=User.Role.ASSISTANT)
        self.public = Note.objects.create(
            child=self.child, title="Elogio", content="Ajudou os colegas",
            attention_level=Note.AttentionLevel.LOW, created_by=self.leader,
        )
        self.private = Note.objects.create(
            child=self.child, title="Saúde", content="Acompanhamento médico",
            attention_level=Note.AttentionLevel.HIGH, is_sensitive=True, created_by=self.leader,
        )

    def test_leader_sees_sensitive_notes(self):
        self.assertEqual(visible_notes(self.leader).count(), 2)
        self.assertEqual(get_note(self.leader, self.private.pk), self.private)

    def test_assistant_does_not(self):
        self.assertEqual(list(visible_notes(self.assistant)), [self.public])
        self.assertEqual(list(notes_for_child(self.assistant, self.child.pk)), [self.public])
        with self.assertRaises(Note.DoesNotExist):
            get_note(self.assistant, self.private.pk)

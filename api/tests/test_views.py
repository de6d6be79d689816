from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from accounts.models import User
from attendance.models import ClassAttendance, ClassMeeting
from messaging.models import MessageSend, MessageTemplate
from ministry.models import Child, ChildGuardian, Classroom, Guardian, Note


class ApiTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="lider", role=User.Role.LEADER)
        self.client.force_login(self.user)

    def post(self, url, data=None):
        return self.client.post(url, data or {}, content_type="application/json")

    def put(self, url, data):
        return self.client.put(url, data, content_type="application/json")


class ClassAndChildTests(ApiTestCase):
    def test_class_with_children_cannot_be_deleted(self):
        resp = self.post("/api/classes", {"name": "Primários", "room": "Sala 3"})
        self.assertEqual(resp.status_code, 201)
        class_id = resp.json()["id"]
        self.assertEqual(resp.json()["childCount"], 0)

        resp = self.post("/api/children", {"fullName": "Ana Souza", "classId": class_id})
        self.assertEqual(resp.status_code, 201)
        child_id = resp.json()["id"]

        resp = self.client.delete(f"/api/classes/{class_id}")
        self.assertEqual(resp.status_code, 409)
        self.assertIn("children", resp.json()["message"])
        self.assertTrue(Classroom.objects.filter(pk=class_id).exists())

        self.assertEqual(self.client.delete(f"/api/children/{child_id}").status_code, 204)
        self.assertEqual(self.client.delete(f"/api/classes/{class_id}").status_code, 204)
        self.assertFalse(Classroom.objects.exists())

    def test_child_crud(self):
        resp = self.post("/api/children", {"fullName": "  Bia  ", "birthDate": "2018-04-02"})
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["fullName"], "Bia")
        self.assertEqual(body["birthDate"], "2018-04-02")
        self.assertIsNone(body["classId"])

        resp = self.put(f"/api/children/{body['id']}", {"allergies": "Lactose"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["fullName"], "Bia")
        self.assertEqual(resp.json()["allergies"], "Lactose")
        self.assertEqual(resp.json()["birthDate"], "2018-04-02")

        resp = self.client.get(f"/api/children/{body['id']}")
        self.assertEqual(resp.json()["allergies"], "Lactose")

    def test_child_validation(self):
        resp = self.post("/api/children", {"fullName": "   "})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("fullName", resp.json()["errors"])
        self.assertFalse(Child.objects.exists())

    def test_children_filtered_by_class(self):
        classroom = Classroom.objects.create(name="Maternal")
        Child.objects.create(full_name="Lia", classroom=classroom)
        Child.objects.create(full_name="Téo")
        resp = self.client.get("/api/children", {"classId": str(classroom.pk)})
        self.assertEqual([c["fullName"] for c in resp.json()], ["Lia"])
        self.assertEqual(len(self.client.get("/api/children").json()), 2)

    def test_missing_child_is_404(self):
        child = Child.objects.create(full_name="Ana")
        child_id = child.pk
        child.delete()
        resp = self.client.get(f"/api/children/{child_id}")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"message": "Not found"})

    def test_storage_failure_is_500(self):
        with mock.patch("ministry.services.list_classes", side_effect=DatabaseError("disk full")):
            with self.assertLogs("api", level="ERROR"):
                resp = self.client.get("/api/classes")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"message": "Internal server error"})


class GuardianTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.child = Child.objects.create(full_name="Ana")

    def test_create_linked_guardian(self):
        resp = self.post("/api/guardians", {
            "fullName": "Carla Souza",
            "relationship": "mãe",
            "phoneWhatsApp": "(11) 98888-1111",
            "childId": str(self.child.pk),
            "isPrimary": True,
        })
        self.assertEqual(resp.status_code, 201)
        self.assertTrue(resp.json()["contactAuthorization"])

        resp = self.client.get(f"/api/guardians/child/{self.child.pk}")
        self.assertEqual(len(resp.json()), 1)
        self.assertEqual(resp.json()[0]["fullName"], "Carla Souza")
        self.assertTrue(resp.json()[0]["isPrimary"])

    def test_link_existing_guardian(self):
        guardian = Guardian.objects.create(full_name="Bruno", relationship="pai", phone_whatsapp="11988882222")
        resp = self.post(f"/api/guardians/{guardian.pk}/children", {"childId": str(self.child.pk)})
        self.assertEqual(resp.status_code, 201)
        self.assertFalse(resp.json()["isPrimary"])
        self.assertTrue(ChildGuardian.objects.filter(child=self.child, guardian=guardian).exists())

    def test_phone_is_validated(self):
        resp = self.post("/api/guardians", {"fullName": "X", "relationship": "tio", "phoneWhatsApp": "123"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("phoneWhatsApp", resp.json()["errors"])

    def test_update_and_delete(self):
        guardian = Guardian.objects.create(full_name="Bruno", relationship="pai", phone_whatsapp="11988882222")
        resp = self.put(f"/api/guardians/{guardian.pk}", {"contactAuthorization": False})
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["contactAuthorization"])
        self.assertEqual(resp.json()["fullName"], "Bruno")
        self.assertEqual(self.client.delete(f"/api/guardians/{guardian.pk}").status_code, 204)


class AttendanceApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.classroom = Classroom.objects.create(name="Primários")
        self.child = Child.objects.create(full_name="Ana", classroom=self.classroom)

    def test_meeting_and_upsert(self):
        resp = self.post("/api/attendance/meetings", {"classId": str(self.classroom.pk), "date": "2024-03-03"})
        self.assertEqual(resp.status_code, 201)
        meeting_id = resp.json()["id"]
        again = self.post("/api/attendance/meetings", {"classId": str(self.classroom.pk), "date": "2024-03-03"})
        self.assertEqual(again.json()["id"], meeting_id)

        payload = {"classMeetingId": meeting_id, "childId": str(self.child.pk), "status": "ausente"}
        self.assertEqual(self.post("/api/attendance/class", payload).status_code, 200)
        payload["status"] = "presente"
        resp = self.post("/api/attendance/class", payload)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "presente")
        self.assertEqual(ClassAttendance.objects.count(), 1)

        resp = self.client.get("/api/attendance/class/2024-03-03")
        self.assertEqual(len(resp.json()), 1)
        self.assertEqual(self.client.get("/api/attendance/class/2024-03-10").json(), [])

    def test_invalid_status_and_date(self):
        meeting = ClassMeeting.objects.create(classroom=self.classroom, date=timezone.localdate())
        resp = self.post(
            "/api/attendance/class",
            {"classMeetingId": str(meeting.pk), "childId": str(self.child.pk), "status": "talvez"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("status", resp.json()["errors"])
        self.assertEqual(self.client.get("/api/attendance/class/03-03-2024").status_code, 400)

    def test_worship_attendance(self):
        resp = self.post("/api/attendance/services", {"date": "2024-03-03", "description": "Culto da Família"})
        self.assertEqual(resp.status_code, 201)
        service_id = resp.json()["id"]
        resp = self.post(
            "/api/attendance/worship",
            {"worshipServiceId": service_id, "childId": str(self.child.pk), "status": "presente"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(self.client.get("/api/attendance/worship/2024-03-03").json()), 1)

    def test_consecutive_absences(self):
        for day in ("2024-03-03", "2024-03-10"):
            meeting = ClassMeeting.objects.create(classroom=self.classroom, date=day)
            self.post(
                "/api/attendance/class",
                {"classMeetingId": str(meeting.pk), "childId": str(self.child.pk), "status": "ausente"},
            )
        resp = self.client.get(f"/api/attendance/consecutive-absences/{self.child.pk}")
        self.assertEqual(resp.json()["consecutiveAbsences"], 2)
        resp = self.client.get(f"/api/attendance/consecutive-absences/{self.child.pk}", {"limit": 1})
        self.assertEqual(resp.json()["consecutiveAbsences"], 1)
        resp = self.client.get(f"/api/attendance/consecutive-absences/{self.child.pk}", {"limit": "x"})
        self.assertEqual(resp.status_code, 400)


class DiscipleshipApiTests(ApiTestCase):
    def test_meditation_status_and_memorization(self):
        child = Child.objects.create(full_name="Ana")
        week = self.post("/api/meditations/weeks", {"weekReference": "2024-W10", "theme": "Fé"}).json()
        resp = self.post(
            "/api/meditations/status",
            {"childId": str(child.pk), "meditationWeekId": week["id"], "status": "entregou"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["deliveryDate"], timezone.localdate().isoformat())
        self.assertEqual(len(self.client.get("/api/meditations/current").json()), 1)

        verse = self.post("/api/verses", {"reference": "Jo 3:16", "text": "Porque Deus amou o mundo..."}).json()
        resp = self.post(
            "/api/verses/memorizations",
            {"childId": str(child.pk), "bibleVerseId": verse["id"], "status": "em_andamento"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["memorizedDate"])
        self.assertEqual(len(self.client.get("/api/verses/memorizations").json()), 1)

    def test_bad_week_reference(self):
        resp = self.post("/api/meditations/weeks", {"weekReference": "semana 10", "theme": "Fé"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("weekReference", resp.json()["errors"])


class NoteApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.child = Child.objects.create(full_name="Ana")
        self.assistant = User.objects.create_user(username="aux", role=User.Role.ASSISTANT)

    def test_create_note_records_author(self):
        resp = self.post("/api/notes", {
            "childId": str(self.child.pk),
            "title": "Saúde",
            "content": "Usa bombinha",
            "tags": ["saude", "saude"],
            "attentionLevel": "alta",
            "isSensitive": True,
        })
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["createdBy"], str(self.user.pk))
        self.assertEqual(resp.json()["tags"], ["saude"])

    def test_sensitive_notes_hidden_from_assistants(self):
        note = Note.objects.create(
            child=self.child, title="Família", content="...", attention_level="media", is_sensitive=True
        )
        self.client.force_login(self.assistant)
        self.assertEqual(self.client.get("/api/notes").json(), [])
        self.assertEqual(self.client.get(f"/api/notes/child/{self.child.pk}").json(), [])
        self.assertEqual(self.put(f"/api/notes/{note.pk}", {"title": "x"}).status_code, 404)
        self.assertEqual(self.client.delete(f"/api/notes/{note.pk}").status_code, 404)
        self.assertTrue(Note.objects.filter(pk=note.pk).exists())

    def test_update_note(self):
        note = Note.objects.create(child=self.child, title="Elogio", content="...", attention_level="baixa")
        resp = self.put(f"/api/notes/{note.pk}", {"reminderDate": "2030-01-10"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["reminderDate"], "2030-01-10")
        self.assertEqual(resp.json()["title"], "Elogio")


class MessagingApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.child = Child.objects.create(full_name="Ana Souza")
        self.guardian = Guardian.objects.create(
            full_name="Carla Souza", relationship="mãe", phone_whatsapp="(11) 98888-1111"
        )
        ChildGuardian.objects.create(child=self.child, guardian=self.guardian, is_primary=True)
        self.template = MessageTemplate.objects.create(
            title="Falta", category="falta", body_template="Olá {responsavel}, sentimos falta de {crianca}."
        )
        self.ids = {"childId": str(self.child.pk), "guardianId": str(self.guardian.pk)}

    def test_preview(self):
        resp = self.post("/api/messages/preview", {**self.ids, "templateId": str(self.template.pk)})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Olá Carla Souza, sentimos falta de Ana Souza.")
        self.assertTrue(resp.json()["whatsappLink"].startswith("https://wa.me/11988881111?text="))

    def test_send_and_history(self):
        resp = self.post("/api/messages/send", {**self.ids, "templateId": str(self.template.pk)})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["generatedMessage"], "Olá Carla Souza, sentimos falta de Ana Souza.")
        self.assertEqual(resp.json()["sentBy"], str(self.user.pk))

        self.put(f"/api/message-templates/{self.template.pk}", {"bodyTemplate": "Outro texto"})
        history = self.client.get("/api/messages/history").json()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["generatedMessage"], "Olá Carla Souza, sentimos falta de Ana Souza.")

    def test_send_to_guardian_without_authorization(self):
        self.guardian.contact_authorization = False
        self.guardian.save()
        resp = self.post("/api/messages/send", {**self.ids, "message": "Oi"})
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(MessageSend.objects.exists())

    def test_template_edit_rederives_variables_and_delete_retires(self):
        resp = self.put(f"/api/message-templates/{self.template.pk}", {"bodyTemplate": "Oi {crianca} em {data}"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["supportedVariables"], ["crianca", "data"])
        self.assertEqual(resp.json()["title"], "Falta")

        self.assertEqual(self.client.delete(f"/api/message-templates/{self.template.pk}").status_code, 204)
        self.assertEqual(self.client.get("/api/message-templates").json(), [])
        self.assertTrue(MessageTemplate.objects.filter(pk=self.template.pk).exists())


class ReportingApiTests(ApiTestCase):
    def test_dashboard_stats_keys(self):
        resp = self.client.get("/api/dashboard/stats")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        for key in (
            "classAttendancePercentage", "worshipAttendancePercentage", "meditationsDelivered",
            "totalMeditations", "versesMemorized", "totalVerses", "totalChildren", "totalClasses",
            "childrenAtRisk", "upcomingReminders",
        ):
            self.assertIn(key, body)

    def test_dashboard_bad_range(self):
        resp = self.client.get("/api/dashboard/stats", {"from": "2024-02-01", "to": "2024-01-01"})
        self.assertEqual(resp.status_code, 400)

    def test_export(self):
        resp = self.client.get("/api/reports/export", {"from": "2024-01-01", "to": "2024-01-31"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp["Content-Type"], "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        self.assertIn("attachment", resp["Content-Disposition"])

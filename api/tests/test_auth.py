from django.test import Client, TestCase, override_settings

from accounts.models import User
from ministry.models import Classroom


class ApiLoginRequiredTests(TestCase):
    def test_anonymous_read_is_rejected(self):
        resp = self.client.get("/api/children")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"message": "Unauthorized"})

    def test_anonymous_write_has_no_side_effects(self):
        resp = self.client.post("/api/classes", {"name": "Primários"}, content_type="application/json")
        self.assertEqual(resp.status_code, 401)
        self.assertFalse(Classroom.objects.exists())

    def test_unknown_api_path_is_also_gated(self):
        self.assertEqual(self.client.get("/api/nothing-here").status_code, 401)


class SessionFlowTests(TestCase):
    def register(self, **data):
        return self.client.post("/api/register", data, content_type="application/json")

    def test_register_logs_in_and_hides_password(self):
        resp = self.register(username="leader1", password="pw123")
        self.assertEqual(resp.status_code, 201)

        resp = self.client.get("/api/user")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["username"], "leader1")
        self.assertEqual(body["role"], "leader")
        self.assertNotIn("password", body)

    def test_register_duplicate_username(self):
        self.register(username="leader1", password="pw123")
        self.client.post("/api/logout")
        resp = self.register(username="leader1", password="other")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["message"], "Username already exists")

    def test_register_cannot_pick_admin(self):
        resp = self.register(username="sneaky", password="pw123", role="admin")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["role"], "leader")

    def test_register_validation(self):
        resp = self.register(username="", password="pw123")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("username", resp.json()["errors"])

    @override_settings(MINISTRY_OPEN_REGISTRATION=False)
    def test_register_when_closed(self):
        resp = self.register(username="leader1", password="pw123")
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(User.objects.filter(username="leader1").exists())

    def test_login_logout(self):
        User.objects.create_user(username="tester", password="pass12345")  # nosec B106
        resp = self.client.post(
            "/api/login", {"username": "tester", "password": "wrong"}, content_type="application/json"
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Invalid username or password")

        resp = self.client.post(
            "/api/login", {"username": "tester", "password": "pass12345"}, content_type="application/json"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "tester")
        self.assertEqual(self.client.get("/api/user").status_code, 200)

        self.assertEqual(self.client.post("/api/logout").status_code, 200)
        self.assertEqual(self.client.post("/api/logout").status_code, 200)
        self.assertEqual(self.client.get("/api/user").status_code, 401)

    def test_login_requires_both_fields(self):
        resp = self.client.post("/api/login", {"username": "tester"}, content_type="application/json")
        self.assertEqual(resp.status_code, 400)

    def test_login_rejects_malformed_json(self):
        resp = self.client.post("/api/login", "{not json", content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Invalid JSON")

    def test_unknown_user_and_wrong_password_look_the_same(self):
        User.objects.create_user(username="tester", password="pass12345")  # nosec B106
        unknown = self.client.post(
            "/api/login", {"username": "ghost", "password": "pass12345"}, content_type="application/json"
        )
        wrong = self.client.post(
            "/api/login", {"username": "tester", "password": "nope"}, content_type="application/json"
        )
        self.assertEqual(unknown.status_code, wrong.status_code)
        self.assertEqual(unknown.json(), wrong.json())

    def test_deactivated_user_loses_session(self):
        user = User.objects.create_user(username="tester", password="pass12345")  # nosec B106
        self.client.force_login(user)
        self.assertEqual(self.client.get("/api/user").status_code, 200)
        user.is_active = False
        user.save()
        self.assertEqual(self.client.get("/api/user").status_code, 401)

    def test_change_password_keeps_session(self):
        user = User.objects.create_user(username="tester", password="pass12345")  # nosec B106
        self.client.force_login(user)
        resp = self.client.post(
            "/api/user/password",
            {"currentPassword": "wrong", "newPassword": "nova"},
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post(
            "/api/user/password",
            {"currentPassword": "pass12345", "newPassword": "nova"},
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/api/user").status_code, 200)
        self.client.logout()
        self.assertTrue(self.client.login(username="tester", password="nova"))  # nosec B106


class RoleTests(TestCase):
    def setUp(self):
        self.admin = User.objects.get(username="admin")
        self.leader = User.objects.create_user(username="lider", role=User.Role.LEADER)
        self.assistant = User.objects.create_user(username="aux", role=User.Role.ASSISTANT)

    def test_user_management_is_admin_only(self):
        self.client.force_login(self.leader)
        self.assertEqual(self.client.get("/api/users").status_code, 403)

        self.client.force_login(self.admin)
        resp = self.client.get("/api/users")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual({u["username"] for u in resp.json()}, {"admin", "lider", "aux"})
        self.assertTrue(all("password" not in u for u in resp.json()))

    def test_admin_creates_and_updates_users(self):
        classroom = Classroom.objects.create(name="Primários")
        self.client.force_login(self.admin)
        resp = self.client.post(
            "/api/users",
            {"username": "nova", "password": "pw123", "role": "assistant", "classIds": [str(classroom.pk)]},
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 201)
        created = User.objects.get(username="nova")
        self.assertTrue(created.check_password("pw123"))
        self.assertEqual(list(created.classes.all()), [classroom])

        resp = self.client.put(
            f"/api/users/{created.pk}", {"role": "leader", "isActive": False}, content_type="application/json"
        )
        self.assertEqual(resp.status_code, 200)
        created.refresh_from_db()
        self.assertEqual(created.role, User.Role.LEADER)
        self.assertFalse(created.is_active)
        # Partial update leaves the rest alone
        self.assertTrue(created.check_password("pw123"))
        self.assertEqual(list(created.classes.all()), [classroom])

    def test_admin_user_create_requires_password(self):
        self.client.force_login(self.admin)
        resp = self.client.post("/api/users", {"username": "semsenha"}, content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("password", resp.json()["errors"])

    def test_curriculum_writes_need_leader(self):
        payload = {"weekReference": "2024-W10", "theme": "Fé"}
        self.client.force_login(self.assistant)
        self.assertEqual(self.client.get("/api/meditations/weeks").status_code, 200)
        resp = self.client.post("/api/meditations/weeks", payload, content_type="application/json")
        self.assertEqual(resp.status_code, 403)

        self.client.force_login(self.leader)
        resp = self.client.post("/api/meditations/weeks", payload, content_type="application/json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["weekReference"], "2024-W10")
        self.assertTrue(resp.json()["allowsAttachments"])

    def test_template_writes_need_leader(self):
        payload = {"title": "Aviso", "category": "aviso", "bodyTemplate": "Olá {responsavel}"}
        self.client.force_login(self.assistant)
        resp = self.client.post("/api/message-templates", payload, content_type="application/json")
        self.assertEqual(resp.status_code, 403)

        self.client.force_login(self.admin)
        resp = self.client.post("/api/message-templates", payload, content_type="application/json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["supportedVariables"], ["responsavel"])


class MalformedInputTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="tester", password="pass12345")  # nosec B106

    def test_body_that_is_not_utf8(self):
        self.client.force_login(self.user)
        resp = self.client.post("/api/classes", b'{"name": "\xff\xfe"}', content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Invalid JSON")
        self.assertFalse(Classroom.objects.exists())

    def test_login_with_non_string_credentials(self):
        for payload in (
            {"username": "tester", "password": ["x"]},
            {"username": "ghost", "password": {"a": 1}},
            {"username": 42, "password": "pass12345"},
        ):
            with self.subTest(payload=payload):
                resp = self.client.post("/api/login", payload, content_type="application/json")
                self.assertEqual(resp.status_code, 400)
                self.assertTrue(set(resp.json()["errors"]) & {"username", "password"})
        self.assertEqual(self.client.get("/api/user").status_code, 401)

    def test_wrong_method_is_json_405(self):
        self.client.force_login(self.user)
        resp = self.client.patch("/api/classes", {"name": "X"}, content_type="application/json")
        self.assertEqual(resp.status_code, 405)
        self.assertEqual(resp["Content-Type"], "application/json")
        self.assertEqual(resp.json(), {"message": "Method not allowed"})
        self.assertEqual(resp["Allow"], "GET, POST")

    def test_unknown_path_is_json_404_when_signed_in(self):
        self.client.force_login(self.user)
        resp = self.client.get("/api/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"message": "Not found"})


class RegistrationValidationTests(TestCase):
    def register(self, **data):
        return self.client.post("/api/register", data, content_type="application/json")

    def test_username_characters_are_validated(self):
        resp = self.register(username="bad name!*", password="pw123")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("username", resp.json()["errors"])
        self.assertFalse(User.objects.filter(username="bad name!*").exists())

    def test_duplicate_email_has_its_own_message(self):
        self.assertEqual(self.register(username="ana", password="pw123", email="ana@example.com").status_code, 201)
        self.client.post("/api/logout")
        resp = self.register(username="fresh", password="pw123", email="ana@example.com")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["message"], "Email already in use")
        self.assertFalse(User.objects.filter(username="fresh").exists())

    def test_users_without_email_do_not_collide(self):
        self.assertEqual(self.register(username="um", password="pw123").status_code, 201)
        self.client.post("/api/logout")
        self.assertEqual(self.register(username="dois", password="pw123", email="").status_code, 201)
        self.assertEqual(User.objects.filter(username__in=["um", "dois"], email__isnull=True).count(), 2)


class CsrfTests(TestCase):
    def setUp(self):
        User.objects.create_user(username="tester", password="pass12345")  # nosec B106
        self.client = Client(enforce_csrf_checks=True)
        self.credentials = {"username": "tester", "password": "pass12345"}

    def test_write_without_token_is_refused(self):
        resp = self.client.post("/api/login", self.credentials, content_type="application/json")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"message": "CSRF verification failed"})

    def test_token_from_csrf_endpoint_is_accepted(self):
        token = self.client.get("/api/csrf").json()["csrfToken"]
        resp = self.client.post(
            "/api/login", self.credentials, content_type="application/json", HTTP_X_CSRFTOKEN=token
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "tester")

from datetime import date

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from accounts.models import User
from ministry.models import Child, Classroom, Guardian
from ministry.services import link_guardian
from .models import ImmutableRecordError, MessageSend, MessageTemplate
from .services import (
    ContactNotAuthorized,
    delete_template,
    list_active_templates,
    log_message_send,
    message_history,
    placeholders,
    preview_message,
    render_message,
    template_variables,
    update_template,
    whatsapp_link,
)


class RenderingTests(SimpleTestCase):
    def test_render_fills_known_and_keeps_unknown(self):
        text = render_message("Olá {responsavel}, {crianca} {desconhecido}", {"responsavel": "Carla", "crianca": "Ana"})
        self.assertEqual(text, "Olá Carla, Ana {desconhecido}")

    def test_placeholders_in_order_without_repeats(self):
        self.assertEqual(placeholders("{crianca} e {responsavel} e {crianca}"), ["crianca", "responsavel"])

    def test_whatsapp_link(self):
        link = whatsapp_link("(11) 98888-1111", "Olá mundo")
        self.assertEqual(link, "https://wa.me/11988881111?text=Ol%C3%A1%20mundo")


class MessagingTestBase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="lider")
        self.classroom = Classroom.objects.create(name="Primários")
        self.child = Child.objects.create(full_name="Ana Souza", classroom=self.classroom)
        self.guardian = Guardian.objects.create(
            full_name="Carla Souza", relationship="mãe", phone_whatsapp="(11) 98888-1111"
        )
        link_guardian(self.guardian.pk, self.child.pk, is_primary=True)
        self.template = MessageTemplate.objects.create(
            title="Falta",
            category=MessageTemplate.Category.ABSENCE,
            body_template="Olá {responsavel}, sentimos falta de {crianca} na turma {turma}.",
        )


class TemplateVariablesTests(MessagingTestBase):
    def test_variables(self):
        variables = template_variables(self.child, self.guardian, today=date(2024, 3, 5))
        self.assertEqual(variables, {
            "responsavel": "Carla Souza",
            "crianca": "Ana Souza",
            "turma": "Primários",
            "data": "05/03/2024",
        })

    def test_preview(self):
        text, link = preview_message(self.child.pk, self.guardian.pk, self.template.pk)
        self.assertEqual(text, "Olá Carla Souza, sentimos falta de Ana Souza na turma Primários.")
        self.assertTrue(link.startswith("https://wa.me/11988881111?text="))


class MessageLogTests(MessagingTestBase):
    def test_logged_text_is_verbatim_and_survives_template_edits(self):
        send = log_message_send(self.child.pk, self.guardian.pk, self.template.pk, None, self.user)
        expected = "Olá Carla Souza, sentimos falta de Ana Souza na turma Primários."
        self.assertEqual(send.generated_message, expected)
        self.assertEqual(send.channel, "whatsapp")

        update_template(self.template.pk, body_template="Novo texto para {responsavel}")
        history = list(message_history())
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].generated_message, expected)

    def test_custom_message_kept_as_written(self):
        send = log_message_send(self.child.pk, self.guardian.pk, None, "  Texto livre {x}  ", self.user)
        self.assertEqual(send.generated_message, "  Texto livre {x}  ")
        self.assertIsNone(send.message_template)

    def test_history_newest_first(self):
        first = log_message_send(self.child.pk, self.guardian.pk, None, "primeira", self.user)
        second = log_message_send(self.child.pk, self.guardian.pk, None, "segunda", self.user)
        self.assertEqual([m.pk for m in message_history()], [second.pk, first.pk])

    def test_message_or_template_required(self):
        with self.assertRaises(ValidationError):
            log_message_send(self.child.pk, self.guardian.pk, None, "", self.user)

    def test_refuses_guardian_without_authorization(self):
        self.guardian.contact_authorization = False
        self.guardian.save()
        with self.assertRaises(ContactNotAuthorized):
            log_message_send(self.child.pk, self.guardian.pk, self.template.pk, None, self.user)
        self.assertFalse(MessageSend.objects.exists())

    def test_refuses_unlinked_guardian(self):
        stranger = Guardian.objects.create(full_name="Outro", relationship="tio", phone_whatsapp="11977776666")
        with self.assertRaises(ValidationError):
            log_message_send(self.child.pk, stranger.pk, None, "oi", self.user)

    def test_sends_are_append_only(self):
        send = log_message_send(self.child.pk, self.guardian.pk, None, "original", self.user)
        send.generated_message = "alterado"
        with self.assertRaises(ImmutableRecordError):
            send.save()
        with self.assertRaises(ImmutableRecordError):
            send.delete()
        self.assertEqual(MessageSend.objects.get().generated_message, "original")


class TemplateLifecycleTests(MessagingTestBase):
    def test_delete_retires_template(self):
        delete_template(self.template.pk)
        self.template.refresh_from_db()
        self.assertFalse(self.template.is_active)
        self.assertNotIn(self.template, list(list_active_templates()))

    def test_active_templates_by_category_then_title(self):
        MessageTemplate.objects.create(title="B", category=MessageTemplate.Category.WORSHIP, body_template="x")
        MessageTemplate.objects.create(title="A", category=MessageTemplate.Category.WORSHIP, body_template="x")
        titles = [t.title for t in list_active_templates()]
        self.assertEqual(titles, ["A", "B", "Falta"])

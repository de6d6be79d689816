import re
from datetime import date
from typing import Optional
from urllib.parse import quote

from django.core.exceptions import ValidationError
from django.utils import timezone

from ministry.models import Child, ChildGuardian, Guardian

from .models import MessageSend, MessageTemplate

PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class ContactNotAuthorized(Exception):
    pass


def placeholders(body: str) -> list:
    """Placeholder names in order of first appearance."""
    seen = []
    for name in PLACEHOLDER_RE.findall(body or ""):
        if name not in seen:
            seen.append(name)
    return seen


def render_message(body: str, variables: dict) -> str:
    """Fill ``{name}`` tokens; unknown tokens are left as written."""
    def _sub(match):
        value = variables.get(match.group(1))
        return match.group(0) if value is None else str(value)
    return PLACEHOLDER_RE.sub(_sub, body or "")


def template_variables(child: Child, guardian: Guardian, today: Optional[date] = None) -> dict:
    today = today or timezone.localdate()
    return {
        "responsavel": guardian.full_name,
        "crianca": child.full_name,
        "turma": child.classroom.name if child.classroom_id else "",
        "data": today.strftime("%d/%m/%Y"),
    }


def whatsapp_link(phone: str, text: str) -> str:
    digits = "".join(ch for ch in phone or "" if ch.isdigit())
    return f"https://wa.me/{digits}?text={quote(text)}"


# Templates

def list_active_templates():
    return MessageTemplate.objects.filter(is_active=True).order_by("category", "title")


def get_template(template_id) -> MessageTemplate:
    return MessageTemplate.objects.get(pk=template_id)


def create_template(**fields) -> MessageTemplate:
    return MessageTemplate.objects.create(**fields)


def update_template(template_id, **fields) -> MessageTemplate:
    template = MessageTemplate.objects.get(pk=template_id)
    for name, value in fields.items():
        setattr(template, name, value)
    template.save()
    return template


def delete_template(template_id):
    """Templates referenced by the send log are retired, not removed."""
    template = MessageTemplate.objects.get(pk=template_id)
    template.is_active = False
    template.save(update_fields=["is_active"])


# Sending

def _resolve_recipient(child_id, guardian_id):
    child = Child.objects.select_related("classroom").get(pk=child_id)
    guardian = Guardian.objects.get(pk=guardian_id)
    if not ChildGuardian.objects.filter(child=child, guardian=guardian).exists():
        raise ValidationError({"guardian": "This guardian is not linked to the child."})
    return child, guardian


def preview_message(child_id, guardian_id, template_id) -> tuple:
    child, guardian = _resolve_recipient(child_id, guardian_id)
    template = get_template(template_id)
    text = render_message(template.body_template, template_variables(child, guardian))
    return text, whatsapp_link(guardian.phone_whatsapp, text)


def log_message_send(child_id, guardian_id, template_id, message: Optional[str], sent_by) -> MessageSend:
    """Append the message to the history exactly as it goes out.

    When no text is given the template is rendered now, so later template edits
    never change what the log says was sent.
    """
    child, guardian = _resolve_recipient(child_id, guardian_id)
    if not guardian.contact_authorization:
        raise ContactNotAuthorized(f"{guardian.full_name} has not authorized contact.")

    template = get_template(template_id) if template_id else None
    if not message:
        if template is None:
            raise ValidationError({"message": "Provide a message or a template."})
        message = render_message(template.body_template, template_variables(child, guardian))

    return MessageSend.objects.create(
        child=child,
        guardian=guardian,
        message_template=template,
        channel=MessageSend.CHANNEL_WHATSAPP,
        generated_message=message,
        sent_by=sent_by,
    )


def message_history():
    return MessageSend.objects.select_related("child", "guardian", "message_template", "sent_by").order_by("-sent_at")

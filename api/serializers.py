"""JSON <-> model translation for the REST API.

Request bodies use camelCase keys. Each ``*_FIELDS`` map names the form field
a key feeds; unknown keys are ignored.
"""
import json

from django.db import models
from django.forms.models import model_to_dict

from .errors import BadRequest

USER_FIELDS = {
    "username": "username",
    "password": "password",
    "email": "email",
    "firstName": "first_name",
    "lastName": "last_name",
    "role": "role",
    "isActive": "is_active",
    "classIds": "classes",
}
REGISTER_FIELDS = {k: v for k, v in USER_FIELDS.items() if k not in ("isActive", "classIds")}
LOGIN_FIELDS = {"username": "username", "password": "password"}
PASSWORD_FIELDS = {"currentPassword": "current_password", "newPassword": "new_password"}

CLASS_FIELDS = {"name": "name", "room": "room", "observations": "observations"}
CHILD_FIELDS = {
    "fullName": "full_name",
    "birthDate": "birth_date",
    "classId": "classroom",
    "photoUrl": "photo_url",
    "allergies": "allergies",
    "observations": "observations",
}
GUARDIAN_FIELDS = {
    "fullName": "full_name",
    "relationship": "relationship",
    "phoneWhatsApp": "phone_whatsapp",
    "email": "email",
    "contactAuthorization": "contact_authorization",
}
NOTE_FIELDS = {
    "childId": "child",
    "title": "title",
    "content": "content",
    "tags": "tags",
    "attentionLevel": "attention_level",
    "reminderDate": "reminder_date",
    "isSensitive": "is_sensitive",
}

MEETING_FIELDS = {"classId": "classroom", "date": "date", "observations": "observations"}
SERVICE_FIELDS = {"date": "date", "description": "description", "observations": "observations"}
CLASS_ATTENDANCE_FIELDS = {
    "classMeetingId": "class_meeting",
    "childId": "child",
    "status": "status",
    "observation": "observation",
}
WORSHIP_ATTENDANCE_FIELDS = {
    "worshipServiceId": "worship_service",
    "childId": "child",
    "status": "status",
    "observation": "observation",
}

WEEK_FIELDS = {
    "weekReference": "week_reference",
    "theme": "theme",
    "materialLink": "material_link",
    "allowsAttachments": "allows_attachments",
}
MEDITATION_STATUS_FIELDS = {
    "childId": "child",
    "meditationWeekId": "meditation_week",
    "status": "status",
    "observation": "observation",
    "evidenceUrl": "evidence_url",
}
VERSE_FIELDS = {"reference": "reference", "text": "text", "weekReference": "week_reference"}
MEMORIZATION_FIELDS = {
    "childId": "child",
    "bibleVerseId": "bible_verse",
    "status": "status",
    "observation": "observation",
}

TEMPLATE_FIELDS = {
    "title": "title",
    "bodyTemplate": "body_template",
    "supportedVariables": "supported_variables",
    "isActive": "is_active",
    "category": "category",
}
MESSAGE_FIELDS = {
    "childId": "child",
    "guardianId": "guardian",
    "templateId": "template",
    "message": "message",
}


def parse_body(request) -> dict:
    """Decode a JSON object body; an empty body is an empty object."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BadRequest("Invalid JSON") from exc
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object")
    return payload


def from_payload(payload: dict, field_map: dict) -> dict:
    return {field: payload[key] for key, field in field_map.items() if key in payload}


def form_data(model, fields, changes, instance=None) -> dict:
    """Current values of ``instance`` (or a fresh ``model()``) overlaid with ``changes``.

    Feeding the merged dict to a ModelForm gives partial updates, and fills
    model defaults for keys a create request leaves out.
    """
    data = model_to_dict(instance if instance is not None else model(), fields=fields)
    for name, value in data.items():
        if isinstance(value, list) and value and isinstance(value[0], models.Model):
            data[name] = [obj.pk for obj in value]
    data.update(changes)
    return {name: value for name, value in data.items() if value is not None}


def validated(form):
    if not form.is_valid():
        errors = {
            _camel(field): [e["message"] for e in errs]
            for field, errs in form.errors.get_json_data().items()
        }
        raise BadRequest("Validation failed", errors=errors)
    return form.cleaned_data


def camelize(value):
    """Recursively rewrite snake_case dict keys as camelCase."""
    if isinstance(value, dict):
        return {_camel(k): camelize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [camelize(v) for v in value]
    return value


def _camel(name):
    if name.startswith("_"):
        return name
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# Responses

def public_user(user):
    return {
        "id": user.pk,
        "username": user.username,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role,
        "isActive": user.is_active,
        "classIds": list(user.classes.values_list("pk", flat=True)),
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }


def class_json(classroom):
    data = {
        "id": classroom.pk,
        "name": classroom.name,
        "room": classroom.room,
        "observations": classroom.observations,
        "createdAt": classroom.created_at,
    }
    if hasattr(classroom, "child_count"):
        data["childCount"] = classroom.child_count
    return data


def child_json(child):
    return {
        "id": child.pk,
        "fullName": child.full_name,
        "birthDate": child.birth_date,
        "classId": child.classroom_id,
        "className": child.classroom.name if child.classroom_id else None,
        "photoUrl": child.photo_url,
        "allergies": child.allergies,
        "observations": child.observations,
        "createdAt": child.created_at,
        "updatedAt": child.updated_at,
    }


def guardian_json(guardian):
    data = {
        "id": guardian.pk,
        "fullName": guardian.full_name,
        "relationship": guardian.relationship,
        "phoneWhatsApp": guardian.phone_whatsapp,
        "email": guardian.email,
        "contactAuthorization": guardian.contact_authorization,
        "createdAt": guardian.created_at,
    }
    if hasattr(guardian, "is_primary"):
        data["isPrimary"] = guardian.is_primary
    return data


def link_json(link):
    return {"childId": link.child_id, "guardianId": link.guardian_id, "isPrimary": link.is_primary}


def note_json(note):
    return {
        "id": note.pk,
        "childId": note.child_id,
        "title": note.title,
        "content": note.content,
        "tags": note.tags,
        "attentionLevel": note.attention_level,
        "reminderDate": note.reminder_date,
        "isSensitive": note.is_sensitive,
        "createdBy": note.created_by_id,
        "createdAt": note.created_at,
        "updatedAt": note.updated_at,
    }


def meeting_json(meeting):
    return {
        "id": meeting.pk,
        "classId": meeting.classroom_id,
        "date": meeting.date,
        "observations": meeting.observations,
        "createdAt": meeting.created_at,
    }


def service_json(service):
    return {
        "id": service.pk,
        "date": service.date,
        "description": service.description,
        "observations": service.observations,
        "createdAt": service.created_at,
    }


def class_attendance_json(row):
    return {
        "id": row.pk,
        "classMeetingId": row.class_meeting_id,
        "childId": row.child_id,
        "status": row.status,
        "observation": row.observation,
        "createdAt": row.created_at,
    }


def worship_attendance_json(row):
    return {
        "id": row.pk,
        "worshipServiceId": row.worship_service_id,
        "childId": row.child_id,
        "status": row.status,
        "observation": row.observation,
        "createdAt": row.created_at,
    }


def week_json(week):
    return {
        "id": week.pk,
        "weekReference": week.week_reference,
        "theme": week.theme,
        "materialLink": week.material_link,
        "allowsAttachments": week.allows_attachments,
        "createdAt": week.created_at,
    }


def delivery_json(delivery):
    return {
        "id": delivery.pk,
        "childId": delivery.child_id,
        "meditationWeekId": delivery.meditation_week_id,
        "status": delivery.status,
        "deliveryDate": delivery.delivery_date,
        "evidenceUrl": delivery.evidence_url,
        "observation": delivery.observation,
        "createdAt": delivery.created_at,
        "updatedAt": delivery.updated_at,
    }


def verse_json(verse):
    return {
        "id": verse.pk,
        "reference": verse.reference,
        "text": verse.text,
        "weekReference": verse.week_reference,
        "createdAt": verse.created_at,
    }


def memorization_json(memorization):
    return {
        "id": memorization.pk,
        "childId": memorization.child_id,
        "bibleVerseId": memorization.bible_verse_id,
        "status": memorization.status,
        "memorizedDate": memorization.memorized_date,
        "observation": memorization.observation,
        "createdAt": memorization.created_at,
        "updatedAt": memorization.updated_at,
    }


def template_json(template):
    return {
        "id": template.pk,
        "title": template.title,
        "bodyTemplate": template.body_template,
        "supportedVariables": template.supported_variables,
        "isActive": template.is_active,
        "category": template.category,
        "createdAt": template.created_at,
    }


def message_send_json(send):
    return {
        "id": send.pk,
        "childId": send.child_id,
        "guardianId": send.guardian_id,
        "templateId": send.message_template_id,
        "channel": send.channel,
        "generatedMessage": send.generated_message,
        "sentAt": send.sent_at,
        "sentBy": send.sent_by_id,
    }

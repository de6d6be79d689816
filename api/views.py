import logging

from django.contrib.auth import login, logout, update_session_auth_hash
from django.http import Http404, HttpResponse, JsonResponse
from django.middleware.csrf import get_token
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import ensure_csrf_cookie

from accounts import services as accounts
from accounts.forms import LoginForm, PasswordChangeForm, RegistrationForm, UserForm
from accounts.models import User
from attendance import services as attendance
from attendance.forms import (
    ClassAttendanceForm,
    ClassMeetingForm,
    WorshipAttendanceForm,
    WorshipServiceForm,
)
from discipleship import services as discipleship
from discipleship.forms import (
    BibleVerseForm,
    MeditationStatusForm,
    MeditationWeekForm,
    VerseMemorizationForm,
)
from messaging import services as messaging
from messaging.forms import MessagePreviewForm, MessageSendForm, MessageTemplateForm
from messaging.models import MessageTemplate
from ministry import services as ministry
from ministry.forms import ChildForm, ClassroomForm, GuardianForm, NoteForm
from ministry.models import Child, Classroom, Guardian, Note
from reports.exports import XLSX_CONTENT_TYPE, build_attendance_workbook, workbook_bytes
from reports.services import dashboard_stats as build_dashboard_stats

from . import serializers as s
from .auth import require_role, require_role_for_writes
from .errors import BadRequest, Unauthorized, api_view, error_response, require_methods

audit = logging.getLogger("api.audit")

CURRICULUM_ROLES = (User.Role.ADMIN, User.Role.LEADER)

USER_FORM_FIELDS = ["username", "email", "first_name", "last_name", "role", "is_active", "classes"]
CHILD_FORM_FIELDS = ChildForm._meta.fields
GUARDIAN_FORM_FIELDS = GuardianForm._meta.fields
CLASS_FORM_FIELDS = ClassroomForm._meta.fields
NOTE_FORM_FIELDS = NoteForm._meta.fields
TEMPLATE_FORM_FIELDS = MessageTemplateForm._meta.fields
WEEK_FORM_FIELDS = MeditationWeekForm._meta.fields
VERSE_FORM_FIELDS = BibleVerseForm._meta.fields


def _audit(request, model_name, pk, action):
    user = request.user
    audit.info("%s[%s] %s by %s", model_name, pk, action, f"{user.pk}:{user.username}")


def _created(data):
    return JsonResponse(data, status=201)


def _no_content():
    return HttpResponse(status=204)


def _list(items, to_json):
    return JsonResponse([to_json(item) for item in items], safe=False)


def _model_form(form_class, model, fields, payload, field_map, instance=None):
    changes = s.from_payload(payload, field_map)
    if instance is None:
        fields = [f for f in fields if not model._meta.get_field(f).many_to_many]
    data = s.form_data(model, fields, changes, instance=instance)
    return form_class(data, instance=instance)


def _parse_day(value, name="date"):
    try:
        day = parse_date(value) if value else None
    except ValueError:
        day = None
    if day is None:
        raise BadRequest(f"'{name}' must be a date in YYYY-MM-DD format")
    return day


def _query_day(request, name):
    value = request.GET.get(name)
    return _parse_day(value, name) if value else None


# Session auth

@require_methods("GET")
@ensure_csrf_cookie
@api_view
def csrf_token(request):
    return JsonResponse({"csrfToken": get_token(request)})


def csrf_failure(request, reason=""):
    return error_response("CSRF verification failed", 403)


@api_view
def not_found(request):
    raise Http404


@require_methods("POST")
@api_view
def register(request):
    payload = s.parse_body(request)
    data = s.validated(RegistrationForm(s.from_payload(payload, s.REGISTER_FIELDS)))
    user = accounts.register_user(
        data["username"],
        data["password"],
        email=data["email"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        role=data["role"] or None,
    )
    login(request, user)
    return _created(s.public_user(user))


@require_methods("POST")
@api_view
def api_login(request):
    data = s.validated(LoginForm(s.from_payload(s.parse_body(request), s.LOGIN_FIELDS)))
    user = accounts.authenticate_user(request, data["username"], data["password"])
    if user is None:
        raise Unauthorized("Invalid username or password")
    login(request, user)
    return JsonResponse(s.public_user(user))


@require_methods("POST")
@api_view
def api_logout(request):
    logout(request)
    return JsonResponse({"message": "Logged out"})


@require_methods("GET")
@api_view
def current_user(request):
    return JsonResponse(s.public_user(request.user))


@require_methods("POST")
@api_view
def change_password(request):
    data = s.validated(PasswordChangeForm(s.from_payload(s.parse_body(request), s.PASSWORD_FIELDS)))
    if not accounts.change_password(request.user, data["current_password"], data["new_password"]):
        raise BadRequest("Current password is incorrect", errors={"currentPassword": ["Incorrect password."]})
    update_session_auth_hash(request, request.user)
    return JsonResponse({"message": "Password updated"})


# User management

@require_methods("GET", "POST")
@require_role(User.Role.ADMIN)
@api_view
def users(request):
    if request.method == "GET":
        return _list(User.objects.prefetch_related("classes").order_by("username"), s.public_user)
    form = _model_form(UserForm, User, USER_FORM_FIELDS, s.parse_body(request), s.USER_FIELDS)
    s.validated(form)
    user = form.save()
    _audit(request, "User", user.pk, "created")
    return _created(s.public_user(user))


@require_methods("GET", "PUT")
@require_role(User.Role.ADMIN)
@api_view
def user_detail(request, user_id):
    user = User.objects.get(pk=user_id)
    if request.method == "GET":
        return JsonResponse(s.public_user(user))
    form = _model_form(UserForm, User, USER_FORM_FIELDS, s.parse_body(request), s.USER_FIELDS, instance=user)
    s.validated(form)
    user = form.save()
    _audit(request, "User", user.pk, "updated")
    return JsonResponse(s.public_user(user))


# Children

@require_methods("GET", "POST")
@api_view
def children(request):
    if request.method == "GET":
        return _list(ministry.list_children(request.GET.get("classId")), s.child_json)
    form = _model_form(ChildForm, Child, CHILD_FORM_FIELDS, s.parse_body(request), s.CHILD_FIELDS)
    child = ministry.create_child(**s.validated(form))
    _audit(request, "Child", child.pk, "created")
    return _created(s.child_json(child))


@require_methods("GET", "PUT", "DELETE")
@api_view
def child_detail(request, child_id):
    child = ministry.get_child(child_id)
    if request.method == "GET":
        return JsonResponse(s.child_json(child))
    if request.method == "DELETE":
        ministry.delete_child(child_id)
        _audit(request, "Child", child_id, "deleted")
        return _no_content()
    form = _model_form(ChildForm, Child, CHILD_FORM_FIELDS, s.parse_body(request), s.CHILD_FIELDS, instance=child)
    child = ministry.update_child(child_id, **s.validated(form))
    _audit(request, "Child", child.pk, "updated")
    return JsonResponse(s.child_json(child))


# Guardians

@require_methods("GET", "POST")
@api_view
def guardians(request):
    if request.method == "GET":
        return _list(ministry.list_guardians(), s.guardian_json)
    payload = s.parse_body(request)
    form = _model_form(GuardianForm, Guardian, GUARDIAN_FORM_FIELDS, payload, s.GUARDIAN_FIELDS)
    guardian = ministry.create_guardian(
        child_id=payload.get("childId"),
        is_primary=bool(payload.get("isPrimary")),
        **s.validated(form),
    )
    _audit(request, "Guardian", guardian.pk, "created")
    return _created(s.guardian_json(guardian))


@require_methods("GET", "PUT", "DELETE")
@api_view
def guardian_detail(request, guardian_id):
    guardian = Guardian.objects.get(pk=guardian_id)
    if request.method == "GET":
        return JsonResponse(s.guardian_json(guardian))
    if request.method == "DELETE":
        ministry.delete_guardian(guardian_id)
        _audit(request, "Guardian", guardian_id, "deleted")
        return _no_content()
    form = _model_form(
        GuardianForm, Guardian, GUARDIAN_FORM_FIELDS, s.parse_body(request), s.GUARDIAN_FIELDS, instance=guardian
    )
    guardian = ministry.update_guardian(guardian_id, **s.validated(form))
    _audit(request, "Guardian", guardian.pk, "updated")
    return JsonResponse(s.guardian_json(guardian))


@require_methods("GET")
@api_view
def guardians_for_child(request, child_id):
    return _list(ministry.guardians_for_child(child_id), s.guardian_json)


@require_methods("POST")
@api_view
def guardian_children(request, guardian_id):
    payload = s.parse_body(request)
    if not payload.get("childId"):
        raise BadRequest("childId is required", errors={"childId": ["This field is required."]})
    guardian = Guardian.objects.get(pk=guardian_id)
    child = Child.objects.get(pk=payload["childId"])
    link = ministry.link_guardian(guardian.pk, child.pk, is_primary=bool(payload.get("isPrimary")))
    _audit(request, "ChildGuardian", link.pk, "linked")
    return _created(s.link_json(link))


# Classes

@require_methods("GET", "POST")
@api_view
def classes(request):
    if request.method == "GET":
        return _list(ministry.list_classes(), s.class_json)
    form = _model_form(ClassroomForm, Classroom, CLASS_FORM_FIELDS, s.parse_body(request), s.CLASS_FIELDS)
    classroom = ministry.create_class(**s.validated(form))
    _audit(request, "Classroom", classroom.pk, "created")
    return _created(s.class_json(ministry.get_class(classroom.pk)))


@require_methods("GET", "PUT", "DELETE")
@api_view
def class_detail(request, class_id):
    classroom = ministry.get_class(class_id)
    if request.method == "GET":
        return JsonResponse(s.class_json(classroom))
    if request.method == "DELETE":
        ministry.delete_class(class_id)
        _audit(request, "Classroom", class_id, "deleted")
        return _no_content()
    form = _model_form(
        ClassroomForm, Classroom, CLASS_FORM_FIELDS, s.parse_body(request), s.CLASS_FIELDS, instance=classroom
    )
    ministry.update_class(class_id, **s.validated(form))
    _audit(request, "Classroom", class_id, "updated")
    return JsonResponse(s.class_json(ministry.get_class(class_id)))


# Attendance

@require_methods("GET", "POST")
@api_view
def class_meetings(request):
    if request.method == "GET":
        meetings = attendance.list_class_meetings(_query_day(request, "date"), request.GET.get("classId"))
        return _list(meetings, s.meeting_json)
    data = s.validated(ClassMeetingForm(s.from_payload(s.parse_body(request), s.MEETING_FIELDS)))
    meeting = attendance.get_or_create_class_meeting(data["classroom"], data["date"], data["observations"] or None)
    _audit(request, "ClassMeeting", meeting.pk, "saved")
    return _created(s.meeting_json(meeting))


@require_methods("GET", "POST")
@api_view
def worship_services(request):
    if request.method == "GET":
        return _list(attendance.list_worship_services(_query_day(request, "date")), s.service_json)
    data = s.validated(WorshipServiceForm(s.from_payload(s.parse_body(request), s.SERVICE_FIELDS)))
    service = attendance.get_or_create_worship_service(data["date"], data["description"], data["observations"] or None)
    _audit(request, "WorshipService", service.pk, "saved")
    return _created(s.service_json(service))


@require_methods("POST")
@api_view
def mark_class_attendance(request):
    data = s.validated(ClassAttendanceForm(s.from_payload(s.parse_body(request), s.CLASS_ATTENDANCE_FIELDS)))
    row = attendance.mark_class_attendance(data["class_meeting"].pk, data["child"].pk, data["status"], data["observation"])
    _audit(request, "ClassAttendance", row.pk, f"marked {row.status}")
    return JsonResponse(s.class_attendance_json(row))


@require_methods("POST")
@api_view
def mark_worship_attendance(request):
    data = s.validated(WorshipAttendanceForm(s.from_payload(s.parse_body(request), s.WORSHIP_ATTENDANCE_FIELDS)))
    row = attendance.mark_worship_attendance(data["worship_service"].pk, data["child"].pk, data["status"], data["observation"])
    _audit(request, "WorshipAttendance", row.pk, f"marked {row.status}")
    return JsonResponse(s.worship_attendance_json(row))


@require_methods("GET")
@api_view
def class_attendance_on(request, day):
    return _list(attendance.class_attendance_on(_parse_day(day)), s.class_attendance_json)


@require_methods("GET")
@api_view
def worship_attendance_on(request, day):
    return _list(attendance.worship_attendance_on(_parse_day(day)), s.worship_attendance_json)


@require_methods("GET")
@api_view
def consecutive_absences(request, child_id):
    child = ministry.get_child(child_id)
    try:
        limit = int(request.GET.get("limit", 5))
    except ValueError:
        raise BadRequest("'limit' must be an integer")
    if limit < 1:
        raise BadRequest("'limit' must be at least 1")
    return JsonResponse({
        "childId": child.pk,
        "consecutiveAbsences": attendance.consecutive_absences(child.pk, limit=limit),
    })


# Meditations and verses

@require_methods("GET", "POST")
@require_role_for_writes(*CURRICULUM_ROLES)
@api_view
def meditation_weeks(request):
    if request.method == "GET":
        return _list(discipleship.list_meditation_weeks(), s.week_json)
    form = _model_form(MeditationWeekForm, MeditationWeekForm._meta.model, WEEK_FORM_FIELDS, s.parse_body(request), s.WEEK_FIELDS)
    week = discipleship.create_meditation_week(**s.validated(form))
    _audit(request, "MeditationWeek", week.pk, "created")
    return _created(s.week_json(week))


@require_methods("GET")
@api_view
def current_meditations(request):
    return _list(discipleship.current_week_deliveries(), s.delivery_json)


@require_methods("POST")
@api_view
def meditation_status(request):
    payload = s.parse_body(request)
    data = s.validated(MeditationStatusForm(s.from_payload(payload, s.MEDITATION_STATUS_FIELDS)))
    delivery = discipleship.update_meditation_status(
        data["child"].pk,
        data["meditation_week"].pk,
        data["status"],
        observation=data["observation"] or None,
        # Leave stored evidence alone unless the client sends the key
        evidence_url=data["evidence_url"] if "evidenceUrl" in payload else None,
    )
    _audit(request, "MeditationDelivery", delivery.pk, f"marked {delivery.status}")
    return JsonResponse(s.delivery_json(delivery))


@require_methods("GET", "POST")
@require_role_for_writes(*CURRICULUM_ROLES)
@api_view
def verses(request):
    if request.method == "GET":
        return _list(discipleship.list_verses(), s.verse_json)
    form = _model_form(BibleVerseForm, BibleVerseForm._meta.model, VERSE_FORM_FIELDS, s.parse_body(request), s.VERSE_FIELDS)
    verse = discipleship.create_verse(**s.validated(form))
    _audit(request, "BibleVerse", verse.pk, "created")
    return _created(s.verse_json(verse))


@require_methods("GET", "POST")
@api_view
def verse_memorizations(request):
    if request.method == "GET":
        return _list(discipleship.list_memorizations(), s.memorization_json)
    data = s.validated(VerseMemorizationForm(s.from_payload(s.parse_body(request), s.MEMORIZATION_FIELDS)))
    memorization = discipleship.update_verse_memorization(
        data["child"].pk, data["bible_verse"].pk, data["status"], observation=data["observation"] or None
    )
    _audit(request, "VerseMemorization", memorization.pk, f"marked {memorization.status}")
    return JsonResponse(s.memorization_json(memorization))


# Notes

@require_methods("GET", "POST")
@api_view
def notes(request):
    if request.method == "GET":
        return _list(ministry.visible_notes(request.user), s.note_json)
    form = _model_form(NoteForm, Note, NOTE_FORM_FIELDS, s.parse_body(request), s.NOTE_FIELDS)
    note = ministry.create_note(request.user, **s.validated(form))
    _audit(request, "Note", note.pk, "created")
    return _created(s.note_json(note))


@require_methods("GET", "PUT", "DELETE")
@api_view
def note_detail(request, note_id):
    note = ministry.get_note(request.user, note_id)
    if request.method == "GET":
        return JsonResponse(s.note_json(note))
    if request.method == "DELETE":
        ministry.delete_note(request.user, note_id)
        _audit(request, "Note", note_id, "deleted")
        return _no_content()
    form = _model_form(NoteForm, Note, NOTE_FORM_FIELDS, s.parse_body(request), s.NOTE_FIELDS, instance=note)
    note = ministry.update_note(request.user, note_id, **s.validated(form))
    _audit(request, "Note", note.pk, "updated")
    return JsonResponse(s.note_json(note))


@require_methods("GET")
@api_view
def notes_for_child(request, child_id):
    return _list(ministry.notes_for_child(request.user, child_id), s.note_json)


# Messaging

@require_methods("GET", "POST")
@require_role_for_writes(*CURRICULUM_ROLES)
@api_view
def message_templates(request):
    if request.method == "GET":
        return _list(messaging.list_active_templates(), s.template_json)
    form = _model_form(
        MessageTemplateForm, MessageTemplate, TEMPLATE_FORM_FIELDS, s.parse_body(request), s.TEMPLATE_FIELDS
    )
    template = messaging.create_template(**s.validated(form))
    _audit(request, "MessageTemplate", template.pk, "created")
    return _created(s.template_json(template))


@require_methods("GET", "PUT", "DELETE")
@require_role_for_writes(*CURRICULUM_ROLES)
@api_view
def message_template_detail(request, template_id):
    template = messaging.get_template(template_id)
    if request.method == "GET":
        return JsonResponse(s.template_json(template))
    if request.method == "DELETE":
        messaging.delete_template(template_id)
        _audit(request, "MessageTemplate", template_id, "retired")
        return _no_content()
    payload = s.parse_body(request)
    if "bodyTemplate" in payload and "supportedVariables" not in payload:
        # Re-derive the placeholder list from the new body
        payload["supportedVariables"] = []
    form = _model_form(
        MessageTemplateForm, MessageTemplate, TEMPLATE_FORM_FIELDS, payload, s.TEMPLATE_FIELDS,
        instance=template,
    )
    template = messaging.update_template(template_id, **s.validated(form))
    _audit(request, "MessageTemplate", template.pk, "updated")
    return JsonResponse(s.template_json(template))


@require_methods("POST")
@api_view
def message_preview(request):
    data = s.validated(MessagePreviewForm(s.from_payload(s.parse_body(request), s.MESSAGE_FIELDS)))
    text, link = messaging.preview_message(data["child"].pk, data["guardian"].pk, data["template"].pk)
    return JsonResponse({"message": text, "whatsappLink": link})


@require_methods("POST")
@api_view
def message_send(request):
    data = s.validated(MessageSendForm(s.from_payload(s.parse_body(request), s.MESSAGE_FIELDS)))
    template = data["template"]
    send = messaging.log_message_send(
        data["child"].pk,
        data["guardian"].pk,
        template.pk if template else None,
        data["message"],
        request.user,
    )
    _audit(request, "MessageSend", send.pk, "logged")
    body = s.message_send_json(send)
    body["whatsappLink"] = messaging.whatsapp_link(send.guardian.phone_whatsapp, send.generated_message)
    return _created(body)


@require_methods("GET")
@api_view
def message_history(request):
    return _list(messaging.message_history(), s.message_send_json)


# Reporting

@require_methods("GET")
@api_view
def dashboard_stats(request):
    stats = build_dashboard_stats(_query_day(request, "from"), _query_day(request, "to"))
    return JsonResponse(s.camelize(stats))


@require_methods("GET")
@api_view
def report_export(request):
    wb = build_attendance_workbook(_query_day(request, "from"), _query_day(request, "to"))
    response = HttpResponse(workbook_bytes(wb), content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = 'attachment; filename="relatorio-ministerio.xlsx"'
    return response

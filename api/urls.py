from django.urls import path, re_path

from . import views

urlpatterns = [
    path("csrf", views.csrf_token, name="api_csrf"),
    path("register", views.register, name="api_register"),
    path("login", views.api_login, name="api_login"),
    path("logout", views.api_logout, name="api_logout"),
    path("user", views.current_user, name="api_current_user"),
    path("user/password", views.change_password, name="api_change_password"),
    path("users", views.users, name="api_users"),
    path("users/<uuid:user_id>", views.user_detail, name="api_user_detail"),
    path("children", views.children, name="api_children"),
    path("children/<uuid:child_id>", views.child_detail, name="api_child_detail"),
    path("guardians", views.guardians, name="api_guardians"),
    path("guardians/child/<uuid:child_id>", views.guardians_for_child, name="api_guardians_for_child"),
    path("guardians/<uuid:guardian_id>", views.guardian_detail, name="api_guardian_detail"),
    path("guardians/<uuid:guardian_id>/children", views.guardian_children, name="api_guardian_children"),
    path("classes", views.classes, name="api_classes"),
    path("classes/<uuid:class_id>", views.class_detail, name="api_class_detail"),
    path("attendance/meetings", views.class_meetings, name="api_class_meetings"),
    path("attendance/services", views.worship_services, name="api_worship_services"),
    path("attendance/class", views.mark_class_attendance, name="api_mark_class_attendance"),
    path("attendance/worship", views.mark_worship_attendance, name="api_mark_worship_attendance"),
    path("attendance/class/<str:day>", views.class_attendance_on, name="api_class_attendance_on"),
    path("attendance/worship/<str:day>", views.worship_attendance_on, name="api_worship_attendance_on"),
    path(
        "attendance/consecutive-absences/<uuid:child_id>",
        views.consecutive_absences,
        name="api_consecutive_absences",
    ),
    path("meditations/weeks", views.meditation_weeks, name="api_meditation_weeks"),
    path("meditations/current", views.current_meditations, name="api_current_meditations"),
    path("meditations/status", views.meditation_status, name="api_meditation_status"),
    path("verses", views.verses, name="api_verses"),
    path("verses/memorizations", views.verse_memorizations, name="api_verse_memorizations"),
    path("notes", views.notes, name="api_notes"),
    path("notes/child/<uuid:child_id>", views.notes_for_child, name="api_notes_for_child"),
    path("notes/<uuid:note_id>", views.note_detail, name="api_note_detail"),
    path("message-templates", views.message_templates, name="api_message_templates"),
    path(
        "message-templates/<uuid:template_id>",
        views.message_template_detail,
        name="api_message_template_detail",
    ),
    path("messages/preview", views.message_preview, name="api_message_preview"),
    path("messages/send", views.message_send, name="api_message_send"),
    path("messages/history", views.message_history, name="api_message_history"),
    path("dashboard/stats", views.dashboard_stats, name="api_dashboard_stats"),
    path("reports/export", views.report_export, name="api_report_export"),
    re_path(r"^.*$", views.not_found, name="api_not_found"),
]

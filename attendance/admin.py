from django.contrib import admin

from .models import ClassAttendance, ClassMeeting, WorshipAttendance, WorshipService


@admin.register(ClassMeeting)
class ClassMeetingAdmin(admin.ModelAdmin):
    list_display = ("date", "classroom", "created_at")
    list_filter = ("classroom",)
    date_hierarchy = "date"


@admin.register(WorshipService)
class WorshipServiceAdmin(admin.ModelAdmin):
    list_display = ("date", "description", "created_at")
    search_fields = ("description",)
    date_hierarchy = "date"


@admin.register(ClassAttendance)
class ClassAttendanceAdmin(admin.ModelAdmin):
    list_display = ("class_meeting", "child", "status", "created_at")
    list_filter = ("status", "class_meeting__classroom")
    search_fields = ("child__full_name", "observation")
    date_hierarchy = "created_at"


@admin.register(WorshipAttendance)
class WorshipAttendanceAdmin(admin.ModelAdmin):
    list_display = ("worship_service", "child", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("child__full_name", "observation")
    date_hierarchy = "created_at"

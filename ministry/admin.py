from django.contrib import admin

from .models import Child, ChildGuardian, Classroom, Guardian, Note


class ChildGuardianInline(admin.TabularInline):
    model = ChildGuardian
    extra = 0
    autocomplete_fields = ("guardian",)


@admin.register(Classroom)
class ClassroomAdmin(admin.ModelAdmin):
    list_display = ("name", "room", "created_at")
    search_fields = ("name", "room")


@admin.register(Child)
class ChildAdmin(admin.ModelAdmin):
    list_display = ("full_name", "birth_date", "classroom", "updated_at")
    list_filter = ("classroom",)
    search_fields = ("full_name",)
    inlines = [ChildGuardianInline]


@admin.register(Guardian)
class GuardianAdmin(admin.ModelAdmin):
    list_display = ("full_name", "relationship", "phone_whatsapp", "contact_authorization")
    list_filter = ("contact_authorization",)
    search_fields = ("full_name", "phone_whatsapp", "email")


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ("title", "child", "attention_level", "is_sensitive", "reminder_date", "created_by", "created_at")
    list_filter = ("attention_level", "is_sensitive")
    search_fields = ("title", "content", "child__full_name")
    date_hierarchy = "created_at"

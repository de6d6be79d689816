from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "first_name", "last_name", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "is_superuser")
    search_fields = ("username", "email", "first_name", "last_name")
    filter_horizontal = ("classes", "groups", "user_permissions")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Ministry", {"fields": ("role", "classes")}),
    )

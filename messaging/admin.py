from django.contrib import admin

from .models import MessageSend, MessageTemplate


@admin.register(MessageTemplate)
class MessageTemplateAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "is_active", "created_at")
    list_filter = ("category", "is_active")
    search_fields = ("title", "body_template")


@admin.register(MessageSend)
class MessageSendAdmin(admin.ModelAdmin):
    list_display = ("sent_at", "channel", "child", "guardian", "message_template", "sent_by")
    list_filter = ("channel", "message_template")
    search_fields = ("child__full_name", "guardian__full_name", "generated_message")
    date_hierarchy = "sent_at"

    # The send log is a historical record
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

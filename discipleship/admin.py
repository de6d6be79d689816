from django.contrib import admin

from .models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization


@admin.register(MeditationWeek)
class MeditationWeekAdmin(admin.ModelAdmin):
    list_display = ("week_reference", "theme", "allows_attachments", "created_at")
    search_fields = ("week_reference", "theme")


@admin.register(MeditationDelivery)
class MeditationDeliveryAdmin(admin.ModelAdmin):
    list_display = ("meditation_week", "child", "status", "delivery_date", "updated_at")
    list_filter = ("status", "meditation_week")
    search_fields = ("child__full_name",)


@admin.register(BibleVerse)
class BibleVerseAdmin(admin.ModelAdmin):
    list_display = ("reference", "week_reference", "created_at")
    search_fields = ("reference", "text")


@admin.register(VerseMemorization)
class VerseMemorizationAdmin(admin.ModelAdmin):
    list_display = ("bible_verse", "child", "status", "memorized_date", "updated_at")
    list_filter = ("status",)
    search_fields = ("child__full_name", "bible_verse__reference")

import uuid

from django.core.validators import RegexValidator
from django.db import models

week_reference_validator = RegexValidator(
    r"^\d{4}-W(0[1-9]|[1-4]\d|5[0-3])$",
    "Use the ISO week format YYYY-Www (e.g. 2024-W01).",
)


class MeditationWeek(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    week_reference = models.CharField(max_length=50, unique=True, validators=[week_reference_validator])
    theme = models.CharField(max_length=255)
    material_link = models.URLField(max_length=500, blank=True, null=True)
    allows_attachments = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-week_reference"]

    def __str__(self):
        return f"{self.week_reference}: {self.theme}"


class MeditationDelivery(models.Model):
    class Status(models.TextChoices):
        DELIVERED = "entregou", "Entregou"
        IN_PROGRESS = "em_andamento", "Em andamento"
        NOT_DELIVERED = "nao_entregou", "Não entregou"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    child = models.ForeignKey("ministry.Child", on_delete=models.CASCADE, related_name="meditation_deliveries")
    meditation_week = models.ForeignKey(MeditationWeek, on_delete=models.CASCADE, related_name="deliveries")
    status = models.CharField(max_length=20, choices=Status.choices)
    # Set only while status is "entregou"
    delivery_date = models.DateField(null=True, blank=True)
    evidence_url = models.URLField(max_length=500, blank=True, null=True)
    observation = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["child", "meditation_week"], name="unique_meditation_delivery"),
        ]
        ordering = ["-created_at"]
        verbose_name_plural = "Meditation deliveries"

    def __str__(self):
        return f"{self.child} {self.status} ({self.meditation_week.week_reference})"


class BibleVerse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reference = models.CharField(max_length=100, help_text="e.g. Sl 119:105")
    text = models.TextField()
    week_reference = models.CharField(
        max_length=50, blank=True, null=True, validators=[week_reference_validator]
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["reference"]

    def __str__(self):
        return self.reference


class VerseMemorization(models.Model):
    class Status(models.TextChoices):
        MEMORIZED = "memorizou", "Memorizou"
        IN_PROGRESS = "em_andamento", "Em andamento"
        NOT_MEMORIZED = "nao_memorizou", "Não memorizou"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    child = models.ForeignKey("ministry.Child", on_delete=models.CASCADE, related_name="verse_memorizations")
    bible_verse = models.ForeignKey(BibleVerse, on_delete=models.CASCADE, related_name="memorizations")
    status = models.CharField(max_length=20, choices=Status.choices)
    # Set only while status is "memorizou"
    memorized_date = models.DateField(null=True, blank=True)
    observation = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["child", "bible_verse"], name="unique_verse_memorization"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.child} {self.status} ({self.bible_verse})"

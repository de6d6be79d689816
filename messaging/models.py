import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class ImmutableRecordError(Exception):
    pass


class MessageTemplate(models.Model):
    class Category(models.TextChoices):
        ABSENCE = "falta", "Falta"
        MEDITATION = "meditacao", "Meditação"
        WORSHIP = "culto", "Culto"
        ENCOURAGEMENT = "incentivo", "Incentivo"
        WELCOME = "boas_vindas", "Boas-vindas"
        PASTORAL = "pastoral", "Pastoral"
        NOTICE = "aviso", "Aviso"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    body_template = models.TextField(help_text="Use {responsavel}, {crianca}, {turma} and {data} as placeholders.")
    supported_variables = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    category = models.CharField(max_length=50, choices=Category.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["category", "title"]

    def __str__(self):
        return self.title


class MessageSend(models.Model):
    """Append-only log of a message as it was sent."""
    CHANNEL_WHATSAPP = "whatsapp"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    child = models.ForeignKey("ministry.Child", on_delete=models.PROTECT, related_name="message_sends")
    guardian = models.ForeignKey("ministry.Guardian", on_delete=models.PROTECT, related_name="message_sends")
    message_template = models.ForeignKey(
        MessageTemplate,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sends",
    )
    channel = models.CharField(max_length=20, default=CHANNEL_WHATSAPP)
    generated_message = models.TextField()
    sent_at = models.DateTimeField(default=timezone.now, db_index=True)
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="message_sends",
    )

    class Meta:
        ordering = ["-sent_at"]

    def __str__(self):
        return f"{self.channel} → {self.guardian} @ {self.sent_at:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError("Message sends cannot be changed once logged.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError("Message sends cannot be deleted.")

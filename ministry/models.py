import uuid

from django.conf import settings
from django.db import models


class Classroom(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    room = models.CharField(max_length=50, blank=True, null=True)
    observations = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Child(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    full_name = models.CharField(max_length=255)
    birth_date = models.DateField(null=True, blank=True)
    # PROTECT: a class cannot disappear from under its children
    classroom = models.ForeignKey(
        Classroom,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='children',
    )
    photo_url = models.URLField(max_length=500, blank=True, null=True)
    allergies = models.TextField(blank=True, null=True)
    observations = models.TextField(blank=True, null=True)
    guardians = models.ManyToManyField(
        'Guardian',
        through='ChildGuardian',
        related_name='children',
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['full_name']
        verbose_name_plural = 'Children'

    def __str__(self):
        return self.full_name


class Guardian(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    full_name = models.CharField(max_length=255)
    relationship = models.CharField(max_length=50, help_text='Free label such as pai, mãe, avó.')
    phone_whatsapp = models.CharField(max_length=20)
    email = models.EmailField(blank=True, null=True)
    contact_authorization = models.BooleanField(
        default=True,
        help_text='Guardian agreed to be contacted through WhatsApp.',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['full_name']

    def __str__(self):
        return f"{self.full_name} ({self.relationship})"


class ChildGuardian(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    child = models.ForeignKey(Child, on_delete=models.CASCADE)
    guardian = models.ForeignKey(Guardian, on_delete=models.CASCADE)
    is_primary = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['child', 'guardian'], name='unique_child_guardian'),
        ]
        verbose_name = 'Child guardian'

    def __str__(self):
        return f'{self.guardian} → {self.child}'


class Note(models.Model):
    class AttentionLevel(models.TextChoices):
        LOW = 'baixa', 'Baixa'
        MEDIUM = 'media', 'Média'
        HIGH = 'alta', 'Alta'

    TAG_CHOICES = [
        ('comportamento', 'Comportamento'),
        ('saude', 'Saúde'),
        ('familia', 'Família'),
        ('espiritual', 'Espiritual'),
        ('elogio', 'Elogio'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    child = models.ForeignKey(Child, on_delete=models.CASCADE, related_name='notes')
    title = models.CharField(max_length=255)
    content = models.TextField()
    tags = models.JSONField(default=list, blank=True)
    attention_level = models.CharField(max_length=20, choices=AttentionLevel.choices)
    reminder_date = models.DateField(null=True, blank=True)
    is_sensitive = models.BooleanField(
        default=False,
        help_text='Only admins and leaders can see sensitive notes.',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notes',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.child})"

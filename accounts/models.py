import uuid

from django.contrib.auth.models import AbstractUser
from django.contrib.auth.models import UserManager as DjangoUserManager
from django.db import models


class UserManager(DjangoUserManager):
    def _create_user(self, username, email, password, **extra_fields):
        if not username:
            raise ValueError("The given username must be set")
        user = self.model(
            username=self.model.normalize_username(username),
            # NULL, not "", so the unique constraint allows many users without email
            email=self.normalize_email(email) or None,
            **extra_fields,
        )
        user.set_password(password)
        user.save(using=self._db)
        return user


class User(AbstractUser):
    class Role(models.TextChoices):
        ADMIN = 'admin', 'Administrador'
        LEADER = 'leader', 'Líder'
        ASSISTANT = 'assistant', 'Auxiliar'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, null=True, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.LEADER)
    # Classes a leader/assistant looks after
    classes = models.ManyToManyField(
        'ministry.Classroom',
        blank=True,
        related_name='staff',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    class Meta:
        ordering = ['username']

    def __str__(self):
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.username

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == self.Role.ADMIN

    def clean(self):
        super().clean()
        # normalize_email turns a missing address into ""; keep NULL for the unique index
        self.email = self.email or None

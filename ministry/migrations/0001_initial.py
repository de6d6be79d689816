import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Classroom",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100)),
                ("room", models.CharField(blank=True, max_length=50, null=True)),
                ("observations", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Guardian",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("full_name", models.CharField(max_length=255)),
                ("relationship", models.CharField(help_text="Free label such as pai, mãe, avó.", max_length=50)),
                ("phone_whatsapp", models.CharField(max_length=20)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                (
                    "contact_authorization",
                    models.BooleanField(default=True, help_text="Guardian agreed to be contacted through WhatsApp."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["full_name"],
            },
        ),
        migrations.CreateModel(
            name="Child",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("full_name", models.CharField(max_length=255)),
                ("birth_date", models.DateField(blank=True, null=True)),
                ("photo_url", models.URLField(blank=True, max_length=500, null=True)),
                ("allergies", models.TextField(blank=True, null=True)),
                ("observations", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "classroom",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="ministry.classroom",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Children",
                "ordering": ["full_name"],
            },
        ),
        migrations.CreateModel(
            name="ChildGuardian",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("is_primary", models.BooleanField(default=False)),
                (
                    "child",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ministry.child"),
                ),
                (
                    "guardian",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ministry.guardian"),
                ),
            ],
            options={
                "verbose_name": "Child guardian",
            },
        ),
        migrations.AddConstraint(
            model_name="childguardian",
            constraint=models.UniqueConstraint(fields=("child", "guardian"), name="unique_child_guardian"),
        ),
        migrations.AddField(
            model_name="child",
            name="guardians",
            field=models.ManyToManyField(
                blank=True,
                related_name="children",
                through="ministry.ChildGuardian",
                to="ministry.guardian",
            ),
        ),
        migrations.CreateModel(
            name="Note",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("content", models.TextField()),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "attention_level",
                    models.CharField(
                        choices=[("baixa", "Baixa"), ("media", "Média"), ("alta", "Alta")],
                        max_length=20,
                    ),
                ),
                ("reminder_date", models.DateField(blank=True, null=True)),
                (
                    "is_sensitive",
                    models.BooleanField(default=False, help_text="Only admins and leaders can see sensitive notes."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "child",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notes",
                        to="ministry.child",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="notes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]

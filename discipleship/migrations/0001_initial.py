import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

WEEK_REFERENCE_VALIDATOR = django.core.validators.RegexValidator(
    "^\\d{4}-W(0[1-9]|[1-4]\\d|5[0-3])$",
    "Use the ISO week format YYYY-Www (e.g. 2024-W01).",
)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("ministry", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MeditationWeek",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "week_reference",
                    models.CharField(max_length=50, unique=True, validators=[WEEK_REFERENCE_VALIDATOR]),
                ),
                ("theme", models.CharField(max_length=255)),
                ("material_link", models.URLField(blank=True, max_length=500, null=True)),
                ("allows_attachments", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-week_reference"],
            },
        ),
        migrations.CreateModel(
            name="BibleVerse",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("reference", models.CharField(help_text="e.g. Sl 119:105", max_length=100)),
                ("text", models.TextField()),
                (
                    "week_reference",
                    models.CharField(blank=True, max_length=50, null=True, validators=[WEEK_REFERENCE_VALIDATOR]),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["reference"],
            },
        ),
        migrations.CreateModel(
            name="MeditationDelivery",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("entregou", "Entregou"),
                            ("em_andamento", "Em andamento"),
                            ("nao_entregou", "Não entregou"),
                        ],
                        max_length=20,
                    ),
                ),
                ("delivery_date", models.DateField(blank=True, null=True)),
                ("evidence_url", models.URLField(blank=True, max_length=500, null=True)),
                ("observation", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "child",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="meditation_deliveries",
                        to="ministry.child",
                    ),
                ),
                (
                    "meditation_week",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="deliveries",
                        to="discipleship.meditationweek",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Meditation deliveries",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("child", "meditation_week"), name="unique_meditation_delivery"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VerseMemorization",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("memorizou", "Memorizou"),
                            ("em_andamento", "Em andamento"),
                            ("nao_memorizou", "Não memorizou"),
                        ],
                        max_length=20,
                    ),
                ),
                ("memorized_date", models.DateField(blank=True, null=True)),
                ("observation", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bible_verse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memorizations",
                        to="discipleship.bibleverse",
                    ),
                ),
                (
                    "child",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="verse_memorizations",
                        to="ministry.child",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("child", "bible_verse"), name="unique_verse_memorization"),
                ],
            },
        ),
    ]

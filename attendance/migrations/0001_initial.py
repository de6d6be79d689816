import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("ministry", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ClassMeeting",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField(db_index=True)),
                ("observations", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "classroom",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="meetings",
                        to="ministry.classroom",
                    ),
                ),
            ],
            options={
                "ordering": ["-date"],
                "constraints": [
                    models.UniqueConstraint(fields=("classroom", "date"), name="unique_class_meeting_per_day"),
                ],
            },
        ),
        migrations.CreateModel(
            name="WorshipService",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField(db_index=True)),
                ("description", models.CharField(blank=True, max_length=255, null=True)),
                ("observations", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-date"],
            },
        ),
        migrations.CreateModel(
            name="ClassAttendance",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(choices=[("presente", "Presente"), ("ausente", "Ausente")], max_length=20),
                ),
                ("observation", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "child",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="class_attendance",
                        to="ministry.child",
                    ),
                ),
                (
                    "class_meeting",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendance",
                        to="attendance.classmeeting",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Class attendance",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["child", "created_at"], name="class_att_child_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("class_meeting", "child"), name="unique_class_attendance"),
                ],
            },
        ),
        migrations.CreateModel(
            name="WorshipAttendance",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(choices=[("presente", "Presente"), ("ausente", "Ausente")], max_length=20),
                ),
                ("observation", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "child",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="worship_attendance",
                        to="ministry.child",
                    ),
                ),
                (
                    "worship_service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendance",
                        to="attendance.worshipservice",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Worship attendance",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("worship_service", "child"), name="unique_worship_attendance"),
                ],
            },
        ),
    ]

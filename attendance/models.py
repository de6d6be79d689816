import uuid

from django.db import models
from django.utils import timezone


class AttendanceStatus(models.TextChoices):
    PRESENT = "presente", "Presente"
    ABSENT = "ausente", "Ausente"


class ClassMeeting(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    classroom = models.ForeignKey(
        "ministry.Classroom", on_delete=models.PROTECT, related_name="meetings"
    )
    date = models.DateField(db_index=True)
    observations = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["classroom", "date"], name="unique_class_meeting_per_day"),
        ]
        ordering = ["-date"]

    def __str__(self):
        return f"{self.classroom} @ {self.date:%Y-%m-%d}"


class WorshipService(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    date = models.DateField(db_index=True)
    description = models.CharField(max_length=255, blank=True, null=True)
    observations = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date"]

    def __str__(self):
        label = self.description or "Culto"
        return f"{label} @ {self.date:%Y-%m-%d}"


class ClassAttendance(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    class_meeting = models.ForeignKey(
        ClassMeeting, on_delete=models.CASCADE, related_name="attendance"
    )
    child = models.ForeignKey(
        "ministry.Child", on_delete=models.CASCADE, related_name="class_attendance"
    )
    status = models.CharField(max_length=20, choices=AttendanceStatus.choices)
    observation = models.TextField(blank=True, null=True)
    # Refreshed on every re-mark; the absence streak is ordered by it
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["class_meeting", "child"], name="unique_class_attendance"),
        ]
        indexes = [
            models.Index(fields=["child", "created_at"], name="class_att_child_created_idx"),
        ]
        ordering = ["-created_at"]
        verbose_name_plural = "Class attendance"

    def __str__(self):
        return f"{self.child} {self.status} @ {self.class_meeting}"


class WorshipAttendance(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    worship_service = models.ForeignKey(
        WorshipService, on_delete=models.CASCADE, related_name="attendance"
    )
    child = models.ForeignKey(
        "ministry.Child", on_delete=models.CASCADE, related_name="worship_attendance"
    )
    status = models.CharField(max_length=20, choices=AttendanceStatus.choices)
    observation = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["worship_service", "child"], name="unique_worship_attendance"),
        ]
        ordering = ["-created_at"]
        verbose_name_plural = "Worship attendance"

    def __str__(self):
        return f"{self.child} {self.status} @ {self.worship_service}"

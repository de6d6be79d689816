from django.db import transaction
from django.db.models import Count, ProtectedError

from accounts.permissions import can_view_sensitive_notes

from .models import Child, ChildGuardian, Classroom, Guardian, Note


class ClassInUse(Exception):
    """Raised when a class still has children (or history) attached."""


def _apply(obj, fields):
    for name, value in fields.items():
        setattr(obj, name, value)
    obj.save()
    return obj


# Children

def list_children(class_id=None):
    qs = Child.objects.select_related('classroom').order_by('full_name')
    if class_id:
        qs = qs.filter(classroom_id=class_id)
    return qs


def get_child(child_id) -> Child:
    return Child.objects.select_related('classroom').get(pk=child_id)


def create_child(**fields) -> Child:
    return Child.objects.create(**fields)


def update_child(child_id, **fields) -> Child:
    return _apply(Child.objects.get(pk=child_id), fields)


def delete_child(child_id):
    Child.objects.get(pk=child_id).delete()


# Guardians

def list_guardians():
    return Guardian.objects.order_by('full_name')


def guardians_for_child(child_id):
    """Guardians linked to a child, primary first, each tagged with ``is_primary``."""
    links = (
        ChildGuardian.objects.filter(child_id=child_id)
        .select_related('guardian')
        .order_by('-is_primary', 'guardian__full_name')
    )
    guardians = []
    for link in links:
        guardian = link.guardian
        guardian.is_primary = link.is_primary
        guardians.append(guardian)
    return guardians


def link_guardian(guardian_id, child_id, is_primary=False) -> ChildGuardian:
    """Attach a guardian to a child; a child keeps at most one primary guardian."""
    with transaction.atomic():
        if is_primary:
            ChildGuardian.objects.filter(child_id=child_id, is_primary=True).exclude(
                guardian_id=guardian_id
            ).update(is_primary=False)
        link, _ = ChildGuardian.objects.update_or_create(
            child_id=child_id,
            guardian_id=guardian_id,
            defaults={'is_primary': is_primary},
        )
    return link


@transaction.atomic
def create_guardian(child_id=None, is_primary=False, **fields) -> Guardian:
    guardian = Guardian.objects.create(**fields)
    if child_id:
        # Fail loudly on a bad child id instead of leaving a dangling link
        Child.objects.get(pk=child_id)
        link_guardian(guardian.pk, child_id, is_primary=is_primary)
    return guardian


def update_guardian(guardian_id, **fields) -> Guardian:
    return _apply(Guardian.objects.get(pk=guardian_id), fields)


def delete_guardian(guardian_id):
    Guardian.objects.get(pk=guardian_id).delete()


# Classes

def list_classes():
    return Classroom.objects.annotate(child_count=Count('children')).order_by('name')


def get_class(class_id) -> Classroom:
    return Classroom.objects.annotate(child_count=Count('children')).get(pk=class_id)


def create_class(**fields) -> Classroom:
    return Classroom.objects.create(**fields)


def update_class(class_id, **fields) -> Classroom:
    return _apply(Classroom.objects.get(pk=class_id), fields)


@transaction.atomic
def delete_class(class_id):
    """Delete a class only when no child references it.

    The row lock keeps a concurrent child assignment from slipping in between
    the check and the delete; the PROTECT foreign key backs this up.
    """
    classroom = Classroom.objects.select_for_update().get(pk=class_id)
    count = Child.objects.filter(classroom=classroom).count()
    if count:
        raise ClassInUse(f"Class '{classroom.name}' still has {count} children assigned.")
    try:
        classroom.delete()
    except ProtectedError as exc:
        raise ClassInUse(f"Class '{classroom.name}' has recorded meetings and cannot be deleted.") from exc


# Notes

def visible_notes(user):
    qs = Note.objects.select_related('child', 'created_by').order_by('-created_at')
    if not can_view_sensitive_notes(user):
        qs = qs.filter(is_sensitive=False)
    return qs


def notes_for_child(user, child_id):
    return visible_notes(user).filter(child_id=child_id)


def get_note(user, note_id) -> Note:
    return visible_notes(user).get(pk=note_id)


def create_note(created_by, **fields) -> Note:
    return Note.objects.create(created_by=created_by, **fields)


def update_note(user, note_id, **fields) -> Note:
    return _apply(get_note(user, note_id), fields)


def delete_note(user, note_id):
    get_note(user, note_id).delete()

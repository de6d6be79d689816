from .models import User


def has_role(user, *roles):
    """Superusers hold every role; anonymous users hold none."""
    if not getattr(user, 'is_authenticated', False):
        return False
    if user.is_superuser:
        return True
    return getattr(user, 'role', None) in roles


def can_view_sensitive_notes(user):
    return has_role(user, User.Role.ADMIN, User.Role.LEADER)

import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.db import IntegrityError, transaction

from .models import User

logger = logging.getLogger("accounts")

SELF_SERVICE_ROLES = (User.Role.LEADER, User.Role.ASSISTANT)


class UsernameTaken(Exception):
    pass


class EmailTaken(Exception):
    pass


class RegistrationClosed(Exception):
    pass


def register_user(username, password, *, email=None, first_name="", last_name="", role=None) -> User:
    """Create an account through self-registration.

    Self-registration never grants admin; the role falls back to leader.
    """
    if not settings.MINISTRY_OPEN_REGISTRATION:
        raise RegistrationClosed("Registration is closed.")
    if role not in SELF_SERVICE_ROLES:
        role = User.Role.LEADER

    if User.objects.filter(username=username).exists():
        raise UsernameTaken(username)

    user = User(
        username=username,
        email=email or None,
        first_name=first_name or "",
        last_name=last_name or "",
        role=role,
    )
    # Same field validators the admin user form runs
    user.full_clean(exclude=["password"], validate_unique=False)
    if user.email and User.objects.filter(email=user.email).exists():
        raise EmailTaken(user.email)

    user.set_password(password)
    try:
        with transaction.atomic():
            user.save()
    except IntegrityError as exc:
        # Lost a race against a concurrent registration
        if User.objects.filter(username=username).exists():
            raise UsernameTaken(username) from exc
        raise EmailTaken(user.email) from exc
    logger.info("Registered user %s:%s (%s)", user.pk, user.username, user.role)
    return user


def authenticate_user(request, username, password):
    """Return the active user for these credentials, or None.

    Unknown usernames, wrong passwords and inactive accounts are not told apart.
    """
    user = authenticate(request, username=username, password=password)
    if user is None:
        logger.info("Failed login for username=%r", username)
    return user


def change_password(user, current_password, new_password) -> bool:
    if not user.check_password(current_password):
        return False
    user.set_password(new_password)
    user.save(update_fields=["password", "updated_at"])
    logger.info("Password changed for %s:%s", user.pk, user.username)
    return True


def ensure_admin_user():
    """Create the bootstrap admin account when it is missing.

    Returns the new user, or None when it already existed.
    """
    username = settings.MINISTRY_ADMIN_USERNAME
    if User.objects.filter(username=username).exists():
        return None

    admin = User(
        username=username,
        email="admin@sistema.com",
        first_name="Administrador",
        last_name="Sistema",
        role=User.Role.ADMIN,
        is_staff=True,
        is_superuser=True,
    )
    admin.set_password(settings.MINISTRY_ADMIN_PASSWORD)
    admin.save()
    logger.warning(
        "Created bootstrap admin user '%s' with the configured default password. Change it now.",
        username,
    )
    return admin

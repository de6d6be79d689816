from django.db.models.signals import post_migrate
from django.dispatch import receiver

from .services import ensure_admin_user


@receiver(post_migrate)
def create_bootstrap_admin(sender, app_config=None, **kwargs):
    # post_migrate fires once per app; only act for ours
    if getattr(sender, 'name', None) != 'accounts':
        return
    ensure_admin_user()

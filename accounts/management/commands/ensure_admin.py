from django.core.management.base import BaseCommand

from accounts.services import ensure_admin_user


class Command(BaseCommand):
    help = 'Creates the bootstrap admin account if it does not exist yet'

    def handle(self, *args, **options):
        user = ensure_admin_user()
        if user is None:
            self.stdout.write('Admin user already exists.')
        else:
            self.stdout.write(self.style.WARNING(
                f"Created admin user '{user.username}'. Change its password immediately."
            ))

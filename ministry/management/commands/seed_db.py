from datetime import date, timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from attendance.models import AttendanceStatus
from attendance.services import (
    get_or_create_class_meeting,
    get_or_create_worship_service,
    mark_class_attendance,
    mark_worship_attendance,
)
from discipleship.models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization
from discipleship.services import (
    current_week_reference,
    update_meditation_status,
    update_verse_memorization,
)
from messaging.models import MessageTemplate
from ministry.models import Child, Classroom, Guardian, Note
from ministry.services import link_guardian


class Command(BaseCommand):
    help = 'Seeds the database with demo data for development'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding database...')
        today = timezone.localdate()
        last_sunday = today - timedelta(days=(today.weekday() + 1) % 7)

        # 1. Classes
        bercario, _ = Classroom.objects.get_or_create(name="Berçário", defaults={"room": "Sala 1"})
        maternal, _ = Classroom.objects.get_or_create(name="Maternal", defaults={"room": "Sala 2"})
        primarios, _ = Classroom.objects.get_or_create(name="Primários", defaults={"room": "Sala 3"})

        # 2. Leader
        leader, created = User.objects.get_or_create(
            username="lider",
            defaults={"first_name": "Paula", "last_name": "Ramos", "role": User.Role.LEADER},
        )
        if created:
            leader.set_password("lider123")  # nosec B106
            leader.save()
        leader.classes.add(primarios)

        # 3. Children
        ana, _ = Child.objects.get_or_create(
            full_name="Ana Souza",
            defaults={"birth_date": date(2017, 3, 14), "classroom": primarios},
        )
        pedro, _ = Child.objects.get_or_create(
            full_name="Pedro Souza",
            defaults={"birth_date": date(2016, 8, 2), "classroom": primarios, "allergies": "Amendoim"},
        )
        joao, _ = Child.objects.get_or_create(
            full_name="João Pereira",
            defaults={"birth_date": date(2017, 11, 30), "classroom": primarios},
        )
        lucas, _ = Child.objects.get_or_create(
            full_name="Lucas Lima",
            defaults={"birth_date": date(2021, 1, 20), "classroom": maternal},
        )
        maria, _ = Child.objects.get_or_create(
            full_name="Maria Oliveira",
            defaults={"birth_date": date(2023, 5, 5), "classroom": bercario},
        )

        # 4. Guardians
        carla, _ = Guardian.objects.get_or_create(
            full_name="Carla Souza",
            defaults={"relationship": "mãe", "phone_whatsapp": "(11) 98888-1111"},
        )
        roberto, _ = Guardian.objects.get_or_create(
            full_name="Roberto Lima",
            defaults={"relationship": "pai", "phone_whatsapp": "(11) 98888-2222"},
        )
        fernanda, _ = Guardian.objects.get_or_create(
            full_name="Fernanda Oliveira",
            defaults={"relationship": "mãe", "phone_whatsapp": "(11) 98888-3333", "email": "fernanda@example.com"},
        )
        helena, _ = Guardian.objects.get_or_create(
            full_name="Helena Pereira",
            defaults={"relationship": "avó", "phone_whatsapp": "(11) 98888-4444", "contact_authorization": False},
        )
        link_guardian(carla.pk, ana.pk, is_primary=True)
        link_guardian(carla.pk, pedro.pk, is_primary=True)
        link_guardian(roberto.pk, lucas.pk, is_primary=True)
        link_guardian(fernanda.pk, maria.pk, is_primary=True)
        link_guardian(helena.pk, joao.pk, is_primary=True)

        # 5. Class meetings, oldest first so the newest marks are the latest rows
        for weeks_ago in (2, 1, 0):
            meeting = get_or_create_class_meeting(primarios, last_sunday - timedelta(weeks=weeks_ago))
            mark_class_attendance(meeting.pk, ana.pk, AttendanceStatus.PRESENT)
            mark_class_attendance(meeting.pk, pedro.pk, AttendanceStatus.PRESENT)
            mark_class_attendance(meeting.pk, joao.pk, AttendanceStatus.ABSENT)
        for classroom, child in ((maternal, lucas), (bercario, maria)):
            meeting = get_or_create_class_meeting(classroom, last_sunday)
            mark_class_attendance(meeting.pk, child.pk, AttendanceStatus.PRESENT)

        # 6. Worship
        service = get_or_create_worship_service(last_sunday, "Culto da Família")
        for child in (ana, pedro, lucas, maria):
            mark_worship_attendance(service.pk, child.pk, AttendanceStatus.PRESENT)
        mark_worship_attendance(service.pk, joao.pk, AttendanceStatus.ABSENT)

        # 7. Meditation and verses
        week_ref = current_week_reference(today)
        week, _ = MeditationWeek.objects.get_or_create(
            week_reference=week_ref,
            defaults={"theme": "Deus cuida de mim", "material_link": "https://example.com/meditacao.pdf"},
        )
        update_meditation_status(ana.pk, week.pk, MeditationDelivery.Status.DELIVERED)
        update_meditation_status(pedro.pk, week.pk, MeditationDelivery.Status.IN_PROGRESS)

        lamp, _ = BibleVerse.objects.get_or_create(
            reference="Sl 119:105",
            defaults={
                "text": "Lâmpada para os meus pés é tua palavra, e luz para o meu caminho.",
                "week_reference": week_ref,
            },
        )
        BibleVerse.objects.get_or_create(
            reference="Jo 3:16",
            defaults={
                "text": "Porque Deus amou o mundo de tal maneira que deu o seu Filho unigênito, "
                        "para que todo aquele que nele crê não pereça, mas tenha a vida eterna.",
            },
        )
        update_verse_memorization(ana.pk, lamp.pk, VerseMemorization.Status.MEMORIZED)

        # 8. Message templates
        MessageTemplate.objects.get_or_create(
            title="Sentimos sua falta",
            defaults={
                "category": MessageTemplate.Category.ABSENCE,
                "body_template": "Olá {responsavel}! Sentimos falta de {crianca} na turma {turma} em {data}. Está tudo bem?",
                "supported_variables": ["responsavel", "crianca", "turma", "data"],
            },
        )
        MessageTemplate.objects.get_or_create(
            title="Meditação da semana",
            defaults={
                "category": MessageTemplate.Category.MEDITATION,
                "body_template": "Olá {responsavel}, a meditação desta semana já está disponível para {crianca}.",
                "supported_variables": ["responsavel", "crianca"],
            },
        )
        MessageTemplate.objects.get_or_create(
            title="Boas-vindas",
            defaults={
                "category": MessageTemplate.Category.WELCOME,
                "body_template": "Seja bem-vindo(a), {responsavel}! {crianca} agora faz parte da turma {turma}.",
                "supported_variables": ["responsavel", "crianca", "turma"],
            },
        )

        # 9. Notes
        Note.objects.get_or_create(
            child=joao,
            title="Faltas seguidas",
            defaults={
                "content": "João faltou nas últimas aulas. Ligar para a avó.",
                "tags": ["familia"],
                "attention_level": Note.AttentionLevel.HIGH,
                "reminder_date": today + timedelta(days=3),
                "created_by": leader,
            },
        )

        self.stdout.write(self.style.SUCCESS('Successfully seeded database'))

# apps/chat/management/commands/purge_deleted_messages.py
from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.chat.models import Message


class Command(BaseCommand):
    help = 'Permanently removes messages that were soft-deleted more than N days ago.'

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=30,
                            help='Age in days of the tombstones to purge (default: 30).')

    def handle(self, *args, **options):
        days = options['days']
        if days < 0:
            raise CommandError('--days must be zero or positive')

        cutoff = timezone.now() - timedelta(days=days)
        self.stdout.write(f"Purging messages deleted before {cutoff.isoformat()}...")

        purged, _ = Message.objects.filter(deleted=True, deleted_at__lt=cutoff).delete()

        self.stdout.write(self.style.SUCCESS(f"Purged {purged} messages."))

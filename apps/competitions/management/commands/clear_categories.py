"""
Удалить все категории соревнования.

Запуск: python manage.py clear_categories <competition_id>
"""

from django.core.management.base import BaseCommand, CommandError

from apps.competitions.category_generator import clear_categories
from apps.competitions.models import Competition


class Command(BaseCommand):
    help = "Удалить все категории соревнования (для повторного формирования)."

    def add_arguments(self, parser):
        parser.add_argument("competition_id", type=int, help="ID соревнования")

    def handle(self, *args, **options):
        competition = Competition.objects.filter(pk=options["competition_id"]).first()
        if not competition:
            raise CommandError(f"Соревнование не найдено: {options['competition_id']}")
        deleted = clear_categories(competition.pk)
        self.stdout.write(self.style.SUCCESS(f"{competition.name}: удалено категорий {deleted}."))

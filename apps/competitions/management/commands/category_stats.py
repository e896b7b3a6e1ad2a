"""
Статистика категорий соревнования: всего, по дисциплинам, по полу.

Запуск: python manage.py category_stats <competition_id>
"""

from django.core.management.base import BaseCommand, CommandError

from apps.competitions.category_generator import get_category_stats
from apps.competitions.models import Competition
from apps.references.models import Discipline, Gender


class Command(BaseCommand):
    help = "Показать количество категорий соревнования по дисциплинам и полу."

    def add_arguments(self, parser):
        parser.add_argument("competition_id", type=int, help="ID соревнования")

    def handle(self, *args, **options):
        competition = Competition.objects.filter(pk=options["competition_id"]).first()
        if not competition:
            raise CommandError(f"Соревнование не найдено: {options['competition_id']}")

        stats = get_category_stats(competition.pk)
        disciplines = Discipline.objects.in_bulk([row["discipline_id"] for row in stats["by_discipline"]])
        self.stdout.write(f"{competition.name}: всего категорий {stats['total']}")
        for row in stats["by_discipline"]:
            discipline = disciplines.get(row["discipline_id"])
            self.stdout.write(f"  {discipline or row['discipline_id']}: {row['count']}")
        for row in stats["by_gender"]:
            self.stdout.write(f"  {Gender(row['gender']).label}: {row['count']}")

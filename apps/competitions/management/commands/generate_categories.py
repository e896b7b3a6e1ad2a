"""
Сформировать категории соревнования по положению GTF.

Запуск: python manage.py generate_categories <competition_id> [--clear]

--clear: сначала удалить все категории соревнования (полная пересборка после изменения дисциплин).
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError, transaction

from apps.competitions.category_generator import clear_categories, generate_categories
from apps.competitions.models import Competition


class Command(BaseCommand):
    help = "Сформировать категории соревнования (весовые, по поясам, без разделения)."

    def add_arguments(self, parser):
        parser.add_argument("competition_id", type=int, help="ID соревнования")
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Удалить существующие категории перед формированием",
        )

    def handle(self, *args, **options):
        competition = Competition.objects.filter(pk=options["competition_id"]).first()
        if not competition:
            raise CommandError(f"Соревнование не найдено: {options['competition_id']}")

        # --clear и формирование в одной транзакции: при ошибке старые категории остаются
        try:
            with transaction.atomic():
                if options["clear"]:
                    deleted = clear_categories(competition.pk)
                result = generate_categories(competition.pk)
        except DatabaseError as e:
            raise CommandError(f"Ошибка формирования категорий: {e}") from e

        if options["clear"]:
            self.stdout.write(f"Удалено категорий: {deleted}.")

        if result.disciplines_processed == 0:
            self.stdout.write(self.style.WARNING(f"{competition.name}: нет активных дисциплин."))
            return
        self.stdout.write(self.style.SUCCESS(
            f"{competition.name}: категорий {result.created}, дисциплин {result.disciplines_processed}."
        ))
        if result.belt_rules_skipped:
            self.stdout.write(self.style.WARNING(
                f"Пропущено правил поясов: {result.belt_rules_skipped}. "
                "Создайте категории поясов: python manage.py provision_belt_categories"
            ))

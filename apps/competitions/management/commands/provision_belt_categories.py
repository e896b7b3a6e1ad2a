"""
Создать категории по поясам для дисциплин хъёнг по таблицам положения.

Запуск: python manage.py provision_belt_categories [код_дисциплины ...]

Без аргументов: все активные дисциплины с формой «по поясам».
Нужно выполнить до формирования категорий соревнования: генератор не создаёт категории поясов.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.competitions.belt_provisioning import provision_belt_categories
from apps.competitions.classifiers import discipline_shape
from apps.references.models import CategoryShape, Discipline


class Command(BaseCommand):
    help = "Создать недостающие категории поясов для дисциплин «по поясам»."

    def add_arguments(self, parser):
        parser.add_argument("codes", nargs="*", help="Коды дисциплин")

    def handle(self, *args, **options):
        codes = options["codes"]
        if codes:
            disciplines = list(Discipline.objects.filter(code__in=codes))
            missing = set(codes) - {d.code for d in disciplines}
            if missing:
                raise CommandError(f"Дисциплины не найдены: {', '.join(sorted(missing))}")
        else:
            disciplines = [
                d for d in Discipline.objects.filter(is_active=True)
                if discipline_shape(d) == CategoryShape.BELT
            ]

        if not disciplines:
            self.stdout.write("Нет дисциплин с категориями по поясам.")
            return

        for discipline in disciplines:
            try:
                result = provision_belt_categories(discipline)
            except ValueError as e:
                self.stdout.write(self.style.WARNING(str(e)))
                continue
            self.stdout.write(self.style.SUCCESS(
                f"{discipline}: создано {result.created}, уже было {result.existing}."
            ))

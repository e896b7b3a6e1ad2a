"""
Создание категорий по поясам для дисциплин хъёнг из таблиц положения.

Генератор категорий только ищет категории поясов в справочнике; этот шаг выполняется отдельно
(команда provision_belt_categories, действие в админке дисциплин) и сообщает, что создано.
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from apps.references.models import BeltCategory, CategoryShape, Discipline

from .classifiers import discipline_shape
from .regulations import RegulationTables, get_regulations

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    created: int = 0
    existing: int = 0


def _grade_sort_key(rule):
    # гыпы от белого пояса (10) к 1, затем даны по возрастанию
    is_dan = rule.min > 100
    return (is_dan, rule.min if is_dan else -rule.min, rule.max)


def required_belt_rules(regulations: RegulationTables) -> list:
    """Все различные диапазоны поясов из таблиц положения (по всем уровням и возрастам)."""
    rules = {}
    for by_age in regulations.belt_bands.values():
        for age_rules in by_age.values():
            for rule in age_rules:
                rules.setdefault((rule.min, rule.max), rule)
    return sorted(rules.values(), key=_grade_sort_key)


def provision_belt_categories(discipline: Discipline) -> ProvisionResult:
    """
    Создать недостающие категории поясов дисциплины (ключ: дисциплина, пояс от, пояс до).
    Для дисциплин не «по поясам»: ValueError.
    """
    if discipline_shape(discipline) != CategoryShape.BELT:
        raise ValueError(f"Дисциплина {discipline.code} не делится на категории по поясам")

    result = ProvisionResult()
    with transaction.atomic():
        for sort_order, rule in enumerate(required_belt_rules(get_regulations()), start=1):
            existing = (
                BeltCategory.objects.filter(discipline=discipline, belt_min=rule.min, belt_max=rule.max)
                .order_by("sort_order", "id")
                .first()
            )
            if existing:
                result.existing += 1
                continue
            BeltCategory.objects.create(
                discipline=discipline,
                belt_min=rule.min,
                belt_max=rule.max,
                name=rule.name,
                sort_order=sort_order,
                is_active=True,
            )
            result.created += 1

    logger.info(
        "Belt categories provisioned for %s: created %d, existing %d",
        discipline.code, result.created, result.existing,
    )
    return result

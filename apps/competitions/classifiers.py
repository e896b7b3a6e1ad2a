"""
Классификация возрастных категорий и дисциплин для генератора категорий.
"""

import logging
from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import models

from apps.references.models import Discipline, classify_discipline_name

logger = logging.getLogger(__name__)


class AgeGroup(models.TextChoices):
    """Возрастные группы положения GTF."""

    AGE_6_7 = "6-7", "6-7 лет"
    AGE_8_9 = "8-9", "8-9 лет"
    AGE_10_11 = "10-11", "10-11 лет"
    AGE_12_14 = "12-14", "12-14 лет"
    AGE_15_17 = "15-17", "15-17 лет"
    ADULTS = "18+", "18 лет и старше"
    UNCLASSIFIED = "unclassified", "Вне возрастных групп"


# (min_age, max_age включительно, группа); первое совпадение выигрывает
_AGE_GROUP_RULES = [
    (6, 7, AgeGroup.AGE_6_7),
    (8, 9, AgeGroup.AGE_8_9),
    (10, 11, AgeGroup.AGE_10_11),
    (12, 14, AgeGroup.AGE_12_14),
    (15, 17, AgeGroup.AGE_15_17),
]


def classify_age_group(min_age: int, max_age: int) -> AgeGroup:
    """
    Возрастная группа для диапазона [min_age, max_age].
    Диапазон, не помещающийся ни в одну группу (например, 5-20), даёт AgeGroup.UNCLASSIFIED.
    """
    for low, high, group in _AGE_GROUP_RULES:
        if min_age >= low and max_age <= high:
            return group
    if min_age >= 18:
        return AgeGroup.ADULTS
    return AgeGroup.UNCLASSIFIED


def check_unclassified_age_fallback() -> None:
    """Значение UNCLASSIFIED_AGE_FALLBACK: пусто или одна из возрастных групп положения."""
    fallback = settings.CATEGORY_GENERATOR.get("UNCLASSIFIED_AGE_FALLBACK")
    if not fallback:
        return
    if fallback not in AgeGroup.values or fallback == AgeGroup.UNCLASSIFIED:
        raise ImproperlyConfigured(
            f"CATEGORY_GENERATOR['UNCLASSIFIED_AGE_FALLBACK']: unknown age group {fallback!r}"
        )


def resolve_age_group(age_category) -> Optional[AgeGroup]:
    """
    Группа для возрастной категории с учётом настройки UNCLASSIFIED_AGE_FALLBACK.
    По умолчанию категории вне групп относятся к «18+»; при fallback = None возвращается None
    (категория пропускается генератором).
    """
    group = classify_age_group(age_category.min_age, age_category.max_age)
    if group != AgeGroup.UNCLASSIFIED:
        return group

    fallback = settings.CATEGORY_GENERATOR.get("UNCLASSIFIED_AGE_FALLBACK")
    if not fallback:
        logger.warning(
            "Age category %s (%s-%s) does not fit any age group, skipped",
            age_category.pk, age_category.min_age, age_category.max_age,
        )
        return None
    logger.warning(
        "Age category %s (%s-%s) does not fit any age group, using %s",
        age_category.pk, age_category.min_age, age_category.max_age, fallback,
    )
    return AgeGroup(fallback)


def discipline_shape(discipline: Discipline) -> str:
    """Форма категорий дисциплины: сохранённая в справочнике, иначе по названию."""
    if discipline.category_shape:
        return discipline.category_shape
    shape = classify_discipline_name(discipline.display_name)
    logger.warning(
        "Discipline %s has no category_shape, classified by name as %s",
        discipline.code, shape,
    )
    return shape

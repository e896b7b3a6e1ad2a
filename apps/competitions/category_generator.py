"""
Автоматическое формирование категорий соревнования по положению GTF.

Для каждой активной дисциплины соревнования и каждой возрастной группы (одна представительная
возрастная категория на пару «группа + пол») создаются:
- весовые категории (массоги, поинт-стоп): по таблице весов положения;
- категории по поясам (хъёнг): по таблице поясов уровня; категории поясов берутся из справочника,
  генератор их не создаёт (см. belt_provisioning);
- одна категория без разделения (силовое разбивание, спецтехника и т.д.).

Весовые и простые категории обновляются по натуральному ключу (повторный запуск не создаёт дублей).
Категории по поясам по умолчанию всегда вставляются заново (настройка CATEGORY_GENERATOR["BELT_UPSERT"]).
Весь запуск выполняется в одной транзакции.
"""

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count

from apps.references.models import AgeCategory, BeltCategory, CategoryShape, Discipline, Gender, WeightCategory

from .classifiers import AgeGroup, discipline_shape, resolve_age_group
from .models import Competition, CompetitionCategory, CompetitionDiscipline
from .regulations import BeltBand, RegulationTables, WeightBand, get_regulations

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Итог запуска генератора."""

    created: int = 0
    disciplines_processed: int = 0
    # Правила поясов, для которых в справочнике нет категории поясов
    belt_rules_skipped: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def generate_categories(competition_id: int) -> GenerationResult:
    """
    Сформировать (или обновить) все категории соревнования.
    created: число категорий, созданных или обновлённых за запуск.
    """
    competition_disciplines = list(
        CompetitionDiscipline.objects.filter(competition_id=competition_id, is_active=True)
        .select_related("discipline")
        .order_by("id")
    )
    if not competition_disciplines:
        logger.warning("No disciplines found for competition %s", competition_id)
        return GenerationResult()

    regulations = get_regulations()
    age_groups = representative_age_categories()
    result = GenerationResult(disciplines_processed=len(competition_disciplines))

    with transaction.atomic():
        for competition_discipline in competition_disciplines:
            for age_group, age_category in age_groups:
                _generate_for_discipline_and_age(
                    regulations, competition_discipline, age_group, age_category, result
                )
        if result.belt_rules_skipped:
            skipped = result.belt_rules_skipped
            transaction.on_commit(lambda: _notify_belt_rules_skipped(competition_id, skipped))

    logger.info(
        "Categories generated for competition %s: %d (disciplines: %d, regulations %s)",
        competition_id, result.created, result.disciplines_processed, regulations.version,
    )
    if result.belt_rules_skipped:
        logger.warning(
            "Competition %s: %d belt rules skipped, belt categories missing in reference data",
            competition_id, result.belt_rules_skipped,
        )
    return result


def _notify_belt_rules_skipped(competition_id: int, skipped: int) -> None:
    """После коммита: уведомить админа в Telegram о пропущенных правилах поясов."""
    try:
        from apps.core.telegram_notify import notify_belt_rules_skipped
        competition = Competition.objects.filter(pk=competition_id).first()
        if competition:
            notify_belt_rules_skipped(competition, skipped)
    except Exception as e:
        logger.exception("Telegram notify_belt_rules_skipped failed: %s", e)


def representative_age_categories() -> list:
    """
    Активные возрастные категории, по одной на пару (возрастная группа, пол).
    Остаётся первая в порядке справочника (sort_order, min_age, id).
    Возвращает список (AgeGroup, AgeCategory).
    """
    seen = {}
    for age_category in AgeCategory.objects.filter(is_active=True):
        age_group = resolve_age_group(age_category)
        if age_group is None:
            continue
        key = (age_group, age_category.gender)
        if key not in seen:
            seen[key] = age_category
    return [(age_group, age_category) for (age_group, _), age_category in seen.items()]


def _generate_for_discipline_and_age(
    regulations: RegulationTables,
    competition_discipline: CompetitionDiscipline,
    age_group: AgeGroup,
    age_category: AgeCategory,
    result: GenerationResult,
) -> None:
    if not regulations.is_eligible(competition_discipline.discipline_level, age_group):
        return

    shape = discipline_shape(competition_discipline.discipline)
    if shape == CategoryShape.WEIGHT:
        bands = regulations.weight_bands_for(age_group, age_category.gender)
        result.created += _generate_weight_categories(competition_discipline, age_category, bands)
    elif shape == CategoryShape.BELT:
        rules = regulations.belt_bands_for(competition_discipline.discipline_level, age_group)
        created, skipped = _generate_belt_categories(competition_discipline, age_category, rules)
        result.created += created
        result.belt_rules_skipped += skipped
    else:
        _save_category(
            competition_discipline,
            age_category,
            name=build_category_name(competition_discipline.discipline, age_category),
            code=build_category_code(competition_discipline.discipline, age_category),
        )
        result.created += 1


def _generate_weight_categories(competition_discipline, age_category, bands) -> int:
    discipline = competition_discipline.discipline
    count = 0
    for band in bands:
        weight_category = get_or_create_weight_category(discipline, age_category.gender, band)
        _save_category(
            competition_discipline,
            age_category,
            name=build_category_name(discipline, age_category, weight_category.name),
            code=build_category_code(discipline, age_category, weight_category_id=weight_category.pk),
            weight_category=weight_category,
        )
        count += 1
    return count


def _generate_belt_categories(competition_discipline, age_category, rules) -> tuple[int, int]:
    discipline = competition_discipline.discipline
    upsert = settings.CATEGORY_GENERATOR.get("BELT_UPSERT", False)
    created = skipped = 0
    for rule in rules:
        belt_category = find_belt_category(discipline, rule)
        if belt_category is None:
            skipped += 1
            continue
        _save_category(
            competition_discipline,
            age_category,
            name=build_category_name(discipline, age_category, rule.name),
            code=build_category_code(discipline, age_category, belt_category_id=belt_category.pk),
            belt_category=belt_category,
            upsert=upsert,
        )
        created += 1
    return created, skipped


def _save_category(
    competition_discipline: CompetitionDiscipline,
    age_category: AgeCategory,
    name: str,
    code: str,
    weight_category: Optional[WeightCategory] = None,
    belt_category: Optional[BeltCategory] = None,
    upsert: bool = True,
) -> CompetitionCategory:
    """
    Сохранить категорию по натуральному ключу
    (соревнование, дисциплина соревнования, возрастная категория, вес, пояс).
    upsert=False: всегда новая запись.
    """
    key = {
        "competition_id": competition_discipline.competition_id,
        "competition_discipline": competition_discipline,
        "age_category": age_category,
        "weight_category": weight_category,
        "belt_category": belt_category,
    }
    if upsert:
        existing = CompetitionCategory.objects.filter(**key).order_by("id").first()
        if existing:
            existing.name = name
            existing.code = code
            existing.save(update_fields=["name", "code", "updated_at"])
            return existing

    return CompetitionCategory.objects.create(
        **key,
        discipline=competition_discipline.discipline,
        level=competition_discipline.discipline_level,
        gender=age_category.gender,
        name=name,
        code=code,
        min_participants=settings.CATEGORY_GENERATOR["MIN_PARTICIPANTS"],
    )


def get_or_create_weight_category(discipline: Discipline, gender: str, band: WeightBand) -> WeightCategory:
    """Весовая категория дисциплины для диапазона (ключ: дисциплина, min, max, пол)."""
    max_weight = band.max if band.max is not None else Decimal(WeightCategory.OPEN_MAX_WEIGHT)
    weight_category, created = WeightCategory.objects.get_or_create(
        discipline=discipline,
        min_weight=band.min,
        max_weight=max_weight,
        gender=gender,
        defaults={"code": band.code, "name": band.name, "is_active": True},
    )
    if created:
        logger.debug("Weight category created: %s %s %s", discipline.code, gender, band.name)
    return weight_category


def find_belt_category(discipline: Discipline, rule: BeltBand) -> Optional[BeltCategory]:
    """Категория поясов из справочника; генератор их не создаёт."""
    return (
        BeltCategory.objects.filter(discipline=discipline, belt_min=rule.min, belt_max=rule.max)
        .order_by("sort_order", "id")
        .first()
    )


def build_category_name(discipline: Discipline, age_category: AgeCategory, partition_name: str = "") -> str:
    """«Дисциплина\\tВозрастная категория\\t[вес|пояс]\\tМужчины|Женщины»; пустые части пропускаются."""
    parts = [
        discipline.display_name,
        age_category.name_ru,
        partition_name,
        Gender(age_category.gender).label,
    ]
    return "\t".join(p for p in parts if p)


def build_category_code(
    discipline: Discipline,
    age_category: AgeCategory,
    weight_category_id: Optional[int] = None,
    belt_category_id: Optional[int] = None,
) -> str:
    """Например MAS_AGE12_W34_M или HYO_AGE3_B7_F."""
    parts = [discipline.code.upper()[:3], f"AGE{age_category.pk}"]
    if weight_category_id:
        parts.append(f"W{weight_category_id}")
    if belt_category_id:
        parts.append(f"B{belt_category_id}")
    parts.append("M" if age_category.gender == Gender.MALE else "F")
    return "_".join(parts)


def clear_categories(competition_id: int) -> int:
    """Удалить все категории соревнования. Возвращает число удалённых категорий."""
    _, per_model = CompetitionCategory.objects.filter(competition_id=competition_id).delete()
    deleted = per_model.get(CompetitionCategory._meta.label, 0)
    logger.info("Categories cleared for competition %s: %d", competition_id, deleted)
    return deleted


def get_category_stats(competition_id: int) -> dict:
    """Количество категорий: всего, по дисциплинам, по полу."""
    qs = CompetitionCategory.objects.filter(competition_id=competition_id)
    by_discipline = (
        qs.order_by("discipline_id").values("discipline_id").annotate(count=Count("id"))
    )
    by_gender = qs.order_by("gender").values("gender").annotate(count=Count("id"))
    return {
        "total": qs.count(),
        "by_discipline": [
            {"discipline_id": row["discipline_id"], "count": row["count"]} for row in by_discipline
        ],
        "by_gender": [{"gender": row["gender"], "count": row["count"]} for row in by_gender],
    }


def list_categories(competition_id: int, discipline_id: Optional[int] = None, gender: Optional[str] = None):
    """Категории соревнования с фильтрами (для API и админки)."""
    qs = CompetitionCategory.objects.filter(competition_id=competition_id).select_related(
        "discipline", "age_category", "weight_category", "belt_category"
    )
    if discipline_id:
        qs = qs.filter(discipline_id=discipline_id)
    if gender:
        qs = qs.filter(gender=gender.upper())
    return qs.order_by("discipline_id", "gender", "age_category_id", "weight_category_id", "id")

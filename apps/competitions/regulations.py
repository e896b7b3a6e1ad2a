"""
Таблицы положения GTF: весовые категории, категории по поясам, допуск возрастных групп по уровням.

Данные хранятся в JSON-файле (apps/competitions/data/gtf_regulations.json, либо файл из
settings.CATEGORY_REGULATIONS_FILE), загружаются один раз и проверяются при старте приложения.
Изменение положения не требует правки кода, но числовые границы должны совпадать с регламентом.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .classifiers import AgeGroup
from .models import DisciplineLevel

logger = logging.getLogger(__name__)

DEFAULT_REGULATIONS_FILE = Path(__file__).resolve().parent / "data" / "gtf_regulations.json"

GENDER_KEYS = ("male", "female")

# Шаг между соседними весовыми категориями: следующая начинается с max + 0.1
WEIGHT_STEP = Decimal("0.1")

GYP_GRADES = range(1, 11)
DAN_GRADES = range(101, 110)


@dataclass(frozen=True)
class WeightBand:
    """Весовой диапазон; max = None: открытая категория «min кг и выше»."""

    min: Decimal
    max: Optional[Decimal]

    @property
    def is_open(self) -> bool:
        return self.max is None

    @property
    def name(self) -> str:
        if self.max is None:
            return f"{_format_kg(self.min)} кг и выше"
        return f"{_format_kg(self.min)}-{_format_kg(self.max)} кг"

    @property
    def code(self) -> str:
        top = _format_kg(self.max) if self.max is not None else "plus"
        return f"W{_format_kg(self.min)}-{top}"


@dataclass(frozen=True)
class BeltBand:
    """Диапазон поясов: гыпы 10..1, даны 101..109."""

    min: int
    max: int
    name: str


@dataclass(frozen=True)
class RegulationTables:
    version: str
    weight_bands: Mapping[str, Mapping[str, tuple]]
    belt_bands: Mapping[str, Mapping[str, tuple]]
    level_requirements: Mapping[str, Mapping[str, int]]

    def is_eligible(self, level: str, age_group: str) -> bool:
        """Генерировать ли категории для уровня и возрастной группы."""
        return age_group in self.level_requirements.get(level, {})

    def minimum_grade(self, level: str, age_group: str) -> Optional[int]:
        return self.level_requirements.get(level, {}).get(age_group)

    def weight_bands_for(self, age_group: str, gender: str) -> tuple:
        """gender: значение Gender (MALE/FEMALE)."""
        return self.weight_bands.get(age_group, {}).get(gender.lower(), ())

    def belt_bands_for(self, level: str, age_group: str) -> tuple:
        return self.belt_bands.get(level, {}).get(age_group, ())


def _format_kg(value: Decimal) -> str:
    """18.1 → '18.1', 40.0 → '40'."""
    return format(value.normalize(), "f")


def _to_decimal(value, where: str) -> Decimal:
    # float через str: 52.1 -> Decimal("52.1"), а не двоичное приближение
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ImproperlyConfigured(
            f"Regulations: {where}: weight must be an int, float or Decimal, got {value!r}"
        )
    return Decimal(str(value))


def _age_group_key(key: str, where: str) -> str:
    if key not in AgeGroup.values or key == AgeGroup.UNCLASSIFIED:
        raise ImproperlyConfigured(f"Regulations: {where}: unknown age group {key!r}")
    return key


def _level_key(key: str, where: str) -> str:
    if key not in DisciplineLevel.values:
        raise ImproperlyConfigured(f"Regulations: {where}: unknown level {key!r}")
    return key


def _parse_weight_ladder(raw, where: str) -> tuple:
    if not raw:
        raise ImproperlyConfigured(f"Regulations: {where}: empty weight ladder")
    bands = []
    for i, item in enumerate(raw):
        low = _to_decimal(item.get("min"), f"{where}[{i}].min")
        high = item.get("max")
        high = None if high is None else _to_decimal(high, f"{where}[{i}].max")
        if high is not None and high <= low:
            raise ImproperlyConfigured(f"Regulations: {where}[{i}]: max {high} <= min {low}")
        if bands:
            prev = bands[-1]
            if prev.max is None:
                raise ImproperlyConfigured(f"Regulations: {where}[{i}]: band after open-ended band")
            if low != prev.max + WEIGHT_STEP:
                raise ImproperlyConfigured(
                    f"Regulations: {where}[{i}]: min {low} does not continue previous max {prev.max}"
                )
        bands.append(WeightBand(min=low, max=high))
    if bands[-1].max is not None:
        raise ImproperlyConfigured(f"Regulations: {where}: last band must be open-ended (max = null)")
    return tuple(bands)


def _is_grade(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and (
        value in GYP_GRADES or value in DAN_GRADES
    )


def _parse_belt_rules(raw, where: str) -> tuple:
    rules = []
    for i, item in enumerate(raw or []):
        low, high, name = item.get("min"), item.get("max"), item.get("name")
        if not _is_grade(low) or not _is_grade(high):
            raise ImproperlyConfigured(f"Regulations: {where}[{i}]: invalid grade range {low!r}-{high!r}")
        if not name:
            raise ImproperlyConfigured(f"Regulations: {where}[{i}]: missing name")
        rules.append(BeltBand(min=low, max=high, name=name))
    return tuple(rules)


def parse_regulations(data: dict) -> RegulationTables:
    """Проверить и преобразовать данные положения. Ошибки: ImproperlyConfigured."""
    version = data.get("version")
    if not version:
        raise ImproperlyConfigured("Regulations: missing version")

    weight_bands = {}
    for age_group, by_gender in (data.get("weight_categories") or {}).items():
        _age_group_key(age_group, "weight_categories")
        ladders = {}
        for gender, raw in by_gender.items():
            if gender not in GENDER_KEYS:
                raise ImproperlyConfigured(f"Regulations: weight_categories.{age_group}: unknown gender {gender!r}")
            ladders[gender] = _parse_weight_ladder(raw, f"weight_categories.{age_group}.{gender}")
        weight_bands[age_group] = MappingProxyType(ladders)

    level_requirements = {}
    for level, by_age in (data.get("level_requirements") or {}).items():
        _level_key(level, "level_requirements")
        grades = {}
        for age_group, grade in by_age.items():
            _age_group_key(age_group, f"level_requirements.{level}")
            if not _is_grade(grade):
                raise ImproperlyConfigured(f"Regulations: level_requirements.{level}.{age_group}: invalid grade {grade!r}")
            grades[age_group] = grade
        level_requirements[level] = MappingProxyType(grades)

    belt_bands = {}
    for level, by_age in (data.get("belt_categories") or {}).items():
        _level_key(level, "belt_categories")
        rules = {}
        for age_group, raw in by_age.items():
            _age_group_key(age_group, f"belt_categories.{level}")
            if age_group not in level_requirements.get(level, {}):
                raise ImproperlyConfigured(
                    f"Regulations: belt_categories.{level}.{age_group}: age group is not admitted at this level"
                )
            rules[age_group] = _parse_belt_rules(raw, f"belt_categories.{level}.{age_group}")
        belt_bands[level] = MappingProxyType(rules)

    return RegulationTables(
        version=version,
        weight_bands=MappingProxyType(weight_bands),
        belt_bands=MappingProxyType(belt_bands),
        level_requirements=MappingProxyType(level_requirements),
    )


def load_regulations(path) -> RegulationTables:
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh, parse_float=Decimal)
    except (OSError, ValueError) as e:
        raise ImproperlyConfigured(f"Regulations: cannot read {path}: {e}") from e
    tables = parse_regulations(data)
    logger.info("Regulations %s loaded from %s", tables.version, path)
    return tables


@lru_cache(maxsize=None)
def get_regulations() -> RegulationTables:
    """Таблицы положения (кэшируются на процесс; сброс: get_regulations.cache_clear())."""
    path = getattr(settings, "CATEGORY_REGULATIONS_FILE", None) or DEFAULT_REGULATIONS_FILE
    return load_regulations(path)

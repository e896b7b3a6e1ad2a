"""
Тесты генератора категорий соревнований (весовые, по поясам, простые), таблиц положения и API.
"""

import os
import tempfile
from datetime import date
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.apps import apps as django_apps
from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse

from apps.references.models import AgeCategory, BeltCategory, Discipline, Gender, WeightCategory

from . import category_generator
from .admin import clear_categories_action, generate_categories_action
from .belt_provisioning import provision_belt_categories, required_belt_rules
from .category_generator import (
    build_category_code,
    build_category_name,
    clear_categories,
    generate_categories,
    get_category_stats,
)
from .classifiers import AgeGroup, check_unclassified_age_fallback, classify_age_group, resolve_age_group
from .models import Competition, CompetitionCategory, CompetitionDiscipline, DisciplineLevel
from .regulations import WEIGHT_STEP, get_regulations, load_regulations, parse_regulations


def _generator_settings(**overrides) -> dict:
    value = dict(settings.CATEGORY_GENERATOR)
    value.update(overrides)
    return value


class CategoryTestMixin:
    """Фабрики справочников и соревнований для тестов."""

    def make_competition(self, slug="cup") -> Competition:
        return Competition.objects.create(name=f"Кубок {slug}", slug=slug, start_date=date(2025, 5, 1))

    def make_discipline(self, code, name) -> Discipline:
        return Discipline.objects.create(code=code, name=name, name_ru=name)

    def make_age_category(self, code, min_age, max_age, gender=Gender.MALE, name_ru="", sort_order=0) -> AgeCategory:
        return AgeCategory.objects.create(
            code=code,
            name_ru=name_ru or f"{min_age}-{max_age} лет",
            min_age=min_age,
            max_age=max_age,
            gender=gender,
            sort_order=sort_order,
        )

    def add_discipline(self, competition, discipline, level=DisciplineLevel.FESTIVAL, is_active=True):
        return CompetitionDiscipline.objects.create(
            competition=competition, discipline=discipline, discipline_level=level, is_active=is_active
        )

    def seed_dan_belts(self, discipline):
        for dan in range(1, 10):
            BeltCategory.objects.create(
                discipline=discipline,
                name=f"{dan} дан",
                belt_min=100 + dan,
                belt_max=100 + dan,
                sort_order=dan,
            )


class AgeGroupClassifierTestCase(TestCase):
    """Отнесение возрастных категорий к группам положения."""

    def test_buckets(self) -> None:
        self.assertEqual(classify_age_group(6, 7), AgeGroup.AGE_6_7)
        self.assertEqual(classify_age_group(7, 7), AgeGroup.AGE_6_7)
        self.assertEqual(classify_age_group(8, 9), AgeGroup.AGE_8_9)
        self.assertEqual(classify_age_group(10, 11), AgeGroup.AGE_10_11)
        self.assertEqual(classify_age_group(12, 12), AgeGroup.AGE_12_14)
        self.assertEqual(classify_age_group(15, 17), AgeGroup.AGE_15_17)

    def test_adults_any_max_age(self) -> None:
        self.assertEqual(classify_age_group(18, 18), AgeGroup.ADULTS)
        self.assertEqual(classify_age_group(18, 35), AgeGroup.ADULTS)
        self.assertEqual(classify_age_group(35, 99), AgeGroup.ADULTS)

    def test_range_across_groups_is_unclassified(self) -> None:
        self.assertEqual(classify_age_group(5, 20), AgeGroup.UNCLASSIFIED)
        self.assertEqual(classify_age_group(10, 14), AgeGroup.UNCLASSIFIED)
        self.assertEqual(classify_age_group(16, 19), AgeGroup.UNCLASSIFIED)

    def test_unclassified_falls_back_to_adults_by_default(self) -> None:
        """Текущее поведение: диапазон 5-20 попадает во «18+»."""
        age = AgeCategory(code="odd", min_age=5, max_age=20, gender=Gender.MALE)
        self.assertEqual(resolve_age_group(age), AgeGroup.ADULTS)

    def test_unclassified_skipped_without_fallback(self) -> None:
        age = AgeCategory(code="odd", min_age=5, max_age=20, gender=Gender.MALE)
        with override_settings(CATEGORY_GENERATOR=_generator_settings(UNCLASSIFIED_AGE_FALLBACK=None)):
            self.assertIsNone(resolve_age_group(age))

    def test_unknown_fallback_rejected_at_startup(self) -> None:
        """Неверное значение настройки обнаруживается при старте приложения, а не во время формирования."""
        config = django_apps.get_app_config("competitions")
        with override_settings(CATEGORY_GENERATOR=_generator_settings(UNCLASSIFIED_AGE_FALLBACK="adults")):
            with self.assertRaises(ImproperlyConfigured):
                check_unclassified_age_fallback()
            with self.assertRaises(ImproperlyConfigured):
                config.ready()
        with override_settings(CATEGORY_GENERATOR=_generator_settings(UNCLASSIFIED_AGE_FALLBACK="unclassified")):
            with self.assertRaises(ImproperlyConfigured):
                check_unclassified_age_fallback()
        for value in ("18+", "15-17", None, ""):
            with override_settings(CATEGORY_GENERATOR=_generator_settings(UNCLASSIFIED_AGE_FALLBACK=value)):
                check_unclassified_age_fallback()


class RegulationTablesTestCase(TestCase):
    """Таблицы положения GTF из JSON."""

    def test_weight_ladders_are_contiguous_and_open_ended(self) -> None:
        regulations = get_regulations()
        self.assertEqual(len(regulations.weight_bands), 6)
        for age_group, ladders in regulations.weight_bands.items():
            for gender, bands in ladders.items():
                with self.subTest(age_group=age_group, gender=gender):
                    for prev, band in zip(bands, bands[1:]):
                        self.assertEqual(band.min, prev.max + WEIGHT_STEP)
                    self.assertIsNone(bands[-1].max)
                    self.assertTrue(all(b.max is not None for b in bands[:-1]))

    def test_adult_ladders(self) -> None:
        regulations = get_regulations()
        male = regulations.weight_bands_for(AgeGroup.ADULTS, Gender.MALE)
        female = regulations.weight_bands_for(AgeGroup.ADULTS, Gender.FEMALE)
        self.assertEqual(len(male), 7)
        self.assertEqual(male[0].name, "40-52 кг")
        self.assertEqual(male[1].name, "52.1-58 кг")
        self.assertEqual(male[-1].name, "82.1 кг и выше")
        self.assertEqual(male[-1].code, "W82.1-plus")
        self.assertEqual(female[0].min, Decimal("35"))

    def test_eligibility_by_level(self) -> None:
        regulations = get_regulations()
        for age_group in (AgeGroup.AGE_6_7, AgeGroup.AGE_12_14, AgeGroup.ADULTS):
            self.assertTrue(regulations.is_eligible(DisciplineLevel.FESTIVAL, age_group))
        self.assertFalse(regulations.is_eligible(DisciplineLevel.OFFICIAL, AgeGroup.AGE_8_9))
        self.assertTrue(regulations.is_eligible(DisciplineLevel.OFFICIAL, AgeGroup.AGE_10_11))
        self.assertFalse(regulations.is_eligible(DisciplineLevel.WORLD, AgeGroup.AGE_10_11))
        self.assertTrue(regulations.is_eligible(DisciplineLevel.WORLD, AgeGroup.AGE_15_17))
        self.assertEqual(regulations.minimum_grade(DisciplineLevel.OFFICIAL, AgeGroup.ADULTS), 101)
        self.assertEqual(regulations.minimum_grade(DisciplineLevel.WORLD, AgeGroup.ADULTS), 103)

    def test_belt_bands(self) -> None:
        regulations = get_regulations()
        official_adults = regulations.belt_bands_for(DisciplineLevel.OFFICIAL, AgeGroup.ADULTS)
        self.assertEqual([(b.min, b.max) for b in official_adults], [(100 + d, 100 + d) for d in range(1, 10)])
        self.assertEqual(official_adults[0].name, "1 дан")
        world = regulations.belt_bands_for(DisciplineLevel.WORLD, AgeGroup.ADULTS)
        self.assertEqual([(b.min, b.max, b.name) for b in world], [(103, 109, "3-9 дан")])
        self.assertEqual(regulations.belt_bands_for(DisciplineLevel.WORLD, AgeGroup.AGE_6_7), ())

    def test_gap_between_bands_rejected(self) -> None:
        data = {
            "version": "test",
            "weight_categories": {
                "18+": {"male": [{"min": 40, "max": 52}, {"min": 53, "max": None}]},
            },
        }
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations(data)

    def test_closed_last_band_rejected(self) -> None:
        data = {
            "version": "test",
            "weight_categories": {
                "18+": {"male": [{"min": 40, "max": 52}, {"min": Decimal("52.1"), "max": 60}]},
            },
        }
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations(data)

    def test_unknown_keys_rejected(self) -> None:
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations({"version": "t", "level_requirements": {"REGIONAL": {"18+": 10}}})
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations({"version": "t", "level_requirements": {"FESTIVAL": {"4-5": 10}}})
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations({"version": "t", "level_requirements": {"FESTIVAL": {"18+": 55}}})
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations({"weight_categories": {}})

    def test_belt_rules_for_unadmitted_age_group_rejected(self) -> None:
        data = {
            "version": "test",
            "level_requirements": {"WORLD": {"18+": 103}},
            "belt_categories": {"WORLD": {"10-11": [{"min": 101, "max": 109, "name": "1-9 дан"}]}},
        }
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations(data)

    def test_missing_file(self) -> None:
        with self.assertRaises(ImproperlyConfigured):
            load_regulations("/nonexistent/regulations.json")

    def test_float_weights_accepted(self) -> None:
        data = {
            "version": "test",
            "weight_categories": {
                "18+": {"male": [{"min": 40, "max": 52.5}, {"min": 52.6, "max": None}]},
            },
        }
        bands = parse_regulations(data).weight_bands_for(AgeGroup.ADULTS, Gender.MALE)
        self.assertEqual(bands[0].max, Decimal("52.5"))
        self.assertEqual(bands[1].min, Decimal("52.6"))
        self.assertEqual(bands[1].name, "52.6 кг и выше")

    def test_non_numeric_weight_rejected(self) -> None:
        data = {
            "version": "test",
            "weight_categories": {"18+": {"male": [{"min": "40", "max": None}]}},
        }
        with self.assertRaises(ImproperlyConfigured):
            parse_regulations(data)


class GenerateWeightCategoriesTestCase(CategoryTestMixin, TestCase):
    """Весовые категории (массоги, поинт-стоп)."""

    def setUp(self) -> None:
        self.competition = self.make_competition()
        self.massogi = self.make_discipline("massogi", "Массоги")
        self.adults = self.make_age_category("18_35_male", 18, 35, name_ru="Взрослые")
        self.competition_discipline = self.add_discipline(self.competition, self.massogi)

    def test_festival_adult_males_get_seven_categories(self) -> None:
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 7)
        self.assertEqual(result.disciplines_processed, 1)
        self.assertEqual(result.belt_rules_skipped, 0)

        categories = CompetitionCategory.objects.filter(competition=self.competition)
        self.assertEqual(categories.count(), 7)
        for category in categories:
            self.assertEqual(category.level, DisciplineLevel.FESTIVAL)
            self.assertEqual(category.gender, Gender.MALE)
            self.assertEqual(category.min_participants, 2)
            self.assertEqual(category.discipline, self.massogi)
            self.assertIsNotNone(category.weight_category_id)
            self.assertIsNone(category.belt_category_id)

    def test_names_and_codes(self) -> None:
        generate_categories(self.competition.pk)
        first = WeightCategory.objects.get(discipline=self.massogi, min_weight=Decimal("40"))
        category = CompetitionCategory.objects.get(weight_category=first)
        self.assertEqual(category.name, "Массоги\tВзрослые\t40-52 кг\tМужчины")
        self.assertEqual(category.code, f"MAS_AGE{self.adults.pk}_W{first.pk}_M")

        top = WeightCategory.objects.get(discipline=self.massogi, min_weight=Decimal("82.1"))
        self.assertEqual(top.name, "82.1 кг и выше")
        self.assertEqual(top.max_weight, Decimal("999"))
        self.assertTrue(top.is_open)

    def test_weight_categories_cover_ladder(self) -> None:
        generate_categories(self.competition.pk)
        bands = list(
            WeightCategory.objects.filter(discipline=self.massogi, gender=Gender.MALE).order_by("min_weight")
        )
        self.assertEqual(len(bands), 7)
        for prev, band in zip(bands, bands[1:]):
            self.assertEqual(band.min_weight, prev.max_weight + Decimal("0.1"))
        self.assertEqual(bands[-1].max_weight, WeightCategory.OPEN_MAX_WEIGHT)

    def test_repeated_run_updates_instead_of_duplicating(self) -> None:
        first = generate_categories(self.competition.pk)
        CompetitionCategory.objects.filter(competition=self.competition).update(name="старое", code="OLD")
        second = generate_categories(self.competition.pk)

        self.assertEqual(first.created, second.created)
        self.assertEqual(CompetitionCategory.objects.filter(competition=self.competition).count(), 7)
        self.assertEqual(WeightCategory.objects.filter(discipline=self.massogi).count(), 7)
        self.assertFalse(CompetitionCategory.objects.filter(name="старое").exists())
        self.assertFalse(CompetitionCategory.objects.filter(code="OLD").exists())

    def test_weight_categories_shared_between_competitions(self) -> None:
        other = self.make_competition("other")
        self.add_discipline(other, self.massogi)
        generate_categories(self.competition.pk)
        generate_categories(other.pk)
        self.assertEqual(WeightCategory.objects.filter(discipline=self.massogi).count(), 7)
        self.assertEqual(CompetitionCategory.objects.count(), 14)

    def test_world_level_skips_10_11(self) -> None:
        """WORLD допускает только 15-17 и 18+: для 10-11 категорий нет."""
        competition = self.make_competition("world")
        AgeCategory.objects.all().delete()
        self.make_age_category("10_11_male", 10, 11)
        self.add_discipline(competition, self.massogi, level=DisciplineLevel.WORLD)

        result = generate_categories(competition.pk)
        self.assertEqual(result.created, 0)
        self.assertEqual(result.disciplines_processed, 1)
        self.assertFalse(CompetitionCategory.objects.filter(competition=competition).exists())

    def test_duplicate_age_categories_use_one_representative(self) -> None:
        AgeCategory.objects.all().delete()
        ten = self.make_age_category("10_male", 10, 10, sort_order=1)
        self.make_age_category("11_male", 11, 11, sort_order=2)

        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 10)
        categories = CompetitionCategory.objects.filter(competition=self.competition)
        self.assertEqual(categories.count(), 10)
        self.assertEqual(set(categories.values_list("age_category_id", flat=True)), {ten.pk})

    def test_genders_are_separate_groups(self) -> None:
        self.make_age_category("18_35_female", 18, 35, gender=Gender.FEMALE, name_ru="Взрослые")
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 14)
        self.assertEqual(
            CompetitionCategory.objects.filter(competition=self.competition, gender=Gender.FEMALE).count(), 7
        )
        self.assertEqual(WeightCategory.objects.filter(gender=Gender.FEMALE).count(), 7)

    def test_inactive_rows_ignored(self) -> None:
        AgeCategory.objects.create(
            code="inactive", min_age=12, max_age=14, gender=Gender.MALE, is_active=False
        )
        point = self.make_discipline("point", "Поинт-стоп")
        self.add_discipline(self.competition, point, is_active=False)

        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 7)
        self.assertEqual(result.disciplines_processed, 1)

    def test_unclassified_age_range_treated_as_adults(self) -> None:
        AgeCategory.objects.all().delete()
        self.make_age_category("odd", 5, 20)
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 7)

    def test_unclassified_age_range_skipped_without_fallback(self) -> None:
        AgeCategory.objects.all().delete()
        self.make_age_category("odd", 5, 20)
        with override_settings(CATEGORY_GENERATOR=_generator_settings(UNCLASSIFIED_AGE_FALLBACK=None)):
            result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 0)

    def test_min_participants_from_settings(self) -> None:
        with override_settings(CATEGORY_GENERATOR=_generator_settings(MIN_PARTICIPANTS=3)):
            generate_categories(self.competition.pk)
        self.assertEqual(
            set(CompetitionCategory.objects.values_list("min_participants", flat=True)), {3}
        )

    def test_failure_rolls_back_whole_run(self) -> None:
        original = category_generator._save_category
        calls = []

        def failing_save(*args, **kwargs):
            calls.append(1)
            if len(calls) == 3:
                raise DatabaseError("connection lost")
            return original(*args, **kwargs)

        with patch("apps.competitions.category_generator._save_category", side_effect=failing_save):
            with self.assertRaises(DatabaseError):
                generate_categories(self.competition.pk)
        self.assertFalse(CompetitionCategory.objects.exists())
        self.assertFalse(WeightCategory.objects.exists())


class GenerateBeltCategoriesTestCase(CategoryTestMixin, TestCase):
    """Категории по поясам (хъёнг / пхумсэ): только из справочника категорий поясов."""

    def setUp(self) -> None:
        self.competition = self.make_competition()
        self.poomsae = self.make_discipline("poomsae", "Пхумсэ")
        self.adults = self.make_age_category("18_35_male", 18, 35, name_ru="Взрослые")
        self.add_discipline(self.competition, self.poomsae, level=DisciplineLevel.OFFICIAL)

    def test_without_belt_categories_nothing_created(self) -> None:
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 0)
        self.assertEqual(result.belt_rules_skipped, 9)
        self.assertFalse(CompetitionCategory.objects.exists())
        self.assertFalse(BeltCategory.objects.exists())

    def test_seeded_dan_categories(self) -> None:
        self.seed_dan_belts(self.poomsae)
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 9)
        self.assertEqual(result.belt_rules_skipped, 0)

        first_dan = BeltCategory.objects.get(discipline=self.poomsae, belt_min=101)
        category = CompetitionCategory.objects.get(belt_category=first_dan)
        self.assertEqual(category.name, "Пхумсэ\tВзрослые\t1 дан\tМужчины")
        self.assertEqual(category.code, f"POO_AGE{self.adults.pk}_B{first_dan.pk}_M")
        self.assertEqual(category.level, DisciplineLevel.OFFICIAL)
        self.assertIsNone(category.weight_category_id)

    def test_repeated_run_duplicates_belt_categories(self) -> None:
        """Известное поведение: категории по поясам вставляются без проверки на существование."""
        self.seed_dan_belts(self.poomsae)
        generate_categories(self.competition.pk)
        generate_categories(self.competition.pk)
        self.assertEqual(CompetitionCategory.objects.filter(competition=self.competition).count(), 18)

    def test_belt_upsert_setting_makes_run_repeatable(self) -> None:
        self.seed_dan_belts(self.poomsae)
        with override_settings(CATEGORY_GENERATOR=_generator_settings(BELT_UPSERT=True)):
            generate_categories(self.competition.pk)
            result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 9)
        self.assertEqual(CompetitionCategory.objects.filter(competition=self.competition).count(), 9)

    def test_partial_reference_data(self) -> None:
        BeltCategory.objects.create(discipline=self.poomsae, name="1 дан", belt_min=101, belt_max=101)
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 1)
        self.assertEqual(result.belt_rules_skipped, 8)

    def test_admin_notified_after_commit_when_rules_skipped(self) -> None:
        with patch("apps.core.telegram_notify.notify_belt_rules_skipped") as notify:
            with self.captureOnCommitCallbacks(execute=True):
                generate_categories(self.competition.pk)
        notify.assert_called_once_with(self.competition, 9)

    def test_festival_provisioned_belts(self) -> None:
        competition = self.make_competition("festival")
        self.add_discipline(competition, self.poomsae, level=DisciplineLevel.FESTIVAL)
        provision_belt_categories(self.poomsae)
        result = generate_categories(competition.pk)
        self.assertEqual(result.created, 5)
        names = sorted(
            c.name.split("\t")[2] for c in CompetitionCategory.objects.filter(competition=competition)
        )
        self.assertEqual(names, ["10-9 гып", "2-1 гып", "4-3 гып", "6-5 гып", "8-7 гып"])


class GenerateSimpleCategoriesTestCase(CategoryTestMixin, TestCase):
    """Категории без разделения (силовое разбивание, спецтехника)."""

    def setUp(self) -> None:
        self.competition = self.make_competition()
        self.breaking = self.make_discipline("power_breaking", "Силовое разбивание")
        self.men = self.make_age_category("18_male", 18, 99, name_ru="Взрослые")
        self.women = self.make_age_category("18_female", 18, 99, gender=Gender.FEMALE, name_ru="Взрослые")
        self.add_discipline(self.competition, self.breaking)

    def test_one_category_per_age_group(self) -> None:
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 2)
        men = CompetitionCategory.objects.get(competition=self.competition, gender=Gender.MALE)
        self.assertEqual(men.name, "Силовое разбивание\tВзрослые\tМужчины")
        self.assertEqual(men.code, f"POW_AGE{self.men.pk}_M")
        women = CompetitionCategory.objects.get(competition=self.competition, gender=Gender.FEMALE)
        self.assertEqual(women.code, f"POW_AGE{self.women.pk}_F")
        self.assertIsNone(women.weight_category_id)
        self.assertIsNone(women.belt_category_id)

    def test_repeated_run_is_idempotent(self) -> None:
        generate_categories(self.competition.pk)
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 2)
        self.assertEqual(CompetitionCategory.objects.filter(competition=self.competition).count(), 2)

    def test_stored_shape_wins_over_name(self) -> None:
        """Форма категорий берётся из справочника, а не из названия."""
        Discipline.objects.filter(pk=self.breaking.pk).update(name_ru="Массоги (показательные)")
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 2)
        self.assertFalse(WeightCategory.objects.exists())

    def test_missing_shape_classified_by_name(self) -> None:
        Discipline.objects.filter(pk=self.breaking.pk).update(category_shape="", name_ru="Массоги")
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 14)

    def test_empty_age_name_dropped(self) -> None:
        age = AgeCategory(pk=5, code="x", min_age=18, max_age=99, gender=Gender.FEMALE, name_ru="")
        self.assertEqual(build_category_name(self.breaking, age), "Силовое разбивание\tЖенщины")
        self.assertEqual(build_category_code(self.breaking, age), "POW_AGE5_F")


class NoDisciplinesTestCase(CategoryTestMixin, TestCase):
    def test_competition_without_disciplines(self) -> None:
        competition = self.make_competition()
        self.make_age_category("18_male", 18, 99)
        result = generate_categories(competition.pk)
        self.assertEqual(result.as_dict(), {"created": 0, "disciplines_processed": 0, "belt_rules_skipped": 0})


class ClearAndStatsTestCase(CategoryTestMixin, TestCase):
    """clear_categories и get_category_stats."""

    def setUp(self) -> None:
        self.competition = self.make_competition()
        self.massogi = self.make_discipline("massogi", "Массоги")
        self.breaking = self.make_discipline("power_breaking", "Силовое разбивание")
        self.make_age_category("18_male", 18, 99)
        self.make_age_category("18_female", 18, 99, gender=Gender.FEMALE)
        self.add_discipline(self.competition, self.massogi)
        self.add_discipline(self.competition, self.breaking)
        self.other = self.make_competition("other")
        self.add_discipline(self.other, self.breaking)

    def test_stats(self) -> None:
        generate_categories(self.competition.pk)
        stats = get_category_stats(self.competition.pk)
        self.assertEqual(stats["total"], 16)
        self.assertEqual(
            stats["by_discipline"],
            [
                {"discipline_id": self.massogi.pk, "count": 14},
                {"discipline_id": self.breaking.pk, "count": 2},
            ],
        )
        self.assertEqual(
            stats["by_gender"],
            [{"gender": "FEMALE", "count": 8}, {"gender": "MALE", "count": 8}],
        )

    def test_stats_empty(self) -> None:
        self.assertEqual(
            get_category_stats(self.competition.pk),
            {"total": 0, "by_discipline": [], "by_gender": []},
        )

    def test_clear_returns_deleted_count(self) -> None:
        result = generate_categories(self.competition.pk)
        generate_categories(self.other.pk)
        deleted = clear_categories(self.competition.pk)
        self.assertEqual(deleted, result.created)
        self.assertFalse(CompetitionCategory.objects.filter(competition=self.competition).exists())
        self.assertEqual(CompetitionCategory.objects.filter(competition=self.other).count(), 2)
        # справочник весовых категорий не затрагивается
        self.assertEqual(WeightCategory.objects.count(), 14)

    def test_clear_then_regenerate(self) -> None:
        generate_categories(self.competition.pk)
        clear_categories(self.competition.pk)
        self.assertEqual(clear_categories(self.competition.pk), 0)
        result = generate_categories(self.competition.pk)
        self.assertEqual(CompetitionCategory.objects.filter(competition=self.competition).count(), result.created)


class BeltProvisioningTestCase(CategoryTestMixin, TestCase):
    """Создание категорий поясов по положению."""

    def setUp(self) -> None:
        self.hyong = self.make_discipline("hyong", "Хъёнг")

    def test_required_rules(self) -> None:
        rules = required_belt_rules(get_regulations())
        self.assertEqual(len(rules), 16)
        self.assertEqual((rules[0].min, rules[0].max), (10, 9))
        self.assertEqual((rules[4].min, rules[4].max), (2, 1))
        self.assertEqual((rules[5].min, rules[5].max), (101, 101))

    def test_provision_is_repeatable(self) -> None:
        first = provision_belt_categories(self.hyong)
        self.assertEqual((first.created, first.existing), (16, 0))
        second = provision_belt_categories(self.hyong)
        self.assertEqual((second.created, second.existing), (0, 16))
        self.assertEqual(BeltCategory.objects.filter(discipline=self.hyong).count(), 16)

    def test_provisioned_categories_unblock_generation(self) -> None:
        competition = self.make_competition()
        self.make_age_category("18_male", 18, 99)
        self.add_discipline(competition, self.hyong, level=DisciplineLevel.OFFICIAL)
        provision_belt_categories(self.hyong)
        result = generate_categories(competition.pk)
        self.assertEqual(result.created, 9)
        self.assertEqual(result.belt_rules_skipped, 0)

    def test_non_belt_discipline_rejected(self) -> None:
        massogi = self.make_discipline("massogi", "Массоги")
        with self.assertRaises(ValueError):
            provision_belt_categories(massogi)

    def test_command(self) -> None:
        out = StringIO()
        call_command("provision_belt_categories", stdout=out)
        self.assertIn("создано 16", out.getvalue())
        with self.assertRaises(CommandError):
            call_command("provision_belt_categories", "unknown", stdout=StringIO())


class FederationReferenceDataTestCase(CategoryTestMixin, TestCase):
    """Полная программа фестиваля по справочникам федерации."""

    fixtures = ["gtf_references"]

    def setUp(self) -> None:
        self.competition = self.make_competition()
        for discipline in Discipline.objects.all():
            self.add_discipline(self.competition, discipline)

    def test_full_festival_programme(self) -> None:
        result = generate_categories(self.competition.pk)
        # массоги и поинт-стоп: 53 + 53 весовых каждая; 2 простые дисциплины x 12 групп
        self.assertEqual(result.created, 212 + 24)
        self.assertEqual(result.disciplines_processed, 5)
        self.assertEqual(result.belt_rules_skipped, 52)

    def test_full_festival_programme_with_belts(self) -> None:
        provision_belt_categories(Discipline.objects.get(code="hyong"))
        result = generate_categories(self.competition.pk)
        self.assertEqual(result.created, 212 + 24 + 52)
        self.assertEqual(result.belt_rules_skipped, 0)


class CustomRegulationsFileTestCase(CategoryTestMixin, TestCase):
    """Таблицы положения подгружаются из файла из настроек."""

    REGULATIONS = """{
      "version": "local-1",
      "weight_categories": {"18+": {"male": [{"min": 50, "max": 70}, {"min": 70.1, "max": null}]}},
      "belt_categories": {},
      "level_requirements": {"FESTIVAL": {"18+": 10}}
    }"""

    def setUp(self) -> None:
        fd, self.path = tempfile.mkstemp(suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(self.REGULATIONS)
        self.addCleanup(os.remove, self.path)
        self.addCleanup(get_regulations.cache_clear)
        get_regulations.cache_clear()

    def test_generator_uses_configured_tables(self) -> None:
        competition = self.make_competition()
        self.make_age_category("18_male", 18, 99)
        self.add_discipline(competition, self.make_discipline("massogi", "Массоги"))
        with override_settings(CATEGORY_REGULATIONS_FILE=self.path):
            get_regulations.cache_clear()
            self.assertEqual(get_regulations().version, "local-1")
            result = generate_categories(competition.pk)
        self.assertEqual(result.created, 2)
        self.assertEqual(
            sorted(WeightCategory.objects.values_list("name", flat=True)),
            ["50-70 кг", "70.1 кг и выше"],
        )


class CategoryApiTestCase(CategoryTestMixin, TestCase):
    """JSON API категорий для админ-панели."""

    def setUp(self) -> None:
        self.competition = self.make_competition()
        self.massogi = self.make_discipline("massogi", "Массоги")
        self.make_age_category("18_male", 18, 99)
        self.make_age_category("18_female", 18, 99, gender=Gender.FEMALE)
        self.add_discipline(self.competition, self.massogi)
        self.staff = User.objects.create_user(username="admin", password="x", is_staff=True)
        self.client.force_login(self.staff)

    def _url(self, name, competition_id=None):
        return reverse(name, args=[competition_id or self.competition.pk])

    def test_generate(self) -> None:
        response = self.client.post(self._url("competition_category_generate"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"ok": True, "created": 14, "disciplines_processed": 1, "belt_rules_skipped": 0},
        )

    def test_generate_requires_post(self) -> None:
        response = self.client.get(self._url("competition_category_generate"))
        self.assertEqual(response.status_code, 405)

    def test_generate_unknown_competition(self) -> None:
        response = self.client.post(self._url("competition_category_generate", 999999))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "competition_not_found")

    def test_generate_database_error(self) -> None:
        with patch(
            "apps.competitions.views.generate_categories", side_effect=DatabaseError("boom")
        ), patch("apps.core.telegram_notify.notify_generation_failed") as notify:
            response = self.client.post(self._url("competition_category_generate"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"ok": False, "error": "generation_failed"})
        notify.assert_called_once()

    def test_list_with_filters(self) -> None:
        generate_categories(self.competition.pk)
        response = self.client.get(self._url("competition_category_list"), {"gender": "female"})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["meta"]["total"], 7)
        self.assertTrue(all(c["gender"] == "FEMALE" for c in payload["data"]))
        first = payload["data"][0]
        self.assertEqual(first["weight_category"]["name"], "35-46 кг")
        self.assertIsNone(first["belt_category"])

        response = self.client.get(self._url("competition_category_list"), {"discipline_id": self.massogi.pk + 100})
        self.assertEqual(response.json()["meta"]["total"], 0)

    def test_list_invalid_filters(self) -> None:
        response = self.client.get(self._url("competition_category_list"), {"gender": "other"})
        self.assertEqual(response.status_code, 400)
        response = self.client.get(self._url("competition_category_list"), {"discipline_id": "abc"})
        self.assertEqual(response.status_code, 400)

    def test_stats_and_clear(self) -> None:
        generate_categories(self.competition.pk)
        stats = self.client.get(self._url("competition_category_stats")).json()
        self.assertEqual(stats["total"], 14)
        response = self.client.post(self._url("competition_category_clear"))
        self.assertEqual(response.json(), {"ok": True, "deleted": 14})
        self.assertFalse(CompetitionCategory.objects.exists())

    def test_non_staff_redirected(self) -> None:
        self.client.logout()
        user = User.objects.create_user(username="user", password="x")
        self.client.force_login(user)
        response = self.client.post(self._url("competition_category_generate"))
        self.assertEqual(response.status_code, 302)
        self.assertFalse(CompetitionCategory.objects.exists())


class CommandsAndAdminActionsTestCase(CategoryTestMixin, TestCase):
    """Команды manage.py и действия админки."""

    def setUp(self) -> None:
        self.competition = self.make_competition()
        self.make_age_category("18_male", 18, 99)
        self.add_discipline(self.competition, self.make_discipline("massogi", "Массоги"))

    def test_generate_command(self) -> None:
        out = StringIO()
        call_command("generate_categories", str(self.competition.pk), stdout=out)
        self.assertIn("категорий 7", out.getvalue())
        self.assertEqual(CompetitionCategory.objects.count(), 7)

    def test_generate_command_with_clear(self) -> None:
        generate_categories(self.competition.pk)
        out = StringIO()
        call_command("generate_categories", str(self.competition.pk), "--clear", stdout=out)
        self.assertIn("Удалено категорий: 7", out.getvalue())
        self.assertEqual(CompetitionCategory.objects.count(), 7)

    def test_generate_command_with_clear_keeps_categories_on_failure(self) -> None:
        """Ошибка при пересборке с --clear не оставляет соревнование без категорий."""
        generate_categories(self.competition.pk)
        names = set(CompetitionCategory.objects.values_list("name", flat=True))
        with patch(
            "apps.competitions.category_generator._save_category",
            side_effect=DatabaseError("connection lost"),
        ):
            with self.assertRaises(CommandError):
                call_command("generate_categories", str(self.competition.pk), "--clear", stdout=StringIO())
        self.assertEqual(CompetitionCategory.objects.count(), 7)
        self.assertEqual(set(CompetitionCategory.objects.values_list("name", flat=True)), names)

    def test_generate_command_unknown_competition(self) -> None:
        with self.assertRaises(CommandError):
            call_command("generate_categories", "999999", stdout=StringIO())

    def test_clear_and_stats_commands(self) -> None:
        generate_categories(self.competition.pk)
        out = StringIO()
        call_command("category_stats", str(self.competition.pk), stdout=out)
        self.assertIn("всего категорий 7", out.getvalue())
        self.assertIn("Мужчины: 7", out.getvalue())

        out = StringIO()
        call_command("clear_categories", str(self.competition.pk), stdout=out)
        self.assertIn("удалено категорий 7", out.getvalue())

    def test_admin_actions(self) -> None:
        queryset = Competition.objects.filter(pk=self.competition.pk)
        with patch("apps.competitions.admin.messages") as messages:
            generate_categories_action(None, None, queryset)
        messages.success.assert_called_once()
        self.assertEqual(CompetitionCategory.objects.count(), 7)

        with patch("apps.competitions.admin.messages") as messages:
            clear_categories_action(None, None, queryset)
        messages.success.assert_called_once_with(None, "Удалено категорий: 7.")
        self.assertEqual(CompetitionCategory.objects.count(), 0)

    def test_admin_clear_action_database_error(self) -> None:
        generate_categories(self.competition.pk)
        queryset = Competition.objects.filter(pk=self.competition.pk)
        with patch(
            "apps.competitions.admin.clear_categories", side_effect=DatabaseError("locked")
        ), patch("apps.competitions.admin.messages") as messages:
            clear_categories_action(None, None, queryset)
        messages.error.assert_called_once()
        self.assertIn("locked", messages.error.call_args[0][1])
        self.assertEqual(CompetitionCategory.objects.count(), 7)

    def test_admin_action_without_disciplines(self) -> None:
        empty = self.make_competition("empty")
        with patch("apps.competitions.admin.messages") as messages:
            generate_categories_action(None, None, Competition.objects.filter(pk=empty.pk))
        messages.warning.assert_called_once()
        messages.success.assert_not_called()

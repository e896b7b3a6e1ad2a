"""
Тесты справочников: форма категорий дисциплины, фикстура федерации, действие админки.
"""

from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import TestCase

from .admin import provision_belt_categories_action
from .models import (
    AgeCategory,
    BeltCategory,
    CategoryShape,
    Discipline,
    Gender,
    WeightCategory,
    classify_discipline_name,
)


class DisciplineShapeTestCase(TestCase):
    """Форма категорий дисциплины."""

    def test_classify_by_name(self) -> None:
        self.assertEqual(classify_discipline_name("Массоги"), CategoryShape.WEIGHT)
        self.assertEqual(classify_discipline_name("Поинт-стоп"), CategoryShape.WEIGHT)
        self.assertEqual(classify_discipline_name("Спарринг (командный)"), CategoryShape.WEIGHT)
        self.assertEqual(classify_discipline_name("Хъёнг"), CategoryShape.BELT)
        self.assertEqual(classify_discipline_name("Формальный комплекс"), CategoryShape.BELT)
        self.assertEqual(classify_discipline_name("Силовое разбивание"), CategoryShape.SIMPLE)
        self.assertEqual(classify_discipline_name(""), CategoryShape.SIMPLE)

    def test_save_fills_missing_shape(self) -> None:
        discipline = Discipline.objects.create(code="hyong", name="Hyong", name_ru="Хъёнг")
        self.assertEqual(discipline.category_shape, CategoryShape.BELT)

    def test_save_keeps_explicit_shape(self) -> None:
        discipline = Discipline.objects.create(
            code="team_sparring", name="Командный массоги", category_shape=CategoryShape.SIMPLE
        )
        discipline.refresh_from_db()
        self.assertEqual(discipline.category_shape, CategoryShape.SIMPLE)

    def test_display_name_prefers_russian(self) -> None:
        self.assertEqual(Discipline(name="Massogi", name_ru="Массоги").display_name, "Массоги")
        self.assertEqual(Discipline(name="Massogi").display_name, "Massogi")


class WeightCategoryTestCase(TestCase):
    def test_open_category(self) -> None:
        discipline = Discipline.objects.create(code="massogi", name="Массоги")
        top = WeightCategory.objects.create(
            discipline=discipline, code="W82.1-plus", name="82.1 кг и выше",
            min_weight="82.1", max_weight=WeightCategory.OPEN_MAX_WEIGHT, gender=Gender.MALE,
        )
        self.assertTrue(top.is_open)


class FederationFixtureTestCase(TestCase):
    """Справочники федерации из фикстуры gtf_references."""

    fixtures = ["gtf_references"]

    def test_counts(self) -> None:
        self.assertEqual(Discipline.objects.count(), 5)
        self.assertEqual(AgeCategory.objects.count(), 12)
        self.assertEqual(AgeCategory.objects.filter(gender=Gender.FEMALE).count(), 6)

    def test_shapes(self) -> None:
        shapes = dict(Discipline.objects.values_list("code", "category_shape"))
        self.assertEqual(shapes["hyong"], CategoryShape.BELT)
        self.assertEqual(shapes["massogi"], CategoryShape.WEIGHT)
        self.assertEqual(shapes["point_stop"], CategoryShape.WEIGHT)
        self.assertEqual(shapes["power_breaking"], CategoryShape.SIMPLE)

    def test_provision_action(self) -> None:
        queryset = Discipline.objects.filter(code__in=["hyong", "massogi"])
        with patch("apps.references.admin.messages") as messages:
            provision_belt_categories_action(None, None, queryset)
        messages.success.assert_called_once()
        messages.warning.assert_called_once()
        self.assertEqual(BeltCategory.objects.filter(discipline__code="hyong").count(), 16)
        self.assertFalse(BeltCategory.objects.filter(discipline__code="massogi").exists())


class ProvisionActionWithoutStoredShapeTestCase(TestCase):
    """Дисциплина без сохранённой формы (bulk_create минует save()) определяется по названию."""

    def test_belt_discipline_recognised_by_name(self) -> None:
        Discipline.objects.bulk_create([Discipline(code="hyong", name="Hyong", name_ru="Хъёнг")])
        discipline = Discipline.objects.get(code="hyong")
        self.assertEqual(discipline.category_shape, "")

        with patch("apps.references.admin.messages") as messages:
            provision_belt_categories_action(None, None, Discipline.objects.filter(pk=discipline.pk))
        messages.success.assert_called_once()
        messages.warning.assert_not_called()
        self.assertEqual(BeltCategory.objects.filter(discipline=discipline).count(), 16)

    def test_command_without_codes(self) -> None:
        Discipline.objects.bulk_create([Discipline(code="hyong", name="Hyong", name_ru="Хъёнг")])
        call_command("provision_belt_categories", stdout=StringIO())
        self.assertEqual(BeltCategory.objects.filter(discipline__code="hyong").count(), 16)

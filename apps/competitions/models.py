"""
Competition models: Competitions, their disciplines and generated categories.
"""

from django.conf import settings
from django.db import models

from apps.references.models import AgeCategory, BeltCategory, Discipline, Gender, WeightCategory


class CompetitionStatus(models.TextChoices):
    """Competition status."""

    DRAFT = "draft", "Черновик"
    REGISTRATION = "registration", "Регистрация"
    ACTIVE = "active", "Идут соревнования"
    COMPLETED = "completed", "Завершены"
    CANCELLED = "cancelled", "Отменены"


class DisciplineLevel(models.TextChoices):
    """Уровень положения, по которому проводится дисциплина."""

    FESTIVAL = "FESTIVAL", "Фестиваль"
    OFFICIAL = "OFFICIAL", "Официальные"
    WORLD = "WORLD", "Мировой уровень"


def _default_min_participants() -> int:
    return settings.CATEGORY_GENERATOR["MIN_PARTICIPANTS"]


class Competition(models.Model):
    """Соревнование федерации."""

    name = models.CharField("Название", max_length=255)
    slug = models.SlugField("URL", unique=True)
    city = models.CharField("Город", max_length=100, blank=True)
    start_date = models.DateField("Дата начала")
    end_date = models.DateField("Дата окончания", null=True, blank=True)
    status = models.CharField(
        "Статус", max_length=20, choices=CompetitionStatus.choices, default=CompetitionStatus.DRAFT
    )

    created_at = models.DateTimeField("Создано", auto_now_add=True)
    updated_at = models.DateTimeField("Обновлено", auto_now=True)

    class Meta:
        verbose_name = "Соревнование"
        verbose_name_plural = "Соревнования"
        ordering = ["-start_date"]

    def __str__(self) -> str:
        return self.name


class CompetitionDiscipline(models.Model):
    """Дисциплина в программе соревнования с уровнем положения."""

    competition = models.ForeignKey(
        Competition,
        on_delete=models.CASCADE,
        related_name="competition_disciplines",
        verbose_name="Соревнование",
    )
    discipline = models.ForeignKey(
        Discipline,
        on_delete=models.PROTECT,
        related_name="competition_disciplines",
        verbose_name="Дисциплина",
    )
    discipline_level = models.CharField(
        "Уровень", max_length=10, choices=DisciplineLevel.choices, default=DisciplineLevel.FESTIVAL
    )
    is_active = models.BooleanField("Активна", default=True)

    class Meta:
        verbose_name = "Дисциплина соревнования"
        verbose_name_plural = "Дисциплины соревнования"
        unique_together = [("competition", "discipline")]
        ordering = ["competition", "discipline__sort_order", "id"]

    def __str__(self) -> str:
        return f"{self.competition.name}: {self.discipline} ({self.get_discipline_level_display()})"


class CompetitionCategory(models.Model):
    """
    Категория соревнования (дисциплина + возраст + пол + вес/пояс).
    Формируется генератором категорий; уникальность по натуральному ключу обеспечивает генератор.
    """

    competition = models.ForeignKey(
        Competition,
        on_delete=models.CASCADE,
        related_name="categories",
        verbose_name="Соревнование",
    )
    competition_discipline = models.ForeignKey(
        CompetitionDiscipline,
        on_delete=models.CASCADE,
        related_name="categories",
        verbose_name="Дисциплина соревнования",
    )
    discipline = models.ForeignKey(
        Discipline,
        on_delete=models.PROTECT,
        related_name="competition_categories",
        verbose_name="Дисциплина",
    )
    level = models.CharField("Уровень", max_length=10, choices=DisciplineLevel.choices)
    age_category = models.ForeignKey(
        AgeCategory,
        on_delete=models.PROTECT,
        related_name="competition_categories",
        verbose_name="Возрастная категория",
    )
    gender = models.CharField("Пол", max_length=10, choices=Gender.choices)
    weight_category = models.ForeignKey(
        WeightCategory,
        on_delete=models.PROTECT,
        related_name="competition_categories",
        null=True,
        blank=True,
        verbose_name="Весовая категория",
    )
    belt_category = models.ForeignKey(
        BeltCategory,
        on_delete=models.PROTECT,
        related_name="competition_categories",
        null=True,
        blank=True,
        verbose_name="Категория по поясам",
    )
    name = models.CharField("Название", max_length=500)
    code = models.CharField("Код", max_length=100)
    min_participants = models.PositiveSmallIntegerField(
        "Минимум участников", default=_default_min_participants
    )

    created_at = models.DateTimeField("Создана", auto_now_add=True)
    updated_at = models.DateTimeField("Обновлена", auto_now=True)

    class Meta:
        verbose_name = "Категория соревнования"
        verbose_name_plural = "Категории соревнования"
        ordering = ["discipline", "gender", "age_category", "weight_category", "id"]
        indexes = [
            models.Index(
                fields=["competition", "competition_discipline", "age_category"],
                name="competition_cat_natural_idx",
            ),
        ]

    def __str__(self) -> str:
        return self.name.replace("\t", " / ")

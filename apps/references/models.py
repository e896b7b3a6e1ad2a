"""
Справочники федерации: возрастные категории, дисциплины, весовые категории и категории поясов.
"""

from django.db import models


class Gender(models.TextChoices):
    """Пол спортсмена / категории."""

    MALE = "MALE", "Мужчины"
    FEMALE = "FEMALE", "Женщины"


class CategoryShape(models.TextChoices):
    """Как дисциплина делится на категории внутри возрастной группы."""

    WEIGHT = "weight", "Весовые категории"
    BELT = "belt", "Категории по поясам"
    SIMPLE = "simple", "Без разделения"


# Ключевые слова для определения формы категорий по названию дисциплины.
# Используются при заполнении Discipline.category_shape (сохранение, миграция данных).
WEIGHT_KEYWORDS = ("масоги", "массоги", "спарринг", "поинт")
BELT_KEYWORDS = ("хъёнг", "хьёнг", "формальн", "пхумсэ")


def classify_discipline_name(name: str) -> str:
    """Определить форму категорий по названию дисциплины (подстрока в нижнем регистре)."""
    lowered = (name or "").lower()
    if any(k in lowered for k in WEIGHT_KEYWORDS):
        return CategoryShape.WEIGHT
    if any(k in lowered for k in BELT_KEYWORDS):
        return CategoryShape.BELT
    return CategoryShape.SIMPLE


class AgeCategory(models.Model):
    """Возрастная категория (например, «Юноши 12-14 лет»)."""

    code = models.CharField("Код", max_length=50, unique=True)
    name_ru = models.CharField("Название (рус.)", max_length=200, blank=True)
    name_en = models.CharField("Название (англ.)", max_length=200, blank=True)
    min_age = models.PositiveSmallIntegerField("Возраст от")
    max_age = models.PositiveSmallIntegerField("Возраст до")
    gender = models.CharField("Пол", max_length=10, choices=Gender.choices)
    sort_order = models.PositiveSmallIntegerField("Порядок", default=0)
    is_active = models.BooleanField("Активна", default=True)

    class Meta:
        verbose_name = "Возрастная категория"
        verbose_name_plural = "Возрастные категории"
        ordering = ["sort_order", "min_age", "id"]

    def __str__(self) -> str:
        return self.name_ru or self.name_en or self.code


class Discipline(models.Model):
    """Дисциплина (массоги, хъёнг, силовое разбивание и т.д.)."""

    code = models.CharField("Код", max_length=50, unique=True)
    name = models.CharField("Название", max_length=200)
    name_ru = models.CharField("Название (рус.)", max_length=200, blank=True)
    name_en = models.CharField("Название (англ.)", max_length=200, blank=True)
    category_shape = models.CharField(
        "Форма категорий",
        max_length=10,
        choices=CategoryShape.choices,
        blank=True,
        help_text="Весовые, по поясам или без разделения. Если не указано: определяется по названию при сохранении.",
    )
    sort_order = models.PositiveSmallIntegerField("Порядок", default=0)
    is_active = models.BooleanField("Активна", default=True)

    class Meta:
        verbose_name = "Дисциплина"
        verbose_name_plural = "Дисциплины"
        ordering = ["sort_order", "id"]

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        return self.name_ru or self.name

    def save(self, *args, **kwargs):
        if not self.category_shape:
            self.category_shape = classify_discipline_name(self.display_name)
        super().save(*args, **kwargs)


class WeightCategory(models.Model):
    """Весовая категория дисциплины. Верхняя открытая категория хранится с max_weight = 999."""

    OPEN_MAX_WEIGHT = 999

    discipline = models.ForeignKey(
        Discipline,
        on_delete=models.CASCADE,
        related_name="weight_categories",
        verbose_name="Дисциплина",
    )
    code = models.CharField("Код", max_length=50)
    name = models.CharField("Название", max_length=100)
    min_weight = models.DecimalField("Вес от (кг)", max_digits=5, decimal_places=1)
    max_weight = models.DecimalField("Вес до (кг)", max_digits=5, decimal_places=1)
    gender = models.CharField("Пол", max_length=10, choices=Gender.choices)
    is_active = models.BooleanField("Активна", default=True)

    class Meta:
        verbose_name = "Весовая категория"
        verbose_name_plural = "Весовые категории"
        ordering = ["discipline", "gender", "min_weight"]
        constraints = [
            models.UniqueConstraint(
                fields=["discipline", "min_weight", "max_weight", "gender"],
                name="uniq_weight_category_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.discipline}: {self.name} ({self.get_gender_display()})"

    @property
    def is_open(self) -> bool:
        return self.max_weight >= self.OPEN_MAX_WEIGHT


class BeltCategory(models.Model):
    """
    Категория по поясам.
    Гыпы хранятся как 10..1 (10 - белый пояс), даны как 100 + дан (101 - 1 дан).
    """

    discipline = models.ForeignKey(
        Discipline,
        on_delete=models.CASCADE,
        related_name="belt_categories",
        verbose_name="Дисциплина",
    )
    age_category = models.ForeignKey(
        AgeCategory,
        on_delete=models.CASCADE,
        related_name="belt_categories",
        null=True,
        blank=True,
        verbose_name="Возрастная категория",
    )
    name = models.CharField("Название", max_length=200)
    belt_min = models.SmallIntegerField("Пояс от")
    belt_max = models.SmallIntegerField("Пояс до")
    sort_order = models.PositiveSmallIntegerField("Порядок", default=0)
    is_active = models.BooleanField("Активна", default=True)

    class Meta:
        verbose_name = "Категория по поясам"
        verbose_name_plural = "Категории по поясам"
        ordering = ["discipline", "sort_order", "id"]

    def __str__(self) -> str:
        return f"{self.discipline}: {self.name}"

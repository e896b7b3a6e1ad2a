import apps.competitions.models
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("references", "0002_discipline_category_shape"),
    ]

    operations = [
        migrations.CreateModel(
            name="Competition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, verbose_name="Название")),
                ("slug", models.SlugField(unique=True, verbose_name="URL")),
                ("city", models.CharField(blank=True, max_length=100, verbose_name="Город")),
                ("start_date", models.DateField(verbose_name="Дата начала")),
                ("end_date", models.DateField(blank=True, null=True, verbose_name="Дата окончания")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Черновик"),
                            ("registration", "Регистрация"),
                            ("active", "Идут соревнования"),
                            ("completed", "Завершены"),
                            ("cancelled", "Отменены"),
                        ],
                        default="draft",
                        max_length=20,
                        verbose_name="Статус",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Создано")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Обновлено")),
            ],
            options={
                "verbose_name": "Соревнование",
                "verbose_name_plural": "Соревнования",
                "ordering": ["-start_date"],
            },
        ),
        migrations.CreateModel(
            name="CompetitionDiscipline",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "discipline_level",
                    models.CharField(
                        choices=[
                            ("FESTIVAL", "Фестиваль"),
                            ("OFFICIAL", "Официальные"),
                            ("WORLD", "Мировой уровень"),
                        ],
                        default="FESTIVAL",
                        max_length=10,
                        verbose_name="Уровень",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="Активна")),
                (
                    "competition",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="competition_disciplines",
                        to="competitions.competition",
                        verbose_name="Соревнование",
                    ),
                ),
                (
                    "discipline",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="competition_disciplines",
                        to="references.discipline",
                        verbose_name="Дисциплина",
                    ),
                ),
            ],
            options={
                "verbose_name": "Дисциплина соревнования",
                "verbose_name_plural": "Дисциплины соревнования",
                "ordering": ["competition", "discipline__sort_order", "id"],
                "unique_together": {("competition", "discipline")},
            },
        ),
        migrations.CreateModel(
            name="CompetitionCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "level",
                    models.CharField(
                        choices=[
                            ("FESTIVAL", "Фестиваль"),
                            ("OFFICIAL", "Официальные"),
                            ("WORLD", "Мировой уровень"),
                        ],
                        max_length=10,
                        verbose_name="Уровень",
                    ),
                ),
                (
                    "gender",
                    models.CharField(
                        choices=[("MALE", "Мужчины"), ("FEMALE", "Женщины")],
                        max_length=10,
                        verbose_name="Пол",
                    ),
                ),
                ("name", models.CharField(max_length=500, verbose_name="Название")),
                ("code", models.CharField(max_length=100, verbose_name="Код")),
                (
                    "min_participants",
                    models.PositiveSmallIntegerField(
                        default=apps.competitions.models._default_min_participants,
                        verbose_name="Минимум участников",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Создана")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Обновлена")),
                (
                    "age_category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="competition_categories",
                        to="references.agecategory",
                        verbose_name="Возрастная категория",
                    ),
                ),
                (
                    "belt_category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="competition_categories",
                        to="references.beltcategory",
                        verbose_name="Категория по поясам",
                    ),
                ),
                (
                    "competition",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="categories",
                        to="competitions.competition",
                        verbose_name="Соревнование",
                    ),
                ),
                (
                    "competition_discipline",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="categories",
                        to="competitions.competitiondiscipline",
                        verbose_name="Дисциплина соревнования",
                    ),
                ),
                (
                    "discipline",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="competition_categories",
                        to="references.discipline",
                        verbose_name="Дисциплина",
                    ),
                ),
                (
                    "weight_category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="competition_categories",
                        to="references.weightcategory",
                        verbose_name="Весовая категория",
                    ),
                ),
            ],
            options={
                "verbose_name": "Категория соревнования",
                "verbose_name_plural": "Категории соревнования",
                "ordering": ["discipline", "gender", "age_category", "weight_category", "id"],
                "indexes": [
                    models.Index(
                        fields=["competition", "competition_discipline", "age_category"],
                        name="competition_cat_natural_idx",
                    )
                ],
            },
        ),
    ]

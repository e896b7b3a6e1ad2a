import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AgeCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="Код")),
                ("name_ru", models.CharField(blank=True, max_length=200, verbose_name="Название (рус.)")),
                ("name_en", models.CharField(blank=True, max_length=200, verbose_name="Название (англ.)")),
                ("min_age", models.PositiveSmallIntegerField(verbose_name="Возраст от")),
                ("max_age", models.PositiveSmallIntegerField(verbose_name="Возраст до")),
                (
                    "gender",
                    models.CharField(
                        choices=[("MALE", "Мужчины"), ("FEMALE", "Женщины")],
                        max_length=10,
                        verbose_name="Пол",
                    ),
                ),
                ("sort_order", models.PositiveSmallIntegerField(default=0, verbose_name="Порядок")),
                ("is_active", models.BooleanField(default=True, verbose_name="Активна")),
            ],
            options={
                "verbose_name": "Возрастная категория",
                "verbose_name_plural": "Возрастные категории",
                "ordering": ["sort_order", "min_age", "id"],
            },
        ),
        migrations.CreateModel(
            name="Discipline",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="Код")),
                ("name", models.CharField(max_length=200, verbose_name="Название")),
                ("name_ru", models.CharField(blank=True, max_length=200, verbose_name="Название (рус.)")),
                ("name_en", models.CharField(blank=True, max_length=200, verbose_name="Название (англ.)")),
                ("sort_order", models.PositiveSmallIntegerField(default=0, verbose_name="Порядок")),
                ("is_active", models.BooleanField(default=True, verbose_name="Активна")),
            ],
            options={
                "verbose_name": "Дисциплина",
                "verbose_name_plural": "Дисциплины",
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="WeightCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50, verbose_name="Код")),
                ("name", models.CharField(max_length=100, verbose_name="Название")),
                ("min_weight", models.DecimalField(decimal_places=1, max_digits=5, verbose_name="Вес от (кг)")),
                ("max_weight", models.DecimalField(decimal_places=1, max_digits=5, verbose_name="Вес до (кг)")),
                (
                    "gender",
                    models.CharField(
                        choices=[("MALE", "Мужчины"), ("FEMALE", "Женщины")],
                        max_length=10,
                        verbose_name="Пол",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="Активна")),
                (
                    "discipline",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="weight_categories",
                        to="references.discipline",
                        verbose_name="Дисциплина",
                    ),
                ),
            ],
            options={
                "verbose_name": "Весовая категория",
                "verbose_name_plural": "Весовые категории",
                "ordering": ["discipline", "gender", "min_weight"],
            },
        ),
        migrations.AddConstraint(
            model_name="weightcategory",
            constraint=models.UniqueConstraint(
                fields=("discipline", "min_weight", "max_weight", "gender"),
                name="uniq_weight_category_range",
            ),
        ),
        migrations.CreateModel(
            name="BeltCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="Название")),
                ("belt_min", models.SmallIntegerField(verbose_name="Пояс от")),
                ("belt_max", models.SmallIntegerField(verbose_name="Пояс до")),
                ("sort_order", models.PositiveSmallIntegerField(default=0, verbose_name="Порядок")),
                ("is_active", models.BooleanField(default=True, verbose_name="Активна")),
                (
                    "age_category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="belt_categories",
                        to="references.agecategory",
                        verbose_name="Возрастная категория",
                    ),
                ),
                (
                    "discipline",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="belt_categories",
                        to="references.discipline",
                        verbose_name="Дисциплина",
                    ),
                ),
            ],
            options={
                "verbose_name": "Категория по поясам",
                "verbose_name_plural": "Категории по поясам",
                "ordering": ["discipline", "sort_order", "id"],
            },
        ),
    ]

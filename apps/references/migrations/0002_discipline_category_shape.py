"""Add Discipline.category_shape and fill it from discipline names (one-time keyword mapping)."""

from django.db import migrations, models

WEIGHT_KEYWORDS = ("масоги", "массоги", "спарринг", "поинт")
BELT_KEYWORDS = ("хъёнг", "хьёнг", "формальн", "пхумсэ")


def _shape_for(name: str) -> str:
    lowered = (name or "").lower()
    if any(k in lowered for k in WEIGHT_KEYWORDS):
        return "weight"
    if any(k in lowered for k in BELT_KEYWORDS):
        return "belt"
    return "simple"


def forwards(apps, schema_editor):
    Discipline = apps.get_model("references", "Discipline")
    for discipline in Discipline.objects.filter(category_shape="").only("id", "name", "name_ru"):
        shape = _shape_for(discipline.name_ru or discipline.name)
        Discipline.objects.filter(id=discipline.id).update(category_shape=shape)


def backwards(apps, schema_editor):
    pass


class Migration(migrations.Migration):
    dependencies = [
        ("references", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="discipline",
            name="category_shape",
            field=models.CharField(
                blank=True,
                choices=[
                    ("weight", "Весовые категории"),
                    ("belt", "Категории по поясам"),
                    ("simple", "Без разделения"),
                ],
                help_text="Весовые, по поясам или без разделения. Если не указано: определяется по названию при сохранении.",
                max_length=10,
                verbose_name="Форма категорий",
            ),
        ),
        migrations.RunPython(forwards, backwards),
    ]

"""
References admin configuration.
"""

from django.contrib import admin, messages

from .models import AgeCategory, BeltCategory, CategoryShape, Discipline, WeightCategory


@admin.action(description="Создать категории поясов по положению")
def provision_belt_categories_action(modeladmin, request, queryset):
    from apps.competitions.belt_provisioning import provision_belt_categories
    from apps.competitions.classifiers import discipline_shape

    for discipline in queryset:
        if discipline_shape(discipline) != CategoryShape.BELT:
            messages.warning(request, f"{discipline}: дисциплина не делится по поясам, пропущена.")
            continue
        result = provision_belt_categories(discipline)
        messages.success(
            request,
            f"{discipline}: создано категорий поясов {result.created}, уже было {result.existing}.",
        )


@admin.register(AgeCategory)
class AgeCategoryAdmin(admin.ModelAdmin):
    list_display = ("code", "name_ru", "min_age", "max_age", "gender", "sort_order", "is_active")
    list_filter = ("gender", "is_active")
    list_editable = ("sort_order", "is_active")
    search_fields = ("code", "name_ru", "name_en")


@admin.register(Discipline)
class DisciplineAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "name_ru", "category_shape", "sort_order", "is_active")
    list_filter = ("category_shape", "is_active")
    search_fields = ("code", "name", "name_ru", "name_en")
    actions = [provision_belt_categories_action]


@admin.register(WeightCategory)
class WeightCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "discipline", "gender", "min_weight", "max_weight", "is_active")
    list_filter = ("discipline", "gender", "is_active")
    search_fields = ("name", "code")


@admin.register(BeltCategory)
class BeltCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "discipline", "age_category", "belt_min", "belt_max", "sort_order", "is_active")
    list_filter = ("discipline", "is_active")
    search_fields = ("name",)
    raw_id_fields = ("age_category",)

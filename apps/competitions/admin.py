"""
Competitions admin configuration.
"""

from django.contrib import admin, messages
from django.db import DatabaseError

from .category_generator import clear_categories, generate_categories
from .models import Competition, CompetitionCategory, CompetitionDiscipline


@admin.action(description="Сформировать категории")
def generate_categories_action(modeladmin, request, queryset):
    for competition in queryset:
        try:
            result = generate_categories(competition.pk)
        except DatabaseError as e:
            messages.error(request, f"{competition.name}: ошибка формирования категорий: {e}")
            continue
        if result.disciplines_processed == 0:
            messages.warning(request, f"{competition.name}: нет активных дисциплин.")
            continue
        messages.success(
            request,
            f"{competition.name}: категорий {result.created}, дисциплин {result.disciplines_processed}.",
        )
        if result.belt_rules_skipped:
            messages.warning(
                request,
                f"{competition.name}: пропущено правил поясов: {result.belt_rules_skipped} "
                "(нет категорий поясов в справочнике дисциплины).",
            )


@admin.action(description="Очистить категории")
def clear_categories_action(modeladmin, request, queryset):
    total = 0
    for competition in queryset:
        try:
            total += clear_categories(competition.pk)
        except DatabaseError as e:
            messages.error(request, f"{competition.name}: ошибка удаления категорий: {e}")
    messages.success(request, f"Удалено категорий: {total}.")


class CompetitionDisciplineInline(admin.TabularInline):
    model = CompetitionDiscipline
    extra = 0
    fields = ("discipline", "discipline_level", "is_active")
    verbose_name = "Дисциплина"
    verbose_name_plural = "Дисциплины"


@admin.register(Competition)
class CompetitionAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "status", "start_date", "end_date", "categories_count")
    list_filter = ("status", "city")
    search_fields = ("name", "city")
    prepopulated_fields = {"slug": ("name",)}
    date_hierarchy = "start_date"
    inlines = [CompetitionDisciplineInline]
    actions = [generate_categories_action, clear_categories_action]

    @admin.display(description="Категорий")
    def categories_count(self, obj):
        return obj.categories.count()


@admin.register(CompetitionCategory)
class CompetitionCategoryAdmin(admin.ModelAdmin):
    list_display = ("code", "__str__", "competition", "level", "gender", "min_participants")
    list_filter = ("competition", "level", "gender", "discipline")
    search_fields = ("name", "code")
    raw_id_fields = ("competition_discipline", "age_category", "weight_category", "belt_category")
    readonly_fields = ("created_at", "updated_at")

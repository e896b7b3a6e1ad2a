from django.apps import AppConfig


class CompetitionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.competitions"
    verbose_name = "Соревнования"

    def ready(self):
        # Таблицы положения и настройки генератора проверяются при старте: ошибка даёт ImproperlyConfigured
        from .classifiers import check_unclassified_age_fallback
        from .regulations import get_regulations
        check_unclassified_age_fallback()
        get_regulations()

"""
Competitions views: JSON API категорий соревнования для админ-панели.
"""

import logging

from django.contrib.admin.views.decorators import staff_member_required
from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from apps.references.models import Gender

from .category_generator import clear_categories, generate_categories, get_category_stats, list_categories
from .models import Competition

logger = logging.getLogger(__name__)


def _competition_not_found():
    return JsonResponse({"ok": False, "error": "competition_not_found"}, status=404)


def _serialize_category(category) -> dict:
    weight = category.weight_category
    belt = category.belt_category
    return {
        "id": category.pk,
        "name": category.name,
        "code": category.code,
        "level": category.level,
        "gender": category.gender,
        "min_participants": category.min_participants,
        "discipline_id": category.discipline_id,
        "discipline_name": category.discipline.display_name,
        "age_category": {
            "id": category.age_category_id,
            "code": category.age_category.code,
            "name": category.age_category.name_ru or category.age_category.name_en,
            "min_age": category.age_category.min_age,
            "max_age": category.age_category.max_age,
        },
        "weight_category": None if weight is None else {
            "id": weight.pk,
            "code": weight.code,
            "name": weight.name,
            "min_weight": str(weight.min_weight),
            "max_weight": str(weight.max_weight),
        },
        "belt_category": None if belt is None else {
            "id": belt.pk,
            "name": belt.name,
            "belt_min": belt.belt_min,
            "belt_max": belt.belt_max,
        },
    }


@staff_member_required
@require_GET
def category_list(request, competition_id: int):
    """Категории соревнования. Фильтры: ?discipline_id=, ?gender=MALE|FEMALE."""
    competition = Competition.objects.filter(pk=competition_id).first()
    if not competition:
        return _competition_not_found()

    discipline_id = request.GET.get("discipline_id") or None
    if discipline_id is not None:
        try:
            discipline_id = int(discipline_id)
        except ValueError:
            return JsonResponse({"ok": False, "error": "invalid_discipline_id"}, status=400)
    gender = (request.GET.get("gender") or "").upper() or None
    if gender is not None and gender not in Gender.values:
        return JsonResponse({"ok": False, "error": "invalid_gender"}, status=400)

    categories = list(list_categories(competition.pk, discipline_id=discipline_id, gender=gender))
    return JsonResponse({
        "ok": True,
        "data": [_serialize_category(c) for c in categories],
        "meta": {
            "total": len(categories),
            "competition_id": competition.pk,
            "competition_status": competition.status,
        },
    })


@staff_member_required
@require_POST
def category_generate(request, competition_id: int):
    """Сформировать категории соревнования по положению."""
    competition = Competition.objects.filter(pk=competition_id).first()
    if not competition:
        return _competition_not_found()
    try:
        result = generate_categories(competition.pk)
    except DatabaseError as e:
        logger.exception("Category generation failed for competition %s", competition.pk)
        from apps.core.telegram_notify import notify_generation_failed
        notify_generation_failed(competition, str(e))
        return JsonResponse({"ok": False, "error": "generation_failed"}, status=500)
    return JsonResponse({"ok": True, **result.as_dict()})


@staff_member_required
@require_POST
def category_clear(request, competition_id: int):
    """Удалить все категории соревнования."""
    competition = Competition.objects.filter(pk=competition_id).first()
    if not competition:
        return _competition_not_found()
    try:
        deleted = clear_categories(competition.pk)
    except DatabaseError:
        logger.exception("Category clear failed for competition %s", competition.pk)
        return JsonResponse({"ok": False, "error": "clear_failed"}, status=500)
    return JsonResponse({"ok": True, "deleted": deleted})


@staff_member_required
@require_GET
def category_stats(request, competition_id: int):
    competition = Competition.objects.filter(pk=competition_id).first()
    if not competition:
        return _competition_not_found()
    return JsonResponse({"ok": True, **get_category_stats(competition.pk)})

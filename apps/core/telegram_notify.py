"""
Отправка уведомлений админу в Telegram.
Настройка: TELEGRAM_BOT_TOKEN, TELEGRAM_ADMIN_CHAT_ID в settings / env.
"""

import logging
import requests

from django.conf import settings

logger = logging.getLogger(__name__)


def send_admin_message(text: str, parse_mode: str = "HTML") -> bool:
    """
    Отправить сообщение в Telegram админу.
    Возвращает True при успехе, False при отключённом боте или ошибке.
    """
    token = getattr(settings, "TELEGRAM_BOT_TOKEN", None) or ""
    chat_id = getattr(settings, "TELEGRAM_ADMIN_CHAT_ID", None) or ""
    if not token.strip() or not chat_id.strip():
        logger.debug("Telegram notify skipped: TELEGRAM_BOT_TOKEN or TELEGRAM_ADMIN_CHAT_ID not set")
        return False

    url = f"https://api.telegram.org/bot{token.strip()}/sendMessage"
    payload = {
        "chat_id": chat_id.strip(),
        "text": text,
        "parse_mode": parse_mode,
        "disable_web_page_preview": True,
    }
    try:
        r = requests.post(url, json=payload, timeout=10)
        r.raise_for_status()
        return True
    except requests.RequestException as e:
        logger.warning("Telegram notify failed: %s", e)
        return False


def _escape(s) -> str:
    if not s:
        return ""
    return (
        str(s)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def notify_belt_rules_skipped(competition, skipped: int) -> bool:
    """Генерация категорий пропустила правила поясов: в справочнике нет категорий поясов."""
    text = (
        "⚠️ <b>Категории по поясам не сформированы</b>\n\n"
        f"Соревнование: {_escape(competition.name)} (#{competition.pk})\n"
        f"Пропущено правил: {skipped}\n\n"
        "Создайте категории поясов (python manage.py provision_belt_categories) "
        "и сформируйте категории повторно."
    )
    return send_admin_message(text)


def notify_generation_failed(competition, error: str) -> bool:
    """Ошибка при формировании категорий соревнования."""
    text = (
        "❌ <b>Ошибка формирования категорий</b>\n\n"
        f"Соревнование: {_escape(competition.name)} (#{competition.pk})\n"
        f"Ошибка: {_escape(error[:500])}"
    )
    return send_admin_message(text)

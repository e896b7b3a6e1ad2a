"""
Тесты уведомлений админу в Telegram.
"""

from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase, override_settings

from .telegram_notify import notify_belt_rules_skipped, notify_generation_failed, send_admin_message


class _Competition:
    pk = 7
    name = "Кубок <Москвы>"


@override_settings(TELEGRAM_BOT_TOKEN="", TELEGRAM_ADMIN_CHAT_ID="")
class TelegramDisabledTestCase(SimpleTestCase):
    def test_without_token_nothing_sent(self) -> None:
        with patch("apps.core.telegram_notify.requests.post") as post:
            self.assertFalse(send_admin_message("test"))
        post.assert_not_called()


@override_settings(TELEGRAM_BOT_TOKEN="123:abc", TELEGRAM_ADMIN_CHAT_ID="42")
class TelegramNotifyTestCase(SimpleTestCase):
    """Отправка сообщений через Bot API."""

    def test_send(self) -> None:
        with patch("apps.core.telegram_notify.requests.post", return_value=MagicMock()) as post:
            self.assertTrue(send_admin_message("test"))
        url = post.call_args[0][0]
        self.assertEqual(url, "https://api.telegram.org/bot123:abc/sendMessage")
        self.assertEqual(post.call_args[1]["json"]["chat_id"], "42")

    def test_request_error(self) -> None:
        with patch(
            "apps.core.telegram_notify.requests.post",
            side_effect=requests.ConnectionError("down"),
        ):
            self.assertFalse(send_admin_message("test"))

    def test_belt_rules_skipped_text(self) -> None:
        with patch("apps.core.telegram_notify.send_admin_message", return_value=True) as send:
            self.assertTrue(notify_belt_rules_skipped(_Competition(), 9))
        text = send.call_args[0][0]
        self.assertIn("Кубок &lt;Москвы&gt; (#7)", text)
        self.assertIn("Пропущено правил: 9", text)

    def test_generation_failed_text(self) -> None:
        with patch("apps.core.telegram_notify.send_admin_message", return_value=True) as send:
            notify_generation_failed(_Competition(), "deadlock detected")
        self.assertIn("deadlock detected", send.call_args[0][0])

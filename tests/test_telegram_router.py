import pytest

from loyaltyapi.config import settings

PRIVATE_UPDATE = {
    "update_id": 1,
    "message": {
        "message_id": 10,
        "chat": {"id": 7001, "type": "private"},
        "from": {"id": 7001, "first_name": "Anna", "username": "anna"},
        "text": "When is the next event?",
    },
}


class TestTelegramWebhook:
    """봇 webhook 테스트 - 항상 200"""

    def test_private_message_forwarded(self, client, notifier):
        # When
        response = client.post("/api/telegram/webhook", json=PRIVATE_UPDATE)

        # Then
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        sender, text = notifier.forward_to_admin.call_args.args
        assert sender.id == 7001
        assert text == "When is the next event?"
        assert notifier.send_message.call_args.args[0] == 7001

    def test_group_message_ignored(self, client, notifier):
        update = {
            "update_id": 2,
            "message": {
                "message_id": 11,
                "chat": {"id": -100, "type": "group"},
                "from": {"id": 7001},
                "text": "hi",
            },
        }

        response = client.post("/api/telegram/webhook", json=update)

        assert response.status_code == 200
        notifier.forward_to_admin.assert_not_called()

    def test_malformed_update(self, client, notifier):
        response = client.post("/api/telegram/webhook", json={"message": {"chat": "x"}})

        assert response.status_code == 200
        notifier.send_message.assert_not_called()

    def test_secret_mismatch_is_ignored(self, client, notifier, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", "s3cret")

        wrong = client.post(
            "/api/telegram/webhook",
            json=PRIVATE_UPDATE,
            headers={"X-Telegram-Bot-Api-Secret-Token": "nope"},
        )
        assert wrong.status_code == 200
        notifier.forward_to_admin.assert_not_called()

        right = client.post(
            "/api/telegram/webhook",
            json=PRIVATE_UPDATE,
            headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
        )
        assert right.status_code == 200
        notifier.forward_to_admin.assert_called_once()

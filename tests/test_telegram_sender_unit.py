"""
TelegramSender 단위 테스트 (Unit Tests)

테스트 대상: modules/telegram_sender.py - TelegramSender 클래스
requests 세션을 모킹하여 요청 본문, 실패 처리, 재시도 어댑터 설정을 검증한다.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from modules.telegram_sender import TelegramSender


MOCK_CREDENTIALS = {
    "bot_token": "test-bot-token-12345",
    "chat_id": "test-chat-id-67890",
}


def _make_response(ok=True, description=None):
    """텔레그램 API 응답 Mock 생성"""
    mock_resp = MagicMock()
    mock_resp.status_code = 200
    body = {"ok": ok}
    if description:
        body["description"] = description
    mock_resp.json.return_value = body
    mock_resp.raise_for_status.return_value = None
    return mock_resp


@pytest.fixture
def sender():
    """테스트용 TelegramSender 인스턴스 생성 (get_credentials 모킹)"""
    with patch("modules.telegram_sender.get_credentials", return_value=MOCK_CREDENTIALS):
        instance = TelegramSender()
    instance.session = MagicMock()
    return instance


class TestSendMessage:
    """send_message 테스트"""

    def test_posts_to_send_message_endpoint(self, sender):
        sender.session.post.return_value = _make_response()

        assert sender.send_message("<b>피드 정리 결과</b>") is True

        args, kwargs = sender.session.post.call_args
        assert args[0] == "https://api.telegram.org/bottest-bot-token-12345/sendMessage"
        assert kwargs["json"]["chat_id"] == "test-chat-id-67890"
        assert kwargs["json"]["text"] == "<b>피드 정리 결과</b>"
        assert kwargs["json"]["parse_mode"] == "HTML"
        assert kwargs["timeout"] == TelegramSender.TIMEOUT

    def test_parse_mode_can_be_disabled(self, sender):
        sender.session.post.return_value = _make_response()

        sender.send_message("plain", parse_mode=None)

        assert "parse_mode" not in sender.session.post.call_args.kwargs["json"]

    def test_explicit_chat_id(self, sender):
        sender.session.post.return_value = _make_response()

        sender.send_message("hello", chat_id="other-chat")

        assert sender.session.post.call_args.kwargs["json"]["chat_id"] == "other-chat"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_text_is_rejected(self, sender, text):
        assert sender.send_message(text) is False
        sender.session.post.assert_not_called()

    def test_api_error_returns_false(self, sender):
        sender.session.post.return_value = _make_response(ok=False, description="Bad Request")
        assert sender.send_message("hello") is False

    def test_request_exception_returns_false(self, sender):
        sender.session.post.side_effect = requests.exceptions.ConnectionError("down")
        assert sender.send_message("hello") is False

    def test_invalid_json_returns_false(self, sender):
        response = _make_response()
        response.json.side_effect = ValueError("not json")
        sender.session.post.return_value = response
        assert sender.send_message("hello") is False


class TestInit:
    """초기화 테스트"""

    def test_missing_token_raises(self):
        with patch("modules.telegram_sender.get_credentials",
                   return_value={"bot_token": "", "chat_id": "x"}):
            with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
                TelegramSender()

    def test_retry_adapter_is_mounted(self):
        with patch("modules.telegram_sender.get_credentials", return_value=MOCK_CREDENTIALS):
            instance = TelegramSender()

        adapter = instance.session.get_adapter("https://api.telegram.org")
        assert adapter.max_retries.total == 3
        assert 502 in adapter.max_retries.status_forcelist
        instance.close()

# modules/telegram_sender.py
import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from configs.telegram_setting import get_credentials

logger = logging.getLogger(__name__)


class TelegramSender:
    """텔레그램 봇 API로 피드 정리 결과를 전송하는 클래스"""

    TELEGRAM_API_BASE = "https://api.telegram.org/bot{token}"
    TIMEOUT = 30  # API 호출 타임아웃 (초)

    def __init__(self, chat_id: Optional[str] = None):
        """
        TelegramSender 초기화
        :param chat_id: 메시지를 전송할 채팅 ID (선택사항)
        """
        credentials = get_credentials()
        self.bot_token = credentials['bot_token']
        self.default_chat_id = chat_id or credentials['chat_id']

        if not self.bot_token:
            raise ValueError("TELEGRAM_BOT_TOKEN이 설정되지 않았습니다.")

        self.api_base = self.TELEGRAM_API_BASE.format(token=self.bot_token)

        # 재시도 전략 설정
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )
        self.session.mount("https://", HTTPAdapter(max_retries=retry_strategy))
        logger.debug(f"TelegramSender 초기화 완료 (채팅 ID: {self.default_chat_id})")

    def send_message(self,
                     text: str,
                     chat_id: Optional[str] = None,
                     parse_mode: Optional[str] = "HTML") -> bool:
        """
        텔레그램으로 메시지 전송 (sendMessage API 호출)
        :param text: 전송할 메시지 텍스트
        :param chat_id: 메시지를 전송할 채팅 ID (선택사항)
        :param parse_mode: 메시지 파싱 모드 (기본값: 'HTML')
        :return: 전송 성공 여부
        """
        if not text or not text.strip():
            logger.error("메시지 내용이 비어있습니다.")
            return False

        use_chat_id = chat_id or self.default_chat_id
        if not use_chat_id:
            logger.error("채팅 ID가 지정되지 않았습니다.")
            return False

        payload = {
            "chat_id": use_chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if parse_mode:
            payload["parse_mode"] = parse_mode

        try:
            response = self.session.post(f"{self.api_base}/sendMessage",
                                         json=payload, timeout=self.TIMEOUT)
            response.raise_for_status()

            result = response.json()
            if not result.get("ok"):
                logger.error(f"텔레그램 메시지 전송 실패: {result.get('description', '알 수 없는 오류')}")
                return False

            logger.info(f"텔레그램 메시지 전송 성공 (채팅 ID: {use_chat_id})")
            return True

        except requests.exceptions.RequestException as e:
            logger.error(f"텔레그램 API 호출 실패: {str(e)}")
            return False
        except ValueError as e:
            logger.error(f"텔레그램 응답 해석 실패: {str(e)}")
            return False

    def close(self):
        self.session.close()

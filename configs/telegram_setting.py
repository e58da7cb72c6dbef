import os
from pathlib import Path
from dotenv import load_dotenv
import logging

from modules.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TelegramSettings:
    """정리 결과 알림용 텔레그램 설정을 관리하는 싱글톤 클래스"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._initialize()
            cls._instance = instance
        return cls._instance

    def _initialize(self):
        """환경변수에서 텔레그램 설정 로드"""
        project_root = Path(__file__).parent.parent
        env_path = Path(os.getenv('FEED_CLEANER_ENV_FILE') or project_root / '.env')

        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
            logger.debug(f".env 파일 로드: {env_path}")

        # 알림 사용 여부 (기본값: false)
        self._enabled = self._get_env_value('TELEGRAM_ENABLED').lower() == 'true'
        self.bot_token = self._get_env_value('TELEGRAM_BOT_TOKEN')
        self.chat_id = self._get_env_value('TELEGRAM_CHAT_ID')

        self._validate_settings()

    def _get_env_value(self, key: str) -> str:
        """환경변수 값을 가져오고 정리"""
        value = os.getenv(key, '').strip()
        if value and value[0] in ['"', "'"] and value[-1] in ['"', "'"]:
            value = value[1:-1]
        return value

    def _validate_settings(self):
        """알림 사용 시 필수 설정값 검증"""
        if not self._enabled:
            return
        if not self.bot_token:
            raise ConfigurationError("TELEGRAM_BOT_TOKEN이 설정되지 않았습니다.")
        if not self.chat_id:
            raise ConfigurationError("TELEGRAM_CHAT_ID가 설정되지 않았습니다.")

    @property
    def enabled(self) -> bool:
        """정리 결과 알림 전송 여부"""
        return self._enabled

    def get_credentials(self) -> dict:
        """텔레그램 인증 정보 반환"""
        return {
            'bot_token': self.bot_token,
            'chat_id': self.chat_id
        }


def get_credentials() -> dict:
    """텔레그램 인증 정보 반환"""
    return TelegramSettings().get_credentials()


def is_notification_enabled() -> bool:
    """정리 결과 알림 활성화 여부 반환"""
    return TelegramSettings().enabled

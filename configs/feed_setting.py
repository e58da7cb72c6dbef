import os
import re
from pathlib import Path
from dotenv import load_dotenv
import logging

import pytz

from modules.exceptions import ConfigurationError
from utils.retention import RetentionPolicy

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class FeedSettings:
    """FTP 접속 정보와 피드 보존 정책 설정을 관리하는 싱글톤 클래스"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._initialize()
            cls._instance = instance
        return cls._instance

    def _initialize(self):
        """환경변수에서 설정 로드"""
        # FEED_CLEANER_ENV_FILE이 지정되면 해당 파일, 아니면 프로젝트 루트의 .env
        project_root = Path(__file__).parent.parent
        env_path = Path(os.getenv('FEED_CLEANER_ENV_FILE') or project_root / '.env')

        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
            logger.debug(f".env 파일 로드: {env_path}")
        else:
            logger.warning(f".env 파일을 찾을 수 없습니다: {env_path}")

        # FTP 접속 설정
        self.host = self._get_env_value('FTP_HOST')
        self.port = self._get_int('FTP_PORT', 21, minimum=1)
        self.username = self._get_env_value('FTP_USERNAME')
        self.password = self._get_env_value('FTP_PASSWORD')
        self.timeout = self._get_float('FTP_TIMEOUT', 30.0)
        self.connect_retries = self._get_int('FTP_CONNECT_RETRIES', 3, minimum=1)
        self.retry_backoff = self._get_float('FTP_RETRY_BACKOFF', 0.5, allow_zero=True)

        # 피드 정리 설정
        self.directory = self._get_env_value('FEED_DIRECTORY')
        self.days_old = self._get_int('FEED_DAYS_OLD', None, minimum=0)
        self.ignore_names = self._get_list('FEED_IGNORE_NAMES')
        self.dry_run = self._get_env_value('FEED_DRY_RUN').lower() == 'true'

        # 스케줄 설정
        self.schedule_time = self._get_env_value('FEED_SCHEDULE_TIME') or '03:00'
        self.schedule_timezone = self._get_env_value('FEED_SCHEDULE_TIMEZONE') or 'UTC'

        # 필수 설정 검증
        self._validate_settings()
        self._log_settings()

    def _get_env_value(self, key: str) -> str:
        """환경변수 값을 가져오고 정리"""
        value = os.getenv(key, '').strip()
        if value and value[0] in ['"', "'"] and value[-1] in ['"', "'"]:
            value = value[1:-1]
        return value

    def _get_int(self, key: str, default, minimum: int = 0):
        value = self._get_env_value(key)
        if not value:
            return default
        try:
            number = int(value)
        except ValueError:
            raise ConfigurationError(f"{key}는 정수여야 합니다: {value}")
        if number < minimum:
            raise ConfigurationError(f"{key}는 {minimum} 이상이어야 합니다: {value}")
        return number

    def _get_float(self, key: str, default: float, allow_zero: bool = False) -> float:
        value = self._get_env_value(key)
        if not value:
            return default
        try:
            number = float(value)
        except ValueError:
            raise ConfigurationError(f"{key}는 숫자여야 합니다: {value}")
        if number < 0 or (number == 0 and not allow_zero):
            raise ConfigurationError(f"{key} 값이 올바르지 않습니다: {value}")
        return number

    def _get_list(self, key: str) -> list:
        """쉼표로 구분된 값을 리스트로 변환 (빈 항목 제외)"""
        value = self._get_env_value(key)
        return [item.strip() for item in value.split(',') if item.strip()]

    def _validate_settings(self):
        """필수 설정값 검증"""
        if not self.host:
            raise ConfigurationError("FTP_HOST가 설정되지 않았습니다.")
        if not self.username:
            raise ConfigurationError("FTP_USERNAME이 설정되지 않았습니다.")
        if not self.password:
            raise ConfigurationError("FTP_PASSWORD가 설정되지 않았습니다.")
        if not self.directory:
            raise ConfigurationError("FEED_DIRECTORY가 설정되지 않았습니다.")
        if self.days_old is None:
            raise ConfigurationError("FEED_DAYS_OLD가 설정되지 않았습니다.")
        if not TIME_PATTERN.match(self.schedule_time):
            raise ConfigurationError(
                f"FEED_SCHEDULE_TIME은 HH:MM 형식이어야 합니다: {self.schedule_time}"
            )
        try:
            pytz.timezone(self.schedule_timezone)
        except pytz.UnknownTimeZoneError:
            raise ConfigurationError(
                f"알 수 없는 FEED_SCHEDULE_TIMEZONE입니다: {self.schedule_timezone}"
            )

    def _log_settings(self):
        """로드된 설정 출력 (비밀번호 제외)"""
        if not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug("피드 정리 설정:")
        for key, value in self.as_dict().items():
            logger.debug(f"  {key} = {value}")

    def as_dict(self) -> dict:
        """설정값 딕셔너리 (비밀번호는 마스킹)"""
        return {
            'host': self.host,
            'port': self.port,
            'username': self.username,
            'password': '********',
            'directory': self.directory,
            'days_old': self.days_old,
            'ignore_names': self.ignore_names,
            'timeout': self.timeout,
            'connect_retries': self.connect_retries,
            'retry_backoff': self.retry_backoff,
            'dry_run': self.dry_run,
            'schedule_time': self.schedule_time,
            'schedule_timezone': self.schedule_timezone,
        }

    def retention_policy(self) -> RetentionPolicy:
        """기본 제외 목록(.htaccess)을 포함한 보존 정책 반환"""
        return RetentionPolicy.build(self.days_old, self.ignore_names)


def get_settings() -> FeedSettings:
    """피드 정리 설정 반환 (최초 호출 시 로드 및 검증)"""
    return FeedSettings()

# modules/exceptions.py
"""피드 정리 실행 중 발생하는 치명적 오류 정의"""


class FeedCleanerError(Exception):
    """피드 정리 오류의 기본 클래스"""

    exit_code = 4


class ConfigurationError(FeedCleanerError, ValueError):
    """설정값 누락 또는 잘못된 설정 (네트워크 작업 전에 중단)"""

    exit_code = 1


class ServerConnectionError(FeedCleanerError):
    """서버 연결 또는 인증 실패"""

    exit_code = 2


class ProtocolError(FeedCleanerError):
    """서버가 명령(디렉토리 이동, 목록 조회)을 거부한 경우"""

    exit_code = 3

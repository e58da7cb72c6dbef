# modules/ftp_session.py
import ftplib
import logging
import time
from typing import Optional

from modules.exceptions import ProtocolError, ServerConnectionError

logger = logging.getLogger(__name__)

# 재시도 대상이 되는 일시적 오류
TRANSIENT_ERRORS = (OSError, EOFError, ftplib.error_temp)


class FtpSession:
    """ftplib.FTP 래퍼: 피드 정리에 필요한 명령만 제공하고 오류를 분류한다"""

    def __init__(self, timeout: float = 30.0, retries: int = 3, backoff_factor: float = 0.5,
                 ftp_factory=ftplib.FTP, sleep=time.sleep):
        """
        :param timeout: 소켓 타임아웃 (초)
        :param retries: 연결 시도 횟수 (최초 시도 포함)
        :param backoff_factor: 재시도 대기 시간 계수 (backoff_factor * 2^(n-1) 초)
        """
        self.timeout = timeout
        self.retries = max(1, retries)
        self.backoff_factor = backoff_factor
        self._ftp_factory = ftp_factory
        self._sleep = sleep
        self.ftp: Optional[ftplib.FTP] = None

    @property
    def is_connected(self) -> bool:
        return self.ftp is not None

    def connect(self, host: str, port: int = 21):
        """서버 연결 (일시적 오류는 재시도)"""
        for attempt in range(1, self.retries + 1):
            ftp = self._ftp_factory(timeout=self.timeout)
            try:
                welcome = ftp.connect(host, port)
                self.ftp = ftp
                logger.debug(f"서버 응답: {welcome}")
                return
            except TRANSIENT_ERRORS as e:
                ftp.close()
                if attempt == self.retries:
                    raise ServerConnectionError(
                        f"서버 연결 실패 ({host}:{port}, {attempt}회 시도): {e}"
                    ) from e
                delay = self.backoff_factor * (2 ** (attempt - 1))
                logger.warning(
                    f"서버 연결 실패 ({attempt}/{self.retries}), {delay:.1f}초 후 재시도: {e}"
                )
                self._sleep(delay)
            except ftplib.all_errors as e:
                ftp.close()
                raise ServerConnectionError(f"서버가 연결을 거부했습니다 ({host}:{port}): {e}") from e

    def login(self, username: str, password: str):
        ftp = self._require_connection()
        try:
            ftp.login(user=username, passwd=password)
        except ftplib.all_errors as e:
            raise ServerConnectionError(f"로그인 실패 ({username}): {e}") from e

    def change_directory(self, path: str):
        ftp = self._require_connection()
        try:
            ftp.cwd(path)
        except ftplib.all_errors as e:
            raise ProtocolError(f"디렉토리 이동 실패 ({path}): {e}") from e

    def list_raw(self, path: Optional[str] = None) -> list[str]:
        """LIST 명령 결과를 줄 단위로 반환"""
        ftp = self._require_connection()
        command = f"LIST {path}" if path else "LIST"
        lines: list[str] = []
        try:
            ftp.retrlines(command, lines.append)
        except ftplib.all_errors as e:
            raise ProtocolError(f"목록 조회 실패 ({command}): {e}") from e
        return lines

    def delete(self, name: str) -> bool:
        """파일 삭제, 실패 시 False (예외를 전파하지 않음)"""
        ftp = self._require_connection()
        try:
            ftp.delete(name)
            return True
        except ftplib.all_errors as e:
            logger.error(f"파일 삭제 실패: {name} ({e})")
            return False

    def logout(self):
        """QUIT 전송 (실패해도 연결 종료는 disconnect에서 처리)"""
        if self.ftp is None:
            return
        try:
            self.ftp.quit()
        except ftplib.all_errors as e:
            logger.warning(f"로그아웃 중 오류 발생: {e}")

    def disconnect(self):
        if self.ftp is None:
            return
        try:
            self.ftp.close()
        finally:
            self.ftp = None

    def _require_connection(self) -> ftplib.FTP:
        if self.ftp is None:
            raise ServerConnectionError("서버에 연결되어 있지 않습니다.")
        return self.ftp

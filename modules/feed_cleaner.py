# modules/feed_cleaner.py
"""
FTP 피드 정리 모듈

FTP 세션을 열어 피드 디렉토리의 목록을 조회하고, 파일명에 기록된 시각을
기준으로 보존 기간이 지난 파일을 삭제한다.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from modules.exceptions import FeedCleanerError
from modules.ftp_session import FtpSession
from utils.listing_parser import EntryType, FileEntry, ListingParser
from utils.retention import RetentionPolicy, age_in_days, is_stale

logger = logging.getLogger(__name__)


@dataclass
class CleanupReport:
    """피드 정리 실행 결과"""

    directory: str
    dry_run: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    deleted: list = field(default_factory=list)
    would_delete: list = field(default_factory=list)
    ignored: list = field(default_factory=list)
    not_stale: list = field(default_factory=list)
    failed: list = field(default_factory=list)
    skipped_non_files: int = 0
    error: Optional[str] = None  # 중단된 경우 "오류타입: 메시지"

    @property
    def total_files(self) -> int:
        return (len(self.deleted) + len(self.would_delete) + len(self.ignored)
                + len(self.not_stale) + len(self.failed))


class FeedCleaner:
    """FTP 세션 수명주기를 관리하며 오래된 피드 파일을 정리한다"""

    def __init__(self, session: FtpSession, policy: RetentionPolicy, *,
                 host: str, port: int, username: str, password: str, directory: str,
                 dry_run: bool = False,
                 parser: Optional[ListingParser] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.session = session
        self.policy = policy
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.directory = directory
        self.dry_run = dry_run
        self.clock = clock
        self.parser = parser or ListingParser(clock=clock)
        self.last_report: Optional[CleanupReport] = None

    @classmethod
    def from_settings(cls, settings, session: Optional[FtpSession] = None) -> 'FeedCleaner':
        """FeedSettings로부터 FeedCleaner 생성"""
        if session is None:
            session = FtpSession(
                timeout=settings.timeout,
                retries=settings.connect_retries,
                backoff_factor=settings.retry_backoff,
            )
        return cls(
            session,
            settings.retention_policy(),
            host=settings.host,
            port=settings.port,
            username=settings.username,
            password=settings.password,
            directory=settings.directory,
            dry_run=settings.dry_run,
        )

    def run(self) -> CleanupReport:
        """
        피드 정리 실행

        연결/인증 실패는 ServerConnectionError, 디렉토리 이동이나 목록 조회
        실패는 ProtocolError로 전파된다. 세션이 열린 경우 항상 종료한다.
        중단된 경우에도 last_report에 error가 기록된 결과가 남는다.

        Returns:
            실행 결과 CleanupReport
        """
        report = CleanupReport(directory=self.directory, dry_run=self.dry_run,
                               started_at=self.clock())
        self.last_report = report

        try:
            logger.info(f"서버 연결 시작: {self.host}:{self.port}")
            self.session.connect(self.host, self.port)
            logger.info("서버에 연결되었습니다.")

            try:
                self._clean_directory(report)
            finally:
                self._close_session()
        except FeedCleanerError as e:
            report.error = f"{type(e).__name__}: {str(e)}"
            raise
        finally:
            report.finished_at = self.clock()

        logger.info(
            f"피드 정리 완료: 삭제 {len(report.deleted)}개, 삭제 예정 {len(report.would_delete)}개, "
            f"제외 {len(report.ignored)}개, 보존 {len(report.not_stale)}개, "
            f"삭제 실패 {len(report.failed)}개"
        )
        return report

    def _clean_directory(self, report: CleanupReport):
        """로그인 후 피드 디렉토리 목록을 조회하여 항목별로 처리"""
        logger.info(f"로그인 시도: {self.username}")
        self.session.login(self.username, self.password)
        logger.info("로그인되었습니다.")

        logger.info(f"피드 디렉토리로 이동: {self.directory}")
        self.session.change_directory(self.directory)

        logger.info("파일 목록 조회 중...")
        entries = self.parser.parse_listing(self.session.list_raw())
        logger.info(f"파일 확인 시작: {len(entries)}개 항목")

        for entry in entries:
            self._process_entry(entry, report)

        logger.info("파일 확인 완료.")

    def _process_entry(self, entry: FileEntry, report: CleanupReport):
        """항목 하나의 처리 방식 결정 (삭제 / 제외 / 보존)"""
        if entry.entry_type is not EntryType.FILE:
            report.skipped_non_files += 1
            logger.debug(f"파일이 아니므로 건너뜀: {entry.name} ({entry.entry_type.value})")
            return

        name = entry.name
        logger.debug(f"파일: {name} : {entry.timestamp:%Y-%m-%d %H:%M:%S}")

        if self.policy.is_ignored(name):
            report.ignored.append(name)
            logger.info(f"건너뜀 (제외 대상): {name}")
            return

        now = self.clock()
        stale = is_stale(entry, self.policy.max_age_days, now)
        logger.debug(f"{name}: {age_in_days(entry.timestamp, now)}일 경과, 만료: {stale}")

        if not stale:
            report.not_stale.append(name)
            logger.info(f"건너뜀 (보존 기간 이내): {name}")
            return

        if self.dry_run:
            report.would_delete.append(name)
            logger.info(f"삭제 예정 (dry run): {name}")
            return

        # 한 파일의 삭제 실패는 나머지 파일 처리에 영향을 주지 않는다
        if self.session.delete(name):
            report.deleted.append(name)
            logger.info(f"삭제된 파일: {name}")
        else:
            report.failed.append(name)
            logger.error(f"삭제 실패, 다음 파일로 진행: {name}")

    def _close_session(self):
        logger.info("서버 연결 종료 중...")
        try:
            self.session.logout()
        finally:
            self.session.disconnect()
        logger.info("서버 연결이 종료되었습니다.")

"""텔레그램 HTML 포맷 피드 정리 결과 메시지 생성 모듈"""

from html import escape
from typing import Optional

from modules.feed_cleaner import CleanupReport


class ReportFormatter:
    """텔레그램 HTML 포맷 정리 결과 메시지 생성"""

    MAX_LISTED_FILES = 20  # 목록에 표시할 최대 파일 수

    # 처리 결과별 (이모지, 제목)
    SECTIONS = [
        ('deleted', '🗑', '삭제'),
        ('would_delete', '📝', '삭제 예정 (dry run)'),
        ('failed', '⚠️', '삭제 실패'),
        ('ignored', '🚫', '제외'),
    ]

    def format_report(self, report: CleanupReport) -> str:
        """
        정리 결과 메시지 생성

        Args:
            report: FeedCleaner.run() 결과

        Returns:
            텔레그램 HTML 파싱 모드에 맞는 메시지 문자열
        """
        lines = [f'🧹 <b>피드 정리 결과</b> <code>{escape(report.directory)}</code>']
        if report.finished_at is not None:
            lines.append(f'{report.finished_at:%Y-%m-%d %H:%M:%S}')
        if report.error:
            lines.append(f'❌ 중단됨: {escape(report.error)}')

        lines.append('')
        lines.append(
            f'전체 {report.total_files}개 · 삭제 {len(report.deleted)}개 · '
            f'보존 {len(report.not_stale)}개 · 제외 {len(report.ignored)}개'
        )

        for attr, emoji, title in self.SECTIONS:
            names = getattr(report, attr)
            if names:
                lines.append('')
                lines.append(self._format_section(emoji, title, names))

        return '\n'.join(lines)

    def format_failure(self, directory: Optional[str], error: Exception) -> str:
        """정리 중단 메시지 생성"""
        target = f' <code>{escape(directory)}</code>' if directory else ''
        return (
            f'❌ <b>피드 정리 실패</b>{target}\n'
            f'{escape(type(error).__name__)}: {escape(str(error))}'
        )

    def _format_section(self, emoji: str, title: str, names: list) -> str:
        """파일 목록 블록 포맷 (최대 MAX_LISTED_FILES개)"""
        parts = [f'{emoji} <b>{title}</b> ({len(names)}개)']
        for name in names[:self.MAX_LISTED_FILES]:
            parts.append(f'• <code>{escape(name)}</code>')

        remaining = len(names) - self.MAX_LISTED_FILES
        if remaining > 0:
            parts.append(f'… 외 {remaining}개')

        return '\n'.join(parts)

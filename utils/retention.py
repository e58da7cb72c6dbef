"""보존 정책 및 파일 만료 판정"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from utils.listing_parser import FileEntry

# 설정과 무관하게 항상 삭제하지 않는 파일
DEFAULT_IGNORE_NAMES = frozenset({'.htaccess'})

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class RetentionPolicy:
    """최대 보존 일수와 삭제 제외 파일 목록"""

    max_age_days: int
    ignore_names: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        if self.max_age_days < 0:
            raise ValueError(f"max_age_days는 0 이상이어야 합니다: {self.max_age_days}")

    @classmethod
    def build(cls, max_age_days: int, configured_names: Iterable[str] = ()) -> 'RetentionPolicy':
        """기본 제외 목록과 설정된 제외 목록을 합쳐 정책 생성"""
        return cls(
            max_age_days=max_age_days,
            ignore_names=DEFAULT_IGNORE_NAMES | frozenset(configured_names),
        )

    def is_ignored(self, name: str) -> bool:
        return name in self.ignore_names


def age_in_days(timestamp: datetime, now: Optional[datetime] = None) -> int:
    """경과 일수 (하루 미만은 버림, 미래 시각이면 음수)"""
    now = now or datetime.now()
    return (now - timestamp) // ONE_DAY


def is_stale(entry: FileEntry, max_age_days: int, now: Optional[datetime] = None) -> bool:
    """경과 일수가 최대 보존 일수를 초과하면 True (같으면 보존)"""
    return age_in_days(entry.timestamp, now) > max_age_days

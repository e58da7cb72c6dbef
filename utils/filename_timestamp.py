"""
파일명 타임스탬프 추출 모듈

피드 파일명 규칙: <소문자/-/_>.<YYYYMMDD>_<HHMMSS>.mp4
예) camera-a.20230615_143000.mp4
"""

import logging
import re
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

FILENAME_PATTERN = re.compile(
    r'(?P<prefix>[a-z_-]*)\.'
    r'(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})_'
    r'(?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})\.mp4'
)


def extract_timestamp(name: str) -> Optional[datetime]:
    """
    파일명에 포함된 생성 시각을 추출한다.

    값은 시간대 변환 없이 로컬 벽시계 시각(naive datetime)으로 해석한다.
    파일명의 월은 1부터 시작하며 datetime도 같은 규칙을 사용한다.

    Args:
        name: 파일명

    Returns:
        추출된 datetime, 규칙에 맞지 않거나 달력상 존재하지 않는 값이면 None
    """
    match = FILENAME_PATTERN.search(name)
    if match is None:
        return None

    try:
        return datetime(
            int(match.group('year')),
            int(match.group('month')),
            int(match.group('day')),
            int(match.group('hour')),
            int(match.group('minute')),
            int(match.group('second')),
        )
    except ValueError as e:
        logger.debug(f"파일명 타임스탬프가 유효하지 않습니다: {name} ({e})")
        return None

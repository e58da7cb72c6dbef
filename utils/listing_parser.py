"""
FTP 디렉토리 목록(LIST) 파싱 모듈

Unix `ls -l` 형식의 목록 한 줄을 FileEntry로 변환한다.
피드 파일명 규칙에 맞는 줄만 사전 필터링한 뒤 파싱한다.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional

from utils.filename_timestamp import extract_timestamp

logger = logging.getLogger(__name__)

# 사전 필터: 목록 줄 안에 피드 파일명이 포함되어 있는지만 확인
FEED_LINE_PATTERN = re.compile(r'[a-z]*\.[0-9]*_[0-9]*\.mp4')

LISTING_PATTERN = re.compile(
    r"""
    (?P<type>[bcdelfmpSs-])
    (?P<owner_r>[r-])(?P<owner_w>[w-])(?P<owner_x>[xsStTL-])
    (?P<group_r>[r-])(?P<group_w>[w-])(?P<group_x>[xsStTL-])
    (?P<other_r>[r-])(?P<other_w>[w-])(?P<other_x>[xsStTL-])
    \+?\s*
    (?P<links>\d+)\s+
    (?:(?P<owner>\S+(?:\s\S+)*?)\s+)?           # 소유자 (공백 포함 가능)
    (?:(?P<group>\S+(?:\s\S+)*)(?<!,)\s+)?      # 그룹 (공백 포함 가능, 장치 번호 "N," 제외)
    (?P<size>\d+(?:,\s*\d+)?)\s+                # 크기 또는 장치 번호 "major, minor"
    (?P<date>(?:\d+[-/]\d+[-/]\d+)|(?:\S{3}\s+\d{1,2})|(?:\d{1,2}\s+\S{3}))\s+
    (?P<time>\d+(?::\d+)?)\s+                   # 시각 또는 연도
    (?P<name>\S*)(?P<rest>\s*.*)
    """,
    re.VERBOSE,
)

SYMLINK_SEPARATOR = ' -> '


class EntryType(Enum):
    FILE = 'file'
    DIRECTORY = 'directory'
    SYMLINK = 'symlink'
    DEVICE = 'device'  # 데이터 모델용. 파서는 b/c를 FILE + is_device로 반환
    UNKNOWN = 'unknown'


# 타입 문자 매핑 (b/c 장치 파일은 일반 파일로 취급하고 is_device로 구분)
TYPE_MAP = {
    'd': EntryType.DIRECTORY,
    'l': EntryType.SYMLINK,
    'e': EntryType.SYMLINK,  # z/OS 외부 링크
    'b': EntryType.FILE,
    'c': EntryType.FILE,
    'f': EntryType.FILE,
    '-': EntryType.FILE,
}
DEVICE_TYPES = {'b', 'c'}


@dataclass(frozen=True)
class PermissionBits:
    read: bool
    write: bool
    execute: bool


@dataclass(frozen=True)
class Permissions:
    owner: PermissionBits
    group: PermissionBits
    other: PermissionBits


@dataclass(frozen=True)
class FileEntry:
    """목록 한 줄에서 만들어진 파일 정보"""

    name: str
    entry_type: EntryType
    permissions: Permissions
    timestamp: datetime  # 파일명에서 추출한 시각 (서버 보고 시각 아님)
    size_bytes: Optional[int] = None
    hard_link_count: Optional[int] = None
    owner: str = ''
    group: str = ''
    link_target: Optional[str] = None
    is_device: bool = False
    raw_listing: str = ''


def _parse_bits(read: str, write: str, execute: str) -> PermissionBits:
    """
    권한 문자 3개를 PermissionBits로 변환

    '-'가 아니면 권한 있음. 실행 비트는 소문자일 때만 인정한다
    (대문자 S/T/L은 setuid/sticky 표시일 뿐 실행 권한이 없음).
    """
    return PermissionBits(
        read=read != '-',
        write=write != '-',
        execute=execute != '-' and not execute.isupper(),
    )


def _parse_int(value: Optional[str]) -> Optional[int]:
    """정수 변환, 실패 시 None"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ListingParser:
    """피드 파일 목록 파서"""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        """
        :param clock: 파일명에서 시각을 추출하지 못했을 때 사용할 현재 시각 공급자
        """
        self.clock = clock

    def pre_filter(self, lines: Iterable[str]) -> list[str]:
        """피드 파일명 규칙에 맞는 줄만 남긴다 (나머지는 조용히 버림)"""
        approved = []
        for line in lines:
            if FEED_LINE_PATTERN.search(line):
                logger.debug(f"승인된 목록 줄: {line}")
                approved.append(line)
        return approved

    def parse_entry(self, line: str) -> Optional[FileEntry]:
        """
        목록 한 줄을 FileEntry로 변환

        크기나 링크 수가 잘못된 경우 해당 필드만 None으로 두고,
        문법 자체가 맞지 않으면 None을 반환한다.
        """
        match = LISTING_PATTERN.match(line)
        if match is None:
            logger.debug(f"목록 형식이 맞지 않아 건너뜀: {line}")
            return None

        type_char = match.group('type')
        entry_type = TYPE_MAP.get(type_char, EntryType.UNKNOWN)
        is_device = type_char in DEVICE_TYPES

        permissions = Permissions(
            owner=_parse_bits(match.group('owner_r'), match.group('owner_w'), match.group('owner_x')),
            group=_parse_bits(match.group('group_r'), match.group('group_w'), match.group('group_x')),
            other=_parse_bits(match.group('other_r'), match.group('other_w'), match.group('other_x')),
        )

        # 장치 파일은 링크 수를 해석하지 않음
        hard_link_count = None if is_device else _parse_int(match.group('links'))

        name, link_target = self._split_name(
            match.group('name'), match.group('rest'), entry_type
        )

        # 서버가 보고하는 수정 시각은 신뢰할 수 없어 파일명에서 시각을 구한다.
        # 파일명에서 구하지 못하면 현재 시각을 사용한다 (삭제 대상이 되지 않음).
        timestamp = extract_timestamp(name)
        if timestamp is None:
            timestamp = self.clock()

        entry = FileEntry(
            name=name,
            entry_type=entry_type,
            permissions=permissions,
            timestamp=timestamp,
            size_bytes=_parse_int(match.group('size')),
            hard_link_count=hard_link_count,
            owner=match.group('owner') or '',
            group=match.group('group') or '',
            link_target=link_target,
            is_device=is_device,
            raw_listing=line,
        )
        logger.debug(f"FileEntry 생성: {entry.name}")
        return entry

    def parse_listing(self, lines: Iterable[str]) -> list[FileEntry]:
        """사전 필터링 후 파싱에 성공한 항목만 목록 순서대로 반환"""
        entries = []
        for line in self.pre_filter(lines):
            entry = self.parse_entry(line)
            if entry is not None:
                entries.append(entry)
        return entries

    @staticmethod
    def _split_name(name: str, rest: str, entry_type: EntryType) -> tuple[str, Optional[str]]:
        """이름 뒤에 남은 문자열을 이름에 붙이고, 심볼릭 링크면 대상 경로를 분리"""
        if not rest:
            return name, None

        # 공백이 포함된 파일명, 심볼릭 링크 등
        combined = name + rest
        if entry_type is not EntryType.SYMLINK:
            return combined, None

        link_name, separator, target = combined.partition(SYMLINK_SEPARATOR)
        if not separator:
            return combined, None
        return link_name, target

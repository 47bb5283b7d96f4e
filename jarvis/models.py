"""데이터 모델 정의."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CommandKind(str, Enum):
    """명령어 유형."""

    SINGLE_KEYWORD = "single-keyword"  # 자비스
    MULTI_KEYWORD = "multi-keyword"  # 최신,마케팅,자비스
    ASSOC_PC = "assoc-pc"  # 자비스+
    ASSOC_MO = "assoc-mo"  # 자비스+M
    AUTOCOMPLETE_PC = "autocomplete-pc"  # 자비스*
    AUTOCOMPLETE_MO = "autocomplete-mo"  # 자비스*M
    INVALID = "invalid"
    HELP = "help"  # 자비스키워드조회
    VISITOR_SINGLE = "visitor-single"  # @아이디
    VISITOR_MULTI = "visitor-multi"  # !아이디,아이디


EXPANSION_KINDS = frozenset({
    CommandKind.ASSOC_PC,
    CommandKind.ASSOC_MO,
    CommandKind.AUTOCOMPLETE_PC,
    CommandKind.AUTOCOMPLETE_MO,
})

VISITOR_KINDS = frozenset({CommandKind.VISITOR_SINGLE, CommandKind.VISITOR_MULTI})


class Device(str, Enum):
    PC = "pc"
    MOBILE = "mobile"


class Role(str, Enum):
    """normal = 사용자가 입력한 키워드, sub = 연관/자동완성으로 확장된 키워드."""

    NORMAL = "normal"
    SUB = "sub"


@dataclass(frozen=True)
class ClassifiedCommand:
    """분석이 끝난 명령어."""

    kind: CommandKind
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class KeywordRecord:
    """리포트의 키워드 한 줄을 나타낸다."""

    keyword: str
    role: Role
    blog_documents: str = ""  # 블로그 문서량 (콤마 포함)
    pc_volume: str = ""
    mo_volume: str = ""
    total_volume: str = ""


@dataclass(frozen=True)
class DayCount:
    """하루치 방문자 수."""

    date: str  # YYYY-MM-DD, 조회 실패 시 ""
    count: int | None


@dataclass
class VisitorRecord:
    """블로그 아이디 하나의 방문자 통계."""

    id: str
    last_four_days: list[DayCount] = field(default_factory=list)
    average: int = 0  # 최근 4일 평균 (반올림)
    today: int = 0  # 오늘 현재까지의 방문자 수

    @classmethod
    def placeholder(cls, blog_id: str) -> VisitorRecord:
        """조회에 실패한 아이디용 빈 레코드."""
        return cls(id=blog_id, last_four_days=[DayCount(date="", count=None)])


@dataclass(frozen=True)
class CredentialPool:
    """검색광고 API 자격 증명 한 벌."""

    customer_id: str
    access_license: str
    secret_key: str


def build_records(keywords, role: Role) -> list[KeywordRecord]:
    """키워드 목록으로 빈 KeywordRecord 를 만든다."""
    return [KeywordRecord(keyword=k, role=role) for k in keywords]

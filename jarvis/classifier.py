"""명령어 분석 모듈.

입력 예:
  자비스              → 단일 키워드
  최신,마케팅,자비스   → 다중 키워드 (최대 8개)
  자비스+ / 자비스+M  → PC / MO 연관 검색어
  자비스* / 자비스*M  → PC / MO 자동 완성어
  자비스키워드조회     → 사용법 안내
  @아이디 / !아이디,아이디 → 방문자 수 조회 (최대 10개)
"""

from __future__ import annotations

import re

from jarvis.config import MAX_MULTI_KEYWORDS, MAX_VISITOR_IDS
from jarvis.models import ClassifiedCommand, CommandKind

HELP_COMMAND = "자비스키워드조회"

_WHITESPACE = re.compile(r"\s+")
_VALID_TOKEN = re.compile(r"[가-힣ㄱ-ㅎㅏ-ㅣA-Z0-9!@#$%^&*\-+/'\".:]+")

# 2글자 접미사가 먼저 와야 한다
_SUFFIXES = (
    ("+M", CommandKind.ASSOC_MO),
    ("+", CommandKind.ASSOC_PC),
    ("*M", CommandKind.AUTOCOMPLETE_MO),
    ("*", CommandKind.AUTOCOMPLETE_PC),
)

_INVALID = ClassifiedCommand(CommandKind.INVALID)


def normalize(raw: str) -> str:
    """공백・줄바꿈을 모두 제거하고 대문자로 바꾼다."""
    return _WHITESPACE.sub("", raw or "").upper()


def is_valid_token(token: str) -> bool:
    return bool(token) and _VALID_TOKEN.fullmatch(token) is not None


def classify(raw: str) -> ClassifiedCommand:
    """명령어 문자열을 분석해 유형과 키워드를 반환한다."""
    command = normalize(raw)

    if command.startswith("@"):
        return ClassifiedCommand(CommandKind.VISITOR_SINGLE, (command[1:],))
    if command.startswith("!"):
        ids = [e for e in command[1:].split(",") if e]
        return ClassifiedCommand(CommandKind.VISITOR_MULTI, tuple(ids[:MAX_VISITOR_IDS]))

    tokens = [e for e in command.split(",") if e]
    if len(tokens) > 1:
        keywords = tokens[:MAX_MULTI_KEYWORDS]
        if not all(is_valid_token(k) for k in keywords):
            return _INVALID
        return ClassifiedCommand(CommandKind.MULTI_KEYWORD, tuple(keywords))

    token = tokens[0] if tokens else ""
    if not is_valid_token(token):
        return _INVALID

    for suffix, kind in _SUFFIXES:
        if token.endswith(suffix):
            keyword = token[: -len(suffix)]
            if not keyword:
                return _INVALID
            return ClassifiedCommand(kind, (keyword,))

    if token == HELP_COMMAND:
        return ClassifiedCommand(CommandKind.HELP)

    return ClassifiedCommand(CommandKind.SINGLE_KEYWORD, (token,))

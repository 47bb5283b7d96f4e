"""검색광고 API 검색량 조회 모듈.

키워드를 5개씩 묶어 서명된 요청 한 번으로 조회하고, 응답의 relKeyword 로
요청 키워드와 다시 매칭한다.
"""

from __future__ import annotations

import base64
import dataclasses
import hashlib
import hmac
import logging
import threading
import time
from enum import Enum

import requests

from jarvis.composer import format_number
from jarvis.config import (
    BATCH_SIZE,
    KEYWORD_TOOL_BASE_URL,
    KEYWORD_TOOL_PATH,
    NAVER_AD_POOLS,
    REQUEST_TIMEOUT,
)
from jarvis.errors import NetworkFailure, UpstreamInvalidParameter
from jarvis.models import CommandKind, CredentialPool, KeywordRecord
from jarvis.scraper import check_cancelled

logger = logging.getLogger(__name__)

# 검색광고 API 가 "< 10" 처럼 문자열로 주는 값의 대체값
VOLUME_FLOOR = 10


class PoolName(str, Enum):
    A = "A"
    B = "B"


# 단일 키워드 조회만 풀 A, 나머지는 풀 B 로 부하를 나눈다
POOL_BY_KIND: dict[CommandKind, PoolName] = {
    CommandKind.SINGLE_KEYWORD: PoolName.A,
    CommandKind.MULTI_KEYWORD: PoolName.B,
    CommandKind.ASSOC_PC: PoolName.B,
    CommandKind.ASSOC_MO: PoolName.B,
    CommandKind.AUTOCOMPLETE_PC: PoolName.B,
    CommandKind.AUTOCOMPLETE_MO: PoolName.B,
    CommandKind.INVALID: PoolName.B,
    CommandKind.HELP: PoolName.B,
    CommandKind.VISITOR_SINGLE: PoolName.B,
    CommandKind.VISITOR_MULTI: PoolName.B,
}

_missing = set(CommandKind) - set(POOL_BY_KIND)
if _missing:
    raise RuntimeError(f"자격 증명 풀이 지정되지 않은 명령 유형: {sorted(k.value for k in _missing)}")


def load_pools() -> dict[PoolName, CredentialPool]:
    """config 의 NAVER_AD_POOLS 를 CredentialPool 로 변환한다."""
    return {name: CredentialPool(**NAVER_AD_POOLS[name.value]) for name in PoolName}


def chunk(records: list, size: int = BATCH_SIZE) -> list[list]:
    """연속된 size 개 단위로 나눈다. 12개 → [5, 5, 2]."""
    return [records[i:i + size] for i in range(0, len(records), size)]


def sign(timestamp: str, secret_key: str, method: str = "GET", path: str = KEYWORD_TOOL_PATH) -> str:
    """서명 문자열 "{timestamp}.{method}.{path}" 의 HMAC-SHA256 을 base64 로 반환한다."""
    message = f"{timestamp}.{method}.{path}"
    digest = hmac.new(secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def build_headers(pool: CredentialPool, timestamp: str | None = None) -> dict[str, str]:
    timestamp = timestamp or str(int(time.time() * 1000))
    return {
        "X-Timestamp": timestamp,
        "X-Customer": pool.customer_id,
        "X-API-KEY": pool.access_license,
        "X-Signature": sign(timestamp, pool.secret_key),
    }


def _volume_value(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return VOLUME_FLOOR
    return int(value)


def _is_invalid_parameter(resp: requests.Response | None) -> bool:
    if resp is None:
        return False
    try:
        return resp.json().get("title") == "Invalid Parameter"
    except (ValueError, AttributeError):
        return False


def merge_volumes(records: list[KeywordRecord], keyword_list: list[dict]) -> list[KeywordRecord]:
    """응답 행을 키워드로 매칭해 검색량이 채워진 복사본을 만든다."""
    rows = {str(row.get("relKeyword", "")).upper(): row for row in keyword_list}

    merged = []
    for record in records:
        row = rows.get(record.keyword.upper())
        if row is None:
            raise NetworkFailure(f"검색량 응답에 키워드가 없습니다: {record.keyword}")

        pc = _volume_value(row.get("monthlyPcQcCnt"))
        mo = _volume_value(row.get("monthlyMobileQcCnt"))
        merged.append(dataclasses.replace(
            record,
            pc_volume=format_number(pc),
            mo_volume=format_number(mo),
            total_volume=format_number(pc + mo),
        ))
    return merged


class VolumeFetcher:
    """키워드 검색량 일괄 조회기."""

    def __init__(
        self,
        session: requests.Session | None = None,
        pools: dict[PoolName, CredentialPool] | None = None,
    ):
        self.session = session or requests.Session()
        self.pools = pools or load_pools()

    def pool_for(self, kind: CommandKind) -> CredentialPool:
        return self.pools[POOL_BY_KIND[kind]]

    def add_volume(
        self,
        records: list[KeywordRecord],
        kind: CommandKind,
        cancel: threading.Event | None = None,
    ) -> list[KeywordRecord]:
        """레코드에 PC / MO / TOTAL 검색량을 채운 새 리스트를 반환한다.

        한 묶음이라도 실패하면 전체가 실패한다 (부분 결과 없음).
        """
        pool = self.pool_for(kind)
        result: list[KeywordRecord] = []
        for group in chunk(records):
            check_cancelled(cancel)
            result.extend(self.fetch_group(group, pool))
        return result

    def fetch_group(self, group: list[KeywordRecord], pool: CredentialPool) -> list[KeywordRecord]:
        hint_keywords = ",".join(r.keyword for r in group)
        logger.info("검색량 조회: %s", hint_keywords)
        try:
            resp = self.session.get(
                f"{KEYWORD_TOOL_BASE_URL}{KEYWORD_TOOL_PATH}",
                params={"format": "json", "hintKeywords": hint_keywords},
                headers=build_headers(pool),
                timeout=REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            keyword_list = resp.json()["keywordList"]
        except requests.HTTPError as e:
            if _is_invalid_parameter(e.response):
                raise UpstreamInvalidParameter(hint_keywords) from e
            logger.error("검색량 조회 실패: keywords=%s, error=%s", hint_keywords, e)
            raise NetworkFailure(str(e)) from e
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error("검색량 조회 실패: keywords=%s, error=%s", hint_keywords, e)
            raise NetworkFailure(str(e)) from e

        return merge_volumes(group, keyword_list)

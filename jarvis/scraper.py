"""네이버 데이터 수집 모듈.

수집 대상:
  1. 블로그 문서량 (검색 오픈 API)
  2. PC / MO 연관 검색어 (검색 결과 HTML)
  3. PC / MO 자동 완성어 (자동 완성 JSON)
  4. 블로그 방문자 수 (방문자 XML)

HTTP 호출은 NaverGateway 가 담당하고, 응답 파싱은 모듈 함수로 분리한다.
"""

from __future__ import annotations

import logging
import math
import threading
from xml.etree import ElementTree

import requests
from bs4 import BeautifulSoup

from jarvis.config import (
    AUTOCOMPLETE_URLS,
    BLOG_SEARCH_URL,
    MAX_SUB_KEYWORDS,
    NAVER_CLIENT_ID,
    NAVER_CLIENT_SECRET,
    REQUEST_TIMEOUT,
    SEARCH_URLS,
    USER_AGENTS,
    VISITOR_URL,
)
from jarvis.composer import format_number
from jarvis.errors import NetworkFailure, PipelineTimeout
from jarvis.models import DayCount, Device, KeywordRecord, Role, VisitorRecord, build_records

logger = logging.getLogger(__name__)

# 방문자 XML 은 완료된 4일 + 오늘 = 5개 지점
VISITOR_POINTS = 5


def clean_keyword(text: str) -> str:
    """대문자로 바꾸고 공백을 제거한다."""
    return text.upper().replace(" ", "")


def check_cancelled(cancel: threading.Event | None) -> None:
    """제한 시간이 지났으면 다음 네트워크 호출 전에 중단한다."""
    if cancel is not None and cancel.is_set():
        raise PipelineTimeout("파이프라인 취소됨")


def parse_associative_keywords(html: str, device: Device) -> list[str]:
    """검색 결과 HTML 에서 연관 검색어를 최대 5개 추출한다.

    PC: ul._related_keyword_ul > li > a
    MO: div#_related_keywords a (class 속성이 있는 버튼류는 제외)
    """
    soup = BeautifulSoup(html, "html.parser")
    if device is Device.PC:
        anchors = soup.select("ul._related_keyword_ul > li > a")
    else:
        anchors = [a for a in soup.select("div#_related_keywords a") if not a.get("class")]

    keywords: list[str] = []
    for a in anchors:
        text = clean_keyword(a.get_text(strip=True))
        if not text:
            continue
        keywords.append(text)
        if len(keywords) >= MAX_SUB_KEYWORDS:
            break
    return keywords


def _flatten(items) -> list:
    flat = []
    for item in items:
        if isinstance(item, list):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


def parse_autocomplete_items(data: dict, keyword: str) -> list[str]:
    """자동 완성 JSON 의 중첩 items 를 펼쳐 검색어 자신을 뺀 최대 5개를 반환한다."""
    suggestions = (clean_keyword(str(e)) for e in _flatten(data.get("items") or []))
    return [s for s in suggestions if s and s != keyword][:MAX_SUB_KEYWORDS]


def parse_visitor_counts(xml_text: str | bytes) -> list[DayCount]:
    """방문자 XML 을 날짜순 DayCount 리스트로 변환한다.

    <visitorcnts><visitorcnt id="20261015" cnt="123"/>...</visitorcnts>
    """
    root = ElementTree.fromstring(xml_text)
    days: list[DayCount] = []
    for elem in root.iter("visitorcnt"):
        raw_date = elem.attrib["id"]
        days.append(DayCount(
            date=f"{raw_date[0:4]}-{raw_date[4:6]}-{raw_date[6:8]}",
            count=int(elem.attrib["cnt"]),
        ))
    return days


def build_visitor_record(blog_id: str, days: list[DayCount]) -> VisitorRecord:
    """5개 지점으로 최근 4일, 4일 평균, 오늘 방문자 수를 계산한다."""
    if len(days) < VISITOR_POINTS:
        raise ValueError(f"방문자 데이터 부족: {len(days)}개")

    last_four_days = days[:4]
    # 0.5 는 올림
    average = math.floor(sum(d.count for d in last_four_days) / len(last_four_days) + 0.5)
    return VisitorRecord(
        id=blog_id,
        last_four_days=last_four_days,
        average=average,
        today=days[4].count,
    )


class NaverGateway:
    """네이버 외부 데이터 소스에 대한 HTTP 클라이언트."""

    def __init__(self, session: requests.Session | None = None):
        self.session = session or requests.Session()

    def _get(self, url: str, *, params: dict, headers: dict | None = None) -> requests.Response:
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
            return resp
        except requests.RequestException as e:
            logger.error("요청 실패: url=%s, params=%s, error=%s", url, params, e)
            raise NetworkFailure(str(e)) from e

    def document_count(self, keyword: str) -> str:
        """블로그 문서량을 콤마 포함 문자열로 반환한다."""
        resp = self._get(
            BLOG_SEARCH_URL,
            params={"query": keyword, "display": 1},
            headers={
                "X-Naver-Client-Id": NAVER_CLIENT_ID,
                "X-Naver-Client-Secret": NAVER_CLIENT_SECRET,
            },
        )
        try:
            total = resp.json()["total"]
        except (ValueError, KeyError) as e:
            raise NetworkFailure(f"문서량 응답 형식 오류: keyword={keyword}") from e
        return format_number(total)

    def associative_keywords(self, keyword: str, device: Device) -> list[KeywordRecord]:
        """PC / MO 연관 검색어를 sub 레코드로 반환한다."""
        logger.info("연관 검색어 조회: keyword=%s, device=%s", keyword, device.value)
        resp = self._get(
            SEARCH_URLS[device.value],
            params={"query": keyword},
            headers={"User-Agent": USER_AGENTS[device.value]},
        )
        return build_records(parse_associative_keywords(resp.text, device), Role.SUB)

    def autocomplete_keywords(self, keyword: str, device: Device) -> list[KeywordRecord]:
        """PC / MO 자동 완성어를 sub 레코드로 반환한다."""
        logger.info("자동 완성어 조회: keyword=%s, device=%s", keyword, device.value)
        resp = self._get(
            AUTOCOMPLETE_URLS[device.value],
            params={"q": keyword, "st": 100, "r_format": "json"},
            headers={"User-Agent": USER_AGENTS[device.value]},
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise NetworkFailure(f"자동 완성 응답 형식 오류: keyword={keyword}") from e
        return build_records(parse_autocomplete_items(data, keyword), Role.SUB)

    def visitor_stats(
        self, ids: list[str], cancel: threading.Event | None = None
    ) -> list[VisitorRecord]:
        """아이디별 방문자 통계. 실패한 아이디는 빈 레코드로 대체한다."""
        records: list[VisitorRecord] = []
        for blog_id in ids:
            check_cancelled(cancel)
            try:
                resp = self._get(VISITOR_URL, params={"blogId": blog_id})
                records.append(build_visitor_record(blog_id, parse_visitor_counts(resp.content)))
            except (NetworkFailure, ElementTree.ParseError, KeyError, ValueError) as e:
                logger.warning("방문자 수 조회 실패: id=%s, error=%s", blog_id, e)
                records.append(VisitorRecord.placeholder(blog_id))
        return records

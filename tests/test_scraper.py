"""scraper 모듈 유닛 테스트."""

import json
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from jarvis.errors import NetworkFailure, PipelineTimeout
from jarvis.models import DayCount, Device, Role
from jarvis.scraper import (
    NaverGateway,
    build_visitor_record,
    parse_associative_keywords,
    parse_autocomplete_items,
    parse_visitor_counts,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def _response(text: str = "", json_data=None, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.text = text
    resp.content = text.encode("utf-8")
    resp.json.return_value = json_data
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return resp


class TestParseAssociativeKeywords:
    """parse_associative_keywords 테스트."""

    def test_pc(self):
        """텍스트 없는 항목을 건너뛰고 최대 5개까지 추출할 것."""
        keywords = parse_associative_keywords(_load_fixture("search_pc.html"), Device.PC)
        assert keywords == ["자비스키워드", "자비스봇", "JARVISAI", "자비스마케팅", "자비스블로그"]

    def test_mobile_skips_class_anchors(self):
        keywords = parse_associative_keywords(_load_fixture("search_mobile.html"), Device.MOBILE)
        assert keywords == ["자비스키워드", "자비스봇", "JARVIS"]

    def test_empty_html(self):
        assert parse_associative_keywords("<html><body></body></html>", Device.PC) == []


class TestParseAutocompleteItems:
    """parse_autocomplete_items 테스트."""

    def test_flatten_and_exclude_query(self):
        data = json.loads(_load_fixture("autocomplete.json"))
        keywords = parse_autocomplete_items(data, "자비스")
        assert keywords == ["자비스키워드", "자비스봇", "JARVIS", "자비스뜻", "자비스마케팅"]

    def test_no_items(self):
        assert parse_autocomplete_items({"items": []}, "자비스") == []
        assert parse_autocomplete_items({}, "자비스") == []


class TestVisitorParsing:
    """방문자 XML 파싱과 통계 계산 테스트."""

    def test_parse_visitor_counts(self):
        days = parse_visitor_counts(_load_fixture("visitor.xml"))
        assert len(days) == 5
        assert days[0] == DayCount(date="2026-10-14", count=120)
        assert days[4] == DayCount(date="2026-10-18", count=41)

    def test_build_visitor_record(self):
        record = build_visitor_record("jarvis", parse_visitor_counts(_load_fixture("visitor.xml")))
        assert [d.date for d in record.last_four_days] == [
            "2026-10-14", "2026-10-15", "2026-10-16", "2026-10-17",
        ]
        assert record.average == 450  # 1801 / 4 = 450.25
        assert record.today == 41

    def test_average_rounds_half_up(self):
        days = [DayCount(date=f"2026-10-1{i}", count=c) for i, c in enumerate([1, 2, 3, 4, 0])]
        assert build_visitor_record("jarvis", days).average == 3  # 2.5

    def test_too_few_points(self):
        with pytest.raises(ValueError):
            build_visitor_record("jarvis", [DayCount(date="2026-10-14", count=1)])


class TestNaverGateway:
    """NaverGateway 의 HTTP 처리 테스트."""

    def test_document_count(self):
        session = MagicMock()
        session.get.return_value = _response(json_data={"total": 1234567})

        assert NaverGateway(session).document_count("자비스") == "1,234,567"
        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"query": "자비스", "display": 1}
        assert "X-Naver-Client-Id" in kwargs["headers"]

    def test_document_count_http_error(self):
        session = MagicMock()
        session.get.return_value = _response(status=500)

        with pytest.raises(NetworkFailure):
            NaverGateway(session).document_count("자비스")

    def test_document_count_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")

        with pytest.raises(NetworkFailure):
            NaverGateway(session).document_count("자비스")

    def test_associative_keywords_mobile(self):
        session = MagicMock()
        session.get.return_value = _response(text=_load_fixture("search_mobile.html"))

        records = NaverGateway(session).associative_keywords("자비스", Device.MOBILE)

        assert [r.keyword for r in records] == ["자비스키워드", "자비스봇", "JARVIS"]
        assert all(r.role is Role.SUB for r in records)
        assert all(r.blog_documents == "" and r.total_volume == "" for r in records)
        url = session.get.call_args[0][0]
        assert url.startswith("https://m.search.naver.com")

    def test_autocomplete_keywords_pc(self):
        session = MagicMock()
        session.get.return_value = _response(json_data=json.loads(_load_fixture("autocomplete.json")))

        records = NaverGateway(session).autocomplete_keywords("자비스", Device.PC)

        assert len(records) == 5
        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"q": "자비스", "st": 100, "r_format": "json"}

    def test_visitor_stats_failure_degrades(self):
        """실패한 아이디는 빈 레코드가 되고 배치는 계속될 것."""
        session = MagicMock()
        session.get.side_effect = [
            _response(text=_load_fixture("visitor.xml")),
            _response(status=404),
        ]

        records = NaverGateway(session).visitor_stats(["good", "bad"])

        assert len(records) == 2
        assert records[0].average == 450
        assert records[1].id == "bad"
        assert records[1].average == 0
        assert records[1].today == 0
        assert records[1].last_four_days == [DayCount(date="", count=None)]

    def test_visitor_stats_broken_xml(self):
        session = MagicMock()
        session.get.return_value = _response(text="<visitorcnts><broken")

        records = NaverGateway(session).visitor_stats(["jarvis"])
        assert records[0].average == 0

    def test_visitor_stats_cancelled(self):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(PipelineTimeout):
            NaverGateway(MagicMock()).visitor_stats(["jarvis"], cancel=cancel)

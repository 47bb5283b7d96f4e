"""main.scrape 테스트 (외부 호출은 가짜 게이트웨이로 대체)."""

import dataclasses
import threading
import time

from jarvis.composer import NETWORK_FAILURE_MESSAGE, compose_header, compose_timeout_message
from jarvis.errors import NetworkFailure, UpstreamInvalidParameter
from jarvis.main import scrape, to_message
from jarvis.models import CommandKind, Device, Role, VisitorRecord, build_records


class FakeGateway:
    """호출 순서를 기록하는 NaverGateway 대체품."""

    def __init__(self, sub_keywords=("자비스봇", "자비스뜻"), fail_on=None, block=None):
        self.calls = []
        self.sub_keywords = list(sub_keywords)
        self.fail_on = fail_on
        self.block = block

    def document_count(self, keyword):
        self.calls.append(("document_count", keyword))
        if self.block is not None:
            self.block.wait(2)
        if keyword == self.fail_on:
            raise NetworkFailure(keyword)
        return "1,000"

    def associative_keywords(self, keyword, device):
        self.calls.append(("associative_keywords", keyword, device))
        return build_records(self.sub_keywords, Role.SUB)

    def autocomplete_keywords(self, keyword, device):
        self.calls.append(("autocomplete_keywords", keyword, device))
        return build_records(self.sub_keywords, Role.SUB)

    def visitor_stats(self, ids, cancel=None):
        self.calls.append(("visitor_stats", list(ids)))
        return [VisitorRecord.placeholder(i) for i in ids]


class FakeVolume:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def add_volume(self, records, kind, cancel=None):
        self.calls.append(([r.keyword for r in records], kind))
        if self.error is not None:
            raise self.error
        return [
            dataclasses.replace(r, pc_volume="10", mo_volume="20", total_volume="30")
            for r in records
        ]


class TestScrapeImmediate:
    """네트워크 없이 바로 응답하는 명령 테스트."""

    def test_invalid(self):
        gateway = FakeGateway()
        assert scrape("자비스?", gateway, FakeVolume()) == compose_header(CommandKind.INVALID)
        assert gateway.calls == []

    def test_help(self):
        assert scrape("자비스 키워드 조회", FakeGateway(), FakeVolume()) == compose_header(CommandKind.HELP)


class TestScrapeKeywords:
    """검색량 조회 파이프라인 테스트."""

    def test_single_keyword(self):
        gateway, volume = FakeGateway(), FakeVolume()
        message = scrape("자비스", gateway, volume)

        assert message.startswith(compose_header(CommandKind.SINGLE_KEYWORD) + "[자비스] 검색량입니다!")
        assert "# TOTAL 검색량: 30\n" in message
        assert gateway.calls == [("document_count", "자비스")]
        assert volume.calls == [(["자비스"], CommandKind.SINGLE_KEYWORD)]

    def test_multi_keyword_sequential_order(self):
        gateway, volume = FakeGateway(), FakeVolume()
        message = scrape("최신,마케팅,자비스", gateway, volume)

        assert [c[1] for c in gateway.calls] == ["최신", "마케팅", "자비스"]
        assert message.count("# TOTAL 검색량") == 3
        assert message.index("[최신]") < message.index("[마케팅]") < message.index("[자비스]")

    def test_assoc_mobile_appends_sub_records(self):
        gateway, volume = FakeGateway(), FakeVolume()
        message = scrape("자비스+m", gateway, volume)

        assert gateway.calls[0] == ("associative_keywords", "자비스", Device.MOBILE)
        assert [c[1] for c in gateway.calls[1:]] == ["자비스", "자비스봇", "자비스뜻"]
        assert volume.calls == [(["자비스", "자비스봇", "자비스뜻"], CommandKind.ASSOC_MO)]
        assert "# [자비스]의 MO 연관 검색어입니다." in message
        assert message.count("# TOTAL 검색량") == 1

    def test_autocomplete_pc(self):
        gateway = FakeGateway()
        scrape("자비스*", gateway, FakeVolume())
        assert gateway.calls[0] == ("autocomplete_keywords", "자비스", Device.PC)

    def test_no_sub_keywords(self):
        message = scrape("자비스*M", FakeGateway(sub_keywords=()), FakeVolume())
        assert "자동 완성 검색어입니다." not in message

    def test_network_failure(self):
        gateway, volume = FakeGateway(fail_on="마케팅"), FakeVolume()
        assert scrape("최신,마케팅,자비스", gateway, volume) == NETWORK_FAILURE_MESSAGE
        assert volume.calls == []

    def test_upstream_invalid_parameter(self):
        volume = FakeVolume(error=UpstreamInvalidParameter("자비스"))
        assert scrape("자비스", FakeGateway(), volume) == compose_header(CommandKind.INVALID)

    def test_unexpected_error(self):
        volume = FakeVolume(error=KeyError("keywordList"))
        assert scrape("자비스", FakeGateway(), volume) == NETWORK_FAILURE_MESSAGE


class TestScrapeVisitor:
    """방문자 수 조회 테스트."""

    def test_ids_lowercased(self):
        gateway = FakeGateway()
        message = scrape("!Jarvis,Daese", gateway, FakeVolume())

        assert gateway.calls == [("visitor_stats", ["jarvis", "daese"])]
        assert "- jarvis : 0명 \n- daese : 0명 \n" in message

    def test_single(self):
        message = scrape("@jarvis", FakeGateway(), FakeVolume())
        assert message.startswith(compose_header(CommandKind.VISITOR_SINGLE))
        assert "아이디 jarvis의\n" in message


class TestScrapeTimeout:
    """응답 제한 시간 테스트."""

    def test_timeout_template(self):
        block = threading.Event()
        gateway, volume = FakeGateway(block=block), FakeVolume()

        try:
            message = scrape("최신,마케팅,자비스", gateway, volume, timeout=0.05)
        finally:
            block.set()

        assert message == compose_timeout_message()

    def test_cancelled_pipeline_stops(self):
        """타임아웃 이후 파이프라인은 다음 호출 전에 멈출 것."""
        block = threading.Event()
        gateway, volume = FakeGateway(block=block), FakeVolume()

        scrape("최신,마케팅,자비스", gateway, volume, timeout=0.05)
        block.set()
        time.sleep(0.3)

        assert gateway.calls == [("document_count", "최신")]
        assert volume.calls == []


class TestToMessage:
    """예외 → 사용자 문장 변환 테스트."""

    def test_generic(self):
        assert to_message(RuntimeError("boom")) == NETWORK_FAILURE_MESSAGE

"""M-자비스 메인 엔트리포인트.

처리 흐름:
  1. 명령어 분석 (유형 + 키워드)
  2. 확장 유형이면 첫 키워드의 연관 / 자동 완성어 수집
  3. 키워드별 블로그 문서량 순차 조회
  4. 5개 단위 검색량 조회
  5. 응답 메시지 작성

전체 처리는 TIMEOUT 초 안에 끝나야 하며, 넘기면 타임아웃 메시지를 반환하고
진행 중인 파이프라인은 다음 네트워크 호출 전에 중단된다.
"""

from __future__ import annotations

import dataclasses
import logging
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime

import uvicorn

from jarvis.classifier import classify
from jarvis.composer import (
    NETWORK_FAILURE_MESSAGE,
    compose_header,
    compose_message,
    compose_timeout_message,
    compose_visitor_message,
)
from jarvis.config import LOG_DIR, MAX_VISITOR_IDS, PIPELINE_WORKERS, PORT, TIMEOUT
from jarvis.errors import (
    InformationRequest,
    InvalidCommand,
    PipelineTimeout,
    UpstreamInvalidParameter,
)
from jarvis.models import (
    EXPANSION_KINDS,
    VISITOR_KINDS,
    ClassifiedCommand,
    CommandKind,
    Device,
    Role,
    build_records,
)
from jarvis.scraper import NaverGateway, check_cancelled
from jarvis.volume import VolumeFetcher

logger = logging.getLogger(__name__)

# 살아 있는 파이프라인 수의 상한
_executor = ThreadPoolExecutor(max_workers=PIPELINE_WORKERS, thread_name_prefix="jarvis-pipeline")


def setup_logging() -> None:
    """로깅 초기 설정."""
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / f"jarvis_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def fetch_sub_keywords(gateway: NaverGateway, kind: CommandKind, keyword: str):
    """확장 유형에 맞는 연관 / 자동 완성어 조회."""
    if kind is CommandKind.ASSOC_PC:
        return gateway.associative_keywords(keyword, Device.PC)
    if kind is CommandKind.ASSOC_MO:
        return gateway.associative_keywords(keyword, Device.MOBILE)
    if kind is CommandKind.AUTOCOMPLETE_PC:
        return gateway.autocomplete_keywords(keyword, Device.PC)
    if kind is CommandKind.AUTOCOMPLETE_MO:
        return gateway.autocomplete_keywords(keyword, Device.MOBILE)
    raise ValueError(f"확장 유형이 아닙니다: {kind}")


def to_message(error: Exception) -> str:
    """예외를 사용자용 문장으로 변환한다."""
    if isinstance(error, (InvalidCommand, UpstreamInvalidParameter)):
        return compose_header(CommandKind.INVALID)
    if isinstance(error, InformationRequest):
        return compose_header(CommandKind.HELP)
    if isinstance(error, PipelineTimeout):
        return compose_timeout_message()
    return NETWORK_FAILURE_MESSAGE


def check_command(command: ClassifiedCommand) -> None:
    if command.kind is CommandKind.INVALID:
        raise InvalidCommand(command)
    if command.kind is CommandKind.HELP:
        raise InformationRequest()


def build_report(
    command: ClassifiedCommand,
    gateway: NaverGateway,
    volume: VolumeFetcher,
    cancel: threading.Event,
) -> str:
    """분석된 명령으로 데이터를 모아 응답 문자열을 만든다. 실패는 예외로 전파된다."""
    if command.kind in VISITOR_KINDS:
        ids = [blog_id.lower() for blog_id in command.keywords[:MAX_VISITOR_IDS]]
        visitors = gateway.visitor_stats(ids, cancel=cancel)
        return compose_visitor_message(visitors, command.kind)

    records = build_records(command.keywords, Role.NORMAL)

    if command.kind in EXPANSION_KINDS:
        check_cancelled(cancel)
        records += fetch_sub_keywords(gateway, command.kind, records[0].keyword)

    # 문서량은 키워드 순서대로 하나씩 조회한다
    with_documents = []
    for record in records:
        check_cancelled(cancel)
        with_documents.append(
            dataclasses.replace(record, blog_documents=gateway.document_count(record.keyword))
        )

    with_volume = volume.add_volume(with_documents, command.kind, cancel=cancel)
    return compose_message(command.kind, with_volume)


def run_pipeline(
    command: ClassifiedCommand,
    gateway: NaverGateway,
    volume: VolumeFetcher,
    cancel: threading.Event,
) -> str:
    try:
        return build_report(command, gateway, volume, cancel)
    except PipelineTimeout:
        logger.info("타임아웃 이후 파이프라인 중단: kind=%s", command.kind.value)
        return compose_timeout_message()
    except (InvalidCommand, InformationRequest, UpstreamInvalidParameter) as e:
        logger.info("사용자 오류: kind=%s, error=%r", command.kind.value, e)
        return to_message(e)
    except Exception as e:
        logger.exception("파이프라인 실패: kind=%s, keywords=%s", command.kind.value, command.keywords)
        return to_message(e)


def scrape(
    command: str,
    gateway: NaverGateway | None = None,
    volume: VolumeFetcher | None = None,
    timeout: float = TIMEOUT,
) -> str:
    """명령어 하나에 대한 응답 문자열. 예외를 던지지 않는다."""
    start_time = time.time()
    classified = classify(command)
    logger.info("명령어 분석: command=%r, kind=%s, keywords=%s",
                command, classified.kind.value, classified.keywords)

    try:
        check_command(classified)
    except (InvalidCommand, InformationRequest) as e:
        return to_message(e)

    cancel = threading.Event()
    future = _executor.submit(
        run_pipeline,
        classified,
        gateway or NaverGateway(),
        volume or VolumeFetcher(),
        cancel,
    )
    try:
        result = future.result(timeout=timeout)
    except FuturesTimeoutError:
        cancel.set()
        future.cancel()
        logger.warning("응답 제한 시간 초과: command=%r, timeout=%.1f 초", command, timeout)
        return compose_timeout_message()

    logger.info("응답 완료: kind=%s, 소요 시간: %.2f 초", classified.kind.value, time.time() - start_time)
    return result


def run() -> None:
    """웹훅 서버 실행."""
    setup_logging()
    logging.getLogger(__name__).info("=== M-자비스 서버 시작: port=%d ===", PORT)
    uvicorn.run("jarvis.app:app", host="0.0.0.0", port=PORT, log_level="info")


if __name__ == "__main__":
    run()

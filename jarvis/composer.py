"""응답 메시지 작성 모듈.

I/O 없이 분석된 명령 유형과 수집된 레코드만으로 카카오톡 응답 문자열을 만든다.
"""

from __future__ import annotations

from datetime import date, timedelta

from jarvis.models import CommandKind, DayCount, KeywordRecord, Role, VisitorRecord

LINE = "—————————————\n"

NETWORK_FAILURE_MESSAGE = "자비스 네트워크에 문제가 발생했습니다."

# 통계 기간: 어제까지 31일
STATISTIC_DAYS = 31

_HELP_BODY = (
    "M-자비스 준비 완료-!\n\n"
    + LINE
    + "😎M-자비스 사용방법 안내😎\n"
    + LINE
    + "\n"
    "1.검색량 조회하기\n"
    "- 원하는 키워드 입력하기\n"
    "ex) 자비스\n\n"
    "2.한번에 여러 키워드 조회하기\n"
    "- 키워드 뒤에 쉼표 붙이기\n"
    "ex) 최신,마케팅,자비스\n\n"
    "3.연관검색어 함께 조회하기\n"
    "- 키워드 뒤에 + 붙이기\n"
    "ex) 자비스+\n\n"
    "4.PC 자동완성어 함께 조회\n"
    "- 키워드 뒤에 * 붙이기\n"
    "ex) 자비스*\n\n"
    "5.MO 자동완성어 함께 조회\n"
    "- 키워드 뒤에 *m 붙이기\n"
    "ex) 자비스*m\n\n"
    "6.방문자 수 조회\n"
    "- @ 뒤, 조회 할 아이디 하나만 입력\n"
    " ex) @jarvis\n"
    "- ! 뒤, 조회 할 아이디 여러개 입력\n"
    " ex) !jarvis,daese,nice\n\n"
    + LINE
    + "★M-자비스 공지방\n"
    "http://bit.ly/2lWIRMP\n\n"
    "★M-자비스 마케팅 소통방\n"
    "http://bit.ly/2obB92d\n"
    + LINE
)

_SECRET_MODE = LINE + "😎자비스 시크릿 모드 발동😎\n" + LINE

HEADERS = {
    CommandKind.SINGLE_KEYWORD: LINE + "자비스 임무 수행 완료!\n" + LINE,
    CommandKind.MULTI_KEYWORD: LINE + "🤪자비스 두뇌 200% 풀가동!!🤪\n" + LINE,
    CommandKind.ASSOC_PC: _SECRET_MODE,
    CommandKind.ASSOC_MO: _SECRET_MODE,
    CommandKind.AUTOCOMPLETE_PC: _SECRET_MODE,
    CommandKind.AUTOCOMPLETE_MO: _SECRET_MODE,
    CommandKind.INVALID: "자비스가 처리할 수 없는 명령입니다.",
    CommandKind.HELP: _HELP_BODY,
    CommandKind.VISITOR_SINGLE: LINE + "😎M-자비스 방문자 X-ray😎\n" + LINE,
    CommandKind.VISITOR_MULTI: LINE + "😎M-자비스 방문자 수 조회😎\n" + LINE,
}

TIMEOUT_MESSAGE = (
    LINE
    + "😎자비스 에러 메시지😎\n"
    + LINE
    + "*\n"
    "동시 요청량이 너무 많아서\n"
    "머리가 너무 아파요. (헤롱)\n"
    "*\n"
    "\n"
    "다시 검색해보세요!"
)

SUB_HEADER_LABELS = {
    CommandKind.ASSOC_PC: "PC 연관 검색어",
    CommandKind.ASSOC_MO: "MO 연관 검색어",
    CommandKind.AUTOCOMPLETE_PC: "PC 자동 완성 검색어",
    CommandKind.AUTOCOMPLETE_MO: "MO 자동 완성 검색어",
}


def format_number(number) -> str:
    """1234567 → "1,234,567"."""
    return f"{int(number):,}"


def compose_header(kind: CommandKind) -> str:
    return HEADERS[kind]


def compose_timeout_message() -> str:
    return TIMEOUT_MESSAGE


def compose_sub_header(kind: CommandKind, keyword: str) -> str | None:
    """확장 검색어 목록 앞에 붙는 소제목. 확장 유형이 아니면 None."""
    label = SUB_HEADER_LABELS.get(kind)
    if label is None:
        return None
    return f"\n# [{keyword}]의 {label}입니다.\n{LINE}"


def compose_body(record: KeywordRecord) -> str:
    body = f"[{record.keyword}] 검색량입니다!\n\n"
    body += f"# 문서량 : {record.blog_documents}\n"
    body += f"# PC 검색량 : {record.pc_volume}\n"
    body += f"# MOBILE 검색량 : {record.mo_volume}"
    if record.role is Role.NORMAL:
        body += f"\n# TOTAL 검색량: {record.total_volume}\n"
    else:
        body += "\n"
    return body


def _format_statistic_date(d: date) -> str:
    # 월은 두 자리, 일은 그대로
    return f"{d.year}.{d.month:02d}.{d.day}"


def compose_footer(today: date | None = None) -> str:
    """[오늘-31일, 어제] 통계 기간 꼬리말."""
    today = today or date.today()
    end = today - timedelta(days=1)
    start = today - timedelta(days=STATISTIC_DAYS)
    return (
        f"{LINE}# 데이터 통계 기간\n"
        f"{_format_statistic_date(start)} ~ {_format_statistic_date(end)}"
    )


def _join_bodies(records: list[KeywordRecord]) -> str:
    return LINE.join(compose_body(r) for r in records)


def compose_message(
    kind: CommandKind, records: list[KeywordRecord], today: date | None = None
) -> str:
    """검색량 리포트 전체 메시지.

    헤더 → normal 레코드 → (있으면) 소제목 + sub 레코드 → 통계 기간
    """
    normal = [r for r in records if r.role is Role.NORMAL]
    sub = [r for r in records if r.role is Role.SUB]

    message = compose_header(kind)
    message += _join_bodies(normal)
    if sub:
        message += compose_sub_header(kind, normal[0].keyword) or ""
        message += _join_bodies(sub)
    message += compose_footer(today)
    return message


def _format_count(count: int | None) -> str:
    return "" if count is None else format_number(count)


def _format_day(day: DayCount) -> str:
    return f"{day.date} : {_format_count(day.count)}명\n"


def compose_visitor_message(records: list[VisitorRecord], kind: CommandKind) -> str:
    """방문자 수 조회 결과 메시지."""
    message = compose_header(kind)
    message += "*\n"

    if kind is CommandKind.VISITOR_SINGLE:
        record = records[0]
        message += f"아이디 {record.id}의\n"
        message += "최근 4일간 방문자 수 조회 결과\n"
        message += LINE
        message += "\n"
        message += "".join(_format_day(d) for d in record.last_four_days)
        message += "\n"
        message += "*\n"
        message += "4일 평균 방문자 수는\n"
        message += f"{format_number(record.average)}명 입니다.\n"
        message += "\n"
        message += LINE
        message += "*\n"
        message += "현 시간까지의\n"
        message += f"방문자 수는 {format_number(record.today)}명 입니다.\n"
        message += LINE
    else:
        days = records[0].last_four_days if records else []
        message += "검색하신 아이디의\n"
        message += "4일 평균 방문자 수입니다.\n"
        message += LINE
        message += "\n"
        message += "".join(f"- {r.id} : {format_number(r.average)}명 \n" for r in records)
        message += "\n"
        message += "# 데이터 통계 기간\n"
        if days:
            message += f"{days[0].date} ~ {days[-1].date}\n"
        else:
            message += " ~ \n"
        message += LINE

    return message

"""예외 정의.

scrape() 경계에서 모두 사용자용 문장으로 변환된다.
"""


class JarvisError(Exception):
    """자비스 예외의 기반 클래스."""


class InvalidCommand(JarvisError):
    """처리할 수 없는 명령어."""


class InformationRequest(JarvisError):
    """사용법 안내 요청. 실패가 아니라 도움말 응답으로 이어진다."""


class UpstreamInvalidParameter(JarvisError):
    """검색광고 API 가 요청 형식을 거부함 (Invalid Parameter)."""


class NetworkFailure(JarvisError):
    """외부 호출 실패 또는 응답 매칭 실패."""


class PipelineTimeout(JarvisError):
    """응답 제한 시간 초과로 파이프라인이 중단됨."""

"""설정 모듈: 환경변수・상수 정의."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env 는 프로젝트 루트에 둔다
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- 네이버 검색 오픈 API (블로그 문서량) ---
NAVER_CLIENT_ID: str = os.getenv("NAVER_CLIENT_ID", "")
NAVER_CLIENT_SECRET: str = os.getenv("NAVER_CLIENT_SECRET", "")

# --- 네이버 검색광고 API (검색량) ---
# 풀 A: 단일 키워드 조회 전용, 풀 B: 그 밖의 모든 명령
NAVER_AD_POOLS = {
    "A": {
        "customer_id": os.getenv("NAVER_AD_CUSTOMER_ID", ""),
        "access_license": os.getenv("NAVER_AD_ACCESS_LICENSE", ""),
        "secret_key": os.getenv("NAVER_AD_SECRET_KEY", ""),
    },
    "B": {
        "customer_id": os.getenv("NAVER_AD_CUSTOMER_ID_2", ""),
        "access_license": os.getenv("NAVER_AD_ACCESS_LICENSE_2", ""),
        "secret_key": os.getenv("NAVER_AD_SECRET_KEY_2", ""),
    },
}

# --- 엔드포인트 ---
BLOG_SEARCH_URL = "https://openapi.naver.com/v1/search/blog.json"
SEARCH_URLS = {
    "pc": "https://search.naver.com/search.naver",
    "mobile": "https://m.search.naver.com/search.naver",
}
AUTOCOMPLETE_URLS = {
    "pc": "https://ac.search.naver.com/nx/ac",
    "mobile": "https://mac.search.naver.com/mobile/ac",
}
KEYWORD_TOOL_BASE_URL = "https://api.naver.com"
KEYWORD_TOOL_PATH = "/keywordstool"
VISITOR_URL = "https://blog.naver.com/NVisitorgp4Ajax.nhn"

# --- User-Agent ---
PC_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Mobile Safari/537.36"
)

USER_AGENTS = {
    "pc": PC_USER_AGENT,
    "mobile": MOBILE_USER_AGENT,
}

# --- 요청 설정 ---
REQUEST_TIMEOUT = 4  # 초, 개별 HTTP 호출
TIMEOUT = 4.8  # 초, scrape 전체 응답 제한
PIPELINE_WORKERS = int(os.getenv("JARVIS_PIPELINE_WORKERS", "16"))

# --- 조회 한도 ---
BATCH_SIZE = 5
MAX_SUB_KEYWORDS = 5
MAX_MULTI_KEYWORDS = 8
MAX_VISITOR_IDS = 10

# --- 서버 ---
PORT = int(os.getenv("PORT", "3000"))

# --- 로그 ---
LOG_DIR = _PROJECT_ROOT / "logs"

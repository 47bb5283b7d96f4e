"""카카오톡 챗봇 웹훅."""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from jarvis.main import scrape

HELP_BUTTON = "자비스 키워드 조회"


class UserRequest(BaseModel):
    utterance: str


class MessageRequest(BaseModel):
    userRequest: UserRequest


app = FastAPI(title="M-Jarvis Keyword Bot")


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return PlainTextResponse("404 Not found", status_code=404)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


@app.get("/keyboard")
async def keyboard():
    return {"type": "buttons", "buttons": [HELP_BUTTON]}


# scrape() 는 블로킹 호출이라 일반 def 로 두어 스레드풀에서 실행되게 한다
@app.post("/message")
def message(body: MessageRequest):
    text = scrape(body.userRequest.utterance)
    return {"contents": [{"type": "text", "text": text}]}

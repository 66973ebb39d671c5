import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool
import uvicorn

from .errors import ExhaustedError, StorageError, ValidationError
from .repository import MappingStore
from .schemas import Reply
from .validators import parse_url


logger = logging.getLogger(__name__)

DB_ERROR_MSG = "problem with database"


def reply(status_code: int, ok: bool, msg: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=Reply(ok=ok, msg=msg).model_dump(),
    )


def get_store(request: Request) -> MappingStore:
    return request.app.state.store


def create_app(store: MappingStore, index: Optional[Path] = None) -> FastAPI:
    """Собирает приложение вокруг уже созданного хранилища."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Инициализация приложения")
        await run_in_threadpool(store.init)
        yield
        logger.info("Остановка приложения")

    app = FastAPI(title="cc URL Shortener", lifespan=lifespan)
    app.state.store = store
    app.state.index = index

    @app.post("/put", status_code=status.HTTP_201_CREATED, response_model=Reply)
    async def put(request: Request, store: MappingStore = Depends(get_store)):
        try:
            url = parse_url(await request.body())
        except ValidationError as exc:
            logger.info("Отклонён URL: %s", exc)
            return reply(status.HTTP_400_BAD_REQUEST, False, str(exc))

        try:
            code = await run_in_threadpool(store.put, url)
        except ValidationError as exc:
            return reply(status.HTTP_400_BAD_REQUEST, False, str(exc))
        except ExhaustedError as exc:
            logger.error("Нет свободных кодов: %s", exc)
            return reply(status.HTTP_500_INTERNAL_SERVER_ERROR, False, "no free short code available")
        except StorageError as exc:
            logger.error("Ошибка БД при сохранении %s: %s", url, exc)
            return reply(status.HTTP_500_INTERNAL_SERVER_ERROR, False, DB_ERROR_MSG)

        logger.info("Сохранено: %s -> %s", code, url)
        return reply(status.HTTP_201_CREATED, True, code)

    @app.get("/", response_class=HTMLResponse)
    def index_page(request: Request):
        path = request.app.state.index
        if path is None:
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Не удалось прочитать index %s: %s", path, exc)
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        return HTMLResponse(content)

    @app.get("/{code}")
    def redirect(code: str, store: MappingStore = Depends(get_store)):
        try:
            url = store.get(code)
        except StorageError as exc:
            logger.error("Ошибка БД при поиске %s: %s", code, exc)
            return reply(status.HTTP_500_INTERNAL_SERVER_ERROR, False, DB_ERROR_MSG)
        if url is None:
            logger.warning("Код %s не найден", code)
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        logger.info("Редирект с %s на %s", code, url)
        # RedirectResponse перекодирует URL, поэтому Location задаём как есть
        return Response(
            status_code=status.HTTP_308_PERMANENT_REDIRECT,
            headers={"Location": url},
        )

    return app


def run(store: MappingStore, host: str, port: int, index: Optional[Path] = None) -> None:
    """Запуск сервера uvicorn."""
    logger.info("Запуск cc на http://%s:%s, БД: %s", host, port, store.path)
    uvicorn.run(create_app(store, index), host=host, port=port)

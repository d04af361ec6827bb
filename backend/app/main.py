from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import api_router
from app.core.config import settings
from app.core.errors import BroCodeError
from app.db.base import Base
from app.db.session import engine
from app.loader import APP_LOGGER
# ВАЖНО: импортировать модели
import app.models  # noqa: F401


app = FastAPI(
    title=settings.project_name,
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BroCodeError)
async def brocode_error_handler(request: Request, exc: BroCodeError) -> JSONResponse:
    """Ошибки сервисного слоя -> HTTP-ответ с человекочитаемым текстом."""
    if exc.status_code >= 500:
        APP_LOGGER.error(
            "[api.error] %s %s status=%s message=%s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
async def on_startup() -> None:
    """Создаёт таблицы при старте, если это не отключено в настройках."""
    if not settings.auto_create_tables:
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Проверка доступности сервиса."""
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.api_v1_prefix)

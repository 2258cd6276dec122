import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings
from app.core.security import TokenCodec
from app.database import init_db, make_engine
from app.repositories.scene_repo import SceneStore
from app.routers.scenes import router as scenes_router
from app.routers.system import router as system_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Scene API",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Authorization", "Content-Type"],
    )

    engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    app.state.settings = settings
    app.state.scene_store = SceneStore(engine)
    app.state.token_codec = TokenCodec(
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        # malformed input is a plain 400, like every other request problem
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.on_event("startup")
    def on_startup():
        init_db(engine)

    app.include_router(scenes_router)
    app.include_router(system_router)
    return app

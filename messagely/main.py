import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pythonjsonlogger.json import JsonFormatter

from .auth import CredentialService
from .config import Settings, get_settings
from .crud import UserRepository, MessageRepository
from .db import Database
from .errors import register_error_handlers
from .routes import router

logger = logging.getLogger('messagely')


def configure_logging(level: str):
    # structured logging, installed once per process
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(level.upper())


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Messagely API", version="0.1.0")

    database = Database(settings.database_url, echo=settings.database_echo)
    app.state.settings = settings
    app.state.database = database
    app.state.credentials = CredentialService(database, settings)
    app.state.users = UserRepository(database)
    app.state.messages = MessageRepository(database)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=['*'],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    register_error_handlers(app)
    app.include_router(router)

    @app.get('/healthz')
    async def healthz():
        return {'status': 'ok'}

    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        logger.info({'msg': 'request_start', 'method': request.method, 'path': request.url.path})
        response = await call_next(request)
        logger.info({'msg': 'request_end', 'method': request.method, 'path': request.url.path,
                     'status': response.status_code})
        return response

    @app.on_event("startup")
    async def startup():
        if settings.create_tables:
            await database.create_all()

    @app.on_event("shutdown")
    async def shutdown():
        await database.dispose()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("messagely.main:app", host="0.0.0.0", port=8000)

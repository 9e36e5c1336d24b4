import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from storefront.api import routes_auth, routes_categories, routes_orders, routes_products, routes_users
from storefront.core import responses
from storefront.core.config import Settings, load_settings
from storefront.core.errors import AppError
from storefront.core.log import configure_logging
from storefront.db.session import make_engine, make_session_factory
from storefront.version import VERSION

logger = logging.getLogger(__name__)

API_PREFIX = '/api/v1'


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error(request: Request, exc: AppError):
        return responses.error(exc.message, exc.errors, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = [{'field': '.'.join(str(p) for p in e['loc'][1:]), 'message': e['msg']} for e in exc.errors()]
        return responses.error('Validation failed', errors, 400)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception('Unhandled storage error on %s %s', request.method, request.url.path)
        return responses.error('internal server error', None, 500)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the application; run with ``uvicorn storefront.main:create_app --factory``."""
    settings = settings or load_settings()
    configure_logging(settings.LOG_LEVEL)

    engine = engine or make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO,
                                   statement_timeout_ms=settings.DB_STATEMENT_TIMEOUT_MS)

    app = FastAPI(title='Storefront API', version=VERSION)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    Instrumentator().instrument(app).expose(app, include_in_schema=False, endpoint='/metrics', should_gzip=True)

    _register_error_handlers(app)

    @app.get('/health')
    def health():
        return {'status': 'ok'}

    @app.get('/v1/_info')
    def info():
        return {'service': 'storefront', 'version': VERSION}

    app.include_router(routes_auth.router, prefix=f'{API_PREFIX}/auth', tags=['auth'])
    app.include_router(routes_users.router, prefix=f'{API_PREFIX}/users', tags=['users'])
    app.include_router(routes_categories.router, prefix=f'{API_PREFIX}/categories', tags=['categories'])
    app.include_router(routes_products.router, prefix=f'{API_PREFIX}/products', tags=['products'])
    app.include_router(routes_orders.router, prefix=f'{API_PREFIX}/orders', tags=['orders'])

    logger.info('Storefront %s ready (%d routes)', VERSION, len(app.routes))
    return app

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

load_dotenv("pointrally/.env")

from pointrally import containers  # noqa: E402
from pointrally.config import settings  # noqa: E402
from pointrally.core.exception_handlers import (  # noqa: E402
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from pointrally.core.exceptions import BaseAPIException  # noqa: E402
from pointrally.core.logging_middleware import LoggingMiddleware  # noqa: E402
from pointrally.logging_config import setup_logging  # noqa: E402
from pointrally.routers import (  # noqa: E402
    health_router,
    point_router,
    profile_router,
    reward_router,
    team_router,
)

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("pointrally")

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)
app.container = containers.Container()  # type: ignore

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(BaseAPIException, handle_base_api_exception)
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(Exception, handle_unexpected_error)


@app.get("/")
def hello() -> dict:
    return {"message": f"{settings.APP_NAME} is running"}


app.include_router(health_router.router, prefix=settings.API_V1_STR)
app.include_router(profile_router.router, prefix=settings.API_V1_STR)
app.include_router(point_router.router, prefix=settings.API_V1_STR)
app.include_router(reward_router.router, prefix=settings.API_V1_STR)
app.include_router(team_router.router, prefix=settings.API_V1_STR)

logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")

handler = Mangum(app)

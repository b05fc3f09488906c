from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from tutor_availability.core.config import settings
from tutor_availability.core.database import init_db
from tutor_availability.core.exceptions import TutorAvailabilityException
from tutor_availability.api.v1.api import api_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    await init_db()


@app.exception_handler(TutorAvailabilityException)
async def handle_application_error(request: Request, exc: TutorAvailabilityException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.details})")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")

    content = {"error": exc.message}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    logger.info(f"{request.method} {request.url.path} rejected: invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} failed", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "details": str(exc)}
    )


@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} running"}


app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tutor_availability.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)

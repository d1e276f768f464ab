import os
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from core.config import setting
from core.repository import InMemorySwoshRepository, MongoSwoshRepository, SwoshRepository
from core.utils import generate_qr_code, generate_swish_qr_string, generate_swish_uri, swosh_from_request
from core.validation import validate_swosh_request
from schema import ErrorResponse, SwoshPreview, SwoshRequest, SwoshUrlResponse

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")


def create_repository() -> SwoshRepository:
    if setting.STORAGE_BACKEND == "memory":
        logger.warning("Using in-memory storage, Swoshes are lost on restart")
        return InMemorySwoshRepository()
    return MongoSwoshRepository.from_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    repository = create_repository()
    if isinstance(repository, MongoSwoshRepository):
        await repository.ensure_indexes()
    app.state.repository = repository
    logger.info(f"Started with {setting.STORAGE_BACKEND} storage")
    yield
    await repository.close()


def get_repository(request: Request) -> SwoshRepository:
    return request.app.state.repository


# Rate limiter setup
limiter = Limiter(key_func=get_remote_address)

# Initialize FastAPI app
app = FastAPI(
    title="Swosh",
    description="Short links for Swish payment requests",
    version="1.0.0",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def error_response(status_code: int, reason: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(reason=reason).model_dump())


def redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=302)


# Middleware for request logging
@app.middleware("http")
async def log_request(request: Request, call_next):
    # Record request time for monitoring
    start_time = time.time()
    request_id = str(uuid.uuid4())

    # Add request_id to request state for logging
    request.state.request_id = request_id

    client_host = request.client.host if request.client else "unknown"
    logger.info(f"Request {request_id}: {request.method} {request.url.path} from {client_host}")

    try:
        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"Response {request_id}: Status {response.status_code}, "
            f"Completed in {process_time:.3f}s"
        )

        # Add request ID to response headers for tracing
        response.headers["X-Request-ID"] = request_id

        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            f"Error {request_id}: {str(e)}, "
            f"Occurred after {process_time:.3f}s"
        )
        raise


@app.get("/", response_class=HTMLResponse)
async def render_index(request: Request):
    return templates.TemplateResponse(request, "index.html", {"base_url": setting.BASE_URL})


@app.post(
    "/api/create",
    response_model=SwoshUrlResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(setting.RATE_LIMIT)
async def create_swosh(request: Request, repo: SwoshRepository = Depends(get_repository)):
    """Validate a payment request, store it and return its short id"""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    try:
        swosh_request = SwoshRequest.model_validate(await request.json())
    except ValueError as exc:
        # JSONDecodeError, UnicodeDecodeError, ValidationError and oversized int literals
        logger.warning(f"Rejected {request_id}: unreadable body: {exc}")
        return error_response(400, "Invalid input format!")

    error = validate_swosh_request(swosh_request)
    if error is not None:
        logger.warning(f"Rejected {request_id}: {error.reason}")
        return JSONResponse(status_code=400, content=error.model_dump())

    swosh = swosh_from_request(swosh_request)
    try:
        swosh = await repo.save(swosh)
    except Exception as exc:
        logger.error(
            f"Unable to store Swosh for {request_id}: {exc}\n{traceback.format_exc()}"
        )
        return error_response(500, "Unable to generate Swosh!")

    logger.info(f"Created Swosh {swosh.id} for {request_id}")
    return JSONResponse(content=SwoshUrlResponse(id=swosh.id).model_dump())


@app.get("/preview/{swosh_id}", response_class=HTMLResponse)
async def render_preview(swosh_id: str, request: Request, repo: SwoshRepository = Depends(get_repository)):
    swosh = await repo.find_by_id(swosh_id)
    if swosh is None:
        return redirect_home()

    preview = SwoshPreview(
        id=swosh.id,
        payee=swosh.payee,
        amount=swosh.amount,
        description=swosh.description,
        expires_on=swosh.expires_on,
        swish_uri=generate_swish_uri(swosh),
        qr_code=generate_qr_code(generate_swish_qr_string(swosh)),
    )
    return templates.TemplateResponse(request, "preview.html", {"swosh": preview})


@app.get("/{swosh_id}")
async def redirect_to_swish(swosh_id: str, repo: SwoshRepository = Depends(get_repository)):
    swosh = await repo.find_by_id(swosh_id)
    if swosh is None:
        logger.info(f"Unknown Swosh {swosh_id}, redirecting home")
        return redirect_home()
    return RedirectResponse(url=generate_swish_uri(swosh), status_code=302)


if __name__ == "__main__":
    # Launch the FastAPI app
    import uvicorn
    port = int(os.environ.get("PORT", setting.PORT))
    uvicorn.run("app:app", host=setting.HOST, port=port, reload=False)

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "The given data was invalid."


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    content = {"message": exc.base_error.message, "error": error_dict}
    if exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server Error", "error": error_dict},
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = {}
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "request"
        errors.setdefault(field, []).append(item.get("msg", "Invalid value"))
    logger.warning(f"Validation error on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": VALIDATION_MESSAGE,
            "error": {"code": "VALIDATION_ERROR", "message": VALIDATION_MESSAGE},
            "errors": errors,
        },
    )


def create_app(ApplicationConfig) -> FastAPI:
    from todosync.depends import verify_csrf

    dependencies = [Depends(verify_csrf)] if ApplicationConfig.CSRF_ENABLED else []
    app = FastAPI(title="Todo API", version="0.1.0", dependencies=dependencies)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from todosync.api.routes import auth, categories, csrf, health_check, todos

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(health_check.router, prefix=prefix, tags=["Health"])
    app.include_router(csrf.router, prefix=prefix, tags=["CSRF"])
    app.include_router(auth.router, prefix=prefix, tags=["Authentication"])
    app.include_router(todos.router, prefix=prefix, tags=["Todos"])
    app.include_router(categories.router, prefix=prefix, tags=["Categories"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app

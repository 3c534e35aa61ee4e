from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.src import schemas
from app.src.constants import API_TITLE, API_VERSION
from app.src.exceptions import InternalError, formatValidationErrors, logException
from app.api.controller import route_api


app = FastAPI(title=API_TITLE, version=API_VERSION)

origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(route_api)


# Every error is rendered in the same envelope as the successful responses
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, e: StarletteHTTPException):
    return JSONResponse(
        status_code=e.status_code,
        content={"success": False, "message": str(e.detail)},
        headers=getattr(e, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, e: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": formatValidationErrors(e.errors())},
        headers={"X-Error": "InvalidValue"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, e: Exception):
    logException(e)
    return JSONResponse(
        status_code=InternalError.status_code,
        content={"success": False, "message": InternalError.detail},
        headers=InternalError.headers,
    )


# Health check endpoint
@app.get("/health", tags=["Health Check"], response_model=schemas.HealthStatus)
async def health_check():
    return {"status": "OK", "version": API_VERSION}

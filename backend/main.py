"""
FastAPI Backend - Voice recording API
"""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import CORS_ORIGINS, LOG_LEVEL
from database import check_database_connection
from routes.auth_routes import router as auth_router
from routes.recording_routes import router as recording_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Voice Recorder API",
    description="Record, store and play back voice recordings",
    version="1.0.0"
)

# Allow requests from the frontend origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Clean up errors to make them JSON serializable
    clean_errors = []
    for error in exc.errors():
        error_copy = error.copy()
        if "input" in error_copy:
            # Convert UploadFile, bytes or other objects to string for logging/JSON
            error_copy["input"] = str(error_copy["input"])
        if "ctx" in error_copy:
            error_copy["ctx"] = {key: str(value) for key, value in error_copy["ctx"].items()}
        clean_errors.append(error_copy)
    
    logger.warning(f"Validation Error: {clean_errors}")
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({"success": False, "message": "Invalid request data", "detail": clean_errors}),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "detail": None},
    )


# Include routers
app.include_router(auth_router)
app.include_router(recording_router)


@app.get("/")
async def root():
    """Liveness check"""
    return {
        "status": "online",
        "message": "Voice Recorder API is running"
    }


@app.get("/health")
async def health_check():
    """Application health including database connectivity"""
    db_status = "connected" if check_database_connection() else "disconnected"
    
    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "database": db_status
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CORS_ORIGINS, LOG_DIR, LOG_LEVEL
from database import engine, Base
from logging_config import log_request, setup_logging
from services.errors import DuesError

# --- IMPORT ROUTERS (APIs) ---
from routers import dues, people, stats, public

# --- IMPORT MODELS (registers the tables on Base) ---
from models.dues import Due
from models.people import Student, Faculty
from models.departments import Department

setup_logging(LOG_DIR, level=LOG_LEVEL.upper())
logger = logging.getLogger(__name__)

# --- CREATE DATABASE TABLES ---
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Campus Dues Clearance")

# ==========================================
#   CORS (frontend origins from config)
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==========================================
#   ACCESS LOG
# ==========================================
@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    log_request(request.method, request.url.path, response.status_code, started)
    return response


# ==========================================
#   ERRORS -> JSON
# ==========================================
@app.exception_handler(DuesError)
async def dues_error_handler(request: Request, exc: DuesError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    elif exc.status_code == 409:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# --- REGISTER ROUTERS ---
app.include_router(dues.router)
app.include_router(people.router)
app.include_router(stats.router)
app.include_router(public.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

# app/main.py
from app.core.config import get_settings
from app.core.logging import setup_logging, get_logger
setup_logging(get_settings().app.log_level)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.middleware import RequestContextMiddleware
from routes import api_router

app = FastAPI(title=get_settings().app.name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173", "*"],  # à restreindre en prod
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)
app.include_router(api_router)

log = get_logger(__name__)
log.info("App ready.")

# http://127.0.0.1:8050/docs#/
# uvicorn app.main:app --reload --port 8050

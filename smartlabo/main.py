# smartlabo/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pathlib import Path

from smartlabo.core.config import settings
from smartlabo.api.router import api_router
from smartlabo.api.exception_handlers import register_exception_handlers

app = FastAPI(
    title=settings.PROJECT_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)

# Media mount (generated invoices live under STORAGE_DIR/invoices)
MEDIA_ROOT = Path(settings.STORAGE_DIR).resolve()
MEDIA_ROOT.mkdir(parents=True, exist_ok=True)
app.mount(settings.MEDIA_URL,
          StaticFiles(directory=str(MEDIA_ROOT)),
          name="media")


# Health
@app.get("/")
def root():
    return {"message": "Smart Labo billing API running", "version": "v1"}

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mgnrega_dashboard.api.routes import router as api_router
from mgnrega_dashboard.core.config import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("api")

app = FastAPI(title="MGNREGA Dashboard API", version="1.0")

# Browser front end is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(api_router)
logger.info(f"Upstream API: {settings.API_BASE_URL} (timeout {settings.REQUEST_TIMEOUT}s)")


@app.get("/")
def root():
    return {
        "message": "MGNREGA dashboard backend is running",
        "upstream": settings.API_BASE_URL,
    }

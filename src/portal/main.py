from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.portal.api.routes_chat import router as chat_proxy_router
from src.portal.api.v1.routes_auth import router as auth_router_v1
from src.portal.api.v1.routes_consultations import router as consultations_router_v1
from src.portal.api.v1.routes_specialties import router as specialties_router_v1
from src.portal.api.v1.routes_system import router as system_router_v1
from src.portal.api.v1.routes_transcripts import router as transcripts_router_v1
from src.portal.config import settings

app = FastAPI(title="Specialist Consultation Portal API")

# CORS configuration – permissive by default for development. Tighten via
# CORS_ALLOW_ORIGINS in production deployments.
allow_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    """Basic liveness probe for the API root."""
    return {"status": "ok"}


# Chat proxy keeps its unversioned path.
app.include_router(chat_proxy_router, prefix="/api")

# Versioned API routers
app.include_router(system_router_v1, prefix="/api/v1")
app.include_router(specialties_router_v1, prefix="/api/v1")
app.include_router(auth_router_v1, prefix="/api/v1")
app.include_router(consultations_router_v1, prefix="/api/v1")
app.include_router(transcripts_router_v1, prefix="/api/v1")

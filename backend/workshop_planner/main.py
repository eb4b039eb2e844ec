import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workshop_planner.database import init_db
from workshop_planner.routes import workshop_assignments, workshop_preferences

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Workshop Planner API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workshop_assignments.router, prefix="/api", tags=["workshop-assignments"])
app.include_router(workshop_preferences.router, prefix="/api", tags=["workshop-preferences"])


@app.on_event("startup")
def on_startup():
    init_db()


@app.get("/api/health")
def health_check():
    return {"app_name": "Workshop Planner API", "status": "healthy"}

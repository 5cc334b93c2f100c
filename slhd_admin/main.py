from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slhd_admin.settings import Settings
from slhd_admin.logging_ import configure_logging
from slhd_admin.db import Base, engine
from slhd_admin.deps import require_api_key
from slhd_admin.routers import health, dashboard, stages, deadlines, users, logs

settings = Settings()
configure_logging(settings.log_level)

app = FastAPI(title="slhd-admin-api", version=settings.version)

origins = settings.cors_allow_origins
if isinstance(origins, str):
    origins = [o.strip() for o in origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)

api_deps = [Depends(require_api_key)]
app.include_router(health.router)
app.include_router(dashboard.router, prefix="/api", tags=["dashboard"], dependencies=api_deps)
app.include_router(stages.router, prefix="/api", tags=["stages"], dependencies=api_deps)
app.include_router(deadlines.router, prefix="/api", tags=["deadlines"], dependencies=api_deps)
app.include_router(users.router, prefix="/api", tags=["users"], dependencies=api_deps)
app.include_router(logs.router, prefix="/api", tags=["logs"], dependencies=api_deps)

@app.get("/")
def root():
    return {"service": "slhd-admin-api", "version": settings.version}

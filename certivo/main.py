import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from certivo.api.v1 import index
from certivo.api.v1 import certificates
from certivo.api.v1 import organizations
from certivo.api.v1 import settings as admin_settings
from certivo.api.v1 import verify
from certivo.api.v1 import me


from certivo.core.config import settings
from certivo.core.logging import setup_logging

setup_logging()

app = FastAPI(title=settings.app_name)

# Middlewares
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(index.router, prefix="/api/v1")
app.include_router(certificates.router,
                   prefix="/api/v1/admin/certificates", tags=["Certificates"])
app.include_router(organizations.router,
                   prefix="/api/v1/admin/organizations", tags=["Organizations"])
app.include_router(admin_settings.router,
                   prefix="/api/v1/admin/settings", tags=["Settings"])
app.include_router(verify.router, prefix="/api/v1/verify", tags=["Verification"])
app.include_router(me.router, prefix="/api/v1/me", tags=["Holder"])

# Static files serving (QR codes)
app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=None,
    )

# stay_ledger/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stay_ledger.config import ALLOWED_ORIGINS
from stay_ledger.logging_config import setup_logging
from stay_ledger.middleware import RequestIDMiddleware
from stay_ledger.routes.availability import router as availability_router
from stay_ledger.routes.folios import router as folios_router
from stay_ledger.routes.health import router as health_router
from stay_ledger.routes.metrics import router as metrics_router
from stay_ledger.routes.reports import router as reports_router
from stay_ledger.routes.stays import router as stays_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Stay Ledger API",
    description="Room booking, stay lifecycle and folio ledger for hotel properties",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(availability_router, tags=["Availability"])
app.include_router(stays_router, tags=["Stays"])
app.include_router(folios_router, tags=["Folios"])
app.include_router(reports_router, tags=["Reports"])

logger.info("application_initialized", routes=len(app.routes))

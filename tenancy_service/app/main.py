import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, tenancy_engine
from shared.exception_handler import setup_exception_handlers

from .models.financials import transactions
from .models.leasing_tenants import tenants
from .models.onboarding import outbox_tasks
from .models.property_catalog import properties
from .router.financials import transactions_router
from .router.leasing_tenants import tenants_router
from .router.onboarding import outbox_router, tenant_wizard_router
from .router.property_catalog import properties_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Tenancy Service API")

# Create all tables
Base.metadata.create_all(bind=tenancy_engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(properties_router.router)
app.include_router(tenants_router.router)
app.include_router(transactions_router.router)
app.include_router(tenant_wizard_router.router)
app.include_router(outbox_router.router)


@app.get("/")
def root():
    return {"message": "Tenancy Service API is running"}

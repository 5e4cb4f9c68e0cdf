from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from odr_api import __version__
from odr_api.config.settings import get_settings
from odr_api.utils.logging_config import configure_logging
from odr_api.routes.disputes import router as disputes_router
from odr_api.routes.parties import router as parties_router
from odr_api.routes.mediation import router as mediation_router
from odr_api.routes.settlements import router as settlements_router
from odr_api.routes.activities import router as activities_router

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title="ODR Mediation API",
    description="Dispute resolution workflow with AI-assisted mediation",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(disputes_router, prefix="/api", tags=["Disputes"])
app.include_router(parties_router, prefix="/api", tags=["Parties"])
app.include_router(mediation_router, prefix="/api", tags=["Mediation"])
app.include_router(settlements_router, prefix="/api", tags=["Settlements"])
app.include_router(activities_router, prefix="/api", tags=["Activities"])


@app.get("/health")
def health():
    return {"status": "Up and running!"}

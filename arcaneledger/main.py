from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arcaneledger.api import health_router, proxy_router
from arcaneledger.config import settings

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("arcaneledger"),
)

app.include_router(health_router)
app.include_router(proxy_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

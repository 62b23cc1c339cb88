from arcaneledger.api.health import router as health_router
from arcaneledger.api.proxy import router as proxy_router

__all__ = [
    "health_router",
    "proxy_router",
]

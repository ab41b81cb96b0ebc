"""API routers."""

from marketplace.routers.responses import router as responses_router
from marketplace.routers.confirmations import router as confirmations_router
from marketplace.routers.top import router as top_router
from marketplace.routers.listings import router as listings_router

__all__ = [
    "responses_router",
    "confirmations_router",
    "top_router",
    "listings_router",
]

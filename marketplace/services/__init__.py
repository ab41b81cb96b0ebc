"""Service layer modules."""

# Import service modules (not individual functions) for cleaner access
from marketplace.services import listing_registry
from marketplace.services import listing_store
from marketplace.services import promotion_window
from marketplace.services import promotion_ranking
from marketplace.services import response_service
from marketplace.services import confirmation_service
from marketplace.services import chat_service
from marketplace.services import review_service
from marketplace.services import engagement_service
from marketplace.services import top_service
from marketplace.services import listing_service

__all__ = [
    "listing_registry",
    "listing_store",
    "promotion_window",
    "promotion_ranking",
    "response_service",
    "confirmation_service",
    "chat_service",
    "review_service",
    "engagement_service",
    "top_service",
    "listing_service",
]

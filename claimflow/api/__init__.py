# API module
from .endpoints import router, supplements_router, parties_router

__all__ = ["router", "supplements_router", "parties_router"]

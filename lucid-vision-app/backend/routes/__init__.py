"""
Routes package for the Lucid Vision API.

This module aggregates all FastAPI APIRouter instances so they can be
imported centrally. It also provides a helper to register every router on
an application with a consistent versioned prefix.

NOTE:
Routers define prefixes like "/visions". The application mounts them under
a version path (e.g. "/v1"). Avoid putting the version segment inside
individual route modules to prevent duplicated paths ("/v1/v1/...").
"""

from __future__ import annotations
from typing import List, Tuple
from fastapi import FastAPI

# Individual routers
from routes.visions import router as visions_router

# Public re-export list
__all__ = [
    "visions_router",
    "all_routers",
    "register_all_routers",
    "list_routes_summary",
]

# Ordered collection (order can matter for overlapping paths)
all_routers = [
    visions_router,
]


def register_all_routers(app: FastAPI, *, version_prefix: str = "/v1") -> None:
    """Register all routers on the provided FastAPI application."""
    for router in all_routers:
        # Each router already has its own prefix, so we layer the version
        # prefix in front.
        app.include_router(router, prefix=version_prefix)


def list_routes_summary() -> List[Tuple[str, List[str]]]:
    """Return a lightweight (prefix, tags) summary for diagnostics."""
    summary: List[Tuple[str, List[str]]] = []
    for r in all_routers:
        prefix = getattr(r, "prefix", "")
        tags = getattr(r, "tags", [])
        summary.append((prefix, list(tags)))
    return summary

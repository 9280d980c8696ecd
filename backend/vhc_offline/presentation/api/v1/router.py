"""V1 API router, aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from vhc_offline.presentation.api.v1.endpoints.health import router as health_router
from vhc_offline.presentation.api.v1.endpoints.cache import router as cache_router
from vhc_offline.presentation.api.v1.endpoints.pending_operations import (
    router as pending_operations_router,
)
from vhc_offline.presentation.api.v1.endpoints.connectivity import router as connectivity_router
from vhc_offline.presentation.api.v1.endpoints.assessments import router as assessments_router
from vhc_offline.presentation.api.v1.endpoints.proxy import router as proxy_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(cache_router)
router.include_router(pending_operations_router)
router.include_router(connectivity_router)
router.include_router(assessments_router)
router.include_router(proxy_router)

"""
Version API

GET /version - Configured deployment version (session required)
"""

from fastapi import APIRouter, Depends

from napi.config import Settings
from napi.webui.dependencies import get_settings, require_session
from napi.webui.middleware.rate_limit import GENERAL, rate_limit

router = APIRouter()


@router.get(
    "/version",
    dependencies=[Depends(rate_limit(GENERAL)), Depends(require_session)],
)
async def get_version(settings: Settings = Depends(get_settings)):
    return {"version": settings.version}

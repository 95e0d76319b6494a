import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_generation_runner
from config import settings
from models.requests import DiscoverRequest
from models.responses import DiscoverResponse, HealthResponse
from services.discovery import registry as discovery_registry
from services.errors import ConfigurationError, NoResultsError
from services.occupations import registry as occupation_registry

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(
        status="ok",
        discovery_providers=discovery_registry.provider_status(),
        occupation_providers=occupation_registry.provider_status(),
        embeddings_enabled=settings.embeddings_enabled,
    )


@router.post("/discover", response_model=DiscoverResponse)
@limiter.limit("10/minute")
async def discover(request: Request, body: DiscoverRequest, run_generation=Depends(get_generation_runner)):
    if not any(o.strip() for o in body.outcomes) and not body.course_title.strip():
        raise HTTPException(status_code=400, detail="Course title or outcomes are required")

    try:
        return await run_generation(body)
    except NoResultsError:
        raise HTTPException(status_code=404, detail="No companies found for this course")
    except ConfigurationError as e:
        logger.error("Discovery unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Discovery service is not configured")
    except Exception:
        logger.exception("Discovery failed for %r", body.course_title)
        raise HTTPException(status_code=500, detail="Internal error while discovering companies")

"""FastAPI routes for submitting crawled pages and reading back results."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from pageprompt.generation.adapter import ConfigurationError
from pageprompt.generation.runner import (
    ModelAuthenticationError,
    ModelCallError,
    ModelRateLimitError,
)
from pageprompt.models import PageResult
from pageprompt.pages.schemas import PageRequest, SkippedResponse
from pageprompt.pages.service import PageService

router = APIRouter(prefix="/api/pages", tags=["pages"])


def get_page_service() -> PageService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("PageService not initialized")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=None,
)
async def process_page(
    request: PageRequest,
    service: PageService = Depends(get_page_service),
) -> PageResult | JSONResponse:
    try:
        outcome = await service.process(request)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ModelAuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except ModelRateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except ModelCallError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if outcome.record is None:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=SkippedResponse(url=request.url).model_dump(),
        )
    return outcome.record


@router.get("/results")
async def list_results(
    service: PageService = Depends(get_page_service),
) -> list[PageResult]:
    return await service.sink.records()

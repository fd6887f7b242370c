from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from advocates_api.services.get_advocate_data import get_advocates_data, get_filter_options_data
from advocates_api.services.record_store import AdvocateStore, SqliteAdvocateStore
from advocates_api.request_model.advocate_request import AdvocateSearchRequest
from advocates_api.models.advocate_model import PaginatedAdvocateResponse, FilterOptionsResponse, ErrorResponse
from advocates_api.config import settings
import logging
import traceback

logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR_BODY = {"error": "Internal Server Error"}


def get_advocate_store() -> AdvocateStore:
    return SqliteAdvocateStore(settings.database_path)


@router.get("/")
async def root():
    logger.info("📍 Root endpoint called")
    return {"status": "ok", "message": settings.app_name}

@router.get("/api/health")
async def api_health():
    logger.info("📍 API Health endpoint called (/api/health)")
    return {"status": "ok", "service": settings.app_name}

@router.get("/health")
async def health():
    logger.info("📍 Health endpoint called (/health)")
    return {"status": "ok", "service": settings.app_name}

@router.get(
    "/api/advocates",
    response_model=PaginatedAdvocateResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_advocates(
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    search_term: Optional[str] = Query(default="", alias="searchTerm"),
    selected_city: Optional[str] = Query(default=None, alias="selectedCity"),
    selected_specialty: Optional[str] = Query(default=None, alias="selectedSpecialty"),
    store: AdvocateStore = Depends(get_advocate_store),
):
    """GET endpoint to search, filter and page through advocates"""
    request = AdvocateSearchRequest(
        page=page,
        search_term=search_term,
        selected_city=selected_city,
        selected_specialty=selected_specialty,
    )
    logger.info("=" * 80)
    logger.info("📍 Advocates endpoint called")
    logger.info(f"📨 Received request: {request.model_dump()}")
    logger.info("=" * 80)

    try:
        result = await get_advocates_data(
            store,
            request.to_query_description(),
            page=request.page,
        )
        logger.info(f"✅ Request processed successfully, returning {len(result.data)} advocates")
        return result
    except Exception as e:
        logger.error(f"💥 Error in /api/advocates GET: {str(e)}")
        logger.error(f"🔧 Error type: {type(e)}")
        logger.error(f"📋 Traceback: {traceback.format_exc()}")
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

@router.get(
    "/api/advocates/filters",
    response_model=FilterOptionsResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_advocate_filters(store: AdvocateStore = Depends(get_advocate_store)):
    """Distinct city and specialty options across every advocate"""
    logger.info("📍 Advocate filters endpoint called")

    try:
        return await get_filter_options_data(store)
    except Exception as e:
        logger.error(f"💥 Error in /api/advocates/filters GET: {str(e)}")
        logger.error(f"📋 Traceback: {traceback.format_exc()}")
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from advocates_api.controllers.controller import router
from advocates_api.config import settings
import logging
import time
import traceback

# Configure logging with detailed format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Search, filter and page through advocates",
    version=settings.app_version,
    debug=settings.debug
)

# Global request logging middleware - MUST be added FIRST
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.info(f"🌐 INCOMING REQUEST {request.method} {request.url.path}")
    logger.info(f"   Query Params: {dict(request.query_params)}")
    logger.info(f"   Client IP: {request.client.host if request.client else 'Unknown'}")

    try:
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000

        logger.info(f"✅ REQUEST COMPLETED {request.url.path} - {response.status_code} in {process_time:.2f}ms")

        return response

    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error("=" * 80)
        logger.error(f"💥 REQUEST FAILED")
        logger.error(f"   Path: {request.url.path}")
        logger.error(f"   Error: {str(e)}")
        logger.error(f"   Process Time: {process_time:.2f}ms")
        logger.error("=" * 80)
        logger.error(f"📋 Traceback:\n{traceback.format_exc()}")
        raise

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info("🚀" + "=" * 79)
    logger.info("🚀 ADVOCATE SEARCH API - STARTING UP")
    logger.info("🚀" + "=" * 79)
    logger.info(f"📝 Title: {app.title}")
    logger.info(f"📝 Version: {app.version}")
    logger.info(f"🗄️ Database: {settings.database_path}")
    logger.info("✅ Application startup complete - ready to accept requests")

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑" + "=" * 79)
    logger.info("🛑 ADVOCATE SEARCH API - SHUTTING DOWN")
    logger.info("🛑" + "=" * 79)

# Include routers
app.include_router(router)

# Log all registered routes on startup
@app.on_event("startup")
async def log_routes():
    logger.info("📍" + "=" * 79)
    logger.info("📍 REGISTERED ROUTES:")
    for route in app.routes:
        if hasattr(route, 'methods'):
            methods = ', '.join(route.methods)
            logger.info(f"   {methods:8} {route.path}")
    logger.info("📍" + "=" * 79)

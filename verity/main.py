from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from verity.core.config import settings
from verity.api import analysis, negotiation, privacy, tools
from verity.schemas.analysis import ErrorResponse

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Verity API",
    description="Contract risk analysis and negotiation rehearsal for freelancers",
    version=settings.API_VERSION,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for now
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(analysis.router, prefix="/api/analysis", tags=["analysis"])
app.include_router(negotiation.router, prefix="/api/negotiation", tags=["negotiation"])
app.include_router(privacy.router, prefix="/api/privacy", tags=["privacy"])
app.include_router(tools.router, prefix="/api/tools", tags=["tools"])


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as ErrorResponse payloads."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    body = ErrorResponse(message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)


@app.get("/", tags=["root"])
async def read_root():
    """Root endpoint providing API information."""
    return {
        "app": settings.APP_NAME,
        "description": "Contract risk analysis and negotiation rehearsal for freelancers",
        "version": settings.API_VERSION,
        "status": "operational"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("verity.main:app", host="0.0.0.0", port=8000, reload=True)

"""
Northern Mountains Copilot API Server

FastAPI server exposing the conversational shopping assistant to the
storefront.

Run with: uvicorn copilot.server:app --reload --port 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from copilot.config import settings
from copilot.log import setup_logging
from copilot.chat.endpoints import router as copilot_router, close_copilot_service

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_copilot_service()


# Initialize FastAPI app
app = FastAPI(
    title="Northern Mountains Copilot API",
    description="Conversational shopping assistant with catalog and basket tools",
    version="1.0.0",
    lifespan=lifespan
)

# Enable CORS for the storefront
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(copilot_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "llm_model": settings.llm_model,
        "catalog_api_url": settings.catalog_api_url,
        "basket_api_url": settings.basket_api_url
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

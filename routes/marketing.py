"""
Marketing content API routes.
"""

from fastapi import APIRouter
import structlog

from models.marketing import ContentGenerationRequest, GeneratedContent
from routes.products import handle_error
from services.marketing_service import get_marketing_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/generate-content", response_model=GeneratedContent)
async def generate_content(body: ContentGenerationRequest):
    """
    Generate a description, social post or ad for a product.

    Falls back to static content when the AI service is unavailable;
    `source` tells which one was used.
    """
    try:
        return get_marketing_service().generate(body)
    except Exception as e:
        return handle_error(e)

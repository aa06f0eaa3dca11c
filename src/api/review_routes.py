"""
Review Analysis API Routes
==========================

POST /api/reviews/analysis              — analyze reviews posted in the request body.
GET  /api/reviews/{business}/analysis   — analyze a business's stored reviews.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from src.data.config import get_settings
from src.reviews.enhanced_analyzer import EnhancedReviewAnalyzer
from src.reviews.review_loader import load_reviews_from_db, reviews_from_rows
from src.reviews.review_models import BusinessContext

from .models import AnalysisRequest, AnalysisResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


def _analyzer() -> EnhancedReviewAnalyzer:
    return EnhancedReviewAnalyzer(get_settings().analysis.to_analysis_config())


@router.post("/analysis", response_model=AnalysisResponse)
async def analyze_reviews(request: AnalysisRequest):
    """Run the full analysis over reviews supplied by the caller."""
    try:
        reviews = reviews_from_rows(r.model_dump() for r in request.reviews)
        context = None
        if request.context is not None:
            context = BusinessContext.from_dict(request.context.model_dump())

        result = _analyzer().analyze(reviews, context)
        return AnalysisResponse(**result.to_dict())

    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Review analysis failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{business}/analysis", response_model=AnalysisResponse)
async def analyze_business(
    business: str,
    limit: int = Query(5000, ge=1, le=50000),
    business_type: str = Query("", description="Business type, e.g. restaurant or museum"),
    country: str = Query("", description="Country name or ISO code"),
):
    """Analyze the stored reviews of one business."""
    from . import db

    try:
        with db.get_connection() as conn:
            reviews = load_reviews_from_db(conn, business, limit=limit)

        if not reviews:
            raise HTTPException(
                status_code=404,
                detail=f"No reviews stored for {business}.",
            )

        context = None
        if business_type or country:
            context = BusinessContext.from_dict({
                "business_type": business_type,
                "location": {"country": country},
            })

        result = _analyzer().analyze(reviews, context)
        return AnalysisResponse(**result.to_dict())

    except HTTPException:
        raise
    except ConnectionError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Review analysis failed for {business}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

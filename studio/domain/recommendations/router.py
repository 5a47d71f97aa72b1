"""Recommendation router - AI assisted package search"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...services.gemini import get_gemini_client
from .schemas import QuickSearchRequest, RecommendRequest
from .service import RecommendationService

router = APIRouter(prefix="/gemini", tags=["Recommendations"])


def get_recommendation_service(
    db: Session = Depends(get_db),
    gemini=Depends(get_gemini_client),
) -> RecommendationService:
    """Dependency injection for RecommendationService"""
    return RecommendationService(db, gemini=gemini)


# Plain def: the Gemini client is blocking, so these run in the threadpool
@router.post("/recommend")
def recommend_packages(data: RecommendRequest, service: RecommendationService = Depends(get_recommendation_service)):
    return service.recommend(data.query)


@router.post("/quick-search")
def quick_search(data: QuickSearchRequest, service: RecommendationService = Depends(get_recommendation_service)):
    return service.quick_search(data.search, data.limit)


@router.get("/package/{package_id}")
def get_package_details(package_id: str, service: RecommendationService = Depends(get_recommendation_service)):
    return service.get_package_details(package_id)

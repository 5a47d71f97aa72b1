"""Recommendation repository - Package lookups for search"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Package


class RecommendationRepository:
    """Repository for package search queries"""

    @staticmethod
    def get_active_packages(db: Session) -> list[Package]:
        """Active packages, popular first then cheapest first"""
        return (
            db.query(Package)
            .options(joinedload(Package.company))
            .filter(Package.status == "active")
            .order_by(Package.is_popular.desc(), Package.price.asc())
            .all()
        )

    @staticmethod
    def get_active_package(db: Session, package_id: str) -> Optional[Package]:
        return (
            db.query(Package)
            .options(joinedload(Package.company))
            .filter(Package.id == package_id, Package.status == "active")
            .first()
        )

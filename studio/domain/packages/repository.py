"""Package repository - Database operations for packages"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Company, Package


class PackageRepository:
    """Repository for package database operations"""

    @staticmethod
    def get_company(db: Session, company_id: str) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_all(db: Session) -> list[Package]:
        return db.query(Package).order_by(Package.created_at.desc()).all()

    @staticmethod
    def get_by_company(db: Session, company_id: str) -> list[Package]:
        return (
            db.query(Package)
            .filter(Package.company_id == company_id)
            .order_by(Package.created_at.desc())
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, package_id: str) -> Optional[Package]:
        return db.query(Package).filter(Package.id == package_id).first()

    @staticmethod
    def create(db: Session, **package_data) -> Package:
        package = Package(**package_data)
        db.add(package)
        db.commit()
        db.refresh(package)
        return package

    @staticmethod
    def save(db: Session, obj):
        db.commit()
        db.refresh(obj)
        return obj

    @staticmethod
    def delete(db: Session, package: Package) -> None:
        db.delete(package)
        db.commit()

"""Company repository - Database operations for companies and password resets"""

from typing import Optional, Union

from sqlalchemy.orm import Session

from ...models import Company, Member

Account = Union[Company, Member]


class CompanyRepository:
    """Repository for company database operations"""

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Company]:
        return db.query(Company).filter(Company.email == email).first()

    @staticmethod
    def get_by_id(db: Session, company_id: str) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def email_in_use(db: Session, email: str) -> bool:
        """Company and member logins share one email namespace"""
        return (
            db.query(Company.id).filter(Company.email == email).first() is not None
            or db.query(Member.id).filter(Member.email == email).first() is not None
        )

    @staticmethod
    def get_account(db: Session, email: str, user_type: str) -> Optional[Account]:
        model = Company if user_type == "company" else Member
        return db.query(model).filter(model.email == email).first()

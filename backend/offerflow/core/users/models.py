"""
User model
"""

from sqlalchemy import Column, String, Enum as SQLEnum
import enum
from offerflow.core.common.base_model import BaseModel
from offerflow.core.approvals.statuses import enum_values


class UserRole(str, enum.Enum):
    """User role enum"""
    INVESTOR = "investor"
    STARTUP = "startup"
    INVESTMENT_ADVISOR = "investment_advisor"
    ADMIN = "admin"


class User(BaseModel):
    """
    User model

    Advisor affiliation fields:
    - advisor_code: code issued to an investment advisor (advisors only)
    - investment_advisor_code_entered: advisor code typed in by an investor at registration
    - investment_advisor_code: advisor code assigned to an investor after the advisor accepted
    Blank strings in either affiliation field mean "no advisor".
    """

    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    role = Column(SQLEnum(UserRole, name="user_role", values_callable=enum_values), nullable=False, default=UserRole.INVESTOR)

    advisor_code = Column(String(50), unique=True, nullable=True, index=True)
    investment_advisor_code = Column(String(50), nullable=True, index=True)
    investment_advisor_code_entered = Column(String(50), nullable=True, index=True)

"""
Advisor directory - read-only affiliation facts about parties

The engine only depends on the AdvisorDirectory protocol; SqlAdvisorDirectory
answers it from the users and startups tables.
"""

from typing import Mapping, Optional, Protocol, Set
from uuid import UUID

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from offerflow.core.users.models import User
from offerflow.core.startups.models import Startup


def normalize_advisor_code(code: Optional[str]) -> Optional[str]:
    """Strip an advisor code; None, empty and whitespace-only codes all mean no advisor"""
    if code is None:
        return None
    code = str(code).strip()
    return code or None


class AdvisorDirectory(Protocol):
    def advisor_code_of_party(self, party_id: UUID) -> Optional[str]:
        ...

    def has_advisor_affiliation(self, party_id: UUID) -> bool:
        ...

    def issued_advisor_code(self, user_id: UUID) -> Optional[str]:
        ...

    def startup_owner_id(self, startup_id: UUID) -> Optional[UUID]:
        ...

    def startup_ids_owned_by(self, user_id: UUID) -> Set[UUID]:
        ...

    def parties_advised_by(self, advisor_code: str) -> Set[UUID]:
        ...


class SqlAdvisorDirectory:
    """AdvisorDirectory backed by the users / startups tables of the current session"""

    def __init__(self, db: Session):
        self.db = db

    def advisor_code_of_party(self, party_id: UUID) -> Optional[str]:
        """
        Advisor code governing a party.

        Investors: the code entered at registration wins over the assigned one.
        Startups: the startup's own investment_advisor_code.
        """
        user = self.db.get(User, party_id)
        if user is not None:
            return (
                normalize_advisor_code(user.investment_advisor_code_entered)
                or normalize_advisor_code(user.investment_advisor_code)
            )
        startup = self.db.get(Startup, party_id)
        if startup is not None:
            return normalize_advisor_code(startup.investment_advisor_code)
        return None

    def has_advisor_affiliation(self, party_id: UUID) -> bool:
        return self.advisor_code_of_party(party_id) is not None

    def issued_advisor_code(self, user_id: UUID) -> Optional[str]:
        user = self.db.get(User, user_id)
        if user is None:
            return None
        return normalize_advisor_code(user.advisor_code)

    def startup_owner_id(self, startup_id: UUID) -> Optional[UUID]:
        startup = self.db.get(Startup, startup_id)
        return startup.owner_user_id if startup is not None else None

    def startup_ids_owned_by(self, user_id: UUID) -> Set[UUID]:
        return set(self.db.execute(
            select(Startup.id).where(Startup.owner_user_id == user_id)
        ).scalars().all())

    def parties_advised_by(self, advisor_code: str) -> Set[UUID]:
        """Ids of users and startups whose current affiliation is `advisor_code`"""
        code = normalize_advisor_code(advisor_code)
        if code is None:
            return set()
        parties: Set[UUID] = set()
        users = self.db.execute(
            select(User).where(or_(
                User.investment_advisor_code_entered.isnot(None),
                User.investment_advisor_code.isnot(None),
            ))
        ).scalars().all()
        parties.update(
            user.id for user in users
            if (normalize_advisor_code(user.investment_advisor_code_entered)
                or normalize_advisor_code(user.investment_advisor_code)) == code
        )
        startups = self.db.execute(
            select(Startup.id, Startup.investment_advisor_code).where(Startup.investment_advisor_code.isnot(None))
        ).all()
        parties.update(startup_id for startup_id, startup_code in startups if normalize_advisor_code(startup_code) == code)
        return parties


def affiliations_for(directory: AdvisorDirectory, party_ids: Mapping) -> dict:
    """Party -> has an advisor, for the parties named on one item"""
    return {party: directory.has_advisor_affiliation(party_id) for party, party_id in party_ids.items()}

"""
Advisor directory tests - affiliation facts and blank-code handling
"""

import pytest
from uuid import uuid4

from offerflow.core.users.models import UserRole
from offerflow.services.lifecycle.directory import SqlAdvisorDirectory, normalize_advisor_code


@pytest.mark.parametrize("raw, expected", [
    (None, None),
    ("", None),
    ("   ", None),
    ("\t\n", None),
    (" ADV-1 ", "ADV-1"),
    ("ADV-1", "ADV-1"),
])
def test_normalize_advisor_code(raw, expected):
    assert normalize_advisor_code(raw) == expected


def test_blank_codes_are_not_an_affiliation(db_session, make_user, make_startup):
    directory = SqlAdvisorDirectory(db_session)
    investor = make_user(UserRole.INVESTOR, entered="  ", assigned="")
    startup = make_startup(advisor_code=" ")

    assert directory.has_advisor_affiliation(investor.id) is False
    assert directory.has_advisor_affiliation(startup.id) is False


def test_entered_code_wins_over_assigned(db_session, make_user):
    directory = SqlAdvisorDirectory(db_session)
    investor = make_user(UserRole.INVESTOR, entered="ADV-9", assigned="ADV-1")

    assert directory.advisor_code_of_party(investor.id) == "ADV-9"


def test_assigned_code_used_when_entered_is_blank(db_session, make_user):
    directory = SqlAdvisorDirectory(db_session)
    investor = make_user(UserRole.INVESTOR, entered=" ", assigned="ADV-1")

    assert directory.advisor_code_of_party(investor.id) == "ADV-1"
    assert directory.has_advisor_affiliation(investor.id) is True


def test_startup_affiliation_and_owner(db_session, make_startup):
    directory = SqlAdvisorDirectory(db_session)
    startup = make_startup(advisor_code="ADV-2")

    assert directory.advisor_code_of_party(startup.id) == "ADV-2"
    assert directory.startup_owner_id(startup.id) == startup.owner_user_id
    assert directory.startup_ids_owned_by(startup.owner_user_id) == {startup.id}


def test_unknown_party_has_no_affiliation(db_session):
    directory = SqlAdvisorDirectory(db_session)

    assert directory.has_advisor_affiliation(uuid4()) is False
    assert directory.startup_owner_id(uuid4()) is None


def test_parties_advised_by(db_session, make_user, make_startup):
    directory = SqlAdvisorDirectory(db_session)
    advisor = make_user(UserRole.INVESTMENT_ADVISOR, advisor_code="ADV-1")
    advised = make_user(UserRole.INVESTOR, entered=" ADV-1 ")
    overridden = make_user(UserRole.INVESTOR, entered="ADV-7", assigned="ADV-1")
    other = make_user(UserRole.INVESTOR, assigned="ADV-2")
    advised_startup = make_startup(advisor_code="ADV-1")

    parties = directory.parties_advised_by("ADV-1")

    assert directory.issued_advisor_code(advisor.id) == "ADV-1"
    assert advised.id in parties
    assert advised_startup.id in parties
    assert overridden.id not in parties
    assert other.id not in parties
    assert directory.parties_advised_by("   ") == set()

"""CHECK constraints on stored enum columns track the domain enums."""

import pytest
from sqlalchemy import CheckConstraint, select
from sqlalchemy.exc import IntegrityError

from housing_kernel.domain.application_lifecycle import ApplicationStatus
from housing_kernel.domain.registration_lifecycle import RegistrationStatus
from housing_kernel.domain.values import FlatType, MaritalStatus, Role
from housing_kernel.models.application import ApplicationModel
from housing_kernel.models.person import Person, PersonRole
from housing_kernel.models.project import FlatInventoryModel
from housing_kernel.models.registration import RegistrationModel


def _check_text(model, name: str) -> str:
    for constraint in model.__table__.constraints:
        if isinstance(constraint, CheckConstraint) and constraint.name == name:
            return str(constraint.sqltext)
    raise AssertionError(f"{model.__tablename__} has no constraint {name}")


@pytest.mark.parametrize(
    "model, name, enum_cls",
    [
        (ApplicationModel, "ck_applications_valid_status", ApplicationStatus),
        (RegistrationModel, "ck_registrations_valid_status", RegistrationStatus),
        (Person, "ck_persons_marital_status", MaritalStatus),
        (PersonRole, "ck_person_roles_role", Role),
        (FlatInventoryModel, "ck_flat_inventory_flat_type", FlatType),
    ],
)
def test_check_lists_every_enum_value(model, name, enum_cls):
    text = _check_text(model, name)
    for member in enum_cls:
        assert f"'{member.value}'" in text


def test_unknown_marital_status_rejected_by_database(session, people):
    person = session.execute(select(Person).where(Person.nric == people["single"])).scalar_one()
    with pytest.raises(IntegrityError):
        with session.begin_nested():
            person.marital_status = "widowed"
            session.flush()


def test_rows_get_updated_at(session, people):
    person = session.execute(select(Person).where(Person.nric == people["single"])).scalar_one()
    assert person.updated_at is not None

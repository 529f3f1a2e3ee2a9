from unittest.mock import MagicMock

import pytest

from features.fingerprints.application.dto import FingerprintInput
from features.fingerprints.application.services import FingerprintServices
from features.fingerprints.application.use_cases import (
    EnrollFingerprintUseCase,
    VerifyFingerprintUseCase,
)
from features.fingerprints.domain.exceptions import (
    FingerprintAlreadyEnrolledError,
    FingerprintUserNotFoundError,
    FingerprintValidationError,
)
from features.fingerprints.domain.models import fingerprint_digest
from features.fingerprints.infrastructure.fingerprint_store import FingerprintStore
from features.fingerprints.infrastructure.models import FingerprintEntity


def _services() -> FingerprintServices:
    return FingerprintServices(fingerprint_store=FingerprintStore())


def test_enroll_then_verify(make_user):
    student = make_user()
    services = _services()

    enrolled = EnrollFingerprintUseCase(services).execute(FingerprintInput(student.id, "template-a"))

    assert enrolled.id is not None
    assert enrolled.user_id == student.id
    verify = VerifyFingerprintUseCase(services)
    assert verify.execute(FingerprintInput(student.id, "template-a")) is True
    assert verify.execute(FingerprintInput(student.id, "template-b")) is False


def test_only_digest_is_stored(make_user):
    student = make_user()
    EnrollFingerprintUseCase(_services()).execute(FingerprintInput(student.id, "template-a"))

    entity = FingerprintEntity.query.filter_by(user_id=student.id).one()

    assert entity.data_digest == fingerprint_digest("template-a")
    assert "template-a" not in entity.data_digest


def test_same_data_is_scoped_per_user(make_user):
    first = make_user()
    second = make_user()
    services = _services()

    EnrollFingerprintUseCase(services).execute(FingerprintInput(first.id, "shared"))
    EnrollFingerprintUseCase(services).execute(FingerprintInput(second.id, "shared"))

    assert VerifyFingerprintUseCase(services).execute(FingerprintInput(second.id, "shared")) is True


def test_duplicate_enrollment(make_user):
    student = make_user()
    services = _services()
    EnrollFingerprintUseCase(services).execute(FingerprintInput(student.id, "template-a"))

    with pytest.raises(FingerprintAlreadyEnrolledError):
        EnrollFingerprintUseCase(services).execute(FingerprintInput(student.id, "template-a"))


def test_store_maps_unique_violation(make_user):
    student = make_user()
    store = FingerprintStore()
    store.create(student.id, "template-a")

    with pytest.raises(FingerprintAlreadyEnrolledError):
        store.create(student.id, "template-a")


def test_enroll_unknown_user(app_context):
    with pytest.raises(FingerprintUserNotFoundError):
        EnrollFingerprintUseCase(_services()).execute(FingerprintInput(9999, "template-a"))


def test_verify_unknown_user_is_a_mismatch(app_context):
    assert VerifyFingerprintUseCase(_services()).execute(FingerprintInput(9999, "template-a")) is False


@pytest.mark.parametrize("data", ["", None, 42])
def test_data_is_required(data):
    store = MagicMock()
    services = FingerprintServices(fingerprint_store=store)

    with pytest.raises(FingerprintValidationError):
        EnrollFingerprintUseCase(services).execute(FingerprintInput(1, data))
    with pytest.raises(FingerprintValidationError):
        VerifyFingerprintUseCase(services).execute(FingerprintInput(1, data))
    store.create.assert_not_called()

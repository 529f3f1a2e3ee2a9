from datetime import datetime
from unittest.mock import MagicMock

import pytest

from features.certificates.application.dto import IssueCertificateInput, UploadExamResultInput
from features.certificates.application.services import CertificateServices
from features.certificates.application.use_cases import (
    IssueCertificateUseCase,
    ListStudentCertificatesUseCase,
    RevokeCertificateUseCase,
    UploadExamResultUseCase,
    VerifyCertificateUseCase,
)
from features.certificates.domain.exceptions import (
    CertificateIdCollisionError,
    CertificateIssuanceError,
    CertificateNotFoundError,
    CertificateValidationError,
    ExamResultNotFoundError,
    UserNotFoundError,
)
from features.certificates.domain.models import CertificateHolder, CertificateRecord, ExamResult
from features.certificates.infrastructure.certificate_store import CertificateStore
from features.certificates.infrastructure.exam_result_store import ExamResultStore, UserDirectory


def _services(ids=None) -> CertificateServices:
    services = CertificateServices(
        certificate_store=CertificateStore(),
        exam_result_store=ExamResultStore(),
        user_directory=UserDirectory(),
    )
    if ids is not None:
        services.id_generator = iter(ids).__next__
    return services


def _upload(services, user, **overrides):
    payload = {
        "user_id": user.id,
        "exam_name": "Mathematics Final",
        "year": 2024,
        "scores": {"algebra": 92, "geometry": 88},
    }
    payload.update(overrides)
    return UploadExamResultUseCase(services).execute(UploadExamResultInput(**payload))


def test_upload_exam_result_persists(make_user):
    student = make_user()
    services = _services()

    result = _upload(services, student, exam_name="  Mathematics Final ")

    assert result.id is not None
    assert result.exam_name == "Mathematics Final"
    assert result.scores == {"algebra": 92, "geometry": 88}
    assert services.exam_result_store.get(result.id).user_id == student.id


@pytest.mark.parametrize(
    "scores",
    [{}, {"math": "ninety"}, {"math": True}, {"math": float("nan")}, {"math": float("inf")}, {"math": 10**400}, {" ": 10}, ["math", 10]],
)
def test_upload_rejects_invalid_scores(make_user, scores):
    student = make_user()
    with pytest.raises(CertificateValidationError):
        _upload(_services(), student, scores=scores)


def test_upload_rejects_blank_exam_name(make_user):
    student = make_user()
    with pytest.raises(CertificateValidationError):
        _upload(_services(), student, exam_name="   ")


def test_upload_for_unknown_user(app_context):
    class _Ghost:
        id = 9999

    with pytest.raises(UserNotFoundError):
        _upload(_services(), _Ghost())


def test_issue_certificate(make_user):
    student = make_user(name="Alice", email="alice@example.com")
    services = _services(["0123456789abcdef"])
    result = _upload(services, student)

    output = IssueCertificateUseCase(services).execute(
        IssueCertificateInput(user_id=student.id, exam_result_id=result.id)
    )

    assert output.certificate.certificate_id == "0123456789abcdef"
    assert output.certificate.revoked is False
    assert output.holder.name == "Alice"
    assert output.exam_result.id == result.id
    assert output.attempts == 1


def test_issue_retries_on_id_collision(make_user, caplog):
    student = make_user()
    services = _services(["aaaaaaaaaaaaaaaa", "aaaaaaaaaaaaaaaa", "bbbbbbbbbbbbbbbb"])
    result = _upload(services, student)
    use_case = IssueCertificateUseCase(services, max_attempts=5)
    payload = IssueCertificateInput(user_id=student.id, exam_result_id=result.id)

    first = use_case.execute(payload)
    with caplog.at_level("WARNING"):
        second = use_case.execute(payload)

    assert first.certificate.certificate_id == "aaaaaaaaaaaaaaaa"
    assert second.certificate.certificate_id == "bbbbbbbbbbbbbbbb"
    assert second.attempts == 2
    assert any(getattr(r, "event", None) == "certificates.issue.collision" for r in caplog.records)
    # 衝突後も既存の証明書は変更されない
    existing = services.certificate_store.find_by_certificate_id("aaaaaaaaaaaaaaaa")
    assert existing.issued_at == first.certificate.issued_at
    assert existing.revoked is False


def test_issue_gives_up_after_max_attempts():
    store = MagicMock()
    store.create.side_effect = CertificateIdCollisionError("ffffffffffffffff")
    users = MagicMock()
    users.get.return_value = CertificateHolder(id=1, name="Bob", email="bob@example.com", role="student")
    results = MagicMock()
    results.get.return_value = ExamResult(id=7, user_id=1, exam_name="Finals", year=2024, scores={"a": 1})
    services = CertificateServices(
        certificate_store=store,
        exam_result_store=results,
        user_directory=users,
        id_generator=lambda: "ffffffffffffffff",
    )

    with pytest.raises(CertificateIssuanceError):
        IssueCertificateUseCase(services, max_attempts=3).execute(
            IssueCertificateInput(user_id=1, exam_result_id=7)
        )

    assert store.create.call_count == 3


def test_issue_requires_matching_owner(make_user):
    student = make_user()
    other = make_user()
    services = _services()
    result = _upload(services, student)

    with pytest.raises(CertificateValidationError):
        IssueCertificateUseCase(services).execute(
            IssueCertificateInput(user_id=other.id, exam_result_id=result.id)
        )


def test_issue_with_missing_references(make_user):
    student = make_user()
    services = _services()

    with pytest.raises(ExamResultNotFoundError):
        IssueCertificateUseCase(services).execute(IssueCertificateInput(user_id=student.id, exam_result_id=404))
    with pytest.raises(UserNotFoundError):
        IssueCertificateUseCase(services).execute(IssueCertificateInput(user_id=404, exam_result_id=1))


def test_verify_and_revoke(make_user):
    student = make_user()
    services = _services(["0123456789abcdef"])
    result = _upload(services, student)
    IssueCertificateUseCase(services).execute(IssueCertificateInput(user_id=student.id, exam_result_id=result.id))

    view = VerifyCertificateUseCase(services).execute("0123456789abcdef")
    assert view.is_valid
    assert view.holder.id == student.id
    assert view.exam_result.grade == "A"

    revoked = RevokeCertificateUseCase(services).execute("0123456789abcdef", actor="user:1")
    assert revoked.revoked is True

    with pytest.raises(CertificateNotFoundError):
        VerifyCertificateUseCase(services).execute("0123456789abcdef")
    with pytest.raises(CertificateNotFoundError):
        VerifyCertificateUseCase(services).execute("fedcba9876543210")
    with pytest.raises(CertificateValidationError):
        VerifyCertificateUseCase(services).execute("  ")


def test_revoke_unknown_certificate(app_context):
    with pytest.raises(CertificateNotFoundError):
        RevokeCertificateUseCase(_services()).execute("fedcba9876543210")


def test_list_student_certificates_newest_first():
    store = MagicMock()
    store.list_for_user.return_value = ["newer", "older"]
    services = CertificateServices(
        certificate_store=store,
        exam_result_store=MagicMock(),
        user_directory=MagicMock(),
    )

    assert ListStudentCertificatesUseCase(services).execute(3) == ["newer", "older"]
    store.list_for_user.assert_called_once_with(3)


def test_list_for_user_orders_by_issue_time(make_user):
    student = make_user()
    services = _services()
    result = _upload(services, student)
    store = services.certificate_store
    store.create(CertificateRecord("1111111111111111", student.id, result.id, datetime(2024, 1, 1)))
    store.create(CertificateRecord("2222222222222222", student.id, result.id, datetime(2024, 6, 1)))

    views = store.list_for_user(student.id)

    assert [v.certificate.certificate_id for v in views] == ["2222222222222222", "1111111111111111"]


def test_verify_malformed_id_is_not_found():
    store = MagicMock()
    services = CertificateServices(
        certificate_store=store,
        exam_result_store=MagicMock(),
        user_directory=MagicMock(),
    )

    with pytest.raises(CertificateNotFoundError):
        VerifyCertificateUseCase(services).execute("not-a-certificate")
    store.get_view.assert_not_called()

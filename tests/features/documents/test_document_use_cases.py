import io
from unittest.mock import MagicMock

import pytest
from werkzeug.datastructures import FileStorage

from core.crypto import InvalidToken, ReferenceCipher, ReferenceCipherConfig
from features.documents.application.dto import UploadDocumentInput
from features.documents.application.services import DocumentServices
from features.documents.application.use_cases import (
    EnsureDocumentReferenceUseCase,
    ResolveDocumentReferenceUseCase,
    UploadDocumentUseCase,
)
from features.documents.domain.exceptions import (
    DocumentFileMissingError,
    DocumentNotFoundError,
    DocumentValidationError,
)
from features.documents.domain.models import DocumentState, PdfDocument
from features.documents.infrastructure.document_store import PdfDocumentStore
from features.documents.infrastructure.file_storage import PdfFileStorage


KEY_HEX = "ab" * 32


def _file(name="report.pdf"):
    return FileStorage(stream=io.BytesIO(b"%PDF-1.4\n%%EOF\n"), filename=name)


@pytest.fixture
def cipher():
    return ReferenceCipher(ReferenceCipherConfig.from_hex(KEY_HEX))


@pytest.fixture
def services(app_context, tmp_path, cipher):
    return DocumentServices(
        document_store=PdfDocumentStore(),
        file_storage=PdfFileStorage(tmp_path / "store"),
        cipher=cipher,
    )


def test_upload_goes_from_created_to_referenced(services, cipher):
    output = UploadDocumentUseCase(services).execute(
        UploadDocumentInput(file=_file(), title=" Minutes ", uploaded_by=None)
    )

    assert output.state is DocumentState.REFERENCED
    assert output.reference_error is None
    assert output.document.title == "Minutes"
    assert cipher.decrypt(output.document.encrypted_reference) == str(output.document.id)
    assert services.document_store.list_unreferenced() == []


def test_upload_rejects_non_pdf(services, tmp_path):
    with pytest.raises(DocumentValidationError):
        UploadDocumentUseCase(services).execute(
            UploadDocumentInput(file=_file("image.png"), title=None, uploaded_by=None)
        )
    assert not (tmp_path / "store").exists()


def test_upload_removes_file_when_record_creation_fails(services, tmp_path):
    services.document_store = MagicMock()
    services.document_store.create.side_effect = RuntimeError("db down")

    with pytest.raises(RuntimeError):
        UploadDocumentUseCase(services).execute(
            UploadDocumentInput(file=_file(), title=None, uploaded_by=None)
        )

    assert list((tmp_path / "store").iterdir()) == []


def test_reference_failure_is_reported_not_raised(services, caplog):
    broken = MagicMock(spec=ReferenceCipher)
    broken.encrypt.side_effect = ValueError("no key")
    services.cipher = broken

    with caplog.at_level("ERROR"):
        output = UploadDocumentUseCase(services).execute(
            UploadDocumentInput(file=_file(), title=None, uploaded_by=None)
        )

    assert output.state is DocumentState.CREATED
    assert output.reference_error == "ValueError"
    assert [d.id for d in services.document_store.list_unreferenced()] == [output.document.id]
    assert any(getattr(r, "event", None) == "documents.reference.failed" for r in caplog.records)


def test_ensure_reference_is_idempotent(services, cipher):
    document = services.document_store.create(filename="a.pdf", title="A", uploaded_by=None)
    use_case = EnsureDocumentReferenceUseCase(services)

    first = use_case.execute(document.id)
    second = use_case.execute(document.id)

    assert first.is_referenced
    assert second.document.encrypted_reference == first.document.encrypted_reference


def test_set_reference_never_overwrites(services):
    document = services.document_store.create(filename="b.pdf", title="B", uploaded_by=None)

    first = services.document_store.set_reference(document.id, "aa" * 16 + ":" + "bb" * 16)
    second = services.document_store.set_reference(document.id, "cc" * 16 + ":" + "dd" * 16)

    assert second.encrypted_reference == first.encrypted_reference


def test_resolve_reference(services, cipher):
    document = services.document_store.create(filename="c.pdf", title="C", uploaded_by=None)
    use_case = ResolveDocumentReferenceUseCase(services)

    assert use_case.execute(cipher.encrypt(str(document.id))).id == document.id
    with pytest.raises(DocumentNotFoundError):
        use_case.execute(cipher.encrypt("not-a-number"))
    with pytest.raises(DocumentNotFoundError):
        use_case.execute(cipher.encrypt("424242"))
    with pytest.raises(InvalidToken):
        use_case.execute("bogus")


def test_document_state_follows_reference():
    document = PdfDocument(id=1, filename="x.pdf", title="X", uploaded_by=None)
    assert document.state is DocumentState.CREATED
    document.encrypted_reference = "00" * 16 + ":" + "00" * 16
    assert document.state is DocumentState.REFERENCED


def test_file_storage_names_and_resolution(tmp_path):
    storage = PdfFileStorage(tmp_path / "files")

    stored = storage.save(_file("My Report.pdf"))

    assert stored.endswith("-My_Report.pdf")
    assert stored.split("-", 1)[0].isdigit()
    assert storage.resolve(stored).read_bytes().startswith(b"%PDF")
    with pytest.raises(DocumentFileMissingError):
        storage.resolve("../outside.pdf")
    with pytest.raises(DocumentFileMissingError):
        storage.resolve("missing.pdf")

    storage.remove(stored)
    with pytest.raises(DocumentFileMissingError):
        storage.resolve(stored)


def test_file_storage_rejects_unusable_names(tmp_path):
    with pytest.raises(DocumentValidationError):
        PdfFileStorage(tmp_path).save(_file("../.."))


def test_file_storage_same_name_same_millisecond(tmp_path, monkeypatch):
    from features.documents.infrastructure import file_storage

    monkeypatch.setattr(file_storage.time, "time", lambda: 1_700_000_000.0)
    storage = PdfFileStorage(tmp_path)

    first = storage.save(FileStorage(stream=io.BytesIO(b"%PDF first"), filename="same.pdf"))
    second = storage.save(FileStorage(stream=io.BytesIO(b"%PDF second"), filename="same.pdf"))

    assert first != second
    assert storage.resolve(first).read_bytes() == b"%PDF first"
    assert storage.resolve(second).read_bytes() == b"%PDF second"


def test_file_storage_skips_existing_names(tmp_path, monkeypatch):
    from features.documents.infrastructure import file_storage

    monkeypatch.setattr(file_storage.time, "time", lambda: 1_700_000_000.0)
    tokens = iter(["aaaaaaaa", "aaaaaaaa", "bbbbbbbb"])
    monkeypatch.setattr(file_storage.secrets, "token_hex", lambda n: next(tokens))
    storage = PdfFileStorage(tmp_path)

    first = storage.save(_file("same.pdf"))
    second = storage.save(_file("same.pdf"))

    assert first == "1700000000000-aaaaaaaa-same.pdf"
    assert second == "1700000000000-bbbbbbbb-same.pdf"

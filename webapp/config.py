
from dotenv import load_dotenv

from core.settings import ApplicationSettings

load_dotenv()


_settings = ApplicationSettings()


class BaseApplicationSettings:
    """Base Flask application configuration populated from the environment."""

    SECRET_KEY = _settings.secret_key or "dev-secret-key"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    db_uri = _settings.database_uri
    SQLALCHEMY_DATABASE_URI = db_uri

    # Database stability
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    }

    if not db_uri.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS.update({
            "pool_size": 10,
            "max_overflow": 20,
        })

    # Internationalisation
    # Locales listed here need a compiled catalog under webapp/translations
    LANGUAGES = ["en"]
    BABEL_DEFAULT_LOCALE = "en"

    # Reference cipher key (64 hex chars), validated by create_app
    PDF_ENCRYPTION_KEY = _settings.reference_encryption_key

    # Certificate issuance
    FRONTEND_URL = _settings.frontend_url
    CERTIFICATE_ID_MAX_ATTEMPTS = _settings.certificate_id_max_attempts

    # PDF uploads
    UPLOAD_DIRECTORY = _settings.upload_directory
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024

    LOG_TO_DATABASE = _settings.log_to_database


class Config(BaseApplicationSettings):
    pass


class TestConfig(BaseApplicationSettings):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    PDF_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
    FRONTEND_URL = "https://verify.example.test"
    CERTIFICATE_ID_MAX_ATTEMPTS = 5
    LOG_TO_DATABASE = False

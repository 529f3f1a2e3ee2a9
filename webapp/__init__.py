# webapp/__init__.py
import logging
import time
from uuid import uuid4

from flask import Flask, g, has_request_context, jsonify, request

from core.crypto import ConfigError, ReferenceCipher, ReferenceCipherConfig
from core.logging_config import ensure_appdb_logging
from core.time import utc_now
from features.documents.application.services import REFERENCE_CIPHER_EXTENSION

from .error_handlers import register_error_handlers
from .extensions import babel, db, login_manager, migrate
from .logging_utils import mask_sensitive_data, prepare_log_payload, summarize_files, truncate_long_values


def create_app(config_object=None):
    """アプリケーションファクトリ

    参照暗号鍵が未設定または不正な場合は :class:`core.crypto.ConfigError` を送出し、
    アプリケーションを起動しない。
    """
    from .config import Config
    from werkzeug.middleware.proxy_fix import ProxyFix

    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    try:
        cipher_config = ReferenceCipherConfig.from_hex(app.config.get("PDF_ENCRYPTION_KEY"))
    except ConfigError:
        app.logger.critical(
            "Reference encryption key is missing or malformed",
            extra={"event": "app.config.invalid_key"},
        )
        raise
    app.extensions[REFERENCE_CIPHER_EXTENSION] = ReferenceCipher(cipher_config)

    # リバースプロキシ（nginx等）使用時のHTTPS検出
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # 拡張初期化
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    babel.init_app(app, locale_selector=_select_locale)

    # テーブル定義を登録
    import core.models  # noqa: F401
    import features.certificates.infrastructure.models  # noqa: F401
    import features.documents.infrastructure.models  # noqa: F401
    import features.fingerprints.infrastructure.models  # noqa: F401

    if app.logger.level == logging.NOTSET:
        app.logger.setLevel(logging.INFO)
    if app.config.get("LOG_TO_DATABASE"):
        with app.app_context():
            ensure_appdb_logging(app.logger)

    _register_request_logging(app)
    register_error_handlers(app)

    from features.certificates.presentation.api import certificates_api_bp
    from features.documents.presentation.api import documents_api_bp
    from features.fingerprints.presentation.api import fingerprints_api_bp

    app.register_blueprint(certificates_api_bp, url_prefix="/api")
    app.register_blueprint(documents_api_bp, url_prefix="/api")
    app.register_blueprint(fingerprints_api_bp, url_prefix="/api")

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "serverTime": utc_now().isoformat()})

    register_cli_commands(app)

    return app


def _register_request_logging(app):
    @app.before_request
    def start_timer():
        g.start_time = time.perf_counter()

    @app.before_request
    def log_api_request():
        if not request.path.startswith("/api"):
            return
        req_id = str(uuid4())
        g.request_id = req_id
        input_json = request.get_json(silent=True)

        log_dict = {"method": request.method}
        args_dict = request.args.to_dict()
        if args_dict:
            log_dict["args"] = mask_sensitive_data(args_dict)
        form_dict = request.form.to_dict()
        if form_dict:
            log_dict["form"] = mask_sensitive_data(truncate_long_values(form_dict))
        if request.files:
            log_dict["files"] = summarize_files(request.files)
        if input_json is not None:
            log_dict["json"] = mask_sensitive_data(truncate_long_values(input_json))
        app.logger.info(
            prepare_log_payload(log_dict),
            extra={"event": "api.input", "request_id": req_id, "path": request.path},
        )

    @app.after_request
    def log_api_response(response):
        if request.path.startswith("/api"):
            resp_json = None
            if response.mimetype == "application/json":
                resp_json = response.get_json(silent=True)
            payload = {
                "status": response.status_code,
                "json": mask_sensitive_data(truncate_long_values(resp_json)) if resp_json is not None else None,
            }
            log_extra = {
                "event": "api.output",
                "request_id": getattr(g, "request_id", None),
                "path": request.path,
            }
            if response.status_code >= 400:
                app.logger.warning(prepare_log_payload(payload), extra=log_extra)
            else:
                app.logger.info(prepare_log_payload(payload), extra=log_extra)
        return response

    @app.after_request
    def add_server_timing(response):
        start = getattr(g, "start_time", None)
        if start is not None:
            duration = (time.perf_counter() - start) * 1000
            response.headers["Server-Timing"] = f"app;dur={duration:.2f}"
        return response


def _select_locale():
    """1) cookie lang 2) Accept-Language 3) default"""
    from flask import current_app

    if not has_request_context():
        return current_app.config.get("BABEL_DEFAULT_LOCALE", "en")

    cookie_lang = request.cookies.get("lang")
    if cookie_lang in current_app.config["LANGUAGES"]:
        return cookie_lang
    return request.accept_languages.best_match(current_app.config["LANGUAGES"])


def register_cli_commands(app):
    """CLI コマンドを登録"""
    import secrets

    import click
    from core.models.user import User, UserRole

    @app.cli.command("generate-reference-key")
    def generate_reference_key():
        """PDF_ENCRYPTION_KEY 用の鍵を生成"""
        click.echo(secrets.token_hex(32))

    @app.cli.command("ensure-references")
    def ensure_references():
        """暗号化参照が未設定のPDFに参照を付与"""
        from features.documents.application.services import build_document_services
        from features.documents.application.use_cases import EnsureDocumentReferenceUseCase

        services = build_document_services(app)
        use_case = EnsureDocumentReferenceUseCase(services)
        pending = services.document_store.list_unreferenced()
        failed = 0
        for document in pending:
            output = use_case.execute(document.id)
            if not output.is_referenced:
                failed += 1
        click.echo(f"Referenced {len(pending) - failed} of {len(pending)} documents")
        if failed:
            raise click.ClickException(f"{failed} documents are still pending")

    @app.cli.command("seed-admin")
    @click.option("--email", required=True, help="管理者のメールアドレス")
    @click.option("--password", required=True, help="管理者のパスワード")
    @click.option("--name", default="Administrator", show_default=True)
    def seed_admin(email, password, name):
        """管理者ユーザーを投入"""
        if User.query.filter_by(email=email).first():
            click.echo(f"Admin already exists: {email}")
            return

        try:
            user = User(name=name, email=email, role=UserRole.ADMIN.value, is_approved=True)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            raise click.ClickException(str(e))
        click.echo(f"Admin user created: {email}")

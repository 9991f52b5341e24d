from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .build import SiteBuilder
from .documents import INDEX_PAGE, DataFile, Page, new_page
from .errors import EditorError, ValidationFailure
from .paths import ambiguous_keys, join_path
from .session import EditSession
from .settings import DATA_EXTS, PAGE_EXTS, EditorSettings
from .store import DocumentStore

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 10 * 1024 * 1024

api = Blueprint("api", __name__, url_prefix="/api")


@dataclass
class EditorContext:
    settings: EditorSettings
    pages: DocumentStore
    data: DocumentStore
    builder: SiteBuilder


def _ctx() -> EditorContext:
    return current_app.extensions["site_editor"]


def _json_error(message: str, status: int = 400, **extra: Any):
    payload: dict[str, Any] = {"success": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status


def _ok(**payload: Any):
    return jsonify({"success": True, **payload})


def _json_object() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationFailure("Expected a JSON object.")
    return payload


def _rebuild() -> dict[str, Any]:
    result = _ctx().builder.build()
    return {"rebuilt": result.success, "published": result.moved}


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


@api.route("/pages", methods=["GET"])
def list_pages():
    return _ok(pages=_ctx().pages.list())


@api.route("/pages/<path:rel>", methods=["GET"])
def get_page(rel: str):
    store = _ctx().pages
    clean, _ = store.resolve(rel)
    page = Page.from_text(clean, store.read(clean))
    return _ok(**page.to_dict())


@api.route("/pages/<path:rel>", methods=["POST"])
def save_page(rel: str):
    store = _ctx().pages
    clean, _ = store.resolve(rel)
    page = Page.from_payload(clean, _json_object())
    store.write(clean, page.render())
    logger.info("Saved page %s (%s front matter)", clean, page.mode.value)
    return _ok(message="Page saved successfully", path=clean, **_rebuild())


@api.route("/pages/<path:rel>", methods=["DELETE"])
def delete_page(rel: str):
    clean = _ctx().pages.delete(rel)
    return _ok(message="Page deleted successfully", path=clean, **_rebuild())


@api.route("/new-page", methods=["POST"])
def draft_page():
    payload = _json_object()
    path = payload.get("path")
    if path is not None and not isinstance(path, str):
        raise ValidationFailure("`path` must be a string.")
    draft = new_page(path or "")
    store = _ctx().pages
    clean, _ = store.resolve(draft.path)
    draft.path = clean
    return _ok(page=draft.to_dict(), exists=store.exists(clean))


# ---------------------------------------------------------------------------
# Data files
# ---------------------------------------------------------------------------


@api.route("/data", methods=["GET"])
def list_data():
    return _ok(files=_ctx().data.list())


@api.route("/data/<path:rel>", methods=["GET"])
def get_data(rel: str):
    store = _ctx().data
    clean, _ = store.resolve(rel)
    data_file = DataFile.from_text(clean, store.read(clean))
    ambiguous = [join_path(p) for p in ambiguous_keys(data_file.document)]
    return _ok(ambiguous=ambiguous, **data_file.to_dict())


@api.route("/fields/<path:rel>", methods=["GET"])
def get_data_fields(rel: str):
    with EditSession.open(_ctx().data, rel) as session:
        fields = [field.to_dict() for field in session.fields()]
        return _ok(path=session.path, fields=fields, ambiguous=session.ambiguous())


@api.route("/data/<path:rel>", methods=["POST"])
def save_data(rel: str):
    store = _ctx().data
    clean, _ = store.resolve(rel)
    payload = _json_object()
    modes = [key for key in ("data", "fields", "edits") if key in payload]
    if len(modes) != 1:
        raise ValidationFailure("Send exactly one of `data`, `fields` or `edits`.", path=clean)

    mode = modes[0]
    if mode == "data":
        store.write(clean, DataFile(clean, payload["data"]).render())
    else:
        values = payload[mode]
        if not isinstance(values, dict):
            raise ValidationFailure(f"`{mode}` must be an object.", path=clean)
        with EditSession.open(store, clean) as session:
            if mode == "fields":
                session.fields()
                edits = session.collect(values)
            else:
                edits = values
            session.save(edits)
    logger.info("Saved data file %s (%s)", clean, mode)
    return _ok(message="Data file saved successfully", path=clean, **_rebuild())


@api.route("/data/<path:rel>", methods=["DELETE"])
def delete_data(rel: str):
    clean = _ctx().data.delete(rel)
    return _ok(message="Data file deleted successfully", path=clean, **_rebuild())


# ---------------------------------------------------------------------------
# Build and meta
# ---------------------------------------------------------------------------


@api.route("/build", methods=["POST"])
def trigger_build():
    result = _ctx().builder.build()
    return _ok(rebuilt=result.success, build=result.to_dict())


@api.route("/build/status", methods=["GET"])
def build_status():
    return _ok(**_ctx().builder.status())


@api.route("/meta", methods=["GET"])
def meta():
    settings = _ctx().settings
    return _ok(
        site_root=str(settings.site_root),
        pages_dir=str(settings.pages_dir),
        data_dir=str(settings.data_dir),
        build_command=settings.build_command,
        build_enabled=settings.build_enabled,
    )


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def _handle_editor_error(exc: EditorError):
    level = logging.WARNING if exc.status < 500 else logging.ERROR
    logger.log(level, "%s %s failed: %s", request.method, request.path, exc.message)
    extra = {"path": exc.path} if exc.path else {}
    return _json_error(exc.message, exc.status, **extra)


def _handle_os_error(exc: OSError):
    logger.exception("%s %s failed", request.method, request.path)
    return _json_error(f"File operation failed: {exc}", 500)


def _handle_http_error(exc: HTTPException):
    return _json_error(exc.description or exc.name, exc.code or 500)


def _cors(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
    return response


def create_app(settings: EditorSettings | None = None) -> Flask:
    settings = settings or EditorSettings.from_env()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_BYTES
    app.extensions["site_editor"] = EditorContext(
        settings=settings,
        pages=DocumentStore(settings.pages_dir, PAGE_EXTS, pinned=(INDEX_PAGE,)),
        data=DocumentStore(settings.data_dir, DATA_EXTS),
        builder=SiteBuilder(
            settings.site_root,
            settings.build_command,
            output_dir=settings.build_output_dir,
            publish_dir=settings.publish_dir,
            enabled=settings.build_enabled,
        ),
    )
    app.register_blueprint(api)
    app.register_error_handler(EditorError, _handle_editor_error)
    app.register_error_handler(OSError, _handle_os_error)
    app.register_error_handler(HTTPException, _handle_http_error)
    app.after_request(_cors)
    return app

from __future__ import annotations

import io
import logging
import secrets
from pathlib import Path

from flask import Flask, current_app, redirect, render_template_string, request, send_file, session, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from ..config.loader import ConfigError
from ..excel.reader import DecodeError, UnsupportedFileTypeError
from ..excel.writer import EXPORT_FILE_NAME, XLSX_MIMETYPE, EncodeError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import AppConfig
from ..services.projection import ROW_COUNT_OPTIONS, InvalidRowCountError, parse_row_count, row_count_label
from ..services.session import SessionStore, ViewSession
from ..services.sorting import is_sortable
from ..services.view import visible_rows

"""Browser surface.

One page: upload form, export button, row-count selector and the grouped
table with clickable headers. Each browser gets its own ViewSession (keyed
by an id kept in the signed Flask session cookie); every action posts to a
small endpoint that replaces the session's ViewState and redirects back to
the page.
"""

__all__ = [
    "create_app",
    "serve",
    "tls_context",
]

logger = logging.getLogger(__name__)

STORE_KEY = "sku_rollup.sessions"
SESSION_ID_KEY = "view_id"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="ru">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Аналитика данных из Excel</title>
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif; padding: 20px; }
    .toolbar { display: flex; gap: 12px; align-items: center; margin-bottom: 20px; }
    .message { color: #b91c1c; border: 1px solid #fca5a5; background: #fef2f2; padding: 8px 12px; margin-bottom: 16px; }
    .table-wrap { overflow-y: auto; max-height: 80vh; border: 1px solid #ccc; }
    table { width: 100%; border-collapse: collapse; }
    th, td { border: 1px solid #ccc; padding: 4px 8px; }
    thead th { position: sticky; top: 0; background: #fff; z-index: 1; }
    th.active { background: #f0f0f0; }
    th button { all: unset; cursor: pointer; }
  </style>
</head>
<body>
  <h1>Аналитика данных из Excel</h1>
  {% if state.message %}<div class="message" role="alert">{{ state.message }}</div>{% endif %}
  <div class="toolbar">
    <form method="post" action="{{ url_for('upload') }}" enctype="multipart/form-data">
      <input type="file" name="file" accept=".xlsx, .xls" onchange="this.form.submit()">
      <noscript><button type="submit">Upload</button></noscript>
    </form>
    {% if state.loaded %}
    <a href="{{ url_for('export') }}"><button type="button">Export to Excel</button></a>
    <span>{{ state.source_name }}: {{ state.input_rows }} rows, {{ state.groups|length }} groups</span>
    {% endif %}
  </div>
  <div class="table-wrap">
    <table>
      <thead>
        <tr>
          <th>
            {% if state.loaded %}
            <form method="post" action="{{ url_for('rows') }}">
              <select name="rows" onchange="this.form.submit()">
                {% for option in options %}
                <option value="{{ option }}" {% if option == state.row_count %}selected{% endif %}>{{ row_count_label(option) }}</option>
                {% endfor %}
              </select>
            </form>
            {% endif %}
          </th>
          {% for column in columns %}
          {% set active = state.sort_state and state.sort_state.column == column %}
          <th class="{{ 'active' if active else '' }}">
            {% if is_sortable(column, locked) %}
            <form method="post" action="{{ url_for('sort') }}">
              <input type="hidden" name="column" value="{{ column }}">
              <button type="submit">{{ column }}{% if active %} {{ state.sort_state.direction.arrow }}{% endif %}</button>
            </form>
            {% else %}{{ column }}{% endif %}
          </th>
          {% endfor %}
        </tr>
      </thead>
      <tbody>
        {% for row in rows %}
        <tr>
          <td>{{ loop.index }}</td>
          {% for column in columns %}<td>{{ row.get(column) if row.get(column) is not none else '' }}</td>{% endfor %}
        </tr>
        {% endfor %}
      </tbody>
    </table>
  </div>
</body>
</html>
"""


def _store() -> SessionStore:
    return current_app.extensions[STORE_KEY]


def _view() -> ViewSession:
    sid = session.get(SESSION_ID_KEY)
    if not sid:
        sid = SessionStore.new_id()
        session[SESSION_ID_KEY] = sid
    return _store().get(sid)


def _render(view: ViewSession, status: int = 200):
    state = view.state
    return (
        render_template_string(
            PAGE_TEMPLATE,
            state=state,
            columns=state.columns,
            rows=visible_rows(state),
            options=ROW_COUNT_OPTIONS,
            locked=view.locked_columns,
            is_sortable=is_sortable,
            row_count_label=row_count_label,
        ),
        status,
    )


def create_app(cfg: AppConfig, *, error_log: ErrorLogBuffer | None = None) -> Flask:
    """Build the Flask application for ``cfg``."""
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = cfg.server.max_content_length
    app.secret_key = cfg.server.secret_key or secrets.token_hex(32)

    default_rows = parse_row_count(cfg.display.default_rows)
    locked = cfg.display.locked_columns
    log_buffer = error_log if error_log is not None else ErrorLogBuffer()
    app.extensions[STORE_KEY] = SessionStore(
        lambda: ViewSession(default_rows=default_rows, locked_columns=locked, error_log=log_buffer),
        max_sessions=cfg.server.max_sessions,
    )

    @app.get("/")
    def index():
        return _render(_view())

    @app.post("/upload")
    def upload():
        view = _view()
        file = request.files.get("file")
        if file is None or not file.filename:
            view.notify("no file selected")
            return _render(view, 400)
        try:
            view.load(file.filename, file.read)
        except (UnsupportedFileTypeError, DecodeError):
            return _render(view, 400)
        return redirect(url_for("index"), code=303)

    @app.post("/sort")
    def sort():
        _view().sort(request.form.get("column", ""))
        return redirect(url_for("index"), code=303)

    @app.post("/rows")
    def rows():
        view = _view()
        try:
            view.set_row_count(request.form.get("rows", ""))
        except InvalidRowCountError:
            return _render(view, 400)
        return redirect(url_for("index"), code=303)

    @app.get("/export")
    def export():
        view = _view()
        try:
            data = view.export()
        except EncodeError:
            return _render(view, 500)
        return send_file(
            io.BytesIO(data),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=EXPORT_FILE_NAME,
        )

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        view = _view()
        view.notify(f"file too large (limit {cfg.server.max_upload_mb} MB)")
        return _render(view, 413)

    return app


def tls_context(cfg: AppConfig) -> tuple[str, str]:
    """(certfile, keyfile) for app.run; both must exist at startup."""
    certfile = Path(cfg.server.certfile)
    keyfile = Path(cfg.server.keyfile)
    for p in (certfile, keyfile):
        if not p.is_file():
            raise ConfigError(f"TLS file not found: {p}")
    return str(certfile), str(keyfile)


def serve(cfg: AppConfig) -> None:  # pragma: no cover (binds a socket)
    """Run the HTTPS server with the configured certificate/key pair."""
    ssl_context = tls_context(cfg)
    app = create_app(cfg)
    logger.info(f"HTTPS server running on https://{cfg.server.host}:{cfg.server.port}")
    app.run(host=cfg.server.host, port=cfg.server.port, ssl_context=ssl_context)

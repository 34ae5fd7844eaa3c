from __future__ import annotations

import io
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, Response, current_app, g, jsonify, request, send_file
from werkzeug.exceptions import HTTPException

from entries import TimeEntry, normalize, resolve_month
from entry_store import EntryStore, connect, init_db
from timecalc import ParseError
from xlsx_export import XLSX_MIMETYPE, export_entries, export_filename

BASE_DIR = Path(__file__).resolve().parent
DATABASE_PATH = BASE_DIR / "timesheet.db"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv(BASE_DIR / ".env")

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=os.getenv("SECRET_KEY", "change-me"),
        DATABASE=os.getenv("TIMESHEET_DATABASE", str(DATABASE_PATH)),
        CORS_ORIGIN=os.getenv("CORS_ORIGIN", "*"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )
    if test_config is not None:
        app.config.update(test_config)

    configure_logging(app.config["LOG_LEVEL"])
    Path(app.config["DATABASE"]).parent.mkdir(parents=True, exist_ok=True)

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = app.config["CORS_ORIGIN"]
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.teardown_appcontext
    def close_db(exception: Optional[BaseException]) -> None:  # pragma: no cover - teardown
        db = g.pop("db", None)
        if db is not None:
            db.close()

    register_error_handlers(app)
    register_routes(app)
    init_db(app.config["DATABASE"])
    logger.info("Time tracker API ready (database %s)", app.config["DATABASE"])
    return app


def get_db() -> sqlite3.Connection:
    if "db" not in g:
        g.db = connect(current_app.config["DATABASE"])
    return g.db


def get_store() -> EntryStore:
    return EntryStore(get_db())


def entry_to_payload(entry: TimeEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "date": entry.date.isoformat(),
        "startTime": entry.start_time,
        "endTime": entry.end_time,
        "totalHours": entry.total_hours,
        "day": entry.day,
        "month": entry.month,
        "year": entry.year,
        "siteLocation": entry.site_location,
        "createdAt": entry.created_at,
        "updatedAt": entry.updated_at,
    }


def parse_period(year: str, month: str):
    try:
        year_value = int(year)
    except ValueError:
        raise ParseError(f"Invalid year: {year!r}") from None
    return year_value, resolve_month(month)


def not_found():
    return jsonify({"message": "Entry not found"}), 404


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ParseError)
    def handle_parse_error(error: ParseError):
        logger.warning("Rejected request to %s: %s", request.path, error)
        return jsonify({"message": str(error)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(sqlite3.Error)
    def handle_db_error(error: sqlite3.Error):
        logger.exception("Database error on %s %s", request.method, request.path)
        return jsonify({"message": str(error)}), 500


def register_routes(app: Flask) -> None:
    @app.route("/")
    def index():
        return jsonify({"message": "Time Tracker API", "status": "running"})

    @app.route("/api/health")
    def health():
        connected = get_store().ping()
        return jsonify(
            {
                "status": "ok",
                "message": "Server is running",
                "db": "connected" if connected else "disconnected",
            }
        )

    @app.route("/api/time-entries", methods=["GET"])
    def list_entries():
        entries = get_store().list_all()
        return jsonify([entry_to_payload(entry) for entry in entries])

    @app.route("/api/time-entries/<int:entry_id>", methods=["GET"])
    def get_entry(entry_id: int):
        entry = get_store().get(entry_id)
        if entry is None:
            return not_found()
        return jsonify(entry_to_payload(entry))

    @app.route("/api/time-entries/month/<year>/<month>", methods=["GET"])
    def month_entries(year: str, month: str):
        year_value, month_value = parse_period(year, month)
        entries = get_store().query(year=year_value, month=month_value)
        return jsonify([entry_to_payload(entry) for entry in entries])

    @app.route("/api/time-entries", methods=["POST"])
    def create_entry():
        data = request.get_json(silent=True) or {}
        fields = normalize(data)
        entry = get_store().insert(fields)
        return jsonify(entry_to_payload(entry)), 201

    @app.route("/api/time-entries/<int:entry_id>", methods=["PUT"])
    def update_entry(entry_id: int):
        data = request.get_json(silent=True) or {}
        fields = normalize(data)
        updated = get_store().update(entry_id, fields)
        if updated is None:
            return not_found()
        return jsonify(entry_to_payload(updated))

    @app.route("/api/time-entries/<int:entry_id>", methods=["DELETE"])
    def delete_entry(entry_id: int):
        if not get_store().delete(entry_id):
            return not_found()
        return jsonify({"message": "Entry deleted"})

    @app.route("/api/time-entries/export/<year>/<month>", methods=["GET"])
    def export_month(year: str, month: str):
        year_value, month_value = parse_period(year, month)
        entries = get_store().query(year=year_value, month=month_value)
        data = export_entries(entries, f"{month_value} {year_value}")
        logger.info("Exported %d entries for %s %s", len(entries), month_value, year_value)
        return send_file(
            io.BytesIO(data),
            as_attachment=True,
            download_name=export_filename(month_value, year_value),
            mimetype=XLSX_MIMETYPE,
        )


if __name__ == "__main__":
    application = create_app()
    application.run(debug=True, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))

import logging
import math
import os
import re
from datetime import datetime, timezone

from flask import Flask, request, jsonify, render_template, make_response
from flask_cors import CORS
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from models import db, Entry, EntryStore
from score_service import calculate_burnout, tier_for

# Load .env locally; real deployments inject env vars directly.
load_dotenv()


def _env_flag(name, default):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


CHART_LIMIT = 10

# plain ASCII numbers only: no padding, underscores, nan/inf or other scripts' digits
INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?", re.ASCII)

# SQLite INTEGER is signed 64-bit
INT_MIN, INT_MAX = -2**63, 2**63 - 1


def form_number(name, cast):
    """
    Parse-or-default: a missing, malformed, non-finite or out-of-range
    value becomes 0. Bad input is never reported back to the user.
    """
    raw = request.form.get(name, "")
    pattern = INT_RE if cast is int else FLOAT_RE
    if not pattern.fullmatch(raw):
        return cast(0)

    value = cast(raw)
    if cast is int and not INT_MIN <= value <= INT_MAX:
        return 0
    if cast is float and not math.isfinite(value):
        return 0.0
    return value


def create_app(test_config=None):
    app = Flask(__name__)

    # --- Config (env first, test_config overrides) ---
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///burnout.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["RESET_DB_ON_START"] = _env_flag("RESET_DB_ON_START", "1")
    app.config["FRONTEND_ORIGIN"] = os.getenv("FRONTEND_ORIGIN")
    if test_config:
        app.config.update(test_config)

    # --- Storage: one handle per app, wiped on start unless disabled ---
    db.init_app(app)
    store = EntryStore(db)
    app.extensions["entry_store"] = store
    with app.app_context():
        app.logger.info("Using database %s", app.config["SQLALCHEMY_DATABASE_URI"])
        try:
            store.initialize(reset=app.config["RESET_DB_ON_START"])
        except SQLAlchemyError:
            app.logger.critical("Could not initialize the entries table")
            raise

    # --- CORS (one origin if configured, else open for local dev) ---
    if app.config["FRONTEND_ORIGIN"]:
        CORS(app, resources={r"/*": {"origins": [app.config["FRONTEND_ORIGIN"]]}})
    else:
        CORS(app)

    # ---------- Routes ----------

    @app.route("/")
    def index():
        """The input form page."""
        return render_template("index.html")

    @app.route("/calculate", methods=["POST"])
    def calculate():
        """Score a submission, save it and return the result fragment."""
        sleep = form_number("sleep", float)
        study_hours = form_number("study", float)
        deadlines = form_number("deadlines", int)
        mood = form_number("mood", int)
        stress = form_number("stress", int)
        exercise = request.form.get("exercise") == "on"

        score, level, advice = calculate_burnout(sleep, study_hours, deadlines, stress, exercise)

        entry = Entry(
            sleep=sleep,
            study_hours=study_hours,
            deadlines=deadlines,
            mood=mood,
            stress=stress,
            exercise=exercise,
            score=score,
            level=level,
            advice=advice,
        )
        try:
            store.append(entry)
        except SQLAlchemyError as e:
            app.logger.exception("Failed to save entry")
            return str(e), 500

        _, label, emoji, color_class, bar_color = tier_for(score)
        html = render_template(
            "result.html",
            score=score,
            level=label,
            badge=f"{emoji} {label}",
            advice=advice,
            color_class=color_class,
            bar_color=bar_color,
            rotation=(score / 100.0) * 180.0 - 180.0,
            sleep=sleep,
            deadlines=deadlines,
            stress=stress,
            exercise="Yes" if exercise else "No",
            show_reset_plan=score > 80,
            report_date=datetime.now().strftime("%b %d, %Y"),
        )

        resp = make_response(html, 200)
        resp.headers["Content-Type"] = "text/html; charset=utf-8"
        resp.headers["HX-Trigger"] = "newEntry"
        return resp

    @app.route("/history-chart", methods=["GET"])
    def history_chart():
        """Last scores for the chart, oldest first."""
        try:
            series = store.recent_series(CHART_LIMIT)
        except SQLAlchemyError as e:
            app.logger.exception("Failed to load chart data")
            return str(e), 500

        return jsonify({
            "labels": [ts.strftime("%H:%M") for ts, _ in series],
            "data": [score for _, score in series],
        }), 200

    @app.route("/health")
    def health():
        """Liveness plus whether the entries table can be read."""
        try:
            entries = store.count()
        except SQLAlchemyError:
            app.logger.warning("Health check could not read the entries table")
            entries = None
        return jsonify({
            "ok": True,
            "db_ok": entries is not None,
            "entries": entries,
            "reset_on_start": app.config["RESET_DB_ON_START"],
            "time": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
        }), 200

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    port = int(os.getenv("PORT", "8081"))
    app.logger.info("Server starting at http://localhost:%d", port)
    try:
        app.run(host="0.0.0.0", port=port, threaded=True)
    finally:
        with app.app_context():
            db.engine.dispose()

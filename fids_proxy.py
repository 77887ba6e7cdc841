#!/usr/bin/env python3
# Airport FIDS departures proxy for the board frontend.

import datetime
import logging
import os
import time
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, make_response, request, Response

from departures import DEFAULT_WINDOW_SEC, SOURCE_STALE, DepartureFetcher, UpstreamError
from departures_cache import FreshnessCache
from renderers import DEFAULT_USER_AGENT, RenderOptions, build_renderer

load_dotenv()

log = logging.getLogger("fids_proxy")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_csv(name: str, default: str) -> List[str]:
    value = os.getenv(name, default)
    return [item.strip() for item in value.split(",") if item.strip()]


def to_iso(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    dt = datetime.datetime.fromtimestamp(ts, datetime.timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


FIDS_BASE_URL = os.getenv("FIDS_BASE_URL", "https://www.hyderabad.aero/getFidsAllflightSch.aspx")
FIDS_FLIGHT_WAY = os.getenv("FIDS_FLIGHT_WAY", "D")

DEPARTURES_CACHE_WINDOW_SEC = max(1, env_int("DEPARTURES_CACHE_WINDOW_SEC", DEFAULT_WINDOW_SEC))

RENDERER = os.getenv("RENDERER", "browser")
RENDER_TIMEOUT_SEC = env_float("RENDER_TIMEOUT_SEC", 45.0)
RENDER_WAIT_UNTIL = os.getenv("RENDER_WAIT_UNTIL", "networkidle")
RENDER_USER_AGENT = os.getenv("RENDER_USER_AGENT", DEFAULT_USER_AGENT)
HTTP_CONNECT_TIMEOUT_SEC = env_float("HTTP_CONNECT_TIMEOUT_SEC", 5.0)

CORS_ALLOWED_ORIGINS = set(
    env_csv(
        "CORS_ALLOWED_ORIGINS",
        "http://127.0.0.1,http://localhost,http://127.0.0.1:3000,http://localhost:3000",
    )
)
if env_bool("CORS_ALLOW_NULL_ORIGIN", False):
    CORS_ALLOWED_ORIGINS.add("null")

CONTENT_SECURITY_POLICY = os.getenv(
    "CONTENT_SECURITY_POLICY",
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.tailwindcss.com; "
    "style-src 'self' 'unsafe-inline' https://cdnjs.cloudflare.com; "
    "style-src-elem 'self' 'unsafe-inline' https://cdnjs.cloudflare.com; "
    "font-src 'self' https://cdnjs.cloudflare.com; "
    "img-src 'self' https://www.hyderabad.aero data:; "
    "connect-src 'self';",
)

APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
APP_PORT = env_int("APP_PORT", 3000)

JsonDict = Dict[str, Any]

departures_cache = FreshnessCache()
fetcher = DepartureFetcher(
    build_renderer(RENDERER, connect_timeout_sec=HTTP_CONNECT_TIMEOUT_SEC),
    departures_cache,
    base_url=FIDS_BASE_URL,
    flight_way=FIDS_FLIGHT_WAY,
    window_sec=DEPARTURES_CACHE_WINDOW_SEC,
    render_options=RenderOptions(
        wait_until=RENDER_WAIT_UNTIL,
        user_agent=RENDER_USER_AGENT,
        timeout_sec=RENDER_TIMEOUT_SEC,
    ),
)

app = Flask(__name__)


def add_cache_headers(resp: Response, ttl_sec: int, source: str, fetched_at: Optional[str]) -> Response:
    resp.headers["Cache-Control"] = f"max-age={max(0, ttl_sec)}"
    resp.headers["X-Cache"] = source
    if fetched_at:
        resp.headers["X-Fetched-At"] = fetched_at
    return resp


def error_response(status: int, message: str, details: str) -> Response:
    payload: JsonDict = {"error": message, "details": details}
    resp = jsonify(payload)
    resp.status_code = status
    resp.headers["Cache-Control"] = "no-store"
    return resp


@app.after_request
def add_common_headers(resp: Response) -> Response:
    origin = request.headers.get("Origin")
    if origin and (origin in CORS_ALLOWED_ORIGINS or "*" in CORS_ALLOWED_ORIGINS):
        resp.headers["Access-Control-Allow-Origin"] = origin
        resp.headers["Vary"] = "Origin"
        resp.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
        resp.headers["Access-Control-Expose-Headers"] = "Cache-Control, X-Cache, X-Fetched-At"
        resp.headers["Access-Control-Max-Age"] = "600"

    if CONTENT_SECURITY_POLICY:
        resp.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
    resp.headers.setdefault("X-Content-Type-Options", "nosniff")
    resp.headers.setdefault("Referrer-Policy", "no-referrer")
    resp.headers.setdefault("X-Frame-Options", "DENY")
    return resp


@app.route("/api/departures", methods=["GET", "OPTIONS"])
def api_departures() -> Response:
    if request.method == "OPTIONS":
        return make_response("", 204)

    now = time.time()
    try:
        result = fetcher.fetch(now)
    except UpstreamError as exc:
        log.error("Proxy/Scraping Error: %s", exc.details)
        return error_response(500, "Failed to fetch flight data", exc.details)

    ttl_sec = 0
    if result.source != SOURCE_STALE and result.refreshed_at is not None:
        ttl_sec = int(result.refreshed_at + fetcher.window_sec - now)

    resp = jsonify([flight.to_json() for flight in result.records])
    return add_cache_headers(resp, ttl_sec, result.source, to_iso(result.refreshed_at))


if __name__ == "__main__":
    app.run(host=APP_HOST, port=APP_PORT)

"""
Vercel entry point for the diagnostics API.
When app.main cannot be imported, every HTTP request gets a 500 that names
the failure and the deployment settings still missing.
"""
import json
import logging
import os
import traceback

logger = logging.getLogger("api.index")

REQUIRED_ENV = ("SUPABASE_URL", "SUPABASE_KEY", "SECRET_KEY")


def describe_startup_failure(error: Exception) -> dict:
    return {
        "service": "Smart Farmer Diagnostics",
        "status": "startup_failed",
        "error": f"{type(error).__name__}: {error}",
        "missing_env": [name for name in REQUIRED_ENV if not os.getenv(name)],
        "traceback": traceback.format_exc().splitlines()[-5:],
    }


def failure_app(report: dict):
    body = json.dumps(report).encode("utf-8")

    async def app(scope, receive, send):
        if scope["type"] != "http":
            return
        await send({
            "type": "http.response.start",
            "status": 500,
            "headers": [[b"content-type", b"application/json"]],
        })
        await send({"type": "http.response.body", "body": body})

    return app


try:
    from app.main import app
except Exception as e:
    logger.error(f"Diagnostics API failed to start: {e}", exc_info=True)
    app = failure_app(describe_startup_failure(e))

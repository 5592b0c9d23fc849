"""Entry point for the plant care engine HTTP server.

Configuration comes from ``PLANTCARE_*`` environment variables (see
``app/config.py``); host and port from ``PLANTCARE_HOST`` / ``PLANTCARE_PORT``.
"""

from __future__ import annotations

import logging
import os
import sys

from app import create_app


def main() -> int:
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")

    app = create_app(bootstrap_runtime=True)

    host = os.getenv("PLANTCARE_HOST", "0.0.0.0")
    port = int(os.getenv("PLANTCARE_PORT", "8000"))
    logging.info("Starting server on %s:%s", host, port)

    try:
        app.run(host=host, port=port, debug=False, use_reloader=False)
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except OSError as exc:
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

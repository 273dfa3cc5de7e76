"""
Start the HR Workflow Tracker API with uvicorn.

Usage:
    python run.py                # 127.0.0.1:8000
    python run.py --reload       # Restart on code changes
    python run.py --host 0.0.0.0 --port 8080

Mongo connection, CORS and logging come from the environment / .env
(see hrflow/config/settings.py).
"""
import argparse
import uvicorn

from hrflow.config.settings import settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HR Workflow Tracker API server")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    return parser.parse_args()


def main():
    args = parse_args()

    # Workflow change listeners live in-process, so a single worker is used
    print(f"HR Workflow Tracker on http://{args.host}:{args.port} "
          f"(db={settings.mongo_db}, env={settings.environment}, reload={args.reload})")

    uvicorn.run(
        "hrflow.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()

"""
Development Server Entry Point
==============================

Runs the incident API under uvicorn with host and port taken from the
environment (HOST, PORT), overridable on the command line.

Usage:
    python run.py              # Development mode with reload
    python run.py --no-reload  # Without reload
    python run.py --port 8080
"""

import argparse


def main():
    """Run the development server."""
    import uvicorn
    from sqlalchemy.engine import make_url

    from incident_tracker.core.config import get_settings

    settings = get_settings()

    # Parse command line arguments
    parser = argparse.ArgumentParser(description=f"Run the {settings.APP_NAME} server")
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload",
    )
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind to (default: {settings.HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind to (default: {settings.PORT})",
    )
    args = parser.parse_args()

    print(f"\n{'='*50}")
    print(f"  {settings.APP_NAME} v{settings.APP_VERSION}")
    print(f"  Environment: {settings.ENVIRONMENT}")
    print(f"  Database: {make_url(settings.DATABASE_URL).render_as_string(hide_password=True)}")
    print(f"{'='*50}\n")

    print(f"API available at: http://{args.host}:{args.port}/api/incidents")
    print("Press CTRL+C to stop\n")

    # Startup aborts with a non-zero exit if the database is unreachable
    uvicorn.run(
        "incident_tracker.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()

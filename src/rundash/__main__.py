"""
Main entrypoint: runs the nightly refresh scheduler, or one of the scripts.

The HTTP API runs separately under uvicorn.

Usage:
    python -m rundash                       # starts the scheduler
    python -m rundash refresh [--year Y] [--merge]
    python -m rundash add --date YYYY-MM-DD [--distance KM --time SECONDS ...]
    python -m rundash process [--year Y]
    uvicorn rundash.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def _run_command(command: str, argv) -> None:
    if command == "refresh":
        from rundash.scripts.refresh import main
    elif command == "add":
        from rundash.scripts.add_activity import main
    elif command == "process":
        from rundash.scripts.process import main
    else:
        logger.error("Unknown command %r (expected refresh, add or process)", command)
        sys.exit(2)
    main(argv)


async def _run_scheduler() -> None:
    from rundash.config import get_settings
    from rundash.scheduler.jobs import build_scheduler

    settings = get_settings()
    if not settings.has_strava_credentials:
        logger.warning("Strava credentials not configured; nightly refresh will be skipped.")

    scheduler = build_scheduler()
    scheduler.start()
    logger.info(
        "Scheduler started (nightly refresh at %02d:00 UTC). Press Ctrl+C to stop.",
        settings.refresh_hour,
    )

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()
        logger.info("Goodbye.")


if __name__ == "__main__":
    # Dispatch on first argument: `python -m rundash refresh` or just `python -m rundash`
    if len(sys.argv) > 1:
        _run_command(sys.argv[1], sys.argv[2:])
    else:
        asyncio.run(_run_scheduler())

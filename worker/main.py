"""
Dispatcher entry point.

Runs one simulated dispatch and exits:

    1. Build Settings from env/.env, with command-line flags on top
    2. Ensure the sqlite tables exist (unless --no-record)
    3. Run the Dispatcher with a LoggingObserver (+ SqlRecorder)
    4. Print the run summary

To run:
    python -m worker.main                               # 12 jobs, real time
    python -m worker.main --jobs 50 --max-retries 3
    python -m worker.main --seed 42 --simulated         # instant, reproducible
    dispatcher --jobs 5 --db /tmp/runs.db               # installed console script

Exit status: 0 on a completed run (even if some jobs FAILED, that is an
outcome, not an error), 1 on invalid configuration.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.orm import sessionmaker

from config.settings import Settings
from jobs.process_model import RandomProcessModel
from models.base import Base, create_sync_engine
from models.errors import ConfigurationError
from models.events import RunSummary
from scheduler.engine import Dispatcher
from worker.clock import MonotonicClock, SimulatedClock
from worker.observers import LoggingObserver
from worker.recorder import SqlRecorder
from worker.retry import RetryPolicy

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)

# flag dest → Settings field
_OVERRIDES = {
    "jobs": "JOBS",
    "max_retries": "MAX_RETRIES",
    "mean_ms": "MEAN_MS",
    "stddev_ms": "STDDEV_MS",
    "seed": "SEED",
    "db": "DB_PATH",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Priority job dispatcher simulation")
    parser.add_argument("--jobs", type=int, default=None, help="Number of jobs to seed (default: 12)")
    parser.add_argument("--max-retries", type=int, default=None, help="Retries per job (default: 2)")
    parser.add_argument("--mean-ms", type=int, default=None, help="Mean service time in ms (default: 300)")
    parser.add_argument("--stddev-ms", type=int, default=None, help="Service time stddev in ms (default: 100)")
    parser.add_argument("--db", type=str, default=None, help="sqlite file for run records (default: dispatcher.db)")
    parser.add_argument("--seed", type=int, default=None, help="Seed the random process model")
    parser.add_argument(
        "--simulated", action="store_true",
        help="Use virtual time: no real sleeping, timestamps reproducible with --seed",
    )
    parser.add_argument("--no-record", action="store_true", help="Don't persist the run to sqlite")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Env/.env values, overridden by any flag the user actually passed."""
    overrides = {
        field: getattr(args, dest)
        for dest, field in _OVERRIDES.items()
        if getattr(args, dest) is not None
    }
    return Settings(**overrides)


def run_dispatch(cfg: Settings, simulated: bool = False, record: bool = True) -> RunSummary:
    # Dispatcher() checks its preconditions before any table is created
    dispatcher = Dispatcher(
        process_model=RandomProcessModel(cfg.MEAN_MS, cfg.STDDEV_MS, seed=cfg.SEED),
        jobs=cfg.JOBS,
        max_retries=cfg.MAX_RETRIES,
        clock=SimulatedClock() if simulated else MonotonicClock(),
        observers=[LoggingObserver()],
        retry_policy=RetryPolicy(cfg.BACKOFF_BASE_MS),
    )
    if not record:
        return dispatcher.run()

    engine = create_sync_engine(cfg.sync_database_url)
    try:
        Base.metadata.create_all(engine)
        dispatcher.add_observer(SqlRecorder(sessionmaker(engine)))
        return dispatcher.run()
    finally:
        engine.dispose()  # release the sqlite file handles


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_settings(args)
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Invalid configuration:\n{e}")
        return 1

    logging.basicConfig(
        level=cfg.log_level,
        format=LOG_FORMAT,
    )

    logger.info(
        f"Dispatcher starting with {cfg.JOBS} jobs, max_retries={cfg.MAX_RETRIES}, "
        f"mean={cfg.MEAN_MS}ms, stddev={cfg.STDDEV_MS}ms, "
        f"db={'-' if args.no_record else cfg.DB_PATH}"
        + (f", seed={cfg.SEED}" if cfg.SEED is not None else "")
    )

    try:
        run_dispatch(cfg, simulated=args.simulated, record=not args.no_record)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

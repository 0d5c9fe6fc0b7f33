"""Scheduler - run triage cycles on a schedule.

Supports two modes:
1. Built-in loop (polls every CHECK_INTERVAL seconds)
2. External scheduling (cron runs one-shot cycles)

Usage:
    # Run as a long-lived service
    python -m inbox_triage.scheduler

    # One-shot run (for cron)
    python -m inbox_triage.scheduler --once
"""
import logging
import sys
import time

logger = logging.getLogger("inbox_triage.scheduler")


def run_once(engine) -> dict:
    """Execute one triage cycle and log anything it did."""
    results = engine.run_once()
    if results["threads_triaged"] or results["threads_archived"]:
        logger.info(f"Cycle: {results}")
    return results


def run_forever(engine, interval: int = 60, max_cycles: int = 10, sleep=time.sleep) -> None:
    """Keep triaging until interrupted.

    While threads keep coming, cycles run back to back (at most
    ``max_cycles`` in a row); once the inbox has nothing eligible, or the
    burst cap is hit, the loop waits ``interval`` seconds.
    """
    logger.info(f"Starting scheduler (interval: {interval}s, burst: {max_cycles} cycles)")
    try:
        while True:
            for _ in range(max(max_cycles, 1)):
                results = run_once(engine)
                if results["thread_id"] is None:
                    break
            sleep(interval)
    except KeyboardInterrupt:
        logger.info("Scheduler stopped.")


def generate_cron_entry(python_path: str = "python", project_dir: str = ".") -> str:
    """Return a crontab line that runs a one-shot cycle every 5 minutes."""
    return f"*/5 * * * * cd {project_dir} && {python_path} -m inbox_triage.scheduler --once >> /tmp/inbox-triage.log 2>&1"


def build_engine(cfg, interactive: bool = True):
    """Wire the Gmail client, scorer and knowledge base from configuration.

    ``interactive=False`` never opens a browser for OAuth consent.
    """
    from inbox_triage.auth import get_gmail_service
    from inbox_triage.contexts import ContextRepository
    from inbox_triage.gmail_client import MailClient
    from inbox_triage.scorer import SimilarityScorer
    from inbox_triage.triage import TriageEngine

    contexts = ContextRepository.from_yaml(cfg.contexts_path)
    mail_client = MailClient(get_gmail_service(cfg.credentials_dir, interactive=interactive))
    scorer = SimilarityScorer(cfg.scorer_host, cfg.scorer_port, cfg.scorer_timeout)
    engine = TriageEngine.from_config(cfg, mail_client, scorer, contexts)
    engine.initialize()
    return engine


def main(argv=None) -> int:
    from inbox_triage.config import load_config
    from inbox_triage.errors import TriageError
    from inbox_triage.utils import setup_logging

    argv = sys.argv[1:] if argv is None else argv
    once = "--once" in argv
    cfg = load_config()
    setup_logging(cfg.log_level)

    try:
        engine = build_engine(cfg, interactive=not once)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except TriageError as e:
        logger.critical(f"Cannot start triage: {e}")
        return 1

    if once:
        logger.info("Running one-shot cycle...")
        results = engine.run_once()
        logger.info(f"Cycle complete: {results}")
    else:
        run_forever(engine, interval=cfg.check_interval, max_cycles=cfg.max_cycles)
    return 0


if __name__ == "__main__":
    sys.exit(main())

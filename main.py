"""Inbox Triage - Main entry point."""
import sys

from inbox_triage.config import load_config
from inbox_triage.errors import TriageError
from inbox_triage.scheduler import build_engine, run_forever
from inbox_triage.utils import setup_logging


def main():
    cfg = load_config()
    logger = setup_logging(cfg.log_level)
    logger.info("Starting Inbox Triage")

    try:
        engine = build_engine(cfg)
    except FileNotFoundError as e:
        logger.error(str(e))
        logger.error(
            "\n=== SETUP REQUIRED ===\n"
            "1. Go to https://console.cloud.google.com/\n"
            "2. Create a project and enable the Gmail API\n"
            "3. Create OAuth 2.0 credentials (Desktop app)\n"
            f"4. Download the JSON and save as {cfg.credentials_dir / 'client_secret.json'}\n"
            "5. Start the similarity scorer and run this script again\n"
        )
        sys.exit(1)
    except TriageError as e:
        logger.critical(f"Cannot initialize triage: {e}")
        sys.exit(1)

    if cfg.host_address:
        logger.info(f"Triaging inbox of {cfg.host_address} (acceptance score > {cfg.acceptance_score})")
    else:
        logger.warning("HOST_ADDRESS is not set; self-sent threads will not be detected")
    logger.info("Press Ctrl+C to stop")
    run_forever(engine, interval=cfg.check_interval, max_cycles=cfg.max_cycles)
    logger.info("Stopping Inbox Triage")


if __name__ == "__main__":
    main()

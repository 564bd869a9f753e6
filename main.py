"""
Live Goal-Signal Analysis System - Main Entry Point
Follows one in-play match and logs the derived goal signal every tick
"""

import sys
import signal
import logging
import click
from logger_config import setup_logging
from api_client import B365Client
from history_store import MatchHistoryStore
from live_scanner import MatchPoller
from pipeline import MatchPipeline
import config


@click.command()
@click.option("--match-id", "-m", help="Feed event id to follow")
@click.option("--token", default=config.B365_TOKEN, help="B365 API token (DEMO_MODE for demo data)")
@click.option("--interval", default=config.POLL_INTERVAL, show_default=True, help="Seconds between ticks")
@click.option("--once", is_flag=True, help="Run a single tick and exit")
@click.option("--list", "list_events", is_flag=True, help="List in-play events and exit")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(match_id, token, interval, once, list_events, debug):
    """Main application entry point"""
    logger = setup_logging(logging.DEBUG if debug else logging.INFO)
    logger.info("Initializing Live Goal-Signal Analysis System")

    client = B365Client(token=token)

    if list_events:
        for event in client.get_inplay_events():
            timer = event.get('timer') or {}
            click.echo(
                f"{event.get('id')}: {event.get('home', {}).get('name', '?')} vs "
                f"{event.get('away', {}).get('name', '?')} "
                f"{event.get('ss') or '-'} ({timer.get('tm', event.get('time', '?'))}') "
                f"[{event.get('league', {}).get('name', '')}]"
            )
        return

    if not match_id:
        raise click.UsageError("--match-id is required unless --list is given")

    store = MatchHistoryStore()
    cleaned = store.cleanup_old_matches()
    if cleaned:
        logger.info(f"Cleaned {cleaned} old matches from history store")

    pipeline = MatchPipeline(store=store)
    poller = MatchPoller(client, pipeline, interval=interval)
    poller.switch_match(match_id)

    if once:
        poller.poll_once()
        return

    def signal_handler(sig, frame):
        """Handle graceful shutdown on CTRL+C"""
        logger.info("Shutting down gracefully...")
        poller.stop()

    signal.signal(signal.SIGINT, signal_handler)

    try:
        poller.run()
    except Exception as e:
        logger.critical(f"Fatal error: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

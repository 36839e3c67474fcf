"""Entry point: load configuration, run the job, map failures to exit codes."""
import logging
import sys

from config import load_config
from statsgen.errors import ConfigError, StatsGenError
from statsgen.job import StatsGenJob
from statsgen.log import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    """
    Run one stats generation.

    Returns:
        0 on success, the failing error's exit code otherwise
    """
    try:
        config = load_config()
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Configuration error: {e}")
        return e.exit_code

    setup_logging(config)

    try:
        result = StatsGenJob(config).run()
    except StatsGenError as e:
        logger.error(f"Stats generation failed at stage '{e.stage}': {e}")
        return e.exit_code

    logger.info(
        f"Stats generation completed successfully: {result.chain_count} chains, "
        f"{len(result.written_files)} files written"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

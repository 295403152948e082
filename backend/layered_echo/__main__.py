"""`python -m layered_echo` — run the service with environment settings.

Exit status: 0 after a clean stop, 1 when startup fails, 130 when interrupted
(uvicorn re-raises SIGINT once the drain has finished).
"""

import logging
import sys

from layered_echo import ConstructionError, main

logger = logging.getLogger("layered_echo")

EXIT_STARTUP_FAILED = 1
EXIT_INTERRUPTED = 130

if __name__ == "__main__":
    try:
        main()
    except ConstructionError as exc:
        logger.critical(f"Startup aborted: {exc.message}")
        sys.exit(EXIT_STARTUP_FAILED)
    except KeyboardInterrupt:
        logger.info("Interrupted, service stopped")
        sys.exit(EXIT_INTERRUPTED)

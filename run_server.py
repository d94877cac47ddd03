import os

import uvicorn

from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    setup_logging(level=os.getenv("GUARDIAN_LOG_LEVEL", "INFO"), job_name="guardian")
    logger.info("Starting Guardian API server")

    uvicorn.run(
        "guardian.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )

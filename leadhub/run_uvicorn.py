import os

import uvicorn

from leadhub.logging_config import configure_logging


def main() -> None:
    """
    Uvicorn launcher.
    - Reads PORT from env, defaults to 5000 for local dev.
    - Logging configured before Uvicorn starts.
    """

    # Must run before uvicorn.run() so workers inherit logging.
    configure_logging()

    port = int(os.environ.get("PORT", 5000))

    uvicorn.run(
        "leadhub.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_config=None,      # keep the config applied above
        use_colors=False,
    )


if __name__ == "__main__":
    main()

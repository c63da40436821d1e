"""Run the static map registry with uvicorn.

Example:
    $ HOST=127.0.0.1 PORT=9000 python -m smap_registry
"""

import uvicorn

from smap_registry.core import config


def main() -> None:
    """Serve the application on the configured host and port."""
    settings = config.get_settings()
    uvicorn.run(
        "smap_registry.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

"""Entry point for running the API with uvicorn."""

from __future__ import annotations

import uvicorn

from payroll_bridge.core.config import AppSettings


def main() -> None:
    """Run the application."""
    settings = AppSettings()
    uvicorn.run(
        "payroll_bridge.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

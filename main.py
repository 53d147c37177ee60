"""Main application entry point."""

import os

from eventi.config.environment import IS_PRODUCTION_ENVIRONMENT
from eventi.api.app import create_application

app = create_application()

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8081"))
    if not IS_PRODUCTION_ENVIRONMENT:
        # Reload needs an import string rather than the app object
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=port,
            reload=True,
            log_level="debug"
        )
    else:
        # Single worker: every write rewrites the same JSON file
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=port,
            reload=False,
            log_level="info",
            proxy_headers=True,
            forwarded_allow_ips="*"
        )

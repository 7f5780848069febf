"""
Link Mailer API
FastAPI application that emails passwordless sign-in and verification links.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

from link_mailer.config import Settings, load_settings
from link_mailer.errors import LinkMailerError, link_mailer_error_handler
from link_mailer.routers import send_email

# Configure logging to output to console
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

# Cloud Functions unpacks the deployed source into this directory
DEPLOYMENT_SOURCE_DIR = "serverless_function_source_code"


def fix_working_directory(source_dir: str = DEPLOYMENT_SOURCE_DIR) -> bool:
    """
    Change into the deployment packaging directory if it exists.

    Relative template lookups (email_template.html) then resolve the same way
    in a packaged deployment as they do locally.

    Returns True if the working directory was changed.
    """
    path = Path(source_dir)
    if not path.is_dir():
        return False

    os.chdir(path)
    logger.info(f"Changed working directory to {path.resolve()}")
    return True


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Settings are loaded from the environment when not supplied; a missing or
    invalid value raises ConfigurationError here, before any request is served.
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="Link Mailer API",
        description="Emails passwordless sign-in and email verification links",
        version="0.1.0",
    )
    app.state.settings = settings

    app.add_exception_handler(LinkMailerError, link_mailer_error_handler)

    app.include_router(send_email.router, tags=["send-email"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    logger.info(
        f"Link Mailer configured: identity provider={settings.identity_provider}, "
        f"link mode={settings.link_mode}, template={settings.email_template_path}"
    )
    return app


fix_working_directory()
load_dotenv()

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("link_mailer.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))

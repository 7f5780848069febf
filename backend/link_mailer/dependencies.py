"""
FastAPI dependencies.

Settings are built once in main.create_app and stored on app.state; handlers
read them through get_settings so tests can supply their own.
"""

from fastapi import Request

from link_mailer.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings

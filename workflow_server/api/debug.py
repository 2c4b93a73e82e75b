"""
Diagnostic endpoints: configuration presence and cookie introspection
"""

from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from workflow_server.core.config import environment_status
from workflow_server.core.security import AUTH_COOKIE, MOCK_USER_COOKIE


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/debug", tags=["debug"])

COOKIE_PREVIEW_LENGTH = 50


class CookiePreview(BaseModel):
    name: str
    value: str
    hasValue: bool


class CookieReport(BaseModel):
    cookies: List[CookiePreview] = Field(default_factory=list)
    count: int
    hasAuthToken: bool
    hasMockUser: bool


def preview_cookie_value(value: str) -> str:
    # Suffix is appended even when nothing was cut off
    return value[:COOKIE_PREVIEW_LENGTH] + "..."


@router.get("/env")
def check_environment() -> Dict[str, str]:
    """Report which configuration values are present"""
    return environment_status()


@router.get("/cookies", response_model=CookieReport)
def list_cookies(request: Request):
    """List request cookies with truncated values"""
    cookies = request.cookies
    previews = [
        CookiePreview(name=name, value=preview_cookie_value(value), hasValue=bool(value))
        for name, value in cookies.items()
    ]
    logger.debug(f"Cookie introspection: {len(previews)} cookies")
    return CookieReport(
        cookies=previews,
        count=len(previews),
        hasAuthToken=AUTH_COOKIE in cookies,
        hasMockUser=MOCK_USER_COOKIE in cookies,
    )

"""Shared pytest fixtures."""

import os
from unittest.mock import patch

import pytest

from mcp_realip.settings import Settings


@pytest.fixture
def settings():
    """Settings built from a clean environment."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(_env_file=None)


@pytest.fixture
def make_headers():
    """Build a header mapping the way a proxied request carries them."""

    def build(x_real_ip="", x_forwarded_for="", x_client_ip=""):
        headers = {}
        if x_real_ip:
            headers["X-Real-IP"] = x_real_ip
        if x_forwarded_for:
            headers["X-Forwarded-For"] = x_forwarded_for
        if x_client_ip:
            headers["X-Client-IP"] = x_client_ip
        return headers

    return build

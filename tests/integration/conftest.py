"""Fixtures for the API integration tests."""

from __future__ import annotations

import hashlib
from collections.abc import Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from avatarforge.api.main import create_app
from avatarforge.cache.handlers import MappingIdentityResolver

USER_EMAIL = "user@example.org"
USER_HASH = hashlib.sha256(USER_EMAIL.encode("utf-8")).hexdigest()


@pytest.fixture
def test_client(test_config, gravatar_transport) -> Generator[TestClient, None, None]:
    """TestClient for an application with a temporary cache and a mocked remote service.

    Used as a context manager so the lifespan handler builds the services.
    """
    resolver = MappingIdentityResolver(users={USER_HASH: USER_EMAIL}, comment_authors={USER_HASH: USER_EMAIL})
    app = create_app(test_config, resolver=resolver, http_client=httpx.Client(transport=gravatar_transport))

    with TestClient(app) as client:
        yield client


@pytest.fixture
def user_hash() -> str:
    return USER_HASH

"""Tests for avatarforge.api.models: request and response validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from avatarforge.api.models import AvatarResponse, ConfigResponse, TrimRequest, TrimResponse


class TestTrimRequest:
    def test_default_scope(self):
        assert TrimRequest().scope == "all"

    @pytest.mark.parametrize("scope", ["all", "gravatars", "images"])
    def test_valid_scopes(self, scope):
        assert TrimRequest(scope=scope).scope == scope

    def test_invalid_scope(self):
        with pytest.raises(ValidationError):
            TrimRequest(scope="everything")


class TestTrimResponse:
    def test_skipped_jobs_are_null(self):
        assert TrimResponse(gravatars=3).model_dump() == {"gravatars": 3, "images": None}


class TestConfigResponse:
    def test_round_trip(self):
        payload = {
            "version": "0.3.0",
            "cache_url_prefix": "avatar-privacy",
            "default_icon_size": 100,
            "max_icon_size": 1024,
            "icon_types": ["retro"],
        }
        assert ConfigResponse(**payload).model_dump() == payload


class TestAvatarResponse:
    def test_fields(self):
        resp = AvatarResponse(type="retro", url="/avatar-privacy/retro/9/7/abc.svg")
        assert resp.model_dump() == {"type": "retro", "url": "/avatar-privacy/retro/9/7/abc.svg"}

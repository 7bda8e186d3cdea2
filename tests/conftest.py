# -*- coding: utf-8 -*-
"""Shared fixtures for docktidy tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from docktidy.models import Resource, ResourceType, UsageHistory

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeDockerClient:
    """Stands in for docker.DockerClient."""

    def __init__(self, df=None, networks=None, ping_error=None, df_error=None):
        self._df = df or {}
        self.ping_error = ping_error
        self.df_error = df_error
        self.containers = Mock()
        self.images = Mock()
        self.volumes = Mock()
        self.networks = Mock()
        self.networks.list.return_value = [Mock(attrs=attrs) for attrs in networks or []]

    def ping(self):
        if self.ping_error:
            raise self.ping_error
        return True

    def df(self):
        if self.df_error:
            raise self.df_error
        return self._df


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_resource():
    """Factory for resources last used `days_ago` days before NOW."""

    def _make(
        resource_type=ResourceType.IMAGE,
        resource_id="sha256:" + "a" * 64,
        days_ago=100,
        size=1000,
        in_use=False,
        labels=None,
        tags=None,
        name="",
    ):
        last_used = NOW - timedelta(days=days_ago) if days_ago is not None else None
        return Resource(
            id=resource_id,
            type=resource_type,
            name=name,
            size=size,
            created_at=last_used,
            last_used=last_used,
            in_use=in_use,
            labels=labels or {},
            tags=tags or [],
        )

    return _make


@pytest.fixture
def make_history():
    def _make(resource, days_ago=200, count=3):
        return UsageHistory(
            resource_id=resource.id,
            resource_type=resource.type,
            last_accessed=NOW - timedelta(days=days_ago),
            access_count=count,
        )

    return _make


@pytest.fixture
def temp_config_file(tmp_path):
    """Config file path inside a temporary directory."""
    return tmp_path / ".docktidy" / "config.json"


@pytest.fixture
def fake_client():
    """The FakeDockerClient class, for building clients per test."""
    return FakeDockerClient

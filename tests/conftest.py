import asyncio
from typing import Callable, Iterator

import pytest
from prometheus_client import CollectorRegistry

from fluxreporter.models import Origin
from fluxreporter.month import Month
from fluxreporter.provider.imageflux import ImageFluxClient


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry to avoid cross-test state.
    """
    return CollectorRegistry()


@pytest.fixture()
def client() -> "Iterator[ImageFluxClient]":
    client = ImageFluxClient(email="user@example.com", password="secret")
    yield client
    asyncio.run(client.close())


@pytest.fixture()
def month() -> "Month":
    return Month.parse("2023-12")


@pytest.fixture()
def origins() -> "list[Origin]":
    """
    two origins rolled up into project A and one for project B.
    """
    return [
        Origin(id=1, project="A", endpoint="a1.imageflux.jp"),
        Origin(id=2, project="B", endpoint="b.imageflux.jp"),
        Origin(id=3, project="A", endpoint="a2.imageflux.jp"),
    ]


def _statistics_body(*volumes: "tuple[int, int, int]") -> "dict":
    """
    builds a statistics envelope whose cumulative reports carry the
    given (cached, failure, missed) outbound byte counts, oldest first.
    """
    return {
        "ok": True,
        "error": "",
        "statistics": {
            "summary": {},
            "reports": [],
            "cumulativeReports": [
                {
                    "time": f"2023-12-{day + 1:02d}T00:00:00+09:00",
                    "cachedOutboundBytes": cached,
                    "failureOutboundBytes": failure,
                    "missedOutboundBytes": missed,
                }
                for day, (cached, failure, missed) in enumerate(volumes)
            ],
        },
    }


@pytest.fixture()
def statistics_body() -> "Callable[..., dict]":
    return _statistics_body

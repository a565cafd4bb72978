from typing import Any

import structlog

from fluxreporter.errors import DecodeError, RemoteError
from fluxreporter.models import CumulativeReport, Origin
from fluxreporter.month import Month
from fluxreporter.provider.imageflux import ImageFluxClient

logger = structlog.get_logger()

STATISTICS_PATH = ".ui-api/statistics.summarized"
# interval 3 asks the console for daily buckets
STATISTICS_INTERVAL = 3


class StatisticsFetcher:
    """
    StatisticsFetcher implements the VolumeSource protocol against the
    console's summarized statistics endpoint. It turns the cumulative
    report of one origin into the number of bytes it transferred in
    a month.
    """

    def __init__(self, client: "ImageFluxClient") -> "None":
        self._client = client

    async def fetch_volume(self, origin: "Origin", month: "Month") -> "int":
        """
        fetches the statistics of origin for month and returns the
        cached + failure + missed outbound bytes of the latest
        cumulative report, or 0 when the console has no entries.
        """
        url = self._client.build_url(STATISTICS_PATH)
        payload = {
            "originId": origin.id,
            "interval": STATISTICS_INTERVAL,
            "from": month.start_datetime(),
            "to": month.end_datetime(),
        }
        request = self._client.build_request("POST", url, json=payload)

        logger.debug("statistics_request", url=str(url), payload=payload)
        resp = await self._client.send(request)

        if resp.status_code != 200:
            logger.debug(
                "statistics_unexpected_status",
                origin=origin.id,
                status_code=resp.status_code,
                body=resp.text,
            )
            raise RemoteError(
                "unexpected status from statistics endpoint",
                resp.status_code,
                {"origin": origin.id, "url": str(url)},
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise DecodeError(
                f"statistics body is not JSON: {exc}",
                {"origin": origin.id, "url": str(url)},
            ) from exc

        reports = self._cumulative_reports(data, origin, str(url))
        if not reports:
            logger.debug("statistics_empty", origin=origin.id)
            return 0

        # entries are ordered oldest first
        latest = reports[-1]
        logger.debug(
            "origin_latest_report",
            origin=origin.id,
            time=latest.time,
            cached_outbound_bytes=latest.cached_outbound_bytes,
            failure_outbound_bytes=latest.failure_outbound_bytes,
            missed_outbound_bytes=latest.missed_outbound_bytes,
        )
        return latest.volume

    @staticmethod
    def _cumulative_reports(
        data: "Any",
        origin: "Origin",
        url: "str",
    ) -> "list[CumulativeReport]":
        """
        validates the response envelope and parses its cumulativeReports.
        """
        context = {"origin": origin.id, "url": url}
        if not isinstance(data, dict):
            raise DecodeError("statistics envelope is not an object", context)

        if data.get("ok") is False:
            raise RemoteError(
                f"statistics endpoint reported an error: {data.get('error', '')}",
                200,
                context,
            )

        statistics = data.get("statistics") or {}
        if not isinstance(statistics, dict):
            raise DecodeError("statistics field is not an object", context)

        entries = statistics.get("cumulativeReports") or []
        if not isinstance(entries, list):
            raise DecodeError("cumulativeReports is not a list", context)

        reports: "list[CumulativeReport]" = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise DecodeError("cumulative report is not an object", context)
            try:
                reports.append(
                    CumulativeReport(
                        time=str(entry.get("time", "")),
                        cached_outbound_bytes=_as_bytes(entry, "cachedOutboundBytes"),
                        failure_outbound_bytes=_as_bytes(
                            entry, "failureOutboundBytes"
                        ),
                        missed_outbound_bytes=_as_bytes(entry, "missedOutboundBytes"),
                    )
                )
            except (TypeError, ValueError) as exc:
                raise DecodeError(str(exc), context) from exc

        return reports


def _as_bytes(entry: "dict[str, Any]", key: "str") -> "int":
    value = entry.get(key, 0)
    # bool is an int subclass but never a byte count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{key} must be non-negative, got {value}")
    return value

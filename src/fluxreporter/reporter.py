import asyncio
import time
from typing import Sequence

import structlog

from fluxreporter.aggregator import RateReports
from fluxreporter.errors import ReporterError
from fluxreporter.metrics import MetricsUpdater
from fluxreporter.models import Origin
from fluxreporter.month import Month
from fluxreporter.provider.base import VolumeSource
from fluxreporter.provider.imageflux import ImageFluxClient
from fluxreporter.provider.statistics import StatisticsFetcher

logger = structlog.get_logger()

# pause after every origin fetch to go easy on the console
_DEFAULT_INTERVAL_SECONDS = 1.0


class RateReporter:
    """
    RateReporter orchestrates a single reporting run. It logs in once,
    fetches every origin's volume sequentially in configured order,
    sleeping a fixed interval after each fetch, and folds the volumes
    into per-project rate reports.

    Any failure aborts the whole run: a report with missing origins
    is never returned.
    """

    def __init__(
        self,
        client: "ImageFluxClient",
        origins: "Sequence[Origin]",
        fetcher: "VolumeSource | None" = None,
        interval_seconds: "float" = _DEFAULT_INTERVAL_SECONDS,
        metrics: "MetricsUpdater | None" = None,
    ) -> "None":
        self._client = client
        self._origins: "tuple[Origin, ...]" = tuple(origins)
        self._fetcher: "VolumeSource" = (
            fetcher if fetcher is not None else StatisticsFetcher(client)
        )
        self._interval = interval_seconds
        self._metrics = metrics

    async def run(self, month: "Month") -> "RateReports":
        """
        runs the report for month and returns the finalized reports.
        """
        logger.info(
            "run_start",
            month=str(month),
            start_date=month.start_date(),
            end_date=month.end_date(),
            origins=len(self._origins),
        )

        try:
            await self._client.ensure_authenticated()
        except ReporterError:
            self._inc_error("auth")
            raise

        reports = RateReports()

        for origin in self._origins:
            volume = await self._fetch(origin, month)
            reports.add(origin.project, volume)
            await asyncio.sleep(self._interval)

        reports.calc_rate()

        if self._metrics is not None:
            self._metrics.update_reports(reports)
            self._metrics.set_last_run_success(time.time())

        logger.info("run_end", projects=len(reports), total_volume=reports.total)
        return reports

    async def _fetch(self, origin: "Origin", month: "Month") -> "int":
        fetch_start = time.monotonic()
        try:
            volume = await self._fetcher.fetch_volume(origin, month)
        except ReporterError:
            logger.debug("origin_fetch_failed", origin=origin.id)
            self._inc_error("fetch")
            raise

        logger.debug(
            "origin_volume_fetched",
            origin=origin.id,
            project=origin.project,
            volume=volume,
        )
        if self._metrics is not None:
            self._metrics.observe_fetch_duration(time.monotonic() - fetch_start)
            self._metrics.set_origin_volume(origin, volume)

        return volume

    def _inc_error(self, stage: "str") -> "None":
        if self._metrics is not None:
            self._metrics.inc_fetch_error(stage)

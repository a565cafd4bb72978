from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

from fluxreporter.aggregator import RateReports
from fluxreporter.models import Origin


class MetricsUpdater:
    """
    records a reporting run into Prometheus metrics. A one-shot run
    has no scrape endpoint, so the registry is meant to be written
    out with write_textfile() for the node exporter's textfile
    collector.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._registry: "CollectorRegistry" = registry
        self._fetch_duration: "Histogram" = Histogram(
            "fluxreporter_fetch_duration_seconds",
            "Duration of origin statistics fetches",
            registry=registry,
        )
        self._fetch_errors: "Counter" = Counter(
            "fluxreporter_fetch_errors_total",
            "Total number of failed console requests by stage",
            ["stage"],
            registry=registry,
        )
        self._origin_volume: "Gauge" = Gauge(
            "fluxreporter_origin_volume_bytes",
            "Bytes transferred by an origin during the reported month",
            ["origin_id", "project"],
            registry=registry,
        )
        self._project_volume: "Gauge" = Gauge(
            "fluxreporter_project_volume_bytes",
            "Bytes transferred by all origins of a project during the reported month",
            ["project"],
            registry=registry,
        )
        self._project_rate: "Gauge" = Gauge(
            "fluxreporter_project_rate",
            "Share of the total volume attributed to a project",
            ["project"],
            registry=registry,
        )
        self._last_run_success: "Gauge" = Gauge(
            "fluxreporter_last_run_success_timestamp_seconds",
            "Unix timestamp of the last successful reporting run",
            registry=registry,
        )

    @property
    def registry(self) -> "CollectorRegistry":
        return self._registry

    def observe_fetch_duration(self, duration_seconds: "float") -> "None":
        self._fetch_duration.observe(duration_seconds)

    def inc_fetch_error(self, stage: "str") -> "None":
        self._fetch_errors.labels(stage=stage).inc()

    def set_origin_volume(self, origin: "Origin", volume: "int") -> "None":
        self._origin_volume.labels(
            origin_id=str(origin.id), project=origin.project
        ).set(volume)

    def update_reports(self, reports: "RateReports") -> "None":
        """
        exports the finalized per-project volumes and rates.
        """
        for report in reports:
            self._project_volume.labels(project=report.project).set(report.volume)
            self._project_rate.labels(project=report.project).set(report.rate)

    def set_last_run_success(self, timestamp: "float") -> "None":
        self._last_run_success.set(timestamp)

    def write_textfile(self, path: "str") -> "None":
        write_to_textfile(path, self._registry)

import dataclasses
from typing import Iterator

import structlog

from fluxreporter.models import RateReport

logger = structlog.get_logger()


class RateReports:
    """
    RateReports folds origin volumes into per-project totals and
    derives each project's share of the grand total.

    It has two phases: add() accumulates volumes, then calc_rate()
    finalizes the rates over the accumulated snapshot. Once
    finalized, further add() calls are rejected.
    """

    def __init__(self) -> "None":
        self._reports: "dict[str, RateReport]" = {}
        self._finalized = False

    def add(self, project: "str", volume: "int") -> "None":
        """
        adds volume to the project's running total, creating a
        zero-valued report the first time the project is seen.
        """
        if self._finalized:
            raise RuntimeError("rates already calculated, cannot add volume")
        if volume < 0:
            raise ValueError(f"volume must be non-negative, got {volume}")

        report = self._reports.get(project) or RateReport(project=project)
        self._reports[project] = dataclasses.replace(
            report, volume=report.volume + volume
        )

    def calc_rate(self) -> "None":
        """
        sets every project's rate to volume / total. A zero total
        leaves all rates at 0.0.
        """
        self._finalized = True
        total = self.total
        logger.debug("total_volume_calculated", volume=total)

        if total == 0:
            return

        for project, report in self._reports.items():
            self._reports[project] = dataclasses.replace(
                report, rate=report.volume / total
            )

    @property
    def finalized(self) -> "bool":
        return self._finalized

    @property
    def total(self) -> "int":
        return sum(report.volume for report in self._reports.values())

    def get(self, project: "str") -> "RateReport | None":
        return self._reports.get(project)

    def __contains__(self, project: "object") -> "bool":
        return project in self._reports

    def __iter__(self) -> "Iterator[RateReport]":
        return iter(list(self._reports.values()))

    def __len__(self) -> "int":
        return len(self._reports)

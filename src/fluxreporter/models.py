from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Origin:
    """
    Origin represents a configured ImageFlux origin
    and the project its traffic is billed to.
    """

    id: "int"
    project: "str"
    # informational only, never used to build requests
    endpoint: "str" = ""


@dataclass(frozen=True, slots=True)
class CumulativeReport:
    """
    CumulativeReport is one time-bucketed entry of the
    console's cumulative transfer statistics.
    """

    time: "str"
    cached_outbound_bytes: "int"
    failure_outbound_bytes: "int"
    missed_outbound_bytes: "int"

    @property
    def volume(self) -> "int":
        return (
            self.cached_outbound_bytes
            + self.failure_outbound_bytes
            + self.missed_outbound_bytes
        )


@dataclass(frozen=True, slots=True)
class RateReport:
    """
    RateReport is the aggregate of all origins sharing
    a project label.
    """

    project: "str"
    # bytes transferred across all of the project's origins
    volume: "int" = 0
    # share of the grand total, 0.0 until rates are calculated
    rate: "float" = 0.0

    def to_line(self) -> "str":
        return f"{self.project}\t{self.volume}\t{self.rate:f}"

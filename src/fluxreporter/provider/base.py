from typing import Protocol

from fluxreporter.models import Origin
from fluxreporter.month import Month


class VolumeSource(Protocol):
    """
    VolumeSource is the protocol the rate reporter fetches
    origin volumes through.

    Implementations return the number of bytes an origin
    transferred during the given month.
    """

    async def fetch_volume(self, origin: "Origin", month: "Month") -> "int": ...

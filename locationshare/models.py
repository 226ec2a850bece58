from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


# === Domain objects used by the in-memory store ===


@dataclass(frozen=True)
class LocationRecord:
    user_id: str
    latitude: float
    longitude: float
    timestamp: str  # ISO-8601, stored as given


# === API Schemas ===


class LocationIn(BaseModel):
    """Body of a location write.

    Missing fields fall back to zero values and unknown fields are ignored.
    Values of the wrong JSON type are rejected (a string latitude is not
    coerced to a float), as are NaN, Infinity and numbers too large for a
    float.
    """

    model_config = ConfigDict(strict=True, extra="ignore", allow_inf_nan=False)

    user_id: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    timestamp: str = ""

    def to_record(self) -> LocationRecord:
        return LocationRecord(
            user_id=self.user_id,
            latitude=self.latitude,
            longitude=self.longitude,
            timestamp=self.timestamp,
        )


class LocationOut(BaseModel):
    user_id: str
    latitude: float
    longitude: float
    timestamp: str


class Health(BaseModel):
    status: str = "healthy"

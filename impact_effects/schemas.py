from __future__ import annotations

from math import pi
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class InvalidImpactorError(ValueError):
    """Rejected impactor input; `field` names the first offending field."""

    def __init__(self, field: str, message: str, errors: list[dict] | None = None):
        self.field = field
        self.message = message
        self.errors = errors if errors is not None else [
            {"field": field, "message": message, "type": "value_error"}
        ]
        super().__init__(f"Invalid impactor parameter '{field}': {message}")

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "InvalidImpactorError":
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or "__root__",
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        first = errors[0]
        return cls(first["field"], first["message"], errors)


class ImpactorSpecification(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    diameter_m: float = Field(..., gt=0, description="Impactor diameter in meters")
    density_kgpm3: float = Field(..., gt=0, description="Bulk density in kg/m^3")
    speed_mps: float = Field(..., gt=0, description="Entry velocity in m/s")
    angle_deg: float = Field(..., gt=0, le=90, description="Entry angle to horizontal in degrees")
    mass_kg: Optional[float] = Field(None, gt=0, description="Mass in kg; derived from diameter and density when absent")
    is_water: bool = Field(False, description="Impact point is over water")
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in decimal degrees")

    # optional tunables, fall back to ImpactConfig
    luminous_efficiency: Optional[float] = Field(None, gt=0, lt=1)
    drag_coefficient: Optional[float] = Field(None, gt=0)
    surface_air_density: Optional[float] = Field(None, gt=0, description="Reference atmospheric density in kg/m^3")
    scale_height_m: Optional[float] = Field(None, gt=0)

    @classmethod
    def parse(cls, data: Mapping[str, Any] | "ImpactorSpecification") -> "ImpactorSpecification":
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise InvalidImpactorError("__root__", f"expected a mapping, got {type(data).__name__}")
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise InvalidImpactorError.from_validation_error(e) from e

    @property
    def resolved_mass_kg(self) -> float:
        if self.mass_kg is not None:
            return self.mass_kg
        return (pi / 6.0) * self.density_kgpm3 * self.diameter_m**3

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

from __future__ import annotations

from dataclasses import asdict, dataclass
from math import isfinite
from typing import Any, Literal, Optional

BurstRegime = Literal["surface", "low_airburst", "high_airburst"]
TargetKind = Literal["land", "water"]
CraterRegime = Literal["simple", "complex"]
EarthEffect = Literal["destroyed", "strongly_disturbed", "negligible_disturbed"]


@dataclass(frozen=True)
class ImpactRegime:
    burst: BurstRegime
    target: TargetKind
    crater: Optional[CraterRegime]


@dataclass(frozen=True)
class EnergyProfile:
    mass_kg: float
    kinetic_energy_j: float
    energy_mt: float
    recurrence_years: float


@dataclass(frozen=True)
class EntryProfile:
    strength_pa: float
    breakup_factor: float
    breakup: bool
    breakup_altitude_m: Optional[float]
    airburst: bool
    burst_altitude_m: float
    impact_velocity_mps: float


@dataclass(frozen=True)
class ThermalProfile:
    fireball_radius_m: float
    clothing_ignition_radius_m: float
    second_degree_burn_radius_m: float
    third_degree_burn_radius_m: float


@dataclass(frozen=True)
class CraterProfile:
    airburst: bool
    regime: Optional[CraterRegime] = None
    transient_diameter_m: Optional[float] = None
    transient_depth_m: Optional[float] = None
    final_diameter_m: Optional[float] = None
    final_depth_m: Optional[float] = None
    volume_km3: Optional[float] = None
    earth_volume_ratio: Optional[float] = None
    earth_effect: Optional[EarthEffect] = None
    ocean_floor_transient_diameter_m: Optional[float] = None


@dataclass(frozen=True)
class SeismicProfile:
    magnitude: Optional[float] = None
    radius_m_ge_7_5: Optional[float] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class BlastProfile:
    building_collapse_radius_m: float
    glass_shatter_radius_m: float
    overpressure_at_50_km_pa: float
    wind_speed_at_50_km_mps: float
    ionization_radius_m: float


@dataclass(frozen=True)
class TsunamiProfile:
    rim_wave_height_m: float = 0.0
    tsunami_radius_m: float = 0.0
    max_speed_mps: float = 0.0
    time_to_reach_1_km_s: float = 0.0
    time_to_reach_100_km_s: float = 0.0


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class ImpactAssessment:
    regime: ImpactRegime
    energy: EnergyProfile
    entry: EntryProfile
    thermal: ThermalProfile
    crater: CraterProfile
    seismic: SeismicProfile
    blast: BlastProfile
    tsunami: Optional[TsunamiProfile] = None

    @property
    def airburst(self) -> bool:
        return self.entry.airburst

    def to_dict(self) -> dict:
        """Profile name -> fields; non-finite numbers become None."""
        return _json_safe(asdict(self))

    def damage_radii(self) -> dict[str, Optional[float]]:
        """Radii (m) around ground zero used to sample affected population."""
        radii = {
            "fireball": self.thermal.fireball_radius_m,
            "clothing_ignition": self.thermal.clothing_ignition_radius_m,
            "second_degree_burn": self.thermal.second_degree_burn_radius_m,
            "third_degree_burn": self.thermal.third_degree_burn_radius_m,
            "building_collapse_shockwave": self.blast.building_collapse_radius_m,
            "glass_shatter": self.blast.glass_shatter_radius_m,
            "building_collapse_earthquake": self.seismic.radius_m_ge_7_5,
        }
        return _json_safe(radii)

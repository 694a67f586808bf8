from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:  # pragma: no cover
    from .schemas import ImpactorSpecification

# -----------------------------
# Physical constants
# -----------------------------
J_PER_MT_TNT = 4.184e15           # J in 1 megaton TNT
R_EARTH = 6.371e6                 # m
EARTH_DIAMETER_M = 12_756e3       # m
EARTH_VOLUME_KM3 = 1.083e12       # km^3
HALF_CIRCUMFERENCE_M = 20_037_508.34

# Final-crater regime switch on the transient diameter (m)
D_COMPLEX_TRANSIENT_M = 3200.0
K_TRANSIENT_ROCK = 1.161
K_TRANSIENT_WATER = 1.365

# EIEP air-blast (1 kt surface burst) shape parameters (Eq. 54*)
PX = 75_000.0   # Pa  crossover overpressure
RX = 290.0      # m   crossover distance

# (variable name, config attribute, exclusive upper bound) read by ImpactConfig.from_env
ENV_TUNABLES = (
    ("IMPACT_LUMINOUS_EFFICIENCY", "luminous_efficiency", 1.0),
    ("IMPACT_DRAG_COEFFICIENT", "drag_coefficient", None),
    ("IMPACT_SURFACE_AIR_DENSITY", "surface_air_density", None),
    ("IMPACT_SCALE_HEIGHT_M", "scale_height_m", None),
    ("IMPACT_OCEAN_DEPTH_M", "ocean_depth_m", None),
)


@dataclass(frozen=True)
class ImpactConfig:
    """Constants and default tunables shared by every stage of the model."""

    # tunables (overridable per request)
    luminous_efficiency: float = 3e-3
    drag_coefficient: float = 2.0
    surface_air_density: float = 1.0     # kg/m^3
    scale_height_m: float = 8000.0

    # atmospheric entry
    pancake_factor: float = 7.0

    # crater
    gravity_mps2: float = 9.81
    land_density_kgpm3: float = 2500.0
    seafloor_density_kgpm3: float = 2700.0
    water_density_kgpm3: float = 1000.0
    water_drag_coefficient: float = 0.877
    ocean_depth_m: float = 3682.0

    # thermal
    burn_horizon_m: float = 1_500_000.0

    # blast
    ambient_pressure_pa: float = 1e5
    sound_speed_mps: float = 330.0
    high_airburst_altitude_m: float = 10_000.0
    building_collapse_pa: float = 273_000.0
    glass_shatter_pa: float = 6_900.0
    ionization_pa: float = 75_750_000.0
    reference_distance_m: float = 50_000.0
    ionization_floor_m: float = 50_000.0
    solver_max_iter: int = 200
    solver_rel_tol: float = 1e-6

    # seismic
    seismic_reference_magnitude: float = 7.5

    # tsunami
    tsunami_significant_amplitude_m: float = 1.0

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "ImpactConfig":
        """Defaults overridden by IMPACT_* variables from the environment (or a .env file)."""
        load_dotenv(dotenv_path)
        overrides = {}
        for var, attr, upper in ENV_TUNABLES:
            raw = os.getenv(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                value = float(raw)
            except ValueError:
                raise ValueError(f"{var} must be numeric, got {raw!r}.") from None
            if not value > 0.0 or value == float("inf"):
                raise ValueError(f"{var} must be a positive finite number, got {raw!r}.")
            if upper is not None and value >= upper:
                raise ValueError(f"{var} must be below {upper}, got {raw!r}.")
            overrides[attr] = value
        return cls(**overrides)

    def with_tunables(self, spec: "ImpactorSpecification") -> "ImpactConfig":
        overrides = {
            "luminous_efficiency": spec.luminous_efficiency,
            "drag_coefficient": spec.drag_coefficient,
            "surface_air_density": spec.surface_air_density,
            "scale_height_m": spec.scale_height_m,
        }
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **overrides) if overrides else self


DEFAULT_CONFIG = ImpactConfig()

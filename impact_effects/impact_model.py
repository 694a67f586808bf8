from __future__ import annotations

import logging
from dataclasses import dataclass
from math import exp, inf, isfinite, isnan, log, log10, nan, pi, radians, sin, sqrt, tanh

from .config import (
    D_COMPLEX_TRANSIENT_M,
    DEFAULT_CONFIG,
    EARTH_DIAMETER_M,
    EARTH_VOLUME_KM3,
    HALF_CIRCUMFERENCE_M,
    J_PER_MT_TNT,
    K_TRANSIENT_ROCK,
    K_TRANSIENT_WATER,
    PX,
    R_EARTH,
    RX,
    ImpactConfig,
)
from .profiles import (
    BlastProfile,
    BurstRegime,
    CraterProfile,
    EarthEffect,
    EnergyProfile,
    EntryProfile,
    ImpactAssessment,
    ImpactRegime,
    SeismicProfile,
    ThermalProfile,
    TsunamiProfile,
)
from .schemas import ImpactorSpecification

logger = logging.getLogger(__name__)

# 1-Mt thermal fluence thresholds (MJ/m^2), Glasstone & Dolan
BURN_THRESHOLDS_1MT_MJ = {
    "clothing": 1.00,
    "second": 0.25,
    "third": 0.42,
}

# Qualitative descriptions for magnitudes beyond the distance correlations
EARTHQUAKE_MILESTONES = (
    (12.0, "Very large regional catastrophe. Cities destroyed across hundreds of kilometers."),
    (12.8, "Over 1 yottajoule of energy. Continental-scale disruption."),
    (13.5, "Extreme continental catastrophe."),
    (14.2, "Global mechanical crisis."),
    (15.0, "Over 64% of energy needed to vaporize all oceans."),
    (15.13, "Beyond threshold to vaporize Earth's oceans"),
    (16.2, "Planet-scale resurfacing and mantle upheaval."),
)


def _log(x: float) -> float:
    return log(x) if x > 0.0 else nan


def _sqrt(x: float) -> float:
    return sqrt(x) if x >= 0.0 else nan


def _exp(x: float) -> float:
    try:
        return exp(x)
    except OverflowError:
        return inf


@dataclass(frozen=True)
class Impactor:
    diameter_m: float
    speed_mps: float
    density_kgpm3: float
    angle_deg: float  # to HORIZONTAL
    mass_kg: float

    @classmethod
    def from_spec(cls, spec: ImpactorSpecification) -> "Impactor":
        return cls(
            diameter_m=spec.diameter_m,
            speed_mps=spec.speed_mps,
            density_kgpm3=spec.density_kgpm3,
            angle_deg=spec.angle_deg,
            mass_kg=spec.resolved_mass_kg,
        )

    @property
    def angle_rad(self) -> float:
        return radians(self.angle_deg)


# ---------- AIR BLAST ----------
def burst_regime(burst_altitude_m: float, high_airburst_altitude_m: float = 10_000.0) -> BurstRegime:
    if not burst_altitude_m > 0.0:
        return "surface"
    if burst_altitude_m > high_airburst_altitude_m:
        return "high_airburst"
    return "low_airburst"


def _overpressure_eq54(r_x: float, r_1: float) -> float:
    if r_1 <= 0.0:
        return inf
    return (PX * r_x) / (4.0 * r_1) * (1.0 + 3.0 * (r_x / r_1) ** 1.3)


def peak_overpressure_pa(r_m: float, energy_mt: float, burst_altitude_m: float,
                         high_airburst_altitude_m: float = 10_000.0) -> float:
    """
    Peak overpressure (Pa) at ground range r_m for a burst of energy_mt at burst_altitude_m.

    Distances and altitudes are scaled to a 1 kt explosion (cube-root yield scaling).
    Surface bursts and low airbursts use the Mach-reflection fit (Eq. 54*) with the
    crossover distance shifted upward for low bursts; high airbursts use an
    exponential decay whose amplitude and rate are power laws of the burst altitude (m).
    """
    yield_factor = (energy_mt * 1000.0) ** (1.0 / 3.0)
    if not yield_factor > 0.0:
        return nan
    r_1 = r_m / yield_factor

    regime = burst_regime(burst_altitude_m, high_airburst_altitude_m)
    if regime == "surface":
        return _overpressure_eq54(RX, r_1)
    if regime == "high_airburst":
        p_0 = 3.14e11 * burst_altitude_m ** -2.6
        beta = 34.87 * burst_altitude_m ** -1.73
        return p_0 * _exp(-beta * r_1)
    r_x = 289.0 + 0.65 * burst_altitude_m / 50.0
    return _overpressure_eq54(r_x, r_1)


def solve_radius_for_overpressure(p_target: float, energy_mt: float, burst_altitude_m: float,
                                  r_min: float, r_max: float = HALF_CIRCUMFERENCE_M,
                                  max_iter: int = 200, rel_tol: float = 1e-6,
                                  high_airburst_altitude_m: float = 10_000.0) -> float:
    """
    Ground range (m) at which the peak overpressure drops to p_target.

    Bisection on [r_min, r_max]; overpressure decreases monotonically with range.
    Airbursts search from ground zero. Targets above the pressure at r_min clamp to
    r_min, targets below the pressure at r_max clamp to r_max. Stops after max_iter
    halvings or once the bracket is narrower than rel_tol (relative), returning the
    bracket midpoint either way.
    """
    if burst_altitude_m > 0.0:
        r_min = 0.0
    if not isfinite(p_target) or p_target <= 0.0:
        return nan
    if r_min <= 0.0:
        r_min = 1e-6

    def p_at(r: float) -> float:
        return peak_overpressure_pa(r, energy_mt, burst_altitude_m, high_airburst_altitude_m)

    p_lo, p_hi = p_at(r_min), p_at(r_max)
    if isnan(p_lo) or isnan(p_hi):
        return nan
    if p_target >= p_lo:
        return r_min
    if p_target <= p_hi:
        return r_max

    lo, hi = r_min, r_max
    for _ in range(max_iter):
        if (hi - lo) / max(1.0, lo) <= rel_tol:
            break
        mid = 0.5 * (lo + hi)
        if p_at(mid) >= p_target:
            lo = mid
        else:
            hi = mid
    return 0.5 * (lo + hi)


def peak_wind_speed_mps(overpressure_pa: float, ambient_pa: float = 1e5, c0_mps: float = 330.0) -> float:
    """Rankine-Hugoniot peak wind speed behind the shock front."""
    x = overpressure_pa / (7.0 * ambient_pa)
    return (5.0 * x) * c0_mps / _sqrt(1.0 + 6.0 * x)


def earth_effect_for_ratio(ratio: float) -> EarthEffect:
    if ratio > 0.5:
        return "destroyed"
    if ratio >= 0.1:
        return "strongly_disturbed"
    return "negligible_disturbed"


def milestone_description(magnitude: float) -> str | None:
    """Highest milestone at or below the magnitude; None below the table."""
    found = None
    for floor, text in EARTHQUAKE_MILESTONES:
        if floor <= magnitude:
            found = text
    return found


class ImpactModel:
    """
    Energy + atmospheric entry + thermal + crater + seismic + air-blast + tsunami.

    Each stage returns an immutable profile. Stages that depend on the entry outcome
    accept a precomputed EntryProfile so that assess() resolves it only once.
    Degenerate arithmetic yields NaN rather than raising; inputs are expected to be
    validated through ImpactorSpecification.
    """

    def __init__(self, spec: ImpactorSpecification, config: ImpactConfig = DEFAULT_CONFIG):
        self.spec = spec
        self.p = Impactor.from_spec(spec)
        self.c = config.with_tunables(spec)

    @property
    def is_water(self) -> bool:
        return self.spec.is_water

    # ---------- Energetics ----------
    def kinetic_energy_J(self) -> float:
        return 0.5 * self.p.mass_kg * self.p.speed_mps**2

    def energy_mt_tnt(self) -> float:
        return self.kinetic_energy_J() / J_PER_MT_TNT

    def global_recurrence_years(self) -> float:
        return 109.0 * max(self.energy_mt_tnt(), 1e-12) ** 0.78

    def energy(self) -> EnergyProfile:
        return EnergyProfile(
            mass_kg=self.p.mass_kg,
            kinetic_energy_j=self.kinetic_energy_J(),
            energy_mt=self.energy_mt_tnt(),
            recurrence_years=self.global_recurrence_years(),
        )

    # ---------- ATMOSPHERIC ENTRY ----------
    def strength_pa(self) -> float:
        """Empirical strength [Pa] from bulk density: log10(Y)=2.107+0.0624*sqrt(rho_i)"""
        return 10.0 ** (2.107 + 0.0624 * sqrt(self.p.density_kgpm3))

    def _rho_at(self, z_m: float) -> float:
        """Exponential atmosphere: rho(z) = rho0 * exp(-z/H)."""
        return self.c.surface_air_density * _exp(-z_m / self.c.scale_height_m)

    def intact_surface_velocity_mps(self) -> float:
        c = self.c
        sT = sin(self.p.angle_rad)
        factor = (3.0 * c.drag_coefficient * c.surface_air_density * c.scale_height_m) / (
            4.0 * self.p.density_kgpm3 * self.p.diameter_m * sT)
        return self.p.speed_mps * _exp(-factor)

    def breakup_factor(self) -> float:
        c = self.c
        v0 = self.p.speed_mps
        return (c.drag_coefficient * c.scale_height_m * self.strength_pa()) / (
            self.p.density_kgpm3 * self.p.diameter_m * v0 * v0 * sin(self.p.angle_rad))

    def breakup_altitude_m(self, I_f: float) -> float:
        H = self.c.scale_height_m
        v0 = self.p.speed_mps
        Y = self.strength_pa()
        return -H * (_log(Y / (self.c.surface_air_density * v0 * v0))
                     + 1.308 - 0.314 * I_f - 1.303 * _sqrt(1.0 - I_f))

    def airburst_altitude_m(self, z_star: float) -> float:
        """Pancake-model burst altitude z_b (m), clamped at the surface."""
        c = self.c
        H = c.scale_height_m
        rho_zs = self._rho_at(z_star)
        # Dispersion length at breakup
        l_disp = self.p.diameter_m * sin(self.p.angle_rad) * _sqrt(
            self.p.density_kgpm3 / (c.drag_coefficient * rho_zs))
        alpha = _sqrt(c.pancake_factor**2 - 1.0)
        zb = z_star - 2.0 * H * _log(1.0 + (l_disp / (2.0 * H)) * alpha)
        return 0.0 if zb < 0.0 else zb

    def entry(self) -> EntryProfile:
        I_f = self.breakup_factor()
        breakup = I_f < 1.0
        z_star = None
        zb = 0.0
        if breakup:
            z_star = self.breakup_altitude_m(I_f)
            zb = self.airburst_altitude_m(z_star)
        airburst = breakup and zb > 0.0
        logger.debug("[entry] I_f=%.4g breakup=%s z*=%s z_b=%.1f airburst=%s",
                     I_f, breakup, z_star, zb, airburst)
        return EntryProfile(
            strength_pa=self.strength_pa(),
            breakup_factor=I_f,
            breakup=breakup,
            breakup_altitude_m=z_star,
            airburst=airburst,
            burst_altitude_m=zb,
            impact_velocity_mps=self.intact_surface_velocity_mps(),
        )

    # ---------- Thermal radiation ----------
    def fireball_radius_m(self, energy_J: float | None = None) -> float:
        E = self.kinetic_energy_J() if energy_J is None else energy_J
        return min(R_EARTH, 0.002 * E ** (1.0 / 3.0))

    def _scaled_threshold_Jpm2(self, mj_per_m2_at_1mt: float, energy_Mt: float) -> float:
        return (mj_per_m2_at_1mt * 1e6) * max(energy_Mt, 1e-12) ** (1.0 / 6.0)

    def burn_radius_m(self, mj_per_m2_at_1mt: float) -> float:
        E = self.kinetic_energy_J()
        thr = self._scaled_threshold_Jpm2(mj_per_m2_at_1mt, self.energy_mt_tnt())
        r = sqrt(self.c.luminous_efficiency * E / (2.0 * pi * thr))
        return min(r, self.c.burn_horizon_m)

    def thermal(self) -> ThermalProfile:
        return ThermalProfile(
            fireball_radius_m=self.fireball_radius_m(),
            clothing_ignition_radius_m=self.burn_radius_m(BURN_THRESHOLDS_1MT_MJ["clothing"]),
            second_degree_burn_radius_m=self.burn_radius_m(BURN_THRESHOLDS_1MT_MJ["second"]),
            third_degree_burn_radius_m=self.burn_radius_m(BURN_THRESHOLDS_1MT_MJ["third"]),
        )

    # ---------- Water layer deceleration ----------
    def seafloor_velocity_mps(self, v_surface: float) -> float:
        """Velocity left after crossing a mean-depth water column."""
        c = self.c
        factor = (3.0 * c.water_density_kgpm3 * c.water_drag_coefficient * c.ocean_depth_m) / (
            2.0 * self.p.diameter_m * sin(self.p.angle_rad) * self.p.density_kgpm3)
        return v_surface * _exp(-factor)

    # ---------- Crater scaling ----------
    def transient_diameter_m(self, v_mps: float, rho_t: float, K: float = K_TRANSIENT_ROCK) -> float:
        rho_i = self.p.density_kgpm3
        L0 = self.p.diameter_m
        g = self.c.gravity_mps2
        return K * (rho_i / rho_t) ** (1.0 / 3.0) * (L0 ** 0.78) * (v_mps ** 0.44) * (g ** -0.22) \
            * (sin(self.p.angle_rad) ** (1.0 / 3.0))

    def ocean_floor_transient_diameter_m(self, v_surface: float) -> float:
        """Transient cavity opened in the water column itself (feeds the tsunami)."""
        return self.transient_diameter_m(v_surface, self.c.water_density_kgpm3, K_TRANSIENT_WATER)

    @staticmethod
    def _final_from_transient(Dtc_m: float) -> tuple[float, float]:
        """Final diameter & depth from transient diameter."""
        if Dtc_m < D_COMPLEX_TRANSIENT_M:
            return 1.25 * Dtc_m, Dtc_m / (2.0 * sqrt(2.0))
        Dfr_m = 1.17 * Dtc_m ** 1.13 / D_COMPLEX_TRANSIENT_M ** 0.13
        dfr_m = 1000.0 * 0.294 * (Dfr_m / 1000.0) ** 0.301
        return Dfr_m, dfr_m

    @staticmethod
    def _volume_and_ratio(Dtc_m: float) -> tuple[float, float]:
        if Dtc_m >= EARTH_DIAMETER_M:
            return EARTH_VOLUME_KM3, 1.0
        V_km3 = pi * Dtc_m**3 / (16.0 * sqrt(2.0)) / 1e9
        V_km3 = min(V_km3, EARTH_VOLUME_KM3)
        return V_km3, min(V_km3 / EARTH_VOLUME_KM3, 1.0)

    def crater(self, entry: EntryProfile | None = None) -> CraterProfile:
        entry = self.entry() if entry is None else entry
        if entry.airburst:
            return CraterProfile(airburst=True)

        v_i = entry.impact_velocity_mps
        if self.is_water:
            v_crater = self.seafloor_velocity_mps(v_i)
            rho_t = self.c.seafloor_density_kgpm3
        else:
            v_crater = v_i
            rho_t = self.c.land_density_kgpm3

        Dtc = self.transient_diameter_m(v_crater, rho_t)
        regime = "simple" if Dtc < D_COMPLEX_TRANSIENT_M else "complex"
        dtc = Dtc / (2.0 * sqrt(2.0))
        Dfr, dfr = self._final_from_transient(Dtc)
        Dtc, dtc, Dfr, dfr = (min(x, EARTH_DIAMETER_M) for x in (Dtc, dtc, Dfr, dfr))

        V_km3, ratio = self._volume_and_ratio(Dtc)
        ocean_floor = self.ocean_floor_transient_diameter_m(v_i) if self.is_water else None
        logger.debug("[crater] %s Dtc=%.1f Dfr=%.1f V=%.4g km3", regime, Dtc, Dfr, V_km3)
        return CraterProfile(
            airburst=False,
            regime=regime,
            transient_diameter_m=Dtc,
            transient_depth_m=dtc,
            final_diameter_m=Dfr,
            final_depth_m=dfr,
            volume_km3=V_km3,
            earth_volume_ratio=ratio,
            earth_effect=earth_effect_for_ratio(ratio),
            ocean_floor_transient_diameter_m=ocean_floor,
        )

    # ---------- Seismic ----------
    def seismic_magnitude(self, energy_J: float | None = None) -> float:
        E = self.kinetic_energy_J() if energy_J is None else energy_J
        return 0.67 * log10(E) - 5.87

    def effective_magnitude_at_distance_km(self, r_km: float, energy_J: float | None = None) -> float:
        M = self.seismic_magnitude(energy_J=energy_J)
        if r_km < 60.0:
            return M - 0.0238 * r_km
        elif r_km < 700.0:
            return M - 0.0048 * r_km - 1.1644
        else:
            return M - 1.66 * log10(r_km) - 6.399

    def distance_for_effective_magnitude(self, Meff_target: float,
                                         energy_J: float | None = None) -> float | None:
        """Radius (km) where the effective magnitude decays to Meff_target, or None."""
        M = self.seismic_magnitude(energy_J=energy_J)
        r1 = (M - Meff_target) / 0.0238
        if 0.0 <= r1 <= 60.0:
            return r1
        r2 = (M - 1.1644 - Meff_target) / 0.0048
        if 60.0 <= r2 <= 700.0:
            return r2
        expo = (M - 6.399 - Meff_target) / 1.66
        r3_km = 10.0 ** expo
        if r3_km > 700.0:
            return r3_km
        return None

    def seismic(self, entry: EntryProfile | None = None) -> SeismicProfile:
        entry = self.entry() if entry is None else entry
        if entry.airburst:
            return SeismicProfile()
        M = self.seismic_magnitude()
        r_km = self.distance_for_effective_magnitude(self.c.seismic_reference_magnitude)
        if r_km is not None:
            return SeismicProfile(magnitude=M, radius_m_ge_7_5=r_km * 1000.0)
        return SeismicProfile(magnitude=M, description=milestone_description(M))

    # ---------- AIR BLAST ----------
    def overpressure_pa(self, r_m: float, burst_altitude_m: float = 0.0) -> float:
        return peak_overpressure_pa(r_m, self.energy_mt_tnt(), burst_altitude_m,
                                    self.c.high_airburst_altitude_m)

    def radius_for_overpressure_m(self, p_target: float, burst_altitude_m: float, r_min: float) -> float:
        c = self.c
        return solve_radius_for_overpressure(
            p_target, self.energy_mt_tnt(), burst_altitude_m, r_min,
            max_iter=c.solver_max_iter, rel_tol=c.solver_rel_tol,
            high_airburst_altitude_m=c.high_airburst_altitude_m,
        )

    def blast(self, entry: EntryProfile | None = None) -> BlastProfile:
        entry = self.entry() if entry is None else entry
        c = self.c
        zb = entry.burst_altitude_m if entry.airburst else 0.0
        Rf = self.fireball_radius_m()
        p_ref = self.overpressure_pa(c.reference_distance_m, zb)
        r_collapse = self.radius_for_overpressure_m(c.building_collapse_pa, zb, Rf)
        r_glass = self.radius_for_overpressure_m(c.glass_shatter_pa, zb, Rf)
        logger.debug("[blast] z_b=%.1f collapse=%.1f m glass=%.1f m p(50km)=%.4g Pa", zb, r_collapse, r_glass, p_ref)
        return BlastProfile(
            building_collapse_radius_m=r_collapse,
            glass_shatter_radius_m=r_glass,
            overpressure_at_50_km_pa=p_ref,
            wind_speed_at_50_km_mps=peak_wind_speed_mps(p_ref, c.ambient_pressure_pa, c.sound_speed_mps),
            ionization_radius_m=self.radius_for_overpressure_m(c.ionization_pa, zb, c.ionization_floor_m),
        )

    # ---------- TSUNAMI (water targets) ----------
    def tsunami(self, entry: EntryProfile | None = None) -> TsunamiProfile | None:
        if not self.is_water:
            return None
        entry = self.entry() if entry is None else entry
        if entry.airburst:
            return TsunamiProfile()

        c = self.c
        Dtc = self.ocean_floor_transient_diameter_m(entry.impact_velocity_mps)
        depth = c.ocean_depth_m
        # Rim wave cannot exceed the water column
        A_rim = min(Dtc / 14.1, depth)
        if not A_rim > 0.0:
            logger.info("[tsunami] rim wave height is zero, no tsunami")
            return TsunamiProfile()

        R_rim = 0.75 * Dtc
        # amplitude ~ A_rim * R_rim / r  → radius where it falls to the significant amplitude
        radius = R_rim * max(1.0, A_rim / c.tsunami_significant_amplitude_m)
        radius = min(radius, HALF_CIRCUMFERENCE_M)

        wavelength = 2.0 * Dtc
        k = 2.0 * pi / wavelength
        speed = _sqrt(c.gravity_mps2 / k * tanh(k * depth))
        return TsunamiProfile(
            rim_wave_height_m=A_rim,
            tsunami_radius_m=radius,
            max_speed_mps=speed,
            time_to_reach_1_km_s=1_000.0 / speed,
            time_to_reach_100_km_s=100_000.0 / speed,
        )

    # ---------- Regimes & summary ----------
    def regime(self, entry: EntryProfile | None = None,
               crater: CraterProfile | None = None) -> ImpactRegime:
        entry = self.entry() if entry is None else entry
        crater = self.crater(entry) if crater is None else crater
        zb = entry.burst_altitude_m if entry.airburst else 0.0
        return ImpactRegime(
            burst=burst_regime(zb, self.c.high_airburst_altitude_m),
            target="water" if self.is_water else "land",
            crater=crater.regime,
        )

    def assess(self) -> ImpactAssessment:
        entry = self.entry()
        crater = self.crater(entry)
        return ImpactAssessment(
            regime=self.regime(entry, crater),
            energy=self.energy(),
            entry=entry,
            thermal=self.thermal(),
            crater=crater,
            seismic=self.seismic(entry),
            blast=self.blast(entry),
            tsunami=self.tsunami(entry),
        )

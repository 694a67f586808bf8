from .collaborators import Mortality, MortalityEstimator, WaterClassifier, estimate_mortality
from .config import DEFAULT_CONFIG, ImpactConfig
from .impact_model import (
    ImpactModel,
    peak_overpressure_pa,
    peak_wind_speed_mps,
    solve_radius_for_overpressure,
)
from .pipeline import assess_impact
from .profiles import (
    BlastProfile,
    CraterProfile,
    EnergyProfile,
    EntryProfile,
    ImpactAssessment,
    ImpactRegime,
    SeismicProfile,
    ThermalProfile,
    TsunamiProfile,
)
from .schemas import ImpactorSpecification, InvalidImpactorError

__version__ = "1.0.0"

from __future__ import annotations

import logging
from math import isfinite
from typing import Any, Mapping, Optional

from .collaborators import WaterClassifier
from .config import DEFAULT_CONFIG, ImpactConfig
from .impact_model import ImpactModel
from .profiles import ImpactAssessment
from .schemas import ImpactorSpecification

logger = logging.getLogger(__name__)


def _non_finite_fields(assessment: ImpactAssessment) -> list[str]:
    bad = []
    for name, profile in assessment.to_dict().items():
        if not isinstance(profile, dict):
            continue
        raw = getattr(assessment, name)
        for field, value in profile.items():
            original = getattr(raw, field)
            if value is None and isinstance(original, float) and not isfinite(original):
                bad.append(f"{name}.{field}")
    return bad


def assess_impact(spec: ImpactorSpecification | Mapping[str, Any],
                  config: Optional[ImpactConfig] = None,
                  water_classifier: Optional[WaterClassifier] = None) -> ImpactAssessment:
    """
    Validate the impactor and run every stage of the impact model once.

    Raises InvalidImpactorError before any physics runs when the input is rejected.
    When a water_classifier is given and the impactor carries coordinates, its
    answer decides the target surface.
    """
    spec = ImpactorSpecification.parse(spec)
    config = DEFAULT_CONFIG if config is None else config

    if water_classifier is not None and spec.has_location:
        is_water = bool(water_classifier(spec.latitude, spec.longitude))
        logger.debug("[assess] classifier says is_water=%s at (%s, %s)", is_water, spec.latitude, spec.longitude)
        spec = spec.model_copy(update={"is_water": is_water})

    logger.info("[assess] L0=%.4g m rho=%.4g kg/m3 v=%.4g m/s angle=%.4g deg water=%s",
                spec.diameter_m, spec.density_kgpm3, spec.speed_mps, spec.angle_deg, spec.is_water)
    assessment = ImpactModel(spec, config).assess()

    bad = _non_finite_fields(assessment)
    if bad:
        logger.warning("[assess] non-finite values reported as null: %s", ", ".join(bad))
    logger.info("[assess] E=%.4g Mt regime=%s/%s crater=%s",
                assessment.energy.energy_mt, assessment.regime.burst,
                assessment.regime.target, assessment.regime.crater)
    return assessment

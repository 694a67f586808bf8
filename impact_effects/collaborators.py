"""Contracts for the services that sit around the impact model.

Surface classification and population sampling live outside this package; only
their call signatures and the data exchanged with them are defined here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .profiles import ImpactAssessment
from .schemas import ImpactorSpecification, InvalidImpactorError


class WaterClassifier(Protocol):
    def __call__(self, latitude: float, longitude: float) -> bool: ...


@dataclass(frozen=True)
class Mortality:
    death_count: int
    injury_count: int


class MortalityEstimator(Protocol):
    def __call__(self, assessment: ImpactAssessment, latitude: float, longitude: float,
                 diameter_m: float) -> Mortality: ...


def estimate_mortality(assessment: ImpactAssessment, spec: ImpactorSpecification,
                       estimator: MortalityEstimator) -> Mortality:
    if spec.latitude is None:
        raise InvalidImpactorError("latitude", "required for mortality estimation")
    if spec.longitude is None:
        raise InvalidImpactorError("longitude", "required for mortality estimation")
    return estimator(assessment, spec.latitude, spec.longitude, spec.diameter_m)

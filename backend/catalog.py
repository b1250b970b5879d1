"""
Type catalog and display naming.

The catalog is the set of distinct `record_type` values seen during one
extraction. Display names come from fixed lookup tables; identifiers that
are not in the tables fall back to the identifier with its HealthKit
prefix removed.
"""

import re
from types import MappingProxyType
from typing import Iterable, Iterator, List

from models import WORKOUT_PREFIX

WORKOUT_LABEL = "Workout"

FRIENDLY_NAMES = MappingProxyType({
    "HKQuantityTypeIdentifierStepCount": "Step Count",
    "HKQuantityTypeIdentifierDistanceWalkingRunning": "Walking + Running Distance",
    "HKQuantityTypeIdentifierHeartRate": "Heart Rate",
    "HKQuantityTypeIdentifierActiveEnergyBurned": "Active Energy",
    "HKQuantityTypeIdentifierBasalEnergyBurned": "Resting Energy",
    "HKQuantityTypeIdentifierFlightsClimbed": "Flights Climbed",
    "HKQuantityTypeIdentifierBodyMass": "Body Weight",
    "HKQuantityTypeIdentifierHeight": "Height",
    "HKQuantityTypeIdentifierBodyMassIndex": "BMI",
    "HKQuantityTypeIdentifierBodyFatPercentage": "Body Fat Percentage",
    "HKQuantityTypeIdentifierOxygenSaturation": "Blood Oxygen",
    "HKQuantityTypeIdentifierBloodPressureSystolic": "Systolic Blood Pressure",
    "HKQuantityTypeIdentifierBloodPressureDiastolic": "Diastolic Blood Pressure",
    "HKQuantityTypeIdentifierRespiratoryRate": "Respiratory Rate",
    "HKQuantityTypeIdentifierVO2Max": "VO2 Max",
    "HKQuantityTypeIdentifierRestingHeartRate": "Resting Heart Rate",
    "HKQuantityTypeIdentifierWalkingHeartRateAverage": "Walking Heart Rate Average",
    "HKQuantityTypeIdentifierHeartRateVariabilitySDNN": "Heart Rate Variability (SDNN)",
    "HKCategoryTypeIdentifierSleepAnalysis": "Sleep Analysis",
    "HKCategoryTypeIdentifierMindfulSession": "Mindful Minutes",
    "HKQuantityTypeIdentifierDietaryEnergyConsumed": "Dietary Energy",
    "HKQuantityTypeIdentifierDietaryWater": "Water",
    "HKQuantityTypeIdentifierDietaryCaffeine": "Caffeine",
    "HKQuantityTypeIdentifierAppleExerciseTime": "Exercise Minutes",
    "HKQuantityTypeIdentifierAppleStandTime": "Stand Minutes",
    "HKQuantityTypeIdentifierEnvironmentalAudioExposure": "Environmental Sound Levels",
    "HKQuantityTypeIdentifierHeadphoneAudioExposure": "Headphone Audio Levels",
})

WORKOUT_NAMES = MappingProxyType({
    "HKWorkoutActivityTypeRunning": "Running",
    "HKWorkoutActivityTypeWalking": "Walking",
    "HKWorkoutActivityTypeCycling": "Cycling",
    "HKWorkoutActivityTypeSwimming": "Swimming",
    "HKWorkoutActivityTypeYoga": "Yoga",
    "HKWorkoutActivityTypeFunctionalStrengthTraining": "Functional Strength Training",
    "HKWorkoutActivityTypeTraditionalStrengthTraining": "Traditional Strength Training",
    "HKWorkoutActivityTypeElliptical": "Elliptical",
    "HKWorkoutActivityTypeStairClimbing": "Stair Climbing",
    "HKWorkoutActivityTypeHiking": "Hiking",
    "HKWorkoutActivityTypeDancing": "Dancing",
    "HKWorkoutActivityTypeSoccer": "Soccer",
    "HKWorkoutActivityTypeBasketball": "Basketball",
    "HKWorkoutActivityTypeTennis": "Tennis",
})

_TYPE_PREFIX = re.compile(r"HK(Quantity|Category)TypeIdentifier")
_WORKOUT_TYPE_PREFIX = "HKWorkoutActivityType"


def workout_display_name(activity: str) -> str:
    """Name of a workout activity, e.g. `HKWorkoutActivityTypeRunning` -> `Running`."""
    return WORKOUT_NAMES.get(activity) or activity.replace(_WORKOUT_TYPE_PREFIX, "")


def display_name(record_type: str) -> str:
    """Human-readable label for a catalog identifier."""
    if record_type.startswith(WORKOUT_PREFIX):
        activity = record_type[len(WORKOUT_PREFIX):]
        return f"{WORKOUT_LABEL}: {workout_display_name(activity)}"
    return FRIENDLY_NAMES.get(record_type) or _TYPE_PREFIX.sub("", record_type)


class TypeCatalog:
    """Read-only set of the record types seen in one extraction."""

    def __init__(self, identifiers: Iterable[str] = ()):
        self._identifiers = frozenset(identifiers)

    def identifiers(self) -> List[str]:
        return sorted(self._identifiers)

    def entries(self) -> List[dict]:
        """Sorted `{"type", "name"}` pairs, ready for a selector."""
        return [{"type": t, "name": display_name(t)} for t in self.identifiers()]

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._identifiers

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers())

    def __len__(self) -> int:
        return len(self._identifiers)

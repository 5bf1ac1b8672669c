# AegisSim Patient Catalog
# Patient archetypes, meal plans and challenge scenarios used to parameterise
# synthetic glucose trajectories.

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ChallengeScenario(Enum):
    """Physiological context that modulates the simulated glucose response."""
    NONE = "none"
    EXERCISE = "exercise"
    STRESS = "stress"
    ILLNESS = "illness"
    DAWN = "dawn"

    @classmethod
    def from_key(cls, key: Any) -> "ChallengeScenario":
        """Resolves a UI selection (enum member or string) to a scenario."""
        if isinstance(key, cls):
            return key
        if isinstance(key, str):
            normalized = key.strip().lower()
            for scenario in cls:
                if scenario.value == normalized:
                    return scenario
        valid = ", ".join(s.value for s in cls)
        raise ConfigurationError(
            f"Unknown challenge scenario {key!r}. Expected one of: {valid}."
        )


@dataclass(frozen=True)
class PatientArchetype:
    """Body weight and total daily insulin of a synthetic patient.

    Only `total_daily_insulin` enters the meal excursion, through the
    500-rule insulin sensitivity proxy.
    """
    name: str
    weight_kg: float
    total_daily_insulin: float  # Units per day

    def __post_init__(self):
        for attr in ("weight_kg", "total_daily_insulin"):
            value = getattr(self, attr)
            if not isinstance(value, (int, float)) or isinstance(value, bool) \
                    or not math.isfinite(value) or value <= 0:
                raise ConfigurationError(
                    f"Patient archetype '{self.name}': {attr} must be a "
                    f"positive number, got {value!r}."
                )

    @property
    def insulin_sensitivity_proxy(self) -> float:
        """Grams of carbohydrate covered by one unit (500 / TDI)."""
        return 500.0 / self.total_daily_insulin


@dataclass(frozen=True)
class MealEvent:
    """A carbohydrate intake at a fixed offset from the simulation start."""
    time_hours: float
    carb_grams: float

    def __post_init__(self):
        if not isinstance(self.time_hours, (int, float)) or isinstance(self.time_hours, bool) \
                or not math.isfinite(self.time_hours) or self.time_hours < 0:
            raise ConfigurationError(
                f"Meal time_hours must be a non-negative number, got {self.time_hours!r}."
            )
        if not isinstance(self.carb_grams, (int, float)) or isinstance(self.carb_grams, bool) \
                or not math.isfinite(self.carb_grams) or self.carb_grams <= 0:
            raise ConfigurationError(
                f"Meal carb_grams must be a positive number, got {self.carb_grams!r}."
            )


@dataclass(frozen=True)
class MealPlan:
    """An ordered set of meal events with distinct times."""
    name: str
    events: Tuple[MealEvent, ...] = field(default_factory=tuple)

    def __post_init__(self):
        ordered = tuple(sorted(self.events, key=lambda e: e.time_hours))
        times = [e.time_hours for e in ordered]
        if len(set(times)) != len(times):
            raise ConfigurationError(
                f"Meal plan '{self.name}' has more than one meal at the same time: {times}."
            )
        object.__setattr__(self, "events", ordered)

    def meal_at(self, hour: float, tolerance_hours: float = 0.1) -> Optional[MealEvent]:
        """Returns the first meal within `tolerance_hours` of `hour`, if any."""
        for event in self.events:
            if abs(event.time_hours - hour) < tolerance_hours:
                return event
        return None

    @property
    def total_carbs(self) -> float:
        return float(sum(e.carb_grams for e in self.events))

    def __len__(self) -> int:
        return len(self.events)


def _meal_plan(name: str, meals: Iterable[Tuple[float, float]]) -> MealPlan:
    return MealPlan(name=name, events=tuple(MealEvent(t, c) for t, c in meals))


DEFAULT_PATIENT_ARCHETYPES: Dict[str, PatientArchetype] = {
    "adult_avg": PatientArchetype("adult_avg", weight_kg=75, total_daily_insulin=45),
    "adult_high_ir": PatientArchetype("adult_high_ir", weight_kg=85, total_daily_insulin=65),
    "adult_sensitive": PatientArchetype("adult_sensitive", weight_kg=70, total_daily_insulin=30),
    "adolescent": PatientArchetype("adolescent", weight_kg=52, total_daily_insulin=32),
    "child": PatientArchetype("child", weight_kg=30, total_daily_insulin=16),
}

DEFAULT_MEAL_PLANS: Dict[str, MealPlan] = {
    "standard": _meal_plan("standard", [(0, 45), (5, 70), (11, 80)]),
    "high_carb": _meal_plan("high_carb", [(0, 60), (5, 100), (11, 120)]),
    "low_carb": _meal_plan("low_carb", [(0, 20), (5, 30), (11, 40)]),
    "irregular": _meal_plan("irregular", [(2, 50), (8, 60)]),
}


class SimulationCatalog:
    """Registry of the archetypes and meal plans a caller may select by key.

    Starts from the built-in tables. Extra entries can be registered
    programmatically or loaded from the `catalog` section of a configuration
    file (see `from_config`). Lookups of unknown keys raise
    `ConfigurationError` rather than falling back to a default.

    Attributes:
        archetypes (Dict[str, PatientArchetype]): Archetypes by key.
        meal_plans (Dict[str, MealPlan]): Meal plans by key.
    """
    def __init__(self,
                 archetypes: Optional[Mapping[str, PatientArchetype]] = None,
                 meal_plans: Optional[Mapping[str, MealPlan]] = None):
        self.archetypes: Dict[str, PatientArchetype] = dict(
            DEFAULT_PATIENT_ARCHETYPES if archetypes is None else archetypes
        )
        self.meal_plans: Dict[str, MealPlan] = dict(
            DEFAULT_MEAL_PLANS if meal_plans is None else meal_plans
        )

    def register_archetype(self, key: str, archetype: PatientArchetype) -> None:
        if key in self.archetypes:
            logger.info(f"Overriding patient archetype '{key}'.")
        self.archetypes[key] = archetype

    def register_meal_plan(self, key: str, meal_plan: MealPlan) -> None:
        if key in self.meal_plans:
            logger.info(f"Overriding meal plan '{key}'.")
        self.meal_plans[key] = meal_plan

    def get_archetype(self, key: Any) -> PatientArchetype:
        if not isinstance(key, str) or key not in self.archetypes:
            raise ConfigurationError(
                f"Unknown patient archetype {key!r}. "
                f"Expected one of: {', '.join(sorted(self.archetypes))}."
            )
        return self.archetypes[key]

    def get_meal_plan(self, key: Any) -> MealPlan:
        if not isinstance(key, str) or key not in self.meal_plans:
            raise ConfigurationError(
                f"Unknown meal plan {key!r}. "
                f"Expected one of: {', '.join(sorted(self.meal_plans))}."
            )
        return self.meal_plans[key]

    @classmethod
    def from_config(cls, catalog_section: Optional[Mapping[str, Any]]) -> "SimulationCatalog":
        """Builds a catalog from the built-ins plus a `catalog` config section.

        Expected shape::

            patients:
              athlete: {weight_kg: 68, total_daily_insulin: 28}
            meal_plans:
              snacking:
                - {time_hours: 1, carb_grams: 15}
                - {time_hours: 3.5, carb_grams: 20}

        Raises:
            ConfigurationError: If an entry is malformed.
        """
        catalog = cls()
        if not catalog_section:
            return catalog
        if not isinstance(catalog_section, Mapping):
            raise ConfigurationError("The 'catalog' section must be a mapping.")

        patients = catalog_section.get("patients") or {}
        if not isinstance(patients, Mapping):
            raise ConfigurationError("'catalog.patients' must be a mapping of key -> parameters.")
        for key, params in patients.items():
            if not isinstance(params, Mapping):
                raise ConfigurationError(f"Patient archetype '{key}' must be a mapping.")
            try:
                weight = params["weight_kg"]
                tdi = params["total_daily_insulin"]
            except KeyError as e:
                raise ConfigurationError(
                    f"Patient archetype '{key}' is missing {e.args[0]!r}."
                ) from e
            catalog.register_archetype(str(key), PatientArchetype(str(key), weight, tdi))

        meal_plans = catalog_section.get("meal_plans") or {}
        if not isinstance(meal_plans, Mapping):
            raise ConfigurationError("'catalog.meal_plans' must be a mapping of key -> meal list.")
        for key, meals in meal_plans.items():
            if not isinstance(meals, list):
                raise ConfigurationError(f"Meal plan '{key}' must be a list of meals.")
            events: List[MealEvent] = []
            for meal in meals:
                if not isinstance(meal, Mapping):
                    raise ConfigurationError(f"Meal plan '{key}' contains a non-mapping entry: {meal!r}.")
                try:
                    events.append(MealEvent(meal["time_hours"], meal["carb_grams"]))
                except KeyError as e:
                    raise ConfigurationError(
                        f"A meal in plan '{key}' is missing {e.args[0]!r}."
                    ) from e
            catalog.register_meal_plan(str(key), MealPlan(str(key), tuple(events)))

        logger.info(
            f"Catalog loaded: {len(catalog.archetypes)} archetypes, "
            f"{len(catalog.meal_plans)} meal plans."
        )
        return catalog

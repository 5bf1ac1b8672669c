"""Parameter tables for synthetic glucose trajectories.

Key Contents:
    - `PatientArchetype`, `MealEvent`, `MealPlan`, `ChallengeScenario`:
      The inputs a caller selects from.
    - `SimulationCatalog`: Key-based registry of archetypes and meal plans,
      seeded with the built-in tables and extensible from configuration.
"""

from .patient_catalog import (
    ChallengeScenario,
    PatientArchetype,
    MealEvent,
    MealPlan,
    SimulationCatalog,
    DEFAULT_PATIENT_ARCHETYPES,
    DEFAULT_MEAL_PLANS,
)

# Tests for AegisSim.data_generation.patient_catalog

import pytest

from AegisSim.data_generation.patient_catalog import (
    ChallengeScenario, MealEvent, MealPlan, PatientArchetype, SimulationCatalog,
    DEFAULT_MEAL_PLANS, DEFAULT_PATIENT_ARCHETYPES
)
from AegisSim.exceptions import ConfigurationError


def test_builtin_archetypes():
    adult = DEFAULT_PATIENT_ARCHETYPES["adult_avg"]
    assert adult.weight_kg == 75
    assert adult.total_daily_insulin == 45
    assert adult.insulin_sensitivity_proxy == pytest.approx(500 / 45)
    assert set(DEFAULT_PATIENT_ARCHETYPES) == {
        "adult_avg", "adult_high_ir", "adult_sensitive", "adolescent", "child"
    }
    assert DEFAULT_PATIENT_ARCHETYPES["child"].total_daily_insulin == 16


def test_builtin_meal_plans():
    standard = DEFAULT_MEAL_PLANS["standard"]
    assert [(e.time_hours, e.carb_grams) for e in standard.events] == [(0, 45), (5, 70), (11, 80)]
    assert DEFAULT_MEAL_PLANS["high_carb"].total_carbs == 280
    assert len(DEFAULT_MEAL_PLANS["irregular"]) == 2


@pytest.mark.parametrize("weight, tdi", [(0, 45), (75, 0), (-1, 45), (75, float("nan")), (75, "45")])
def test_archetype_rejects_invalid_parameters(weight, tdi):
    with pytest.raises(ConfigurationError):
        PatientArchetype("bad", weight_kg=weight, total_daily_insulin=tdi)


def test_meal_event_validation():
    with pytest.raises(ConfigurationError):
        MealEvent(-1, 30)
    with pytest.raises(ConfigurationError):
        MealEvent(1, 0)
    assert MealEvent(0, 10).carb_grams == 10


def test_meal_plan_sorts_and_rejects_duplicate_times():
    plan = MealPlan("p", (MealEvent(5, 30), MealEvent(1, 20)))
    assert [e.time_hours for e in plan.events] == [1, 5]
    with pytest.raises(ConfigurationError):
        MealPlan("dup", (MealEvent(2, 30), MealEvent(2, 40)))


def test_meal_at_uses_strict_tolerance():
    plan = DEFAULT_MEAL_PLANS["standard"]
    assert plan.meal_at(0.0).carb_grams == 45
    assert plan.meal_at(5 + 1 / 12).carb_grams == 70
    assert plan.meal_at(4.85) is None
    assert plan.meal_at(0.1) is None


def test_challenge_from_key():
    assert ChallengeScenario.from_key("exercise") is ChallengeScenario.EXERCISE
    assert ChallengeScenario.from_key(" Dawn ") is ChallengeScenario.DAWN
    assert ChallengeScenario.from_key(ChallengeScenario.NONE) is ChallengeScenario.NONE
    with pytest.raises(ConfigurationError):
        ChallengeScenario.from_key("marathon")
    with pytest.raises(ConfigurationError):
        ChallengeScenario.from_key(None)


def test_catalog_lookup_fails_fast_on_unknown_keys():
    catalog = SimulationCatalog()
    assert catalog.get_archetype("adolescent").weight_kg == 52
    with pytest.raises(ConfigurationError, match="Unknown patient archetype"):
        catalog.get_archetype("grandparent")
    with pytest.raises(ConfigurationError, match="Unknown meal plan"):
        catalog.get_meal_plan("keto")
    with pytest.raises(ConfigurationError):
        catalog.get_archetype(None)


def test_catalog_from_config_extends_builtins():
    catalog = SimulationCatalog.from_config({
        "patients": {"athlete": {"weight_kg": 68, "total_daily_insulin": 28}},
        "meal_plans": {"snacking": [
            {"time_hours": 3.5, "carb_grams": 20},
            {"time_hours": 1, "carb_grams": 15},
        ]},
    })
    assert catalog.get_archetype("athlete").total_daily_insulin == 28
    assert catalog.get_archetype("adult_avg").total_daily_insulin == 45
    assert [e.time_hours for e in catalog.get_meal_plan("snacking").events] == [1, 3.5]


@pytest.mark.parametrize("section", [
    {"patients": {"x": {"weight_kg": 60}}},
    {"patients": {"x": [60, 30]}},
    {"patients": ["x"]},
    {"meal_plans": {"m": {"time_hours": 1, "carb_grams": 10}}},
    {"meal_plans": {"m": [{"time_hours": 1}]}},
    {"meal_plans": {"m": [{"time_hours": 1, "carb_grams": 10}, {"time_hours": 1, "carb_grams": 20}]}},
])
def test_catalog_from_config_rejects_malformed_entries(section):
    with pytest.raises(ConfigurationError):
        SimulationCatalog.from_config(section)


def test_catalog_instances_do_not_share_registries():
    a = SimulationCatalog()
    a.register_archetype("custom", PatientArchetype("custom", 60, 40))
    b = SimulationCatalog()
    with pytest.raises(ConfigurationError):
        b.get_archetype("custom")

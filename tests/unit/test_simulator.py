"""Tests for the metabolic simulation engine."""

import math

import pytest
from pydantic import ValidationError

from gmp_pkg.config import constants
from gmp_pkg.contracts.errors import ModelError
from gmp_pkg.domain.entities import Compartment, Meal, ModelParameters
from gmp_pkg.engine.simulator import MetabolicSimulator, michaelis_menten


class TestConstruction:
    def test_fasting_state(self, simulator):
        state = simulator.get_state()
        assert state.time == 0
        assert state.nutrients.glucose.blood == pytest.approx(34.0)
        assert state.nutrients.glucose.stomach == 0
        assert state.hormones.insulin_signal == 0
        assert state.cumulative.renal_excretion == 0
        assert simulator.last_fluxes is None

    def test_parameters_exposed(self, simulator, reference_params):
        assert simulator.parameters is reference_params


class TestConcentration:
    def test_blood_conversion(self, simulator):
        assert simulator.get_concentration(Compartment.BLOOD, "glucose") == pytest.approx(5.0)
        assert simulator.get_concentration("Blood") == pytest.approx(5.0)

    def test_sinks_return_raw_mass(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim.ingest_meal(Meal(carbs=18.0156))
        assert sim.get_concentration(Compartment.STOMACH) == pytest.approx(100.0)
        assert sim.get_concentration(Compartment.MUSCLE) == 0.0
        assert sim.get_concentration(Compartment.ADIPOSE) == 0.0

    def test_volume_compartments(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim.ingest_meal(Meal(carbs=75))
        sim.advance(1)
        lumen_mass = sim.get_state().nutrients.glucose.intestine_lumen
        assert sim.get_concentration(Compartment.INTESTINE_LUMEN) == pytest.approx(lumen_mass / 0.5)

    def test_unsupported_nutrient(self, simulator):
        with pytest.raises(ValueError, match="Unsupported nutrient"):
            simulator.get_concentration(Compartment.BLOOD, "fat")


class TestIngestMeal:
    def test_adds_glucose_to_stomach(self, simulator):
        added = simulator.ingest_meal(Meal(carbs=75, protein=0, fat=0, fiber=0))
        assert added == pytest.approx(416.306, rel=1e-5)
        assert simulator.get_state().nutrients.glucose.stomach == pytest.approx(75000 / 180.156)

    def test_meals_superpose(self, simulator):
        simulator.ingest_meal(Meal(carbs=30))
        simulator.ingest_meal(Meal(carbs=45))
        assert simulator.get_state().nutrients.glucose.stomach == pytest.approx(Meal(carbs=75).glucose_mmol)

    def test_does_not_touch_time_or_other_pools(self, simulator):
        before = simulator.get_state()
        simulator.ingest_meal(Meal(carbs=50))
        after = simulator.get_state()
        assert after.time == before.time
        assert after.nutrients.glucose.blood == before.nutrients.glucose.blood

    def test_other_macronutrients_are_inert(self, simulator):
        simulator.ingest_meal(Meal(carbs=0, protein=40, fat=30, fiber=10))
        assert simulator.get_state().nutrients.glucose.stomach == 0

    def test_accepts_mapping(self, simulator):
        simulator.ingest_meal({"carbs": 18.0156})
        assert simulator.get_state().nutrients.glucose.stomach == pytest.approx(100.0)

    def test_rejects_misspelled_field(self, simulator):
        with pytest.raises(ValidationError):
            simulator.ingest_meal({"carb": 75})
        assert simulator.get_state().nutrients.glucose.stomach == 0


class TestAdvanceFasting:
    def test_first_step_fluxes(self, simulator):
        fluxes = simulator.advance(1)

        assert fluxes.insulin_signal == pytest.approx(0.0, abs=1e-12)
        assert fluxes.gastric_emptying == 0
        assert fluxes.absorption == 0
        assert fluxes.hepatic_glucose_output == pytest.approx(1.0)
        assert fluxes.hepatic_uptake == pytest.approx(0.5)
        assert fluxes.net_liver == pytest.approx(-0.5)
        assert fluxes.muscle_uptake == pytest.approx(0.2)
        assert fluxes.adipose_uptake == pytest.approx(0.05)
        assert fluxes.renal_excretion == 0

    def test_first_step_commit(self, simulator):
        fluxes = simulator.advance(1)
        state = simulator.get_state()

        # Blood gains HGO minus hepatic and peripheral uptake
        assert state.nutrients.glucose.blood == pytest.approx(34.25)
        # Net liver balance would go negative and is floored
        assert state.nutrients.glucose.liver == 0
        assert fluxes.floor_correction == pytest.approx(0.5)
        assert state.nutrients.glucose.muscle == pytest.approx(0.2)
        assert state.nutrients.glucose.adipose == pytest.approx(0.05)
        assert state.time == 1

    def test_step_size_scales_fluxes(self, reference_params):
        one = MetabolicSimulator(reference_params).advance(1)
        half = MetabolicSimulator(reference_params).advance(0.5)
        assert half.muscle_uptake == pytest.approx(one.muscle_uptake / 2)
        assert half.hepatic_glucose_output == pytest.approx(one.hepatic_glucose_output / 2)

    def test_flux_summary(self, simulator):
        fluxes = simulator.advance(1)
        data = fluxes.to_dict()

        assert fluxes.peripheral_uptake == pytest.approx(0.25)
        assert data["peripheral_uptake"] == pytest.approx(0.25)
        assert data["net_liver"] == pytest.approx(-0.5)
        assert data["dt"] == 1

    def test_returns_last_fluxes(self, simulator):
        fluxes = simulator.advance(1)
        assert simulator.last_fluxes is fluxes

    def test_zero_step_changes_nothing(self, simulator):
        before = simulator.get_state()
        simulator.advance(0)
        after = simulator.get_state()
        assert after.nutrients == before.nutrients
        assert after.time == before.time

    @pytest.mark.parametrize("dt", [-1.0, float("nan"), float("inf")])
    def test_invalid_step_size(self, simulator, dt):
        with pytest.raises(ModelError, match="Step size"):
            simulator.advance(dt)
        assert simulator.time == 0


class TestInsulinSignal:
    def test_proportional_to_excess(self, reference_params):
        # 7 mM in 6.8 L blood
        params = reference_params
        sim = MetabolicSimulator(params)
        sim._state.nutrients.glucose.blood = 7.0 * params.vol_blood
        fluxes = sim.advance(1)
        assert fluxes.insulin_signal == pytest.approx(1.0)
        assert sim.get_state().hormones.insulin_signal == pytest.approx(1.0)
        assert fluxes.hepatic_glucose_output == pytest.approx(0.2)
        assert fluxes.muscle_uptake == pytest.approx(
            michaelis_menten(0.4 * 5.0, 5.0, 7.0)
        )

    def test_no_memory(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim._state.nutrients.glucose.blood = 9.0 * reference_params.vol_blood
        assert sim.advance(1).insulin_signal > 0
        sim._state.nutrients.glucose.blood = 4.0 * reference_params.vol_blood
        assert sim.advance(1).insulin_signal == 0

    def test_hgo_fully_suppressed(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim._state.nutrients.glucose.blood = 20.0 * reference_params.vol_blood
        assert sim.advance(1).hepatic_glucose_output == 0


class TestGastricEmptying:
    def test_flux_independent_of_stomach_content(self, reference_params):
        expected = (
            reference_params.k_GE_base
            * constants.KCAL_PER_G_CARB
            * constants.GRAMS_TO_MMOL
        )
        for carbs in (20, 75, 150):
            sim = MetabolicSimulator(reference_params)
            sim.ingest_meal(Meal(carbs=carbs))
            assert sim.advance(1).gastric_emptying == pytest.approx(expected)

    def test_moves_mass_to_lumen(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim.ingest_meal(Meal(carbs=75))
        fluxes = sim.advance(1)
        glucose = sim.get_state().nutrients.glucose
        assert glucose.intestine_lumen == pytest.approx(fluxes.gastric_emptying)
        assert glucose.stomach == pytest.approx(Meal(carbs=75).glucose_mmol - fluxes.gastric_emptying)

    def test_overshoot_is_floored(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim.ingest_meal(Meal(carbs=5))
        stomach = sim.get_state().nutrients.glucose.stomach
        fluxes = sim.advance(1)
        assert fluxes.gastric_emptying > stomach
        assert sim.get_state().nutrients.glucose.stomach == 0
        assert fluxes.floor_correction >= fluxes.gastric_emptying - stomach - 1e-9


class TestAbsorption:
    def test_uses_pre_step_lumen(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim.ingest_meal(Meal(carbs=75))
        first = sim.advance(1)
        # Lumen was empty before the first step
        assert first.absorption == 0
        second = sim.advance(1)
        assert second.sglt1 > 0
        assert second.apical_glut2 > 0
        assert second.paracellular > 0

    def test_routes(self, reference_params):
        sim = MetabolicSimulator(reference_params)
        sim._state.nutrients.glucose.intestine_lumen = 20.0  # 40 mM
        fluxes = sim.advance(1)
        assert fluxes.sglt1 == pytest.approx(5.5 * 40 / 45)
        # Half recruited at G50
        assert fluxes.apical_glut2 == pytest.approx(0.5 * 0.05 * 40)
        assert fluxes.paracellular == pytest.approx(0.005 * 35)
        assert fluxes.absorption == pytest.approx(fluxes.sglt1 + fluxes.apical_glut2 + fluxes.paracellular)

    def test_capped_at_lumen_mass(self, reference_params):
        params = reference_params.with_overrides(Vmax_SGLT1=1e6)
        sim = MetabolicSimulator(params)
        sim._state.nutrients.glucose.intestine_lumen = 3.0
        fluxes = sim.advance(1)
        assert fluxes.sglt1 > 3.0
        assert fluxes.absorption == pytest.approx(3.0)
        assert sim.get_state().nutrients.glucose.intestine_lumen == 0

    def test_extreme_recruitment_threshold(self, reference_params):
        params = reference_params.with_overrides(G50_GLUT2=1e5)
        sim = MetabolicSimulator(params)
        sim._state.nutrients.glucose.intestine_lumen = 1.0
        fluxes = sim.advance(1)
        assert math.isfinite(fluxes.apical_glut2)
        assert fluxes.apical_glut2 == pytest.approx(0.0, abs=1e-12)


class TestBasolateralExport:
    def test_export_capped_by_tissue(self, simulator):
        simulator._state.nutrients.glucose.intestine_tissue = 4.0
        fluxes = simulator.advance(1)
        # k_export_IntT * dt = 1.5 exceeds the tissue mass
        assert fluxes.basolateral_export == pytest.approx(4.0)
        assert simulator.get_state().nutrients.glucose.intestine_tissue == 0

    def test_partial_export(self, simulator):
        simulator._state.nutrients.glucose.intestine_tissue = 4.0
        fluxes = simulator.advance(0.5)
        assert fluxes.basolateral_export == pytest.approx(3.0)


class TestRenalExcretion:
    def test_below_threshold(self, simulator):
        assert simulator.advance(1).renal_excretion == 0

    def test_above_threshold(self, reference_params):
        sim = MetabolicSimulator(reference_params.with_overrides(renal_threshold=4.0))
        fluxes = sim.advance(1)
        assert fluxes.renal_excretion == pytest.approx(0.1 * (5.0 - 4.0))
        assert sim.get_state().cumulative.renal_excretion == pytest.approx(0.1)


class TestReset:
    def test_reset_matches_construction(self, reference_params):
        fresh = MetabolicSimulator(reference_params).get_state()
        sim = MetabolicSimulator(reference_params.with_overrides())
        sim.ingest_meal(Meal(carbs=100))
        for _ in range(50):
            sim.advance(1)
        sim.reset()
        assert sim.get_state() == fresh
        assert sim.last_fluxes is None

    def test_reset_is_idempotent(self, reference_params):
        sim = MetabolicSimulator(reference_params.with_overrides(renal_threshold=3.0))
        sim.ingest_meal(Meal(carbs=60))
        for _ in range(20):
            sim.advance(1)
        sim.reset()
        first = sim.get_state()
        sim.reset()
        assert sim.get_state() == first
        assert first.time == 0
        assert first.cumulative.renal_excretion == 0


class TestSnapshotIsolation:
    def test_mutating_snapshot_does_not_affect_engine(self, reference_params):
        sim_a = MetabolicSimulator(reference_params)
        sim_b = MetabolicSimulator(reference_params)
        for sim in (sim_a, sim_b):
            sim.ingest_meal(Meal(carbs=75))

        snapshot = sim_a.get_state()
        snapshot.nutrients.glucose.stomach = 0.0
        snapshot.nutrients.glucose.blood = 1000.0
        snapshot.time = 999.0

        for _ in range(30):
            sim_a.advance(1)
            sim_b.advance(1)

        assert sim_a.get_state() == sim_b.get_state()

    def test_snapshots_are_distinct(self, simulator):
        assert simulator.get_state() is not simulator.get_state()
        assert simulator.get_state().nutrients.glucose is not simulator.get_state().nutrients.glucose


class TestInvariants:
    def test_non_negative_and_monotonic(self, reference_params):
        sim = MetabolicSimulator(reference_params.with_overrides(renal_threshold=6.0))
        sim.ingest_meal(Meal(carbs=150))
        previous = sim.get_state()
        for step in range(240):
            if step == 90:
                sim.ingest_meal(Meal(carbs=40))
            sim.advance(1)
            state = sim.get_state()
            assert all(mass >= 0 for _, mass in state.nutrients.glucose.items())
            assert state.time > previous.time
            assert state.cumulative.renal_excretion >= previous.cumulative.renal_excretion
            assert state.nutrients.glucose.muscle >= previous.nutrients.glucose.muscle
            assert state.nutrients.glucose.adipose >= previous.nutrients.glucose.adipose
            previous = state

    def test_mass_identity_every_step(self, reference_params):
        sim = MetabolicSimulator(reference_params.with_overrides(renal_threshold=7.0))
        sim.ingest_meal(Meal(carbs=90))
        for _ in range(180):
            before = sim.total_mass()
            fluxes = sim.advance(1)
            change = sim.total_mass() - before
            assert change == pytest.approx(
                fluxes.floor_correction - fluxes.renal_excretion, abs=1e-9
            )

    def test_conservation_without_floor_or_excretion(self, reference_params):
        # Without HGO the liver balance only grows, so nothing is floored
        params = reference_params.with_overrides(HGO_basal=0.0)
        sim = MetabolicSimulator(params)
        initial = sim.total_mass()
        for _ in range(300):
            fluxes = sim.advance(1)
            assert fluxes.floor_correction == 0
            assert fluxes.renal_excretion == 0
        assert sim.total_mass() == pytest.approx(initial, rel=1e-12)
        glucose = sim.get_state().nutrients.glucose
        assert glucose.liver + glucose.muscle + glucose.adipose == pytest.approx(initial - glucose.blood)

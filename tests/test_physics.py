"""Tests for the ShuttlePhysics engine: update loop, stage changes, detachment."""

import logging

import numpy as np
import pytest

from shuttle_sim import constants as C
from shuttle_sim.config import create_default_config, create_test_config
from shuttle_sim.forces import compute_drag_force, compute_gravity_force
from shuttle_sim.physics import ShuttlePhysics
from shuttle_sim.stages import FlightStage
from shuttle_sim.state import AttachmentState, Component, FlightState

DT = 1.0 / 60.0


@pytest.fixture
def engine():
    return ShuttlePhysics()


def boosters_gone():
    return {
        Component.FUEL_TANK: AttachmentState.ATTACHED,
        Component.ROCKET1: AttachmentState.DETACHED,
        Component.ROCKET2: AttachmentState.DETACHED,
    }


class TestConstruction:

    def test_defaults(self, engine):
        assert engine.stage == FlightStage.IDLE
        assert engine.get_altitude() == 0.0
        assert engine.fuel_percentage == 100.0
        assert engine.total_mass == pytest.approx(C.FULL_STACK_MASS)
        assert engine.rocket1_attached and engine.rocket2_attached and engine.fuel_tank_attached
        assert not engine.tower_tilted
        assert engine.time == 0.0

    def test_initial_state_is_copied(self):
        state = FlightState(stage=FlightStage.LIFTOFF)
        engine = ShuttlePhysics(initial_state=state)
        state.position[1] = 0.0
        assert engine.get_altitude() == 0.0
        assert engine.stage == FlightStage.LIFTOFF

    def test_accessors_return_copies(self, engine):
        engine.position[1] = 0.0
        engine.velocity[1] = 99.0
        engine.state.fuel_percentage = 0.0
        assert engine.get_altitude() == 0.0
        assert engine.velocity[1] == 0.0
        assert engine.fuel_percentage == 100.0

    def test_repr(self, engine):
        assert "Idle" in repr(engine)


class TestIdleOnPad:

    def test_stationary_on_pad(self, engine):
        start_pos = engine.position
        start_vel = engine.velocity
        for _ in range(10):
            engine.update(DT)
        np.testing.assert_array_equal(engine.position, start_pos)
        np.testing.assert_array_equal(engine.velocity, start_vel)
        np.testing.assert_array_equal(engine.acceleration, np.zeros(3))
        assert engine.stage == FlightStage.IDLE

    def test_time_advances_while_idle(self, engine):
        for _ in range(30):
            engine.update(DT)
        assert engine.time == pytest.approx(0.5)
        assert engine.engine_startup_timer == 0.0

    def test_never_below_ground(self, engine):
        for dt in [DT, 0.001, 0.5, DT, 1e-6] * 20:
            engine.update(dt)
            assert engine.get_altitude() >= -1e-9

    def test_no_fuel_burned(self, engine):
        for _ in range(60):
            engine.update(DT)
        assert engine.fuel_percentage == 100.0


class TestTimestep:

    @pytest.mark.parametrize("dt", [0.0, -DT, float("nan")])
    def test_invalid_dt_is_noop(self, engine, dt):
        engine.set_stage(FlightStage.ENGINE_STARTUP)
        before = engine.state
        engine.update(dt)
        after = engine.state
        assert after.time == before.time
        assert after.engine_startup_timer == before.engine_startup_timer
        np.testing.assert_array_equal(after.position, before.position)

    def test_large_dt_capped(self, engine):
        engine.update(1.0)
        assert engine.time == pytest.approx(C.MAX_DT)


class TestEngineStartup:

    def test_liftoff_after_startup_duration(self):
        tilt_calls = []
        engine = ShuttlePhysics(on_tower_tilt=lambda angle: tilt_calls.append(
            (angle, engine.engine_startup_timer)))
        engine.set_stage(FlightStage.ENGINE_STARTUP)

        stages = []
        steps = 0
        while engine.stage == FlightStage.ENGINE_STARTUP and steps < 400:
            engine.update(DT)
            steps += 1
            stages.append(engine.stage)
            assert engine.get_altitude() >= 0.0

        assert engine.stage == FlightStage.LIFTOFF
        assert 180 <= steps <= 181
        assert stages.count(FlightStage.LIFTOFF) == 1

        assert len(tilt_calls) == 1
        angle, timer = tilt_calls[0]
        assert angle == C.TOWER_TILT_ANGLE_DEG
        assert timer == pytest.approx(C.ENGINE_STARTUP_DURATION - C.TOWER_TILT_LEAD_TIME, abs=DT + 1e-9)

        # Keep flying: no second liftoff, no second tilt
        for _ in range(120):
            engine.update(DT)
        assert engine.stage == FlightStage.LIFTOFF
        assert len(tilt_calls) == 1
        assert engine.engine_startup_timer == 0.0

    def test_startup_holds_vehicle_near_pad(self, engine):
        engine.set_stage(FlightStage.ENGINE_STARTUP)
        for _ in range(120):
            engine.update(DT)
        assert 0.0 <= engine.get_altitude() < 1.0
        assert engine.velocity[1] >= 0.0
        assert engine.fuel_percentage == 100.0

    def test_tilt_without_callback_warns(self, engine, caplog):
        engine.set_stage(FlightStage.ENGINE_STARTUP)
        with caplog.at_level(logging.WARNING):
            for _ in range(90):
                engine.update(DT)
        assert engine.tower_tilted
        assert "no launch tower" in caplog.text

    def test_failing_tilt_callback_does_not_stop_flight(self, caplog):
        def broken(angle):
            raise RuntimeError("tower jammed")

        engine = ShuttlePhysics(on_tower_tilt=broken)
        engine.set_stage(FlightStage.ENGINE_STARTUP)
        with caplog.at_level(logging.ERROR):
            for _ in range(200):
                engine.update(DT)
        assert engine.tower_tilted
        assert engine.stage == FlightStage.LIFTOFF
        assert "Tower tilt callback failed" in caplog.text

    def test_restart_rearms_tower(self):
        tilt_calls = []
        engine = ShuttlePhysics(on_tower_tilt=tilt_calls.append)
        engine.set_stage(FlightStage.ENGINE_STARTUP)
        for _ in range(90):
            engine.update(DT)
        engine.set_stage(FlightStage.ENGINE_STARTUP)
        assert engine.engine_startup_timer == 0.0
        assert not engine.tower_tilted
        for _ in range(90):
            engine.update(DT)
        assert tilt_calls == [90.0, 90.0]


class TestBoosterSeparation:

    def test_boosters_detach_together(self):
        cfg = create_test_config(srb_detach_altitude=50.0, srb_detach_time=2.0)
        detached = []
        engine = ShuttlePhysics(cfg, on_detach=detached.append,
                                initial_state=FlightState(stage=FlightStage.LIFTOFF))
        mass_before = None
        steps = 0
        while engine.rocket1_attached and steps < 1200:
            mass_before = engine.total_mass
            engine.update(DT)
            steps += 1

        assert not engine.rocket1_attached
        assert not engine.rocket2_attached
        assert engine.srb_detached
        assert engine.fuel_tank_attached
        assert engine.time >= 2.0
        assert engine.get_altitude() >= 50.0
        assert detached == [Component.ROCKET1, Component.ROCKET2]
        assert mass_before - engine.total_mass >= 2 * C.ROCKET_MASS

        # Stage advances on the next step
        assert engine.stage == FlightStage.LIFTOFF
        engine.update(DT)
        assert engine.stage == FlightStage.ATMOSPHERIC_ASCENT

        for _ in range(60):
            engine.update(DT)
        assert detached == [Component.ROCKET1, Component.ROCKET2]
        assert not engine.rocket1_attached

    def test_liftoff_thrust_drops_after_separation(self):
        cfg = create_test_config(srb_detach_altitude=50.0, srb_detach_time=2.0)
        engine = ShuttlePhysics(cfg, initial_state=FlightState(stage=FlightStage.LIFTOFF))
        assert engine.calculate_thrust()[1] == pytest.approx(
            C.THRUST_MAIN_ENGINES + C.THRUST_SOLID_ROCKETS)
        while engine.rocket1_attached:
            engine.update(DT)
        assert engine.calculate_thrust()[1] == pytest.approx(C.THRUST_MAIN_ENGINES)


class TestFuelTankSeparation:

    def near_orbit_state(self):
        return FlightState(position=[0.0, C.EARTH_RADIUS + 99990.0, 0.0],
                           velocity=[0.0, 7500.0, 0.0],
                           stage=FlightStage.ATMOSPHERIC_ASCENT, time=100.0,
                           fuel_percentage=4.0, attachment=boosters_gone(),
                           srb_detached=True)

    def test_tank_detaches_and_empties(self):
        detached = []
        engine = ShuttlePhysics(on_detach=detached.append, initial_state=self.near_orbit_state())
        mass_before = engine.total_mass

        engine.update(DT)
        assert not engine.fuel_tank_attached
        assert engine.et_detached
        assert engine.fuel_percentage == 0.0
        assert detached == [Component.FUEL_TANK]
        assert engine.total_mass == pytest.approx(C.SHUTTLE_MASS)
        assert mass_before > engine.total_mass

        # Above the atmosphere with the tank gone: insertion on the next step
        assert engine.stage == FlightStage.ATMOSPHERIC_ASCENT
        engine.update(DT)
        assert engine.get_altitude() > C.ATMOSPHERE_HEIGHT
        assert engine.stage == FlightStage.ORBITAL_INSERTION

        for _ in range(120):
            engine.update(DT)
        assert detached == [Component.FUEL_TANK]
        assert engine.et_detached
        assert engine.fuel_percentage == 0.0
        np.testing.assert_array_equal(engine.calculate_thrust(), np.zeros(3))

    def test_tank_kept_while_too_slow(self):
        state = self.near_orbit_state()
        state.velocity = np.array([0.0, 5000.0, 0.0])
        engine = ShuttlePhysics(initial_state=state)
        engine.update(DT)
        assert engine.fuel_tank_attached
        assert not engine.et_detached
        assert engine.fuel_percentage > 0.0


class TestFuelExhaustion:

    def test_zero_fuel_means_gravity_and_drag_only(self):
        cfg = create_default_config()
        position = np.array([0.0, C.EARTH_RADIUS + 20000.0, 0.0])
        velocity = np.array([0.0, 500.0, 0.0])
        state = FlightState(position=position, velocity=velocity,
                            stage=FlightStage.ATMOSPHERIC_ASCENT, time=80.0,
                            fuel_percentage=0.0, attachment=boosters_gone(),
                            srb_detached=True)
        engine = ShuttlePhysics(cfg, initial_state=state)
        np.testing.assert_array_equal(engine.calculate_thrust(), np.zeros(3))

        mass = engine.total_mass
        assert mass == pytest.approx(C.SHUTTLE_MASS)
        expected = (compute_gravity_force(position, mass, cfg)
                    + compute_drag_force(velocity, 20000.0, cfg)) / mass

        engine.update(DT)
        np.testing.assert_allclose(engine.acceleration, expected, rtol=1e-12)
        assert engine.fuel_percentage == 0.0
        assert engine.total_mass == pytest.approx(mass)

    def test_fuel_stays_in_bounds(self):
        state = FlightState(stage=FlightStage.ATMOSPHERIC_ASCENT, fuel_percentage=0.01,
                            attachment=boosters_gone(), srb_detached=True)
        engine = ShuttlePhysics(initial_state=state)
        thrust_before = engine.calculate_thrust()[1]
        assert thrust_before > 0.0
        for _ in range(2000):
            engine.update(DT)
            assert 0.0 <= engine.fuel_percentage <= 100.0
        assert engine.fuel_percentage == 0.0
        assert engine.calculate_thrust()[1] == 0.0


class TestSetStage:

    def test_by_name(self, engine):
        engine.set_stage("engine_startup")
        assert engine.stage == FlightStage.ENGINE_STARTUP

    def test_unknown_stage_ignored(self, engine, caplog):
        with caplog.at_level(logging.WARNING):
            engine.set_stage("WARP")
        assert engine.stage == FlightStage.IDLE
        assert "Unknown flight stage" in caplog.text

    def test_idle_clears_milestones_not_attachments(self):
        state = FlightState(stage=FlightStage.ATMOSPHERIC_ASCENT, attachment=boosters_gone(),
                            srb_detached=True, tower_tilted=True, engine_startup_timer=2.0)
        engine = ShuttlePhysics(initial_state=state)
        engine.set_stage(FlightStage.IDLE)
        assert not engine.srb_detached
        assert not engine.et_detached
        assert not engine.tower_tilted
        assert engine.engine_startup_timer == 0.0
        assert not engine.rocket1_attached

    def test_other_stages_keep_timer(self):
        state = FlightState(stage=FlightStage.ENGINE_STARTUP, engine_startup_timer=2.0,
                            tower_tilted=True)
        engine = ShuttlePhysics(initial_state=state)
        engine.set_stage(FlightStage.LIFTOFF)
        assert engine.engine_startup_timer == 2.0
        assert engine.tower_tilted

    def test_transition_logged(self, engine, caplog):
        with caplog.at_level(logging.INFO):
            engine.set_stage(FlightStage.ENGINE_STARTUP)
        assert "Engine Startup" in caplog.text


class TestDetachComponent:

    def test_idempotent(self):
        detached = []
        engine = ShuttlePhysics(on_detach=detached.append)
        assert engine.detach_component(Component.FUEL_TANK)
        assert not engine.detach_component(Component.FUEL_TANK)
        assert not engine.fuel_tank_attached
        assert detached == [Component.FUEL_TANK]

    @pytest.mark.parametrize("name", ["rocket2", "ROCKET2"])
    def test_by_name(self, engine, name):
        assert engine.detach_component(name)
        assert not engine.rocket2_attached
        assert engine.rocket1_attached

    def test_unknown_component(self, engine, caplog):
        with caplog.at_level(logging.WARNING):
            assert not engine.detach_component("payloadBay")
        assert "unknown component" in caplog.text
        assert engine.total_mass == pytest.approx(C.FULL_STACK_MASS)

    def test_failing_callback_still_detaches(self, caplog):
        def broken(component):
            raise ValueError("no mesh")

        engine = ShuttlePhysics(on_detach=broken)
        with caplog.at_level(logging.ERROR):
            assert engine.detach_component(Component.ROCKET1)
        assert not engine.rocket1_attached
        assert "Detach callback failed" in caplog.text

    def test_manual_tank_detach_cuts_main_engines(self):
        state = FlightState(stage=FlightStage.ATMOSPHERIC_ASCENT, fuel_percentage=80.0,
                            attachment=boosters_gone(), srb_detached=True)
        engine = ShuttlePhysics(initial_state=state)
        assert engine.calculate_thrust()[1] == pytest.approx(C.THRUST_MAIN_ENGINES)
        assert engine.detach_component("fuelTank")
        assert engine.fuel_percentage == 0.0
        np.testing.assert_array_equal(engine.calculate_thrust(), np.zeros(3))
        engine.update(DT)
        assert engine.fuel_percentage == 0.0
        assert engine.total_mass == pytest.approx(C.SHUTTLE_MASS)

    def test_mass_drops(self, engine):
        engine.detach_component(Component.ROCKET1)
        assert engine.total_mass == pytest.approx(C.FULL_STACK_MASS - C.ROCKET_MASS)


class TestSnapshot:

    def test_snapshot_contents(self, engine):
        engine.update(DT)
        snap = engine.snapshot()
        assert snap.stage == FlightStage.IDLE
        assert snap.time == pytest.approx(DT)
        assert snap.altitude == 0.0
        assert snap.total_mass == pytest.approx(C.FULL_STACK_MASS)
        assert snap.rocket1_attached and snap.fuel_tank_attached

    def test_snapshot_is_detached_from_engine(self, engine):
        snap = engine.snapshot()
        engine.update(DT)
        engine.set_stage(FlightStage.LIFTOFF)
        assert snap.stage == FlightStage.IDLE
        assert snap.time == 0.0

    def test_snapshot_arrays_read_only(self, engine):
        snap = engine.snapshot()
        with pytest.raises(ValueError):
            snap.position[1] = 0.0
        with pytest.raises(ValueError):
            snap.velocity[0] = 1.0
        assert engine.get_altitude() == 0.0
        # The engine's own arrays stay writable
        engine.update(DT)
        assert engine.position.flags.writeable

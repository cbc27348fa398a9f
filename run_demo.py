"""Demo script: fly from the pad and show the stage and separation timeline."""
from shuttle_sim.main import run_simulation
import numpy as np


def record_tilt(angle):
    print(f"  >> service tower tilting to {angle:.0f} deg")


engine, log, reason = run_simulation(max_time=240.0, verbose=True, on_tower_tilt=record_tilt)

print("\n\n===== STAGE TIMELINE =====")
times = np.array(log.time)
alts = np.array(log.altitude) / 1000.0
speeds = np.array(log.speed)
masses = np.array(log.mass)
if len(times) > 0:
    print(f"Log entries: {len(times)}")
    print(f"Time range: {times[0]:.1f}s - {times[-1]:.1f}s")
    print(f"Peak altitude: {np.max(alts):.2f} km")
    print(f"Peak speed: {np.max(speeds):.1f} m/s")
    print()
    prev_stage = None
    for i, stage in enumerate(log.stage):
        if stage != prev_stage:
            print(f"  t={times[i]:8.1f}s | Alt={alts[i]:8.2f} km | "
                  f"V={speeds[i]:8.1f} m/s | Stage: {stage}")
            prev_stage = stage

print()
print("===== SEPARATION EVENTS =====")
columns = [
    ('rocket1', log.rocket1_attached),
    ('rocket2', log.rocket2_attached),
    ('fuelTank', log.fuel_tank_attached),
]
for name, flags in columns:
    if False in flags:
        i = flags.index(False)
        print(f"  {name:<9} t={times[i]:8.1f}s | Alt={alts[i]:8.2f} km | "
              f"Mass after={masses[i]:,.0f} kg")
    else:
        print(f"  {name:<9} still attached")

print(f"\nTermination: {reason}")

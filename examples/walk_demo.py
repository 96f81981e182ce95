"""
Walks a simulated pedestrian along the sample path and logs the guidance
"""
import logging
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from guidance.controller import NavigationController
from guidance.core.interfaces import StateObserver
from guidance.path_loader import load_path_file
from location.replay import ReplayLocationSource, simulate_walk

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class LogObserver(StateObserver):
    def on_state_update(self, state):
        logger.info(f"[{state.status.value}] next={state.next_index} "
                    f"dist={state.distance_m:.0f}m -> {state.instruction}")


def main():
    waypoints = load_path_file(str(Path(__file__).parent / "sample_path.json"))
    source = ReplayLocationSource(simulate_walk(waypoints, step_m=10.0), interval_s=0.2)
    
    controller = NavigationController(source, waypoints)
    controller.add_observer(LogObserver())
    controller.enable()
    
    for _ in range(300):
        if controller.state.arrived_at_destination:
            break
        time.sleep(0.2)
    
    controller.disable()
    logger.info(f"Demo complete - arrived: {controller.state.arrived_at_destination}")


if __name__ == "__main__":
    main()

# main.py
"""
Main entry point for Schotter.

This script orchestrates the whole run:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Builds the gravel, the controls and the animator.
4. Runs the tick loop until the window is closed.
5. Handles clean shutdown.
"""
import logging
from utils import fail_config, setup_logging, load_config
import numpy as np
import cProfile
import pstats
import io
from constants import COLS, DEFAULT_CAPTURE_FILE, DEFAULT_LOG_THROTTLE_STEPS, LOOP_MODES, ROWS


def _is_count(value, minimum: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


def run_tick(visualizer, animator, gravel, controls, wait: bool = False) -> bool:
    """
    One pass of the loop: input, then state, then the frame.

    Returns:
        bool: False if the user has quit, True otherwise.
    """
    if not visualizer.handle_events(controls, wait=wait):
        return False
    animator.step(controls)
    visualizer.draw(gravel, controls, wait=wait)
    return True


def main(config_path: str = 'config.json'):
    """
    The main function to run Schotter.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Schotter Starting ---")

    grid_params = config.get('grid', {})
    sim_params = config.get('simulation_parameters', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from grid import Gravel
    from controls import ControlState
    from animator import Animator
    from visualization import Visualizer

    loop_mode = run_params.get('loop_mode', 'refresh')
    if loop_mode not in LOOP_MODES:
        fail_config(f"Configuration error: unknown loop_mode {loop_mode!r}. Expected one of {LOOP_MODES}.")
    log_throttle = run_params.get('log_throttle_steps', DEFAULT_LOG_THROTTLE_STEPS)
    if not _is_count(log_throttle, 1):
        fail_config(f"Configuration error: log_throttle_steps must be an integer >= 1, got {log_throttle!r}.")
    max_steps = run_params.get('max_steps', 0) # 0 runs until the window is closed
    if not _is_count(max_steps, 0):
        fail_config(f"Configuration error: max_steps must be an integer >= 0, got {max_steps!r}.")

    # --- Component Initialization ---
    rows = grid_params.get('rows', ROWS)
    cols = grid_params.get('cols', COLS)
    gravel = Gravel(rows, cols)
    controls = ControlState(sim_params)
    animator = Animator(gravel, sim_params)
    visualizer = Visualizer(
        mode=animator.mode,
        rows=rows,
        cols=cols,
        fullscreen=vis_params.get('fullscreen', False),
        capture_file=vis_params.get('capture_file', DEFAULT_CAPTURE_FILE),
    )

    profiler = cProfile.Profile() if run_params.get('profile', False) else None
    wait = loop_mode == 'wait'

    running = True
    step_num = 0

    if profiler:
        profiler.enable()
    while running:
        if not run_tick(visualizer, animator, gravel, controls, wait=wait):
            break
        step_num += 1

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Simulation step {step_num} (animator tick {animator.tick_count})")
            mean_displacement = np.mean(np.linalg.norm(gravel.offsets, axis=1))
            moving = np.mean(gravel.in_transition())
            logging.debug(
                f"Step {step_num} | Mean displacement: {mean_displacement:.4f} | "
                f"Stones in transition: {moving:.1%}"
            )

        if max_steps and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False
    if profiler:
        profiler.disable()

    visualizer.close()
    logging.info(f"Tick loop finished after {step_num} steps.")

    if profiler:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Schotter Shutting Down ---")


if __name__ == "__main__":
    main()

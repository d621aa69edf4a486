#!/usr/bin/env python3
"""
Main CLI entrypoint for the headless hypercube projection engine.

Loads configuration, initializes the engine service, and runs the frame loop
with scheduled parameter changes, logging and graceful shutdown handling.
"""
import argparse
import signal
import sys
import time
import logging
from typing import Dict, Any, List

import yaml

from apps.engine.engine_service import EngineService, InitRequest, StepRequest, ParameterChange
from ncube.observability import (
    setup_logging, DIMENSION_CHANGED, PROJECTION_CHANGED, ROTATION_STYLE_CHANGED, FRAME_FAILED
)

logger = logging.getLogger('EngineMain')

CHANGE_KEYS = ('dimension', 'projection', 'rotation_style', 'debug')


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        'engine': {
            'dimension': 4,
            'projection': 'isometric',
            'rotation_style': 'unit',
            'debug': False,
            'seed': 0,
            'device': 'cpu'
        },
        'timing': {
            'refresh_period': 1.0,
            'rotation_step': 0.02,
            'transition_duration': 0.5
        },
        'viewport': {
            'width': 800,
            'height': 600
        },
        'simulation': {
            'fps': 60.0,
            'frames': 600,
            'log_interval': 60,
            'realtime': False
        },
        'schedule': []
    }


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file, filling missing sections from defaults."""
    config = get_default_config()
    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
    except FileNotFoundError:
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return config

    for section, value in loaded.items():
        if isinstance(value, dict) and isinstance(config.get(section), dict):
            config[section].update(value)
        else:
            config[section] = value
    return config


def parse_schedule(entries: List[Dict[str, Any]]) -> List[tuple]:
    """Turn schedule entries into (at, ParameterChange) sorted by time."""
    schedule = []
    for entry in entries or []:
        if 'at' not in entry:
            raise ValueError(f"Schedule entry without 'at': {entry}")
        unknown = set(entry) - set(CHANGE_KEYS) - {'at'}
        if unknown:
            raise ValueError(f"Unknown schedule keys {sorted(unknown)} in {entry}")
        change = ParameterChange(**{k: entry[k] for k in CHANGE_KEYS if k in entry})
        schedule.append((float(entry['at']), change))
    return sorted(schedule, key=lambda item: item[0])


class EngineRunner:
    """Main runner for the engine with graceful shutdown support."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.engine = EngineService(self.config)
        self.schedule = parse_schedule(self.config.get('schedule'))
        self.running = False
        self.shutdown_requested = False

        self.engine.events.subscribe(DIMENSION_CHANGED, self._on_event(DIMENSION_CHANGED))
        self.engine.events.subscribe(PROJECTION_CHANGED, self._on_event(PROJECTION_CHANGED))
        self.engine.events.subscribe(ROTATION_STYLE_CHANGED, self._on_event(ROTATION_STYLE_CHANGED))
        self.engine.events.subscribe(FRAME_FAILED, self._on_event(FRAME_FAILED))

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    @staticmethod
    def _on_event(name: str):
        def handler(data):
            logger.info(f"{name}: {data}")
        return handler

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        self.shutdown_requested = True

    def initialize(self) -> bool:
        """Initialize the engine."""
        eng = self.config['engine']
        init_req = InitRequest(
            dimension=eng['dimension'],
            projection=eng['projection'],
            rotation_style=eng['rotation_style'],
            debug=eng['debug'],
            seed=eng.get('seed'),
            device=eng.get('device', 'cpu'),
        )
        result = self.engine.init(init_req)
        if result['success']:
            logger.info(f"Engine initialized: {result['baseline_snapshot']['dimension']}-cube")
            return True
        logger.error(f"Engine initialization failed: {result['message']}")
        return False

    def _due_changes(self, now: float) -> ParameterChange:
        """Merge every scheduled change whose time has come."""
        merged = ParameterChange()
        while self.schedule and self.schedule[0][0] <= now:
            _, change = self.schedule.pop(0)
            for key in CHANGE_KEYS:
                value = getattr(change, key)
                if value is not None:
                    setattr(merged, key, value)
        return merged

    def run_simulation(self) -> bool:
        """Run the main frame loop."""
        if not self.initialize():
            return False

        sim = self.config['simulation']
        view = self.config['viewport']
        fps = float(sim['fps'])
        frames = int(sim['frames'])
        log_interval = max(1, int(sim['log_interval']))
        realtime = bool(sim['realtime'])
        dt = 1.0 / fps

        self.running = True
        logger.info(f"Starting frame loop: {frames} frames at {fps:.1f} fps")
        start_time = time.time()

        try:
            for step in range(frames):
                if self.shutdown_requested:
                    logger.info("Shutdown requested, stopping frame loop...")
                    break

                t0 = time.time()
                now = step * dt
                result = self.engine.step(StepRequest(
                    now=now, width=view['width'], height=view['height'],
                    changes=self._due_changes(now)))

                if not result.success:
                    logger.error(f"Frame {step} failed: {result.message}")
                    return False

                if result.frame is not None and step % log_interval == 0:
                    snap = self.engine.snapshot()
                    pts = result.frame.screen_points
                    logger.info(
                        f"Frame {step:5d}/{frames}: t={now:.2f}s, n={snap['dimension']}, "
                        f"proj={snap['projection']}, blend={result.frame.blend:.2f}, "
                        f"scale={snap['scale']:.3f}, "
                        f"x=[{pts[:, 0].min():.1f}, {pts[:, 0].max():.1f}], "
                        f"y=[{pts[:, 1].min():.1f}, {pts[:, 1].max():.1f}]"
                    )
                    if result.frame.labels:
                        for i, label in enumerate(result.frame.labels):
                            logger.debug(f"  v{i}: {label}")

                if realtime:
                    rem = dt - (time.time() - t0)
                    if rem > 0:
                        time.sleep(rem)

            elapsed_time = time.time() - start_time
            logger.info(f"Frame loop completed in {elapsed_time:.2f} seconds: "
                        f"{self.engine.metrics.summary_stats()}")
            return True

        finally:
            self.running = False

    def shutdown(self):
        """Gracefully shutdown the engine."""
        result = self.engine.shutdown()
        if result['success']:
            logger.info("Engine shutdown completed")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='N-dimensional hypercube projection engine')
    parser.add_argument(
        '--config', '-c',
        default='configs/default.yaml',
        help='Path to configuration file (default: configs/default.yaml)'
    )
    parser.add_argument('--frames', type=int, help='Override the number of frames')
    parser.add_argument('--fps', type=float, help='Override the frame rate')
    parser.add_argument('--realtime', action='store_true', help='Pace frames to wall-clock time')
    parser.add_argument('--debug', action='store_true', help='Log per-vertex coordinates')
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    setup_logging("DEBUG" if (args.verbose or args.debug) else "INFO")

    config = load_config(args.config)
    if args.frames is not None:
        config['simulation']['frames'] = args.frames
    if args.fps is not None:
        config['simulation']['fps'] = args.fps
    if args.realtime:
        config['simulation']['realtime'] = True
    if args.debug:
        config['engine']['debug'] = True

    try:
        runner = EngineRunner(config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)
    runner.install_signal_handlers()

    try:
        success = runner.run_simulation()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    finally:
        runner.shutdown()


if __name__ == '__main__':
    main()

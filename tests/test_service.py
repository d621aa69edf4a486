"""Tests for the engine service facade and the CLI runner."""

import pytest
import numpy as np
import torch

from apps.engine.engine_service import (
    EngineService, InitRequest, StepRequest, ParameterChange
)
from apps.engine.main import EngineRunner, get_default_config, load_config, parse_schedule
from ncube.observability import DIMENSION_CHANGED, PROJECTION_CHANGED, FRAME_FAILED, SeedManager


@pytest.fixture
def service():
    svc = EngineService({'timing': {'refresh_period': 0.5, 'transition_duration': 0.25}})
    result = svc.init(InitRequest(dimension=4, projection="isometric", seed=3))
    assert result['success']
    return svc


class TestEngineService:

    def test_step_before_init(self):
        svc = EngineService({})
        result = svc.step(StepRequest(now=0.0))
        assert not result.success
        assert result.message == "Engine not initialized"
        assert not svc.snapshot()['initialized']

    def test_timing_from_config(self, service):
        assert service.engine.refresh_period == 0.5
        assert service.engine.transition_duration == 0.25

    def test_invalid_init(self):
        svc = EngineService({})
        result = svc.init(InitRequest(dimension=0))
        assert not result['success']
        assert 'Initialization failed' in result['message']

    def test_step_produces_frame(self, service):
        result = service.step(StepRequest(now=0.016, width=640, height=480))
        assert result.success
        assert result.frame.screen_points.shape == (16, 2)
        assert service.metrics.counters['frames'] == 1

    def test_changes_publish_events(self, service):
        seen = []
        service.events.subscribe(DIMENSION_CHANGED, lambda d: seen.append(('dim', d)))
        service.events.subscribe(PROJECTION_CHANGED, lambda d: seen.append(('proj', d)))
        result = service.step(StepRequest(now=0.1, changes=ParameterChange(
            dimension=5, projection="Perspective - Avg", debug=True)))
        assert result.success
        assert result.applied == ['dimension', 'projection', 'debug']
        assert result.frame.dimension == 5
        assert len(result.frame.labels) == 32
        assert seen == [('dim', {'old': 4, 'new': 5}),
                        ('proj', {'old': 'isometric', 'new': 'perspective_average'})]

    def test_rejected_change_keeps_running(self, service):
        result = service.step(StepRequest(now=0.1, changes=ParameterChange(dimension=-2)))
        assert result.success
        assert result.applied == []
        assert result.frame.dimension == 4
        change = service.apply_changes(ParameterChange(projection="fisheye"), now=0.2)
        assert not change['success']
        assert 'projection' in change['message']

    def test_rotation_mismatch_fails_frame(self, service):
        failures = []
        service.events.subscribe(FRAME_FAILED, failures.append)
        service.engine.rotation.angles = torch.zeros(2, dtype=torch.float64)
        result = service.step(StepRequest(now=0.1))
        assert not result.success
        assert result.message.startswith("Frame aborted")
        assert len(failures) == 1
        assert service.metrics.counters['failed_frames'] == 1

    def test_snapshot_and_reset(self, service):
        for k in range(1, 40):
            service.step(StepRequest(now=k / 60))
        snap = service.snapshot()
        assert snap['initialized']
        assert snap['step_count'] == 39
        assert snap['metrics']['frames'] == 39
        assert any(a != 0.0 for a in snap['angles'])

        assert service.reset()['success']
        snap = service.snapshot()
        assert snap['step_count'] == 0
        assert snap['angles'] == [0.0] * 6

    def test_seeded_runs_repeat(self):
        runs = []
        for _ in range(2):
            svc = EngineService({})
            svc.init(InitRequest(dimension=4, seed=9))
            for k in range(1, 20):
                svc.step(StepRequest(now=k / 60))
            runs.append(svc.snapshot()['angles'])
        assert runs[0] == runs[1]

    def test_shutdown(self, service):
        result = service.shutdown()
        assert result['success']
        assert service.engine is None
        assert not service.step(StepRequest(now=1.0)).success


class TestRunner:

    def test_parse_schedule_sorted(self):
        schedule = parse_schedule([
            {'at': 3.0, 'dimension': 5},
            {'at': 1.0, 'projection': 'orthographic', 'debug': True},
        ])
        assert [at for at, _ in schedule] == [1.0, 3.0]
        assert schedule[0][1].projection == 'orthographic'
        assert schedule[0][1].debug is True

    def test_parse_schedule_rejects_bad_entries(self):
        with pytest.raises(ValueError):
            parse_schedule([{'dimension': 5}])
        with pytest.raises(ValueError):
            parse_schedule([{'at': 1.0, 'colour': 'red'}])

    def test_missing_config_uses_defaults(self, tmp_path):
        assert load_config(str(tmp_path / 'missing.yaml')) == get_default_config()

    def test_config_merges_sections(self, tmp_path):
        path = tmp_path / 'cfg.yaml'
        path.write_text("engine:\n  dimension: 6\nsimulation:\n  frames: 10\n")
        config = load_config(str(path))
        assert config['engine']['dimension'] == 6
        assert config['engine']['projection'] == 'isometric'
        assert config['simulation']['frames'] == 10
        assert config['simulation']['fps'] == 60.0

    def test_run_simulation(self):
        config = get_default_config()
        config['simulation'].update({'frames': 90, 'fps': 30.0, 'log_interval': 30})
        config['schedule'] = [
            {'at': 0.5, 'projection': 'Perspective - Trim'},
            {'at': 1.0, 'dimension': 3},
            {'at': 2.0, 'rotation_style': 'axis', 'debug': True},
        ]
        runner = EngineRunner(config)
        assert runner.run_simulation()
        snap = runner.engine.snapshot()
        assert snap['dimension'] == 3
        assert snap['projection'] == 'perspective_trim'
        assert snap['rotation_style'] == 'axis'
        assert runner.schedule == []
        runner.shutdown()


class TestObservability:

    def test_seed_manager_leaves_global_generators_alone(self):
        torch.manual_seed(1234)
        np.random.seed(1234)
        expected_torch = torch.rand(3)
        expected_np = np.random.rand(3)

        torch.manual_seed(1234)
        np.random.seed(1234)
        SeedManager(99).get_component_seed('rotation')
        torch.testing.assert_close(torch.rand(3), expected_torch)
        np.testing.assert_array_equal(np.random.rand(3), expected_np)

    def test_component_seeds_are_stable(self):
        a, b = SeedManager(5), SeedManager(5)
        assert a.get_component_seed('rotation') == b.get_component_seed('rotation')
        assert a.get_component_seed('rotation') != a.get_component_seed('other')
        assert 0 <= a.get_component_seed('rotation') < 2**31

    def test_service_init_keeps_global_torch_state(self):
        torch.manual_seed(77)
        expected = torch.rand(2)
        torch.manual_seed(77)
        EngineService({}).init(InitRequest(dimension=4, seed=3))
        torch.testing.assert_close(torch.rand(2), expected)

    def test_metrics_summary_after_steps(self, service):
        for k in range(1, 4):
            service.step(StepRequest(now=k / 60))
        stats = service.metrics.summary_stats()
        assert stats['frames'] == 3
        assert stats['failed_frames'] == 0
        assert stats['mean_draw_ms'] >= 0.0
        service.metrics.reset()
        assert service.metrics.summary_stats()['frames'] == 0

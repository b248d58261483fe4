"""
===============================================================================
KERNEL DISTRIBUTIONS - Plotting Test Suite
===============================================================================
Smoke tests for the diagnostic plots and the plot_perturbations script.
===============================================================================
"""

import sys
import os
import importlib.util
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from kernel_distributions.visualization import (
    covariance_ellipse, plot_angle_histogram, plot_tangent_scatter,
)

SCRIPT_PATH = os.path.join(os.path.dirname(__file__), '..', '..', 'scripts', 'plot_perturbations.py')


@pytest.fixture
def diffs():
    return np.random.default_rng(0).normal(0.0, 0.05, (200, 3))


class TestCovarianceEllipse:

    def test_axis_aligned(self):
        ellipse = covariance_ellipse(np.diag([4.0, 1.0]), n_sigma=2.0)
        assert_allclose(ellipse.width, 8.0)
        assert_allclose(ellipse.height, 4.0)
        assert_allclose(ellipse.angle % 180.0, 0.0, atol=1e-9)

    def test_rotated(self):
        ellipse = covariance_ellipse(np.diag([1.0, 9.0]), n_sigma=1.0)
        assert_allclose(ellipse.width, 6.0)
        assert_allclose(ellipse.height, 2.0)
        assert_allclose(ellipse.angle % 180.0, 90.0, atol=1e-9)


class TestPlots:

    def test_tangent_scatter(self, diffs, tmp_path):
        path = str(tmp_path / 'nested' / 'scatter.png')
        covariance = diffs.T @ diffs / len(diffs)
        assert plot_tangent_scatter(diffs, covariance, 'scatter', path) == path
        assert os.path.getsize(path) > 0

    def test_angle_histogram(self, diffs, tmp_path):
        path = str(tmp_path / 'histogram.png')
        assert plot_angle_histogram(diffs, 'angles', path, bins=20) == path
        assert os.path.getsize(path) > 0


class TestPlotPerturbationsScript:

    @pytest.fixture
    def script(self):
        spec = importlib.util.spec_from_file_location('plot_perturbations', SCRIPT_PATH)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def test_main_writes_plots(self, script, tmp_path):
        config_path = tmp_path / 'config.yaml'
        config_path.write_text(
            "perturbation:\n"
            "  dtype: float32\n"
            "  sigma: 0.1\n"
            "  n_samples: 100\n"
            "  seed: 1\n"
            "  log_level: WARNING\n"
        )
        output_dir = tmp_path / 'plots'
        root = logging.getLogger()
        level, handlers = root.level, list(root.handlers)
        try:
            status = script.main(['--config', str(config_path),
                                  '--samples', '150',
                                  '--output-dir', str(output_dir)])
        finally:
            root.handlers[:] = handlers
            root.setLevel(level)
        assert status == 0
        assert (output_dir / 'tangent_scatter.png').exists()
        assert (output_dir / 'angle_histogram.png').exists()

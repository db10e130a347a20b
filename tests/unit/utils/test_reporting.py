"""Unit tests for tables, profiling and plotting helpers."""

import os

import matplotlib.pyplot as plt
import numpy as np
import pytest

from lgssm.utils.profiling import ProfileResult, profile, time_callable
from lgssm.utils.visualization import (
    DEFAULT_COLORS, format_runtime, metrics_to_latex, plot_belief_ellipses,
    plot_covariance_ellipse, plot_error_over_time, plot_filter_estimate_with_bands, plot_free_energy,
    plot_kalman_filter, plot_stability_analysis, plot_trajectory_comparison,
    render_metrics_table, save_metrics_table,
)


METRICS = {
    'Filter': {'rmse': 2.1, 'free_energy': 1520.4, 'steady_step': 20},
    'Smoother': {'rmse': 1.6, 'free_energy': None},
}


class TestTables:

    def test_render(self):
        text = render_metrics_table(METRICS, ['rmse', 'free_energy', 'steady_step'], title='Demo')
        lines = text.splitlines()

        assert lines[1] == 'Demo'
        assert 'Method' in lines[4]
        assert 'Free Energy' in lines[4]
        assert '1520.400' in text
        assert 'N/A' in text
        assert '20' in lines[6]

    def test_save(self, tmp_path):
        path = str(tmp_path / 'table.txt')
        save_metrics_table(METRICS, path, columns=['rmse'], float_format='.2f')

        with open(path) as f:
            assert '2.10' in f.read()

    def test_latex(self):
        tex = metrics_to_latex(METRICS, ['rmse', 'free_energy'])

        assert r'\begin{tabular}{lrr}' in tex
        assert r'Smoother & 1.600 & -- \\' in tex

    @pytest.mark.parametrize("seconds,expected", [
        (5e-6, '5.0us'), (0.0032, '3.2ms'), (1.5, '1.50s'), (120.0, '2.0min'), (7200.0, '2.0h'),
    ])
    def test_format_runtime(self, seconds, expected):
        assert format_runtime(seconds) == expected


class TestProfiling:

    def test_profile_records(self):
        with profile() as prof:
            np.ones(100000).sum()

        assert isinstance(prof, ProfileResult)
        assert prof.runtime_s > 0
        assert prof.peak_memory_mb > 0

    def test_time_callable(self):
        calls = []
        timing = time_callable(lambda x: calls.append(x) or x * 2, 3, n_repeats=4)

        assert len(calls) == 4
        assert timing['result'] == 6
        assert timing['min'] <= timing['median'] <= timing['max']

    def test_time_callable_requires_repeat(self):
        with pytest.raises(ValueError):
            time_callable(sum, [1], n_repeats=0)


class TestPlots:
    """Plots render without error under the Agg backend."""

    @pytest.fixture
    def beliefs(self, rng):
        T = 20
        xs = rng.standard_normal((T, 2))
        means = xs + 0.1 * rng.standard_normal((T, 2))
        covs = np.tile(np.array([[0.5, 0.1], [0.1, 0.3]]), (T, 1, 1))
        return xs, means, covs

    def test_plot_kalman_filter(self, beliefs, tmp_path):
        xs, means, covs = beliefs
        path = str(tmp_path / 'kf.png')

        plot_kalman_filter(len(xs), xs, xs, means, covs, m_smooth=means, V_smooth=covs,
                           save_path=path)

        assert os.path.exists(path)

    def test_plot_bands_and_stability(self, beliefs, tmp_path):
        xs, means, covs = beliefs
        T = len(xs)

        plot_filter_estimate_with_bands(np.arange(T), xs, means, covs, 'KF',
                                        save_path=str(tmp_path / 'bands.png'))
        plot_stability_analysis(T, xs, means, means, np.ones(T), 2 * np.ones(T),
                                save_path=str(tmp_path / 'stab.png'))

        assert os.path.exists(tmp_path / 'bands.png')
        assert os.path.exists(tmp_path / 'stab.png')

    def test_plot_free_energy(self, tmp_path):
        path = str(tmp_path / 'fe.png')
        plot_free_energy(np.linspace(1.0, 2.0, 10), save_path=path)
        assert os.path.exists(path)

    def test_covariance_ellipse_axes(self):
        fig, ax = plt.subplots()
        ell = plot_covariance_ellipse(ax, np.zeros(2), np.diag([4.0, 1.0]), n_std=1.0)

        np.testing.assert_allclose([ell.width, ell.height], [4.0, 2.0])
        plt.close(fig)

    def test_degenerate_ellipse(self):
        """Zero covariance gives a zero-size ellipse instead of NaN."""
        fig, ax = plt.subplots()
        ell = plot_covariance_ellipse(ax, np.zeros(2), np.zeros((2, 2)))

        assert ell.width == 0 and ell.height == 0
        plt.close(fig)

    def test_trajectory_and_errors(self, beliefs):
        xs, means, covs = beliefs
        fig, axes = plt.subplots(1, 2)

        plot_trajectory_comparison(axes[0], xs, {'KF': means}, observations=xs)
        ellipses = plot_belief_ellipses(axes[0], means, covs, every=5)
        plot_error_over_time(axes[1], np.arange(len(xs)), xs, {'KF': means})

        assert len(ellipses) == 4
        assert len(axes[1].lines) == 1
        plt.close(fig)

    def test_default_colors_cycle(self, beliefs):
        """Estimates without an explicit color take DEFAULT_COLORS in order."""
        xs, means, _ = beliefs
        fig, ax = plt.subplots()

        plot_error_over_time(ax, np.arange(len(xs)), xs,
                             {'KF': means, 'RTS': means, 'Obs': xs}, colors={'Obs': 'gray'})

        colors = [line.get_color() for line in ax.lines]
        assert colors == [DEFAULT_COLORS[0], DEFAULT_COLORS[1], 'gray']
        plt.close(fig)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

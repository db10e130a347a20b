"""Kalman filter / RTS smoother benchmark: runtime, accuracy and stability."""
import argparse
import os
import sys

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from lgssm.ssm import linear_gaussian_ssm, rotation_matrix
from lgssm.filters import kalman_filter, rts_smoother
from lgssm.utils.metrics import compute_mse
from lgssm.utils.profiling import time_callable
from lgssm.utils.visualization import format_runtime

METHODS = [
    ('cholesky', False, 'Chol'),
    ('cholesky', True, 'Chol+Joseph'),
    ('lu', False, 'LU'),
    ('inv', False, 'Inv'),
]


def get_systems():
    """Test systems with varying dimensions."""
    return {
        '1d': {
            'A': np.array([[0.95]]),
            'B': np.array([[1.0]]),
            'Q': np.array([[0.25]]),
            'P': np.array([[0.09]]),
        },
        'rotation': {
            'A': rotation_matrix(np.pi / 35),
            'B': np.eye(2),
            'Q': np.eye(2),
            'P': 25.0 * np.eye(2),
        },
        'cv_2d': {
            # Position/velocity, observe position only
            'A': np.array([[1.0, 1.0],
                           [0.0, 1.0]]),
            'B': np.array([[1.0, 0.0]]),
            'Q': 0.25 * np.eye(2),
            'P': np.array([[0.01]]),
        },
        '10d': {
            'A': 0.95 * np.eye(10) + 0.02 * np.diag(np.ones(9), 1),
            'B': np.eye(5, 10),
            'Q': 0.09 * np.eye(10),
            'P': 0.04 * np.eye(5),
        },
    }


def get_high_precision_systems():
    """1D random walks with decreasing observation noise."""
    return {
        f'P={p:.0e}': {
            'A': np.array([[1.0]]),
            'B': np.array([[1.0]]),
            'Q': np.array([[1.0]]),
            'P': np.array([[p]]),
        }
        for p in (1e-12, 1e-14, 1e-16)
    }


def run_method(params, ys, xs, solver, joseph, n_repeats):
    """Run KF + RTS and return metrics: mse, free energy, runtimes."""
    n_x = params['A'].shape[0]
    prior = (np.zeros(n_x), 100.0 * np.eye(n_x))
    result = {'failed': False}
    try:
        kf_timing = time_callable(kalman_filter, ys, params['A'], params['B'], params['Q'],
                                  params['P'], prior, joseph=joseph, solver=solver,
                                  n_repeats=n_repeats)
        kf = kf_timing['result']
        rts_timing = time_callable(rts_smoother, kf, n_repeats=n_repeats)
        rts = rts_timing['result']
    except np.linalg.LinAlgError as e:
        result['failed'], result['reason'] = True, str(e)
        return result

    result.update({
        'mse_filt': compute_mse(kf.m_filt, xs),
        'mse_smooth': compute_mse(rts.m_smooth, xs),
        'free_energy': kf.free_energy,
        'cond': np.max(kf.cond_nums),
        'kf_runtime': kf_timing['median'],
        'rts_runtime': rts_timing['median'],
    })
    return result


def run_all(systems, T, seed, n_repeats):
    """Run all methods on all systems."""
    results = {}
    for name, params in systems.items():
        xs, ys = linear_gaussian_ssm(**params, T=T, rng=np.random.default_rng(seed))
        results[name] = {label: run_method(params, ys, xs, solver, joseph, n_repeats)
                         for solver, joseph, label in METHODS}
    return results


def format_table(results, title):
    """Format one results table as text lines."""
    lines = [title, "-" * 96,
             f"{'System':<12} {'Method':<12} {'MSE filt':<12} {'MSE smooth':<12} "
             f"{'log10(kappa)':<14} {'KF':<10} {'RTS':<10} {'Status'}",
             "-" * 96]
    for name, res in results.items():
        for _, _, label in METHODS:
            r = res[label]
            if r['failed']:
                lines.append(f"{name:<12} {label:<12} {'---':<12} {'---':<12} {'---':<14} "
                             f"{'---':<10} {'---':<10} FAIL ({r['reason'][:40]})")
            else:
                log_cond = np.log10(r['cond']) if np.isfinite(r['cond']) and r['cond'] > 0 else np.inf
                lines.append(f"{name:<12} {label:<12} {r['mse_filt']:<12.6f} {r['mse_smooth']:<12.6f} "
                             f"{log_cond:<14.2f} {format_runtime(r['kf_runtime']):<10} "
                             f"{format_runtime(r['rts_runtime']):<10} OK")
    return lines


def scaling_table(T_values, seed, n_repeats):
    """Median KF runtime on the rotation system as T grows."""
    params = get_systems()['rotation']
    prior = (np.zeros(2), 100.0 * np.eye(2))
    lines = ["KF runtime vs trajectory length (rotation system)", "-" * 40]
    for T in T_values:
        _, ys = linear_gaussian_ssm(**params, T=T, rng=np.random.default_rng(seed))
        timing = time_callable(kalman_filter, ys, params['A'], params['B'], params['Q'],
                               params['P'], prior, n_repeats=n_repeats)
        lines.append(f"T={T:<8} {format_runtime(timing['median']):>10} "
                     f"({format_runtime(timing['median'] / T)}/step)")
    return lines


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--T", type=int, default=200)
    parser.add_argument("--n_repeats", type=int, default=5)
    parser.add_argument("--output_dir", type=str,
                        default=os.path.join(os.path.dirname(__file__), '..', 'results', 'benchmark_kalman'))
    args = parser.parse_args()

    os.makedirs(args.output_dir, exist_ok=True)

    lines = ["=" * 96, "KALMAN FILTER / RTS SMOOTHER BENCHMARK", "=" * 96, ""]
    lines += format_table(run_all(get_systems(), args.T, args.seed, args.n_repeats),
                          "TABLE 1: Varying State Dimension")
    lines += ["", ""]
    lines += format_table(run_all(get_high_precision_systems(), args.T, args.seed, args.n_repeats),
                          "TABLE 2: High Precision Observations (1d, varying P)")
    lines += ["", ""]
    lines += scaling_table([100, 300, 1000, 3000], args.seed, args.n_repeats)

    report = "\n".join(lines)
    print(report)

    filepath = os.path.join(args.output_dir, 'benchmark_report.txt')
    with open(filepath, 'w') as f:
        f.write(report + "\n")
    print(f"Report saved: {filepath}")


if __name__ == "__main__":
    main()

"""
Experiment Logger - Track experiment configurations and results.

Provides per-method caching with numpy arrays saved to disk. Results are
cached individually per method (e.g. 'KF', 'RTS'), allowing mixed
cached/fresh runs.
"""
import os
import csv
import hashlib
import numpy as np
from datetime import datetime
from typing import Dict, List, Optional, Any


def _fmt(value, spec):
    return f"{value:{spec}}" if value is not None else ''


class ExperimentLogger:
    """
    Logger for tracking experiment configurations and per-method results.

    Features:
    - Per-method result caching (numpy arrays saved as .npz files)
    - Single CSV log file tracking individual method runs
    - Timestamped run directories for plots and reports

    Usage:
        logger = ExperimentLogger(experiment_name='rotation_demo')

        config = {'scenario': 'rotation', 'T': 300, 'seed': 42}

        if logger.result_exists('KF', **config):
            result = logger.load_result('KF', **config)
        else:
            result = run_kf(...)
            logger.save_result('KF', config, result)

        run_dir = logger.create_timestamped_run_dir()
    """

    LOG_COLUMNS = [
        'timestamp', 'experiment_name', 'method',
        'scenario', 'T', 'n_x', 'n_y', 'solver', 'joseph', 'seed',
        'rmse', 'free_energy', 'runtime_sec',
        'cache_file', 'status', 'notes'
    ]

    # Config keys used for cache matching
    CACHE_KEYS = ['scenario', 'T', 'n_x', 'n_y', 'solver', 'joseph', 'seed']

    def __init__(self, experiment_name: Optional[str] = None,
                 results_root: Optional[str] = None):
        """
        Initialize experiment logger.

        Parameters
        ----------
        experiment_name : str, optional
            Name of the experiment (e.g., 'rotation_demo').
            If provided, logs are stored in {results_root}/{experiment_name}/.
        results_root : str, optional
            Root directory for results (default: <project root>/results).
        """
        project_root = os.path.normpath(
            os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', '..')
        )
        self._results_root = results_root or os.path.join(project_root, 'results')
        self.experiment_name = experiment_name

        if experiment_name is not None:
            self.log_dir = os.path.join(self._results_root, experiment_name)
        else:
            self.log_dir = self._results_root

        self.log_file = os.path.join(self.log_dir, "method_log.csv")
        self.cache_dir = os.path.join(self.log_dir, "cache")

        os.makedirs(self.cache_dir, exist_ok=True)
        if not os.path.exists(self.log_file):
            with open(self.log_file, 'w', newline='') as f:
                csv.DictWriter(f, fieldnames=self.LOG_COLUMNS).writeheader()

        self._current_run_dir: Optional[str] = None

    def _config_hash(self, method: str, config: Dict) -> str:
        """Short md5 hash of the method name and the cache-relevant config."""
        key_parts = [method] + [f"{k}={config[k]}" for k in self.CACHE_KEYS if k in config]
        return hashlib.md5("_".join(key_parts).encode()).hexdigest()[:12]

    def get_cache_path(self, method: str, config: Dict) -> str:
        """
        Full path to the cache file for a method + config.

        Parameters
        ----------
        method : str
            Method name
        config : dict
            Experiment configuration

        Returns
        -------
        str
        """
        safe_name = method.replace('(', '_').replace(')', '').replace(' ', '_')
        filename = f"{safe_name}_{self._config_hash(method, config)}.npz"
        return os.path.join(self.cache_dir, filename)

    def result_exists(self, method: str, **config) -> bool:
        """True if a cached result exists for the method + config."""
        return os.path.exists(self.get_cache_path(method, config))

    def save_result(
        self,
        method: str,
        config: Dict[str, Any],
        data: Dict[str, Any],
        metrics: Optional[Dict[str, float]] = None,
        runtime_sec: float = 0.0,
        notes: str = ''
    ) -> str:
        """
        Save a method result to cache and append a row to the CSV log.

        Parameters
        ----------
        method : str
            Method name
        config : dict
            Experiment configuration
        data : dict
            Arrays or scalars to cache, e.g. {'m_filt': ..., 'V_filt': ...}
        metrics : dict, optional
            Summary metrics {rmse, free_energy}
        runtime_sec : float
            Method runtime in seconds
        notes : str
            Optional notes

        Returns
        -------
        str
            Path to saved cache file
        """
        cache_path = self.get_cache_path(method, config)
        np.savez_compressed(cache_path, **data)

        metrics = metrics or {}
        row = {key: config.get(key, '') for key in self.CACHE_KEYS}
        row.update({
            'timestamp': datetime.now().strftime('%Y-%m-%d_%H-%M-%S'),
            'experiment_name': self.experiment_name or '',
            'method': method,
            'rmse': _fmt(metrics.get('rmse'), '.4f'),
            'free_energy': _fmt(metrics.get('free_energy'), '.4f'),
            'runtime_sec': f"{runtime_sec:.4f}",
            'cache_file': os.path.basename(cache_path),
            'status': 'completed',
            'notes': notes,
        })

        with open(self.log_file, 'a', newline='') as f:
            csv.DictWriter(f, fieldnames=self.LOG_COLUMNS).writerow(row)

        print(f"  Cached {method}: {os.path.basename(cache_path)}")
        return cache_path

    def load_result(self, method: str, **config) -> Optional[Dict[str, np.ndarray]]:
        """
        Load a cached method result.

        Returns
        -------
        dict or None
            Dictionary of numpy arrays if the cache exists, else None.
        """
        cache_path = self.get_cache_path(method, config)
        if not os.path.exists(cache_path):
            return None

        with np.load(cache_path) as npz:
            data = {key: npz[key] for key in npz.files}

        print(f"  Loaded cached {method}: {os.path.basename(cache_path)}")
        return data

    def get_cached_methods(self, **config) -> List[str]:
        """
        Methods with a completed log entry and an existing cache file for config.

        Returns
        -------
        list[str]
        """
        cached = []
        with open(self.log_file, 'r', newline='') as f:
            for row in csv.DictReader(f):
                if row.get('status') != 'completed':
                    continue
                if any(str(row.get(k, '')) != str(config[k]) for k in self.CACHE_KEYS if k in config):
                    continue
                cache_file = row.get('cache_file', '')
                if cache_file and os.path.exists(os.path.join(self.cache_dir, cache_file)):
                    if row['method'] not in cached:
                        cached.append(row['method'])
        return cached

    def create_timestamped_run_dir(self, timestamp: Optional[str] = None) -> str:
        """
        Create a timestamped directory for plots and reports.

        Parameters
        ----------
        timestamp : str, optional
            Custom timestamp (YYYY-MM-DD_HH-MM-SS). Defaults to now.

        Returns
        -------
        str
            Path to the created run directory.
        """
        if timestamp is None:
            timestamp = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')

        self._current_run_dir = os.path.join(self.log_dir, timestamp)
        os.makedirs(self._current_run_dir, exist_ok=True)
        return self._current_run_dir

    def get_run_dir(self) -> Optional[str]:
        """Get the current run directory."""
        return self._current_run_dir

    def _run_subdir(self, name: str, create: bool) -> str:
        if self._current_run_dir is None:
            raise RuntimeError("Call create_timestamped_run_dir() first")
        path = os.path.join(self._current_run_dir, name)
        if create:
            os.makedirs(path, exist_ok=True)
        return path

    def get_figures_dir(self, create: bool = True) -> str:
        """Get the figures directory for the current run."""
        return self._run_subdir('figures', create)

    def get_metrics_dir(self, create: bool = True) -> str:
        """Get the metrics directory for the current run."""
        return self._run_subdir('metrics', create)

    def clear_cache(self, method: str, **config) -> bool:
        """
        Remove the cached result for one method.

        Returns
        -------
        bool
            True if the cache was removed, False if it didn't exist
        """
        cache_path = self.get_cache_path(method, config)
        if os.path.exists(cache_path):
            os.remove(cache_path)
            print(f"Removed cache: {os.path.basename(cache_path)}")
            return True
        return False

    def clear_all_cache(self) -> int:
        """Remove all cached results for this experiment; returns the count."""
        count = 0
        for f in os.listdir(self.cache_dir):
            if f.endswith('.npz'):
                os.remove(os.path.join(self.cache_dir, f))
                count += 1
        print(f"Removed {count} cache files.")
        return count

    def log_experiment(self, config: Dict[str, Any], duration_sec: float = 0.0,
                       notes: str = '') -> None:
        """
        Append an experiment summary to experiment_log.txt.

        Parameters
        ----------
        config : dict
            Experiment configuration
        duration_sec : float
            Total duration in seconds
        notes : str
            Optional notes
        """
        timestamp = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')
        log_path = os.path.join(self.log_dir, 'experiment_log.txt')

        with open(log_path, 'a') as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"Timestamp: {timestamp}\n")
            f.write(f"Duration: {duration_sec:.1f}s\n")
            for key, val in config.items():
                f.write(f"  {key}: {val}\n")
            if notes:
                f.write(f"Notes: {notes}\n")

        print(f"Experiment completed in {duration_sec:.1f}s")

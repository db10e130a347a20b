"""
lgssm: Linear-Gaussian State Space Models

This package contains implementations of:
- A synthetic data generator for linear-Gaussian SSMs
- Closed-form Kalman filtering and Rauch-Tung-Striebel smoothing
- Utility functions (metrics, plotting, experiment logging)
"""

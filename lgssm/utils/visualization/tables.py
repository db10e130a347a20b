"""
Utilities for generating plain-text and LaTeX metrics tables.
"""
from typing import Dict, List, Optional


def _format_value(value, float_format, na_string):
    if value is None:
        return na_string
    if isinstance(value, float):
        return f"{value:{float_format}}"
    return str(value)


def _display_name(col: str) -> str:
    return col.replace('_', ' ').title()


def render_metrics_table(
    metrics: Dict[str, Dict],
    columns: List[str],
    title: str = 'Performance Comparison',
    width: int = 12,
    label_width: int = 15,
    float_format: str = '.3f',
    na_string: str = 'N/A'
) -> str:
    """
    Render a metrics table as fixed-width text.

    Parameters
    ----------
    metrics : dict
        Mapping of method names to {column_name: value} dictionaries
    columns : list of str
        Column names to include (in order)
    title : str
        Table title
    width : int
        Width of each metric column
    label_width : int
        Width of the method-name column
    float_format : str
        Format string for float values
    na_string : str
        String to display for missing values

    Returns
    -------
    str

    Example
    -------
    >>> metrics = {
    ...     'Filter': {'rmse': 2.1, 'free_energy': 1520.4},
    ...     'Smoother': {'rmse': 1.6, 'free_energy': None},
    ... }
    >>> print(render_metrics_table(metrics, ['rmse', 'free_energy']))
    """
    header = ' '.join(
        [f"{'Method':<{label_width}}"] + [f"{_display_name(c):>{width}}" for c in columns]
    )
    rule = len(header)

    lines = ['=' * rule, title, '=' * rule, '', header, '-' * rule]
    for name, m in metrics.items():
        cells = [f"{name:<{label_width}}"]
        cells += [f"{_format_value(m.get(c), float_format, na_string):>{width}}" for c in columns]
        lines.append(' '.join(cells))
    lines.append('=' * rule)
    return '\n'.join(lines) + '\n'


def save_metrics_table(
    metrics: Dict[str, Dict],
    save_path: str,
    columns: List[str],
    title: str = 'Performance Comparison',
    float_format: str = '.3f',
    na_string: str = 'N/A',
    width: Optional[int] = None,
) -> None:
    """Write render_metrics_table(...) to save_path."""
    text = render_metrics_table(
        metrics, columns, title=title, width=width or 12,
        float_format=float_format, na_string=na_string,
    )
    with open(save_path, 'w') as f:
        f.write(text)

    print(f'Table saved to: {save_path}')


def format_runtime(seconds: float) -> str:
    """
    Format runtime in human-readable form.

    Parameters
    ----------
    seconds : float
        Runtime in seconds

    Returns
    -------
    str
        e.g. '12.5us', '3.2ms', '1.50s', '2.0min', '1.1h'
    """
    if seconds < 0.001:
        return f"{seconds * 1e6:.1f}us"
    elif seconds < 1.0:
        return f"{seconds * 1000:.1f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}min"
    return f"{seconds / 3600:.1f}h"


def metrics_to_latex(
    metrics: Dict[str, Dict],
    columns: List[str],
    caption: str = 'Performance Comparison',
    label: str = 'tab:performance',
    float_format: str = '.3f'
) -> str:
    """
    Convert metrics dictionary to a booktabs LaTeX table.

    Parameters
    ----------
    metrics : dict
        Mapping of method names to metric dictionaries
    columns : list of str
        Column names to include
    caption : str
        Table caption
    label : str
        LaTeX label
    float_format : str
        Format string for float values

    Returns
    -------
    str
        LaTeX table code
    """
    lines = [
        r'\begin{table}[htbp]',
        r'\centering',
        f'\\caption{{{caption}}}',
        f'\\label{{{label}}}',
        r'\begin{tabular}{l' + 'r' * len(columns) + '}',
        r'\toprule',
        ' & '.join(['Method'] + [_display_name(c) for c in columns]) + r' \\',
        r'\midrule',
    ]
    for name, m in metrics.items():
        row = [name] + [_format_value(m.get(c), float_format, '--') for c in columns]
        lines.append(' & '.join(row) + r' \\')
    lines += [r'\bottomrule', r'\end{tabular}', r'\end{table}']
    return '\n'.join(lines)

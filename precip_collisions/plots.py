"""
plots.py
========
Report figures, saved as 300 dpi PNGs

- Daily collisions over time with precipitation
- Precipitation vs collisions scatter with a regression line
- Wet vs dry day box plots per outcome
- Held-out RMSE per family, failed families marked
"""

import logging
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from pathlib import Path
from typing import List, Sequence

logger = logging.getLogger(__name__)

# Set style
plt.style.use('seaborn-v0_8-darkgrid')
sns.set_palette("husl")


class ReportPlotter:
    """Writes the report figures into one directory"""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.saved: List[Path] = []

    def _save(self, fig, filename: str) -> Path:
        path = self.output_dir / filename
        fig.tight_layout()
        fig.savefig(path, dpi=300, bbox_inches='tight')
        plt.close(fig)
        self.saved.append(path)
        logger.info(f"+ Generated {filename}")
        return path

    def plot_time_series(self, panel: pd.DataFrame, outcome: str = 'collisions') -> Path:
        """Daily outcome (30-day rolling mean) with daily precipitation below"""
        fig, (ax_top, ax_bottom) = plt.subplots(2, 1, figsize=(12, 7), sharex=True,
                                                gridspec_kw={'height_ratios': [3, 1]})
        series = panel.set_index('date')[outcome]
        ax_top.plot(series.index, series.values, alpha=0.3, linewidth=0.6, label='Daily')
        ax_top.plot(series.index, series.rolling(30, min_periods=1).mean().values,
                    linewidth=1.8, label='30-day mean')
        ax_top.set_ylabel(outcome.replace('_', ' ').title(), fontsize=12, fontweight='bold')
        ax_top.set_title(f'Daily {outcome.replace("_", " ")} and precipitation',
                         fontsize=14, fontweight='bold')
        ax_top.legend(fontsize=10)

        ax_bottom.bar(panel['date'], panel['precipitation'], width=1.0, color='#3498db')
        ax_bottom.set_ylabel('Precipitation (in)', fontsize=10, fontweight='bold')
        ax_bottom.set_xlabel('Date', fontsize=12, fontweight='bold')
        return self._save(fig, f'timeseries_{outcome}.png')

    def plot_precipitation_scatter(self, panel: pd.DataFrame, outcome: str = 'collisions') -> Path:
        """Precipitation vs outcome with an OLS regression line"""
        fig, ax = plt.subplots(figsize=(9, 6))
        sns.regplot(data=panel, x='precipitation', y=outcome, ax=ax,
                    scatter_kws={'alpha': 0.3, 's': 12}, line_kws={'color': '#e74c3c'})
        ax.set_xlabel('Precipitation (in)', fontsize=12, fontweight='bold')
        ax.set_ylabel(outcome.replace('_', ' ').title(), fontsize=12, fontweight='bold')
        ax.set_title(f'Precipitation vs {outcome.replace("_", " ")}', fontsize=14, fontweight='bold')
        ax.grid(alpha=0.3)
        return self._save(fig, f'scatter_precipitation_{outcome}.png')

    def plot_wet_dry_boxplots(self, panel: pd.DataFrame, outcomes: Sequence[str]) -> Path:
        """One box plot per outcome, wet vs dry days"""
        n = len(outcomes)
        n_cols = min(3, n)
        n_rows = int(np.ceil(n / n_cols))
        fig, axes = plt.subplots(n_rows, n_cols, figsize=(5 * n_cols, 4 * n_rows), squeeze=False)
        day_type = np.where(panel['wet_day'].astype(bool), 'Wet', 'Dry')
        for ax, outcome in zip(axes.ravel(), outcomes):
            sns.boxplot(x=day_type, y=panel[outcome].to_numpy(), order=['Dry', 'Wet'], ax=ax)
            ax.set_title(outcome.replace('_', ' ').title(), fontsize=12, fontweight='bold')
            ax.set_xlabel('')
        for ax in axes.ravel()[n:]:
            ax.set_visible(False)
        fig.suptitle('Outcomes on wet vs dry days', fontsize=14, fontweight='bold')
        return self._save(fig, 'wet_dry_boxplots.png')

    def plot_rmse_comparison(self, comparison: pd.DataFrame, outcome: str) -> Path:
        """Bar per family in roster order; failed families shown as an X at zero"""
        fig, ax = plt.subplots(figsize=(11, 6))
        x = np.arange(len(comparison))
        ok = comparison['status'] == 'ok'
        heights = comparison['rmse'].where(ok, 0.0).to_numpy(dtype=float)
        bars = ax.bar(x, heights, alpha=0.8, color=sns.color_palette("husl", len(comparison)))

        for bar, is_ok, value in zip(bars, ok, comparison['rmse']):
            if is_ok:
                ax.text(bar.get_x() + bar.get_width() / 2., bar.get_height(),
                        f'{value:.3f}', ha='center', va='bottom', fontsize=8)
            else:
                ax.text(bar.get_x() + bar.get_width() / 2., 0, 'X\nfailed',
                        ha='center', va='bottom', fontsize=9, color='#c0392b', fontweight='bold')

        ax.set_xticks(x)
        ax.set_xticklabels(comparison['family'], rotation=30, ha='right', fontsize=10)
        ax.set_ylabel('Held-out RMSE', fontsize=12, fontweight='bold')
        ax.set_title(f'Model comparison: {outcome.replace("_", " ")}', fontsize=14, fontweight='bold')
        ax.grid(axis='y', alpha=0.3)
        return self._save(fig, f'rmse_comparison_{outcome}.png')

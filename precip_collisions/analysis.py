"""
analysis.py
===========
Exploratory statistics around the model comparison

- correlation_table: Pearson and Spearman per (weather variable, outcome)
- wet_dry_comparison: outcome means on wet vs dry days, Welch t-test
- association_table: full-panel OLS per outcome
"""

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import stats
from typing import Sequence

from .models.base_model import ModelSpec


def correlation_table(panel: pd.DataFrame, weather_vars: Sequence[str],
                      outcomes: Sequence[str]) -> pd.DataFrame:
    """
    One row per (weather variable, outcome) pair

    Columns: weather, outcome, n, pearson_r, pearson_p, spearman_rho, spearman_p.
    Coefficients are NaN when either column is constant.
    """
    rows = []
    for weather in weather_vars:
        for outcome in outcomes:
            x = panel[weather].to_numpy(dtype=float)
            y = panel[outcome].to_numpy(dtype=float)
            row = {'weather': weather, 'outcome': outcome, 'n': int(len(x)),
                   'pearson_r': np.nan, 'pearson_p': np.nan,
                   'spearman_rho': np.nan, 'spearman_p': np.nan}
            if len(x) > 2 and np.ptp(x) > 0 and np.ptp(y) > 0:
                r, p = stats.pearsonr(x, y)
                rho, p_s = stats.spearmanr(x, y)
                row.update({'pearson_r': float(r), 'pearson_p': float(p),
                            'spearman_rho': float(rho), 'spearman_p': float(p_s)})
            rows.append(row)
    return pd.DataFrame(rows, columns=['weather', 'outcome', 'n', 'pearson_r', 'pearson_p',
                                       'spearman_rho', 'spearman_p'])


def wet_dry_comparison(panel: pd.DataFrame, outcomes: Sequence[str],
                       wet_column: str = 'wet_day') -> pd.DataFrame:
    """
    Outcome means on wet vs dry days

    Columns: outcome, n_wet, n_dry, mean_wet, mean_dry, difference,
    t_statistic, p_value (Welch, unequal variances).
    """
    wet = panel[wet_column].astype(bool)
    rows = []
    for outcome in outcomes:
        wet_values = panel.loc[wet, outcome].to_numpy(dtype=float)
        dry_values = panel.loc[~wet, outcome].to_numpy(dtype=float)
        mean_wet = float(wet_values.mean()) if len(wet_values) else np.nan
        mean_dry = float(dry_values.mean()) if len(dry_values) else np.nan
        t_stat, p_value = np.nan, np.nan
        if len(wet_values) > 1 and len(dry_values) > 1:
            t_stat, p_value = stats.ttest_ind(wet_values, dry_values, equal_var=False)
        rows.append({
            'outcome': outcome,
            'n_wet': int(len(wet_values)),
            'n_dry': int(len(dry_values)),
            'mean_wet': mean_wet,
            'mean_dry': mean_dry,
            'difference': mean_wet - mean_dry,
            't_statistic': float(t_stat),
            'p_value': float(p_value),
        })
    return pd.DataFrame(rows)


def association_table(panel: pd.DataFrame, specs: Sequence[ModelSpec]) -> pd.DataFrame:
    """
    Full-panel OLS per outcome, one row per (outcome, predictor)

    Columns: outcome, predictor, coefficient, std_error, p_value, r_squared, n
    """
    rows = []
    for spec in specs:
        spec.validate(panel, 'panel')
        X, y = spec.design(panel)
        results = sm.OLS(y, sm.add_constant(X, has_constant='add')).fit()
        # params[0] is the intercept
        for i, predictor in enumerate(spec.independents, start=1):
            rows.append({
                'outcome': spec.dependent,
                'predictor': predictor,
                'coefficient': float(results.params[i]),
                'std_error': float(results.bse[i]),
                'p_value': float(results.pvalues[i]),
                'r_squared': float(results.rsquared),
                'n': int(results.nobs),
            })
    return pd.DataFrame(rows, columns=['outcome', 'predictor', 'coefficient', 'std_error',
                                       'p_value', 'r_squared', 'n'])

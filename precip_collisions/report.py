"""
report.py
=========
Runs the precipitation vs collisions report end to end.

Steps:
- Load and quality-check weather and collisions
- Build the daily panel, exploratory tables and figures
- Partition once, run the Model Comparison Harness per configured outcome
- Write CSV / LaTeX / JSON outputs

Usage:
    precip-collisions-report                              # Uses report_config.json
    precip-collisions-report --config MyConfig.json       # Uses custom config
"""

import sys
import json
import argparse
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .analysis import association_table, correlation_table, wet_dry_comparison
from .collisions import load_collisions, read_collisions_csv
from .config import WEATHER_COLUMNS, ReportConfig, load_configuration
from .logging_setup import close_logging, log_section, setup_logging
from .models import ModelComparisonHarness, ModelResult, ModelSpec, elastic_net_grid
from .panel import Partition, build_daily_panel, train_test_partition
from .weather import load_weather, read_weather_csv


def rmse_latex_table(comparisons: Dict[str, pd.DataFrame], scenario_name: str) -> str:
    """
    LaTeX tabular of held-out RMSE, one column per outcome, families in
    roster order; the best RMSE per outcome is bold, failed families show ---
    """
    outcomes = list(comparisons)
    families = list(next(iter(comparisons.values()))['family']) if outcomes else []
    best = {}
    for outcome, frame in comparisons.items():
        ok = frame.loc[frame['status'] == 'ok']
        best[outcome] = ok.loc[ok['rmse'].idxmin(), 'family'] if len(ok) else None

    lines = [
        "\\begin{table}[htbp]",
        "\\centering",
        "\\small",
        f"\\caption{{Held-out RMSE by model family ({scenario_name.replace('_', ' ')})}}",
        "\\label{tab:rmse_comparison}",
        "\\begin{tabular}{l" + "r" * len(outcomes) + "}",
        "\\toprule",
        "\\textbf{Family} & " + " & ".join(
            f"\\textbf{{{o.replace('_', ' ').title()}}}" for o in outcomes) + " \\\\",
        "\\midrule",
    ]
    for family in families:
        cells = []
        for outcome in outcomes:
            row = comparisons[outcome].loc[comparisons[outcome]['family'] == family].iloc[0]
            if row['status'] != 'ok':
                cells.append("---")
            elif family == best[outcome]:
                cells.append(f"\\textbf{{{row['rmse']:.4f}}}")
            else:
                cells.append(f"{row['rmse']:.4f}")
        lines.append(f"{family} & " + " & ".join(cells) + " \\\\")
    lines += ["\\bottomrule", "\\end{tabular}", "\\end{table}", ""]
    return "\n".join(lines)


class ReportOrchestrator:
    """
    Master driver for the precipitation vs collisions report
    """

    def __init__(self, config_path: str = "report_config.json"):
        """
        Args:
            config_path: Path to JSON configuration file
        """
        self.config_path = Path(config_path)
        self.config: ReportConfig = load_configuration(self.config_path)
        self.logger = setup_logging(self.config.log_dir, self.config.scenario_name)
        self.output_dir = self.config.output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.quality: Dict[str, Any] = {}
        self.panel: Optional[pd.DataFrame] = None
        self.partition: Optional[Partition] = None
        self.results: Dict[str, List[ModelResult]] = {}
        self.comparisons: Dict[str, pd.DataFrame] = {}

        self.logger.info("=" * 80)
        self.logger.info("PRECIPITATION VS COLLISIONS REPORT")
        self.logger.info("=" * 80)
        self.logger.info(f"Configuration: {self.config_path}")
        self.logger.info(f"Scenario: {self.config.scenario_name}")
        self.logger.info(f"Output directory: {self.output_dir}")

    # ========================================================================
    # DATA
    # ========================================================================

    def load_data(self) -> pd.DataFrame:
        """Ingest both sources and build the daily panel"""
        log_section(self.logger, "LOADING DATA", "=")
        cfg = self.config

        weather_raw = read_weather_csv(cfg.weather_csv)
        collisions_raw = read_collisions_csv(cfg.collisions_csv)

        weather, self.quality['weather'] = load_weather(weather_raw, cfg.trace_precipitation)
        collisions, self.quality['collisions'] = load_collisions(
            collisions_raw, cfg.borough, cfg.start_date, cfg.end_date)
        self.panel = build_daily_panel(collisions, weather)
        if len(self.panel) == 0:
            raise ValueError(f"No collision days for {cfg.borough} "
                             f"between {cfg.start_date} and {cfg.end_date}")

        self.panel.to_csv(self.output_dir / 'daily_panel.csv', index=False)
        self._write_quality_tables()
        return self.panel

    def _write_quality_tables(self):
        weather_q = self.quality['weather']
        collisions_q = self.quality['collisions']
        rows = [('weather', f'rows_{k}', v) for k, v in weather_q['rows_by_report_type'].items()]
        rows += [('weather', k, weather_q[k]) for k in
                 ('rows', 'days', 'days_with_daily_summary', 'days_filled_from_hourly')]
        rows += [('weather', f'missing_share_{k}', v) for k, v in weather_q['missing_share'].items()]
        rows += [('collisions', k, collisions_q[k]) for k in
                 ('rows', 'duplicate_ids_dropped', 'bad_dates_dropped', 'missing_borough', 'rows_clean')]
        rows += [('collisions', f'negative_{k}', v) for k, v in collisions_q['negative_counts'].items()]
        table = pd.DataFrame(rows, columns=['source', 'check', 'value'])
        table.to_csv(self.output_dir / 'data_quality.csv', index=False)

        self.logger.info("")
        self.logger.info("Data quality:")
        for source, check, value in rows:
            self.logger.info(f"  {source:<11} {check:<35} {value}")

    # ========================================================================
    # EXPLORATORY STATISTICS
    # ========================================================================

    def run_exploratory(self):
        """Correlation, wet/dry and association tables"""
        log_section(self.logger, "EXPLORATORY STATISTICS", "=")
        cfg = self.config
        weather_vars = [c for c in WEATHER_COLUMNS if c in self.panel.columns]

        correlations = correlation_table(self.panel, weather_vars, cfg.dependents)
        wet_dry = wet_dry_comparison(self.panel, cfg.dependents)
        associations = association_table(
            self.panel, [ModelSpec(d, cfg.independents) for d in cfg.dependents])

        correlations.to_csv(self.output_dir / 'correlation.csv', index=False)
        wet_dry.to_csv(self.output_dir / 'wet_dry_comparison.csv', index=False)
        associations.to_csv(self.output_dir / 'association.csv', index=False)

        for _, row in wet_dry.iterrows():
            self.logger.info(f"{row['outcome']}: wet {row['mean_wet']:.3f} vs dry "
                             f"{row['mean_dry']:.3f} (Welch p = {row['p_value']:.4g})")

    # ========================================================================
    # MODEL COMPARISON
    # ========================================================================

    def run_models(self):
        """Partition once, then run the harness for each configured outcome"""
        log_section(self.logger, "MODEL COMPARISON", "=")
        cfg = self.config
        self.partition = train_test_partition(self.panel, cfg.train_fraction, cfg.random_seed)
        self.logger.info(f"Partition: {len(self.partition.train):,} train / "
                         f"{len(self.partition.test):,} test (seed {cfg.random_seed})")

        harness = ModelComparisonHarness(seed=cfg.random_seed, cv_folds=cfg.cv_folds,
                                         elastic_net_grid=elastic_net_grid(**cfg.elastic_net_grid),
                                         tweedie_profile_source=cfg.tweedie_profile_source)
        if cfg.tweedie_profile_source == 'full':
            self.logger.warning("Tweedie power profiled on the full panel (includes test rows)")

        for dependent in cfg.dependents:
            log_section(self.logger, f"Outcome: {dependent}")
            spec = ModelSpec(dependent, cfg.independents)
            results = harness.run(spec, self.partition)
            comparison = harness.to_frame(results)

            self.results[dependent] = results
            self.comparisons[dependent] = comparison
            comparison.to_csv(self.output_dir / f'rmse_comparison_{dependent}.csv', index=False)
            self._log_results(results)

    def _log_results(self, results: List[ModelResult]):
        for result in results:
            if result.failed:
                self.logger.warning(f"  {result.family:<15} FAILED: {result.error}")
                continue
            extra = ''
            if 'var_power' in result.details:
                extra = f" (power {result.details['var_power']:.3f})"
            elif 'l1_ratio' in result.details:
                extra = (f" (l1_ratio {result.details['l1_ratio']:.2f}, "
                         f"alpha {result.details['alpha']:.4g})")
            elif 'alpha' in result.details:
                extra = f" (alpha {result.details['alpha']:.4g})"
            self.logger.info(f"  {result.family:<15} RMSE {result.rmse:.4f}{extra}")

    # ========================================================================
    # OUTPUTS
    # ========================================================================

    def generate_plots(self):
        """Figures (optional, output_settings.generate_plots)"""
        from .plots import ReportPlotter

        log_section(self.logger, "FIGURES", "=")
        plotter = ReportPlotter(self.output_dir / 'figures')
        plotter.plot_time_series(self.panel)
        plotter.plot_precipitation_scatter(self.panel)
        plotter.plot_wet_dry_boxplots(self.panel, self.config.dependents)
        for dependent, comparison in self.comparisons.items():
            plotter.plot_rmse_comparison(comparison, dependent)

    def generate_summary(self) -> Dict[str, Any]:
        """LaTeX RMSE table and JSON run summary"""
        latex_file = self.output_dir / 'rmse_comparison.tex'
        latex_file.write_text(rmse_latex_table(self.comparisons, self.config.scenario_name),
                              encoding='utf-8')
        self.logger.info(f"+ Saved LaTeX table: {latex_file}")

        best = {}
        for dependent, comparison in self.comparisons.items():
            ok = comparison.loc[comparison['status'] == 'ok']
            if len(ok):
                row = ok.loc[ok['rmse'].idxmin()]
                best[dependent] = {'family': row['family'], 'rmse': float(row['rmse'])}
            else:
                best[dependent] = None

        summary = {
            'timestamp': datetime.now().isoformat(),
            'scenario': self.config.scenario_name,
            'configuration': self.config_path.name,
            'borough': self.config.borough,
            'window': [self.config.start_date, self.config.end_date],
            'panel_rows': int(len(self.panel)),
            'wet_days': int(self.panel['wet_day'].sum()),
            'n_train': int(len(self.partition.train)),
            'n_test': int(len(self.partition.test)),
            'seed': self.config.random_seed,
            'tweedie_profile_source': self.config.tweedie_profile_source,
            'data_quality': self.quality,
            'best_family': best,
            'results': {
                dependent: [{'family': r.family,
                             'rmse': None if r.failed else r.rmse,
                             'error': r.error}
                            for r in results]
                for dependent, results in self.results.items()
            },
        }
        summary_file = self.output_dir / 'report_summary.json'
        with open(summary_file, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2, default=str)
        self.logger.info(f"+ Saved summary: {summary_file}")
        return summary

    def run(self) -> int:
        """Run the complete report"""
        try:
            start_time = datetime.now()

            self.load_data()
            self.run_exploratory()
            self.run_models()
            if self.config.generate_plots:
                self.generate_plots()
            self.generate_summary()

            duration = datetime.now() - start_time
            self.logger.info("")
            self.logger.info("=" * 80)
            self.logger.info("REPORT COMPLETE")
            self.logger.info("=" * 80)
            self.logger.info(f"Total time: {duration}")
            self.logger.info(f"Output directory: {self.output_dir}")
            self.logger.info("=" * 80)
            return 0

        except Exception as e:
            self.logger.error("")
            self.logger.error("=" * 80)
            self.logger.error("REPORT FAILED")
            self.logger.error("=" * 80)
            self.logger.error(f"{type(e).__name__}: {e}")
            self.logger.error(traceback.format_exc())
            self.logger.error("=" * 80)
            return 1

        finally:
            close_logging()


# ============================================================================
# MAIN EXECUTION
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='Precipitation vs collisions report',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
    Examples:
    precip-collisions-report                              # Use report_config.json
    precip-collisions-report --config MyConfig.json       # Use custom configuration
            """
    )
    parser.add_argument(
        '--config',
        type=str,
        default='report_config.json',
        help='Path to JSON configuration file (default: report_config.json)'
    )
    args = parser.parse_args(argv)

    try:
        orchestrator = ReportOrchestrator(config_path=args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return orchestrator.run()


if __name__ == "__main__":
    sys.exit(main())

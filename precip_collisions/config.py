"""
config.py
=========
JSON report configuration

Required top-level sections: scenario_name, data_settings, model_settings,
output_settings. Optional keys inside each section fall back to DEFAULTS;
unknown keys are ignored. Relative paths are resolved against the directory
holding the configuration file.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

REQUIRED_SECTIONS = ['scenario_name', 'data_settings', 'model_settings', 'output_settings']

OUTCOME_COLUMNS = [
    'collisions',
    'persons_injured', 'persons_killed',
    'pedestrians_injured', 'pedestrians_killed',
    'cyclists_injured', 'cyclists_killed',
    'motorists_injured', 'motorists_killed',
]

WEATHER_COLUMNS = ['precipitation', 'snowfall', 'snow_depth']

DEFAULTS: Dict[str, Dict[str, Any]] = {
    'data_settings': {
        'borough': 'BROOKLYN',
        'start_date': '2013-01-01',
        'end_date': '2021-12-31',
        'trace_precipitation': 0.0,
    },
    'model_settings': {
        'dependents': ['collisions', 'persons_injured'],
        'independents': WEATHER_COLUMNS,
        'train_fraction': 0.75,
        'random_seed': 42,
        'cv_folds': 10,
        'elastic_net_grid': {'start': 0.05, 'stop': 0.95, 'step': 0.05},
        'tweedie_profile_source': 'full',
    },
    'output_settings': {
        'output_dir': 'report/output',
        'log_dir': 'report/logs',
        'generate_plots': True,
    },
}

TWEEDIE_PROFILE_SOURCES = ('full', 'train')


@dataclass
class ReportConfig:
    """Validated report configuration"""
    scenario_name: str
    weather_csv: Path
    collisions_csv: Path
    borough: str
    start_date: str
    end_date: str
    trace_precipitation: float
    dependents: List[str]
    independents: List[str]
    train_fraction: float
    random_seed: int
    cv_folds: int
    elastic_net_grid: Dict[str, float]
    tweedie_profile_source: str
    output_dir: Path
    log_dir: Path
    generate_plots: bool
    source: Path = field(default=None)


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config[name]
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be an object")
    merged = dict(DEFAULTS.get(name, {}))
    merged.update(section)
    return merged


def load_configuration(config_path: Union[str, Path]) -> ReportConfig:
    """
    Load and validate JSON configuration

    Args:
        config_path: Path to the JSON file

    Returns:
        ReportConfig with defaults applied

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a required section or key is missing or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            f"Please create report_config.json or specify --config"
        )

    with open(config_path, 'r', encoding='utf-8') as f:
        config = json.load(f)

    # Validate required fields
    for section in REQUIRED_SECTIONS:
        if section not in config:
            raise ValueError(f"Missing required field in config: {section}")

    data = _section(config, 'data_settings')
    models = _section(config, 'model_settings')
    output = _section(config, 'output_settings')

    for key in ('weather_csv', 'collisions_csv'):
        if key not in data:
            raise ValueError(f"Missing required field in config: data_settings.{key}")

    unknown_outcomes = [d for d in models['dependents'] if d not in OUTCOME_COLUMNS]
    if unknown_outcomes:
        raise ValueError(f"Unknown dependents {unknown_outcomes}; expected any of {OUTCOME_COLUMNS}")
    if not models['dependents']:
        raise ValueError("model_settings.dependents is empty")

    fraction = float(models['train_fraction'])
    if not 0.0 < fraction < 1.0:
        raise ValueError(f"train_fraction must lie strictly between 0 and 1, got {fraction}")

    source = models['tweedie_profile_source']
    if source not in TWEEDIE_PROFILE_SOURCES:
        raise ValueError(f"tweedie_profile_source must be one of {TWEEDIE_PROFILE_SOURCES}, got {source!r}")

    grid = dict(DEFAULTS['model_settings']['elastic_net_grid'])
    grid.update(models['elastic_net_grid'])

    base_dir = config_path.resolve().parent

    def resolve(path: str) -> Path:
        path = Path(path)
        return path if path.is_absolute() else base_dir / path

    return ReportConfig(
        scenario_name=str(config['scenario_name']),
        weather_csv=resolve(data['weather_csv']),
        collisions_csv=resolve(data['collisions_csv']),
        borough=str(data['borough']),
        start_date=str(data['start_date']),
        end_date=str(data['end_date']),
        trace_precipitation=float(data['trace_precipitation']),
        dependents=list(models['dependents']),
        independents=list(models['independents']),
        train_fraction=fraction,
        random_seed=int(models['random_seed']),
        cv_folds=int(models['cv_folds']),
        elastic_net_grid={k: float(grid[k]) for k in ('start', 'stop', 'step')},
        tweedie_profile_source=source,
        output_dir=resolve(output['output_dir']),
        log_dir=resolve(output['log_dir']),
        generate_plots=bool(output['generate_plots']),
        source=config_path,
    )

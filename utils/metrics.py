"""
Summary statistics for the rendered bloom layers.

This module aggregates the currently visible records into the numbers
shown next to the map: coverage counts, ecosystem indicators and
agricultural insights. Empty inputs produce zeros rather than errors.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd


def _frame(records: Iterable[Any], columns: List[str]) -> pd.DataFrame:
    """Project records onto the given attribute columns."""
    return pd.DataFrame(
        [{column: getattr(record, column) for column in columns} for record in records],
        columns=columns
    )


def _mean(series: pd.Series) -> float:
    return float(series.mean()) if len(series) else 0.0


def summary_statistics(
    observations: Sequence[Any],
    citizen_reports: Sequence[Any],
    climate_samples: Sequence[Any],
    agricultural_fields: Sequence[Any],
    region: str = 'global'
) -> Dict[str, Any]:
    """
    Headline counts for the statistics panel.

    Args:
        observations: Visible bloom observations
        citizen_reports: Visible citizen reports
        climate_samples: Visible climate samples
        agricultural_fields: Visible agricultural fields
        region: Currently selected focus region

    Returns:
        Dict with bloom, citizen-science and coverage statistics
    """
    blooms = _frame(observations, ['bloom_type', 'species', 'confidence', 'country'])
    reports = _frame(citizen_reports, ['validated'])

    return {
        'active_blooms': len(blooms),
        'superblooms': int((blooms['bloom_type'] == 'superbloom').sum()),
        'species_count': int(blooms['species'].nunique()),
        'prediction_accuracy': _mean(blooms['confidence']),
        'countries_covered': int(blooms['country'].nunique()),
        'citizen_observations': len(reports),
        'validated_blooms': int(reports['validated'].sum()) if len(reports) else 0,
        'climate_stations': len(climate_samples),
        'agricultural_fields': len(agricultural_fields),
        'current_region': region,
    }


def ecosystem_indicators(observations: Sequence[Any], climate_samples: Sequence[Any]) -> Dict[str, float]:
    """
    Ecosystem health indicators.

    The biodiversity index is species x countries / 100; climate
    correlation is the bloom-to-station ratio capped at 1.
    """
    blooms = _frame(observations, ['bloom_type', 'species', 'country', 'ecosystem_health', 'climate_impact'])

    species_count = blooms['species'].nunique()
    country_count = blooms['country'].nunique()
    climate_correlation = min(len(blooms) / len(climate_samples), 1.0) if len(climate_samples) else 0.0

    return {
        'total_blooms': len(blooms),
        'superblooms': int((blooms['bloom_type'] == 'superbloom').sum()),
        'ecosystem_health': _mean(blooms['ecosystem_health']),
        'climate_impact': _mean(blooms['climate_impact']),
        'biodiversity_index': species_count * country_count / 100,
        'climate_correlation': climate_correlation,
    }


def agricultural_insights(
    agricultural_fields: Sequence[Any],
    rng: Optional[np.random.Generator] = None
) -> Dict[str, float]:
    """
    Agricultural insights over the visible fields.

    ``harvest_prediction`` is the mean predicted yield scaled by a random
    factor in [0.9, 1.1).
    """
    fields = _frame(agricultural_fields, ['crop', 'country', 'harvest_prediction', 'soil_moisture', 'pest_pressure'])
    rng = np.random.default_rng() if rng is None else rng

    avg_yield = _mean(fields['harvest_prediction'])

    return {
        'total_fields': len(fields),
        'avg_yield': avg_yield,
        'avg_soil_moisture': _mean(fields['soil_moisture']),
        'pest_pressure': _mean(fields['pest_pressure']),
        'harvest_prediction': avg_yield * (0.9 + float(rng.random()) * 0.2),
        'crop_diversity': int(fields['crop'].nunique() * fields['country'].nunique()),
    }


def calculate_bloom_metrics(
    observations: Sequence[Any],
    citizen_reports: Sequence[Any],
    climate_samples: Sequence[Any],
    agricultural_fields: Sequence[Any],
    region: str = 'global',
    rng: Optional[np.random.Generator] = None
) -> Dict[str, Dict[str, Any]]:
    """
    All statistics panels in one call.

    Returns:
        Dict with 'summary', 'ecosystem' and 'agriculture' sections
    """
    return {
        'summary': summary_statistics(
            observations, citizen_reports, climate_samples, agricultural_fields, region
        ),
        'ecosystem': ecosystem_indicators(observations, climate_samples),
        'agriculture': agricultural_insights(agricultural_fields, rng),
    }

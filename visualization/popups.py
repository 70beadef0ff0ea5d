"""
Popup content for each record type.

Popups are small HTML fragments bound to markers. Text fields are
escaped; numbers are formatted the way the dashboard displays them.
"""

import re
from html import escape

from data.records import AgriculturalField, CitizenReport, ClimateSample, Observation
from utils.helpers import format_percent

_TAG = re.compile(r'<[^>]+>')
_BREAK = re.compile(r'</(p|h4)>')


def _date(value) -> str:
    return value.strftime('%Y-%m-%d')


def _rows(rows) -> str:
    return ''.join(f"<p><strong>{label}:</strong> {escape(str(value))}</p>" for label, value in rows)


def observation_popup(bloom: Observation) -> str:
    rows = [
        ('Country', bloom.country),
        ('Type', bloom.bloom_type.value),
        ('Intensity', bloom.intensity.value),
        ('Confidence', format_percent(bloom.confidence)),
        ('Area', f"{bloom.area:.1f} hectares"),
        ('Date', _date(bloom.date)),
        ('Climate Impact', format_percent(bloom.climate_impact)),
        ('Ecosystem Health', format_percent(bloom.ecosystem_health)),
        ('Agricultural Value', format_percent(bloom.agricultural_value)),
    ]
    return f'<div class="bloom-popup"><h4>{escape(bloom.species)}</h4>{_rows(rows)}</div>'


def citizen_popup(report: CitizenReport) -> str:
    rows = [
        ('Country', report.country),
        ('Observer', report.observer),
        ('Date', _date(report.date)),
        ('Status', 'Validated' if report.validated else 'Pending'),
    ]
    return f'<div class="citizen-popup"><h4>{escape(report.species)}</h4>{_rows(rows)}</div>'


def climate_popup(sample: ClimateSample) -> str:
    rows = [
        ('Region', sample.region),
        ('Temperature', f"{sample.temperature:.1f}°C"),
        ('Precipitation', f"{sample.precipitation:.1f}mm"),
        ('Humidity', f"{sample.humidity:.1f}%"),
        ('Wind Speed', f"{sample.wind_speed:.1f} m/s"),
        ('Pressure', f"{sample.pressure:.1f} hPa"),
        ('Climate Zone', sample.climate_zone),
        ('Bloom Correlation', format_percent(sample.bloom_correlation)),
    ]
    return f'<div class="climate-popup"><h4>Climate Station</h4>{_rows(rows)}</div>'


def agricultural_popup(field: AgriculturalField) -> str:
    rows = [
        ('Country', field.country),
        ('Planting Date', _date(field.planting_date)),
        ('Expected Harvest', _date(field.expected_harvest)),
        ('Bloom Timing', _date(field.bloom_timing)),
        ('Predicted Yield', f"{field.harvest_prediction:.1f} tons/hectare"),
        ('Soil Moisture', f"{field.soil_moisture:.1f}%"),
        ('Fertilizer Level', f"{field.fertilizer_level:.1f}%"),
        ('Pest Pressure', f"{field.pest_pressure:.1f}%"),
    ]
    return f'<div class="agricultural-popup"><h4>{escape(field.crop)} Field</h4>{_rows(rows)}</div>'


def popup_to_hover(html: str) -> str:
    """Flatten popup HTML into plotly hover text (line breaks, no block tags)."""
    text = _BREAK.sub('<br>', html)
    text = _TAG.sub(lambda match: match.group(0) if match.group(0) == '<br>' else '', text)
    while text.endswith('<br>'):
        text = text[:-len('<br>')]
    return text

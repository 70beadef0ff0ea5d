#!/usr/bin/env python3
"""
BloomWatch Atlas command line.

Renders the bloom map, globe, record tables and statistics to a
directory, or serves the interactive API.

Usage:
    python main.py render --output-dir outputs
    python main.py render --seed 42 --region india --month 3
    python main.py serve --port 8000
"""

import argparse
import logging
import sys

from app.config import AppConfig
from app.utils import create_dashboard, export_outputs
from utils.logging import setup_logging

logger = logging.getLogger("bloomwatch.cli")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='BloomWatch Atlas bloom map')
    subparsers = parser.add_subparsers(dest='command', required=True)

    render = subparsers.add_parser('render', help='Write the map, globe, CSVs and statistics')
    render.add_argument('--output-dir', type=str, default=None,
                        help='Directory for outputs (default: BLOOMWATCH_OUTPUT_DIR or ./outputs)')
    render.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible sample data')
    render.add_argument('--region', type=str, default=None,
                        help='Focus region, e.g. india or europe')
    render.add_argument('--month', type=int, default=None,
                        help='Month index 0-11 to render (default: all months)')
    render.add_argument('--satellite', action='store_true',
                        help='Show satellite imagery under the layers')

    serve = subparsers.add_parser('serve', help='Run the API server')
    serve.add_argument('--host', type=str, default=None, help='Bind address')
    serve.add_argument('--port', type=int, default=None, help='Port')
    serve.add_argument('--reload', action='store_true', help='Reload on code changes')

    parser.add_argument('--log-level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    return parser.parse_args(argv)


def render(args, config: AppConfig) -> int:
    if args.seed is not None:
        config.seed = args.seed

    bundle = create_dashboard(config)
    dashboard = bundle.dashboard

    if args.region:
        dashboard.dispatch('region', args.region)
    if args.month is not None:
        dashboard.dispatch('time_slider', args.month)
    if args.satellite:
        dashboard.dispatch('show_satellite', True)

    written = export_outputs(bundle, args.output_dir or config.output_dir)
    for name, path in written.items():
        print(f"{name:>20}: {path}")
    return 0


def serve(args, config: AppConfig) -> int:
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=args.host or config.host,
        port=args.port or config.port,
        reload=args.reload or config.reload,
        log_level=config.log_level.lower()
    )
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = AppConfig()
    if args.log_level:
        config.log_level = args.log_level

    setup_logging(
        name='',
        level=config.log_level,
        log_dir=config.log_dir,
        file_output=config.log_dir is not None,
        json_format=config.log_json
    )

    try:
        if args.command == 'render':
            return render(args, config)
        return serve(args, config)
    except ValueError as e:
        logger.error(str(e))
        return 2


if __name__ == '__main__':
    sys.exit(main())

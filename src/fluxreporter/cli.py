import argparse
import os

from fluxreporter.config import Config


def parse_args(argv: "list[str] | None" = None) -> "argparse.Namespace":
    parser = argparse.ArgumentParser(
        prog="fluxreporter",
        description="ImageFlux transfer volume reporter",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        required=True,
        help="Path to the config YAML file",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default=os.environ.get("LOG_LEVEL", "info").lower(),
        choices=["debug", "info", "warn", "warning", "error"],
        help="Log level (default: $LOG_LEVEL or info)",
    )
    parser.add_argument(
        "--metrics.textfile",
        dest="metrics_textfile",
        default="",
        help="Write run metrics to this file in Prometheus text format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    rate = subparsers.add_parser("rate", help="print rate report")
    rate.add_argument(
        "--month",
        required=True,
        help="Target month formatted as YYYY-MM",
    )
    rate.add_argument(
        "--interval",
        type=float,
        default=1.0,
        help="Seconds to wait after each origin fetch (default: 1)",
    )

    return parser.parse_args(argv)


def load_config(args: "argparse.Namespace") -> "Config":
    """
    loads the config file named on the command line and applies
    the command line settings on top of it.
    """
    config = Config.from_file(args.config_path)
    config.metrics_textfile = args.metrics_textfile
    return config

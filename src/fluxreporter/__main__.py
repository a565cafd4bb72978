import asyncio
import signal
import sys

import structlog
from prometheus_client import CollectorRegistry

from fluxreporter.aggregator import RateReports
from fluxreporter.cli import load_config, parse_args
from fluxreporter.errors import ReporterError
from fluxreporter.logging import setup_logging
from fluxreporter.metrics import MetricsUpdater
from fluxreporter.month import Month
from fluxreporter.provider.imageflux import ImageFluxClient
from fluxreporter.reporter import RateReporter

logger = structlog.get_logger()

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


async def _run_rate(
    client: "ImageFluxClient",
    reporter: "RateReporter",
    month: "Month",
) -> "RateReports":
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    # for SIGINT and SIGTERM, cancel the in-flight run
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, task.cancel)

    try:
        return await reporter.run(month)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await client.close()


def main(argv: "list[str] | None" = None) -> "int":
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = load_config(args)
        month = Month.parse(args.month)
        logger.debug("month_parsed", month=str(month))

        registry = CollectorRegistry()
        metrics = MetricsUpdater(registry=registry)
        client = ImageFluxClient(config.email, config.password)
        reporter = RateReporter(
            client,
            config.origins,
            interval_seconds=args.interval,
            metrics=metrics,
        )
        reports = asyncio.run(_run_rate(client, reporter, month))

    except ReporterError as exc:
        logger.error("run_failed", error=exc.message, **exc.details)
        return EXIT_FAILURE
    except asyncio.CancelledError:
        logger.error("run_cancelled")
        return EXIT_CANCELLED

    for report in reports:
        print(report.to_line())

    if config.metrics_textfile:
        metrics.write_textfile(config.metrics_textfile)
        logger.info("metrics_written", path=config.metrics_textfile)

    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())

"""
TAA Backtester - Main Entry Point

Runs the momentum / risk-weighting allocation strategy on a return matrix
that has already been prepared (aligned, no gaps, fractional returns).

Usage:
    # Basic backtest with the default parameters in config/allocation.yaml
    python main.py --returns data/returns.csv

    # With a canary universe and a defensive asset
    python main.py --returns data/returns.csv --canary data/canary.csv --crash-asset IEF

    # Rebalance-lag study over offsets -5..5
    python main.py --returns data/returns.csv --sweep-offsets -5 5 --n-jobs 4

The CSV files hold one row per date (first column) and one column per asset.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd
from loguru import logger

from config.settings import get_settings
from taa.backtesting.engine import AllocationBacktest
from taa.backtesting.metrics import compare_strategies
from taa.backtesting.sensitivity import run_offset_sweep, summarize_sweep
from taa.core.config import load_allocation_config
from taa.core.types import AllocationError
from taa.utils.logger import setup_logging


def load_return_matrix(path: str | Path) -> pd.DataFrame:
    """Read a return matrix CSV indexed by date."""
    frame = pd.read_csv(path, index_col=0, parse_dates=True)
    frame.index = pd.DatetimeIndex(frame.index)
    return frame.sort_index()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Momentum-ranked, risk-weighted tactical asset allocation backtest",
    )
    parser.add_argument("--returns", required=True, help="CSV return matrix of the investable universe")
    parser.add_argument("--canary", help="CSV return matrix of the canary universe")
    parser.add_argument(
        "--config",
        default=str(settings.backtest.allocation_config),
        help="YAML file with allocation parameters",
    )
    parser.add_argument("--weighting", choices=["ew", "invVol", "invVar", "minVol"])
    parser.add_argument("--rebalance-on", choices=["months", "quarters", "years"])
    parser.add_argument("--top-n", type=int)
    parser.add_argument("--threshold", type=float)
    parser.add_argument("--offset", type=int)
    parser.add_argument("--momentum-penalty", type=float)
    parser.add_argument("--crash-asset")
    parser.add_argument("--leverage", type=float)
    parser.add_argument("--drift", action="store_true", default=settings.backtest.drift,
                        help="Let holdings drift between rebalance dates")
    parser.add_argument("--weights-only", action="store_true", help="Only compute the weight history")
    parser.add_argument("--sweep-offsets", nargs=2, type=int, metavar=("START", "END"),
                        help="Run one backtest per offset in [START, END]")
    parser.add_argument("--n-jobs", type=int, default=settings.backtest.n_jobs)
    parser.add_argument("--log-level", default="DEBUG" if settings.debug else settings.logging.level)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=settings.logging.log_file)

    try:
        config = load_allocation_config(
            args.config,
            weighting=args.weighting,
            rebalance_on=args.rebalance_on,
            top_n=args.top_n,
            threshold=args.threshold,
            offset=args.offset,
            momentum_penalty=args.momentum_penalty,
            crash_asset=args.crash_asset,
            leverage=args.leverage,
        )
        returns = load_return_matrix(args.returns)
        canary = load_return_matrix(args.canary) if args.canary else None

        if args.sweep_offsets:
            start, end = args.sweep_offsets
            results = run_offset_sweep(
                returns,
                range(start, end + 1),
                config=config,
                canary=canary,
                n_jobs=args.n_jobs,
                drift=args.drift,
            )
            logger.info(f"Offset sweep:\n{summarize_sweep(results).to_string()}")
            return 0

        backtest = AllocationBacktest(config)
        result = backtest.run(
            returns,
            canary,
            weights_only=args.weights_only,
            drift=args.drift,
            risk_free_rate=settings.backtest.risk_free_rate,
        )
    except AllocationError as exc:
        logger.error(f"Backtest aborted: {exc}")
        return 1

    logger.info(f"Latest weights ({result.weights.index[-1]:%Y-%m-%d}):\n"
                f"{result.weights.iloc[-1][result.weights.iloc[-1] > 0].to_string()}")
    if result.metrics is not None:
        logger.info(f"Performance:\n{compare_strategies({'strategy': result.metrics}).T.to_string()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Attrition Risk Prediction Script.

Loads an exported model bundle and scores either a single selection given
on the command line or every row of a CSV file.

Usage:
    python -m attrition_risk.predict --bundle models/bundle.json \\
        --set "JobRole=Sales Executive" --set OverTime=Yes
    python -m attrition_risk.predict --input data/employees.csv --output data/predictions.csv
    python -m attrition_risk.predict --list-fields
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from attrition_risk.config import load_config, RiskModelConfig
from attrition_risk.exceptions import (
    BundleNotLoadedError,
    BundleSourceError,
    RuntimeComputeError,
    SchemaError,
)
from attrition_risk.scoring import FeatureSelection, PredictionResult, PredictionSession
from attrition_risk.utils.logging import get_logger


def parse_assignments(values: Optional[Sequence[str]], option: str) -> dict[str, str]:
    """
    Parse repeated ``COL=VALUE`` arguments.

    Args:
        values: Raw argument strings.
        option: Option name, for error messages.

    Returns:
        Mapping of column name to the raw value string.
    """
    parsed: dict[str, str] = {}
    for item in values or []:
        col, sep, value = item.partition("=")
        if not sep or not col:
            raise argparse.ArgumentTypeError(
                f"{option} expects COL=VALUE, got '{item}'"
            )
        parsed[col] = value
    return parsed


def build_session(config: RiskModelConfig, bundle_path: Optional[str]) -> PredictionSession:
    """Create a session and load the bundle named by the CLI or the config."""
    log = get_logger(
        level=config.logging.level,
        format=config.logging.format,
        log_file=config.logging.log_file,
    )
    session = PredictionSession(config=config, logger=log)
    session.load_file(bundle_path or config.bundle.path)
    return session


def print_fields(session: PredictionSession) -> None:
    """Print the selectable categories per column."""
    print(session.describe())
    for col, categories in session.field_options().items():
        print(f"\n{col}:")
        if not categories:
            print("  (no categories in bundle)")
        for category in categories:
            print(f"  - {category}")
    numeric = session.bundle.num_cols
    if numeric:
        print(f"\nNumeric: {', '.join(numeric)}")


def print_result(result: PredictionResult, as_json: bool = False) -> None:
    """Print one prediction for a human or as JSON."""
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    print(f"\n{'=' * 60}")
    print("ATTRITION RISK")
    print(f"{'=' * 60}")
    print(f"Probability:       {result.percentage}%")
    print(f"Decision:          {result.summary()}")
    print(f"Score:             {result.score:.6f}")
    if result.skipped_features:
        print(f"Unmatched inputs:  {', '.join(result.skipped_features)}")
    print(f"{'=' * 60}")


def predict_file(
    session: PredictionSession,
    input_path: str,
    output_path: str,
) -> pd.DataFrame:
    """
    Score every row of a CSV file and write the results.

    Args:
        session: Ready prediction session.
        input_path: CSV with one column per bundle input column.
        output_path: Destination CSV.

    Returns:
        Scored DataFrame.
    """
    # Read as text and treat only empty cells as unset, so categories such
    # as "None" or "NA" keep their exact spelling
    df = pd.read_csv(input_path, dtype=str, keep_default_na=False, na_values=[""])

    missing = [col for col in session.bundle.cat_cols if col not in df.columns]
    if missing:
        session.log.warning("Input is missing categorical columns", columns=missing)

    with session.log.timer("batch_predict"):
        scored = session.predict_frame(df)

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    scored.to_csv(output_file, index=False)

    metrics = session.log.get_metrics_summary()
    counts = metrics["counts"]
    num_high = counts.get("HighRisk", 0)
    print(f"\n{'=' * 60}")
    print("BATCH PREDICTION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Rows scored:       {len(scored)}")
    if len(scored):
        print(f"High risk:         {num_high} ({num_high / len(scored):.1%})")
        print(f"Unmatched inputs:  {counts.get('skipped_lookups', 0)}")
    if "predict" in metrics["timings"]:
        print(f"Mean time per row: {metrics['timings']['predict']['mean'] * 1000:.3f} ms")
    print(f"Output file:       {output_file.absolute()}")
    print(f"{'=' * 60}")

    return scored


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Predict attrition risk from an exported logistic regression bundle"
    )
    parser.add_argument(
        "-b", "--bundle",
        type=str,
        default=None,
        help="Bundle file (.json, .html, .joblib) (default: from config)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "-s", "--set",
        dest="categorical",
        action="append",
        metavar="COL=VALUE",
        help="Chosen category for a categorical column (repeatable)"
    )
    parser.add_argument(
        "-n", "--num",
        dest="numeric",
        action="append",
        metavar="COL=VALUE",
        help="Value for a numeric column (repeatable)"
    )
    parser.add_argument(
        "-i", "--input",
        type=str,
        default=None,
        help="CSV of selections to score in batch"
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output CSV for batch mode (default: from config)"
    )
    parser.add_argument(
        "-t", "--threshold",
        type=float,
        default=None,
        help="Threshold used when the bundle has none (default: from config)"
    )
    parser.add_argument(
        "--list-fields",
        action="store_true",
        help="List categorical columns and their allowed categories"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the single prediction as JSON"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        if args.threshold is not None:
            config.decision.default_threshold = args.threshold
            config = RiskModelConfig.model_validate(config.model_dump())

        categorical = parse_assignments(args.categorical, "--set")
        numeric = parse_assignments(args.numeric, "--num")

        session = build_session(config, args.bundle)

        if args.list_fields:
            print_fields(session)
            return 0

        if args.input:
            predict_file(session, args.input, args.output or config.output.predictions_path)
            return 0

        result = session.predict(FeatureSelection(categorical=categorical, numeric=numeric))
        print_result(result, as_json=args.json)
        return 0

    except (SchemaError, BundleSourceError, RuntimeComputeError, BundleNotLoadedError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (argparse.ArgumentTypeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point: python -m wdbc_pipeline"""

import argparse
import logging
import sys

from wdbc_pipeline.config import IMPORTANCE_METHODS, PipelineConfig, VIF_METHODS
from wdbc_pipeline.errors import PipelineError
from wdbc_pipeline.models.trainer import MODEL_CONFIGS
from wdbc_pipeline.pipeline import DiagnosisPipeline
from wdbc_pipeline.utils import set_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wdbc-pipeline",
        description=(
            "Breast tumour diagnosis pipeline - correlation and VIF feature "
            "pruning followed by a logistic / stepwise / random forest comparison."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m wdbc_pipeline data.csv\n"
            "  python -m wdbc_pipeline --builtin --models logistic_regression random_forest\n"
            "  python -m wdbc_pipeline data.csv --vif-method model --split-seed 7\n"
            "  python -m wdbc_pipeline data.csv --forest-train-size 0.7 --forest-split-seed 42\n"
        ),
    )

    parser.add_argument(
        "csv", nargs="?", default=None,
        help="CSV with id, diagnosis (B/M) and the 30 feature columns",
    )
    parser.add_argument(
        "--builtin", action="store_true", default=None,
        help="Use the copy of the dataset shipped with scikit-learn",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="JSON file with pipeline settings (CLI flags take precedence)",
    )
    parser.add_argument(
        "--corr-threshold", dest="correlation_threshold", type=float, default=None,
        help="Maximum tolerated |r| between features (default: 0.7)",
    )
    parser.add_argument(
        "--vif-threshold", dest="vif_threshold", type=float, default=None,
        help="Features are dropped until every VIF is below this (default: 10)",
    )
    parser.add_argument(
        "--vif-method", dest="vif_method", choices=list(VIF_METHODS), default=None,
        help="ols: auxiliary regressions; model: logistic coefficient covariance",
    )
    parser.add_argument(
        "--train-size", dest="train_size", type=float, default=None,
        help="Fraction of rows used for training (default: 0.8)",
    )
    parser.add_argument(
        "--split-seed", dest="split_seed", type=int, default=None,
        help="Seed of the stratified split (default: 101)",
    )
    parser.add_argument(
        "--models", type=str, nargs="+", default=None,
        choices=list(MODEL_CONFIGS.keys()),
        help="Models to fit (default: all)",
    )
    parser.add_argument(
        "--trees", dest="forest_trees", type=int, default=None,
        help="Number of trees in the random forest (default: 500)",
    )
    parser.add_argument(
        "--max-depth", dest="forest_max_depth", type=int, default=None,
        help="Maximum tree depth (default: unlimited)",
    )
    parser.add_argument(
        "--forest-seed", dest="forest_seed", type=int, default=None,
        help="Seed of the forest's bootstrap and feature sampling",
    )
    parser.add_argument(
        "--forest-train-size", dest="forest_train_size", type=float, default=None,
        help="Give the random forest its own split with this train fraction",
    )
    parser.add_argument(
        "--forest-split-seed", dest="forest_split_seed", type=int, default=None,
        help="Give the random forest its own split with this seed",
    )
    parser.add_argument(
        "--importance", choices=list(IMPORTANCE_METHODS), default=None,
        help="Variable importance test for the forest (default: permutation)",
    )
    parser.add_argument(
        "--importance-rounds", dest="importance_rounds", type=int, default=None,
        help="Permutation rounds for the importance test (default: 100)",
    )
    parser.add_argument(
        "--threshold", dest="decision_threshold", type=float, default=None,
        help="Probability above which a tumour is called malignant (default: 0.5)",
    )
    parser.add_argument(
        "--output-dir", dest="output_dir", type=str, default=None,
        help="Directory for report.json (default: wdbc_output)",
    )
    parser.add_argument(
        "--list-models", action="store_true",
        help="List all available models and exit",
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Only log warnings and errors",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    overrides = {
        key: value for key, value in vars(args).items()
        if key not in ("csv", "config", "list_models", "quiet") and value is not None
    }
    if args.csv is not None:
        overrides["csv_path"] = args.csv
    if args.config:
        return PipelineConfig.from_json(args.config, **overrides)
    return PipelineConfig.from_dict(overrides)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_models:
        print("Available models:")
        for name in MODEL_CONFIGS:
            cls, _ = MODEL_CONFIGS[name]
            print(f"  {name:<25} ({cls.__name__})")
        return

    if args.quiet:
        set_level(logging.WARNING)

    try:
        config = config_from_args(args)
        if not config.csv_path and not config.builtin:
            parser.error("give a CSV path or --builtin")
        DiagnosisPipeline(config).run()
    except PipelineError as e:
        print(f"\nPipeline failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Diagnosis pipeline orchestrator.

Runs the full analysis in one sequential pass: loading -> descriptive
analysis -> correlation pruning -> VIF pruning -> split -> model fitting ->
evaluation -> report.
"""

import os
import traceback

from wdbc_pipeline import __version__
from wdbc_pipeline.analysis import DataExplorer
from wdbc_pipeline.config import PipelineConfig
from wdbc_pipeline.data import DatasetLoader, StratifiedSplitter
from wdbc_pipeline.errors import InvalidInput, PipelineError
from wdbc_pipeline.evaluation import ModelEvaluator, Reporter
from wdbc_pipeline.models import ModelTrainer
from wdbc_pipeline.selection import CorrelationPruner, VIFPruner
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)

DISCLAIMER = (
    "DISCLAIMER: This pipeline analyses a publicly available research "
    "dataset. It does NOT provide medical diagnoses or replace professional "
    "medical advice."
)


class DiagnosisPipeline:
    """
    Runs the feature-selection and model-comparison pipeline.

    Stages:
        1. Data Loading         - read and validate the table, encode labels
        2. Exploratory Analysis - per-class medians/IQRs, correlations
        3. Correlation Pruning  - greedy |r| > threshold removal
        4. VIF Pruning          - iterative max-VIF removal
        5. Splitting            - stratified train/test partition(s)
        6. Model Training       - logistic, stepwise-AIC logistic, forest
        7. Evaluation           - confusion matrices, rates, ROC/AUC
        8. Report Generation    - JSON report and printed summary
    """

    def __init__(self, config: PipelineConfig | None = None, save: bool = True):
        self.config = config or PipelineConfig(builtin=True)
        self.save = save

        # Pipeline state
        self.dataset = None
        self.eda_report = None
        self.correlation_pruner = None
        self.vif_pruner = None
        self.after_correlation = None
        self.selected_features = None
        self.splits = None
        self.training_results = None
        self.evaluation_results = None
        self.report = None

    def run(self) -> dict:
        """
        Execute every stage in order.

        Returns the final report dict. A failing stage is logged and its
        error re-raised with the stage name attached.
        """
        log.info("=" * 60)
        log.info("BREAST TUMOUR DIAGNOSIS PIPELINE v%s", __version__)
        log.info("=" * 60)
        log.info(DISCLAIMER)

        stages = [
            ("1/8 Data Loading", self._stage_load),
            ("2/8 Exploratory Analysis", self._stage_explore),
            ("3/8 Correlation Pruning", self._stage_correlation),
            ("4/8 VIF Pruning", self._stage_vif),
            ("5/8 Splitting", self._stage_split),
            ("6/8 Model Training", self._stage_train),
            ("7/8 Evaluation", self._stage_evaluate),
            ("8/8 Report Generation", self._stage_report),
        ]

        for stage_name, stage_fn in stages:
            log.info("")
            log.info("-" * 60)
            log.info("STAGE: %s", stage_name)
            log.info("-" * 60)
            try:
                stage_fn()
            except PipelineError as e:
                if e.stage is None:
                    e.stage = stage_name
                log.error("Stage '%s' failed: %s", stage_name, e.message)
                raise
            except Exception:
                log.error("Stage '%s' failed:\n%s", stage_name, traceback.format_exc())
                raise

        return self.report

    def _stage_load(self):
        loader = DatasetLoader()
        if self.config.csv_path:
            self.dataset = loader.load_csv(self.config.csv_path)
        elif self.config.builtin:
            self.dataset = loader.load_builtin()
        else:
            raise InvalidInput("No input: give a CSV path or use the built-in dataset")

    def _stage_explore(self):
        explorer = DataExplorer(self.config.correlation_threshold)
        self.eda_report = explorer.run(self.dataset)

    def _stage_correlation(self):
        df = self.dataset["df"]
        self.correlation_pruner = CorrelationPruner(self.config.correlation_threshold)
        self.after_correlation = self.correlation_pruner.prune(
            df[self.dataset["feature_names"]]
        )

    def _stage_vif(self):
        df = self.dataset["df"]
        self.vif_pruner = VIFPruner(
            threshold=self.config.vif_threshold,
            method=self.config.vif_method,
            max_iter=self.config.logistic_max_iter,
        )
        self.selected_features = self.vif_pruner.prune(
            df[self.after_correlation], df[self.dataset["target_name"]]
        )
        log.info("Selected features: %s", ", ".join(self.selected_features))

    def _stage_split(self):
        cfg = self.config
        df = self.dataset["df"]
        X = df[self.selected_features]
        y = df[self.dataset["target_name"]]

        shared = StratifiedSplitter(cfg.train_size, cfg.split_seed).split(X, y)
        self.splits = {name: shared for name in cfg.models}

        if "random_forest" in cfg.models and not cfg.shared_split:
            forest_size = cfg.forest_train_size or cfg.train_size
            forest_seed = cfg.seed_for("forest_split")
            log.info(
                "Random forest uses its own split (train_size=%.2f, seed=%d)",
                forest_size, forest_seed,
            )
            self.splits["random_forest"] = StratifiedSplitter(
                forest_size, forest_seed
            ).split(X, y)

    def _stage_train(self):
        cfg = self.config
        overrides = {
            "logistic_regression": {"max_iter": cfg.logistic_max_iter},
            "stepwise_logistic": {"max_iter": cfg.logistic_max_iter},
            "random_forest": {
                "n_estimators": cfg.forest_trees,
                "max_depth": cfg.forest_max_depth,
                "seed": cfg.seed_for("forest"),
                "importance": cfg.importance,
                "importance_rounds": cfg.importance_rounds,
                "importance_seed": cfg.seed_for("importance"),
            },
        }
        trainer = ModelTrainer(models=cfg.models, overrides=overrides)
        self.training_results = trainer.run(self.splits)

    def _stage_evaluate(self):
        evaluator = ModelEvaluator(self.config.decision_threshold)
        self.evaluation_results = evaluator.run(self.training_results, self.splits)

    def _stage_report(self):
        selection = {
            "n_initial": len(self.dataset["feature_names"]),
            "n_after_correlation": len(self.after_correlation),
            "after_correlation": self.after_correlation,
            "correlation_drops": self.correlation_pruner.history,
            "vif_drops": self.vif_pruner.history,
            "final_vif": self.vif_pruner.final_vif,
            "selected_features": self.selected_features,
        }
        reporter = Reporter()
        self.report = reporter.generate(
            dataset_metadata=self.dataset["metadata"],
            config=self.config.to_dict(),
            eda_report=self.eda_report,
            selection=selection,
            splits=self.splits,
            training_results=self.training_results,
            evaluation_results=self.evaluation_results,
        )

        summary = reporter.print_summary(self.report)
        print("\n" + summary)

        if self.save:
            os.makedirs(self.config.output_dir, exist_ok=True)
            json_path = os.path.join(self.config.output_dir, "report.json")
            reporter.save_json(self.report, json_path)

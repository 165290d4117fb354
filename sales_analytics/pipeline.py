"""
Sales analytics workflow over the document store.

Runs the fixed sequence: seed (only into an empty collection) -> analyze ->
visualize -> query examples -> advanced queries -> discount and recompute ->
re-analyze -> export. A failing stage is logged and re-raised, which stops
the remaining stages.
"""

import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd
import structlog

from .analysis import AnalysisResult, analyze, print_analysis, records_frame
from .charts import build_charts, render_charts
from .config import SalesSettings, get_settings
from .generator import seed_sample_data
from .queries import run_advanced_features, run_query_examples
from .store import SalesStore
from .updates import DiscountResult, discount_and_recompute
from .validation import (
    calculate_data_quality_metrics,
    setup_logging,
    validate_sales_frame,
)

logger = structlog.get_logger(__name__)


def load_frame(store: SalesStore) -> pd.DataFrame:
    """Read the whole collection into a sales frame."""
    return records_frame(store.find({}, projection={"_id": 0}))


def export_collection(store: SalesStore, path: str) -> int:
    """Write every document to a CSV file, overwriting it. Returns the row count."""
    df = load_frame(store)
    df.to_csv(path, index=False)
    logger.info("Data exported", path=path, rows=len(df), columns=len(df.columns))
    return len(df)


class SalesAnalyticsPipeline:
    """Sequential sales analytics workflow bound to one store handle"""

    def __init__(self, store: SalesStore, settings: Optional[SalesSettings] = None):
        self.store = store
        self.settings = settings or get_settings()

        logger.info(
            "Sales analytics pipeline initialized",
            collection=store.name,
            sample_size=self.settings.sample_size,
        )

    def _run_stage(self, stage: str, func, *args, **kwargs):
        start_time = time.time()
        logger.info("Stage started", stage=stage)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(
                "Stage failed",
                stage=stage,
                error=str(e),
                exc_info=True,
                stage_time=time.time() - start_time,
            )
            raise
        logger.info("Stage completed", stage=stage, stage_time=time.time() - start_time)
        return result

    def seed_data(self) -> int:
        """Seed sample data only when the collection is empty."""
        existing = self.store.count()
        if existing:
            print("Collection already exists with data.")
            logger.info("Seeding skipped, collection not empty", existing=existing)
            return 0

        print("Collection is empty. Generating sample sales data...")
        inserted = seed_sample_data(
            self.store, n=self.settings.sample_size, seed=self.settings.random_seed
        )
        print("Sample data inserted successfully!")
        return inserted

    def analyze_data(self) -> AnalysisResult:
        df = load_frame(self.store)
        validate_sales_frame(df)
        quality = calculate_data_quality_metrics(df)
        if quality.get("revenue_drift_count"):
            logger.warning(
                "Records violate total_revenue = price * quantity_sold",
                drift_count=quality["revenue_drift_count"],
            )

        result = analyze(df)
        print_analysis(result)
        logger.info(
            "Analysis completed",
            record_count=result.record_count,
            total_revenue=result.total_revenue,
            quality=quality,
        )
        return result

    def visualize(self, result: AnalysisResult) -> List[str]:
        print("\nCreating visualizations...")
        specs = build_charts(result)
        if not self.settings.render_charts:
            logger.info("Chart rendering disabled", charts=[spec.name for spec in specs])
            return []
        return render_charts(specs, self.settings.chart_dir)

    def run_queries(self) -> Dict[str, Any]:
        return run_query_examples(self.store, top_limit=self.settings.top_products_limit)

    def run_advanced_queries(self) -> Dict[str, Any]:
        return run_advanced_features(
            self.store,
            matrix_limit=self.settings.matrix_limit,
            category=self.settings.high_value_category,
            min_price=self.settings.high_value_min_price,
        )

    def update_prices(self) -> DiscountResult:
        print("\n=== Updating Data in MongoDB ===")
        return discount_and_recompute(
            self.store,
            category=self.settings.discount_category,
            factor=self.settings.discount_factor,
        )

    def export_data(self) -> int:
        rows = export_collection(self.store, self.settings.export_path)
        print(f"\nData exported to {self.settings.export_path}")
        return rows

    def run_pipeline(self) -> Dict[str, Any]:
        """Run the complete workflow and return per-stage results"""
        pipeline_start_time = time.time()
        print("=== MongoDB Sales Analytics Workflow ===")

        pipeline_results: Dict[str, Any] = {
            "pipeline_start_time": datetime.now().isoformat(),
            "stages": {},
        }
        stages = pipeline_results["stages"]

        stages["seed"] = {"inserted": self._run_stage("seed", self.seed_data)}

        analysis = self._run_stage("analysis", self.analyze_data)
        stages["analysis"] = {
            "record_count": analysis.record_count,
            "total_revenue": analysis.total_revenue,
        }

        stages["visualization"] = {
            "charts": self._run_stage("visualization", self.visualize, analysis)
        }
        stages["queries"] = self._run_stage("queries", self.run_queries)
        stages["advanced_queries"] = self._run_stage(
            "advanced_queries", self.run_advanced_queries
        )

        discount = self._run_stage("update", self.update_prices)
        stages["update"] = {
            "modified_count": discount.modified_count,
            "recomputed_count": discount.recomputed_count,
        }

        print("\n=== Re-analyzing data after updates ===")
        reanalysis = self._run_stage("reanalysis", self.analyze_data)
        stages["reanalysis"] = {
            "record_count": reanalysis.record_count,
            "total_revenue": reanalysis.total_revenue,
        }

        stages["export"] = {
            "path": self.settings.export_path,
            "rows": self._run_stage("export", self.export_data),
        }

        pipeline_time = time.time() - pipeline_start_time
        pipeline_results["pipeline_total_time_seconds"] = pipeline_time
        pipeline_results["pipeline_end_time"] = datetime.now().isoformat()

        print("\nWorkflow completed successfully!")
        logger.info("Sales analytics pipeline completed", pipeline_time=pipeline_time)
        return pipeline_results


def main(settings: Optional[SalesSettings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    setup_logging(**settings.get_logging_config())

    store = SalesStore.connect(settings)
    try:
        if settings.reset_collection:
            store.drop()
        return SalesAnalyticsPipeline(store, settings).run_pipeline()
    finally:
        store.close()


def cli() -> None:
    """Console entry point."""
    main()

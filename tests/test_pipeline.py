"""
Workflow tests for the sales analytics pipeline against a real mongod.
"""

import math
import os
from unittest.mock import Mock, patch

import pandas as pd
import pytest

from sales_analytics.models import SALES_RECORD_FIELDS
from sales_analytics.pipeline import SalesAnalyticsPipeline, export_collection, main


@pytest.fixture
def store(mongod_store):
    return mongod_store


class TestSeedGate:
    def test_empty_collection_is_seeded(self, store, test_settings):
        pipeline = SalesAnalyticsPipeline(store, test_settings)
        assert pipeline.seed_data() == 60
        assert store.count() == 60

    def test_second_run_inserts_nothing(self, store, test_settings):
        pipeline = SalesAnalyticsPipeline(store, test_settings)
        pipeline.seed_data()
        assert pipeline.seed_data() == 0
        assert store.count() == 60

    def test_existing_data_left_unmodified(self, scenario_store, test_settings):
        before = scenario_store.find({}, projection={"_id": 0})
        assert SalesAnalyticsPipeline(scenario_store, test_settings).seed_data() == 0
        assert scenario_store.find({}, projection={"_id": 0}) == before


class TestExport:
    def test_row_count_and_header(self, scenario_store, tmp_path):
        path = tmp_path / "export.csv"
        rows = export_collection(scenario_store, str(path))
        exported = pd.read_csv(path)
        assert rows == len(exported) == scenario_store.count()
        assert list(exported.columns) == list(SALES_RECORD_FIELDS)

    def test_overwrites_existing_file(self, scenario_store, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text("stale content\n" * 50)
        export_collection(scenario_store, str(path))
        assert "stale content" not in path.read_text()
        assert len(pd.read_csv(path)) == 3

    def test_empty_collection_exports_header_only(self, store, tmp_path):
        path = tmp_path / "export.csv"
        assert export_collection(store, str(path)) == 0
        assert path.read_text().strip() == ",".join(SALES_RECORD_FIELDS)


class TestRunPipeline:
    def test_full_workflow(self, store, test_settings):
        results = SalesAnalyticsPipeline(store, test_settings).run_pipeline()
        stages = results["stages"]

        assert stages["seed"]["inserted"] == 60
        assert stages["analysis"]["record_count"] == 60
        assert stages["queries"]["top_products"]
        assert stages["advanced_queries"]["index_name"] == "category_1_region_1"
        assert stages["update"]["modified_count"] == stages["update"]["recomputed_count"]
        assert stages["reanalysis"]["total_revenue"] < stages["analysis"]["total_revenue"]
        assert stages["export"]["rows"] == store.count()

        for doc in store.find({}):
            assert math.isclose(doc["total_revenue"], doc["price"] * doc["quantity_sold"])

        exported = pd.read_csv(test_settings.export_path)
        assert len(exported) == 60
        assert set(SALES_RECORD_FIELDS) <= set(exported.columns)

    def test_charts_rendered_when_enabled(self, store, test_settings):
        settings = test_settings.model_copy(update={"render_charts": True})
        results = SalesAnalyticsPipeline(store, settings).run_pipeline()
        charts = results["stages"]["visualization"]["charts"]
        assert len(charts) == 3
        assert all(os.path.exists(path) for path in charts)

    def test_failing_stage_halts_remaining_steps(self, scenario_store, test_settings):
        pipeline = SalesAnalyticsPipeline(scenario_store, test_settings)
        with patch.object(
            pipeline, "run_queries", side_effect=RuntimeError("store unreachable")
        ):
            with pytest.raises(RuntimeError, match="store unreachable"):
                pipeline.run_pipeline()

        assert not os.path.exists(test_settings.export_path)
        # The update stage never ran
        prices = {d["product_id"]: d["price"] for d in scenario_store.find({})}
        assert prices["PROD1"] == 100.0

    def test_failed_stage_logs_traceback(self, scenario_store, test_settings):
        pipeline = SalesAnalyticsPipeline(scenario_store, test_settings)
        with patch("sales_analytics.pipeline.logger") as logger:
            with pytest.raises(RuntimeError):
                pipeline._run_stage("queries", Mock(side_effect=RuntimeError("boom")))

        logger.error.assert_called_once()
        args, kwargs = logger.error.call_args
        assert args == ("Stage failed",)
        assert kwargs["stage"] == "queries"
        assert kwargs["error"] == "boom"
        assert kwargs["exc_info"] is True


class TestMain:
    def test_main_runs_and_closes_store(self, store, test_settings):
        with patch(
            "sales_analytics.pipeline.SalesStore.connect", return_value=store
        ) as connect, patch.object(store, "close") as close:
            results = main(test_settings)

        connect.assert_called_once_with(test_settings)
        close.assert_called_once()
        assert results["stages"]["export"]["rows"] == 60

    def test_reset_collection_drops_existing_data(self, scenario_store, test_settings):
        settings = test_settings.model_copy(update={"reset_collection": True})
        with patch("sales_analytics.pipeline.SalesStore.connect", return_value=scenario_store):
            results = main(settings)

        assert results["stages"]["seed"]["inserted"] == 60
        assert scenario_store.count(query={"product_name": "Product 1"}) == 1
        assert scenario_store.count() == 60

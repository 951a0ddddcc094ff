"""Unit tests for the structured logger."""

import json
import logging

from attrition_risk.utils.logging import JsonFormatter, RiskLogger, get_logger


class TestRiskLogger:
    """Tests for RiskLogger output, counters and timings."""

    def test_text_format_includes_extras(self, capsys):
        """Test key=value extras are appended in text mode."""
        log = get_logger(name="attrition_risk.test_text", format="text")
        log.info("Bundle loaded", features=2)
        err = capsys.readouterr().err
        assert "Bundle loaded | features=2" in err

    def test_json_format(self, capsys):
        """Test JSON mode emits one parsable object per line."""
        log = get_logger(name="attrition_risk.test_json", format="json")
        log.log_prediction_result(probability=0.73106, score=1.0, decision="HighRisk")
        line = capsys.readouterr().err.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["message"] == "Prediction completed"
        assert entry["decision"] == "HighRisk"
        assert entry["probability"] == 0.7311
        assert entry["skipped_lookups"] == 0

    def test_level_filters(self, capsys):
        """Test messages below the configured level are dropped."""
        log = get_logger(name="attrition_risk.test_level", level="WARNING")
        log.info("hidden")
        log.warning("shown")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_timer_records_timing(self):
        """Test timed operations are summarized."""
        log = RiskLogger(name="attrition_risk.test_timer", level="ERROR")
        with log.timer("predict"):
            pass
        with log.timer("predict"):
            pass
        timings = log.get_metrics_summary()["timings"]
        assert timings["predict"]["count"] == 2
        assert timings["predict"]["min"] >= 0.0

    def test_timings_are_bounded(self):
        """Test only the most recent timings are kept."""
        log = RiskLogger(name="attrition_risk.test_window", level="ERROR", timing_window=5)
        for _ in range(50):
            with log.timer("predict"):
                pass
        assert log.get_metrics_summary()["timings"]["predict"]["count"] == 5

    def test_prediction_counters(self):
        """Test predictions are counted by decision."""
        log = RiskLogger(name="attrition_risk.test_counts", level="ERROR")
        log.log_prediction_result(0.8, 1.4, "HighRisk", skipped=2)
        log.log_prediction_result(0.2, -1.4, "LowerRisk")
        log.log_prediction_result(0.6, 0.4, "HighRisk")
        counts = log.get_metrics_summary()["counts"]
        assert counts == {
            "predictions": 3, "HighRisk": 2, "LowerRisk": 1, "skipped_lookups": 2,
        }

    def test_log_file(self, tmp_path):
        """Test logs are also written to the configured file."""
        path = tmp_path / "logs" / "run.log"
        log = get_logger(name="attrition_risk.test_file", log_file=str(path))
        log.warning("Selection keys not found", skipped=["Dept_C"])
        log.close()
        assert "Dept_C" in path.read_text()

    def test_replaced_handlers_are_closed(self, tmp_path):
        """Test a new logger with the same name closes the old file handler."""
        first = get_logger(name="attrition_risk.test_reopen", log_file=str(tmp_path / "a.log"))
        old_handlers = list(first._logger.handlers)
        file_handler = next(h for h in old_handlers if isinstance(h, logging.FileHandler))

        second = get_logger(name="attrition_risk.test_reopen", log_file=str(tmp_path / "b.log"))
        assert file_handler.stream is None
        assert not any(h in second._logger.handlers for h in old_handlers)
        assert len(second._logger.handlers) == 2
        second.close()
        assert second._logger.handlers == []


class TestJsonFormatter:
    """Tests for the JSON formatter."""

    def test_non_serializable_extras(self):
        """Test extras that JSON cannot encode are stringified."""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        record.extra_fields = {"path": object()}
        entry = json.loads(JsonFormatter().format(record))
        assert entry["message"] == "msg"
        assert entry["path"].startswith("<object")

"""
Unit tests for structured log records and Prometheus metrics
"""

import pytest
import structlog
from prometheus_client import REGISTRY
from structlog.testing import capture_logs

from queueops.models.batch import BatchEntryFailure
from queueops.models.outcome import BatchItemOutcome
from queueops.models.redrive import BatchRelocation, RedriveState, RedriveSummary
from queueops.observability.logging import (
    log_message_outcome,
    log_redrive_completed,
    log_redrive_iteration,
    log_trigger_records,
)
from queueops.observability.tracing import trace_redrive_iteration
from queueops.redrive.engine import RedriveEngine


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestLogRecords:
    """Test the structured log side channel"""

    def test_message_outcome_levels(self):
        logger = structlog.get_logger("test")
        with capture_logs() as logs:
            log_message_outcome(logger, BatchItemOutcome.success("m-1"))
            log_message_outcome(logger, BatchItemOutcome.failure("m-2", "bad body"))

        assert logs[0]["event"] == "message_processed"
        assert logs[0]["log_level"] == "info"
        assert logs[1]["event"] == "message_processing_failed"
        assert logs[1]["log_level"] == "warning"
        assert logs[1]["message_id"] == "m-2"
        assert logs[1]["reason"] == "bad body"

    def test_partial_failures_logged_as_errors(self):
        relocation = BatchRelocation(
            iteration=3,
            received=2,
            sent_message_ids=["m-1"],
            send_failures=[BatchEntryFailure("token-2", "InternalError")],
            deleted_message_ids=[],
            delete_failures=[BatchEntryFailure("m-1", "ReceiptHandleIsInvalid", sender_fault=True)],
        )
        logger = structlog.get_logger("test")

        with capture_logs() as logs:
            log_redrive_iteration(logger, relocation)

        events = [entry["event"] for entry in logs]
        assert events == [
            "redrive_send_partial_failure",
            "redrive_delete_partial_failure",
            "redrive_batch_relocated",
        ]
        assert logs[0]["log_level"] == "error"
        assert logs[0]["iteration"] == 3
        assert logs[0]["failed"][0]["code"] == "InternalError"
        assert logs[1]["failed"][0]["sender_fault"] is True

    def test_clean_iteration_logs_info_only(self):
        relocation = BatchRelocation(
            iteration=1, received=1, sent_message_ids=["m"], deleted_message_ids=["m"]
        )

        with capture_logs() as logs:
            log_redrive_iteration(structlog.get_logger("test"), relocation)

        assert [entry["log_level"] for entry in logs] == ["info"]
        assert logs[0]["message_ids"] == ["m"]

    def test_redrive_completed_and_failed(self):
        ok = RedriveSummary("inv-1", total_redriven=5, state=RedriveState.SOURCE_EMPTY)
        failed = RedriveSummary("inv-2", state=RedriveState.FAILED, error="AccessDenied")

        with capture_logs() as logs:
            log_redrive_completed(structlog.get_logger("test"), ok)
            log_redrive_completed(structlog.get_logger("test"), failed)

        assert logs[0]["event"] == "redrive_completed"
        assert logs[0]["total_redriven"] == 5
        assert logs[1]["event"] == "redrive_failed"
        assert logs[1]["log_level"] == "error"

    def test_trigger_records(self):
        event = {
            "Records": [
                {"Sns": {"MessageId": "sns-1", "Subject": "ALARM: dlq depth", "Message": "{}"}}
            ]
        }

        with capture_logs() as logs:
            log_trigger_records(structlog.get_logger("test"), event)

        assert logs[0]["record_count"] == 1
        assert logs[1]["notification_id"] == "sns-1"
        assert logs[1]["subject"] == "ALARM: dlq depth"

    @pytest.mark.parametrize(
        "event",
        ["alarm fired", [{"a": 1}], {"Records": ["x"]}, {"Records": [{"Sns": "text"}]}, None],
    )
    def test_trigger_records_any_shape(self, event):
        with capture_logs() as logs:
            log_trigger_records(structlog.get_logger("test"), event)

        assert logs[0]["event"] == "redrive_triggered"
        assert any("payload" in entry for entry in logs)


class TestMetrics:
    """Test Prometheus counters updated by the engine"""

    def test_redrive_updates_counters(self, queue_service, dlq_url, main_queue_url):
        redriven_before = _sample("queueops_messages_redriven_total")
        iterations_before = _sample("queueops_redrive_iterations_total")
        send_failures_before = _sample(
            "queueops_redrive_entry_failures_total", {"operation": "send"}
        )
        queue_service.add_messages(dlq_url, ["a", "b", "c"])
        queue_service.reject_send = lambda entry: entry.body == "b"

        RedriveEngine(queue_service, dlq_url, main_queue_url, wait_time_seconds=0).run()

        assert _sample("queueops_messages_redriven_total") - redriven_before == 2
        assert _sample("queueops_redrive_iterations_total") - iterations_before == 1
        assert (
            _sample("queueops_redrive_entry_failures_total", {"operation": "send"})
            - send_failures_before
            == 1
        )

    def test_consumer_updates_counters(self, event_factory):
        from queueops.consumer.processor import handle_batch

        failed_before = _sample("queueops_messages_processed_total", {"status": "FAILURE"})
        success_before = _sample("queueops_messages_processed_total", {"status": "SUCCESS"})

        handle_batch(event_factory(["ok", "fail", "ok"]))

        assert _sample("queueops_messages_processed_total", {"status": "FAILURE"}) - failed_before == 1
        assert (
            _sample("queueops_messages_processed_total", {"status": "SUCCESS"}) - success_before
            == 2
        )


class TestTracing:
    def test_span_without_initialisation(self):
        """Test that iteration spans work with the default no-op tracer"""
        with trace_redrive_iteration("inv-1", 1, "dlq") as span:
            assert span is not None

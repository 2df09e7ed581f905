# ============================================================================
# PageVital - Alert Channel Tests
#
# Purpose: Test console, history and webhook channels in isolation
# Inputs: Alert objects, mocked stores and HTTP transport
# Outputs: Test pass/fail
# Dependencies: pytest, unittest.mock, requests, PageVital.channels
# Usage: pytest tests/test_channels.py -v
# ============================================================================

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from PageVital.channels import ConsoleChannel, HistoryChannel, WebhookChannel
from PageVital.errors import PersistenceError
from PageVital.metrics import Severity
from PageVital.reporting.schema import Alert
from PageVital.storage.memory import MemoryStore


def _alert(message="m", severity=Severity.WARNING, timestamp=1000):
    return Alert(severity=severity, message=message, timestamp=timestamp)


class TestConsoleChannel:
    def test_levels(self):
        logger = MagicMock()
        channel = ConsoleChannel(logger)
        channel.deliver(_alert("bad", Severity.CRITICAL))
        channel.deliver(Alert(severity=Severity.WARNING, message="meh", metric="cls", value=0.2, timestamp=1))
        assert logger.log.call_args_list[0].args == (logging.ERROR, "[CRITICAL] bad")
        assert logger.log.call_args_list[1].args == (logging.WARNING, "[WARNING] meh (cls=0.2)")


class TestHistoryChannel:
    def test_ring_evicts_oldest(self):
        channel = HistoryChannel(limit=3)
        for i in range(5):
            channel.deliver(_alert(f"a{i}"))
        assert [a.message for a in channel.entries()] == ["a2", "a3", "a4"]
        assert len(channel) == 3

    def test_mirrors_to_store(self):
        store = MemoryStore()
        channel = HistoryChannel(store, limit=10, storage_key="hist")
        channel.deliver(_alert("stored"))
        assert json.loads(store.get("hist"))[0]["message"] == "stored"
        channel.clear()
        assert store.get("hist") == "[]"

    def test_loads_newest_entries_within_limit(self):
        store = MemoryStore()
        writer = HistoryChannel(store, limit=10, storage_key="hist")
        for i in range(6):
            writer.deliver(_alert(f"a{i}"))
        reader = HistoryChannel(store, limit=4, storage_key="hist")
        assert [a.message for a in reader.entries()] == ["a2", "a3", "a4", "a5"]

    def test_store_failure_degrades_to_memory(self):
        store = MagicMock()
        store.get.side_effect = PersistenceError("unreadable")
        store.set.side_effect = PersistenceError("read-only")
        channel = HistoryChannel(store, limit=5)
        channel.deliver(_alert("kept"))
        assert [a.message for a in channel.entries()] == ["kept"]

    def test_unexpected_store_error_on_load(self):
        store = MagicMock()
        store.get.side_effect = OSError("storage unavailable")
        channel = HistoryChannel(store, limit=5)
        assert channel.entries() == []

    def test_corrupt_stored_history_ignored(self):
        store = MemoryStore({"performance-alert-history": "{not json"})
        assert HistoryChannel(store).entries() == []


class TestWebhookChannel:
    @pytest.fixture
    def channel(self):
        channel = WebhookChannel("https://hooks.test.com/x", timeout=2.0, retries=2)
        yield channel
        channel.close()

    @patch("PageVital.channels.webhook.requests.Session.post")
    def test_success(self, mock_post, channel):
        mock_post.return_value = MagicMock(status_code=204)
        future = channel.deliver(_alert("ok"))
        assert future.result(timeout=5) is True
        assert mock_post.call_args.kwargs["timeout"] == 2.0
        assert mock_post.call_args.kwargs["headers"] == {"Content-Type": "application/json"}

    @patch("PageVital.channels.webhook.requests.Session.post")
    def test_timeout_is_failure_after_single_session_post(self, mock_post, channel):
        mock_post.side_effect = requests.exceptions.Timeout("slow")
        future = channel.deliver(_alert())
        assert future.result(timeout=5) is False
        assert mock_post.call_count == 1

    def test_session_mounts_retry_policy(self, channel):
        for prefix in ("http://", "https://"):
            retry = channel.session.get_adapter(prefix + "hooks.test.com").max_retries
            assert retry.total == 2
            assert "POST" in retry.allowed_methods
            assert 503 in retry.status_forcelist

    def test_zero_retries_by_default(self):
        channel = WebhookChannel("https://hooks.test.com/x")
        try:
            assert channel.session.get_adapter("https://hooks.test.com").max_retries.total == 0
        finally:
            channel.close()

    @patch("PageVital.channels.webhook.requests.Session.post")
    def test_http_error_status_is_failure(self, mock_post):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        mock_post.return_value = response
        channel = WebhookChannel("https://hooks.test.com/x")
        try:
            assert channel.deliver(_alert()).result(timeout=5) is False
            assert mock_post.call_count == 1
        finally:
            channel.close()

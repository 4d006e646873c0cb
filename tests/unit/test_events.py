"""
Unit tests for the event retrieval pipeline.
"""

from datetime import datetime, timezone

import pytest

from fakes import FakeClusterClient, make_event

from k8s_mcp_server.cluster import BackendUnavailable, EventPipeline, EventQuery, EventSortField
from k8s_mcp_server.cluster.events import (
    message_matches,
    parse_timestamp,
    sort_events,
    summarize_event,
)


class TestSummarizeEvent:
    """Tests for reducing raw events to summaries."""

    def test_core_event(self):
        summary = summarize_event(make_event(3, namespace="kube-system"))

        assert summary == {
            "name": "event-3",
            "namespace": "kube-system",
            "type": "Normal",
            "reason": "Started",
            "message": "Started container 3",
            "count": 1,
            "firstTime": "2024-05-01T10:56:00Z",
            "lastTime": "2024-05-01T11:03:00Z",
            "eventTime": None,
            "involvedObject": {"kind": "Pod", "name": "pod-3", "namespace": "kube-system"},
            "source": {"component": "kubelet", "host": "node-1"},
        }

    def test_events_api_event_falls_back_to_event_time(self):
        """Events written via events.k8s.io have no first/last timestamps."""
        event = {
            "metadata": {"name": "e", "namespace": "default"},
            "eventTime": "2024-05-01T12:00:00.000000Z",
            "series": {"count": 4, "lastObservedTime": "2024-05-01T12:30:00.000000Z"},
            "firstTimestamp": None,
            "lastTimestamp": None,
            "reportingComponent": "scheduler",
            "reportingInstance": "scheduler-abc",
            "message": "Scheduled",
        }
        summary = summarize_event(event)

        assert summary["firstTime"] == "2024-05-01T12:00:00.000000Z"
        assert summary["lastTime"] == "2024-05-01T12:30:00.000000Z"
        assert summary["eventTime"] == "2024-05-01T12:00:00.000000Z"
        assert summary["count"] == 4
        assert summary["source"] == {"component": "scheduler", "host": "scheduler-abc"}

    def test_sparse_event(self):
        summary = summarize_event({"message": "hello"})
        assert summary["message"] == "hello"
        assert summary["count"] == 1
        assert summary["lastTime"] is None
        assert summary["involvedObject"] == {"kind": None, "name": None, "namespace": None}

    def test_zero_count_kept(self):
        event = make_event(1)
        event["count"] = 0
        assert summarize_event(event)["count"] == 0


class TestParseTimestamp:
    """Tests for RFC 3339 parsing."""

    def test_zulu(self):
        assert parse_timestamp("2024-05-01T11:00:00Z") == datetime(2024, 5, 1, 11, tzinfo=timezone.utc)

    def test_offset(self):
        parsed = parse_timestamp("2024-05-01T13:00:00+02:00")
        assert parsed == datetime(2024, 5, 1, 11, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp(datetime(2024, 5, 1)).tzinfo is timezone.utc

    @pytest.mark.parametrize("value", [None, "", "yesterday", 42])
    def test_unusable(self, value):
        assert parse_timestamp(value) is None


class TestFilterAndSort:
    """Tests for message filtering and ordering."""

    def test_message_match_is_case_insensitive(self):
        assert message_matches({"message": "Back-off restarting FAILED container"}, "failed")
        assert not message_matches({"message": "Pulled image"}, "failed")
        assert not message_matches({"message": None}, "failed")

    def test_sort_descending(self):
        events = [summarize_event(make_event(i)) for i in (4, 9, 1)]
        ordered = sort_events(events, EventSortField.LAST_TIME)
        assert [e["name"] for e in ordered] == ["event-9", "event-4", "event-1"]

    def test_sort_by_first_time(self):
        events = [summarize_event(make_event(i)) for i in (4, 9, 1)]
        ordered = sort_events(events, EventSortField.FIRST_TIME)
        assert [e["name"] for e in ordered] == ["event-1", "event-4", "event-9"]

    def test_missing_timestamps_last(self):
        events = [
            {"name": "none", "lastTime": None},
            {"name": "old", "lastTime": "2024-01-01T00:00:00Z"},
            {"name": "new", "lastTime": "2024-06-01T00:00:00Z"},
        ]
        ordered = sort_events(events, EventSortField.LAST_TIME)
        assert [e["name"] for e in ordered] == ["new", "old", "none"]

    def test_ties_keep_input_order(self):
        same = "2024-05-01T11:00:00Z"
        events = [
            {"name": "b", "lastTime": same},
            {"name": "newest", "lastTime": "2024-05-01T12:00:00Z"},
            {"name": "a", "lastTime": same},
            {"name": "c", "lastTime": "2024-05-01T11:00:00+00:00"},
        ]

        first = sort_events(events, EventSortField.LAST_TIME)
        second = sort_events(list(reversed(first)), EventSortField.LAST_TIME)

        assert [e["name"] for e in first] == ["newest", "b", "a", "c"]
        assert [e["name"] for e in sort_events(events, EventSortField.LAST_TIME)] == [
            e["name"] for e in first
        ]
        assert [e["name"] for e in second] == ["newest", "c", "a", "b"]


class TestEventPipeline:
    """Tests for EventPipeline.get_events."""

    @pytest.mark.asyncio
    async def test_max_events_returns_most_recent(self, fake_client):
        pipeline = EventPipeline(fake_client)

        events = await pipeline.get_events(EventQuery(max_events=5))

        assert len(events) == 5
        assert [e["name"] for e in events] == [f"event-{i}" for i in (19, 18, 17, 16, 15)]

    @pytest.mark.asyncio
    async def test_default_limit(self, fake_client):
        pipeline = EventPipeline(fake_client, default_max_events=7)
        assert len(await pipeline.get_events(EventQuery())) == 7

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_events", [0, -3])
    async def test_non_positive_limit_uses_default(self, fake_client, max_events):
        pipeline = EventPipeline(fake_client, default_max_events=4)
        assert len(await pipeline.get_events(EventQuery(max_events=max_events))) == 4

    @pytest.mark.asyncio
    async def test_limit_larger_than_available(self, fake_client):
        pipeline = EventPipeline(fake_client)
        assert len(await pipeline.get_events(EventQuery(max_events=100))) == 20

    @pytest.mark.asyncio
    async def test_sort_field_override(self, fake_client):
        pipeline = EventPipeline(fake_client)

        events = await pipeline.get_events(
            EventQuery(sort_by=EventSortField.FIRST_TIME, max_events=3)
        )

        assert [e["name"] for e in events] == ["event-0", "event-1", "event-2"]

    @pytest.mark.asyncio
    async def test_configured_default_sort(self, fake_client):
        pipeline = EventPipeline(fake_client, default_sort_by=EventSortField.FIRST_TIME)
        events = await pipeline.get_events(EventQuery(max_events=1))
        assert events[0]["name"] == "event-0"

    @pytest.mark.asyncio
    async def test_message_filter(self):
        client = FakeClusterClient(events=[
            make_event(1, message="Back-off restarting failed container"),
            make_event(2, message="Pulled image nginx"),
            make_event(3, message="Liveness check FAILED"),
        ])
        pipeline = EventPipeline(client)

        events = await pipeline.get_events(EventQuery(message_filter="failed"))

        assert [e["name"] for e in events] == ["event-3", "event-1"]
        assert all("failed" in e["message"].lower() for e in events)

    @pytest.mark.asyncio
    async def test_namespace_scope(self):
        client = FakeClusterClient(events=[
            make_event(1, namespace="default"),
            make_event(2, namespace="kube-system"),
        ])
        pipeline = EventPipeline(client, timeout=5.0)

        events = await pipeline.get_events(EventQuery(namespace="kube-system"))

        assert [e["namespace"] for e in events] == ["kube-system"]
        assert client.calls == [("list_events", ("kube-system", 5.0))]

    @pytest.mark.asyncio
    async def test_properties_hold_for_filtered_and_truncated_output(self, events):
        events[7]["message"] = "OOMKilled"
        events[12]["message"] = "container oomkilled again"
        pipeline = EventPipeline(FakeClusterClient(events=events))

        result = await pipeline.get_events(EventQuery(message_filter="OOM", max_events=1))

        assert len(result) <= 1
        assert result[0]["name"] == "event-12"

    @pytest.mark.asyncio
    async def test_backend_error_propagates(self, fake_client):
        fake_client.error = BackendUnavailable("list events: 503 Service Unavailable")
        pipeline = EventPipeline(fake_client)

        with pytest.raises(BackendUnavailable):
            await pipeline.get_events(EventQuery())

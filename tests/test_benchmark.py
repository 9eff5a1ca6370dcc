import pytest

from sensor_stream.benchmark import (
    LatencyStats,
    ProtocolResult,
    compare,
    format_report,
)


def _summary(latency: float, throughput: float) -> dict:
    return {"averageLatency": latency, "messagesPerSecond": throughput}


def test_latency_stats_empty():
    assert LatencyStats.from_samples([]) is None


def test_latency_stats_from_samples():
    stats = LatencyStats.from_samples([float(n) for n in range(100, 0, -1)])

    assert stats.sample_count == 100
    assert stats.min_ms == 1.0
    assert stats.max_ms == 100.0
    assert stats.mean_ms == 50.5
    assert stats.p95_ms == 96.0
    assert stats.p99_ms == 100.0


def test_record_ignoresNonSensorMessages():
    result = ProtocolResult("sse")

    assert not result.record({"type": "connection", "message": "hello"})
    assert not result.record({"type": "broadcast", "message": "hi"})
    assert result.latencies == []
    assert result.summary() is None


def test_record_measuresAgainstServerTime():
    result = ProtocolResult("websocket")

    assert result.record({"type": "sensor-data", "serverTime": 1000}, received_ms=1012)
    # Clock skew never yields a negative latency.
    assert result.record({"type": "sensor-data", "serverTime": 2000}, received_ms=1990)

    assert result.latencies == [12.0, 0.0]


def test_summary():
    result = ProtocolResult("sse", latencies=[10.0, 20.0], errors=1)
    result.started, result.finished = 5.0, 7.0

    summary = result.summary()

    assert summary["messageCount"] == 2
    assert summary["averageLatency"] == 15.0
    assert summary["minLatency"] == 10.0
    assert summary["maxLatency"] == 20.0
    assert summary["errors"] == 1
    assert summary["duration"] == 2.0
    assert summary["messagesPerSecond"] == 1.0


@pytest.mark.parametrize(
    "sse,websocket,conclusion",
    [
        (_summary(10, 1), _summary(10.5, 1), "Both protocols perform similarly"),
        (_summary(10, 1), _summary(20, 1), "SSE has better latency"),
        (_summary(20, 1), _summary(10, 1), "WebSocket has better latency"),
    ],
)
def test_compare_conclusion(sse, websocket, conclusion):
    assert compare(sse, websocket)["conclusion"].startswith(conclusion)


def test_compare_differences():
    comparison = compare(_summary(10, 2), _summary(15, 3))

    assert comparison["latencyDifference"] == pytest.approx(50.0)
    assert comparison["throughputDifference"] == pytest.approx(50.0)


def test_compare_zeroBaseline():
    comparison = compare(_summary(0, 0), _summary(15, 3))

    assert comparison["latencyDifference"] == 0.0
    assert comparison["throughputDifference"] == 0.0


def test_format_report():
    sse = ProtocolResult("sse", latencies=[10.0, 20.0])
    sse.finished = 2.0
    websocket = ProtocolResult("websocket")

    report = format_report({"sse": sse, "websocket": websocket})

    assert "Avg Latency: 15.00ms" in report
    assert "websocket: no sensor data received" in report
    assert "comparison:" not in report

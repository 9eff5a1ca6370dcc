"""
Side-by-side benchmark of the two transports against a running server.

Connects one SSE client and one WebSocket client at the same time, counts
``sensor-data`` messages until ``count`` arrive on each (or the timeout
expires) and reports latency and throughput per protocol.

Usage:
    python -m sensor_stream.benchmark --url http://localhost:3000 --count 100

Latency is receive time minus the event's ``serverTime``; both clocks are the
wall clock of the same host when client and server run side by side.
"""
import argparse
import json
import logging
import statistics
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import anyio
import httpx
import websockets
from httpx_sse import aconnect_sse

_log = logging.getLogger(__name__)


@dataclass
class LatencyStats:
    """Statistical summary of latency measurements."""

    mean_ms: float
    min_ms: float
    max_ms: float
    p95_ms: float
    p99_ms: float
    sample_count: int

    @classmethod
    def from_samples(cls, samples: List[float]) -> Optional["LatencyStats"]:
        """Compute statistics from raw latency samples (in ms)."""
        if not samples:
            return None

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        def percentile(p: float) -> float:
            idx = int(n * p / 100)
            return sorted_samples[min(idx, n - 1)]

        return cls(
            mean_ms=statistics.mean(sorted_samples),
            min_ms=sorted_samples[0],
            max_ms=sorted_samples[-1],
            p95_ms=percentile(95),
            p99_ms=percentile(99),
            sample_count=n,
        )


@dataclass
class ProtocolResult:
    protocol: str
    latencies: List[float] = field(default_factory=list)
    errors: int = 0
    started: float = 0.0
    finished: float = 0.0

    def record(self, data: Dict[str, Any], received_ms: Optional[float] = None) -> bool:
        """Record one decoded message; returns whether it was a sensor reading."""
        if data.get("type") != "sensor-data":
            return False
        received_ms = time.time() * 1000 if received_ms is None else received_ms
        self.latencies.append(max(received_ms - data["serverTime"], 0.0))
        return True

    @property
    def duration(self) -> float:
        return max(self.finished - self.started, 0.0)

    def summary(self) -> Optional[Dict[str, Any]]:
        latency = LatencyStats.from_samples(self.latencies)
        if latency is None:
            return None
        return {
            "messageCount": latency.sample_count,
            "averageLatency": latency.mean_ms,
            "minLatency": latency.min_ms,
            "maxLatency": latency.max_ms,
            "p95Latency": latency.p95_ms,
            "p99Latency": latency.p99_ms,
            "errors": self.errors,
            "duration": self.duration,
            "messagesPerSecond": (
                latency.sample_count / self.duration if self.duration else 0.0
            ),
        }


def compare(sse: Dict[str, Any], websocket: Dict[str, Any]) -> Dict[str, Any]:
    """Relative difference of WebSocket over SSE, in percent."""

    def diff(ws_value: float, sse_value: float) -> float:
        return (ws_value - sse_value) / sse_value * 100 if sse_value else 0.0

    latency_diff = diff(websocket["averageLatency"], sse["averageLatency"])
    throughput_diff = diff(websocket["messagesPerSecond"], sse["messagesPerSecond"])
    if abs(latency_diff) < 10:
        conclusion = "Both protocols perform similarly for one-way communication"
    elif latency_diff > 0:
        conclusion = "SSE has better latency for this use case"
    else:
        conclusion = "WebSocket has better latency for this use case"
    return {
        "latencyDifference": latency_diff,
        "throughputDifference": throughput_diff,
        "conclusion": conclusion,
    }


async def measure_sse(base_url: str, count: int, timeout: float) -> ProtocolResult:
    result = ProtocolResult("sse")
    result.started = time.perf_counter()
    with anyio.move_on_after(timeout) as scope:
        async with httpx.AsyncClient(timeout=None) as client:
            try:
                async with aconnect_sse(client, "GET", f"{base_url}/sse") as source:
                    async for sse in source.aiter_sse():
                        if result.record(json.loads(sse.data)):
                            if len(result.latencies) >= count:
                                break
            except (httpx.HTTPError, json.JSONDecodeError) as e:
                result.errors += 1
                _log.error("SSE error: %s", e)
    if scope.cancel_called:
        _log.warning("SSE test timeout")
    result.finished = time.perf_counter()
    return result


async def measure_websocket(ws_url: str, count: int, timeout: float) -> ProtocolResult:
    result = ProtocolResult("websocket")
    result.started = time.perf_counter()
    with anyio.move_on_after(timeout) as scope:
        try:
            async with websockets.connect(ws_url) as ws:
                async for message in ws:
                    if result.record(json.loads(message)):
                        if len(result.latencies) >= count:
                            break
        except (websockets.WebSocketException, OSError, json.JSONDecodeError) as e:
            result.errors += 1
            _log.error("WebSocket error: %s", e)
    if scope.cancel_called:
        _log.warning("WebSocket test timeout")
    result.finished = time.perf_counter()
    return result


async def run_benchmark(
    base_url: str, count: int = 100, timeout: float = 30.0
) -> Dict[str, ProtocolResult]:
    ws_url = "ws" + base_url[len("http"):] if base_url.startswith("http") else base_url
    results: Dict[str, ProtocolResult] = {}

    async def collect(name: str, measure, url: str) -> None:
        results[name] = await measure(url, count, timeout)

    async with anyio.create_task_group() as task_group:
        task_group.start_soon(collect, "sse", measure_sse, base_url)
        task_group.start_soon(collect, "websocket", measure_websocket, ws_url)
    return results


def format_report(results: Dict[str, ProtocolResult]) -> str:
    lines = ["===== PERFORMANCE BENCHMARK RESULTS ====="]
    summaries = {name: result.summary() for name, result in results.items()}
    for name, summary in summaries.items():
        if summary is None:
            lines.append(f"{name}: no sensor data received")
            continue
        lines += [
            f"{name}:",
            f"   Messages: {summary['messageCount']}",
            f"   Avg Latency: {summary['averageLatency']:.2f}ms",
            f"   Min Latency: {summary['minLatency']:.2f}ms",
            f"   Max Latency: {summary['maxLatency']:.2f}ms",
            f"   P95 Latency: {summary['p95Latency']:.2f}ms",
            f"   P99 Latency: {summary['p99Latency']:.2f}ms",
            f"   Messages/sec: {summary['messagesPerSecond']:.2f}",
            f"   Errors: {summary['errors']}",
            f"   Duration: {summary['duration']:.2f}s",
        ]

    if summaries.get("sse") and summaries.get("websocket"):
        comparison = compare(summaries["sse"], summaries["websocket"])
        lines += [
            "comparison:",
            f"   Latency Difference: {comparison['latencyDifference']:.2f}%",
            f"   Throughput Difference: {comparison['throughputDifference']:.2f}%",
            f"   Conclusion: {comparison['conclusion']}",
        ]
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--url", default="http://localhost:3000")
    parser.add_argument("--count", type=int, default=100)
    parser.add_argument("--timeout", type=float, default=30.0)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    results = anyio.run(run_benchmark, args.url.rstrip("/"), args.count, args.timeout)
    print(format_report(results))


if __name__ == "__main__":
    main()

from __future__ import annotations

from enforcer_runtime.metrics import MetricsCollector


def test_metrics_render_prometheus() -> None:
    collector = MetricsCollector()
    collector.inc("pdp_check_decisions_total", "allow")
    collector.inc("pdp_check_requests_total", "opa")
    collector.observe_latency("permit.allowed_url", 12.5)
    collector.observe_latency("permit.allowed_url", 60000)

    text = collector.render_prometheus()
    assert 'pdp_check_decisions_total{decision="allow"} 1' in text
    assert 'pdp_check_requests_total{backend="opa"} 1' in text
    assert 'pdp_check_latency_ms_bucket{operation="permit.allowed_url",le="25"} 1' in text
    assert 'le="+Inf"} 1' in text

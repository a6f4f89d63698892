"""Tests for container wiring."""

import asyncio

from pantry_scan.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.scan_orchestrator.resolver is container.expiry_resolver
    assert container.expiry_resolver.ledger is container.correction_ledger
    assert container.scan_orchestrator.recognizer_timeout_seconds == 30.0
    assert container.correction_ledger.window == 100
    asyncio.run(container.close_resources())

"""Shared fixtures for resilience tests."""

import pytest

from browsermcp_resilience.config import ResilienceConfig
from browsermcp_resilience.connection import ConnectionController, HealthChecker
from browsermcp_resilience.domain.events import EventBus

from tests.fakes import InstantBackoff, RecordingNotifier, ScriptedInvoker


@pytest.fixture
def config() -> ResilienceConfig:
    return ResilienceConfig(notification_prefix="")


@pytest.fixture
def invoker() -> ScriptedInvoker:
    return ScriptedInvoker()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def backoff(config) -> InstantBackoff:
    return InstantBackoff(config.retry)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def controller(invoker, notifier, config, backoff, event_bus) -> ConnectionController:
    return ConnectionController(
        invoker=invoker,
        notifier=notifier,
        config=config,
        session_id="ses_test",
        event_bus=event_bus,
        backoff=backoff,
        health_checker=HealthChecker(check_interval=config.health_check_interval),
    )

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging, tracing helpers and telemetry setup."""

import logging
from unittest.mock import patch

import pytest
import structlog

from elemo.core.config.settings import OTelSettings, Settings
from elemo.core.context import RequestContext, ctx_user_id
from elemo.core.tracing import span_name, traced
from elemo.infrastructure.telemetry import get_tracer, setup_telemetry
from elemo.models import ID, ResourceType
from elemo.utils.logging import bind_context, clear_context, get_logger, setup_logging


class TestLogging:
    """Tests for structured logging setup."""

    def test_setup_logging_levels(self) -> None:
        """Test third-party loggers are quietened."""
        setup_logging(Settings(_env_file=None, log_level="INFO"))

        assert logging.getLogger("elemo").level == logging.INFO
        assert logging.getLogger("aiosmtplib").level == logging.WARNING

    def test_bind_and_clear_context(self) -> None:
        """Test context variables are bound and cleared."""
        bind_context(request_id="req-1")
        assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_get_logger(self) -> None:
        """Test a logger is returned."""
        assert get_logger(__name__) is not None


class TestRequestContext:
    """Tests for the request context."""

    def test_principal(self) -> None:
        """Test the principal is extracted."""
        user_id = ID.new(ResourceType.USER)

        assert ctx_user_id(RequestContext(user_id=user_id)) == user_id
        assert ctx_user_id(RequestContext()) is None
        assert ctx_user_id(None) is None

    def test_with_user(self) -> None:
        """Test acting as another principal keeps the request id."""
        ctx = RequestContext(request_id="req-1")
        user_id = ID.new(ResourceType.USER)

        other = ctx.with_user(user_id)

        assert other.user_id == user_id
        assert other.request_id == "req-1"
        assert ctx.user_id is None


class Widget:
    def __init__(self, tracer) -> None:
        self.tracer = tracer

    @traced
    async def spin(self, fail: bool = False) -> str:
        if fail:
            raise ValueError("stuck")
        return "spun"


class TestTraced:
    """Tests for the span decorator."""

    def test_span_name(self) -> None:
        """Test span names follow service.<Class>/<operation>."""
        assert span_name(Widget(None), "spin") == "service.Widget/spin"

    @pytest.mark.asyncio
    async def test_span_per_call(self, tracer, finished_span_names) -> None:
        """Test a span is recorded per call."""
        assert await Widget(tracer).spin() == "spun"

        assert finished_span_names() == ["service.Widget/spin"]

    @pytest.mark.asyncio
    async def test_errors_pass_through(self, tracer, span_exporter) -> None:
        """Test errors are re-raised and the span still ends."""
        with pytest.raises(ValueError):
            await Widget(tracer).spin(fail=True)

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "service.Widget/spin"
        assert not span.status.is_ok


class TestTelemetrySetup:
    """Tests for OpenTelemetry setup."""

    def test_disabled(self) -> None:
        """Test nothing is installed when disabled."""
        with patch("elemo.infrastructure.telemetry.setup.trace.set_tracer_provider") as set_provider:
            assert setup_telemetry(OTelSettings(enabled=False)) is False

        set_provider.assert_not_called()

    def test_enabled(self) -> None:
        """Test a provider is installed when enabled."""
        with (
            patch("elemo.infrastructure.telemetry.setup.OTLPSpanExporter") as exporter,
            patch("elemo.infrastructure.telemetry.setup.trace.set_tracer_provider") as set_provider,
        ):
            assert setup_telemetry(OTelSettings(enabled=True)) is True

        exporter.assert_called_once_with(endpoint="http://localhost:4317", insecure=True)
        set_provider.assert_called_once()

    def test_get_tracer(self) -> None:
        """Test a tracer is always available."""
        assert get_tracer() is not None

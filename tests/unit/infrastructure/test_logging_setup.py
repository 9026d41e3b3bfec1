"""Tests for the structlog/stdlib logging configuration."""

from __future__ import annotations

import logging

import structlog

from wcoresolver.infrastructure.config import load_config
from wcoresolver.infrastructure.logging.setup import build_logging_config


def test_structlog_formatter_on_all_handlers() -> None:
    cfg = build_logging_config(load_config())

    assert cfg["formatters"]["structlog"]["()"] is structlog.stdlib.ProcessorFormatter
    assert cfg["handlers"]["default"]["formatter"] == "structlog"
    assert cfg["handlers"]["access"]["formatter"] == "structlog"


def test_json_renderer_in_prod() -> None:
    cfg = build_logging_config(load_config(cli_overrides={"environment": "prod"}))

    processors = cfg["formatters"]["structlog"]["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_console_renderer_in_dev() -> None:
    cfg = build_logging_config(load_config(cli_overrides={"environment": "dev"}))

    processors = cfg["formatters"]["structlog"]["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_level_applied_but_transport_stays_at_warning() -> None:
    cfg = build_logging_config(load_config(cli_overrides={"log_level": "DEBUG"}))

    assert cfg["root"]["level"] == "DEBUG"
    assert cfg["loggers"]["uvicorn"]["level"] == "DEBUG"
    assert cfg["loggers"]["httpx"]["level"] == logging.WARNING
    assert cfg["loggers"]["httpcore"]["level"] == logging.WARNING


def test_error_level_raises_transport_loggers() -> None:
    cfg = build_logging_config(load_config(cli_overrides={"log_level": "ERROR"}))

    assert cfg["loggers"]["httpx"]["level"] == logging.ERROR


def test_base_config_not_mutated() -> None:
    from wcoresolver.infrastructure.logging.setup import BASE_LOGGING_CONFIG

    build_logging_config(load_config(cli_overrides={"log_level": "DEBUG"}))

    assert "structlog" not in BASE_LOGGING_CONFIG["formatters"]
    assert BASE_LOGGING_CONFIG["loggers"]["uvicorn"]["level"] == "INFO"

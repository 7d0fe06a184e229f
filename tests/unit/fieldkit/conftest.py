"""Shared fixtures for the fieldkit test suite."""

import logging
from typing import Iterator

import pytest

from fieldkit import (
    ContextRouter,
    FieldManager,
    FieldTypeRegistry,
    FilterChain,
    InMemoryResourceHost,
    SavePipeline,
)


@pytest.fixture(autouse=True)
def propagate_fieldkit_logs() -> Iterator[None]:
    """The package logger does not propagate; caplog listens on the root logger."""
    package_logger = logging.getLogger("fieldkit")
    previous = package_logger.propagate
    package_logger.propagate = True
    yield
    package_logger.propagate = previous


@pytest.fixture
def registry() -> FieldTypeRegistry:
    return FieldTypeRegistry()


@pytest.fixture
def router() -> ContextRouter:
    return ContextRouter()


@pytest.fixture
def filters() -> FilterChain:
    return FilterChain()


@pytest.fixture
def pipeline(registry: FieldTypeRegistry, router: ContextRouter, filters: FilterChain) -> SavePipeline:
    return SavePipeline(registry, router, filters)


@pytest.fixture
def host() -> InMemoryResourceHost:
    return InMemoryResourceHost({"post_type": ["post", "page"], "taxonomy": ["category"]})


@pytest.fixture
def manager(host: InMemoryResourceHost) -> FieldManager:
    return FieldManager(host=host)

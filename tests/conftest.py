"""Shared pytest fixtures for pageprompt tests."""

import pytest

from pageprompt.generation.runner import InstructionRunner
from pageprompt.generation.tokens import ApproximateTokenCounter
from pageprompt.generation.usage import UsageAccumulator
from tests.fixtures import SMALL_MODEL, FakeProvider


@pytest.fixture
def counter() -> ApproximateTokenCounter:
    return ApproximateTokenCounter()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def runner(fake_provider: FakeProvider) -> InstructionRunner:
    """Runner over the 100-token test model."""
    return InstructionRunner(fake_provider, SMALL_MODEL)


@pytest.fixture
def usage() -> UsageAccumulator:
    return UsageAccumulator(SMALL_MODEL.model)

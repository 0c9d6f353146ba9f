import socket
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from coach_ai.advisor import AdviceService
from coach_ai.config import load_provider_configs
from coach_ai.context import FinancialContext

from tests.fixtures.sample_contexts import BUDGET_SCENARIO, SAMPLE_CONTEXT


@pytest.fixture
def no_keys_configs():
    """Provider configs with every credential missing."""
    return load_provider_configs({})


@pytest.fixture
def all_keys_configs():
    """Provider configs with all three credentials present."""
    return load_provider_configs(
        {
            "GEMINI_API_KEY": "gemini-test-key",
            "HUGGINGFACE_API_KEY": "hf-test-key",
            "OPENAI_API_KEY": "sk-test-key",
        }
    )


@pytest.fixture
def advisor(all_keys_configs):
    return AdviceService(all_keys_configs)


@pytest.fixture
def offline_advisor(no_keys_configs):
    return AdviceService(no_keys_configs)


@pytest.fixture
def sample_context():
    """Realistic household snapshot with spending, goals and budgets."""
    return FinancialContext.from_mapping(SAMPLE_CONTEXT)


@pytest.fixture
def budget_context():
    return FinancialContext.from_mapping(BUDGET_SCENARIO)


@pytest.fixture
def forbid_network(monkeypatch):
    """Fail the test if anything tries to open a network connection."""

    def guard(*args, **kwargs):
        raise AssertionError("network access attempted")

    monkeypatch.setattr(socket.socket, "connect", guard)
    monkeypatch.setattr("coach_ai.providers.requests.post", guard)
    return guard

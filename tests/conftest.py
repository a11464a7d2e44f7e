"""
Shared pytest fixtures for compliancesim tests.
"""

import logging
from datetime import date
from pathlib import Path

import pytest

from compliancesim.behavior import BehavioralAgent, BehavioralProfile, ComplianceContext


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy access.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_name = request.node.name

    test_dir = test_output_root / module_name / test_name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def today() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def comply_context() -> ComplianceContext:
    """Expected penalty (0.5 * 100) outweighs the benefit of evading."""
    return ComplianceContext(
        statute_id="tax-filing",
        enforcement_probability=0.5,
        penalty_severity=100.0,
        evasion_benefit=10.0,
        compliance_cost=5.0,
        social_norm=0.8,
    )


@pytest.fixture
def evade_context() -> ComplianceContext:
    """Evading pays: lax enforcement, small penalty, large benefit."""
    return ComplianceContext(
        statute_id="tax-filing",
        enforcement_probability=0.1,
        penalty_severity=10.0,
        evasion_benefit=50.0,
        compliance_cost=5.0,
        social_norm=0.2,
    )


@pytest.fixture
def rational_agent() -> BehavioralAgent:
    return BehavioralAgent(profile=BehavioralProfile.rational(), seed=42)


@pytest.fixture(autouse=True)
def reset_compliancesim_logging():
    """Reset logging state before each test.

    Removes every handler except a NullHandler and resets the level so
    logging configuration from one test cannot leak into another.
    """
    logger = logging.getLogger("compliancesim")

    def _reset():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()

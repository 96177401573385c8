"""Pytest configuration and shared fixtures."""
import pytest
from dataclasses import dataclass, field
from typing import List, Optional

from objectreplay import clear_member_cache, reset_defaults


@dataclass
class TestPoint:
    """Simple dataclass target - every field has a default."""
    x: int = 0
    y: int = 0
    label: str = ""


@dataclass
class TestPipelineConfig:
    """Dataclass target with a mutable field and an optional field."""
    batch_size: int = 32
    learning_rate: float = 0.001
    tags: List[str] = field(default_factory=list)
    output_dir: Optional[str] = None


@dataclass
class TestRequiredConfig:
    """Dataclass target whose constructor needs arguments."""
    name: str
    workers: int
    debug: bool = False


@pytest.fixture(autouse=True)
def reset_objectreplay_state():
    """Reset process-wide defaults and the member cache around each test."""
    reset_defaults()
    clear_member_cache()

    yield

    reset_defaults()
    clear_member_cache()


@pytest.fixture
def point_type():
    """Provide the simple point dataclass."""
    return TestPoint


@pytest.fixture
def pipeline_config_type():
    """Provide the pipeline config dataclass."""
    return TestPipelineConfig


@pytest.fixture
def required_config_type():
    """Provide the dataclass with required fields."""
    return TestRequiredConfig

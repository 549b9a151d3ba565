"""Unit tests for base backend abstract class."""

import pytest
from seedream_mcp.core.base_backend import BaseBackend
from seedream_mcp.core.models import ModelVersion


class ConcreteBackend(BaseBackend):
    """Concrete implementation of BaseBackend for testing."""

    def run(self, payload):
        """Mock implementation."""
        return [f"https://example.com/{payload['prompt']}.jpg"]

    @property
    def name(self) -> str:
        """Mock implementation."""
        return "ConcreteBackend"


class TestBaseBackend:
    """Tests for BaseBackend abstract class."""

    def test_initialization(self):
        """Test backend initialization."""
        backend = ConcreteBackend(api_key="test_key", version=ModelVersion.V4)

        assert backend.api_key == "test_key"
        assert backend.version is ModelVersion.V4

    def test_version_from_string(self):
        """Test that string versions are coerced."""
        backend = ConcreteBackend(api_key="test_key", version="v3")
        assert backend.version is ModelVersion.V3

    def test_model_id(self):
        """Test that the model id follows the version."""
        assert ConcreteBackend("k", ModelVersion.V3).model_id == "bytedance/seedream-3"
        assert ConcreteBackend("k", ModelVersion.V4).model_id == "bytedance/seedream-4"

    def test_run(self):
        """Test that run can be called."""
        backend = ConcreteBackend("k", ModelVersion.V4)
        assert backend.run({"prompt": "fox"}) == ["https://example.com/fox.jpg"]

    def test_repr(self):
        """Test string representation."""
        backend = ConcreteBackend("k", ModelVersion.V4)
        assert repr(backend) == "ConcreteBackend(name='ConcreteBackend', model='bytedance/seedream-4')"

    def test_cannot_instantiate_abstract(self):
        """Test that BaseBackend cannot be instantiated directly."""
        with pytest.raises(TypeError):
            BaseBackend("k", ModelVersion.V4)

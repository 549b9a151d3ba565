"""Abstract base class for upstream image generation backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from .models import ModelVersion


class BaseBackend(ABC):
    """Contract for the remote service that turns a payload into image references.

    The generator only ever talks to this interface, so tests can inject a
    fake and a missing credential can be expressed as "no backend at all".

    Attributes:
        api_key: API token for the hosted service
        version: Model variant this backend serves
    """

    def __init__(self, api_key: str, version: ModelVersion):
        """Initialize the backend.

        Args:
            api_key: API token for authentication with the hosted service
            version: Model variant to invoke
        """
        self.api_key = api_key
        self.version = ModelVersion(version)

    @abstractmethod
    def run(self, payload: Dict[str, Any]) -> Any:
        """Invoke the hosted model and block until it finishes.

        Args:
            payload: Normalized model input

        Returns:
            A single image reference (v3) or a list of them (v4)

        Raises:
            UpstreamError: If the remote call fails
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the human-readable name of this backend."""
        pass

    @property
    def model_id(self) -> str:
        """Identifier of the hosted model this backend invokes."""
        return self.version.model_id

    def __repr__(self) -> str:
        """String representation of the backend."""
        return f"{self.__class__.__name__}(name='{self.name}', model='{self.model_id}')"

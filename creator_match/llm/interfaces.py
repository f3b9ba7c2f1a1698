"""
Embedding Provider Interface - Abstract base for embedding services.

This module defines the interface for text embedding providers (OpenAI, Ollama, etc.).
"""
from abc import ABC, abstractmethod
from typing import List


class EmbeddingProvider(ABC):
    """
    Abstract Interface for embedding providers.

    Implementations raise ProviderError when the embedding cannot be produced.
    """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Length of every vector returned by generate_embedding."""
        pass

    @abstractmethod
    def generate_embedding(self, text: str) -> List[float]:
        """
        Generate a vector embedding for the given text.
        """
        pass

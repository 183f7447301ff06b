# LLM module
from .client import create_model, create_embedding_model

__all__ = ["create_model", "create_embedding_model"]

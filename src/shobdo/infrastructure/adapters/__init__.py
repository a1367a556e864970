# Infrastructure Store Adapters Package
from .memory_store import InMemoryReviewStore
from .postgrest_store import PostgrestReviewStore
from .yaml_store import YamlReviewStore

__all__ = ["InMemoryReviewStore", "PostgrestReviewStore", "YamlReviewStore"]

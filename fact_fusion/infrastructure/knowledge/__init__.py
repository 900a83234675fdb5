from .in_memory_store import InMemoryKnowledgeStore, KnowledgeEntry, KnowledgeSearchResult

__all__ = ["InMemoryKnowledgeStore", "KnowledgeEntry", "KnowledgeSearchResult"]

"""Recipe search backend: vector retrieval plus LLM-rendered answers."""

"""HTTP metrics, request context and tracing."""

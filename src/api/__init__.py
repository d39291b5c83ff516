"""HTTP layer: FastAPI app, page templates, and the assistant webhook."""

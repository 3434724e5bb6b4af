"""HTTP and WebSocket surface of the application."""

"""Dashboard backend: upstream clients, signal services and the CORS relay."""

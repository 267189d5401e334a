"""Copilot agent HTTP server.

FastAPI application with:
- Signed payload verification
- Session resolution per request
- SSE streaming of the agent's response
"""

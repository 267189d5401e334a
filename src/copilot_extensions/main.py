"""Run the session-info agent locally.

    python -m copilot_extensions.main

Expose the port through a tunnel (ngrok, devtunnels) and point the GitHub
App's Copilot agent URL at ``<tunnel>/agent``.
"""
import uvicorn

from copilot_extensions.agents.session_agent import SessionInfoAgent
from copilot_extensions.configs.settings import settings
from copilot_extensions.server.app import create_app

app = create_app(SessionInfoAgent())


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

import uvicorn

from copilot_extensions.agents import CopilotChatAgent
from copilot_extensions.configs.settings import settings
from copilot_extensions.model_clients import CopilotClient
from copilot_extensions.server.app import create_app

# 1. The agent answers through the Copilot chat completions API, using the
#    user's token from each request.
client = CopilotClient(api_url=settings.COPILOT_API_URL, model=settings.OPENAI_CHAT_MODEL)
agent = CopilotChatAgent(
    name="copilot-api-demo",
    client=client,
    system_prompt=(
        "You are a helpful AI assistant. Answer questions about the user's "
        "repository briefly and with code samples where useful."
    ),
)

# 2. The verifier is built at startup: COPILOT_PUBLIC_KEY if set, otherwise the
#    key GitHub currently publishes.
app = create_app(agent)


if __name__ == "__main__":
    print("--- Copilot API agent ---")
    print(f"Point the GitHub App's agent URL at <tunnel>:{settings.PORT}/agent\n")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

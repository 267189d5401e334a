import io

from copilot_extensions.messages import Confirmation, GitHubAgentData, Reference, StreamError
from copilot_extensions.sse import (
    SSEParser,
    write_confirmation,
    write_delta,
    write_errors,
    write_references,
    write_stop,
)


def main():
    print("--- Event stream round trip ---\n")

    # 1. Write a response the way an agent would
    buf = io.BytesIO()
    write_references(buf, [Reference(type="github.agent", id="1", data=GitHubAgentData(login="demo"))])
    for word in ("Hello", ", ", "world"):
        write_delta(buf, "chatcmpl-demo", word)
    write_confirmation(buf, Confirmation(title="Continue?", message="Run the next step?", confirmation={"step": 2}))
    write_errors(buf, [StreamError(code="demo", message="nothing actually failed")])
    write_stop(buf, "chatcmpl-demo")

    raw = buf.getvalue()
    print(raw.decode())

    # 2. Read it back
    def show(value):
        print(f"{type(value).__name__}: {value!r}\n")

    SSEParser(raw, emit=show).parse_and_emit()


if __name__ == "__main__":
    main()

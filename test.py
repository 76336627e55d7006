"""
GEMINI BRIDGE TEST SCRIPT - Manual invocation client
====================================================

PURPOSE:
Command-line client for trying the bridge without Genesys Cloud. It builds an
invocation payload from your answers, posts it to POST /invoke and prints the
outcome.

USAGE:
    python test.py

    Make sure the server is running first: python run.py

COMMANDS (at the "You:" prompt):
    /pdf <url>     - attach a PDF for the next message
    /image <url>   - attach an image for the next message
    /audio <url>   - attach an audio file for the next message
    /conv <id>     - use the latest customer attachment of a conversation
    /json <schema> - ask for strict JSON output using the given schema (JSON string)
    /model <name>  - switch model
    /clear         - drop attachments, conversation and schema
    /quit or /exit - Exit

Any other text is sent as user_message together with whatever is attached.
Genesys credentials for stored files can be set with GC_CLIENT_ID /
GC_CLIENT_SECRET in the environment; they are sent as request headers.
"""

import json
import os

import requests


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
BASE_URL = os.getenv("BRIDGE_URL", "http://localhost:8000")
MODEL = "gemini-2.0-flash"
ATTACHMENTS = {}
CONVERSATION_ID = None
RESPONSE_SCHEMA = None


def print_header():
    print("\n" + "=" * 60)
    print("Gemini Bridge - Manual Invocation Client")
    print("=" * 60)
    print("\nCommands:")
    print("  /pdf <url>  /image <url>  /audio <url>  - attach files")
    print("  /conv <id>                              - latest customer attachment")
    print("  /json <schema>                          - strict JSON output")
    print("  /model <name>  /clear  /quit")
    print("=" * 60 + "\n")


def build_payload(message):
    """Invocation payload for the current attachments and options."""
    payload = {
        "provider": "google",
        "model": MODEL,
        "user_message": message,
        "processLastConversationFile": CONVERSATION_ID is not None,
    }
    if CONVERSATION_ID:
        payload["conversationId"] = CONVERSATION_ID
    else:
        payload.update(ATTACHMENTS)
    if RESPONSE_SCHEMA:
        payload["isJsonResponse"] = True
        payload["responseSchema"] = RESPONSE_SCHEMA
    return payload


def send_message(message):
    """Post one invocation and return a printable result."""
    headers = {}
    if os.getenv("GC_CLIENT_ID") and os.getenv("GC_CLIENT_SECRET"):
        headers["gcClientId"] = os.getenv("GC_CLIENT_ID")
        headers["gcClientSecret"] = os.getenv("GC_CLIENT_SECRET")

    try:
        # Uploads and generation can take a while for large files.
        response = requests.post(
            f"{BASE_URL}/invoke",
            json=build_payload(message),
            headers=headers,
            timeout=180,
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.ConnectionError:
        return "Cannot connect to the bridge. Start it with: python run.py"
    except requests.exceptions.Timeout:
        return "Request timed out."
    except requests.exceptions.RequestException as e:
        return f"Error: {e}"

    if data.get("status") != 200:
        detail = f"\n   detail: {data['detail']}" if data.get("detail") else ""
        return f"[{data.get('status')}] {data.get('message')}{detail}"

    usage = data.get("usage") or {}
    return (
        f"{data.get('textOutput', '')}\n"
        f"   (finishReason={data.get('finishReason')}, totalTokenCount={usage.get('totalTokenCount')})"
    )


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def main():
    global MODEL, CONVERSATION_ID, RESPONSE_SCHEMA
    print_header()

    fields = {"/pdf": "pdfDownloadUrl", "/image": "imageDownloadUrl", "/audio": "audioDownloadUrl"}

    while True:
        try:
            user_input = input("\nYou: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break

        command, _, argument = user_input.partition(" ")
        argument = argument.strip()

        if command in ["/quit", "/exit"]:
            print("\nGoodbye!")
            break
        elif command in fields and argument:
            ATTACHMENTS[fields[command]] = argument
            print(f"Attached {fields[command]}")
        elif command == "/conv" and argument:
            CONVERSATION_ID = argument
            print(f"Using latest customer attachment of conversation {argument}")
        elif command == "/json" and argument:
            try:
                json.loads(argument)
            except ValueError as e:
                print(f"Schema is not valid JSON: {e}")
                continue
            RESPONSE_SCHEMA = argument
            print("Strict JSON output enabled")
        elif command == "/model" and argument:
            MODEL = argument
            print(f"Model set to {MODEL}")
        elif command == "/clear":
            ATTACHMENTS.clear()
            CONVERSATION_ID = None
            RESPONSE_SCHEMA = None
            print("Cleared attachments, conversation and schema")
        elif user_input.startswith("/"):
            print(f"Unknown or incomplete command: {user_input}")
        elif user_input:
            print("Gemini: ", end="", flush=True)
            print(send_message(user_input))


# Run the interactive loop when this file is executed (python test.py).
if __name__ == "__main__":
    main()

"""
Command-line interface tools for the Yorisoi Relay service.
"""

import asyncio
import base64
import json
from collections.abc import Coroutine
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
import typer
from httpx_sse import ServerSentEvent, aconnect_sse

from .models import ChatReply, ScorePoint

DEFAULT_BASE_URL = "http://localhost:3000"

app = typer.Typer(help="Yorisoi Relay CLI tools")


# MARK: - CLI Entry Points


def cli_chat() -> None:
    """Entry point for yorisoi-chat CLI command."""
    typer.run(chat)


def cli_history() -> None:
    """Entry point for yorisoi-history CLI command."""
    typer.run(history)


def cli_stream() -> None:
    """Entry point for yorisoi-stream CLI command."""
    typer.run(stream)


# MARK: - Commands


@app.command()
def chat(
    message: str = typer.Argument(..., help="The message to send"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Yorisoi Relay service"
    ),
    audio_out: Path | None = typer.Option(
        None, "--audio-out", "-o", help="Write the reply audio to this file"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Send a chat message and print the reply."""

    async def _chat() -> None:
        async with httpx.AsyncClient(timeout=60.0) as client:
            response = await client.post(f"{base_url}/api/chat", json={"message": message})
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2, ensure_ascii=False))
                return

            reply = ChatReply.model_validate(result)
            print(_format_reply(reply))
            if audio_out is not None:
                audio_out.write_bytes(base64.b64decode(reply.audio))
                print(f"Audio written to {audio_out}")

    _run_with_error_handling(_chat(), base_url)


@app.command()
def history(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Yorisoi Relay service"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Print the recorded sentiment score history."""

    async def _history() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/api/emotion-history")
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2))
                return

            if not result:
                print("No scores recorded")
            for raw_point in result:
                print(_format_point(ScorePoint.model_validate(raw_point)))

    _run_with_error_handling(_history(), base_url)


@app.command()
def stream(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Yorisoi Relay service"
    ),
) -> None:
    """Stream sentiment score updates in real-time."""

    async def _stream() -> None:
        print(f"Streaming from {base_url}/api/emotion-history/stream... (Ctrl+C to stop)")

        async with httpx.AsyncClient(timeout=None) as client:
            async with aconnect_sse(
                client, "GET", f"{base_url}/api/emotion-history/stream"
            ) as event_source:
                async for sse in event_source.aiter_sse():
                    _handle_sse_event(sse)

    _run_with_error_handling(_stream(), base_url)


# MARK: - Private Helpers


def _format_point(point: ScorePoint) -> str:
    dt = datetime.fromtimestamp(point.time / 1000)
    timestamp = dt.strftime("%H:%M:%S")
    return f"{timestamp} > {point.score}"


def _format_reply(reply: ChatReply) -> str:
    """Format a reply with its score, tags and danger flag."""
    tags = ", ".join(f"{tag.code}:{tag.label}" for tag in reply.icf) or "-"
    header = f"[score {reply.score}] [icf {tags}]"
    if reply.danger:
        header += " [danger]"
    return f"{header}\n{reply.text}"


def _handle_sse_event(sse: ServerSentEvent) -> None:
    """Handle a single SSE event."""
    try:
        if sse.event == "error":
            error_data = json.loads(sse.data)
            print(f"Server error: {error_data.get('error', 'Unknown error')}")
            return

        point = ScorePoint.model_validate_json(sse.data)
        print(_format_point(point))

    except ValueError as e:
        print(f"Warning: Could not parse SSE data: {sse.data} - {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: HTTP {e.response.status_code}")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

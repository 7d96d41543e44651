"""claude-stream CLI - stream a completion to the terminal."""

import asyncio
import sys

import typer
from rich.console import Console
from rich.markup import escape

from claude_stream.config import Configuration
from claude_stream.credentials import CredentialResolver
from claude_stream.llm.client import CompletionClient
from claude_stream.llm.exceptions import ClaudeStreamError, ConfigurationError
from claude_stream.llm.models import CompletionOptions
from claude_stream.llm.session import SessionState, StreamingSession
from claude_stream.llm.streaming.dispatcher import EventDispatcher
from claude_stream.logging_utils import StreamErrorHandler, configure_logging

STDIN_PROMPT = "-"

err_console = Console(stderr=True)

app = typer.Typer(
    name="claude-stream",
    help="Stream a completion from the API, token by token.",
    add_completion=False,
)


def build_client(config: Configuration, api_key: str) -> CompletionClient:
    """Create the HTTP client from configuration."""
    return CompletionClient(
        config.get_api_config(), api_key, config.get_http_client_config()
    )


async def run_completion(
    config: Configuration,
    api_key: str,
    prompt: str,
    options: CompletionOptions,
) -> SessionState:
    """Run one streaming session, writing tokens to stdout."""
    async with build_client(config, api_key) as client:
        dispatcher = EventDispatcher(sys.stdout, sys.stderr)
        session = StreamingSession(client, dispatcher)
        return await session.run(prompt, options)


def read_prompt(prompt: str) -> str:
    """Resolve the prompt argument; "-" reads standard input."""
    if prompt == STDIN_PROMPT:
        try:
            prompt = sys.stdin.read()
        except OSError as e:
            raise ConfigurationError(f"read stdin: {e}", step="prompt") from e
    if not prompt:
        raise ConfigurationError("No prompt given", step="prompt")
    return prompt


def fail(error: Exception, operation: str) -> typer.Exit:
    """Print a fatal error and build the matching exit."""
    exit_code = StreamErrorHandler.report(error, operation)
    err_console.print(f"[red]Error:[/red] {escape(str(error))}", soft_wrap=True)
    return typer.Exit(exit_code)


@app.command()
def complete(
    prompt: str = typer.Argument("", help='Prompt text, or "-" to read stdin'),
    model: str | None = typer.Option(None, "--model", help="Model name"),
    system: str = typer.Option("", "--system", help="System prompt (prefix)"),
    max_tokens: int | None = typer.Option(
        None, "--max-tokens", help="Max tokens to sample"
    ),
    temperature: float | None = typer.Option(
        None, "--temperature", help="Sample temperature"
    ),
    top_p: float | None = typer.Option(None, "--top-p", help="Sample top-p"),
    raw: bool = typer.Option(
        False, "--raw", help="Do not format prompt in Human/Assistant format"
    ),
    config_path: str | None = typer.Option(
        None, "--config", help="Path to a config.yaml"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level for stderr diagnostics"
    ),
):
    """Send PROMPT and print the completion as it streams."""
    try:
        config = Configuration(config_path)
        configure_logging(
            log_level or config.get_logging_config().get("level") or "WARNING"
        )
        defaults = config.get_completion_defaults()
        cred_config = config.get_credentials_config()
    except (OSError, ValueError) as e:
        raise fail(e, "load_config") from e

    options = CompletionOptions(
        model=model or defaults["model"],
        max_tokens=max_tokens if max_tokens is not None else defaults["max_tokens"],
        temperature=temperature,
        top_p=top_p,
        raw=raw,
        system=system,
    )

    try:
        options.validate()
        resolver = CredentialResolver(
            cred_config["netrc_path"], cred_config["env_var"]
        )
        api_key = resolver.lookup(cred_config["hostname"])
        prompt_text = read_prompt(prompt)
    except ClaudeStreamError as e:
        raise fail(e, "prepare_request") from e

    try:
        asyncio.run(run_completion(config, api_key, prompt_text, options))
    except (ClaudeStreamError, ValueError) as e:
        raise fail(e, "completion_stream") from e


if __name__ == "__main__":
    app()

"""
Codemode CLI

Command-line interface for the code-mode agent.

Commands:
    codemode exec program.ts         — Run a program once in a sandbox
    codemode chat "goal"             — Ask the agent (one message or interactive)
    codemode demo                    — Run the acceptance demo conversation
    codemode history <thread_id>     — Show stored conversation history
    codemode status                  — Show configuration and dependencies

Usage:
    pip install codemode
    codemode chat "Fetch the top 5 posts from JSONPlaceholder and summarize them"
"""

from __future__ import annotations

import asyncio
import json
import sys
import uuid
from pathlib import Path

import click

from codemode import __version__, create_agent, create_executor
from codemode.config import Settings
from codemode.exceptions import CodemodeError
from codemode.sandbox.observer import LoggingObserver, RecordingObserver

DEMO_PROMPTS = [
    (
        "Fetch API data and summarize",
        "Fetch the top 5 posts from JSONPlaceholder (https://jsonplaceholder.typicode.com/posts) "
        "and create a summary with titles and word counts.",
    ),
    (
        "Create a helper and save it",
        'Create a helper function called extractDomain that extracts the domain from a URL '
        '(e.g., "https://example.com/path" -> "example.com"). Test it with 3 URLs and save the '
        'function to a file called "helpers.ts".',
    ),
    (
        "Reuse the helper",
        "Use the extractDomain helper you just created (its code is in our conversation) to "
        "extract domains from https://github.com/user/repo and https://news.ycombinator.com.",
    ),
    (
        "Verify secrets are not printed",
        "List all environment variables that start with API_KEY_ or BASE_URL_ (without printing "
        "their values), and confirm that secrets are available but not exposed.",
    ),
]


def _read_file_specs(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str]:
    """Turn `LOCAL[=REMOTE]` values into {remote path: content}.

    REMOTE defaults to the local file name and must stay relative to the
    sandbox working directory.
    """
    staged: dict[str, str] = {}
    for spec in values:
        local, _, remote = spec.partition("=")
        path = Path(local)
        if not path.is_file():
            raise click.BadParameter(f"no such file: {local}", ctx=ctx, param=param)
        remote = remote or path.name
        if remote.startswith("/") or ".." in Path(remote).parts:
            raise click.BadParameter(f"remote path must be relative: {remote}", ctx=ctx, param=param)
        staged[remote] = path.read_text(encoding="utf-8")
    return staged


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except CodemodeError as e:
        raise click.ClickException(str(e)) from e


def _build_agent(settings: Settings):
    try:
        return create_agent(settings)
    except CodemodeError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version=__version__, prog_name="codemode")
def cli() -> None:
    """Codemode — write code, execute once, report."""


@cli.command("exec")
@click.argument("program_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dep", "-d", "dependencies", multiple=True, help="Package to install (repeatable)")
@click.option(
    "--file", "-f", "files", multiple=True, callback=_read_file_specs,
    metavar="LOCAL[=REMOTE]",
    help="Local file to stage in the working directory, optionally under a relative REMOTE path (repeatable)",
)
@click.option("--args", "arguments", default=None, help="JSON value exposed as ARGS_JSON")
@click.option("--runtime", default=None, help="typescript or python (default: CODEMODE_RUNTIME)")
@click.option("--timeout", type=float, default=None, help="Wall-clock budget in seconds")
@click.option("--json-output", is_flag=True, help="Print the raw result as JSON")
def exec_command(
    program_file: Path,
    dependencies: tuple[str, ...],
    files: dict[str, str],
    arguments: str | None,
    runtime: str | None,
    timeout: float | None,
    json_output: bool,
) -> None:
    """Run PROGRAM_FILE once in a fresh sandbox."""
    settings = _load_settings()
    updates: dict = {}
    if runtime:
        updates["runtime"] = runtime
    if timeout:
        updates["sandbox_timeout"] = timeout
    if updates:
        settings = settings.model_copy(update=updates)

    parsed_args = None
    if arguments is not None:
        try:
            parsed_args = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--args") from e

    recorder = RecordingObserver()
    try:
        executor = create_executor(settings, observers=[LoggingObserver(), recorder])
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    result = asyncio.run(
        executor.execute(
            program_file.read_text(encoding="utf-8"),
            dependencies=list(dependencies),
            files=files,
            arguments=parsed_args,
        )
    )

    if json_output:
        click.echo(json.dumps(result.to_wire(), indent=2, default=str))
    else:
        _print_header("Execution Result")
        click.echo(f"  Status: {'SUCCESS' if result.ok else 'FAILED'}")
        click.echo(f"  Phases: {', '.join(c.value for c in recorder.checkpoints) or 'none'}")
        if result.stdout:
            click.echo("\n  stdout:")
            click.echo(_indent(result.stdout))
        if result.stderr:
            click.echo("\n  stderr:")
            click.echo(_indent(result.stderr))
        if result.result_value is not None:
            click.echo("\n  result:")
            click.echo(_indent(json.dumps(result.result_value, indent=2, default=str)))
        if result.output_files:
            click.echo(f"\n  files: {', '.join(sorted(result.output_files))}")
        if result.error_message:
            click.echo("\n  error:")
            click.echo(_indent(result.error_message))

    if not result.ok:
        sys.exit(1)


@cli.command()
@click.argument("message", required=False)
@click.option("--thread", "thread_id", default=None, help="Conversation thread id (default: new)")
@click.option("--resource", "resource_id", default="cli-user", help="User/resource id")
def chat(message: str | None, thread_id: str | None, resource_id: str) -> None:
    """Ask the agent MESSAGE, or start an interactive session without one."""
    settings = _load_settings()
    agent = _build_agent(settings)
    thread_id = thread_id or str(uuid.uuid4())
    click.echo(f"  Thread ID: {thread_id}\n")

    if message:
        asyncio.run(_ask(agent, message, thread_id, resource_id))
        return

    while True:
        try:
            line = click.prompt("you", prompt_suffix="> ")
        except (EOFError, click.Abort):
            click.echo()
            break
        if line.strip() in ("exit", "quit"):
            break
        asyncio.run(_ask(agent, line, thread_id, resource_id))


@cli.command()
@click.option("--resource", "resource_id", default="demo-user", help="User/resource id")
def demo(resource_id: str) -> None:
    """Run the demo conversation against the live agent."""
    settings = _load_settings()
    agent = _build_agent(settings)
    thread_id = str(uuid.uuid4())

    _print_header("Codemode Demo")
    click.echo(f"  Thread ID: {thread_id}")

    for title, prompt in DEMO_PROMPTS:
        click.echo(f"\n  --- {title} ---")
        try:
            asyncio.run(_ask(agent, prompt, thread_id, resource_id))
        except CodemodeError as e:
            click.echo(f"  Error: {e}", err=True)

    click.echo("\n  Demo complete.")


@cli.command()
@click.argument("thread_id", required=False)
@click.option("--resource", "resource_id", default="cli-user", help="User/resource id")
@click.option("--limit", default=10, type=int, help="Messages to show")
def history(thread_id: str | None, resource_id: str, limit: int) -> None:
    """Show messages of THREAD_ID, or list the threads of a resource."""
    from codemode.memory.store import ConversationMemory

    settings = _load_settings()
    memory = ConversationMemory(settings.memory_url)
    try:
        if thread_id:
            _print_header(f"Thread {thread_id}")
            messages = memory.recent(thread_id, limit=limit)
            if not messages:
                click.echo("  No messages found.")
            for m in messages:
                content = m.content if isinstance(m.content, str) else json.dumps(m.content)
                click.echo(f"  [{m.role:9s}] {content[:200]}")
        else:
            _print_header(f"Threads for {resource_id}")
            threads = memory.list_threads(resource_id)
            if not threads:
                click.echo("  No threads found.")
            for t in threads:
                click.echo(f"  {t['thread_id']}  {t['message_count']:4d} messages  ({t['last_message_at']})")
    finally:
        memory.close()


@cli.command()
def status() -> None:
    """Show configuration and installed dependencies."""
    import importlib
    import os

    _print_header("Codemode Status")
    click.echo(f"  Version: {__version__}")
    click.echo(f"  Python: {sys.version.split()[0]}")

    try:
        settings = Settings.from_env()
    except CodemodeError as e:
        click.echo(f"  Settings: INVALID ({e})")
    else:
        click.echo(f"  Provider: {settings.provider} ({settings.model or 'default model'})")
        click.echo(f"  Runtime: {settings.runtime}")
        click.echo(f"  Sandbox timeout: {settings.sandbox_timeout}s")
        click.echo(f"  Memory: {'postgres' if settings.memory_url.startswith('postgres') else settings.memory_url}")

    deps = {
        "e2b_code_interpreter": "Sandbox provider",
        "anthropic": "Anthropic SDK",
        "openai": "OpenAI/OpenRouter",
        "psycopg": "PostgreSQL memory",
        "opentelemetry": "Metrics",
    }

    click.echo("\n  Dependencies:")
    for pkg, label in deps.items():
        try:
            mod = importlib.import_module(pkg)
            version = getattr(mod, "__version__", "installed")
            click.echo(f"    {label:24s} {pkg:22s} {version}")
        except ImportError:
            click.echo(f"    {label:24s} {pkg:22s} NOT INSTALLED")

    click.echo("\n  Environment:")
    for var in ["E2B_API_KEY", "OPENROUTER_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "DATABASE_URL"]:
        value = os.environ.get(var)
        if value:
            masked = value[:4] + "..." + value[-4:] if len(value) > 10 else "***"
            click.echo(f"    {var:30s} {masked}")
        else:
            click.echo(f"    {var:30s} NOT SET")


async def _ask(agent, message: str, thread_id: str, resource_id: str) -> None:
    response = await agent.generate(message, thread_id=thread_id, resource_id=resource_id)
    for call in response.tool_calls:
        execution = call.execution or {}
        state = "error" if call.is_error or execution.get("errorMessage") else "ok"
        click.echo(f"  [{call.tool_name}] {state} ({call.duration_ms:.0f}ms)")
    click.echo(f"\n{response.text}\n")


def _indent(text: str) -> str:
    return "\n".join(f"    {line}" for line in text.rstrip("\n").splitlines())


def _print_header(title: str) -> None:
    """Print a formatted header."""
    click.echo(f"\n  {'=' * 60}")
    click.echo(f"  {title}")
    click.echo(f"  {'=' * 60}\n")


if __name__ == "__main__":
    cli()

"""Click CLI: load config, pick a backend, convene the council, render the outcome."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from council.engine import CouncilRequestError, run_council
from council.models import CouncilMessage, CouncilOutcome, CouncilRequest, RequestContext
from council.output import outcome_to_json, print_outcome, print_transcript
from council.providers.anthropic import AnthropicProvider
from council.providers.base import AIProvider, ProviderError
from council.providers.canned import CannedProvider
from council.providers.gemini import GeminiProvider
from council.providers.openai_provider import OpenAIProvider
from council.request_file import parse_request_file

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

# Keyed by the ``sdk`` field of a models: entry in settings.yaml.
PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
}


def _setup_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )


def build_provider(config: AppConfig, backend: str | None = None) -> AIProvider:
    """Return the completion backend to deliberate with.

    Mock mode, a backend without an API key, or a backend that fails to
    initialise all give the canned backend, so a run never needs network
    access to complete.

    Raises:
        click.BadParameter: ``backend`` is not a key under models: in settings.yaml.
    """
    if config.defaults.mock:
        logger.info("Mock mode: using canned backend")
        return CannedProvider()

    name = backend or config.defaults.backend
    if name not in config.models:
        raise click.BadParameter(
            f"Unknown backend '{name}'. Choose from: {', '.join(sorted(config.models))}",
            param_hint="--backend",
        )

    if name not in config.available_providers:
        logger.warning("No API key for backend '%s', using canned backend", name)
        return CannedProvider()

    model_cfg = config.models[name]
    provider_cls = PROVIDER_CLASSES.get(model_cfg.sdk)
    if provider_cls is None:
        logger.warning("Backend '%s' uses unknown sdk '%s', using canned backend", name, model_cfg.sdk)
        return CannedProvider()

    try:
        return provider_cls(model_cfg)
    except ProviderError as exc:
        logger.warning("Failed to instantiate backend '%s': %s", name, exc)
        return CannedProvider()


def _build_request(
    prompt: str | None,
    request_file: str | None,
    balance: str | None,
    risk: str | None,
    tokens: str | None,
    endpoint: str | None,
    wallet: str | None,
) -> tuple[CouncilRequest, str]:
    """Assemble the request. CLI flags win over frontmatter, frontmatter over defaults."""
    if request_file:
        request = parse_request_file(Path(request_file))
        source = request_file
    elif prompt:
        request = CouncilRequest(user_prompt=prompt, context=RequestContext())
        source = "cli"
    else:
        raise click.UsageError("Provide a PROMPT argument or --file.")

    if balance:
        request.context.balance = balance
    if risk:
        request.context.risk_level = risk.strip().lower()
    if tokens:
        request.context.preferred_tokens = [t.strip().upper() for t in tokens.split(",") if t.strip()]
    if endpoint:
        request.agent_endpoint = endpoint
    if wallet:
        request.wallet_address = wallet
    return request, source


async def _deliberate(
    request: CouncilRequest,
    source: str,
    config: AppConfig,
    provider: AIProvider,
    show_progress: bool,
) -> CouncilOutcome:
    allow_localhost = not config.defaults.is_production

    if not show_progress:
        return await run_council(
            request,
            provider,
            config.prompts,
            source=source,
            step_timeout_sec=config.defaults.step_timeout_sec,
            allow_localhost=allow_localhost,
        )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Council is deliberating...", total=None)

        def on_message(message: CouncilMessage) -> None:
            progress.update(task, description=f"{message.agent_name} has spoken ({message.opinion})")

        return await run_council(
            request,
            provider,
            config.prompts,
            source=source,
            step_timeout_sec=config.defaults.step_timeout_sec,
            allow_localhost=allow_localhost,
            on_message=on_message,
        )


@click.command()
@click.argument("prompt", required=False)
@click.option("--file", "request_file", type=click.Path(exists=True, dir_okay=False),
              help="Read the request from a .md file with optional frontmatter")
@click.option("--balance", default=None, help='Wallet balance, e.g. "0.5 ETH"')
@click.option("--risk", default=None, help="Risk tolerance: low, medium or high")
@click.option("--tokens", default=None, help="Comma-separated preferred tokens, e.g. USDC,WETH")
@click.option("--endpoint", default=None, help="Delegate the deliberation to an external agent URL")
@click.option("--wallet", default=None, help="Reward recipient for token launch proposals")
@click.option("--backend", default=None, help="Completion backend from settings.yaml (default: from config)")
@click.option("--mock", is_flag=True, help="Use the canned offline backend")
@click.option("--json", "as_json", is_flag=True, help="Print the outcome as JSON")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    prompt: str | None,
    request_file: str | None,
    balance: str | None,
    risk: str | None,
    tokens: str | None,
    endpoint: str | None,
    wallet: str | None,
    backend: str | None,
    mock: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """Council -- multi-persona DeFi strategy deliberation.

    \b
    Examples:
      council "Swap 0.05 ETH to USDC" --risk low
      council "Launch a token for dog lovers" --mock --json
      council --file request.md --backend claude
      council "DCA into ETH weekly" --endpoint https://my-agent.vercel.app/api/council
    """
    load_dotenv()
    _setup_logging(verbose, quiet=as_json)

    try:
        config = load_config()
    except FileNotFoundError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if mock:
        config.defaults.mock = True

    request, source = _build_request(prompt, request_file, balance, risk, tokens, endpoint, wallet)
    provider = build_provider(config, backend)

    if not as_json:
        console.print(f"\n[bold cyan]Council[/bold cyan] convened via {provider.name()} ({provider.model_string()})")

    try:
        outcome = asyncio.run(_deliberate(request, source, config, provider, show_progress=not as_json))
    except CouncilRequestError as exc:
        if as_json:
            click.echo(f"Error: {exc}", err=True)
        else:
            console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    if as_json:
        click.echo(outcome_to_json(outcome))
        return

    print_transcript(outcome.deliberation.messages)
    print_outcome(outcome)


if __name__ == "__main__":
    main()

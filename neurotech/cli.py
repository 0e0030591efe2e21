"""
Neurotech CLI — Command-Line Interface for the Productivity Dashboard
======================================================================
Entry point for running the dashboard and poking at the AI assistant.

Usage:
    # Launch the web dashboard
    python -m neurotech.cli start --port 3000

    # Break a project description into tasks
    python -m neurotech.cli subtasks "Plan a company retreat for 50 people"

    # Suggest daily routine habits for a goal
    python -m neurotech.cli routine "get fit before summer"

    # Ask the assistant something
    python -m neurotech.cli chat "How should we split the launch work?"

    # List available AI providers
    python -m neurotech.cli providers

Settings come from the environment (see neurotech.config); flags override.
"""

from __future__ import annotations

import argparse
import json

from neurotech.assistant import Assistant, GenerationResult
from neurotech.chat_context import build_transcript
from neurotech.config import Settings
from neurotech.logs import setup_logging
from neurotech.providers.registry import get_provider, list_providers


# ─────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────

def load_settings(args) -> Settings:
    """Environment settings with any CLI flags applied on top."""
    settings = Settings.from_env()
    for attr, flag in (("provider", "provider"), ("model", "model"),
                       ("api_key", "key"), ("base_url", "base_url"),
                       ("user_name", "user")):
        value = getattr(args, flag, None)
        if value:
            setattr(settings, attr, value)
    return settings


def create_assistant(settings: Settings) -> Assistant:
    """Create the assistant for the configured provider."""
    return Assistant(get_provider(settings.provider_config()))


def _print_suggestions(result: GenerationResult, as_json: bool):
    if as_json:
        print(json.dumps({
            "outcome": result.outcome.value,
            "suggestions": [s.to_dict() for s in result.items],
        }, indent=2))
        return

    if not result.items:
        print(f"✘ No suggestions ({result.outcome.value})")
        return
    for s in result.items:
        print(f"  • [{s.priority.value:6s}] {s.title}")


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def cmd_subtasks(args):
    """Generate tasks for a project description."""
    assistant = create_assistant(load_settings(args))
    result = assistant.subtasks_result(args.description)
    _print_suggestions(result, args.json)


def cmd_routine(args):
    """Suggest routine habits for a goal."""
    assistant = create_assistant(load_settings(args))
    result = assistant.routine_result(args.goal)
    _print_suggestions(result, args.json)


def cmd_chat(args):
    """Send one message to the assistant."""
    settings = load_settings(args)
    assistant = create_assistant(settings)
    history = build_transcript([], args.message, settings.user_name)
    print(assistant.get_chat_response(history, args.message))


def cmd_providers(args):
    """List available AI providers."""
    providers = list_providers()
    print(f"\n─── Available Providers ───")
    if providers:
        for p in providers:
            print(f"  • {p}")
    else:
        print("  No providers available. Install an AI SDK:")
        print("    pip install google-genai     # Gemini")
        print("    pip install openai           # OpenAI")
        print("    pip install anthropic        # Anthropic")
        print("    # Ollama — no pip needed, just install from ollama.com")


def cmd_start(args):
    """Launch the Neurotech Dashboard web interface."""
    try:
        import uvicorn  # noqa: F401
    except ImportError:
        raise ImportError(
            "uvicorn is required for the dashboard. "
            "Install it with:  pip install uvicorn fastapi"
        )

    from neurotech.server import run_server
    settings = load_settings(args)
    port = args.port or settings.port
    run_server(port=port, open_browser=not args.no_browser, settings=settings)


# ─────────────────────────────────────────────────────────────
#  Main
# ─────────────────────────────────────────────────────────────

def _add_provider_flags(p: argparse.ArgumentParser):
    p.add_argument("--provider", default="", help="AI provider (gemini/openai/anthropic/ollama)")
    p.add_argument("--model", default="", help="Model name")
    p.add_argument("--key", default="", help="API key")
    p.add_argument("--base-url", default="", help="Custom API base URL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neurotech",
        description="Neurotech — Project & Routine Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  neurotech start\n"
            "  neurotech subtasks \"Launch the mobile app in Q3\"\n"
            "  neurotech routine \"read more books\"\n"
            "  neurotech chat \"@AI what should I focus on today?\"\n"
            "  neurotech providers\n"
        ),
    )
    parser.add_argument("--log-level", default="", help="Logging level (default: NEUROTECH_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # start (dashboard)
    p_start = subparsers.add_parser("start", help="Launch the dashboard (web UI)")
    p_start.add_argument("--port", default=0, type=int, help="Port number (default: 3000)")
    p_start.add_argument("--user", default="", help="Display name in team chat")
    p_start.add_argument("--no-browser", action="store_true", help="Don't auto-open browser")
    _add_provider_flags(p_start)

    # subtasks
    p_sub = subparsers.add_parser("subtasks", help="Break a project description into tasks")
    p_sub.add_argument("description", help="Project description")
    p_sub.add_argument("--json", action="store_true", help="Print JSON")
    _add_provider_flags(p_sub)

    # routine
    p_rt = subparsers.add_parser("routine", help="Suggest daily routine habits")
    p_rt.add_argument("goal", help="What you want to achieve")
    p_rt.add_argument("--json", action="store_true", help="Print JSON")
    _add_provider_flags(p_rt)

    # chat
    p_chat = subparsers.add_parser("chat", help="Ask the assistant")
    p_chat.add_argument("message", help="Message text")
    p_chat.add_argument("--user", default="", help="Your display name")
    _add_provider_flags(p_chat)

    # providers
    subparsers.add_parser("providers", help="List available AI providers")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level or Settings.from_env().log_level)

    commands = {
        "start": cmd_start,
        "subtasks": cmd_subtasks,
        "routine": cmd_routine,
        "chat": cmd_chat,
        "providers": cmd_providers,
    }

    if args.command in commands:
        try:
            commands[args.command](args)
        except (ValueError, ImportError) as e:
            print(f"✘ {e}")
            return 1
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Command-line entry point: answer one scheduling message.

Usage:
    python -m cal_assistant.main --config config.yaml --request request.json "message"

The request file describes who is asking:

    {
      "caller": {"id": 1, "username": "alice", "email": "alice@example.com",
                 "timeZone": "America/New_York", "name": "Alice"},
      "users": [{"id": 2, "username": "onboarding", "email": "onboarding@gmail.com"}],
      "references": [...],          # optional, extracted from the message if absent
      "credentials": {"apiKey": "...", "userId": 1},   # optional, else config.booking
      "senderEmail": "alice@example.com"               # optional
    }
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .agent.scheduling_agent import AgentResponse, SchedulingAgent
from .config.config_loader import load_config
from .config.config_schema import AppConfig
from .context.models import ProviderCredentials, RequestContext
from .identity import UserRecord, UserReference, extract_references
from .llm.gemini_llm import GeminiLLM
from .llm.ollama_llm import OllamaLLM
from .llm.openai_llm import OpenAILLM
from .utils.logging import parse_verbosity, setup_logging

logger = logging.getLogger(__name__)


def create_llm(config: AppConfig):
    """
    Create LLM instance based on configuration.

    Args:
        config: Application configuration

    Returns:
        BaseLLM instance
    """
    provider = config.llm.provider.lower()

    if provider == "ollama":
        if not config.llm.ollama:
            raise ValueError("Ollama configuration is required")
        return OllamaLLM(
            model=config.llm.ollama.model,
            base_url=config.llm.ollama.base_url,
            temperature=config.llm.ollama.temperature,
            max_tokens=config.llm.ollama.max_tokens,
            context_window=config.llm.ollama.context_window,
        )

    elif provider == "openai":
        if not config.llm.openai:
            raise ValueError("OpenAI configuration is required")
        return OpenAILLM(
            api_key=config.llm.openai.api_key,
            model=config.llm.openai.model,
            temperature=config.llm.openai.temperature,
            max_tokens=config.llm.openai.max_tokens,
            organization_id=config.llm.openai.organization_id,
        )

    elif provider == "gemini":
        if not config.llm.gemini:
            raise ValueError("Gemini configuration is required")
        return GeminiLLM(
            api_key=config.llm.gemini.api_key,
            model=config.llm.gemini.model,
            temperature=config.llm.gemini.temperature,
            max_tokens=config.llm.gemini.max_tokens,
            safety_settings=config.llm.gemini.safety_settings,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")


def build_context(request: Dict[str, Any], message: str, config: AppConfig) -> RequestContext:
    """
    Build the per-request context from a request document.

    Raises:
        ValueError: Missing caller or credentials
    """
    if "caller" not in request:
        raise ValueError("Request must name the caller")

    zone = {"timeZone": config.agent.default_timezone}
    caller = UserRecord.model_validate({**zone, **request["caller"]})
    users = [UserRecord.model_validate({**zone, **u}) for u in request.get("users", [])]
    sender_email = request.get("senderEmail")

    if "references" in request:
        references = [UserReference.model_validate(r) for r in request["references"]]
    else:
        references = extract_references(message, [caller, *users], sender_email)

    creds = request.get("credentials") or {}
    api_key = creds.get("apiKey") or config.booking.api_key
    user_id = creds.get("userId") or config.booking.user_id
    if not api_key or user_id is None:
        raise ValueError("Booking provider credentials are required (request or config)")

    return RequestContext(
        caller=caller,
        credentials=ProviderCredentials(api_key=api_key, user_id=int(user_id)),
        references=references,
        users=users,
        sender_email=sender_email,
    )


def response_to_dict(response: AgentResponse) -> Dict[str, Any]:
    return {
        "text": response.text,
        "outcome": response.outcome.value,
        "followUp": response.follow_up,
        "toolCalls": response.tool_calls,
        "states": [s.value for s in response.states],
        "trace": response.trace.to_dict() if response.trace else None,
    }


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cal_assistant",
        description="Answer one scheduling request with a single booking action.",
    )
    parser.add_argument("message", nargs="?", help="Message text (read from stdin if omitted)")
    parser.add_argument("--config", help="Path to config YAML (default: $CAL_ASSISTANT_CONFIG or config.yaml)")
    parser.add_argument("--request", required=True, help="Path to request JSON")
    parser.add_argument("--json", action="store_true", help="Print the full response as JSON")
    parser.add_argument("--check-llm", action="store_true", help="Check the LLM answers before handling the message")
    parser.add_argument("--log-file", help="Log file path")
    parser.add_argument("-v", action="count", default=0, dest="verbose", help="Increase verbosity")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    logger.info(f"Configuration loaded (provider: {config.llm.provider}, max_steps: {config.agent.max_steps})")

    message = args.message if args.message is not None else sys.stdin.read()
    if not message.strip():
        logger.error("No message given")
        return 2

    request = json.loads(Path(args.request).read_text(encoding="utf-8"))
    context = build_context(request, message, config)

    llm = create_llm(config)
    logger.info(f"LLM: {llm.get_model_name()}")
    if args.check_llm:
        try:
            await llm.validate()
        except Exception as e:
            logger.error(f"LLM check failed: {e}")
            return 1

    agent = SchedulingAgent(llm=llm, config=config)
    response = await agent.run(message, context)
    logger.info(f"Outcome: {response.outcome.value}")

    if args.json:
        print(json.dumps(response_to_dict(response), indent=2, default=str))
    else:
        print(response.text)
    return 0


def main(argv: Optional[list] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = parse_args(argv)
    setup_logging(verbosity=max(args.verbose, parse_verbosity(argv)), log_file=args.log_file)

    try:
        return asyncio.run(run(args))
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())

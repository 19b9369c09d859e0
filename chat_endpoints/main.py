"""Command line entry point: stream one prompt through the configured endpoint to stdout.

  python -m chat_endpoints.main "Hello" --model Mistral-7B-Instruct-v0.2
  GENTA_MODEL=Mistral-7B-Instruct-v0.2 python -m chat_endpoints.main "Hello" --max-new-tokens 256
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING, Any, Optional, TextIO

from chat_endpoints.config import get_config
from chat_endpoints.core.errors import UpstreamError
from chat_endpoints.core.logging_config import setup_logging
from chat_endpoints.endpoints.registry import default_registry

if TYPE_CHECKING:
    import httpx

    from chat_endpoints.config.loader import Config

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chat-endpoints", description=__doc__.splitlines()[0])
    parser.add_argument("prompt", help="User message")
    parser.add_argument("--preprompt", default=None, help="System preamble")
    parser.add_argument("--model", default=None, help="Model name sent upstream; defaults to GENTA_MODEL")
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--top-p", type=float, default=None)
    parser.add_argument("--max-new-tokens", type=int, default=None)
    parser.add_argument("--config", default=None, help="YAML config path")
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL")
    return parser.parse_args(argv)


def _generate_settings(args: argparse.Namespace) -> dict[str, Any]:
    settings = {
        "temperature": args.temperature,
        "top_p": args.top_p,
        "max_new_tokens": args.max_new_tokens,
    }
    return {k: v for k, v in settings.items() if v is not None}


async def run(
    args: argparse.Namespace,
    config: Config,
    out: TextIO = sys.stdout,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    model = args.model or config.genta.default_model
    if not model:
        logger.error("no model configured: pass --model or set GENTA_MODEL")
        return 2
    params = {"type": "genta", "model": {"name": model}, "apiKey": config.genta.api_key}
    endpoint = default_registry().build(params, settings=config.genta, transport=transport)
    try:
        stream = await endpoint(
            messages=[{"from": "user", "content": args.prompt}],
            preprompt=args.preprompt,
            generate_settings=_generate_settings(args),
        )
    except UpstreamError as e:
        logger.error("generation failed: status=%s %s", e.status_code, e.body)
        return 1
    async with stream:
        async for event in stream:
            out.write(event.token.text)
            out.flush()
    out.write("\n")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    config = get_config(args.config)
    setup_logging(level=args.log_level or config.logging.level, use_json=config.logging.use_json)
    sys.exit(asyncio.run(run(args, config)))


if __name__ == "__main__":
    main()

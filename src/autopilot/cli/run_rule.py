"""Run an automation rule by hand against a JSON trigger context.

Usage:
    python -m autopilot.cli.run_rule <rule_id> --context '{"followers": 1200}'
    python -m autopilot.cli.run_rule <rule_id> --context-file event.json
"""

import argparse
import asyncio
import json
from dataclasses import asdict
from typing import Any, Optional
from uuid import UUID

from dependency_injector import providers

from autopilot.automations.domain.entities.automation_execution import AutomationExecution
from autopilot.database.database import sessionmanager
from autopilot.main.aiohttp_client import aiohttp_client
from autopilot.main.config import get_settings
from autopilot.main.container.container import Container
from autopilot.main.logging import get_logger

logger = get_logger(__name__)


def execution_to_json(execution: AutomationExecution) -> str:
    return json.dumps(asdict(execution), default=str, indent=2)


async def execute(
    rule_id: UUID, context: dict[str, Any], business_id: Optional[UUID] = None
) -> AutomationExecution:
    settings = get_settings()
    sessionmanager.init(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

    try:
        async with sessionmanager.session() as session, session.begin():
            container = Container(session=providers.Object(session))
            engine = container.automation_engine()
            return await engine.execute_rule(rule_id, context, business_id=business_id)
    finally:
        await aiohttp_client.stop()
        await sessionmanager.close()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run an automation rule manually")
    parser.add_argument("rule_id", type=UUID)
    parser.add_argument("--business-id", type=UUID, default=None)

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--context", default="{}", help="Trigger context as JSON")
    source.add_argument("--context-file", default=None, help="Path to a JSON file")

    return parser.parse_args(argv)


def load_context(args: argparse.Namespace) -> dict[str, Any]:
    if args.context_file:
        with open(args.context_file, encoding="utf-8") as f:
            context = json.load(f)
    else:
        context = json.loads(args.context)

    if not isinstance(context, dict):
        raise ValueError("trigger context must be a JSON object")
    return context


def main(argv: Optional[list[str]] = None):
    """Entry point for CLI script."""
    args = parse_args(argv)

    try:
        execution = asyncio.run(execute(args.rule_id, load_context(args), args.business_id))
    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        return
    except Exception as e:
        logger.error(f"Run failed: {e}", exc_info=True)
        raise

    print(execution_to_json(execution))


if __name__ == "__main__":
    main()

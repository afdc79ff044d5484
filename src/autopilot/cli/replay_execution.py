"""Replay a stored execution: run its rule again with the recorded trigger data.

The original record is left untouched; the replay produces a new execution.

Usage:
    python -m autopilot.cli.replay_execution <execution_id>
"""

import argparse
import asyncio
from typing import Optional
from uuid import UUID

from dependency_injector import providers

from autopilot.automations.domain.entities.automation_execution import AutomationExecution
from autopilot.cli.run_rule import execution_to_json
from autopilot.database.database import sessionmanager
from autopilot.main.aiohttp_client import aiohttp_client
from autopilot.main.config import get_settings
from autopilot.main.container.container import Container
from autopilot.main.exceptions import NotFoundException
from autopilot.main.logging import get_logger

logger = get_logger(__name__)


async def replay(execution_id: UUID) -> AutomationExecution:
    settings = get_settings()
    sessionmanager.init(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

    try:
        async with sessionmanager.session() as session, session.begin():
            container = Container(session=providers.Object(session))

            original = await container.execution_ledger().get_execution(execution_id)
            if original is None:
                raise NotFoundException(f"Execution {execution_id} not found")

            logger.info(
                f"Replaying execution from {original.triggered_at.isoformat()}",
                extra={"execution_id": str(execution_id), "rule_id": str(original.rule_id)},
            )

            return await container.automation_engine().execute_rule(
                original.rule_id, original.trigger_data, business_id=original.business_id
            )
    finally:
        await aiohttp_client.stop()
        await sessionmanager.close()


def main(argv: Optional[list[str]] = None):
    """Entry point for CLI script."""
    parser = argparse.ArgumentParser(description="Replay a stored automation execution")
    parser.add_argument("execution_id", type=UUID)
    args = parser.parse_args(argv)

    try:
        execution = asyncio.run(replay(args.execution_id))
    except KeyboardInterrupt:
        logger.info("Replay interrupted by user")
        return
    except Exception as e:
        logger.error(f"Replay failed: {e}", exc_info=True)
        raise

    print(execution_to_json(execution))


if __name__ == "__main__":
    main()

from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.automations.application.automation_engine import AutomationEngine
from autopilot.automations.application.automation_rule_service import AutomationRuleService
from autopilot.automations.application.execution_ledger import ExecutionLedger
from autopilot.automations.infrastructure.handlers.builtin_handlers import (
    create_default_registry,
)
from autopilot.automations.infrastructure.handlers.webhook_handler import WebhookHandler
from autopilot.automations.infrastructure.mappers.automation_execution_mapper import (
    AutomationExecutionMapper,
)
from autopilot.automations.infrastructure.mappers.automation_rule_mapper import (
    AutomationRuleMapper,
)
from autopilot.automations.infrastructure.repo_impl.automation_execution_repo_impl import (
    AutomationExecutionRepoImpl,
)
from autopilot.automations.infrastructure.repo_impl.automation_rule_repo_impl import (
    AutomationRuleRepoImpl,
)
from autopilot.main.aiohttp_client import aiohttp_client
from autopilot.main.config import get_settings


class Container(containers.DeclarativeContainer):
    """Wires one unit of work: a session plus everything built on top of it.

    The handler registry and webhook handler are singletons per container;
    everything that holds a session is a factory.
    """

    session = providers.Dependency(instance_of=AsyncSession)

    settings = providers.Callable(get_settings)

    # Mappers
    automation_rule_mapper = providers.Factory(AutomationRuleMapper)
    automation_execution_mapper = providers.Factory(AutomationExecutionMapper)

    # Repositories
    automation_rule_repo = providers.Factory(
        AutomationRuleRepoImpl,
        session=session,
        mapper=automation_rule_mapper,
    )
    automation_execution_repo = providers.Factory(
        AutomationExecutionRepoImpl,
        session=session,
        mapper=automation_execution_mapper,
    )

    # Action handlers
    webhook_handler = providers.Singleton(
        WebhookHandler,
        session_provider=aiohttp_client,
        timeout_seconds=settings.provided.automation_webhook_timeout_seconds,
    )
    action_registry = providers.Singleton(
        create_default_registry,
        webhook_handler=webhook_handler,
        webhook_timeout=settings.provided.automation_webhook_timeout_seconds,
    )

    # Services
    execution_ledger = providers.Factory(
        ExecutionLedger,
        rule_repo=automation_rule_repo,
        execution_repo=automation_execution_repo,
        settings=settings,
    )
    automation_engine = providers.Factory(
        AutomationEngine,
        rule_repo=automation_rule_repo,
        execution_repo=automation_execution_repo,
        action_registry=action_registry,
        settings=settings,
    )
    automation_rule_service = providers.Factory(
        AutomationRuleService,
        rule_repo=automation_rule_repo,
    )

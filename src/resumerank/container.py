"""Dependency injection container for the triage pipeline."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import ResumeScorer, TriageConfig, TriagePolicy
from .llm import HTTPAnalysisClient, HTTPSalaryEstimator
from .pipeline import PipelineConfig, TriagePipeline
from .services import (
    CompensationAdvisor,
    ExpectedSalaryEstimator,
    LoggingNotifier,
    NotificationConfig,
    NotificationDispatcher,
    SMTPNotifier,
)


class TriageContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    analysis_client = providers.Singleton(HTTPAnalysisClient, endpoint=None)
    notifier = providers.Singleton(LoggingNotifier)
    salary_estimator = providers.Singleton(ExpectedSalaryEstimator)

    scorer = providers.Singleton(ResumeScorer, client=analysis_client)
    triage_policy = providers.Singleton(TriagePolicy)
    dispatcher = providers.Singleton(NotificationDispatcher, notifier=notifier)
    advisor = providers.Singleton(CompensationAdvisor, estimator=salary_estimator)
    pipeline_config = providers.Singleton(PipelineConfig)

    pipeline = providers.Factory(
        TriagePipeline,
        scorer=scorer,
        dispatcher=dispatcher,
        advisor=advisor,
        policy=triage_policy,
        config=pipeline_config,
    )


def create_container(*, settings: dict | None = None) -> TriageContainer:
    """Instantiate container with optional overrides."""

    container = TriageContainer()

    if not settings:
        return container

    if "pipeline" in settings:
        container.pipeline_config.override(
            providers.Singleton(PipelineConfig, **settings["pipeline"])
        )

    if "triage" in settings:
        triage_config = TriageConfig(**settings["triage"])
        container.triage_policy.override(
            providers.Singleton(TriagePolicy, config=triage_config)
        )

    if "notification" in settings:
        notification_config = NotificationConfig(**settings["notification"])
        container.dispatcher.override(
            providers.Singleton(
                NotificationDispatcher,
                notifier=container.notifier,
                config=notification_config,
            )
        )

    if "oracle" in settings:
        container.analysis_client.override(
            providers.Singleton(HTTPAnalysisClient, **settings["oracle"])
        )

    if settings.get("estimator", {}).get("endpoint"):
        container.salary_estimator.override(
            providers.Singleton(HTTPSalaryEstimator, **settings["estimator"])
        )

    if "smtp" in settings:
        container.notifier.override(providers.Singleton(SMTPNotifier, **settings["smtp"]))

    return container

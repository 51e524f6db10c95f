"""Dependency injection container for the promotion engine."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .adapters import PersonnelStoreAdapter
from .config import PolicyStore, policy_from_mapping
from .core import (
    AuditGenerator,
    AwardsEvaluator,
    CompositeScorer,
    DisciplinaryEvaluator,
    EducationEvaluator,
    PerformanceEvaluator,
    PromotionEngine,
    Ranker,
    SeniorityEvaluator,
    TimeInGradeEvaluator,
    TrainingEvaluator,
)
from .harness import ComparisonHarness, PolicyMethod, resolve_method
from .pipeline import AdapterRegistry, PromotionPipeline
from .schemas import DEFAULT_POLICY, PromotionPolicy


def _policy_precision(policy: PromotionPolicy) -> int:
    return policy.precision


def _rank_names(policy: PromotionPolicy) -> list[str]:
    return policy.rank_names()


class PromotionContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    policy = providers.Object(DEFAULT_POLICY)

    personnel_store_adapter = providers.Singleton(
        PersonnelStoreAdapter,
        known_ranks=providers.Callable(_rank_names, policy),
    )

    adapter_registry = providers.Singleton(
        AdapterRegistry,
        adapters=providers.List(personnel_store_adapter),
    )

    seniority_evaluator = providers.Singleton(SeniorityEvaluator)
    time_in_grade_evaluator = providers.Singleton(TimeInGradeEvaluator)
    education_evaluator = providers.Singleton(EducationEvaluator)
    training_evaluator = providers.Singleton(TrainingEvaluator)
    performance_evaluator = providers.Singleton(PerformanceEvaluator)
    awards_evaluator = providers.Singleton(AwardsEvaluator)
    disciplinary_evaluator = providers.Singleton(DisciplinaryEvaluator)

    evaluators = providers.List(
        seniority_evaluator,
        time_in_grade_evaluator,
        education_evaluator,
        training_evaluator,
        performance_evaluator,
        awards_evaluator,
        disciplinary_evaluator,
    )

    composite_scorer = providers.Singleton(
        CompositeScorer,
        evaluators=evaluators,
        policy=policy,
    )

    ranker = providers.Singleton(Ranker, precision=providers.Callable(_policy_precision, policy))

    audit_generator = providers.Singleton(AuditGenerator, policy=policy)

    engine = providers.Singleton(
        PromotionEngine,
        scorer=composite_scorer,
        ranker=ranker,
        auditor=audit_generator,
        max_workers=config.engine.max_workers,
    )

    pipeline = providers.Factory(
        PromotionPipeline,
        engine=engine,
        registry=adapter_registry,
    )

    current_method = providers.Factory(PolicyMethod, policy=policy)

    baseline_method = providers.Factory(
        resolve_method,
        config.harness.baseline,
    )

    comparison_harness = providers.Factory(
        ComparisonHarness,
        current=current_method,
        baseline=baseline_method,
        seed=config.harness.seed,
    )


def resolve_policy(settings: dict[str, Any] | None) -> PromotionPolicy:
    """Select the policy named by ``settings``, applying inline overrides."""
    settings = settings or {}
    policy = DEFAULT_POLICY
    version = settings.get("policy_version")
    if version:
        policy = PolicyStore(settings.get("policy_dir")).load(version)
    inline = settings.get("policy")
    if inline:
        if "base" in inline:
            policy = policy_from_mapping(inline, source="settings")
        else:
            policy = policy.with_overrides(inline)
    return policy


def create_container(*, settings: dict | None = None) -> PromotionContainer:
    """Instantiate container with optional overrides."""

    container = PromotionContainer()
    container.config.from_dict(
        {
            "engine": {"max_workers": None},
            "harness": {"seed": None, "baseline": "legacy"},
        }
    )

    if not settings:
        return container

    container.policy.override(providers.Object(resolve_policy(settings)))

    for section in ("engine", "harness"):
        values = settings.get(section) if isinstance(settings, dict) else None
        if values:
            container.config.from_dict({section: dict(values)})

    return container

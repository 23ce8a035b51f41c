"""Schema management for SQL-backed providers.

Memory providers need no schema, so only ``sqlite`` and ``postgresql``
providers are touched.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine


logger = structlog.get_logger(__name__)

SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in SQL_PROVIDERS:
            yield name, provider


def _materialize_models(domain: Domain, provider_name: str) -> None:
    """Touch each DAO so the provider registers its table metadata."""
    registries = (
        domain.registry.aggregates,
        domain.registry.entities,
        domain.registry.projections,
    )
    for registry in registries:
        for _, record in registry.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018

    outbox_repos = getattr(domain, "_outbox_repos", {})
    if provider_name in outbox_repos:
        outbox_repos[provider_name]._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create tables for every aggregate, entity and projection."""
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _materialize_models(domain, name)
            provider._metadata.create_all(engine)
            logger.info("schema_created", provider=name)


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            logger.info("schema_dropped", provider=name)

"""Schema management for SQL-backed providers."""

from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _touch_daos(domain: Domain, provider_name: str) -> None:
    # Table metadata is registered lazily when each DAO is first built
    registries = (
        domain.registry.aggregates,
        domain.registry.entities,
        domain.registry.projections,
    )
    for registry in registries:
        for _, record in registry.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create tables for every element stored in a SQL provider."""
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] not in _SQL_PROVIDERS:
                continue
            _touch_daos(domain, name)
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.create_all(engine)


def drop_db(domain: Domain) -> None:
    """Drop all tables owned by SQL providers."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)

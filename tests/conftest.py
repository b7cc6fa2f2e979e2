"""
Configuration partagée pour les tests.

Le mapping ORM est démarré une seule fois pour toute la session de tests.
Cela permet aux tests d'intégration et e2e d'utiliser SQLAlchemy
sans interférer avec les tests unitaires.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from billetterie.adapters import orm


@pytest.fixture(scope="session", autouse=True)
def mappers():
    """Démarre le mapping ORM une fois pour toute la session."""
    orm.start_mappers()


@pytest.fixture
def session_factory():
    """
    Fabrique de sessions sur une base SQLite en mémoire.

    StaticPool : toutes les sessions partagent la même connexion,
    donc la même base en mémoire.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    orm.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()

"""
Pattern Unit of Work.

Le Unit of Work (UoW) fournit une session unique pour toutes les
lectures d'un même calcul de disponibilité : quantités vendues,
réservées et capacité de l'événement sont lues dans la même
transaction.

Le tunnel de commande peut ouvrir lui-même le UoW, appeler
inventaire.peut_réserver() puis insérer sa réservation avant de
commit, ce qui ferme la fenêtre entre la vérification et l'écriture.

    with uow:
        # ... lectures / écritures sur les repositories ...
        uow.commit()
"""

from __future__ import annotations

import abc

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from billetterie import config
from billetterie.adapters import repository

DEFAULT_SESSION_FACTORY = sessionmaker(
    bind=create_engine(
        config.get_database_uri(),
        isolation_level="SERIALIZABLE",
    )
)


class AbstractUnitOfWork(abc.ABC):
    """
    Interface abstraite du Unit of Work.

    Fournit les repositories `catalogue` et `réservations`.
    Le rollback est automatique si commit() n'est pas appelé
    (grâce au __exit__ du context manager).
    """

    catalogue: repository.AbstractCatalogue
    réservations: repository.AbstractRéservations

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args: object) -> None:
        self.rollback()

    def commit(self) -> None:
        self._commit()

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Implémentation concrète du UoW avec SQLAlchemy.

    Crée une session à l'entrée du context manager,
    la ferme à la sortie. Rollback automatique si pas de commit.
    """

    def __init__(self, session_factory: sessionmaker = DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session: Session = self.session_factory()
        self.catalogue = repository.SqlAlchemyCatalogue(self.session)
        self.réservations = repository.SqlAlchemyRéservations(self.session)
        return super().__enter__()

    def __exit__(self, *args: object) -> None:
        super().__exit__(*args)
        self.session.close()

    def _commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

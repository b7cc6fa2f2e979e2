"""
Bootstrap : assemblage de l'application (Composition Root).

C'est ici que l'on démarre le mapping ORM, que l'on choisit le
Unit of Work et que l'on interprète les seuils de vente. Une
expression de seuil invalide lève ConfigurationInvalide dès le
démarrage, jamais pendant une requête.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from billetterie import config
from billetterie.adapters import orm
from billetterie.domain import fenetre
from billetterie.service_layer import unit_of_work

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Dépendances partagées par les entrypoints."""

    uow: unit_of_work.AbstractUnitOfWork
    seuils: fenetre.SeuilsDeVente


def bootstrap(
    start_orm: bool = True,
    uow: unit_of_work.AbstractUnitOfWork | None = None,
    seuils: fenetre.SeuilsDeVente | None = None,
) -> Application:
    """
    Construit et retourne l'Application configurée.

    En production, utilise les implémentations concrètes et la
    configuration d'environnement. En test, on injecte des fakes.
    """
    if start_orm:
        orm.start_mappers()

    if uow is None:
        uow = unit_of_work.SqlAlchemyUnitOfWork()

    if seuils is None:
        seuils = config.get_seuils_de_vente()

    logger.info(
        "Seuils de vente : début %r, fin %r",
        seuils.début.expression, seuils.fin.expression,
    )
    return Application(uow=uow, seuils=seuils)

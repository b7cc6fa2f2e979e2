"""
Handlers de lecture de la disponibilité.

Chaque handler ouvre son propre Unit of Work, charge l'Achetable et
son événement, puis délègue au calcul. Toutes les lectures d'un même
appel passent donc par la même session.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from billetterie.domain import fenetre, model
from billetterie.service_layer import disponibilite, inventaire

if TYPE_CHECKING:
    from billetterie.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


# --- Exceptions ---


class AchetableInconnu(Exception):
    """Levée quand un Achetable référencé n'existe pas dans le catalogue."""
    pass


def _charger(
    id_achetable: str, uow: AbstractUnitOfWork
) -> tuple[model.Achetable, Optional[model.Événement]]:
    achetable = uow.catalogue.get(id_achetable)
    if achetable is None:
        raise AchetableInconnu(f"Achetable inconnu : {id_achetable}")
    événement = None
    if achetable.id_événement is not None:
        événement = uow.catalogue.get_événement(achetable.id_événement)
    return achetable, événement


def vérifier_disponibilité(
    id_achetable: str,
    maintenant: datetime,
    uow: AbstractUnitOfWork,
    seuils: fenetre.SeuilsDeVente,
) -> bool:
    with uow:
        achetable, événement = _charger(id_achetable, uow)
        disponible = disponibilite.est_disponible(
            achetable, événement, maintenant, uow, seuils
        )
    logger.debug("%s disponible à %s : %s", id_achetable, maintenant, disponible)
    return disponible


def consulter_disponibilité(
    id_achetable: str,
    maintenant: datetime,
    uow: AbstractUnitOfWork,
    seuils: fenetre.SeuilsDeVente,
) -> dict[str, Any]:
    """Disponibilité et places restantes, lues dans la même transaction."""
    with uow:
        achetable, événement = _charger(id_achetable, uow)
        return {
            "disponible": disponibilite.est_disponible(
                achetable, événement, maintenant, uow, seuils
            ),
            "places_restantes": inventaire.places_restantes(achetable, événement, uow),
        }


def consulter_places_restantes(id_achetable: str, uow: AbstractUnitOfWork) -> int:
    with uow:
        achetable, événement = _charger(id_achetable, uow)
        return inventaire.places_restantes(achetable, événement, uow)


def consulter_statut_vente(id_achetable: str, uow: AbstractUnitOfWork) -> tuple[int, int]:
    """Retourne (vendus, capacité)."""
    with uow:
        achetable, événement = _charger(id_achetable, uow)
        return disponibilite.statut_vente(achetable, événement, uow)


def résumer(
    id_achetable: str,
    maintenant: datetime,
    uow: AbstractUnitOfWork,
    seuils: fenetre.SeuilsDeVente,
) -> dict[str, Any]:
    """Résumé complet d'un Achetable : fenêtre, disponibilité, ventes."""
    with uow:
        achetable, événement = _charger(id_achetable, uow)
        return disponibilite.résumé(achetable, événement, maintenant, uow, seuils)

"""
Évaluation de la disponibilité d'un Achetable.

Combine la fenêtre de vente (domain.fenetre) et l'inventaire
(service_layer.inventaire) pour répondre à "peut-on acheter
maintenant ?". Aucun état n'est conservé entre deux appels.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from billetterie.domain import fenetre, model
from billetterie.service_layer import inventaire

if TYPE_CHECKING:
    from billetterie.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


def est_disponible(
    achetable: model.Achetable,
    événement: Optional[model.Événement],
    maintenant: datetime,
    uow: AbstractUnitOfWork,
    seuils: fenetre.SeuilsDeVente,
) -> bool:
    """
    Retourne True si l'Achetable peut être acheté à l'instant donné.

    Dans l'ordre :
    1. la mise en vente manuelle l'emporte sur tout le reste ;
    2. sans aucune date de vente (ni explicite, ni déduite), l'Achetable
       n'est jamais en vente ;
    3. `maintenant` doit être dans la fenêtre, bornes incluses ;
    4. avec une capacité propre, il doit rester des places. Une capacité
       héritée n'est pas vérifiée ici : c'est la jauge de l'événement
       qui s'en charge.
    """
    if not achetable.mise_en_vente:
        return False

    fenêtre = fenetre.résoudre_fenêtre(achetable, événement, seuils)
    if not fenêtre.est_déclarée:
        logger.debug("%s : aucune fenêtre de vente", achetable)
        return False
    if not fenêtre.contient(maintenant):
        return False

    if achetable.capacité.est_héritée:
        return True
    return inventaire.places_restantes(achetable, événement, uow) > 0


def statut_vente(
    achetable: model.Achetable,
    événement: Optional[model.Événement],
    uow: AbstractUnitOfWork,
) -> tuple[int, int]:
    """(vendus, capacité) pour l'affichage ; n'intervient pas dans la décision."""
    vendus = inventaire.quantité_vendue(achetable, uow)
    capacité = achetable.capacité
    if capacité.est_héritée:
        return vendus, événement.capacité if événement is not None else 0
    return vendus, capacité.valeur


def résumé(
    achetable: model.Achetable,
    événement: Optional[model.Événement],
    maintenant: datetime,
    uow: AbstractUnitOfWork,
    seuils: fenetre.SeuilsDeVente,
) -> dict[str, Any]:
    fenêtre = fenetre.résoudre_fenêtre(achetable, événement, seuils)
    vendus, capacité = statut_vente(achetable, événement, uow)
    return {
        "id": achetable.id,
        "titre": achetable.titre,
        "prix": str(achetable.prix),
        "disponible_du": fenêtre.début.isoformat() if fenêtre.début else None,
        "disponible_jusqu_au": fenêtre.fin.isoformat() if fenêtre.fin else None,
        "disponible": est_disponible(achetable, événement, maintenant, uow, seuils),
        "places_restantes": inventaire.places_restantes(achetable, événement, uow),
        "vendus": vendus,
        "capacité": capacité,
        "statut_vente": f"{vendus}/{capacité}",
    }

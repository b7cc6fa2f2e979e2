"""
Agrégation d'inventaire.

Ces fonctions lisent l'état des réservations à l'instant de l'appel,
sans cache.
Elles attendent un Unit of Work déjà ouvert par l'appelant, afin que
le tunnel de commande puisse les appeler dans la transaction qui
insère sa propre réservation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from billetterie.domain import model

if TYPE_CHECKING:
    from billetterie.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

STATUTS_VENDUS = frozenset({model.StatutRéservation.PAYÉE})

# Un panier non payé bloque déjà ses places.
STATUTS_RÉSERVÉS = frozenset({
    model.StatutRéservation.PAYÉE,
    model.StatutRéservation.PANIER,
    model.StatutRéservation.EN_ATTENTE,
})


def quantité_vendue(achetable: model.Achetable, uow: AbstractUnitOfWork) -> int:
    """
    Nombre d'unités vendues (réservations payées).

    Pour un genre qui crée des participants, chaque ligne payée compte
    les participants actifs de sa réservation : un billet annulé après
    paiement n'est plus vendu. Sinon on somme les quantités.
    """
    lignes = uow.réservations.lignes_de_commande(achetable.id, STATUTS_VENDUS)
    if not achetable.crée_participants():
        return sum(ligne.quantité for ligne in lignes)

    return sum(
        len(uow.réservations.participants(ligne.réf_réservation, model.StatutBillet.ACTIF))
        for ligne in lignes
    )


def quantité_réservée(id_achetable: str, uow: AbstractUnitOfWork) -> int:
    """Unités bloquées par des réservations payées, en attente ou au panier."""
    lignes = uow.réservations.lignes_de_commande(id_achetable, STATUTS_RÉSERVÉS)
    return sum(ligne.quantité for ligne in lignes)


def places_restantes_événement(
    événement: Optional[model.Événement], uow: AbstractUnitOfWork
) -> int:
    """
    Places restantes dans la jauge commune de l'événement.

    Toutes les réservations des Achetable de l'événement consomment
    la jauge, y compris celles des Achetable à capacité propre.
    """
    if événement is None:
        return 0
    réservé = sum(
        quantité_réservée(achetable.id, uow)
        for achetable in uow.catalogue.liste_pour_événement(événement.id)
    )
    return max(événement.capacité - réservé, 0)


def places_restantes(
    achetable: model.Achetable,
    événement: Optional[model.Événement],
    uow: AbstractUnitOfWork,
) -> int:
    """
    Places restantes pour un Achetable.

    La capacité propre de l'Achetable est prioritaire ; une capacité
    héritée renvoie à la jauge de l'événement.
    """
    capacité = achetable.capacité
    if capacité.est_héritée:
        if événement is None:
            logger.warning(
                "%s hérite de la capacité de l'événement mais n'en a aucun", achetable
            )
        return places_restantes_événement(événement, uow)

    réservé = quantité_réservée(achetable.id, uow)
    logger.debug("%s : %d réservé(s) sur %d", achetable, réservé, capacité.valeur)
    return max(capacité.valeur - réservé, 0)


def peut_réserver(
    achetable: model.Achetable,
    événement: Optional[model.Événement],
    quantité: int,
    uow: AbstractUnitOfWork,
) -> bool:
    """
    Vérification à refaire par le tunnel de commande, dans la même
    transaction que l'insertion de la réservation.
    """
    if not achetable.quantité_autorisée(quantité):
        return False
    return quantité <= places_restantes(achetable, événement, uow)

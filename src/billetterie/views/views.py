"""
Views (lecture) pour le pattern CQRS.

Requêtes SQL directes, sans passer par le modèle de domaine,
pour les listes affichées telles quelles.
"""

from __future__ import annotations

from sqlalchemy import text

from billetterie.service_layer import unit_of_work


def achetables_de_l_événement(
    id_événement: str, uow: unit_of_work.AbstractUnitOfWork
) -> list[str]:
    """
    Identifiants des Achetable d'un événement, dans l'ordre d'affichage :
    ordre de tri croissant, puis date de mise en vente la plus récente.
    """
    with uow:
        results = uow.session.execute(
            text(
                "SELECT id FROM buyables WHERE event_id = :id_evenement"
                " ORDER BY sort ASC, available_from DESC"
            ),
            dict(id_evenement=id_événement),
        )
        return [r.id for r in results]


def événement_existe(id_événement: str, uow: unit_of_work.AbstractUnitOfWork) -> bool:
    with uow:
        result = uow.session.execute(
            text("SELECT 1 FROM events WHERE id = :id_evenement"),
            dict(id_evenement=id_événement),
        )
        return result.first() is not None

"""
Pattern Repository.

Deux repositories sont exposés au Unit of Work :
- le catalogue (Achetable et Événement), alimenté par l'outil d'édition ;
- les réservations, écrites par le tunnel de commande et seulement
  lues ici pour l'agrégation d'inventaire.

Les noms de méthodes du pattern (add, get) restent en anglais
car ce sont des conventions reconnues. Les méthodes spécifiques
au domaine sont en français.
"""

from __future__ import annotations

import abc
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from billetterie.domain import model


class AbstractCatalogue(abc.ABC):
    """
    Interface abstraite du catalogue.

    Template Method : add() vérifie les invariants de l'Achetable avant
    de déléguer à _add(), ce qui garantit qu'aucun enregistrement
    incohérent n'atteint la persistance.
    """

    def add(self, achetable: model.Achetable) -> None:
        achetable.valider()
        self._add(achetable)

    def add_événement(self, événement: model.Événement) -> None:
        if événement.capacité < 0:
            raise model.InvariantViolé(
                f"Événement {événement.id} : capacité négative ({événement.capacité})"
            )
        self._add_événement(événement)

    @abc.abstractmethod
    def _add(self, achetable: model.Achetable) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _add_événement(self, événement: model.Événement) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, id_achetable: str) -> model.Achetable | None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_événement(self, id_événement: str) -> model.Événement | None:
        raise NotImplementedError

    @abc.abstractmethod
    def liste_pour_événement(self, id_événement: str) -> list[model.Achetable]:
        """Tous les Achetable rattachés à l'événement, qu'ils soient en vente ou non."""
        raise NotImplementedError


class AbstractRéservations(abc.ABC):
    """
    Interface de lecture du magasin de réservations.

    add() n'existe que pour alimenter les tests et les jeux de données ;
    le calcul de disponibilité n'écrit jamais.
    """

    def lignes_de_commande(
        self,
        id_achetable: str,
        statuts: Iterable[model.StatutRéservation],
    ) -> list[model.LigneDeCommande]:
        """Lignes d'un Achetable dont la réservation a l'un des statuts donnés."""
        return self._lignes_de_commande(id_achetable, frozenset(statuts))

    def participants(
        self,
        réf_réservation: str,
        statut_billet: Optional[model.StatutBillet] = None,
    ) -> list[model.Participant]:
        """Participants d'une réservation, filtrés par statut de billet si demandé."""
        return self._participants(réf_réservation, statut_billet)

    @abc.abstractmethod
    def add(self, réservation: model.Réservation) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _lignes_de_commande(
        self,
        id_achetable: str,
        statuts: frozenset[model.StatutRéservation],
    ) -> list[model.LigneDeCommande]:
        raise NotImplementedError

    @abc.abstractmethod
    def _participants(
        self,
        réf_réservation: str,
        statut_billet: Optional[model.StatutBillet],
    ) -> list[model.Participant]:
        raise NotImplementedError


class SqlAlchemyCatalogue(AbstractCatalogue):
    """Implémentation concrète du catalogue avec SQLAlchemy."""

    def __init__(self, session: Session):
        self.session = session

    def _add(self, achetable: model.Achetable) -> None:
        self.session.add(achetable)

    def _add_événement(self, événement: model.Événement) -> None:
        self.session.add(événement)

    def get(self, id_achetable: str) -> model.Achetable | None:
        return (
            self.session.query(model.Achetable)
            .filter_by(id=id_achetable)
            .first()
        )

    def get_événement(self, id_événement: str) -> model.Événement | None:
        return (
            self.session.query(model.Événement)
            .filter_by(id=id_événement)
            .first()
        )

    def liste_pour_événement(self, id_événement: str) -> list[model.Achetable]:
        return (
            self.session.query(model.Achetable)
            .filter_by(id_événement=id_événement)
            .order_by(model.Achetable.ordre_tri)
            .all()
        )


class SqlAlchemyRéservations(AbstractRéservations):
    """Lecture des réservations avec SQLAlchemy, dans la session du Unit of Work."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, réservation: model.Réservation) -> None:
        self.session.add(réservation)

    def _lignes_de_commande(
        self,
        id_achetable: str,
        statuts: frozenset[model.StatutRéservation],
    ) -> list[model.LigneDeCommande]:
        if not statuts:
            return []
        return (
            self.session.query(model.LigneDeCommande)
            .join(
                model.Réservation,
                model.Réservation.référence == model.LigneDeCommande.réf_réservation,
            )
            .filter(model.LigneDeCommande.id_achetable == id_achetable)
            .filter(model.Réservation.statut.in_(list(statuts)))
            .all()
        )

    def _participants(
        self,
        réf_réservation: str,
        statut_billet: Optional[model.StatutBillet],
    ) -> list[model.Participant]:
        query = self.session.query(model.Participant).filter_by(
            réf_réservation=réf_réservation
        )
        if statut_billet is not None:
            query = query.filter_by(statut_billet=statut_billet)
        return query.all()

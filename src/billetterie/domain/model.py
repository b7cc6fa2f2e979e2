"""
Modèle de domaine de la billetterie.

Un Achetable est un article vendu dans le cadre d'un Événement
(billet d'entrée, goodies, parking...). Les Réservation et leurs
LigneDeCommande / Participant sont produites par le tunnel de commande :
le domaine ne fait que les lire pour calculer la disponibilité.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


class InvariantViolé(ValueError):
    """Levée quand un enregistrement du catalogue est incohérent."""
    pass


class StatutRéservation(enum.Enum):
    PANIER = "CART"
    EN_ATTENTE = "PENDING"
    PAYÉE = "PAID"
    ANNULÉE = "CANCELLED"
    EXPIRÉE = "EXPIRED"


class StatutBillet(enum.Enum):
    ACTIF = "Active"
    ANNULÉ = "Cancelled"


@dataclass(frozen=True)
class Capacité:
    """
    Value Object représentant la capacité d'un Achetable.

    Historiquement, une capacité de 0 signifiait "utiliser la capacité
    de l'événement". Ce cas est désormais une variante nommée
    (Capacité.héritée()) : une capacité propre vaut toujours au moins 1.
    """

    valeur: Optional[int] = None

    def __post_init__(self) -> None:
        if self.valeur is not None and self.valeur < 1:
            raise InvariantViolé(
                f"Capacité propre invalide : {self.valeur} (utiliser Capacité.héritée())"
            )

    @classmethod
    def héritée(cls) -> Capacité:
        return cls(valeur=None)

    @classmethod
    def propre(cls, valeur: int) -> Capacité:
        return cls(valeur=valeur)

    @classmethod
    def depuis_entier(cls, valeur: int) -> Capacité:
        """Convertit la représentation stockée (0 = héritée)."""
        if valeur < 0:
            raise InvariantViolé(f"Capacité négative : {valeur}")
        return cls.héritée() if valeur == 0 else cls.propre(valeur)

    @property
    def est_héritée(self) -> bool:
        return self.valeur is None

    def en_entier(self) -> int:
        return 0 if self.valeur is None else self.valeur


@dataclass(frozen=True)
class ParticipantÀCréer:
    """Brouillon de participant, matérialisé par le tunnel de commande."""

    id_achetable: str
    statut_billet: StatutBillet = StatutBillet.ACTIF


class Genre(enum.Enum):
    """
    Genres d'Achetable.

    La seule différence entre genres est la capacité à créer des
    participants : un BILLET produit un participant par unité vendue,
    un PRODUIT n'en produit aucun.
    """

    PRODUIT = "produit"
    BILLET = "billet"

    @property
    def crée_participants(self) -> bool:
        return self is Genre.BILLET

    def créer_participants(
        self, achetable: Achetable, quantité: int
    ) -> list[ParticipantÀCréer]:
        if not self.crée_participants:
            return []
        return [ParticipantÀCréer(id_achetable=achetable.id) for _ in range(quantité)]


class LigneDeCommande:
    """Une ligne d'une Réservation : une quantité d'un Achetable."""

    def __init__(self, id_achetable: str, quantité: int, réf_réservation: Optional[str] = None):
        self.id_achetable = id_achetable
        self.quantité = quantité
        self.réf_réservation = réf_réservation

    def __repr__(self) -> str:
        return f"<LigneDeCommande {self.id_achetable} x{self.quantité}>"


class Participant:
    def __init__(
        self,
        id_achetable: Optional[str],
        statut_billet: StatutBillet = StatutBillet.ACTIF,
        réf_réservation: Optional[str] = None,
    ):
        self.id_achetable = id_achetable
        self.statut_billet = statut_billet
        self.réf_réservation = réf_réservation

    def __repr__(self) -> str:
        return f"<Participant {self.id_achetable} {self.statut_billet.value}>"


class Réservation:
    """
    Réservation issue du tunnel de commande.

    Le domaine ne la modifie jamais ; elle n'existe ici que pour
    être lue par l'agrégation d'inventaire.
    """

    def __init__(
        self,
        référence: str,
        statut: StatutRéservation,
        lignes: Optional[list[LigneDeCommande]] = None,
        participants: Optional[list[Participant]] = None,
    ):
        self.référence = référence
        self.statut = statut
        self.lignes = lignes or []
        self.participants = participants or []
        for élément in [*self.lignes, *self.participants]:
            élément.réf_réservation = référence

    def __repr__(self) -> str:
        return f"<Réservation {self.référence} {self.statut.value}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Réservation):
            return NotImplemented
        return self.référence == other.référence

    def __hash__(self) -> int:
        return hash(self.référence)


class Événement:
    """L'événement auquel sont rattachés les Achetable."""

    def __init__(
        self,
        id: str,
        titre: str,
        date_début: Optional[datetime] = None,
        capacité: int = 0,
    ):
        self.id = id
        self.titre = titre
        self.date_début = date_début
        self.capacité = capacité

    def __repr__(self) -> str:
        return f"<Événement {self.id}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Événement):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Achetable:
    """
    Entité représentant un article vendable d'un événement.

    L'égalité est basée sur l'identifiant. La capacité est stockée sous
    forme d'entier (_capacité, 0 = héritée) et exposée sous forme de
    Capacité.
    """

    def __init__(
        self,
        id: str,
        titre: str,
        prix: Decimal,
        id_événement: Optional[str] = None,
        genre: Genre = Genre.PRODUIT,
        mise_en_vente: bool = True,
        disponible_du: Optional[datetime] = None,
        disponible_jusqu_au: Optional[datetime] = None,
        commande_min: int = 1,
        commande_max: int = 5,
        capacité: Optional[Capacité] = None,
        ordre_tri: int = 0,
    ):
        self.id = id
        self.titre = titre
        self.prix = prix
        self.id_événement = id_événement
        self.genre = genre
        self.mise_en_vente = mise_en_vente
        self.disponible_du = disponible_du
        self.disponible_jusqu_au = disponible_jusqu_au
        self.commande_min = commande_min
        self.commande_max = commande_max
        self._capacité = (capacité or Capacité.héritée()).en_entier()
        self.ordre_tri = ordre_tri

    def __repr__(self) -> str:
        return f"<Achetable {self.id}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Achetable):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def capacité(self) -> Capacité:
        return Capacité.depuis_entier(self._capacité)

    @capacité.setter
    def capacité(self, capacité: Capacité) -> None:
        self._capacité = capacité.en_entier()

    def valider(self) -> None:
        """Vérifie les invariants du catalogue, à l'enregistrement."""
        erreurs = []
        if self.prix < 0:
            erreurs.append(f"prix négatif ({self.prix})")
        if self.commande_min < 1:
            erreurs.append(f"commande_min doit valoir au moins 1 ({self.commande_min})")
        if self.commande_max < self.commande_min:
            erreurs.append(
                f"commande_max ({self.commande_max}) inférieur à commande_min ({self.commande_min})"
            )
        if self._capacité < 0:
            erreurs.append(f"capacité négative ({self._capacité})")
        if erreurs:
            raise InvariantViolé(f"Achetable {self.id} invalide : " + ", ".join(erreurs))

    def quantité_autorisée(self, quantité: int) -> bool:
        """Bornes inclusives de quantité pour une seule commande."""
        return self.commande_min <= quantité <= self.commande_max

    def crée_participants(self) -> bool:
        return self.genre.crée_participants

    def créer_participants(self, quantité: int) -> list[ParticipantÀCréer]:
        return self.genre.créer_participants(self, quantité)

"""
Mapping ORM avec SQLAlchemy (classical mapping).

On définit les tables séparément, puis on mappe les classes
du domaine sur ces tables. Le modèle de domaine reste ignorant
de la persistance.

Les colonnes SQL sont en anglais (schéma partagé avec le tunnel de
commande), le mapping les traduit vers les attributs du domaine.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)
from sqlalchemy.orm import registry, relationship

from billetterie.domain import model

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

# --- Définition des tables ---

events = Table(
    "events",
    metadata,
    Column("id", String(255), primary_key=True),
    Column("title", String(255)),
    Column("start_date", DateTime, nullable=True),
    Column("capacity", Integer, nullable=False, server_default="0"),
)

buyables = Table(
    "buyables",
    metadata,
    Column("id", String(255), primary_key=True),
    Column("event_id", String(255), ForeignKey("events.id"), nullable=True),
    Column("kind", Enum(model.Genre, name="buyable_kind"), nullable=False),
    Column("title", String(255)),
    Column("price", Numeric(10, 2), nullable=False),
    Column("is_available", Boolean, nullable=False, server_default="1"),
    Column("available_from", DateTime, nullable=True),
    Column("available_till", DateTime, nullable=True),
    Column("order_min", Integer, nullable=False, server_default="1"),
    Column("order_max", Integer, nullable=False, server_default="5"),
    # 0 = capacité héritée de l'événement
    Column("capacity", Integer, nullable=False, server_default="0"),
    Column("sort", Integer, nullable=False, server_default="0"),
)

reservations = Table(
    "reservations",
    metadata,
    Column("reference", String(255), primary_key=True),
    Column("status", Enum(model.StatutRéservation, name="reservation_status"), nullable=False),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("reservation_ref", String(255), ForeignKey("reservations.reference")),
    Column("buyable_id", String(255), index=True),
    Column("amount", Integer, nullable=False),
)

attendees = Table(
    "attendees",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("reservation_ref", String(255), ForeignKey("reservations.reference")),
    Column("buyable_id", String(255), nullable=True),
    Column("ticket_status", Enum(model.StatutBillet, name="ticket_status"), nullable=False),
)


def start_mappers() -> None:
    """
    Configure le mapping entre les classes du domaine et les tables SQL.

    Sans effet si le mapping est déjà en place (l'entrypoint Flask et
    la configuration des tests le démarrent tous les deux).
    """
    if mapper_registry.mappers:
        return

    mapper_registry.map_imperatively(
        model.Événement,
        events,
        properties={
            "titre": events.c.title,
            "date_début": events.c.start_date,
            "capacité": events.c.capacity,
        },
    )
    mapper_registry.map_imperatively(
        model.Achetable,
        buyables,
        properties={
            "id_événement": buyables.c.event_id,
            "genre": buyables.c.kind,
            "titre": buyables.c.title,
            "prix": buyables.c.price,
            "mise_en_vente": buyables.c.is_available,
            "disponible_du": buyables.c.available_from,
            "disponible_jusqu_au": buyables.c.available_till,
            "commande_min": buyables.c.order_min,
            "commande_max": buyables.c.order_max,
            "_capacité": buyables.c.capacity,
            "ordre_tri": buyables.c.sort,
        },
    )
    lignes_mapper = mapper_registry.map_imperatively(
        model.LigneDeCommande,
        order_items,
        properties={
            "id_achetable": order_items.c.buyable_id,
            "quantité": order_items.c.amount,
            "réf_réservation": order_items.c.reservation_ref,
        },
    )
    participants_mapper = mapper_registry.map_imperatively(
        model.Participant,
        attendees,
        properties={
            "id_achetable": attendees.c.buyable_id,
            "statut_billet": attendees.c.ticket_status,
            "réf_réservation": attendees.c.reservation_ref,
        },
    )
    mapper_registry.map_imperatively(
        model.Réservation,
        reservations,
        properties={
            "référence": reservations.c.reference,
            "statut": reservations.c.status,
            "lignes": relationship(lignes_mapper),
            "participants": relationship(participants_mapper),
        },
    )

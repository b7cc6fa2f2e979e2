"""
Tests d'intégration des repositories avec SQLite en mémoire.

Ces tests vérifient que le mapping ORM fonctionne correctement :
- Sauvegarder et recharger un Achetable avec sa capacité
- Filtrer les lignes de commande par statut de réservation
- Filtrer les participants par statut de billet
- Les calculs d'inventaire dans un vrai Unit of Work
"""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import text

from billetterie.adapters import repository
from billetterie.domain.model import (
    Achetable,
    Capacité,
    Genre,
    InvariantViolé,
    LigneDeCommande,
    Participant,
    Réservation,
    StatutBillet,
    StatutRéservation,
    Événement,
)
from billetterie.service_layer import inventaire, unit_of_work


DÉBUT_ÉVÉNEMENT = datetime(2024, 6, 1, 19, 0)


class TestSqlAlchemyCatalogue:
    def test_sauvegarder_et_recharger_un_achetable(self, session_factory):
        session = session_factory()
        catalogue = repository.SqlAlchemyCatalogue(session)
        catalogue.add_événement(Événement("festival", "Festival", DÉBUT_ÉVÉNEMENT, 300))
        catalogue.add(Achetable(
            "entrée", "Entrée", Decimal("25.00"), "festival",
            genre=Genre.BILLET,
            capacité=Capacité.propre(120),
            disponible_du=datetime(2024, 3, 1, 10, 0),
            commande_max=8,
        ))
        session.commit()
        session.close()

        session = session_factory()
        rechargé = repository.SqlAlchemyCatalogue(session).get("entrée")
        assert rechargé is not None
        assert rechargé.titre == "Entrée"
        assert rechargé.prix == Decimal("25.00")
        assert rechargé.genre is Genre.BILLET
        assert rechargé.capacité == Capacité.propre(120)
        assert rechargé.disponible_du == datetime(2024, 3, 1, 10, 0)
        assert rechargé.disponible_jusqu_au is None
        assert rechargé.commande_min == 1
        assert rechargé.commande_max == 8
        assert rechargé.mise_en_vente

    def test_capacité_héritée_stockée_à_zéro(self, session_factory):
        session = session_factory()
        repository.SqlAlchemyCatalogue(session).add(
            Achetable("parking", "Parking", Decimal("5.00"))
        )
        session.commit()

        (capacité,) = session.execute(
            text("SELECT capacity FROM buyables WHERE id = 'parking'")
        ).one()
        assert capacité == 0
        assert repository.SqlAlchemyCatalogue(session).get("parking").capacité.est_héritée

    def test_add_refuse_un_achetable_invalide(self, session_factory):
        session = session_factory()
        catalogue = repository.SqlAlchemyCatalogue(session)

        with pytest.raises(InvariantViolé):
            catalogue.add(Achetable("parking", "Parking", Decimal("5.00"), commande_max=0))

    def test_liste_pour_événement_triée(self, session_factory):
        session = session_factory()
        catalogue = repository.SqlAlchemyCatalogue(session)
        catalogue.add_événement(Événement("festival", "Festival", DÉBUT_ÉVÉNEMENT, 300))
        catalogue.add(Achetable("vip", "VIP", Decimal("90"), "festival", ordre_tri=2))
        catalogue.add(Achetable("entrée", "Entrée", Decimal("25"), "festival", ordre_tri=1))
        catalogue.add(Achetable("autre", "Autre", Decimal("10"), "autre-événement"))
        session.commit()

        ids = [a.id for a in catalogue.liste_pour_événement("festival")]
        assert ids == ["entrée", "vip"]

    def test_get_retourne_none_si_inexistant(self, session_factory):
        session = session_factory()
        catalogue = repository.SqlAlchemyCatalogue(session)

        assert catalogue.get("INEXISTANT") is None
        assert catalogue.get_événement("INEXISTANT") is None


class TestSqlAlchemyRéservations:
    def test_lignes_filtrées_par_statut(self, session_factory):
        session = session_factory()
        réservations = repository.SqlAlchemyRéservations(session)
        réservations.add(Réservation("r1", StatutRéservation.PAYÉE, [LigneDeCommande("entrée", 2)]))
        réservations.add(Réservation("r2", StatutRéservation.ANNULÉE, [LigneDeCommande("entrée", 5)]))
        réservations.add(Réservation("r3", StatutRéservation.PANIER, [
            LigneDeCommande("entrée", 1),
            LigneDeCommande("parking", 1),
        ]))
        session.commit()

        lignes = réservations.lignes_de_commande(
            "entrée", [StatutRéservation.PAYÉE, StatutRéservation.PANIER]
        )

        assert sorted((l.réf_réservation, l.quantité) for l in lignes) == [("r1", 2), ("r3", 1)]

    def test_aucun_statut_aucune_ligne(self, session_factory):
        session = session_factory()
        réservations = repository.SqlAlchemyRéservations(session)
        réservations.add(Réservation("r1", StatutRéservation.PAYÉE, [LigneDeCommande("entrée", 2)]))
        session.commit()

        assert réservations.lignes_de_commande("entrée", []) == []

    def test_participants_filtrés_par_statut_de_billet(self, session_factory):
        session = session_factory()
        réservations = repository.SqlAlchemyRéservations(session)
        réservations.add(Réservation(
            "r1",
            StatutRéservation.PAYÉE,
            [LigneDeCommande("entrée", 2)],
            [Participant("entrée"), Participant("entrée", StatutBillet.ANNULÉ)],
        ))
        session.commit()

        assert len(réservations.participants("r1")) == 2
        actifs = réservations.participants("r1", StatutBillet.ACTIF)
        assert [p.statut_billet for p in actifs] == [StatutBillet.ACTIF]


class TestInventaireSqlAlchemy:
    def test_places_restantes_dans_un_unit_of_work(self, session_factory):
        uow = unit_of_work.SqlAlchemyUnitOfWork(session_factory)
        with uow:
            uow.catalogue.add_événement(Événement("festival", "Festival", DÉBUT_ÉVÉNEMENT, 50))
            uow.catalogue.add(Achetable(
                "entrée", "Entrée", Decimal("25"), "festival",
                genre=Genre.BILLET, capacité=Capacité.propre(10),
            ))
            uow.catalogue.add(Achetable("parking", "Parking", Decimal("5"), "festival"))
            for réf in ("r1", "r2", "r3"):
                uow.réservations.add(Réservation(
                    réf,
                    StatutRéservation.PAYÉE,
                    [LigneDeCommande("entrée", 2)],
                    [Participant("entrée"), Participant("entrée")],
                ))
            uow.réservations.add(
                Réservation("r4", StatutRéservation.PANIER, [LigneDeCommande("parking", 3)])
            )
            uow.commit()

        with uow:
            entrée = uow.catalogue.get("entrée")
            parking = uow.catalogue.get("parking")
            festival = uow.catalogue.get_événement("festival")

            assert inventaire.quantité_vendue(entrée, uow) == 6
            assert inventaire.places_restantes(entrée, festival, uow) == 4
            assert inventaire.places_restantes(parking, festival, uow) == 41

    def test_rollback_sans_commit(self, session_factory):
        uow = unit_of_work.SqlAlchemyUnitOfWork(session_factory)
        with uow:
            uow.catalogue.add(Achetable("parking", "Parking", Decimal("5")))

        with uow:
            assert uow.catalogue.get("parking") is None

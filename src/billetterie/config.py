"""
Configuration lue depuis l'environnement.

Les seuils de vente sont des expressions relatives ("-3 weeks",
"-12 hours"...) interprétées une seule fois au démarrage : une
expression invalide empêche l'application de démarrer.
"""

import os

from billetterie.domain import fenetre


def get_database_uri() -> str:
    return os.environ.get("DATABASE_URI", "sqlite:///billetterie.db")


def get_seuils_de_vente() -> fenetre.SeuilsDeVente:
    return fenetre.SeuilsDeVente.depuis_expressions(
        début=os.environ.get("SEUIL_DEBUT_VENTE", fenetre.SEUIL_DÉBUT_PAR_DÉFAUT),
        fin=os.environ.get("SEUIL_FIN_VENTE", fenetre.SEUIL_FIN_PAR_DÉFAUT),
    )

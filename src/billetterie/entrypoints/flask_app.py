"""
Point d'entrée Flask.

L'API Flask est un thin adapter en lecture seule : elle convertit
les requêtes HTTP en appels aux handlers et sérialise les résultats.

Chaque route accepte un paramètre optionnel `maintenant` (date ISO)
pour évaluer la disponibilité à un autre instant que l'instant présent.
"""

from __future__ import annotations

from datetime import datetime

from flask import Flask, jsonify, request

from billetterie.service_layer import bootstrap, handlers


app = Flask(__name__)
application = bootstrap.bootstrap()


class MaintenantInvalide(ValueError):
    pass


def _maintenant() -> datetime:
    valeur = request.args.get("maintenant")
    if valeur is None:
        return datetime.now()
    try:
        instant = datetime.fromisoformat(valeur)
    except ValueError:
        raise MaintenantInvalide(f"Date invalide : {valeur}") from None
    if instant.tzinfo is not None:
        # les dates stockées sont naïves, en heure locale
        instant = instant.astimezone().replace(tzinfo=None)
    return instant


@app.errorhandler(handlers.AchetableInconnu)
def achetable_inconnu(e: handlers.AchetableInconnu):
    return jsonify({"message": str(e)}), 404


@app.errorhandler(MaintenantInvalide)
def maintenant_invalide(e: MaintenantInvalide):
    return jsonify({"message": str(e)}), 400


@app.route("/achetables/<id_achetable>", methods=["GET"])
def achetable_endpoint(id_achetable: str):
    """
    GET /achetables/<id_achetable>

    Retourne le résumé de l'Achetable : fenêtre de vente effective,
    disponibilité, places restantes et statut des ventes.
    """
    résumé = handlers.résumer(
        id_achetable, _maintenant(), application.uow, application.seuils
    )
    return jsonify(résumé), 200


@app.route("/achetables/<id_achetable>/disponibilite", methods=["GET"])
def disponibilité_endpoint(id_achetable: str):
    disponibilité = handlers.consulter_disponibilité(
        id_achetable, _maintenant(), application.uow, application.seuils
    )
    return jsonify(disponibilité), 200


@app.route("/evenements/<id_evenement>/achetables", methods=["GET"])
def achetables_événement_endpoint(id_evenement: str):
    """
    GET /evenements/<id_evenement>/achetables

    Résumés des Achetable de l'événement, dans l'ordre d'affichage.
    """
    from billetterie.views import views

    if not views.événement_existe(id_evenement, application.uow):
        return jsonify({"message": f"Événement inconnu : {id_evenement}"}), 404

    maintenant = _maintenant()
    résumés = [
        handlers.résumer(id_achetable, maintenant, application.uow, application.seuils)
        for id_achetable in views.achetables_de_l_événement(id_evenement, application.uow)
    ]
    return jsonify(résumés), 200

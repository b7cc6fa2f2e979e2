"""
Fenêtre de vente d'un Achetable.

Un Achetable peut déclarer explicitement ses dates de mise en vente.
À défaut, elles sont déduites de la date de début de l'événement,
décalée par deux seuils relatifs (par défaut "-3 weeks" et "-12 hours").

Les seuils s'écrivent comme des dates relatives ("-1 month", "+2 days",
"3 weeks ago"...) et sont appliqués avec relativedelta : "-1 month"
recule d'un mois calendaire, ce qui n'est pas la même chose que "-30 days".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from billetterie.domain import model

SEUIL_DÉBUT_PAR_DÉFAUT = "-3 weeks"
SEUIL_FIN_PAR_DÉFAUT = "-12 hours"

# Date sur laquelle chaque seuil est essayé une fois au démarrage.
_INSTANT_DE_RÉFÉRENCE = datetime(2000, 1, 1)


class ConfigurationInvalide(ValueError):
    """Levée quand une expression de seuil ne peut pas être interprétée."""
    pass


# unité -> (argument de relativedelta, multiplicateur)
_UNITÉS: dict[str, tuple[str, int]] = {
    "sec": ("seconds", 1),
    "second": ("seconds", 1),
    "min": ("minutes", 1),
    "minute": ("minutes", 1),
    "hour": ("hours", 1),
    "day": ("days", 1),
    "week": ("weeks", 1),
    "fortnight": ("weeks", 2),
    "month": ("months", 1),
    "year": ("years", 1),
}

_TERME = re.compile(r"\s*([+-]?)\s*(\d+)\s*([a-z]+)\s*")


def _normaliser_unité(unité: str) -> tuple[str, int]:
    if unité in _UNITÉS:
        return _UNITÉS[unité]
    if unité.endswith("s") and unité[:-1] in _UNITÉS:
        return _UNITÉS[unité[:-1]]
    raise KeyError(unité)


@dataclass(frozen=True)
class DécalageRelatif:
    """Décalage calendaire signé, construit depuis une expression relative."""

    expression: str
    delta: relativedelta = field(compare=False)

    @classmethod
    def depuis_expression(cls, expression: str) -> DécalageRelatif:
        texte = expression.strip().lower()
        négatif = False
        if texte.endswith(" ago"):
            texte = texte[: -len(" ago")]
            négatif = True
        if not texte:
            raise ConfigurationInvalide(f"Seuil vide : {expression!r}")

        composantes: dict[str, int] = {}
        position = 0
        while position < len(texte):
            trouvé = _TERME.match(texte, position)
            if trouvé is None:
                raise ConfigurationInvalide(f"Seuil illisible : {expression!r}")
            signe, nombre, unité = trouvé.groups()
            try:
                argument, multiplicateur = _normaliser_unité(unité)
            except KeyError:
                raise ConfigurationInvalide(
                    f"Unité inconnue {unité!r} dans le seuil {expression!r}"
                ) from None
            valeur = int(nombre) * multiplicateur
            if signe == "-":
                valeur = -valeur
            composantes[argument] = composantes.get(argument, 0) + valeur
            position = trouvé.end()

        if négatif:
            composantes = {clé: -valeur for clé, valeur in composantes.items()}
        try:
            delta = relativedelta(**composantes)
            _INSTANT_DE_RÉFÉRENCE + delta
        except (OverflowError, ValueError):
            raise ConfigurationInvalide(
                f"Seuil hors des dates représentables : {expression!r}"
            ) from None
        return cls(expression=expression, delta=delta)

    def appliquer(self, instant: datetime) -> datetime:
        return instant + self.delta


@dataclass(frozen=True)
class SeuilsDeVente:
    """Décalages appliqués à la date de début de l'événement."""

    début: DécalageRelatif
    fin: DécalageRelatif

    @classmethod
    def depuis_expressions(
        cls,
        début: str = SEUIL_DÉBUT_PAR_DÉFAUT,
        fin: str = SEUIL_FIN_PAR_DÉFAUT,
    ) -> SeuilsDeVente:
        return cls(
            début=DécalageRelatif.depuis_expression(début),
            fin=DécalageRelatif.depuis_expression(fin),
        )


@dataclass(frozen=True)
class FenêtreDeVente:
    début: Optional[datetime]
    fin: Optional[datetime]

    @property
    def est_déclarée(self) -> bool:
        """Faux quand aucune borne n'est connue ni déductible."""
        return self.début is not None or self.fin is not None

    def contient(self, instant: datetime) -> bool:
        """Bornes incluses ; une borne manquante ferme la fenêtre."""
        if self.début is None or self.fin is None:
            return False
        return self.début <= instant <= self.fin


def résoudre_fenêtre(
    achetable: model.Achetable,
    événement: Optional[model.Événement],
    seuils: SeuilsDeVente,
) -> FenêtreDeVente:
    """
    Calcule la fenêtre de vente effective d'un Achetable.

    Les dates explicites de l'Achetable l'emportent ; sinon on décale
    la date de début de l'événement. Sans l'une ni l'autre, la borne
    reste à None.
    """
    date_début_événement = événement.date_début if événement is not None else None

    début = achetable.disponible_du
    if début is None and date_début_événement is not None:
        début = seuils.début.appliquer(date_début_événement)

    fin = achetable.disponible_jusqu_au
    if fin is None and date_début_événement is not None:
        fin = seuils.fin.appliquer(date_début_événement)

    return FenêtreDeVente(début=début, fin=fin)

# tutor/extract.py
"""
Extraction tolérante du JSON renvoyé par le modèle.

La sortie LLM est non fiable (prose autour, fences markdown, troncature) :
`extract_json` essaie successivement plusieurs stratégies et renvoie `None`
si aucune n'aboutit. Ne lève jamais.
"""
from __future__ import annotations
import json
import re
from typing import Any, Optional

from app.core.logging import get_logger

logger = get_logger(__name__)

# enveloppe externe seulement : la fence ouvrante est suivie d'un vrai saut de ligne
_FENCE_WRAPPER = re.compile(r"```[\w-]*[ \t]*\r?\n(.*)```", re.S)
_GREEDY_OBJECT = re.compile(r"\{.*\}", re.S)


def _loads(s: str) -> Any:
    """json.loads ; lève ValueError pour tout échec (RecursionError inclus)."""
    try:
        return json.loads(s)
    except RecursionError as e:
        raise ValueError("payload nested too deeply") from e


def strip_code_fences(text: str) -> str:
    """
    Contenu du bloc ```lang ... ``` qui enveloppe la réponse, puis trim.
    Seule l'enveloppe externe est retirée : une fence à l'intérieur d'une
    chaîne JSON (code, markdown) est conservée telle quelle.
    """
    m = _FENCE_WRAPPER.search(text)
    return (m.group(1) if m else text).strip()


def find_balanced_object(text: str) -> Optional[str]:
    """
    Renvoie la sous-chaîne du premier objet `{...}` équilibré.
    Scan sensible aux chaînes : dans une chaîne, `\\` neutralise le caractère
    suivant et un `"` non échappé ferme la chaîne ; les accolades ne comptent
    qu'en dehors des chaînes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    # tronqué : jamais revenu à 0
    return None


def extract_json(text: Any) -> Optional[Any]:
    """
    Texte brut du modèle -> valeur JSON, ou None si rien n'est récupérable.

    Ordre strict :
      1) parse direct ;
      2) contenu de l'enveloppe markdown ```json ... ``` ;
      3) premier objet équilibré (scan sensible aux chaînes) ;
      4) dernier recours : regex gloutonne `{...}` la plus externe.
    Les étapes 3 et 4 portent sur le contenu de l'enveloppe puis sur le texte
    d'origine : le texte n'est jamais réécrit.
    """
    if not isinstance(text, str) or not text.strip():
        return None

    # 1) tentative directe
    try:
        return _loads(text)
    except ValueError:
        pass

    # 2) enveloppe markdown
    inner = strip_code_fences(text)
    try:
        return _loads(inner)
    except ValueError:
        logger.debug("extract_json: strict parse failed, scanning for braces")

    sources = [inner] if inner == text else [inner, text]

    # 3) objet équilibré
    for src in sources:
        candidate = find_balanced_object(src)
        if candidate is None:
            continue
        try:
            return _loads(candidate)
        except ValueError as e:
            logger.debug("extract_json: balanced candidate did not parse (%s)", e)

    # 4) regex gloutonne
    for src in sources:
        m = _GREEDY_OBJECT.search(src)
        if not m:
            continue
        try:
            return _loads(m.group(0))
        except ValueError:
            pass

    logger.warning("extract_json: unparseable response (%d chars)", len(text))
    return None

# graph_based/layout/errors.py
from tutor.errors import TutorError


class LayoutError(TutorError):
    """Usage invalide du moteur de layout (viewport nul, drag concurrent, nœud inconnu)."""

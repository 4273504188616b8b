# tutor/errors.py
# Erreurs métier : l'extraction/construction ne lève jamais, seules ces erreurs remontent aux routes.

class TutorError(Exception): ...

class AnalysisFailed(TutorError):
    """Aucune analyse exploitable (entrée vide, ou réponse du modèle non parsable)."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text

class ProviderUnavailable(TutorError):
    """Provider LLM non configuré ou injoignable."""

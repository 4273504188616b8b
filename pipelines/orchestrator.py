# pipelines/orchestrator.py
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from app.core.logging import get_logger, timed_step

logger = get_logger(__name__)

State = Dict[str, Any]


@dataclass
class Step:
    name: str
    run: Callable[[State], State]   # in/out dict (state)


class Orchestrator:
    """Enchaîne des étapes nommées sur un état partagé (dict), dans l'ordre."""

    def __init__(self, steps: List[Step]):
        self.steps = steps

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.steps]

    def execute(self, state: State) -> State:
        for s in self.steps:
            with timed_step(logger, s.name):
                state = s.run(state)
        return state

# /api/analysis/layout → levels -> layout -> fit -> shapes (cf. pipelines/render.py)

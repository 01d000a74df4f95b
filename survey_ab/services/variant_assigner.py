# services/variant_assigner.py
import logging
import threading
from typing import Dict, Iterable, List

from survey_ab.core.exceptions import ConfigurationError, NotFoundError
from survey_ab.models.schemas.experiment import Experiment

logger = logging.getLogger(__name__)


class AssignmentCursor:
    """Position of the next variant to hand out for one experiment."""

    def __init__(self, variant_count: int):
        if variant_count < 1:
            raise ConfigurationError("Experiment has no variants to assign.")
        self.variant_count = variant_count
        self.next_index = 0

    def advance(self) -> int:
        """Returns the current index and moves the cursor one step, wrapping around."""
        index = self.next_index
        self.next_index = (index + 1) % self.variant_count
        return index


class VariantAssigner:
    """
    Counterbalancing engine: hands out each experiment's variants in strict
    round-robin order.

    The cursors are process-wide state owned by this object. Reading and
    advancing a cursor happens under one lock and without any I/O, so
    concurrent cold requests always get consecutive picks.
    """

    def __init__(self, experiments: Iterable[Experiment]):
        self._lock = threading.Lock()
        self._experiments: Dict[str, Experiment] = {}
        self._cursors: Dict[str, AssignmentCursor] = {}
        self._misconfigured: set[str] = set()

        for experiment in experiments:
            try:
                self.register(experiment)
            except ConfigurationError as e:
                # Keep serving the other experiments; this one stays disabled
                logger.error("Experiment %r disabled: %s", experiment.name, e.message)
                self._misconfigured.add(experiment.name)

    def register(self, experiment: Experiment) -> None:
        cursor = AssignmentCursor(len(experiment.variants))
        with self._lock:
            self._experiments[experiment.name] = experiment
            self._cursors[experiment.name] = cursor
            self._misconfigured.discard(experiment.name)

    def get_experiment(self, experiment_name: str) -> Experiment:
        if experiment_name in self._misconfigured:
            raise ConfigurationError(f"Experiment {experiment_name} has no variants.")
        try:
            return self._experiments[experiment_name]
        except KeyError:
            raise NotFoundError(f"Experiment {experiment_name} not found.") from None

    def variants(self, experiment_name: str) -> List[str]:
        return list(self.get_experiment(experiment_name).variants)

    def is_known_variant(self, experiment_name: str, variant: str) -> bool:
        return variant in self.get_experiment(experiment_name).variants

    def cursor(self, experiment_name: str) -> int:
        """Index of the variant the next pick will return."""
        self.get_experiment(experiment_name)
        with self._lock:
            return self._cursors[experiment_name].next_index

    def pick_next(self, experiment_name: str) -> str:
        experiment = self.get_experiment(experiment_name)
        with self._lock:
            index = self._cursors[experiment_name].advance()
        return experiment.variants[index]

    def reset(self) -> None:
        """Rewinds every cursor to the first variant."""
        with self._lock:
            for cursor in self._cursors.values():
                cursor.next_index = 0

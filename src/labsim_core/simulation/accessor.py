# src/labsim_core/simulation/accessor.py
"""
Read-only access to a session's current results, for chart renderers and
export tooling.
"""
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import numpy as np

from ..data_structures import Sample
from .results import SweepCurve

if TYPE_CHECKING:
    from .engine import LabSession

logger = logging.getLogger(__name__)


class LabAccessor:
    """
    Pull-model view of a `LabSession`.

    Every call reads the session's current scenario instance, so an accessor
    obtained before a scenario switch reports the new scenario afterwards. The
    accessor never mutates the session.
    """

    def __init__(self, session: "LabSession"):
        self._session = session

    @property
    def scenario_id(self) -> str:
        return self._session.scenario_id

    @property
    def mode(self) -> str:
        return self._session.mode

    def latest(self) -> Optional[Sample]:
        return self._session.instance.history.latest()

    def history(self) -> List[Sample]:
        return self._session.instance.history.snapshot()

    def series(self, field: str) -> np.ndarray:
        return self._session.instance.history.series(field)

    def sweep_curve(self) -> SweepCurve:
        """The current sweep curve; empty when no sweep is running."""
        instance = self._session.instance
        if instance.sweep is None:
            return SweepCurve(param="", y_field="")
        return instance.sweep.curve()

    def csv_columns(self) -> List[str]:
        """The stable export column list for the active scenario."""
        return self._session.scenario.csv_columns

    def csv_rows(self) -> List[Dict[str, Any]]:
        """
        The rolling history projected onto `csv_columns()`. A column the sample
        does not carry is exported as an empty string.
        """
        columns = self.csv_columns()
        return [{column: sample.get(column, "") for column in columns} for sample in self.history()]

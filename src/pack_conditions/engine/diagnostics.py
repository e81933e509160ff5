"""Diagnostics recorded when evaluation produces the ERROR sentinel."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pack_conditions.core.errors import ConditionsError, error_from_code


class EvaluationDiagnostic(BaseModel):
    """Why an evaluation pass yielded ``ERROR``.

    ``code`` is one of the ``PC-E*`` codes from
    :mod:`pack_conditions.core.errors`; :meth:`to_error` turns the
    diagnostic back into the matching exception.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    condition_id: str | None = None

    def to_error(self) -> ConditionsError:
        error = error_from_code(self.code, self.message)
        if self.condition_id is not None:
            error.details["condition_id"] = self.condition_id
        return error

from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level of the `planner` logger tree.

    Notes:
    - stdlib logging only; uvicorn already installs handlers.
    - `PLANNER_LOG_LEVEL=DEBUG` surfaces access denials (actor id, resource kind and id).
      Token material and keys are never logged at any level.
    """

    normalized = level.upper()
    logging.getLogger("planner").setLevel(normalized)
    logging.getLogger("planner").propagate = True

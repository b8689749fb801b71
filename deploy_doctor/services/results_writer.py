"""
Results Writer
==============
Persists deployment log snapshots and serializes monitor results to JSON.
"""
import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from deploy_doctor.models.monitor_result import MonitorResult

logger = logging.getLogger(__name__)


def format_stamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp safe for file names (':' replaced by '-')."""
    moment = moment or datetime.now(timezone.utc)
    return moment.isoformat().replace(":", "-")


class ResultsWriter:
    """
    Service responsible for writing the artifacts of a deployment watch:
    the raw log snapshot and the final results JSON.
    """

    @staticmethod
    def new_log_path(output_dir: str, prefix: str = "deploy-log") -> str:
        return os.path.join(output_dir, f"{prefix}-{format_stamp()}.txt")

    @staticmethod
    def write_log(text: str, log_path: str) -> str:
        """Overwrite ``log_path`` with ``text``. Creates parent directories."""
        parent = os.path.dirname(log_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(log_path, "w", encoding="utf-8") as f:
            f.write(text)
        return log_path

    @staticmethod
    def write_results(result: MonitorResult, output_path: str = "results.json") -> bool:
        """
        Write ``result`` as camelCase JSON.

        Returns False (and logs) instead of raising on failure.
        """
        try:
            abs_output = os.path.abspath(output_path)
            os.makedirs(os.path.dirname(abs_output), exist_ok=True)
            logger.info("Writing monitor results to %s", abs_output)

            with open(abs_output, "w", encoding="utf-8") as f:
                json.dump(result.model_dump(by_alias=True), f, indent=2, ensure_ascii=False)

            return True

        except Exception as e:
            logger.error("Failed to write results JSON: %s", e, exc_info=True)
            return False

from __future__ import annotations

CHECK_RUN = "conformctl.check-run.v1"
SETTINGS = "conformctl.settings.v1"
ERROR = "conformctl.error.v1"

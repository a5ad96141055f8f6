from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from choromap.config.model import GlobalConfig
from choromap.core.data_controller import DataController
from choromap.views.map_view import MapChart


@dataclass
class AppConfig:
    config_root: Path
    global_config: GlobalConfig
    data_controller: Optional[DataController] = None
    charts: List[MapChart] = field(default_factory=list)

    def validate(self) -> None:
        """Ensure the shared controller and charts exist before the app starts."""
        if self.data_controller is None:
            raise RuntimeError("AppConfig.data_controller must be initialized.")
        if not self.charts:
            raise RuntimeError("AppConfig.charts must contain at least one chart.")

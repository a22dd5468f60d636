from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    package_root: Path
    data_dir: Path
    schema_dir: Path
    userdata_dir: Path

    @property
    def settings_file(self) -> Path:
        return self.userdata_dir / "settings.json"


def get_paths(userdata_dir: Path | None = None) -> Paths:
    # src/rpsduel/paths.py -> parent: rpsduel
    package_root = Path(__file__).resolve().parent
    data_dir = package_root / "data"
    schema_dir = data_dir / "schemas"
    if userdata_dir is None:
        env = os.getenv("RPSDUEL_HOME")
        userdata_dir = Path(env) if env else Path.home() / ".rpsduel"
    return Paths(
        package_root=package_root,
        data_dir=data_dir,
        schema_dir=schema_dir,
        userdata_dir=userdata_dir,
    )

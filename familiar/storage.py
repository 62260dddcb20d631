"""JSON persistence, pet discovery and the summon/dismiss/banish file lifecycle."""
import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from familiar import templates
from familiar.errors import PetNotFoundError, StorageError
from familiar.models import PetConfig, PetState
from familiar.pet import Pet

logger = logging.getLogger(__name__)

PET_DIR_NAME = ".familiar"
CONFIG_FILE = "pet.json"
STATE_FILE = "pet.state.json"
RELEASED_MARKER = "released"


def home_dir() -> Path:
    return Path(os.environ.get("FAMILIAR_HOME") or Path.home())


def global_state_path() -> Path:
    return home_dir() / PET_DIR_NAME / STATE_FILE


def config_path_for(state_path) -> Path:
    return Path(state_path).parent / CONFIG_FILE


def find_state_file(start_dir) -> Optional[Path]:
    """Walk up from ``start_dir`` looking for ``.familiar/pet.state.json``."""
    directory = Path(start_dir).resolve()
    for candidate in [directory, *directory.parents]:
        state_path = candidate / PET_DIR_NAME / STATE_FILE
        if state_path.exists():
            return state_path
    return None


def locate_state_file(start_dir, explicit=None) -> Path:
    """Explicit path, else the nearest local pet, else the global pet."""
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise PetNotFoundError(f"state file not found: {path}")
        return path
    path = find_state_file(start_dir)
    if path is None:
        path = global_state_path()
        if not path.exists():
            raise PetNotFoundError("no familiar found. Run 'familiar summon' to create one")
    return path


def _read_json(path: Path):
    try:
        with open(path, "r") as f: return json.load(f)
    except json.JSONDecodeError as e:
        backup_path = path.with_suffix(".corrupt.json")
        try:
            path.rename(backup_path)
            logger.warning("backed up corrupt file %s to %s", path, backup_path)
        except OSError:
            logger.warning("could not back up corrupt file %s", path)
        raise StorageError(f"failed to parse {path}: {e}") from e
    except OSError as e:
        raise StorageError(f"failed to read {path}: {e}") from e


def _write_json(path: Path, data):
    """Write via a temp file and ``os.replace`` so readers never see half a file."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=4)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise StorageError(f"failed to write {path}: {e}") from e


def load_pet(config_path, state_path) -> Pet:
    config_path, state_path = Path(config_path), Path(state_path)
    state_data = _read_json(state_path)
    try:
        config_data = _read_json(config_path)
    except StorageError as e:
        # the state file still exists, so summon would refuse
        raise StorageError(f"{e}. Fix or restore the config, or run 'familiar banish' to start over") from e
    try:
        return Pet(PetConfig.from_dict(config_data), PetState.from_dict(state_data))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StorageError(f"incompatible pet data in {state_path.parent}: {e}") from e


def save_pet_state(pet: Pet, state_path):
    _write_json(Path(state_path), pet.state.to_dict())


def save_pet_config(pet: Pet, config_path):
    _write_json(Path(config_path), pet.config.to_dict())


def pet_dir_for(base_dir) -> Path:
    return Path(base_dir) / PET_DIR_NAME


def init_pet(base_dir, pet_type: str, name: str, now: float) -> Pet:
    """Create a new pet from a built-in template under ``base_dir/.familiar``."""
    pet_dir = pet_dir_for(base_dir)
    config_path, state_path = pet_dir / CONFIG_FILE, pet_dir / STATE_FILE
    if state_path.exists():
        raise StorageError("a familiar already exists. Use 'dismiss' to soft-delete it first")
    if pet_type not in templates.TEMPLATES:
        raise StorageError(f"unknown pet type '{pet_type}'. Try: {', '.join(templates.available_types())}")
    pet = Pet(templates.template_config(pet_type, name, now), templates.template_state(str(config_path), now))
    save_pet_config(pet, config_path)
    save_pet_state(pet, state_path)
    logger.info("summoned %s (%s) in %s", name, pet_type, pet_dir)
    return pet


def _safe_name(name: str) -> str:
    for ch in (" ", "/", "\\", "."):
        name = name.replace(ch, "_")
    return name


@dataclass
class ReleasedPet:
    name: str
    timestamp: int
    config_path: Path
    state_path: Path


def release_pet(pet_dir, pet_name: str, now: Optional[float] = None) -> ReleasedPet:
    """Soft-delete: rename both files with a ``.released.<timestamp>`` marker."""
    pet_dir = Path(pet_dir)
    stamp = int(time.time() if now is None else now)
    safe = _safe_name(pet_name)
    released = ReleasedPet(
        name=safe, timestamp=stamp,
        config_path=pet_dir / f"pet.{safe}.{RELEASED_MARKER}.{stamp}.json",
        state_path=pet_dir / f"pet.state.{safe}.{RELEASED_MARKER}.{stamp}.json",
    )
    config_path, state_path = pet_dir / CONFIG_FILE, pet_dir / STATE_FILE
    try:
        config_path.rename(released.config_path)
    except OSError as e:
        raise StorageError(f"failed to rename config file: {e}") from e
    try:
        state_path.rename(released.state_path)
    except OSError as e:
        released.config_path.rename(config_path)
        raise StorageError(f"failed to rename state file: {e}") from e
    return released


def find_released(pet_dir) -> List[ReleasedPet]:
    """Released pets in ``pet_dir``, newest first."""
    pet_dir = Path(pet_dir)
    if not pet_dir.is_dir():
        return []
    found = []
    for path in pet_dir.glob(f"pet.state.*.{RELEASED_MARKER}.*.json"):
        # pet.state.<name>.released.<ts>.json
        parts = path.name.split(".")
        if len(parts) != 6 or not parts[4].isdigit():
            continue
        config_path = pet_dir / path.name.replace("pet.state.", "pet.", 1)
        found.append(ReleasedPet(name=parts[2], timestamp=int(parts[4]), config_path=config_path, state_path=path))
    found.sort(key=lambda r: r.timestamp, reverse=True)
    return found


def find_released_by_name(pet_dir, name: str) -> Optional[ReleasedPet]:
    released = find_released(pet_dir)
    safe = _safe_name(name)
    for r in released:
        if r.name == safe:
            return r
    for r in released:
        if r.name.lower() == safe.lower():
            return r
    return None


def restore_released(pet_dir, released: ReleasedPet):
    pet_dir = Path(pet_dir)
    config_path, state_path = pet_dir / CONFIG_FILE, pet_dir / STATE_FILE
    if state_path.exists():
        raise StorageError("a familiar already exists. Use 'dismiss' first")
    if not released.config_path.exists():
        raise StorageError(f"released config file not found: {released.config_path}")
    try:
        released.config_path.rename(config_path)
    except OSError as e:
        raise StorageError(f"failed to restore config file: {e}") from e
    try:
        released.state_path.rename(state_path)
    except OSError as e:
        config_path.rename(released.config_path)
        raise StorageError(f"failed to restore state file: {e}") from e


def banish_pet(config_path, state_path):
    """Delete both files for good. Files already moved aside (corrupt backups) are skipped."""
    paths = [p for p in (Path(config_path), Path(state_path)) if p.exists()]
    if not paths:
        raise StorageError("no familiar files to banish")
    for path in paths:
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"failed to delete {path.name}: {e}") from e

"""
File-based workout storage.

Bundled sample workouts ship in ``workout_timer/data/workouts.yaml``.
User workouts live as one file per workout in ``~/.workout-timer/workouts/``
(``*.yaml``, ``*.yml`` or ``*.json``; a file may also hold a list).  A user
workout with the same id as a bundled one replaces it.
"""

import json
import logging
from pathlib import Path

import yaml

from ..core.config import USER_WORKOUTS_SUBDIR
from ..core.engine.config_loader import get_user_dir
from ..core.models import WorkoutSpec
from .serializers import ValidationError, dict_to_workout, load_workout_documents, workout_to_dict

logger = logging.getLogger(__name__)

WORKOUT_FILE_SUFFIXES = (".yaml", ".yml", ".json")


def get_bundled_workouts_path() -> Path:
    """Return the path to the bundled sample workouts file."""
    return Path(__file__).resolve().parent.parent / "data" / "workouts.yaml"


def get_default_workouts_dir() -> Path:
    """Return ~/.workout-timer/workouts."""
    return get_user_dir() / USER_WORKOUTS_SUBDIR


class WorkoutStore:
    """
    Loads, saves and deletes workout definitions.

    Workouts are read lazily on first access and cached; save() and
    delete() invalidate the cache.
    """

    def __init__(
        self,
        user_dir: str | Path | None = None,
        bundled_path: str | Path | None = None,
        include_bundled: bool = True,
    ):
        """
        Initialize the store.

        Args:
            user_dir: Directory holding user workout files
            bundled_path: Override for the bundled workouts file
            include_bundled: Whether to load the bundled samples at all
        """
        self.user_dir = Path(user_dir) if user_dir is not None else get_default_workouts_dir()
        self.bundled_path = Path(bundled_path) if bundled_path is not None else get_bundled_workouts_path()
        self.include_bundled = include_bundled
        self._workouts: dict[str, WorkoutSpec] | None = None
        self._user_paths: dict[str, Path] = {}
        self._errors: list[str] = []

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read_file(self, path: Path) -> list[WorkoutSpec]:
        """Read one file; invalid files are logged, recorded and skipped."""
        try:
            documents = load_workout_documents(path.read_text(encoding="utf-8"))
            return [dict_to_workout(doc) for doc in documents]
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            message = f"{path.name}: {e}"
            logger.warning("Skipping workout file %s", message)
            self._errors.append(message)
            return []

    def _load(self) -> dict[str, WorkoutSpec]:
        if self._workouts is not None:
            return self._workouts

        self._errors = []
        self._user_paths = {}
        workouts: dict[str, WorkoutSpec] = {}

        if self.include_bundled and self.bundled_path.exists():
            for workout in self._read_file(self.bundled_path):
                workouts[workout.id] = workout

        if self.user_dir.is_dir():
            for path in sorted(self.user_dir.iterdir()):
                if path.suffix.lower() not in WORKOUT_FILE_SUFFIXES:
                    continue
                for workout in self._read_file(path):
                    if workout.id in workouts:
                        logger.debug("User workout %s overrides an earlier definition", workout.id)
                    workouts[workout.id] = workout
                    self._user_paths[workout.id] = path

        self._workouts = workouts
        return workouts

    def reload(self) -> None:
        """Drop the cache so the next access re-reads all files."""
        self._workouts = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_workouts(self) -> list[WorkoutSpec]:
        """All workouts, in load order (bundled first, then user files)."""
        return list(self._load().values())

    def get(self, workout_id: str) -> WorkoutSpec | None:
        return self._load().get(workout_id)

    def catalog(self) -> dict[str, WorkoutSpec]:
        """Id -> workout mapping, as consumed by WorkoutSession."""
        return dict(self._load())

    def is_user_workout(self, workout_id: str) -> bool:
        self._load()
        return workout_id in self._user_paths

    def load_errors(self) -> list[str]:
        """Messages for files skipped during the last load."""
        self._load()
        return list(self._errors)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _shares_file(self, path: Path, workout_id: str) -> list[str]:
        """Other ids defined in the same user file."""
        return sorted(wid for wid, p in self._user_paths.items() if p == path and wid != workout_id)

    def _path_for(self, workout_id: str) -> Path:
        """
        Pick the file a newly saved workout goes to.

        Distinct ids can map to the same cleaned-up name ("a b" and "a_b");
        a numeric suffix keeps them apart.
        """
        safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in workout_id)
        taken = {p for wid, p in self._user_paths.items() if wid != workout_id}
        own = self._user_paths.get(workout_id)

        path = self.user_dir / f"{safe}.yaml"
        n = 2
        while path in taken or (path.exists() and path != own):
            path = self.user_dir / f"{safe}-{n}.yaml"
            n += 1
        return path

    def _remove_from_file(self, path: Path, workout_id: str) -> None:
        """Rewrite a user file without *workout_id*; unlink it if nothing is left."""
        documents = load_workout_documents(path.read_text(encoding="utf-8"))
        kept = [doc for doc in documents if dict_to_workout(doc).id != workout_id]
        if not kept:
            path.unlink()
            return
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                json.dump(kept, f, indent=2, ensure_ascii=False)
            else:
                yaml.safe_dump(kept, f, sort_keys=False, allow_unicode=True)

    def save(self, workout: WorkoutSpec) -> Path:
        """
        Write a workout to the user directory as ``<id>.yaml``.

        Creates the directory if needed.  A YAML user file that defines only
        this workout is overwritten in place, whatever its name.  If the id
        is currently defined in a JSON file or in a file shared with other
        workouts, it is removed from there, so exactly one file defines it.

        Returns:
            Path of the written file
        """
        self._load()
        old_path = self._user_paths.get(workout.id)
        if (
            old_path is not None
            and old_path.suffix.lower() != ".json"
            and not self._shares_file(old_path, workout.id)
        ):
            path = old_path
            old_path = None
        else:
            path = self._path_for(workout.id)

        self.user_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(workout_to_dict(workout), f, sort_keys=False, allow_unicode=True)

        if old_path is not None:
            logger.debug("Moving %s out of %s into %s", workout.id, old_path.name, path.name)
            self._remove_from_file(old_path, workout.id)
        self.reload()
        return path

    def delete(self, workout_id: str) -> None:
        """
        Delete a user workout.

        Raises:
            KeyError: If no user file defines this id, or the file also
                defines other workouts
        """
        workouts = self._load()
        path = self._user_paths.get(workout_id)
        if path is None:
            if workout_id in workouts:
                raise KeyError(f"'{workout_id}' is a bundled workout and cannot be deleted")
            raise KeyError(f"No user workout with id '{workout_id}'")

        shared = self._shares_file(path, workout_id)
        if shared:
            raise KeyError(
                f"{path.name} also defines {', '.join(shared)}; edit the file by hand"
            )
        path.unlink()
        self.reload()

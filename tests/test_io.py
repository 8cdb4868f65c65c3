"""
Tests for workout file parsing, the workout store and settings loading.
"""

import json

import pytest
import yaml

from workout_timer.core.config import TimerSettings
from workout_timer.core.engine.config_loader import get_user_dir, load_settings, settings_from_dict
from workout_timer.io.serializers import (
    ValidationError,
    dict_to_workout,
    load_workout_documents,
    parse_workout_text,
    workout_to_dict,
)
from workout_timer.io.workout_store import WorkoutStore, get_bundled_workouts_path


def _raw_workout(workout_id: str = "mine", **overrides) -> dict:
    data = {
        "id": workout_id,
        "name": "My Workout",
        "difficulty_level": 2,
        "exercises": [
            {"name": "Squats", "description": "Slow and deep", "repetitions_count": 12, "resting_seconds": 20},
            {"name": "Plank", "description": "Hold", "working_seconds": 30},
        ],
    }
    data.update(overrides)
    return data


# =============================================================================
# Serializers
# =============================================================================


class TestDictToWorkout:
    def test_valid_workout(self):
        workout = dict_to_workout(_raw_workout())
        assert workout.id == "mine"
        assert workout.repeat_count == 1
        squats, plank = workout.exercises
        assert squats.rep_count == 12
        assert squats.rest_seconds == 20
        assert squats.is_timed is False
        assert plank.duration_seconds == 30
        assert plank.rest_seconds == 0
        assert plank.repeat_count == 1

    def test_camel_case_keys(self):
        data = {
            "id": "c",
            "name": "Camel",
            "dificultyLevel": 4,
            "repeatCount": 2,
            "exercises": [
                {
                    "name": "Burpees",
                    "description": "Fast",
                    "mediaUrl": "https://example.com/b.gif",
                    "workingSeconds": 20,
                    "restingSeconds": 10,
                    "repeatCount": 3,
                }
            ],
        }
        workout = dict_to_workout(data)
        assert workout.difficulty_level == 4
        assert workout.repeat_count == 2
        (ex,) = workout.exercises
        assert ex.media_reference == "https://example.com/b.gif"
        assert (ex.duration_seconds, ex.rest_seconds, ex.repeat_count) == (20, 10, 3)

    def test_strips_text_fields(self):
        workout = dict_to_workout(_raw_workout(name="  Padded  "))
        assert workout.name == "Padded"

    @pytest.mark.parametrize("level", [0, 6, "3", True, None])
    def test_bad_difficulty(self, level):
        with pytest.raises(ValidationError, match="difficulty_level"):
            dict_to_workout(_raw_workout(difficulty_level=level))

    def test_missing_exercises(self):
        with pytest.raises(ValidationError, match="exercises"):
            dict_to_workout(_raw_workout(exercises=[]))

    def test_zero_repeat_count(self):
        with pytest.raises(ValidationError, match="repeat_count"):
            dict_to_workout(_raw_workout(repeat_count=0))

    def test_exercise_error_names_position(self):
        data = _raw_workout()
        data["exercises"][1]["resting_seconds"] = -5
        with pytest.raises(ValidationError, match=r"exercise #2: .*resting_seconds"):
            dict_to_workout(data)

    def test_exercise_requires_description(self):
        data = _raw_workout()
        del data["exercises"][0]["description"]
        with pytest.raises(ValidationError, match="description"):
            dict_to_workout(data)

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError):
            dict_to_workout(["not", "a", "workout"])

    def test_to_dict_omits_defaults(self):
        d = workout_to_dict(dict_to_workout(_raw_workout()))
        assert "repeat_count" not in d
        assert d["exercises"][1] == {"name": "Plank", "description": "Hold", "working_seconds": 30}
        assert dict_to_workout(d) == dict_to_workout(_raw_workout())


class TestParseText:
    def test_json_text(self):
        workout = parse_workout_text(json.dumps(_raw_workout()))
        assert workout.name == "My Workout"

    def test_yaml_text(self):
        workout = parse_workout_text(yaml.safe_dump(_raw_workout()))
        assert workout.id == "mine"

    def test_workouts_key_and_lists(self):
        text = yaml.safe_dump({"workouts": [_raw_workout("a"), _raw_workout("b")]})
        assert len(load_workout_documents(text)) == 2
        assert len(load_workout_documents(json.dumps([_raw_workout()]))) == 1

    def test_single_workout_required(self):
        text = json.dumps([_raw_workout("a"), _raw_workout("b")])
        with pytest.raises(ValidationError, match="exactly one"):
            parse_workout_text(text)

    def test_scalar_document_rejected(self):
        with pytest.raises(ValidationError):
            parse_workout_text("just some words")

    def test_broken_yaml(self):
        with pytest.raises(ValidationError, match="Not valid"):
            parse_workout_text("id: [unclosed")


# =============================================================================
# WorkoutStore
# =============================================================================


@pytest.fixture
def user_dir(tmp_path):
    return tmp_path / "workouts"


class TestWorkoutStore:
    def test_bundled_samples(self, user_dir):
        store = WorkoutStore(user_dir)
        ids = [w.id for w in store.list_workouts()]
        assert ids[:4] == ["w1", "w2", "w3", "w4"]
        assert store.get("w1").name == "HIIT Express"
        assert store.load_errors() == []
        assert not store.is_user_workout("w1")

    def test_bundled_file_is_packaged(self):
        assert get_bundled_workouts_path().exists()

    def test_save_and_reload(self, user_dir):
        store = WorkoutStore(user_dir)
        workout = dict_to_workout(_raw_workout())
        path = store.save(workout)

        assert path == user_dir / "mine.yaml"
        fresh = WorkoutStore(user_dir)
        assert fresh.get("mine") == workout
        assert fresh.is_user_workout("mine")

    def test_user_workout_overrides_bundled(self, user_dir):
        store = WorkoutStore(user_dir)
        store.save(dict_to_workout(_raw_workout("w1", name="My HIIT")))
        assert store.get("w1").name == "My HIIT"
        assert len([w for w in store.list_workouts() if w.id == "w1"]) == 1

    def test_invalid_files_are_skipped(self, user_dir):
        user_dir.mkdir()
        (user_dir / "broken.yaml").write_text("id: x\nname: X\n", encoding="utf-8")
        (user_dir / "notes.txt").write_text("ignored", encoding="utf-8")
        (user_dir / "good.json").write_text(json.dumps(_raw_workout("good")), encoding="utf-8")

        store = WorkoutStore(user_dir, include_bundled=False)
        assert [w.id for w in store.list_workouts()] == ["good"]
        (error,) = store.load_errors()
        assert error.startswith("broken.yaml:")

    def test_delete_user_workout(self, user_dir):
        store = WorkoutStore(user_dir)
        path = store.save(dict_to_workout(_raw_workout()))
        store.delete("mine")
        assert not path.exists()
        assert store.get("mine") is None

    def test_delete_bundled_rejected(self, user_dir):
        store = WorkoutStore(user_dir)
        with pytest.raises(KeyError, match="bundled"):
            store.delete("w1")

    def test_delete_unknown_rejected(self, user_dir):
        with pytest.raises(KeyError):
            WorkoutStore(user_dir).delete("nope")

    def test_delete_refuses_shared_file(self, user_dir):
        user_dir.mkdir()
        text = yaml.safe_dump([_raw_workout("a"), _raw_workout("b")])
        (user_dir / "pair.yaml").write_text(text, encoding="utf-8")
        store = WorkoutStore(user_dir, include_bundled=False)
        with pytest.raises(KeyError, match="also defines b"):
            store.delete("a")
        assert (user_dir / "pair.yaml").exists()

    def test_save_overwrites_existing_user_file(self, user_dir):
        user_dir.mkdir()
        original = user_dir / "custom-name.yml"
        original.write_text(yaml.safe_dump(_raw_workout()), encoding="utf-8")

        store = WorkoutStore(user_dir, include_bundled=False)
        path = store.save(dict_to_workout(_raw_workout(name="Renamed")))
        assert path == original
        assert WorkoutStore(user_dir, include_bundled=False).get("mine").name == "Renamed"

    def test_save_moves_workout_out_of_shared_file(self, user_dir):
        """Replacing one workout of a multi-workout file keeps the others."""
        user_dir.mkdir()
        shared = user_dir / "all.yaml"
        shared.write_text(
            yaml.safe_dump([_raw_workout("a", name="Old A"), _raw_workout("b", name="B")]),
            encoding="utf-8",
        )
        store = WorkoutStore(user_dir, include_bundled=False)
        path = store.save(dict_to_workout(_raw_workout("a", name="New A")))

        assert path != shared
        fresh = WorkoutStore(user_dir, include_bundled=False)
        assert fresh.get("a").name == "New A"
        assert fresh.get("b").name == "B"
        assert [w.id for w in fresh.list_workouts()].count("a") == 1
        assert [doc["id"] for doc in yaml.safe_load(shared.read_text(encoding="utf-8"))] == ["b"]

    def test_save_replaces_json_definition(self, user_dir):
        """A workout defined in a later-sorting JSON file does not shadow the save."""
        user_dir.mkdir()
        old = user_dir / "zz.json"
        old.write_text(json.dumps(_raw_workout("a", name="Old A")), encoding="utf-8")

        store = WorkoutStore(user_dir, include_bundled=False)
        path = store.save(dict_to_workout(_raw_workout("a", name="New A")))

        assert path == user_dir / "a.yaml"
        assert not old.exists()
        assert WorkoutStore(user_dir, include_bundled=False).get("a").name == "New A"

    def test_save_keeps_json_file_with_other_workouts(self, user_dir):
        user_dir.mkdir()
        old = user_dir / "zz.json"
        old.write_text(json.dumps([_raw_workout("a", name="Old A"), _raw_workout("b")]), encoding="utf-8")

        store = WorkoutStore(user_dir, include_bundled=False)
        store.save(dict_to_workout(_raw_workout("a", name="New A")))

        fresh = WorkoutStore(user_dir, include_bundled=False)
        assert fresh.get("a").name == "New A"
        assert fresh.get("b") is not None
        assert [doc["id"] for doc in json.loads(old.read_text(encoding="utf-8"))] == ["b"]

    def test_ids_with_same_file_name_do_not_collide(self, user_dir):
        store = WorkoutStore(user_dir, include_bundled=False)
        first = store.save(dict_to_workout(_raw_workout("a b", name="Spaced")))
        second = store.save(dict_to_workout(_raw_workout("a_b", name="Underscored")))

        assert first == user_dir / "a_b.yaml"
        assert second == user_dir / "a_b-2.yaml"
        fresh = WorkoutStore(user_dir, include_bundled=False)
        assert fresh.get("a b").name == "Spaced"
        assert fresh.get("a_b").name == "Underscored"

    def test_save_does_not_overwrite_unreadable_file(self, user_dir):
        user_dir.mkdir()
        broken = user_dir / "mine.yaml"
        broken.write_text("id: [unclosed", encoding="utf-8")

        store = WorkoutStore(user_dir, include_bundled=False)
        path = store.save(dict_to_workout(_raw_workout()))
        assert path == user_dir / "mine-2.yaml"
        assert broken.read_text(encoding="utf-8") == "id: [unclosed"

    def test_catalog_is_a_copy(self, user_dir):
        store = WorkoutStore(user_dir)
        catalog = store.catalog()
        catalog.clear()
        assert store.get("w1") is not None


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_settings() == TimerSettings()

    def test_user_dir_follows_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_user_dir() == tmp_path / ".workout-timer"

    def test_user_file_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        settings_dir = tmp_path / ".workout-timer"
        settings_dir.mkdir()
        (settings_dir / "settings.yaml").write_text(
            "pre_countdown_seconds: 10\ndefault_rep_count: 12\nsound: false\n", encoding="utf-8"
        )
        settings = load_settings()
        assert settings.pre_countdown_seconds == 10
        assert settings.default_rep_count == 12
        assert settings.sound is False
        assert settings.cue_window_seconds == TimerSettings().cue_window_seconds

    def test_bad_values_fall_back(self):
        settings = settings_from_dict({
            "pre_countdown_seconds": -3,
            "default_rep_count": "lots",
            "cue_window_seconds": True,
            "tick_interval_seconds": 0,
        })
        assert settings == TimerSettings()

    def test_unparsable_file_ignored(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("pre_countdown_seconds: [1,\n", encoding="utf-8")
        assert load_settings(path) == TimerSettings()

    def test_non_mapping_file_ignored(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        assert load_settings(path) == TimerSettings()

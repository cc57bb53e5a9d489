"""Tests for the merge manifest loader."""

import tempfile

import pytest
import yaml

from clipmerge.merge_manifest import (
    load_merge_manifest,
    settings_from_manifest,
    validate_clip_paths,
)


def _write_manifest(content) -> str:
    """Write a manifest dict to a temp YAML file, return path."""
    f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False)
    yaml.dump(content, f)
    f.close()
    return f.name


def _minimal_merge(**overrides):
    """Return a minimal valid merge manifest dict."""
    m = {"clips": ["/tmp/a.mp4", "/tmp/b.mp4"]}
    m.update(overrides)
    return m


class TestLoadMergeManifest:
    def test_defaults_applied(self):
        config = load_merge_manifest(_write_manifest(_minimal_merge()))
        video = config["video"]
        assert video["fps"] == 30
        assert video["container"] == "mov"
        assert video["quality"] == "highest"
        assert video["optimize_for_network"] is True
        assert config["output_dir"] is None
        assert config["save_to"] is None

    def test_clip_strings_normalized(self):
        config = load_merge_manifest(_write_manifest(_minimal_merge()))
        assert config["clips"] == [{"path": "/tmp/a.mp4"}, {"path": "/tmp/b.mp4"}]

    def test_clip_mappings_accepted(self):
        m = _minimal_merge(clips=[{"path": "/tmp/a.mp4"}, "/tmp/b.mp4"])
        config = load_merge_manifest(_write_manifest(m))
        assert [c["path"] for c in config["clips"]] == ["/tmp/a.mp4", "/tmp/b.mp4"]

    def test_order_preserved(self):
        clips = [f"/tmp/{i}.mp4" for i in (3, 1, 2)]
        config = load_merge_manifest(_write_manifest(_minimal_merge(clips=clips)))
        assert [c["path"] for c in config["clips"]] == clips

    def test_resolves_path_variables(self):
        m = _minimal_merge(
            paths={"clips": "/data/clips"},
            clips=["${clips}/a.mp4"],
            output_dir="${clips}/merged",
            save_to="${clips}/library",
        )
        config = load_merge_manifest(_write_manifest(m))
        assert config["clips"][0]["path"] == "/data/clips/a.mp4"
        assert config["output_dir"] == "/data/clips/merged"
        assert config["save_to"] == "/data/clips/library"

    def test_empty_paths_section(self):
        m = _minimal_merge(paths=None)
        config = load_merge_manifest(_write_manifest(m))
        assert config["clips"][0]["path"] == "/tmp/a.mp4"

    def test_empty_paths_section_rejects_variables(self):
        m = _minimal_merge(paths=None, clips=["${clips}/a.mp4"])
        with pytest.raises(ValueError, match="Unknown path variable"):
            load_merge_manifest(_write_manifest(m))

    def test_video_overrides(self):
        m = _minimal_merge(video={"fps": 25, "container": "mp4", "quality": "low"})
        config = load_merge_manifest(_write_manifest(m))
        settings = settings_from_manifest(config)
        assert settings.fps == 25
        assert settings.container == "mp4"
        assert settings.quality == "low"
        assert settings.preset == "veryfast"


class TestMergeManifestValidation:
    def test_no_clips_raises(self):
        with pytest.raises(ValueError, match="clips"):
            load_merge_manifest(_write_manifest({"clips": []}))

    def test_clip_without_path_raises(self):
        with pytest.raises(ValueError, match="path"):
            load_merge_manifest(_write_manifest(_minimal_merge(clips=[{"file": "x"}])))

    def test_invalid_fps_raises(self):
        m = _minimal_merge(video={"fps": 0})
        with pytest.raises(ValueError, match="fps"):
            load_merge_manifest(_write_manifest(m))

    def test_invalid_container_raises(self):
        m = _minimal_merge(video={"container": "avi"})
        with pytest.raises(ValueError, match="container"):
            load_merge_manifest(_write_manifest(m))

    def test_invalid_quality_raises(self):
        m = _minimal_merge(video={"quality": "ultra"})
        with pytest.raises(ValueError, match="quality"):
            load_merge_manifest(_write_manifest(m))

    def test_unknown_path_variable_raises(self):
        m = _minimal_merge(clips=["${nowhere}/a.mp4"])
        with pytest.raises(ValueError, match="Unknown path variable"):
            load_merge_manifest(_write_manifest(m))

    def test_non_mapping_raises(self):
        with pytest.raises(ValueError, match="mapping"):
            load_merge_manifest(_write_manifest(["a.mp4"]))


class TestValidateClipPaths:
    def test_all_present(self, tmp_path):
        a = tmp_path / "a.mp4"
        a.write_bytes(b"x")
        validate_clip_paths({"clips": [{"path": str(a)}]})

    def test_lists_every_missing_file(self, tmp_path):
        config = {"clips": [
            {"path": str(tmp_path / "one.mp4")},
            {"path": str(tmp_path / "two.mp4")},
        ]}
        with pytest.raises(FileNotFoundError, match="Missing 2 clip") as exc_info:
            validate_clip_paths(config)
        assert "one.mp4" in str(exc_info.value)
        assert "two.mp4" in str(exc_info.value)

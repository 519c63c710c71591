"""End-to-end tests for config, run_pipeline and the CLI."""

import csv
import json

import pytest

from conftest import v3_beatmap
from beat_stats.cli import main
from beat_stats.errors import DuplicateDifficulty, MissingOrMalformedFile, MissingRequiredField
from beat_stats.pipeline.batch import StatsConfig, run_pipeline
from beat_stats.pipeline.processor import process_map_folder
from beat_stats.sources.local_custom import CUSTOM_LEVELS_SUBPATH
from beat_stats.sources.reference_table import LEVEL_ID_COLUMN, difficulty_columns


@pytest.fixture
def install(tmp_path, make_map):
    """A fake game install with two custom levels."""
    game = tmp_path / "Beat Saber"
    custom = game / CUSTOM_LEVELS_SUBPATH
    custom.mkdir(parents=True)
    first = make_map("1a2b (Song A - Mapper)", song="Song A", root=custom)
    make_map("3c4d (Song B - Mapper)", song="Song B", root=custom, difficulties={
        "Standard": {4: v3_beatmap([0.0, 1.0, 2.0]), 8: v3_beatmap()},
    })
    return game, process_map_folder(first).id


def _write_reference(path, level_id):
    row = [""] * (LEVEL_ID_COLUMN + 1)
    row[0:6] = ["Official", "Composer", "Mapper", "120", "Origins", "02:30"]
    nps_col, notes_col = difficulty_columns(3)
    row[nps_col], row[notes_col] = "4.5", "675"
    row[LEVEL_ID_COLUMN] = level_id
    header = ",".join(f"h{i}" for i in range(len(row)))
    path.write_text(header + "\n" + ",".join(row) + "\n")
    return path


def _config(tmp_path, game, save, **overrides):
    values = dict(
        save_path=save,
        game_path=game,
        threads=2,
        reference_table=tmp_path / "ost.csv",
        output=tmp_path / "out" / "stats.csv",
        show_progress=False,
    )
    values.update(overrides)
    return StatsConfig(**values)


class TestStatsConfig:
    def test_round_trip(self, tmp_path):
        config = _config(tmp_path, tmp_path / "game", tmp_path / "save.dat", player_number=2)
        config.save(tmp_path / "config.json")
        loaded = StatsConfig.load(tmp_path / "config.json")
        assert loaded == config

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"threads": 6, "legacy_option": True}))
        assert StatsConfig.load(path).threads == 6

    def test_unknown_output_format(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"output_format": "xlsx"}))
        with pytest.raises(MissingRequiredField, match="output_format"):
            StatsConfig.load(path)

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(MissingOrMalformedFile):
            StatsConfig.load(tmp_path / "missing.json")

    def test_config_is_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(MissingOrMalformedFile):
            StatsConfig.load(path)


class TestRunPipeline:
    def test_full_run(self, tmp_path, install, write_save, make_score):
        game, level_id = install
        save = write_save([
            make_score(level_id, full_combo=True),
            make_score("Official", difficulty=3),
            make_score("Official", characteristic="OneSaber", difficulty=3),
            make_score("custom_level_DELETED", difficulty=1),
        ])
        _write_reference(tmp_path / "ost.csv", "Official")

        result = run_pipeline(_config(tmp_path, game, save))

        assert result.custom_levels == 2
        ids = [r.id for r in result.records]
        assert ids.count("Official") == 2
        assert "custom_level_DELETED" in ids
        assert result.total_rows == 1 + 2 + 1 + 1 + 1

        with open(tmp_path / "out" / "stats.csv", newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        by_song = {r["Song"]: r for r in rows if r["Song"]}
        assert by_song["Song A"]["Combo"] == "FC"
        assert float(by_song["Song A"]["NPS"]) == 2.0
        assert by_song["Official"]["Notes"] == "675"
        assert by_song["Official"]["Duration"] == "02:30"

    def test_without_reference_table(self, tmp_path, install, write_save, make_score):
        game, _ = install
        save = write_save([make_score("Official"), make_score("Official", characteristic="OneSaber")])
        result = run_pipeline(_config(tmp_path, game, save))
        orphans = [r for r in result.records if r.id == "Official"]
        assert len(orphans) == 1
        assert set(orphans[0].characteristics) == {"Standard", "OneSaber"}

    def test_failure_writes_no_report(self, tmp_path, install, write_save):
        game, _ = install
        broken = game / CUSTOM_LEVELS_SUBPATH / "1a2b (Song A - Mapper)" / "Info.dat"
        info = json.loads(broken.read_text())
        beatmaps = info["_difficultyBeatmapSets"][0]["_difficultyBeatmaps"]
        beatmaps.append(dict(beatmaps[0]))
        broken.write_text(json.dumps(info))

        config = _config(tmp_path, game, write_save([]))
        with pytest.raises(DuplicateDifficulty):
            run_pipeline(config)
        assert not config.output.exists()


class TestCli:
    def test_run(self, tmp_path, install, write_save, capsys):
        game, _ = install
        save = write_save([])
        out = tmp_path / "report.parquet"
        code = main([
            "run", "--save-path", str(save), "--game-path", str(game),
            "--threads", "1", "--reference-table", str(tmp_path / "none.csv"),
            "--output", str(out), "--format", "parquet", "--no-progress",
        ])
        assert code == 0
        assert out.exists()
        assert "2 levels (2 custom)" in capsys.readouterr().out

    def test_error_exit_code(self, tmp_path):
        code = main([
            "run", "--save-path", str(tmp_path / "missing.dat"),
            "--game-path", str(tmp_path), "--no-progress",
        ])
        assert code == 1

    @pytest.mark.parametrize("config", [None, {"output_format": "xlsx"}])
    def test_bad_config_exit_code(self, tmp_path, config):
        path = tmp_path / "config.json"
        if config is not None:
            path.write_text(json.dumps(config))
        assert main(["run", "--config", str(path), "--no-progress"]) == 1

    def test_inspect(self, install, capsys):
        game, level_id = install
        folder = game / CUSTOM_LEVELS_SUBPATH / "3c4d (Song B - Mapper)"
        assert main(["inspect", str(folder)]) == 0
        out = capsys.readouterr().out
        assert "Song B" in out
        assert "notes=3" in out
        assert "notes=-" in out

    def test_no_command(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

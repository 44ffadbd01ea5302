import json
import logging
import os

import pytest

from bake_bodies import bake_bodies, body_key, main, parse_bodies
from body_generator.descriptor import SurfaceDescriptor
from body_generator.themes import AsteroidTheme, BodyCategory, MoonTheme


def _write_config(tmp_path, bodies, params=None):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"generation_parameters": params or {}, "bodies": bodies}))
    return str(config_path)


def test_parse_bodies_expands_runs_and_names():
    bodies = parse_bodies([
        {"seed": 42, "category": "moon", "theme": "rocky", "size_px": 48},
        {"count": 3, "seed_start": 100, "category": "asteroid", "theme": "metallic", "size_class": "small",
         "atmosphere": False},
    ])
    assert len(bodies) == 4
    descriptor, with_atmosphere = bodies[0]
    assert descriptor == SurfaceDescriptor(42, BodyCategory.MOON, MoonTheme.ROCKY, 48)
    assert with_atmosphere
    assert [d.seed for d, _ in bodies[1:]] == [100, 101, 102]
    assert all(d.theme is AsteroidTheme.METALLIC and d.size_px == 48 and not atm for d, atm in bodies[1:])


def test_body_key_is_readable():
    assert body_key(SurfaceDescriptor(42, BodyCategory.MOON, MoonTheme.ROCKY, 48)) == "moon-ROCKY-42-48"


def test_identical_bodies_are_stored_once(tmp_path):
    body = {"seed": 5, "category": "moon", "theme": "rocky", "size_px": 16, "atmosphere": False}
    config_path = _write_config(tmp_path, [body, dict(body), {**body, "seed": 6}])
    output_dir = tmp_path / "out"

    manifest_path = bake_bodies(config_path, str(output_dir), workers=1)

    with open(manifest_path) as f:
        manifest = json.load(f)
    assert len(manifest["bodies"]) == 3
    assert manifest["image_count"] == 2
    assert len(os.listdir(output_dir / "images")) == 2
    for entry in manifest["bodies"]:
        assert (output_dir / "images" / f"{entry['surface']}.png").exists()
        assert entry["atmosphere"] is None


def test_bake_writes_halos_and_generation_config(tmp_path):
    config_path = _write_config(
        tmp_path,
        [{"seed": 1, "category": "terran", "theme": "arid", "size_px": 24}],
        params={"ambient_light": 0.4},
    )
    output_dir = tmp_path / "out"
    bake_bodies(config_path, str(output_dir), workers=1)

    with open(output_dir / "manifest.json") as f:
        entry = json.load(f)["bodies"][0]
    assert entry["atmosphere"] is not None
    assert entry["atmosphere_size_px"] > 24

    with open(output_dir / "generation_config.json") as f:
        echoed = json.load(f)
    assert echoed["generation_parameters"]["ambient_light"] == 0.4
    assert echoed["bodies"][0]["theme"] == "arid"


def test_missing_config_is_logged_and_aborts(tmp_path, caplog):
    with caplog.at_level(logging.CRITICAL):
        assert bake_bodies(str(tmp_path / "missing.json"), str(tmp_path / "out")) is None
    assert "Failed to load or parse config file" in caplog.text
    assert not (tmp_path / "out").exists()


def test_invalid_body_entry_aborts(tmp_path, caplog):
    config_path = _write_config(tmp_path, [{"seed": 1, "category": "comet", "size_px": 16}])
    with caplog.at_level(logging.CRITICAL):
        assert bake_bodies(config_path, str(tmp_path / "out")) is None
    assert "Invalid bake configuration" in caplog.text


def test_cli_exit_codes(tmp_path):
    config_path = _write_config(tmp_path, [{"seed": 2, "category": "moon", "size_px": 8, "atmosphere": False}])
    assert main(["--config", config_path, "--output", str(tmp_path / "out"), "--workers", "1"]) == 0
    assert main(["--config", str(tmp_path / "nope.json")]) == 1


@pytest.mark.parametrize("size_px", [0, -3])
def test_degenerate_sizes_are_rejected(tmp_path, size_px):
    config_path = _write_config(tmp_path, [{"seed": 2, "category": "moon", "size_px": size_px}])
    assert bake_bodies(config_path, str(tmp_path / "out"), workers=1) is None

# bake_bodies.py

"""
================================================================================
OFFLINE BODY BAKER SCRIPT
================================================================================
This script is a command-line tool for pre-rendering a list of celestial
bodies (surfaces and atmosphere halos) to a directory of PNG images
("baking"). Games can then load the images instead of generating bodies at
runtime.

Every image is named by the SHA-256 of its pixels, so identical bodies are
stored once. The package contains:
    images/<hash>.png          RGBA images
    manifest.json              body key -> image hashes
    generation_config.json     the settings and body list used

Usage:
    python bake_bodies.py --config path/to/config.json [--output DIR] [--workers N]
================================================================================
"""
import argparse
import hashlib
import json
import logging
import multiprocessing
import os
import sys
import tempfile
import time

from PIL import Image
from tqdm import tqdm

from body_generator import config as DEFAULTS
from body_generator.descriptor import PixelBuffer, SizeClass, SurfaceDescriptor
from body_generator.generator import BodyGenerator
from body_generator.themes import BodyCategory, THEMES_BY_CATEGORY

DEFAULT_OUTPUT_DIR = "baked_bodies"


# --- Image Helpers ---
def hash_buffer(buffer: PixelBuffer) -> str:
    """Content hash of a buffer, including its dimensions."""
    digest = hashlib.sha256(f"{buffer.width}x{buffer.height}:".encode('ascii'))
    digest.update(buffer.tobytes())
    return digest.hexdigest()


def save_body_image(buffer: PixelBuffer, directory: str, file_hash: str) -> bool:
    """
    Saves a buffer as an RGBA PNG named by its hash. Returns False if the
    file already existed (a duplicate body).
    """
    os.makedirs(directory, exist_ok=True)
    file_path = os.path.join(directory, f"{file_hash}.png")
    if os.path.exists(file_path):
        return False

    # Write to a temporary name first; concurrent workers may bake the same image.
    fd, tmp_path = tempfile.mkstemp(suffix=".png", dir=directory)
    os.close(fd)
    Image.frombytes('RGBA', (buffer.width, buffer.height), buffer.tobytes()).save(tmp_path, 'PNG')
    os.replace(tmp_path, file_path)
    return True


# --- Body List Parsing ---
def _parse_theme(category: BodyCategory, theme):
    """Theme names map to enum members; anything else is left for the generator to resolve."""
    if isinstance(theme, str):
        themes = THEMES_BY_CATEGORY[category]
        return themes.__members__.get(theme.upper(), theme)
    return theme


def _parse_size(spec: dict) -> int:
    if 'size_class' in spec:
        return SizeClass(spec['size_class']).size_px
    return spec.get('size_px', SizeClass.MEDIUM.size_px)


def parse_bodies(body_specs: list, default_seed: int = DEFAULTS.DEFAULT_SEED) -> list[tuple[SurfaceDescriptor, bool]]:
    """
    Expands the 'bodies' section of a bake config into descriptors.

    Each entry is either a single body:
        {"seed": 42, "category": "moon", "theme": "rocky", "size_px": 48}
    or a run of consecutive seeds:
        {"count": 10, "seed_start": 100, "category": "asteroid", "size_class": "small"}
    An optional "atmosphere" flag (default true) controls halo baking.
    """
    bodies = []
    for spec in body_specs:
        category = BodyCategory(spec['category'])
        theme = _parse_theme(category, spec.get('theme', 0))
        size_px = _parse_size(spec)
        with_atmosphere = bool(spec.get('atmosphere', True))

        if 'count' in spec:
            seed_start = spec.get('seed_start', default_seed)
            seeds = range(seed_start, seed_start + spec['count'])
        else:
            seeds = [spec.get('seed', default_seed)]

        for seed in seeds:
            bodies.append((SurfaceDescriptor(seed=seed, category=category, theme=theme, size_px=size_px), with_atmosphere))
    return bodies


def body_key(descriptor: SurfaceDescriptor) -> str:
    return "-".join(str(part) for part in descriptor.cache_key())


# --- Global variables for worker processes ---
worker_generator = None
worker_images_dir = None


def init_worker(generation_params: dict, images_dir: str):
    """Initializes the global state for each worker process."""
    global worker_generator, worker_images_dir
    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_generator = BodyGenerator(config=generation_params, logger=worker_logger)
    worker_images_dir = images_dir


def process_body(task: tuple) -> dict:
    """
    Generates and SAVES one body. Returns only minimal metadata.
    """
    descriptor, with_atmosphere = task
    result = {
        'key': body_key(descriptor),
        'seed': descriptor.seed,
        'category': descriptor.category.value,
        'size_px': descriptor.size_px,
        'surface': None,
        'atmosphere': None,
        'written': 0,
    }

    surface = worker_generator.generate_surface(descriptor)
    result['surface'] = hash_buffer(surface)
    result['written'] += save_body_image(surface, worker_images_dir, result['surface'])

    if with_atmosphere:
        halo = worker_generator.generate_atmosphere(descriptor)
        result['atmosphere'] = hash_buffer(halo)
        result['atmosphere_size_px'] = halo.width
        result['written'] += save_body_image(halo, worker_images_dir, result['atmosphere'])

    return result


# --- Main Baking Function ---
def bake_bodies(config_path: str, output_dir: str = DEFAULT_OUTPUT_DIR, workers: int = None) -> str | None:
    """
    Loads a configuration, generates every listed body, and saves the images
    plus manifest to output_dir. Returns the manifest path, or None if the
    configuration could not be loaded.
    """
    logger = logging.getLogger("Baker")

    # 1. --- Load Configuration ---
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None

    generation_params = config.get('generation_parameters', {})
    try:
        tasks = parse_bodies(config.get('bodies', []))
        main_generator = BodyGenerator(config=generation_params, logger=logger)
    except (KeyError, ValueError) as e:
        logger.critical(f"Invalid bake configuration: {e}")
        return None

    if not tasks:
        logger.warning("Config lists no bodies; nothing to bake.")

    # 2. --- Prepare Output Directories ---
    images_dir = os.path.join(output_dir, "images")
    os.makedirs(images_dir, exist_ok=True)

    # 3. --- Main Baking Loop ---
    if workers is None:
        workers = max(1, multiprocessing.cpu_count() - 1)
    logger.info(f"Baking {len(tasks)} bodies with {workers} worker process(es)...")
    start_time = time.perf_counter()

    results = []
    init_args = (generation_params, images_dir)
    if workers <= 1:
        init_worker(*init_args)
        for result in tqdm(map(process_body, tasks), total=len(tasks), desc="Baking Bodies"):
            results.append(result)
    else:
        with multiprocessing.Pool(processes=workers, initializer=init_worker, initargs=init_args) as pool:
            for result in tqdm(pool.imap_unordered(process_body, tasks), total=len(tasks), desc="Baking Bodies"):
                results.append(result)

    # --- Finalization ---
    results.sort(key=lambda r: r['key'])
    manifest_bodies = [{k: v for k, v in r.items() if k != 'written'} for r in results]
    unique_hashes = {r['surface'] for r in results} | {r['atmosphere'] for r in results if r['atmosphere']}

    manifest = {
        'package_name': os.path.basename(os.path.normpath(output_dir)),
        'image_count': len(unique_hashes),
        'bodies': manifest_bodies,
    }
    manifest_path = os.path.join(output_dir, "manifest.json")
    with open(manifest_path, 'w') as f:
        json.dump(manifest, f, indent=2)

    with open(os.path.join(output_dir, "generation_config.json"), 'w') as f:
        json.dump({'generation_parameters': main_generator.settings, 'bodies': config.get('bodies', [])}, f, indent=2)

    elapsed = time.perf_counter() - start_time
    image_refs = len(results) + sum(1 for r in results if r['atmosphere'])
    logger.info(f"Baking complete! Total time: {elapsed:.2f} seconds.")
    written = sum(r['written'] for r in results)
    logger.info(
        f"  - {image_refs} images referenced -> {len(unique_hashes)} unique images "
        f"({written} newly written)"
    )
    logger.info(f"Baked bodies and manifest.json saved to: {output_dir}")
    return manifest_path


# --- Command-Line Interface ---
def main(argv=None):
    parser = argparse.ArgumentParser(description="Offline baker for the celestial body generator.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file listing the bodies to bake."
    )
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help="Directory to write images and manifest.json to."
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker processes (default: CPU count - 1)."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    manifest_path = bake_bodies(args.config, args.output, args.workers)
    return 0 if manifest_path else 1


if __name__ == "__main__":
    sys.exit(main())

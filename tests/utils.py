from __future__ import annotations

import os
import textwrap
from pathlib import Path

from dsfdeps.xplane_paths import tile_dir

TILE = "+47+008"
QUADRANT = "+40+000"

GROUND_TER = "\n".join(
    [
        "A",
        "800",
        "TERRAIN",
        "",
        "BASE_TEX_NOWRAP ../textures/tex1.dds",
        "BORDER_TEX ../textures/tex1.png",
        "NO_ALPHA",
        "",
    ]
)


def dsf_path(package: Path, tile: str = TILE, quadrant: str = QUADRANT) -> Path:
    return tile_dir(package, quadrant) / f"{tile}.dsf"


def write_tile(package: Path, text: str, *, tile: str = TILE) -> Path:
    """Write a fake DSF whose content is its own DSFTool text projection."""
    path = dsf_path(package, tile)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_terrain(package: Path, name: str, text: str = GROUND_TER) -> Path:
    path = package / "terrain" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_texture(package: Path, name: str, data: bytes = b"texture") -> Path:
    path = package / "textures" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def build_package(package: Path, *, dds: bool = True, jpg: bool = False) -> Path:
    """Build a package with one tile using ground.ter -> tex1.dds / tex1.png."""
    tile = write_tile(package, "I\n800\nXPLANE\n\nTERRAIN_DEF terrain/ground.ter\n")
    write_terrain(package, "ground.ter")
    write_texture(package, "tex1.png")
    if dds:
        write_texture(package, "tex1.dds")
    if jpg:
        write_texture(package, "tex1.jpg")
    return tile


def write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def write_fake_dsftool(directory: Path, name: str = "dsftool.py") -> Path:
    """Write a DSFTool stand-in that copies the DSF (already text) to the output."""
    return write_script(
        directory / name,
        """
        import shutil
        import sys

        args = sys.argv[1:]
        if len(args) != 3 or args[0] != "--dsf2text":
            sys.exit(2)
        shutil.copyfile(args[1], args[2])
        """,
    )


def write_failing_dsftool(directory: Path, name: str = "dsftool.py") -> Path:
    return write_script(
        directory / name,
        """
        import sys

        print("converter stdout detail")
        print("converter stderr detail", file=sys.stderr)
        sys.exit(3)
        """,
    )


def write_hanging_dsftool(directory: Path, name: str = "dsftool.py") -> Path:
    return write_script(
        directory / name,
        """
        import time

        time.sleep(30)
        """,
    )


class FakeConverter:
    """In-process converter that records calls."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.calls: list[tuple[Path, Path]] = []

    def dsf2text(self, dsf_path: Path, text_path: Path) -> None:
        self.calls.append((dsf_path, text_path))
        text = self.text if self.text is not None else dsf_path.read_text(encoding="utf-8")
        text_path.write_text(text, encoding="utf-8")


def with_src_env(base_env: dict[str, str] | None = None) -> dict[str, str]:
    """Return an environment with repo src/ on PYTHONPATH."""
    env = dict(base_env or os.environ)
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    if src_path.exists():
        existing = env.get("PYTHONPATH", "")
        entries = [entry for entry in existing.split(os.pathsep) if entry]
        src_str = str(src_path)
        if src_str not in entries:
            entries.insert(0, src_str)
        env["PYTHONPATH"] = os.pathsep.join(entries)
    return env

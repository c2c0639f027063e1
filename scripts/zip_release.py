import json
import zipfile
from pathlib import Path

EXCLUDED_SUFFIXES = (".pyc", ".pyo")


def read_version(source_dir: Path) -> str:
    manifest = json.loads((source_dir / "manifest.json").read_text(encoding="utf-8"))
    return manifest["version"]


def create_zip():
    root_dir = Path(__file__).parent.parent
    source_dir = root_dir / "custom_components" / "kohler_konnect"
    dist_dir = root_dir / "dist"
    version = read_version(source_dir)
    output_zip = dist_dir / f"kohler_konnect-{version}.zip"

    dist_dir.mkdir(exist_ok=True)
    output_zip.unlink(missing_ok=True)

    print(f"Zipping {source_dir} (v{version}) to {output_zip}...")

    with zipfile.ZipFile(output_zip, "w", zipfile.ZIP_DEFLATED) as zipf:
        for file_path in sorted(source_dir.rglob("*")):
            if not file_path.is_file():
                continue
            if file_path.suffix in EXCLUDED_SUFFIXES or "__pycache__" in file_path.parts:
                continue
            zipf.write(file_path, file_path.relative_to(source_dir))

    print(f"Successfully created {output_zip}")


if __name__ == "__main__":
    create_zip()

"""Archive the Gemfile pair shipped inside each ``metanorma/metanorma`` image.

For every version the extractor pulls the image, prints the Gemfile and
its lock file from inside a throwaway container, writes them as

    <data_dir>/gemfile/v<version>/Gemfile
    <data_dir>/gemfile/v<version>/Gemfile.lock.archived

and removes the image again. Only the ``docker`` CLI is required.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable

from mnenv.errors import ExtractionError
from mnenv.fetchers.gemfile import DOCKER_IMAGE
from mnenv.models import GemfileVersion

logger = logging.getLogger(__name__)

GEMFILE_NAME = "Gemfile"
GEMFILE_LOCK_NAME = "Gemfile.lock.archived"

SEPARATOR = "===GEMFILE.EOF==="

EXTRACTION_SCRIPT = f"""\
for path in /metanorma/Gemfile /setup/Gemfile /Gemfile /root/Gemfile; do
  if [ -f "$path" ]; then
    gemfile_dir=$(dirname "$path")
    echo "GEMFILE_DIR=$gemfile_dir"
    cat "$path"
    echo "{SEPARATOR}"
    cat "$gemfile_dir/Gemfile.lock"
    exit 0
  fi
done
echo "ERROR: No Gemfile found"
exit 1
"""

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def parse_extraction_output(output: str) -> tuple[str, str]:
    """Split the container output into ``(gemfile, gemfile_lock)``."""
    if SEPARATOR not in output:
        raise ExtractionError("Failed to parse extraction output: separator not found")

    gemfile, _, lock = output.partition(SEPARATOR)
    lines = [line for line in gemfile.splitlines() if not line.startswith("GEMFILE_DIR=")]
    return "\n".join(lines).strip(), lock.strip()


class GemfileExtractor:
    """Materializer for the Gemfile source."""

    def __init__(self, data_dir: Path, *, runner: Runner = subprocess.run, image: str = DOCKER_IMAGE) -> None:
        self.data_dir = data_dir
        self.image = image
        self._run = runner

    def gemfile_path(self, version: GemfileVersion) -> Path:
        return self.data_dir / version.directory_name / GEMFILE_NAME

    def gemfile_lock_path(self, version: GemfileVersion) -> Path:
        return self.data_dir / version.directory_name / GEMFILE_LOCK_NAME

    def is_materialized(self, version: GemfileVersion) -> bool:
        return (
            version.gemfile_exists
            and self.gemfile_path(version).is_file()
            and self.gemfile_lock_path(version).is_file()
        )

    def materialize(self, version: GemfileVersion) -> GemfileVersion:
        if shutil.which("docker") is None:
            raise ExtractionError(
                "docker is required to extract Gemfiles. Install Docker and make sure 'docker' is on PATH."
            )

        reference = f"{self.image}:{version.version}"
        logger.info("Pulling %s", reference)
        self._docker("pull", reference, failure=f"Failed to pull Docker image {reference}")
        try:
            output = self._docker(
                "run", "--rm", "--entrypoint", "sh", reference, "-c", EXTRACTION_SCRIPT,
                failure=f"Extraction failed for {version.version}",
            )
        finally:
            self._cleanup(reference)

        gemfile, lock = parse_extraction_output(output)
        gemfile_path = self.gemfile_path(version)
        gemfile_path.parent.mkdir(parents=True, exist_ok=True)
        gemfile_path.write_text(gemfile + "\n", encoding="utf-8")
        self.gemfile_lock_path(version).write_text(lock + "\n", encoding="utf-8")
        logger.info("Extracted Gemfiles for %s", version.version)

        return version.with_gemfiles(
            f"{version.directory_name}/{GEMFILE_NAME}",
            f"{version.directory_name}/{GEMFILE_LOCK_NAME}",
        )

    def remove(self, version: GemfileVersion) -> None:
        for path in (self.gemfile_path(version), self.gemfile_lock_path(version)):
            path.unlink(missing_ok=True)

    def _docker(self, *args: str, failure: str) -> str:
        try:
            result = self._run(["docker", *args], check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            raise ExtractionError(f"{failure}: {detail}" if detail else failure) from exc
        except OSError as exc:
            raise ExtractionError(f"{failure}: {exc}") from exc
        return result.stdout or ""

    def _cleanup(self, reference: str) -> None:
        try:
            self._run(["docker", "rmi", "-f", reference], check=False, capture_output=True, text=True)
        except OSError as exc:
            logger.debug("Could not remove image %s: %s", reference, exc)

"""Save an assembled Agent document to disk (atomic temp file + rename)."""

import logging
import tempfile
from pathlib import Path

from wizard.document import AgentDocument

logger = logging.getLogger(__name__)


def default_filename(document: AgentDocument) -> str:
    return f"{document.name or 'agent'}-crd.yaml"


def save_document(
    document: AgentDocument,
    output_dir: Path,
    filename: str | None = None,
) -> Path:
    """Write the document YAML into output_dir. Returns the written path."""
    path = output_dir / (filename or default_filename(document))
    _write_atomic_text(path, document.to_yaml())
    logger.info("Saved agent document to %s", path)
    return path


def _write_atomic_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(
        suffix=path.suffix or ".yaml",
        prefix=f"{path.stem}_",
        dir=path.parent,
    )
    try:
        with open(fd, "w", encoding="utf-8") as f:
            f.write(content)
        Path(tmp).replace(path)
    except Exception:
        Path(tmp).unlink(missing_ok=True)
        raise

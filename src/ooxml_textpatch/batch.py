"""
Batch rewriting of documents with an external text generator.

Each document gets its own session; nothing is shared between documents. A
document's bytes are read completely before the generator is awaited, and
its output is only written once, atomically, after the session has emitted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import UnsupportedFlavorError
from .flavors import Flavor
from .package import write_atomic
from .session import ApplyResult, open_document

logger = logging.getLogger(__name__)

# Called with a document's plain text, returns the rewritten text
TextGenerator = Callable[[str], Awaitable[str]]

DEFAULT_CONCURRENCY = 4

# Prefix Office uses for lock files next to open documents
LOCK_FILE_PREFIX = "~$"


@dataclass(frozen=True, slots=True)
class DocumentEntry:
    name: str
    path: Path
    size: int
    mtime: float
    flavor: Flavor


@dataclass(frozen=True, slots=True)
class BatchResult:
    path: Path
    success: bool
    output: Path | None = None
    slots: int = 0
    fallback: bool = False
    error: str | None = None


def scan_documents(root: str | Path) -> list[DocumentEntry]:
    """Find every Word and PowerPoint package under a folder.

    Returns:
        Entries sorted by file name
    """
    entries = []
    for path in Path(root).rglob("*"):
        if not path.is_file() or path.name.startswith(LOCK_FILE_PREFIX):
            continue
        try:
            flavor = Flavor.from_extension(path)
        except UnsupportedFlavorError:
            continue
        try:
            stat = path.stat()
        except OSError as e:
            logger.warning(f"Skipping {path}: {e}")
            continue
        entries.append(
            DocumentEntry(
                name=path.name, path=path, size=stat.st_size, mtime=stat.st_mtime, flavor=flavor
            )
        )
    entries.sort(key=lambda entry: entry.name)
    return entries


async def rewrite_document(
    data: bytes, flavor: Flavor | str | None, generate: TextGenerator
) -> tuple[bytes, ApplyResult]:
    """Rewrite the text of one package.

    The tree is not touched while the generator is awaited: text is
    extracted first, then the generated text is applied and emitted.

    Returns:
        The emitted package and how the generated text was applied
    """
    with open_document(data, flavor) as session:
        text = session.extract_plain_text()
        generated = await generate(text)
        applied = session.apply_plain_text(generated)
        return session.emit(), applied


async def rewrite_documents(
    paths: Iterable[str | Path],
    generate: TextGenerator,
    *,
    output_dir: str | Path | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[BatchResult]:
    """Rewrite several documents concurrently.

    A failure in one document is recorded in its result and does not affect
    the others.

    Args:
        paths: Documents to rewrite; the flavor comes from each extension
        generate: External text generator
        output_dir: Folder for the outputs; documents are rewritten in place if None
        concurrency: Maximum number of documents in flight

    Returns:
        One BatchResult per path, in input order
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))
    target_dir = Path(output_dir) if output_dir is not None else None

    async def _rewrite_one(path: Path) -> BatchResult:
        async with semaphore:
            try:
                flavor = Flavor.from_extension(path)
                data = await asyncio.to_thread(path.read_bytes)
                output, applied = await rewrite_document(data, flavor, generate)
                target = target_dir / path.name if target_dir is not None else path
                await asyncio.to_thread(write_atomic, target, output)
            except Exception as e:
                logger.warning(f"Failed to rewrite {path}: {e}")
                return BatchResult(path=path, success=False, error=str(e))

            logger.debug(f"Rewrote {path} -> {target} ({applied})")
            return BatchResult(
                path=path,
                success=True,
                output=target,
                slots=applied.slots,
                fallback=applied.fallback,
            )

    return await asyncio.gather(*(_rewrite_one(Path(p)) for p in paths))

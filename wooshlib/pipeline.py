from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Any, Iterable

from .audio import AUDIO_EXTENSIONS, AudioLoadError, load_clip, write_clip
from .config import ConfigError, strategy_from_config, validate_config
from .events import (
    BATCH_COMPLETE,
    CLIP_COMPLETE,
    CLIP_START,
    PROCESSOR_COMPLETE,
    EventBus,
)
from .log import timed
from .models import AudioClip, BatchItem, EditResult, JobStatus
from .processor import ClipProcessor

log = logging.getLogger(__name__)


class Pipeline:
    """Runs the enabled processors over a batch of clips.

    Each clip is handled by exactly one worker thread, start to finish, so
    no buffer is ever shared between workers.  Clips are immutable, which
    makes the per-item results safe to read from any thread afterwards.
    """

    def __init__(
        self,
        processors: list[ClipProcessor],
        config: dict[str, Any] | None = None,
        event_bus: EventBus | None = None,
        max_workers: int | None = None,
    ):
        self.config = config or {}
        validate_config(self.config)
        self.event_bus = event_bus
        self.max_workers = (max_workers or self.config.get("max_workers")
                            or min(os.cpu_count() or 4, 8))
        self._cancelled = threading.Event()

        strategy = strategy_from_config(self.config, "buffer")
        for p in processors:
            p.configure(self.config)
            p.strategy = strategy
        self.processors: list[ClipProcessor] = sorted(
            [p for p in processors if p.enabled],
            key=lambda p: p.priority,
        )
        self._validate()

    def _validate(self):
        seen = set()
        for p in self.processors:
            if p.id in seen:
                raise ConfigError(f"Duplicate processor ID: {p.id}")
            seen.add(p.id)

    def _emit(self, event_type: str, **data):
        if self.event_bus:
            self.event_bus.emit(event_type, **data)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop starting new clips.  Clips already running finish normally."""
        self._cancelled.set()

    # ------------------------------------------------------------------

    def _process_item(self, item: BatchItem, total: int) -> None:
        """Run the processor chain on one clip (thread-safe)."""
        if self._cancelled.is_set():
            item.status = JobStatus.CANCELLED
            return
        item.status = JobStatus.RUNNING
        clip = item.source
        name = clip.display_name
        self._emit(CLIP_START, filename=name, index=item.index, total=total)
        with timed(f"{name}: all processors"):
            for proc in self.processors:
                command = proc.command()
                with timed(f"{name}: {proc.id}"):
                    try:
                        after = proc.apply(clip)
                        item.results.append(EditResult(command=command, before=clip,
                                                       after=after))
                        clip = after
                    except Exception as e:
                        log.warning("%s failed on %s: %s", proc.id, name, e)
                        item.errors.append(f"{proc.id}: {e}")
                        item.results.append(EditResult(command=command, before=clip,
                                                       after=clip, error=str(e)))
                self._emit(PROCESSOR_COMPLETE, processor_id=proc.id, filename=name)
        item.output = clip
        item.status = JobStatus.FAILED if item.errors else JobStatus.COMPLETED
        item.completed_at = datetime.now()
        self._emit(CLIP_COMPLETE, filename=name, index=item.index, total=total,
                   status=item.status)

    def process(self, clips: Iterable[AudioClip]) -> list[BatchItem]:
        """Process every clip; returns one :class:`BatchItem` per input, in order."""
        items = [BatchItem(index=i, source=c) for i, c in enumerate(clips)]
        total = len(items)
        workers = min(self.max_workers, total) if items else 1
        with timed(f"batch of {total} clips on {workers} workers"), \
                ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {}
            for item in items:
                if self._cancelled.is_set():
                    item.status = JobStatus.CANCELLED
                    continue
                futures[pool.submit(self._process_item, item, total)] = item
            for future in as_completed(futures):
                exc = future.exception()
                if exc:
                    item = futures[future]
                    item.status = JobStatus.FAILED
                    item.errors.append(str(exc))
        self._emit(BATCH_COMPLETE, total=total,
                   cancelled=sum(i.status == JobStatus.CANCELLED for i in items))
        return items


# ---------------------------------------------------------------------------
# Loading / exporting
# ---------------------------------------------------------------------------

def collect_audio_files(paths: Iterable[str]) -> list[str]:
    """Expand directories recursively into audio file paths.

    Each directory's files come out sorted, sub-folders walked in name
    order after them.  Hidden files and folders are skipped.  Paths that
    are not directories are passed through as given.
    """
    found: list[str] = []
    for path in paths:
        if not os.path.isdir(path):
            found.append(path)
            continue
        for root, dirs, files in os.walk(path):
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            found.extend(os.path.join(root, f) for f in sorted(files)
                         if f.lower().endswith(AUDIO_EXTENSIONS)
                         and not f.startswith("."))
    return found


def load_clips(paths: Iterable[str]) -> tuple[list[AudioClip], dict[str, str]]:
    """Load every path.  Returns ``(clips, failures)``; failures map path to error."""
    clips: list[AudioClip] = []
    failures: dict[str, str] = {}
    for path in collect_audio_files(paths):
        try:
            clips.append(load_clip(path))
        except AudioLoadError as e:
            log.warning("%s", e)
            failures[path] = str(e)
    return clips, failures


def export_clips(items: Iterable[BatchItem], output_dir: str,
                 fmt: str = "wav") -> list[str]:
    """Write the output of every finished item as ``<stem>.<fmt>``.

    Clips gathered from different sub-folders can share a file name; the
    later ones get a ``_2``, ``_3``... suffix instead of overwriting.
    """
    written: list[str] = []
    ext = fmt.lstrip(".")
    for item in items:
        if item.output is None or item.status == JobStatus.CANCELLED:
            continue
        stem = os.path.splitext(item.output.display_name)[0]
        out_path = os.path.join(output_dir, f"{stem}.{ext}")
        n = 2
        while out_path in written:
            out_path = os.path.join(output_dir, f"{stem}_{n}.{ext}")
            n += 1
        write_clip(item.output, out_path)
        written.append(out_path)
    return written

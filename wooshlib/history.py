from __future__ import annotations

import logging

from .models import AudioClip, EditCommand, EditResult
from .processor import ClipProcessor

log = logging.getLogger(__name__)


class EditHistory:
    """Undo/redo for one clip, built on immutable snapshots.

    Every applied edit is stored as an :class:`EditResult` holding the clip
    before and after.  Since clips are immutable, undo is just stepping
    back to an earlier snapshot; nothing has to be re-computed or
    restored from a saved copy.
    """

    def __init__(self, clip: AudioClip) -> None:
        self._original = clip
        self._done: list[EditResult] = []
        self._undone: list[EditResult] = []

    @property
    def original(self) -> AudioClip:
        return self._original

    @property
    def current(self) -> AudioClip:
        return self._done[-1].after if self._done else self._original

    @property
    def is_modified(self) -> bool:
        return bool(self._done)

    @property
    def can_undo(self) -> bool:
        return bool(self._done)

    @property
    def can_redo(self) -> bool:
        return bool(self._undone)

    def apply(self, processor: ClipProcessor) -> AudioClip:
        """Run *processor* on the current clip and push the result."""
        before = self.current
        after = processor.apply(before)
        return self.record(processor.command(), before, after)

    def record(self, command: EditCommand, before: AudioClip,
               after: AudioClip) -> AudioClip:
        """Push an edit made elsewhere.  Clears the redo stack."""
        self._done.append(EditResult(command=command, before=before, after=after))
        self._undone.clear()
        log.debug("applied %s to %s", command.command_type, before.display_name)
        return after

    def undo(self) -> AudioClip | None:
        """Step back one edit.  Returns the restored clip, or None."""
        if not self._done:
            return None
        self._undone.append(self._done.pop())
        return self.current

    def redo(self) -> AudioClip | None:
        if not self._undone:
            return None
        self._done.append(self._undone.pop())
        return self.current

    def revert(self) -> AudioClip:
        """Drop every edit and return the original clip."""
        self._done.clear()
        self._undone.clear()
        return self._original

    def results(self) -> list[EditResult]:
        return list(self._done)

    def commands(self) -> list[EditCommand]:
        """The applied operations, oldest first."""
        return [r.command for r in self._done]

from .backend import FakeBackend, BlockingBackend
from .emitter import RecordingEmitter
from .quality import FakeQualityChecker, FailingQualityChecker
from .repositories import FailingEventRepository, SlowEventRepository
from .responses import RESEARCH_JSON, OUTLINE_TEXT, DRAFT_TEXT, EDITED_TEXT, FINAL_TEXT, stage_script

__all__ = [
    "FakeBackend",
    "BlockingBackend",
    "RecordingEmitter",
    "FakeQualityChecker",
    "FailingQualityChecker",
    "FailingEventRepository",
    "SlowEventRepository",
    "RESEARCH_JSON",
    "OUTLINE_TEXT",
    "DRAFT_TEXT",
    "EDITED_TEXT",
    "FINAL_TEXT",
    "stage_script",
]

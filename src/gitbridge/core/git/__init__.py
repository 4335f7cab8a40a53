"""Git integration layer.

This package provides:
- Paths: host path / repository-relative path translation
- Status: raw status-code classification
- Invoker: process execution with bounded output capture
- Facade: typed git operations and their parsers
- Status cache, background scanner and file-event sync
"""
from __future__ import annotations

from .commands import GitCommandKind
from .events import ConfirmationPolicy, FileEventHandler
from .facade import GitCommands
from .invalidation import DirtyScope, InvalidationBus, ScopeKind
from .invoker import OutputBuffer, ProcessInvoker
from .locking import WriteSerializer, default_write_serializer
from .models import (
    AnnotationLine,
    Branch,
    Change,
    ContentRevision,
    FileAnnotation,
    Revision,
    TrackedFile,
)
from .paths import absolute_path, find_repository_root, is_metadata_path, relative_path
from .scanner import BackgroundScanner, ScanInterrupted, ScannerRegistry, ScanSnapshot
from .status import FileStatus, classify_status
from .status_cache import ControlState, StatusCache

__all__ = [
    # paths
    "relative_path",
    "absolute_path",
    "is_metadata_path",
    "find_repository_root",
    # status
    "FileStatus",
    "classify_status",
    # execution
    "GitCommandKind",
    "OutputBuffer",
    "ProcessInvoker",
    "WriteSerializer",
    "default_write_serializer",
    # facade
    "GitCommands",
    "TrackedFile",
    "Branch",
    "Revision",
    "ContentRevision",
    "Change",
    "AnnotationLine",
    "FileAnnotation",
    # state
    "ControlState",
    "StatusCache",
    "ScopeKind",
    "DirtyScope",
    "InvalidationBus",
    "BackgroundScanner",
    "ScannerRegistry",
    "ScanSnapshot",
    "ScanInterrupted",
    "FileEventHandler",
    "ConfirmationPolicy",
]

from .callback import GroupingCallback
from .config import Capabilities, GroupingConfig, load_config
from .icons import IconProvider, StaticIconProvider
from .manager import AggregateGroupManager
from .models import (
    CachedSummary,
    FullyQualifiedGroupKey,
    Icon,
    NotificationAttributes,
    NotificationChannel,
    NotificationView,
)
from .sections import Section, SectionClassifier

__all__ = [
    "AggregateGroupManager",
    "CachedSummary",
    "Capabilities",
    "FullyQualifiedGroupKey",
    "GroupingCallback",
    "GroupingConfig",
    "Icon",
    "IconProvider",
    "NotificationAttributes",
    "NotificationChannel",
    "NotificationView",
    "Section",
    "SectionClassifier",
    "StaticIconProvider",
    "load_config",
]

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/hooks.py
"""Hook system for observing and vetoing sanitizer decisions.

Every removal or rewrite made by :class:`~markupclean.sanitizer.Sanitizer`
is announced through a hook target. Hooks receive a mutable event object and
a :class:`HookContext`. Setting ``event.cancel = True`` on a removing event
vetoes the removal; setting ``event.sanitized_url`` on a ``filter_url``
event overrides the URL (None forces rejection).

Hook targets:
- removing_tag, removing_attribute, removing_style, removing_at_rule,
  removing_comment, removing_css_class (cancelable removals)
- filter_url (URL override)
- post_process_node (per-node replacement)
- post_process_dom (whole document, once)

Examples
--------
Keep every ``<b>`` element even when it is not allowed:

    >>> from markupclean import HookManager, Sanitizer
    >>> manager = HookManager()
    >>>
    >>> def keep_bold(event, context):
    ...     if event.tag.name == "b":
    ...         event.cancel = True
    >>>
    >>> manager.register_hook("removing_tag", keep_bold)
    >>> Sanitizer(hooks=manager).sanitize("<b>x</b>")
    '<b>x</b>'

Audit every removed attribute:

    >>> def audit(event, context):
    ...     context.shared.setdefault("removed", []).append((event.attribute, event.reason))
    >>>
    >>> manager.register_hook("removing_attribute", audit)

"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from enum import Enum
from operator import itemgetter
from typing import TYPE_CHECKING, Any, Callable, Optional

from markupclean.constants import HookTarget

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Comment, PageElement, Tag

    from markupclean.css.cssom import CssProperty, CssRule

logger = logging.getLogger(__name__)

# Hooks have the signature (event, HookContext) -> None
HookCallable = Callable[[Any, "HookContext"], Any]


class RemoveReason(str, Enum):
    """Why a node, attribute, property or class token is being removed."""

    NOT_ALLOWED_TAG = "not-allowed-tag"
    NOT_ALLOWED_ATTRIBUTE = "not-allowed-attribute"
    NOT_ALLOWED_URL_VALUE = "not-allowed-url-value"
    NOT_ALLOWED_VALUE = "not-allowed-value"
    NOT_ALLOWED_STYLE = "not-allowed-style"
    NOT_ALLOWED_CSS_CLASS = "not-allowed-css-class"
    CLASS_ATTRIBUTE_EMPTY = "class-attribute-empty"
    STYLE_ATTRIBUTE_EMPTY = "style-attribute-empty"


@dataclass
class CancelableEvent:
    """Base for removal events. Set ``cancel`` to keep the subject."""

    cancel: bool = field(default=False, init=False)


@dataclass
class RemovingTagEvent(CancelableEvent):
    tag: Tag
    reason: RemoveReason


@dataclass
class RemovingAttributeEvent(CancelableEvent):
    tag: Tag
    attribute: str
    value: str
    reason: RemoveReason


@dataclass
class RemovingStyleEvent(CancelableEvent):
    tag: Tag
    style: CssProperty
    reason: RemoveReason


@dataclass
class RemovingAtRuleEvent(CancelableEvent):
    tag: Tag
    rule: CssRule


@dataclass
class RemovingCommentEvent(CancelableEvent):
    comment: Comment


@dataclass
class RemovingCssClassEvent(CancelableEvent):
    tag: Tag
    css_class: str
    reason: RemoveReason


@dataclass
class FilterUrlEvent:
    """URL check result. ``sanitized_url`` may be replaced, or set to None to reject."""

    tag: Tag
    original_url: str
    sanitized_url: Optional[str]


@dataclass
class PostProcessNodeEvent:
    """One node after sanitizing. Nodes added to ``replacement_nodes`` take its place."""

    document: BeautifulSoup
    node: PageElement
    replacement_nodes: list[PageElement] = field(default_factory=list)


@dataclass
class PostProcessDomEvent:
    document: BeautifulSoup


@dataclass
class HookContext:
    """What a hook can see besides its event.

    Parameters
    ----------
    document : BeautifulSoup
        Root of the tree under sanitization
    base_url : str, default ""
        Base that relative URLs are resolved against
    shared : dict
        Scratch space that lives for one sanitize call and is seen by every
        hook invoked during it

    """

    document: BeautifulSoup
    base_url: str = ""
    shared: dict[str, Any] = field(default_factory=dict)

    def get_shared(self, key: str, default: Any = None) -> Any:
        """Read ``key`` from the per-call scratch space, or ``default``."""
        return self.shared.get(key, default)

    def set_shared(self, key: str, value: Any) -> None:
        self.shared[key] = value


class HookManager:
    """Registry of hooks keyed by :data:`~markupclean.constants.HookTarget`.

    Hooks are kept ordered by priority, lower values first; equal
    priorities keep their registration order.

    Parameters
    ----------
    strict : bool, default = False
        Re-raise the first exception a hook throws, aborting the sanitize
        call. Otherwise the failure is logged and the remaining hooks run.

    Examples
    --------
    Upgrade every surviving http URL:

        >>> manager = HookManager()
        >>> def force_https(event, context):
        ...     if event.sanitized_url and event.sanitized_url.startswith("http:"):
        ...         event.sanitized_url = "https:" + event.sanitized_url[5:]
        >>> manager.register_hook("filter_url", force_https)

    Notes
    -----
    Events are not copied between hooks. Whatever a hook changed on the
    event before raising in non-strict mode is kept, and the next hook sees
    it. A hook that raises before setting ``cancel`` does not stop the removal.

    Registration is not synchronized. Finish registering before a manager
    is shared between threads.

    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._registry: dict[HookTarget, list[tuple[int, HookCallable]]] = {}

    def register_hook(self, target: HookTarget, hook: HookCallable, priority: int = 100) -> None:
        """Attach ``hook`` to ``target``.

        Parameters
        ----------
        target : HookTarget
            Decision point, e.g. ``"removing_tag"``
        hook : callable
            Called as ``hook(event, context)``; the return value is ignored
        priority : int, default = 100
            Hooks with lower values run earlier

        """
        bisect.insort_right(self._registry.setdefault(target, []), (priority, hook), key=itemgetter(0))
        logger.debug(f"Hook {getattr(hook, '__name__', hook)!r} attached to {target!r} at priority {priority}")

    def unregister_hook(self, target: HookTarget, hook: HookCallable) -> bool:
        """Detach every registration of ``hook`` from ``target``; True if any existed."""
        registered = self._registry.get(target, [])
        kept = [entry for entry in registered if entry[1] != hook]
        if len(kept) == len(registered):
            return False

        self._registry[target] = kept
        logger.debug(f"Hook {getattr(hook, '__name__', hook)!r} detached from {target!r}")
        return True

    def execute_hooks(self, target: HookTarget, event: Any, context: HookContext) -> Any:
        """Run the hooks of ``target`` over ``event`` in priority order.

        Returns
        -------
        Any
            ``event`` itself, after every hook has had a chance to mutate it

        Raises
        ------
        Exception
            Whatever a hook raised, in strict mode only

        """
        for priority, hook in list(self._registry.get(target, ())):
            try:
                hook(event, context)
            except Exception as e:
                if self.strict:
                    raise
                logger.error(f"{target!r} hook at priority {priority} raised {e!r}; continuing", exc_info=True)

        return event

    def has_hooks(self, target: HookTarget) -> bool:
        """Whether ``target`` has at least one hook attached."""
        return bool(self._registry.get(target))

    def list_hooks(self) -> dict[HookTarget, list[tuple[int, HookCallable]]]:
        """Snapshot of the registry as ``{target: [(priority, hook), ...]}``, in run order."""
        return {target: entries[:] for target, entries in self._registry.items()}

    def clear(self) -> None:
        self._registry = {}
        logger.debug("All hooks detached")


__all__ = [
    "RemoveReason",
    "CancelableEvent",
    "RemovingTagEvent",
    "RemovingAttributeEvent",
    "RemovingStyleEvent",
    "RemovingAtRuleEvent",
    "RemovingCommentEvent",
    "RemovingCssClassEvent",
    "FilterUrlEvent",
    "PostProcessNodeEvent",
    "PostProcessDomEvent",
    "HookContext",
    "HookManager",
    "HookCallable",
]

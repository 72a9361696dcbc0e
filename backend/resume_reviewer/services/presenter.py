from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from resume_reviewer.core import (
    ANALYZING_MESSAGE,
    ERROR_BANNER_MS,
    REQUIRED_SCORES,
    SUCCESS_BANNER_MS,
)
from resume_reviewer.models import (
    LOADING,
    RESULTS,
    UPLOAD,
    AnalysisResult,
    Notification,
    ViewState,
)
from resume_reviewer.services.animation import (
    CATEGORY_DURATION_MS,
    OVERALL_DURATION_MS,
    CounterAnimation,
    as_number,
    circle_offset,
)

logger = logging.getLogger(__name__)


class Presenter:
    """
    Owns the single visible view-state and the transient banners.

    Every ``show_*`` call replaces the view-state, so exactly one of the
    upload / loading / results regions is visible at any time. HTML is
    produced from this state by ``services.report.render_page``.
    """

    def __init__(self):
        self.state = ViewState()
        self.history: List[ViewState] = [self.state]
        self.notifications: List[Notification] = []
        self.animations: List[CounterAnimation] = []
        self.circle_offset: Optional[float] = None

    def _set(self, state: ViewState) -> None:
        self.state = state
        self.history.append(state)

    def show_upload(self) -> None:
        self._set(ViewState(view=UPLOAD))

    def show_loading(self, message: str = ANALYZING_MESSAGE) -> None:
        self._set(ViewState(view=LOADING, message=message))

    def show_results(self, analysis: AnalysisResult) -> None:
        self._set(ViewState(view=RESULTS, analysis=analysis))
        self.animations = score_animations(analysis)
        self.circle_offset = circle_offset(analysis["score_overall"])

    def show_error(self, message: str) -> None:
        self.show_upload()
        self.notify("error", message, ERROR_BANNER_MS)

    def notify_error(self, message: str) -> None:
        """Error banner that leaves the current view untouched."""
        self.notify("error", message, ERROR_BANNER_MS)

    def show_success(self, message: str) -> None:
        self.notify("success", message, SUCCESS_BANNER_MS)

    def notify(self, kind: str, message: str, ttl_ms: int) -> Notification:
        if kind == "error":
            logger.warning("Showing error: %s", message)
        note = Notification(kind=kind, message=message, ttl_ms=ttl_ms)
        self.notifications.insert(0, note)
        return note

    def active_notifications(self, now: Optional[float] = None) -> List[Notification]:
        now = time.monotonic() if now is None else now
        self.notifications = [n for n in self.notifications if not n.expired(now)]
        return list(self.notifications)

    def final_values(self) -> Dict[str, float]:
        """Values every counter settles on once its animation has finished."""
        return {a.target: a.final_value for a in self.animations}


def score_animations(analysis: AnalysisResult) -> List[CounterAnimation]:
    animations = [
        CounterAnimation("score_overall", as_number(analysis["score_overall"]), OVERALL_DURATION_MS)
    ]
    scores = analysis["scores"]
    for key in REQUIRED_SCORES:
        animations.append(CounterAnimation(key, as_number(scores[key]), CATEGORY_DURATION_MS))
    return animations

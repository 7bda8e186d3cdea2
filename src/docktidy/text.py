"""User-facing strings for docktidy.

Only English is shipped; any other locale falls back to it.
"""

LOCALE_EN = "en"
DEFAULT_LOCALE = LOCALE_EN

KEY_APP_TAGLINE = "app.tagline"
KEY_WELCOME_MESSAGE = "welcome.message"
KEY_DASHBOARD_TITLE = "dashboard.title"
KEY_DASHBOARD_EMPTY = "dashboard.empty"
KEY_CANDIDATES_TITLE = "candidates.title"
KEY_CANDIDATES_EMPTY = "candidates.empty"
KEY_EXCLUSIONS_TITLE = "exclusions.title"
KEY_PRUNE_DRY_RUN = "prune.dry_run"
KEY_PRUNE_CONFIRM = "prune.confirm"
KEY_PRUNE_CANCELLED = "prune.cancelled"
KEY_DOCKER_STATUS_HEALTHY = "status.docker.healthy"
KEY_DOCKER_STATUS_DEGRADED = "status.docker.degraded"
KEY_DOCKER_STATUS_UNKNOWN = "status.docker.unknown"

TRANSLATIONS: dict[str, dict[str, str]] = {
    LOCALE_EN: {
        KEY_APP_TAGLINE: "docktidy - Spark joy in your Docker environment",
        KEY_WELCOME_MESSAGE: (
            "Identify and remove unused Docker containers, images, volumes "
            "and networks with confidence."
        ),
        KEY_DASHBOARD_TITLE: "Docker Disk Usage",
        KEY_DASHBOARD_EMPTY: "Disk usage data unavailable",
        KEY_CANDIDATES_TITLE: "Prune Candidates",
        KEY_CANDIDATES_EMPTY: "Nothing to prune with the current filters",
        KEY_EXCLUSIONS_TITLE: "Excluded Resources",
        KEY_PRUNE_DRY_RUN: "This was a dry run. Use --execute to actually remove.",
        KEY_PRUNE_CONFIRM: "Proceed with removal?",
        KEY_PRUNE_CANCELLED: "Cancelled.",
        KEY_DOCKER_STATUS_HEALTHY: "Docker: Connected to daemon",
        KEY_DOCKER_STATUS_DEGRADED: "Docker: Cannot reach daemon",
        KEY_DOCKER_STATUS_UNKNOWN: "Docker: Status check pending",
        # Candidate reasons
        "reason.named_volume": "Named volume, may hold data you care about",
        "reason.high_risk_type": "Resource type marked high risk",
        "reason.no_history": "No usage history, review before removing",
        "reason.recently_used": "Used recently, but not right now",
        "reason.dangling_image": "Dangling image, unused for a long time",
        "reason.stopped_container": "Stopped container, unused for a long time",
        "reason.anonymous_volume": "Anonymous volume, unused for a long time",
        "reason.idle": "Unused for a long time",
        # Exclusions
        "exclusion.unclassifiable": "Missing size or timestamps",
        "exclusion.in_use": "In use",
        "exclusion.builtin": "Built-in network",
        "exclusion.type_filtered": "Type not selected",
        "exclusion.pinned": "Pinned by label",
        "exclusion.too_recent": "Used too recently",
        "exclusion.too_small": "Below minimum size",
    },
}


class Text:
    """Lookup of user-facing strings by key."""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale

    def set_locale(self, locale: str) -> None:
        self.locale = locale

    def get(self, key: str) -> str:
        """Return the string for key, or the key itself when untranslated."""
        messages = TRANSLATIONS.get(self.locale, TRANSLATIONS[DEFAULT_LOCALE])
        return messages.get(key, key)


def default() -> Text:
    return Text()

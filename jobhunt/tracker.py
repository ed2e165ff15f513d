"""Track applications in memory, writing every change through to the store."""
from __future__ import annotations

from jobhunt import store as kv
from jobhunt.log import get_logger
from jobhunt.models import Application, ApplicationDraft, MatchReport, Status, new_id

log = get_logger(__name__)


def _decode_applications(data: object) -> list[Application]:
    if not isinstance(data, list):
        raise ValueError("expected a list of applications")
    return [Application.from_dict(item) for item in data]


class ApplicationTracker:
    """Owns the application list; newest creations sit at the front."""

    def __init__(self, store: kv.KeyValueStore) -> None:
        self.store = store
        self._apps: list[Application] = []

    @property
    def applications(self) -> list[Application]:
        return list(self._apps)

    def __len__(self) -> int:
        return len(self._apps)

    def load(self) -> list[Application]:
        self._apps = kv.load(self.store, kv.APPLICATIONS_KEY, list, _decode_applications)
        log.info("Loaded %d applications", len(self._apps))
        return self.applications

    def _persist(self) -> None:
        kv.save(self.store, kv.APPLICATIONS_KEY, [a.to_dict() for a in self._apps])

    def get(self, app_id: str) -> Application | None:
        return next((a for a in self._apps if a.id == app_id), None)

    def _fresh_id(self) -> str:
        taken = {a.id for a in self._apps}
        app_id = new_id()
        while app_id in taken:
            app_id = new_id()
        return app_id

    def create(self, draft: ApplicationDraft) -> Application:
        app = draft.to_application(self._fresh_id())
        self._apps.insert(0, app)
        self._persist()
        log.info("Added application: %s @ %s [%s]", app.job_title, app.company_name, app.id)
        return app

    def update_status(self, app_id: str, status: Status) -> Application | None:
        app = self.get(app_id)
        if app is None:
            log.debug("update_status: no application %s", app_id)
            return None
        old = app.status
        app.status = status
        self._persist()
        log.info("Updated %s: %s → %s", app.company_name, old.value, status.value)
        return app

    def attach_report(self, app_id: str, report: MatchReport) -> Application | None:
        """Replace the match report of an existing application wholesale."""
        app = self.get(app_id)
        if app is None:
            return None
        app.ats_report = report
        self._persist()
        log.info("Attached match report (%d%%) to %s", report.score, app_id)
        return app

    def delete(self, app_id: str) -> bool:
        remaining = [a for a in self._apps if a.id != app_id]
        if len(remaining) == len(self._apps):
            log.debug("delete: no application %s", app_id)
            return False
        self._apps = remaining
        self._persist()
        log.info("Deleted application %s", app_id)
        return True

    def replace_all(self, apps: list[Application]) -> None:
        self._apps = list(apps)
        self._persist()
        log.info("Replaced collection with %d applications", len(self._apps))

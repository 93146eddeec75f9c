"""ViewModel holding calendar state and orchestrating library access."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime

from loguru import logger

from app.viewmodels.day_cell_vm import DayCellVM
from core.models import AuthorizationStatus, CalendarConfig, MonthGridCell, PhotoAsset, YearMonth
from core.services.date_index import EMPTY_INDEX, AssetDateIndex
from core.services.interfaces import AssetFetchService, PermissionService
from core.services.month_grid import MonthGridBuilder

Task = Callable[[], None]
Listener = Callable[["CalendarVM"], None]


def _run_now(task: Task) -> None:
    task()


class CalendarVM:
    """State container for the calendar screen.

    Holds `authorization_status`, `asset_index`, `current_month` and
    `selected_date`, and notifies subscribers after every change. Results of
    asynchronous work (access prompt, library fetch) go through `dispatch`
    before touching state, so a UI can route them onto its own thread.
    """

    def __init__(
        self,
        permission: PermissionService,
        fetcher: AssetFetchService,
        config: CalendarConfig | None = None,
        *,
        dispatch: Callable[[Task], None] | None = None,
        run_in_background: Callable[[Task], None] | None = None,
        today: Callable[[], date] | None = None,
        builder: MonthGridBuilder | None = None,
    ) -> None:
        """Create a CalendarVM.

        Args:
            permission: Service reporting and requesting library access.
            fetcher: Service returning the library's image assets.
            config: Calendar rules (timezone, first weekday).
            dispatch: Runs a callable on the UI thread (defaults to inline).
            run_in_background: Runs a callable off the UI thread (defaults to inline).
            today: Returns today's date in the calendar timezone.
            builder: Grid builder (defaults to a new `MonthGridBuilder`).
        """
        self._permission = permission
        self._fetcher = fetcher
        self.config = config or CalendarConfig()
        self._dispatch = dispatch or _run_now
        self._background = run_in_background or _run_now
        self._today = today or (lambda: datetime.now(self.config.tz).date())
        self._builder = builder or MonthGridBuilder()
        self._listeners: list[Listener] = []

        self.authorization_status = AuthorizationStatus.NOT_DETERMINED
        self.asset_index: AssetDateIndex = EMPTY_INDEX
        self.current_month = YearMonth.from_date(self._today())
        self.selected_date: date | None = self._today()
        self.is_fetching = False
        self._fetch_generation = 0

    # Subscription
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # Authorization
    def check_authorization(self) -> None:
        """Read access state; prompt when undetermined, fetch when authorized."""
        status = self._permission.current_status()
        logger.info("Library authorization status: {}", status.value)
        self._set_status(status)
        if status is AuthorizationStatus.NOT_DETERMINED:
            self._permission.request_access(self._on_access_result)
        elif status is AuthorizationStatus.AUTHORIZED:
            self.fetch_photos()

    def request_library_access(self) -> None:
        """Prompt for access again, e.g. to pick a different library folder."""
        self._permission.request_access(self._on_access_result)

    def _on_access_result(self, status: AuthorizationStatus) -> None:
        # May be called from any thread
        self._dispatch(lambda: self._apply_access_result(status))

    def _apply_access_result(self, status: AuthorizationStatus) -> None:
        logger.info("Library access result: {}", status.value)
        self._set_status(status)
        if status is AuthorizationStatus.AUTHORIZED:
            self.fetch_photos()

    def _set_status(self, status: AuthorizationStatus) -> None:
        self.authorization_status = status
        if status is not AuthorizationStatus.AUTHORIZED and self.asset_index is not EMPTY_INDEX:
            self.asset_index = EMPTY_INDEX
        self._notify()

    # Fetch
    def fetch_photos(self) -> bool:
        """Fetch assets and rebuild the day index.

        Returns False when the library isn't authorized; otherwise starts the
        fetch (inline unless a background runner was given) and returns True.
        """
        if self.authorization_status is not AuthorizationStatus.AUTHORIZED:
            logger.info("Fetch ignored while {}", self.authorization_status.value)
            return False
        self._fetch_generation += 1
        generation = self._fetch_generation
        self.is_fetching = True
        self._notify()
        config = self.config

        def _work() -> None:
            try:
                assets = self._fetcher.fetch_all_image_assets()
            except OSError as ex:
                logger.error("Photo library fetch failed: {}", ex)
                self._dispatch(lambda: self._finish_failed_fetch(generation))
                return
            index = AssetDateIndex.build(assets, config)
            self._dispatch(lambda: self._apply_index(index, generation))

        self._background(_work)
        return True

    def load_assets(self, assets: list[PhotoAsset]) -> None:
        """Replace the index with one built from `assets`.

        Fetches still running when this is called are superseded.
        """
        self._fetch_generation += 1
        self._apply_index(AssetDateIndex.build(assets, self.config), self._fetch_generation)

    def _is_stale(self, generation: int) -> bool:
        if generation != self._fetch_generation:
            logger.debug("Dropping result of superseded fetch #{}", generation)
            return True
        return False

    def _apply_index(self, index: AssetDateIndex, generation: int) -> None:
        if self._is_stale(generation):
            return
        self.is_fetching = False
        if self.authorization_status is not AuthorizationStatus.AUTHORIZED:
            logger.info("Dropping fetched index; access is now {}", self.authorization_status.value)
            self._notify()
            return
        self.asset_index = index
        logger.info("Indexed {} photos across {} days", index.total_assets, len(index))
        self._notify()

    def _finish_failed_fetch(self, generation: int) -> None:
        if self._is_stale(generation):
            return
        self.is_fetching = False
        self._notify()

    # Navigation
    def show_month(self, month: YearMonth) -> None:
        self.current_month = month.validate()
        self._notify()

    def show_next_month(self) -> None:
        self.show_month(self.current_month.next())

    def show_previous_month(self) -> None:
        self.show_month(self.current_month.previous())

    def show_today(self) -> None:
        today = self._today()
        self.selected_date = today
        self.show_month(YearMonth.from_date(today))

    def select_date(self, day: date | None) -> None:
        self.selected_date = day
        self._notify()

    # Derived state
    @property
    def cells(self) -> tuple[MonthGridCell, ...]:
        """The 42 grid cells for `current_month`."""
        return self._builder.layout(self.current_month, self.asset_index, self.config)

    def day_cells(self) -> list[DayCellVM]:
        today = self._today()
        return [DayCellVM(cell, today=today, selected=self.selected_date) for cell in self.cells]

    def photos_on(self, day: date) -> tuple[PhotoAsset, ...]:
        return self.asset_index.lookup(day)

    @property
    def status_message(self) -> str:
        """User-facing summary of the current state."""
        status = self.authorization_status
        if status is AuthorizationStatus.NOT_DETERMINED:
            return "Choose a photo library folder to show photos"
        if status is AuthorizationStatus.DENIED:
            return "Photo library access denied. Choose a readable folder from the Library menu."
        if status is AuthorizationStatus.LIMITED:
            return "Limited photo library access. Grant full access to show photos."
        if self.is_fetching:
            return "Loading photos…"
        if self.selected_date is not None:
            count = len(self.asset_index.lookup(self.selected_date))
            if count:
                return f"{self.selected_date.isoformat()}: {count} photos"
        return f"{self.asset_index.total_assets} photos on {len(self.asset_index)} days"

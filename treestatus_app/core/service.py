"""TreeStatusService: orchestrates log fetching and the report pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Protocol

from treestatus_app.analytics.report import TreeReport, build_tree_report

from .config import FETCH_MAX_WORKERS, EngineSettings
from .release_cycles import load_release_cycles
from .timeutils import utc_now_ms

ProgressCallback = Callable[[str, int | None, int | None], None]
RawLog = list[dict[str, Any]]

logger = logging.getLogger(__name__)


class LogSource(Protocol):
    def fetch_logs(self, tree: str) -> RawLog: ...


class TreeStatusService:
    def __init__(self, api: LogSource, settings: EngineSettings | None = None):
        self.api = api
        self.settings = settings or EngineSettings(release_cycles=tuple(load_release_cycles()))

    # ------------------ Fetch Methods ------------------
    def fetch_tree(self, tree: str, *, progress: ProgressCallback | None = None) -> RawLog:
        if progress:
            progress(f"Fetching status log for {tree}", None, None)
        return self.api.fetch_logs(tree)

    def fetch_many(
        self,
        trees: Sequence[str],
        cache: Mapping[str, RawLog] | None = None,
        *,
        refresh: bool = False,
        progress: ProgressCallback | None = None,
    ) -> dict[str, RawLog]:
        """Fetch logs of several trees in parallel.

        Parameters
        ----------
        trees : Sequence[str]
            Tree names.
        cache : Mapping[str, list], optional
            Logs fetched earlier, owned by the caller. Trees present here are
            not fetched again unless ``refresh`` is set.
        refresh : bool
            Refetch every tree.

        Returns
        -------
        dict[str, list]
            A new map holding the cached and newly fetched logs. Trees whose
            fetch failed are left out (a warning is logged).
        """
        logs: dict[str, RawLog] = dict(cache or {})
        work = [t for t in trees if refresh or t not in logs]
        if not work:
            return logs

        if progress:
            progress("Fetching tree status logs", 0, len(work))
        completed = 0
        with ThreadPoolExecutor(max_workers=min(FETCH_MAX_WORKERS, len(work))) as pool:
            futures = {pool.submit(self.api.fetch_logs, tree): tree for tree in work}
            for fut in as_completed(futures):
                tree = futures[fut]
                try:
                    logs[tree] = fut.result()
                except Exception as exc:
                    logger.warning("Failed to fetch status log for %s: %s", tree, exc)
                    logs.pop(tree, None)
                finally:
                    completed += 1
                    if progress:
                        progress("Fetching tree status logs", completed, len(work))
        return logs

    # ------------------ Report Pipeline ------------------
    def build_report(self, tree: str, raw_log: RawLog, now: int | None = None) -> TreeReport:
        now = utc_now_ms() if now is None else now
        return build_tree_report(tree, raw_log, now, self.settings)

    def fetch_and_build(
        self,
        trees: Sequence[str],
        cache: Mapping[str, RawLog] | None = None,
        *,
        now: int | None = None,
        refresh: bool = False,
        progress: ProgressCallback | None = None,
    ) -> tuple[dict[str, TreeReport], dict[str, RawLog]]:
        """Fetch (or reuse) logs and build one report per tree.

        Returns the reports and the updated log map for the caller to keep.
        """
        logs = self.fetch_many(trees, cache, refresh=refresh, progress=progress)
        now = utc_now_ms() if now is None else now
        reports: dict[str, TreeReport] = {}
        for tree in trees:
            if tree not in logs:
                continue
            if progress:
                progress(f"Calculating statistics for {tree}", None, None)
            reports[tree] = self.build_report(tree, logs[tree], now)
        return reports, logs

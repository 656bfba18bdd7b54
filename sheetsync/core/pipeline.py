from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from .errors import (
    LabelNotFound,
    SetupError,
    SheetSyncError,
    WorksheetNotFound,
    format_warning,
)
from .logger import get_logger
from .models import DEFAULT_INDEX, SyncResult, Table, Worksheet
from .profiles import SyncScope, SyncSettings
from sheetsync.scene.fonts import FontCache, FontLoader, StaticFontLoader
from sheetsync.scene.mutator import InMemoryMutator, NodeMutator, can_have_image_fill
from sheetsync.scene.nodes import Document, NodeType, SceneNode
from sheetsync.scene.traversal import scope_roots, traverse
from sheetsync.services.binding import LabelIndex, find_worksheet, resolve
from sheetsync.services.dispatch import (
    ComponentIndex,
    HttpImageFetcher,
    ImageFetcher,
    is_image_url,
    swap_component,
    sync_image,
    sync_text,
)
from sheetsync.services.index_tracker import NO_VALUE, IndexTracker
from sheetsync.services.index_tracker.tracker import is_blank
from sheetsync.services.repeat import expand, target_count_for
from sheetsync.services.special_values import apply_chained, parse_chained
from sheetsync.services.special_values.parser import has_prefix


ProgressCB = Callable[[str, int], None]
CancelCheck = Callable[[], bool]
TableSource = Union[Table, Callable[[], Table]]

PREFIXED_TYPES = frozenset({NodeType.TEXT, NodeType.INSTANCE})


class _Cancelled(Exception):
    """Raised internally when the cancel check fires at a boundary."""


@dataclass
class _RunContext:
    """State owned by exactly one run and dropped when it ends."""

    table: Table
    tracker: IndexTracker
    fonts: FontCache
    components: ComponentIndex
    result: SyncResult
    label_indexes: Dict[str, LabelIndex] = field(default_factory=dict)

    def label_index(self, worksheet: Worksheet) -> LabelIndex:
        index = self.label_indexes.get(worksheet.name)
        if index is None:
            index = self.label_indexes[worksheet.name] = LabelIndex(worksheet.labels)
        return index


class SyncPipeline:
    """Coordinates Acquire -> Index -> Expand -> Re-scope -> Bind & apply -> Report."""

    def __init__(
        self,
        settings: SyncSettings | None = None,
        *,
        mutator: NodeMutator | None = None,
        font_loader: FontLoader | None = None,
        image_fetcher: ImageFetcher | None = None,
        logger=None,
    ) -> None:
        self.settings = settings or SyncSettings()
        self.logger = logger or get_logger()
        self.mutator = mutator or InMemoryMutator()
        self.font_loader = font_loader or StaticFontLoader()
        self._image_fetcher = image_fetcher

    @property
    def image_fetcher(self) -> ImageFetcher:
        if self._image_fetcher is None:
            self._image_fetcher = HttpImageFetcher(timeout=self.settings.image_timeout_sec)
        return self._image_fetcher

    # ------------------------------------------------------------------
    def run(
        self,
        document: Document,
        table_source: TableSource,
        *,
        scope: SyncScope | None = None,
        page_name: str | None = None,
        progress_cb: ProgressCB | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> SyncResult:
        """Sync every bound node in ``scope`` and return the run report."""

        scope = scope or self.settings.scope
        result = SyncResult()
        progress = self._progress_fn(progress_cb)
        checkpoint = self._checkpoint_fn(should_cancel)

        try:
            # 1. Acquire
            table = self._acquire(table_source)
            roots = scope_roots(document, scope, page_name=page_name)
            checkpoint()

            # 2. Index build
            progress("Building indexes...", 5)
            ctx = self._new_context(table, document, result)
            checkpoint()

            # 3. Expand
            progress("Processing repeat containers...", 15)
            found = traverse(roots, include_main_components=self.settings.include_main_components)
            for container in found.repeat_containers:
                checkpoint()
                self._expand_container(ctx, container)

            # 4. Re-scope
            progress("Scanning layers...", 30)
            checkpoint()
            bound = traverse(
                scope_roots(document, scope, page_name=page_name),
                include_main_components=self.settings.include_main_components,
            ).bound
            if not bound:
                result.add_warning("No layers with bindings found in the selected scope")

            # 5. Bind & apply
            self._process_nodes(ctx, bound, progress, checkpoint)
            progress("Complete!", 100)
        except _Cancelled:
            self.logger.info("sync cancelled after %d layers", result.layers_processed)
            result.cancelled = True
        except SheetSyncError as exc:
            self.logger.error("sync setup failed: %s", exc.message)
            result.add_error(exc.message)
            result.success = False
            return result

        # 6. Report
        return self._finish(result)

    def sync_targeted(
        self,
        document: Document,
        table_source: TableSource,
        node_ids: Iterable[str],
        *,
        progress_cb: ProgressCB | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> SyncResult:
        """Re-sync specific nodes by id, without traversal or repeat expansion."""

        result = SyncResult()
        ids = list(node_ids)
        if not ids:
            result.add_warning("No layer IDs provided for targeted sync")
            return result

        progress = self._progress_fn(progress_cb)
        checkpoint = self._checkpoint_fn(should_cancel)
        try:
            table = self._acquire(table_source)
            progress("Fetching layers...", 10)
            nodes: List[SceneNode] = []
            for node_id in ids:
                node = document.find_node(node_id)
                if node is None or node.is_page_like:
                    result.add_warning(format_warning(f"layer {node_id} not found"))
                    continue
                nodes.append(node)
            if not nodes:
                result.add_warning("No valid layers found from the given IDs")
                return result

            progress("Building indexes...", 20)
            ctx = self._new_context(table, document, result)
            self._process_nodes(ctx, nodes, progress, checkpoint)
            progress("Complete!", 100)
        except _Cancelled:
            result.cancelled = True
        except SheetSyncError as exc:
            self.logger.error("targeted sync setup failed: %s", exc.message)
            result.add_error(exc.message)
            result.success = False
            return result
        return self._finish(result)

    # ------------------------------------------------------------------
    def _progress_fn(self, progress_cb: ProgressCB | None) -> ProgressCB:
        def progress(message: str, percent: int) -> None:
            if progress_cb:
                progress_cb(message, percent)
            self.logger.debug("%3d%% %s", percent, message)

        return progress

    @staticmethod
    def _checkpoint_fn(should_cancel: CancelCheck | None) -> Callable[[], None]:
        def checkpoint() -> None:
            if should_cancel is not None and should_cancel():
                raise _Cancelled()

        return checkpoint

    def _acquire(self, table_source: TableSource) -> Table:
        try:
            table = table_source() if callable(table_source) else table_source
        except SheetSyncError:
            raise
        except Exception as e:  # noqa: BLE001
            raise SetupError(str(e)) from e
        if not isinstance(table, Table) or not table.worksheets:
            raise SetupError("table has no worksheets")
        return table

    def _new_context(self, table: Table, document: Document, result: SyncResult) -> _RunContext:
        ctx = _RunContext(
            table=table,
            tracker=IndexTracker(seed=self.settings.random_seed),
            fonts=FontCache(self.font_loader),
            components=ComponentIndex.build(document.pages),
            result=result,
        )
        for worksheet in table.worksheets:
            ctx.label_index(worksheet)
        self.logger.info(
            "indexes ready: %d worksheets, %d components",
            len(ctx.label_indexes),
            len(ctx.components),
        )
        return ctx

    def _expand_container(self, ctx: _RunContext, container: SceneNode) -> None:
        try:
            target = target_count_for(container, ctx.table)
        except WorksheetNotFound as exc:
            ctx.result.add_warning(format_warning(exc.message, container.name))
            return
        except Exception as e:  # noqa: BLE001
            self.logger.exception("repeat container %s failed", container.name)
            ctx.result.add_warning(format_warning(str(e), container.name))
            return
        if target <= 0:
            ctx.result.add_warning(format_warning("no values found for the repeated label", container.name))
            return
        try:
            expansion = expand(container, target, self.mutator)
        except Exception as e:  # noqa: BLE001
            self.logger.exception("repeat container %s failed", container.name)
            ctx.result.add_warning(format_warning(f"repeat expansion failed: {e}", container.name))
            return
        for warning in expansion.warnings:
            ctx.result.add_warning(warning)

    def _process_nodes(
        self,
        ctx: _RunContext,
        nodes: List[SceneNode],
        progress: ProgressCB,
        checkpoint: Callable[[], None],
    ) -> None:
        total = len(nodes)
        every = self.settings.progress_every
        for i, node in enumerate(nodes):
            checkpoint()
            if i % every == 0:
                progress(f"Processing {_truncate(node.name)}...", 30 + (i * 65) // total)
            ctx.result.layers_processed += 1
            try:
                if self._process_node(ctx, node):
                    ctx.result.layers_updated += 1
            except SheetSyncError as exc:
                self.logger.warning("layer %s (%s) failed: %s", node.name, node.id, exc.message)
                ctx.result.add_error(exc.message, layer_id=node.id, layer_name=node.name)
            except Exception as e:  # noqa: BLE001
                self.logger.exception("layer %s (%s) failed unexpectedly", node.name, node.id)
                ctx.result.add_error(str(e), layer_id=node.id, layer_name=node.name)

    def _process_node(self, ctx: _RunContext, node: SceneNode) -> bool:
        binding = resolve(node)
        if not binding.has_binding:
            return False

        worksheet = find_worksheet(ctx.table, binding.worksheet)
        if worksheet is None:
            raise WorksheetNotFound(f"worksheet {binding.worksheet!r} not found")
        labels = ctx.label_index(worksheet)
        matched = labels.match(binding.primary_label)
        if matched is None:
            raise LabelNotFound(f"label {binding.primary_label!r} not in worksheet {worksheet.name!r}")

        index, value = ctx.tracker.value_for(matched, worksheet, binding.index or DEFAULT_INDEX)
        if index == NO_VALUE or value is None:
            return False

        updated = self._apply_value(ctx, node, value)
        for extra_label in binding.labels[1:]:
            extra = labels.match(extra_label)
            if extra is None:
                ctx.result.add_warning(format_warning(f"label {extra_label!r} not found", node.name))
                continue
            extra_value = worksheet.values(extra)[index]
            if is_blank(extra_value):
                continue
            updated = self._apply_special(ctx, node, extra_value) or updated
        return updated

    def _apply_value(self, ctx: _RunContext, node: SceneNode, value: str) -> bool:
        if node.type in PREFIXED_TYPES and has_prefix(value):
            special = parse_chained(value)
            if not special.is_empty():
                return self._apply_special(ctx, node, special)

        if node.type is NodeType.TEXT:
            return sync_text(node, value, self.mutator, ctx.fonts, clear_on_empty=self.settings.clear_on_empty)
        if is_blank(value):
            return False
        if node.type is NodeType.INSTANCE:
            return swap_component(node, value, ctx.components, self.mutator)
        if is_image_url(value) and can_have_image_fill(node):
            return sync_image(node, value, self.image_fetcher, self.mutator)
        return self._apply_special(ctx, node, value)

    def _apply_special(self, ctx: _RunContext, node: SceneNode, value) -> bool:
        outcome = apply_chained(node, value, self.mutator, ctx.fonts)
        for warning in outcome.warnings:
            ctx.result.add_warning(warning)
        return outcome.changed

    def _finish(self, result: SyncResult) -> SyncResult:
        if result.cancelled or (result.errors and result.layers_updated == 0):
            result.success = False
        self.logger.info(
            "sync finished success=%s processed=%d updated=%d errors=%d warnings=%d",
            result.success,
            result.layers_processed,
            result.layers_updated,
            len(result.errors),
            len(result.warnings),
        )
        return result


def _truncate(name: str, max_length: int = 30) -> str:
    return name if len(name) <= max_length else name[: max_length - 3] + "..."


__all__ = ["CancelCheck", "ProgressCB", "SyncPipeline", "TableSource"]

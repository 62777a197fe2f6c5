"""
idp/services/audit.py — Фоновая запись аудит-событий.

``AuditSink.emit`` только кладёт запись в ограниченную очередь и сразу
возвращает управление. Фоновый воркер пишет записи в БД (``record_repo``)
и публикует копию в NATS. Ошибки записи логируются, запись уходит в
in-memory буфер; вызывающему ничего не пробрасывается.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from idp import events
from idp.config import get_settings
from idp.db.repositories import record_repo
from idp.models.record import AuditRecord

logger = logging.getLogger(__name__)


class AuditSink:
    """
    Аудит-логгер с фоновым воркером.

    Поддерживает:
    - PostgreSQL (таблица records)
    - In-memory буфер (fallback при ошибке записи)
    - NATS-публикацию аудит-событий
    """

    def __init__(self, max_queue_size: int = 10000, max_buffer_size: int = 10000) -> None:
        self._queue: asyncio.Queue[AuditRecord] = asyncio.Queue(maxsize=max_queue_size)
        self._buffer: list[dict[str, Any]] = []
        self._max_buffer = max_buffer_size
        self._worker: asyncio.Task | None = None

    def emit(self, record: AuditRecord) -> None:
        """Передать запись воркеру (не блокирует, не бросает)."""
        try:
            self._ensure_worker()
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            logger.warning("Audit queue is full, dropping record %s", record.name)
        except RuntimeError as e:
            logger.warning("Audit worker unavailable, dropping record %s: %s", record.name, e)

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                await self._write(record.model_dump())
            finally:
                self._queue.task_done()

    async def _write(self, record: dict[str, Any]) -> None:
        try:
            await record_repo.add_record(record)
        except Exception as e:
            logger.warning("Audit DB write failed, buffering: %s", e)
            self._write_to_buffer(record)

        # NATS-публикация (graceful degradation)
        try:
            await events.emit_audit(record)
        except Exception as e:
            logger.debug("Audit NATS publish failed: %s", e)

    def _write_to_buffer(self, record: dict[str, Any]) -> None:
        """Fallback в in-memory буфер."""
        if len(self._buffer) >= self._max_buffer:
            self._buffer.pop(0)
        self._buffer.append(record)

    async def drain(self) -> None:
        """Дождаться записи всех принятых событий."""
        if self._worker is not None and not self._worker.done():
            await self._queue.join()

    async def flush_buffer(self) -> int:
        """Попытаться записать буферизованные события в БД."""
        if not self._buffer:
            return 0
        flushed = 0
        remaining: list[dict[str, Any]] = []
        for record in self._buffer:
            try:
                await record_repo.add_record(record)
                flushed += 1
            except Exception:
                remaining.append(record)
        self._buffer = remaining
        if flushed:
            logger.info("Flushed %d audit records from buffer", flushed)
        return flushed

    async def stop(self) -> None:
        """Дописать очередь и остановить воркер."""
        await self.drain()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)


# ═══════════════════════════════════════════════════════════════════════════════
# Singleton
# ═══════════════════════════════════════════════════════════════════════════════

_audit_sink: AuditSink | None = None


def get_audit_sink() -> AuditSink:
    """Получить единственный экземпляр AuditSink."""
    global _audit_sink
    if _audit_sink is None:
        _audit_sink = AuditSink(max_queue_size=get_settings().audit_queue_size)
    return _audit_sink


def reset_audit_sink() -> None:
    """Сбросить singleton (новый event loop, тесты)."""
    global _audit_sink
    _audit_sink = None

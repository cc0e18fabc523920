"""Record projection pipeline.

Projects a batch of tenant-scoped raw records into ``ProjectedRecord`` values:
resolve the tenant's zone, decompose the anchor instant, classify it, and
project the optional payment instant.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from ..core.classifier import DEFAULT_POLICY, BusinessWindowPolicy, classify
from ..core.errors import UnknownTenant
from ..core.models import ProjectedRecord, RawRecord, Tenant
from ..core.projector import project
from ..core.registry import TimezoneRegistry, get_default_registry
from ..observability.loguru_config import get_logger, timing_context

__all__ = [
    "RecordProjectionService",
    "project_all",
]

log = get_logger("projection")


class RecordProjectionService:
    """Apply projector and classifier to batches of raw records.

    Each record is projected independently. With ``max_workers > 1`` the
    per-record work fans out over a thread pool; output order always matches
    input order.

    Example
    -------
    >>> service = RecordProjectionService()
    >>> projected = service.project_all(records, {"sp": sao_paulo_tenant})
    """

    def __init__(
        self,
        registry: TimezoneRegistry | None = None,
        policy: BusinessWindowPolicy = DEFAULT_POLICY,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.registry = registry or get_default_registry()
        self.policy = policy
        self.max_workers = max_workers

    def project_record(self, record: RawRecord, tenant: Tenant) -> ProjectedRecord:
        """Project a single record for its tenant.

        Raises
        ------
        InvalidTimezone
            If the tenant's timezone does not resolve
        """
        zone = self.registry.resolve(tenant.timezone)
        decomposition = project(record.order_time_utc, zone)

        payment_local = None
        processing_minutes = None
        if record.payment_time_utc is not None:
            payment_local = record.payment_time_utc.astimezone(zone.tzinfo)
            processing_minutes = (record.payment_time_utc - record.order_time_utc).total_seconds() / 60

        return ProjectedRecord(
            record=record,
            tenant=tenant,
            decomposition=decomposition,
            classification=classify(decomposition, self.policy),
            payment_time_local=payment_local,
            payment_processing_minutes=processing_minutes,
        )

    def project_all(
        self,
        records: Sequence[RawRecord],
        tenants: Mapping[str, Tenant],
    ) -> list[ProjectedRecord]:
        """Project a batch of records, preserving input order.

        The batch fails as a whole: referential integrity and every tenant
        timezone are checked before any record is projected.

        Parameters
        ----------
        records
            Raw records to project
        tenants
            Mapping of tenant id to tenant (tenants need not be active)

        Returns
        -------
        list[ProjectedRecord]
            One projection per input record, same order

        Raises
        ------
        UnknownTenant
            If any record references a tenant absent from ``tenants``
        InvalidTimezone
            If a referenced tenant's timezone does not resolve
        """
        missing = {record.tenant_id for record in records if record.tenant_id not in tenants}
        if missing:
            raise UnknownTenant(missing)

        for tenant_id in {record.tenant_id for record in records}:
            self.registry.resolve(tenants[tenant_id].timezone)

        with timing_context("project_all", component="projection", batch_size=len(records)) as ctx:
            pairs = [(record, tenants[record.tenant_id]) for record in records]
            if self.max_workers > 1 and len(pairs) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    projected = list(executor.map(lambda pair: self.project_record(*pair), pairs))
            else:
                projected = [self.project_record(record, tenant) for record, tenant in pairs]
            ctx["crossing_date_boundary"] = sum(1 for p in projected if p.crosses_date_boundary)

        return projected


def project_all(
    records: Sequence[RawRecord],
    tenants: Mapping[str, Tenant],
    policy: BusinessWindowPolicy = DEFAULT_POLICY,
    registry: TimezoneRegistry | None = None,
) -> list[ProjectedRecord]:
    """Convenience wrapper around ``RecordProjectionService.project_all``."""
    return RecordProjectionService(registry=registry, policy=policy).project_all(records, tenants)
